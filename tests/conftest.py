import pytest

from tracesim.parser.registry import build_default_registry, reset_default_registry
from tracesim.parser.utils.context import InterpretOptions

USDT = "0xdac17f958d2ee523a2206206994597c13d831ec7"
BRIDGE = "0x0000000000000000000000000000000000001010"


@pytest.fixture()
def options() -> InterpretOptions:
    return InterpretOptions(
        nonstandard_erc20_tokens=[USDT],
        native_bridge_addresses=[BRIDGE],
        precompile_max_address=0xFFF,
    )


@pytest.fixture()
def registry():
    return build_default_registry()


@pytest.fixture()
def fresh_default_registry():
    """Isolate tests that touch the process-wide registry."""
    reset_default_registry()
    yield
    reset_default_registry()

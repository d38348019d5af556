"""Native asset movements: plain value transfers and system-contract native mints."""

from tracesim.parser.handlers.base import CallHandler
from tracesim.parser.utils.abi import AbiFunction
from tracesim.parser.utils.addresses import ZERO_ADDRESS
from tracesim.parser.utils.context import InterpretationContext
from tracesim.parser.utils.tokens import NATIVE_TOKEN
from tracesim.parser.utils.types import CallTrace

BRIDGE_TRANSFER = AbiFunction.parse("transfer(address token,address to,uint256 amount)")


def handle_native_transfer(ctx: InterpretationContext, trace: CallTrace) -> None:
    if trace.value <= 0:
        return
    # Some chains emit synthetic value transfers to/from precompiles
    if ctx.options.is_precompile(trace.from_address) or ctx.options.is_precompile(trace.to_address):
        return
    ctx.transfer(trace.from_address, trace.to_address, NATIVE_TOKEN, trace.value)


def handle_bridge_transfer(ctx: InterpretationContext, trace: CallTrace) -> None:
    """System contract crediting native asset. Credit only, no matching debit."""
    if not ctx.options.is_native_bridge(trace.to_address):
        return
    args = BRIDGE_TRANSFER.decode_input(trace.input)
    if args["token"] != ZERO_ADDRESS:
        return
    ctx.credit(args["to"], NATIVE_TOKEN, args["amount"])
    ctx.record_payment(trace.to_address, args["to"], NATIVE_TOKEN, args["amount"])


HANDLERS: list[CallHandler] = [
    CallHandler(name="native_transfer", handle=handle_native_transfer),
    CallHandler(name="native_bridge_transfer", handle=handle_bridge_transfer, selector=BRIDGE_TRANSFER.selector),
]

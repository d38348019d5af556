import threading

import pytest

from tracesim.parser.handlers.base import CallHandler
from tracesim.parser.handlers.tokens import TRANSFER, TRANSFER_FROM
from tracesim.parser.registry import (
    HandlerRegistry,
    build_default_registry,
    get_default_registry,
    register_handler,
)
from tracesim.parser.utils.types import CallTrace

ALICE = "0x1111111111111111111111111111111111111111"
TOKEN = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"


def _noop(ctx, trace):
    pass


def _call(input: str) -> CallTrace:
    return CallTrace.model_validate({"type": "CALL", "from": ALICE, "to": TOKEN, "input": input})


class TestHandlerRegistry:
    def test_generic_first_then_selector_in_registration_order(self):
        registry = HandlerRegistry()
        a = CallHandler(name="a", handle=_noop, selector=TRANSFER.selector)
        generic = CallHandler(name="generic", handle=_noop)
        b = CallHandler(name="b", handle=_noop, selector=TRANSFER.selector)
        registry.register([a, generic, b])

        names = [h.name for h in registry.get(_call(TRANSFER.encode_input(ALICE, 1)))]
        assert names == ["generic", "a", "b"]

    def test_empty_input_gets_generic_only(self):
        registry = HandlerRegistry()
        registry.register([
            CallHandler(name="generic", handle=_noop),
            CallHandler(name="sel", handle=_noop, selector=TRANSFER.selector),
        ])
        assert [h.name for h in registry.get(_call("0x"))] == ["generic"]

    def test_short_input_gets_generic_only(self):
        registry = HandlerRegistry()
        registry.register([
            CallHandler(name="generic", handle=_noop),
            CallHandler(name="sel", handle=_noop, selector=TRANSFER.selector),
        ])
        assert [h.name for h in registry.get(_call("0xa9059c"))] == ["generic"]

    def test_unknown_selector(self):
        registry = HandlerRegistry()
        registry.register([CallHandler(name="sel", handle=_noop, selector=TRANSFER.selector)])
        assert registry.get(_call("0xdeadbeef")) == []

    def test_selector_match_is_case_insensitive(self):
        registry = HandlerRegistry()
        registry.register([CallHandler(name="sel", handle=_noop, selector="0xA9059CBB")])
        assert len(registry.get(_call("0xA9059CBB" + "00" * 64))) == 1

    def test_duplicate_name_rejected(self):
        registry = HandlerRegistry()
        registry.register([CallHandler(name="x", handle=_noop)])
        with pytest.raises(ValueError, match="already registered"):
            registry.register([CallHandler(name="x", handle=_noop, selector=TRANSFER.selector)])
        assert len(registry) == 1

    def test_get_returns_copy(self):
        registry = HandlerRegistry()
        registry.register([CallHandler(name="generic", handle=_noop)])
        registry.get(_call("0x")).clear()
        assert len(registry.get(_call("0x"))) == 1


class TestDefaultRegistry:
    def test_contains_builtin_handlers(self):
        registry = build_default_registry()
        assert "native_transfer" in registry
        assert "transfer_from" in registry
        assert TRANSFER_FROM.selector in registry.selectors()

    def test_built_once(self, fresh_default_registry):
        assert get_default_registry() is get_default_registry()

    def test_concurrent_first_use_builds_once(self, fresh_default_registry):
        seen = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            seen.append(get_default_registry())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len({id(r) for r in seen}) == 1

    def test_register_handler_extends_default(self, fresh_default_registry):
        selector = "0x12345678"
        register_handler(CallHandler(name="custom", handle=_noop, selector=selector))
        names = [h.name for h in get_default_registry().get(_call(selector + "00" * 32))]
        assert names == ["native_transfer", "custom"]

    def test_register_handler_twice_rejected(self, fresh_default_registry):
        handler = CallHandler(name="custom", handle=_noop)
        register_handler(handler)
        with pytest.raises(ValueError):
            register_handler(handler)

"""HandlerRegistry: selector → handlers lookup with always-on generic handlers."""

import logging
import threading
from collections.abc import Iterable

from tracesim.parser.handlers.base import CallHandler
from tracesim.parser.utils.types import CallTrace

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Two partitions: generic handlers (no selector) and handlers keyed by selector.

    ``get`` returns generic handlers first, then selector handlers in
    registration order.
    """

    def __init__(self) -> None:
        self._generic: list[CallHandler] = []
        self._by_selector: dict[str, list[CallHandler]] = {}
        self._names: set[str] = set()
        self._lock = threading.Lock()

    def register(self, handlers: Iterable[CallHandler]) -> None:
        with self._lock:
            for handler in handlers:
                if handler.name in self._names:
                    raise ValueError(f"Handler already registered: {handler.name}")
                self._names.add(handler.name)
                if handler.selector is None:
                    self._generic.append(handler)
                else:
                    self._by_selector.setdefault(handler.selector.lower(), []).append(handler)

    def get(self, trace: CallTrace) -> list[CallHandler]:
        selector = trace.selector
        if selector is None:
            return list(self._generic)
        return self._generic + self._by_selector.get(selector, [])

    def selectors(self) -> set[str]:
        return set(self._by_selector)

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._names


def build_default_registry() -> HandlerRegistry:
    """Create a HandlerRegistry with all built-in transfer handlers."""
    from tracesim.parser.handlers import native, nonstandard, tokens

    registry = HandlerRegistry()
    registry.register(native.HANDLERS)
    registry.register(tokens.HANDLERS)
    registry.register(nonstandard.HANDLERS)

    logger.debug("Built default handler registry: %d handlers, %d selectors", len(registry), len(registry.selectors()))
    return registry


_default_registry: HandlerRegistry | None = None
_default_lock = threading.Lock()


def get_default_registry() -> HandlerRegistry:
    """Process-wide registry, built once on first use."""
    global _default_registry
    if _default_registry is None:
        with _default_lock:
            if _default_registry is None:
                _default_registry = build_default_registry()
    return _default_registry


def register_handler(handler: CallHandler) -> None:
    """Extension point: add a handler to the process-wide registry."""
    get_default_registry().register([handler])


def reset_default_registry() -> None:
    """Drop the process-wide registry so the next lookup rebuilds it."""
    global _default_registry
    with _default_lock:
        _default_registry = None

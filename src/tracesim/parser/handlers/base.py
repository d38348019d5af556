"""CallHandler: a named function bound to an optional 4-byte selector."""

from dataclasses import dataclass
from typing import Callable

from tracesim.parser.utils.context import InterpretationContext
from tracesim.parser.utils.types import CallTrace

HandleFunc = Callable[[InterpretationContext, CallTrace], None]


@dataclass(frozen=True)
class CallHandler:
    """Handler entry for the registry.

    ``selector=None`` makes the handler generic: it runs on every CALL frame.
    Handler names must be unique within a registry.
    """

    name: str
    handle: HandleFunc
    selector: str | None = None

"""Call-trace walker: pre-order traversal dispatching handlers to each CALL frame."""

import logging
from dataclasses import dataclass

from tracesim.domain.enums import TRAVERSABLE_CALL_TYPES, CallType
from tracesim.exceptions import HandlerError, TraceInterpretationError
from tracesim.parser.registry import HandlerRegistry, get_default_registry
from tracesim.parser.utils.context import InterpretationContext, InterpretOptions
from tracesim.parser.utils.types import CallTrace, Payment, StateChange

logger = logging.getLogger(__name__)


@dataclass
class InterpretationResult:
    state: StateChange
    payments: list[Payment]


def _is_replayed_duplicate(trace: CallTrace, parent: CallTrace | None, options: InterpretOptions) -> bool:
    """Some chains replay an internal call as a child of itself (same from/to)."""
    if parent is None:
        return False
    if trace.from_address.lower() != parent.from_address.lower():
        return False
    if trace.to_address.lower() != parent.to_address.lower():
        return False
    return not (options.is_precompile(trace.from_address) or options.is_precompile(trace.to_address))


def _dispatch(
    trace: CallTrace,
    registry: HandlerRegistry,
    ctx: InterpretationContext,
    failures: list[HandlerError],
) -> None:
    for handler in registry.get(trace):
        try:
            handler.handle(ctx, trace)
        except Exception as exc:
            error = HandlerError(handler.name, trace.to_address, trace.selector)
            error.__cause__ = exc
            logger.warning("%s: %s", error, exc)
            failures.append(error)


def interpret_trace(
    trace: CallTrace,
    *,
    registry: HandlerRegistry | None = None,
    options: InterpretOptions | None = None,
) -> InterpretationResult:
    """Walk ``trace`` once and return both the state change and the payments.

    Reverted frames (``error`` set) are skipped together with their subtree.
    Only CALL frames are dispatched; only CALL and DELEGATECALL frames are
    descended into. Raises TraceInterpretationError after the walk if any
    handler failed.
    """
    if registry is None:
        registry = get_default_registry()
    ctx = InterpretationContext(options)
    failures: list[HandlerError] = []

    # (node, parent) pairs; children pushed reversed to keep pre-order
    stack: list[tuple[CallTrace, CallTrace | None]] = [(trace, None)]
    while stack:
        node, parent = stack.pop()
        if node.failed:
            continue

        if node.type == CallType.CALL and not _is_replayed_duplicate(node, parent, ctx.options):
            _dispatch(node, registry, ctx, failures)

        if node.type in TRAVERSABLE_CALL_TYPES:
            stack.extend((child, node) for child in reversed(node.calls))

    if failures:
        raise TraceInterpretationError(failures)
    return InterpretationResult(state=ctx.state, payments=ctx.payments)


def interpret_state(
    trace: CallTrace,
    *,
    registry: HandlerRegistry | None = None,
    options: InterpretOptions | None = None,
) -> StateChange:
    return interpret_trace(trace, registry=registry, options=options).state


def interpret_payments(
    trace: CallTrace,
    *,
    registry: HandlerRegistry | None = None,
    options: InterpretOptions | None = None,
) -> list[Payment]:
    return interpret_trace(trace, registry=registry, options=options).payments

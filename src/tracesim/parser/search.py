"""Read-only call-tree queries. Reverted frames and their subtrees are never visited."""

from collections.abc import Iterator

from tracesim.parser.utils.types import CallQuery, CallTrace


def iter_calls(trace: CallTrace) -> Iterator[CallTrace]:
    """Pre-order iteration over non-reverted frames."""
    stack = [trace]
    while stack:
        node = stack.pop()
        if node.failed:
            continue
        yield node
        stack.extend(reversed(node.calls))


def matches(trace: CallTrace, query: CallQuery) -> bool:
    if query.to is not None and trace.to_address.lower() != query.to:
        return False
    if query.type is not None and trace.type != query.type:
        return False
    if query.selectors is not None and trace.selector not in query.selectors:
        return False
    return True


def find_nth_call(trace: CallTrace, query: CallQuery, n: int = 0) -> CallTrace | None:
    """Return the n-th (0-indexed) matching frame in pre-order, or None."""
    seen = 0
    for call in iter_calls(trace):
        if not matches(call, query):
            continue
        if seen == n:
            return call
        seen += 1
    return None


def find_all_calls(trace: CallTrace, query: CallQuery) -> list[CallTrace]:
    return [call for call in iter_calls(trace) if matches(call, query)]

"""Convert node-specific trace shapes into the canonical CallTrace tree."""

from typing import Any

from tracesim.domain.enums import CallType
from tracesim.exceptions import TraceUnavailableError
from tracesim.parser.utils.types import CallTrace


def normalize_call_trace(raw: dict[str, Any]) -> CallTrace:
    """geth callTracer output (revertReason folded into error)."""
    return CallTrace.model_validate(raw)


def _parity_frame(item: dict[str, Any]) -> dict[str, Any] | None:
    """One parity trace entry → callTracer-shaped dict, or None for rewards."""
    action = item.get("action") or {}
    result = item.get("result") or {}
    kind = item.get("type", "call")

    if kind == "call":
        frame = {
            "type": (action.get("callType") or "call").upper(),
            "from": action.get("from", ""),
            "to": action.get("to", ""),
            "input": action.get("input", "0x"),
            "output": result.get("output", "0x"),
            "value": action.get("value", "0x0"),
        }
    elif kind == "create":
        method = (action.get("creationMethod") or "create").upper()
        frame = {
            "type": CallType.CREATE2.value if method == "CREATE2" else CallType.CREATE.value,
            "from": action.get("from", ""),
            "to": result.get("address", ""),
            "input": action.get("init", "0x"),
            "output": result.get("code", "0x"),
            "value": action.get("value", "0x0"),
        }
    elif kind == "suicide":
        frame = {
            "type": CallType.SELFDESTRUCT.value,
            "from": action.get("address", ""),
            "to": action.get("refundAddress", ""),
            "value": action.get("balance", "0x0"),
        }
    else:
        return None

    if item.get("error"):
        frame["error"] = item["error"]
    frame["calls"] = []
    return frame


def calltrace_from_parity(traces: list[dict[str, Any]]) -> CallTrace:
    """Rebuild the call tree from a flat parity trace list keyed by ``traceAddress``."""
    frames: dict[tuple[int, ...], dict[str, Any]] = {}
    for item in traces:
        frame = _parity_frame(item)
        if frame is None:
            continue
        address = tuple(item.get("traceAddress") or ())
        frames[address] = frame
        if address:
            parent = frames.get(address[:-1])
            if parent is None:
                raise ValueError(f"Parity trace entry {list(address)} appears before its parent")
            parent["calls"].append(frame)

    root = frames.get(())
    if root is None:
        raise TraceUnavailableError("Parity trace has no root call")
    return CallTrace.model_validate(root)


def calltrace_from_trace_call_many_item(item: dict[str, Any]) -> CallTrace:
    """One element of a ``trace_callMany`` result ({output, trace, stateDiff, vmTrace})."""
    traces = item.get("trace")
    if not traces:
        raise TraceUnavailableError("trace_callMany item has no trace (was 'trace' requested?)")
    return calltrace_from_parity(traces)

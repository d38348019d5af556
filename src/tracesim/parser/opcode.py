"""Recover emitted logs from a struct-logger (per-opcode) trace.

Used when the node has no logs-capable tracer: every LOG0..LOG4 step is
replayed against the captured stack and memory, and attributed to the
contract of the nearest enclosing plain CALL scope.

Stack words are listed bottom-first, so the top of stack is ``stack[-1]``.
"""

import logging
from dataclasses import dataclass

from tracesim.parser.utils.addresses import word_to_address
from tracesim.parser.utils.types import Log, LoggerTrace, StructLog

logger = logging.getLogger(__name__)

SCOPE_OPCODES = frozenset({"CALL", "STATICCALL", "DELEGATECALL"})


@dataclass(frozen=True)
class ScopeContext:
    op: str
    contract: str
    depth: int


def _word_to_int(word: str) -> int:
    return int(word, 16) if word not in ("", "0x") else 0


def _word_to_bytes32(word: str) -> str:
    return "0x" + format(_word_to_int(word), "064x")


def _memory_bytes(memory: list[str] | str) -> bytes:
    if isinstance(memory, str):
        words = [memory]
    else:
        words = memory
    return bytes.fromhex("".join(w[2:] if w.startswith("0x") else w for w in words))


def _stack_item(stack: list[str], index_from_top: int) -> str:
    return stack[len(stack) - 1 - index_from_top]


def _owning_scope(scopes: list[ScopeContext], depth: int) -> ScopeContext | None:
    """Most recently entered plain CALL scope at a shallower depth than ``depth``.

    STATICCALL and DELEGATECALL scopes never own logs; they inherit the
    address of their nearest CALL ancestor.
    """
    for scope in reversed(scopes):
        if scope.op == "CALL" and 0 <= scope.depth < depth:
            return scope
    return None


def _read_log(step: StructLog, address: str) -> Log:
    topic_count = int(step.op[3:])
    offset = _word_to_int(_stack_item(step.stack, 0))
    length = _word_to_int(_stack_item(step.stack, 1))
    topics = [_word_to_bytes32(_stack_item(step.stack, 2 + i)) for i in range(topic_count)]

    data = "0x"
    if step.memory:
        data = "0x" + _memory_bytes(step.memory)[offset:offset + length].hex()

    return Log(address=address, topics=topics, data=data)


def reconstruct_logs(to: str, trace: LoggerTrace) -> list[Log]:
    """Replay LOGn opcodes of ``trace`` (top-level call to ``to``) into Log records, in step order."""
    top_scope = ScopeContext(op="CALL", contract=to.lower(), depth=0)
    scopes: list[ScopeContext] = [top_scope]
    logs: list[Log] = []

    for step in trace.struct_logs:
        op = step.op

        if op in SCOPE_OPCODES:
            if len(step.stack) < 2:
                logger.warning("Skipping %s at pc=%d: stack too short", op, step.pc)
                continue
            scopes.append(ScopeContext(op=op, contract=word_to_address(_stack_item(step.stack, 1)), depth=step.depth))
            continue

        if not op.startswith("LOG"):
            continue

        topic_count = int(op[3:])
        if len(step.stack) < 2 + topic_count:
            logger.warning("Skipping %s at pc=%d: stack too short", op, step.pc)
            continue

        scope = _owning_scope(scopes, step.depth)
        if scope is None:
            logger.debug("No CALL scope for %s at depth %d, using top-level %s", op, step.depth, to)
            scope = top_scope

        logs.append(_read_log(step, scope.contract))

    return logs

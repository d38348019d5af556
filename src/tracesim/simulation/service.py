"""SimulationService: fetch a trace from the node, then run the pure interpreters on it."""

import logging

from tracesim.exceptions import TraceUnavailableError
from tracesim.infra.rpc.trace_client import CallRequest, TraceClient
from tracesim.parser.opcode import reconstruct_logs
from tracesim.parser.registry import HandlerRegistry
from tracesim.parser.utils.context import InterpretOptions
from tracesim.parser.utils.types import CallTrace, Log, Payment, StateChange
from tracesim.parser.walker import InterpretationResult, interpret_trace

logger = logging.getLogger(__name__)


def _require_success(trace: CallTrace, label: str) -> None:
    if trace.error is not None:
        raise TraceUnavailableError(f"Execution reverted for {label}: {trace.error}")


class SimulationService:
    def __init__(
        self,
        client: TraceClient,
        options: InterpretOptions | None = None,
        registry: HandlerRegistry | None = None,
    ) -> None:
        self._client = client
        self._options = options
        self._registry = registry

    def _interpret(self, trace: CallTrace) -> InterpretationResult:
        return interpret_trace(trace, registry=self._registry, options=self._options)

    async def simulate_tx(self, tx: CallRequest, block: str = "latest") -> InterpretationResult:
        trace = await self._client.trace_call(tx, block)
        _require_success(trace, f"call to {tx.to}")
        result = self._interpret(trace)
        logger.info(
            "Simulated call to %s: %d addresses changed, %d payments",
            tx.to, len(result.state), len(result.payments),
        )
        return result

    async def simulate_state(self, tx: CallRequest, block: str = "latest") -> StateChange:
        return (await self.simulate_tx(tx, block)).state

    async def simulate_payments(self, tx: CallRequest, block: str = "latest") -> list[Payment]:
        return (await self.simulate_tx(tx, block)).payments

    async def simulate_logs(self, tx: CallRequest, block: str = "latest") -> list[Log]:
        """Logs the call would emit, rebuilt from an opcode-level trace."""
        logger_trace = await self._client.trace_call_logs(tx, block)
        if logger_trace.failed:
            raise TraceUnavailableError(f"Execution reverted for call to {tx.to}")
        return reconstruct_logs(tx.to, logger_trace)

    async def interpret_transaction(self, tx_hash: str) -> InterpretationResult:
        trace = await self._client.trace_transaction(tx_hash)
        _require_success(trace, tx_hash)
        return self._interpret(trace)

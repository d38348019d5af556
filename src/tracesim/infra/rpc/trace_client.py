"""EVM JSON-RPC trace client: debug_trace* (geth) and trace_* (parity/erigon) methods."""

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from tracesim.exceptions import ExternalServiceError, TraceUnavailableError
from tracesim.infra.http.rpc_http_client import RpcHttpClient, rpc_error_message
from tracesim.parser.normalize import calltrace_from_trace_call_many_item, normalize_call_trace
from tracesim.parser.utils.types import CallTrace, LoggerTrace

logger = logging.getLogger(__name__)

CALL_TRACER = {"tracer": "callTracer"}
STRUCT_LOGGER = {"enableMemory": True, "disableStorage": True, "enableReturnData": False}


class CallRequest(BaseModel):
    """A synthetic transaction to simulate."""

    model_config = ConfigDict(populate_by_name=True)

    from_address: str = Field(alias="from")
    to: str
    data: str = "0x"
    value: int = 0
    gas: int | None = None

    def to_rpc(self) -> dict[str, str]:
        params = {
            "from": self.from_address,
            "to": self.to,
            "data": self.data,
            "value": hex(self.value),
        }
        if self.gas is not None:
            params["gas"] = hex(self.gas)
        return params


class BatchItemResult(BaseModel):
    """Outcome of one request inside a JSON-RPC batch."""

    key: str
    trace: CallTrace | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.trace is not None


class TraceClient:
    """Fetches fully materialized traces. Interpretation never starts on a partial trace."""

    def __init__(self, http_client: RpcHttpClient) -> None:
        self._http = http_client

    @retry(
        retry=retry_if_exception_type(ExternalServiceError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def _call(self, method: str, params: list) -> Any:
        """Execute a JSON-RPC call and return the result field."""
        data = await self._http.request(method, params)

        if "error" in data:
            msg = rpc_error_message(data["error"])
            logger.warning("RPC error (%s): %s", method, msg)
            raise ExternalServiceError(f"RPC error ({method}): {msg}")

        return data.get("result")

    @retry(
        retry=retry_if_exception_type(ExternalServiceError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def _batch(self, calls: list[tuple[str, list]]) -> list[dict]:
        """Send one JSON-RPC batch. Responses are returned in request order."""
        return await self._http.batch(calls)

    async def trace_call(self, tx: CallRequest, block: str = "latest") -> CallTrace:
        result = await self._call("debug_traceCall", [tx.to_rpc(), block, CALL_TRACER])
        if not result:
            raise TraceUnavailableError(f"No trace returned for call to {tx.to}")
        return normalize_call_trace(result)

    async def trace_transaction(self, tx_hash: str) -> CallTrace:
        result = await self._call("debug_traceTransaction", [tx_hash, CALL_TRACER])
        if not result:
            raise TraceUnavailableError(f"No trace returned for {tx_hash}")
        return normalize_call_trace(result)

    async def trace_call_logs(self, tx: CallRequest, block: str = "latest") -> LoggerTrace:
        """Opcode-level trace with memory capture, for log reconstruction."""
        result = await self._call("debug_traceCall", [tx.to_rpc(), block, STRUCT_LOGGER])
        if not result:
            raise TraceUnavailableError(f"No struct log trace returned for call to {tx.to}")
        return LoggerTrace.model_validate(result)

    async def trace_call_many(self, txs: list[CallRequest], block: str = "latest") -> list[CallTrace]:
        """Simulate a sequence of calls on top of each other (parity trace_callMany)."""
        calls = [[tx.to_rpc(), ["trace"]] for tx in txs]
        result = await self._call("trace_callMany", [calls, block])
        if not result or len(result) != len(txs):
            raise TraceUnavailableError(f"trace_callMany returned {len(result or [])} results for {len(txs)} calls")
        return [calltrace_from_trace_call_many_item(item) for item in result]

    async def trace_transactions_batch(self, tx_hashes: list[str]) -> list[BatchItemResult]:
        """Trace many transactions in one batch. Failures are reported per item."""
        if not tx_hashes:
            return []
        responses = await self._batch([("debug_traceTransaction", [h, CALL_TRACER]) for h in tx_hashes])

        results: list[BatchItemResult] = []
        for tx_hash, response in zip(tx_hashes, responses):
            if "error" in response:
                msg = rpc_error_message(response["error"])
                logger.warning("Batch trace failed for %s: %s", tx_hash, msg)
                results.append(BatchItemResult(key=tx_hash, error=msg))
            elif not response.get("result"):
                results.append(BatchItemResult(key=tx_hash, error="empty trace"))
            else:
                try:
                    trace = normalize_call_trace(response["result"])
                except ValidationError as exc:
                    logger.warning("Batch trace for %s has unexpected shape: %s", tx_hash, exc)
                    results.append(BatchItemResult(key=tx_hash, error=f"malformed trace: {exc.error_count()} error(s)"))
                    continue
                results.append(BatchItemResult(key=tx_hash, trace=trace))
        return results

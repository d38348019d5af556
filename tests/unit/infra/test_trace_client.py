"""Tests for TraceClient: JSON-RPC trace fetching."""

from unittest.mock import AsyncMock

import pytest
from tenacity import wait_none

from tracesim.domain.enums import CallType
from tracesim.exceptions import ExternalServiceError, TraceUnavailableError
from tracesim.infra.rpc.trace_client import CALL_TRACER, STRUCT_LOGGER, CallRequest, TraceClient

ALICE = "0x1111111111111111111111111111111111111111"
ROUTER = "0x5555555555555555555555555555555555555555"
TX_HASH = "0x" + "ab" * 32


@pytest.fixture(autouse=True)
def no_retry_wait(monkeypatch):
    monkeypatch.setattr(TraceClient._call.retry, "wait", wait_none())
    monkeypatch.setattr(TraceClient._batch.retry, "wait", wait_none())


@pytest.fixture()
def mock_http():
    return AsyncMock()


@pytest.fixture()
def client(mock_http):
    return TraceClient(http_client=mock_http)


def _result(result) -> dict:
    return {"jsonrpc": "2.0", "id": 1, "result": result}


def _call_frame(**overrides) -> dict:
    frame = {"type": "CALL", "from": ALICE, "to": ROUTER, "value": "0x1", "gas": "0x5208", "input": "0x"}
    frame.update(overrides)
    return frame


@pytest.fixture()
def tx():
    return CallRequest.model_validate({"from": ALICE, "to": ROUTER, "value": 16, "gas": 21000})


class TestCallRequest:
    def test_to_rpc_hex_quantities(self, tx):
        assert tx.to_rpc() == {"from": ALICE, "to": ROUTER, "data": "0x", "value": "0x10", "gas": "0x5208"}

    def test_gas_omitted_when_unset(self):
        req = CallRequest(from_address=ALICE, to=ROUTER)
        assert "gas" not in req.to_rpc()


class TestTraceCall:
    async def test_returns_call_trace(self, client, mock_http, tx):
        mock_http.request.return_value = _result(_call_frame())

        trace = await client.trace_call(tx)
        assert trace.type == CallType.CALL
        assert trace.value == 1
        mock_http.request.assert_awaited_once_with("debug_traceCall", [tx.to_rpc(), "latest", CALL_TRACER])

    async def test_block_forwarded(self, client, mock_http, tx):
        mock_http.request.return_value = _result(_call_frame())

        await client.trace_call(tx, block="0x10")
        assert mock_http.request.call_args[0][1][1] == "0x10"

    async def test_empty_result(self, client, mock_http, tx):
        mock_http.request.return_value = _result(None)

        with pytest.raises(TraceUnavailableError):
            await client.trace_call(tx)

    async def test_rpc_error_retried_then_raised(self, client, mock_http, tx):
        mock_http.request.return_value = {
            "jsonrpc": "2.0", "id": 1, "error": {"code": -32601, "message": "method not found"},
        }

        with pytest.raises(ExternalServiceError, match="method not found"):
            await client.trace_call(tx)
        assert mock_http.request.call_count == 3

    async def test_transport_error_then_success(self, client, mock_http, tx):
        mock_http.request.side_effect = [
            ExternalServiceError("RPC node returned HTTP 503"),
            _result(_call_frame()),
        ]

        trace = await client.trace_call(tx)
        assert trace.to_address == ROUTER
        assert mock_http.request.call_count == 2

    async def test_gives_up_after_three_attempts(self, client, mock_http, tx):
        mock_http.request.side_effect = ExternalServiceError("RPC node returned HTTP 429")

        with pytest.raises(ExternalServiceError, match="429"):
            await client.trace_call(tx)
        assert mock_http.request.call_count == 3


class TestTraceTransaction:
    async def test_returns_trace(self, client, mock_http):
        frame = _call_frame(calls=[_call_frame(type="DELEGATECALL", **{"from": ROUTER})])
        mock_http.request.return_value = _result(frame)

        trace = await client.trace_transaction(TX_HASH)
        assert trace.calls[0].type == CallType.DELEGATECALL
        mock_http.request.assert_awaited_once_with("debug_traceTransaction", [TX_HASH, CALL_TRACER])

    async def test_empty_result(self, client, mock_http):
        mock_http.request.return_value = _result({})

        with pytest.raises(TraceUnavailableError):
            await client.trace_transaction(TX_HASH)


class TestTraceCallLogs:
    async def test_struct_logger_config(self, client, mock_http, tx):
        result = {
            "gas": 30000,
            "failed": False,
            "returnValue": "",
            "structLogs": [{"op": "LOG0", "depth": 1, "pc": 7, "gas": 100, "gasCost": 375, "stack": ["0x0", "0x0"]}],
        }
        mock_http.request.return_value = _result(result)

        trace = await client.trace_call_logs(tx)
        assert trace.struct_logs[0].gas_cost == 375
        assert mock_http.request.call_args[0][1][2] == STRUCT_LOGGER
        assert STRUCT_LOGGER["enableMemory"] is True


class TestTraceCallMany:
    async def test_returns_one_trace_per_call(self, client, mock_http, tx):
        parity = {
            "type": "call",
            "action": {"callType": "call", "from": ALICE, "to": ROUTER, "value": "0x0", "input": "0x"},
            "result": {"output": "0x"},
            "traceAddress": [],
        }
        item = {"output": "0x", "stateDiff": None, "vmTrace": None, "trace": [parity]}
        mock_http.request.return_value = _result([item, item])

        traces = await client.trace_call_many([tx, tx])
        assert len(traces) == 2
        method, params = mock_http.request.call_args[0]
        assert method == "trace_callMany"
        assert params[0][0] == [tx.to_rpc(), ["trace"]]

    async def test_result_count_mismatch(self, client, mock_http, tx):
        mock_http.request.return_value = _result([])

        with pytest.raises(TraceUnavailableError):
            await client.trace_call_many([tx])


class TestTraceTransactionsBatch:
    async def test_per_item_results(self, client, mock_http):
        hashes = ["0x01", "0x02", "0x03", "0x04"]
        mock_http.batch.return_value = [
            _result(_call_frame()),
            {"jsonrpc": "2.0", "id": 2, "error": {"code": -32000, "message": "transaction not found"}},
            _result(None),
            _result({"type": "CALL", "to": ROUTER}),
        ]

        results = await client.trace_transactions_batch(hashes)
        assert [r.key for r in results] == hashes
        assert results[0].ok and results[0].trace.to_address == ROUTER
        assert results[1].error == "transaction not found"
        assert results[2].error == "empty trace"
        assert not results[3].ok
        assert results[3].error.startswith("malformed trace")

        calls = mock_http.batch.call_args[0][0]
        assert calls == [("debug_traceTransaction", [h, CALL_TRACER]) for h in hashes]

    async def test_batch_rejected_as_a_whole(self, client, mock_http):
        mock_http.batch.side_effect = ExternalServiceError("RPC batch error: batch too large")

        with pytest.raises(ExternalServiceError, match="batch too large"):
            await client.trace_transactions_batch(["0x01"])
        assert mock_http.batch.call_count == 3

    async def test_empty(self, client, mock_http):
        assert await client.trace_transactions_batch([]) == []
        mock_http.batch.assert_not_called()

from typing import Annotated

from fastapi import APIRouter, Depends

from tracesim.api.deps import get_interpret_options, get_simulation_service
from tracesim.api.schemas.simulate import (
    InterpretRequest,
    InterpretResponse,
    LogResponse,
    LogsResponse,
    PaymentResponse,
    PaymentsResponse,
    SimulateRequest,
    StateChangeResponse,
)
from tracesim.infra.rpc.trace_client import CallRequest
from tracesim.parser.normalize import normalize_call_trace
from tracesim.parser.utils.context import InterpretOptions
from tracesim.parser.utils.types import Payment
from tracesim.parser.walker import interpret_trace
from tracesim.simulation.service import SimulationService

router = APIRouter(prefix="/api", tags=["simulate"])

ServiceDep = Annotated[SimulationService, Depends(get_simulation_service)]
OptionsDep = Annotated[InterpretOptions, Depends(get_interpret_options)]


def _to_call_request(body: SimulateRequest) -> CallRequest:
    return CallRequest(from_address=body.from_address, to=body.to, data=body.data, value=body.value, gas=body.gas)


def _to_payment_response(p: Payment) -> PaymentResponse:
    return PaymentResponse(from_address=p.from_address, to_address=p.to_address, token=p.token, amount=p.amount)


@router.post("/simulate/state", response_model=StateChangeResponse)
async def simulate_state(body: SimulateRequest, service: ServiceDep) -> StateChangeResponse:
    """Per-address balance deltas the call would cause."""
    state = await service.simulate_state(_to_call_request(body), body.block)
    return StateChangeResponse(state=state)


@router.post("/simulate/payments", response_model=PaymentsResponse)
async def simulate_payments(body: SimulateRequest, service: ServiceDep) -> PaymentsResponse:
    """Ordered transfer-like movements the call would cause."""
    payments = await service.simulate_payments(_to_call_request(body), body.block)
    return PaymentsResponse(payments=[_to_payment_response(p) for p in payments])


@router.post("/simulate/logs", response_model=LogsResponse)
async def simulate_logs(body: SimulateRequest, service: ServiceDep) -> LogsResponse:
    """Event logs the call would emit, rebuilt from an opcode trace."""
    logs = await service.simulate_logs(_to_call_request(body), body.block)
    return LogsResponse(logs=[LogResponse(**log.model_dump()) for log in logs])


@router.post("/interpret", response_model=InterpretResponse)
async def interpret(body: InterpretRequest, options: OptionsDep) -> InterpretResponse:
    """Interpret a caller-supplied callTracer trace without touching the node."""
    if body.nonstandard_erc20_tokens:
        options = options.with_nonstandard_erc20(*body.nonstandard_erc20_tokens)
    result = interpret_trace(normalize_call_trace(body.trace), options=options)
    return InterpretResponse(
        state=result.state,
        payments=[_to_payment_response(p) for p in result.payments],
    )

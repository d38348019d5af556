from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SimulateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_address: str = Field(alias="from")
    to: str
    data: str = "0x"
    value: int = 0
    gas: int | None = None
    block: str = "latest"


class PaymentResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_address: str = Field(serialization_alias="from")
    to_address: str = Field(serialization_alias="to")
    token: str
    amount: str


class StateChangeResponse(BaseModel):
    state: dict[str, dict[str, str]]


class PaymentsResponse(BaseModel):
    payments: list[PaymentResponse]


class LogResponse(BaseModel):
    address: str
    topics: list[str]
    data: str


class LogsResponse(BaseModel):
    logs: list[LogResponse]


class InterpretRequest(BaseModel):
    trace: dict[str, Any]
    nonstandard_erc20_tokens: list[str] = []


class InterpretResponse(BaseModel):
    state: dict[str, dict[str, str]]
    payments: list[PaymentResponse]

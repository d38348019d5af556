"""Core data types for trace interpretation and log reconstruction."""

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from tracesim.domain.enums import CallType
from tracesim.parser.utils.abi import get_selector

logger = logging.getLogger(__name__)

_CALL_TYPE_VALUES = frozenset(t.value for t in CallType)

# {address: {token_id: signed decimal delta}}. Never holds "0" or an empty inner map.
StateChange = dict[str, dict[str, str]]


def parse_quantity(value: Any) -> int:
    """Parse an RPC quantity given as int, decimal string or 0x-hex string."""
    if value is None or value == "" or value == "0x":
        return 0
    if isinstance(value, int):
        return value
    text = str(value)
    if text.lower().startswith("0x"):
        return int(text, 16)
    return int(text)


class CallTrace(BaseModel):
    """One call frame of a callTracer-shaped trace tree."""

    model_config = ConfigDict(populate_by_name=True)

    type: CallType = CallType.CALL
    from_address: str = Field(alias="from")
    to_address: str = Field("", alias="to")
    input: str = "0x"
    output: str = "0x"
    value: int = 0
    error: str | None = None
    calls: list["CallTrace"] = []

    @model_validator(mode="before")
    @classmethod
    def _fold_revert_reason(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("revertReason") and not data.get("error"):
            data = {**data, "error": data["revertReason"]}
        return data

    @field_validator("type", mode="before")
    @classmethod
    def _upper_type(cls, v: Any) -> Any:
        if not isinstance(v, str):
            return v
        v = v.upper()
        if v not in _CALL_TYPE_VALUES:
            logger.debug("Unrecognized call frame type %s, treating as leaf", v)
            return CallType.UNKNOWN
        return v

    @field_validator("value", mode="before")
    @classmethod
    def _parse_value(cls, v: Any) -> int:
        return parse_quantity(v)

    @field_validator("input", "output", mode="before")
    @classmethod
    def _default_bytes(cls, v: Any) -> str:
        return v or "0x"

    @field_validator("calls", mode="before")
    @classmethod
    def _default_calls(cls, v: Any) -> Any:
        return v or []

    @property
    def selector(self) -> str | None:
        return get_selector(self.input)

    @property
    def failed(self) -> bool:
        return self.error is not None


CallTrace.model_rebuild()


class Payment(BaseModel):
    """A single transfer-like movement, in traversal order. Never merged with others."""

    model_config = ConfigDict(populate_by_name=True)

    from_address: str = Field(alias="from")
    to_address: str = Field(alias="to")
    token: str
    amount: str  # unsigned decimal string


class CallQuery(BaseModel):
    """Match criteria for call-search. Unset fields match anything."""

    to: str | None = None
    type: CallType | None = None
    selectors: list[str] | None = None

    @field_validator("to")
    @classmethod
    def _lower_to(cls, v: str | None) -> str | None:
        return v.lower() if v else v

    @field_validator("selectors")
    @classmethod
    def _lower_selectors(cls, v: list[str] | None) -> list[str] | None:
        return [s.lower() for s in v] if v is not None else None


class StructLog(BaseModel):
    """One opcode step from the default (struct) logger."""

    model_config = ConfigDict(populate_by_name=True)

    op: str
    depth: int
    pc: int = 0
    gas: int = 0
    gas_cost: int = Field(0, alias="gasCost")
    stack: list[str] = []
    memory: list[str] | str | None = None  # 32-byte words, or one hex blob on newer nodes
    error: str | None = None

    @field_validator("stack", mode="before")
    @classmethod
    def _default_stack(cls, v: Any) -> Any:
        return v or []


class LoggerTrace(BaseModel):
    """Result of debug_traceCall / debug_traceTransaction with the struct logger."""

    model_config = ConfigDict(populate_by_name=True)

    gas: int = 0
    failed: bool = False
    return_value: Any = Field(None, alias="returnValue")
    struct_logs: list[StructLog] = Field(default_factory=list, alias="structLogs")


class Log(BaseModel):
    """An emitted event log."""

    address: str
    topics: list[str]
    data: str = "0x"

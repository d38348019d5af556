"""Thin ABI codec over eth_abi: selectors plus named-argument decoding of call-data."""

import re
from typing import Any

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from eth_utils import function_signature_to_4byte_selector

from tracesim.exceptions import AbiDecodeError

_SIGNATURE_RE = re.compile(r"^\s*(\w+)\s*\((.*)\)\s*$")
_DATA_LOCATIONS = {"calldata", "memory", "storage"}


def get_selector(data: str | None) -> str | None:
    """Lower-cased 4-byte selector (``0x`` + 8 hex chars) of call-data, or None if too short."""
    if not data or len(data) < 10 or not data[:2].lower() == "0x":
        return None
    return data[:10].lower()


def _normalize_value(value: Any) -> Any:
    if isinstance(value, str) and value.startswith("0x"):
        return value.lower()  # eth_abi returns checksummed addresses
    if isinstance(value, (list, tuple)):
        return [_normalize_value(v) for v in value]
    return value


class AbiFunction:
    """A function signature with parameter names, e.g. ``transfer(address to,uint256 value)``."""

    def __init__(self, name: str, params: list[tuple[str, str]]) -> None:
        self.name = name
        self.params = params
        self.types = [t for t, _ in params]
        self.names = [n for _, n in params]
        self.signature = f"{name}({','.join(self.types)})"
        self.selector = "0x" + function_signature_to_4byte_selector(self.signature).hex()

    @classmethod
    def parse(cls, signature: str) -> "AbiFunction":
        match = _SIGNATURE_RE.match(signature)
        if match is None:
            raise ValueError(f"Invalid function signature: {signature}")
        name, raw_params = match.groups()

        params: list[tuple[str, str]] = []
        for i, raw in enumerate(p for p in raw_params.split(",") if p.strip()):
            tokens = [t for t in raw.split() if t not in _DATA_LOCATIONS]
            param_type = tokens[0]
            param_name = tokens[1] if len(tokens) > 1 else f"arg{i}"
            params.append((param_type, param_name))
        return cls(name, params)

    def decode_input(self, data: str) -> dict[str, Any]:
        """Decode call-data (selector included) into ``{param_name: value}``."""
        if get_selector(data) != self.selector:
            raise AbiDecodeError(self.signature, data or "", "selector mismatch")
        try:
            values = decode(self.types, bytes.fromhex(data[10:]))
        except (DecodingError, ValueError) as exc:
            raise AbiDecodeError(self.signature, data, str(exc)) from exc
        return {name: _normalize_value(v) for name, v in zip(self.names, values)}

    def encode_input(self, *args: Any) -> str:
        return self.selector + encode(self.types, list(args)).hex()

    def __repr__(self) -> str:
        return f"AbiFunction({self.signature})"

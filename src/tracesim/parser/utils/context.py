"""InterpretationContext: mutable accumulators for one interpretation run."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, field_validator

from tracesim.parser.utils.addresses import is_precompile
from tracesim.parser.utils.balances import AnyToken, adjust_balance
from tracesim.parser.utils.tokens import format_token_id
from tracesim.parser.utils.types import Payment, StateChange

if TYPE_CHECKING:
    from tracesim.config import Settings


class InterpretOptions(BaseModel):
    """Chain-specific knobs for one run. Built from Settings unless given explicitly."""

    model_config = ConfigDict(frozen=True)

    nonstandard_erc20_tokens: frozenset[str] = frozenset()
    native_bridge_addresses: frozenset[str] = frozenset()
    precompile_max_address: int = 0xFFF

    @field_validator("nonstandard_erc20_tokens", "native_bridge_addresses", mode="before")
    @classmethod
    def _lower_addresses(cls, v: object) -> frozenset[str]:
        return frozenset(a.lower() for a in (v or ()))  # type: ignore[union-attr]

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> InterpretOptions:
        if settings is None:
            from tracesim.config import settings
        return cls(
            nonstandard_erc20_tokens=settings.nonstandard_erc20_tokens,
            native_bridge_addresses=settings.native_bridge_addresses,
            precompile_max_address=settings.precompile_max_address,
        )

    def with_nonstandard_erc20(self, *addresses: str) -> InterpretOptions:
        """Copy with extra entries in the no-return-data ERC20 allow-list."""
        return InterpretOptions(
            nonstandard_erc20_tokens=self.nonstandard_erc20_tokens | {a.lower() for a in addresses},
            native_bridge_addresses=self.native_bridge_addresses,
            precompile_max_address=self.precompile_max_address,
        )

    def is_nonstandard_erc20(self, address: str) -> bool:
        return address.lower() in self.nonstandard_erc20_tokens

    def is_native_bridge(self, address: str) -> bool:
        return address.lower() in self.native_bridge_addresses

    def is_precompile(self, address: str) -> bool:
        return is_precompile(address, self.precompile_max_address)


class InterpretationContext:
    """Shared StateChange + Payment list that handlers write into during one walk."""

    def __init__(self, options: InterpretOptions | None = None) -> None:
        self.options = options or InterpretOptions.from_settings()
        self.state: StateChange = {}
        self.payments: list[Payment] = []

    def debit(self, address: str, token: AnyToken, amount: int) -> None:
        adjust_balance(self.state, address, token, -amount)

    def credit(self, address: str, token: AnyToken, amount: int) -> None:
        adjust_balance(self.state, address, token, amount)

    def record_payment(self, from_address: str, to_address: str, token: AnyToken, amount: int) -> None:
        token_key = token if isinstance(token, str) else format_token_id(token)
        self.payments.append(Payment(
            from_address=from_address.lower(),
            to_address=to_address.lower(),
            token=token_key.lower(),
            amount=str(amount),
        ))

    def transfer(self, from_address: str, to_address: str, token: AnyToken, amount: int) -> None:
        """Debit source, credit destination, record one payment."""
        self.debit(from_address, token, amount)
        self.credit(to_address, token, amount)
        self.record_payment(from_address, to_address, token, amount)

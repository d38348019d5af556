"""Token identifiers: a tagged union internally, a canonical string at the edges.

Canonical shapes:
- ``native:<zero-address>``
- ``erc20:<contract>``
- ``erc721:<contract>:<token_id>``
- ``erc1155:<contract>:<token_id>``
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tracesim.domain.enums import TokenStandard
from tracesim.parser.utils.addresses import ZERO_ADDRESS


class _Token(BaseModel):
    model_config = ConfigDict(frozen=True)

    @field_validator("contract", mode="before", check_fields=False)
    @classmethod
    def _lower_contract(cls, v: str) -> str:
        return v.lower()


class NativeToken(_Token):
    standard: Literal[TokenStandard.NATIVE] = TokenStandard.NATIVE


class ERC20Token(_Token):
    standard: Literal[TokenStandard.ERC20] = TokenStandard.ERC20
    contract: str


class ERC721Token(_Token):
    standard: Literal[TokenStandard.ERC721] = TokenStandard.ERC721
    contract: str
    token_id: int


class ERC1155Token(_Token):
    standard: Literal[TokenStandard.ERC1155] = TokenStandard.ERC1155
    contract: str
    token_id: int


TokenId = Annotated[
    Union[NativeToken, ERC20Token, ERC721Token, ERC1155Token],
    Field(discriminator="standard"),
]

NATIVE_TOKEN = NativeToken()


def format_token_id(token: TokenId) -> str:
    """Canonical lower-case string used as the state-change key and in payments."""
    if isinstance(token, NativeToken):
        return f"{TokenStandard.NATIVE.value}:{ZERO_ADDRESS}"
    if isinstance(token, ERC20Token):
        return f"{TokenStandard.ERC20.value}:{token.contract}"
    if isinstance(token, (ERC721Token, ERC1155Token)):
        return f"{token.standard.value}:{token.contract}:{token.token_id}"
    raise TypeError(f"Not a token id: {token!r}")


def parse_token_id(value: str) -> TokenId:
    """Inverse of format_token_id."""
    parts = value.lower().split(":")
    standard = parts[0]
    if standard == TokenStandard.NATIVE.value and len(parts) == 2:
        return NATIVE_TOKEN
    if standard == TokenStandard.ERC20.value and len(parts) == 2:
        return ERC20Token(contract=parts[1])
    if standard == TokenStandard.ERC721.value and len(parts) == 3:
        return ERC721Token(contract=parts[1], token_id=int(parts[2]))
    if standard == TokenStandard.ERC1155.value and len(parts) == 3:
        return ERC1155Token(contract=parts[1], token_id=int(parts[2]))
    raise ValueError(f"Malformed token id: {value}")

from enum import Enum


class TokenStandard(str, Enum):
    """Prefix of a canonical token id."""

    NATIVE = "native"
    ERC20 = "erc20"
    ERC721 = "erc721"
    ERC1155 = "erc1155"

"""Balance delta bookkeeping: the only writer of a StateChange."""

from tracesim.parser.utils.tokens import ERC20Token, ERC721Token, ERC1155Token, NativeToken, format_token_id
from tracesim.parser.utils.types import StateChange

AnyToken = str | NativeToken | ERC20Token | ERC721Token | ERC1155Token


def adjust_balance(state: StateChange, address: str, token: AnyToken, delta: int | str) -> None:
    """Add ``delta`` to ``state[address][token]``.

    Zero results are removed immediately, and an address whose last token entry
    disappears is removed too, so the map never holds "0" or an empty inner map.
    """
    address = address.lower()
    key = (token if isinstance(token, str) else format_token_id(token)).lower()

    balances = state.setdefault(address, {})
    new_value = int(balances.get(key, "0")) + int(delta)

    if new_value == 0:
        balances.pop(key, None)
    else:
        balances[key] = str(new_value)

    if not balances:
        del state[address]

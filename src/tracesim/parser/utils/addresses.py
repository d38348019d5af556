"""Address helpers shared by handlers, walker and reconstructor."""

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

_ADDRESS_MASK = (1 << 160) - 1


def word_to_address(word: str) -> str:
    """Take the low 20 bytes of a stack word (hex, with or without 0x prefix)."""
    value = int(word, 16) & _ADDRESS_MASK if word not in ("", "0x") else 0
    return "0x" + format(value, "040x")


def is_precompile(address: str, max_address: int = 0xFFF) -> bool:
    """Reserved low addresses (0x...0001 to max_address). The zero address is not a precompile."""
    try:
        value = int(address, 16)
    except ValueError:
        return False
    return 0 < value <= max_address

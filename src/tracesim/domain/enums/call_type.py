from enum import Enum


class CallType(str, Enum):
    """Call frame kinds as reported by callTracer. Values uppercase to match geth output."""

    CALL = "CALL"
    STATICCALL = "STATICCALL"
    DELEGATECALL = "DELEGATECALL"
    CALLCODE = "CALLCODE"
    CREATE = "CREATE"
    CREATE2 = "CREATE2"
    SELFDESTRUCT = "SELFDESTRUCT"
    # Vendor-specific frame kinds; never dispatched or descended into
    UNKNOWN = "UNKNOWN"


# Frames whose children can still move balances
TRAVERSABLE_CALL_TYPES = frozenset({CallType.CALL, CallType.DELEGATECALL})

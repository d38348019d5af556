from tracesim.domain.enums.call_type import TRAVERSABLE_CALL_TYPES, CallType
from tracesim.domain.enums.token_standard import TokenStandard

__all__ = [
    "CallType",
    "TRAVERSABLE_CALL_TYPES",
    "TokenStandard",
]

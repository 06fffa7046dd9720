"""
External Limit-Order Engine Adapter
"""

from protected_options.adapter.integration import LimitOrderAdapter
from protected_options.adapter.models import AdapterStatus, EvaluationResult, LimitOrder
from protected_options.adapter.payload import (
    PAYLOAD_SIZE,
    ProtectedOptionData,
    decode_payload,
    encode_payload,
)

__all__ = [
    "LimitOrderAdapter",
    "LimitOrder",
    "AdapterStatus",
    "EvaluationResult",
    "ProtectedOptionData",
    "encode_payload",
    "decode_payload",
    "PAYLOAD_SIZE",
]

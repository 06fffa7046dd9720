"""
Position Orchestration Package
"""

from protected_options.orchestration.manager import ProtectedOptionManager
from protected_options.orchestration.models import (
    CancelReason,
    ExecutionReason,
    PositionStatus,
    ProtectedOption,
)

__all__ = [
    "ProtectedOptionManager",
    "ProtectedOption",
    "PositionStatus",
    "ExecutionReason",
    "CancelReason",
]

"""
Stop-Loss Evaluation Package
"""

from protected_options.stop_loss.engine import StopLossEngine
from protected_options.stop_loss.models import BASIS_POINTS, StopLossCheck, StopLossConfig

__all__ = ["StopLossEngine", "StopLossCheck", "StopLossConfig", "BASIS_POINTS"]

"""
Option Valuation Package
"""

from protected_options.valuation.engine import OptionValuationEngine
from protected_options.valuation.models import PREMIUM_UNIT, PRICE_UNIT, OptionConfig

__all__ = ["OptionValuationEngine", "OptionConfig", "PREMIUM_UNIT", "PRICE_UNIT"]

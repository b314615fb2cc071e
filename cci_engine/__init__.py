"""
CCI FINANCIAL RULES ENGINE
Tariff calculations for cotton trade contracts.
"""

from .models import CalculationInput, CalculationResult, CciSetting
from .processor import CciProcessor
from .resolver import resolve_active_setting

__all__ = ['CciProcessor', 'CalculationInput', 'CalculationResult', 'CciSetting', 'resolve_active_setting']

"""
Calculators Package

Provides all calculation components for CCI tariff processing.
"""

from .allocation import BaleAllocationCalculator
from .charges import TariffChargeCalculator
from .emd import EmdCalculator
from .invoice import InvoiceCalculator
from .moisture import MoistureCalculator
from .tiered import TieredChargeCalculator, tiered_monthly_charge

__all__ = [
    "TieredChargeCalculator",
    "tiered_monthly_charge",
    "EmdCalculator",
    "MoistureCalculator",
    "InvoiceCalculator",
    "BaleAllocationCalculator",
    "TariffChargeCalculator",
]

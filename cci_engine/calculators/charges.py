"""
Other Tariff Charges

Annual-rate discounts and interest (cash discount, LC/BG interest) and the
per-bale lock-in charge.
"""

from ..errors import NegativeInputError
from ..models import CciSetting
from ..units import DAYS_PER_YEAR, AmountExclGst, Bale, Days


def _check_days(days: Days) -> None:
    if days.value < 0:
        raise NegativeInputError(f"days cannot be negative, got: {days.value}")


class TariffChargeCalculator:
    """Simple-interest style charges from the CCI setting."""

    def cash_discount(
        self,
        setting: CciSetting,
        amount_paid_excl_gst: AmountExclGst,
        days: Days,
    ) -> AmountExclGst:
        """Cash discount on the amount paid (excl GST): amount x annual rate x days/365."""
        _check_days(days)
        return setting.cash_discount_percent.of(amount_paid_excl_gst) * days.value / DAYS_PER_YEAR

    def lc_bg_interest(
        self,
        setting: CciSetting,
        amount: AmountExclGst,
        days: Days,
        is_penal: bool = False,
    ) -> AmountExclGst:
        """Interest on an LC/BG amount at the normal or penal annual rate."""
        _check_days(days)
        rate = setting.penal_interest_lc_bg_percent if is_penal else setting.interest_lc_bg_percent
        return rate.of(amount) * days.value / DAYS_PER_YEAR

    def lockin_charge(self, setting: CciSetting, bales: Bale, use_max_charge: bool = False) -> AmountExclGst:
        """Bales x per-bale lock-in charge (min by default)."""
        per_bale = setting.lockin_charge_max if use_max_charge else setting.lockin_charge_min
        return per_bale * bales.value

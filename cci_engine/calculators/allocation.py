"""
Per-Bale Allocation Calculator

Provisional (pre-weighment) model only: values use 0.48 approximate candy
per bale, never the setting's candy factor. EMD is allocated per bale so the
portion securing unlifted bales can be excluded from the carrying base.
"""

from ..errors import DivisionByZeroError
from ..models import CarryingBreakdown, CarryingForDo, CciSetting, DoPayable
from ..units import (
    AmountExclGst,
    AmountInclGst,
    Bale,
    Days,
    GstAmount,
    Percent,
    RatePerCandy,
    to_candy_approx,
)
from .tiered import TieredChargeCalculator

HUNDRED_BALES = 100


def _gst_on(amount: AmountExclGst, gst_rate: Percent) -> GstAmount:
    return GstAmount(amount.value * gst_rate.fraction)


class BaleAllocationCalculator:
    """EMD-per-bale allocation and carrying charge breakdowns."""

    def __init__(self, tiered_calculator: TieredChargeCalculator | None = None):
        self.tiered_calculator = tiered_calculator or TieredChargeCalculator()

    @staticmethod
    def approx_value(bales: Bale, rate_per_candy: RatePerCandy) -> AmountExclGst:
        """bales x 0.48 x rate per candy."""
        return to_candy_approx(bales).priced_at(rate_per_candy)

    @staticmethod
    def emd_per_bale(total_emd: AmountExclGst, total_bales: Bale) -> AmountExclGst:
        if total_bales.is_zero():
            raise DivisionByZeroError("Cannot allocate EMD per bale over zero bales")
        return total_emd / total_bales.value

    @staticmethod
    def emd_allocated_for_do(emd_per_bale: AmountExclGst, do_bales: Bale) -> AmountExclGst:
        return emd_per_bale * do_bales.value

    @staticmethod
    def unlifted_value_for_carrying(
        contract_value_approx: AmountExclGst,
        do_value_approx: AmountExclGst,
        emd_per_bale: AmountExclGst,
        unlifted_bales: Bale,
    ) -> AmountExclGst:
        """
        Value of unlifted bales less the EMD allocated to those bales.

        Only the EMD portion securing unlifted bales is subtracted, not the
        entire EMD total.
        """
        return (contract_value_approx - do_value_approx) - emd_per_bale * unlifted_bales.value

    def carrying_with_breakdown(
        self,
        setting: CciSetting,
        unlifted_value_for_carrying: AmountExclGst,
        unlifted_bales: Bale,
        days: Days,
    ) -> CarryingBreakdown:
        """Total carrying on unlifted bales plus per-bale and per-100-bale display figures."""
        if unlifted_bales.is_zero():
            raise DivisionByZeroError("Cannot compute carrying per bale over zero unlifted bales")

        total = self.tiered_calculator.carrying_charge(setting, unlifted_value_for_carrying, days)
        total_gst = _gst_on(total, setting.gst_rate)
        per_bale = total / unlifted_bales.value
        per_100 = per_bale * HUNDRED_BALES
        per_100_gst = _gst_on(per_100, setting.gst_rate)

        return CarryingBreakdown(
            total_excl_gst=total,
            total_gst=total_gst,
            total_incl_gst=AmountInclGst.from_parts(total, total_gst),
            per_bale_excl_gst=per_bale,
            per_100_bales_excl_gst=per_100,
            per_100_bales_gst=per_100_gst,
            per_100_bales_incl_gst=AmountInclGst.from_parts(per_100, per_100_gst),
        )

    @staticmethod
    def carrying_for_do(per_bale_excl_gst: AmountExclGst, do_bales: Bale, gst_rate: Percent) -> CarryingForDo:
        excl = per_bale_excl_gst * do_bales.value
        gst = _gst_on(excl, gst_rate)
        return CarryingForDo(excl_gst=excl, gst=gst, incl_gst=AmountInclGst.from_parts(excl, gst))

    @staticmethod
    def do_payable_after_emd(
        do_value_approx: AmountExclGst,
        gst_rate: Percent,
        emd_allocated_for_do: AmountExclGst,
    ) -> DoPayable:
        """(DO value + GST) - EMD allocated for the DO. EMD itself carries no GST."""
        do_gst = _gst_on(do_value_approx, gst_rate)
        do_incl = AmountInclGst.from_parts(do_value_approx, do_gst)
        return DoPayable(
            do_value_excl_gst=do_value_approx,
            do_gst=do_gst,
            do_value_incl_gst=do_incl,
            less_emd_allocated=emd_allocated_for_do,
            do_payable_after_emd=do_incl.less_deposit(emd_allocated_for_do),
        )

    @staticmethod
    def unlifted_bales(total_bales: Bale, do_bales: Bale) -> Bale:
        if do_bales > total_bales:
            raise ValueError(
                f"do_bales ({do_bales.value}) cannot exceed total_bales ({total_bales.value})"
            )
        return total_bales - do_bales

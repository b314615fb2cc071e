"""
GST & Invoice Totals Calculator

Canonical final-invoice pipeline:
    weight (quintal) -> candy (setting.candy_factor) -> rate -> moisture -> GST

Moisture is applied before GST, never after.
"""

from decimal import Decimal

from ..errors import UnitMismatchError
from ..models import (
    CciSetting,
    GstBreakdown,
    InvoiceTotals,
    MoistureAdjustment,
    MoistureAdjustmentKind,
)
from ..units import (
    AmountExclGst,
    AmountInclGst,
    GstAmount,
    Quintal,
    RatePerCandy,
    to_candy_final,
)
from .moisture import MoistureCalculator


def _normalize_state(state: str) -> str:
    return "".join(state.split()).upper()


class InvoiceCalculator:
    """Net invoice, moisture application and GST."""

    def __init__(self, moisture_calculator: MoistureCalculator | None = None):
        self.moisture_calculator = moisture_calculator or MoistureCalculator()

    @staticmethod
    def net_invoice(
        setting: CciSetting,
        delivered: Quintal,
        rate_per_candy: RatePerCandy,
    ) -> AmountExclGst:
        """Delivered quintals converted to official candy, priced per candy."""
        return to_candy_final(delivered, setting.candy_factor).priced_at(rate_per_candy)

    @staticmethod
    def apply_moisture(net_invoice: AmountExclGst, adjustment: MoistureAdjustment) -> AmountExclGst:
        if adjustment.kind is MoistureAdjustmentKind.DISCOUNT:
            return net_invoice - adjustment.amount
        if adjustment.kind is MoistureAdjustmentKind.PREMIUM:
            return net_invoice + adjustment.amount
        return net_invoice

    @staticmethod
    def gst(setting: CciSetting, amount_excl_gst: AmountExclGst) -> GstAmount:
        """The GST portion of a GST-exclusive amount."""
        if not isinstance(amount_excl_gst, AmountExclGst):
            raise UnitMismatchError(
                f"GST is computed on AmountExclGst, got: {type(amount_excl_gst).__name__}"
            )
        return GstAmount(amount_excl_gst.value * setting.gst_rate.fraction)

    @staticmethod
    def total_incl_gst(amount_excl_gst: AmountExclGst, gst_portion: GstAmount) -> AmountInclGst:
        return AmountInclGst.from_parts(amount_excl_gst, gst_portion)

    @staticmethod
    def reverse_gst(setting: CciSetting, total: AmountInclGst) -> AmountExclGst:
        """GST-exclusive amount contained in a GST-inclusive total."""
        if not isinstance(total, AmountInclGst):
            raise UnitMismatchError(f"reverse_gst expects AmountInclGst, got: {type(total).__name__}")
        hundred = Decimal("100")
        return AmountExclGst(total.value * hundred / (hundred + setting.gst_rate.value))

    def gst_breakdown(
        self,
        setting: CciSetting,
        amount_excl_gst: AmountExclGst,
        seller_state: str,
        buyer_state: str,
    ) -> GstBreakdown:
        """
        Split GST by place of supply.

        Same state: CGST + SGST, each half the rate.
        Different states: IGST at the full rate.
        """
        total_gst = self.gst(setting, amount_excl_gst)
        is_inter_state = _normalize_state(seller_state) != _normalize_state(buyer_state)

        if is_inter_state:
            cgst = sgst = GstAmount.zero()
            igst = total_gst
        else:
            cgst = sgst = total_gst / 2
            igst = GstAmount.zero()

        return GstBreakdown(
            taxable_amount=amount_excl_gst,
            cgst=cgst,
            sgst=sgst,
            igst=igst,
            total_gst=cgst + sgst + igst,
            total_incl_gst=self.total_incl_gst(amount_excl_gst, cgst + sgst + igst),
            gst_rate=setting.gst_rate,
            is_inter_state=is_inter_state,
        )

    def calculate(
        self,
        setting: CciSetting,
        delivered: Quintal,
        rate_per_candy: RatePerCandy,
        average_moisture: Decimal | None = None,
    ) -> InvoiceTotals:
        """Run the full pipeline. Moisture uses the per-quintal equivalent of the candy rate."""
        candy = to_candy_final(delivered, setting.candy_factor)
        net = candy.priced_at(rate_per_candy)

        if average_moisture is None:
            adjustment = MoistureAdjustment(MoistureAdjustmentKind.NONE, AmountExclGst.zero())
        else:
            adjustment = self.moisture_calculator.adjustment(
                setting,
                average_moisture,
                delivered,
                rate_per_candy.per_quintal(setting.candy_factor),
            )

        after_moisture = self.apply_moisture(net, adjustment)
        gst_portion = self.gst(setting, after_moisture)

        return InvoiceTotals(
            candy_weight=candy.value,
            net_invoice_excl_gst=net,
            moisture=adjustment,
            amount_after_moisture=after_moisture,
            gst=gst_portion,
            total_incl_gst=self.total_incl_gst(after_moisture, gst_portion),
        )

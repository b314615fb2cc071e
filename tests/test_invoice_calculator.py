"""
Unit Tests for GST & Invoice Totals

Tests the weight -> candy -> rate -> moisture -> GST pipeline and GST splits.
"""

from decimal import Decimal

import pytest

from cci_engine.calculators import InvoiceCalculator
from cci_engine.errors import UnitMismatchError
from cci_engine.models import MoistureAdjustment, MoistureAdjustmentKind
from cci_engine.units import AmountExclGst, AmountInclGst, GstAmount, Quintal, RatePerCandy


RATE = RatePerCandy(62000)


@pytest.fixture
def calc():
    return InvoiceCalculator()


class TestNetInvoice:

    def test_uses_candy_factor(self, setting):
        # 162 x 0.2812 = 45.5544 candy x 62,000
        result = InvoiceCalculator.net_invoice(setting, Quintal(162), RATE)
        assert result == AmountExclGst(Decimal("2824372.8"))

    def test_changes_with_candy_factor(self, make_setting):
        setting = make_setting(candy_factor=0.3)
        assert InvoiceCalculator.net_invoice(setting, Quintal(100), RATE) == AmountExclGst(1860000)


class TestApplyMoisture:

    def test_discount_subtracts(self):
        adjustment = MoistureAdjustment(MoistureAdjustmentKind.DISCOUNT, AmountExclGst(1000))
        assert InvoiceCalculator.apply_moisture(AmountExclGst(10000), adjustment) == AmountExclGst(9000)

    def test_premium_adds(self):
        adjustment = MoistureAdjustment(MoistureAdjustmentKind.PREMIUM, AmountExclGst(1000))
        assert InvoiceCalculator.apply_moisture(AmountExclGst(10000), adjustment) == AmountExclGst(11000)

    def test_none_leaves_amount(self):
        adjustment = MoistureAdjustment(MoistureAdjustmentKind.NONE, AmountExclGst(0))
        assert InvoiceCalculator.apply_moisture(AmountExclGst(10000), adjustment) == AmountExclGst(10000)


class TestGst:

    def test_gst_portion(self, setting):
        assert InvoiceCalculator.gst(setting, AmountExclGst(1000000)) == GstAmount(50000)

    def test_total_incl_gst(self):
        total = InvoiceCalculator.total_incl_gst(AmountExclGst(1000000), GstAmount(50000))
        assert total == AmountInclGst(1050000)

    def test_gst_on_inclusive_amount_rejected(self, setting):
        with pytest.raises(UnitMismatchError):
            InvoiceCalculator.gst(setting, AmountInclGst(1050000))

    def test_reverse_gst(self, setting):
        assert InvoiceCalculator.reverse_gst(setting, AmountInclGst(1050000)) == AmountExclGst(1000000)

    def test_reverse_gst_rejects_exclusive_amount(self, setting):
        with pytest.raises(UnitMismatchError):
            InvoiceCalculator.reverse_gst(setting, AmountExclGst(1000000))


class TestGstBreakdown:

    def test_intra_state_splits_cgst_sgst(self, calc, setting):
        result = calc.gst_breakdown(setting, AmountExclGst(1000000), "Maharashtra", " maharashtra ")

        assert result.is_inter_state is False
        assert result.cgst == GstAmount(25000)
        assert result.sgst == GstAmount(25000)
        assert result.igst.is_zero()
        assert result.total_gst == GstAmount(50000)
        assert result.total_incl_gst == AmountInclGst(1050000)

    def test_inter_state_charges_igst(self, calc, setting):
        result = calc.gst_breakdown(setting, AmountExclGst(1000000), "Gujarat", "Maharashtra")

        assert result.is_inter_state is True
        assert result.cgst.is_zero()
        assert result.sgst.is_zero()
        assert result.igst == GstAmount(50000)
        assert result.total_incl_gst == AmountInclGst(1050000)


class TestInvoicePipeline:

    def test_without_moisture(self, calc, setting):
        result = calc.calculate(setting, Quintal(162), RATE)

        assert result.candy_weight == Decimal("45.5544")
        assert result.net_invoice_excl_gst == AmountExclGst(Decimal("2824372.8"))
        assert result.moisture.kind is MoistureAdjustmentKind.NONE
        assert result.amount_after_moisture == result.net_invoice_excl_gst
        assert result.gst == GstAmount(Decimal("141218.64"))
        assert result.total_incl_gst == AmountInclGst(Decimal("2965591.44"))

    def test_moisture_applied_before_gst(self, calc, setting):
        # Discount: 0.1 x 162 x (62,000 x 0.2812) = 282,437.28
        result = calc.calculate(setting, Quintal(162), RATE, Decimal("9.1"))

        assert result.moisture.kind is MoistureAdjustmentKind.DISCOUNT
        assert result.moisture.amount == AmountExclGst(Decimal("282437.28"))
        assert result.amount_after_moisture == AmountExclGst(Decimal("2541935.52"))
        assert result.gst == GstAmount(Decimal("127096.776"))
        assert result.total_incl_gst == AmountInclGst(Decimal("2669032.296"))

    def test_totals_are_consistent(self, calc, setting):
        result = calc.calculate(setting, Quintal(162), RATE, Decimal("6.2"))

        assert result.moisture.kind is MoistureAdjustmentKind.PREMIUM
        assert result.gst == InvoiceCalculator.gst(setting, result.amount_after_moisture)
        assert result.total_incl_gst == AmountInclGst.from_parts(result.amount_after_moisture, result.gst)

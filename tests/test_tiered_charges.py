"""
Unit Tests for Tiered Charges

Carrying and late lifting charges: base x monthly percent x days/30 per tier.
"""

from decimal import Decimal

import pytest

from cci_engine.calculators import TieredChargeCalculator, tiered_monthly_charge
from cci_engine.models import ChargeTier
from cci_engine.units import AmountExclGst, Days, Percent


BASE = AmountExclGst(3100000)


class TestTieredMonthlyCharge:
    """Test the shared tiered primitive."""

    @pytest.fixture
    def tiers(self):
        return [
            ChargeTier(Decimal("10"), Percent(3)),
            ChargeTier(Decimal("20"), Percent(6)),
        ]

    def test_within_first_tier(self, tiers):
        # 1000 x 3% x 5/30
        assert tiered_monthly_charge(AmountExclGst(1000), Days(5), tiers) == AmountExclGst(5)

    def test_last_tier_absorbs_days_past_its_threshold(self, tiers):
        # 1000 x 3% x 10/30 + 1000 x 6% x 20/30
        assert tiered_monthly_charge(AmountExclGst(1000), Days(30), tiers) == AmountExclGst(50)

    def test_zero_days_is_zero(self, tiers):
        assert tiered_monthly_charge(AmountExclGst(1000), Days(0), tiers).is_zero()

    def test_negative_days_is_zero(self, tiers):
        assert tiered_monthly_charge(AmountExclGst(1000), Days(-7), tiers).is_zero()

    def test_empty_tiers_rejected(self):
        with pytest.raises(ValueError, match="At least one"):
            tiered_monthly_charge(AmountExclGst(1000), Days(5), [])

    def test_descending_thresholds_rejected(self):
        tiers = [ChargeTier(Decimal("30"), Percent(1)), ChargeTier(Decimal("10"), Percent(2))]
        with pytest.raises(ValueError, match="threshold"):
            tiered_monthly_charge(AmountExclGst(1000), Days(5), tiers)

    def test_open_tier_must_be_last(self):
        tiers = [ChargeTier(None, Percent(1)), ChargeTier(Decimal("10"), Percent(2))]
        with pytest.raises(ValueError, match="not the last"):
            tiered_monthly_charge(AmountExclGst(1000), Days(5), tiers)


class TestCarryingCharge:
    """Carrying: tier-1 rate up to 30 days, tier-2 rate beyond (uncapped)."""

    @pytest.fixture
    def calc(self):
        return TieredChargeCalculator()

    def test_within_tier_one(self, calc, setting):
        # 3,100,000 x 1.25% x 15/30
        assert calc.carrying_charge(setting, BASE, Days(15)) == AmountExclGst(19375)

    def test_exactly_tier_one(self, calc, setting):
        assert calc.carrying_charge(setting, BASE, Days(30)) == AmountExclGst(38750)

    def test_crosses_into_tier_two(self, calc, setting):
        # 38,750 + 3,100,000 x 1.35% x 15/30 = 38,750 + 20,925
        assert calc.carrying_charge(setting, BASE, Days(45)) == AmountExclGst(59675)

    def test_tier_two_is_uncapped(self, calc, setting):
        # 38,750 + 3,100,000 x 1.35% x 60/30
        assert calc.carrying_charge(setting, BASE, Days(90)) == AmountExclGst(122450)

    def test_zero_days(self, calc, setting):
        assert calc.carrying_charge(setting, BASE, Days(0)).is_zero()

    def test_continuous_at_tier_boundary(self, calc, setting):
        at = calc.carrying_charge(setting, BASE, Days(30))
        just_after = calc.carrying_charge(setting, BASE, Days(Decimal("30.000001")))

        assert just_after >= at
        assert (just_after - at).value < Decimal("0.01")

    def test_monotonic_in_days(self, calc, setting):
        charges = [calc.carrying_charge(setting, BASE, Days(d)) for d in range(0, 100, 7)]
        assert charges == sorted(charges)


class TestLateLiftingCharge:
    """Late lifting: cumulative thresholds 0-30, 31-60, beyond 60 days."""

    @pytest.fixture
    def calc(self):
        return TieredChargeCalculator()

    def test_within_tier_one(self, calc, setting):
        # 3,100,000 x 0.5% x 15/30
        assert calc.late_lifting_charge(setting, BASE, Days(15)) == AmountExclGst(7750)

    def test_tier_two(self, calc, setting):
        # 15,500 + 3,100,000 x 0.75% x 15/30
        assert calc.late_lifting_charge(setting, BASE, Days(45)) == AmountExclGst(27125)

    def test_tier_three(self, calc, setting):
        # 15,500 + 23,250 + 3,100,000 x 1% x 15/30
        assert calc.late_lifting_charge(setting, BASE, Days(75)) == AmountExclGst(54250)

    def test_continuous_at_second_boundary(self, calc, setting):
        at = calc.late_lifting_charge(setting, BASE, Days(60))
        just_after = calc.late_lifting_charge(setting, BASE, Days(Decimal("60.000001")))

        assert just_after >= at
        assert (just_after - at).value < Decimal("0.01")

    def test_negative_days_is_zero(self, calc, setting):
        assert calc.late_lifting_charge(setting, BASE, Days(-3)).is_zero()


class TestLateLiftingDays:

    def test_days_past_free_period(self, setting):
        assert TieredChargeCalculator.late_lifting_days(setting, Days(30)) == Days(9)

    def test_lifted_within_free_period_is_not_positive(self, setting):
        days = TieredChargeCalculator.late_lifting_days(setting, Days(10))

        assert days == Days(-11)
        assert TieredChargeCalculator().late_lifting_charge(setting, BASE, days).is_zero()


class TestCarryingWithEmdStatus:

    @pytest.fixture
    def calc(self):
        return TieredChargeCalculator()

    def test_informational_while_emd_incomplete(self, calc, setting):
        result = calc.carrying_with_emd_status(
            setting, BASE, Days(15), AmountExclGst(100000), AmountExclGst(387500)
        )

        assert result.amount == AmountExclGst(19375)
        assert result.informational_only is True
        assert "informational" in result.note

    def test_billable_once_emd_complete(self, calc, setting):
        result = calc.carrying_with_emd_status(
            setting, BASE, Days(15), AmountExclGst(387500), AmountExclGst(387500)
        )

        assert result.amount == AmountExclGst(19375)
        assert result.informational_only is False
        assert result.note is None

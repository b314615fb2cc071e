"""
Tiered Charge Calculator

Day-proportioned, tiered-rate charges shared by carrying charges and late
lifting charges. Each tier's monthly percent is prorated as days/30.
"""

from decimal import Decimal

from ..models import CarryingAssessment, CciSetting, ChargeTier
from ..units import DAYS_PER_MONTH, AmountExclGst, Days


def validate_tiers(tiers: list[ChargeTier]) -> None:
    """Tiers must be non-empty with strictly ascending thresholds; only the last may be open."""
    if not tiers:
        raise ValueError("At least one charge tier is required")

    previous = Decimal("0")
    for i, tier in enumerate(tiers):
        if tier.threshold_days is None:
            if i != len(tiers) - 1:
                raise ValueError(f"Tier {i} has no threshold but is not the last tier")
            continue
        if tier.threshold_days <= previous:
            raise ValueError(
                f"Tier {i} threshold must exceed {previous} days, got: {tier.threshold_days}"
            )
        previous = tier.threshold_days


def tiered_monthly_charge(
    base: AmountExclGst,
    days: Days,
    tiers: list[ChargeTier],
) -> AmountExclGst:
    """
    Charge ``base`` for ``days`` across tiers.

    Each tier contributes ``base * percent/100 * span/30`` where span is the
    number of days falling inside the tier. Once days pass a tier's threshold
    the remainder rolls into the next tier. The last tier absorbs all
    remaining days whatever its threshold. Zero or negative days charge
    nothing.
    """
    validate_tiers(tiers)

    if days.value <= 0:
        return AmountExclGst.zero()

    total = AmountExclGst.zero()
    covered = Decimal("0")
    last = len(tiers) - 1

    for i, tier in enumerate(tiers):
        if i == last or tier.threshold_days is None:
            upper = days.value
        else:
            upper = min(days.value, tier.threshold_days)

        span = upper - covered
        if span <= 0:
            break

        total += tier.monthly_percent.of(base) * span / DAYS_PER_MONTH
        covered = upper

        if covered >= days.value:
            break

    return total


class TieredChargeCalculator:
    """Carrying and late lifting charges parameterized by the active setting."""

    def carrying_charge(
        self,
        setting: CciSetting,
        net_invoice_excl_gst: AmountExclGst,
        days_held: Days,
    ) -> AmountExclGst:
        """Two tiers: up to tier-1 days at tier-1 rate, the rest at tier-2 rate."""
        return tiered_monthly_charge(net_invoice_excl_gst, days_held, setting.carrying_tiers)

    def late_lifting_charge(
        self,
        setting: CciSetting,
        net_invoice_excl_gst: AmountExclGst,
        days_late: Days,
    ) -> AmountExclGst:
        """Three tiers on days past the free lifting period."""
        return tiered_monthly_charge(net_invoice_excl_gst, days_late, setting.late_lifting_tiers)

    @staticmethod
    def late_lifting_days(setting: CciSetting, days_since_do: Days) -> Days:
        """Days beyond the free lifting period (zero or negative when lifted in time)."""
        return days_since_do - Days(setting.free_lifting_period_days)

    def carrying_with_emd_status(
        self,
        setting: CciSetting,
        net_invoice_excl_gst: AmountExclGst,
        days_held: Days,
        emd_paid: AmountExclGst,
        emd_required: AmountExclGst,
    ) -> CarryingAssessment:
        """
        Carrying charge flagged as informational while EMD is incomplete.

        Until full EMD is received no DO can be raised, so the figure is shown
        to the buyer but not yet billed.
        """
        amount = self.carrying_charge(setting, net_invoice_excl_gst, days_held)

        if emd_paid < emd_required:
            return CarryingAssessment(
                amount=amount,
                informational_only=True,
                note="Full EMD not received; carrying charge is informational until EMD is complete",
            )

        return CarryingAssessment(amount=amount, informational_only=False)

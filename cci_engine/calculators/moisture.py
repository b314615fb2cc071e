"""
Moisture Adjustment Calculator

Premium or discount applied when delivered moisture falls outside the
setting's moisture band. Both limits are inclusive: a reading equal to a
limit needs no adjustment.
"""

from decimal import Decimal

from ..errors import NegativeInputError
from ..models import CciSetting, MoistureAdjustment, MoistureAdjustmentKind
from ..units import AmountExclGst, Quintal, RatePerQuintal, to_decimal


class MoistureCalculator:
    """Calculates moisture premium/discount against the configured band."""

    def adjustment(
        self,
        setting: CciSetting,
        average_moisture: Decimal,
        delivered: Quintal,
        rate_per_quintal: RatePerQuintal,
    ) -> MoistureAdjustment:
        """
        Above the upper limit:  discount = (moisture - upper) x quintals x rate
        Below the lower limit:  premium  = (lower - moisture) x quintals x rate
        """
        moisture = to_decimal(average_moisture)
        if moisture < 0:
            raise NegativeInputError(f"average moisture cannot be negative, got: {moisture}")

        value_at_rate = delivered.priced_at(rate_per_quintal)

        if moisture > setting.moisture_upper_limit:
            return MoistureAdjustment(
                kind=MoistureAdjustmentKind.DISCOUNT,
                amount=value_at_rate * (moisture - setting.moisture_upper_limit),
            )

        if moisture < setting.moisture_lower_limit:
            return MoistureAdjustment(
                kind=MoistureAdjustmentKind.PREMIUM,
                amount=value_at_rate * (setting.moisture_lower_limit - moisture),
            )

        return MoistureAdjustment(kind=MoistureAdjustmentKind.NONE, amount=AmountExclGst.zero())

    @staticmethod
    def average_moisture(samples: list[Decimal]) -> Decimal:
        """Mean of the sample readings."""
        if not samples:
            raise ValueError("No moisture samples provided")
        readings = [to_decimal(s) for s in samples]
        for reading in readings:
            if reading < 0:
                raise NegativeInputError(f"moisture reading cannot be negative, got: {reading}")
        return sum(readings, Decimal("0")) / Decimal(len(readings))

    @staticmethod
    def validate_samples(setting: CciSetting, samples: list[Decimal]) -> None:
        """Raise ValueError unless at least the configured number of samples is present."""
        if not samples:
            raise ValueError("No moisture samples provided")
        required = setting.moisture_sample_count
        if len(samples) < required:
            raise ValueError(
                f"Minimum {required} samples required, but only {len(samples)} provided"
            )

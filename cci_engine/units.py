"""
Money and Unit Types

Typed wrappers over Decimal so quintals never get added to candies and
GST-inclusive amounts never get mixed with GST-exclusive ones. Arithmetic is
only defined within a single type; scaling uses plain ints or Decimals.

Two candy conversions exist and are deliberately separate types:
  - Candy:       official weight, quintals x setting.candy_factor (final invoice)
  - ApproxCandy: provisional weight, bales x 0.48 (pre-weighment cash flow)
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import ClassVar

from .errors import DivisionByZeroError, NegativeInputError, UnitMismatchError

# Industry approximation of candy per bale, used before final weighment
APPROX_CANDY_PER_BALE = Decimal("0.48")

DAYS_PER_MONTH = Decimal("30")
DAYS_PER_YEAR = Decimal("365")


def quantize_money(value: Decimal) -> Decimal:
    """Round to 2 decimal places using ROUND_HALF_UP."""
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def to_decimal(value) -> Decimal:
    """Coerce an int, str, float or Decimal into a finite Decimal."""
    if isinstance(value, bool):
        raise TypeError(f"Expected a number, got bool: {value}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except InvalidOperation:
            raise ValueError(f"Expected a number, got: {value!r}") from None
    if not result.is_finite():
        raise ValueError(f"Expected a finite number, got: {value!r}")
    return result


@dataclass(frozen=True, order=True)
class Measure:
    """A Decimal tagged with its unit. Subclasses are the concrete units."""

    value: Decimal
    allow_negative: ClassVar[bool] = True

    def __post_init__(self):
        object.__setattr__(self, "value", to_decimal(self.value))
        if not self.allow_negative and self.value < 0:
            raise NegativeInputError(
                f"{type(self).__name__} cannot be negative, got: {self.value}"
            )

    @classmethod
    def zero(cls):
        return cls(Decimal("0"))

    def _check_same(self, other, op: str) -> None:
        if type(other) is not type(self):
            raise UnitMismatchError(
                f"Cannot {op} {type(other).__name__} and {type(self).__name__}"
            )

    @staticmethod
    def _scalar(factor) -> Decimal:
        if isinstance(factor, Measure):
            raise UnitMismatchError(
                f"Cannot scale by {type(factor).__name__}; use an explicit conversion"
            )
        if isinstance(factor, (float, bool)) or not isinstance(factor, (int, Decimal)):
            raise TypeError(f"Scale factor must be int or Decimal, got: {type(factor).__name__}")
        return Decimal(factor)

    def __add__(self, other):
        self._check_same(other, "add")
        return type(self)(self.value + other.value)

    def __sub__(self, other):
        self._check_same(other, "subtract")
        return type(self)(self.value - other.value)

    def __mul__(self, factor):
        return type(self)(self.value * self._scalar(factor))

    __rmul__ = __mul__

    def __truediv__(self, divisor):
        if isinstance(divisor, Measure):
            self._check_same(divisor, "divide")
            if divisor.value == 0:
                raise DivisionByZeroError(f"Cannot divide by zero {type(divisor).__name__}")
            return self.value / divisor.value
        scalar = self._scalar(divisor)
        if scalar == 0:
            raise DivisionByZeroError(f"Cannot divide {type(self).__name__} by zero")
        return type(self)(self.value / scalar)

    def __neg__(self):
        return type(self)(-self.value)

    def is_zero(self) -> bool:
        return self.value == 0

    def quantized(self) -> Decimal:
        return quantize_money(self.value)


# =============================================================================
# WEIGHT AND COUNT UNITS
# =============================================================================


class Quintal(Measure):
    """Weight in quintals (100 kg)."""

    allow_negative = False

    def priced_at(self, rate: "RatePerQuintal") -> "AmountExclGst":
        if not isinstance(rate, RatePerQuintal):
            raise UnitMismatchError(f"Quintal must be priced with RatePerQuintal, got {type(rate).__name__}")
        return AmountExclGst(self.value * rate.value)


class Candy(Measure):
    """Official candy weight derived from quintals via the setting's candy factor."""

    allow_negative = False

    def priced_at(self, rate: "RatePerCandy") -> "AmountExclGst":
        if not isinstance(rate, RatePerCandy):
            raise UnitMismatchError(f"Candy must be priced with RatePerCandy, got {type(rate).__name__}")
        return AmountExclGst(self.value * rate.value)


class ApproxCandy(Measure):
    """Provisional candy weight derived from a bale count (0.48 per bale)."""

    allow_negative = False

    def priced_at(self, rate: "RatePerCandy") -> "AmountExclGst":
        if not isinstance(rate, RatePerCandy):
            raise UnitMismatchError(f"ApproxCandy must be priced with RatePerCandy, got {type(rate).__name__}")
        return AmountExclGst(self.value * rate.value)


class Bale(Measure):
    """A count of bales."""

    allow_negative = False


class Days(Measure):
    """A signed day count (may be negative when computed as a difference)."""


class Percent(Measure):
    """A percentage, stored as the human figure (12.5 means 12.5%)."""

    allow_negative = False

    @property
    def fraction(self) -> Decimal:
        return self.value / Decimal("100")

    def of(self, measure: Measure) -> Measure:
        """Apply this percentage to a measure, keeping the measure's unit."""
        if isinstance(measure, Percent) or not isinstance(measure, Measure):
            raise UnitMismatchError(f"Percent can only be applied to a measure, got {type(measure).__name__}")
        return type(measure)(measure.value * self.fraction)


# =============================================================================
# RATES
# =============================================================================


class RatePerCandy(Measure):
    """Sale rate in currency per candy."""

    allow_negative = False

    def per_quintal(self, candy_factor: Decimal) -> "RatePerQuintal":
        """Equivalent per-quintal rate on the official (final) conversion."""
        return RatePerQuintal(self.value * to_decimal(candy_factor))


class RatePerQuintal(Measure):
    """Sale rate in currency per quintal."""

    allow_negative = False


# =============================================================================
# MONEY
# =============================================================================


class AmountExclGst(Measure):
    """A monetary amount that carries no GST."""


class GstAmount(Measure):
    """The GST portion computed on an AmountExclGst."""


class AmountInclGst(Measure):
    """A GST-inclusive monetary amount."""

    @classmethod
    def from_parts(cls, amount: AmountExclGst, gst: GstAmount) -> "AmountInclGst":
        if not isinstance(amount, AmountExclGst) or not isinstance(gst, GstAmount):
            raise UnitMismatchError(
                f"AmountInclGst requires AmountExclGst and GstAmount, "
                f"got {type(amount).__name__} and {type(gst).__name__}"
            )
        return cls(amount.value + gst.value)

    def less_deposit(self, deposit: AmountExclGst) -> "AmountInclGst":
        """Offset a GST-free deposit (EMD) against this GST-inclusive amount."""
        if not isinstance(deposit, AmountExclGst):
            raise UnitMismatchError(f"Deposit must be AmountExclGst, got {type(deposit).__name__}")
        return AmountInclGst(self.value - deposit.value)


# =============================================================================
# CONVERSIONS
# =============================================================================


def to_candy_final(quintals: Quintal, candy_factor: Decimal) -> Candy:
    """Official conversion used on the final invoice path."""
    if not isinstance(quintals, Quintal):
        raise UnitMismatchError(f"to_candy_final expects Quintal, got {type(quintals).__name__}")
    factor = to_decimal(candy_factor)
    if factor <= 0:
        raise ValueError(f"candy_factor must be positive, got: {factor}")
    return Candy(quintals.value * factor)


def to_candy_approx(bales: Bale) -> ApproxCandy:
    """Provisional conversion used before final weighment."""
    if not isinstance(bales, Bale):
        raise UnitMismatchError(f"to_candy_approx expects Bale, got {type(bales).__name__}")
    return ApproxCandy(bales.value * APPROX_CANDY_PER_BALE)

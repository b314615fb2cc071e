"""
Domain Models for the CCI Financial Rules Engine

These dataclasses provide type-safe representations of the tariff
configuration (CCI Setting), the contract facts supplied by the ERP and the
results handed back to it. All monetary values use the typed Decimal
wrappers from ``units``.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from .errors import InvalidBuyerClassError
from .units import (
    AmountExclGst,
    AmountInclGst,
    Bale,
    Days,
    GstAmount,
    Percent,
    Quintal,
    RatePerCandy,
    to_decimal,
)


def parse_date(value) -> date | None:
    """Parse an ISO date string (or pass through a date). None stays None."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _dec(data: dict, key: str, default=0) -> Decimal:
    return to_decimal(data.get(key, default))


# =============================================================================
# ENUMS
# =============================================================================


class BuyerClass(Enum):
    """Buyer classes with distinct EMD percentages."""

    KVIC = "kvic"
    PRIVATE_MILL = "privateMill"
    TRADER = "trader"

    @classmethod
    def parse(cls, value) -> "BuyerClass":
        if isinstance(value, cls):
            return value
        # Accept both the master-data key ('privateMill') and snake case ('private_mill')
        normalized = str(value).strip().replace("_", "").lower()
        for member in cls:
            if member.value.lower() == normalized:
                return member
        raise InvalidBuyerClassError(value)


class EmdStatus(Enum):
    NOT_PAID = "not_paid"
    PARTIAL = "partial"
    FULL = "full"
    LATE_FULL = "late_full"


class ReminderType(Enum):
    INITIAL = "initial"
    GRACE_EXPIRY = "grace_expiry"
    OVERDUE = "overdue"


class MoistureAdjustmentKind(Enum):
    DISCOUNT = "discount"
    PREMIUM = "premium"
    NONE = "none"


# =============================================================================
# CONFIGURATION MODELS
# =============================================================================


@dataclass(frozen=True)
class ChargeTier:
    """A single tier of a day-proportioned charge."""

    threshold_days: Decimal | None  # cumulative day count; None = uncapped
    monthly_percent: Percent


@dataclass(frozen=True)
class EmdPercentages:
    """EMD percentage per buyer class."""

    kvic: Percent
    private_mill: Percent
    trader: Percent

    def for_buyer(self, buyer_class: BuyerClass) -> Percent:
        if buyer_class is BuyerClass.KVIC:
            return self.kvic
        if buyer_class is BuyerClass.PRIVATE_MILL:
            return self.private_mill
        if buyer_class is BuyerClass.TRADER:
            return self.trader
        raise InvalidBuyerClassError(buyer_class)

    @classmethod
    def from_dict(cls, data: dict) -> "EmdPercentages":
        return cls(
            kvic=Percent(_dec(data, "kvic")),
            private_mill=Percent(to_decimal(data.get("privateMill", data.get("private_mill", 0)))),
            trader=Percent(_dec(data, "trader")),
        )


@dataclass(frozen=True)
class CciSetting:
    """A single version of the CCI tariff configuration.

    Resolution uses the effective date window only; ``is_active`` is
    informational and is never consulted by the engine.
    """

    id: int
    name: str
    effective_from: date
    effective_to: date | None
    version: int
    is_active: bool

    # Core financial parameters
    candy_factor: Decimal
    gst_rate: Percent

    # EMD
    emd_percentages: EmdPercentages
    emd_payment_grace_days: int
    emd_interest_percent: Percent
    emd_late_interest_percent: Percent
    block_do_if_emd_incomplete: bool

    # Carrying charges (tier 2 is uncapped; its day figure is informational)
    carrying_charge_tier1_days: int
    carrying_charge_tier1_percent: Percent
    carrying_charge_tier2_percent: Percent

    # Late lifting charges (cumulative thresholds)
    free_lifting_period_days: int
    late_lifting_tier1_days: int
    late_lifting_tier1_percent: Percent
    late_lifting_tier2_days: int
    late_lifting_tier2_percent: Percent
    late_lifting_tier3_percent: Percent

    # Moisture band
    moisture_lower_limit: Decimal
    moisture_upper_limit: Decimal

    # Lock-in charges per bale
    lockin_charge_min: AmountExclGst
    lockin_charge_max: AmountExclGst

    email_reminder_days: int = 0
    carrying_charge_tier2_days: int | None = None
    cash_discount_percent: Percent = field(default_factory=Percent.zero)
    interest_lc_bg_percent: Percent = field(default_factory=Percent.zero)
    penal_interest_lc_bg_percent: Percent = field(default_factory=Percent.zero)
    moisture_sample_count: int = 0
    contract_period_days: int | None = None
    lifting_period_days: int | None = None

    @property
    def carrying_tiers(self) -> list[ChargeTier]:
        return [
            ChargeTier(Decimal(self.carrying_charge_tier1_days), self.carrying_charge_tier1_percent),
            ChargeTier(None, self.carrying_charge_tier2_percent),
        ]

    @property
    def late_lifting_tiers(self) -> list[ChargeTier]:
        return [
            ChargeTier(Decimal(self.late_lifting_tier1_days), self.late_lifting_tier1_percent),
            ChargeTier(Decimal(self.late_lifting_tier2_days), self.late_lifting_tier2_percent),
            ChargeTier(None, self.late_lifting_tier3_percent),
        ]

    @property
    def version_info(self) -> str:
        """Version string for audit trails."""
        return f"{self.name} (v{self.version}) - Effective: {self.effective_from.isoformat()}"

    def covers(self, on_date: date) -> bool:
        return self.effective_from <= on_date and (
            self.effective_to is None or on_date <= self.effective_to
        )

    @classmethod
    def from_dict(cls, data: dict) -> "CciSetting":
        tier2_days = data.get("carrying_charge_tier2_days")
        contract_period = data.get("contract_period_days")
        lifting_period = data.get("lifting_period_days")
        return cls(
            id=data.get("id", 0),
            name=data["name"],
            # Support both snake case and the legacy master-data camel case keys
            effective_from=parse_date(data.get("effective_from", data.get("effectiveFrom"))),
            effective_to=parse_date(data.get("effective_to", data.get("effectiveTo"))),
            version=int(data.get("version", 1)),
            is_active=data.get("is_active", data.get("isActive", True)),
            candy_factor=to_decimal(data["candy_factor"]),
            gst_rate=Percent(to_decimal(data["gst_rate"])),
            emd_percentages=EmdPercentages.from_dict(data["emd_by_buyer_type"]),
            emd_payment_grace_days=int(
                data.get("emd_payment_grace_days", data.get("emd_payment_days", 0))
            ),
            emd_interest_percent=Percent(_dec(data, "emd_interest_percent")),
            emd_late_interest_percent=Percent(_dec(data, "emd_late_interest_percent")),
            block_do_if_emd_incomplete=data.get(
                "block_do_if_emd_incomplete", data.get("emd_block_do_if_not_full", True)
            ),
            carrying_charge_tier1_days=int(data["carrying_charge_tier1_days"]),
            carrying_charge_tier1_percent=Percent(to_decimal(data["carrying_charge_tier1_percent"])),
            carrying_charge_tier2_percent=Percent(to_decimal(data["carrying_charge_tier2_percent"])),
            free_lifting_period_days=int(data.get("free_lifting_period_days", 0)),
            late_lifting_tier1_days=int(data["late_lifting_tier1_days"]),
            late_lifting_tier1_percent=Percent(to_decimal(data["late_lifting_tier1_percent"])),
            late_lifting_tier2_days=int(data["late_lifting_tier2_days"]),
            late_lifting_tier2_percent=Percent(to_decimal(data["late_lifting_tier2_percent"])),
            late_lifting_tier3_percent=Percent(to_decimal(data["late_lifting_tier3_percent"])),
            moisture_lower_limit=to_decimal(data["moisture_lower_limit"]),
            moisture_upper_limit=to_decimal(data["moisture_upper_limit"]),
            lockin_charge_min=AmountExclGst(_dec(data, "lockin_charge_min")),
            lockin_charge_max=AmountExclGst(_dec(data, "lockin_charge_max")),
            email_reminder_days=int(data.get("email_reminder_days", 0)),
            carrying_charge_tier2_days=int(tier2_days) if tier2_days is not None else None,
            cash_discount_percent=Percent(
                to_decimal(data.get("cash_discount_percent", data.get("cash_discount_percentage", 0)))
            ),
            interest_lc_bg_percent=Percent(_dec(data, "interest_lc_bg_percent")),
            penal_interest_lc_bg_percent=Percent(_dec(data, "penal_interest_lc_bg_percent")),
            moisture_sample_count=int(data.get("moisture_sample_count", 0)),
            contract_period_days=int(contract_period) if contract_period is not None else None,
            lifting_period_days=int(lifting_period) if lifting_period is not None else None,
        )


# =============================================================================
# INPUT MODELS
# =============================================================================


@dataclass
class ContractFacts:
    """Snapshot of contract facts supplied by the ERP. Never mutated."""

    contract_date: date
    buyer_class: BuyerClass
    total_bales: Bale
    rate_per_candy: RatePerCandy
    emd_paid: AmountExclGst = field(default_factory=AmountExclGst.zero)
    emd_payment_date: date | None = None
    do_bales: Bale | None = None
    days_held: Days = field(default_factory=Days.zero)
    days_late: Days = field(default_factory=Days.zero)
    delivered_quintals: Quintal | None = None
    average_moisture: Decimal | None = None
    moisture_samples: list[Decimal] = field(default_factory=list)
    seller_state: str | None = None
    buyer_state: str | None = None
    as_of_date: date | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "ContractFacts":
        do_bales = data.get("do_bales")
        delivered = data.get("delivered_quintals", data.get("net_delivery_weight"))
        moisture = data.get("average_moisture")
        return cls(
            contract_date=parse_date(data["contract_date"]),
            buyer_class=BuyerClass.parse(data.get("buyer_class", data.get("buyer_type"))),
            total_bales=Bale(to_decimal(data["total_bales"])),
            rate_per_candy=RatePerCandy(to_decimal(data["rate_per_candy"])),
            emd_paid=AmountExclGst(_dec(data, "emd_paid")),
            emd_payment_date=parse_date(data.get("emd_payment_date")),
            do_bales=Bale(to_decimal(do_bales)) if do_bales is not None else None,
            days_held=Days(_dec(data, "days_held")),
            days_late=Days(_dec(data, "days_late")),
            delivered_quintals=Quintal(to_decimal(delivered)) if delivered is not None else None,
            average_moisture=to_decimal(moisture) if moisture is not None else None,
            moisture_samples=[to_decimal(s) for s in data.get("moisture_samples", [])],
            seller_state=data.get("seller_state"),
            buyer_state=data.get("buyer_state"),
            as_of_date=parse_date(data.get("as_of_date")),
        )


@dataclass
class CalculationInput:
    """Complete input for one calculation request."""

    settings: list[CciSetting]
    contract: ContractFacts

    @classmethod
    def from_dict(cls, data: dict) -> "CalculationInput":
        return cls(
            settings=[CciSetting.from_dict(s) for s in data["settings"]],
            contract=ContractFacts.from_dict(data["contract"]),
        )


# =============================================================================
# OUTPUT / RESULT MODELS
# =============================================================================


@dataclass(frozen=True)
class DoEligibility:
    """Whether a Delivery Order may be created, with the EMD shortfall if not."""

    eligible: bool
    shortfall: AmountExclGst | None = None
    reason: str | None = None


@dataclass(frozen=True)
class MoistureAdjustment:
    kind: MoistureAdjustmentKind
    amount: AmountExclGst


@dataclass(frozen=True)
class CarryingAssessment:
    """Carrying charge together with whether it is only informational."""

    amount: AmountExclGst
    informational_only: bool
    note: str | None = None


@dataclass(frozen=True)
class CarryingBreakdown:
    """Carrying charge on unlifted bales with per-quantity display figures."""

    total_excl_gst: AmountExclGst
    total_gst: GstAmount
    total_incl_gst: AmountInclGst
    per_bale_excl_gst: AmountExclGst
    per_100_bales_excl_gst: AmountExclGst
    per_100_bales_gst: GstAmount
    per_100_bales_incl_gst: AmountInclGst


@dataclass(frozen=True)
class CarryingForDo:
    excl_gst: AmountExclGst
    gst: GstAmount
    incl_gst: AmountInclGst


@dataclass(frozen=True)
class DoPayable:
    """What the buyer pays for a DO once its EMD allocation is offset."""

    do_value_excl_gst: AmountExclGst
    do_gst: GstAmount
    do_value_incl_gst: AmountInclGst
    less_emd_allocated: AmountExclGst
    do_payable_after_emd: AmountInclGst


@dataclass(frozen=True)
class GstBreakdown:
    """Intra-state (CGST + SGST) or inter-state (IGST) split of GST."""

    taxable_amount: AmountExclGst
    cgst: GstAmount
    sgst: GstAmount
    igst: GstAmount
    total_gst: GstAmount
    total_incl_gst: AmountInclGst
    gst_rate: Percent
    is_inter_state: bool


@dataclass(frozen=True)
class InvoiceTotals:
    """Final invoice through the weight -> candy -> rate -> moisture -> GST pipeline."""

    candy_weight: Decimal
    net_invoice_excl_gst: AmountExclGst
    moisture: MoistureAdjustment
    amount_after_moisture: AmountExclGst
    gst: GstAmount
    total_incl_gst: AmountInclGst


@dataclass
class EmdResult:
    """Results of the EMD step."""

    emd_percent: Percent
    emd_required: AmountExclGst
    emd_paid: AmountExclGst
    grace_expiry: date
    status: EmdStatus
    late_days: Days
    late_interest: AmountExclGst
    reminder: ReminderType | None
    do_eligibility: DoEligibility


@dataclass
class AllocationResult:
    """Results of the per-bale allocation step."""

    do_bales: Bale
    unlifted_bales: Bale
    do_value_approx: AmountExclGst
    emd_per_bale: AmountExclGst
    emd_allocated_for_do: AmountExclGst
    emd_allocated_to_unlifted: AmountExclGst
    unlifted_value_for_carrying: AmountExclGst
    carrying: CarryingBreakdown | None
    carrying_for_do: CarryingForDo | None
    do_payable: DoPayable


@dataclass
class ProcessingContext:
    """
    Holds all intermediate state during a calculation.
    This is the "bag" that flows through the pipeline.
    """

    # Input (immutable during processing)
    contract: ContractFacts
    setting: CciSetting

    # Step results (populated as we go)
    contract_value_approx: AmountExclGst = field(default_factory=AmountExclGst.zero)
    emd: EmdResult | None = None
    allocation: AllocationResult | None = None
    carrying: CarryingAssessment | None = None
    late_lifting_charge: AmountExclGst = field(default_factory=AmountExclGst.zero)
    late_lifting_base: AmountExclGst = field(default_factory=AmountExclGst.zero)
    invoice: InvoiceTotals | None = None
    gst_breakdown: GstBreakdown | None = None


@dataclass
class CalculationResult:
    """Final output of a calculation request."""

    setting_summary: dict
    contract_summary: dict
    calculations: dict
    delivery_order: dict | None = None
    invoice: dict | None = None

"""
Output Builder

Constructs the final API response from processing context.
"""

from decimal import Decimal

from .models import CalculationResult, CciSetting, EmdStatus, ProcessingContext
from .units import Measure, quantize_money


def to_money(value) -> float:
    """Convert a Decimal or unit value to float with 2 decimal places."""
    if isinstance(value, Measure):
        value = value.value
    return float(quantize_money(Decimal(value)))


def _fmt(value) -> str:
    """Format a number as rupee string for descriptions."""
    return f"Rs {value:,.2f}"


def _pct(value) -> str:
    if isinstance(value, Measure):
        value = value.value
    return f"{value.normalize():f}%"


def setting_summary(setting: CciSetting) -> dict:
    """Identify the setting version a result was computed against."""
    return {
        "id": setting.id,
        "name": setting.name,
        "version": setting.version,
        "effective_from": setting.effective_from.isoformat(),
        "effective_to": setting.effective_to.isoformat() if setting.effective_to else None,
        "version_info": setting.version_info,
        "candy_factor": float(setting.candy_factor),
        "gst_rate": float(setting.gst_rate.value),
    }


class OutputBuilder:
    """Builds the final output response."""

    def build(self, ctx: ProcessingContext) -> CalculationResult:
        """Construct the complete result from processing context."""
        return CalculationResult(
            setting_summary=setting_summary(ctx.setting),
            contract_summary=self._build_contract_summary(ctx),
            calculations=self._build_calculations(ctx),
            delivery_order=self._build_delivery_order(ctx),
            invoice=self._build_invoice(ctx),
        )

    def _build_contract_summary(self, ctx: ProcessingContext) -> dict:
        contract = ctx.contract
        return {
            "contract_date": contract.contract_date.isoformat(),
            "buyer_class": contract.buyer_class.value,
            "total_bales": float(contract.total_bales.value),
            "rate_per_candy": to_money(contract.rate_per_candy),
            "do_bales": float(contract.do_bales.value) if contract.do_bales is not None else None,
            "days_held": float(contract.days_held.value),
            "days_late": float(contract.days_late.value),
        }

    def _build_calculations(self, ctx: ProcessingContext) -> dict:
        """Build calculations section with value and dynamic description for each field."""
        setting = ctx.setting
        contract = ctx.contract
        emd = ctx.emd
        allocation = ctx.allocation
        carrying = ctx.carrying

        contract_value = to_money(ctx.contract_value_approx)
        required = to_money(emd.emd_required)
        eligibility = emd.do_eligibility

        return {
            "contract_value_approx": {
                "value": contract_value,
                "description": f"{contract.total_bales.value} bales × 0.48 candy × {_fmt(to_money(contract.rate_per_candy))} = {_fmt(contract_value)} (provisional, excl GST)"
            },

            # EMD
            "emd_percent": {
                "value": float(emd.emd_percent.value),
                "description": f"EMD rate for buyer class '{contract.buyer_class.value}'"
            },
            "emd_required": {
                "value": required,
                "description": f"{_pct(emd.emd_percent)} × {_fmt(contract_value)} = {_fmt(required)}. GST is not applicable on EMD"
            },
            "emd_paid": {
                "value": to_money(emd.emd_paid),
                "description": f"EMD received so far: {_fmt(to_money(emd.emd_paid))} of {_fmt(required)}"
            },
            "emd_status": {
                "value": emd.status.value,
                "description": f"Paid after grace expiry {emd.grace_expiry.isoformat()}" if emd.status is EmdStatus.LATE_FULL else f"EMD payment status against grace expiry {emd.grace_expiry.isoformat()}"
            },
            "emd_grace_expiry": {
                "value": emd.grace_expiry.isoformat(),
                "description": f"contract date {contract.contract_date.isoformat()} + {setting.emd_payment_grace_days} grace days"
            },
            "emd_late_days": {
                "value": float(emd.late_days.value),
                "description": "Days past the grace expiry"
            },
            "emd_late_interest": {
                "value": to_money(emd.late_interest),
                "description": f"{_fmt(required)} × {_pct(setting.emd_late_interest_percent)} p.a. × {emd.late_days.value}/365 = {_fmt(to_money(emd.late_interest))}" if emd.late_days.value > 0 else "No late interest - EMD within grace period"
            },
            "emd_reminder": {
                "value": emd.reminder.value if emd.reminder else None,
                "description": f"Reminder due as of {contract.as_of_date.isoformat()}" if emd.reminder else "No EMD reminder applicable"
            },
            "do_eligible": {
                "value": eligibility.eligible,
                "description": eligibility.reason if not eligibility.eligible else ("Full EMD received - Delivery Order allowed" if setting.block_do_if_emd_incomplete else "DO not gated on EMD by this setting")
            },
            "emd_shortfall": {
                "value": to_money(eligibility.shortfall) if eligibility.shortfall is not None else 0.0,
                "description": f"{_fmt(required)} - {_fmt(to_money(emd.emd_paid))} = {_fmt(to_money(eligibility.shortfall))}" if eligibility.shortfall is not None else "No EMD shortfall"
            },

            # Allocation and carrying
            "emd_per_bale": {
                "value": to_money(allocation.emd_per_bale),
                "description": f"{_fmt(required)} ÷ {contract.total_bales.value} bales = {_fmt(to_money(allocation.emd_per_bale))} per bale"
            },
            "unlifted_value_for_carrying": {
                "value": to_money(allocation.unlifted_value_for_carrying),
                "description": f"value of {allocation.unlifted_bales.value} unlifted bales - EMD allocated to them ({_fmt(to_money(allocation.emd_allocated_to_unlifted))}) = {_fmt(to_money(allocation.unlifted_value_for_carrying))}"
            },
            "carrying_charge": {
                "value": to_money(carrying.amount),
                "description": f"Carrying for {contract.days_held.value} days at {_pct(setting.carrying_charge_tier1_percent)}/month up to {setting.carrying_charge_tier1_days} days, {_pct(setting.carrying_charge_tier2_percent)}/month beyond"
            },
            "carrying_informational_only": {
                "value": carrying.informational_only,
                "description": carrying.note or "Carrying charge is billable"
            },
            "carrying_breakdown": self._build_carrying_breakdown(ctx),

            # Late lifting
            "late_lifting_charge": {
                "value": to_money(ctx.late_lifting_charge),
                "description": f"{contract.days_late.value} days past the {setting.free_lifting_period_days}-day free period on {_fmt(to_money(ctx.late_lifting_base))} ({'final invoice' if ctx.invoice else 'provisional value'})" if contract.days_late.value > 0 else "Lifted within the free lifting period"
            },
        }

    def _build_carrying_breakdown(self, ctx: ProcessingContext) -> dict | None:
        breakdown = ctx.allocation.carrying
        if breakdown is None:
            return None
        return {
            "total_excl_gst": to_money(breakdown.total_excl_gst),
            "total_gst": to_money(breakdown.total_gst),
            "total_incl_gst": to_money(breakdown.total_incl_gst),
            "per_bale_excl_gst": to_money(breakdown.per_bale_excl_gst),
            "per_100_bales_excl_gst": to_money(breakdown.per_100_bales_excl_gst),
            "per_100_bales_gst": to_money(breakdown.per_100_bales_gst),
            "per_100_bales_incl_gst": to_money(breakdown.per_100_bales_incl_gst),
        }

    def _build_delivery_order(self, ctx: ProcessingContext) -> dict | None:
        """Payment advice for the DO quantity, if one was requested."""
        if ctx.contract.do_bales is None:
            return None

        allocation = ctx.allocation
        payable = allocation.do_payable
        carrying_for_do = allocation.carrying_for_do

        result = {
            "do_bales": float(allocation.do_bales.value),
            "unlifted_bales": float(allocation.unlifted_bales.value),
            "eligible": ctx.emd.do_eligibility.eligible,
            "do_value_excl_gst": to_money(payable.do_value_excl_gst),
            "do_gst": to_money(payable.do_gst),
            "do_value_incl_gst": to_money(payable.do_value_incl_gst),
            "less_emd_allocated": to_money(payable.less_emd_allocated),
            "do_payable_after_emd": to_money(payable.do_payable_after_emd),
            "carrying_for_do": None,
        }

        if carrying_for_do is not None:
            result["carrying_for_do"] = {
                "excl_gst": to_money(carrying_for_do.excl_gst),
                "gst": to_money(carrying_for_do.gst),
                "incl_gst": to_money(carrying_for_do.incl_gst),
            }
            result["total_payable_for_do"] = to_money(
                payable.do_payable_after_emd + carrying_for_do.incl_gst
            )
        else:
            result["total_payable_for_do"] = to_money(payable.do_payable_after_emd)

        return result

    def _build_invoice(self, ctx: ProcessingContext) -> dict | None:
        """Final invoice figures, if delivered weight was supplied."""
        invoice = ctx.invoice
        if invoice is None:
            return None

        result = {
            "delivered_quintals": float(ctx.contract.delivered_quintals.value),
            "candy_weight": float(invoice.candy_weight),
            "net_invoice_excl_gst": to_money(invoice.net_invoice_excl_gst),
            "moisture_adjustment": {
                "kind": invoice.moisture.kind.value,
                "amount": to_money(invoice.moisture.amount),
            },
            "amount_after_moisture": to_money(invoice.amount_after_moisture),
            "gst": to_money(invoice.gst),
            "total_incl_gst": to_money(invoice.total_incl_gst),
        }

        gst = ctx.gst_breakdown
        if gst is not None:
            result["gst_breakdown"] = {
                "is_inter_state": gst.is_inter_state,
                "cgst": to_money(gst.cgst),
                "sgst": to_money(gst.sgst),
                "igst": to_money(gst.igst),
                "total_gst": to_money(gst.total_gst),
                "total_incl_gst": to_money(gst.total_incl_gst),
            }

        return result

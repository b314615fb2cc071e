"""
CCI Processor - Main Orchestrator

Coordinates the tariff calculation pipeline through discrete, testable steps.
The active setting is resolved once per request and reused by every step.
"""

import json
from typing import Any, Dict

from .calculators import (
    BaleAllocationCalculator,
    EmdCalculator,
    InvoiceCalculator,
    MoistureCalculator,
    TieredChargeCalculator,
)
from .errors import CciEngineError
from .models import (
    AllocationResult,
    CalculationInput,
    CalculationResult,
    CciSetting,
    EmdResult,
    ProcessingContext,
    parse_date,
)
from .output import OutputBuilder, setting_summary
from .resolver import resolve_active_setting
from .units import Bale, Days
from .validators import InputValidator


class CciProcessor:
    """
    Main orchestrator for CCI tariff calculations.

    Implements a clear pipeline pattern:
    1. Validate Input
    2. Resolve Active Setting
    3. Provisional Contract Value (0.48 candy per bale)
    4. EMD Sizing, Status and DO Eligibility
    5. Per-Bale Allocation and Carrying Charges
    6. Final Invoice Totals (when weighment is known)
    7. Late Lifting Charges
    8. Build Output
    """

    def __init__(self):
        self.validator = InputValidator()
        self.tiered_calculator = TieredChargeCalculator()
        self.emd_calculator = EmdCalculator()
        self.moisture_calculator = MoistureCalculator()
        self.invoice_calculator = InvoiceCalculator(self.moisture_calculator)
        self.allocation_calculator = BaleAllocationCalculator(self.tiered_calculator)
        self.output_builder = OutputBuilder()

    def process(self, input_data: CalculationInput) -> CalculationResult:
        """
        Run a contract snapshot through the complete pipeline.

        Args:
            input_data: CalculationInput with the setting versions and contract facts

        Returns:
            CalculationResult with all computed amounts and flags
        """
        # Step 1: Validate
        self.validator.validate(input_data)

        # Step 2: Resolve the setting once for the contract date
        contract = input_data.contract
        setting = resolve_active_setting(input_data.settings, contract.contract_date)
        ctx = ProcessingContext(contract=contract, setting=setting)

        # Step 3: Provisional contract value
        ctx.contract_value_approx = self.allocation_calculator.approx_value(
            contract.total_bales, contract.rate_per_candy
        )

        # Step 4: EMD
        ctx.emd = self._calculate_emd(ctx)

        # Step 5: Per-bale allocation and carrying
        ctx.allocation = self._allocate(ctx)
        ctx.carrying = self.tiered_calculator.carrying_with_emd_status(
            setting,
            ctx.allocation.unlifted_value_for_carrying,
            contract.days_held,
            ctx.emd.emd_paid,
            ctx.emd.emd_required,
        )

        # Step 6: Final invoice
        if contract.delivered_quintals is not None:
            ctx.invoice = self.invoice_calculator.calculate(
                setting,
                contract.delivered_quintals,
                contract.rate_per_candy,
                self._average_moisture(ctx),
            )
            if contract.seller_state is not None:
                ctx.gst_breakdown = self.invoice_calculator.gst_breakdown(
                    setting,
                    ctx.invoice.amount_after_moisture,
                    contract.seller_state,
                    contract.buyer_state,
                )

        # Step 7: Late lifting, on the final invoice once weighment is known
        ctx.late_lifting_base = (
            ctx.invoice.amount_after_moisture if ctx.invoice else ctx.contract_value_approx
        )
        ctx.late_lifting_charge = self.tiered_calculator.late_lifting_charge(
            setting, ctx.late_lifting_base, contract.days_late
        )

        # Step 8: Build output
        return self.output_builder.build(ctx)

    def process_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Process a calculation request from raw dictionary input.

        Convenience method for API usage.
        """
        input_data = CalculationInput.from_dict(data)
        result = self.process(input_data)
        return self._result_to_dict(result)

    def resolve_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Resolve which setting version governs ``data['on_date']``."""
        settings = [CciSetting.from_dict(s) for s in data["settings"]]
        for setting in settings:
            self.validator.validate_setting(setting)
        setting = resolve_active_setting(settings, parse_date(data["on_date"]))
        return setting_summary(setting)

    def _calculate_emd(self, ctx: ProcessingContext) -> EmdResult:
        """Size EMD on the provisional value and classify payment status."""
        setting = ctx.setting
        contract = ctx.contract
        emd = self.emd_calculator

        required = emd.emd_required(setting, ctx.contract_value_approx, contract.buyer_class)
        grace_expiry = emd.grace_period_expiry(setting, contract.contract_date)
        status = emd.emd_status(required, contract.emd_paid, contract.emd_payment_date, grace_expiry)

        # Lateness runs to the payment date, or to the as-of date while still unpaid
        late_until = contract.emd_payment_date
        if late_until is None and contract.as_of_date is not None and contract.emd_paid < required:
            late_until = contract.as_of_date
        late_days = emd.late_days(late_until, grace_expiry) if late_until else Days.zero()

        reminder = None
        if contract.as_of_date is not None:
            reminder = emd.reminder_type(
                setting, contract.contract_date, contract.emd_paid, required, contract.as_of_date
            )

        return EmdResult(
            emd_percent=emd.emd_percent(setting, contract.buyer_class),
            emd_required=required,
            emd_paid=contract.emd_paid,
            grace_expiry=grace_expiry,
            status=status,
            late_days=late_days,
            late_interest=emd.late_interest(setting, required, late_days),
            reminder=reminder,
            do_eligibility=emd.check_do_eligibility(setting, required, contract.emd_paid),
        )

    def _allocate(self, ctx: ProcessingContext) -> AllocationResult:
        """Allocate EMD per bale and break carrying charges down by quantity."""
        setting = ctx.setting
        contract = ctx.contract
        calc = self.allocation_calculator

        do_bales = contract.do_bales if contract.do_bales is not None else Bale.zero()
        unlifted = calc.unlifted_bales(contract.total_bales, do_bales)
        do_value = calc.approx_value(do_bales, contract.rate_per_candy)

        per_bale = calc.emd_per_bale(ctx.emd.emd_required, contract.total_bales)
        allocated_for_do = calc.emd_allocated_for_do(per_bale, do_bales)
        unlifted_value = calc.unlifted_value_for_carrying(
            ctx.contract_value_approx, do_value, per_bale, unlifted
        )

        carrying = None
        carrying_for_do = None
        if not unlifted.is_zero():
            carrying = calc.carrying_with_breakdown(setting, unlifted_value, unlifted, contract.days_held)
            carrying_for_do = calc.carrying_for_do(carrying.per_bale_excl_gst, do_bales, setting.gst_rate)

        return AllocationResult(
            do_bales=do_bales,
            unlifted_bales=unlifted,
            do_value_approx=do_value,
            emd_per_bale=per_bale,
            emd_allocated_for_do=allocated_for_do,
            emd_allocated_to_unlifted=calc.emd_allocated_for_do(per_bale, unlifted),
            unlifted_value_for_carrying=unlifted_value,
            carrying=carrying,
            carrying_for_do=carrying_for_do,
            do_payable=calc.do_payable_after_emd(do_value, setting.gst_rate, allocated_for_do),
        )

    def _average_moisture(self, ctx: ProcessingContext):
        contract = ctx.contract
        if contract.average_moisture is not None:
            return contract.average_moisture
        if contract.moisture_samples:
            self.moisture_calculator.validate_samples(ctx.setting, contract.moisture_samples)
            return self.moisture_calculator.average_moisture(contract.moisture_samples)
        return None

    def _result_to_dict(self, result: CalculationResult) -> Dict[str, Any]:
        """Convert CalculationResult to dictionary for API response."""
        output = {
            "setting": result.setting_summary,
            "contract_summary": result.contract_summary,
            "calculations": result.calculations,
        }
        if result.delivery_order:
            output["delivery_order"] = result.delivery_order
        if result.invoice:
            output["invoice"] = result.invoice
        return output


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def calculate_from_dict(input_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Run a calculation from a Python dict and return a Python dict.
    """
    processor = CciProcessor()
    return processor.process_from_dict(input_data)


def calculate_from_json(json_input: str) -> str:
    """
    Run a calculation from a JSON string and return a JSON string.
    Errors are reported as JSON with a status and, for domain errors, a code.
    """
    try:
        input_data = json.loads(json_input)
        processor = CciProcessor()
        result = processor.process_from_dict(input_data)
        return json.dumps(result, indent=2)

    except CciEngineError as e:
        error_response = {"error": str(e), "code": e.code, "status": "validation_failed"}
        return json.dumps(error_response, indent=2)

    except (ValueError, KeyError) as e:
        error_response = {"error": str(e), "status": "validation_failed"}
        return json.dumps(error_response, indent=2)

    except Exception as e:
        error_response = {"error": str(e), "status": "failed"}
        return json.dumps(error_response, indent=2)

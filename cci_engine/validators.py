"""
Input Validation for the CCI Financial Rules Engine

Validates all input data before processing begins.
Raises ValueError (or a named CciEngineError subclass) with clear messages for
any constraint violations.
"""

from .errors import DivisionByZeroError, NegativeInputError
from .models import CalculationInput, CciSetting, ContractFacts


class InputValidator:
    """Validates calculation input according to business rules."""

    def validate(self, input_data: CalculationInput) -> None:
        """
        Run all validations. Raises ValueError if any check fails.
        """
        if not input_data.settings:
            raise ValueError("At least one CCI setting is required")

        for setting in input_data.settings:
            self.validate_setting(setting)

        self._validate_contract(input_data.contract)

    def validate_setting(self, setting: CciSetting) -> None:
        """Validate a single CCI setting record."""
        if not setting.name or len(setting.name) > 100:
            raise ValueError("Setting name is required and must be less than 100 characters")

        if setting.effective_from is None:
            raise ValueError(f"effective_from is required for setting '{setting.name}'")

        if setting.effective_to is not None and setting.effective_to < setting.effective_from:
            raise ValueError(
                f"effective_to ({setting.effective_to}) is before effective_from "
                f"({setting.effective_from}) for setting '{setting.name}'"
            )

        if setting.version <= 0:
            raise ValueError(f"Version must be positive, got: {setting.version}")

        if setting.candy_factor <= 0:
            raise ValueError(f"Candy factor must be positive, got: {setting.candy_factor}")

        if setting.gst_rate.value > 100:
            raise ValueError(f"GST rate cannot exceed 100%, got: {setting.gst_rate.value}")

        for label, days in (
            ("emd_payment_grace_days", setting.emd_payment_grace_days),
            ("free_lifting_period_days", setting.free_lifting_period_days),
            ("email_reminder_days", setting.email_reminder_days),
        ):
            if days < 0:
                raise NegativeInputError(f"{label} cannot be negative, got: {days}")

        if setting.carrying_charge_tier1_days <= 0:
            raise ValueError(
                f"carrying_charge_tier1_days must be positive, got: {setting.carrying_charge_tier1_days}"
            )

        if not (0 < setting.late_lifting_tier1_days < setting.late_lifting_tier2_days):
            raise ValueError(
                "late lifting thresholds must satisfy 0 < tier1_days < tier2_days, got: "
                f"{setting.late_lifting_tier1_days}, {setting.late_lifting_tier2_days}"
            )

        if setting.moisture_lower_limit < 0:
            raise NegativeInputError(
                f"moisture_lower_limit cannot be negative, got: {setting.moisture_lower_limit}"
            )

        if setting.moisture_lower_limit > setting.moisture_upper_limit:
            raise ValueError(
                f"moisture_lower_limit ({setting.moisture_lower_limit}) cannot exceed "
                f"moisture_upper_limit ({setting.moisture_upper_limit})"
            )

        if setting.lockin_charge_min > setting.lockin_charge_max:
            raise ValueError("lockin_charge_min cannot exceed lockin_charge_max")

    def _validate_contract(self, contract: ContractFacts) -> None:
        """Validate contract-level constraints."""
        if contract.total_bales.is_zero():
            raise DivisionByZeroError("total_bales must be positive")

        if contract.emd_paid.value < 0:
            raise NegativeInputError(f"emd_paid cannot be negative, got: {contract.emd_paid.value}")

        if contract.days_held.value < 0:
            raise NegativeInputError(f"days_held cannot be negative, got: {contract.days_held.value}")

        if contract.days_late.value < 0:
            raise NegativeInputError(f"days_late cannot be negative, got: {contract.days_late.value}")

        if contract.do_bales is not None and contract.do_bales > contract.total_bales:
            raise ValueError(
                f"do_bales ({contract.do_bales.value}) cannot exceed "
                f"total_bales ({contract.total_bales.value})"
            )

        if contract.average_moisture is not None and contract.average_moisture < 0:
            raise NegativeInputError(
                f"average_moisture cannot be negative, got: {contract.average_moisture}"
            )

        if contract.average_moisture is not None and contract.moisture_samples:
            raise ValueError("Provide either average_moisture or moisture_samples, not both")

        if (contract.seller_state is None) != (contract.buyer_state is None):
            raise ValueError("seller_state and buyer_state must be provided together")

        if (
            contract.emd_payment_date is not None
            and contract.emd_payment_date < contract.contract_date
        ):
            raise ValueError(
                f"emd_payment_date ({contract.emd_payment_date}) is before "
                f"contract_date ({contract.contract_date})"
            )

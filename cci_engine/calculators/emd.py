"""
EMD & Delivery-Order Eligibility Calculator

Earnest Money Deposit sizing by buyer class, grace period and lateness
tracking, reminder classification, and the DO gate.

EMD is never computed on, nor subject to, GST: every amount in and out of
this module is an AmountExclGst.
"""

import math
from datetime import date, timedelta

from ..errors import NegativeInputError, UnitMismatchError
from ..models import BuyerClass, CciSetting, DoEligibility, EmdStatus, ReminderType
from ..units import DAYS_PER_YEAR, AmountExclGst, Days, Percent


class EmdCalculator:
    """EMD calculations driven by the active CCI setting."""

    def emd_percent(self, setting: CciSetting, buyer_class: BuyerClass) -> Percent:
        return setting.emd_percentages.for_buyer(BuyerClass.parse(buyer_class))

    def emd_required(
        self,
        setting: CciSetting,
        invoice_amount_excl_gst: AmountExclGst,
        buyer_class: BuyerClass,
    ) -> AmountExclGst:
        """EMD = invoice amount (excl GST) x buyer-class percent."""
        if not isinstance(invoice_amount_excl_gst, AmountExclGst):
            raise UnitMismatchError(
                f"EMD is computed on AmountExclGst only, got: {type(invoice_amount_excl_gst).__name__}"
            )
        if invoice_amount_excl_gst.value < 0:
            raise NegativeInputError(
                f"invoice amount cannot be negative, got: {invoice_amount_excl_gst.value}"
            )
        return self.emd_percent(setting, buyer_class).of(invoice_amount_excl_gst)

    @staticmethod
    def grace_period_expiry(setting: CciSetting, contract_date: date) -> date:
        return contract_date + timedelta(days=setting.emd_payment_grace_days)

    @staticmethod
    def emd_status(
        required: AmountExclGst,
        paid: AmountExclGst,
        payment_date: date | None = None,
        grace_expiry: date | None = None,
    ) -> EmdStatus:
        """
        NOT_PAID when nothing is paid, PARTIAL below the requirement,
        otherwise FULL, or LATE_FULL when paid after the grace expiry.
        """
        if paid.value < 0:
            raise NegativeInputError(f"EMD paid cannot be negative, got: {paid.value}")

        if paid.is_zero():
            return EmdStatus.NOT_PAID
        if paid < required:
            return EmdStatus.PARTIAL
        if payment_date is not None and grace_expiry is not None and payment_date > grace_expiry:
            return EmdStatus.LATE_FULL
        return EmdStatus.FULL

    @staticmethod
    def late_days(payment_date: date, grace_expiry: date) -> Days:
        """Whole days (rounded up) the payment fell after the grace expiry."""
        elapsed = (payment_date - grace_expiry) / timedelta(days=1)
        return Days(max(0, math.ceil(elapsed)))

    def late_interest(
        self,
        setting: CciSetting,
        emd_amount: AmountExclGst,
        late_days: Days,
    ) -> AmountExclGst:
        """Simple interest at the annual late rate: amount x rate x days/365."""
        if late_days.value <= 0:
            return AmountExclGst.zero()
        return setting.emd_late_interest_percent.of(emd_amount) * late_days.value / DAYS_PER_YEAR

    def emd_interest(
        self,
        setting: CciSetting,
        emd_amount_paid: AmountExclGst,
        days_held: Days,
    ) -> AmountExclGst:
        """Interest credited on timely EMD: amount x rate x days/365."""
        if days_held.value < 0:
            raise NegativeInputError(f"days_held cannot be negative, got: {days_held.value}")
        return setting.emd_interest_percent.of(emd_amount_paid) * days_held.value / DAYS_PER_YEAR

    @staticmethod
    def check_do_eligibility(
        setting: CciSetting,
        emd_required: AmountExclGst,
        emd_paid: AmountExclGst,
    ) -> DoEligibility:
        """
        The DO gate. When the setting blocks DOs on incomplete EMD, a DO is
        only allowed once EMD paid covers EMD required; otherwise always allowed.
        """
        if not setting.block_do_if_emd_incomplete:
            return DoEligibility(eligible=True)

        if emd_paid >= emd_required:
            return DoEligibility(eligible=True)

        shortfall = emd_required - emd_paid
        return DoEligibility(
            eligible=False,
            shortfall=shortfall,
            reason=(
                f"Full EMD not received: paid {emd_paid.quantized()} of "
                f"{emd_required.quantized()}, shortfall {shortfall.quantized()}"
            ),
        )

    @staticmethod
    def reminder_type(
        setting: CciSetting,
        contract_date: date,
        emd_paid: AmountExclGst,
        emd_required: AmountExclGst,
        on_date: date,
    ) -> ReminderType | None:
        """
        Classify which EMD reminder applies on ``on_date``.

        No reminder once EMD is complete. Otherwise INITIAL inside the grace
        period, GRACE_EXPIRY on its last day and OVERDUE after it.
        """
        if emd_paid >= emd_required:
            return None

        elapsed = (on_date - contract_date).days
        if elapsed < setting.emd_payment_grace_days:
            return ReminderType.INITIAL
        if elapsed == setting.emd_payment_grace_days:
            return ReminderType.GRACE_EXPIRY
        return ReminderType.OVERDUE

    @staticmethod
    def is_emd_due(setting: CciSetting, contract_date: date, on_date: date) -> bool:
        return (on_date - contract_date).days >= setting.emd_payment_grace_days

    @staticmethod
    def should_send_email_reminder(setting: CciSetting, contract_date: date, on_date: date) -> bool:
        return (on_date - contract_date).days >= setting.email_reminder_days

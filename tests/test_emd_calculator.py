"""
Unit Tests for EMD Calculations

Tests EMD sizing, payment status, late interest, reminders and the DO gate.
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from cci_engine.calculators import EmdCalculator
from cci_engine.errors import InvalidBuyerClassError, NegativeInputError, UnitMismatchError
from cci_engine.models import BuyerClass, EmdStatus, ReminderType
from cci_engine.units import AmountExclGst, AmountInclGst, Days, Percent


CONTRACT_DATE = date(2024, 7, 15)


@pytest.fixture
def calc():
    return EmdCalculator()


class TestEmdRequired:

    def test_private_mill(self, calc, setting):
        result = calc.emd_required(setting, AmountExclGst(3100000), BuyerClass.PRIVATE_MILL)
        assert result == AmountExclGst(387500)

    def test_kvic(self, calc, setting):
        result = calc.emd_required(setting, AmountExclGst(3100000), BuyerClass.KVIC)
        assert result == AmountExclGst(310000)

    def test_trader(self, calc, setting):
        result = calc.emd_required(setting, AmountExclGst(3100000), BuyerClass.TRADER)
        assert result == AmountExclGst(542500)

    def test_buyer_class_from_master_data_key(self, calc, setting):
        assert calc.emd_percent(setting, "privateMill") == Percent(Decimal("12.5"))
        assert calc.emd_percent(setting, "private_mill") == Percent(Decimal("12.5"))

    def test_unknown_buyer_class(self, calc, setting):
        with pytest.raises(InvalidBuyerClassError) as exc_info:
            calc.emd_required(setting, AmountExclGst(3100000), "wholesaler")
        assert exc_info.value.code == "invalid_buyer_class"

    def test_gst_inclusive_amount_rejected(self, calc, setting):
        with pytest.raises(UnitMismatchError):
            calc.emd_required(setting, AmountInclGst(3255000), BuyerClass.PRIVATE_MILL)

    def test_negative_amount_rejected(self, calc, setting):
        with pytest.raises(NegativeInputError):
            calc.emd_required(setting, AmountExclGst(-1), BuyerClass.KVIC)

    def test_zero_amount(self, calc, setting):
        assert calc.emd_required(setting, AmountExclGst(0), BuyerClass.TRADER).is_zero()


class TestGraceAndStatus:

    @pytest.fixture
    def required(self):
        return AmountExclGst(387500)

    def test_grace_period_expiry(self, setting):
        assert EmdCalculator.grace_period_expiry(setting, CONTRACT_DATE) == date(2024, 7, 20)

    def test_not_paid(self, required):
        assert EmdCalculator.emd_status(required, AmountExclGst(0)) is EmdStatus.NOT_PAID

    def test_partial(self, required):
        assert EmdCalculator.emd_status(required, AmountExclGst(300000)) is EmdStatus.PARTIAL

    def test_full_within_grace(self, required):
        status = EmdCalculator.emd_status(required, required, date(2024, 7, 18), date(2024, 7, 20))
        assert status is EmdStatus.FULL

    def test_full_on_grace_expiry_day(self, required):
        status = EmdCalculator.emd_status(required, required, date(2024, 7, 20), date(2024, 7, 20))
        assert status is EmdStatus.FULL

    def test_full_after_grace(self, required):
        status = EmdCalculator.emd_status(required, required, date(2024, 7, 25), date(2024, 7, 20))
        assert status is EmdStatus.LATE_FULL

    def test_full_without_dates(self, required):
        assert EmdCalculator.emd_status(required, required) is EmdStatus.FULL

    def test_overpaid_is_full(self, required):
        assert EmdCalculator.emd_status(required, AmountExclGst(400000)) is EmdStatus.FULL

    def test_negative_paid_rejected(self, required):
        with pytest.raises(NegativeInputError):
            EmdCalculator.emd_status(required, AmountExclGst(-1))


class TestLateDaysAndInterest:

    def test_late_days(self):
        assert EmdCalculator.late_days(date(2024, 7, 25), date(2024, 7, 20)) == Days(5)

    def test_paid_before_expiry_is_zero(self):
        assert EmdCalculator.late_days(date(2024, 7, 18), date(2024, 7, 20)) == Days(0)

    def test_partial_day_rounds_up(self):
        late = EmdCalculator.late_days(datetime(2024, 7, 21, 1, 0), datetime(2024, 7, 20, 0, 0))
        assert late == Days(2)

    def test_late_interest(self, calc, setting):
        # 387,500 x 10% x 5/365
        result = calc.late_interest(setting, AmountExclGst(387500), Days(5))
        assert result.quantized() == Decimal("530.82")

    def test_no_late_interest_without_late_days(self, calc, setting):
        assert calc.late_interest(setting, AmountExclGst(387500), Days(0)).is_zero()

    def test_emd_interest(self, calc, setting):
        # 387,500 x 5% x 30/365
        result = calc.emd_interest(setting, AmountExclGst(387500), Days(30))
        assert result.quantized() == Decimal("1592.47")

    def test_emd_interest_full_year(self, calc, setting):
        result = calc.emd_interest(setting, AmountExclGst(387500), Days(365))
        assert result == AmountExclGst(Decimal("19375"))

    def test_emd_interest_negative_days_rejected(self, calc, setting):
        with pytest.raises(NegativeInputError):
            calc.emd_interest(setting, AmountExclGst(387500), Days(-1))


class TestDoEligibility:

    def test_shortfall_blocks_do(self, setting):
        result = EmdCalculator.check_do_eligibility(setting, AmountExclGst(500000), AmountExclGst(400000))

        assert result.eligible is False
        assert result.shortfall == AmountExclGst(100000)
        assert "shortfall 100000.00" in result.reason

    def test_full_emd_allows_do(self, setting):
        result = EmdCalculator.check_do_eligibility(setting, AmountExclGst(500000), AmountExclGst(500000))

        assert result.eligible is True
        assert result.shortfall is None

    def test_overpaid_allows_do(self, setting):
        result = EmdCalculator.check_do_eligibility(setting, AmountExclGst(500000), AmountExclGst(600000))
        assert result.eligible is True

    def test_unblocked_setting_always_allows_do(self, make_setting):
        setting = make_setting(emd_block_do_if_not_full=False)
        result = EmdCalculator.check_do_eligibility(setting, AmountExclGst(500000), AmountExclGst(0))

        assert result.eligible is True
        assert result.shortfall is None


class TestReminders:

    @pytest.fixture
    def required(self):
        return AmountExclGst(387500)

    def _reminder(self, setting, paid, required, on_date):
        return EmdCalculator.reminder_type(setting, CONTRACT_DATE, paid, required, on_date)

    def test_initial_on_contract_date(self, setting, required):
        assert self._reminder(setting, AmountExclGst(0), required, CONTRACT_DATE) is ReminderType.INITIAL

    def test_initial_inside_grace(self, setting, required):
        assert self._reminder(setting, AmountExclGst(0), required, date(2024, 7, 18)) is ReminderType.INITIAL

    def test_grace_expiry_on_last_day(self, setting, required):
        assert self._reminder(setting, AmountExclGst(100000), required, date(2024, 7, 20)) is ReminderType.GRACE_EXPIRY

    def test_overdue_after_grace(self, setting, required):
        assert self._reminder(setting, AmountExclGst(0), required, date(2024, 7, 25)) is ReminderType.OVERDUE

    def test_no_reminder_once_complete(self, setting, required):
        assert self._reminder(setting, required, required, date(2024, 7, 25)) is None

    def test_is_emd_due(self, setting):
        assert EmdCalculator.is_emd_due(setting, CONTRACT_DATE, date(2024, 7, 19)) is False
        assert EmdCalculator.is_emd_due(setting, CONTRACT_DATE, date(2024, 7, 20)) is True

    def test_should_send_email_reminder(self, make_setting):
        setting = make_setting(email_reminder_days=3)

        assert EmdCalculator.should_send_email_reminder(setting, CONTRACT_DATE, date(2024, 7, 17)) is False
        assert EmdCalculator.should_send_email_reminder(setting, CONTRACT_DATE, date(2024, 7, 18)) is True

"""Shared CCI setting fixtures for the test suite."""

import copy

import pytest

from cci_engine.models import CciSetting

STANDARD_2024 = {
    "id": 1,
    "name": "Standard CCI 2024-25",
    "effective_from": "2024-04-01",
    "effective_to": None,
    "version": 1,
    "is_active": True,
    "candy_factor": 0.2812,
    "gst_rate": 5,
    "emd_by_buyer_type": {"kvic": 10, "privateMill": 12.5, "trader": 17.5},
    "emd_payment_days": 5,
    "emd_interest_percent": 5,
    "emd_late_interest_percent": 10,
    "emd_block_do_if_not_full": True,
    "carrying_charge_tier1_days": 30,
    "carrying_charge_tier1_percent": 1.25,
    "carrying_charge_tier2_days": 60,
    "carrying_charge_tier2_percent": 1.35,
    "free_lifting_period_days": 21,
    "late_lifting_tier1_days": 30,
    "late_lifting_tier1_percent": 0.5,
    "late_lifting_tier2_days": 60,
    "late_lifting_tier2_percent": 0.75,
    "late_lifting_tier3_percent": 1.0,
    "cash_discount_percentage": 5,
    "interest_lc_bg_percent": 10,
    "penal_interest_lc_bg_percent": 11,
    "lifting_period_days": 45,
    "contract_period_days": 45,
    "lockin_charge_min": 350,
    "lockin_charge_max": 700,
    "moisture_lower_limit": 7,
    "moisture_upper_limit": 9,
    "moisture_sample_count": 10,
    "email_reminder_days": 5,
}

HISTORICAL_2023 = {
    **STANDARD_2024,
    "id": 2,
    "name": "Standard CCI 2023-24 (Historical)",
    "effective_from": "2023-04-01",
    "effective_to": "2024-03-31",
    "is_active": False,
    "emd_by_buyer_type": {"kvic": 10, "privateMill": 15, "trader": 20},
}


@pytest.fixture
def standard_data():
    return copy.deepcopy(STANDARD_2024)


@pytest.fixture
def historical_data():
    return copy.deepcopy(HISTORICAL_2023)


@pytest.fixture
def setting():
    """The 2024-25 standard tariff."""
    return CciSetting.from_dict(STANDARD_2024)


@pytest.fixture
def make_setting():
    """Factory for a standard setting with overridden fields."""

    def _make(**overrides):
        data = copy.deepcopy(STANDARD_2024)
        data.update(overrides)
        return CciSetting.from_dict(data)

    return _make

from datetime import date
from decimal import Decimal

import pytest

from bon_backend.core.rules import BonRules
from bon_backend.utils.bon_calculations import (
    installment_period,
    is_valid_period,
    money,
    months_between,
    period_of,
    recommended_period,
    rupiah,
)


def test_money_rounds_half_up():
    assert money("10.005") == Decimal("10.01")
    assert money(None) == Decimal("0.00")
    assert money(3) == Decimal("3.00")


def test_rupiah_formats_thousands():
    assert rupiah(1_500_000) == "Rp 1,500,000"
    assert rupiah(Decimal("333333.333")) == "Rp 333,333.33"


def test_days30_policy_misses_short_months():
    # 29 days: zero months under the approximation, one calendar month
    start, end = date(2026, 1, 31), date(2026, 3, 1)
    assert months_between(start, end, "days30") == 0
    assert months_between(start, end, "calendar") == 1


def test_calendar_policy_is_day_aware():
    assert months_between(date(2025, 9, 15), date(2026, 3, 14), "calendar") == 5
    assert months_between(date(2025, 9, 15), date(2026, 3, 15), "calendar") == 6


def test_days30_policy_floors():
    assert months_between(date(2026, 1, 1), date(2026, 7, 1), "days30") == 6
    assert months_between(date(2026, 1, 1), date(2026, 1, 30), "days30") == 0


@pytest.mark.parametrize(
    "amount, monthly, expected",
    [
        (3_000_000, 1_000_000, 3),
        (1_000_000, 300_000, 4),
        (1_200_000, 1_200_000, 1),
    ],
)
def test_installment_period_is_ceiling(amount, monthly, expected):
    assert installment_period(amount, monthly) == expected


def test_installment_period_rejects_zero_installment():
    with pytest.raises(ValueError):
        installment_period(1_000_000, 0)


@pytest.mark.parametrize(
    "amount, expected",
    [
        (3_000_000, 3),     # ceil(2) clamped up to the minimum
        (30_000_000, 20),
        (100_000_000, 24),  # clamped down to the maximum
        (0, 3),
    ],
)
def test_recommended_period_clamps(amount, expected):
    assert recommended_period(amount, 5_000_000, BonRules()) == expected


def test_period_keys():
    assert is_valid_period("2026-03")
    assert not is_valid_period("2026-13")
    assert not is_valid_period("2026-3")
    assert not is_valid_period("")
    assert period_of(date(2026, 3, 15)) == "2026-03"

from datetime import datetime, timedelta, timezone

import pytest

from pawnshop.services.loan_calculator import (
    calculate_due_date,
    calculate_duration_months,
    calculate_total_payable,
    days_until_due,
    interest_percent,
)


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


def test_fractional_rate_is_treated_as_percentage_of_one():
    assert interest_percent(0.15) == pytest.approx(15)
    assert interest_percent(1) == pytest.approx(100)


def test_rate_above_one_is_already_a_percentage():
    assert interest_percent(3) == 3


def test_total_payable_for_one_month():
    assert calculate_total_payable(650, 0.15, 1) == pytest.approx(747.5)


def test_total_payable_with_percentage_rate_and_half_months():
    assert calculate_total_payable(1000, 2, 1.5) == pytest.approx(1030)


def test_zero_rate_returns_principal():
    assert calculate_total_payable(500, 0, 3) == 500


def test_due_date_adds_calendar_months():
    assert calculate_due_date(utc(2024, 3, 15, 9, 30), 1) == utc(2024, 4, 15, 9, 30)


def test_due_date_clamps_to_month_end():
    assert calculate_due_date(utc(2024, 1, 31), 1) == utc(2024, 2, 29)
    assert calculate_due_date(utc(2023, 1, 31), 1) == utc(2023, 2, 28)


@pytest.mark.parametrize("months, expected", [
    (0.3, utc(2024, 1, 16)),
    (0.9, utc(2024, 1, 16)),
    (1.5, utc(2024, 2, 16)),
    (2.1, utc(2024, 3, 16)),
])
def test_due_date_any_fraction_adds_fifteen_days(months, expected):
    assert calculate_due_date(utc(2024, 1, 1), months) == expected


def test_duration_of_exact_month():
    assert calculate_duration_months(utc(2024, 1, 1), utc(2024, 2, 1)) == 1.0


def test_duration_rounds_up_to_half_month_after_ten_days():
    assert calculate_duration_months(utc(2024, 1, 1), utc(2024, 3, 12)) == 2.5


def test_duration_ignores_fewer_than_ten_remaining_days():
    assert calculate_duration_months(utc(2024, 1, 1), utc(2024, 3, 5)) == 2.0


def test_duration_is_never_below_one_month():
    assert calculate_duration_months(utc(2024, 1, 1), utc(2024, 1, 5)) == 1.0
    assert calculate_duration_months(utc(2024, 1, 1), utc(2024, 1, 1)) == 1.0


def test_days_until_due_rounds_up():
    now = utc(2024, 6, 1, 12)
    assert days_until_due(now + timedelta(days=1, hours=12), now) == 2
    assert days_until_due(now + timedelta(days=3), now) == 3


def test_days_until_due_is_negative_once_overdue():
    now = utc(2024, 6, 1, 12)
    assert days_until_due(now - timedelta(days=2), now) == -2
    assert days_until_due(now - timedelta(hours=12), now) == 0

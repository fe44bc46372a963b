"""Interest and due-date arithmetic for pawn loans.

All functions are pure. Input validation (positive principal, non-negative
rate) belongs to the request schemas, not to these helpers.
"""
import math
from datetime import datetime, timedelta

from dateutil.relativedelta import relativedelta

SECONDS_PER_DAY = 24 * 60 * 60

# A fractional month is always approximated as this many days
HALF_MONTH_DAYS = 15

# Remaining days at or above this count round a duration up by half a month
HALF_MONTH_THRESHOLD_DAYS = 10


def interest_percent(interest_rate: float) -> float:
    """Rates up to 1 are fractions (0.15 -> 15%), anything above is already a percentage."""
    return interest_rate * 100 if interest_rate <= 1 else interest_rate


def calculate_total_payable(principal: float, interest_rate: float, duration_months: float) -> float:
    total_interest = principal * interest_percent(interest_rate) * duration_months / 100
    return principal + total_interest


def calculate_due_date(start_date: datetime, duration_months: float) -> datetime:
    """Add whole calendar months, plus 15 days when the duration has any fractional part.

    Month addition clamps to the end of the target month (Jan 31 + 1 month is Feb 28/29).
    """
    whole_months = math.floor(duration_months)
    due_date = start_date + relativedelta(months=whole_months)
    if duration_months % 1 != 0:
        due_date += timedelta(days=HALF_MONTH_DAYS)
    return due_date


def calculate_duration_months(start_date: datetime, end_date: datetime) -> float:
    """Calendar month difference rounded to half months, never below one month."""
    months = (end_date.year - start_date.year) * 12 + (end_date.month - start_date.month)

    anchor = start_date + relativedelta(months=months)
    remaining_days = math.ceil((end_date - anchor).total_seconds() / SECONDS_PER_DAY)

    duration = float(months)
    if remaining_days >= HALF_MONTH_THRESHOLD_DAYS:
        duration += 0.5

    return max(duration, 1.0)


def days_until_due(due_date: datetime, now: datetime) -> int:
    """Signed whole days to the due date, rounded up; negative once overdue."""
    return math.ceil((due_date - now).total_seconds() / SECONDS_PER_DAY)

from datetime import datetime, timezone

from pawnshop.schemas.loan_schema import LoanRecord, LoanStatus
from pawnshop.services.loan_status import determine_status


def make_record(status: LoanStatus) -> LoanRecord:
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return LoanRecord(
        id="loan-1",
        customer_id="cust-1",
        item_description="Gold ring",
        principal=650,
        interest_rate=0.15,
        total_payable=747.5,
        start_date=now,
        due_date=datetime(2024, 2, 1, tzinfo=timezone.utc),
        status=status,
        created_at=now,
        updated_at=now,
    )


def test_cleared_balance_is_redeemed_whatever_the_stored_status():
    for status in LoanStatus:
        assert determine_status(make_record(status), 0, -30) == LoanStatus.redeemed


def test_defaulted_is_sticky_while_balance_remains():
    assert determine_status(make_record(LoanStatus.defaulted), 100, 10) == LoanStatus.defaulted
    assert determine_status(make_record(LoanStatus.defaulted), 100, -10) == LoanStatus.defaulted


def test_overdue_with_balance_is_late():
    assert determine_status(make_record(LoanStatus.active), 100, -1) == LoanStatus.late


def test_late_loan_recovers_to_active_when_not_overdue():
    assert determine_status(make_record(LoanStatus.late), 100, 5) == LoanStatus.active


def test_due_today_is_not_late():
    assert determine_status(make_record(LoanStatus.active), 100, 0) == LoanStatus.active


def test_stored_redeemed_with_balance_stays_redeemed():
    assert determine_status(make_record(LoanStatus.redeemed), 100, 5) == LoanStatus.redeemed

from pawnshop.schemas.loan_schema import LoanRecord, LoanStatus


# Derives the lifecycle status of a loan from its balance and calendar position.
# Checks run in order and the first match wins.
def determine_status(record: LoanRecord, outstanding_balance: float, days_until_due: int) -> LoanStatus:
    if outstanding_balance <= 0:
        return LoanStatus.redeemed

    # Defaulted stays defaulted until the balance is cleared
    if record.status == LoanStatus.defaulted:
        return LoanStatus.defaulted

    if days_until_due < 0:
        return LoanStatus.late

    return LoanStatus.redeemed if record.status == LoanStatus.redeemed else LoanStatus.active

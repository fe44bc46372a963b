from enum import Enum

from pydantic import BaseModel

from pawnshop.schemas.common import CamelModel


class ReportType(str, Enum):
    daily = "daily"
    monthly = "monthly"
    yearly = "yearly"


class MonthlyReport(CamelModel):
    total_loans: int
    total_principal: float
    total_payable: float
    total_repaid: float
    total_interest_earned: float
    pending_loans: int
    active_loans: int
    redeemed_loans: int


class ReportRow(BaseModel):
    """One loan per row, keyed the way the spreadsheet export expects."""

    customer_id: str
    loan_id: str
    start_date: str
    name: str
    phone: str
    item: str
    amount: float
    due_date: str
    interest_amount: float
    total_amount: float

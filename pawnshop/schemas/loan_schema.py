from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import Field, field_validator

from pawnshop.schemas.common import CamelModel, TimestampedRecord
from pawnshop.schemas.customer_schema import CustomerSummary
from pawnshop.utils.dates import ensure_utc
from pawnshop.utils.sanitize import sanitize_string


class LoanStatus(str, Enum):
    active = "ACTIVE"
    late = "LATE"
    redeemed = "REDEEMED"
    defaulted = "DEFAULTED"


class LoanRecord(TimestampedRecord):
    customer_id: str
    item_description: str
    principal: float
    interest_rate: float
    total_payable: float
    start_date: datetime
    due_date: datetime
    status: LoanStatus
    notes: Optional[str] = None

    @field_validator("start_date", "due_date")
    @classmethod
    def _dates_as_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class EnrichedLoan(LoanRecord):
    """A loan joined with its customer and repayment-derived figures. Computed on every read."""

    customer: CustomerSummary
    days_until_due: int
    total_repaid: float
    outstanding_balance: float


class LoanCreate(CamelModel):
    customer_id: str = Field(..., min_length=1, description="Customer the pledge belongs to")
    item_description: str = Field(..., min_length=1, description="Pledged item")
    principal: float = Field(..., gt=0, description="Amount advanced against the item")
    interest_rate: float = Field(..., ge=0, description="Monthly rate, as a fraction (<= 1) or a percentage")
    start_date: Optional[datetime] = Field(None, description="Defaults to now")
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator("customer_id", "item_description", "notes", mode="before")
    @classmethod
    def _clean_text(cls, value: Any) -> Any:
        return sanitize_string(value)

    @field_validator("start_date")
    @classmethod
    def _start_as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value) if value else value


class LoanStatusUpdate(CamelModel):
    status: LoanStatus

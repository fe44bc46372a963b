from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import Field, field_validator

from pawnshop.schemas.common import CamelModel, TimestampedRecord
from pawnshop.utils.dates import ensure_utc
from pawnshop.utils.sanitize import sanitize_string


class RepaymentMethod(str, Enum):
    cash = "cash"
    card = "card"
    bank = "bank"


class RepaymentRecord(TimestampedRecord):
    loan_id: str
    amount: float
    method: RepaymentMethod
    reference: Optional[str] = None
    paid_at: datetime
    notes: Optional[str] = None

    @field_validator("paid_at")
    @classmethod
    def _paid_at_as_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class RepaymentCreate(CamelModel):
    loan_id: str = Field(..., min_length=1, description="Loan the payment applies to")
    amount: float = Field(..., gt=0, description="Payment amount")
    method: RepaymentMethod = RepaymentMethod.cash
    reference: Optional[str] = Field(None, max_length=80)
    paid_at: Optional[datetime] = Field(None, description="Defaults to now")
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator("loan_id", "reference", "notes", mode="before")
    @classmethod
    def _clean_text(cls, value: Any) -> Any:
        return sanitize_string(value)

    @field_validator("paid_at")
    @classmethod
    def _paid_at_as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value) if value else value

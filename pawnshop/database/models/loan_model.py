from beanie import Document, Indexed
from pydantic import Field
from datetime import datetime
from typing import Optional

from pawnshop.schemas.loan_schema import LoanRecord


class LoanDocument(Document):
    loan_id: Indexed(str, unique=True) = Field(..., description="Public identifier of the loan")
    customer_id: Indexed(str) = Field(..., description="Customer the pledge belongs to")
    item_description: str = Field(..., description="Pledged item")
    principal: float = Field(..., description="Amount advanced")
    interest_rate: float = Field(..., description="Rate as entered at origination")
    total_payable: float = Field(..., description="Principal plus interest, fixed at origination")
    start_date: datetime
    due_date: datetime
    status: str = Field(default="ACTIVE", description="ACTIVE, LATE, REDEEMED or DEFAULTED")
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Settings:
        name = "loans"

    @classmethod
    def from_record(cls, record: LoanRecord) -> "LoanDocument":
        payload = record.model_dump(exclude={"id"})
        payload["status"] = record.status.value
        return cls(loan_id=record.id, **payload)

    def to_record(self) -> LoanRecord:
        return LoanRecord(id=self.loan_id, **self.model_dump(exclude={"id", "revision_id", "loan_id"}))

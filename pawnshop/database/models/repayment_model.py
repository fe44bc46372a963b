from beanie import Document, Indexed
from pydantic import Field
from datetime import datetime
from typing import Optional

from pawnshop.schemas.repayment_schema import RepaymentRecord


class RepaymentDocument(Document):
    repayment_id: Indexed(str, unique=True) = Field(..., description="Public identifier of the repayment")
    loan_id: Indexed(str) = Field(..., description="Loan the payment applies to")
    amount: float = Field(..., description="Payment amount")
    method: str = Field(default="cash", description="cash, card or bank")
    reference: Optional[str] = None
    paid_at: datetime
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Settings:
        name = "repayments"

    @classmethod
    def from_record(cls, record: RepaymentRecord) -> "RepaymentDocument":
        payload = record.model_dump(exclude={"id"})
        payload["method"] = record.method.value
        return cls(repayment_id=record.id, **payload)

    def to_record(self) -> RepaymentRecord:
        return RepaymentRecord(id=self.repayment_id, **self.model_dump(exclude={"id", "revision_id", "repayment_id"}))

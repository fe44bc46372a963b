from beanie import Document, Indexed
from pydantic import Field
from datetime import datetime
from typing import Optional

from pawnshop.schemas.customer_schema import CustomerRecord


class CustomerDocument(Document):
    customer_id: Indexed(str, unique=True) = Field(..., description="Public identifier of the customer")
    first_name: str = Field(..., description="First name of the customer")
    last_name: str = Field(..., description="Last name of the customer")
    email: Optional[str] = Field(None, description="Optional contact email")
    phone: str = Field(..., description="Contact phone number")
    created_at: datetime
    updated_at: datetime

    class Settings:
        name = "customers"

    @classmethod
    def from_record(cls, record: CustomerRecord) -> "CustomerDocument":
        return cls(customer_id=record.id, **record.model_dump(exclude={"id"}))

    def to_record(self) -> CustomerRecord:
        return CustomerRecord(id=self.customer_id, **self.model_dump(exclude={"id", "revision_id", "customer_id"}))

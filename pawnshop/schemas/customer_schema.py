from typing import Any, Optional

from pydantic import EmailStr, Field, field_validator

from pawnshop.schemas.common import CamelModel, TimestampedRecord
from pawnshop.utils.sanitize import sanitize_phone, sanitize_string


class CustomerRecord(TimestampedRecord):
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: str


class CustomerSummary(CamelModel):
    id: str
    first_name: str
    last_name: str
    email: str = ""
    phone: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


def _empty_email_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class CustomerCreate(CamelModel):
    first_name: str = Field(..., min_length=1, description="First name of the customer")
    last_name: str = Field(..., min_length=1, description="Last name of the customer")
    email: Optional[EmailStr] = Field(None, description="Optional contact email")
    phone: str = Field(..., min_length=7, description="Contact phone number")

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def _clean_text(cls, value: Any) -> Any:
        return sanitize_string(value)

    @field_validator("email", mode="before")
    @classmethod
    def _clean_email(cls, value: Any) -> Any:
        return _empty_email_to_none(value)

    @field_validator("phone", mode="before")
    @classmethod
    def _clean_phone(cls, value: Any) -> Any:
        # Let min_length report the error for anything that is not a usable number
        return sanitize_phone(value) or ""


class CustomerUpdate(CamelModel):
    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, min_length=7)

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def _clean_text(cls, value: Any) -> Any:
        return sanitize_string(value)

    @field_validator("email", mode="before")
    @classmethod
    def _clean_email(cls, value: Any) -> Any:
        return _empty_email_to_none(value)

    @field_validator("phone", mode="before")
    @classmethod
    def _clean_phone(cls, value: Any) -> Any:
        if value is None:
            return None
        return sanitize_phone(value) or ""

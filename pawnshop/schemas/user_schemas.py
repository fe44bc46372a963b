from enum import Enum
from typing import Any, Optional

from pydantic import EmailStr, Field, field_validator

from pawnshop.schemas.common import CamelModel, TimestampedRecord


class UserRole(str, Enum):
    admin = "admin"
    clerk = "clerk"


def _lower(value: Any) -> Any:
    return value.strip().lower() if isinstance(value, str) else value


class UserRecord(TimestampedRecord):
    email: str
    first_name: str
    last_name: str
    role: UserRole = UserRole.clerk
    password_hash: str


class PublicUser(CamelModel):
    id: str
    email: str
    first_name: str
    last_name: str
    role: UserRole


class UserRegister(CamelModel):
    email: EmailStr = Field(..., description="Email address of the user")
    password: str = Field(..., min_length=8, description="Password for the user account")
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    role: UserRole = UserRole.clerk

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value: Any) -> Any:
        return _lower(value)


class UserLogin(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value: Any) -> Any:
        return _lower(value)


class AuthResult(CamelModel):
    token: str
    user: PublicUser


class OTPRequest(CamelModel):
    email: EmailStr
    phone: Optional[str] = Field(None, description="Phone number the code is sent to")

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value: Any) -> Any:
        return _lower(value)


class OTPVerify(CamelModel):
    email: EmailStr
    otp: str = Field(..., min_length=6, max_length=6, description="6 digit code")

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value: Any) -> Any:
        return _lower(value)

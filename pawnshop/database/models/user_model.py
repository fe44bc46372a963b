from beanie import Document, Indexed
from pydantic import Field
from datetime import datetime

from pawnshop.schemas.user_schemas import UserRecord


class UserDocument(Document):
    user_id: Indexed(str, unique=True) = Field(..., description="Public identifier of the user")
    email: Indexed(str, unique=True) = Field(..., description="Lower-cased email address of the user")
    first_name: str = Field(..., description="First name of the user")
    last_name: str = Field(..., description="Last name of the user")
    role: str = Field(default="clerk", description="admin or clerk")
    password_hash: str = Field(..., description="Hashed password for the user account")
    created_at: datetime = Field(..., description="Timestamp when the user was created")
    updated_at: datetime

    class Settings:
        name = "users"  # Collection name in MongoDB

    @classmethod
    def from_record(cls, record: UserRecord) -> "UserDocument":
        payload = record.model_dump(exclude={"id"})
        payload["role"] = record.role.value
        return cls(user_id=record.id, **payload)

    def to_record(self) -> UserRecord:
        return UserRecord(id=self.user_id, **self.model_dump(exclude={"id", "revision_id", "user_id"}))

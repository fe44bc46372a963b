from fastapi import HTTPException, status
from pawnshop.core.config import Settings
from pawnshop.core.exceptions import ConflictError
from pawnshop.repositories.base import UserRepository
from pawnshop.schemas.user_schemas import AuthResult, PublicUser, UserLogin, UserRecord, UserRegister
from pawnshop.core.security import hash_password, verify_password, create_access_token
from pawnshop.utils.dates import utc_now
from typing import Any, Dict, Optional, Union
import logging
import uuid

logger = logging.getLogger(__name__)


def to_public_user(user: UserRecord) -> PublicUser:
    return PublicUser(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        role=user.role,
    )


# Signs a token whose subject is the user id; email and role ride along for the auth dependency
def sign_token(user: PublicUser, jwt_settings: Optional[Settings] = None) -> str:
    return create_access_token(
        data={"sub": user.id, "email": user.email, "role": user.role.value},
        jwt_settings=jwt_settings,
    )


class AuthService:
    def __init__(self, users: UserRepository, jwt_settings: Optional[Settings] = None):
        self.users = users
        self.jwt_settings = jwt_settings

    # Register a new user and sign them in
    async def register_user(self, payload: Union[UserRegister, Dict[str, Any]]) -> AuthResult:
        data = UserRegister.model_validate(payload)

        existing_user = await self.users.find_by_email(data.email)
        if existing_user:
            raise ConflictError("Account already exists for this email")

        try:
            password_hash = hash_password(data.password)
        except ValueError:
            logger.warning("Password hashing failed")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid password format"
            )

        now = utc_now()
        user = UserRecord(
            id=str(uuid.uuid4()),
            email=data.email,
            first_name=data.first_name,
            last_name=data.last_name,
            role=data.role,
            password_hash=password_hash,
            created_at=now,
            updated_at=now,
        )
        await self.users.create(user)
        logger.info("User registered with ID: %s", user.id)

        public_user = to_public_user(user)
        return AuthResult(token=sign_token(public_user, self.jwt_settings), user=public_user)

    # Authenticate user and generate access token
    async def login_user(self, payload: Union[UserLogin, Dict[str, Any]]) -> AuthResult:
        data = UserLogin.model_validate(payload)
        logger.debug("Login attempt for email: %s", data.email)

        user = await self.users.find_by_email(data.email)
        # Same message for unknown email and wrong password
        if not user or not verify_password(data.password, user.password_hash):
            logger.warning("Failed login for email: %s", data.email)
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password"
            )

        public_user = to_public_user(user)
        return AuthResult(token=sign_token(public_user, self.jwt_settings), user=public_user)

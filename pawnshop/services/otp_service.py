import logging
import secrets
from typing import Any, Dict, Optional, Union

from fastapi import HTTPException, status

from pawnshop.core.config import Settings
from pawnshop.core.exceptions import NotFoundError
from pawnshop.core.otp_store import OTPStore
from pawnshop.repositories.base import UserRepository
from pawnshop.schemas.user_schemas import AuthResult, OTPRequest, OTPVerify
from pawnshop.services.auth_service import sign_token, to_public_user
from pawnshop.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


def generate_otp() -> str:
    return f"{secrets.randbelow(900000) + 100000}"


class OTPService:
    """Passwordless login: a 6 digit code sent by SMS, valid once until it expires."""

    def __init__(
        self,
        users: UserRepository,
        store: OTPStore,
        notifier: NotificationService,
        ttl_seconds: int = 600,
        expose_otp: bool = False,
        jwt_settings: Optional[Settings] = None,
    ):
        self.users = users
        self.store = store
        self.notifier = notifier
        self.ttl_seconds = ttl_seconds
        self.expose_otp = expose_otp
        self.jwt_settings = jwt_settings

    async def request_otp(self, payload: Union[OTPRequest, Dict[str, Any]]) -> Dict[str, Any]:
        data = OTPRequest.model_validate(payload)

        user = await self.users.find_by_email(data.email)
        if not user:
            raise NotFoundError("User not found. Please register first.")

        otp = generate_otp()
        await self.store.set(data.email, otp, self.ttl_seconds)
        logger.info("OTP generated for %s", data.email)

        if data.phone:
            try:
                await self.notifier.send_sms(data.phone, self.notifier.otp_message(otp, self.ttl_seconds // 60))
            except Exception as e:
                # The code stays valid; the user can request a new one
                logger.error(f"Failed to send OTP SMS: {e}")

        response: Dict[str, Any] = {"message": "OTP generated successfully", "expiresIn": self.ttl_seconds}
        if self.expose_otp:
            response["otp"] = otp
        return response

    async def verify_otp(self, payload: Union[OTPVerify, Dict[str, Any]]) -> AuthResult:
        data = OTPVerify.model_validate(payload)

        if not await self.store.consume(data.email, data.otp):
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired OTP")

        user = await self.users.find_by_email(data.email)
        if not user:
            raise NotFoundError("User not found")

        public_user = to_public_user(user)
        return AuthResult(token=sign_token(public_user, self.jwt_settings), user=public_user)

from fastapi import APIRouter, Depends, status
from typing import Dict, Any

from pawnshop.api.dependencies import get_auth_service, get_otp_service
from pawnshop.core.auth_dependencies import get_current_user
from pawnshop.schemas.user_schemas import OTPRequest, OTPVerify, UserLogin, UserRegister
from pawnshop.services.auth_service import AuthService
from pawnshop.services.otp_service import OTPService
import logging

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"]
)

# Registers a new user account and returns a token for it
@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register_user(payload: UserRegister, service: AuthService = Depends(get_auth_service)) -> Dict[str, Any]:
    result = await service.register_user(payload)
    return {"message": "Account created successfully", "token": result.token, "user": result.user}

# Authenticates user credentials and returns an access token
@router.post("/login", status_code=status.HTTP_200_OK)
async def login_user(payload: UserLogin, service: AuthService = Depends(get_auth_service)) -> Dict[str, Any]:
    result = await service.login_user(payload)
    return {"message": "Login successful", "token": result.token, "user": result.user}

# Generates a one-time login code and texts it when a phone number is given
@router.post("/otp/request", status_code=status.HTTP_200_OK)
async def request_otp(payload: OTPRequest, service: OTPService = Depends(get_otp_service)) -> Dict[str, Any]:
    return await service.request_otp(payload)

# Exchanges a valid one-time code for an access token
@router.post("/otp/verify", status_code=status.HTTP_200_OK)
async def verify_otp(payload: OTPVerify, service: OTPService = Depends(get_otp_service)) -> Dict[str, Any]:
    result = await service.verify_otp(payload)
    return {"message": "OTP verified successfully", "token": result.token, "user": result.user}

# Retrieves the authenticated user's profile information
@router.get("/me", status_code=status.HTTP_200_OK)
async def get_current_user_info(current_user: dict = Depends(get_current_user)) -> Dict[str, Any]:
    return {"user": current_user}

from fastapi import Depends, HTTPException, status, Request
from fastapi.security import OAuth2PasswordBearer
from pawnshop.core.security import decode_token
from pawnshop.schemas.user_schemas import PublicUser
from typing import Callable, Dict
import logging

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

# Extracts and validates the bearer token and loads the user it was issued to
async def get_current_user(request: Request, token: str = Depends(oauth2_scheme)) -> Dict:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_token(token, request.app.state.settings)
    if payload is None:
        logger.debug("Token invalid or expired")
        raise credentials_exception

    email = payload.get("email")
    if not email:
        logger.debug("No 'email' claim in token payload")
        raise credentials_exception

    user = await request.app.state.repositories.users.find_by_email(email)
    if user is None:
        raise credentials_exception

    return PublicUser(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        role=user.role,
    ).model_dump(by_alias=True, mode="json")

# Builds a dependency that only lets the given roles through
def require_role(*roles: str) -> Callable:
    async def _check_role(current_user: Dict = Depends(get_current_user)) -> Dict:
        if current_user.get("role") not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Forbidden: Insufficient permissions",
            )
        return current_user

    return _check_role

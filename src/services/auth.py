import hmac
from datetime import datetime, timedelta, timezone
from typing import Annotated

import jwt
from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.config import config
from src.interfaces.auth import AuthJWTSettings, TokenData
from src.utils.logger import setup_logger

logger = setup_logger(__name__)


jwt_settings = AuthJWTSettings(secret=config.JWT_SECRET, expire_minutes=config.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
security = HTTPBearer(description="JWT token for authentication")


def create_access_token(user_id: str) -> str:
    """Create a JWT access token for the given user id."""
    expire = datetime.now(timezone.utc) + timedelta(minutes=jwt_settings.expire_minutes)
    to_encode = {"sub": user_id, "exp": expire}
    encoded_jwt = jwt.encode(to_encode, jwt_settings.secret, algorithm=jwt_settings.algorithm)
    return encoded_jwt


def verify_token(credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)]) -> TokenData:
    """Verify JWT token and return the user id it was issued for."""
    try:
        payload = jwt.decode(credentials.credentials, jwt_settings.secret, algorithms=[jwt_settings.algorithm])
        user_id: str | None = payload.get("sub")
        if user_id is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid authentication credentials",
                headers={"WWW-Authenticate": "Bearer"},
            )
        token_data = TokenData(user_id=user_id)
    except jwt.PyJWTError as e:
        logger.error(f"JWT verification error: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token_data


def get_current_user_id(token_data: Annotated[TokenData, Depends(verify_token)]) -> str:
    """Return the current user id from the token."""
    return token_data.user_id


def _check_secret(provided: str | None, expected: str, name: str) -> None:
    # An unset secret closes the endpoint instead of opening it
    if not expected or provided is None or not hmac.compare_digest(provided, expected):
        logger.warning(f"Rejected request with an invalid {name}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


def verify_admin_secret(x_admin_secret: Annotated[str | None, Header()] = None) -> None:
    _check_secret(x_admin_secret, config.ADMIN_SECRET, "admin secret")


def verify_cron_secret(authorization: Annotated[str | None, Header()] = None) -> None:
    provided = authorization.removeprefix("Bearer ") if authorization else None
    _check_secret(provided, config.CRON_SECRET, "cron secret")

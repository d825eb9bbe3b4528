"""Caller identity from an already-issued bearer token."""
import uuid
from typing import Any, Dict, Optional

import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from ..core.config import settings
from ..core.exceptions import AuthenticationError
from ..models.organization import User

logger = structlog.get_logger(__name__)

security = HTTPBearer(auto_error=False)


def decode_token(token: str) -> Dict[str, Any]:
    """Verify the token signature and expiry and return its claims."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        raise AuthenticationError("Invalid token", details={"reason": str(e)}) from e


def user_from_claims(claims: Dict[str, Any]) -> User:
    """Map JWT claims onto the authenticated user (``sub`` is the user UUID)."""
    subject = claims.get("sub")
    try:
        user_id = uuid.UUID(str(subject))
    except (TypeError, ValueError) as e:
        raise AuthenticationError("Token subject is not a user id") from e
    return User(id=user_id, email=claims.get("email"), name=claims.get("name"))


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> User:
    """
    Validate the bearer token and return the current user.

    Any missing, malformed, expired or badly signed token answers 401.
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": AuthenticationError.code, "message": "Not authenticated"},
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user = user_from_claims(decode_token(credentials.credentials))
    except AuthenticationError as e:
        logger.warning("token_rejected", reason=e.details.get("reason", e.message))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.to_dict(),
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.debug("user_authenticated", user_id=str(user.id))
    return user

"""API Dependencies."""
import uuid
from typing import Awaitable, Callable

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_user
from app.core.database import get_async_session
from app.models.organization import User
from app.services.organization_service import OrganizationService

CompanyAccessChecker = Callable[[User, uuid.UUID], Awaitable[bool]]


# Database session per request
get_db = get_async_session


async def get_company_access_checker(
    db: AsyncSession = Depends(get_db),
) -> CompanyAccessChecker:
    """Company access capability backed by user_company_access."""
    return OrganizationService(db).has_company_access


# Re-export auth dependencies for convenience
__all__ = [
    "get_db",
    "get_current_user",
    "get_company_access_checker",
    "CompanyAccessChecker",
    "User",
]

"""Organization repository: companies, applications and user access (read only)."""

from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.organization import Application, Company, UserCompanyAccess
from app.repositories.base import BaseRepository


class CompanyRepository(BaseRepository[Company]):
    """Repository for company data operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Company)

    async def count_applications(self, company_id: UUID) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(Application).where(Application.company_id == company_id)
        )
        return result.scalar() or 0


class ApplicationRepository(BaseRepository[Application]):
    """Repository for application lookups."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Application)


class UserCompanyAccessRepository(BaseRepository[UserCompanyAccess]):
    """Repository for user to company grants."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, UserCompanyAccess)

    async def get_role(self, user_id: UUID, company_id: UUID) -> Optional[str]:
        """Role of the user in the company, or None without a grant."""
        result = await self.db.execute(
            select(UserCompanyAccess.role).where(
                UserCompanyAccess.user_id == user_id,
                UserCompanyAccess.company_id == company_id,
            )
        )
        return result.scalar_one_or_none()

    async def has_access(self, user_id: UUID, company_id: UUID) -> bool:
        return await self.get_role(user_id, company_id) is not None

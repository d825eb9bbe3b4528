"""Organization service: company access checks and company maturity metrics."""
import uuid
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Awaitable, Callable, Dict, Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AuthorizationError, NotFoundError, PersistenceError, ValidationError
from app.models.organization import User
from app.repositories.assessment import AssessmentRepository
from app.repositories.organization import CompanyRepository, UserCompanyAccessRepository
from app.services.scoring import normalize_to_percentage

logger = structlog.get_logger(__name__)


class OrganizationService:
    """Service for company scoped reads."""

    def __init__(
        self,
        db: AsyncSession,
        access_checker: Optional[Callable[[User, uuid.UUID], Awaitable[bool]]] = None,
    ):
        self.db = db
        self.company_repository = CompanyRepository(db)
        self.access_repository = UserCompanyAccessRepository(db)
        self.assessment_repository = AssessmentRepository(db)
        self.access_checker = access_checker or self.has_company_access

    async def has_company_access(self, user: User, company_id: uuid.UUID) -> bool:
        """True when the user holds any role in the company."""
        return await self.access_repository.has_access(user.id, company_id)

    async def get_company_metrics(self, company_id: Any, user: User) -> Dict[str, Any]:
        """
        Aggregate maturity of a company.

        ``average_score`` is the mean ``calculated_score`` of the company's
        COMPLETED assessments (None when there are none) and
        ``maturity_percentage`` is that average passed through the
        normalization seam.
        """
        if isinstance(company_id, uuid.UUID):
            company_uuid = company_id
        else:
            try:
                company_uuid = uuid.UUID(str(company_id))
            except ValueError:
                raise ValidationError("company_id is not a valid identifier", field="company_id")

        try:
            company = await self.company_repository.get_by_id(company_uuid)
            if company is None:
                raise NotFoundError("Company not found", details={"company_id": str(company_uuid)})
            if not await self.access_checker(user, company_uuid):
                raise AuthorizationError(
                    "You do not have access to this company", details={"company_id": str(company_uuid)}
                )

            total_applications = await self.company_repository.count_applications(company_uuid)
            stats = await self.assessment_repository.get_company_statistics(company_uuid)
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to load company metrics", operation="company_metrics", original=e) from e

        average = stats["average_score"]
        average_score = None
        if average is not None:
            average_score = float(Decimal(str(average)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))

        logger.info(
            "company_metrics_computed",
            company_id=str(company_uuid),
            completed=stats["completed"],
            average_score=average_score,
        )

        return {
            "company_id": company_uuid,
            "total_applications": total_applications,
            "completed_assessments": stats["completed"],
            "in_progress_assessments": stats["in_progress"],
            "average_score": average_score,
            "maturity_percentage": normalize_to_percentage(average_score),
        }

"""Company API endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import CompanyAccessChecker, get_company_access_checker, get_current_user, get_db
from app.core.exceptions import ApplicationError
from app.models.organization import User
from app.schemas.organization import CompanyMetricsResponse
from app.services.organization_service import OrganizationService

router = APIRouter(prefix="/companies", tags=["companies"])


@router.get(
    "/{company_id}/metrics",
    response_model=CompanyMetricsResponse,
    summary="Company maturity metrics",
    description="Assessment counts and the average maturity of the company's completed assessments.",
)
async def get_company_metrics(
    company_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    access_checker: CompanyAccessChecker = Depends(get_company_access_checker),
):
    service = OrganizationService(db, access_checker=access_checker)
    try:
        return await service.get_company_metrics(company_id, current_user)
    except ApplicationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_dict()) from e

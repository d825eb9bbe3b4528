"""Pydantic schemas for company endpoints."""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class CompanyMetricsResponse(BaseModel):
    """Aggregate maturity of a company's completed assessments."""

    company_id: UUID
    total_applications: int
    completed_assessments: int
    in_progress_assessments: int
    average_score: Optional[float] = None
    maturity_percentage: int

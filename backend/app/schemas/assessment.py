"""Pydantic schemas for assessment API endpoints."""

from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


# Request schemas
# Ids are typed loosely so malformed values reach the service and come back
# as VALIDATION_ERROR (400) instead of a framework 422.
class InitAssessmentRequest(BaseModel):
    """Start or resume the assessment of an application."""

    application_id: Optional[Any] = None


class SaveAnswerRequest(BaseModel):
    """Autosave of a single answer."""

    question_id: Optional[Any] = None
    selected_option_id: Optional[Any] = None


class FinalizeAssessmentRequest(BaseModel):
    """Optional final batch of answers upserted before scoring."""

    answers: Optional[List[Any]] = None


# Response schemas
class AssessmentAnswerResponse(BaseModel):
    """Assessment answer response schema."""

    id: UUID
    question_id: int
    selected_option_id: int
    score_awarded: int
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AxisScoreResponse(BaseModel):
    section_id: Optional[int] = None
    title: str
    score: float
    answer_count: int


class AssessmentDiagnosisResponse(BaseModel):
    """Persisted diagnosis of a finalized assessment."""

    maturity_level: str
    risk_label: str
    axis_analysis: List[AxisScoreResponse] = Field(default_factory=list)
    action_plan: List[Any] = Field(default_factory=list)
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AssessmentResponse(BaseModel):
    """Assessment response schema."""

    id: UUID
    application_id: UUID
    template_id: Optional[int] = None
    status: str
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    calculated_score: Optional[float] = None
    created_at: datetime
    updated_at: datetime
    answers: List[AssessmentAnswerResponse] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class AssessmentDetailResponse(AssessmentResponse):
    """Assessment with its diagnosis and normalized maturity percentage."""

    diagnosis: Optional[AssessmentDiagnosisResponse] = None
    maturity_percentage: int = 0


class FinalizeAssessmentResponse(BaseModel):
    """Result of a finalize call."""

    id: UUID
    score: float
    maturity_level: str
    risk_label: str
    axis_analysis: List[AxisScoreResponse]
    maturity_percentage: int


class OperationResponse(BaseModel):
    success: bool = True


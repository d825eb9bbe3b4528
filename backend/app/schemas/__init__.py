"""Pydantic schemas for API responses."""

from .assessment import (
    AssessmentAnswerResponse,
    AssessmentDetailResponse,
    AssessmentDiagnosisResponse,
    AssessmentResponse,
    AxisScoreResponse,
    FinalizeAssessmentRequest,
    FinalizeAssessmentResponse,
    InitAssessmentRequest,
    OperationResponse,
    SaveAnswerRequest,
)
from .organization import CompanyMetricsResponse
from .questionnaire import (
    CatalogDocument,
    QuestionOptionResponse,
    QuestionResponse,
    SectionResponse,
)

__all__ = [
    "AssessmentAnswerResponse",
    "AssessmentDetailResponse",
    "AssessmentDiagnosisResponse",
    "AssessmentResponse",
    "AxisScoreResponse",
    "FinalizeAssessmentRequest",
    "FinalizeAssessmentResponse",
    "InitAssessmentRequest",
    "OperationResponse",
    "SaveAnswerRequest",
    "CompanyMetricsResponse",
    "CatalogDocument",
    "QuestionOptionResponse",
    "QuestionResponse",
    "SectionResponse",
]

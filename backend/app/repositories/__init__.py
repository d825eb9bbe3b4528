"""Repository layer for data access."""

from .assessment import AssessmentRepository
from .assessment_answer_repository import AssessmentAnswerRepository
from .base import BaseRepository
from .diagnosis import AssessmentDiagnosisRepository
from .organization import (
    ApplicationRepository,
    CompanyRepository,
    UserCompanyAccessRepository,
)
from .questionnaire import QuestionRepository

__all__ = [
    "BaseRepository",
    "AssessmentRepository",
    "AssessmentAnswerRepository",
    "AssessmentDiagnosisRepository",
    "ApplicationRepository",
    "CompanyRepository",
    "UserCompanyAccessRepository",
    "QuestionRepository",
]

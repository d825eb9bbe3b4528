"""
Model registry to ensure proper import order and avoid circular dependencies.
Import all models here in dependency order.
"""

# Import base model first
from app.models.base import Base, BaseModel

# Import models without dependencies first
from app.models.organization import Company, Application, UserCompanyAccess, User
from app.models.reference import (
    AssessmentTemplate,
    AssessmentSection,
    Question,
    QuestionOption,
)

# Assessment models depend on organization and reference tables
from app.models.assessment import (
    Assessment,
    AssessmentAnswer,
    AssessmentDiagnosis,
    AssessmentStatus,
)

__all__ = [
    "Base",
    "BaseModel",
    "Company",
    "Application",
    "UserCompanyAccess",
    "User",
    "AssessmentTemplate",
    "AssessmentSection",
    "Question",
    "QuestionOption",
    "Assessment",
    "AssessmentAnswer",
    "AssessmentDiagnosis",
    "AssessmentStatus",
]

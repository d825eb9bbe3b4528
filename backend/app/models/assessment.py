"""Assessment models - assessments, answers and the diagnosis produced on finalize."""
import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel, JSONType

if TYPE_CHECKING:
    from app.models.organization import Application
    from app.models.reference import AssessmentTemplate, Question, QuestionOption


class AssessmentStatus(str, Enum):
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class Assessment(BaseModel):
    """One evaluation run of one application against the question catalog."""

    __tablename__ = "assessments"

    application_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    template_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("assessment_templates.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )

    status: Mapped[str] = mapped_column(
        String(20), default=AssessmentStatus.IN_PROGRESS.value, nullable=False, index=True
    )

    # Lifecycle timestamps
    started_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    finished_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Only meaningful once COMPLETED
    calculated_score: Mapped[Optional[Decimal]] = mapped_column(Numeric(7, 2), nullable=True)

    # Relationships
    application: Mapped["Application"] = relationship(
        "Application", back_populates="assessments"
    )
    template: Mapped[Optional["AssessmentTemplate"]] = relationship("AssessmentTemplate")
    answers: Mapped[List["AssessmentAnswer"]] = relationship(
        "AssessmentAnswer",
        back_populates="assessment",
        cascade="all, delete-orphan",
        order_by="AssessmentAnswer.question_id",
    )
    diagnosis: Mapped[Optional["AssessmentDiagnosis"]] = relationship(
        "AssessmentDiagnosis",
        back_populates="assessment",
        cascade="all, delete-orphan",
        uselist=False,
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('IN_PROGRESS', 'COMPLETED')",
            name="ck_assessment_valid_status",
        ),
    )

    def __repr__(self) -> str:
        return f"<Assessment(id={self.id}, application={self.application_id}, status={self.status})>"


class AssessmentAnswer(BaseModel):
    """Answer to one question within an assessment.

    ``score_awarded`` is copied from the option when the answer is written and
    is never recomputed from the live option score.
    """

    __tablename__ = "assessment_answers"

    assessment_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("assessments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    question_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("questions.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    selected_option_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("question_options.id", ondelete="RESTRICT"),
        nullable=False,
    )
    score_awarded: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Relationships
    assessment: Mapped["Assessment"] = relationship("Assessment", back_populates="answers")
    question: Mapped["Question"] = relationship("Question")
    selected_option: Mapped["QuestionOption"] = relationship("QuestionOption")

    __table_args__ = (
        UniqueConstraint(
            "assessment_id",
            "question_id",
            name="uq_assessment_answers_assessment_question",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<AssessmentAnswer(assessment={self.assessment_id}, question={self.question_id}, "
            f"option={self.selected_option_id}, score={self.score_awarded})>"
        )


class AssessmentDiagnosis(BaseModel):
    """Persisted output of a finalize call; replaced on every re-finalize."""

    __tablename__ = "assessment_diagnosis"

    assessment_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("assessments.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    maturity_level: Mapped[str] = mapped_column(String(50), nullable=False)
    risk_label: Mapped[str] = mapped_column(String(50), nullable=False)

    # [{"section_id": 1, "title": "Governança", "score": 70.0, "answer_count": 2}, ...]
    axis_analysis: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)

    # Not generated yet; kept as an empty list so the column shape is stable
    action_plan: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)

    assessment: Mapped["Assessment"] = relationship("Assessment", back_populates="diagnosis")

    def __repr__(self) -> str:
        return f"<AssessmentDiagnosis(assessment={self.assessment_id}, level={self.maturity_level})>"

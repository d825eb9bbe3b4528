"""
Question catalog reference models.

AssessmentSection (axis) -> Question -> QuestionOption (scored choice)
AssessmentTemplate marks which questionnaire version new assessments use.
"""
from typing import List, Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin


class AssessmentTemplate(TimestampMixin, Base):
    """A versioned snapshot of the questionnaire that is active for new assessments."""
    __tablename__ = "assessment_templates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    version_number: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self):
        return f"<AssessmentTemplate {self.name} v{self.version_number}>"


class AssessmentSection(TimestampMixin, Base):
    """Thematic axis grouping questions for sub-scoring."""
    __tablename__ = "assessment_sections"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)

    questions: Mapped[List["Question"]] = relationship(
        "Question",
        back_populates="section",
    )

    def __repr__(self):
        return f"<AssessmentSection {self.id}: {self.title}>"


class Question(TimestampMixin, Base):
    """A questionnaire item; belongs to exactly one section."""
    __tablename__ = "questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)
    section_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("assessment_sections.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Relationships
    section: Mapped[Optional["AssessmentSection"]] = relationship(
        "AssessmentSection",
        back_populates="questions",
    )
    options: Mapped[List["QuestionOption"]] = relationship(
        "QuestionOption",
        back_populates="question",
        cascade="all, delete-orphan",
        order_by="QuestionOption.id",
    )

    def __repr__(self):
        return f"<Question {self.id} (section={self.section_id})>"


class QuestionOption(TimestampMixin, Base):
    """Mutually exclusive scored choice of a question (score on a 0-100 scale)."""
    __tablename__ = "question_options"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    question_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("questions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    score_value: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    question: Mapped["Question"] = relationship("Question", back_populates="options")

    def __repr__(self):
        return f"<QuestionOption {self.id} q={self.question_id} score={self.score_value}>"

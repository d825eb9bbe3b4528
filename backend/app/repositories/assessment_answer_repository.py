"""Assessment answer repository.

Answers are keyed by (assessment_id, question_id). Writes go through the
database's native ``INSERT ... ON CONFLICT DO UPDATE`` so two concurrent
saves of the same question never produce two rows; the last committed one
wins.
"""
import uuid
from typing import List, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.assessment import AssessmentAnswer
from app.models.base import utc_now
from app.models.reference import AssessmentSection, Question
from app.repositories.base import BaseRepository

logger = structlog.get_logger(__name__)


class AssessmentAnswerRepository(BaseRepository[AssessmentAnswer]):
    """Repository for the answer store."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, AssessmentAnswer)

    async def upsert(
        self,
        assessment_id: uuid.UUID,
        question_id: int,
        selected_option_id: int,
        score_awarded: int,
    ) -> None:
        """Create the answer or overwrite the existing one for this question."""
        now = utc_now()
        stmt = self.insert().values(
            id=uuid.uuid4(),
            assessment_id=assessment_id,
            question_id=question_id,
            selected_option_id=selected_option_id,
            score_awarded=score_awarded,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["assessment_id", "question_id"],
            set_={
                "selected_option_id": stmt.excluded.selected_option_id,
                "score_awarded": stmt.excluded.score_awarded,
                "updated_at": now,
            },
        )
        await self.db.execute(stmt)
        logger.debug(
            "answer_upserted",
            assessment_id=str(assessment_id),
            question_id=question_id,
            selected_option_id=selected_option_id,
            score_awarded=score_awarded,
        )

    async def get_by_question(
        self, assessment_id: uuid.UUID, question_id: int
    ) -> Optional[AssessmentAnswer]:
        query = (
            select(AssessmentAnswer)
            .where(
                AssessmentAnswer.assessment_id == assessment_id,
                AssessmentAnswer.question_id == question_id,
            )
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_all_for_assessment(self, assessment_id: uuid.UUID) -> List[AssessmentAnswer]:
        """Get all answers for an assessment ordered by question."""
        query = (
            select(AssessmentAnswer)
            .where(AssessmentAnswer.assessment_id == assessment_id)
            .order_by(AssessmentAnswer.question_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_scored_with_sections(self, assessment_id: uuid.UUID) -> list:
        """Answers joined with their question's section, for axis grouping.

        Returns rows with ``question_id``, ``score_awarded``, ``section_id`` and
        ``section_title`` (None when the question has no section).
        """
        query = (
            select(
                AssessmentAnswer.question_id,
                AssessmentAnswer.score_awarded,
                Question.section_id,
                AssessmentSection.title.label("section_title"),
            )
            .join(Question, Question.id == AssessmentAnswer.question_id)
            .outerjoin(AssessmentSection, AssessmentSection.id == Question.section_id)
            .where(AssessmentAnswer.assessment_id == assessment_id)
            .order_by(AssessmentAnswer.question_id)
        )
        result = await self.db.execute(query)
        return list(result.all())

"""Question catalog repository (sections, questions, options, templates)."""

from typing import Any, Dict, List, Optional

from sqlalchemy import desc, select, text
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.base import utc_now
from app.models.reference import (
    AssessmentSection,
    AssessmentTemplate,
    Question,
    QuestionOption,
)
from app.repositories.base import BaseRepository


class QuestionRepository(BaseRepository[Question]):
    """Repository for the question catalog."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Question)

    async def list_with_options(self) -> List[Question]:
        """All questions with options and section, ordered by order_index then id."""
        query = (
            select(Question)
            .options(
                selectinload(Question.options),
                selectinload(Question.section),
            )
            .order_by(Question.order_index, Question.id)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_option(self, option_id: int) -> Optional[QuestionOption]:
        result = await self.db.execute(
            select(QuestionOption).where(QuestionOption.id == option_id)
        )
        return result.scalar_one_or_none()

    async def get_active_template(self) -> Optional[AssessmentTemplate]:
        """Highest version among active templates."""
        result = await self.db.execute(
            select(AssessmentTemplate)
            .where(AssessmentTemplate.is_active.is_(True))
            .order_by(desc(AssessmentTemplate.version_number), desc(AssessmentTemplate.id))
            .limit(1)
        )
        return result.scalars().first()

    async def _upsert_by_id(self, model: Any, values: Dict[str, Any]) -> None:
        now = utc_now()
        stmt = self.insert(model).values(**values, created_at=now, updated_at=now)
        update_columns = {key: getattr(stmt.excluded, key) for key in values if key != "id"}
        update_columns["updated_at"] = now
        stmt = stmt.on_conflict_do_update(index_elements=["id"], set_=update_columns)
        await self.db.execute(stmt)

    async def upsert_section(self, section_id: int, title: str) -> None:
        await self._upsert_by_id(AssessmentSection, {"id": section_id, "title": title})

    async def upsert_question(
        self, question_id: int, text: str, order_index: int, section_id: Optional[int]
    ) -> None:
        await self._upsert_by_id(
            Question,
            {
                "id": question_id,
                "text": text,
                "order_index": order_index,
                "section_id": section_id,
            },
        )

    async def upsert_option(
        self, option_id: int, question_id: int, text: str, score_value: Optional[int]
    ) -> None:
        await self._upsert_by_id(
            QuestionOption,
            {
                "id": option_id,
                "question_id": question_id,
                "text": text,
                "score_value": score_value,
            },
        )

    async def upsert_template(self, template_id: int, name: str, version_number: int, is_active: bool) -> None:
        await self._upsert_by_id(
            AssessmentTemplate,
            {
                "id": template_id,
                "name": name,
                "version_number": version_number,
                "is_active": is_active,
            },
        )

    async def sync_id_sequences(self) -> None:
        """Move PostgreSQL serial sequences past ids inserted explicitly."""
        if self.dialect_name != "postgresql":
            return
        for table in ("assessment_templates", "assessment_sections", "questions", "question_options"):
            await self.db.execute(
                text(
                    f"SELECT setval(pg_get_serial_sequence('{table}', 'id'), "
                    f"COALESCE((SELECT MAX(id) FROM {table}), 1))"
                )
            )

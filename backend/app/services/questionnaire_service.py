"""Question catalog service: listing and idempotent catalog import."""

from typing import Any, Dict, List, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import unit_of_work
from app.core.exceptions import PersistenceError, ValidationError
from app.models.reference import AssessmentTemplate, Question
from app.repositories.questionnaire import QuestionRepository
from app.schemas.questionnaire import CatalogDocument, CatalogQuestion

logger = structlog.get_logger(__name__)


class QuestionnaireService:
    """Service for the question catalog."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.question_repo = QuestionRepository(db_session)

    async def list_questions(self) -> List[Question]:
        """All questions with options and section, ordered by order_index."""
        return await self.question_repo.list_with_options()

    async def get_active_template(self) -> Optional[AssessmentTemplate]:
        return await self.question_repo.get_active_template()

    async def import_catalog(self, payload: Dict[str, Any]) -> Dict[str, int]:
        """
        Upsert sections, questions and options from a catalog document.

        Running the same document twice leaves the catalog unchanged, and
        edited texts or scores overwrite the stored ones. Existing answers keep
        their snapshotted scores.

        Returns:
            Counts of upserted sections, questions and options.
        """
        try:
            document = CatalogDocument.model_validate(payload)
        except PydanticValidationError as e:
            raise ValidationError(
                "Invalid catalog document", details={"errors": e.errors(include_url=False)}
            ) from e

        counts = {"sections": 0, "questions": 0, "options": 0, "templates": 0}

        try:
            async with unit_of_work(self.db):
                if document.template:
                    template = document.template
                    await self.question_repo.upsert_template(
                        template.id, template.name, template.version_number, template.is_active
                    )
                    counts["templates"] += 1

                for section in document.sections:
                    await self.question_repo.upsert_section(section.id, section.title)
                    counts["sections"] += 1
                    for question in section.questions:
                        await self._import_question(question, section.id, counts)

                for question in document.questions:
                    await self._import_question(question, None, counts)

                await self.question_repo.sync_id_sequences()
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to import catalog", operation="import_catalog", original=e) from e

        logger.info("catalog_imported", **counts)
        return counts

    async def _import_question(
        self, question: CatalogQuestion, section_id: Optional[int], counts: Dict[str, int]
    ) -> None:
        await self.question_repo.upsert_question(
            question.id, question.text, question.order_index, section_id
        )
        counts["questions"] += 1
        for option in question.options:
            await self.question_repo.upsert_option(
                option.id, question.id, option.text, option.score_value
            )
            counts["options"] += 1

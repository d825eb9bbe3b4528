"""Assessment repository for data access operations."""

import uuid
from decimal import Decimal
from typing import Dict, Optional

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.assessment import Assessment, AssessmentStatus
from app.models.base import utc_now
from app.models.organization import Application
from app.repositories.base import BaseRepository


class AssessmentRepository(BaseRepository[Assessment]):
    """Repository for assessment operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Assessment)

    async def get_with_details(self, assessment_id: uuid.UUID) -> Optional[Assessment]:
        """Get assessment with answers, diagnosis and application loaded.

        Reloads already-present instances so answers written through a core
        upsert in the same session are visible.
        """
        query = (
            select(Assessment)
            .options(
                selectinload(Assessment.answers),
                selectinload(Assessment.diagnosis),
                selectinload(Assessment.application),
            )
            .where(Assessment.id == assessment_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_in_progress_for_application(
        self, application_id: uuid.UUID
    ) -> Optional[Assessment]:
        """Most recently started IN_PROGRESS assessment of an application."""
        query = (
            select(Assessment)
            .options(selectinload(Assessment.answers))
            .where(
                Assessment.application_id == application_id,
                Assessment.status == AssessmentStatus.IN_PROGRESS.value,
            )
            .order_by(desc(Assessment.started_at), desc(Assessment.created_at))
            .limit(1)
        )
        result = await self.db.execute(query)
        return result.scalars().first()

    async def create_in_progress(
        self, application_id: uuid.UUID, template_id: Optional[int]
    ) -> Assessment:
        return await self.create(
            application_id=application_id,
            template_id=template_id,
            status=AssessmentStatus.IN_PROGRESS.value,
            started_at=utc_now(),
        )

    async def mark_completed(self, assessment: Assessment, score: float) -> Assessment:
        """Store the final score and move the assessment to COMPLETED."""
        assessment.calculated_score = Decimal(str(score))
        assessment.status = AssessmentStatus.COMPLETED.value
        assessment.finished_at = utc_now()
        await self.db.flush()
        return assessment

    async def get_company_statistics(self, company_id: uuid.UUID) -> Dict[str, object]:
        """Assessment counts per status and the mean completed score of a company."""
        status_query = (
            select(Assessment.status, func.count(Assessment.id))
            .join(Application, Application.id == Assessment.application_id)
            .where(Application.company_id == company_id)
            .group_by(Assessment.status)
        )
        status_counts = dict((await self.db.execute(status_query)).all())

        average_query = (
            select(func.avg(Assessment.calculated_score))
            .join(Application, Application.id == Assessment.application_id)
            .where(
                Application.company_id == company_id,
                Assessment.status == AssessmentStatus.COMPLETED.value,
                Assessment.calculated_score.is_not(None),
            )
        )
        average = (await self.db.execute(average_query)).scalar()

        return {
            "completed": status_counts.get(AssessmentStatus.COMPLETED.value, 0),
            "in_progress": status_counts.get(AssessmentStatus.IN_PROGRESS.value, 0),
            "average_score": average,
        }

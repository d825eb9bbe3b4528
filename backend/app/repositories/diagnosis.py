"""Diagnosis repository - one diagnosis row per assessment."""
import uuid
from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.assessment import AssessmentDiagnosis
from app.models.base import utc_now
from app.repositories.base import BaseRepository

logger = structlog.get_logger(__name__)


class AssessmentDiagnosisRepository(BaseRepository[AssessmentDiagnosis]):
    def __init__(self, db: AsyncSession):
        super().__init__(db, AssessmentDiagnosis)

    async def get_by_assessment(self, assessment_id: uuid.UUID) -> Optional[AssessmentDiagnosis]:
        result = await self.db.execute(
            select(AssessmentDiagnosis)
            .where(AssessmentDiagnosis.assessment_id == assessment_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def upsert(
        self,
        assessment_id: uuid.UUID,
        maturity_level: str,
        risk_label: str,
        axis_analysis: List[Dict[str, Any]],
        action_plan: Optional[List[Any]] = None,
    ) -> AssessmentDiagnosis:
        """Replace the diagnosis of an assessment, creating it on first finalize."""
        now = utc_now()
        stmt = self.insert().values(
            id=uuid.uuid4(),
            assessment_id=assessment_id,
            maturity_level=maturity_level,
            risk_label=risk_label,
            axis_analysis=axis_analysis,
            action_plan=action_plan or [],
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["assessment_id"],
            set_={
                "maturity_level": stmt.excluded.maturity_level,
                "risk_label": stmt.excluded.risk_label,
                "axis_analysis": stmt.excluded.axis_analysis,
                "action_plan": stmt.excluded.action_plan,
                "updated_at": now,
            },
        )
        await self.db.execute(stmt)
        logger.debug("diagnosis_upserted", assessment_id=str(assessment_id), maturity_level=maturity_level)
        return await self.get_by_assessment(assessment_id)

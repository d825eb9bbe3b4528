"""Assessment lifecycle: init (create or resume), answer autosave and finalize.

IN_PROGRESS -> COMPLETED. A completed assessment can be finalized again; the
score and diagnosis are recomputed from the stored answers but the status
never goes back.
"""

import uuid
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import unit_of_work
from app.core.exceptions import (
    AuthorizationError,
    EmptyAssessmentError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from app.models.assessment import Assessment
from app.models.organization import User
from app.models.reference import Question
from app.repositories.assessment import AssessmentRepository
from app.repositories.assessment_answer_repository import AssessmentAnswerRepository
from app.repositories.diagnosis import AssessmentDiagnosisRepository
from app.repositories.organization import ApplicationRepository
from app.repositories.questionnaire import QuestionRepository
from app.services.organization_service import OrganizationService
from app.services.scoring import (
    ScoredAnswer,
    classify_maturity,
    compute_axis_scores,
    compute_global_score,
    compute_score_awarded,
    normalize_to_percentage,
)

logger = structlog.get_logger(__name__)

AccessChecker = Callable[[User, uuid.UUID], Awaitable[bool]]


def parse_positive_int(value: Any, field: str) -> int:
    """Accept positive ints or numeric strings; anything else is a validation error."""
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a positive integer", field=field)
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str) and value.strip().isascii() and value.strip().isdecimal():
        parsed = int(value.strip())
    else:
        raise ValidationError(f"{field} must be a positive integer", field=field)
    if parsed <= 0:
        raise ValidationError(f"{field} must be a positive integer", field=field)
    return parsed


def parse_uuid(value: Any, field: str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    if value is None or value == "":
        raise ValidationError(f"{field} is required", field=field)
    if not isinstance(value, str):
        raise ValidationError(f"{field} is not a valid identifier", field=field)
    try:
        return uuid.UUID(value)
    except ValueError:
        raise ValidationError(f"{field} is not a valid identifier", field=field)


class AssessmentService:
    """
    Assessment state machine.

    Every mutating operation runs inside ``unit_of_work`` so a failure leaves
    the last committed state untouched. Company access is checked through the
    injected ``access_checker`` before anything is read or written on behalf
    of the caller.
    """

    def __init__(self, db: AsyncSession, access_checker: Optional[AccessChecker] = None):
        self.db = db
        self.assessment_repository = AssessmentRepository(db)
        self.answer_repository = AssessmentAnswerRepository(db)
        self.diagnosis_repository = AssessmentDiagnosisRepository(db)
        self.question_repository = QuestionRepository(db)
        self.application_repository = ApplicationRepository(db)
        self.access_checker = access_checker or OrganizationService(db).has_company_access

    async def list_questions(self) -> List[Question]:
        try:
            return await self.question_repository.list_with_options()
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to load questions", operation="list_questions", original=e) from e

    async def init_assessment(self, application_id: Any, user: User) -> Tuple[Assessment, bool]:
        """
        Start or resume the assessment of an application.

        Returns:
            (assessment, created) - created is False when an IN_PROGRESS
            assessment already existed and is returned as-is.
        """
        application_uuid = parse_uuid(application_id, "application_id")

        try:
            application = await self.application_repository.get_by_id(application_uuid)
            if application is None:
                raise NotFoundError(
                    "Application not found", details={"application_id": str(application_uuid)}
                )
            await self._ensure_company_access(user, application.company_id)

            existing = await self.assessment_repository.get_in_progress_for_application(application_uuid)
            if existing is not None:
                logger.info(
                    "assessment_resumed",
                    assessment_id=str(existing.id),
                    application_id=str(application_uuid),
                )
                return await self.assessment_repository.get_with_details(existing.id), False

            template = await self.question_repository.get_active_template()
            async with unit_of_work(self.db):
                assessment = await self.assessment_repository.create_in_progress(
                    application_uuid, template.id if template else None
                )
            logger.info(
                "assessment_created",
                assessment_id=str(assessment.id),
                application_id=str(application_uuid),
                template_id=template.id if template else None,
                user_id=str(user.id),
            )
            return await self.assessment_repository.get_with_details(assessment.id), True
        except SQLAlchemyError as e:
            logger.error("assessment_init_failed", application_id=str(application_uuid), error=str(e))
            raise PersistenceError("Failed to initialize assessment", operation="init", original=e) from e

    async def get_assessment(self, assessment_id: Any, user: User) -> Assessment:
        assessment_uuid = parse_uuid(assessment_id, "assessment_id")
        try:
            await self._get_accessible_assessment(assessment_uuid, user)
            return await self.assessment_repository.get_with_details(assessment_uuid)
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to load assessment", operation="get", original=e) from e

    async def save_answer(
        self,
        assessment_id: Any,
        question_id: Any,
        selected_option_id: Any,
        user: User,
    ) -> None:
        """Autosave one answer; a second save for the same question overwrites it."""
        assessment_uuid = parse_uuid(assessment_id, "assessment_id")
        parsed_question_id = parse_positive_int(question_id, "question_id")
        parsed_option_id = parse_positive_int(selected_option_id, "selected_option_id")

        try:
            async with unit_of_work(self.db):
                assessment = await self._get_accessible_assessment(assessment_uuid, user)
                score = await self._upsert_answer(assessment.id, parsed_question_id, parsed_option_id)
        except SQLAlchemyError as e:
            logger.error(
                "answer_save_failed",
                assessment_id=str(assessment_uuid),
                question_id=parsed_question_id,
                error=str(e),
            )
            raise PersistenceError("Failed to save answer", operation="save_answer", original=e) from e

        logger.info(
            "answer_saved",
            assessment_id=str(assessment_uuid),
            question_id=parsed_question_id,
            selected_option_id=parsed_option_id,
            score_awarded=score,
        )

    async def finalize(
        self,
        assessment_id: Any,
        user: User,
        answers: Optional[List[Any]] = None,
    ) -> Dict[str, Any]:
        """
        Score the assessment and persist its diagnosis in one transaction.

        Steps:
        1. Lock the assessment row
        2. Upsert the optional bulk answers (unparseable entries are skipped)
        3. Read back every stored answer with its section
        4. Compute global and axis scores, classify maturity
        5. Upsert the diagnosis and mark the assessment COMPLETED

        Raises:
            EmptyAssessmentError: no answers are stored; nothing is changed.
        """
        assessment_uuid = parse_uuid(assessment_id, "assessment_id")

        try:
            async with unit_of_work(self.db):
                assessment = await self._get_accessible_assessment(
                    assessment_uuid, user, for_update=True
                )

                for entry in answers or []:
                    parsed = self._parse_bulk_entry(entry)
                    if parsed is None:
                        logger.warning(
                            "finalize_answer_skipped",
                            assessment_id=str(assessment_uuid),
                            entry=repr(entry),
                        )
                        continue
                    await self._upsert_answer(assessment.id, *parsed)

                rows = await self.answer_repository.get_scored_with_sections(assessment.id)
                scored = [
                    ScoredAnswer(
                        question_id=row.question_id,
                        score_awarded=row.score_awarded,
                        section_id=row.section_id,
                        section_title=row.section_title,
                    )
                    for row in rows
                ]
                if not scored:
                    raise EmptyAssessmentError(str(assessment_uuid))

                global_score = compute_global_score(scored)
                axis_analysis = [axis.to_dict() for axis in compute_axis_scores(scored)]
                classification = classify_maturity(global_score)

                await self.diagnosis_repository.upsert(
                    assessment_id=assessment.id,
                    maturity_level=classification.maturity_level,
                    risk_label=classification.risk_label,
                    axis_analysis=axis_analysis,
                    action_plan=[],
                )
                await self.assessment_repository.mark_completed(assessment, global_score)
        except EmptyAssessmentError:
            logger.warning("finalize_without_answers", assessment_id=str(assessment_uuid))
            raise
        except SQLAlchemyError as e:
            logger.error("assessment_finalize_failed", assessment_id=str(assessment_uuid), error=str(e))
            raise PersistenceError("Failed to finalize assessment", operation="finalize", original=e) from e

        logger.info(
            "assessment_finalized",
            assessment_id=str(assessment_uuid),
            score=global_score,
            maturity_level=classification.maturity_level,
            answer_count=len(scored),
        )

        return {
            "id": assessment_uuid,
            "score": global_score,
            "maturity_level": classification.maturity_level,
            "risk_label": classification.risk_label,
            "axis_analysis": axis_analysis,
            "maturity_percentage": normalize_to_percentage(global_score),
        }

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _ensure_company_access(self, user: User, company_id: uuid.UUID) -> None:
        if not await self.access_checker(user, company_id):
            logger.warning("company_access_denied", user_id=str(user.id), company_id=str(company_id))
            raise AuthorizationError(
                "You do not have access to this company", details={"company_id": str(company_id)}
            )

    async def _get_accessible_assessment(
        self, assessment_id: uuid.UUID, user: User, for_update: bool = False
    ) -> Assessment:
        assessment = await self.assessment_repository.get_by_id(assessment_id, for_update=for_update)
        if assessment is None:
            raise NotFoundError("Assessment not found", details={"assessment_id": str(assessment_id)})
        application = await self.application_repository.get_by_id(assessment.application_id)
        if application is None:
            raise NotFoundError(
                "Application not found", details={"application_id": str(assessment.application_id)}
            )
        await self._ensure_company_access(user, application.company_id)
        return assessment

    async def _upsert_answer(self, assessment_id: uuid.UUID, question_id: int, option_id: int) -> int:
        option = await self.question_repository.get_option(option_id)
        if option is None:
            raise NotFoundError("Option not found", details={"selected_option_id": option_id})
        if option.question_id != question_id:
            raise ValidationError(
                "Option does not belong to question",
                field="selected_option_id",
                details={"question_id": question_id, "selected_option_id": option_id},
            )

        score = compute_score_awarded(option)
        await self.answer_repository.upsert(
            assessment_id=assessment_id,
            question_id=question_id,
            selected_option_id=option_id,
            score_awarded=score,
        )
        return score

    @staticmethod
    def _parse_bulk_entry(entry: Any) -> Optional[Tuple[int, int]]:
        if isinstance(entry, dict):
            question_id = entry.get("question_id")
            option_id = entry.get("selected_option_id")
        else:
            question_id = getattr(entry, "question_id", None)
            option_id = getattr(entry, "selected_option_id", None)
        try:
            return (
                parse_positive_int(question_id, "question_id"),
                parse_positive_int(option_id, "selected_option_id"),
            )
        except ValidationError:
            return None

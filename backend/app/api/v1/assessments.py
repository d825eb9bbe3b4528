"""Assessment API endpoints: questions, init/resume, answer autosave and finalize."""

from typing import List, NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi import status as http_status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import CompanyAccessChecker, get_company_access_checker, get_current_user, get_db
from app.core.exceptions import ApplicationError
from app.models.organization import User
from app.schemas.assessment import (
    AssessmentDetailResponse,
    FinalizeAssessmentRequest,
    FinalizeAssessmentResponse,
    InitAssessmentRequest,
    OperationResponse,
    SaveAnswerRequest,
)
from app.schemas.questionnaire import QuestionResponse
from app.services.assessment_service import AssessmentService
from app.services.scoring import normalize_to_percentage


router = APIRouter(prefix="/assessment", tags=["assessments"])


def raise_http_error(exc: ApplicationError) -> NoReturn:
    """Translate a domain error into the HTTP error payload."""
    raise HTTPException(status_code=exc.status_code, detail=exc.to_dict()) from exc


def detail_response(assessment) -> AssessmentDetailResponse:
    response = AssessmentDetailResponse.model_validate(assessment)
    response.maturity_percentage = normalize_to_percentage(assessment.calculated_score)
    return response


@router.get(
    "/questions",
    response_model=List[QuestionResponse],
    summary="List questions",
    description="All questionnaire questions with their options and section, ordered by order_index.",
)
async def list_questions(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = AssessmentService(db)
    try:
        return await service.list_questions()
    except ApplicationError as e:
        raise_http_error(e)


@router.post(
    "/init",
    response_model=AssessmentDetailResponse,
    summary="Start or resume an assessment",
    description=(
        "Returns the IN_PROGRESS assessment of the application with its answers (200) "
        "or creates a new one bound to the active template (201)."
    ),
    responses={201: {"description": "Assessment created"}},
)
async def init_assessment(
    response: Response,
    request: Optional[InitAssessmentRequest] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    access_checker: CompanyAccessChecker = Depends(get_company_access_checker),
):
    service = AssessmentService(db, access_checker=access_checker)
    application_id = request.application_id if request else None

    try:
        assessment, created = await service.init_assessment(application_id, current_user)
    except ApplicationError as e:
        raise_http_error(e)

    response.status_code = http_status.HTTP_201_CREATED if created else http_status.HTTP_200_OK
    return detail_response(assessment)


@router.get(
    "/{assessment_id}",
    response_model=AssessmentDetailResponse,
    summary="Get assessment",
    description="Assessment with its answers, diagnosis (once finalized) and maturity percentage.",
)
async def get_assessment(
    assessment_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    access_checker: CompanyAccessChecker = Depends(get_company_access_checker),
):
    service = AssessmentService(db, access_checker=access_checker)
    try:
        assessment = await service.get_assessment(assessment_id, current_user)
    except ApplicationError as e:
        raise_http_error(e)
    return detail_response(assessment)


@router.put(
    "/{assessment_id}/answers",
    response_model=OperationResponse,
    summary="Save answer",
    description="Create or overwrite the answer to one question (autosave).",
)
async def save_answer(
    assessment_id: str,
    request: Optional[SaveAnswerRequest] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    access_checker: CompanyAccessChecker = Depends(get_company_access_checker),
):
    service = AssessmentService(db, access_checker=access_checker)
    request = request or SaveAnswerRequest()

    try:
        await service.save_answer(
            assessment_id,
            request.question_id,
            request.selected_option_id,
            current_user,
        )
    except ApplicationError as e:
        raise_http_error(e)

    return OperationResponse(success=True)


@router.post(
    "/{assessment_id}/finalize",
    response_model=FinalizeAssessmentResponse,
    summary="Finalize assessment",
    description=(
        "Upserts the optional final batch of answers, computes global and per-axis scores, "
        "stores the diagnosis and marks the assessment COMPLETED in one transaction."
    ),
)
async def finalize_assessment(
    assessment_id: str,
    request: Optional[FinalizeAssessmentRequest] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    access_checker: CompanyAccessChecker = Depends(get_company_access_checker),
):
    service = AssessmentService(db, access_checker=access_checker)
    answers = request.answers if request else None

    try:
        return await service.finalize(assessment_id, current_user, answers=answers)
    except ApplicationError as e:
        raise_http_error(e)

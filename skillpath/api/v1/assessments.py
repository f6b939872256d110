from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import PlainTextResponse

from skillpath.api.v1.deps import build_assessment_service, profile_id_header
from skillpath.core.config.scoring import get_scoring_value
from skillpath.core.errors import AssessmentNotFoundError, InputContractError
from skillpath.core.rate_limit import rate_limit
from skillpath.schemas.api import AssessmentHistoryResponse, AssessmentResponse, WeakAreasResponse
from skillpath.schemas.assessment import AbilitySummary, Assessment, AssessmentInput
from skillpath.schemas.plan import ImprovementPlan

router = APIRouter()


def _not_found(exc: AssessmentNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


@router.post("/assessments", response_model=AssessmentResponse, response_model_by_alias=True)
@rate_limit("10/minute")
async def create_assessment(
    request: Request,
    payload: AssessmentInput,
    profile_id: str = Depends(profile_id_header),
):
    _ = request
    service = build_assessment_service(profile_id)
    try:
        outcome = await service.run_assessment(payload)
    except InputContractError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    return AssessmentResponse(
        assessment=outcome.assessment,
        used_fallback=outcome.used_fallback,
        failure_kind=outcome.failure.kind.value if outcome.failure else None,
    )


@router.get("/assessments/current", response_model=Assessment, response_model_by_alias=True)
@rate_limit()
async def current_assessment(request: Request, profile_id: str = Depends(profile_id_header)):
    _ = request
    assessment = build_assessment_service(profile_id).current_assessment()
    if assessment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No assessment recorded for this profile.")
    return assessment


@router.get("/assessments/history", response_model=AssessmentHistoryResponse, response_model_by_alias=True)
@rate_limit()
async def assessment_history(request: Request, profile_id: str = Depends(profile_id_header)):
    _ = request
    return AssessmentHistoryResponse(entries=build_assessment_service(profile_id).assessment_history())


@router.get("/assessments/current/summary", response_model=AbilitySummary, response_model_by_alias=True)
@rate_limit()
async def ability_summary(request: Request, profile_id: str = Depends(profile_id_header)):
    _ = request
    return build_assessment_service(profile_id).ability_summary()


@router.get("/assessments/current/weak-areas", response_model=WeakAreasResponse, response_model_by_alias=True)
@rate_limit()
async def weak_areas(request: Request, profile_id: str = Depends(profile_id_header)):
    _ = request
    threshold = float(get_scoring_value("plan.weak_skill_threshold", 60))
    try:
        areas = build_assessment_service(profile_id).weak_areas(threshold=threshold)
    except AssessmentNotFoundError as exc:
        raise _not_found(exc) from exc
    return WeakAreasResponse(threshold=threshold, areas=areas)


@router.get("/assessments/current/report", response_class=PlainTextResponse)
@rate_limit()
async def assessment_report(request: Request, profile_id: str = Depends(profile_id_header)):
    _ = request
    try:
        markdown = build_assessment_service(profile_id).export_report()
    except AssessmentNotFoundError as exc:
        raise _not_found(exc) from exc
    return PlainTextResponse(markdown, media_type="text/markdown; charset=utf-8")


@router.post("/plans", response_model=ImprovementPlan, response_model_by_alias=True)
@rate_limit()
async def derive_plan(request: Request, profile_id: str = Depends(profile_id_header)):
    _ = request
    try:
        return build_assessment_service(profile_id).derive_plan()
    except AssessmentNotFoundError as exc:
        raise _not_found(exc) from exc


@router.post("/plans/regenerate", response_model=ImprovementPlan, response_model_by_alias=True)
@rate_limit("10/minute")
async def regenerate_plan(request: Request, profile_id: str = Depends(profile_id_header)):
    _ = request
    try:
        return build_assessment_service(profile_id).regenerate_plan()
    except AssessmentNotFoundError as exc:
        raise _not_found(exc) from exc

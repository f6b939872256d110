from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from skillpath.ai.factory import get_text_generator
from skillpath.api.v1.deps import profile_id_header
from skillpath.core.profile_store import SqliteProfileStore
from skillpath.core.rate_limit import rate_limit
from skillpath.schemas.goals import GoalParseResult, NaturalLanguageInput
from skillpath.services.assessment_service import AssessmentService
from skillpath.services.goal_service import parse_natural_language_goal

router = APIRouter()


@router.post("/goals/parse", response_model=GoalParseResult, response_model_by_alias=True)
@rate_limit("10/minute")
async def parse_goal(
    request: Request,
    payload: NaturalLanguageInput,
    profile_id: str = Depends(profile_id_header),
):
    _ = request
    generator = get_text_generator()
    ability = AssessmentService(SqliteProfileStore(profile_id)).current_assessment()
    return await parse_natural_language_goal(
        payload,
        generator.generate if generator is not None else None,
        ability,
        model_name=generator.model if generator is not None else "none",
    )

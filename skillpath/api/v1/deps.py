from __future__ import annotations

from fastapi import Header, HTTPException, status

from skillpath.ai.factory import get_text_generator
from skillpath.core.config import settings
from skillpath.core.profile_store import SqliteProfileStore
from skillpath.services.assessment_service import AssessmentService

_MAX_PROFILE_ID_CHARS = 120


def profile_id_header(x_profile_id: str | None = Header(default=None, alias="X-Profile-Id")) -> str:
    profile_id = (x_profile_id or settings.default_profile_id).strip()
    if not profile_id or len(profile_id) > _MAX_PROFILE_ID_CHARS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid X-Profile-Id header.")
    return profile_id


def build_assessment_service(profile_id: str) -> AssessmentService:
    generator = get_text_generator()
    return AssessmentService(
        SqliteProfileStore(profile_id),
        generator.generate if generator is not None else None,
        model_name=generator.model if generator is not None else "none",
    )

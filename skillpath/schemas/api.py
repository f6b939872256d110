from __future__ import annotations

from pydantic import Field

from skillpath.schemas.assessment import Assessment, HistoryEntry, WeakArea
from skillpath.schemas.common import CamelModel


class AssessmentResponse(CamelModel):
    assessment: Assessment
    used_fallback: bool
    failure_kind: str | None = None


class AssessmentHistoryResponse(CamelModel):
    entries: list[HistoryEntry] = Field(default_factory=list)


class WeakAreasResponse(CamelModel):
    threshold: float
    areas: list[WeakArea] = Field(default_factory=list)

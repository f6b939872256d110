from __future__ import annotations

from typing import Any, Literal, Union

from pydantic import Field, field_validator, model_validator

from skillpath.schemas.common import CamelModel, FrozenCamelModel
from skillpath.scoring.aggregate import DIMENSION_KEYS, aggregate, clamp

AssessmentMethod = Literal["resume", "questionnaire", "mixed"]

WEIGHT_SUM_TOLERANCE = 1e-9


class SkillScore(FrozenCamelModel):
    score: float = 0.0
    confidence: float = 1.0
    is_inferred: bool = False

    @field_validator("score")
    @classmethod
    def _clamp_score(cls, value: float) -> float:
        return clamp(value, 0.0, 100.0)

    @field_validator("confidence")
    @classmethod
    def _clamp_confidence(cls, value: float) -> float:
        return clamp(value, 0.0, 1.0)


SkillValue = Union[float, SkillScore]


class DimensionAssessment(FrozenCamelModel):
    score: float = Field(ge=0, le=100)
    weight: float = Field(ge=0, le=1)
    skills: dict[str, SkillValue] = Field(default_factory=dict)


class AssessmentMetadata(FrozenCamelModel):
    assessment_date: str
    assessment_method: AssessmentMethod
    confidence: float = Field(ge=0, le=1)


class AssessmentReport(FrozenCamelModel):
    summary: str = ""
    strengths: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class Assessment(FrozenCamelModel):
    overall_score: int = Field(ge=0, le=100)
    dimensions: dict[str, DimensionAssessment]
    metadata: AssessmentMetadata
    report: AssessmentReport = Field(default_factory=AssessmentReport)

    @model_validator(mode="after")
    def _check_invariants(self) -> "Assessment":
        if set(self.dimensions) != set(DIMENSION_KEYS):
            raise ValueError(f"dimensions must be exactly {', '.join(DIMENSION_KEYS)}")
        total_weight = sum(dim.weight for dim in self.dimensions.values())
        if abs(total_weight - 1.0) > WEIGHT_SUM_TOLERANCE:
            raise ValueError(f"dimension weights must sum to 1.0, got {total_weight}")
        expected = aggregate(self.dimensions)
        if self.overall_score != expected:
            raise ValueError(f"overallScore {self.overall_score} does not match weighted dimensions {expected}")
        return self

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class AssessmentInput(CamelModel):
    """What a user submits: résumé text, questionnaire answers, or both."""

    resume_text: str | None = Field(default=None, max_length=120000)
    questionnaire: dict[str, Any] | None = None

    def has_resume(self) -> bool:
        return bool((self.resume_text or "").strip())

    def has_questionnaire(self) -> bool:
        return bool(self.questionnaire)

    @property
    def method(self) -> AssessmentMethod:
        if self.has_resume() and self.has_questionnaire():
            return "mixed"
        if self.has_questionnaire():
            return "questionnaire"
        return "resume"


class HistoryEntry(FrozenCamelModel):
    date: str
    overall_score: int
    level: str
    method: AssessmentMethod


class WeakArea(FrozenCamelModel):
    dimension: str
    skill: str
    score: float
    is_inferred: bool


class AbilitySummary(FrozenCamelModel):
    has_assessment: bool
    needs_assessment: bool
    overall_score: int | None = None
    level: str | None = None
    assessment_date: str | None = None
    assessment_method: AssessmentMethod | None = None
    confidence: float | None = None
    strengths: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)

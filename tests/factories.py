from skillpath.schemas.assessment import (
    Assessment,
    AssessmentMetadata,
    AssessmentReport,
    DimensionAssessment,
)
from skillpath.scoring.aggregate import DIMENSION_KEYS, aggregate, default_weights


def make_assessment(
    scores: dict[str, float] | None = None,
    skills: dict[str, dict] | None = None,
    *,
    date: str = "2026-03-02T09:00:00+00:00",
    method: str = "resume",
    confidence: float = 0.85,
) -> Assessment:
    scores = scores or {}
    skills = skills or {}
    weights = default_weights()
    dimensions = {
        key: DimensionAssessment(
            score=scores.get(key, 50),
            weight=weights[key],
            skills=skills.get(key, {}),
        )
        for key in DIMENSION_KEYS
    }
    return Assessment(
        overall_score=aggregate(dimensions),
        dimensions=dimensions,
        metadata=AssessmentMetadata(assessment_date=date, assessment_method=method, confidence=confidence),
        report=AssessmentReport(
            summary="Solid backend engineer with room to grow in system design.",
            strengths=["Clean Python services"],
            improvements=["Distributed systems depth"],
            recommendations=["Design a sharded key-value store"],
        ),
    )

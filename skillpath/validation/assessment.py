from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from skillpath.core.config.scoring import get_scoring_value
from skillpath.core.errors import ErrorKind, PipelineFailure
from skillpath.schemas.assessment import (
    Assessment,
    AssessmentMetadata,
    AssessmentMethod,
    AssessmentReport,
    DimensionAssessment,
    SkillValue,
)
from skillpath.scoring.aggregate import DIMENSION_KEYS, aggregate, clamp, default_weights, round_half_up
from skillpath.scoring.skill_score import coerce_skill, score_of

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = ("overallScore", "dimensions", "metadata")
_METHODS = {"resume", "questionnaire", "mixed"}
_EMPTY_SUMMARY = "No summary was provided."


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return float(value)


def _clamped(field: str, value: float, low: float, high: float) -> float:
    result = clamp(value, low, high)
    if result != value:
        logger.info("assessment_input_clamped field=%s value=%s clamped=%s", field, value, result)
    return result


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if isinstance(item, (str, int, float)) and str(item).strip()]


def _skills(key: str, raw: Any) -> dict[str, SkillValue]:
    if not isinstance(raw, dict):
        return {}
    skills: dict[str, SkillValue] = {}
    for name, value in raw.items():
        skill = coerce_skill(value)
        if isinstance(value, (int, float)) and not isinstance(value, bool) and skill != value:
            logger.info("assessment_input_clamped field=%s.skills.%s value=%s clamped=%s", key, name, value, skill)
        skills[str(name)] = skill
    return skills


def _dimension_weights(raw_dimensions: dict[str, Any]) -> dict[str, float]:
    defaults = default_weights()
    weights: dict[str, float] = {}
    for key in DIMENSION_KEYS:
        raw = raw_dimensions.get(key)
        weight = _number(raw.get("weight")) if isinstance(raw, dict) else None
        if weight is None:
            weight = defaults[key]
        weights[key] = _clamped(f"{key}.weight", weight, 0.0, float("inf"))

    total = sum(weights.values())
    if total > 1.0:
        # Percentages or other unnormalised scales: keep the ratios, not the clamp.
        logger.info("assessment_weights_rescaled total=%s", total)
        weights = {key: clamp(weight / total, 0.0, 1.0) for key, weight in weights.items()}
        total = sum(weights.values())
    tolerance = float(get_scoring_value("validation.weight_tolerance", 1e-10))
    if total <= 0:
        logger.info("assessment_weights_defaulted reason=all_zero")
        return defaults
    if abs(total - 1.0) > tolerance:
        logger.info("assessment_weights_normalised total=%s", total)
        return {key: weight / total for key, weight in weights.items()}
    return weights


def _dimension(key: str, raw: Any, weight: float) -> DimensionAssessment:
    if not isinstance(raw, dict):
        logger.info("assessment_dimension_defaulted dimension=%s", key)
        return DimensionAssessment(score=0, weight=weight, skills={})

    skills = _skills(key, raw.get("skills"))
    score = _number(raw.get("score"))
    if score is None:
        score = float(round_half_up(sum(score_of(s) for s in skills.values()) / len(skills))) if skills else 0.0
    return DimensionAssessment(
        score=_clamped(f"{key}.score", score, 0.0, 100.0),
        weight=weight,
        skills=skills,
    )


def _metadata(raw: dict[str, Any], method: AssessmentMethod | None, assessed_at: str | None) -> AssessmentMetadata:
    date = assessed_at or raw.get("assessmentDate")
    if not isinstance(date, str) or not date.strip():
        date = datetime.now(timezone.utc).isoformat(timespec="seconds")
    raw_method = raw.get("assessmentMethod")
    resolved = method or (raw_method if raw_method in _METHODS else "resume")
    confidence = _number(raw.get("confidence"))
    return AssessmentMetadata(
        assessment_date=date.strip(),
        assessment_method=resolved,
        confidence=_clamped("metadata.confidence", confidence, 0.0, 1.0) if confidence is not None else 0.8,
    )


def _report(raw: Any) -> AssessmentReport:
    if not isinstance(raw, dict):
        raw = {}
    summary = raw.get("summary")
    return AssessmentReport(
        summary=summary.strip() if isinstance(summary, str) and summary.strip() else _EMPTY_SUMMARY,
        strengths=_string_list(raw.get("strengths")),
        improvements=_string_list(raw.get("improvements")),
        recommendations=_string_list(raw.get("recommendations")),
    )


def validate_assessment(
    raw: Any,
    method: AssessmentMethod | None = None,
    assessed_at: str | None = None,
) -> Assessment | PipelineFailure:
    """Turn parsed model output into an Assessment, or a typed failure.

    Absent dimensions are synthesised with a zero score and the canonical
    weight. Out-of-range values are clamped. The stored ``overallScore`` is
    always the aggregate of the validated dimensions; a provided value that
    disagrees with it is replaced. ``method`` overrides whatever the model
    reported, since the caller knows what was actually submitted; ``assessed_at``
    likewise replaces the model-reported date.
    """
    if not isinstance(raw, dict):
        return PipelineFailure(
            kind=ErrorKind.VALIDATION_FAILURE,
            message="Assessment payload must be a JSON object.",
            details={"type": type(raw).__name__},
        )

    missing = [name for name in _REQUIRED_FIELDS if name not in raw]
    if missing:
        return PipelineFailure(
            kind=ErrorKind.MISSING_FIELD,
            message=f"Assessment payload is missing: {', '.join(missing)}",
            details={"missing": missing},
        )

    raw_dimensions = raw["dimensions"]
    raw_metadata = raw["metadata"]
    if not isinstance(raw_dimensions, dict) or not isinstance(raw_metadata, dict):
        return PipelineFailure(
            kind=ErrorKind.VALIDATION_FAILURE,
            message="Assessment 'dimensions' and 'metadata' must be JSON objects.",
        )

    weights = _dimension_weights(raw_dimensions)
    dimensions = {key: _dimension(key, raw_dimensions.get(key), weights[key]) for key in DIMENSION_KEYS}
    overall = aggregate(dimensions)

    provided = _number(raw.get("overallScore"))
    if provided is None:
        logger.info("assessment_overall_recomputed value=%s", overall)
    elif round_half_up(clamp(provided, 0.0, 100.0)) != overall:
        logger.info("assessment_overall_corrected provided=%s aggregate=%s", provided, overall)

    try:
        return Assessment(
            overall_score=overall,
            dimensions=dimensions,
            metadata=_metadata(raw_metadata, method, assessed_at),
            report=_report(raw.get("report")),
        )
    except ValidationError as exc:
        return PipelineFailure(
            kind=ErrorKind.VALIDATION_FAILURE,
            message="Assessment payload failed structural validation.",
            details={"errors": exc.errors(include_url=False)},
        )

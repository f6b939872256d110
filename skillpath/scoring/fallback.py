from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any

from skillpath.core.config.scoring import get_scoring_value
from skillpath.schemas.assessment import (
    Assessment,
    AssessmentInput,
    AssessmentMetadata,
    AssessmentReport,
    DimensionAssessment,
)
from skillpath.scoring.aggregate import DIMENSION_KEYS, aggregate, clamp, round_half_up

logger = logging.getLogger(__name__)

_YEARS_RE = re.compile(r"(\d+)\s*(?:年|year)")


def _cfg(path: str, default: Any) -> Any:
    return get_scoring_value(f"fallback.{path}", default)


def _resume_bonus(text: str) -> int:
    lowered = text.lower()
    keyword_buckets: dict[str, list[str]] = _cfg("keywords", {}) or {}
    increment = int(_cfg("keyword_increment", 8))

    bonus = 0
    for bucket, keywords in keyword_buckets.items():
        if any(str(keyword).lower() in lowered for keyword in keywords):
            logger.debug("fallback_keyword_bucket_hit bucket=%s", bucket)
            bonus += increment

    years = [int(match) for match in _YEARS_RE.findall(lowered)]
    if years:
        most = max(years)
        if most >= int(_cfg("years_long_threshold", 3)):
            bonus += int(_cfg("years_bonus_long", 15))
        elif most >= 1:
            bonus += int(_cfg("years_bonus_short", 10))
    return bonus


def _is_answered(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) > 0
    return True


def _questionnaire_bonus(answers: dict[str, Any]) -> int:
    answered = sum(1 for value in answers.values() if _is_answered(value))
    bonus = answered * int(_cfg("questionnaire_increment", 5))
    return min(bonus, int(_cfg("questionnaire_cap", 25)))


def fallback_base_score(payload: AssessmentInput) -> int:
    base = int(_cfg("base_score", 45))
    if payload.has_resume():
        base += _resume_bonus(payload.resume_text or "")
    if payload.has_questionnaire():
        base += _questionnaire_bonus(payload.questionnaire or {})
    return int(clamp(base, int(_cfg("min_score", 30)), int(_cfg("max_score", 75))))


def _scaled(base: int, multiplier: float) -> int:
    return int(clamp(round_half_up(base * multiplier), 0, 100))


def _dimensions(base: int) -> dict[str, DimensionAssessment]:
    multipliers = _cfg("dimension_multipliers", {}) or {}
    weights = _cfg("weights", {}) or {}
    skill_multipliers = _cfg("skill_multipliers", {}) or {}
    return {
        key: DimensionAssessment(
            score=_scaled(base, float(multipliers.get(key, 1.0))),
            weight=float(weights.get(key, 0.2)),
            skills={
                skill: float(_scaled(base, float(factor)))
                for skill, factor in (skill_multipliers.get(key) or {}).items()
            },
        )
        for key in DIMENSION_KEYS
    }


def _strengths(score: int) -> list[str]:
    if score >= 60:
        strengths = ["Solid programming foundation", "Learns quickly and adapts well"]
    elif score >= 45:
        strengths = ["Understands core programming concepts", "Shows motivation to learn"]
    else:
        strengths = ["Positive learning attitude", "Clear motivation to start programming"]
    if score >= 50:
        strengths.append("Some demonstrated problem-solving ability")
    return strengths


def _improvements(score: int) -> list[str]:
    improvements: list[str] = []
    if score < 60:
        improvements += ["Strengthen programming fundamentals", "Practise basic algorithm exercises"]
    if score < 50:
        improvements += ["Study data structures systematically", "Start with small hands-on projects"]
    improvements += ["Develop system design thinking", "Gain more real-world project experience"]
    return improvements


def _recommendations(score: int, payload: AssessmentInput) -> list[str]:
    recommendations: list[str] = []
    if payload.has_resume():
        recommendations.append("Add more technical detail to your résumé")
    if not payload.has_questionnaire():
        recommendations.append("Complete the questionnaire for a more rounded assessment")
    else:
        recommendations.append("Turn your questionnaire answers into a structured study plan")

    if score < 50:
        recommendations += [
            "Start from the basics by learning one mainstream programming language",
            "Practise coding every day to build programming intuition",
        ]
    elif score < 70:
        recommendations += [
            "Build on your foundation by focusing on algorithms and data structures",
            "Contribute to open source or ship a complete project",
        ]
    else:
        recommendations += [
            "Go deeper into system design and architecture",
            "Share your technical experience to grow your influence",
        ]
    recommendations.append("Configure the AI service for a more precise, personalised assessment")
    return recommendations


def _summary(payload: AssessmentInput) -> str:
    source = {
        "resume": "résumé content",
        "questionnaire": "questionnaire answers",
        "mixed": "résumé content and questionnaire answers",
    }[payload.method]
    return f"Baseline estimate based on {source}. Configure the AI service for a more precise analysis."


def score_fallback(payload: AssessmentInput, *, now: datetime | None = None) -> Assessment:
    """Deterministic heuristic assessment used when the model path is unusable.

    The result is bounded to a mid-range estimate with fixed low confidence so
    downstream consumers can tell it apart from a model-backed assessment.
    ``now`` fixes the assessment date; with the same input and ``now`` the
    output is identical.
    """
    base = fallback_base_score(payload)
    dimensions = _dimensions(base)
    moment = now or datetime.now(timezone.utc)
    return Assessment(
        overall_score=aggregate(dimensions),
        dimensions=dimensions,
        metadata=AssessmentMetadata(
            assessment_date=moment.isoformat(timespec="seconds"),
            assessment_method=payload.method,
            confidence=float(_cfg("confidence", 0.6)),
        ),
        report=AssessmentReport(
            summary=_summary(payload),
            strengths=_strengths(base),
            improvements=_improvements(base),
            recommendations=_recommendations(base, payload),
        ),
    )

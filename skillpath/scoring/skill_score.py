"""Accessors for skill values.

A skill is stored either as a bare number or as a ``SkillScore`` object. Every
reader goes through ``score_of``, ``confidence_of`` and ``is_inferred`` so the
two forms always behave the same way.
"""

from __future__ import annotations

from typing import Any

from skillpath.core.config.scoring import get_scoring_value
from skillpath.schemas.assessment import SkillScore, SkillValue


def _inferred_threshold() -> float:
    return float(get_scoring_value("validation.inferred_confidence_threshold", 0.7))


def score_of(skill: SkillValue) -> float:
    if isinstance(skill, SkillScore):
        return skill.score
    return float(skill)


def confidence_of(skill: SkillValue) -> float:
    if isinstance(skill, SkillScore):
        return skill.confidence
    return 1.0


def is_inferred(skill: SkillValue) -> bool:
    if not isinstance(skill, SkillScore):
        return False
    return skill.is_inferred or skill.confidence < _inferred_threshold()


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return None


def coerce_skill(value: Any) -> SkillValue:
    """Turn raw model output into a skill value; unusable values become a bare 0."""
    number = _as_number(value)
    if number is not None:
        return min(100.0, max(0.0, number))
    if isinstance(value, SkillScore):
        return value
    if isinstance(value, dict):
        score = _as_number(value.get("score"))
        confidence = _as_number(value.get("confidence"))
        flag = value.get("isInferred", value.get("is_inferred", False))
        return SkillScore(
            score=score if score is not None else 0.0,
            confidence=confidence if confidence is not None else 1.0,
            is_inferred=flag is True,
        )
    return 0.0

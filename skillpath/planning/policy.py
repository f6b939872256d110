from __future__ import annotations

from typing import Any

from skillpath.core.config.scoring import get_scoring_value
from skillpath.scoring.aggregate import ScoreLevel, classify_level

_LEVEL_TARGETS = {
    ScoreLevel.NOVICE: 21,
    ScoreLevel.BEGINNER: 41,
    ScoreLevel.INTERMEDIATE: 61,
    ScoreLevel.ADVANCED: 81,
    ScoreLevel.EXPERT: 100,
}
_DIMENSION_EFFORT = {
    "programming": (5, 2),
    "algorithm": (4, 4),
    "project": (4, 3),
    "systemDesign": (3, 5),
    "communication": (3, 2),
}


def plan_value(path: str, default: Any) -> Any:
    return get_scoring_value(f"plan.{path}", default)


def target_score_for(overall_score: float) -> int:
    """Floor of the tier above the overall level; experts aim for the ceiling."""
    level = classify_level(overall_score)
    configured = plan_value("level_targets", {}) or {}
    return int(configured.get(level.value, _LEVEL_TARGETS[level]))


def points_per_week() -> float:
    return float(plan_value("points_per_week", 5)) or 5.0


def hours_per_week() -> float:
    return float(plan_value("hours_per_week", 5))


def priority_thresholds() -> tuple[float, float]:
    thresholds = plan_value("priority_thresholds", {}) or {}
    return float(thresholds.get("high", 25)), float(thresholds.get("medium", 10))


def urgency_for(priority: str) -> int:
    urgency = plan_value("urgency", {}) or {}
    return int(urgency.get(priority, {"high": 5, "medium": 3, "low": 1}[priority]))


def dimension_effort(dimension: str) -> tuple[int, int]:
    configured = (plan_value("dimension_effort", {}) or {}).get(dimension)
    if isinstance(configured, dict):
        return int(configured.get("impact", 3)), int(configured.get("difficulty", 3))
    return _DIMENSION_EFFORT.get(dimension, (3, 3))

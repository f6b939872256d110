from __future__ import annotations

import math
from enum import Enum
from typing import TYPE_CHECKING, Mapping

from skillpath.core.config.scoring import get_scoring_value

if TYPE_CHECKING:
    from skillpath.schemas.assessment import DimensionAssessment

DIMENSION_KEYS: tuple[str, ...] = ("programming", "algorithm", "project", "systemDesign", "communication")

_DEFAULT_WEIGHTS = {
    "programming": 0.30,
    "algorithm": 0.20,
    "project": 0.25,
    "systemDesign": 0.15,
    "communication": 0.10,
}


class ScoreLevel(str, Enum):
    NOVICE = "novice"
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"

    @property
    def label(self) -> str:
        return self.value.capitalize()


def round_half_up(value: float) -> int:
    # Tolerance absorbs float noise such as 0.1 * 0.3 sums landing on x.4999999.
    return int(math.floor(value + 0.5 + 1e-9))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def default_weights() -> dict[str, float]:
    configured = get_scoring_value("dimensions.default_weights", None)
    if not isinstance(configured, dict):
        return dict(_DEFAULT_WEIGHTS)
    return {key: float(configured.get(key, _DEFAULT_WEIGHTS[key])) for key in DIMENSION_KEYS}


def weighted_sum(dimensions: Mapping[str, "DimensionAssessment"]) -> float:
    return sum(dimensions[key].score * dimensions[key].weight for key in DIMENSION_KEYS if key in dimensions)


def aggregate(dimensions: Mapping[str, "DimensionAssessment"]) -> int:
    """Overall score as the half-up rounded weighted sum of dimension scores."""
    return int(clamp(round_half_up(weighted_sum(dimensions)), 0, 100))


def classify_level(score: float) -> ScoreLevel:
    """Map a 0-100 score onto a level using inclusive upper bounds."""
    bounds = get_scoring_value("levels", None) or {}
    if score <= bounds.get("novice", 20):
        return ScoreLevel.NOVICE
    if score <= bounds.get("beginner", 40):
        return ScoreLevel.BEGINNER
    if score <= bounds.get("intermediate", 60):
        return ScoreLevel.INTERMEDIATE
    if score <= bounds.get("advanced", 80):
        return ScoreLevel.ADVANCED
    return ScoreLevel.EXPERT


def dimension_label(key: str) -> str:
    labels = get_scoring_value("dimensions.labels", None) or {}
    return str(labels.get(key, key))

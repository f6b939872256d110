from __future__ import annotations

import math
from typing import Iterable

from skillpath.planning.policy import (
    dimension_effort,
    points_per_week,
    priority_thresholds,
    target_score_for,
    urgency_for,
)
from skillpath.schemas.assessment import Assessment
from skillpath.schemas.plan import GapPriority, PriorityEntry, SkillGap
from skillpath.scoring.aggregate import DIMENSION_KEYS, round_half_up
from skillpath.scoring.skill_score import is_inferred, score_of

# Stands in for a dimension that carries no per-skill breakdown.
OVERALL_SKILL = "overall"


def gap_priority(gap: float) -> GapPriority:
    high, medium = priority_thresholds()
    if gap >= high:
        return "high"
    if gap >= medium:
        return "medium"
    return "low"


def _gap_entry(dimension: str, skill: str, current: float, target: int, inferred: bool) -> SkillGap | None:
    gap = target - current
    if gap <= 0:
        return None
    return SkillGap(
        key=f"{dimension}.{skill}",
        dimension=dimension,
        skill=skill,
        current_score=current,
        target_score=target,
        gap=gap,
        priority=gap_priority(gap),
        estimated_weeks=math.ceil(gap / points_per_week()),
        is_inferred=inferred,
    )


def compute_skill_gaps(assessment: Assessment, target: int | None = None) -> list[SkillGap]:
    """Gaps in canonical dimension order, then skill order as stored.

    Skills already at or above the target produce no entry.
    """
    target_score = target if target is not None else target_score_for(assessment.overall_score)
    gaps: list[SkillGap] = []
    for dimension in DIMENSION_KEYS:
        entry = assessment.dimensions[dimension]
        if not entry.skills:
            gap = _gap_entry(dimension, OVERALL_SKILL, entry.score, target_score, False)
            if gap is not None:
                gaps.append(gap)
            continue
        for skill, value in entry.skills.items():
            gap = _gap_entry(dimension, skill, score_of(value), target_score, is_inferred(value))
            if gap is not None:
                gaps.append(gap)
    return gaps


def sort_skill_gaps(gaps: Iterable[SkillGap]) -> list[SkillGap]:
    return sorted(gaps, key=lambda gap: (-gap.gap, gap.key))


def build_priority_matrix(gaps: Iterable[SkillGap]) -> list[PriorityEntry]:
    matrix: list[PriorityEntry] = []
    for gap in gaps:
        impact, difficulty = dimension_effort(gap.dimension)
        urgency = urgency_for(gap.priority)
        matrix.append(
            PriorityEntry(
                key=gap.key,
                dimension=gap.dimension,
                impact=impact,
                difficulty=difficulty,
                urgency=urgency,
                priority=round_half_up((impact + difficulty + urgency) / 3),
            )
        )
    return matrix

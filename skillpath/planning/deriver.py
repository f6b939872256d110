from __future__ import annotations

import hashlib
import json
import logging
import math
from datetime import date, datetime, timezone
from typing import Callable

from skillpath.planning.cache import PlanCache
from skillpath.planning.gaps import build_priority_matrix, compute_skill_gaps, sort_skill_gaps
from skillpath.planning.goals import build_goals, cluster_gaps, learning_approach, strategy_for
from skillpath.planning.policy import plan_value, target_score_for
from skillpath.schemas.assessment import Assessment
from skillpath.schemas.plan import (
    GeneratedGoals,
    ImprovementPlan,
    OverallStrategy,
    PlanMetadata,
    TimelineEntry,
    VisualData,
)
from skillpath.scoring.aggregate import DIMENSION_KEYS

logger = logging.getLogger(__name__)


def assessment_fingerprint(assessment: Assessment) -> str:
    """Stable key for one assessment: overall score, date and dimension scores."""
    material = {
        "overallScore": assessment.overall_score,
        "assessmentDate": assessment.metadata.assessment_date,
        "dimensions": {key: assessment.dimensions[key].score for key in DIMENSION_KEYS},
    }
    encoded = json.dumps(material, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()[:16]


def _start_date(assessment: Assessment, fallback: datetime) -> date:
    raw = assessment.metadata.assessment_date
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    except ValueError:
        logger.info("plan_assessment_date_unparsed value=%s", raw)
        return fallback.date()


def _timeline(goals: GeneratedGoals, start: date) -> list[TimelineEntry]:
    entries: list[TimelineEntry] = []
    for goal in [*goals.short_term, *goals.medium_term]:
        entries.append(
            TimelineEntry(
                date=start.isoformat(),
                milestone=goal.title,
                description=goal.description,
                type="goal",
            )
        )
        for milestone in goal.associated_path.milestones:
            entries.append(
                TimelineEntry(
                    date=milestone.target_date,
                    milestone=milestone.title,
                    description=milestone.description,
                    type="milestone",
                )
            )
    entries.sort(key=lambda entry: (entry.date, entry.type != "goal", entry.milestone))
    return entries


def build_plan(assessment: Assessment, *, fingerprint: str, created_at: datetime) -> ImprovementPlan:
    """Derive a complete improvement plan; pure given its inputs."""
    target = target_score_for(assessment.overall_score)
    gaps = compute_skill_gaps(assessment, target)
    sorted_gaps = sort_skill_gaps(gaps)
    matrix = build_priority_matrix(sorted_gaps)
    clusters = cluster_gaps(assessment, sorted_gaps)
    start = _start_date(assessment, created_at)
    goals = build_goals(assessment, clusters, matrix, start)

    strategy = strategy_for(assessment.overall_score)
    approach, allocation = learning_approach(strategy)
    focus_count = int(plan_value("focus_areas", 3))
    longest = max((goal.estimated_time_weeks for goal in goals.medium_term), default=4)

    return ImprovementPlan(
        id=f"plan_{fingerprint}",
        fingerprint=fingerprint,
        created_at=created_at.isoformat(timespec="seconds"),
        assessment_date=assessment.metadata.assessment_date,
        metadata=PlanMetadata(
            base_score=assessment.overall_score,
            target_score=target,
            target_improvement=max(0, target - assessment.overall_score),
            estimated_time_months=max(1, math.ceil(longest / 4)),
            plan_type="comprehensive" if len(clusters) >= 3 else "focused",
            confidence=assessment.metadata.confidence,
        ),
        generated_goals=goals,
        overall_strategy=OverallStrategy(
            strategy=strategy,
            focus_areas=[cluster.label for cluster in clusters[:focus_count]],
            learning_approach=approach,
            time_allocation=allocation,
            milestones=[
                milestone
                for goal in goals.medium_term
                for milestone in goal.associated_path.milestones
            ],
        ),
        visual_data=VisualData(
            skill_gap_chart=sorted_gaps,
            progress_timeline=_timeline(goals, start),
            priority_matrix=matrix,
        ),
    )


class PlanDeriver:
    """Serves cached plans per assessment fingerprint and derives missing ones."""

    def __init__(self, cache: PlanCache | None = None, clock: Callable[[], datetime] | None = None):
        self.cache = cache or PlanCache()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def derive(self, assessment: Assessment) -> ImprovementPlan:
        fingerprint = assessment_fingerprint(assessment)
        cached = self.cache.get(fingerprint)
        if cached is not None:
            logger.debug("plan_cache_hit fingerprint=%s", fingerprint)
            return cached
        return self._generate(assessment, fingerprint, regenerate=False)

    def regenerate(self, assessment: Assessment) -> ImprovementPlan:
        fingerprint = assessment_fingerprint(assessment)
        logger.info("plan_regenerate fingerprint=%s", fingerprint)
        return self._generate(assessment, fingerprint, regenerate=True)

    def invalidate(self, assessment: Assessment) -> None:
        self.cache.invalidate(assessment_fingerprint(assessment))

    def _generate(self, assessment: Assessment, fingerprint: str, *, regenerate: bool) -> ImprovementPlan:
        self.cache.begin(fingerprint, regenerate=regenerate)
        try:
            plan = build_plan(assessment, fingerprint=fingerprint, created_at=self._clock())
        except Exception:
            self.cache.fail(fingerprint)
            logger.exception("plan_generation_failed fingerprint=%s", fingerprint)
            raise
        logger.info("plan_generated fingerprint=%s goals=%s", fingerprint, len(plan.generated_goals.short_term))
        return self.cache.complete(fingerprint, plan)

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, timedelta

from skillpath.planning.gaps import OVERALL_SKILL
from skillpath.planning.policy import hours_per_week, plan_value, target_score_for
from skillpath.schemas.assessment import Assessment
from skillpath.schemas.plan import (
    GeneratedGoal,
    GeneratedGoals,
    GeneratedPath,
    GeneratedPathNode,
    GoalTerm,
    Milestone,
    PathNodeType,
    PriorityEntry,
    SkillGap,
    Strategy,
)
from skillpath.scoring.aggregate import DIMENSION_KEYS, classify_level, clamp, dimension_label

_NODE_CYCLE: tuple[PathNodeType, ...] = ("theory", "practice", "project")
_MAX_GOAL_SKILLS = 3

_APPROACHES: dict[Strategy, tuple[str, str]] = {
    "foundation_building": (
        "Progressive learning that starts from core concepts and builds programming intuition step by step",
        "8-12 hours per week, in short daily sessions",
    ),
    "skill_strengthening": (
        "Systematic study of fundamentals, reinforced with small focused exercises",
        "8-12 hours per week, split between study and practice",
    ),
    "advanced_development": (
        "Balanced theory and practice through projects of moderate complexity",
        "8-12 hours per week, with one longer project session",
    ),
    "specialization": (
        "Project-driven learning around real architecture and technical decisions",
        "10-15 hours per week, centred on project work",
    ),
}


@dataclass(frozen=True, slots=True)
class GapCluster:
    dimension: str
    dimension_score: float
    gaps: tuple[SkillGap, ...]

    @property
    def total_gap(self) -> float:
        return sum(gap.gap for gap in self.gaps)

    @property
    def label(self) -> str:
        return dimension_label(self.dimension)

    def top(self, limit: int = _MAX_GOAL_SKILLS) -> tuple[SkillGap, ...]:
        return self.gaps[:limit]


def cluster_gaps(assessment: Assessment, sorted_gaps: list[SkillGap]) -> list[GapCluster]:
    """Group gaps by dimension, largest total gap first."""
    by_dimension: dict[str, list[SkillGap]] = {}
    for gap in sorted_gaps:
        by_dimension.setdefault(gap.dimension, []).append(gap)
    clusters = [
        GapCluster(
            dimension=dimension,
            dimension_score=assessment.dimensions[dimension].score,
            gaps=tuple(by_dimension[dimension]),
        )
        for dimension in DIMENSION_KEYS
        if dimension in by_dimension
    ]
    clusters.sort(key=lambda cluster: (-cluster.total_gap, cluster.dimension_score, cluster.dimension))
    if clusters:
        return clusters
    # Nothing below target: consolidate the weakest dimension instead.
    weakest = min(DIMENSION_KEYS, key=lambda key: (assessment.dimensions[key].score, key))
    return [GapCluster(dimension=weakest, dimension_score=assessment.dimensions[weakest].score, gaps=())]


def strategy_for(overall_score: float) -> Strategy:
    if overall_score < 30:
        return "foundation_building"
    if overall_score < 60:
        return "skill_strengthening"
    if overall_score < 80:
        return "advanced_development"
    return "specialization"


def learning_approach(strategy: Strategy) -> tuple[str, str]:
    return _APPROACHES[strategy]


def _short_term_weeks(cluster: GapCluster) -> int:
    limit = int(plan_value("short_term_max_weeks", 4))
    longest = max((gap.estimated_weeks for gap in cluster.top()), default=1)
    return int(clamp(longest, 1, limit))


def _medium_term_weeks(cluster: GapCluster) -> int:
    low = int(plan_value("medium_term_min_weeks", 5))
    high = int(plan_value("medium_term_max_weeks", 12))
    total = sum(gap.estimated_weeks for gap in cluster.gaps)
    return int(clamp(math.ceil(total / 2), low, high))


def _skill_names(gaps: tuple[SkillGap, ...], dimension: str) -> list[str]:
    return [dimension if gap.skill == OVERALL_SKILL else gap.skill for gap in gaps] or [dimension]


def _path_nodes(goal_id: str, label: str, skills: list[str], weeks: int) -> list[GeneratedPathNode]:
    count = max(1, math.ceil(weeks / 2))
    hours = round(weeks * hours_per_week() / count, 1)
    nodes: list[GeneratedPathNode] = []
    for index in range(count):
        if count > 1 and index == count - 1:
            node_type: PathNodeType = "review"
        else:
            node_type = _NODE_CYCLE[index % len(_NODE_CYCLE)]
        skill = skills[index % len(skills)]
        nodes.append(
            GeneratedPathNode(
                id=f"{goal_id}_node_{index + 1}",
                title=f"{label}: {node_type} ({skill})",
                description=f"{node_type.capitalize()} session on {skill} within {label.lower()}.",
                type=node_type,
                order=index + 1,
                estimated_hours=hours,
                skills=[skill],
                prerequisites=[nodes[-1].id] if nodes else [],
            )
        )
    return nodes


def _milestones(goal_id: str, label: str, skills: list[str], weeks: int, start: date, term: GoalTerm) -> list[Milestone]:
    checkpoints = [weeks] if term == "short" or weeks < 4 else [math.ceil(weeks / 2), weeks]
    milestones: list[Milestone] = []
    for index, week in enumerate(checkpoints, start=1):
        final = week == weeks
        milestones.append(
            Milestone(
                id=f"{goal_id}_milestone_{index}",
                title=f"{label} {'goal reached' if final else 'checkpoint'}",
                description=f"Week {week} review of {', '.join(skills)}.",
                target_date=(start + timedelta(weeks=week)).isoformat(),
                associated_skills=list(skills),
                success_criteria=[
                    f"Complete every {'path step' if final else 'step scheduled so far'}",
                    f"Apply {skills[0]} in a small exercise without references",
                ],
            )
        )
    return milestones


def _goal(
    cluster: GapCluster,
    term: GoalTerm,
    index: int,
    assessment: Assessment,
    priorities: dict[str, int],
    start: date,
) -> GeneratedGoal:
    goal_id = f"{term}_{index + 1}_{cluster.dimension}"
    gaps = cluster.top() if term == "short" else cluster.gaps
    weeks = _short_term_weeks(cluster) if term == "short" else _medium_term_weeks(cluster)
    skills = _skill_names(gaps, cluster.dimension)
    label = cluster.label
    target = target_score_for(assessment.overall_score)
    nodes = _path_nodes(goal_id, label, skills, weeks)
    if term == "short":
        title = f"Close the top {label.lower()} gaps"
        description = f"Focus on {', '.join(skills)} for {weeks} week(s) to lift {label.lower()} towards {target}."
    else:
        title = f"Build consistent {label.lower()} strength"
        description = f"Work through {len(skills)} skill(s) over {weeks} weeks to bring {label.lower()} to {target}."
    return GeneratedGoal(
        id=goal_id,
        title=title,
        description=description,
        dimension=cluster.dimension,
        duration=term,
        priority=max((priorities.get(gap.key, 1) for gap in gaps), default=3),
        target_level=classify_level(target).label,
        estimated_time_weeks=weeks,
        required_skills=skills,
        outcomes=[f"Raise {skill} to at least {target}" for skill in skills],
        associated_path=GeneratedPath(
            title=f"{label} path ({term} term)",
            description=f"{len(nodes)} step(s), about {hours_per_week():g} hours per week.",
            total_estimated_hours=round(sum(node.estimated_hours for node in nodes), 1),
            nodes=nodes,
            milestones=_milestones(goal_id, label, skills, weeks, start, term),
        ),
    )


def build_goals(
    assessment: Assessment,
    clusters: list[GapCluster],
    matrix: list[PriorityEntry],
    start: date,
) -> GeneratedGoals:
    """One or two short-term and one or two medium-term goals from the top clusters."""
    limit = max(1, int(plan_value("max_goals_per_term", 2)))
    selected = [cluster for cluster in clusters[:limit] if cluster.gaps] or clusters[:1]
    priorities = {entry.key: entry.priority for entry in matrix}
    return GeneratedGoals(
        short_term=[_goal(c, "short", i, assessment, priorities, start) for i, c in enumerate(selected)],
        medium_term=[_goal(c, "medium", i, assessment, priorities, start) for i, c in enumerate(selected)],
    )

from __future__ import annotations

from typing import Literal

from pydantic import Field

from skillpath.schemas.common import FrozenCamelModel

GapPriority = Literal["high", "medium", "low"]
GoalTerm = Literal["short", "medium"]
PathNodeType = Literal["theory", "practice", "project", "review"]
PlanType = Literal["comprehensive", "focused"]
Strategy = Literal["foundation_building", "skill_strengthening", "advanced_development", "specialization"]
TimelineKind = Literal["goal", "path", "milestone"]


class SkillGap(FrozenCamelModel):
    key: str
    dimension: str
    skill: str
    current_score: float
    target_score: int
    gap: float
    priority: GapPriority
    estimated_weeks: int
    is_inferred: bool = False


class PriorityEntry(FrozenCamelModel):
    key: str
    dimension: str
    impact: int = Field(ge=1, le=5)
    difficulty: int = Field(ge=1, le=5)
    urgency: int = Field(ge=1, le=5)
    priority: int = Field(ge=1, le=5)


class GeneratedPathNode(FrozenCamelModel):
    id: str
    title: str
    description: str
    type: PathNodeType
    order: int
    estimated_hours: float
    skills: list[str] = Field(default_factory=list)
    prerequisites: list[str] = Field(default_factory=list)


class Milestone(FrozenCamelModel):
    id: str
    title: str
    description: str
    target_date: str
    associated_skills: list[str] = Field(default_factory=list)
    success_criteria: list[str] = Field(default_factory=list)


class GeneratedPath(FrozenCamelModel):
    title: str
    description: str
    total_estimated_hours: float
    nodes: list[GeneratedPathNode]
    milestones: list[Milestone] = Field(default_factory=list)


class GeneratedGoal(FrozenCamelModel):
    id: str
    title: str
    description: str
    dimension: str
    duration: GoalTerm
    priority: int = Field(ge=1, le=5)
    target_level: str
    estimated_time_weeks: int
    required_skills: list[str] = Field(default_factory=list)
    outcomes: list[str] = Field(default_factory=list)
    associated_path: GeneratedPath


class GeneratedGoals(FrozenCamelModel):
    short_term: list[GeneratedGoal] = Field(default_factory=list)
    medium_term: list[GeneratedGoal] = Field(default_factory=list)


class OverallStrategy(FrozenCamelModel):
    strategy: Strategy
    focus_areas: list[str] = Field(default_factory=list)
    learning_approach: str
    time_allocation: str
    milestones: list[Milestone] = Field(default_factory=list)


class TimelineEntry(FrozenCamelModel):
    date: str
    milestone: str
    description: str
    type: TimelineKind


class VisualData(FrozenCamelModel):
    skill_gap_chart: list[SkillGap] = Field(default_factory=list)
    progress_timeline: list[TimelineEntry] = Field(default_factory=list)
    priority_matrix: list[PriorityEntry] = Field(default_factory=list)


class PlanMetadata(FrozenCamelModel):
    base_score: int
    target_score: int
    target_improvement: int
    estimated_time_months: int
    plan_type: PlanType
    confidence: float = Field(ge=0, le=1)


class ImprovementPlan(FrozenCamelModel):
    id: str
    fingerprint: str
    created_at: str
    assessment_date: str
    metadata: PlanMetadata
    generated_goals: GeneratedGoals
    overall_strategy: OverallStrategy
    visual_data: VisualData

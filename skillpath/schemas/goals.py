from __future__ import annotations

from typing import Literal

from pydantic import Field

from skillpath.schemas.common import CamelModel

Difficulty = Literal["beginner", "intermediate", "advanced"]
NodeType = Literal["theory", "practice", "project", "assessment"]
ResourceType = Literal["video", "article", "book", "course", "documentation", "practice"]
Urgency = Literal["low", "medium", "high"]


class NaturalLanguageInput(CamelModel):
    description: str = Field(min_length=1, max_length=20000)
    context: str | None = Field(default=None, max_length=20000)
    urgency: Urgency | None = None
    timeframe: str | None = Field(default=None, max_length=200)


class LearningResource(CamelModel):
    type: ResourceType = "documentation"
    title: str
    url: str | None = None
    description: str | None = None


class LearningPathNode(CamelModel):
    id: str
    title: str
    description: str
    type: NodeType = "theory"
    order: int
    estimated_hours: float = Field(ge=0)
    prerequisites: list[str] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)
    resources: list[LearningResource] = Field(default_factory=list)


class ParsedGoal(CamelModel):
    title: str
    description: str
    category: str = "general"
    priority: int = Field(default=3, ge=1, le=5)
    difficulty: Difficulty = "intermediate"
    estimated_time_weeks: float = Field(default=4, gt=0)
    required_skills: list[str] = Field(default_factory=list)
    learning_path: list[LearningPathNode] = Field(default_factory=list)
    outcomes: list[str] = Field(default_factory=list)
    reasoning: str = ""
    confidence: float = Field(default=0.8, ge=0, le=1)


class GoalParseResult(CamelModel):
    success: bool
    goals: list[ParsedGoal] = Field(default_factory=list)
    original_input: str = ""
    parse_errors: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)

from __future__ import annotations

import logging
import math
from typing import Any

from pydantic import ValidationError

from skillpath.core.errors import ErrorKind, PipelineFailure
from skillpath.schemas.goals import GoalParseResult, LearningPathNode, LearningResource, ParsedGoal
from skillpath.scoring.aggregate import clamp

logger = logging.getLogger(__name__)

_DIFFICULTIES = {"beginner", "intermediate", "advanced"}
_NODE_TYPES = {"theory", "practice", "project", "assessment"}
_RESOURCE_TYPES = {"video", "article", "book", "course", "documentation", "practice"}


def _text(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _number(value: Any, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if not math.isfinite(value):
        return default
    return float(value)


def _strings(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def _resources(value: Any) -> list[LearningResource]:
    if not isinstance(value, list):
        return []
    resources: list[LearningResource] = []
    for item in value:
        if not isinstance(item, dict) or not _text(item.get("title"), ""):
            continue
        kind = item.get("type")
        resources.append(
            LearningResource(
                type=kind if kind in _RESOURCE_TYPES else "documentation",
                title=_text(item.get("title"), ""),
                url=item.get("url") if isinstance(item.get("url"), str) else None,
                description=item.get("description") if isinstance(item.get("description"), str) else None,
            )
        )
    return resources


def _node(raw: dict[str, Any], index: int) -> LearningPathNode:
    kind = raw.get("type")
    return LearningPathNode(
        id=_text(raw.get("id"), f"node_{index + 1}"),
        title=_text(raw.get("title"), f"Learning step {index + 1}"),
        description=_text(raw.get("description"), "Learning step description"),
        type=kind if kind in _NODE_TYPES else "theory",
        order=int(_number(raw.get("order"), index + 1)),
        estimated_hours=max(0.0, _number(raw.get("estimatedHours"), 8)),
        prerequisites=_strings(raw.get("prerequisites")),
        skills=_strings(raw.get("skills")),
        resources=_resources(raw.get("resources")),
    )


def _goal(raw: dict[str, Any]) -> ParsedGoal:
    difficulty = raw.get("difficulty")
    path = raw.get("learningPath")
    nodes = (
        [_node(node, index) for index, node in enumerate(path) if isinstance(node, dict)]
        if isinstance(path, list)
        else []
    )
    weeks = _number(raw.get("estimatedTimeWeeks"), 4)
    return ParsedGoal(
        title=_text(raw.get("title"), "Learning goal"),
        description=_text(raw.get("description"), "Learning goal description to be refined"),
        category=_text(raw.get("category"), "general"),
        priority=int(clamp(_number(raw.get("priority"), 3), 1, 5)),
        difficulty=difficulty if difficulty in _DIFFICULTIES else "intermediate",
        estimated_time_weeks=weeks if weeks > 0 else 4,
        required_skills=_strings(raw.get("requiredSkills")),
        learning_path=nodes,
        outcomes=_strings(raw.get("outcomes")),
        reasoning=_text(raw.get("reasoning"), "Generated from the learner's description"),
        confidence=clamp(_number(raw.get("confidence"), 0.8), 0.0, 1.0),
    )


def validate_goal_parse_result(raw: Any, original_input: str = "") -> GoalParseResult | PipelineFailure:
    """Fill goal and path-node defaults; a payload with no usable goal is a failure."""
    if not isinstance(raw, dict):
        return PipelineFailure(
            kind=ErrorKind.VALIDATION_FAILURE,
            message="Goal payload must be a JSON object.",
        )
    raw_goals = raw.get("goals")
    if not isinstance(raw_goals, list):
        return PipelineFailure(
            kind=ErrorKind.MISSING_FIELD,
            message="Goal payload is missing: goals",
            details={"missing": ["goals"]},
        )

    goals: list[ParsedGoal] = []
    for index, item in enumerate(raw_goals):
        if not isinstance(item, dict):
            logger.info("goal_entry_dropped index=%s type=%s", index, type(item).__name__)
            continue
        try:
            goals.append(_goal(item))
        except ValidationError as exc:
            logger.info("goal_entry_dropped index=%s errors=%s", index, exc.error_count())

    if not goals:
        return PipelineFailure(
            kind=ErrorKind.VALIDATION_FAILURE,
            message="Goal payload did not contain any usable goals.",
        )

    return GoalParseResult(
        success=True,
        goals=goals,
        original_input=_text(raw.get("originalInput"), original_input),
        parse_errors=_strings(raw.get("parseErrors")),
        suggestions=_strings(raw.get("suggestions")),
    )

from __future__ import annotations

import json
from typing import Any

from skillpath.core.config.scoring import get_scoring_value
from skillpath.schemas.assessment import Assessment, AssessmentInput
from skillpath.scoring.aggregate import DIMENSION_KEYS, default_weights, dimension_label

_INPUT_CHAR_LIMIT = 12000

ASSESSMENT_SYSTEM_PROMPT = (
    "You are an experienced technical interviewer and career coach. "
    "Score conservatively and only from evidence. Return JSON only, wrapped in a ```json fence."
)

GOAL_SYSTEM_PROMPT = (
    "You are a learning-plan advisor for software developers. "
    "Turn the learner's description into concrete goals with learning paths. Return JSON only."
)


def _skill_keys(dimension: str) -> list[str]:
    return list((get_scoring_value("dimensions.skills", {}) or {}).get(dimension, []))


def _dimension_guide() -> str:
    weights = default_weights()
    lines = []
    for index, key in enumerate(DIMENSION_KEYS, start=1):
        lines.append(f"{index}. {key} ({dimension_label(key)}), weight {weights[key]:g}: {', '.join(_skill_keys(key))}")
    return "\n".join(lines)


def _response_skeleton(method: str) -> str:
    weights = default_weights()
    skeleton: dict[str, Any] = {
        "overallScore": 0,
        "dimensions": {
            key: {
                "score": 0,
                "weight": weights[key],
                "skills": {skill: {"score": 0, "confidence": 0.0, "isInferred": False} for skill in _skill_keys(key)},
            }
            for key in DIMENSION_KEYS
        },
        "metadata": {"assessmentDate": "<ISO-8601>", "assessmentMethod": method, "confidence": 0.0},
        "report": {"summary": "", "strengths": [], "improvements": [], "recommendations": []},
    }
    return json.dumps(skeleton, indent=2)


def _submission(payload: AssessmentInput) -> str:
    parts: list[str] = []
    if payload.has_resume():
        parts.append(f"Résumé:\n{(payload.resume_text or '')[:_INPUT_CHAR_LIMIT]}")
    if payload.has_questionnaire():
        answers = json.dumps(payload.questionnaire, ensure_ascii=False, indent=2)
        parts.append(f"Questionnaire answers:\n{answers[:_INPUT_CHAR_LIMIT]}")
    return "\n\n".join(parts)


def build_assessment_prompt(payload: AssessmentInput) -> str:
    return (
        f"{ASSESSMENT_SYSTEM_PROMPT}\n\n"
        "Assess the candidate across five dimensions and their skills:\n"
        f"{_dimension_guide()}\n\n"
        "Scale: 0-20 novice, 21-40 beginner, 41-60 intermediate, 61-80 advanced, 81-100 expert.\n"
        "For each skill return an object with score (0-100), confidence (0-1) and isInferred. "
        "Use confidence 0.8-1.0 for direct evidence; 0.3-0.7 with isInferred true when reasoning "
        "from overall background. Do not award high scores without evidence.\n"
        "report.summary: 3-4 sentences. strengths and improvements: 3-5 specific items each. "
        "recommendations: 5-8 actionable items.\n\n"
        f"{_submission(payload)}\n\n"
        "Return exactly this shape:\n"
        f"```json\n{_response_skeleton(payload.method)}\n```"
    )


def _profile_context(ability: Assessment | None) -> str:
    if ability is None:
        return ""
    scores = ", ".join(f"{key} {ability.dimensions[key].score:g}" for key in DIMENSION_KEYS)
    strengths = "; ".join(ability.report.strengths) or "none recorded"
    improvements = "; ".join(ability.report.improvements) or "none recorded"
    return (
        "Learner ability profile:\n"
        f"- Overall score: {ability.overall_score}\n"
        f"- Dimensions: {scores}\n"
        f"- Strengths: {strengths}\n"
        f"- Areas to improve: {improvements}\n\n"
    )


def build_goal_prompt(description: str, ability: Assessment | None = None, extra: str = "") -> str:
    return (
        f"{GOAL_SYSTEM_PROMPT}\n\n"
        f'Learner input:\n"{description[:_INPUT_CHAR_LIMIT]}"\n\n'
        f"{extra}"
        f"{_profile_context(ability)}"
        "Produce 1-3 goals. Each goal needs: title, description, category, priority (1-5), "
        "difficulty (beginner/intermediate/advanced), estimatedTimeWeeks, requiredSkills, "
        "learningPath, outcomes, reasoning, confidence (0-1).\n"
        "Each learningPath node needs: id, title, description, type (theory/practice/project/assessment), "
        "order, estimatedHours, prerequisites, skills, resources "
        "(objects with type video/article/book/course/documentation/practice, title, description).\n"
        "Return a ```json fenced object with keys: success, goals, originalInput, suggestions."
    )

from __future__ import annotations

import re
from datetime import datetime

from skillpath.schemas.assessment import Assessment, SkillValue
from skillpath.scoring.aggregate import DIMENSION_KEYS, classify_level, dimension_label
from skillpath.scoring.skill_score import is_inferred, score_of

_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_METHOD_LABELS = {
    "resume": "Résumé analysis",
    "questionnaire": "Questionnaire",
    "mixed": "Résumé and questionnaire",
}
_INFERRED_NOTE = "inferred from overall background"


def humanize_skill(key: str) -> str:
    words = _CAMEL_BOUNDARY_RE.sub(" ", key).split()
    if not words:
        return key
    return " ".join([words[0].capitalize(), *(word.lower() for word in words[1:])])


def _format_score(value: float) -> str:
    return f"{value:g}"


def _format_date(raw: str) -> str:
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        return raw


def _skill_line(name: str, skill: SkillValue) -> str:
    line = f"- {humanize_skill(name)}: {_format_score(score_of(skill))}"
    if is_inferred(skill):
        line += f" *({_INFERRED_NOTE})*"
    return line


def _bullets(items: list[str]) -> list[str]:
    return [f"- {item}" for item in items] or ["- None noted"]


def export_assessment_report(assessment: Assessment) -> str:
    """Render an assessment as a markdown report."""
    level = classify_level(assessment.overall_score)
    meta = assessment.metadata
    lines = [
        "# Ability Assessment Report",
        "",
        "## Basic Information",
        f"- Assessment date: {_format_date(meta.assessment_date)}",
        f"- Method: {_METHOD_LABELS[meta.assessment_method]}",
        f"- Confidence: {round(meta.confidence * 100)}%",
        "",
        "## Overall Score",
        f"- **Score: {assessment.overall_score}/100**",
        f"- **Level: {level.label}**",
        "",
        "## Summary",
        assessment.report.summary,
        "",
        "## Dimension Scores",
    ]
    for index, key in enumerate(DIMENSION_KEYS, start=1):
        dimension = assessment.dimensions[key]
        lines += ["", f"### {index}. {dimension_label(key)} ({_format_score(dimension.score)})"]
        lines += [_skill_line(name, skill) for name, skill in dimension.skills.items()]

    report = assessment.report
    lines += ["", "## Strengths", *_bullets(report.strengths), ""]
    lines += ["## Improvements", *_bullets(report.improvements), ""]
    lines += ["## Recommendations", *_bullets(report.recommendations), ""]
    lines += [
        "---",
        f'*Note: scores marked "{_INFERRED_NOTE}" are estimates drawn from your overall profile '
        "and may differ from your actual level.*",
        "",
    ]
    return "\n".join(lines)

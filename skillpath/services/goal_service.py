from __future__ import annotations

import logging
import time
import uuid

from skillpath.ai.types import GenerateText
from skillpath.analytics.db import log_ai_analysis_run
from skillpath.core.errors import ErrorKind, InputContractError, PipelineFailure
from skillpath.parsing.extract import extract_json
from skillpath.parsing.repair import parse_json_payload
from skillpath.schemas.assessment import Assessment
from skillpath.schemas.goals import GoalParseResult, NaturalLanguageInput
from skillpath.services.prompts import build_goal_prompt
from skillpath.validation.goals import validate_goal_parse_result

logger = logging.getLogger(__name__)

REPHRASE_SUGGESTIONS = [
    "Rephrase your goal with more detail about what you want to build or automate.",
    "Mention your current experience and a realistic timeframe.",
    "Try one goal at a time if your description covers several topics.",
]


def _extra_context(payload: NaturalLanguageInput) -> str:
    lines = []
    if payload.context:
        lines.append(f"Context: {payload.context}")
    if payload.urgency:
        lines.append(f"Urgency: {payload.urgency}")
    if payload.timeframe:
        lines.append(f"Desired timeframe: {payload.timeframe}")
    return ("\n".join(lines) + "\n\n") if lines else ""


def parse_goal_response(text: str, original_input: str) -> GoalParseResult | PipelineFailure:
    extracted = extract_json(text)
    if isinstance(extracted, PipelineFailure):
        return extracted
    parsed = parse_json_payload(extracted)
    if isinstance(parsed, PipelineFailure):
        return parsed
    return validate_goal_parse_result(parsed, original_input)


def failed_goal_result(original_input: str, failure: PipelineFailure) -> GoalParseResult:
    return GoalParseResult(
        success=False,
        goals=[],
        original_input=original_input,
        parse_errors=[failure.message],
        suggestions=list(REPHRASE_SUGGESTIONS),
    )


def _log_run(run_id: str, started: float, model: str, failure: PipelineFailure | None) -> None:
    try:
        log_ai_analysis_run(
            run_id=run_id,
            flow="goal_parse",
            model=model,
            status="success" if failure is None else failure.kind.value,
            used_fallback=False,
            error_code=failure.kind.value if failure else None,
            latency_ms=int((time.perf_counter() - started) * 1000),
        )
    except Exception:  # pragma: no cover - analytics must not break goal parsing
        logger.debug("ai_run_logging_failed", exc_info=True)


async def parse_natural_language_goal(
    payload: NaturalLanguageInput | str,
    generate_text: GenerateText | None,
    ability: Assessment | None = None,
    *,
    model_name: str = "unknown",
) -> GoalParseResult:
    """Turn a free-text goal description into validated goals.

    There is no heuristic fallback for goals, so every failure becomes an
    unsuccessful result carrying rephrasing suggestions.
    """
    if isinstance(payload, str):
        payload = NaturalLanguageInput(description=payload) if payload.strip() else None
    if payload is None or not payload.description.strip():
        raise InputContractError("A goal description is required.")

    run_id = uuid.uuid4().hex
    started = time.perf_counter()
    original = payload.description.strip()

    if generate_text is None:
        failure = PipelineFailure(kind=ErrorKind.TRANSPORT_ERROR, message="AI service is not configured.")
        _log_run(run_id, started, model_name, failure)
        return failed_goal_result(original, failure)

    prompt = build_goal_prompt(original, ability, _extra_context(payload))
    try:
        text = await generate_text(prompt)
    except Exception as exc:  # noqa: BLE001 - surfaced as a failed parse result
        logger.warning("goal_llm_failed model=%s: %s", model_name, exc)
        failure = PipelineFailure(kind=ErrorKind.TRANSPORT_ERROR, message="AI service request failed.")
        _log_run(run_id, started, model_name, failure)
        return failed_goal_result(original, failure)

    result = parse_goal_response(text, original)
    if isinstance(result, PipelineFailure):
        logger.info("goal_parse_failed reason=%s", result.kind.value)
        _log_run(run_id, started, model_name, result)
        return failed_goal_result(original, result)

    _log_run(run_id, started, model_name, None)
    return result

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable

from pydantic import ValidationError

from skillpath.ai.types import GenerateText
from skillpath.analytics.db import log_ai_analysis_run
from skillpath.core.config.scoring import get_scoring_value
from skillpath.core.errors import (
    AssessmentNotFoundError,
    ErrorKind,
    InputContractError,
    PipelineFailure,
)
from skillpath.core.profile_store import ASSESSMENT_KEY, HISTORY_KEY, ProfileStore
from skillpath.parsing.extract import extract_json
from skillpath.parsing.repair import parse_json_payload
from skillpath.planning.cache import PlanCache
from skillpath.planning.deriver import PlanDeriver
from skillpath.reporting.markdown import export_assessment_report
from skillpath.schemas.assessment import (
    AbilitySummary,
    Assessment,
    AssessmentInput,
    AssessmentMethod,
    HistoryEntry,
    WeakArea,
)
from skillpath.schemas.plan import ImprovementPlan
from skillpath.scoring.aggregate import DIMENSION_KEYS, classify_level
from skillpath.scoring.fallback import score_fallback
from skillpath.scoring.skill_score import is_inferred, score_of
from skillpath.services.prompts import build_assessment_prompt
from skillpath.validation.assessment import validate_assessment

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_assessment_response(
    text: str,
    method: AssessmentMethod | None = None,
    assessed_at: str | None = None,
) -> Assessment | PipelineFailure:
    """Extract, repair, parse and validate one model response without raising."""
    extracted = extract_json(text)
    if isinstance(extracted, PipelineFailure):
        return extracted
    parsed = parse_json_payload(extracted)
    if isinstance(parsed, PipelineFailure):
        return parsed
    return validate_assessment(parsed, method, assessed_at)


@dataclass(frozen=True, slots=True)
class AssessmentOutcome:
    assessment: Assessment
    used_fallback: bool
    failure: PipelineFailure | None = None


def coerce_input(payload: AssessmentInput | dict[str, Any]) -> AssessmentInput:
    if isinstance(payload, dict):
        try:
            payload = AssessmentInput.model_validate(payload)
        except ValidationError as exc:
            raise InputContractError(f"Invalid assessment input: {exc.error_count()} error(s)") from exc
    if not isinstance(payload, AssessmentInput):
        raise InputContractError("Assessment input must be an AssessmentInput or a mapping.")
    if not payload.has_resume() and not payload.has_questionnaire():
        raise InputContractError("Provide résumé text, questionnaire answers, or both.")
    return payload


class AssessmentService:
    """Assessment pipeline for a single profile.

    ``generate_text`` is awaited once per assessment. When it is missing or
    raises, or its response cannot be extracted, parsed or validated, the
    heuristic fallback scorer produces the assessment instead.
    """

    def __init__(
        self,
        store: ProfileStore,
        generate_text: GenerateText | None = None,
        *,
        plan_cache: PlanCache | None = None,
        clock: Clock | None = None,
        model_name: str = "unknown",
    ):
        self._store = store
        self._generate_text = generate_text
        self._clock = clock or _utc_now
        self._model_name = model_name
        self._plans = PlanDeriver(plan_cache or PlanCache(store), clock=self._clock)

    def execute_assessment(self, payload: AssessmentInput | dict[str, Any]) -> Awaitable[Assessment]:
        checked = coerce_input(payload)

        async def _assessment() -> Assessment:
            outcome = await self._run(checked)
            return outcome.assessment

        return _assessment()

    def run_assessment(self, payload: AssessmentInput | dict[str, Any]) -> Awaitable[AssessmentOutcome]:
        return self._run(coerce_input(payload))

    async def _run(self, payload: AssessmentInput) -> AssessmentOutcome:
        run_id = uuid.uuid4().hex
        started = time.perf_counter()
        assessed_at = self._clock().isoformat(timespec="seconds")

        assessment: Assessment | None = None
        failure: PipelineFailure | None = None
        if self._generate_text is None:
            failure = PipelineFailure(kind=ErrorKind.TRANSPORT_ERROR, message="No text generator configured.")
        else:
            try:
                text = await self._generate_text(build_assessment_prompt(payload))
            except Exception as exc:  # noqa: BLE001 - fallback scoring is expected
                logger.warning("assessment_llm_failed model=%s method=%s: %s", self._model_name, payload.method, exc)
                failure = PipelineFailure(
                    kind=ErrorKind.TRANSPORT_ERROR,
                    message=str(exc) or type(exc).__name__,
                    details={"code": getattr(exc, "code", type(exc).__name__)},
                )
            else:
                result = parse_assessment_response(text, payload.method, assessed_at)
                if isinstance(result, PipelineFailure):
                    failure = result
                else:
                    assessment = result

        if failure is not None or assessment is None:
            logger.info("assessment_fallback_used reason=%s", failure.kind.value if failure else "unknown")
            assessment = score_fallback(payload, now=self._clock())

        self._record(assessment)
        self._log_run(run_id, started, failure)
        return AssessmentOutcome(assessment=assessment, used_fallback=failure is not None, failure=failure)

    def _log_run(self, run_id: str, started: float, failure: PipelineFailure | None) -> None:
        if failure is None:
            status = "success"
        elif self._generate_text is None:
            status = "skipped"
        else:
            status = failure.kind.value
        try:
            log_ai_analysis_run(
                run_id=run_id,
                flow="assessment",
                model=self._model_name,
                status=status,
                used_fallback=failure is not None,
                error_code=failure.kind.value if failure else None,
                latency_ms=int((time.perf_counter() - started) * 1000),
            )
        except Exception:  # pragma: no cover - analytics must not break assessments
            logger.debug("ai_run_logging_failed", exc_info=True)

    def _record(self, assessment: Assessment) -> None:
        previous = self.current_assessment()
        self._store.write(ASSESSMENT_KEY, assessment.to_payload())

        history = self._store.read(HISTORY_KEY)
        entries = list(history) if isinstance(history, list) else []
        entries.append(
            HistoryEntry(
                date=assessment.metadata.assessment_date,
                overall_score=assessment.overall_score,
                level=classify_level(assessment.overall_score).value,
                method=assessment.metadata.assessment_method,
            ).model_dump(mode="json", by_alias=True)
        )
        self._store.write(HISTORY_KEY, entries)

        if previous is not None:
            self._plans.invalidate(previous)

    def current_assessment(self) -> Assessment | None:
        raw = self._store.read(ASSESSMENT_KEY)
        if raw is None:
            return None
        try:
            return Assessment.model_validate(raw)
        except ValidationError as exc:
            logger.warning("stored_assessment_invalid errors=%s", exc.error_count())
            return None

    def assessment_history(self) -> list[HistoryEntry]:
        raw = self._store.read(HISTORY_KEY)
        if not isinstance(raw, list):
            return []
        entries: list[HistoryEntry] = []
        for item in raw:
            try:
                entries.append(HistoryEntry.model_validate(item))
            except ValidationError:
                logger.info("history_entry_skipped")
        return entries

    def _require(self, assessment: Assessment | None) -> Assessment:
        target = assessment or self.current_assessment()
        if target is None:
            raise AssessmentNotFoundError("No assessment recorded for this profile.")
        return target

    def derive_plan(self, assessment: Assessment | None = None) -> ImprovementPlan:
        return self._plans.derive(self._require(assessment))

    def regenerate_plan(self, assessment: Assessment | None = None) -> ImprovementPlan:
        return self._plans.regenerate(self._require(assessment))

    def export_report(self, assessment: Assessment | None = None) -> str:
        return export_assessment_report(self._require(assessment))

    def weak_areas(self, assessment: Assessment | None = None, threshold: float | None = None) -> list[WeakArea]:
        target = self._require(assessment)
        limit = threshold if threshold is not None else float(get_scoring_value("plan.weak_skill_threshold", 60))
        areas = [
            WeakArea(dimension=key, skill=name, score=score_of(skill), is_inferred=is_inferred(skill))
            for key in DIMENSION_KEYS
            for name, skill in target.dimensions[key].skills.items()
            if score_of(skill) < limit
        ]
        return sorted(areas, key=lambda area: (area.score, f"{area.dimension}.{area.skill}"))

    def ability_summary(self) -> AbilitySummary:
        assessment = self.current_assessment()
        if assessment is None:
            return AbilitySummary(has_assessment=False, needs_assessment=True)

        stale_days = int(get_scoring_value("plan.stale_assessment_days", 30))
        try:
            assessed = datetime.fromisoformat(assessment.metadata.assessment_date.replace("Z", "+00:00"))
            if assessed.tzinfo is None:
                assessed = assessed.replace(tzinfo=timezone.utc)
            stale = self._clock() - assessed > timedelta(days=stale_days)
        except ValueError:
            stale = True

        return AbilitySummary(
            has_assessment=True,
            needs_assessment=stale,
            overall_score=assessment.overall_score,
            level=classify_level(assessment.overall_score).label,
            assessment_date=assessment.metadata.assessment_date,
            assessment_method=assessment.metadata.assessment_method,
            confidence=assessment.metadata.confidence,
            strengths=list(assessment.report.strengths),
            improvements=list(assessment.report.improvements),
        )

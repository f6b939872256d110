from __future__ import annotations

import logging
from enum import Enum

from pydantic import ValidationError

from skillpath.core.errors import PlanStateError
from skillpath.core.profile_store import ProfileStore
from skillpath.schemas.plan import ImprovementPlan

logger = logging.getLogger(__name__)

PLAN_KEY_PREFIX = "improvement_plan:"


class PlanState(str, Enum):
    NONE = "none"
    GENERATING = "generating"
    GENERATED = "generated"


class PlanCache:
    """Improvement plans keyed by assessment fingerprint.

    Each fingerprint moves NONE -> GENERATING -> GENERATED. A regenerate
    restarts from any state and replaces the entry (last writer wins). A
    failed generation drops back to NONE so nothing partial is ever served.
    When a profile store is given, finished plans are also persisted there.
    """

    def __init__(self, store: ProfileStore | None = None):
        self._store = store
        self._plans: dict[str, ImprovementPlan] = {}
        self._states: dict[str, PlanState] = {}

    @staticmethod
    def storage_key(fingerprint: str) -> str:
        return f"{PLAN_KEY_PREFIX}{fingerprint}"

    def state(self, fingerprint: str) -> PlanState:
        return self._states.get(fingerprint, PlanState.NONE)

    def get(self, fingerprint: str) -> ImprovementPlan | None:
        plan = self._plans.get(fingerprint)
        if plan is not None or self._store is None or self.state(fingerprint) is not PlanState.NONE:
            return plan

        raw = self._store.read(self.storage_key(fingerprint))
        if raw is None:
            return None
        try:
            plan = ImprovementPlan.model_validate(raw)
        except ValidationError as exc:
            logger.warning("plan_cache_entry_invalid fingerprint=%s errors=%s", fingerprint, exc.error_count())
            return None
        self._plans[fingerprint] = plan
        self._states[fingerprint] = PlanState.GENERATED
        return plan

    def begin(self, fingerprint: str, *, regenerate: bool = False) -> None:
        current = self.state(fingerprint)
        if not regenerate and current is not PlanState.NONE:
            raise PlanStateError(f"plan for {fingerprint} is already {current.value}")
        self._plans.pop(fingerprint, None)
        self._states[fingerprint] = PlanState.GENERATING

    def complete(self, fingerprint: str, plan: ImprovementPlan) -> ImprovementPlan:
        if self.state(fingerprint) is not PlanState.GENERATING:
            raise PlanStateError(f"plan for {fingerprint} is not being generated")
        self._plans[fingerprint] = plan
        self._states[fingerprint] = PlanState.GENERATED
        if self._store is not None:
            self._store.write(self.storage_key(fingerprint), plan.model_dump(mode="json", by_alias=True))
        return plan

    def fail(self, fingerprint: str) -> None:
        self._plans.pop(fingerprint, None)
        self._states.pop(fingerprint, None)

    def invalidate(self, fingerprint: str) -> None:
        self._plans.pop(fingerprint, None)
        self._states.pop(fingerprint, None)
        if self._store is not None:
            self._store.delete(self.storage_key(fingerprint))

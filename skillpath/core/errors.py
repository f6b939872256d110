from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    TRANSPORT_ERROR = "transport_error"
    NO_JSON_FOUND = "no_json_found"
    PARSE_FAILURE = "parse_failure"
    VALIDATION_FAILURE = "validation_failure"
    MISSING_FIELD = "missing_field"


@dataclass(frozen=True)
class PipelineFailure:
    """Typed failure value passed along extract -> parse -> validate instead of raising."""

    kind: ErrorKind
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


class TransportError(RuntimeError):
    def __init__(self, message: str, *, code: str = "llm_unavailable"):
        super().__init__(message)
        self.code = code


class InputContractError(ValueError):
    """Malformed caller input, raised before any model call is made."""


class AssessmentNotFoundError(LookupError):
    pass


class PlanStateError(RuntimeError):
    pass

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Protocol, Sequence

from skillpath.core.errors import ErrorKind, PipelineFailure

_FENCED_JSON_RE = re.compile(r"```json\s*([\s\S]*?)(?:```|\Z)", re.IGNORECASE)
_PLAIN_FENCE_RE = re.compile(r"```[ \t]*\r?\n([\s\S]*?)(?:```|\Z)")
_BRACE_SPAN_RE = re.compile(r"\{[\s\S]*\}")


def _is_balanced(span: str) -> bool:
    """True when every brace opened outside a string literal is closed again."""
    depth = 0
    in_string = False
    escaped = False
    for char in span:
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
    return depth == 0 and not in_string


class ExtractionStrategy(Protocol):
    name: str

    def try_extract(self, text: str) -> str | None: ...


@dataclass(frozen=True)
class FencedJsonStrategy:
    name: str = "fenced_json"

    def try_extract(self, text: str) -> str | None:
        match = _FENCED_JSON_RE.search(text)
        if not match:
            return None
        return match.group(1).strip()


@dataclass(frozen=True)
class PlainFenceStrategy:
    name: str = "plain_fence"

    def try_extract(self, text: str) -> str | None:
        for match in _PLAIN_FENCE_RE.finditer(text):
            interior = match.group(1).strip()
            if interior.startswith("{"):
                return interior
        return None


@dataclass(frozen=True)
class BraceSpanStrategy:
    name: str = "brace_span"

    def try_extract(self, text: str) -> str | None:
        match = _BRACE_SPAN_RE.search(text)
        if not match:
            start = text.find("{")
            return text[start:].rstrip() if start >= 0 else None
        if _is_balanced(match.group(0)):
            return match.group(0)
        # Cut-off output: keep the tail so the repair pass can close it.
        return text[match.start():].rstrip()


DEFAULT_STRATEGIES: tuple[ExtractionStrategy, ...] = (
    FencedJsonStrategy(),
    PlainFenceStrategy(),
    BraceSpanStrategy(),
)


def extract_json(
    text: str,
    strategies: Sequence[ExtractionStrategy] = DEFAULT_STRATEGIES,
) -> str | PipelineFailure:
    """Return the first JSON-looking payload found by the ordered strategies."""
    if text:
        for strategy in strategies:
            candidate = strategy.try_extract(text)
            if candidate:
                return candidate
    return PipelineFailure(
        kind=ErrorKind.NO_JSON_FOUND,
        message="No JSON object found in model response.",
        details={"response_chars": len(text or "")},
    )

from __future__ import annotations

import json
import logging
import re
from typing import Any

from skillpath.core.errors import ErrorKind, PipelineFailure

logger = logging.getLogger(__name__)

_SMART_DOUBLE_QUOTES = {"“", "”", "„", "‟"}
_CLOSERS = {"{": "}", "[": "]"}
_CONTROL_ESCAPES = {
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\b": "\\b",
    "\f": "\\f",
}
_TRUNCATED_LITERAL_RE = re.compile(r"(?<![\w\"])(tr?u?|fa?l?s?|nu?l?)$")
_LITERAL_COMPLETIONS = {"t": "true", "f": "false", "n": "null"}


def _last_significant_index(out: list[str]) -> int:
    for index in range(len(out) - 1, -1, -1):
        if not out[index].isspace():
            return index
    return -1


def _drop_trailing_comma(out: list[str]) -> None:
    index = _last_significant_index(out)
    if index >= 0 and out[index] == ",":
        del out[index]


def _complete_truncated_tail(text: str) -> str:
    stripped = text.rstrip()
    match = _TRUNCATED_LITERAL_RE.search(stripped)
    if match and match.group(1):
        fragment = match.group(1)
        completion = _LITERAL_COMPLETIONS[fragment[0]]
        if completion.startswith(fragment) and fragment != completion:
            return stripped[: match.start(1)] + completion
    if stripped.endswith(":"):
        return stripped + " null"
    return text


def cleanup_json_string(text: str) -> str:
    """Repair the structural faults models commonly produce in JSON output.

    Handles trailing commas before ``}``/``]``, raw control characters inside
    string literals, smart quotes used as string delimiters, and output that
    was cut off mid-string, mid-literal or before its closing brackets.
    Content inside well-formed strings is left untouched.
    """
    out: list[str] = []
    stack: list[str] = []
    in_string = False
    smart_delimited = False
    escaped = False

    for ch in text:
        if in_string:
            if escaped:
                out.append(ch)
                escaped = False
            elif ch == "\\":
                out.append(ch)
                escaped = True
            elif ch == '"' and not smart_delimited:
                out.append(ch)
                in_string = False
            elif ch in _SMART_DOUBLE_QUOTES and smart_delimited:
                out.append('"')
                in_string = False
            elif ch == '"':
                out.append('\\"')
            elif ord(ch) < 0x20:
                out.append(_CONTROL_ESCAPES.get(ch, f"\\u{ord(ch):04x}"))
            else:
                out.append(ch)
            continue

        if ch == '"' or ch in _SMART_DOUBLE_QUOTES:
            in_string = True
            smart_delimited = ch != '"'
            out.append('"')
        elif ch in _CLOSERS:
            stack.append(_CLOSERS[ch])
            out.append(ch)
        elif ch in ("}", "]"):
            _drop_trailing_comma(out)
            if stack and stack[-1] == ch:
                stack.pop()
            out.append(ch)
        else:
            out.append(ch)

    if in_string:
        if escaped:
            out.pop()
        out.append('"')

    repaired = "".join(out)
    if stack:
        repaired = _complete_truncated_tail(repaired)
        tail = list(repaired)
        for closer in reversed(stack):
            _drop_trailing_comma(tail)
            tail.append(closer)
        repaired = "".join(tail)
    return repaired


def parse_json_payload(text: str) -> Any | PipelineFailure:
    """Repair once, then parse; a remaining decode error is a parse failure."""
    repaired = cleanup_json_string(text)
    try:
        return json.loads(repaired)
    except json.JSONDecodeError as exc:
        logger.info("json_repair_failed pos=%s chars=%s: %s", exc.pos, len(text), exc.msg)
        return PipelineFailure(
            kind=ErrorKind.PARSE_FAILURE,
            message=f"Response JSON could not be parsed: {exc.msg}",
            details={"position": exc.pos},
        )

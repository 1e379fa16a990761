"""Structured Recovery — turns "probably JSON" model text into data.

Transforms run in a fixed order, each exactly once:
  1. strip_code_fences         ```json ... ``` markers and language tags
  2. slice_to_braces           first "{" .. last "}" unless text already starts as JSON
  3. remove_trailing_commas    ",}" / ",]" outside string literals
  4. normalize_quotes          curly delimiter quotes → straight quotes
  5. strip_control_characters  everything below 0x20 (and DEL) except \\t \\n \\r
  6. parse_structured          json.loads

Reordering changes what is recoverable, so RECOVERY_STEPS is the single
source of truth for the order. All functions are pure.
"""

from __future__ import annotations

import json
import re
from typing import Any, Callable

from resumeai.core.metrics import RECOVERY_RESULTS
from resumeai.gateway.errors import OutputUnparsable

_FENCE_PATTERN = re.compile(r"```[ \t]*[\w.+-]*")
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")

_CURLY_DOUBLE_QUOTES = frozenset("“”„‟")


def strip_code_fences(text: str) -> str:
    """Remove markdown fence markers together with any language tag.

    Backticks inside a JSON string literal are content and stay.
    """
    out: list[str] = []
    in_string = False
    escaped = False
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            i += 1
            continue

        if ch == "`" and text.startswith("```", i):
            i = _FENCE_PATTERN.match(text, i).end()
            continue
        if ch == '"':
            in_string = True
        out.append(ch)
        i += 1

    return "".join(out)


def slice_to_braces(text: str) -> str:
    """Keep only the span from the first "{" to the last "}".

    Text that already starts like a JSON value ("{", "[" or a string) is
    only trimmed, and so is text without a balanced pair.
    """
    stripped = text.strip()
    if stripped.startswith(("[", '"')):
        return stripped
    if stripped.startswith("{") and stripped.endswith("}"):
        return stripped
    first = text.find("{")
    last = text.rfind("}")
    if first == -1 or last < first:
        return text
    return text[first : last + 1]


def remove_trailing_commas(text: str) -> str:
    """Drop commas followed only by whitespace and a closing brace/bracket."""
    out: list[str] = []
    in_string = False
    escaped = False
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            i += 1
            continue

        if ch == '"':
            in_string = True
        elif ch == ",":
            j = i + 1
            while j < n and text[j] in " \t\r\n":
                j += 1
            if j < n and text[j] in "}]":
                i += 1
                continue
        out.append(ch)
        i += 1

    return "".join(out)


def normalize_quotes(text: str) -> str:
    """Replace curly double quotes that delimit strings with straight quotes.

    Curly quotes inside a straight-quoted string are content and stay.
    """
    out: list[str] = []
    delimiter: str | None = None  # None, '"' or 'curly'
    escaped = False

    for ch in text:
        if delimiter is None:
            if ch == '"':
                delimiter = '"'
                out.append(ch)
            elif ch in _CURLY_DOUBLE_QUOTES:
                delimiter = "curly"
                out.append('"')
            else:
                out.append(ch)
            continue

        if escaped:
            escaped = False
            out.append(ch)
            continue
        if ch == "\\":
            escaped = True
            out.append(ch)
            continue

        if delimiter == '"':
            if ch == '"':
                delimiter = None
            out.append(ch)
        else:
            if ch in _CURLY_DOUBLE_QUOTES or ch == '"':
                delimiter = None
                out.append('"')
            else:
                out.append(ch)

    return "".join(out)


def strip_control_characters(text: str) -> str:
    """Remove non-printable control characters other than tab and newlines."""
    return _CONTROL_CHARS.sub("", text)


def parse_structured(text: str) -> Any:
    return json.loads(text)


RECOVERY_STEPS: tuple[Callable[[str], str], ...] = (
    strip_code_fences,
    slice_to_braces,
    remove_trailing_commas,
    normalize_quotes,
    strip_control_characters,
)


def sanitize(raw_text: str) -> str:
    """Apply the text transforms (steps 1-5) in order."""
    text = raw_text
    for step in RECOVERY_STEPS:
        text = step(text)
    return text


def recover(raw_text: str) -> Any:
    """Sanitize and parse ``raw_text``.

    Raises OutputUnparsable carrying the original text when parsing fails.
    """
    try:
        value = parse_structured(sanitize(raw_text))
    except json.JSONDecodeError as e:
        RECOVERY_RESULTS.labels(result="unparsable").inc()
        raise OutputUnparsable(raw_text, reason=f"{e.msg} at line {e.lineno} column {e.colno}") from e
    RECOVERY_RESULTS.labels(result="recovered").inc()
    return value


def recover_object(raw_text: str) -> dict:
    """Like recover(), but the payload must be a JSON object."""
    value = recover(raw_text)
    if not isinstance(value, dict):
        raise OutputUnparsable(raw_text, reason=f"expected a JSON object, got {type(value).__name__}")
    return value

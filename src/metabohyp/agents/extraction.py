"""
Resilient extraction of JSON from LLM output.

Completions are regularly cut off at the token budget or wrapped in prose.
``extract`` recovers the most it can, trying strategies from "assume the
JSON is well-formed" down to "trust only whole top-level objects":

1. Direct match: first opener to last closer, strict parse.
2. Truncation repair: trim a dangling tail, then close whatever is still
   open (string-literal aware), strict parse.
3. Last complete element (arrays): cut at the last ``},`` and close the array.
4. Last separator (arrays): cut at the last comma directly inside the
   outer array, so arrays of arrays or scalars keep their complete elements.
5. Per-element salvage (arrays): parse every complete top-level ``{...}``
   on its own and keep the ones that parse.

Nothing here raises; ``None`` means no strategy produced a value. A salvaged
array may hold fewer elements than the model intended, never a partial one.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Iterator, Literal

logger = logging.getLogger(__name__)

Shape = Literal["array", "object"]

_DELIMITERS: dict[str, tuple[str, str]] = {
    "array": ("[", "]"),
    "object": ("{", "}"),
}
_CLOSER_FOR = {"[": "]", "{": "}"}

# Applied in this order to the tail of a truncated response.
_TAIL_TRIMS = [
    re.compile(r',\s*"[^"]*\Z'),  # dangling string after a comma
    re.compile(r',\s*"[^"]*":\s*"[^"]*\Z'),  # "key": "partial
    re.compile(r',\s*"[^"]*":\s*\[[^\]]*\Z'),  # "key": [partial
    re.compile(r',\s*"[^"]*":\s*\Z'),  # "key": with no value
    re.compile(r",\s*\Z"),  # trailing comma
    re.compile(r",\s*\{[^}]*\Z"),  # nested object that never closed
]


def _try_parse(text: str) -> tuple[bool, Any]:
    try:
        return True, json.loads(text)
    except (ValueError, RecursionError):
        return False, None


def _structural(text: str, chars: str = "[]{}") -> Iterator[tuple[int, str]]:
    """Yield (index, char) for every char in ``chars`` outside string literals."""
    in_string = False
    escaped = False
    for i, ch in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in chars:
            yield i, ch


def _open_stack(text: str) -> list[str]:
    """Openers still unclosed at the end of ``text``, innermost last."""
    stack: list[str] = []
    for _, ch in _structural(text):
        if ch in _CLOSER_FOR:
            stack.append(ch)
        elif stack and _CLOSER_FOR[stack[-1]] == ch:
            stack.pop()
    return stack


def trim_tail(text: str) -> str:
    """Drop an incomplete trailing key, value or nested object."""
    for pattern in _TAIL_TRIMS:
        text = pattern.sub("", text, count=1)
    return text


def close_open(text: str) -> str:
    """Append exactly the closers needed to balance ``text``."""
    return text + "".join(_CLOSER_FOR[ch] for ch in reversed(_open_stack(text)))


def _last_element_separator(text: str) -> int:
    """Index of the last comma directly inside the outermost array, or -1."""
    depth = 0
    last = -1
    for i, ch in _structural(text, "[]{},"):
        if ch in "[{":
            depth += 1
        elif ch in "]}":
            depth -= 1
        elif depth == 1:
            last = i
    return last


def _top_level_objects(text: str) -> list[Any]:
    objects: list[Any] = []
    depth = 0
    begin = -1
    for i, ch in _structural(text):
        if ch == "{":
            if depth == 0:
                begin = i
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
            if depth == 0:
                ok, value = _try_parse(text[begin : i + 1])
                if ok:
                    objects.append(value)
    return objects


def extract(text: str | None, shape: Shape = "array") -> Any | None:
    """Recover a JSON array or object from ``text``; None if nothing is salvageable."""
    if not text or shape not in _DELIMITERS:
        return None

    opener, closer = _DELIMITERS[shape]
    start = text.find(opener)
    if start == -1:
        return None

    end = text.rfind(closer)
    if end > start:
        ok, value = _try_parse(text[start : end + 1])
        if ok:
            logger.debug("Parsed %s directly", shape)
            return value

    trimmed = trim_tail(text[start:])
    stack = _open_stack(trimmed)

    # An array element closed by us rather than by the model is not trusted.
    if shape == "object" or len(stack) <= 1:
        ok, value = _try_parse(close_open(trimmed))
        if ok:
            logger.debug("Parsed %s after truncation repair", shape)
            return value

    if shape != "array":
        logger.debug("No %s recoverable from %d chars", shape, len(text))
        return None

    cut = trimmed.rfind("},")
    if cut > 0:
        ok, value = _try_parse(trimmed[: cut + 1] + "]")
        if ok:
            logger.debug("Parsed array up to its last complete element")
            return value

    separator = _last_element_separator(trimmed)
    if separator > 0:
        ok, value = _try_parse(trimmed[:separator] + "]")
        if ok:
            logger.debug("Parsed array up to its last top-level separator")
            return value

    objects = _top_level_objects(trimmed)
    if objects:
        logger.debug("Salvaged %d standalone objects", len(objects))
        return objects

    logger.debug("No array recoverable from %d chars", len(text))
    return None

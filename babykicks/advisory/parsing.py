# -*- coding: utf-8 -*-
"""Tolerant parsing of JSON objects returned by chat models."""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List


def _strip_fences(text: str) -> str:
    cleaned = text.strip()
    cleaned = re.sub(r"^```(?:json)?\s*", "", cleaned, flags=re.IGNORECASE)
    cleaned = re.sub(r"\s*```$", "", cleaned)
    return cleaned


def remove_trailing_commas(text: str) -> str:
    """Drop commas that directly precede ``}`` or ``]`` outside string literals."""
    out: list[str] = []
    in_str = False
    escaped = False
    for i, ch in enumerate(text):
        if in_str:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == "\"":
                in_str = False
            continue

        if ch == "\"":
            in_str = True
        elif ch == ",":
            rest = text[i + 1 :].lstrip(" \t\r\n")
            if rest[:1] in ("}", "]"):
                continue
        out.append(ch)
    return "".join(out)


def iter_object_candidates(text: str) -> List[str]:
    """Extract balanced ``{...}`` spans, respecting string literals.

    Models sometimes wrap the object in prose or emit several objects.
    """
    cleaned = _strip_fences(text)
    candidates: List[str] = []
    in_str = False
    escaped = False
    depth = 0
    start_idx: int | None = None

    for i, ch in enumerate(cleaned):
        if in_str:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == "\"":
                in_str = False
            continue

        if ch == "\"":
            in_str = True
        elif ch == "{":
            if depth == 0:
                start_idx = i
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
            if depth == 0 and start_idx is not None:
                candidates.append(cleaned[start_idx : i + 1])
                start_idx = None
    return candidates


def sanitize_json_like(text: str) -> str:
    # Full-width punctuation and curly quotes show up a lot in zh output.
    cleaned = text.replace("：", ":").replace("，", ",")
    cleaned = cleaned.replace("“", "\"").replace("”", "\"")
    cleaned = remove_trailing_commas(cleaned)
    cleaned = re.sub(r"\bNaN\b", "null", cleaned, flags=re.IGNORECASE)
    return cleaned


def parse_model_json(content: str) -> Dict[str, Any]:
    """Return the first JSON object found in ``content``.

    Raises ``ValueError`` when nothing parseable is present.
    """
    last_error: Exception | None = None
    for candidate in iter_object_candidates(content or ""):
        for attempt in (candidate, sanitize_json_like(candidate)):
            try:
                parsed = json.loads(attempt)
            except json.JSONDecodeError as exc:
                last_error = exc
                continue
            if isinstance(parsed, dict):
                return parsed
    raise ValueError(f"Model output does not contain a JSON object: {last_error}")

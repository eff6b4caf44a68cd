"""Extract a JSON value from free-form provider text."""
from __future__ import annotations

import json
import re
from typing import Any

_JSON_FENCE = re.compile(r"```json\s*([\s\S]*?)\s*```", re.IGNORECASE)


class ParseError(ValueError):
    """Raised when no JSON value can be recovered from the text."""


def extract_json(text: str) -> Any:
    """Return the JSON value carried by ``text``.

    A fenced block tagged ``json`` wins when present and parseable; otherwise the
    whole trimmed text is parsed, then the interior of an untagged fence.
    """

    if not isinstance(text, str):
        raise ParseError(f"expected text, got {type(text).__name__}")

    match = _JSON_FENCE.search(text)
    if match:
        try:
            return json.loads(match.group(1))
        except json.JSONDecodeError:
            pass

    cleaned = text.strip()
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as exc:
        unfenced = _strip_code_fences(cleaned)
        if unfenced != cleaned:
            try:
                return json.loads(unfenced)
            except json.JSONDecodeError:
                pass
        raise ParseError(f"no JSON value found: {exc.msg}") from exc


def _strip_code_fences(text: str) -> str:  # Remove a leading/trailing markdown fence pair
    if not text.startswith("```"):
        return text
    lines = text.splitlines()[1:]
    while lines and lines[0].strip() == "":
        lines = lines[1:]
    while lines and lines[-1].strip() == "":
        lines = lines[:-1]
    if lines and lines[-1].strip() == "```":
        lines = lines[:-1]
    return "\n".join(lines).strip()


__all__ = ["ParseError", "extract_json"]

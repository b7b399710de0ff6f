"""
Judge response extraction

The selection judge is asked for a single JSON object, but models add
fencing or chatter around it. Each recovery tier below is a pure function
returning the parsed object or None; ``extract_json`` tries them in order.
"""

from __future__ import annotations

import json
import re

from best_of_n.domain.value_objects import ComparisonVerdict

_FENCE_OPEN_RE = re.compile(r"^```(?:json)?\s*\n?", re.IGNORECASE)
_FENCE_CLOSE_RE = re.compile(r"\n?```\s*$")


class JudgeError(Exception):
    """Judge response could not be used"""
    pass


def _loads_object(text: str) -> dict | None:
    try:
        data = json.loads(text)
    except (ValueError, RecursionError):
        return None
    return data if isinstance(data, dict) else None


def parse_direct(raw: str) -> dict | None:
    """Tier 1: the whole response is the JSON object"""
    return _loads_object(raw.strip())


def parse_fenced(raw: str) -> dict | None:
    """Tier 2: the JSON object is wrapped in a markdown code fence"""
    cleaned = raw.strip()
    if not cleaned.startswith("```"):
        return None
    cleaned = _FENCE_CLOSE_RE.sub("", _FENCE_OPEN_RE.sub("", cleaned))
    return _loads_object(cleaned)


def parse_braced(raw: str) -> dict | None:
    """Tier 3: the JSON object sits between the first '{' and the last '}'"""
    first = raw.find("{")
    last = raw.rfind("}")
    if first == -1 or last <= first:
        return None
    return _loads_object(raw[first:last + 1])


_TIERS = (parse_direct, parse_fenced, parse_braced)


def extract_json(raw: str) -> dict | None:
    """
    Extract a JSON object from a judge response

    Returns:
        The first object any tier recovers, or None
    """
    for tier in _TIERS:
        parsed = tier(raw)
        if parsed is not None:
            return parsed
    return None


def _string_list(value) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None]


def parse_comparison(raw: str, sample_count: int) -> ComparisonVerdict:
    """
    Parse and validate a selection judge response

    Args:
        raw: Judge response text
        sample_count: Number of samples shown to the judge

    Returns:
        ComparisonVerdict with a 0-based best_index

    Raises:
        JudgeError: No JSON object found, or best_index missing / not an
            integer / outside 1..sample_count
    """
    parsed = extract_json(raw)
    if parsed is None:
        raise JudgeError(f"No JSON object in judge response: {raw.strip()[:200]}")

    best_index = parsed.get("best_index")
    # bool is an int subclass; true/false are not indexes
    if isinstance(best_index, bool) or not isinstance(best_index, (int, float)):
        raise JudgeError(f"best_index missing or not a number: {best_index!r}")
    if isinstance(best_index, float):
        if not best_index.is_integer():
            raise JudgeError(f"best_index is not an integer: {best_index!r}")
        best_index = int(best_index)
    if best_index < 1 or best_index > sample_count:
        raise JudgeError(f"best_index {best_index} outside 1..{sample_count}")

    reasoning = parsed.get("reasoning")
    return ComparisonVerdict(
        best_index=best_index - 1,
        reasoning=reasoning if isinstance(reasoning, str) else "",
        consistent_points=_string_list(parsed.get("consistent_points")),
        unique_points=_string_list(parsed.get("unique_points")),
        contradictions=_string_list(parsed.get("contradictions")),
    )


def split_brainstorm_response(raw: str) -> tuple[str, str | None]:
    """
    Split a brainstorm merge into (merged ideas, trailing note)

    The note follows the last line consisting only of '---'. Without such a
    line the whole response is the merged body and the note is None.
    """
    lines = raw.strip().splitlines()
    for position in range(len(lines) - 1, -1, -1):
        if lines[position].strip() == "---":
            body = "\n".join(lines[:position]).strip()
            note = "\n".join(lines[position + 1:]).strip()
            if body:
                return body, note or None
            break
    return raw.strip(), None

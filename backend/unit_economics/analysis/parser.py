"""
Model reply parsing.

The model is not trusted to return only JSON, so parsing runs in two stages
that can be swapped independently:

1. extract_json_object: best-effort search for the first balanced {...}
   substring in noisy text (code fences, prose before and after).
2. validate_analysis: strict structural check against AnalysisResult.

Any failure degrades to a copy of FALLBACK_RESULT instead of raising.
"""

import copy
import json
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import ValidationError

from unit_economics.analysis.schemas import AnalysisResult, METRIC_NAMES

logger = logging.getLogger(__name__)

JSON_DECODE_DEPTH = 512
LOG_PREVIEW_LENGTH = 300

_CODE_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)

_UNAVAILABLE = "Data unavailable - failed to parse the AI response"

FALLBACK_RESULT = {
    "error": "Failed to process the AI response into a structured format",
    "metrics": {name: {"value": 0, "explanation": _UNAVAILABLE} for name in METRIC_NAMES},
    "recommendations": [
        "Try submitting the request again with a more detailed business description",
        "Make sure all fields are filled in correctly",
        "Contact the administrator if the problem persists",
    ],
    "assumptions": [
        "Assumptions could not be determined because the AI response failed to parse",
    ],
    "risk_factors": [
        "Not enough data for a full risk analysis",
        "Error processing the response from the AI service",
    ],
    "market_insights": {
        "industry_benchmarks": "Data unavailable due to a parsing error",
        "competitive_analysis": "Analysis unavailable due to a parsing error",
        "growth_potential": "Assessment unavailable due to a parsing error",
    },
}


class JSONTooDeep(ValueError):
    pass


@dataclass
class ParseOutcome:
    result: dict
    degraded: bool = False
    missing_fields: list[str] = field(default_factory=list)


def fallback_result() -> dict:
    return copy.deepcopy(FALLBACK_RESULT)


def strip_code_fences(text: str) -> str:
    return _CODE_FENCE.sub("", text).strip()


def extract_json_object(text: str) -> Optional[str]:
    """Return the first balanced {...} substring, ignoring braces inside strings.

    Single pass: open braces are kept on a stack, and the earliest opening
    brace that gets closed wins. Braces that never close are skipped.
    """
    starts: list[int] = []
    best: Optional[tuple[int, int]] = None
    in_string = escaped = False
    for i, ch in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == "{":
            starts.append(i)
        elif not starts:
            continue
        elif ch == '"':
            in_string = True
        elif ch == "}":
            start = starts.pop()
            if not starts:
                return text[start:i + 1]
            if best is None or start < best[0]:
                best = (start, i)
    if best is None:
        return None
    return text[best[0]:best[1] + 1]


def nesting_depth(text: str) -> int:
    depth = deepest = 0
    in_string = escaped = False
    for ch in text:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch in "{[":
            depth += 1
            deepest = max(deepest, depth)
        elif ch in "}]":
            depth -= 1
    return deepest


def _reject_constant(name: str):
    raise ValueError(f"Non-standard JSON constant: {name}")


def _finite_float(literal: str) -> float:
    value = float(literal)
    if not math.isfinite(value):
        raise ValueError(f"Number out of range: {literal[:30]}")
    return value


def decode_json_object(candidate: str, max_depth: int = JSON_DECODE_DEPTH) -> dict:
    """Strict decode. Raises ValueError (incl. JSONDecodeError, JSONTooDeep) on failure."""
    depth = nesting_depth(candidate)
    if depth > max_depth:
        raise JSONTooDeep(f"JSON nesting depth {depth} exceeds {max_depth}")
    data = json.loads(candidate, parse_constant=_reject_constant, parse_float=_finite_float)
    if not isinstance(data, dict):
        raise ValueError("Decoded JSON is not an object")
    return data


def validation_errors(data: Any) -> list[str]:
    """Dotted paths of required fields that are missing or malformed."""
    if not isinstance(data, dict):
        return ["<root>"]
    try:
        AnalysisResult.model_validate(data)
    except ValidationError as e:
        return [".".join(str(p) for p in err["loc"]) for err in e.errors()]
    return []


def is_valid_analysis(data: Any) -> bool:
    """True for a complete, non-degraded analysis."""
    return isinstance(data, dict) and "error" not in data and not validation_errors(data)


def parse_analysis(raw_text: str) -> ParseOutcome:
    text = strip_code_fences(raw_text or "")
    candidate = extract_json_object(text)
    if candidate is None:
        logger.warning(f"No JSON object found in AI response: {text[:LOG_PREVIEW_LENGTH]!r}")
        return ParseOutcome(result=fallback_result(), degraded=True)

    try:
        data = decode_json_object(candidate)
    except ValueError as e:
        logger.error(f"JSON parsing error: {e}; response preview: {text[:LOG_PREVIEW_LENGTH]!r}")
        return ParseOutcome(result=fallback_result(), degraded=True)

    missing = validation_errors(data)
    if "error" in data:
        missing.append("error (unexpected field)")
    if missing:
        logger.warning(f"Invalid JSON structure from AI, missing fields: {missing}")
        return ParseOutcome(result=fallback_result(), degraded=True, missing_fields=missing)

    return ParseOutcome(result=data)

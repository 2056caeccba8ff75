"""
Request checks that run before any cache or LLM work.

check_request_size bounds the raw body; validate_request applies the
per-field rules declared on AnalysisRequest and turns pydantic errors into
localized {field: [messages]} details.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import ValidationError

from unit_economics.analysis.errors import RequestTooLarge
from unit_economics.analysis.messages import DEFAULT_LANGUAGE, message
from unit_economics.analysis.schemas import AnalysisRequest

MAX_REQUEST_SIZE = 5000  # bytes

# pydantic error type -> rule name used in message keys
_RULES = {
    "missing": "required",
    "string_type": "string",
    "string_too_short": "min",
    "string_too_long": "max",
    "string_pattern_mismatch": "regex",
}


@dataclass
class ValidationOutcome:
    request: Optional[AnalysisRequest] = None
    details: dict[str, list[str]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.request is not None


def check_request_size(raw_body: bytes, limit: int = MAX_REQUEST_SIZE) -> Optional[RequestTooLarge]:
    if len(raw_body) > limit:
        return RequestTooLarge(len(raw_body), limit)
    return None


def parse_body(raw_body: bytes) -> Any:
    """Decode the JSON body, returning None for anything undecodable."""
    try:
        return json.loads(raw_body or b"null")
    except (ValueError, UnicodeDecodeError):
        return None


def validate_request(payload: Any, language: str = DEFAULT_LANGUAGE) -> ValidationOutcome:
    if not isinstance(payload, dict):
        return ValidationOutcome(details={"body": [message("body.invalid", language)]})

    try:
        return ValidationOutcome(request=AnalysisRequest.model_validate(payload))
    except ValidationError as e:
        return ValidationOutcome(details=_error_details(e, language))


def _error_details(exc: ValidationError, language: str) -> dict[str, list[str]]:
    details: dict[str, list[str]] = {}
    for err in exc.errors():
        name = str(err["loc"][0]) if err["loc"] else "body"
        rule = _RULES.get(err["type"], "string")
        # blank required strings are normalized to None before type checks
        if rule == "string" and err.get("input") is None:
            rule = "required"
        try:
            text = message(f"{name}.{rule}", language)
        except KeyError:
            text = err["msg"]
        details.setdefault(name, []).append(text)
    return details

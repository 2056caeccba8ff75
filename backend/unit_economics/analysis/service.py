"""
Unit Economics Analysis Service

Pipeline per request:
  size check → field validation → cache lookup
    → hit:  respond from cache, the LLM is not called
    → miss: build prompt → LLM call → parse/validate → cache (valid only)
  → respond

This is the only place where pipeline errors become HTTP status codes.
Upstream and configuration failures are flattened to INTERNAL_ERROR with a
generated request id; the detail stays in the server log.
"""

import json
import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from unit_economics.analysis.cache import CacheStore, make_cache_key
from unit_economics.analysis.errors import RequestTooLarge, UnitEconomicsError, ValidationFailed
from unit_economics.analysis.gateway import LLMGateway
from unit_economics.analysis.messages import DEFAULT_LANGUAGE, message
from unit_economics.analysis.parser import LOG_PREVIEW_LENGTH, parse_analysis
from unit_economics.analysis.prompts import build_prompt
from unit_economics.analysis.schemas import AnalysisRequest
from unit_economics.analysis.validation import check_request_size, parse_body, validate_request

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL = 60 * 60  # seconds


@dataclass
class ServiceResponse:
    status_code: int
    body: dict


def new_request_id() -> str:
    return f"err_{uuid.uuid4().hex[:13]}"


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _input_preview(request: Optional[AnalysisRequest]) -> str:
    if request is None:
        return ""
    return json.dumps(request.model_dump(exclude_none=True), ensure_ascii=False)[:LOG_PREVIEW_LENGTH]


class UnitEconomicsService:
    def __init__(self, gateway: LLMGateway, cache: CacheStore, cache_ttl: int = DEFAULT_CACHE_TTL):
        self.gateway = gateway
        self.cache = cache
        self.cache_ttl = cache_ttl

    async def analyze(
        self,
        raw_body: bytes,
        language: str = DEFAULT_LANGUAGE,
        client_request_id: Optional[str] = None,
        client_ip: Optional[str] = None,
    ) -> ServiceResponse:
        too_large = check_request_size(raw_body)
        if too_large:
            logger.info(f"Rejected oversized request: {too_large}")
            return self._error_response(too_large, language)

        validated = validate_request(parse_body(raw_body), language)
        if not validated.ok:
            return self._error_response(ValidationFailed(validated.details), language)
        request = validated.request

        try:
            cache_key = make_cache_key(request)
            cached = await self.cache.get(cache_key)
            if cached is not None:
                logger.info(f"Returning cached analysis result, cache_key={cache_key[:30]}...")
                return self._success(cached, from_cache=True, language=language)

            start = time.time()
            logger.info(f"Analysis start: {request.startup_idea[:100]!r}")
            prompt = build_prompt(request)
            outcome = await self.gateway.send(prompt.system, prompt.user)
            if outcome.ok:
                analysis = await self._parse_and_store(cache_key, outcome.text)
                logger.info(f"Analysis done in {time.time() - start:.1f}s")
                return self._success(analysis, from_cache=False, language=language)
            failure = outcome.error
        except Exception as e:
            failure = e

        request_id = new_request_id()
        context = (
            f"client_request_id={client_request_id}, ip={client_ip}, "
            f"input_preview={_input_preview(request)!r}"
        )
        if isinstance(failure, UnitEconomicsError):
            logger.error(f"Unit economics analysis error [{request_id}]: {type(failure).__name__}: {failure} ({context})")
        else:
            logger.error(f"Unexpected analysis failure [{request_id}] ({context})", exc_info=failure)
        return self._error_response(None, language, request_id)

    async def _parse_and_store(self, cache_key: str, raw_text: str) -> dict:
        parsed = parse_analysis(raw_text)
        if parsed.degraded:
            logger.warning(
                f"AI response degraded to fallback analysis, not caching "
                f"(missing_fields={parsed.missing_fields})"
            )
        else:
            await self.cache.put(cache_key, parsed.result, self.cache_ttl)
        return parsed.result

    def _success(self, analysis: dict, from_cache: bool, language: str) -> ServiceResponse:
        return ServiceResponse(200, {
            "success": True,
            "analysis": analysis,
            "from_cache": from_cache,
            "disclaimer": message("disclaimer", language),
            "timestamp": utc_timestamp(),
        })

    def _error_response(
        self,
        error: Optional[UnitEconomicsError],
        language: str,
        request_id: Optional[str] = None,
    ) -> ServiceResponse:
        if isinstance(error, RequestTooLarge):
            return ServiceResponse(413, {
                "success": False,
                "error": message("request_too_large", language),
                "code": error.code,
            })
        if isinstance(error, ValidationFailed):
            return ServiceResponse(422, {
                "success": False,
                "error": message("validation_error", language),
                "details": error.details,
                "code": error.code,
            })
        return ServiceResponse(500, {
            "success": False,
            "error": message("internal_error", language),
            "code": "INTERNAL_ERROR",
            "request_id": request_id or new_request_id(),
        })

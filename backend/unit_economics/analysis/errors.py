"""
Error taxonomy for the analysis pipeline.

Components hand these back as values (see GatewayOutcome, ValidationOutcome)
rather than raising them across module boundaries. The service module is the
only place that turns them into HTTP responses.
"""

from typing import Optional


class UnitEconomicsError(Exception):
    code = "INTERNAL_ERROR"


class RequestTooLarge(UnitEconomicsError):
    code = "REQUEST_TOO_LARGE"

    def __init__(self, size: int, limit: int):
        super().__init__(f"Request body is {size} bytes (limit {limit})")
        self.size = size
        self.limit = limit


class ValidationFailed(UnitEconomicsError):
    code = "VALIDATION_ERROR"

    def __init__(self, details: dict[str, list[str]]):
        super().__init__(f"Invalid fields: {', '.join(sorted(details))}")
        self.details = details


class ConfigurationMissing(UnitEconomicsError):
    def __init__(self, message: str = "LLM API key is not configured"):
        super().__init__(message)


class UpstreamError(UnitEconomicsError):
    status: Optional[int] = None


class UpstreamUnauthorized(UpstreamError):
    status = 401

    def __init__(self):
        super().__init__("LLM provider rejected the API key")


class UpstreamRateLimited(UpstreamError):
    status = 429

    def __init__(self):
        super().__init__("LLM provider rate limit exceeded")


class UpstreamUnavailable(UpstreamError):
    status = 503

    def __init__(self, reason: str = "LLM provider is temporarily unavailable"):
        super().__init__(reason)


class UpstreamBadRequest(UpstreamError):
    status = 400

    def __init__(self):
        super().__init__("LLM provider rejected the request format")


class UpstreamUnknown(UpstreamError):
    def __init__(self, status: int):
        super().__init__(f"LLM provider returned HTTP {status}")
        self.status = status


class MalformedUpstreamResponse(UpstreamError):
    def __init__(self, reason: str = "LLM response has no message content"):
        super().__init__(reason)

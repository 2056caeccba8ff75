"""
Shared fixtures for the unit economics tests.

The LLM is never called for real: service tests use FakeGateway, gateway
tests put an httpx.MockTransport under the real OpenAI client.
"""
import copy
import json

import httpx
import pytest

from unit_economics.analysis.gateway import GatewayOutcome, LLMGateway
from unit_economics.config import Settings

VALID_ANALYSIS = {
    "metrics": {
        "cac": {"value": 120, "explanation": "Paid search plus outbound sales"},
        "ltv": {"value": 1440, "explanation": "15$ x 8 seats x 12 months retention"},
        "churn_rate": {"value": 3.5, "explanation": "Typical for SMB B2B SaaS"},
        "payback_period": {"value": 4, "explanation": "CAC divided by monthly gross margin"},
        "unit_margin": {"value": 9.5, "explanation": "Subscription minus food and delivery cost"},
        "ltv_cac_ratio": {"value": 12.0, "explanation": "Well above the 3x benchmark"},
    },
    "recommendations": ["Raise prices for small offices", "Add annual plans"],
    "assumptions": ["Average office orders for 8 seats"],
    "risk_factors": ["Food cost inflation", "Low switching costs"],
    "market_insights": {
        "industry_benchmarks": "Corporate catering margins run 10-15%",
        "competitive_analysis": "Crowded in capitals, open in regional cities",
        "growth_potential": "Three cities within 18 months",
    },
}

VALID_PAYLOAD = {
    "startup_idea": "Healthy food delivery for offices",
    "description": (
        "B2B platform delivering healthy meals to offices. Subscription of 15$ per month "
        "per employee, targeting IT companies with 50-200 people."
    ),
    "additional_info": "Planned launch in 3 cities",
}


class FakeGateway:
    """Stands in for LLMGateway; returns queued outcomes and records calls."""

    def __init__(self, *outcomes: GatewayOutcome):
        self.outcomes = list(outcomes)
        self.calls: list[tuple[str, str]] = []

    async def send(self, system_prompt: str, user_prompt: str) -> GatewayOutcome:
        self.calls.append((system_prompt, user_prompt))
        if len(self.outcomes) > 1:
            return self.outcomes.pop(0)
        return self.outcomes[0]

    async def close(self) -> None:
        return None


def completion_body(content) -> dict:
    return {
        "id": "gen-123",
        "object": "chat.completion",
        "created": 1700000000,
        "model": "deepseek/deepseek-r1:free",
        "choices": [{
            "index": 0,
            "message": {"role": "assistant", "content": content},
            "finish_reason": "stop",
        }],
        "usage": {"prompt_tokens": 900, "completion_tokens": 700, "total_tokens": 1600},
    }


@pytest.fixture
def analysis() -> dict:
    return copy.deepcopy(VALID_ANALYSIS)


@pytest.fixture
def payload() -> dict:
    return dict(VALID_PAYLOAD)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        llm_api_key="sk-test-key",
        llm_api_url="https://llm.test/api/v1",
        redis_url="",
        rate_limit_enabled=False,
    )


@pytest.fixture
def text_reply():
    """GatewayOutcome carrying the given model text (defaults to a valid analysis)."""
    def _make(text=None) -> GatewayOutcome:
        return GatewayOutcome(text=text if text is not None else json.dumps(VALID_ANALYSIS))
    return _make


@pytest.fixture
def mock_gateway(settings):
    """Real LLMGateway whose HTTP traffic goes to the given handler."""
    def _make(handler, settings_override: Settings | None = None) -> LLMGateway:
        transport = httpx.MockTransport(handler)
        return LLMGateway(settings_override or settings, http_client=httpx.AsyncClient(transport=transport))
    return _make

"""
LLM Gateway

One chat-completions call per analysis through the OpenAI SDK, pointed at an
OpenRouter-compatible base URL. Sampling parameters are fixed so results stay
comparable between requests. SDK retries are disabled: exactly one attempt.
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional

import httpx
from openai import AsyncOpenAI, APIConnectionError, APIError, APIStatusError, APITimeoutError

from unit_economics.analysis.errors import (
    ConfigurationMissing,
    MalformedUpstreamResponse,
    UnitEconomicsError,
    UpstreamBadRequest,
    UpstreamError,
    UpstreamRateLimited,
    UpstreamUnauthorized,
    UpstreamUnavailable,
    UpstreamUnknown,
)
from unit_economics.config import Settings

MODEL = "deepseek/deepseek-r1:free"
MAX_TOKENS = 2500
TEMPERATURE = 0.3
TOP_P = 0.9
FREQUENCY_PENALTY = 0.1
PRESENCE_PENALTY = 0.1

REQUEST_TIMEOUT = 60.0
CONNECT_TIMEOUT = 10.0

logger = logging.getLogger(__name__)


@dataclass
class GatewayOutcome:
    text: Optional[str] = None
    error: Optional[UnitEconomicsError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def map_status_error(status: int) -> UpstreamError:
    if status == 401:
        return UpstreamUnauthorized()
    if status == 429:
        return UpstreamRateLimited()
    if status == 503:
        return UpstreamUnavailable()
    if status == 400:
        return UpstreamBadRequest()
    return UpstreamUnknown(status)


class LLMGateway:
    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self._http_client = http_client
        self._client: Optional[AsyncOpenAI] = None

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.settings.llm_api_key,
                base_url=self.settings.llm_api_url,
                timeout=httpx.Timeout(REQUEST_TIMEOUT, connect=CONNECT_TIMEOUT),
                max_retries=0,
                default_headers={
                    "HTTP-Referer": self.settings.openrouter_site_url,
                    "X-Title": self.settings.openrouter_app_name,
                },
                http_client=self._http_client,
            )
        return self._client

    async def send(self, system_prompt: str, user_prompt: str) -> GatewayOutcome:
        # re-checked per call, the key may have been rotated out from under us
        if not self.settings.llm_configured:
            logger.critical("LLM API key is not configured, refusing to call the provider")
            return GatewayOutcome(error=ConfigurationMissing())

        start = time.time()
        try:
            completion = await self._get_client().chat.completions.create(
                model=MODEL,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                max_tokens=MAX_TOKENS,
                temperature=TEMPERATURE,
                top_p=TOP_P,
                frequency_penalty=FREQUENCY_PENALTY,
                presence_penalty=PRESENCE_PENALTY,
                stream=False,
            )
        except APITimeoutError:
            logger.error(f"LLM API request timed out after {time.time() - start:.1f}s")
            return GatewayOutcome(error=UpstreamUnavailable("LLM provider timed out"))
        except APIConnectionError:
            logger.error(f"Cannot connect to LLM API at {self.settings.llm_api_url}")
            return GatewayOutcome(error=UpstreamUnavailable("Cannot connect to LLM provider"))
        except APIStatusError as e:
            # status only, the body may echo request details
            logger.error(f"LLM API error: status={e.status_code}")
            return GatewayOutcome(error=map_status_error(e.status_code))
        except APIError as e:
            logger.error(f"LLM API returned an unreadable response: {type(e).__name__}")
            return GatewayOutcome(error=MalformedUpstreamResponse("LLM response could not be read"))

        try:
            content = completion.choices[0].message.content
        except (AttributeError, IndexError, TypeError):
            content = None
        if not content:
            logger.error("LLM API response has no choices[0].message.content")
            return GatewayOutcome(error=MalformedUpstreamResponse())

        usage = getattr(completion, "usage", None)
        if usage:
            logger.info(f"LLM tokens: {usage.prompt_tokens}+{usage.completion_tokens}={usage.total_tokens}")
        logger.info(f"LLM call finished in {time.time() - start:.1f}s")
        return GatewayOutcome(text=content)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None

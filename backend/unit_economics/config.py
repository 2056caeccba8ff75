from pydantic_settings import BaseSettings
from functools import lru_cache
import logging

logger = logging.getLogger(__name__)

API_KEY_PLACEHOLDER = "your_api_key_here"


class Settings(BaseSettings):
    # LLM provider (OpenRouter-compatible chat completions)
    llm_api_key: str = ""
    llm_api_url: str = "https://openrouter.ai/api/v1"
    openrouter_site_url: str = "http://localhost:3000"
    openrouter_app_name: str = "AI Unit Economics Chat"

    # Cache
    redis_url: str = ""
    cache_ttl_minutes: int = 60

    # App
    frontend_url: str = "http://localhost:3000"
    allowed_hosts: list[str] = []
    debug: bool = False
    log_level: str = "INFO"
    rate_limit_enabled: bool = True

    class Config:
        env_file = ".env"

    @property
    def llm_configured(self) -> bool:
        key = self.llm_api_key.strip()
        return bool(key) and key != API_KEY_PLACEHOLDER


@lru_cache
def get_settings() -> Settings:
    return Settings()


def check_llm_configuration(settings: Settings) -> bool:
    """Log a critical error when the LLM key is missing or still the placeholder."""
    if not settings.llm_configured:
        logger.critical("LLM API key is not configured properly. Set LLM_API_KEY.")
        return False
    return True

"""
Unit tests for settings and language selection.
"""
import logging

import pytest

from unit_economics.analysis.messages import message, resolve_language
from unit_economics.config import API_KEY_PLACEHOLDER, Settings, check_llm_configuration


def test_settings_load_from_environment(monkeypatch):
    monkeypatch.setenv("LLM_API_KEY", "sk-from-env")
    monkeypatch.setenv("REDIS_URL", "redis://cache:6379/1")
    monkeypatch.setenv("CACHE_TTL_MINUTES", "15")

    settings = Settings(_env_file=None)
    assert settings.llm_api_key == "sk-from-env"
    assert settings.redis_url == "redis://cache:6379/1"
    assert settings.cache_ttl_minutes == 15
    assert settings.llm_api_url == "https://openrouter.ai/api/v1"  # default


@pytest.mark.parametrize("key, configured", [
    ("", False),
    ("  ", False),
    (API_KEY_PLACEHOLDER, False),
    ("sk-real", True),
])
def test_llm_configured(key, configured):
    assert Settings(_env_file=None, llm_api_key=key).llm_configured is configured


def test_startup_check_logs_missing_key(caplog):
    with caplog.at_level(logging.CRITICAL):
        assert check_llm_configuration(Settings(_env_file=None, llm_api_key="")) is False
    assert "not configured" in caplog.text


def test_startup_check_never_logs_the_key(caplog):
    with caplog.at_level(logging.DEBUG):
        assert check_llm_configuration(Settings(_env_file=None, llm_api_key="sk-secret")) is True
    assert "sk-secret" not in caplog.text


@pytest.mark.parametrize("header, language", [
    (None, "en"),
    ("", "en"),
    ("ru", "ru"),
    ("ru-RU,ru;q=0.9,en-US;q=0.8", "ru"),
    ("de-DE,en;q=0.5", "en"),
    ("fr", "en"),
])
def test_resolve_language(header, language):
    assert resolve_language(header) == language


def test_unknown_language_falls_back_to_english():
    assert message("validation_error", "de") == "Request data validation failed"

from __future__ import annotations

import pytest
from pydantic import ValidationError

from pseudoscope.config import AnalyzerConfig
from pseudoscope.models import RetryPolicy


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("OPENAI_API_KEY", "MODEL", "MAX_RETRIES", "RETRY_DELAY_SECONDS", "MAX_TOTAL_LENGTH"):
        monkeypatch.delenv(f"PSEUDOSCOPE_{name}", raising=False)


def test_config_loads_defaults_and_masks(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PSEUDOSCOPE_OPENAI_API_KEY", "sk_test_dummy")
    cfg = AnalyzerConfig()

    assert cfg.model == "o3-mini"
    assert cfg.api_url == "https://api.openai.com/v1/chat/completions"
    assert cfg.max_total_length == 50000
    assert cfg.has_api_key() is True
    assert "sk_test_dummy" not in repr(cfg)


@pytest.mark.parametrize("key", ["", "   ", "YOUR_OPENAI_API_KEY_HERE"])
def test_missing_or_placeholder_key_is_unusable(monkeypatch: pytest.MonkeyPatch, key: str) -> None:
    monkeypatch.setenv("PSEUDOSCOPE_OPENAI_API_KEY", key)
    assert AnalyzerConfig().has_api_key() is False


def test_retry_policy_built_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PSEUDOSCOPE_MAX_RETRIES", "5")
    monkeypatch.setenv("PSEUDOSCOPE_RETRY_DELAY_SECONDS", "0.5")
    monkeypatch.setenv("PSEUDOSCOPE_MAX_TOTAL_LENGTH", "1000")

    assert AnalyzerConfig().retry_policy() == RetryPolicy(
        max_retries=5, retry_delay_seconds=0.5, initial_budget=1000
    )


def test_invalid_retry_ceiling_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PSEUDOSCOPE_MAX_RETRIES", "0")

    with pytest.raises(ValidationError):
        AnalyzerConfig()


def test_config_is_frozen() -> None:
    cfg = AnalyzerConfig()

    # Pydantic 2.x raises ValidationError for frozen models
    with pytest.raises((TypeError, ValidationError)):
        cfg.model = "gpt-4.1"

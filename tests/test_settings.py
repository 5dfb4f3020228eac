from __future__ import annotations

import pytest

from contract_explainer.settings import (
    DEFAULT_CHAT_MAX_TURNS,
    DEFAULT_HISTORY_MAX_ENTRIES,
    DEFAULT_MODEL_ID,
    Settings,
)


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "BEDROCK_MODEL_ID",
        "BEDROCK_MAX_TOKENS",
        "HISTORY_MAX_ENTRIES",
        "CHAT_MAX_TURNS",
        "PROMPT_TEMPLATES_PATH",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    settings = Settings()
    assert settings.bedrock_model_id == DEFAULT_MODEL_ID
    assert settings.bedrock_max_tokens == 4095
    assert settings.history_max_entries == DEFAULT_HISTORY_MAX_ENTRIES
    assert settings.chat_max_turns == DEFAULT_CHAT_MAX_TURNS
    assert settings.prompt_templates_path is None
    assert settings.log_level == "INFO"


def test_env_values_are_coerced(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BEDROCK_MAX_TOKENS", "1024")
    monkeypatch.setenv("CHAT_MAX_TURNS", "8")
    monkeypatch.setenv("HISTORY_MAX_ENTRIES", "none")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    settings = Settings()
    assert settings.bedrock_max_tokens == 1024
    assert settings.chat_max_turns == 8
    assert settings.history_max_entries is None
    assert settings.log_level == "DEBUG"


def test_invalid_history_bound(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HISTORY_MAX_ENTRIES", "lots")
    with pytest.raises(ValueError):
        Settings()
    monkeypatch.setenv("HISTORY_MAX_ENTRIES", "0")
    with pytest.raises(ValueError):
        Settings()

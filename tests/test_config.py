# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from taskmaster_ai.config import DEFAULT_MODELS, Settings

_VARS = (
    "TASKMASTER_DATA_DIR",
    "TASKMASTER_TASKS_DB_PATH",
    "TASKMASTER_OPENROUTER_API_KEY",
    "OPENROUTER_API_KEY",
    "TASKMASTER_LLM_MODELS",
    "TASKMASTER_LLM_MAX_TOKENS",
    "TASKMASTER_LLM_READ_TIMEOUT_SECONDS",
    "TASKMASTER_LLM_FIRST_TOKEN_TIMEOUT_SECONDS",
    "TASKMASTER_FALLBACK_ENABLED",
    "TASKMASTER_OWNER_EMAIL",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_run_without_an_oracle() -> None:
    s = Settings.from_env()

    assert s.tasks_db_path == Path(".local/taskmaster") / "tasks.sqlite3"
    assert s.llm_models == list(DEFAULT_MODELS)
    assert s.fallback_enabled is True
    assert not s.oracle_configured


def test_env_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TASKMASTER_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("OPENROUTER_API_KEY", "sk-x")
    monkeypatch.setenv("TASKMASTER_LLM_MODELS", "a/one, b/two")
    monkeypatch.setenv("TASKMASTER_FALLBACK_ENABLED", "off")
    monkeypatch.setenv("TASKMASTER_OWNER_EMAIL", " Alice@Example.com ")

    s = Settings.from_env()

    assert s.tasks_db_path == tmp_path / "tasks.sqlite3"
    assert s.llm_models == ["a/one", "b/two"]
    assert s.oracle_configured
    assert s.fallback_enabled is False
    assert s.default_owner_email == "alice@example.com"


def test_bad_numbers_fall_back_or_clamp(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TASKMASTER_LLM_MAX_TOKENS", "lots")
    monkeypatch.setenv("TASKMASTER_LLM_FIRST_TOKEN_TIMEOUT_SECONDS", "30")
    monkeypatch.setenv("TASKMASTER_LLM_READ_TIMEOUT_SECONDS", "10")

    s = Settings.from_env()

    assert s.llm_max_tokens == 2000
    assert s.llm_first_token_timeout == 30.0
    assert s.llm_read_timeout == 30.0

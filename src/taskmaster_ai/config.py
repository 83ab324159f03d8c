# src/taskmaster_ai/config.py

"""Settings for taskmaster-ai, read from `TASKMASTER_*` environment variables and an optional .env.

Nothing here is required: without an oracle API key the app still starts and
every request is served by the heuristic fallback.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, TypeVar

from dotenv import load_dotenv

ENV_PREFIX = "TASKMASTER"

DEFAULT_MODELS: tuple[str, ...] = (
    "google/gemini-2.0-flash-001",
    "qwen/qwen-2.5-72b-instruct:free",
    "deepseek/deepseek-chat-v3-0324:free",
)

load_dotenv(override=False)

_N = TypeVar("_N", int, float)


def _k(suffix: str) -> str:
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_number(name: str, default: _N, cast: Callable[[str], _N], *, minimum: _N) -> _N:
    """Parse a numeric env var; unparsable values use `default`, small ones are raised to `minimum`."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = cast(raw.strip())
    except ValueError:
        return default
    return max(value, minimum)


def _env_list(name: str, default: List[str] | tuple[str, ...]) -> List[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [p.strip() for p in raw.replace(",", " ").split() if p.strip()]


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    app_name: str
    log_level: str

    # local state; logs and the task database live under data_dir by default
    data_dir: Path
    tasks_db_path: Path

    # oracle (OpenAI-compatible endpoint, OpenRouter by default)
    openrouter_api_key: Optional[str]
    openrouter_base_url: str
    llm_models: List[str]
    extra_headers: Dict[str, str]
    llm_temperature: float
    llm_max_tokens: int

    # oracle timeouts, seconds
    llm_connect_timeout: float
    llm_read_timeout: float
    llm_first_token_timeout: float

    # heuristic extractor when the oracle fails
    fallback_enabled: bool

    # console: owner used until /owner switches it
    default_owner_email: str

    @property
    def oracle_configured(self) -> bool:
        return bool((self.openrouter_api_key or "").strip()) and bool(self.llm_models)

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskmaster")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskmaster"))

        first_token = _env_number(_k("LLM_FIRST_TOKEN_TIMEOUT_SECONDS"), 20.0, float, minimum=1.0)
        read_timeout = _env_number(_k("LLM_READ_TIMEOUT_SECONDS"), 25.0, float, minimum=1.0)

        return Settings(
            app_name=app_name,
            log_level=_env(_k("LOG_LEVEL"), "INFO"),
            data_dir=data_dir,
            tasks_db_path=_env_path(_k("TASKS_DB_PATH"), data_dir / "tasks.sqlite3"),
            openrouter_api_key=_first_env(_k("OPENROUTER_API_KEY"), "OPENROUTER_API_KEY", default=None),
            openrouter_base_url=_env(_k("OPENROUTER_BASE_URL"), "https://openrouter.ai/api/v1"),
            llm_models=_env_list(_k("LLM_MODELS"), DEFAULT_MODELS),
            extra_headers={
                "HTTP-Referer": _env(_k("HTTP_REFERER"), "https://example.com"),
                "X-Title": _env(_k("APP_TITLE"), app_name),
            },
            llm_temperature=min(_env_number(_k("LLM_TEMPERATURE"), 0.5, float, minimum=0.0), 2.0),
            llm_max_tokens=_env_number(_k("LLM_MAX_TOKENS"), 2000, int, minimum=64),
            llm_connect_timeout=_env_number(_k("LLM_CONNECT_TIMEOUT_SECONDS"), 5.0, float, minimum=0.5),
            # a model must be allowed to stream at least until its first-token deadline
            llm_read_timeout=max(read_timeout, first_token),
            llm_first_token_timeout=first_token,
            fallback_enabled=_env_bool(_k("FALLBACK_ENABLED"), True),
            default_owner_email=_env(_k("OWNER_EMAIL"), "").strip().lower(),
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    """Process-wide settings, read from the environment on first use."""
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS

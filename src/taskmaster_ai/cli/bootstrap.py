# src/taskmaster_ai/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (oracle / task store).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import OracleClient
from ..core.state import AppState
from ..errors import OracleError
from ..llm.client import OpenRouterOracleClient, friendly_oracle_error_message
from ..llm.offline import OfflineOracleClient
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)


def build_oracle(settings) -> OracleClient:
    try:
        return OpenRouterOracleClient(settings)
    except OracleError as e:
        # Local runs without external services: every request goes through the fallback.
        logger.warning("Oracle disabled: %s Requests will use the offline fallback.", friendly_oracle_error_message(e))
        return OfflineOracleClient(e.message)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    return AppState(
        settings=settings,
        oracle=build_oracle(settings),
        task_store=TaskStore(settings.tasks_db_path),
        owner_email=str(getattr(settings, "default_owner_email", "") or ""),
    )

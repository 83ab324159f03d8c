# src/taskmaster_ai/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .ports import OracleClient, TaskRepo


@dataclass
class AppState:
    """
    Wiring for one process: settings, the oracle client and the task store.

    Requests share nothing else; `owner_email` is only the console's active owner.
    """

    settings: Any
    oracle: OracleClient
    task_store: TaskRepo

    owner_email: str = ""

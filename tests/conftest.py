# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskmaster_ai.core.state import AppState
from taskmaster_ai.tasks.task_store import TaskStore

from .fakes import OWNER, FakeOracleClient


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the pipeline.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment and any local .env.
    """
    return SimpleNamespace(
        app_name="taskmaster-test",
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
        llm_models=["test/model"],
        fallback_enabled=True,
        default_owner_email="",
    )


@pytest.fixture()
def store(settings: SimpleNamespace) -> TaskStore:
    return TaskStore(settings.tasks_db_path)


@pytest.fixture()
def oracle() -> FakeOracleClient:
    return FakeOracleClient()


@pytest.fixture()
def state(settings: SimpleNamespace, oracle: FakeOracleClient, store: TaskStore) -> AppState:
    """
    AppState wired with a fake oracle.

    NOTE: We keep the real SQLite TaskStore here because its owner partitioning
    and lookup rules are part of what we want to test.
    """
    return AppState(settings=settings, oracle=oracle, task_store=store, owner_email=OWNER)

# src/taskmaster_ai/tasks/task_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import time
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from ..errors import StoreError
from .task_models import (
    TASK_NAME_MAX_LENGTH,
    OwnerSummary,
    Task,
    TaskFilter,
    TaskPriority,
    TaskStatus,
    normalize_name,
    normalize_owner,
)

logger = logging.getLogger(__name__)


def _casefold(value: Any) -> str | None:
    return value.casefold() if isinstance(value, str) else None


class TaskStore:
    """
    SQLite task store, partitioned by owner.

    Every query is scoped by `owner`; there is no API that reads or mutates
    another owner's rows. Name lookups are case-insensitive (Unicode casefold)
    and, when duplicates exist, resolve to the oldest task.

    The schema repeats the record invariants as CHECK constraints so that a bad
    write is rejected by SQLite even if a caller skipped validation.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        try:
            total = self.count_tasks()
        except StoreError:
            total = -1
        logger.info("TaskStore ready db=%s total=%s", self._db_path, total)

    @property
    def db_path(self) -> Path:
        return self._db_path

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        conn.create_function("casefold", 1, _casefold, deterministic=True)

    @contextlib.contextmanager
    def _connect(self, op: str) -> Iterator[sqlite3.Connection]:
        """Open a short-lived connection; sqlite errors surface as StoreError."""
        conn = self._get_conn()
        try:
            yield conn
        except sqlite3.Error as e:
            logger.exception("TaskStore %s failed db=%s", op, self._db_path)
            raise StoreError(f"Task storage failed during {op}.") from e
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._connect("schema") as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    owner TEXT NOT NULL CHECK (length(owner) > 0),
                    name TEXT NOT NULL
                        CHECK (length(name) BETWEEN 1 AND {TASK_NAME_MAX_LENGTH}),
                    priority TEXT NOT NULL DEFAULT 'medium'
                        CHECK (priority IN ('low','medium','high')),
                    status TEXT NOT NULL DEFAULT 'pending'
                        CHECK (status IN ('pending','completed')),
                    created_at REAL NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_tasks_owner_created ON tasks(owner, created_at)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_tasks_owner_status ON tasks(owner, status, priority)")
            conn.commit()

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=int(row["id"]),
            owner=str(row["owner"]),
            name=str(row["name"]),
            priority=TaskPriority.from_db(row["priority"]),
            status=TaskStatus.from_db(row["status"]),
            created_at=float(row["created_at"] or 0.0),
            updated_at=float(row["updated_at"] or 0.0),
        )

    @staticmethod
    def _owner(owner: str) -> str:
        key = normalize_owner(owner)
        if not key:
            raise ValueError("owner is required")
        return key

    # ---- public API ----

    def count_tasks(self, owner: str | None = None) -> int:
        with self._connect("count") as conn:
            if owner is None:
                (n,) = conn.execute("SELECT COUNT(*) FROM tasks").fetchone()
            else:
                (n,) = conn.execute(
                    "SELECT COUNT(*) FROM tasks WHERE owner = ?", (self._owner(owner),)
                ).fetchone()
            return int(n)

    def add_task(
        self,
        *,
        owner: str,
        name: str,
        priority: TaskPriority = TaskPriority.MEDIUM,
        status: TaskStatus = TaskStatus.PENDING,
    ) -> Task:
        owner_key = self._owner(owner)
        clean_name = normalize_name(name)
        now = time.time()

        with self._connect("insert") as conn:
            cur = conn.execute(
                """
                INSERT INTO tasks(owner, name, priority, status, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (owner_key, clean_name, priority.value, status.value, now, now),
            )
            conn.commit()
            rowid = cur.lastrowid
            if rowid is None:
                raise StoreError("SQLite did not return lastrowid for task insert")

        task = Task(
            id=int(rowid),
            owner=owner_key,
            name=clean_name,
            priority=priority,
            status=status,
            created_at=now,
            updated_at=now,
        )
        logger.debug("Task added id=%s owner=%s priority=%s", task.id, owner_key, priority.value)
        return task

    def get_task(self, owner: str, task_id: int) -> Task | None:
        with self._connect("get") as conn:
            row = conn.execute(
                "SELECT * FROM tasks WHERE owner = ? AND id = ?",
                (self._owner(owner), int(task_id)),
            ).fetchone()
            return self._row_to_task(row) if row else None

    def find_task_by_name(self, owner: str, name: str) -> Task | None:
        """
        Case-insensitive exact match within the owner's tasks.

        Duplicate names are allowed; the oldest matching task wins.
        """
        needle = (name or "").strip()
        if not needle:
            return None

        with self._connect("find") as conn:
            row = conn.execute(
                """
                SELECT *
                FROM tasks
                WHERE owner = ?
                  AND casefold(name) = casefold(?)
                ORDER BY created_at ASC, id ASC
                    LIMIT 1
                """,
                (self._owner(owner), needle),
            ).fetchone()
            return self._row_to_task(row) if row else None

    def list_tasks(self, owner: str, task_filter: TaskFilter | None = None) -> list[Task]:
        """Owner's tasks, newest-created first, optionally narrowed by status/priority."""
        task_filter = task_filter or TaskFilter()
        clauses = ["owner = ?"]
        params: list[Any] = [self._owner(owner)]

        if task_filter.status is not None:
            clauses.append("status = ?")
            params.append(task_filter.status.value)
        if task_filter.priority is not None:
            clauses.append("priority = ?")
            params.append(task_filter.priority.value)

        sql = f"SELECT * FROM tasks WHERE {' AND '.join(clauses)} ORDER BY created_at DESC, id DESC"
        with self._connect("list") as conn:
            return [self._row_to_task(r) for r in conn.execute(sql, params).fetchall()]

    def update_task_fields(
        self,
        owner: str,
        task_id: int,
        *,
        name: str | None = None,
        priority: TaskPriority | None = None,
        status: TaskStatus | None = None,
    ) -> Task | None:
        """
        Partial in-place update: only the given fields change, `updated_at` always does.

        Returns the updated task, or None if it no longer exists for this owner.
        """
        fields: list[str] = []
        params: list[Any] = []

        if name is not None:
            fields.append("name = ?")
            params.append(normalize_name(name))

        if priority is not None:
            fields.append("priority = ?")
            params.append(priority.value)

        if status is not None:
            fields.append("status = ?")
            params.append(status.value)

        fields.append("updated_at = ?")
        params.append(time.time())

        owner_key = self._owner(owner)
        params.extend([owner_key, int(task_id)])
        sql = f"UPDATE tasks SET {', '.join(fields)} WHERE owner = ? AND id = ?"

        with self._connect("update") as conn:
            cur = conn.execute(sql, params)
            conn.commit()
            if cur.rowcount != 1:
                return None
            row = conn.execute(
                "SELECT * FROM tasks WHERE owner = ? AND id = ?", (owner_key, int(task_id))
            ).fetchone()
            return self._row_to_task(row) if row else None

    def delete_task_by_name(self, owner: str, name: str) -> Task | None:
        """Remove exactly one task (the oldest case-insensitive match). Returns it, or None."""
        task = self.find_task_by_name(owner, name)
        if task is None:
            return None

        with self._connect("delete") as conn:
            cur = conn.execute(
                "DELETE FROM tasks WHERE owner = ? AND id = ?", (task.owner, task.id)
            )
            conn.commit()
            if cur.rowcount != 1:
                return None
        logger.debug("Task deleted id=%s owner=%s", task.id, task.owner)
        return task

    def list_owners(self) -> list[OwnerSummary]:
        """Admin view: every owner that has tasks, with counts."""
        with self._connect("owners") as conn:
            rows = conn.execute(
                """
                SELECT owner,
                       COUNT(*) AS total,
                       SUM(CASE WHEN status = 'pending' THEN 1 ELSE 0 END) AS pending,
                       SUM(CASE WHEN status = 'completed' THEN 1 ELSE 0 END) AS completed
                FROM tasks
                GROUP BY owner
                ORDER BY owner ASC
                """
            ).fetchall()
            return [
                OwnerSummary(
                    owner=str(r["owner"]),
                    total=int(r["total"]),
                    pending=int(r["pending"] or 0),
                    completed=int(r["completed"] or 0),
                )
                for r in rows
            ]

# src/taskmaster_ai/tasks/task_models.py

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

TASK_NAME_MAX_LENGTH = 200


class TaskStatus(StrEnum):
    PENDING = "pending"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, raw: str | None) -> TaskStatus | None:
        """
        Lenient parse of model/user wording.

        "not completed" / "incomplete" / "open" mean pending (older prompts used them).
        """
        s = " ".join((raw or "").lower().split())
        if not s:
            return None
        if s in {"pending", "not completed", "incomplete", "not done", "open", "todo"}:
            return cls.PENDING
        if s in {"completed", "complete", "done", "finished"}:
            return cls.COMPLETED
        return None

    @classmethod
    def from_db(cls, raw: str | None) -> TaskStatus:
        return cls.parse(raw) or cls.PENDING


class TaskPriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def parse(cls, raw: str | None) -> TaskPriority | None:
        s = (raw or "").strip().lower()
        if not s:
            return None
        # "High Priority", "high." etc.
        word = s.split()[0].strip(".,;:!")
        try:
            return cls(word)
        except ValueError:
            return None

    @classmethod
    def from_db(cls, raw: str | None) -> TaskPriority:
        return cls.parse(raw) or cls.MEDIUM


@dataclass(slots=True)
class Task:
    id: int
    owner: str
    name: str
    priority: TaskPriority
    status: TaskStatus
    created_at: float
    updated_at: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "owner": self.owner,
            "name": self.name,
            "priority": self.priority.value,
            "status": self.status.value,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


@dataclass(frozen=True, slots=True)
class TaskFilter:
    """At most one status and at most one priority; None means "any"."""

    status: TaskStatus | None = None
    priority: TaskPriority | None = None

    @property
    def is_empty(self) -> bool:
        return self.status is None and self.priority is None

    def describe(self) -> str:
        parts = []
        if self.status is not None:
            parts.append(self.status.value)
        if self.priority is not None:
            parts.append(f"{self.priority.value} priority")
        return ", ".join(parts) or "all"


@dataclass(frozen=True, slots=True)
class OwnerSummary:
    owner: str
    total: int
    pending: int
    completed: int


def normalize_owner(raw: str | None) -> str:
    return (raw or "").strip().lower()


def looks_like_email(owner: str) -> bool:
    local, sep, domain = owner.partition("@")
    return bool(local and sep and domain) and " " not in owner


def normalize_name(raw: str | None, *, max_length: int = TASK_NAME_MAX_LENGTH) -> str:
    """Trim and validate a task name. Raises ValueError if empty or too long."""
    name = (raw or "").strip()
    if not name:
        raise ValueError("task name is required")
    if len(name) > max_length:
        raise ValueError(f"task name is longer than {max_length} characters")
    return name


def _iso(ts: float) -> str:
    return datetime.fromtimestamp(ts, tz=UTC).isoformat(timespec="seconds")


def owner_tag(owner: str | None) -> str:
    """Stable short pseudonym for an owner, used in INFO logs instead of the email."""
    key = normalize_owner(owner)
    if not key:
        return "-"
    return "o:" + hashlib.sha256(key.encode("utf-8")).hexdigest()[:10]

# src/taskmaster_ai/core/ports.py

"""
Ports (interfaces) used by the core.

The intent pipeline depends on Protocols instead of concrete implementations.
This keeps the oracle provider and the storage swappable and makes testing easier.
"""

from __future__ import annotations

from typing import Protocol

from ..tasks.task_models import OwnerSummary, Task, TaskFilter, TaskPriority, TaskStatus


class OracleClient(Protocol):
    """
    Text-generation oracle (an LLM behind some API).

    Implementations must bound their own latency and raise `OracleError` on
    transport, timeout, quota or configuration failures.
    """

    def generate(self, prompt: str, system_prompt: str) -> str: ...


class TaskRepo(Protocol):
    def add_task(
            self,
            *,
            owner: str,
            name: str,
            priority: TaskPriority = TaskPriority.MEDIUM,
            status: TaskStatus = TaskStatus.PENDING,
    ) -> Task: ...

    def get_task(self, owner: str, task_id: int) -> Task | None: ...
    def find_task_by_name(self, owner: str, name: str) -> Task | None: ...
    def list_tasks(self, owner: str, task_filter: TaskFilter | None = None) -> list[Task]: ...

    def update_task_fields(
            self,
            owner: str,
            task_id: int,
            *,
            name: str | None = None,
            priority: TaskPriority | None = None,
            status: TaskStatus | None = None,
    ) -> Task | None: ...

    def delete_task_by_name(self, owner: str, name: str) -> Task | None: ...

    # Admin / diagnostics
    def count_tasks(self, owner: str | None = None) -> int: ...
    def list_owners(self) -> list[OwnerSummary]: ...

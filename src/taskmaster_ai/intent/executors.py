# src/taskmaster_ai/intent/executors.py

"""
Action executors: one per action kind.

Each executor validates the fields it needs from the parsed response and then
performs at most one task-store operation for the given owner. Missing input
raises MissingField before the store is touched; a named task that does not
exist raises NotFound. Nothing here creates a task as a side effect of
update/delete/complete.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ..core.ports import TaskRepo
from ..errors import MissingField, NotFound, UnclearIntent, ValidationError
from ..tasks.task_models import TaskPriority, normalize_name, owner_tag
from .classifier import Action
from .grammar import FIELD_LABELS, Field, ParsedResponse

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ActionResult:
    action: Action
    message: str
    result: Any


Executor = Callable[[TaskRepo, str, ParsedResponse], ActionResult]


def _require(action: Action, parsed: ParsedResponse, *names: Field) -> None:
    missing = [FIELD_LABELS[n] for n in names if not parsed.get(n)]
    if missing:
        raise MissingField(action.value, missing)


def _clean_name(raw: str | None) -> str:
    try:
        return normalize_name(raw)
    except ValueError as e:
        raise ValidationError(str(e).capitalize() + ".") from e


def create_task(store: TaskRepo, owner: str, parsed: ParsedResponse) -> ActionResult:
    _require(Action.CREATE, parsed, Field.TASK_NAME)
    name = _clean_name(parsed.task_name)
    priority = parsed.priority or TaskPriority.MEDIUM

    task = store.add_task(owner=owner, name=name, priority=priority)
    logger.info("Created task id=%s owner=%s priority=%s", task.id, owner_tag(owner), priority.value)
    return ActionResult(Action.CREATE, "Task created", task.to_dict())


def update_task(store: TaskRepo, owner: str, parsed: ParsedResponse) -> ActionResult:
    _require(Action.UPDATE, parsed, Field.OLD_TASK_NAME)
    old_name = parsed.old_task_name or ""
    new_name = _clean_name(parsed.new_task_name) if parsed.new_task_name else None
    priority = parsed.priority

    existing = store.find_task_by_name(owner, old_name)
    if existing is None:
        raise NotFound(old_name)

    if new_name is None and priority is None:
        # Nothing to change; report the task as-is without a write.
        updated = existing
    else:
        updated = store.update_task_fields(owner, existing.id, name=new_name, priority=priority)
        if updated is None:
            # Deleted between lookup and update.
            raise NotFound(old_name)

    logger.info(
        "Updated task id=%s owner=%s rename=%s priority=%s",
        updated.id,
        owner_tag(owner),
        new_name is not None,
        priority.value if priority else None,
    )
    return ActionResult(
        Action.UPDATE,
        f'Task updated: "{updated.name}" | Priority: "{updated.priority.value}"',
        updated.to_dict(),
    )


def delete_task(store: TaskRepo, owner: str, parsed: ParsedResponse) -> ActionResult:
    _require(Action.DELETE, parsed, Field.TASK_NAME)
    name = parsed.task_name or ""

    deleted = store.delete_task_by_name(owner, name)
    if deleted is None:
        raise NotFound(name)

    logger.info("Deleted task id=%s owner=%s", deleted.id, owner_tag(owner))
    return ActionResult(Action.DELETE, f'Task "{deleted.name}" deleted successfully.', deleted.to_dict())


def complete_task(store: TaskRepo, owner: str, parsed: ParsedResponse) -> ActionResult:
    _require(Action.COMPLETE, parsed, Field.TASK_NAME, Field.COMPLETION_STATUS)
    name = parsed.task_name or ""
    status = parsed.completion_status
    if status is None:
        # Present but not a recognizable status value.
        raise MissingField(Action.COMPLETE.value, [FIELD_LABELS[Field.COMPLETION_STATUS]])

    existing = store.find_task_by_name(owner, name)
    if existing is None:
        raise NotFound(name)

    updated = store.update_task_fields(owner, existing.id, status=status)
    if updated is None:
        raise NotFound(name)

    logger.info("Marked task id=%s owner=%s status=%s", updated.id, owner_tag(owner), status.value)
    return ActionResult(
        Action.COMPLETE,
        f'Task "{updated.name}" marked as {status.value}.',
        updated.to_dict(),
    )


def list_tasks(store: TaskRepo, owner: str, parsed: ParsedResponse) -> ActionResult:
    task_filter = parsed.task_filter
    tasks = store.list_tasks(owner, task_filter)
    logger.info("Listed tasks owner=%s filter=%s count=%d", owner_tag(owner), task_filter.describe(), len(tasks))
    return ActionResult(Action.LIST, "Todo list", [t.to_dict() for t in tasks])


def ask_clarification(store: TaskRepo, owner: str, parsed: ParsedResponse) -> ActionResult:
    raise UnclearIntent(parsed.notes)


EXECUTORS: dict[Action, Executor] = {
    Action.CREATE: create_task,
    Action.UPDATE: update_task,
    Action.DELETE: delete_task,
    Action.COMPLETE: complete_task,
    Action.LIST: list_tasks,
    Action.UNCLEAR: ask_clarification,
}


def execute(action: Action, store: TaskRepo, owner: str, parsed: ParsedResponse) -> ActionResult:
    """Run exactly one executor for the classified action."""
    return EXECUTORS[action](store, owner, parsed)

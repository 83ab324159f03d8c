# tests/test_executors.py

from __future__ import annotations

import pytest

from taskmaster_ai.errors import MissingField, NotFound, UnclearIntent, ValidationError
from taskmaster_ai.intent.classifier import Action
from taskmaster_ai.intent.executors import EXECUTORS, execute
from taskmaster_ai.intent.grammar import parse_response
from taskmaster_ai.tasks.task_models import TaskPriority, TaskStatus
from taskmaster_ai.tasks.task_store import TaskStore

from .fakes import OTHER_OWNER, OWNER


def _run(action: Action, store: TaskStore, text: str, owner: str = OWNER):
    return execute(action, store, owner, parse_response(text))


def test_every_action_has_an_executor() -> None:
    assert set(EXECUTORS) == set(Action)


def test_create_defaults_priority_to_medium(store: TaskStore) -> None:
    res = _run(Action.CREATE, store, "**Task Name:** Buy milk\n**Action:** Create")

    assert res.action == Action.CREATE
    assert res.message == "Task created"
    assert res.result["name"] == "Buy milk"
    assert res.result["priority"] == "medium"
    assert res.result["status"] == "pending"
    assert store.count_tasks(OWNER) == 1


def test_create_with_unrecognized_priority_falls_back_to_medium(store: TaskStore) -> None:
    res = _run(Action.CREATE, store, "**Task Name:** Pay rent\n**Priority:** urgent\n**Action:** Create")
    assert res.result["priority"] == "medium"


def test_create_without_name_is_missing_field_and_writes_nothing(store: TaskStore) -> None:
    with pytest.raises(MissingField) as exc:
        _run(Action.CREATE, store, "**Priority:** High\n**Action:** Create")

    assert exc.value.fields == ["Task Name"]
    assert exc.value.to_payload()["missing"] == ["Task Name"]
    assert store.count_tasks(OWNER) == 0


def test_create_rejects_overlong_name(store: TaskStore) -> None:
    with pytest.raises(ValidationError):
        _run(Action.CREATE, store, f"**Task Name:** {'x' * 201}\n**Action:** Create")
    assert store.count_tasks(OWNER) == 0


def test_update_rename_keeps_priority(store: TaskStore) -> None:
    original = store.add_task(owner=OWNER, name="Call mom", priority=TaskPriority.HIGH)

    res = _run(
        Action.UPDATE,
        store,
        "**Old Task Name:** call MOM\n**New Task Name:** Call mom on Sunday\n**Action:** Update",
    )

    assert res.message == 'Task updated: "Call mom on Sunday" | Priority: "high"'
    task = store.get_task(OWNER, original.id)
    assert task is not None
    assert task.name == "Call mom on Sunday"
    assert task.priority == TaskPriority.HIGH
    assert task.created_at == original.created_at
    assert store.count_tasks(OWNER) == 1


def test_update_priority_only(store: TaskStore) -> None:
    original = store.add_task(owner=OWNER, name="Gym")

    _run(Action.UPDATE, store, "**Old Task Name:** Gym\n**New Task Name:** N/A\n**Priority:** Low\n**Action:** Update")

    task = store.get_task(OWNER, original.id)
    assert task is not None
    assert task.name == "Gym"
    assert task.priority == TaskPriority.LOW


def test_update_unknown_task_never_creates(store: TaskStore) -> None:
    store.add_task(owner=OWNER, name="Gym")

    with pytest.raises(NotFound) as exc:
        _run(Action.UPDATE, store, "**Old Task Name:** Swim\n**Priority:** High\n**Action:** Update")

    assert exc.value.message == 'Task "Swim" not found.'
    assert [t.name for t in store.list_tasks(OWNER)] == ["Gym"]


def test_update_without_old_name_is_missing_field(store: TaskStore) -> None:
    with pytest.raises(MissingField):
        _run(Action.UPDATE, store, "**New Task Name:** Something\n**Action:** Update")


def test_delete_removes_one_task(store: TaskStore) -> None:
    store.add_task(owner=OWNER, name="Buy milk")
    store.add_task(owner=OWNER, name="Pay rent")

    res = _run(Action.DELETE, store, "**Task Name:** buy milk\n**Action:** Delete")

    assert res.message == 'Task "Buy milk" deleted successfully.'
    assert [t.name for t in store.list_tasks(OWNER)] == ["Pay rent"]


def test_delete_missing_task_leaves_store_unchanged(store: TaskStore) -> None:
    store.add_task(owner=OWNER, name="Pay rent")

    with pytest.raises(NotFound):
        _run(Action.DELETE, store, "**Task Name:** Buy milk\n**Action:** Delete")
    assert store.count_tasks(OWNER) == 1


def test_complete_and_reopen(store: TaskStore) -> None:
    task = store.add_task(owner=OWNER, name="Buy milk")

    res = _run(Action.COMPLETE, store, "**Task Name:** Buy milk\n**Completion Status:** Completed\n**Action:** Mark Completion")
    assert res.message == 'Task "Buy milk" marked as completed.'
    assert store.get_task(OWNER, task.id).status == TaskStatus.COMPLETED  # type: ignore[union-attr]

    _run(Action.COMPLETE, store, "**Task Name:** Buy milk\n**Completion Status:** Not Completed")
    assert store.get_task(OWNER, task.id).status == TaskStatus.PENDING  # type: ignore[union-attr]


def test_complete_with_unreadable_status_is_missing_field(store: TaskStore) -> None:
    task = store.add_task(owner=OWNER, name="Buy milk")

    with pytest.raises(MissingField):
        _run(Action.COMPLETE, store, "**Task Name:** Buy milk\n**Completion Status:** sort of")
    with pytest.raises(MissingField):
        _run(Action.COMPLETE, store, "**Task Name:** Buy milk\n**Action:** Mark Completion")
    assert store.get_task(OWNER, task.id).status == TaskStatus.PENDING  # type: ignore[union-attr]


def test_list_with_priority_filter_newest_first(store: TaskStore) -> None:
    store.add_task(owner=OWNER, name="old high", priority=TaskPriority.HIGH)
    store.add_task(owner=OWNER, name="low", priority=TaskPriority.LOW)
    store.add_task(owner=OWNER, name="new high", priority=TaskPriority.HIGH)

    res = _run(Action.LIST, store, "**Filter:** High Priority\n**Action:** List")

    assert res.message == "Todo list"
    assert [t["name"] for t in res.result] == ["new high", "old high"]


def test_list_is_empty_for_new_owner(store: TaskStore) -> None:
    store.add_task(owner=OWNER, name="mine")
    res = _run(Action.LIST, store, "**Filter:** All\n**Action:** List", owner=OTHER_OWNER)
    assert res.result == []


def test_owners_are_independent(store: TaskStore) -> None:
    store.add_task(owner=OWNER, name="Report")
    theirs = store.add_task(owner=OTHER_OWNER, name="Report")

    _run(Action.DELETE, store, "**Task Name:** Report\n**Action:** Delete", owner=OWNER)

    assert store.count_tasks(OWNER) == 0
    assert store.get_task(OTHER_OWNER, theirs.id) is not None


def test_unclear_raises_with_notes(store: TaskStore) -> None:
    with pytest.raises(UnclearIntent) as exc:
        _run(Action.UNCLEAR, store, "**Action:** unclear\n**Notes:** Which task do you mean?")

    assert exc.value.to_payload()["clarification"] == "Which task do you mean?"
    assert store.count_tasks(OWNER) == 0

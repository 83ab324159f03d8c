# tests/test_classifier.py

from __future__ import annotations

import pytest

from taskmaster_ai.intent.classifier import Action, classify


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("**Task Name:** Buy milk\n**Action:** Create", Action.CREATE),
        ("**Old Task Name:** a\n**New Task Name:** b\n**Action:** Update", Action.UPDATE),
        ("**Task Name:** a\n**Action:** Delete", Action.DELETE),
        ("**Filter:** All\n**Action:** List", Action.LIST),
        ("**Task Name:** a\n**Completion Status:** Completed\n**Action:** Mark Completion", Action.COMPLETE),
        ("action: CREATE", Action.CREATE),
    ],
)
def test_explicit_actions(text: str, expected: Action) -> None:
    assert classify(text) == expected


def test_completion_status_alone_means_complete() -> None:
    assert classify("**Completion Status:** Completed") == Action.COMPLETE
    assert classify("**Task Name:** Buy milk\n**Completion Status:** Completed") == Action.COMPLETE


def test_declared_action_wins_over_completion_status() -> None:
    text = "**Task Name:** Buy milk\n**Completion Status:** pending\n**Action:** Create"
    assert classify(text) == Action.CREATE


@pytest.mark.parametrize(
    "text",
    [
        "",
        None,
        "**Action:** unclear\n**Notes:** Which task?",
        "I am not sure what you mean.",
        "**Task Name:** Buy milk",
        "transaction: list of payments",
    ],
)
def test_everything_else_is_unclear(text: str | None) -> None:
    assert classify(text) == Action.UNCLEAR


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("**Action:** Created", Action.CREATE),
        ("Action: Creating", Action.CREATE),
        ("**Action:** Updated", Action.UPDATE),
        ("Action: Deleted", Action.DELETE),
        ("**Action:** Listing", Action.LIST),
        ("**Action:** Marked Completed", Action.COMPLETE),
    ],
)
def test_inflected_action_values(text: str, expected: Action) -> None:
    assert classify(text) == expected

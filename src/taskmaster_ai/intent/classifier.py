# src/taskmaster_ai/intent/classifier.py

from __future__ import annotations

import re
from enum import StrEnum


class Action(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    LIST = "list"
    COMPLETE = "complete"
    UNCLEAR = "unclear"


# Checked in order; the first declaration found wins. Matched by stem so that
# inflected values ("Created", "Deleting", "Lists") still count.
_DECLARED_ACTIONS: tuple[tuple[Action, re.Pattern[str]], ...] = tuple(
    (action, re.compile(rf"\baction\s*:\s*{stem}"))
    for action, stem in (
        (Action.CREATE, "creat"),
        (Action.UPDATE, "updat"),
        (Action.DELETE, "delet"),
        (Action.LIST, "list"),
    )
)

_MARK_COMPLETION = re.compile(r"\baction\s*:\s*(?:mark\w*\s+(?:as\s+)?)?complet")
# Models often drop the Action line for completion requests but keep the status.
_COMPLETION_STATUS = re.compile(r"\bcompletion\s+status\s*:")

_EMPHASIS = re.compile(r"\*+|__+")


def _normalize(text: str) -> str:
    return _EMPHASIS.sub("", text or "").lower()


def classify(text: str | None) -> Action:
    """
    Pick exactly one action for an oracle response. Pure; never raises.

    Order: declared create/update/delete/list, then completion (declared
    "mark completion" or any Completion Status field), otherwise unclear.
    """
    t = _normalize(text or "")
    if not t.strip():
        return Action.UNCLEAR

    for action, pattern in _DECLARED_ACTIONS:
        if pattern.search(t):
            return action

    if _MARK_COMPLETION.search(t) or _COMPLETION_STATUS.search(t):
        return Action.COMPLETE

    return Action.UNCLEAR

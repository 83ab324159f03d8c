# src/taskmaster_ai/intent/grammar.py

"""
Structured response grammar.

The oracle is asked to answer with one `Label: value` line per field, e.g.

    **Task Name:** Buy milk
    **Priority:** High
    **Action:** Create

Parsing is driven by a single field table (FIELD_LABELS). Every label is matched
case-insensitively, at the start of a line, in any order, with or without
markdown emphasis (`**`, `__`, `*`, `_`) or a list bullet in front. The value is
the rest of the line, trimmed. Missing fields are simply absent; unknown lines
are ignored; parsing never raises.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import StrEnum

from ..tasks.task_models import TaskFilter, TaskPriority, TaskStatus


class Field(StrEnum):
    TASK_NAME = "task_name"
    OLD_TASK_NAME = "old_task_name"
    NEW_TASK_NAME = "new_task_name"
    PRIORITY = "priority"
    COMPLETION_STATUS = "completion_status"
    ACTION = "action"
    FILTER = "filter"
    NOTES = "notes"


FIELD_LABELS: dict[Field, str] = {
    Field.TASK_NAME: "Task Name",
    Field.OLD_TASK_NAME: "Old Task Name",
    Field.NEW_TASK_NAME: "New Task Name",
    Field.PRIORITY: "Priority",
    Field.COMPLETION_STATUS: "Completion Status",
    Field.ACTION: "Action",
    Field.FILTER: "Filter",
    Field.NOTES: "Notes",
}

# Models fill optional slots with these instead of leaving them out.
PLACEHOLDER_VALUES = frozenset(
    {"n/a", "na", "none", "null", "-", "--", "not applicable", "unchanged", "no change"}
)

_MARKER = r"\*\*|__|\*|_"

# Whole-value emphasis that is stripped (`**High**`, `*important*`). `__x__` is left alone: dunder names.
_WRAPPING_MARKERS = ("**", "*")


def _label_pattern(label: str) -> re.Pattern[str]:
    words = r"[ \t]+".join(re.escape(w) for w in label.split())
    return re.compile(
        rf"^[ \t]*(?:(?:[-+>•]|\d+[.)])[ \t]*)?(?P<open>{_MARKER})?[ \t]*{words}[ \t]*(?P<close>{_MARKER})?"
        rf"[ \t]*:[ \t]*(?P<value>[^\n]*)$",
        re.IGNORECASE | re.MULTILINE,
    )


_FIELD_PATTERNS: dict[Field, re.Pattern[str]] = {f: _label_pattern(label) for f, label in FIELD_LABELS.items()}


def _clean_value(m: re.Match[str]) -> str:
    value = m.group("value").strip()
    opener = m.group("open")

    # A label opened with emphasis but not closed before the colon is closed after it:
    # `**Task Name:** X` leaves `** X`, `**Task Name: X**` leaves `X**`.
    if opener and not m.group("close"):
        if value.startswith(opener):
            value = value[len(opener):].lstrip()
        elif value.endswith(opener):
            value = value[: -len(opener)].rstrip()

    for marker in _WRAPPING_MARKERS:
        n = len(marker)
        if len(value) > 2 * n and value.startswith(marker) and value.endswith(marker):
            value = value[n:-n].strip()
            break
    return value


@dataclass(frozen=True, slots=True)
class ParsedResponse:
    """Fields extracted from one oracle response. Absent fields are not in `fields`."""

    raw: str
    fields: dict[Field, str] = field(default_factory=dict)

    def get(self, name: Field) -> str | None:
        return self.fields.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self.fields

    @property
    def is_empty(self) -> bool:
        return not self.fields

    @property
    def task_name(self) -> str | None:
        return self.fields.get(Field.TASK_NAME)

    @property
    def old_task_name(self) -> str | None:
        return self.fields.get(Field.OLD_TASK_NAME)

    @property
    def new_task_name(self) -> str | None:
        return self.fields.get(Field.NEW_TASK_NAME)

    @property
    def notes(self) -> str | None:
        return self.fields.get(Field.NOTES)

    @property
    def priority(self) -> TaskPriority | None:
        return TaskPriority.parse(self.fields.get(Field.PRIORITY))

    @property
    def completion_status(self) -> TaskStatus | None:
        return TaskStatus.parse(self.fields.get(Field.COMPLETION_STATUS))

    @property
    def task_filter(self) -> TaskFilter:
        return parse_filter(self.fields.get(Field.FILTER))


def parse_response(text: str | None) -> ParsedResponse:
    raw = text or ""
    fields: dict[Field, str] = {}

    for name, pattern in _FIELD_PATTERNS.items():
        # First non-empty occurrence wins if a model repeats a field.
        for m in pattern.finditer(raw):
            value = _clean_value(m)
            if value and value.lower() not in PLACEHOLDER_VALUES:
                fields[name] = value
                break

    return ParsedResponse(raw=raw, fields=fields)


def parse_filter(raw: str | None) -> TaskFilter:
    """
    Map a Filter value to at most one status and at most one priority.

    Accepts the single values from the prompt ("All", "Completed", "High Priority")
    and combinations a model sometimes emits ("Pending, High Priority").
    """
    s = " ".join((raw or "").lower().split())
    if not s or s == "all":
        return TaskFilter()

    status: TaskStatus | None = None
    if re.search(r"\b(not completed|incomplete|pending|open)\b", s):
        status = TaskStatus.PENDING
    elif re.search(r"\b(completed|done|finished)\b", s):
        status = TaskStatus.COMPLETED

    priority: TaskPriority | None = None
    m = re.search(r"\b(low|medium|high)\b(?:\s+priority)?", s)
    if m:
        priority = TaskPriority(m.group(1))

    return TaskFilter(status=status, priority=priority)


def render_response(fields: dict[Field, str]) -> str:
    """Inverse of parse_response for the fallback path: one `**Label:** value` line per field."""
    return "\n".join(f"**{FIELD_LABELS[name]}:** {value}" for name, value in fields.items() if value)

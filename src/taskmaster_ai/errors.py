# src/taskmaster_ai/errors.py

"""
Error taxonomy for the intent pipeline.

Every error carries a stable `category` and an HTTP-like `status_code` so any
transport (console, HTTP, chat bot) can render it without knowing the class.
All of them are caught at the request boundary in `intent.pipeline`.
"""

from __future__ import annotations

from typing import Any


class TaskMasterError(Exception):
    category = "internal"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.message}


class ValidationError(TaskMasterError):
    """Inbound request is missing the prompt or owner identity, or a value is out of bounds."""

    category = "validation"
    status_code = 400


class OracleError(TaskMasterError):
    """Oracle transport / timeout / quota / configuration failure. Recovered by the fallback."""

    category = "oracle"
    status_code = 502


class AiUnavailable(TaskMasterError):
    category = "ai_unavailable"
    status_code = 503


class MissingField(TaskMasterError):
    category = "missing_field"
    status_code = 400

    def __init__(self, action: str, fields: list[str]) -> None:
        names = ", ".join(fields)
        super().__init__(
            f"Could not determine {names} for '{action}'. Please rephrase your request."
        )
        self.action = action
        self.fields = list(fields)

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.message, "missing": self.fields}


class NotFound(TaskMasterError):
    category = "not_found"
    status_code = 404

    def __init__(self, task_name: str) -> None:
        super().__init__(f'Task "{task_name}" not found.')
        self.task_name = task_name


class UnclearIntent(TaskMasterError):
    """Not a failure in the technical sense: the caller should rephrase and resubmit."""

    category = "unclear"
    status_code = 422

    def __init__(self, notes: str | None = None) -> None:
        super().__init__("I could not tell what you want to do with your tasks. Please rephrase.")
        self.notes = notes or None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.message}
        if self.notes:
            payload["clarification"] = self.notes
        return payload


class StoreError(TaskMasterError):
    category = "store"
    status_code = 500

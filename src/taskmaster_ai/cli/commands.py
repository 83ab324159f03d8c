# src/taskmaster_ai/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import cast

from ..core.state import AppState
from ..errors import StoreError
from ..intent.grammar import parse_filter
from ..llm.offline import OfflineOracleClient
from ..tasks.task_models import Task, looks_like_email, normalize_owner

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /owner, /tasks, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        lines.append("  /exit - Quit.")
        lines.append("Anything else is sent as a task request, e.g. 'add a task to call mom tomorrow'.")
        return "\n".join(lines)


registry = CommandRegistry()


def format_task_line(i: int, task: Task | dict) -> str:
    d = task.to_dict() if isinstance(task, Task) else task
    mark = "x" if d.get("status") == "completed" else " "
    return f"{i}. [{mark}] {d.get('name')} ({d.get('priority')})"


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    oracle = "OFFLINE (fallback only)" if isinstance(state.oracle, OfflineOracleClient) else "ONLINE"
    models = ", ".join(list(getattr(state.settings, "llm_models", []) or []))
    db_path = getattr(state.task_store, "db_path", None) or getattr(state.settings, "tasks_db_path", "?")
    return (
        "Status:\n"
        f"  Owner: {state.owner_email or '(not set, use /owner <email>)'}\n"
        f"  Oracle: {oracle}\n"
        f"  Models (priority -> fallback): {models}\n"
        f"  Tasks DB: {db_path}"
    )


def cmd_owner(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /owner          -> show active owner
    /owner <email>  -> switch active owner
    """
    if not args:
        return f"Current owner: {state.owner_email or '(not set)'}"

    owner = normalize_owner(args[0])
    if not looks_like_email(owner):
        return f"Not a valid email address: {args[0]}"

    logger.debug("Owner switched to %s", owner)
    state.owner_email = owner

    if emit is not None:
        try:
            emit(f"{state.task_store.count_tasks(owner)} task(s) on file for {owner}.")
        except StoreError:
            logger.debug("Task count failed for owner=%s", owner, exc_info=True)
    return f"Owner set to {owner}."


def cmd_tasks(state: AppState, args: list[str]) -> str:
    """
    /tasks                 -> all tasks of the active owner
    /tasks pending         -> filter by status
    /tasks high priority   -> filter by priority
    """
    if not state.owner_email:
        return "No owner set. Use /owner <email> first."

    task_filter = parse_filter(" ".join(args))
    try:
        tasks = state.task_store.list_tasks(state.owner_email, task_filter)
    except StoreError as e:
        return e.message

    if not tasks:
        return f"No tasks ({task_filter.describe()})."
    lines = [f"Tasks for {state.owner_email} ({task_filter.describe()}):"]
    lines.extend(format_task_line(i, t) for i, t in enumerate(tasks, start=1))
    return "\n".join(lines)


def cmd_owners(state: AppState, args: list[str]) -> str:
    """Admin view: owners that have tasks."""
    try:
        owners = state.task_store.list_owners()
    except StoreError as e:
        return e.message

    if not owners:
        return "No owners yet."
    lines = ["Owners:"]
    for i, o in enumerate(owners, start=1):
        lines.append(f"{i}. {o.owner} - {o.total} tasks ({o.pending} pending, {o.completed} completed)")
    return "\n".join(lines)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show owner, oracle mode and storage.")
registry.register("owner", cmd_owner, help_text="Show or switch the active owner: /owner <email>.")
registry.register(
    "tasks", cmd_tasks, help_text="List tasks without the AI: /tasks [pending|completed] [high|medium|low]."
)
registry.register("owners", cmd_owners, help_text="List owners with task counts.")

# src/taskmaster_ai/connectors/console_connector.py

from __future__ import annotations

import logging
from datetime import datetime

from ..cli.commands import format_task_line
from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..intent.classifier import Action
from ..intent.pipeline import RequestOutcome, handle_request
from ..tasks.task_models import owner_tag

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def render_outcome(outcome: RequestOutcome) -> str:
    """Human-readable rendering of a pipeline outcome for the terminal."""
    payload = outcome.payload

    if not outcome.ok:
        lines = [str(payload.get("error", "Request failed."))]
        if payload.get("clarification"):
            lines.append(f"  {payload['clarification']}")
        return "\n".join(lines)

    message = str(payload.get("message", ""))
    if outcome.fallback:
        message += " (offline guess)"

    result = payload.get("result")
    if isinstance(result, list):
        if not result:
            return f"{message}: no tasks."
        lines = [f"{message}:"]
        lines.extend(format_task_line(i, t) for i, t in enumerate(result, start=1))
        return "\n".join(lines)

    if isinstance(result, dict) and outcome.action == Action.CREATE:
        return f"{message}: {result.get('name')} ({result.get('priority')})"

    return message


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started (owner=%s).", owner_tag(state.owner_email))
    _print_ts("[CONSOLE] Type your requests. Use /help for commands. Use /exit to quit.\n")

    app_name = str(getattr(getattr(state, "settings", None), "app_name", "taskmaster"))

    def emit(text: str) -> None:
        print(f"[{_ts_local()}] {text}", flush=True)

    if not state.owner_email:
        _print_ts("No owner set yet. Use /owner <email> before sending requests.")

    while True:
        try:
            user_input = input(">>> You: ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            cmd_response = command_registry.handle(state, user_input, emit=emit)
        except Exception:
            logger.exception("Command handler crashed.")
            cmd_response = "Internal error while handling a command."

        if cmd_response is not None:
            _print_ts(cmd_response)
            continue

        if not state.owner_email:
            _print_ts("No owner set. Use /owner <email> first.")
            continue

        outcome = handle_request(state, user_input, state.owner_email)
        _print_ts(f"<<< {app_name}: {render_outcome(outcome)}\n")

    logger.info("Console connector finished.")

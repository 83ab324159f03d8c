# src/taskmaster_ai/intent/pipeline.py

"""
Intent pipeline: one natural-language request -> at most one task operation.

    Received -> OracleCalled -> OracleSucceeded -> Parsed -> Classified -> Executing -> Done
                             -> OracleFailed    -> FallbackExtracted (create | unclear) -> Done

Key invariants:
- the inbound request is validated before the oracle is called,
- the oracle is called at most once per request (no retry here),
- exactly one executor runs per request,
- every error is converted into a structured outcome at this boundary.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from ..core.state import AppState
from ..errors import AiUnavailable, OracleError, TaskMasterError, UnclearIntent, ValidationError
from ..tasks.task_models import looks_like_email, normalize_owner, owner_tag
from .classifier import Action, classify
from .executors import execute
from .fallback import fallback_response
from .grammar import ParsedResponse, parse_response
from .prompts import build_system_prompt, build_user_prompt

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TaskRequest:
    prompt: str
    owner: str


@dataclass(frozen=True, slots=True)
class Interpretation:
    parsed: ParsedResponse
    action: Action
    fallback: bool


@dataclass(slots=True)
class RequestOutcome:
    ok: bool
    status_code: int
    payload: dict[str, Any]
    category: str | None = None
    action: Action | None = None
    fallback: bool = False
    clarification: bool = False


def validate_request(prompt: str | None, owner_email: str | None) -> TaskRequest:
    text = (prompt or "").strip()
    owner = normalize_owner(owner_email)
    if not text or not owner:
        raise ValidationError("Missing prompt or user email.")
    if not looks_like_email(owner):
        raise ValidationError(f"Not a valid email address: {owner_email!r}.")
    return TaskRequest(prompt=text, owner=owner)


def _fallback(state: AppState, request: TaskRequest, reason: str) -> Interpretation:
    if not getattr(state.settings, "fallback_enabled", True):
        raise AiUnavailable(f"AI processing failed ({reason}).")

    text = fallback_response(request.prompt)
    parsed = parse_response(text)
    if parsed.is_empty:
        raise AiUnavailable(f"AI processing failed ({reason}).")

    return Interpretation(parsed=parsed, action=classify(text), fallback=True)


def interpret(state: AppState, request: TaskRequest) -> Interpretation:
    """Oracle call + parse + classify, falling back to heuristics when the oracle gives nothing usable."""
    try:
        text = state.oracle.generate(
            build_user_prompt(request.prompt, request.owner),
            build_system_prompt(),
        )
    except OracleError as e:
        logger.info("Oracle failed owner=%s (%s); using fallback", owner_tag(request.owner), e.message)
        return _fallback(state, request, "oracle unavailable")

    parsed = parse_response(text)
    if parsed.is_empty:
        logger.info(
            "Oracle returned no recognizable fields owner=%s chars=%d; using fallback",
            owner_tag(request.owner),
            len(text or ""),
        )
        return _fallback(state, request, "empty or unreadable AI response")

    logger.debug("Oracle response owner=%s fields=%s", request.owner, sorted(parsed.fields))
    return Interpretation(parsed=parsed, action=classify(text), fallback=False)


def _failure(err: TaskMasterError, action: Action | None, fallback: bool) -> RequestOutcome:
    return RequestOutcome(
        ok=False,
        status_code=err.status_code,
        payload=err.to_payload(),
        category=err.category,
        action=action,
        fallback=fallback,
        clarification=isinstance(err, UnclearIntent),
    )


def handle_request(state: AppState, prompt: str | None, owner_email: str | None) -> RequestOutcome:
    """Process one inbound request `{prompt, owner_email}`. Never raises."""
    action: Action | None = None
    used_fallback = False

    try:
        request = validate_request(prompt, owner_email)
        interpretation = interpret(state, request)
        action = interpretation.action
        used_fallback = interpretation.fallback
        logger.info("Detected action=%s owner=%s fallback=%s", action.value, owner_tag(request.owner), used_fallback)

        result = execute(action, state.task_store, request.owner, interpretation.parsed)

    except UnclearIntent as e:
        logger.info("Unclear request; asking for clarification (notes=%r)", e.notes)
        return _failure(e, action, used_fallback)
    except TaskMasterError as e:
        if e.status_code >= 500:
            logger.warning("Request failed category=%s: %s", e.category, e.message)
        else:
            # Validation messages echo the submitted email.
            logger.info("Request rejected category=%s", e.category)
            logger.debug("Rejected: %s", e.message)
        return _failure(e, action, used_fallback)
    except Exception:
        logger.exception("Internal error while processing request.")
        return RequestOutcome(
            ok=False,
            status_code=500,
            payload={"error": "Internal Server Error."},
            category="internal",
            action=action,
            fallback=used_fallback,
        )

    payload: dict[str, Any] = {"message": result.message, "result": result.result}
    if used_fallback:
        payload["fallback"] = True
    return RequestOutcome(
        ok=True,
        status_code=200,
        payload=payload,
        action=result.action,
        fallback=used_fallback,
    )


async def handle_request_async(state: AppState, prompt: str | None, owner_email: str | None) -> RequestOutcome:
    """Async transports: run the blocking pipeline (oracle + SQLite) in a worker thread."""
    return await asyncio.to_thread(handle_request, state, prompt, owner_email)

# src/taskmaster_ai/intent/fallback.py

"""
Heuristic intent guesser used when the oracle is unavailable.

Trades precision for availability, but only in the safe direction: it may
create a task or ask for clarification, and it never guesses an update,
delete or completion from free text.
"""

from __future__ import annotations

import logging
import re

from .grammar import Field, render_response

logger = logging.getLogger(__name__)

_CREATE = re.compile(
    r"\b(?:add|create|new|make)\b.*?\b(?P<noun>tasks?)\b"
    r"(?:\s+(?:called|named|titled|for|to))?"
    r"\s*[:\-]?\s*"
    r"(?P<name>.+?)"
    r"(?:\s*,?\s+with\s+(?P<priority>low|medium|high)\s+priority)?"
    r"\s*[.!]*\s*$",
    re.IGNORECASE | re.DOTALL,
)

# Any of these before the word "task" means the request is about an existing task.
_OTHER_VERB = re.compile(
    r"\b(?:delet|remov|eras|drop|cancel|complet|finish|mark|list|show|display|view|updat|chang|renam|edit)\w*",
    re.IGNORECASE,
)

_PRIORITY_HINT = re.compile(r"\b(?P<priority>low|medium|high)[\s-]+priority\b", re.IGNORECASE)

_QUOTES = "\"'`“”‘’"

UNCLEAR_NOTE = "Could not process request. Please try rephrasing."


def fallback_response(prompt: str) -> str:
    """Best-effort interpretation of the raw user request, rendered in the response grammar."""
    text = " ".join((prompt or "").split())

    if text and not text.endswith("?"):
        m = _CREATE.search(text)
        if m and not _OTHER_VERB.search(text, 0, m.start("noun")):
            name = m.group("name").strip().strip(_QUOTES).strip()
            if name:
                fields = {Field.TASK_NAME: name}
                priority = m.group("priority")
                if not priority:
                    hint = _PRIORITY_HINT.search(text)
                    priority = hint.group("priority") if hint else None
                if priority:
                    fields[Field.PRIORITY] = priority.lower()
                fields[Field.ACTION] = "Create"
                logger.info("Fallback: guessed create name=%r", name)
                return render_response(fields)

    logger.info("Fallback: could not classify request")
    return render_response({Field.ACTION: "unclear", Field.NOTES: UNCLEAR_NOTE})

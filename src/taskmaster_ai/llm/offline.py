# src/taskmaster_ai/llm/offline.py

from __future__ import annotations

from ..errors import OracleError


class OfflineOracleClient:
    """
    Oracle stand-in used when no external API is configured.

    It never produces text: every call raises OracleError, so each request is
    served by the heuristic fallback extractor (create / unclear only).
    """

    def __init__(self, reason: str = "No oracle is configured.") -> None:
        self.reason = reason

    def generate(self, prompt: str, system_prompt: str) -> str:
        raise OracleError(self.reason)

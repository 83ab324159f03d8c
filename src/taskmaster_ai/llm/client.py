# src/taskmaster_ai/llm/client.py

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

import httpx
import openai
from openai import OpenAI

from ..errors import OracleError

logger = logging.getLogger(__name__)

_BAD_MODELS: dict[str, float] = {}  # model -> retry_at (monotonic)


def _is_auth_error(exc: Exception) -> bool:
    if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return True
    return exc.__class__.__name__ in {"UnauthorizedError"}


def _is_rate_limit_error(exc: Exception) -> bool:
    if isinstance(exc, openai.RateLimitError):
        return True
    return exc.__class__.__name__ in {"TooManyRequestsError"}


def _is_connection_error(exc: Exception) -> bool:
    if isinstance(exc, (openai.APIConnectionError, httpx.TimeoutException, TimeoutError)):
        return True
    return exc.__class__.__name__ in {"Timeout", "ConnectTimeout", "ReadTimeout", "WriteTimeout"}


def _is_not_found_error(exc: Exception) -> bool:
    return isinstance(exc, openai.NotFoundError)


def _close_stream(stream: Any) -> None:
    close = getattr(stream, "close", None)
    if callable(close):
        try:
            close()
        except (httpx.HTTPError, RuntimeError):
            logger.debug("Oracle: stream close failed", exc_info=True)


def friendly_oracle_error_message(err: Exception) -> str:
    msg = str(err).strip() or "Oracle error."
    if "API key is not set" in msg:
        return "AI is not configured (missing API key). Set TASKMASTER_OPENROUTER_API_KEY in .env (see .env.example)."
    if "model list is empty" in msg:
        return "AI is not configured (no models). Set TASKMASTER_LLM_MODELS in .env (see .env.example)."
    return msg


class OpenRouterOracleClient:
    """
    Oracle backed by an OpenAI-compatible chat completions API (OpenRouter by default).

    Behavior:
    - Tries models in the order from settings (TASKMASTER_LLM_MODELS).
    - If a model doesn't produce a first content token within the first-token
      timeout, we abort and try the next model.
    - 404 (model not available) -> skip the model for an hour, try next.
    - Rate limit / network issues -> try next.
    - Auth issues -> fail fast (no retries across models).
    - Every failure ends as OracleError so the pipeline can fall back.
    """

    def __init__(self, settings: Any) -> None:
        api_key = getattr(settings, "openrouter_api_key", None)
        base_url = str(getattr(settings, "openrouter_base_url", "") or "")

        if not api_key or not str(api_key).strip():
            raise OracleError("Oracle API key is not set. Set TASKMASTER_OPENROUTER_API_KEY in your .env.")
        if not base_url.strip():
            raise OracleError("Oracle base URL is not set. Set TASKMASTER_OPENROUTER_BASE_URL in your .env.")

        self._models: List[str] = [m.strip() for m in (getattr(settings, "llm_models", []) or []) if m.strip()]
        self._headers: Dict[str, str] = dict(getattr(settings, "extra_headers", {}) or {})
        self._temperature = float(getattr(settings, "llm_temperature", 0.5))
        self._max_tokens = int(getattr(settings, "llm_max_tokens", 2000))
        self._first_token_timeout = float(getattr(settings, "llm_first_token_timeout", 20.0))
        connect_s = float(getattr(settings, "llm_connect_timeout", 5.0))
        self._read_timeout = float(getattr(settings, "llm_read_timeout", 25.0))

        self._timeout = httpx.Timeout(
            connect=connect_s,
            read=self._read_timeout,
            write=10.0,
            pool=connect_s,
        )
        # No automatic retries: a failed request goes to the fallback, not back to the oracle.
        self._client = OpenAI(
            base_url=base_url,
            api_key=str(api_key),
            timeout=self._timeout,
            max_retries=0,
        )

    @property
    def models(self) -> list[str]:
        return list(self._models)

    def _create_stream(self, model: str, messages: list[dict[str, str]]) -> Any:
        return self._client.chat.completions.create(
            model=model,
            stream=True,
            extra_headers=self._headers or None,
            messages=messages,  # type: ignore[arg-type]
            temperature=self._temperature,
            max_tokens=self._max_tokens,
            timeout=self._timeout,
        )

    def _collect(self, model: str, messages: list[dict[str, str]]) -> str:
        t0 = time.monotonic()
        deadline = t0 + self._first_token_timeout
        parts: list[str] = []

        stream = self._create_stream(model, messages)
        try:
            for chunk in stream:
                if not parts and time.monotonic() > deadline:
                    raise TimeoutError(f"First token timeout on model: {model}")

                choices = getattr(chunk, "choices", None) or []
                delta = getattr(choices[0], "delta", None) if choices else None
                content = getattr(delta, "content", None) if delta is not None else None

                if content:
                    if not parts:
                        logger.info("Oracle: first token from model=%s (%.2fs)", model, time.monotonic() - t0)
                    parts.append(content)
        finally:
            _close_stream(stream)

        return "".join(parts)

    def generate(self, prompt: str, system_prompt: str) -> str:
        if not self._models:
            raise OracleError("Oracle model list is empty. Set TASKMASTER_LLM_MODELS in your .env.")

        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": prompt},
        ]
        last_error: Optional[Exception] = None
        now = time.monotonic()

        for model in self._models:
            retry_at = _BAD_MODELS.get(model)
            if retry_at is not None and retry_at > now:
                continue

            logger.info(
                "Oracle: trying model=%s (first_token_timeout=%.1fs, read_timeout=%.1fs)",
                model,
                self._first_token_timeout,
                self._read_timeout,
            )
            try:
                text = self._collect(model, messages)
            except Exception as e:
                last_error = e

                if _is_auth_error(e):
                    raise OracleError(
                        "Oracle authentication failed. Check your API key (TASKMASTER_OPENROUTER_API_KEY)."
                    ) from e

                if _is_not_found_error(e):
                    _BAD_MODELS[model] = time.monotonic() + 3600.0  # 1 hour
                    logger.info("Oracle: model not available (404): %s", model)
                    continue

                if _is_rate_limit_error(e):
                    logger.info("Oracle: rate-limited on model=%s, trying next", model)
                    continue

                if _is_connection_error(e):
                    logger.info("Oracle: network/timeout error on model=%s, trying next", model)
                    continue

                logger.info("Oracle: error on model=%s (%s), trying next", model, e.__class__.__name__)
                continue

            if text.strip():
                logger.debug("Oracle: completed with model=%s chars=%d", model, len(text))
                return text

            last_error = OracleError(f"Model returned no content: {model}")

        if last_error is not None:
            if _is_rate_limit_error(last_error):
                raise OracleError("Oracle is rate-limited. Try again later.") from last_error
            if _is_connection_error(last_error):
                raise OracleError("Oracle network/timeout error. Try again later or change models.") from last_error
            raise OracleError("All oracle models failed.") from last_error

        raise OracleError("All oracle models failed.")

# tests/test_oracle_client.py

from __future__ import annotations

from types import SimpleNamespace

import httpx
import openai
import pytest

from taskmaster_ai.errors import OracleError
from taskmaster_ai.llm import client as client_mod
from taskmaster_ai.llm.client import OpenRouterOracleClient
from taskmaster_ai.llm.offline import OfflineOracleClient


def _settings(**overrides) -> SimpleNamespace:
    base = dict(
        openrouter_api_key="sk-test",
        openrouter_base_url="https://example.invalid/api/v1",
        llm_models=["m/one", "m/two"],
        extra_headers={},
        llm_temperature=0.5,
        llm_max_tokens=100,
        llm_connect_timeout=1.0,
        llm_read_timeout=2.0,
        llm_first_token_timeout=2.0,
    )
    base.update(overrides)
    return SimpleNamespace(**base)


def _chunks(*parts: str) -> list[SimpleNamespace]:
    return [SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=p))]) for p in parts]


def _status_error(cls: type[openai.APIStatusError], code: int) -> openai.APIStatusError:
    request = httpx.Request("POST", "https://example.invalid/api/v1/chat/completions")
    return cls("error", response=httpx.Response(code, request=request), body=None)


@pytest.fixture(autouse=True)
def _reset_bad_models():
    client_mod._BAD_MODELS.clear()
    yield
    client_mod._BAD_MODELS.clear()


def test_missing_key_is_an_oracle_error() -> None:
    with pytest.raises(OracleError):
        OpenRouterOracleClient(_settings(openrouter_api_key=""))


def test_streamed_chunks_are_joined(monkeypatch: pytest.MonkeyPatch) -> None:
    oracle = OpenRouterOracleClient(_settings())
    seen: list[str] = []

    def fake_stream(model, messages):
        seen.append(model)
        assert messages[0]["role"] == "system"
        return iter(_chunks("**Action:** ", "List"))

    monkeypatch.setattr(oracle, "_create_stream", fake_stream)

    assert oracle.generate("list my tasks", "system") == "**Action:** List"
    assert seen == ["m/one"]


def test_failing_model_moves_to_next(monkeypatch: pytest.MonkeyPatch) -> None:
    oracle = OpenRouterOracleClient(_settings())
    seen: list[str] = []

    def fake_stream(model, messages):
        seen.append(model)
        if model == "m/one":
            raise _status_error(openai.NotFoundError, 404)
        return iter(_chunks("ok"))

    monkeypatch.setattr(oracle, "_create_stream", fake_stream)

    assert oracle.generate("x", "s") == "ok"
    assert oracle.generate("x", "s") == "ok"
    # The 404 model is skipped on later calls.
    assert seen == ["m/one", "m/two", "m/two"]


def test_empty_output_everywhere_is_an_oracle_error(monkeypatch: pytest.MonkeyPatch) -> None:
    oracle = OpenRouterOracleClient(_settings())
    monkeypatch.setattr(oracle, "_create_stream", lambda model, messages: iter(_chunks("", "  ")))

    with pytest.raises(OracleError):
        oracle.generate("x", "s")


def test_auth_error_fails_fast(monkeypatch: pytest.MonkeyPatch) -> None:
    oracle = OpenRouterOracleClient(_settings())
    seen: list[str] = []

    def fake_stream(model, messages):
        seen.append(model)
        raise _status_error(openai.AuthenticationError, 401)

    monkeypatch.setattr(oracle, "_create_stream", fake_stream)

    with pytest.raises(OracleError, match="authentication"):
        oracle.generate("x", "s")
    assert seen == ["m/one"]


def test_rate_limit_on_all_models(monkeypatch: pytest.MonkeyPatch) -> None:
    oracle = OpenRouterOracleClient(_settings())

    def fake_stream(model, messages):
        raise _status_error(openai.RateLimitError, 429)

    monkeypatch.setattr(oracle, "_create_stream", fake_stream)

    with pytest.raises(OracleError, match="rate-limited"):
        oracle.generate("x", "s")


def test_offline_client_always_raises() -> None:
    with pytest.raises(OracleError, match="no key"):
        OfflineOracleClient("no key").generate("x", "s")

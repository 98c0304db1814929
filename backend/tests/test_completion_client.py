from __future__ import annotations

import json

import httpx
import pytest

from app.core.config import Settings
from app.core.exceptions import ConfigurationError, MalformedProviderResponse, ProviderError
from app.services.completion_client import CompletionClient

BASE_URL = "https://llm.example.test/v1"


def _completion_body(content):
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "created": 1700000000,
        "model": "meta/llama-4-maverick-17b-128e-instruct",
        "choices": [
            {"index": 0, "message": {"role": "assistant", "content": content}, "finish_reason": "stop"},
        ],
    }


def _client(handler):
    http_client = httpx.Client(transport=httpx.MockTransport(handler))
    return CompletionClient(api_key="test-key", base_url=BASE_URL, timeout_seconds=5, http_client=http_client)


def test_complete_posts_chat_request_and_returns_text():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_completion_body('{"ok": true}'))

    text = _client(handler).complete("Plan please", model="meta/llama-4-maverick-17b-128e-instruct", temperature=0.4, max_tokens=900)

    assert text == '{"ok": true}'
    assert len(seen) == 1
    request = seen[0]
    assert str(request.url) == f"{BASE_URL}/chat/completions"
    assert request.headers["authorization"] == "Bearer test-key"
    body = json.loads(request.content)
    assert body["model"] == "meta/llama-4-maverick-17b-128e-instruct"
    assert body["messages"] == [{"role": "user", "content": "Plan please"}]
    assert body["temperature"] == 0.4
    assert body["max_tokens"] == 900


def test_server_error_raises_provider_error_without_retry():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(500, json={"error": {"message": "upstream exploded"}})

    with pytest.raises(ProviderError) as excinfo:
        _client(handler).complete("x", model="m", temperature=0.4, max_tokens=10)

    assert excinfo.value.status_code == 500
    assert "500" in str(excinfo.value)
    assert len(calls) == 1


def test_auth_error_raises_provider_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"error": {"message": "bad key"}})

    with pytest.raises(ProviderError) as excinfo:
        _client(handler).complete("x", model="m", temperature=0.4, max_tokens=10)
    assert excinfo.value.status_code == 401


@pytest.mark.parametrize("failure", [httpx.ConnectError("refused"), httpx.ReadTimeout("slow")])
def test_transport_failures_raise_provider_error(failure):
    def handler(request: httpx.Request) -> httpx.Response:
        raise failure

    with pytest.raises(ProviderError) as excinfo:
        _client(handler).complete("x", model="m", temperature=0.4, max_tokens=10)
    assert excinfo.value.status_code is None


def test_missing_choices_is_malformed_response():
    def handler(request: httpx.Request) -> httpx.Response:
        body = _completion_body("unused")
        body["choices"] = []
        return httpx.Response(200, json=body)

    with pytest.raises(MalformedProviderResponse):
        _client(handler).complete("x", model="m", temperature=0.4, max_tokens=10)


def test_null_content_is_malformed_response():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_completion_body(None))

    with pytest.raises(MalformedProviderResponse):
        _client(handler).complete("x", model="m", temperature=0.4, max_tokens=10)


def test_missing_api_key_is_configuration_error():
    with pytest.raises(ConfigurationError):
        CompletionClient(api_key=None, base_url=BASE_URL)


def test_from_settings_uses_configured_provider():
    settings = Settings(_env_file=None, nvidia_api_key="k", llm_base_url=BASE_URL, llm_timeout_seconds=12)
    client = CompletionClient.from_settings(settings)
    assert isinstance(client, CompletionClient)


def test_default_decoding_parameters():
    settings = Settings(_env_file=None)
    assert settings.llm_model == "meta/llama-4-maverick-17b-128e-instruct"
    assert (settings.workout_temperature, settings.workout_max_tokens) == (0.4, 900)
    assert (settings.diet_temperature, settings.diet_max_tokens) == (0.4, 700)
    assert 15 <= settings.llm_timeout_seconds <= 30

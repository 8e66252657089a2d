from types import SimpleNamespace

import httpx
import pytest
from google.genai import errors as genai_errors

from study_companion.services import generation_client
from study_companion.services.generation_client import GeminiGenerationClient, GenerationOptions
from tests.support import make_config


class _FakeModels:
    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def generate_content(self, model, contents, config):
        self.calls.append({"model": model, "contents": contents, "config": config})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return SimpleNamespace(text=outcome)


def _client_with(*outcomes, **kwargs):
    models = _FakeModels(outcomes)
    fake_sdk = SimpleNamespace(models=models)
    return GeminiGenerationClient(fake_sdk, "gemini-test", **kwargs), models


def _api_error(error_cls, code, status):
    return error_cls(code, {"error": {"code": code, "message": f"upstream said {status}", "status": status}})


def test_generate_returns_text_and_forwards_options():
    client, models = _client_with('{"ok": true}')
    options = GenerationOptions(temperature=0.2, max_output_tokens=1024, top_p=0.8, top_k=20, timeout_ms=5000)

    assert client.generate("prompt text", options) == '{"ok": true}'
    call = models.calls[0]
    assert call["model"] == "gemini-test"
    assert call["contents"][0].parts[0].text == "prompt text"
    assert call["config"].temperature == 0.2
    assert call["config"].max_output_tokens == 1024
    assert call["config"].http_options.timeout == 5000


def test_rate_limit_is_never_retried():
    sleeps = []
    client, models = _client_with(
        _api_error(genai_errors.ClientError, 429, "RESOURCE_EXHAUSTED"),
        "never reached",
        max_retries=3,
        sleep_fn=sleeps.append,
    )

    with pytest.raises(generation_client.GenerationRateLimited):
        client.generate("prompt", GenerationOptions())
    assert len(models.calls) == 1
    assert sleeps == []


@pytest.mark.parametrize("code", [401, 403])
def test_auth_failures_are_classified(code):
    client, _models = _client_with(_api_error(genai_errors.ClientError, code, "PERMISSION_DENIED"))

    with pytest.raises(generation_client.GenerationAuthError) as exc_info:
        client.generate("prompt", GenerationOptions())
    assert exc_info.value.status_code == code


def test_unavailable_is_retried_with_backoff_when_enabled():
    sleeps = []
    client, models = _client_with(
        _api_error(genai_errors.ServerError, 503, "UNAVAILABLE"),
        _api_error(genai_errors.ServerError, 503, "UNAVAILABLE"),
        '{"ok": true}',
        max_retries=2,
        backoff_seconds=1.0,
        sleep_fn=sleeps.append,
    )

    assert client.generate("prompt", GenerationOptions()) == '{"ok": true}'
    assert len(models.calls) == 3
    assert sleeps == [1.0, 2.0]


def test_unavailable_without_retries_raises_immediately():
    client, models = _client_with(_api_error(genai_errors.ServerError, 503, "UNAVAILABLE"))

    with pytest.raises(generation_client.GenerationUnavailable):
        client.generate("prompt", GenerationOptions())
    assert len(models.calls) == 1


def test_transport_timeout_is_classified():
    client, _models = _client_with(httpx.ReadTimeout("read timed out"))

    with pytest.raises(generation_client.GenerationTimeout):
        client.generate("prompt", GenerationOptions(timeout_ms=1000))


def test_gateway_timeout_status_is_classified():
    client, _models = _client_with(_api_error(genai_errors.ServerError, 504, "DEADLINE_EXCEEDED"))

    with pytest.raises(generation_client.GenerationTimeout):
        client.generate("prompt", GenerationOptions())


def test_other_server_errors_keep_status_code():
    client, _models = _client_with(_api_error(genai_errors.ServerError, 500, "INTERNAL"))

    with pytest.raises(generation_client.GenerationUpstreamError) as exc_info:
        client.generate("prompt", GenerationOptions())
    assert exc_info.value.status_code == 500


def test_blank_response_is_empty_response():
    client, _models = _client_with("   ")

    with pytest.raises(generation_client.GenerationEmptyResponse):
        client.generate("prompt", GenerationOptions())


def test_ping_sends_connectivity_prompt_with_short_timeout():
    client, models = _client_with('{"status": "working"}')

    assert client.ping(timeout_ms=7000) == '{"status": "working"}'
    call = models.calls[0]
    assert "API is functional" in call["contents"][0].parts[0].text
    assert call["config"].http_options.timeout == 7000


def test_generation_options_from_config():
    config = make_config(gemini_temperature=0.3, gemini_max_output_tokens=2048, gemini_timeout_ms=30000)

    options = GenerationOptions.from_config(config)

    assert options.temperature == 0.3
    assert options.max_output_tokens == 2048
    assert options.timeout_ms == 30000
    assert GenerationOptions.from_config(config, timeout_ms=5000).timeout_ms == 5000


def test_build_generation_client_requires_api_key():
    assert generation_client.build_generation_client(make_config(gemini_api_key="")) is None

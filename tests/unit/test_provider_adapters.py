from __future__ import annotations

import httpx
import pytest

from relayai.core.config.schema import ClientConfig
from relayai.core.providers.base import GenerationRequest
from relayai.core.providers.gemini import CloudGenerativeAdapter
from relayai.core.providers.ollama import LocalInferenceAdapter
from relayai.core.providers.openai_compatible import CloudChatAdapter
from relayai.core.runtime.errors import ConfigurationError, ExtractionError


def _request() -> GenerationRequest:
    return GenerationRequest(prompt="Audit this document", max_tokens=128, temperature=0.2)


def test_cloud_chat_request_shape_and_bearer_auth():
    cfg = ClientConfig(provider="cloud-chat", api_url="https://chat.example/v1/chat/completions", api_key="sk-test", model="gpt-x")
    prepared = CloudChatAdapter().build_request(_request(), cfg)

    assert prepared.url == "https://chat.example/v1/chat/completions"
    assert prepared.headers == {"Authorization": "Bearer sk-test"}
    assert prepared.body == {
        "model": "gpt-x",
        "messages": [{"role": "user", "content": "Audit this document"}],
        "max_tokens": 128,
        "temperature": 0.2,
    }


def test_cloud_chat_extracts_first_choice():
    payload = {"choices": [{"message": {"role": "assistant", "content": "three issues found"}}]}
    assert CloudChatAdapter().extract_result(payload) == "three issues found"


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"choices": []},
        {"choices": [{}]},
        {"choices": [{"message": {"content": "   "}}]},
        {"choices": [{"message": {"content": None}}]},
    ],
)
def test_cloud_chat_missing_fields_raise_extraction_error(payload):
    with pytest.raises(ExtractionError):
        CloudChatAdapter().extract_result(payload)


def test_cloud_generative_request_shape_and_key_query_param():
    cfg = ClientConfig(
        provider="cloud-generative",
        api_url="https://gen.example/v1beta/models/flash:generateContent",
        api_key="g-key",
    )
    prepared = CloudGenerativeAdapter().build_request(_request(), cfg)

    url = httpx.URL(prepared.url)
    assert url.params["key"] == "g-key"
    assert url.host == "gen.example"
    assert "Authorization" not in prepared.headers
    assert prepared.body == {
        "contents": [{"parts": [{"text": "Audit this document"}]}],
        "generationConfig": {"temperature": 0.2, "maxOutputTokens": 128},
    }


def test_cloud_generative_extracts_first_candidate_text():
    payload = {"candidates": [{"content": {"parts": [{"text": "structure looks fine"}]}}]}
    assert CloudGenerativeAdapter().extract_result(payload) == "structure looks fine"


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"candidates": []},
        {"candidates": [{"content": {}}]},
        {"candidates": [{"content": {"parts": []}}]},
        {"candidates": ["not-a-dict"]},
        {"candidates": [{"content": {"parts": [{"text": ""}]}}]},
    ],
)
def test_cloud_generative_malformed_nesting_raises_extraction_error(payload):
    with pytest.raises(ExtractionError):
        CloudGenerativeAdapter().extract_result(payload)


def test_local_inference_request_shape():
    cfg = ClientConfig(provider="local-inference", base_url="http://localhost:11434/", api_path="/api/generate", model="llama3")
    prepared = LocalInferenceAdapter().build_request(_request(), cfg)

    assert prepared.url == "http://localhost:11434/api/generate"
    assert prepared.headers == {}
    assert prepared.body == {
        "model": "llama3",
        "prompt": "Audit this document",
        "stream": False,
        "options": {"temperature": 0.2, "num_predict": 128},
    }


def test_local_inference_extraction():
    assert LocalInferenceAdapter().extract_result({"response": "OK"}) == "OK"
    with pytest.raises(ExtractionError):
        LocalInferenceAdapter().extract_result({"done": True})
    with pytest.raises(ExtractionError):
        LocalInferenceAdapter().extract_result({"response": "\n  "})


@pytest.mark.parametrize("adapter_cls", [CloudChatAdapter, CloudGenerativeAdapter])
def test_cloud_adapters_require_api_key(adapter_cls, monkeypatch):
    monkeypatch.delenv("RELAYAI_TEST_KEY", raising=False)
    cfg = ClientConfig(provider=adapter_cls.name, api_url="https://x.example", api_key="", api_key_env="RELAYAI_TEST_KEY")
    with pytest.raises(ConfigurationError, match="missing api key"):
        adapter_cls().build_request(_request(), cfg)


def test_api_key_can_come_from_environment(monkeypatch):
    monkeypatch.setenv("RELAYAI_TEST_KEY", "env-key")
    cfg = ClientConfig(provider="cloud-chat", api_url="https://x.example", api_key_env="RELAYAI_TEST_KEY")
    prepared = CloudChatAdapter().build_request(_request(), cfg)
    assert prepared.headers["Authorization"] == "Bearer env-key"


@pytest.mark.parametrize(
    "adapter,overrides",
    [
        (LocalInferenceAdapter(), {"base_url": "localhost:11434"}),
        (LocalInferenceAdapter(), {"base_url": ""}),
        (CloudChatAdapter(), {"api_url": "chat.example/v1", "api_key": "k"}),
        (CloudGenerativeAdapter(), {"api_url": "file:///tmp/gen", "api_key": "k"}),
    ],
)
def test_endpoint_must_be_http_url_with_host(adapter, overrides):
    cfg = ClientConfig(provider=adapter.name, **overrides)
    with pytest.raises(ConfigurationError):
        adapter.build_request(_request(), cfg)


def test_cloud_adapter_requires_api_url():
    cfg = ClientConfig(provider="cloud-chat", api_url=" ", api_key="k")
    with pytest.raises(ConfigurationError, match="missing api_url"):
        CloudChatAdapter().build_request(_request(), cfg)


def test_generation_request_uses_configured_limits():
    cfg = ClientConfig(max_tokens=64, temperature=1.1)
    request = GenerationRequest.from_config("hi", cfg)
    assert (request.prompt, request.max_tokens, request.temperature) == ("hi", 64, 1.1)

from __future__ import annotations

from typing import Callable

import httpx
import pytest

from freelance_agents.config import TextGenerationConfig
from freelance_agents.resume.ai_client import (
    CredentialsExhaustedError,
    TextGenerationClient,
    TextGenerationError,
)


def _ok(text: str) -> httpx.Response:
    return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": text}]}}]})


def _client(keys: list[str], handler: Callable[[httpx.Request], httpx.Response], seen: list[str]) -> TextGenerationClient:
    def _record(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.params["key"])
        return handler(request)

    return TextGenerationClient(keys, http_client=httpx.Client(transport=httpx.MockTransport(_record)))


def test_quota_error_rotates_to_next_key() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params["key"] == "k1":
            return httpx.Response(429, text="quota exceeded")
        return _ok("hello")

    client = _client(["k1", "k2"], handler, seen)

    assert client.generate("prompt") == "hello"
    assert seen == ["k1", "k2"]


def test_keys_rotate_round_robin_across_calls() -> None:
    seen: list[str] = []
    client = _client(["k1", "k2"], lambda request: _ok("ok"), seen)

    for _ in range(3):
        client.generate("prompt")

    assert seen == ["k1", "k2", "k1"]


def test_all_keys_rejected_raises_exhausted() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403 if request.url.params["key"] == "k1" else 429)

    client = _client(["k1", "k2"], handler, seen)

    with pytest.raises(CredentialsExhaustedError):
        client.generate("prompt")
    assert seen == ["k1", "k2"]


def test_other_http_errors_fail_fast() -> None:
    seen: list[str] = []
    client = _client(["k1", "k2"], lambda request: httpx.Response(500, text="boom"), seen)

    with pytest.raises(TextGenerationError) as excinfo:
        client.generate("prompt")

    assert not isinstance(excinfo.value, CredentialsExhaustedError)
    assert seen == ["k1"]


def test_transport_error_moves_to_next_key() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params["key"] == "k1":
            raise httpx.ConnectError("connection refused", request=request)
        return _ok("recovered")

    client = _client(["k1", "k2"], handler, seen)

    assert client.generate("prompt") == "recovered"


def test_no_keys_configured() -> None:
    client = TextGenerationClient([], http_client=httpx.Client(transport=httpx.MockTransport(lambda request: _ok("x"))))
    with pytest.raises(TextGenerationError):
        client.generate("prompt")


def test_request_body_and_url() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"candidates": []})

    cfg = TextGenerationConfig(model="m-1", endpoint="https://example.test/v1/models", api_keys=("k1",))
    client = TextGenerationClient.from_config(cfg, http_client=httpx.Client(transport=httpx.MockTransport(handler)))

    assert client.generate("Summarize", max_tokens=77) == ""
    request = captured[0]
    assert request.url.path == "/v1/models/m-1:generateContent"
    body = request.read()
    assert b'"maxOutputTokens": 77' in body or b'"maxOutputTokens":77' in body
    assert b"Summarize" in body

import json

import httpx
import pytest

from id_pipeline.config import LLMConfig
from id_pipeline.errors import ErrorKind, ExtractionError
from id_pipeline.llm_gateway import LLMGateway

from .conftest import chat_completion_payload


def _gateway(config, handler):
    return LLMGateway(config, transport=httpx.MockTransport(handler))


async def _expect_error(gateway, kind):
    with pytest.raises(ExtractionError) as exc:
        await gateway.complete("prompt")
    assert exc.value.kind == kind
    return exc.value


@pytest.mark.asyncio
async def test_success_returns_text_and_usage(config):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json=chat_completion_payload('{"nome": "Marco"}', usage={"prompt_tokens": 120, "completion_tokens": 30}),
        )

    completion = await _gateway(config, handler).complete("estrai")

    assert completion.text == '{"nome": "Marco"}'
    assert completion.usage.prompt_tokens == 120
    assert completion.usage.completion_tokens == 30
    assert completion.model == "mistral-small-latest"
    assert seen["url"] == "https://llm.test/v1/chat/completions"
    assert seen["auth"] == "Bearer test-key"
    body = seen["body"]
    assert body["messages"] == [{"role": "user", "content": "estrai"}]
    assert body["max_tokens"] == config.max_tokens
    assert body["temperature"] == config.temperature
    assert body["top_p"] == config.top_p
    assert body["model"] == config.model


@pytest.mark.asyncio
async def test_usage_is_optional(config):
    gateway = _gateway(config, lambda request: httpx.Response(200, json=chat_completion_payload("{}")))
    completion = await gateway.complete("prompt")
    assert completion.usage is None


@pytest.mark.asyncio
async def test_unconfigured_makes_no_call():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=chat_completion_payload("{}"))

    gateway = _gateway(LLMConfig(api_key=None), handler)
    await _expect_error(gateway, ErrorKind.UNCONFIGURED)
    assert calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status, kind",
    [
        (401, ErrorKind.AUTH_ERROR),
        (429, ErrorKind.RATE_LIMITED),
        (500, ErrorKind.SERVICE_UNAVAILABLE),
        (503, ErrorKind.SERVICE_UNAVAILABLE),
        (400, ErrorKind.SERVICE_ERROR),
        (403, ErrorKind.SERVICE_ERROR),
    ],
)
async def test_http_status_mapping(config, status, kind):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(status, json={"message": "error"})

    await _expect_error(_gateway(config, handler), kind)
    # aucune relance
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_connection_refused(config):
    def handler(request):
        raise httpx.ConnectError("Connection refused", request=request)

    await _expect_error(_gateway(config, handler), ErrorKind.NETWORK_ERROR)


@pytest.mark.asyncio
async def test_timeout(config):
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    await _expect_error(_gateway(config, handler), ErrorKind.TIMEOUT)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"id": "x", "object": "chat.completion", "created": 0, "model": "m"},
        {"id": "x", "object": "chat.completion", "created": 0, "model": "m", "choices": []},
        chat_completion_payload(None),
    ],
)
async def test_missing_envelope_is_malformed(config, payload):
    await _expect_error(
        _gateway(config, lambda request: httpx.Response(200, json=payload)),
        ErrorKind.MALFORMED_RESPONSE,
    )


@pytest.mark.asyncio
async def test_error_detail_does_not_leak_key(config):
    err = await _expect_error(
        _gateway(config, lambda request: httpx.Response(401, json={"message": "bad key"})),
        ErrorKind.AUTH_ERROR,
    )
    assert "test-key" not in err.message
    assert "test-key" not in str(err)


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [b"<html>oops", b"", b'{"choices": ['])
async def test_unreadable_json_body_is_malformed(config, body):
    def handler(request):
        return httpx.Response(200, content=body, headers={"content-type": "application/json"})

    await _expect_error(_gateway(config, handler), ErrorKind.MALFORMED_RESPONSE)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "usage",
    [
        {"prompt_tokens": "n/a", "completion_tokens": 3},
        {"prompt_tokens": 10, "completion_tokens": [1]},
    ],
)
async def test_unreadable_usage_is_dropped(config, usage):
    payload = chat_completion_payload('{"nome": "Marco"}')
    payload["usage"] = usage
    completion = await _gateway(config, lambda request: httpx.Response(200, json=payload)).complete("prompt")

    assert completion.text == '{"nome": "Marco"}'
    assert completion.usage is None

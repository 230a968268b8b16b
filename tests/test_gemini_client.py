import asyncio
import json

import httpx
import pytest

from services.errors import QueryError, QueryErrorKind
from services.gemini_client import GeminiClient
from utils.constants import GENERATION_CONFIG


def _client(handler, model="gemini-test"):
    return GeminiClient("secret-key", model=model, transport=httpx.MockTransport(handler))


def test_request_shape():
    seen = {}

    def handler(request: httpx.Request):
        seen["url"] = str(request.url)
        seen["key"] = request.headers.get("x-goog-api-key")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"candidates": []})

    payload = asyncio.run(_client(handler).generate("hello"))
    assert payload == {"candidates": []}
    assert seen["url"].endswith("/models/gemini-test:generateContent")
    assert seen["key"] == "secret-key"
    assert "key=" not in seen["url"]
    assert seen["body"]["contents"] == [{"parts": [{"text": "hello"}]}]
    assert seen["body"]["generationConfig"] == GENERATION_CONFIG


@pytest.mark.parametrize(
    "status, kind",
    [
        (401, QueryErrorKind.AUTH_FAILURE),
        (429, QueryErrorKind.RATE_LIMITED),
        (502, QueryErrorKind.SERVER_ERROR),
    ],
)
def test_error_status_raises_classified_error(status, kind):
    client = _client(lambda request: httpx.Response(status, text="nope"))
    with pytest.raises(QueryError) as info:
        asyncio.run(client.generate("hello"))
    assert info.value.kind is kind
    assert info.value.status == status


def test_timeout_is_classified():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(QueryError) as info:
        asyncio.run(_client(handler).generate("hello"))
    assert info.value.kind is QueryErrorKind.TIMEOUT


def test_connection_failure_is_classified():
    def handler(request):
        raise httpx.ConnectError("offline", request=request)

    with pytest.raises(QueryError) as info:
        asyncio.run(_client(handler).generate("hello"))
    assert info.value.kind is QueryErrorKind.NETWORK_FAILURE


def test_invalid_json_is_parse_failure():
    client = _client(lambda request: httpx.Response(200, text="<html>"))
    with pytest.raises(QueryError) as info:
        asyncio.run(client.generate("hello"))
    assert info.value.kind is QueryErrorKind.PARSE_FAILURE

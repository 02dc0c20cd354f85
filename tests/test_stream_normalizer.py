"""Tests for shaping the upstream image response into SSE or a JSON envelope."""

import json
from unittest.mock import AsyncMock

import httpx
import pytest

from huluhulu_ai.core.config import ImageGenConfig
from huluhulu_ai.core.exceptions import ConfigurationException, UpstreamException
from huluhulu_ai.models.task import GenerationRequest
from huluhulu_ai.services.stream_normalizer import StreamNormalizer, extract_artifact

UPSTREAM_STREAM = (
    b'data: {"id": "t1", "status": "running", "progress": 40}\n\n'
    b'data: {"id": "t1", "status": "succeeded", "progress": 100, "results": [{"url": "https://img/x.png"}]}\n\n'
    b"data: [DONE]\n\n"
)


def _request(stream: bool) -> GenerationRequest:
    return GenerationRequest(model="nano-banana-pro", prompt="p", image_urls=("IMG",), wants_stream=stream)


def _normalizer(handler, supervisor, api_key="secret"):
    config = ImageGenConfig(api_key=api_key, base_url="https://upstream.test")
    return StreamNormalizer(config, supervisor, transport=httpx.MockTransport(handler))


async def _read_body(response) -> bytes:
    if hasattr(response, "body_iterator"):
        chunks = [chunk async for chunk in response.body_iterator]
        return b"".join(chunks)
    return response.body


def _sse_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, content=UPSTREAM_STREAM, headers={"content-type": "text/event-stream"})


@pytest.mark.asyncio
async def test_missing_api_key_fails_fast(supervisor):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={})

    with pytest.raises(ConfigurationException) as exc_info:
        await _normalizer(handler, supervisor, api_key="").forward(_request(False))
    assert exc_info.value.code == 500
    assert calls == []


@pytest.mark.asyncio
async def test_upstream_call_shape(supervisor):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["authorization"]
        seen["payload"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "t1"})

    await _normalizer(handler, supervisor).forward(_request(False))

    assert seen["url"] == "https://upstream.test/v1/draw/nano-banana"
    assert seen["auth"] == "Bearer secret"
    assert seen["payload"] == {
        "model": "nano-banana-pro",
        "prompt": "p",
        "urls": ["IMG"],
        "aspectRatio": "auto",
        "imageSize": "2K",
        "stream": False,
    }


@pytest.mark.asyncio
async def test_json_reply_for_non_stream_client_extracts_artifact(supervisor):
    def handler(request):
        return httpx.Response(200, json={"code": 0, "data": {"base64Image": "QUJD"}})

    response = await _normalizer(handler, supervisor).forward(_request(False))

    assert response.status_code == 200
    assert json.loads(await _read_body(response)) == {
        "code": 0,
        "message": "Success",
        "data": {"base64Image": "QUJD"},
    }


@pytest.mark.asyncio
async def test_json_reply_without_artifact_is_passed_through(supervisor):
    def handler(request):
        return httpx.Response(200, json={"id": "t1", "status": "running"})

    response = await _normalizer(handler, supervisor).forward(_request(False))

    assert json.loads(await _read_body(response))["data"] == {"id": "t1", "status": "running"}


@pytest.mark.asyncio
async def test_json_reply_for_stream_client_is_wrapped_as_sse(supervisor):
    payload = {"id": "t1", "status": "succeeded", "results": [{"url": "https://img/x.png"}]}
    callback = AsyncMock()

    def handler(request):
        return httpx.Response(200, json=payload)

    response = await _normalizer(handler, supervisor).forward(_request(True), on_stream_data=callback)

    assert response.media_type == "text/event-stream"
    assert response.headers["cache-control"] == "no-cache"
    body = (await _read_body(response)).decode("utf-8")
    assert body == f"data: {json.dumps(payload)}\n\ndata: [DONE]\n\n"
    callback.assert_awaited_once_with(payload)


@pytest.mark.asyncio
async def test_non_2xx_becomes_upstream_error(supervisor):
    def handler(request):
        return httpx.Response(401, text="invalid key")

    with pytest.raises(UpstreamException) as exc_info:
        await _normalizer(handler, supervisor).forward(_request(True))
    assert exc_info.value.code == 502
    assert "invalid key" in exc_info.value.message


@pytest.mark.asyncio
async def test_malformed_json_reply_becomes_upstream_error(supervisor):
    def handler(request):
        return httpx.Response(200, content=b"{not json", headers={"content-type": "application/json"})

    with pytest.raises(UpstreamException) as exc_info:
        await _normalizer(handler, supervisor).forward(_request(False))
    assert exc_info.value.code == 502
    assert "{not json" in exc_info.value.message


@pytest.mark.asyncio
async def test_transport_error_becomes_upstream_error(supervisor):
    def handler(request):
        raise httpx.ConnectError("connection refused")

    with pytest.raises(UpstreamException):
        await _normalizer(handler, supervisor).forward(_request(False))


@pytest.mark.asyncio
async def test_byte_stream_for_non_stream_client_is_a_contract_violation(supervisor):
    with pytest.raises(UpstreamException) as exc_info:
        await _normalizer(_sse_handler, supervisor).forward(_request(False))
    assert "Unexpected response format" in exc_info.value.message
    assert "succeeded" in exc_info.value.message


@pytest.mark.asyncio
async def test_byte_stream_is_piped_without_callback(supervisor):
    response = await _normalizer(_sse_handler, supervisor).forward(_request(True))

    assert response.media_type == "text/event-stream"
    assert await _read_body(response) == UPSTREAM_STREAM
    assert supervisor.stats()["counts"] == {}


@pytest.mark.asyncio
async def test_byte_stream_is_teed_to_callback(supervisor):
    frames = []

    async def callback(data):
        frames.append(data)

    response = await _normalizer(_sse_handler, supervisor).forward(_request(True), on_stream_data=callback)

    assert await _read_body(response) == UPSTREAM_STREAM
    await supervisor.drain()

    assert [f["status"] for f in frames] == ["running", "succeeded"]
    assert frames[1]["results"][0]["url"] == "https://img/x.png"
    assert supervisor.stats()["counts"] == {"succeeded": 1}


@pytest.mark.asyncio
async def test_tee_finishes_even_if_client_stops_reading(supervisor):
    callback = AsyncMock()

    await _normalizer(_sse_handler, supervisor).forward(_request(True), on_stream_data=callback)
    await supervisor.drain()

    assert callback.await_count == 2


@pytest.mark.asyncio
async def test_callback_failures_do_not_break_the_stream(supervisor):
    callback = AsyncMock(side_effect=OSError("disk full"))

    response = await _normalizer(_sse_handler, supervisor).forward(_request(True), on_stream_data=callback)

    assert await _read_body(response) == UPSTREAM_STREAM
    await supervisor.drain()
    assert callback.await_count == 2
    assert supervisor.stats()["counts"] == {"succeeded": 1}


def test_extract_artifact_shapes():
    assert extract_artifact({"base64Image": "A"}) == {"base64Image": "A"}
    assert extract_artifact({"data": {"base64Image": "B"}}) == {"base64Image": "B"}
    assert extract_artifact({"data": {"url": "x"}}) is None
    assert extract_artifact(["not", "a", "dict"]) is None

#! /usr/bin/env python3
# -*- coding: utf-8 -*-
"""
生图上游响应整形

一次上游调用，无论上游返回 JSON 还是字节流，
都按客户端要求（SSE 或 JSON 信封）返回。
"""
import asyncio
import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Optional

import httpx
from fastapi.responses import JSONResponse, Response, StreamingResponse

from huluhulu_ai.core.config import ImageGenConfig
from huluhulu_ai.core.exceptions import ConfigurationException, UpstreamException
from huluhulu_ai.core.supervisor import BackgroundTaskSupervisor
from huluhulu_ai.models.response import APIResponse
from huluhulu_ai.models.task import GenerationRequest
from huluhulu_ai.utils.sse import SSE_HEADERS, format_done_frame, format_sse_frame, parse_sse_frames

LOG = logging.getLogger(__name__)

SSE_MEDIA_TYPE = "text/event-stream"

# 每个解析出的 SSE 帧调用一次
StreamDataCallback = Callable[[Any], Awaitable[None]]


def extract_artifact(data: Any) -> Optional[dict]:
    """从上游 JSON 中提取 base64 图片，兼容顶层和 data 嵌套两种结构"""
    if not isinstance(data, dict):
        return None
    if data.get("base64Image"):
        return {"base64Image": data["base64Image"]}
    nested = data.get("data")
    if isinstance(nested, dict) and nested.get("base64Image"):
        return {"base64Image": nested["base64Image"]}
    return None


class StreamNormalizer:
    """
    上游响应整形器

    首字节发出前的异常由调用方转成 JSON 错误信封；
    开始推流后的异常只记录日志并关闭流。
    """

    def __init__(
            self,
            config: ImageGenConfig,
            supervisor: BackgroundTaskSupervisor,
            transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.supervisor = supervisor
        self._transport = transport

    async def forward(
            self,
            request: GenerationRequest,
            endpoint: Optional[str] = None,
            on_stream_data: Optional[StreamDataCallback] = None,
    ) -> Response:
        if not self.config.api_key:
            raise ConfigurationException("生图 API Key 未配置")

        url = f"{self.config.base_url}{endpoint or self.config.draw_endpoint}"
        LOG.info(f"调用生图上游: {url}, model: {request.model}, stream: {request.wants_stream}")

        client = httpx.AsyncClient(transport=self._transport, timeout=self.config.timeout)
        upstream_request = client.build_request(
            "POST",
            url,
            json=request.to_upstream_payload(),
            headers={"Authorization": f"Bearer {self.config.api_key}"},
        )

        try:
            response = await client.send(upstream_request, stream=True)
        except httpx.HTTPError as e:
            await client.aclose()
            raise UpstreamException(f"生图服务请求失败: {e}") from e

        handed_off = False
        try:
            if not response.is_success:
                text = (await response.aread()).decode("utf-8", errors="replace")
                raise UpstreamException(f"Upstream API Error {response.status_code}: {text}", response.status_code)

            content_type = response.headers.get("content-type", "")
            if "application/json" in content_type:
                await response.aread()
                try:
                    data = response.json()
                except ValueError as e:
                    raise UpstreamException(f"Upstream returned malformed JSON: {response.text[:200]}") from e
                return await self._from_json(data, request.wants_stream, on_stream_data)

            if not request.wants_stream:
                text = (await response.aread()).decode("utf-8", errors="replace")
                raise UpstreamException(f"Unexpected response format: {text}")

            handed_off = True
            if on_stream_data is None:
                return StreamingResponse(
                    self._pipe(response, client),
                    media_type=SSE_MEDIA_TYPE,
                    headers=SSE_HEADERS,
                )
            return self._tee(response, client, on_stream_data)

        finally:
            if not handed_off:
                await response.aclose()
                await client.aclose()

    async def _from_json(
            self,
            data: Any,
            wants_stream: bool,
            on_stream_data: Optional[StreamDataCallback],
    ) -> Response:
        if wants_stream:
            if on_stream_data is not None:
                await self._invoke_callback(on_stream_data, data)
            return Response(
                content=format_sse_frame(data) + format_done_frame(),
                media_type=SSE_MEDIA_TYPE,
                headers=SSE_HEADERS,
            )

        artifact = extract_artifact(data)
        return JSONResponse(APIResponse.success(data=artifact or data, message="Success").model_dump())

    @staticmethod
    async def _pipe(response: httpx.Response, client: httpx.AsyncClient) -> AsyncIterator[bytes]:
        """直接透传上游字节"""
        try:
            async for chunk in response.aiter_bytes():
                yield chunk
        except httpx.HTTPError as e:
            LOG.error(f"Stream pipe error: {e}")
        finally:
            await response.aclose()
            await client.aclose()

    def _tee(
            self,
            response: httpx.Response,
            client: httpx.AsyncClient,
            on_stream_data: StreamDataCallback,
    ) -> StreamingResponse:
        """
        边转发边缓存

        读取上游的是后台任务，客户端断开后仍会读完并触发回调
        """
        queue: asyncio.Queue[Optional[bytes]] = asyncio.Queue()
        self.supervisor.spawn("stream-backup", self._accumulate(response, client, queue, on_stream_data))

        async def relay() -> AsyncIterator[bytes]:
            while True:
                chunk = await queue.get()
                if chunk is None:
                    break
                yield chunk

        return StreamingResponse(relay(), media_type=SSE_MEDIA_TYPE, headers=SSE_HEADERS)

    async def _accumulate(
            self,
            response: httpx.Response,
            client: httpx.AsyncClient,
            queue: asyncio.Queue,
            on_stream_data: StreamDataCallback,
    ) -> None:
        buffer = bytearray()
        try:
            async for chunk in response.aiter_bytes():
                buffer.extend(chunk)
                queue.put_nowait(chunk)
        finally:
            queue.put_nowait(None)
            await response.aclose()
            await client.aclose()

        frames = parse_sse_frames(buffer.decode("utf-8", errors="replace"))
        LOG.info(f"上游流结束, 共 {len(buffer)} 字节, {len(frames)} 帧")
        for frame in frames:
            await self._invoke_callback(on_stream_data, frame)

    @staticmethod
    async def _invoke_callback(on_stream_data: StreamDataCallback, data: Any) -> None:
        try:
            await on_stream_data(data)
        except Exception as e:
            LOG.exception(f"流数据回调失败: {e}")

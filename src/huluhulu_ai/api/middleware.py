#! /usr/bin/env python3
# -*- coding: utf-8 -*-
"""
中间件模块

TimingMiddleware 在响应头写入耗时，LoggingMiddleware 记录请求与响应摘要。
"""
import logging
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from huluhulu_ai.services.stream_normalizer import SSE_MEDIA_TYPE

LOG = logging.getLogger(__name__)

# 健康检查不打日志
QUIET_PATHS = frozenset({"/", "/ping"})
# 请求体里通常是 base64 图片
REQUEST_PREVIEW_LEN = 500
RESPONSE_PREVIEW_LEN = 200
BODY_METHODS = ("POST", "PUT", "PATCH")


def _elapsed_ms(start: float) -> str:
    return f"{(time.perf_counter() - start) * 1000:.0f}ms"


def _preview(payload: bytes, limit: int) -> str:
    """截取 payload 用于日志，不可解码时只给出长度"""
    if not payload:
        return "empty"
    try:
        text = payload.decode()
    except UnicodeDecodeError:
        return f"[binary data, {len(payload)} bytes]"
    if len(text) <= limit:
        return text
    return f"{text[:limit]}...[truncated, total {len(text)} chars]"


class TimingMiddleware(BaseHTTPMiddleware):
    """X-Process-Time 响应头"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        response.headers["X-Process-Time"] = _elapsed_ms(start)
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    请求日志中间件

    SSE 响应原样返回，不读取 body_iterator，否则推流会被整段缓冲
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        route = f"{request.method} {request.url.path}"
        quiet = request.url.path in QUIET_PATHS

        if not quiet:
            raw = await request.body() if request.method in BODY_METHODS else b""
            LOG.info(
                f"收到请求: [{route}], query: [{request.url.query}], "
                f"req: [{_preview(raw, REQUEST_PREVIEW_LEN)}]"
            )

        start = time.perf_counter()
        response = await call_next(request)
        cost = _elapsed_ms(start)

        if response.headers.get("content-type", "").startswith(SSE_MEDIA_TYPE):
            if not quiet:
                LOG.info(f"返回流式响应: [{route}], status: {response.status_code}, cost: {cost}")
            return response

        chunks = [chunk async for chunk in response.body_iterator]
        payload = b"".join(chunks)
        if not quiet:
            LOG.info(
                f"返回响应: [{route}], status: {response.status_code}, cost: {cost}, "
                f"resp: [{_preview(payload, RESPONSE_PREVIEW_LEN)}]"
            )

        # body_iterator 已消费，需要重建响应
        return Response(
            content=payload,
            status_code=response.status_code,
            headers=dict(response.headers),
            media_type=response.media_type,
        )

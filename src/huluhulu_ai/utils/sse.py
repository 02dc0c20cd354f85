# -*- coding: utf-8 -*-
"""
SSE 帧格式工具

帧格式: data: <json>\\n\\n，结束帧为 data: [DONE]\\n\\n
"""

import json
import logging
from typing import Any

LOG = logging.getLogger(__name__)

DONE_SENTINEL = "[DONE]"
DATA_PREFIX = "data: "

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


def format_sse_frame(payload: Any) -> bytes:
    """将 JSON 负载编码为一个 SSE 帧"""
    return f"{DATA_PREFIX}{json.dumps(payload, ensure_ascii=False)}\n\n".encode("utf-8")


def format_done_frame() -> bytes:
    return f"{DATA_PREFIX}{DONE_SENTINEL}\n\n".encode("utf-8")


def parse_sse_frames(text: str) -> list[Any]:
    """
    按行拆分 SSE 文本，解析所有 data: 行

    [DONE] 与无法解析的行直接忽略
    """
    frames = []
    for line in text.split("\n"):
        line = line.rstrip("\r")
        if not line.startswith(DATA_PREFIX):
            continue
        body = line[len(DATA_PREFIX):]
        if body.strip() == DONE_SENTINEL:
            continue
        try:
            frames.append(json.loads(body))
        except json.JSONDecodeError:
            LOG.debug(f"忽略无法解析的 SSE 行: {body[:100]}")
    return frames

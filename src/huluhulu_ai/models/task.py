#! /usr/bin/env python3
# -*- coding: utf-8 -*-
"""
生图请求与任务模型
"""
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

# 客户端保存的任务上下文有效期
TASK_CONTEXT_TTL = timedelta(hours=1)


class GenerationRequest(BaseModel):
    """发往上游的生图请求，派发后不可变"""
    model_config = ConfigDict(frozen=True)

    model: str
    prompt: str
    image_urls: tuple[str, ...] = ()
    aspect_ratio: str = "auto"
    image_size: str = "2K"
    wants_stream: bool = False

    def to_upstream_payload(self) -> dict:
        """上游 payload 格式"""
        return {
            "model": self.model,
            "prompt": self.prompt,
            "urls": list(self.image_urls),
            "aspectRatio": self.aspect_ratio,
            "imageSize": self.image_size,
            "stream": self.wants_stream,
        }


class TaskStatus(str, Enum):
    """任务状态"""
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class GenerationTask(BaseModel):
    """上游任务的只读视图（通过轮询获得）"""
    id: str
    status: TaskStatus = TaskStatus.RUNNING
    progress: int = Field(default=0, ge=0, le=100)
    result_urls: list[str] = Field(default_factory=list)
    failure_reason: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status != TaskStatus.RUNNING

    @classmethod
    def from_wire(cls, data: dict) -> "GenerationTask":
        """
        将上游 result 接口的响应转为任务状态

        未知状态（pending/queued 等）一律视为 running
        """
        try:
            status = TaskStatus(str(data.get("status", "running")).lower())
        except ValueError:
            status = TaskStatus.RUNNING

        try:
            progress = int(data.get("progress") or 0)
        except (TypeError, ValueError):
            progress = 0

        urls = [
            item["url"] for item in (data.get("results") or [])
            if isinstance(item, dict) and item.get("url")
        ]

        return cls(
            id=str(data.get("id", "")),
            status=status,
            progress=min(max(progress, 0), 100),
            result_urls=urls,
            failure_reason=data.get("failure_reason") or data.get("error") or None,
        )

    def to_wire(self) -> dict:
        """转回客户端约定的 result 格式"""
        data: dict[str, Any] = {"id": self.id, "status": self.status.value, "progress": self.progress}
        if self.result_urls:
            data["results"] = [{"url": url} for url in self.result_urls]
        if self.failure_reason:
            data["failure_reason"] = self.failure_reason
        return data


class ResumableTaskContext(BaseModel):
    """客户端保存的可恢复任务上下文，1 小时后过期"""
    task_id: str
    request_kind: str
    original_inputs: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=datetime.now)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now()
        return now - self.created_at > TASK_CONTEXT_TTL

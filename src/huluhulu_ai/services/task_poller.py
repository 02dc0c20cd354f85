# -*- coding: utf-8 -*-
"""
生图任务轮询

TaskPoller: 单次查询上游任务状态
TaskResumer: 客户端侧恢复逻辑，保存的任务上下文 1 小时内有效，
每 2 秒轮询一次直到成功或失败（无退避、默认无次数上限）
"""

import asyncio
import json
import logging
import os
from datetime import datetime
from typing import Awaitable, Callable, Optional

import httpx

from huluhulu_ai.core.config import ImageGenConfig
from huluhulu_ai.core.exceptions import ConfigurationException, UpstreamException, ValidationException
from huluhulu_ai.models.task import GenerationTask, ResumableTaskContext, TaskStatus

LOG = logging.getLogger("TaskPoller")

DEFAULT_POLL_INTERVAL = 2.0
DEFAULT_CONTEXT_FILE = "pending_task.json"


class TaskPoller:
    """上游任务状态查询"""

    def __init__(self, config: ImageGenConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self._transport = transport

    async def poll(self, task_id: Optional[str]) -> GenerationTask:
        if not task_id:
            raise ValidationException("缺少 id 参数")
        if not self.config.api_key:
            raise ConfigurationException("生图 API Key 未配置")

        url = f"{self.config.base_url}{self.config.result_endpoint}"
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.config.timeout) as client:
                response = await client.post(
                    url,
                    json={"id": task_id},
                    headers={"Authorization": f"Bearer {self.config.api_key}"},
                )
        except httpx.HTTPError as e:
            raise UpstreamException(f"查询任务失败: {e}") from e

        if not response.is_success:
            raise UpstreamException(f"Upstream API Error {response.status_code}: {response.text}", response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamException(f"查询任务返回格式异常: {response.text[:200]}") from e

        # 兼容 {code, data: {...}} 包装
        if isinstance(data, dict) and isinstance(data.get("data"), dict) and "status" not in data:
            data = data["data"]
        if not isinstance(data, dict):
            raise UpstreamException("查询任务返回格式异常")

        task = GenerationTask.from_wire(data)
        if not task.id:
            task.id = task_id
        LOG.info(f"任务 {task.id} 状态: {task.status.value}, 进度: {task.progress}")
        return task


class ResumableTaskStore:
    """
    任务上下文持久化（单个 JSON 文件）

    使用临时文件 + rename 方式保证原子性
    """

    def __init__(self, file_path: str = DEFAULT_CONTEXT_FILE):
        self._file_path = file_path

    def save(self, context: ResumableTaskContext) -> None:
        dir_path = os.path.dirname(self._file_path)
        if dir_path:
            os.makedirs(dir_path, exist_ok=True)

        temp_path = self._file_path + ".tmp"
        with open(temp_path, "w", encoding="utf-8") as f:
            f.write(context.model_dump_json())
        os.replace(temp_path, self._file_path)

    def load(self) -> Optional[ResumableTaskContext]:
        if not os.path.exists(self._file_path):
            return None
        try:
            with open(self._file_path, "r", encoding="utf-8") as f:
                return ResumableTaskContext.model_validate(json.load(f))
        except (json.JSONDecodeError, ValueError) as e:
            LOG.error(f"任务上下文文件无法解析, 丢弃: {e}")
            self.clear()
            return None

    def clear(self) -> None:
        if os.path.exists(self._file_path):
            os.remove(self._file_path)


class TaskResumer:
    """客户端任务恢复"""

    def __init__(
            self,
            poller: TaskPoller,
            store: ResumableTaskStore,
            interval: float = DEFAULT_POLL_INTERVAL,
            sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
            max_attempts: Optional[int] = None,
            clock: Callable[[], datetime] = datetime.now,
    ):
        self.poller = poller
        self.store = store
        self.interval = interval
        self._sleep = sleep
        self.max_attempts = max_attempts
        self._clock = clock

    def remember(self, task_id: str, request_kind: str, original_inputs: Optional[dict] = None) -> ResumableTaskContext:
        """提交任务后保存上下文"""
        context = ResumableTaskContext(
            task_id=task_id,
            request_kind=request_kind,
            original_inputs=original_inputs or {},
            created_at=self._clock(),
        )
        self.store.save(context)
        return context

    async def resume(
            self,
            on_progress: Optional[Callable[[GenerationTask], None]] = None,
    ) -> Optional[GenerationTask]:
        """
        恢复保存的任务

        Returns:
            follow 的结果；没有上下文或上下文已过期时返回 None
        """
        context = self.store.load()
        if context is None:
            return None
        if context.is_expired(self._clock()):
            LOG.info(f"任务上下文已过期, 丢弃: {context.task_id}")
            self.store.clear()
            return None

        LOG.info(f"恢复任务: {context.task_id}, kind: {context.request_kind}")
        return await self.follow(context.task_id, on_progress)

    async def follow(
            self,
            task_id: str,
            on_progress: Optional[Callable[[GenerationTask], None]] = None,
    ) -> GenerationTask:
        """
        轮询直到终态

        成功、失败或查询异常时清除保存的上下文。
        设置了 max_attempts 且次数用完时返回最后一次查询到的任务（仍是 running），
        上下文保留，下次 resume 继续

        Returns:
            终态任务，或达到 max_attempts 时最后一次的 running 快照
        """
        attempts = 0
        while True:
            try:
                task = await self.poller.poll(task_id)
            except Exception:
                self.store.clear()
                raise
            attempts += 1
            if on_progress is not None:
                on_progress(task)

            if task.status == TaskStatus.SUCCEEDED:
                self.store.clear()
                return task
            if task.status == TaskStatus.FAILED:
                LOG.warning(f"任务失败: {task_id}, reason: {task.failure_reason}")
                self.store.clear()
                return task
            if self.max_attempts is not None and attempts >= self.max_attempts:
                LOG.warning(f"任务轮询达到上限 {self.max_attempts} 次: {task_id}")
                return task

            await self._sleep(self.interval)

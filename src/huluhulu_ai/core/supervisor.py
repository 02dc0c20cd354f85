# -*- coding: utf-8 -*-
"""
Background Task Supervisor - 后台任务管理

响应返回后继续执行的异步任务（提示词填充、流式备份）统一从这里派发，
记录每个任务的成功/失败，便于排查。进程被回收时任务可能执行不完，属于尽力而为。
"""

import asyncio
import logging
import time
from collections import deque
from typing import Any, Coroutine, Optional

LOG = logging.getLogger(__name__)

# 保留的历史记录条数
MAX_HISTORY = 200


class TaskRecord:
    """单个后台任务的执行记录"""

    def __init__(self, name: str):
        self.name = name
        self.status = "running"
        self.error: Optional[str] = None
        self.started_at = time.time()
        self.finished_at: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "status": self.status,
            "error": self.error,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
        }


class BackgroundTaskSupervisor:
    """后台任务派发与记录（单事件循环内使用）"""

    def __init__(self, max_history: int = MAX_HISTORY):
        self._tasks: set[asyncio.Task] = set()
        self._history: deque[TaskRecord] = deque(maxlen=max_history)

    def spawn(self, name: str, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        """派发后台任务，持有引用直到完成"""
        record = TaskRecord(name)
        self._history.append(record)

        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(lambda t: self._on_done(t, record))
        LOG.debug(f"后台任务已派发: {name}")
        return task

    def _on_done(self, task: asyncio.Task, record: TaskRecord) -> None:
        self._tasks.discard(task)
        record.finished_at = time.time()

        if task.cancelled():
            record.status = "cancelled"
            LOG.warning(f"后台任务被取消: {record.name}")
            return

        exc = task.exception()
        if exc is not None:
            record.status = "failed"
            record.error = str(exc)
            LOG.error(f"后台任务失败: {record.name}, err: {exc}", exc_info=exc)
        else:
            record.status = "succeeded"
            LOG.info(f"后台任务完成: {record.name}, cost: {(record.finished_at - record.started_at) * 1000:.0f}ms")

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self, timeout: Optional[float] = None) -> None:
        """等待所有进行中的任务结束（包括等待期间新派发的任务）"""
        deadline = None if timeout is None else time.monotonic() + timeout
        while self._tasks:
            remaining = None if deadline is None else max(deadline - time.monotonic(), 0)
            await asyncio.wait(set(self._tasks), timeout=remaining)
            if deadline is not None and time.monotonic() >= deadline and self._tasks:
                LOG.warning(f"等待后台任务超时, 剩余: {len(self._tasks)}")
                return

    def stats(self) -> dict:
        """获取统计信息"""
        counts: dict[str, int] = {}
        for record in self._history:
            counts[record.status] = counts.get(record.status, 0) + 1
        return {
            "pending": self.pending,
            "counts": counts,
            "recent": [record.to_dict() for record in list(self._history)[-20:]],
        }

# -*- coding: utf-8 -*-
"""
Job Management - 定时任务管理

schedule 在独立的守护线程中运行，
到点后把风格目录刷新提交到应用的事件循环上执行。
"""

import asyncio
import logging
import threading
from typing import Any, Callable, Optional

import schedule

from huluhulu_ai.core.config import CatalogueConfig

LOG = logging.getLogger("JobMgmt")


class Job(object):

    def __init__(self, scheduler: Optional[schedule.Scheduler] = None):
        self.scheduler = scheduler or schedule.Scheduler()
        self._stop_event = threading.Event()

    def on_every_time(self, times: Any, task: Callable[..., Any], tz: str = "Asia/Shanghai", *args, **kwargs) -> None:
        """
        每天定时执行
        :param times: 时间字符串列表，格式 HH:MM:SS 或 HH:MM
        :param task: 定时执行的方法
        :param tz: 时区，默认北京时间 (Asia/Shanghai)
        :return: None

        例子: times=["08:00", "20:00"]
        """
        if not isinstance(times, list):
            times = [times]

        for t in times:
            self.scheduler.every(1).days.at(t, tz).do(task, *args, **kwargs)

    def async_enable_jobs(self) -> threading.Thread:
        thread = threading.Thread(target=self.enable_jobs, name="enableJobs", daemon=True)
        thread.start()
        return thread

    def enable_jobs(self) -> None:
        while not self._stop_event.is_set():
            self.scheduler.run_pending()
            self._stop_event.wait(1)

    def stop(self) -> None:
        self._stop_event.set()
        self.scheduler.clear()


def submit_refresh(loop: asyncio.AbstractEventLoop, refresh: Callable[[str], Any], catalogue: str):
    """在调度线程中调用，把刷新协程提交到事件循环，不等待结果"""
    LOG.info(f"定时刷新风格目录: {catalogue}")
    return asyncio.run_coroutine_threadsafe(refresh(catalogue), loop)


def register_refresh_jobs(
        job: Job,
        loop: asyncio.AbstractEventLoop,
        refresh: Callable[[str], Any],
        catalogues: dict[str, CatalogueConfig],
        tz: str = "Asia/Shanghai",
) -> int:
    """
    按目录配置的 refresh_times 注册每日刷新

    Returns:
        注册的任务数
    """
    count = 0
    for catalogue, catalogue_config in catalogues.items():
        if not catalogue_config.refresh_times:
            continue
        job.on_every_time(catalogue_config.refresh_times, submit_refresh, tz, loop, refresh, catalogue)
        count += len(catalogue_config.refresh_times)
        LOG.info(f"注册定时刷新: {catalogue}, times: {catalogue_config.refresh_times}, tz: {tz}")
    return count

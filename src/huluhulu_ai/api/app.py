#! /usr/bin/env python3
# -*- coding: utf-8 -*-
"""
FastAPI 应用模块
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from huluhulu_ai import __version__
from huluhulu_ai.api.exception_handlers import setup_exception_handlers
from huluhulu_ai.api.middleware import LoggingMiddleware, TimingMiddleware
from huluhulu_ai.api.routes import router
from huluhulu_ai.container import ServiceContainer, build_container
from huluhulu_ai.core.config import Config, get_config
from huluhulu_ai.core.logging_config import LoggingConfig
from huluhulu_ai.jobs.job_mgmt import Job, register_refresh_jobs
from huluhulu_ai.llm.llm_bootstrap import init_litellm

LOG = logging.getLogger(__name__)

# 关闭时等待后台任务的最长时间
SHUTDOWN_DRAIN_TIMEOUT = 30


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    config: Config = app.state.config
    LoggingConfig.setup(config.log.service_name, log_level=config.log.level, json_format=config.log.json_format)
    init_litellm()

    if app.state.container is None:
        app.state.container = build_container(config)
    container: ServiceContainer = app.state.container

    job: Optional[Job] = None
    if config.scheduler.enabled:
        job = Job()
        count = register_refresh_jobs(
            job,
            asyncio.get_running_loop(),
            container.catalog_service.refresh,
            config.catalogues,
            config.scheduler.timezone,
        )
        job.async_enable_jobs()
        LOG.info(f"定时任务已启动, 共 {count} 个")

    LOG.info("Huluhulu AI 服务启动成功...")
    yield
    LOG.info("Huluhulu AI 服务关闭中...")

    if job is not None:
        job.stop()
    await container.supervisor.drain(timeout=SHUTDOWN_DRAIN_TIMEOUT)
    if container.engine is not None:
        container.engine.dispose()


def create_app(config: Optional[Config] = None, container: Optional[ServiceContainer] = None) -> FastAPI:
    """
    创建 FastAPI 应用

    Args:
        config: 主配置，默认读取 config.yaml
        container: 预先组装好的服务（测试用），默认在启动时按配置组装
    """

    application = FastAPI(
        title="Huluhulu AI",
        description="热点风格修图服务",
        version=__version__,
        lifespan=lifespan
    )
    application.state.config = config or (container.config if container else get_config())
    application.state.container = container

    # CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 自定义中间件（注意顺序：后添加的先执行，TimingMiddleware 需要在 LoggingMiddleware 之前执行完）
    application.add_middleware(TimingMiddleware)
    application.add_middleware(LoggingMiddleware)

    setup_exception_handlers(application)

    # 注册路由
    application.include_router(router)

    # 健康检查
    @application.get("/")
    async def root():
        return "pong"

    @application.get("/ping")
    async def ping():
        return "pong"

    return application

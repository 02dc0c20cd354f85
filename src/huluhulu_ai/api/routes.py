#! /usr/bin/env python3
# -*- coding: utf-8 -*-
"""
API 路由模块
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from huluhulu_ai.api.deps import get_catalog_service, get_container, get_dispatcher, get_poller, get_supervisor
from huluhulu_ai.container import ServiceContainer
from huluhulu_ai.core.exceptions import ValidationException
from huluhulu_ai.core.supervisor import BackgroundTaskSupervisor
from huluhulu_ai.llm.style_prompts import COMPLIMENT, PHOTOGRAPHY
from huluhulu_ai.models.request import MemeGenerationRequest, StyleGenerationRequest
from huluhulu_ai.models.response import APIResponse, StyleItem, error_response
from huluhulu_ai.services.generation_dispatcher import GenerationDispatcher
from huluhulu_ai.services.style_service import StyleCatalogService
from huluhulu_ai.services.task_poller import TaskPoller

LOG = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


async def _read_catalogue(service: StyleCatalogService, catalogue: str) -> APIResponse:
    """目录读取永远返回 code=0，没有数据时返回空列表"""
    styles = await service.get_styles(catalogue)
    items = [StyleItem(title=s.title, source=s.source, prompt=s.prompt).model_dump() for s in styles]
    if not items:
        return APIResponse.success(data=[], message="No styles available yet")
    return APIResponse.success(data=items, message="Success")


@router.get("/image/photography-styles")
async def photography_styles(service: StyleCatalogService = Depends(get_catalog_service)) -> APIResponse:
    """获取热门写真风格"""
    return await _read_catalogue(service, PHOTOGRAPHY)


@router.get("/compliment-styles")
async def compliment_styles(service: StyleCatalogService = Depends(get_catalog_service)) -> APIResponse:
    """获取热门夸夸风格"""
    return await _read_catalogue(service, COMPLIMENT)


@router.post("/image/photography-cat")
async def photography_cat(
        request: StyleGenerationRequest,
        dispatcher: GenerationDispatcher = Depends(get_dispatcher)
) -> Response:
    """
    写真修图

    stream=true 时返回 SSE，否则返回 JSON 信封
    """
    return await dispatcher.dispatch_style(PHOTOGRAPHY, request)


@router.post("/compliment-cat")
async def compliment_cat(
        request: StyleGenerationRequest,
        dispatcher: GenerationDispatcher = Depends(get_dispatcher)
) -> Response:
    """夸夸修图"""
    return await dispatcher.dispatch_style(COMPLIMENT, request)


@router.post("/image/meme-generate")
async def meme_generate(
        request: MemeGenerationRequest,
        dispatcher: GenerationDispatcher = Depends(get_dispatcher)
) -> Response:
    """
    表情包生成（始终 SSE）

    type 1: 九宫格  type 2: 表情迁移  type 3: GIF 帧图
    """
    return await dispatcher.dispatch_meme(request)


@router.get("/image/photography-result")
async def photography_result(
        id: Optional[str] = Query(default=None),
        poller: TaskPoller = Depends(get_poller)
) -> APIResponse:
    """查询写真任务结果"""
    task = await poller.poll(id)
    return APIResponse.success(task.to_wire())


@router.get("/meme-result")
async def meme_result(
        id: Optional[str] = Query(default=None),
        poller: TaskPoller = Depends(get_poller)
) -> APIResponse:
    """查询表情包任务结果"""
    task = await poller.poll(id)
    return APIResponse.success(task.to_wire())


@router.api_route("/cron/refresh-styles", methods=["GET", "POST"])
async def refresh_styles(
        catalogue: Optional[str] = Query(default=None),
        container: ServiceContainer = Depends(get_container)
):
    """
    手动触发风格目录刷新

    不传 catalogue 时刷新全部目录，返回每个目录发布的风格数
    """
    if catalogue is not None and catalogue not in container.pipelines:
        raise ValidationException(f"未知的风格目录: {catalogue}")

    targets = [catalogue] if catalogue else list(container.pipelines)
    counts = {}
    for name in targets:
        try:
            styles = await container.pipelines[name].run()
        except Exception as e:
            LOG.exception(f"Scheduled Refresh Failed: {name}, err: {e}")
            return error_response(500, f"{name} 刷新失败: {e}")
        counts[name] = len(styles)

    return APIResponse.success(counts)


@router.get("/tasks")
async def background_tasks(supervisor: BackgroundTaskSupervisor = Depends(get_supervisor)) -> APIResponse:
    """后台任务统计"""
    return APIResponse.success(supervisor.stats())

#! /usr/bin/env python3
# -*- coding: utf-8 -*-
"""
依赖注入模块
"""
from fastapi import Request

from huluhulu_ai.container import ServiceContainer
from huluhulu_ai.core.supervisor import BackgroundTaskSupervisor
from huluhulu_ai.services.generation_dispatcher import GenerationDispatcher
from huluhulu_ai.services.style_service import StyleCatalogService
from huluhulu_ai.services.task_poller import TaskPoller


def get_container(request: Request) -> ServiceContainer:
    """获取服务容器（lifespan 中创建）"""
    return request.app.state.container


def get_catalog_service(request: Request) -> StyleCatalogService:
    return get_container(request).catalog_service


def get_dispatcher(request: Request) -> GenerationDispatcher:
    return get_container(request).dispatcher


def get_poller(request: Request) -> TaskPoller:
    return get_container(request).poller


def get_supervisor(request: Request) -> BackgroundTaskSupervisor:
    return get_container(request).supervisor

#! /usr/bin/env python3
# -*- coding: utf-8 -*-
"""
核心模块
配置管理、日志、异常、后台任务
"""
from huluhulu_ai.core.config import Config, get_config, reload_config
from huluhulu_ai.core.exceptions import (
    BusinessException,
    ConfigurationException,
    UpstreamException,
    ValidationException,
)
from huluhulu_ai.core.supervisor import BackgroundTaskSupervisor

__all__ = [
    'Config',
    'get_config',
    'reload_config',
    'BusinessException',
    'ConfigurationException',
    'UpstreamException',
    'ValidationException',
    'BackgroundTaskSupervisor',
]

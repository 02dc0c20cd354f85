#! /usr/bin/env python3
# -*- coding: utf-8 -*-
"""
数据模型模块
"""
from huluhulu_ai.models.request import MemeGenerationRequest, StyleGenerationRequest
from huluhulu_ai.models.response import APIResponse, StyleItem, error_response
from huluhulu_ai.models.style import HotSearchItem, Style, StyleBatch, StyleCandidate
from huluhulu_ai.models.task import (
    GenerationRequest,
    GenerationTask,
    ResumableTaskContext,
    TaskStatus,
)

__all__ = [
    'StyleGenerationRequest',
    'MemeGenerationRequest',
    'APIResponse',
    'StyleItem',
    'error_response',
    'HotSearchItem',
    'Style',
    'StyleBatch',
    'StyleCandidate',
    'GenerationRequest',
    'GenerationTask',
    'ResumableTaskContext',
    'TaskStatus',
]

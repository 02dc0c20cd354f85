#! /usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LLM 模块
提供大语言模型相关服务
"""
from huluhulu_ai.llm.router import CompletionClient, LLMRouter

__all__ = [
    'CompletionClient',
    'LLMRouter',
]

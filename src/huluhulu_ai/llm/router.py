#! /usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LLM 路由模块
使用 LiteLLM 调用大语言模型
"""
import logging
import time
from typing import Optional, Protocol

import litellm

from huluhulu_ai.core.config import LLMConfig
from huluhulu_ai.core.exceptions import ConfigurationException

LOG = logging.getLogger(__name__)


class CompletionClient(Protocol):
    """给定 system/user prompt 返回文本，失败时抛异常"""

    async def complete(
            self,
            system_prompt: str,
            user_prompt: str,
            temperature: Optional[float] = None,
            json_mode: bool = False,
    ) -> str:
        ...


class LLMRouter:
    """LLM 路由器 - 基于 LiteLLM 的 CompletionClient 实现"""

    def __init__(self, config: LLMConfig):
        self.config = config

    async def chat(
            self,
            messages: list[dict],
            model: Optional[str] = None,
            **kwargs
    ) -> str:
        """发送聊天请求，返回完整文本"""
        if not self.config.api_key:
            raise ConfigurationException("LLM API Key 未配置")

        resolved_model = model or self.config.model
        LOG.info(f"LLM chat: model={resolved_model}, messages_count={len(messages)}")

        start_time = time.time()
        response = await litellm.acompletion(
            model=resolved_model,
            messages=messages,
            api_key=self.config.api_key,
            api_base=self.config.api_base,
            timeout=self.config.timeout,
            **kwargs
        )
        LOG.info(f"LLM 调用耗时: {(time.time() - start_time) * 1000:.0f}ms")

        return response.choices[0].message.content or ""

    async def complete(
            self,
            system_prompt: str,
            user_prompt: str,
            temperature: Optional[float] = None,
            json_mode: bool = False,
    ) -> str:
        """system + user 单轮补全"""
        kwargs = {}
        if temperature is not None:
            kwargs["temperature"] = temperature
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        return await self.chat(
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            **kwargs
        )

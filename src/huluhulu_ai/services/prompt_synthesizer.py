#! /usr/bin/env python3
# -*- coding: utf-8 -*-
"""
提示词生成模块
为单个风格主题生成修图提示词
"""
import logging
from typing import Optional

from huluhulu_ai.llm import style_prompts
from huluhulu_ai.llm.router import CompletionClient

LOG = logging.getLogger(__name__)


class PromptSynthesizer:
    """
    提示词生成器

    每次调用独立，失败只记录日志并返回 None，可并发调用。
    """

    def __init__(
            self,
            client: CompletionClient,
            catalogue: str = style_prompts.PHOTOGRAPHY,
            temperature: Optional[float] = 1.1,
    ):
        self.client = client
        self.catalogue = catalogue
        self.temperature = temperature

    async def synthesize(self, title: str, source: Optional[list[str]] = None) -> Optional[str]:
        try:
            content = await self.client.complete(
                system_prompt=style_prompts.get_synthesis_prompt(self.catalogue, title, source),
                user_prompt=style_prompts.SYNTHESIS_USER_PROMPT,
                temperature=self.temperature,
            )
        except Exception as e:
            LOG.error(f"[{self.catalogue}] 提示词生成失败: {title}, err: {e}")
            return None

        prompt = (content or "").strip()
        if not prompt:
            LOG.warning(f"[{self.catalogue}] 提示词为空: {title}")
            return None
        return prompt

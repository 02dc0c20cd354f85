#! /usr/bin/env python3
# -*- coding: utf-8 -*-
"""
主题筛选模块
一次 LLM 调用，从热搜标题中归纳出风格主题
"""
import logging
from typing import Any, Optional

from huluhulu_ai.llm import style_prompts
from huluhulu_ai.llm.router import CompletionClient
from huluhulu_ai.models.style import StyleCandidate
from huluhulu_ai.utils.json_repair import safe_parse_json

LOG = logging.getLogger(__name__)


class ThemeSelector:
    """
    主题筛选器

    LLM 调用失败时异常向上抛出（由刷新流程决定中止），
    返回内容无法解析或为空时返回空列表。不重试。
    """

    def __init__(
            self,
            client: CompletionClient,
            catalogue: str = style_prompts.PHOTOGRAPHY,
            temperature: Optional[float] = 1.0,
    ):
        self.client = client
        self.catalogue = catalogue
        self.temperature = temperature

    async def select(self, titles: list[str], min_count: int = 6, max_count: int = 10) -> list[StyleCandidate]:
        """
        筛选风格主题

        Args:
            titles: 去重后的热搜标题
            min_count: 期望的最少主题数（写入 prompt）
            max_count: 最多返回的主题数

        Returns:
            风格主题列表
        """
        if not titles:
            LOG.warning(f"[{self.catalogue}] 没有可分析的热搜标题, 跳过筛选")
            return []

        content = await self.client.complete(
            system_prompt=style_prompts.get_selection_prompt(self.catalogue, min_count, max_count),
            user_prompt=style_prompts.get_selection_user_prompt(titles),
            temperature=self.temperature,
            json_mode=True,
        )
        LOG.info(f"[{self.catalogue}] AI 筛选结果: {content[:500]}")

        candidates = self._parse(safe_parse_json(content))
        return candidates[:max_count]

    @staticmethod
    def _parse(parsed: Any) -> list[StyleCandidate]:
        if isinstance(parsed, list):
            raw_items = parsed
        elif isinstance(parsed, dict):
            raw_items = next(
                (parsed[key] for key in ("items", "titles", "list") if isinstance(parsed.get(key), list)),
                [],
            )
        else:
            return []

        candidates = []
        for item in raw_items:
            if isinstance(item, str):
                title, source = item, []
            elif isinstance(item, dict):
                title = item.get("title") or ""
                source = item.get("source") or []
                if isinstance(source, str):
                    source = [source]
            else:
                continue

            title = str(title).strip()
            if not title:
                continue
            candidates.append(StyleCandidate(title=title, source=[str(s) for s in source]))
        return candidates

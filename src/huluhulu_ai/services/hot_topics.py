#! /usr/bin/env python3
# -*- coding: utf-8 -*-
"""
热搜聚合模块
合并多个热搜源的标题，去重并截断
"""
import asyncio
import logging
import time
from typing import Any, Callable, Iterable, Optional, Protocol, Sequence

import httpx

from huluhulu_ai.cache.style_cache import CacheEntry
from huluhulu_ai.core.config import HotSearchSourceConfig
from huluhulu_ai.models.style import HotSearchItem

LOG = logging.getLogger(__name__)

# 默认送给 LLM 的标题条数
DEFAULT_MAX_TITLES = 50


class HotSearchSource(Protocol):
    """热搜源，返回有限的热搜条目"""
    name: str

    async def fetch(self) -> Iterable[HotSearchItem]:
        ...


class HotTopicAggregator:
    """热搜标题聚合器"""

    def __init__(self, max_titles: int = DEFAULT_MAX_TITLES):
        self.max_titles = max_titles

    def aggregate(self, results: Sequence[Iterable[HotSearchItem]], max_titles: Optional[int] = None) -> list[str]:
        """
        合并多个热搜源结果

        按出现顺序拼接，按标题精确去重（保留首次出现），再截断。
        每个结果只遍历一次。
        """
        limit = self.max_titles if max_titles is None else max_titles
        seen: set[str] = set()
        titles: list[str] = []
        for items in results:
            for item in items:
                title = item.title
                if title in seen:
                    continue
                seen.add(title)
                titles.append(title)
        return titles[:limit]

    async def collect(self, sources: Sequence[HotSearchSource]) -> list[list[HotSearchItem]]:
        """并发拉取所有热搜源，失败的源记录日志后忽略"""
        results = await asyncio.gather(*(source.fetch() for source in sources), return_exceptions=True)

        collected: list[list[HotSearchItem]] = []
        for source, result in zip(sources, results):
            if isinstance(result, BaseException):
                LOG.warning(f"热搜源拉取失败: {source.name}, err: {result}")
                continue
            items = list(result)
            LOG.info(f"热搜源 {source.name} 返回 {len(items)} 条")
            collected.append(items)
        return collected


class JsonFeedHotSearchSource:
    """
    基于配置的 JSON 热搜源

    按 list_path 找到列表，取 title_field 作为标题。
    拉取失败时返回上一次成功的结果（即使已过期），没有则返回空列表。
    """

    def __init__(
            self,
            config: HotSearchSourceConfig,
            transport: Optional[httpx.AsyncBaseTransport] = None,
            clock: Callable[[], float] = time.time,
    ):
        self.config = config
        self.name = config.name
        self._transport = transport
        self._clock = clock
        self._cache: Optional[CacheEntry[list[HotSearchItem]]] = None

    async def fetch(self) -> list[HotSearchItem]:
        if self._cache and self._clock() - self._cache.timestamp < self.config.ttl_seconds:
            return list(self._cache.data)

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.config.timeout) as client:
                response = await client.get(self.config.url, headers=self.config.headers)
                response.raise_for_status()
                data = response.json()

            items = self._parse(data)
            self._cache = CacheEntry(data=items, timestamp=self._clock())
            return list(items)

        except Exception as e:
            LOG.error(f"{self.name} fetch error: {e}")
            if self._cache:
                return list(self._cache.data)
            return []

    def _parse(self, data: Any) -> list[HotSearchItem]:
        node = data
        for part in filter(None, self.config.list_path.split(".")):
            node = node.get(part) if isinstance(node, dict) else None
        if not isinstance(node, list):
            raise ValueError(f"{self.name} 返回格式异常, 找不到列表: {self.config.list_path}")

        items = []
        for index, element in enumerate(node):
            title = element.get(self.config.title_field) if isinstance(element, dict) else element
            if not title:
                continue
            items.append(HotSearchItem(rank=index + 1, title=str(title), icon_type="hot" if index < 3 else None))
        return items

#! /usr/bin/env python3
# -*- coding: utf-8 -*-
"""
风格目录读取服务
内存缓存 -> 持久化最新批次 -> 同步刷新 -> 过期缓存兜底 -> 空列表
"""
import logging

from huluhulu_ai.cache.style_cache import StyleCache
from huluhulu_ai.models.style import Style
from huluhulu_ai.services.style_pipeline import StyleRefreshPipeline
from huluhulu_ai.storage.style_store import StyleBatchStore

LOG = logging.getLogger(__name__)


class StyleCatalogService:
    """风格目录读取，读路径永不抛异常"""

    def __init__(
            self,
            cache: StyleCache,
            store: StyleBatchStore,
            pipelines: dict[str, StyleRefreshPipeline],
    ):
        self.cache = cache
        self.store = store
        self.pipelines = pipelines

    async def get_styles(self, catalogue: str) -> list[Style]:
        cached = self.cache.get(catalogue)
        if cached:
            LOG.info(f"[{catalogue}] 命中内存缓存, count: {len(cached)}")
            return cached

        try:
            batch = await self.store.fetch_latest(catalogue)
        except Exception as e:
            LOG.error(f"[{catalogue}] 读取持久化批次失败: {e}")
            batch = None

        if batch and batch.items:
            LOG.info(f"[{catalogue}] 命中持久化批次: {batch.batch_id}, count: {len(batch.items)}")
            self.cache.set(catalogue, batch.items)
            return batch.items

        styles = await self.refresh(catalogue)
        if styles:
            return styles

        stale = self.cache.get_stale(catalogue)
        if stale:
            LOG.warning(f"[{catalogue}] 刷新失败, 返回过期缓存, count: {len(stale)}")
            return stale
        return []

    async def refresh(self, catalogue: str) -> list[Style]:
        """同步执行一次刷新，失败返回空列表"""
        pipeline = self.pipelines.get(catalogue)
        if pipeline is None:
            LOG.warning(f"未知的风格目录: {catalogue}")
            return []

        try:
            return await pipeline.run()
        except Exception as e:
            LOG.exception(f"[{catalogue}] 刷新风格目录失败: {e}")
            return []

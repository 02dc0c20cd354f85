#! /usr/bin/env python3
# -*- coding: utf-8 -*-
"""
风格目录刷新流程

热搜聚合 -> LLM 筛选主题 -> 先写入空提示词目录（读者立即可见）
-> 后台并发生成提示词并逐个回填 -> 全部结束后整批持久化
"""
import asyncio
import logging
from datetime import datetime
from enum import Enum
from typing import Sequence

from huluhulu_ai.cache.style_cache import StyleCache
from huluhulu_ai.core.supervisor import BackgroundTaskSupervisor
from huluhulu_ai.models.style import Style, StyleBatch
from huluhulu_ai.services.hot_topics import HotSearchSource, HotTopicAggregator
from huluhulu_ai.services.prompt_synthesizer import PromptSynthesizer
from huluhulu_ai.services.theme_selector import ThemeSelector
from huluhulu_ai.storage.style_store import StyleBatchStore, new_batch_id

LOG = logging.getLogger(__name__)


class PipelineState(str, Enum):
    IDLE = "idle"
    AGGREGATING = "aggregating"
    SELECTING = "selecting"
    SEEDED_AND_PUBLISHED = "seeded_and_published"
    SYNTHESIZING = "synthesizing"
    PERSISTED = "persisted"


class StyleRefreshPipeline:
    """
    单个目录的刷新流程

    同一目录的并发刷新不做去重，后一次 set 覆盖前一次。
    state 只反映最近一次 run：旧的 run 在后台回填结束时不再改写它。
    """

    def __init__(
            self,
            catalogue: str,
            sources: Sequence[HotSearchSource],
            aggregator: HotTopicAggregator,
            selector: ThemeSelector,
            synthesizer: PromptSynthesizer,
            cache: StyleCache,
            store: StyleBatchStore,
            supervisor: BackgroundTaskSupervisor,
            min_items: int = 6,
            max_items: int = 10,
    ):
        self.catalogue = catalogue
        self.sources = list(sources)
        self.aggregator = aggregator
        self.selector = selector
        self.synthesizer = synthesizer
        self.cache = cache
        self.store = store
        self.supervisor = supervisor
        self.min_items = min_items
        self.max_items = max_items
        self.state = PipelineState.IDLE
        self._run_id = 0

    def _transition(self, run_id: int, state: PipelineState) -> None:
        if run_id == self._run_id:
            self.state = state

    async def run(self) -> list[Style]:
        """
        执行一次刷新

        Returns:
            写入缓存的种子列表（提示词为空），没有主题时返回空列表

        Raises:
            ThemeSelector 的 LLM 异常，此时缓存保持原样
        """
        self._run_id += 1
        run_id = self._run_id
        self._transition(run_id, PipelineState.AGGREGATING)
        results = await self.aggregator.collect(self.sources)
        titles = self.aggregator.aggregate(results)
        LOG.info(f"[{self.catalogue}] 聚合热搜标题 {len(titles)} 条")

        self._transition(run_id, PipelineState.SELECTING)
        try:
            candidates = await self.selector.select(titles, self.min_items, self.max_items)
        except Exception:
            self._transition(run_id, PipelineState.IDLE)
            raise

        if not candidates:
            LOG.warning(f"[{self.catalogue}] AI 未筛选出任何主题")
            self._transition(run_id, PipelineState.IDLE)
            return []

        seeded = [Style(title=c.title, prompt="", source=c.source) for c in candidates]
        self.cache.set(self.catalogue, seeded)
        self._transition(run_id, PipelineState.SEEDED_AND_PUBLISHED)
        LOG.info(f"[{self.catalogue}] 已发布 {len(seeded)} 个风格, 后台生成提示词")

        self.supervisor.spawn(f"fill-{self.catalogue}", self._fill_and_persist(run_id, seeded))
        return [style.model_copy(deep=True) for style in seeded]

    async def _fill_and_persist(self, run_id: int, seeded: list[Style]) -> None:
        self._transition(run_id, PipelineState.SYNTHESIZING)
        results = await asyncio.gather(*(self._fill_one(style) for style in seeded), return_exceptions=True)

        failed = 0
        for style, result in zip(seeded, results):
            if isinstance(result, BaseException):
                LOG.error(f"[{self.catalogue}] 回填提示词异常: {style.title}, err: {result}")
                failed += 1
            elif not result:
                failed += 1
        LOG.info(f"[{self.catalogue}] 提示词生成结束, 成功 {len(seeded) - failed}/{len(seeded)}")

        items = self.cache.get_stale(self.catalogue) or seeded
        batch = StyleBatch(
            batch_id=new_batch_id(),
            catalogue=self.catalogue,
            items=items,
            created_at=datetime.now(),
        )
        persisted = await self.store.persist(batch)
        self._transition(run_id, PipelineState.PERSISTED if persisted else PipelineState.IDLE)

    async def _fill_one(self, style: Style) -> bool:
        prompt = await self.synthesizer.synthesize(style.title, style.source)
        if not prompt:
            return False
        self.cache.upsert_one(self.catalogue, Style(title=style.title, prompt=prompt, source=style.source))
        return True

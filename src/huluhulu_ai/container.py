#! /usr/bin/env python3
# -*- coding: utf-8 -*-
"""
服务组装
所有服务实例在这里创建，生命周期与进程一致，挂在 app.state 上供路由使用
"""
import logging
from dataclasses import dataclass
from typing import Optional

import httpx
from sqlalchemy.engine import Engine

from huluhulu_ai.cache.style_cache import StyleCache
from huluhulu_ai.core.config import Config
from huluhulu_ai.core.db_engine import create_db_engine, create_session_factory
from huluhulu_ai.core.supervisor import BackgroundTaskSupervisor
from huluhulu_ai.llm.router import CompletionClient, LLMRouter
from huluhulu_ai.services.backup import LocalBackupSink
from huluhulu_ai.services.generation_dispatcher import GenerationDispatcher
from huluhulu_ai.services.hot_topics import HotSearchSource, HotTopicAggregator, JsonFeedHotSearchSource
from huluhulu_ai.services.prompt_synthesizer import PromptSynthesizer
from huluhulu_ai.services.stream_normalizer import StreamNormalizer
from huluhulu_ai.services.style_pipeline import StyleRefreshPipeline
from huluhulu_ai.services.style_service import StyleCatalogService
from huluhulu_ai.services.task_poller import TaskPoller
from huluhulu_ai.services.theme_selector import ThemeSelector
from huluhulu_ai.storage.style_store import StyleBatchStore

LOG = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    config: Config
    cache: StyleCache
    store: StyleBatchStore
    supervisor: BackgroundTaskSupervisor
    pipelines: dict[str, StyleRefreshPipeline]
    catalog_service: StyleCatalogService
    dispatcher: GenerationDispatcher
    poller: TaskPoller
    engine: Optional[Engine] = None


def build_container(
        config: Config,
        llm_client: Optional[CompletionClient] = None,
        sources: Optional[list[HotSearchSource]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ServiceContainer:
    """
    按配置组装服务

    Args:
        config: 主配置
        llm_client: 替换默认的 LiteLLM 客户端
        sources: 替换配置中的热搜源
        transport: 生图上游/热搜/备份下载共用的 httpx transport
    """
    engine = create_db_engine(config.storage.database_url)
    store = StyleBatchStore(create_session_factory(engine))

    cache = StyleCache(ttl_seconds={name: c.ttl_seconds for name, c in config.catalogues.items()})
    supervisor = BackgroundTaskSupervisor()
    client = llm_client or LLMRouter(config.llm)

    if sources is None:
        sources = [JsonFeedHotSearchSource(s, transport=transport) for s in config.hot_search.sources]

    pipelines: dict[str, StyleRefreshPipeline] = {}
    synthesizers: dict[str, PromptSynthesizer] = {}
    for catalogue, catalogue_config in config.catalogues.items():
        synthesizer = PromptSynthesizer(client, catalogue, config.llm.synthesis_temperature)
        synthesizers[catalogue] = synthesizer
        pipelines[catalogue] = StyleRefreshPipeline(
            catalogue=catalogue,
            sources=sources,
            aggregator=HotTopicAggregator(catalogue_config.max_titles),
            selector=ThemeSelector(client, catalogue, config.llm.selection_temperature),
            synthesizer=synthesizer,
            cache=cache,
            store=store,
            supervisor=supervisor,
            min_items=catalogue_config.min_items,
            max_items=catalogue_config.max_items,
        )

    backup_sink = None
    if config.backup.enabled:
        backup_sink = LocalBackupSink(config.backup.directory, transport=transport, timeout=config.backup.timeout)

    dispatcher = GenerationDispatcher(
        config=config.image_gen,
        cache=cache,
        synthesizers=synthesizers,
        normalizer=StreamNormalizer(config.image_gen, supervisor, transport=transport),
        backup_sink=backup_sink,
    )

    LOG.info(f"服务组装完成, catalogues: {list(pipelines)}, hot sources: {len(sources)}")
    return ServiceContainer(
        config=config,
        cache=cache,
        store=store,
        supervisor=supervisor,
        pipelines=pipelines,
        catalog_service=StyleCatalogService(cache, store, pipelines),
        dispatcher=dispatcher,
        poller=TaskPoller(config.image_gen, transport=transport),
        engine=engine,
    )

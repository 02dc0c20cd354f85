#! /usr/bin/env python3
# -*- coding: utf-8 -*-
"""
业务服务模块
"""
from huluhulu_ai.services.backup import LocalBackupSink
from huluhulu_ai.services.generation_dispatcher import GenerationDispatcher
from huluhulu_ai.services.hot_topics import HotSearchSource, HotTopicAggregator, JsonFeedHotSearchSource
from huluhulu_ai.services.prompt_synthesizer import PromptSynthesizer
from huluhulu_ai.services.stream_normalizer import StreamNormalizer, extract_artifact
from huluhulu_ai.services.style_pipeline import PipelineState, StyleRefreshPipeline
from huluhulu_ai.services.style_service import StyleCatalogService
from huluhulu_ai.services.task_poller import ResumableTaskStore, TaskPoller, TaskResumer
from huluhulu_ai.services.theme_selector import ThemeSelector

__all__ = [
    'LocalBackupSink',
    'GenerationDispatcher',
    'HotSearchSource',
    'HotTopicAggregator',
    'JsonFeedHotSearchSource',
    'PromptSynthesizer',
    'StreamNormalizer',
    'extract_artifact',
    'PipelineState',
    'StyleRefreshPipeline',
    'StyleCatalogService',
    'ResumableTaskStore',
    'TaskPoller',
    'TaskResumer',
    'ThemeSelector',
]

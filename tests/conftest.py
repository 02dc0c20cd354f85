"""Shared pytest fixtures for huluhulu-ai tests."""

import json
import re
from pathlib import Path
from typing import Optional

import pytest

from huluhulu_ai.cache.style_cache import StyleCache
from huluhulu_ai.core.db_engine import create_db_engine, create_session_factory
from huluhulu_ai.core.supervisor import BackgroundTaskSupervisor
from huluhulu_ai.models.style import HotSearchItem
from huluhulu_ai.services.hot_topics import HotTopicAggregator
from huluhulu_ai.services.prompt_synthesizer import PromptSynthesizer
from huluhulu_ai.services.style_pipeline import StyleRefreshPipeline
from huluhulu_ai.services.theme_selector import ThemeSelector
from huluhulu_ai.storage.style_store import StyleBatchStore

_TITLE_PATTERN = re.compile(r"主题“(.+?)”")


class FakeCompletionClient:
    """
    Scripted completion client.

    json_mode calls answer the selection step; plain calls answer prompt
    synthesis with "<title> 提示词" unless the title is listed as failing.
    """

    def __init__(
            self,
            selection: Optional[str] = None,
            fail_titles: tuple[str, ...] = (),
            selection_error: Optional[Exception] = None,
    ):
        self.selection = selection if selection is not None else json.dumps({"items": []})
        self.fail_titles = set(fail_titles)
        self.selection_error = selection_error
        self.calls: list[dict] = []

    async def complete(self, system_prompt, user_prompt, temperature=None, json_mode=False):
        self.calls.append({"system": system_prompt, "user": user_prompt, "json_mode": json_mode})
        if json_mode:
            if self.selection_error is not None:
                raise self.selection_error
            return self.selection

        match = _TITLE_PATTERN.search(system_prompt)
        title = match.group(1) if match else "unknown"
        if title in self.fail_titles:
            raise RuntimeError(f"synthesis failed for {title}")
        return f"{title} 提示词"

    @property
    def synthesis_calls(self) -> int:
        return sum(1 for call in self.calls if not call["json_mode"])


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StaticHotSearchSource:
    def __init__(self, name: str, titles: list[str], error: Optional[Exception] = None):
        self.name = name
        self.titles = titles
        self.error = error
        self.fetch_count = 0

    async def fetch(self):
        self.fetch_count += 1
        if self.error is not None:
            raise self.error
        return (HotSearchItem(rank=i + 1, title=t) for i, t in enumerate(self.titles))


def selection_json(*titles: str) -> str:
    return json.dumps({"items": [{"title": t, "source": [f"{t}热搜"]} for t in titles]}, ensure_ascii=False)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock) -> StyleCache:
    return StyleCache(ttl_seconds={"photography": 1800, "compliment": 7200}, clock=clock)


@pytest.fixture
def store(tmp_path: Path) -> StyleBatchStore:
    engine = create_db_engine(f"sqlite:///{tmp_path / 'styles.db'}")
    yield StyleBatchStore(create_session_factory(engine))
    engine.dispose()


@pytest.fixture
def supervisor() -> BackgroundTaskSupervisor:
    return BackgroundTaskSupervisor()


@pytest.fixture
def make_pipeline(cache, store, supervisor):
    """Build a photography pipeline around a fake LLM and static sources."""

    def _make(client: FakeCompletionClient, sources=None, catalogue: str = "photography") -> StyleRefreshPipeline:
        if sources is None:
            sources = [StaticHotSearchSource("douyin", ["复古港风穿搭", "赛博朋克夜景"])]
        return StyleRefreshPipeline(
            catalogue=catalogue,
            sources=sources,
            aggregator=HotTopicAggregator(),
            selector=ThemeSelector(client, catalogue),
            synthesizer=PromptSynthesizer(client, catalogue),
            cache=cache,
            store=store,
            supervisor=supervisor,
        )

    return _make

#! /usr/bin/env python3
# -*- coding: utf-8 -*-
"""
风格目录缓存
进程内存 + TTL，按目录（photography/compliment）分别缓存

生命周期与进程一致，多实例部署时各实例缓存互不同步，
仅在缓存未命中时通过共享的持久化存储对齐。
单事件循环内使用，不加锁。
"""
import logging
import re
import time
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

from huluhulu_ai.models.style import Style

LOG = logging.getLogger(__name__)

T = TypeVar("T")

# 默认 TTL（未单独配置的目录）
DEFAULT_TTL_SECONDS = 2 * 60 * 60

# 热门标记前缀，如 "🔥 国风"
DEFAULT_DECORATIVE_PREFIX = r"🔥"

# 单条写入新建的条目，get 永远视为过期
EXPIRED_TIMESTAMP = float("-inf")

# 编辑预设，永不过期，优先于缓存
DEFAULT_STYLES: dict[str, str] = {
    "清除路人": "专业后期修图，智能移除画面背景中的路人、杂物和干扰元素，智能填充背景，保持画面自然完整，构图干净整洁。",
    "更换场景": "保持人物主体光影和透视关系不变，将背景环境智能替换为：",
    "一键美化": "大师级人像精修，自然磨皮美白，亮眼提神，五官立体化，肤色均匀通透，调整光影质感，增强画面清晰度，杂志封面级修图。",
    "动漫风格": "二次元动漫风格，日本动画电影质感，新海诚画风，唯美光影，细腻笔触，梦幻色彩，2D插画效果。",
    "更换天气": "调整环境天气效果，模拟自然真实的气象氛围，将天气更改为：",
}


@dataclass
class CacheEntry(Generic[T]):
    """缓存条目，整体替换"""
    data: T
    timestamp: float


class StyleCache:
    """
    风格目录缓存

    - get: 仅返回未过期数据
    - set: 整体替换并重置时间戳
    - upsert_one: 按标题（模糊匹配）替换或追加单个风格，不改变时间戳
    - get_prompt_for: 先查默认预设，再查缓存（忽略 TTL）
    """

    def __init__(
            self,
            ttl_seconds: Optional[dict[str, float]] = None,
            default_ttl_seconds: float = DEFAULT_TTL_SECONDS,
            default_styles: Optional[dict[str, str]] = None,
            decorative_prefix: str = DEFAULT_DECORATIVE_PREFIX,
            clock: Callable[[], float] = time.time,
    ):
        self._entries: dict[str, CacheEntry[list[Style]]] = {}
        self._ttl_seconds = dict(ttl_seconds or {})
        self._default_ttl = default_ttl_seconds
        self._default_styles = DEFAULT_STYLES if default_styles is None else default_styles
        self._prefix_pattern = re.compile(rf"^(?:{decorative_prefix})\s*") if decorative_prefix else None
        self._clock = clock

    def ttl_for(self, key: str) -> float:
        return self._ttl_seconds.get(key, self._default_ttl)

    def normalize_title(self, title: str) -> str:
        """去掉装饰前缀与首尾空白，所有标题比较都经过这里"""
        title = title.strip()
        if self._prefix_pattern is not None:
            title = self._prefix_pattern.sub("", title)
        return title.strip()

    def get(self, key: str) -> Optional[list[Style]]:
        """获取未过期的风格列表"""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.timestamp < self.ttl_for(key):
            return self._copy(entry.data)
        return None

    def get_stale(self, key: str) -> Optional[list[Style]]:
        """获取风格列表（忽略 TTL），用于失败时的兜底"""
        entry = self._entries.get(key)
        return self._copy(entry.data) if entry is not None else None

    def set(self, key: str, styles: list[Style]) -> None:
        """整体替换"""
        LOG.info(f"设置风格缓存: {key}, count: {len(styles)}")
        self._entries[key] = CacheEntry(data=self._copy(styles), timestamp=self._clock())

    def upsert_one(self, key: str, style: Style) -> None:
        """
        按标题替换单个风格，未命中则追加

        目录不存在时新建的条目视为已过期：只供 get_prompt_for / get_stale 使用，
        get 仍然未命中，读路径会继续去持久化存储取完整目录
        """
        entry = self._entries.get(key)
        if entry is None:
            LOG.info(f"风格缓存不存在, 新建(已过期): {key}, title: {style.title}")
            self._entries[key] = CacheEntry(data=[style.model_copy(deep=True)], timestamp=EXPIRED_TIMESTAMP)
            return

        index = self._find_index(entry.data, style.title)
        if index is None:
            LOG.info(f"追加风格: {key}, title: {style.title}")
            entry.data.append(style.model_copy(deep=True))
            return

        existing = entry.data[index]
        entry.data[index] = Style(
            title=existing.title,
            prompt=style.prompt,
            source=list(style.source or existing.source),
        )
        LOG.info(f"更新风格: {key}, title: {existing.title}")

    def get_prompt_for(self, key: str, title: str) -> Optional[str]:
        """获取风格提示词，空提示词（仍在生成中）视为没有"""
        if title in self._default_styles:
            return self._default_styles[title]
        normalized = self.normalize_title(title)
        if normalized in self._default_styles:
            return self._default_styles[normalized]

        entry = self._entries.get(key)
        if entry is None:
            return None
        index = self._find_index(entry.data, title)
        if index is None:
            return None
        return entry.data[index].prompt or None

    def _find_index(self, styles: list[Style], title: str) -> Optional[int]:
        target = self.normalize_title(title)
        for i, style in enumerate(styles):
            if self.normalize_title(style.title) == target:
                return i
        return None

    @staticmethod
    def _copy(styles: list[Style]) -> list[Style]:
        return [style.model_copy(deep=True) for style in styles]

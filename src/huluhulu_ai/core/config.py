#! /usr/bin/env python3
# -*- coding: utf-8 -*-
"""
配置管理模块
使用 Pydantic Settings 进行类型安全的配置管理
"""
import logging
import os
from typing import Optional

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.yaml"


class HTTPConfig(BaseSettings):
    """HTTP 服务配置"""
    host: str = "0.0.0.0"
    port: int = 8088


class LLMConfig(BaseSettings):
    """LLM 配置（风格筛选、提示词生成）"""
    model_config = SettingsConfigDict(extra="ignore")

    model: str = "deepseek/deepseek-chat"
    api_key: str = ""
    api_base: Optional[str] = None
    timeout: float = 60.0

    # 筛选主题时的温度
    selection_temperature: float = 1.0
    # 生成提示词时的温度
    synthesis_temperature: float = 1.1


class ImageGenConfig(BaseSettings):
    """生图上游配置"""
    model_config = SettingsConfigDict(extra="ignore")

    base_url: str = "https://api.grsai.com"
    api_key: str = ""
    model: str = "nano-banana-pro"
    draw_endpoint: str = "/v1/draw/nano-banana"
    result_endpoint: str = "/v1/draw/result"
    aspect_ratio: str = "auto"
    image_size: str = "2K"
    timeout: float = 300.0


class CatalogueConfig(BaseSettings):
    """单个风格目录配置"""
    model_config = SettingsConfigDict(extra="ignore")

    ttl_seconds: int = 30 * 60
    # 送给 LLM 分析的热搜条数上限
    max_titles: int = 50
    min_items: int = 6
    max_items: int = 10
    # 定时刷新时间（北京时间）
    refresh_times: list[str] = []


def _default_catalogues() -> dict[str, CatalogueConfig]:
    return {
        "photography": CatalogueConfig(ttl_seconds=30 * 60, refresh_times=["08:00", "20:00"]),
        "compliment": CatalogueConfig(ttl_seconds=2 * 60 * 60, min_items=5, max_items=10),
    }


class HotSearchSourceConfig(BaseSettings):
    """热搜源配置（JSON feed）"""
    model_config = SettingsConfigDict(extra="ignore")

    name: str
    url: str
    # 列表所在路径，如 data.word_list
    list_path: str = "data"
    title_field: str = "title"
    headers: dict[str, str] = {}
    ttl_seconds: int = 2 * 60 * 60
    timeout: float = 10.0


class HotSearchConfig(BaseSettings):
    """热搜聚合配置"""
    sources: list[HotSearchSourceConfig] = []


class StorageConfig(BaseSettings):
    """持久化配置"""
    database_url: str = "sqlite:///huluhulu.db"


class BackupConfig(BaseSettings):
    """生成结果备份配置"""
    enabled: bool = True
    directory: str = "backup"
    timeout: float = 60.0


class SchedulerConfig(BaseSettings):
    """定时任务配置"""
    enabled: bool = False
    timezone: str = "Asia/Shanghai"


class LogConfig(BaseSettings):
    """日志配置"""
    service_name: str = "huluhulu-ai"
    json_format: bool = True
    level: str = "INFO"


class Config(BaseSettings):
    """
    主配置类
    支持从 config.yaml 和环境变量加载
    """
    model_config = SettingsConfigDict(
        extra="ignore",
        env_prefix="HULUHULU_",
        env_nested_delimiter="__",
    )

    http: HTTPConfig = HTTPConfig()
    llm: LLMConfig = LLMConfig()
    image_gen: ImageGenConfig = ImageGenConfig()
    catalogues: dict[str, CatalogueConfig] = _default_catalogues()
    hot_search: HotSearchConfig = HotSearchConfig()
    storage: StorageConfig = StorageConfig()
    backup: BackupConfig = BackupConfig()
    scheduler: SchedulerConfig = SchedulerConfig()
    log: LogConfig = LogConfig()

    @classmethod
    def from_yaml(cls, path: str = DEFAULT_CONFIG_PATH) -> "Config":
        """从 YAML 文件加载配置，文件不存在时使用默认值"""
        if not os.path.exists(path):
            LOG.warning(f"配置文件 {path} 不存在，使用默认配置")
            return cls()

        LOG.info(f"从 {path} 加载配置...")
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)


# 全局配置实例
_config: Optional[Config] = None


def get_config() -> Config:
    """获取配置单例"""
    global _config
    if _config is None:
        _config = Config.from_yaml(os.environ.get("HULUHULU_CONFIG", DEFAULT_CONFIG_PATH))
    return _config


def reload_config() -> Config:
    """重新加载配置"""
    global _config
    _config = Config.from_yaml(os.environ.get("HULUHULU_CONFIG", DEFAULT_CONFIG_PATH))
    return _config

#! /usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Huluhulu AI 主入口
"""
import logging

import uvicorn

from huluhulu_ai import __version__
from huluhulu_ai.core.config import get_config
from huluhulu_ai.core.logging_config import LoggingConfig

LOG = logging.getLogger(__name__)


def main():
    """主入口"""
    config = get_config()
    LoggingConfig.setup(config.log.service_name, log_level=config.log.level, json_format=config.log.json_format)

    LOG.info("=" * 50)
    LOG.info("Huluhulu AI 服务启动中...")
    LOG.info(f"版本: {__version__}")
    LOG.info(f"LLM 模型: {config.llm.model}, 生图模型: {config.image_gen.model}")
    LOG.info(f"风格目录: {list(config.catalogues)}")
    LOG.info("=" * 50)

    # 启动 FastAPI 服务
    uvicorn.run(
        "huluhulu_ai.api.app:create_app",
        factory=True,
        host=config.http.host,
        port=config.http.port,
        reload=False,
        log_level="info",
        access_log=False  # 使用自定义日志中间件
    )


if __name__ == "__main__":
    main()

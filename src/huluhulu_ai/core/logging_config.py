# -*- coding: utf-8 -*-
"""
Logging Config - 日志配置模块

只输出到 stdout，JSON 格式便于容器日志采集。
uvicorn 的日志统一交给根日志处理，第三方库默认只输出 WARNING 以上。
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

# 这些库的 INFO 日志过于频繁
NOISY_LOGGERS = ("httpx", "httpcore", "LiteLLM", "litellm", "schedule")
# 交给根日志输出的 uvicorn 日志
UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

# LogRecord 自带的属性，其余的视为 extra 传入的业务字段
_RESERVED_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime", "taskName"}


class JsonFormatter(logging.Formatter):
    """一行一个 JSON 对象，extra 传入的字段（如 catalogue）放在 extra 里"""

    def __init__(self, service_name: str = "unknown"):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
        }

        if record.levelno >= logging.WARNING:
            log_data["location"] = f"{record.filename}:{record.lineno} {record.funcName}"

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra = {k: v for k, v in vars(record).items() if k not in _RESERVED_ATTRS}
        if extra:
            log_data["extra"] = extra

        return json.dumps(log_data, ensure_ascii=False, default=str)


class LoggingConfig:
    """
    日志配置类

    Usage:
        LoggingConfig.setup("huluhulu-ai")
        LoggingConfig.setup("huluhulu-ai", log_level="DEBUG", json_format=False)
    """

    _initialized: bool = False

    SIMPLE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

    @classmethod
    def setup(
        cls,
        service_name: str,
        log_level: int | str = logging.INFO,
        json_format: bool = True,
    ) -> None:
        """
        设置日志配置，重复调用无效

        Args:
            service_name: 服务名称，写入每条 JSON 日志
            log_level: 日志级别，支持 "INFO" 这类字符串
            json_format: False 时使用可读的文本格式（本地开发）
        """
        if cls._initialized:
            return

        if isinstance(log_level, str):
            log_level = logging.getLevelName(log_level.upper())

        if json_format:
            formatter: logging.Formatter = JsonFormatter(service_name)
        else:
            formatter = logging.Formatter(cls.SIMPLE_FORMAT, cls.DATE_FORMAT)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)

        root_logger = logging.getLogger()
        root_logger.setLevel(log_level)
        root_logger.handlers.clear()
        root_logger.addHandler(console_handler)

        for name in UVICORN_LOGGERS:
            uvicorn_logger = logging.getLogger(name)
            uvicorn_logger.handlers.clear()
            uvicorn_logger.propagate = True

        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(max(logging.WARNING, root_logger.level))

        cls._initialized = True
        logging.getLogger("LoggingConfig").info(
            f"日志配置完成: service={service_name}, level={logging.getLevelName(log_level)}, json={json_format}"
        )

    @classmethod
    def reset(cls) -> None:
        """重置日志配置（主要用于测试）"""
        cls._initialized = False

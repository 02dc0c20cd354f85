# -*- coding: utf-8 -*-
"""
Exceptions - 业务异常定义

code 同时作为 HTTP 状态码返回给客户端。
"""

from typing import Any


class BusinessException(Exception):
    """业务异常"""

    def __init__(self, code: int, message: str, data: Any = None):
        self.code = code
        self.message = message
        self.data = data
        super().__init__(message)


class ValidationException(BusinessException):
    """参数异常"""

    def __init__(self, message: str = "诶嘿~参数好像有点问题呢，再检查一下吧~"):
        super().__init__(code=400, message=message)


class ConfigurationException(BusinessException):
    """配置缺失（如上游 API Key 未配置），不重试"""

    def __init__(self, message: str):
        super().__init__(code=500, message=message)


class UpstreamException(BusinessException):
    """上游返回非 2xx 或无法解析的响应，不自动重试"""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(code=502, message=message)

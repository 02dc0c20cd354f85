#! /usr/bin/env python3
# -*- coding: utf-8 -*-
"""
响应模型定义
"""
from typing import Any, Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field


class APIResponse(BaseModel):
    """统一 API 响应格式"""
    code: int = Field(default=0, description="状态码，0 表示成功")
    message: str = Field(default="success", description="消息")
    data: Optional[Any] = Field(default=None, description="响应数据")

    @classmethod
    def success(cls, data: Any = None, message: str = "success") -> "APIResponse":
        """成功响应"""
        return cls(code=0, message=message, data=data)

    @classmethod
    def error(cls, code: int, message: str) -> "APIResponse":
        """错误响应"""
        return cls(code=code, message=message, data=None)


def error_response(code: int, message: str) -> JSONResponse:
    """错误信封，HTTP 状态码与 code 一致"""
    return JSONResponse(
        status_code=code,
        content=APIResponse.error(code, message).model_dump(),
    )


class StyleItem(BaseModel):
    """风格目录响应条目"""
    title: str
    source: Optional[list[str]] = None
    prompt: Optional[str] = None

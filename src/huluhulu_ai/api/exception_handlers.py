# -*- coding: utf-8 -*-
"""
Exception Handlers - 全局异常处理

所有错误都渲染成 {code, message, data} 信封，HTTP 状态码与 code 一致：
业务异常用自身 code，请求体校验失败 400，其它未捕获异常 500。
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from huluhulu_ai.core.exceptions import BusinessException, ValidationException
from huluhulu_ai.models.response import APIResponse, error_response

LOG = logging.getLogger("ExceptionHandler")

FALLBACK_ERROR_MESSAGE = "生成失败，请稍后再试"


async def on_business_error(request: Request, exc: BusinessException) -> JSONResponse:
    LOG.warning(f"业务异常: [{exc.code}] {exc.message}, path: {request.url.path}")
    envelope = APIResponse(code=exc.code, message=exc.message, data=exc.data)
    return JSONResponse(status_code=exc.code, content=envelope.model_dump())


async def on_invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    LOG.warning(f"参数校验失败: {exc.errors()}, path: {request.url.path}")
    return error_response(400, ValidationException().message)


async def on_unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    LOG.exception(f"未捕获异常: {exc}, path: {request.url.path}", exc_info=exc)
    return error_response(500, str(exc) or FALLBACK_ERROR_MESSAGE)


def setup_exception_handlers(app: FastAPI):
    """注册全局异常处理器"""
    app.add_exception_handler(BusinessException, on_business_error)
    app.add_exception_handler(RequestValidationError, on_invalid_request)
    app.add_exception_handler(Exception, on_unhandled_error)

#! /usr/bin/env python3
# -*- coding: utf-8 -*-
"""
请求模型定义
"""
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class StyleGenerationRequest(BaseModel):
    """风格修图请求（photography-cat / compliment-cat）"""
    model_config = ConfigDict(populate_by_name=True)

    image: Optional[str] = Field(default=None, description="base64 编码的原图")
    ref_image: Optional[str] = Field(
        default=None,
        alias="refImage",
        description="base64 编码的参考图（更换背景时为背景图）",
    )
    background_image: Optional[str] = Field(default=None, alias="backgroundImage", description="兼容旧字段")
    style: Optional[str] = Field(default=None, description="风格/预设名称")
    prompt: Optional[str] = Field(default=None, description="用户补充说明")
    mime_type: Optional[str] = Field(default=None, alias="mimeType")
    output_size: Optional[Literal["1K", "2K"]] = Field(default=None, alias="outputSize")
    stream: bool = Field(default=False, description="是否以 SSE 返回")

    @property
    def reference_image(self) -> Optional[str]:
        return self.ref_image or self.background_image


class MemeGenerationRequest(BaseModel):
    """表情包生成请求"""
    model_config = ConfigDict(populate_by_name=True)

    image: Optional[str] = Field(default=None, description="base64 编码的主体图")
    ref_image: Optional[str] = Field(default=None, alias="refImage", description="表情迁移的参考图")
    style: Optional[str] = Field(default=None, description="cartoon / 其他为写实")
    type: int = Field(default=1, description="1: 九宫格 2: 表情迁移 3: GIF")
    gif_prompt: Optional[str] = Field(default=None, alias="gifPrompt")
    description: Optional[str] = Field(default=None, description="用户补充描述")

#! /usr/bin/env python3
# -*- coding: utf-8 -*-
"""
风格目录相关模型
"""
from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, Field


class HotSearchItem(BaseModel):
    """热搜条目"""
    rank: Optional[Union[int, str]] = None
    title: str
    link: Optional[str] = None
    hot: Optional[str] = None
    icon_type: Optional[str] = Field(default=None, alias="iconType")

    model_config = {"populate_by_name": True}


class StyleCandidate(BaseModel):
    """LLM 筛选出的风格主题"""
    title: str
    source: list[str] = Field(default_factory=list, description="来源热搜词")


class Style(BaseModel):
    """风格预设，prompt 为空表示提示词仍在后台生成"""
    title: str
    prompt: str = ""
    source: list[str] = Field(default_factory=list)


class StyleBatch(BaseModel):
    """一次完整刷新产生的风格批次，最新批次即当前目录"""
    batch_id: str
    catalogue: str
    items: list[Style] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)

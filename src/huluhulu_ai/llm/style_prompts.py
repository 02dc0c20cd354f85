#! /usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Style Prompt - 风格目录提示词系统

使用方法：
1. get_selection_prompt(catalogue, min, max) 获取筛选主题的系统 prompt
2. 用 LLM 从热搜标题中归纳出风格主题（JSON）
3. get_synthesis_prompt(catalogue, title, source) 为单个主题生成修图提示词
"""

import json
from typing import Optional

PHOTOGRAPHY = "photography"
COMPLIMENT = "compliment"

# ==================== 主题筛选 ====================
SELECTION_PROMPTS = {
    PHOTOGRAPHY: """你是一个专业的视觉风格分析师。
任务：分析提供的热搜标题，提炼出适合作为“AI写真/修图/换装”的风格主题。
要求：
1. 不要直接返回热搜原标题，而是归纳总结成简短的主题名称（如：“清冷感财阀千金”、“赛博朋克风”、“法式复古胶片”等）。
2. 只选择与妆容、穿搭、氛围、摄影、二次元相关的内容。
3. 严格返回 JSON 对象：{{"items": [{{"title": "主题名称", "source": ["来源热搜词1", "来源热搜词2"]}}]}}
4. 返回 {min_items}-{max_items} 个最热门且适合的主题。
""",
    COMPLIMENT: """你是一个专业的视觉风格分析师。
任务：从提供的热搜标题中，筛选出适合作为“照片风格化/滤镜/AI写真/换装”主题的标题（例如涉及妆容、穿搭、氛围感、摄影风格、二次元、特定的电影感等）。
输出要求：
1. 严格返回 JSON 对象：{{"titles": ["标题1", "标题2", ...]}}
2. 只返回最适合的前 {min_items}-{max_items} 个。
""",
}

# ==================== 提示词生成 ====================
SYNTHESIS_PROMPTS = {
    PHOTOGRAPHY: """你是一个专业的 AI 绘画提示词专家。
任务：为主题“{title}”生成一个详细的修图提示词（Prompt），适配 Nano Banana Pro 模型风格。{source_hint}
提示词结构要求：
1. 核心主题：用简洁的语言描述画面核心内容与人物造型。
2. 风格修饰：包含 (Masterpiece, Best Quality, Photorealistic, 8K), Cinematic Lighting 等高质量关键词。
3. 细节描述：具体描述光影、色调、材质、氛围、服装（如需变化）、动作等。
4. 输出要求：只输出最终的提示词内容，不要包含任何解释或其他文字。""",
    COMPLIMENT: """你是一个专业的 AI 绘画提示词专家。
任务：为主题“{title}”生成一个详细的照片风格化提示词（Prompt），适配 Nano Banana Pro 模型风格。{source_hint}
提示词结构要求：
1. 核心主题：用简洁的英文描述画面核心内容。
2. 风格修饰：包含 (Masterpiece, Best Quality, Photorealistic, 8K), Cinematic Lighting 等高质量关键词。
3. 细节描述：具体描述光影、色调、材质、氛围、服装（如需变化）、动作等。
4. 输出要求：只输出最终的提示词内容，不要包含任何解释或其他文字。""",
}

SYNTHESIS_USER_PROMPT = "请生成提示词"


def get_selection_prompt(catalogue: str, min_items: int, max_items: int) -> str:
    """筛选主题的系统 prompt，未知目录使用 photography 模板"""
    template = SELECTION_PROMPTS.get(catalogue, SELECTION_PROMPTS[PHOTOGRAPHY])
    return template.format(min_items=min_items, max_items=max_items)


def get_selection_user_prompt(titles: list[str]) -> str:
    return f"热搜列表：\n{json.dumps(titles, ensure_ascii=False)}"


def get_synthesis_prompt(catalogue: str, title: str, source: Optional[list[str]] = None) -> str:
    """单个主题提示词生成的系统 prompt"""
    template = SYNTHESIS_PROMPTS.get(catalogue, SYNTHESIS_PROMPTS[PHOTOGRAPHY])
    source_hint = f"\n参考热搜：{'、'.join(source)}" if source else ""
    return template.format(title=title, source_hint=source_hint)

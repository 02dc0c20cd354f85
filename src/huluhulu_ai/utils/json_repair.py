# -*- coding: utf-8 -*-
"""
JSON 修复工具

LLM 经常返回带代码块、前后缀说明或尾逗号的 JSON，按固定顺序逐级修复：
1. 去掉 markdown 代码块标记
2. 直接解析
3. 截取最外层的 {...} 或 [...] 再解析
4. 去掉 } / ] 前的尾逗号再解析
全部失败返回 None，不向上抛异常。后面的步骤依赖前面步骤已经执行过。
"""

import json
import logging
import re
from typing import Any, Optional

LOG = logging.getLogger(__name__)

_FENCE_HEAD = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_TAIL = re.compile(r"\s*```$")
_TRAILING_COMMA = re.compile(r",\s*([\]}])")


def strip_code_fence(text: str) -> str:
    """去掉 ```json ... ``` 包裹"""
    content = _FENCE_HEAD.sub("", text.strip())
    return _FENCE_TAIL.sub("", content).strip()


def extract_outermost(text: str) -> Optional[str]:
    """截取最外层的对象或数组（以先出现的括号类型为准）"""
    first_brace = text.find("{")
    first_bracket = text.find("[")

    if first_brace != -1 and (first_bracket == -1 or first_brace < first_bracket):
        start, end = first_brace, text.rfind("}")
    elif first_bracket != -1:
        start, end = first_bracket, text.rfind("]")
    else:
        return None

    if end < start:
        return None
    return text[start:end + 1]


def safe_parse_json(text: Optional[str]) -> Optional[Any]:
    """尽力解析 LLM 返回的 JSON，失败返回 None"""
    if not text:
        return None

    content = strip_code_fence(text)

    try:
        return json.loads(content)
    except json.JSONDecodeError:
        pass

    extracted = extract_outermost(content)
    if extracted is not None:
        content = extracted
        try:
            return json.loads(content)
        except json.JSONDecodeError:
            pass

    try:
        return json.loads(_TRAILING_COMMA.sub(r"\1", content))
    except json.JSONDecodeError as e:
        LOG.warning(f"JSON 修复失败: {e}, content: {content[:200]}")
        return None

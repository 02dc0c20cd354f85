#! /usr/bin/env python3
# -*- coding: utf-8 -*-
"""
生图请求派发

根据风格名和用户补充说明组装上游请求：
默认预设 > 缓存提示词 > 现场生成（回写缓存）> 兜底文案，
所有提示词前都加上保持人物身份的固定说明。
"""
import logging
from typing import Optional

from fastapi.responses import Response

from huluhulu_ai.cache.style_cache import StyleCache
from huluhulu_ai.core.config import ImageGenConfig
from huluhulu_ai.core.exceptions import ValidationException
from huluhulu_ai.models.request import MemeGenerationRequest, StyleGenerationRequest
from huluhulu_ai.models.style import Style
from huluhulu_ai.models.task import GenerationRequest
from huluhulu_ai.services.prompt_synthesizer import PromptSynthesizer
from huluhulu_ai.services.stream_normalizer import StreamDataCallback, StreamNormalizer

LOG = logging.getLogger(__name__)

IDENTITY_PREFIX = "【重要提示：保持人物面部特征、五官身份完全不变】"

CHANGE_BACKGROUND = "更换背景"
CHANGE_BACKGROUND_PROMPT = (
    "请将第一张图片中的人物主体，融合到第二张图片作为背景中。"
    "保持人物的光影、透视与新背景自然融合。不要改变人物的相貌特征。"
)

# 表情包
MEME_GRID = 1
MEME_TRANSFER = 2
MEME_GIF = 3

MEME_FAST_MODEL = "nano-banana-fast"
MEME_ASPECT_RATIO = "1:1"
MEME_IMAGE_SIZE = "2K"
DEFAULT_GIF_ACTION = "吐一下舌头"

MEME_GRID_CARTOON_PROMPT = (
    "以这张图片的主体为主角，制作九宫格的表情包。纯白色背景。卡通风格。"
    "需包含6-9个生动夸张的表情和动作（如：震惊、大笑、委屈、疑惑、暗中观察等）。"
    "画面精致，可爱搞怪，极具表现力。不要在图片中包含任何文字{description}"
)
MEME_GRID_REALISTIC_PROMPT = "以这张照片中的动物为主角，制作九宫格的表情包。不要在图片中包含任何文字{description}"
MEME_TRANSFER_PROMPT = (
    "Keep the character/subject from the first image exactly as is, but make them perform "
    "the facial expression and pose shown in the second image. High quality, expressive, "
    "meme style. No text in image."
)
MEME_GIF_PROMPT = (
    "为我生成图中角色的GIF表情包每一帧的图片。 使用 4行x4列 布局共生成16个小图片。"
    "16个小图片为“{action}”动作的连贯的拆分动作，使用这16张可以组成一个完整的、循环动画，"
    "动作流畅逼真，最后一帧应流畅地循环回到第一帧。16个小图片的边缘不要增加间距，"
    "每张图片都不要超出自己的区域。 不要画分割线。"
)


class GenerationDispatcher:
    """生图派发器"""

    def __init__(
            self,
            config: ImageGenConfig,
            cache: StyleCache,
            synthesizers: dict[str, PromptSynthesizer],
            normalizer: StreamNormalizer,
            backup_sink: Optional[StreamDataCallback] = None,
    ):
        self.config = config
        self.cache = cache
        self.synthesizers = synthesizers
        self.normalizer = normalizer
        self.backup_sink = backup_sink

    async def resolve_prompt(self, catalogue: str, style: str, user_prompt: Optional[str] = None) -> str:
        """
        解析风格对应的提示词并拼接用户说明

        Args:
            catalogue: 风格目录
            style: 风格/预设名称
            user_prompt: 用户补充说明

        Returns:
            不含身份前缀的最终提示词
        """
        extra = user_prompt or ""
        resolved = self.cache.get_prompt_for(catalogue, style)

        if not resolved:
            synthesizer = self.synthesizers.get(catalogue)
            if synthesizer is not None:
                LOG.info(f"[{catalogue}] 风格 {style} 没有缓存提示词, 现场生成")
                resolved = await synthesizer.synthesize(style)
                if resolved:
                    self.cache.upsert_one(catalogue, Style(title=style, prompt=resolved))

        if resolved:
            return f"{resolved}，{extra}"
        return f"请以“{style}”为主题，对这张照片进行处理。{extra}"

    async def build_style_request(self, catalogue: str, request: StyleGenerationRequest) -> GenerationRequest:
        if not request.image or not (request.prompt or request.style):
            raise ValidationException("No image or prompt provided")

        images = [request.image]
        if request.style == CHANGE_BACKGROUND and request.reference_image:
            images.append(request.reference_image)
            prompt = CHANGE_BACKGROUND_PROMPT
            if request.prompt:
                prompt += f" 额外要求：{request.prompt}"
        elif request.style:
            prompt = await self.resolve_prompt(catalogue, request.style, request.prompt)
        else:
            prompt = request.prompt

        return GenerationRequest(
            model=self.config.model,
            prompt=f"{IDENTITY_PREFIX}\n{prompt}",
            image_urls=tuple(images),
            aspect_ratio=self.config.aspect_ratio,
            image_size=request.output_size or self.config.image_size,
            wants_stream=request.stream,
        )

    def build_meme_request(self, request: MemeGenerationRequest) -> GenerationRequest:
        if not request.image:
            raise ValidationException("请上传图片")

        images = [request.image]
        if request.type == MEME_GRID:
            model = MEME_FAST_MODEL
            description = request.description.strip() if request.description else ""
            description = f"。用户希望：{description}" if description else ""
            template = MEME_GRID_CARTOON_PROMPT if request.style == "cartoon" else MEME_GRID_REALISTIC_PROMPT
            prompt = template.format(description=description)
        elif request.type == MEME_TRANSFER:
            if not request.ref_image:
                raise ValidationException("Type 2 生成需要提供参考图 (refImage)")
            model = self.config.model
            prompt = MEME_TRANSFER_PROMPT
            images.append(request.ref_image)
        elif request.type == MEME_GIF:
            model = self.config.model
            prompt = MEME_GIF_PROMPT.format(action=request.gif_prompt or DEFAULT_GIF_ACTION)
        else:
            raise ValidationException("不支持的 type 类型")

        return GenerationRequest(
            model=model,
            prompt=prompt,
            image_urls=tuple(images),
            aspect_ratio=MEME_ASPECT_RATIO,
            image_size=MEME_IMAGE_SIZE,
            wants_stream=True,
        )

    async def dispatch_style(self, catalogue: str, request: StyleGenerationRequest) -> Response:
        generation_request = await self.build_style_request(catalogue, request)
        LOG.info(f"[{catalogue}] 派发生图请求, style: {request.style}, stream: {request.stream}")
        return await self.normalizer.forward(generation_request)

    async def dispatch_meme(self, request: MemeGenerationRequest) -> Response:
        generation_request = self.build_meme_request(request)
        LOG.info(f"派发表情包请求, type: {request.type}, model: {generation_request.model}")
        return await self.normalizer.forward(generation_request, on_stream_data=self.backup_sink)

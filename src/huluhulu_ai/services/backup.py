# -*- coding: utf-8 -*-
"""
生成结果备份

从上游帧中取第一张结果图下载到本地目录，文件名 meme/{id}.png
"""

import asyncio
import logging
import os
import uuid
from typing import Any, Optional

import httpx

LOG = logging.getLogger("Backup")


class LocalBackupSink:
    """本地目录备份，作为 StreamNormalizer 的回调使用"""

    def __init__(
            self,
            directory: str,
            transport: Optional[httpx.AsyncBaseTransport] = None,
            timeout: float = 60.0,
    ):
        self.directory = directory
        self._transport = transport
        self.timeout = timeout

    def path_for(self, task_id: str) -> str:
        """文件名只取 id 的最后一段，上游给的 id 不能跳出备份目录"""
        name = os.path.basename(task_id.replace("\\", "/"))
        if name in ("", ".", ".."):
            name = uuid.uuid4().hex
        return os.path.join(self.directory, "meme", f"{name}.png")

    async def __call__(self, data: Any) -> None:
        if not isinstance(data, dict):
            return
        results = data.get("results") or []
        if not results or not isinstance(results[0], dict) or not results[0].get("url"):
            return

        image_url = results[0]["url"]
        path = self.path_for(str(data.get("id") or uuid.uuid4()))
        if os.path.exists(path):
            return

        async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
            response = await client.get(image_url)
        if not response.is_success:
            LOG.warning(f"[Backup] 下载结果图失败: {response.status_code}, url: {image_url}")
            return

        await asyncio.to_thread(self._write_atomic, path, response.content)
        LOG.info(f"[Backup] 已保存: {path}")

    @staticmethod
    def _write_atomic(path: str, content: bytes) -> None:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        temp_path = path + ".tmp"
        with open(temp_path, "wb") as f:
            f.write(content)
        os.replace(temp_path, path)

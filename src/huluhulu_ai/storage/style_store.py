# -*- coding: utf-8 -*-
"""
风格批次仓储层

负责风格批次的持久化，最新写入的批次即当前目录。
同步 SQLAlchemy 实现，异步调用方通过 asyncio.to_thread 使用。
"""

import asyncio
import json
import logging
import threading
import time
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from huluhulu_ai.models.style import Style, StyleBatch
from huluhulu_ai.models.style_batch import StyleBatchRow

LOG = logging.getLogger("StyleBatchStore")

# 重试配置
MAX_RETRIES = 3
RETRY_DELAY = 0.5  # 秒

_batch_id_lock = threading.Lock()
_last_batch_id = 0


def new_batch_id() -> str:
    """以毫秒时间戳作为批次 ID，进程内严格递增"""
    global _last_batch_id
    with _batch_id_lock:
        candidate = int(time.time() * 1000)
        if candidate <= _last_batch_id:
            candidate = _last_batch_id + 1
        _last_batch_id = candidate
        return str(candidate)


class StyleBatchStore:
    """风格批次仓储类"""

    def __init__(self, session_factory: sessionmaker):
        """
        初始化仓储

        Args:
            session_factory: SQLAlchemy sessionmaker
        """
        self.session_factory = session_factory

    def save_batch(self, batch: StyleBatch) -> bool:
        """
        保存一个批次（带重试机制）

        Args:
            batch: 风格批次

        Returns:
            是否保存成功
        """
        last_error = None

        for attempt in range(MAX_RETRIES):
            with self.session_factory() as session:
                try:
                    session.add_all([
                        StyleBatchRow(
                            catalogue=batch.catalogue,
                            batch_id=batch.batch_id,
                            title=style.title,
                            source=json.dumps(style.source, ensure_ascii=False),
                            prompt=style.prompt,
                            created_at=batch.created_at,
                        )
                        for style in batch.items
                    ])
                    session.commit()
                    LOG.info(f"风格批次已保存: catalogue={batch.catalogue}, "
                             f"batch_id={batch.batch_id}, count={len(batch.items)}")
                    return True

                except OperationalError as e:
                    # 数据库锁定等错误，重试
                    session.rollback()
                    last_error = e
                    if attempt < MAX_RETRIES - 1:
                        LOG.warning(f"Database locked, retrying ({attempt + 1}/{MAX_RETRIES}): {e}")
                        time.sleep(RETRY_DELAY * (attempt + 1))
                    continue

        LOG.error(f"风格批次保存失败, 已重试 {MAX_RETRIES} 次: {last_error}")
        return False

    def latest_batch(self, catalogue: str) -> Optional[StyleBatch]:
        """
        获取某个目录最新的批次

        Returns:
            最新批次，没有数据时返回 None
        """
        with self.session_factory() as session:
            latest = session.execute(
                select(StyleBatchRow.batch_id, StyleBatchRow.created_at)
                .where(StyleBatchRow.catalogue == catalogue)
                .order_by(StyleBatchRow.id.desc())
                .limit(1)
            ).first()
            if latest is None:
                return None

            rows = session.execute(
                select(StyleBatchRow)
                .where(StyleBatchRow.catalogue == catalogue, StyleBatchRow.batch_id == latest.batch_id)
                .order_by(StyleBatchRow.id)
            ).scalars().all()

            return StyleBatch(
                batch_id=latest.batch_id,
                catalogue=catalogue,
                created_at=latest.created_at,
                items=[
                    Style(title=row.title, prompt=row.prompt or "", source=self._deserialize_source(row.source))
                    for row in rows
                ],
            )

    def count_batches(self, catalogue: str) -> int:
        with self.session_factory() as session:
            batch_ids = session.execute(
                select(StyleBatchRow.batch_id).where(StyleBatchRow.catalogue == catalogue).distinct()
            ).scalars().all()
            return len(batch_ids)

    async def persist(self, batch: StyleBatch) -> bool:
        return await asyncio.to_thread(self.save_batch, batch)

    async def fetch_latest(self, catalogue: str) -> Optional[StyleBatch]:
        return await asyncio.to_thread(self.latest_batch, catalogue)

    @staticmethod
    def _deserialize_source(raw: Optional[str]) -> list[str]:
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            LOG.warning(f"source 字段无法解析: {raw[:100]}")
            return []
        return [str(item) for item in data] if isinstance(data, list) else []

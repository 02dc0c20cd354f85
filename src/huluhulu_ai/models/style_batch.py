# -*- coding: utf-8 -*-
"""
风格批次表

每行是某个批次中的一个风格，batch_id 最新的一组即当前目录。
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class StyleBatchRow(Base):
    """风格批次表"""

    __tablename__ = 'style_batches'

    # 主键，自增顺序即写入顺序
    id = Column(Integer, primary_key=True, autoincrement=True)

    catalogue = Column(String(32), nullable=False, comment="风格目录: photography/compliment")
    batch_id = Column(String(32), nullable=False, comment="批次ID（创建时间毫秒）")

    title = Column(String(128), nullable=False, comment="风格名称")
    source = Column(Text, nullable=False, default="[]", comment="来源热搜词 JSON 列表")
    prompt = Column(Text, nullable=False, default="", comment="提示词")

    created_at = Column(DateTime, nullable=False, default=datetime.now, comment="记录时间")

    __table_args__ = (
        Index('idx_catalogue_batch', 'catalogue', 'batch_id'),
    )

    def __repr__(self):
        return (f"<StyleBatchRow(id={self.id}, catalogue={self.catalogue}, "
                f"batch_id={self.batch_id}, title={self.title})>")

# -*- coding: utf-8 -*-
"""
Database Engine - 数据库引擎
"""

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from huluhulu_ai.models.style_batch import Base

LOG = logging.getLogger(__name__)


def create_db_engine(database_url: str) -> Engine:
    """创建引擎并建表"""
    kwargs = {}
    if database_url.startswith("sqlite"):
        # 仓储调用通过 asyncio.to_thread 在线程池中执行
        kwargs["connect_args"] = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            # 内存库需要所有线程共用同一个连接
            kwargs["poolclass"] = StaticPool

    engine = create_engine(database_url, **kwargs)
    Base.metadata.create_all(engine)
    LOG.info(f"数据库初始化完成: {engine.url.render_as_string(hide_password=True)}")
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, expire_on_commit=False)

#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Taskboard - Database
Подключение к хранилищу задач и описание таблицы

Версия: 1.0.0
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from sqlalchemy import (
    Column,
    DateTime,
    Index,
    MetaData,
    String,
    Table,
    Text,
    event,
    text,
)
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.functions import FunctionElement
from sqlalchemy.types import TypeDecorator

from taskboard.core.errors import StoreError
from taskboard.core.models import TaskPriority, TaskStatus

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """Хранит наивное UTC время, возвращает aware datetime"""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return value.replace(tzinfo=timezone.utc)


class casefold(FunctionElement):
    """
    Регистронезависимая форма строки для поиска.

    В SQLite встроенный lower() понимает только ASCII, поэтому там
    вызывается функция casefold, регистрируемая на каждом соединении
    (см. register_sqlite_functions). Остальные диалекты используют lower().
    """

    type = Text()
    name = "casefold"
    inherit_cache = True


@compiles(casefold)
def _compile_casefold(element, compiler, **kw):
    return "lower(%s)" % compiler.process(element.clauses, **kw)


@compiles(casefold, "sqlite")
def _compile_casefold_sqlite(element, compiler, **kw):
    return "casefold(%s)" % compiler.process(element.clauses, **kw)


def _casefold_value(value):
    return value.casefold() if isinstance(value, str) else value


def register_sqlite_functions(dbapi_connection, connection_record) -> None:
    """Обработчик события connect: функции Python для SQLite"""
    dbapi_connection.create_function("casefold", 1, _casefold_value)


metadata = MetaData()

# Таблица задач
tasks_table = Table(
    'tasks', metadata,
    Column('id', String(32), primary_key=True),
    Column('owner_id', String(64), nullable=False),
    Column('title', String(200), nullable=False),
    Column('description', Text, nullable=False, default=''),
    Column('status', String(20), nullable=False, default=TaskStatus.PENDING.value),
    Column('priority', String(10), nullable=False, default=TaskPriority.MEDIUM.value),
    Column('due_date', UTCDateTime, nullable=True),
    Column('created_at', UTCDateTime, nullable=False),
    Column('updated_at', UTCDateTime, nullable=False),
)

Index('ix_tasks_owner_created', tasks_table.c.owner_id, tasks_table.c.created_at)
Index('ix_tasks_owner_status', tasks_table.c.owner_id, tasks_table.c.status)


class Database:
    """Дескриптор подключения: открывается при старте, закрывается при остановке"""

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.echo = echo
        self._engine: Optional[AsyncEngine] = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise StoreError("Database is not connected")
        return self._engine

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    async def connect(self) -> None:
        """Создать engine, проверить соединение и таблицы"""
        if self._engine is not None:
            return

        url = make_url(self.url)
        if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)

        logger.info("🔄 Подключение к базе данных...")
        engine = create_async_engine(
            self.url,
            pool_pre_ping=True,
            echo=self.echo,
        )
        if url.get_backend_name() == "sqlite":
            event.listen(engine.sync_engine, "connect", register_sqlite_functions)

        try:
            async with engine.begin() as conn:
                await conn.execute(text("SELECT 1"))
                await conn.run_sync(metadata.create_all)
        except SQLAlchemyError as e:
            await engine.dispose()
            logger.error(f"❌ Ошибка подключения к базе данных: {e}")
            raise StoreError() from e

        self._engine = engine
        logger.info(f"✅ База данных подключена: {url.render_as_string(hide_password=True)}")

    async def close(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        logger.info("✅ Соединение с базой данных закрыто")

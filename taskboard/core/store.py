# core/store.py

import functools
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import ColumnElement, delete, func, insert, select, update
from sqlalchemy.exc import SQLAlchemyError

from taskboard.core.database import Database, tasks_table
from taskboard.core.errors import StoreError
from taskboard.core.models import Task

logger = logging.getLogger(__name__)


def store_operation(func_):
    """Ошибки SQLAlchemy -> StoreError (с логированием)"""
    @functools.wraps(func_)
    async def wrapper(*args, **kwargs):
        try:
            return await func_(*args, **kwargs)
        except SQLAlchemyError as e:
            logger.exception(f"❌ Ошибка хранилища в {func_.__name__}: {e}")
            raise StoreError() from e
    return wrapper


class TaskStore:
    """
    Коллекция задач поверх SQLAlchemy Core.

    Каждая операция - отдельная транзакция на уровне одной строки;
    все выборки по конкретной задаче ограничены владельцем.
    """

    def __init__(self, database: Database):
        self.database = database

    @staticmethod
    def _row_to_task(row) -> Task:
        return Task.model_validate(dict(row._mapping))

    @staticmethod
    def _owned(task_id: str, owner_id: str) -> Tuple[ColumnElement, ColumnElement]:
        return tasks_table.c.id == task_id, tasks_table.c.owner_id == owner_id

    @store_operation
    async def insert(self, values: Dict[str, Any]) -> Task:
        async with self.database.engine.begin() as conn:
            await conn.execute(insert(tasks_table).values(**values))
            result = await conn.execute(
                select(tasks_table).where(tasks_table.c.id == values["id"])
            )
            row = result.one()
        logger.debug(f"Task added id={values['id']} owner={values['owner_id']}")
        return self._row_to_task(row)

    @store_operation
    async def get(self, task_id: str, owner_id: str) -> Optional[Task]:
        async with self.database.engine.connect() as conn:
            result = await conn.execute(
                select(tasks_table).where(*self._owned(task_id, owner_id))
            )
            row = result.first()
        return self._row_to_task(row) if row else None

    @store_operation
    async def update(self, task_id: str, owner_id: str, values: Dict[str, Any]) -> Optional[Task]:
        async with self.database.engine.begin() as conn:
            result = await conn.execute(
                update(tasks_table)
                .where(*self._owned(task_id, owner_id))
                .values(**values)
            )
            if result.rowcount == 0:
                return None
            result = await conn.execute(
                select(tasks_table).where(*self._owned(task_id, owner_id))
            )
            row = result.one()
        return self._row_to_task(row)

    @store_operation
    async def delete(self, task_id: str, owner_id: str) -> bool:
        async with self.database.engine.begin() as conn:
            result = await conn.execute(
                delete(tasks_table).where(*self._owned(task_id, owner_id))
            )
            deleted = result.rowcount == 1
        return deleted

    @store_operation
    async def find(
        self,
        conditions: Sequence[ColumnElement],
        order_by: Sequence[ColumnElement],
        offset: int,
        limit: int,
    ) -> List[Task]:
        query = (
            select(tasks_table)
            .where(*conditions)
            .order_by(*order_by)
            .offset(offset)
            .limit(limit)
        )
        async with self.database.engine.connect() as conn:
            result = await conn.execute(query)
            rows = result.all()
        return [self._row_to_task(row) for row in rows]

    @store_operation
    async def count(self, conditions: Sequence[ColumnElement]) -> int:
        query = select(func.count()).select_from(tasks_table).where(*conditions)
        async with self.database.engine.connect() as conn:
            result = await conn.execute(query)
            return int(result.scalar_one())

    @store_operation
    async def count_by_status(self, owner_id: str) -> List[Tuple[str, int]]:
        query = (
            select(tasks_table.c.status, func.count())
            .where(tasks_table.c.owner_id == owner_id)
            .group_by(tasks_table.c.status)
        )
        async with self.database.engine.connect() as conn:
            result = await conn.execute(query)
            return [(status, int(count)) for status, count in result.all()]

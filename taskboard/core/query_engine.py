#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Taskboard - Task Query Engine
Фильтрация, сортировка, пагинация и статистика задач пользователя

Версия: 1.0.0
"""

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

from sqlalchemy import ColumnElement, case, or_

from taskboard.core.database import casefold, tasks_table
from taskboard.core.models import (
    PRIORITY_WEIGHTS,
    SORT_FIELDS,
    Pagination,
    TaskPage,
    TaskPriority,
    TaskStats,
    TaskStatus,
)
from taskboard.core.store import TaskStore

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
DEFAULT_SORT_BY = "createdAt"
DEFAULT_SORT_ORDER = "desc"

# Наибольший OFFSET, который принимает хранилище (64-битное целое со знаком)
MAX_OFFSET = 2 ** 63 - 1

_STATUS_VALUES = {s.value for s in TaskStatus}
_PRIORITY_VALUES = {p.value for p in TaskPriority}

_SORT_COLUMNS = {
    "createdAt": tasks_table.c.created_at,
    "updatedAt": tasks_table.c.updated_at,
    "title": tasks_table.c.title,
    "dueDate": tasks_table.c.due_date,
    "priority": case(
        *[(tasks_table.c.priority == value, weight) for value, weight in PRIORITY_WEIGHTS.items()],
        else_=0,
    ),
}


def _to_int(value: Any, default: int) -> int:
    """Положительное целое из параметра запроса, иначе default"""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        number = value
    elif isinstance(value, str):
        try:
            number = int(value.strip())
        except ValueError:
            return default
    else:
        return default
    return number if number >= 1 else default


@dataclass(frozen=True)
class ListOptions:
    """Нормализованные параметры выборки"""
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    status: Optional[str] = None
    priority: Optional[str] = None
    search: Optional[str] = None
    sort_by: str = DEFAULT_SORT_BY
    sort_order: str = DEFAULT_SORT_ORDER

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_params(
        cls,
        params: Mapping[str, Any],
        default_limit: int = DEFAULT_LIMIT,
        max_limit: Optional[int] = None,
    ) -> "ListOptions":
        """
        Разбор сырых параметров запроса.

        Нечисловые и неположительные page/limit заменяются значениями
        по умолчанию; неизвестные status/priority означают "без фильтра";
        limit ограничивается сверху max_limit.
        """
        page = _to_int(params.get("page"), DEFAULT_PAGE)
        limit = _to_int(params.get("limit"), default_limit)
        if max_limit is not None and limit > max_limit:
            limit = max_limit

        status = params.get("status")
        if status not in _STATUS_VALUES:
            status = None

        priority = params.get("priority")
        if priority not in _PRIORITY_VALUES:
            priority = None

        search = params.get("search")
        if not isinstance(search, str) or not search.strip():
            search = None

        sort_by = params.get("sortBy")
        if sort_by not in SORT_FIELDS:
            sort_by = DEFAULT_SORT_BY

        sort_order = "asc" if params.get("sortOrder") == "asc" else "desc"

        return cls(
            page=page,
            limit=limit,
            status=status,
            priority=priority,
            search=search,
            sort_by=sort_by,
            sort_order=sort_order,
        )


def build_conditions(owner_id: str, options: ListOptions) -> List[ColumnElement]:
    """Условия выборки: владелец AND статус AND приоритет AND поиск"""
    conditions: List[ColumnElement] = [tasks_table.c.owner_id == owner_id]

    if options.status:
        conditions.append(tasks_table.c.status == options.status)

    if options.priority:
        conditions.append(tasks_table.c.priority == options.priority)

    if options.search:
        needle = options.search.casefold()
        conditions.append(or_(
            casefold(tasks_table.c.title).contains(needle, autoescape=True),
            casefold(tasks_table.c.description).contains(needle, autoescape=True),
        ))

    return conditions


def build_order_by(options: ListOptions) -> List[ColumnElement]:
    column = _SORT_COLUMNS[options.sort_by]
    primary = column.asc() if options.sort_order == "asc" else column.desc()
    # id - детерминированный порядок среди равных значений
    return [primary, tasks_table.c.id.asc()]


def build_pagination(page: int, limit: int, total: int) -> Pagination:
    return Pagination(
        current_page=page,
        total_pages=math.ceil(total / limit),
        total_tasks=total,
        has_next_page=page * limit < total,
        has_prev_page=page > 1,
        limit=limit,
    )


class TaskQueryEngine:
    """Выборки и агрегаты по задачам одного владельца (только чтение)"""

    def __init__(self, store: TaskStore):
        self.store = store

    async def list_tasks(self, owner_id: str, options: Optional[ListOptions] = None) -> TaskPage:
        options = options or ListOptions()
        conditions = build_conditions(owner_id, options)

        if options.skip > MAX_OFFSET:
            # Такой страницы заведомо нет; хранилище не примет OFFSET
            tasks, total = [], await self.store.count(conditions)
        else:
            # Выборка страницы и подсчёт - две независимые операции
            tasks, total = await asyncio.gather(
                self.store.find(
                    conditions,
                    order_by=build_order_by(options),
                    offset=options.skip,
                    limit=options.limit,
                ),
                self.store.count(conditions),
            )

        logger.debug(
            f"list_tasks owner={owner_id} page={options.page} limit={options.limit} "
            f"returned={len(tasks)} total={total}"
        )
        return TaskPage(
            tasks=tasks,
            pagination=build_pagination(options.page, options.limit, total),
        )

    async def compute_stats(self, owner_id: str) -> TaskStats:
        counts = {"total": 0, **{status.value: 0 for status in TaskStatus}}

        for status, count in await self.store.count_by_status(owner_id):
            if status in _STATUS_VALUES:
                counts[status] = count
            counts["total"] += count

        return TaskStats.model_validate(counts)

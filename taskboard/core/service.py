# core/service.py

import logging
import uuid
from typing import Any, Dict, Mapping

from taskboard.core.database import utcnow
from taskboard.core.errors import NotFoundError, ValidationError
from taskboard.core.models import Task, TaskPriority, TaskStatus
from taskboard.core.store import TaskStore
from taskboard.core.validation import (
    CREATE_RULES,
    UPDATE_RULES,
    clean_fields,
    validate_fields,
    validate_task_id,
)

logger = logging.getLogger(__name__)


def new_task_id() -> str:
    return uuid.uuid4().hex


class TaskService:
    """Создание, чтение, изменение и удаление задач владельца"""

    def __init__(self, store: TaskStore):
        self.store = store

    async def create(self, owner_id: str, fields: Mapping[str, Any]) -> Task:
        errors = validate_fields(fields, CREATE_RULES, required_fields=("title",))
        if errors:
            raise ValidationError(errors)

        values: Dict[str, Any] = {
            "description": "",
            "status": TaskStatus.PENDING,
            "priority": TaskPriority.MEDIUM,
            "due_date": None,
            **clean_fields(fields),
        }
        now = utcnow()
        values.update(
            id=new_task_id(),
            owner_id=owner_id,
            created_at=now,
            updated_at=now,
        )
        values["status"] = TaskStatus(values["status"]).value
        values["priority"] = TaskPriority(values["priority"]).value

        task = await self.store.insert(values)
        logger.info(f"📝 Задача создана id={task.id} owner={owner_id}")
        return task

    async def get_one(self, task_id: str, owner_id: str) -> Task:
        validate_task_id(task_id)
        task = await self.store.get(task_id, owner_id)
        if task is None:
            raise NotFoundError()
        return task

    async def update(self, task_id: str, owner_id: str, changes: Mapping[str, Any]) -> Task:
        """Изменяет только переданные поля; пустая строка - не то же, что отсутствие"""
        validate_task_id(task_id)
        errors = validate_fields(changes, UPDATE_RULES)
        if errors:
            raise ValidationError(errors)

        current = await self.store.get(task_id, owner_id)
        if current is None:
            raise NotFoundError()

        values = clean_fields(changes)
        for key in ("status", "priority"):
            if key in values:
                values[key] = values[key].value
        values["updated_at"] = max(utcnow(), current.created_at)

        task = await self.store.update(task_id, owner_id, values)
        if task is None:
            # удалена между чтением и записью
            raise NotFoundError()
        logger.info(f"✏️ Задача обновлена id={task_id} fields={sorted(changes)}")
        return task

    async def delete(self, task_id: str, owner_id: str) -> None:
        validate_task_id(task_id)
        if not await self.store.delete(task_id, owner_id):
            raise NotFoundError()
        logger.info(f"🗑 Задача удалена id={task_id} owner={owner_id}")

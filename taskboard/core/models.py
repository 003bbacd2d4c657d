# core/models.py

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 2000

# ===== ПЕРЕЧИСЛЕНИЯ =====


class TaskStatus(str, Enum):
    """Статусы задач"""
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class TaskPriority(str, Enum):
    """Приоритеты задач"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Вес приоритета для сортировки (low < medium < high)
PRIORITY_WEIGHTS = {
    TaskPriority.LOW.value: 1,
    TaskPriority.MEDIUM.value: 2,
    TaskPriority.HIGH.value: 3,
}

SORT_FIELDS = ("createdAt", "updatedAt", "title", "priority", "dueDate")


class ApiModel(BaseModel):
    """Модели API сериализуются в camelCase"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ===== ЗАДАЧИ =====


class Task(ApiModel):
    id: str
    title: str
    description: str = ""
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[datetime] = None
    owner_id: str
    created_at: datetime
    updated_at: datetime

    def to_response(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class TaskCreate(ApiModel):
    """Тело POST /api/tasks.

    Значения принимаются как есть: типы, перечисления и даты проверяет
    taskboard.core.validation, чтобы собрать все ошибки разом.
    """
    title: Any = None
    description: Any = None
    status: Any = None
    priority: Any = None
    due_date: Any = None


class TaskUpdate(TaskCreate):
    """Тело PUT /api/tasks/{id}; учитываются только переданные ключи"""

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


# ===== ВЫБОРКИ =====


class Pagination(ApiModel):
    current_page: int
    total_pages: int
    total_tasks: int
    has_next_page: bool
    has_prev_page: bool
    limit: int


class TaskPage(ApiModel):
    tasks: List[Task] = Field(default_factory=list)
    pagination: Pagination

    def to_response(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class TaskStats(BaseModel):
    """Счётчики по статусам; ключ "in-progress" как в API"""
    total: int = 0
    pending: int = 0
    in_progress: int = Field(default=0, alias="in-progress")
    completed: int = 0

    model_config = ConfigDict(populate_by_name=True)

    def to_response(self) -> Dict[str, int]:
        return self.model_dump(by_alias=True)


class HealthCheck(BaseModel):
    status: str
    message: str
    version: str
    timestamp: str

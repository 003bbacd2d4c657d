# core/validation.py

"""
Валидация полей задачи.

Правило - чистая функция ``value -> List[str]`` (пустой список = значение
корректно). Для каждого поля выполняются все правила, ошибки всех полей
собираются в один отчёт вместо остановки на первой.
"""

import re
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from taskboard.core.errors import ValidationError
from taskboard.core.models import (
    DESCRIPTION_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    TaskPriority,
    TaskStatus,
)

Rule = Callable[[Any], List[str]]

TASK_ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")

# ===== ПРАВИЛА =====


def required(message: str) -> Rule:
    def rule(value: Any) -> List[str]:
        if value is None or (isinstance(value, str) and not value.strip()):
            return [message]
        return []
    return rule


def not_null(message: str) -> Rule:
    def rule(value: Any) -> List[str]:
        return [message] if value is None else []
    return rule


def is_string(message: str) -> Rule:
    def rule(value: Any) -> List[str]:
        if value is not None and not isinstance(value, str):
            return [message]
        return []
    return rule


def length(min_length: int, max_length: int, message: str) -> Rule:
    """Длина строки после strip(); не-строки пропускаются"""
    def rule(value: Any) -> List[str]:
        if not isinstance(value, str):
            return []
        if not min_length <= len(value.strip()) <= max_length:
            return [message]
        return []
    return rule


def one_of(values: Iterable[str], message: str) -> Rule:
    allowed = frozenset(values)

    def rule(value: Any) -> List[str]:
        if not isinstance(value, str) or value not in allowed:
            return [message]
        return []
    return rule


def iso_datetime(message: str) -> Rule:
    """ISO 8601 дата или дата-время; None допустим (сброс срока)"""
    def rule(value: Any) -> List[str]:
        if value is None:
            return []
        if not isinstance(value, str) or parse_datetime(value) is None:
            return [message]
        return []
    return rule


def run_rules(value: Any, rules: Iterable[Rule]) -> List[str]:
    messages: List[str] = []
    for rule in rules:
        messages.extend(rule(value))
    return messages


# ===== СХЕМЫ ПОЛЕЙ =====

_STATUS_VALUES = [s.value for s in TaskStatus]
_PRIORITY_VALUES = [p.value for p in TaskPriority]

_TITLE_LENGTH = length(1, TITLE_MAX_LENGTH, f"Title must be between 1 and {TITLE_MAX_LENGTH} characters")

CREATE_RULES: Dict[str, List[Rule]] = {
    "title": [
        is_string("Title must be a string"),
        required("Task title is required"),
        _TITLE_LENGTH,
    ],
    "description": [
        is_string("Description must be a string"),
        length(0, DESCRIPTION_MAX_LENGTH, f"Description cannot exceed {DESCRIPTION_MAX_LENGTH} characters"),
    ],
    "status": [one_of(_STATUS_VALUES, "Invalid status value")],
    "priority": [one_of(_PRIORITY_VALUES, "Invalid priority value")],
    "due_date": [iso_datetime("Invalid date format")],
}

# При обновлении title необязателен, но если передан - проверяется так же
UPDATE_RULES: Dict[str, List[Rule]] = {
    **CREATE_RULES,
    "title": [
        is_string("Title must be a string"),
        not_null("Task title is required"),
        _TITLE_LENGTH,
    ],
}

# Внешние имена полей для сообщений об ошибках
FIELD_ALIASES = {"due_date": "dueDate"}


def validate_fields(
    payload: Mapping[str, Any],
    schema: Mapping[str, List[Rule]],
    required_fields: Iterable[str] = (),
) -> List[Dict[str, str]]:
    """Проверить переданные поля; отсутствующие ключи не проверяются,
    кроме перечисленных в required_fields"""
    errors: List[Dict[str, str]] = []
    for field, rules in schema.items():
        if field not in payload and field not in required_fields:
            continue
        for message in run_rules(payload.get(field), rules):
            errors.append({"field": FIELD_ALIASES.get(field, field), "message": message})
    return errors


def validate_task_id(task_id: str) -> str:
    """Идентификатор должен быть в формате хранилища"""
    if not isinstance(task_id, str) or not TASK_ID_PATTERN.match(task_id):
        raise ValidationError.single("id", "Invalid task ID")
    return task_id


# ===== ПРЕОБРАЗОВАНИЯ =====


def parse_datetime(value: str) -> Optional[datetime]:
    """Разбор ISO 8601; наивные значения считаются UTC"""
    try:
        parsed = datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def clean_fields(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Нормализовать уже проверенные поля перед записью"""
    cleaned: Dict[str, Any] = {}
    for field, value in payload.items():
        if field in ("title", "description") and isinstance(value, str):
            value = value.strip()
        elif field == "description" and value is None:
            value = ""
        elif field == "status" and value is not None:
            value = TaskStatus(value)
        elif field == "priority" and value is not None:
            value = TaskPriority(value)
        elif field == "due_date" and value is not None:
            value = parse_datetime(value)
        cleaned[field] = value
    return cleaned

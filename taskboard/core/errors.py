# core/errors.py

from typing import Any, Dict, List, Optional


class TaskboardError(Exception):
    """Базовое исключение сервиса задач"""

    status_code: int = 500
    default_message: str = "Server Error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"success": False, "message": self.message}


class ValidationError(TaskboardError):
    """Ошибка валидации: список пар {field, message}"""

    status_code = 400
    default_message = "Validation failed"

    def __init__(self, errors: List[Dict[str, str]], message: Optional[str] = None):
        super().__init__(message)
        self.errors = list(errors)

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationError":
        return cls([{"field": field, "message": message}])

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["errors"] = self.errors
        return data


class NotFoundError(TaskboardError):
    """Задача не найдена или принадлежит другому пользователю.

    Чужая задача намеренно неотличима от отсутствующей.
    """

    status_code = 404
    default_message = "Task not found"


class AuthenticationError(TaskboardError):
    """Нет токена или токен недействителен"""

    status_code = 401
    default_message = "Not authorized, no token"


class StoreError(TaskboardError):
    """Ошибка хранилища; детали в ответ не попадают"""

    status_code = 500
    default_message = "Server Error"

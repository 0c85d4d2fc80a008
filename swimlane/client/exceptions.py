"""Исключения клиента Kanban API."""
from typing import Any, Dict, List, Optional


class KanbanApiError(Exception):
    """Базовая ошибка при обращении к API."""

    def __init__(self, message: str, status: Optional[int] = None, payload: Any = None):
        self.message = message
        self.status = status
        self.payload = payload
        super().__init__(message)


class KanbanNotFoundError(KanbanApiError):
    """Ресурс не найден (404)."""


class KanbanValidationError(KanbanApiError):
    """Ошибка валидации запроса (400) с ошибками по полям."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None, status: int = 400):
        self.errors = errors or []
        super().__init__(message, status)

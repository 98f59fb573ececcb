# engagement/core/exceptions.py
from typing import Optional, Dict
from fastapi import status

class AppException(Exception):
    """Базовое исключение для приложения"""
    def __init__(self, status_code: int, detail: str, headers: Optional[Dict[str, str]] = None):
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail
        self.headers = headers

class AuthenticationError(AppException):
    """Нет валидного access-токена"""
    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(status.HTTP_401_UNAUTHORIZED, detail, headers={"WWW-Authenticate": "Bearer"})

class AuthorizationError(AppException):
    """Недостаточно прав (например, не админ)"""
    def __init__(self, detail: str = "Not authorized"):
        super().__init__(status.HTTP_403_FORBIDDEN, detail)

class ValidationError(AppException):
    """Входные данные отклонены до какой-либо записи"""
    def __init__(self, detail: str = "Validation error"):
        super().__init__(status.HTTP_422_UNPROCESSABLE_ENTITY, detail)

class InvalidPeriodError(ValidationError):
    def __init__(self, period: str, allowed):
        super().__init__(f"Unknown period {period!r}, expected one of {', '.join(allowed)}")
        self.period = period

class NotFoundError(AppException):
    """Ресурс не найден"""
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status.HTTP_404_NOT_FOUND, detail)

class BadgeNotFoundError(NotFoundError):
    def __init__(self, badge_id: int):
        super().__init__(f"Badge {badge_id} not found")
        self.badge_id = badge_id

class DatabaseError(AppException):
    """Сбой хранилища; сессия уже откатана, кэш не тронут"""
    def __init__(self, detail: str = "Database error"):
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, detail)

class RateLimitError(AppException):
    """Ошибка превышения лимита запросов"""
    def __init__(self, detail: str = "Too many requests"):
        super().__init__(status.HTTP_429_TOO_MANY_REQUESTS, detail)

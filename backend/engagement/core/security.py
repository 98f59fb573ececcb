# engagement/core/security.py
"""
Проверка JWT, выпущенных сервисом авторизации (python-jose).
Сами мы выпускаем токены только для сессии админки и в тестах.
"""
from jose import jwt, JWTError, ExpiredSignatureError
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any, Union
from engagement.core.config import settings

ACCESS_TOKEN_TYPE = "access"
ADMIN_SCOPE = "admin"
# Модули-источники событий (лента, MCQ, сообщество)
SERVICE_SCOPE = "service"


def _secret_key() -> str:
    return settings.security.JWT_SECRET_KEY.get_secret_value()


def create_access_token(
    subject: Union[int, str],
    scope: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    lifetime = expires_delta or timedelta(minutes=settings.security.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    claims: Dict[str, Any] = {
        "sub": str(subject),
        "type": ACCESS_TOKEN_TYPE,
        "exp": datetime.now(timezone.utc) + lifetime,
    }
    if scope:
        claims["scope"] = scope
    return jwt.encode(claims, _secret_key(), algorithm=settings.security.JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Проверяет подпись, срок и тип токена. Любая проблема - ValueError."""
    try:
        payload = jwt.decode(token, _secret_key(), algorithms=[settings.security.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise ValueError("Token expired")
    except JWTError:
        raise ValueError("Invalid token")

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise ValueError("Invalid token type for this operation")
    if not payload.get("sub"):
        raise ValueError("Invalid token payload")
    return payload


def user_id_from_token(token: str) -> int:
    subject = decode_access_token(token)["sub"]
    if not str(subject).isdigit():
        # например, токен сессии админки
        raise ValueError("Token subject is not a user id")
    return int(subject)

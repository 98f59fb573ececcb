# engagement/core/utils.py
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
from engagement.core.database import db_helper
from engagement.core.exceptions import AuthenticationError, AuthorizationError
from engagement.core.security import SERVICE_SCOPE, decode_access_token, user_id_from_token
from engagement.repositories.user_repository import UserRepository
from engagement.models.user import User, UserRole
import logging

logger = logging.getLogger(__name__)
# Токены выпускает сервис авторизации; tokenUrl нужен только для Swagger
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/v1/auth/login")


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    session: AsyncSession = Depends(db_helper.session_getter)
) -> User:
    """Зависимость для получения текущего пользователя из токена"""
    try:
        user_id = user_id_from_token(token)
        user = await UserRepository(session).get_by_id(user_id)
        if not user:
            raise ValueError("User not found")
        return user
    except ValueError as e:
        logger.warning(f"Authentication failed: {str(e)}")
        raise AuthenticationError()


async def get_admin_user(current_user: User = Depends(get_current_user)) -> User:
    """Только для администраторов"""
    if current_user.role != UserRole.ADMIN.value:
        raise AuthorizationError("Admin access required")
    return current_user


async def get_event_source(
    token: str = Depends(oauth2_scheme),
    session: AsyncSession = Depends(db_helper.session_getter)
) -> str:
    """
    Кто пишет события: сервисный токен (scope=service) или админ.
    Обычный пользователь начислять себе очки не может.
    """
    try:
        payload = decode_access_token(token)
    except ValueError as e:
        logger.warning(f"Event source authentication failed: {str(e)}")
        raise AuthenticationError()

    subject = str(payload["sub"])
    if payload.get("scope") == SERVICE_SCOPE:
        return f"service:{subject}"
    if subject.isdigit():
        user = await UserRepository(session).get_by_id(int(subject))
        if user and user.role == UserRole.ADMIN.value:
            return f"admin:{user.id}"
    logger.warning(f"Event emission denied for subject {subject}")
    raise AuthorizationError("Service token required to emit events")

# engagement/services/event_service.py
from datetime import datetime
from typing import Optional, List
import logging
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from engagement.core.exceptions import DatabaseError, NotFoundError, ValidationError
from engagement.models.events import UserEvent
from engagement.repositories.event_repository import EventRepository
from engagement.repositories.user_repository import UserRepository
from engagement.services.score_service import ScoreService

logger = logging.getLogger(__name__)


class EventService:
    """
    Точка входа для модулей-источников событий (логин, MCQ, лента, сообщество).
    После записи события total_score пересчитывается сразу, кэш не отстает от журнала.
    """

    def __init__(self, session: AsyncSession, score_service: Optional[ScoreService] = None):
        self.session = session
        self.repository = EventRepository(session)
        self.score_service = score_service or ScoreService(session)

    async def track_event(
        self,
        user_id: int,
        event_type: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        metadata: Optional[dict] = None,
        created_at: Optional[datetime] = None,
    ) -> int:
        """Добавляет событие и возвращает пересчитанный total_score"""
        event_type = (event_type or "").strip().lower()
        if not event_type:
            raise ValidationError("eventType is required")
        if not await UserRepository(self.session).get_by_id(user_id):
            raise NotFoundError(f"User {user_id} not found")

        try:
            await self.repository.add(
                user_id=user_id,
                event_type=event_type,
                entity_type=entity_type,
                entity_id=entity_id,
                metadata=metadata,
                created_at=created_at,
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Failed to store event {event_type} for user {user_id}: {e}")
            raise DatabaseError("Failed to store event") from e

        # Событие уже в журнале; при сбое пересчета кэш просто остается прежним
        return await self.score_service.compute_total_score(user_id)

    async def get_user_events(
        self,
        user_id: int,
        event_type: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: int = 100,
    ) -> List[UserEvent]:
        if start_date and end_date and start_date > end_date:
            raise ValidationError("startDate must not be after endDate")
        return await self.repository.get_user_events(user_id, event_type, start_date, end_date, limit)

# engagement/repositories/event_repository.py
from datetime import datetime
from typing import Optional, List, Dict
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from engagement.models.events import UserEvent


def _normalized_type():
    return func.lower(UserEvent.event_type)


class EventRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(
        self,
        user_id: int,
        event_type: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        metadata: Optional[dict] = None,
        created_at: Optional[datetime] = None,
    ) -> UserEvent:
        """Добавить событие в журнал (без коммита)"""
        event = UserEvent(
            user_id=user_id,
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            event_metadata=metadata or {},
        )
        if created_at is not None:
            event.created_at = created_at
        self.session.add(event)
        await self.session.flush()
        return event

    async def count_by_type(self, user_id: int, since: Optional[datetime] = None) -> Dict[str, int]:
        """
        Количество событий пользователя по типам, опционально начиная с `since`.
        Ключи в нижнем регистре: модули-источники могут писать "LOGIN" напрямую в журнал.
        """
        event_type = _normalized_type()
        stmt = (
            select(event_type, func.count(UserEvent.id))
            .where(UserEvent.user_id == user_id)
            .group_by(event_type)
        )
        if since is not None:
            stmt = stmt.where(UserEvent.created_at >= since)
        result = await self.session.execute(stmt)
        return {kind: count for kind, count in result.all()}

    async def get_event_times(self, user_id: int, event_type: str) -> List[datetime]:
        stmt = (
            select(UserEvent.created_at)
            .where(UserEvent.user_id == user_id, _normalized_type() == event_type.lower())
            .order_by(UserEvent.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_user_events(
        self,
        user_id: int,
        event_type: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: int = 100,
    ) -> List[UserEvent]:
        """События пользователя, новые первыми"""
        stmt = select(UserEvent).where(UserEvent.user_id == user_id)
        if event_type:
            stmt = stmt.where(_normalized_type() == event_type.lower())
        if start_date:
            stmt = stmt.where(UserEvent.created_at >= start_date)
        if end_date:
            stmt = stmt.where(UserEvent.created_at <= end_date)
        stmt = stmt.order_by(UserEvent.created_at.desc(), UserEvent.id.desc()).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

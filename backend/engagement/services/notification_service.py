# engagement/services/notification_service.py
from typing import Iterable
import logging
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from engagement.models.engagement import Badge
from engagement.models.system import Notification

logger = logging.getLogger(__name__)


class NotificationService:
    """Побочные уведомления. Никогда не роняют основную запись."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def notify_badges_earned(self, user_id: int, badges: Iterable[Badge]) -> bool:
        try:
            for badge in badges:
                self.session.add(Notification(
                    user_id=user_id,
                    type="success",
                    title="New badge earned",
                    body=f"You earned the {badge.name} badge!",
                ))
            await self.session.commit()
            return True
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.warning(f"Badge notification for user {user_id} was not saved: {e}")
            return False

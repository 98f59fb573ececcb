# engagement/repositories/engagement_repository.py
from datetime import date, datetime
from typing import Optional, List
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from engagement.core.database import dialect_insert
from engagement.models.engagement import DailyDigestEngagement, DailyEngagementStatus, UserBadgeStatus

class EngagementRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add_engagement(
        self,
        user_id: int,
        card_id: str,
        card_type: str,
        engagement_type: str,
        day: date,
        duration: int = 0,
        is_correct: Optional[bool] = None,
    ) -> DailyDigestEngagement:
        row = DailyDigestEngagement(
            user_id=user_id,
            card_id=card_id,
            card_type=card_type,
            engagement_type=engagement_type,
            duration=duration,
            is_correct=is_correct,
            date=day,
        )
        self.session.add(row)
        await self.session.flush()
        return row

    async def get_engagements_for_day(self, user_id: int, day: date) -> List[DailyDigestEngagement]:
        """Все действия пользователя за логический день"""
        stmt = select(DailyDigestEngagement).where(
            DailyDigestEngagement.user_id == user_id,
            DailyDigestEngagement.date == day,
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def upsert_daily_status(self, user_id: int, day: date, values: dict, now: datetime) -> None:
        """INSERT ... ON CONFLICT (user_id, date) DO UPDATE - побеждает последняя запись"""
        stmt = dialect_insert(self.session, DailyEngagementStatus).values(
            user_id=user_id, date=day, updated_at=now, **values,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "date"],
            set_={**values, "updated_at": now},
        )
        await self.session.execute(stmt)

    async def get_daily_status(self, user_id: int, day: date) -> Optional[DailyEngagementStatus]:
        stmt = select(DailyEngagementStatus).where(
            DailyEngagementStatus.user_id == user_id,
            DailyEngagementStatus.date == day,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_statuses_between(self, user_id: int, start: date, end: date) -> List[DailyEngagementStatus]:
        stmt = (
            select(DailyEngagementStatus)
            .where(
                DailyEngagementStatus.user_id == user_id,
                DailyEngagementStatus.date >= start,
                DailyEngagementStatus.date <= end,
            )
            .order_by(DailyEngagementStatus.date.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_present_days(self, user_id: int, start: date, end: date) -> int:
        stmt = select(func.count(DailyEngagementStatus.id)).where(
            DailyEngagementStatus.user_id == user_id,
            DailyEngagementStatus.is_present.is_(True),
            DailyEngagementStatus.date >= start,
            DailyEngagementStatus.date <= end,
        )
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def upsert_badge_status(
        self, user_id: int, current_badge: Optional[str], days_active: int, now: datetime
    ) -> None:
        values = {"current_badge": current_badge, "days_active": days_active, "last_calculated_at": now}
        stmt = dialect_insert(self.session, UserBadgeStatus).values(user_id=user_id, **values)
        stmt = stmt.on_conflict_do_update(index_elements=["user_id"], set_=values)
        await self.session.execute(stmt)

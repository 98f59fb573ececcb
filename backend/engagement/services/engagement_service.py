# engagement/services/engagement_service.py
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Iterable, List
import logging
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from engagement.core.config import settings
from engagement.core.dates import utc_now, utc_today, trailing_days
from engagement.core.exceptions import DatabaseError, ValidationError
from engagement.models.engagement import CardType, EngagementType, DailyDigestEngagement
from engagement.repositories.engagement_repository import EngagementRepository
from engagement.services.card_types import CardTypeResolver, default_resolver

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")


@dataclass(frozen=True)
class DailyRollup:
    """Итог дня по всем действиям пользователя"""
    card_view_count: int = 0
    mcq_attempt_count: int = 0
    mcq_correct_count: int = 0
    mcq_accuracy: Decimal = Decimal("0.00")
    total_engagement_duration: int = 0
    is_present: bool = False

    def as_values(self) -> dict:
        return {
            "is_present": self.is_present,
            "card_view_count": self.card_view_count,
            "mcq_attempt_count": self.mcq_attempt_count,
            "mcq_correct_count": self.mcq_correct_count,
            "mcq_accuracy": self.mcq_accuracy,
            "total_engagement_duration": self.total_engagement_duration,
        }


def build_rollup(
    engagements: Iterable[DailyDigestEngagement],
    min_view_seconds: int = 20,
    min_accuracy: float = 50.0,
) -> DailyRollup:
    """
    Полный пересчет дня. Присутствие: хотя бы один просмотр >= min_view_seconds
    ИЛИ хотя бы одна попытка MCQ при точности >= min_accuracy.
    """
    views = 0
    attempts = 0
    correct = 0
    duration = 0
    for row in engagements:
        if row.engagement_type == EngagementType.CARD_VIEW.value:
            seconds = row.duration or 0
            duration += seconds
            if seconds >= min_view_seconds:
                views += 1
        elif row.engagement_type == EngagementType.MCQ_ATTEMPT.value:
            attempts += 1
            if row.is_correct:
                correct += 1

    accuracy = Decimal("0.00")
    if attempts:
        accuracy = (Decimal(correct) * 100 / Decimal(attempts)).quantize(_CENT, rounding=ROUND_HALF_UP)

    is_present = views >= 1 or (attempts >= 1 and accuracy >= Decimal(str(min_accuracy)))
    return DailyRollup(
        card_view_count=views,
        mcq_attempt_count=attempts,
        mcq_correct_count=correct,
        mcq_accuracy=accuracy,
        total_engagement_duration=duration,
        is_present=is_present,
    )


class EngagementService:
    """Учет действий дневного дайджеста и недельный метр присутствия"""

    def __init__(self, session: AsyncSession, resolver: Optional[CardTypeResolver] = None):
        self.session = session
        self.repository = EngagementRepository(session)
        self.resolver = resolver or default_resolver(session)

    async def track_engagement(
        self,
        user_id: int,
        card_id: str,
        engagement_type: EngagementType,
        is_complete: bool,
        duration: Optional[int] = None,
        day: Optional[date] = None,
        card_type: Optional[CardType] = None,
    ) -> DailyRollup:
        """
        Записывает действие и заново собирает итог (user_id, day) из всех строк дня.
        Повтор/гонка не ломает итог: следующая запись пересчитает его заново.
        """
        if not card_id:
            raise ValidationError("cardId is required")
        if duration is not None and duration < 0:
            raise ValidationError("Duration must be non-negative")
        engagement_type = EngagementType(engagement_type)
        day = day or utc_today()

        try:
            if card_type is None:
                card_type = await self.resolver.resolve(card_id)

            is_view = engagement_type == EngagementType.CARD_VIEW
            await self.repository.add_engagement(
                user_id=user_id,
                card_id=card_id,
                card_type=CardType(card_type).value,
                engagement_type=engagement_type.value,
                day=day,
                duration=duration or 0,
                is_correct=None if is_view else bool(is_complete),
            )

            rows = await self.repository.get_engagements_for_day(user_id, day)
            rollup = build_rollup(
                rows,
                min_view_seconds=settings.scoring.MIN_VIEW_SECONDS,
                min_accuracy=settings.scoring.MIN_MCQ_ACCURACY,
            )
            await self.repository.upsert_daily_status(user_id, day, rollup.as_values(), utc_now())
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Failed to record engagement for user {user_id} on {day}: {e}")
            raise DatabaseError("Failed to record engagement") from e

        logger.info(
            f"Engagement {engagement_type.value} user={user_id} card={card_id} day={day} present={rollup.is_present}"
        )
        return rollup

    async def get_weekly_meter(self, user_id: int, today: Optional[date] = None) -> dict:
        """Последние 7 дней (старые первыми); дни без строки - «не присутствовал»"""
        today = today or utc_today()
        start, end = trailing_days(today, settings.scoring.WEEKLY_METER_DAYS)
        statuses = {
            status.date: status
            for status in await self.repository.get_statuses_between(user_id, start, end)
        }

        days: List[dict] = []
        for offset in range(settings.scoring.WEEKLY_METER_DAYS):
            day = start + timedelta(days=offset)
            status = statuses.get(day)
            is_present = bool(status.is_present) if status else False
            days.append({
                "date": day.isoformat(),
                "is_present": is_present,
                "completed": is_present,
                "card_view_count": status.card_view_count if status else 0,
                "mcq_attempt_count": status.mcq_attempt_count if status else 0,
                "mcq_accuracy": float(status.mcq_accuracy) if status else 0.0,
            })

        return {
            "days_completed": sum(1 for entry in days if entry["is_present"]),
            "days": days,
        }

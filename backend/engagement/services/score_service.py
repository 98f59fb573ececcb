# engagement/services/score_service.py
from datetime import datetime
from typing import Optional, List
import logging
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from engagement.core.config import settings
from engagement.core.dates import utc_now, start_of_day, start_of_week, start_of_month, utc_today
from engagement.core.exceptions import DatabaseError, ValidationError, InvalidPeriodError
from engagement.models.scoring import UserScore, ScoreHistory
from engagement.repositories.event_repository import EventRepository
from engagement.repositories.score_repository import ScoreRepository
from engagement.repositories.user_repository import UserRepository
from engagement.services.weights import EventWeights, default_weights

logger = logging.getLogger(__name__)

HISTORY_PERIODS = ("daily", "weekly", "monthly")


class ScoreService:
    """
    Агрегатор очков. Все пересчеты полные (по журналу user_events),
    поэтому идемпотентны и безопасны при повторных вызовах.
    """

    def __init__(self, session: AsyncSession, weights: EventWeights = default_weights):
        self.session = session
        self.weights = weights
        self.event_repository = EventRepository(session)
        self.score_repository = ScoreRepository(session)

    async def _sum_since(self, user_id: int, since: Optional[datetime] = None) -> int:
        counts = await self.event_repository.count_by_type(user_id, since)
        return self.weights.score(counts)

    async def _fail(self, action: str, user_id: int, exc: SQLAlchemyError):
        # Откат: закэшированное значение остается прежним
        await self.session.rollback()
        logger.error(f"{action} failed for user {user_id}: {exc}")
        raise DatabaseError(f"Failed to {action}") from exc

    async def compute_total_score(self, user_id: int) -> int:
        """Сумма весов по всем событиям пользователя; перезаписывает user_scores.total_score"""
        try:
            total = await self._sum_since(user_id)
            await self.score_repository.upsert(user_id, total_score=total, updated_at=utc_now())
            await self.session.commit()
        except SQLAlchemyError as e:
            await self._fail("compute total score", user_id, e)
        logger.debug(f"Total score for user {user_id}: {total}")
        return total

    async def get_score(self, user_id: int) -> UserScore:
        """Кэшированная строка; при отсутствии - ленивый первый пересчет"""
        score = await self.score_repository.get(user_id)
        if score is None:
            await self.compute_total_score(user_id)
            score = await self.score_repository.get(user_id)
        return score

    async def compute_daily_score(self, user_id: int, now: Optional[datetime] = None) -> int:
        since = start_of_day(utc_today(now))
        try:
            daily = await self._sum_since(user_id, since)
            await self.score_repository.save_history(user_id, "daily", since.date(), daily)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self._fail("compute daily score", user_id, e)
        return daily

    async def compute_weekly_score(self, user_id: int, now: Optional[datetime] = None) -> int:
        """Очки с начала недели (воскресенье 00:00 UTC)"""
        since = start_of_week(now)
        try:
            weekly = await self._sum_since(user_id, since)
            await self.score_repository.upsert(user_id, weekly_score=weekly)
            await self.score_repository.save_history(user_id, "weekly", since.date(), weekly)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self._fail("compute weekly score", user_id, e)
        return weekly

    async def compute_monthly_score(self, user_id: int, now: Optional[datetime] = None) -> int:
        """Очки с 1-го числа текущего месяца"""
        since = start_of_month(now)
        try:
            monthly = await self._sum_since(user_id, since)
            await self.score_repository.upsert(user_id, monthly_score=monthly)
            await self.score_repository.save_history(user_id, "monthly", since.date(), monthly)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self._fail("compute monthly score", user_id, e)
        return monthly

    async def get_score_history(self, user_id: int, period: str) -> List[ScoreHistory]:
        if period not in HISTORY_PERIODS:
            raise InvalidPeriodError(period, HISTORY_PERIODS)
        return await self.score_repository.get_history(user_id, period, settings.scoring.SCORE_HISTORY_LIMIT)

    async def get_leaderboard(self, limit: Optional[int] = None) -> List[dict]:
        """Рейтинг по total_score (ничьи - по user_id по возрастанию)"""
        if limit is None:
            limit = settings.scoring.LEADERBOARD_DEFAULT_LIMIT
        if limit < 1:
            raise ValidationError("Leaderboard limit must be positive")
        limit = min(limit, settings.scoring.LEADERBOARD_MAX_LIMIT)

        rows = await self.score_repository.get_leaderboard(limit)
        return [
            {
                "rank": position,
                "user_id": score.user_id,
                "total_score": score.total_score,
                "weekly_score": score.weekly_score,
                "monthly_score": score.monthly_score,
                "user": {
                    "id": user.id,
                    "email": user.email,
                    "mobile": user.mobile,
                    "profile_image": user.profile_image,
                },
            }
            for position, (score, user) in enumerate(rows, start=1)
        ]

    async def get_scorecard_tracking(self) -> dict:
        """Сводка по кэшу очков для мониторинга"""
        total_users = await UserRepository(self.session).count()
        users_with_score, avg_score = await self.score_repository.get_summary()
        return {
            "total_users": total_users,
            "users_with_score": users_with_score,
            "avg_score": round(avg_score, 2),
            "distribution": await self.score_repository.get_distribution(),
        }

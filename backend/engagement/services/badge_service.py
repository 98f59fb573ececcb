# engagement/services/badge_service.py
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional, List, Dict, Tuple
import logging
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from engagement.core.config import settings
from engagement.core.dates import utc_now, utc_today, trailing_days
from engagement.core.exceptions import DatabaseError, BadgeNotFoundError
from engagement.core.schemas.badges import BadgeCriteria
from engagement.models.engagement import Badge, UserBadge, BadgeTier
from engagement.repositories.badge_repository import BadgeRepository
from engagement.repositories.engagement_repository import EngagementRepository
from engagement.repositories.event_repository import EventRepository
from engagement.services.notification_service import NotificationService
from engagement.services.score_service import ScoreService
from engagement.services.weights import EventKind

logger = logging.getLogger(__name__)

# Проверяется сверху вниз: первый подходящий порог и есть уровень
TIER_LADDER: Tuple[Tuple[int, str], ...] = (
    (180, "legend"),
    (150, "champion"),
    (120, "elite"),
    (90, "adventurer"),
    (60, "explorer"),
    (30, "rookie"),
)

DEFAULT_BADGES = (
    {"name": "First Steps", "description": "Complete your profile", "tier": BadgeTier.BRONZE.value,
     "icon": "🎯", "criteria": {"score": 100}},
    {"name": "Rising Star", "description": "Score 500 points", "tier": BadgeTier.SILVER.value,
     "icon": "⭐", "criteria": {"score": 500}},
    {"name": "Champion", "description": "Score 2000 points", "tier": BadgeTier.GOLD.value,
     "icon": "🏆", "criteria": {"score": 2000}},
)


def classify_tier(days_active: int) -> Optional[str]:
    for threshold, tier in TIER_LADDER:
        if days_active >= threshold:
            return tier
    return None


def login_streak(login_days: List[date], today: date) -> int:
    """Текущая серия подряд идущих дней с логином, заканчивающаяся сегодня или вчера"""
    days = set(login_days)
    if today in days:
        cursor = today
    elif today - timedelta(days=1) in days:
        cursor = today - timedelta(days=1)
    else:
        return 0
    streak = 0
    while cursor in days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


@dataclass
class UserMetrics:
    total_score: int
    streak: int
    event_counts: Dict[str, int]

    def count(self, kind: EventKind) -> int:
        return self.event_counts.get(kind.value, 0)


def criteria_checks(criteria: BadgeCriteria, metrics: UserMetrics) -> List[Tuple[int, int]]:
    """Пары (текущее значение, порог) по каждому заданному условию"""
    checks: List[Tuple[int, int]] = []
    if criteria.score:
        checks.append((metrics.total_score, criteria.score))
    if criteria.streak:
        checks.append((metrics.streak, criteria.streak))
    if criteria.engagement:
        engagement = criteria.engagement
        if engagement.connections:
            checks.append((metrics.count(EventKind.CONNECTION_REQUEST), engagement.connections))
        if engagement.posts:
            checks.append((metrics.count(EventKind.COMMUNITY_POST), engagement.posts))
        if engagement.mcq_attempts:
            checks.append((metrics.count(EventKind.MCQ_ATTEMPT), engagement.mcq_attempts))
    return checks


def is_eligible(criteria: BadgeCriteria, metrics: UserMetrics) -> bool:
    """Достаточно любого одного выполненного условия (ИЛИ)"""
    return any(current >= target for current, target in criteria_checks(criteria, metrics))


class BadgeService:
    def __init__(self, session: AsyncSession, score_service: Optional[ScoreService] = None):
        self.session = session
        self.badge_repository = BadgeRepository(session)
        self.engagement_repository = EngagementRepository(session)
        self.event_repository = EventRepository(session)
        self.score_service = score_service or ScoreService(session)

    # === УРОВЕНЬ ЗА 6 МЕСЯЦЕВ ===
    async def get_badge_status(self, user_id: int, today: Optional[date] = None) -> dict:
        """Считает дни присутствия за 180 дней и кэширует уровень в user_badge_statuses"""
        today = today or utc_today()
        start, end = trailing_days(today, settings.scoring.BADGE_WINDOW_DAYS)
        try:
            days_active = await self.engagement_repository.count_present_days(user_id, start, end)
            current_badge = classify_tier(days_active)
            await self.engagement_repository.upsert_badge_status(user_id, current_badge, days_active, utc_now())
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Badge status calculation failed for user {user_id}: {e}")
            raise DatabaseError("Failed to calculate badge status") from e
        return {"current_badge": current_badge, "days_active": days_active}

    # === ДОСТИЖЕНИЯ ===
    async def get_all_badges(self) -> List[Badge]:
        return await self.badge_repository.get_all()

    async def get_user_badges(self, user_id: int) -> List[UserBadge]:
        return await self.badge_repository.get_user_badges(user_id)

    async def _collect_metrics(self, user_id: int, today: Optional[date] = None) -> UserMetrics:
        score = await self.score_service.get_score(user_id)
        login_times = await self.event_repository.get_event_times(user_id, EventKind.LOGIN.value)
        return UserMetrics(
            total_score=score.total_score if score else 0,
            streak=login_streak([moment.date() for moment in login_times], today or utc_today()),
            event_counts=await self.event_repository.count_by_type(user_id),
        )

    @staticmethod
    def _criteria(badge: Badge) -> Optional[BadgeCriteria]:
        try:
            return BadgeCriteria.model_validate(badge.criteria or {})
        except PydanticValidationError as e:
            logger.warning(f"Badge {badge.id} has malformed criteria, skipped: {e}")
            return None

    async def check_badge_eligibility(self, user_id: int, today: Optional[date] = None) -> List[UserBadge]:
        """
        Выдает все бейджи, условия которых выполнены и которые еще не выданы.
        Повторный вызов ничего не выдает; конфликт уникальности = «уже выдан».
        """
        metrics = await self._collect_metrics(user_id, today)
        granted: List[Badge] = []
        try:
            for badge in await self.badge_repository.get_all():
                criteria = self._criteria(badge)
                if criteria is None or not is_eligible(criteria, metrics):
                    continue
                if await self.badge_repository.get_user_badge(user_id, badge.id):
                    continue
                if await self.badge_repository.grant(user_id, badge.id):
                    granted.append(badge)
                else:
                    logger.warning(f"Badge {badge.id} for user {user_id} was granted concurrently")
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Badge eligibility check failed for user {user_id}: {e}")
            raise DatabaseError("Failed to check badge eligibility") from e

        if not granted:
            return []
        granted_ids = {badge.id for badge in granted}
        for badge in granted:
            logger.info(f"🏅 User {user_id} earned badge '{badge.name}'")
        await NotificationService(self.session).notify_badges_earned(user_id, granted)

        return [
            user_badge for user_badge in await self.badge_repository.get_user_badges(user_id)
            if user_badge.badge_id in granted_ids
        ]

    async def get_badge_progress(self, user_id: int, badge_id: int, today: Optional[date] = None) -> dict:
        badge = await self.badge_repository.get_by_id(badge_id)
        if not badge:
            raise BadgeNotFoundError(badge_id)

        earned = await self.badge_repository.get_user_badge(user_id, badge_id) is not None
        criteria = self._criteria(badge) or BadgeCriteria()
        checks = criteria_checks(criteria, await self._collect_metrics(user_id, today))

        current, target, progress = 0, 0, 0.0
        if checks:
            # Условия через ИЛИ: показываем самое близкое к выполнению
            current, target = max(checks, key=lambda pair: pair[0] / pair[1])
            progress = min(100.0, current / target * 100)

        return {
            "badge": badge,
            "earned": earned,
            "progress": round(progress),
            "current": current,
            "target": target,
        }

    async def seed_default_badges(self) -> int:
        """Создает стандартные бейджи, если их нет. Возвращает число созданных."""
        created = 0
        for data in DEFAULT_BADGES:
            if await self.badge_repository.get_by_name(data["name"]):
                continue
            await self.badge_repository.create(**data)
            created += 1
        await self.session.commit()
        return created

# engagement/repositories/badge_repository.py
from typing import Optional, List
from sqlalchemy import select, case
from sqlalchemy.orm import selectinload
from sqlalchemy.ext.asyncio import AsyncSession
from engagement.core.database import dialect_insert
from engagement.models.engagement import Badge, UserBadge, BadgeTier

# Порядок тиров для сортировки каталога
_TIER_ORDER = case(
    {tier.value: index for index, tier in enumerate(BadgeTier)},
    value=Badge.tier,
    else_=len(BadgeTier),
)

class BadgeRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_all(self) -> List[Badge]:
        stmt = select(Badge).order_by(_TIER_ORDER, Badge.name.asc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_id(self, badge_id: int) -> Optional[Badge]:
        return await self.session.get(Badge, badge_id)

    async def get_by_name(self, name: str) -> Optional[Badge]:
        result = await self.session.execute(select(Badge).where(Badge.name == name))
        return result.scalar_one_or_none()

    async def create(self, name: str, description: str, tier: str, icon: str, criteria: dict) -> Badge:
        badge = Badge(name=name, description=description, tier=tier, icon=icon, criteria=criteria)
        self.session.add(badge)
        await self.session.flush()
        return badge

    async def get_user_badges(self, user_id: int) -> List[UserBadge]:
        """Выданные бейджи пользователя, новые первыми"""
        stmt = (
            select(UserBadge)
            .where(UserBadge.user_id == user_id)
            .options(selectinload(UserBadge.badge))
            .order_by(UserBadge.earned_at.desc(), UserBadge.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_user_badge(self, user_id: int, badge_id: int) -> Optional[UserBadge]:
        stmt = select(UserBadge).where(UserBadge.user_id == user_id, UserBadge.badge_id == badge_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def grant(self, user_id: int, badge_id: int) -> bool:
        """
        Вставка выдачи с ON CONFLICT DO NOTHING.
        False - строка уже была (в т.ч. гонка с параллельной проверкой).
        """
        stmt = (
            dialect_insert(self.session, UserBadge)
            .values(user_id=user_id, badge_id=badge_id)
            .on_conflict_do_nothing(index_elements=["user_id", "badge_id"])
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

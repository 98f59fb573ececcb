# engagement/repositories/score_repository.py
from datetime import date
from typing import Optional, List, Tuple
from sqlalchemy import select, func, case
from sqlalchemy.ext.asyncio import AsyncSession
from engagement.core.database import dialect_insert
from engagement.models.scoring import UserScore, ScoreHistory
from engagement.models.user import User

class ScoreRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, user_id: int) -> Optional[UserScore]:
        # строку могли обновить через upsert в обход identity map
        return await self.session.get(UserScore, user_id, populate_existing=True)

    async def upsert(self, user_id: int, **values) -> None:
        """
        INSERT ... ON CONFLICT (user_id) DO UPDATE только переданных колонок.
        Первая запись кэша не гоняется с параллельной: проигравший просто обновляет.
        """
        stmt = dialect_insert(self.session, UserScore).values(user_id=user_id, **values)
        stmt = stmt.on_conflict_do_update(index_elements=["user_id"], set_=values)
        await self.session.execute(stmt)

    async def save_history(self, user_id: int, period: str, period_date: date, score: int) -> None:
        """Снимок очков за окно: одна строка на (user, period, period_date)"""
        stmt = dialect_insert(self.session, ScoreHistory).values(
            user_id=user_id, period=period, period_date=period_date, score=score,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "period", "period_date"],
            set_={"score": score},
        )
        await self.session.execute(stmt)

    async def get_history(self, user_id: int, period: str, limit: int) -> List[ScoreHistory]:
        stmt = (
            select(ScoreHistory)
            .where(ScoreHistory.user_id == user_id, ScoreHistory.period == period)
            .order_by(ScoreHistory.period_date.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_leaderboard(self, limit: int) -> List[Tuple[UserScore, User]]:
        """Топ по total_score; при равенстве - по user_id"""
        stmt = (
            select(UserScore, User)
            .join(User, User.id == UserScore.user_id)
            .order_by(UserScore.total_score.desc(), UserScore.user_id.asc())
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return [(row[0], row[1]) for row in result.all()]

    async def get_summary(self) -> Tuple[int, float]:
        """(кол-во пользователей с очками, средний total_score)"""
        stmt = select(func.count(UserScore.user_id), func.avg(UserScore.total_score))
        count, avg = (await self.session.execute(stmt)).one()
        return count or 0, float(avg or 0)

    async def get_distribution(self) -> dict:
        total = UserScore.total_score
        stmt = select(
            func.sum(case((total <= 100, 1), else_=0)),
            func.sum(case(((total > 100) & (total <= 500), 1), else_=0)),
            func.sum(case(((total > 500) & (total <= 1000), 1), else_=0)),
            func.sum(case((total > 1000, 1), else_=0)),
        )
        low, mid, high, top = (await self.session.execute(stmt)).one()
        return {
            "0-100": int(low or 0),
            "101-500": int(mid or 0),
            "501-1000": int(high or 0),
            "1000+": int(top or 0),
        }

# engagement/core/database.py
from typing import AsyncGenerator
from sqlalchemy import text
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import NullPool
from engagement.core.config import settings


class DatabaseHelper:
    def __init__(
            self,
            url: str,
            echo: bool = True,
            pool_size: int = 5,
            max_overflow: int = 10,
    ):
        if url.startswith("sqlite"):
            # aiosqlite: без пула, соединение не переживает event loop
            self.engine: AsyncEngine = create_async_engine(url=url, echo=echo, poolclass=NullPool)
        else:
            self.engine: AsyncEngine = create_async_engine(
                url=url,
                echo=echo,
                pool_size=pool_size,
                max_overflow=max_overflow,
            )
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            bind=self.engine,
            autoflush=False,
            autocommit=False,
            expire_on_commit=False,
        )

    async def ping(self) -> None:
        """SELECT 1; пробрасывает ошибку драйвера, если БД недоступна"""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def dispose(self):
        """Закрывает все соединения с базой данных"""
        await self.engine.dispose()

    async def session_getter(self) -> AsyncGenerator[AsyncSession, None]:
        """Генератор для получения сессии БД в FastAPI зависимостях"""
        async with self.session_factory() as session:
            yield session


def dialect_insert(session: AsyncSession, model):
    """INSERT с поддержкой ON CONFLICT для текущего диалекта (PostgreSQL / SQLite)"""
    name = session.bind.dialect.name
    if name == "postgresql":
        return postgresql.insert(model)
    if name == "sqlite":
        return sqlite.insert(model)
    raise NotImplementedError(f"Upsert is not supported for dialect {name}")


db_helper = DatabaseHelper(
    url=settings.db.DATABASE_URL,
    echo=settings.db.DB_ECHO,
    pool_size=settings.db.DB_POOL_SIZE,
    max_overflow=settings.db.DB_MAX_OVERFLOW,
)

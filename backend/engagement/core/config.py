# engagement/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, SecretStr
from typing import List, Optional
from functools import lru_cache


class DataBaseConfig(BaseModel):
    DB_HOST: str = Field("localhost", description="Database host")
    DB_PORT: int = Field(5432, description="Database port")
    DB_NAME: str = Field("engagement", description="Database name")
    DB_USER: str = Field("engagement", description="Database user")
    DB_PASSWORD: Optional[SecretStr] = Field(None, description="Database password")
    DB_ECHO: bool = Field(False, description="Enable SQL echo")
    DB_POOL_SIZE: int = Field(5, description="Database pool size")
    DB_MAX_OVERFLOW: int = Field(10, description="Database max overflow")
    # Полный URL перекрывает сборку из частей (sqlite+aiosqlite в тестах)
    DB_URL: Optional[str] = Field(None, description="Full database URL override")

    @property
    def DATABASE_URL(self) -> str:
        if self.DB_URL:
            return self.DB_URL
        password = self.DB_PASSWORD.get_secret_value() if self.DB_PASSWORD else ""
        return f"postgresql+asyncpg://{self.DB_USER}:{password}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    naming_convention: dict[str, str] = {
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_N_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }


class SecurityConfig(BaseModel):
    JWT_SECRET_KEY: SecretStr = Field(..., description="JWT secret key")  # Обязательное поле!
    JWT_ALGORITHM: str = Field("HS256", description="JWT algorithm")
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(30, description="Access token expiration")
    ADMIN_USERNAME: str = Field("admin", description="Back-office login")
    ADMIN_PASSWORD: Optional[SecretStr] = Field(None, description="Back-office password")


class ScoringConfig(BaseModel):
    LEADERBOARD_DEFAULT_LIMIT: int = Field(100, description="Leaderboard size when no limit is given")
    LEADERBOARD_MAX_LIMIT: int = Field(500, description="Upper bound for the leaderboard limit")
    SCORE_HISTORY_LIMIT: int = Field(30, description="Snapshots returned by score history")
    MIN_VIEW_SECONDS: int = Field(20, description="Minimum card view duration that counts")
    MIN_MCQ_ACCURACY: float = Field(50.0, description="MCQ accuracy (percent) required for presence")
    BADGE_WINDOW_DAYS: int = Field(180, description="Trailing window for the tier badge")
    WEEKLY_METER_DAYS: int = Field(7, description="Days shown by the weekly meter")


class Settings(BaseSettings):
    app_name: str = Field("Engagement Engine", description="Application name")
    debug: bool = Field(False, description="Debug mode")
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            "http://localhost:5137",
            "http://localhost:3000",
        ],
        description="CORS origins"
    )

    db: DataBaseConfig = Field(default_factory=DataBaseConfig)
    security: SecurityConfig
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",  # Для вложенных объектов
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Кэшированный экземпляр настроек"""
    return Settings()


settings = get_settings()

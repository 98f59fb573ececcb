# engagement/models/base.py
from sqlalchemy import MetaData, JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base
from engagement.core.config import settings

Base = declarative_base(metadata=MetaData(naming_convention=settings.db.naming_convention))

# JSONB на PostgreSQL, обычный JSON в остальных диалектах (SQLite в тестах)
JSONType = JSON().with_variant(JSONB(), "postgresql")

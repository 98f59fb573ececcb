# engagement/models/events.py
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Index
from .base import Base, JSONType

class UserEvent(Base):
    """
    Append-only журнал действий пользователя (логин, MCQ, лайки, посты...).
    Движок очков его только читает.
    """
    __tablename__ = "user_events"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    event_type = Column(String(64), nullable=False)  # login, mcq_attempt, mcq_correct, ...
    entity_type = Column(String(64), nullable=True)  # feed, job, mcq
    entity_id = Column(String(64), nullable=True)
    # атрибут не может называться metadata у declarative-моделей
    event_metadata = Column("metadata", JSONType, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_user_events_user_id_created_at", "user_id", "created_at"),
        Index("ix_user_events_user_id_event_type", "user_id", "event_type"),
    )

# engagement/models/scoring.py
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Date, UniqueConstraint, func
from sqlalchemy.orm import relationship
from .base import Base

class UserScore(Base):
    """
    Кэш очков пользователя. Источник истины - user_events,
    updated_at - момент последнего полного пересчета.
    """
    __tablename__ = "user_scores"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    total_score = Column(Integer, nullable=False, default=0)
    weekly_score = Column(Integer, nullable=False, default=0)
    monthly_score = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    user = relationship("User", back_populates="score")

class ScoreHistory(Base):
    __tablename__ = "score_history"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    period = Column(String(16), nullable=False)  # daily, weekly, monthly
    period_date = Column(Date, nullable=False)  # начало окна
    score = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "period", "period_date", name="uq_score_history_user_period_date"),
    )

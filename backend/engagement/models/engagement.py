# engagement/models/engagement.py
import enum
from datetime import datetime, timezone
from sqlalchemy import (
    Column, Integer, String, ForeignKey, DateTime, Date, Boolean, Numeric,
    UniqueConstraint, Index, func,
)
from sqlalchemy.orm import relationship
from .base import Base, JSONType

class EngagementType(str, enum.Enum):
    CARD_VIEW = "CARD_VIEW"
    MCQ_ATTEMPT = "MCQ_ATTEMPT"

class CardType(str, enum.Enum):
    CURRENT_AFFAIRS = "CURRENT_AFFAIRS"
    GENERAL_KNOWLEDGE = "GENERAL_KNOWLEDGE"
    MCQ = "MCQ"
    PERSONALITY = "PERSONALITY"
    SKILL_TRAINING = "SKILL_TRAINING"

class BadgeTier(str, enum.Enum):
    BRONZE = "BRONZE"
    SILVER = "SILVER"
    GOLD = "GOLD"
    PLATINUM = "PLATINUM"

class DailyDigestEngagement(Base):
    """Одно действие в дневном дайджесте: просмотр карточки или попытка MCQ"""
    __tablename__ = "daily_digest_engagements"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    card_id = Column(String(64), nullable=False)
    card_type = Column(String(32), nullable=False)
    engagement_type = Column(String(32), nullable=False)
    duration = Column(Integer, nullable=False, default=0)  # секунды, только для CARD_VIEW
    is_correct = Column(Boolean, nullable=True)  # только для MCQ_ATTEMPT
    date = Column(Date, nullable=False)  # логический день (UTC)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_daily_digest_engagements_user_id_date", "user_id", "date"),
        Index("ix_daily_digest_engagements_user_id_card_id_date", "user_id", "card_id", "date"),
    )

class DailyEngagementStatus(Base):
    """Материализованный итог дня: пересчитывается целиком из daily_digest_engagements"""
    __tablename__ = "daily_engagement_statuses"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    is_present = Column(Boolean, nullable=False, default=False)
    card_view_count = Column(Integer, nullable=False, default=0)
    mcq_attempt_count = Column(Integer, nullable=False, default=0)
    mcq_correct_count = Column(Integer, nullable=False, default=0)
    mcq_accuracy = Column(Numeric(5, 2), nullable=False, default=0)
    total_engagement_duration = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_daily_engagement_statuses_user_id_date"),
        Index("ix_daily_engagement_statuses_user_id_date_is_present", "user_id", "date", "is_present"),
    )

class UserBadgeStatus(Base):
    __tablename__ = "user_badge_statuses"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    current_badge = Column(String(32), nullable=True)  # rookie ... legend, NULL до 30 дней
    days_active = Column(Integer, nullable=False, default=0)
    last_calculated_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

class Badge(Base):
    """Справочник достижений. criteria: {"score": 500} / {"streak": 7} / {"engagement": {...}}"""
    __tablename__ = "badges"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)
    description = Column(String, nullable=True)
    tier = Column(String(16), nullable=False, default=BadgeTier.BRONZE.value)
    icon = Column(String, nullable=True)
    criteria = Column(JSONType, nullable=False, default=dict)

    def __repr__(self):
        return f"<Badge(id={self.id}, name={self.name})>"

class UserBadge(Base):
    """Выданный бейдж. Никогда не отзывается."""
    __tablename__ = "user_badges"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    badge_id = Column(Integer, ForeignKey("badges.id", ondelete="CASCADE"), nullable=False)
    earned_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    user = relationship("User", back_populates="badges")
    badge = relationship("Badge")

    __table_args__ = (
        UniqueConstraint("user_id", "badge_id", name="uq_user_badges_user_id_badge_id"),
    )

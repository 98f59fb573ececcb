# engagement/models/__init__.py
from .base import Base
from .user import User, UserRole
from .events import UserEvent
from .scoring import UserScore, ScoreHistory
from .engagement import (
    EngagementType, CardType, BadgeTier,
    DailyDigestEngagement, DailyEngagementStatus, UserBadgeStatus, Badge, UserBadge,
)
from .content import Post, McqQuestion
from .system import Notification

# Этот список нужен, чтобы IDE и инструменты видели, что экспортируется
__all__ = [
    "Base",
    "User", "UserRole",
    "UserEvent",
    "UserScore", "ScoreHistory",
    "EngagementType", "CardType", "BadgeTier",
    "DailyDigestEngagement", "DailyEngagementStatus", "UserBadgeStatus", "Badge", "UserBadge",
    "Post", "McqQuestion",
    "Notification",
]

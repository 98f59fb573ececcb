# engagement/core/schemas/badges.py
from pydantic import Field
from typing import Optional, Any, Dict
from datetime import datetime
from .base import CamelModel


class EngagementCriteria(CamelModel):
    connections: Optional[int] = Field(None, ge=0)
    posts: Optional[int] = Field(None, ge=0)
    mcq_attempts: Optional[int] = Field(None, ge=0)


class BadgeCriteria(CamelModel):
    score: Optional[int] = Field(None, ge=0, description="Total score threshold")
    streak: Optional[int] = Field(None, ge=0, description="Consecutive login days")
    engagement: Optional[EngagementCriteria] = None


class BadgeRead(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    tier: str
    icon: Optional[str] = None
    criteria: Dict[str, Any] = {}


class UserBadgeRead(CamelModel):
    id: int
    badge_id: int
    earned_at: datetime
    badge: BadgeRead


class BadgeProgressResponse(CamelModel):
    badge: BadgeRead
    earned: bool
    progress: int = Field(..., ge=0, le=100)
    current: int
    target: int


class BadgeStatusResponse(CamelModel):
    current_badge: Optional[str] = Field(None, description="rookie, explorer, adventurer, elite, champion, legend")
    days_active: int = Field(..., description="Present days in the last 180 days")

# engagement/core/schemas/performance.py
from pydantic import Field
from typing import List, Optional, Dict
from datetime import date, datetime
from engagement.models.engagement import EngagementType, CardType
from .base import CamelModel


# --- Очки ---
class ScoreResponse(CamelModel):
    user_id: int
    total_score: int
    weekly_score: int
    monthly_score: int
    updated_at: Optional[datetime] = None

class DailyScoreResponse(CamelModel):
    daily_score: int

class WeeklyScoreResponse(CamelModel):
    weekly_score: int

class MonthlyScoreResponse(CamelModel):
    monthly_score: int

class ScoreHistoryItem(CamelModel):
    period: str
    period_date: date
    score: int

class LeaderboardUser(CamelModel):
    id: int
    email: Optional[str] = None
    mobile: Optional[str] = None
    profile_image: Optional[str] = None

class LeaderboardEntry(CamelModel):
    rank: int
    user_id: int
    total_score: int
    weekly_score: int
    monthly_score: int
    user: LeaderboardUser

class ScorecardResponse(CamelModel):
    total_users: int
    users_with_score: int
    avg_score: float
    distribution: Dict[str, int]


# --- Дневной дайджест ---
class TrackEngagementRequest(CamelModel):
    card_id: str = Field(..., min_length=1, description="Card ID")
    duration: Optional[int] = Field(None, ge=0, description="Duration in seconds (for CARD_VIEW)")
    type: EngagementType = Field(..., description="Engagement type")
    # поле не может называться date: имя конфликтует с типом
    day: Optional[date] = Field(None, alias="date", description="Date in YYYY-MM-DD format")
    is_complete: bool = Field(..., description="CARD_VIEW: viewed long enough, MCQ_ATTEMPT: answer is correct")
    card_type: Optional[CardType] = None

class EngagementRecordedResponse(CamelModel):
    engagement_recorded: bool = True
    is_present: bool


# --- Недельный метр ---
class DayStatus(CamelModel):
    date: str
    is_present: bool
    completed: bool
    card_view_count: int
    mcq_attempt_count: int
    mcq_accuracy: float

class WeeklyMeterResponse(CamelModel):
    days_completed: int = Field(..., ge=0, le=7)
    days: List[DayStatus]

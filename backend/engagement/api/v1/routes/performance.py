# engagement/api/v1/routes/performance.py
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import logging
from engagement.core.database import db_helper
from engagement.core.exceptions import ValidationError
from engagement.core.limiter import limiter
from engagement.core.utils import get_current_user, get_admin_user
from engagement.core.schemas.badges import BadgeStatusResponse
from engagement.core.schemas.performance import (
    ScoreResponse,
    DailyScoreResponse,
    WeeklyScoreResponse,
    MonthlyScoreResponse,
    ScoreHistoryItem,
    LeaderboardEntry,
    ScorecardResponse,
    TrackEngagementRequest,
    EngagementRecordedResponse,
    WeeklyMeterResponse,
)
from engagement.models.user import User
from engagement.services.badge_service import BadgeService
from engagement.services.engagement_service import EngagementService
from engagement.services.score_service import ScoreService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/performance", tags=["performance"])


# ========== Очки ==========
@router.get("/score", response_model=ScoreResponse)
async def get_score(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    """Кэшированные очки пользователя (создаются при первом запросе)"""
    return await ScoreService(session).get_score(current_user.id)

@router.get("/score/daily", response_model=DailyScoreResponse)
async def get_daily_score(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    return {"daily_score": await ScoreService(session).compute_daily_score(current_user.id)}

@router.get("/score/weekly", response_model=WeeklyScoreResponse)
async def get_weekly_score(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    return {"weekly_score": await ScoreService(session).compute_weekly_score(current_user.id)}

@router.get("/score/monthly", response_model=MonthlyScoreResponse)
async def get_monthly_score(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    return {"monthly_score": await ScoreService(session).compute_monthly_score(current_user.id)}

@router.get("/score/history", response_model=List[ScoreHistoryItem])
async def get_score_history(
    period: str = Query("daily", description="daily, weekly или monthly"),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    return await ScoreService(session).get_score_history(current_user.id, period)

@router.get("/leaderboard", response_model=List[LeaderboardEntry])
async def get_leaderboard(
    limit: Optional[int] = Query(None, ge=1, description="Количество мест в рейтинге"),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    return await ScoreService(session).get_leaderboard(limit)

@router.get("/scorecard", response_model=ScorecardResponse)
async def get_scorecard_tracking(
    admin: User = Depends(get_admin_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    """Сводка по очкам для мониторинга (только админ)"""
    return await ScoreService(session).get_scorecard_tracking()


# ========== Дневной дайджест ==========
@router.post("/daily-digest/engagement", response_model=EngagementRecordedResponse)
@limiter.limit("120/minute")
async def track_engagement(
    request: Request,
    payload: TrackEngagementRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    """Фиксирует просмотр карточки или попытку MCQ и пересчитывает итог дня"""
    try:
        rollup = await EngagementService(session).track_engagement(
            user_id=current_user.id,
            card_id=payload.card_id,
            engagement_type=payload.type,
            is_complete=payload.is_complete,
            duration=payload.duration,
            day=payload.day,
            card_type=payload.card_type,
        )
    except ValidationError as e:
        logger.warning(f"Rejected engagement from user {current_user.id}: {e.detail}")
        raise
    return {"engagement_recorded": True, "is_present": rollup.is_present}


# ========== Недельный метр ==========
@router.get("/weekly-meter", response_model=WeeklyMeterResponse)
async def get_weekly_meter(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    """Присутствие за последние 7 дней"""
    return await EngagementService(session).get_weekly_meter(current_user.id)


# ========== Уровень за 6 месяцев ==========
@router.get("/badge-status", response_model=BadgeStatusResponse)
async def get_badge_status(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    return await BadgeService(session).get_badge_status(current_user.id)

# engagement/api/v1/routes/badges.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from engagement.core.database import db_helper
from engagement.core.utils import get_current_user
from engagement.core.schemas.badges import BadgeRead, UserBadgeRead, BadgeProgressResponse
from engagement.models.user import User
from engagement.services.badge_service import BadgeService

router = APIRouter(prefix="/badges", tags=["badges"])

@router.get("/", response_model=List[BadgeRead])
async def get_all_badges(
    session: AsyncSession = Depends(db_helper.session_getter)
):
    """Каталог бейджей: по тиру, затем по имени"""
    return await BadgeService(session).get_all_badges()

@router.get("/my-badges", response_model=List[UserBadgeRead])
async def get_my_badges(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    return await BadgeService(session).get_user_badges(current_user.id)

@router.get("/check-eligibility", response_model=List[UserBadgeRead])
async def check_eligibility(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    """Выдает заслуженные бейджи; возвращает только выданные этим вызовом"""
    return await BadgeService(session).check_badge_eligibility(current_user.id)

@router.get("/{badge_id}/progress", response_model=BadgeProgressResponse)
async def get_badge_progress(
    badge_id: int,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    return await BadgeService(session).get_badge_progress(current_user.id, badge_id)

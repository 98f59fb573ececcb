# engagement/api/v1/routes/events.py
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime
from typing import List, Optional
import logging
from engagement.core.database import db_helper
from engagement.core.limiter import limiter
from engagement.core.utils import get_current_user, get_event_source
from engagement.core.schemas.events import TrackEventRequest, EventRecordedResponse, UserEventRead
from engagement.models.user import User
from engagement.services.event_service import EventService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["events"])

@router.post("/", response_model=EventRecordedResponse)
@limiter.limit("300/minute")
async def track_event(
    request: Request,
    payload: TrackEventRequest,
    source: str = Depends(get_event_source),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    """Хук для модулей-источников (сервисный токен): записать событие пользователя"""
    logger.debug(f"Event {payload.event_type} for user {payload.user_id} from {source}")
    total_score = await EventService(session).track_event(
        user_id=payload.user_id,
        event_type=payload.event_type,
        entity_type=payload.entity_type,
        entity_id=payload.entity_id,
        metadata=payload.metadata,
    )
    return {"event_recorded": True, "total_score": total_score}

@router.get("/", response_model=List[UserEventRead])
async def get_my_events(
    event_type: Optional[str] = Query(None, alias="eventType"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    limit: int = Query(100, ge=1, le=500),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    return await EventService(session).get_user_events(
        current_user.id, event_type, start_date, end_date, limit
    )

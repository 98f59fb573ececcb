# engagement/core/schemas/events.py
from pydantic import Field
from typing import Optional, Any, Dict
from datetime import datetime
from .base import CamelModel


class TrackEventRequest(CamelModel):
    user_id: int = Field(..., ge=1, description="Whose action this is")
    event_type: str = Field(..., min_length=1, max_length=64, description="login, mcq_attempt, feed_like, ...")
    entity_type: Optional[str] = Field(None, max_length=64)
    entity_id: Optional[str] = Field(None, max_length=64)
    metadata: Optional[Dict[str, Any]] = None

class EventRecordedResponse(CamelModel):
    event_recorded: bool = True
    total_score: int

class UserEventRead(CamelModel):
    id: int
    event_type: str
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = Field(None, validation_alias="event_metadata")
    created_at: datetime

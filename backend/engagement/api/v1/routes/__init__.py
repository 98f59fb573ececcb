from fastapi import APIRouter
from .performance import router as performance_router
from .badges import router as badges_router
from .events import router as events_router


api_router = APIRouter()

api_router.include_router(performance_router)
api_router.include_router(badges_router)
api_router.include_router(events_router)

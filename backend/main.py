# main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from datetime import datetime, timezone
from contextlib import asynccontextmanager
import logging
from engagement.core.admin import setup_admin
from engagement.api.v1.routes import api_router
from engagement.core.config import settings
from engagement.core.database import db_helper
from engagement.core.handlers import register_exception_handlers
from engagement.core.limiter import limiter
from engagement.services.badge_service import BadgeService
from engagement.services.weights import default_weights

# Настройка логирования
logging.basicConfig(
    level=logging.INFO if settings.debug else logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def _masked_database_url() -> str:
    url = settings.db.DATABASE_URL
    if settings.db.DB_PASSWORD:
        url = url.replace(settings.db.DB_PASSWORD.get_secret_value(), "***")
    return url


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"🚀 Starting {settings.app_name} in {'DEBUG' if settings.debug else 'PRODUCTION'} mode")
    logger.info(f"📝 Database: {_masked_database_url()}")
    logger.info(f"🎯 Event weights: {default_weights.as_dict()}")

    # БД должна быть доступна до приема запросов; заодно досоздаем стандартные бейджи
    try:
        await db_helper.ping()
        async with db_helper.session_factory() as session:
            created = await BadgeService(session).seed_default_badges()
    except Exception as e:
        logger.error(f"❌ Startup failed: {e}")
        raise
    if created:
        logger.info(f"🏅 Seeded {created} default badges")

    setup_admin(app, db_helper.engine)

    yield

    await db_helper.dispose()
    logger.info("👋 Engagement engine stopped")

app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

app.state.limiter = limiter
register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")

@app.get("/", summary="Root endpoint", tags=["root"])
async def root():
    return {
        "message": f"Welcome to {settings.app_name} API",
        "api": "/api/v1",
        "sections": ["performance", "badges", "events"],
        "docs": "/docs" if settings.debug else None,
    }

@app.get("/health", summary="Health check", tags=["health"])
async def health_check():
    """Живость сервиса и доступность БД"""
    checked_at = datetime.now(timezone.utc).isoformat()
    try:
        await db_helper.ping()
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return {
            "status": "unhealthy",
            "timestamp": checked_at,
            "database": "connection failed",
            "error": str(e) if settings.debug else "Database connection error",
        }
    return {"status": "healthy", "timestamp": checked_at, "database": "connected"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level="info" if settings.debug else "warning",
        access_log=False
    )

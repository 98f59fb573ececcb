# engagement/core/handlers.py
from datetime import datetime, timezone
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from engagement.core.config import settings
from engagement.core.exceptions import AppException, RateLimitError

logger = logging.getLogger(__name__)


def error_response(status_code: int, error: str, detail: str, headers=None, **extra) -> JSONResponse:
    """Единый формат ошибок API: detail, error, timestamp"""
    content = {
        "detail": detail,
        "error": error,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        **extra,
    }
    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    # 4xx - ошибка клиента, не сервиса
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(f"{request.method} {request.url.path}: {type(exc).__name__}: {exc.detail}")
    return error_response(exc.status_code, type(exc).__name__, exc.detail, headers=exc.headers)


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Ответ slowapi в том же формате, что и остальные ошибки"""
    client = request.client.host if request.client else "unknown"
    logger.warning(f"Rate limit exceeded for {client} on {request.url.path}: {exc.detail}")
    return await app_exception_handler(request, RateLimitError(f"Rate limit exceeded: {exc.detail}"))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
    return error_response(
        500,
        "InternalServerError",
        "Internal server error",
        debug_info=str(exc) if settings.debug else None,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

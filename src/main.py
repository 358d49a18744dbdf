import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from src.config.cors_config import CORSConfigurationError
from src.config.logging_config import configure_logging
from src.config.settings import settings
from src.database.client import Database
from src.features.auth.cookies import clear_refresh_cookie
from src.features.auth.exceptions import AppException, ErrorKind
from src.features.auth.router import router as auth_router
from src.features.user.router import router as user_router
from src.shared.rate_limit import limiter, rate_limit_handler

configure_logging(settings)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events."""
    # Startup
    database = Database.from_settings(settings)
    await database.connect()
    app.state.database = database
    logger.info(f"{settings.app_name} started ({settings.environment})")
    yield
    # Shutdown
    await database.close()


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render deliberate errors and drop the refresh cookie when the error asks for it."""
    response = JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": exc.kind.value},
        headers=exc.headers,
    )
    if exc.clear_refresh_cookie:
        clear_refresh_cookie(response, settings)
    return response


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler: log, and hide internals in production."""
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    detail = "Internal server error" if settings.is_production else str(exc)
    response = JSONResponse(status_code=500, content={"detail": detail, "code": ErrorKind.INTERNAL.value})
    if request.url.path == f"{settings.api_prefix}/auth/refresh":
        clear_refresh_cookie(response, settings)
    return response


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    debug=settings.debug,
    lifespan=lifespan,
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc",
)

app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# Add rate limiting middleware
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
app.add_middleware(SlowAPIMiddleware)

# Configure CORS middleware with environment-aware settings
try:
    cors_config = settings.get_cors_configuration()
    cors_config.log_configuration()
    app.add_middleware(CORSMiddleware, **cors_config.get_middleware_config())
except CORSConfigurationError as exc:
    logger.error(f"CORS configuration error: {exc}")
    raise

routers: list[APIRouter] = [
    auth_router,
    user_router,
]

for router in routers:
    app.include_router(router, prefix=settings.api_prefix)


@app.get("/")
async def root():
    return {"message": settings.app_name, "status": "running"}


@app.get("/health")
async def health():
    return {"status": "ok", "timestamp": datetime.now(UTC).isoformat()}

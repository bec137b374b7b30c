"""StaffDesk — FastAPI Application Factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from staffdesk.attendance.router import router as attendance_router
from staffdesk.auth.router import router as auth_router
from staffdesk.common.exceptions import register_exception_handlers
from staffdesk.common.log_config import configure_logging
from staffdesk.common.rate_limit import limiter
from staffdesk.config import settings
from staffdesk.database import async_session_factory, engine
from staffdesk.holidays.calendar import holiday_calendar
from staffdesk.holidays.router import router as holidays_router
from staffdesk.leave.router import router as leave_router
from staffdesk.profiles.router import router as employees_router
from staffdesk.work_summary.router import router as work_summary_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    # Startup: build the non-working-day lookup once
    async with async_session_factory() as session:
        await holiday_calendar.load(session)
    logger.info("StaffDesk started (%s)", settings.ENVIRONMENT)
    yield
    # Shutdown
    await engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging()

    app = FastAPI(
        title="StaffDesk",
        description="Attendance, leave and work-summary tracking",
        version="1.0.0",
        docs_url="/api/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/api/redoc" if settings.ENVIRONMENT != "production" else None,
        lifespan=lifespan,
    )

    # Exception handlers (RFC 7807)
    register_exception_handlers(app)

    # Rate limiting (slowapi)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check (no auth)
    @app.get("/api/v1/health", tags=["system"])
    async def health_check():
        return {
            "status": "healthy",
            "version": "1.0.0",
            "environment": settings.ENVIRONMENT,
        }

    # Register routers
    app.include_router(auth_router, prefix="/api/v1/auth", tags=["auth"])
    app.include_router(employees_router, prefix="/api/v1/employees", tags=["employees"])
    app.include_router(holidays_router, prefix="/api/v1/holidays", tags=["holidays"])
    app.include_router(attendance_router, prefix="/api/v1/attendance", tags=["attendance"])
    app.include_router(leave_router, prefix="/api/v1/leave", tags=["leave"])
    app.include_router(work_summary_router, prefix="/api/v1/work-summary", tags=["work-summary"])

    return app


app = create_app()

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from api import (
    academics,
    announcements,
    audit_logs,
    auth,
    enrollment,
    exams,
    finance,
    permissions,
    roles,
    school,
    staff,
    students,
    users,
)
from core.config import Settings, get_settings
from core.database import engine, get_db
from core.error_handlers import register_exception_handlers
from core.logging import setup_logging
from core.rate_limit import limiter
from core.telemetry import setup_tracing, shutdown_tracing
from middleware.correlation import CorrelationIDMiddleware
from middleware.security import RequestSizeLimitMiddleware, SecurityHeadersMiddleware

logger = logging.getLogger(__name__)

settings = get_settings()

MAX_REQUEST_BYTES = 10 * 1024 * 1024

# (module, mount point, openapi tag)
ROUTERS = [
    (auth, "/auth", "authentication"),
    (users, "/users", "users"),
    (roles, "/roles", "roles"),
    (permissions, "/permissions", "permissions"),
    (school, "/settings", "settings"),
    (academics, "/academics", "academics"),
    (staff, "/staff", "staff"),
    (students, "/students", "students"),
    (enrollment, "", "enrollment"),
    (finance, "/finance", "finance"),
    (exams, "/examinations", "examinations"),
    (announcements, "/communication", "communication"),
    (audit_logs, "/logs", "audit-logs"),
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("Starting %s %s (%s)", settings.app_name, settings.app_version, settings.environment)

    # Tables are created by `python -m scripts.seed`
    if settings.rbac_bypass_enabled:
        logger.warning("RBAC bypass is ENABLED: every authenticated user passes every check")

    yield

    shutdown_tracing()
    await engine.dispose()
    logger.info("Shutdown complete, database connections released")


def install_middleware(app: FastAPI, config: Settings) -> None:
    """Starlette runs the last middleware added first, so CORS sees the request before anything else"""
    app.add_middleware(RequestSizeLimitMiddleware, max_request_size=MAX_REQUEST_BYTES)
    app.add_middleware(CorrelationIDMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    # Credentialed CORS needs an explicit origin list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in config.allowed_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if config.telemetry_enabled:
        setup_tracing(config, app, engine)
    else:
        logger.info("Distributed tracing disabled in configuration")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    debug=settings.debug,
    lifespan=lifespan,
)

app.state.limiter = limiter
register_exception_handlers(app)
install_middleware(app, settings)

for module, prefix, tag in ROUTERS:
    app.include_router(module.router, prefix=prefix, tags=[tag])


@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "running",
    }


@app.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """Liveness plus a database round trip; 503 when the database does not answer"""
    checks: dict[str, Any] = {"api": True, "database": False}

    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Health check database probe failed: %s", e)
        return JSONResponse(status_code=503, content={"status": "unhealthy", "checks": checks})

    checks["database"] = True
    return {"status": "healthy", "checks": checks}

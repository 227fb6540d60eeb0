"""
╔══════════════════════════════════════════════════╗
║      AfriVerse Editorial Desk                      ║
║ Editorial workflow backend for the AfriVerse       ║
║ publishing platform                                ║
║                                                   ║
║    Built with: FastAPI + PostgreSQL + Celery       ║
║    Version: 1.0.0                                  ║
╚══════════════════════════════════════════════════╝
"""

import asyncio
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from app.api.envelope import error_envelope, success_envelope, workflow_error_envelope
from app.core.config import get_settings
from app.core.correlation import (
    bind_request_context,
    clear_request_context,
    get_correlation_id,
    get_request_id,
    new_correlation_id,
    new_request_id,
)
from app.core.database import async_session, init_db
from app.core.logging import get_logger, setup_logging
from app.domain.errors import WorkflowError
from app.schemas import HealthResponse
from app.services.notification_service import notification_service
from app.services.scheduler import start_publish_scheduler, stop_publish_scheduler

# Import routers
from app.api.routes.auth import router as auth_router
from app.api.routes.content import router as content_router
from app.api.routes.cron import router as cron_router
from app.api.routes.editorial_policy import router as editorial_policy_router
from app.api.routes.notifications import router as notifications_router
from app.api.routes.workflow import router as workflow_router

settings = get_settings()
logger = get_logger("main")

# Track uptime
_start_time = time.time()
_shutdown_event = asyncio.Event()
_dispatch_task: asyncio.Task | None = None


async def _run_notification_dispatch_once():
    stats = await notification_service.dispatch_pending()
    if stats["processed"] or stats["errors"]:
        logger.info("notification_dispatch_tick_done", **stats)


async def _periodic_loop(name: str, interval_seconds: int, job):
    logger.info("periodic_loop_started", loop=name, interval_seconds=interval_seconds)
    while not _shutdown_event.is_set():
        started = time.time()
        try:
            await job()
        except Exception as exc:  # noqa: BLE001
            logger.error("periodic_loop_error", loop=name, error=str(exc))

        elapsed = int(time.time() - started)
        sleep_for = max(1, interval_seconds - elapsed)
        try:
            await asyncio.wait_for(_shutdown_event.wait(), timeout=sleep_for)
        except asyncio.TimeoutError:
            pass
    logger.info("periodic_loop_stopped", loop=name)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup & shutdown lifecycle."""

    # ── Startup ──
    setup_logging(debug=settings.app_debug)
    logger.info("app_starting", app=settings.app_name, env=settings.app_env)

    # Initialize database tables (development only)
    await init_db()
    logger.info("database_initialized")

    global _dispatch_task
    _shutdown_event.clear()
    if settings.notification_dispatch_enabled:
        _dispatch_task = asyncio.create_task(
            _periodic_loop(
                "notification_dispatch",
                max(30, settings.notification_dispatch_interval_seconds),
                _run_notification_dispatch_once,
            )
        )

    if settings.scheduled_publish_enabled:
        start_publish_scheduler()

    if not settings.cron_secret and not settings.is_development:
        logger.warning("cron_secret_missing", msg="cron endpoints will reject every call")

    logger.info("app_ready", port=settings.app_port)

    yield

    # ── Shutdown ──
    _shutdown_event.set()
    if _dispatch_task:
        _dispatch_task.cancel()
        await asyncio.gather(_dispatch_task, return_exceptions=True)
    if settings.scheduled_publish_enabled:
        stop_publish_scheduler()
    logger.info("app_shutdown")


# ── Create FastAPI App ──

app = FastAPI(
    title="AfriVerse Editorial Desk",
    description=(
        "Editorial workflow backend for AfriVerse.\n\n"
        "Writers draft and submit, editors claim, comment, approve or request changes, "
        "and approved content is published, scheduled or archived."
    ),
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS Middleware ──

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request Logging Middleware ──

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming requests with timing."""
    request_id = request.headers.get("x-request-id") or new_request_id()
    correlation_id = request.headers.get("x-correlation-id") or new_correlation_id()
    bind_request_context(request_id, correlation_id)
    start = time.time()
    response = None
    try:
        response = await call_next(request)
        return response
    finally:
        elapsed = round((time.time() - start) * 1000, 2)
        if response is not None:
            response.headers["x-request-id"] = request_id
            response.headers["x-correlation-id"] = correlation_id
            status_code = response.status_code
        else:
            status_code = 500

        if request.url.path not in ["/health", "/docs", "/redoc", "/openapi.json"]:
            logger.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                status=status_code,
                elapsed_ms=elapsed,
                request_id=get_request_id(),
                correlation_id=get_correlation_id(),
            )

        clear_request_context()


# ── Exception Handlers ──

@app.exception_handler(WorkflowError)
async def workflow_exception_handler(request: Request, exc: WorkflowError):
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "workflow_error",
        path=request.url.path,
        status_code=exc.status_code,
        code=exc.code,
        detail=exc.message,
    )
    return workflow_error_envelope(exc, path=request.url.path)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    logger.warning(
        "http_exception",
        path=request.url.path,
        status_code=exc.status_code,
        detail=str(exc.detail),
    )
    return error_envelope(
        code="http_error",
        message="Request failed",
        status_code=exc.status_code,
        details=exc.detail,
        meta={"path": request.url.path},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning("validation_error", path=request.url.path, errors=exc.errors())
    return error_envelope(
        code="validation_error",
        message="Validation failed",
        status_code=422,
        details=exc.errors(),
        meta={"path": request.url.path},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Full detail goes to the log only; callers get a generic envelope."""
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        error=str(exc),
        error_type=type(exc).__name__,
    )
    return error_envelope(
        code="internal_error",
        message="Internal server error",
        status_code=500,
        details=None,
        meta={"path": request.url.path},
    )


# ── Register Routers ──

app.include_router(auth_router, prefix="/api/v1")
app.include_router(content_router, prefix="/api/v1")
app.include_router(workflow_router, prefix="/api/v1")
app.include_router(cron_router, prefix="/api/v1")
app.include_router(notifications_router, prefix="/api/v1")
app.include_router(editorial_policy_router, prefix="/api/v1")


# ── System Endpoints ──

@app.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    database = "connected"
    try:
        async with async_session() as db:
            await db.execute(text("SELECT 1"))
    except Exception as exc:  # noqa: BLE001
        logger.warning("health_database_unavailable", error=str(exc))
        database = "unavailable"
    return HealthResponse(
        status="ok" if database == "connected" else "degraded",
        version="1.0.0",
        database=database,
        uptime_seconds=round(time.time() - _start_time, 2),
    )


@app.get("/", tags=["System"])
async def root():
    return success_envelope(
        {
            "name": settings.app_name,
            "version": "1.0.0",
            "docs": "/docs",
            "health": "/health",
        }
    )

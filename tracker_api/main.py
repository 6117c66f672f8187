from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import settings
from .db import SessionLocal, init_db
from .exceptions import AuthenticationException, DomainException
from .logging_config import configure_logging, get_logger
from .routers import analytics as analytics_router
from .routers import jobs as jobs_router
from .routers import notifications as notifications_router
from .routers import users as users_router
from .scheduler import ReminderScheduler

configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    _on_startup(app)
    try:
        yield
    finally:
        _on_shutdown(app)


def _on_startup(app: FastAPI):
    # create tables on startup (development convenience). Use migrations for prod.
    init_db()
    app.state.reminder_scheduler = None
    if not settings.SCHEDULER_ENABLED:
        logger.info("Scheduler disabled (SCHEDULER_ENABLED=false)")
        return
    scheduler = ReminderScheduler(SessionLocal)
    try:
        scheduler.start()
    except Exception:
        # do not crash the API if scheduling fails
        logger.exception("Failed to start reminder scheduler")
        return
    app.state.reminder_scheduler = scheduler


def _on_shutdown(app: FastAPI):
    scheduler = getattr(app.state, "reminder_scheduler", None)
    if scheduler is not None:
        scheduler.shutdown()
        app.state.reminder_scheduler = None


app = FastAPI(title=settings.APP_NAME, version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins or ["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["Content-Type", "Authorization"],
)

# Mount routers explicitly
for _router in (users_router, jobs_router, notifications_router, analytics_router):
    app.include_router(_router.router, prefix=settings.API_PREFIX)


# ---- Error responses: always {"error": "<message>"} ----
@app.exception_handler(DomainException)
def _domain_error(request: Request, exc: DomainException):
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationException) else None
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message}, headers=headers)


@app.exception_handler(StarletteHTTPException)
def _http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
def _validation_error(request: Request, exc: RequestValidationError):
    parts = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path"))
        parts.append(f"{field}: {err.get('msg')}" if field else str(err.get("msg")))
    return JSONResponse(status_code=400, content={"error": "; ".join(parts) or "Invalid request"})


@app.exception_handler(SQLAlchemyError)
def _store_error(request: Request, exc: SQLAlchemyError):
    logger.exception("store error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.get("/")
def root():
    return {"message": "JobTracker Backend API Working", "status": "OK"}


@app.get(f"{settings.API_PREFIX}/health")
def health():
    return {"status": "OK"}

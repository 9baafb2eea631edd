import time
import logging
import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from .infrastructure.db import engine
from .infrastructure.models import init_db
from .infrastructure.metrics import (
    metrics_endpoint,
    http_requests_total,
    http_request_duration_seconds
)
from .infrastructure.rate_limit import limiter
from .interfaces.http.routers import admin as admin_router
from .interfaces.http.routers import auth as auth_router
from .interfaces.http.routers import progress as progress_router
from .interfaces.http.routers import students as students_router
from .interfaces.http.routers import tutor as tutor_router
from .config import settings

VERSION = "0.1.0"

log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.make_filtering_bound_logger(log_level),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()

app = FastAPI(title="Student Progress Service", version=VERSION)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def observe_requests(request: Request, call_next):
    start_time = time.time()
    method = request.method

    response = await call_next(request)

    if response.headers.get("content-type", "").startswith("application/json"):
        response.headers["content-type"] = "application/json; charset=utf-8"

    # route template keeps the label set bounded
    route = request.scope.get("route")
    endpoint = getattr(route, "path", request.url.path)
    duration = time.time() - start_time
    status_code = response.status_code
    http_requests_total.labels(method=method, endpoint=endpoint, status=status_code).inc()
    http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)

    logger.info(
        "http_request",
        method=method,
        path=request.url.path,
        status_code=status_code,
        duration_ms=round(duration * 1000, 2)
    )

    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = [str(p) for p in first.get("loc", ())]
    if loc and loc[0] == "path":
        detail = f"Invalid {loc[-1]}"
    elif loc:
        detail = f"{'.'.join(loc[1:]) or loc[0]}: {first.get('msg', 'invalid value')}"
    else:
        detail = "Invalid request"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": detail})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("database_error", path=request.url.path, error=str(exc), exc_info=exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": "Internal server error"})


@app.on_event("startup")
def on_startup():
    logger.info("Starting student progress service", version=VERSION)
    init_db(engine)

    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    logger.info("Database connection established")


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/metrics")
def metrics():
    return metrics_endpoint()


app.include_router(auth_router.router)
app.include_router(students_router.router)
app.include_router(progress_router.router)
app.include_router(admin_router.router)
app.include_router(tutor_router.router)


def run() -> None:
    import uvicorn
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())

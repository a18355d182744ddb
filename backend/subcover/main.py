import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from subcover.api.routes import (
    baseline_usage,
    coverage_requests,
    health,
    sub_finder,
    teacher_schedules,
    time_off,
)
from subcover.core.config import get_settings
from subcover.core.exceptions import AppError
from subcover.core.middleware import RequestLoggingMiddleware, RequestSizeLimitMiddleware, SecurityHeadersMiddleware
from subcover.db.bootstrap import ensure_runtime_schema_compatibility

settings = get_settings()

logging.getLogger("subcover").setLevel(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.bootstrap_schema_on_startup:
        ensure_runtime_schema_compatibility()
    logger.info("%s started", settings.project_name)
    yield


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "details": exc.details},
    )


app = FastAPI(title=settings.project_name, lifespan=lifespan)
app.add_exception_handler(AppError, app_error_handler)

app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_size_bytes)
app.add_middleware(SecurityHeadersMiddleware, settings=settings)
if settings.log_requests:
    app.add_middleware(RequestLoggingMiddleware, school_header_name=settings.school_header_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix=settings.api_prefix, tags=["health"])
app.include_router(sub_finder.router, prefix=settings.api_prefix, tags=["sub-finder"])
app.include_router(time_off.router, prefix=settings.api_prefix, tags=["time-off"])
app.include_router(coverage_requests.router, prefix=settings.api_prefix, tags=["coverage-requests"])
app.include_router(teacher_schedules.router, prefix=settings.api_prefix, tags=["teacher-schedules"])
app.include_router(baseline_usage.router, prefix=settings.api_prefix, tags=["baseline-usage"])

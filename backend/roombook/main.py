import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError

from roombook.api.routes import bookings, health, rooms, scheduler, time_slots
from roombook.core.config import get_settings
from roombook.core.exceptions import AppError, StorageUnavailable
from roombook.core.logging_config import setup_logging
from roombook.core.middleware import RequestLoggingMiddleware, RequestSizeLimitMiddleware, SecurityHeadersMiddleware
from roombook.db.bootstrap import ensure_runtime_schema
from roombook.db.session import engine

settings = get_settings()
setup_logging(settings)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.auto_create_schema:
        ensure_runtime_schema(engine)
    yield


async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "code": exc.code, "details": exc.details},
    )


async def storage_error_handler(request: Request, exc: DBAPIError):
    logger.error("Storage failure during %s %s", request.method, request.url.path, exc_info=exc)
    return await app_error_handler(request, StorageUnavailable())


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error during %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


app = FastAPI(title=settings.project_name, lifespan=lifespan)
app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(DBAPIError, storage_error_handler)
app.add_exception_handler(Exception, unhandled_error_handler)

app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_size_bytes)
app.add_middleware(SecurityHeadersMiddleware, settings=settings)
app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix=settings.api_prefix, tags=["health"])
app.include_router(rooms.router, prefix=f"{settings.api_prefix}/rooms", tags=["rooms"])
app.include_router(time_slots.router, prefix=f"{settings.api_prefix}/time-slots", tags=["time-slots"])
app.include_router(bookings.router, prefix=f"{settings.api_prefix}/bookings", tags=["bookings"])
app.include_router(scheduler.router, prefix=f"{settings.api_prefix}/scheduler", tags=["scheduler"])

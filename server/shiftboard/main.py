"""
ShiftBoard API application.
"""
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import time
import logging

from shiftboard.core.config import settings
from shiftboard.core.database import engine
from shiftboard.api.v1.router import api_router
from shiftboard.core.logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)
access_logger = logging.getLogger("access")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Schema is managed by Alembic (run_migrations.py)
    logger.info(f"ShiftBoard API started ({settings.ENVIRONMENT})")
    yield
    await engine.dispose()
    logger.info("ShiftBoard API stopped")


app = FastAPI(
    title="ShiftBoard API",
    description="Multi-location shift scheduling, timeclock and attendance",
    version="1.0.0",
    lifespan=lifespan,
)


def _client_host(request: Request) -> str:
    return request.client.host if request.client else "unknown"


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        logger.error(
            f"Unhandled exception in {request.method} {request.url.path}",
            exc_info=True,
            extra={
                "method": request.method,
                "path": request.url.path,
                "client": _client_host(request),
                "duration": f"{time.perf_counter() - started:.3f}s",
            },
        )
        raise

    access_logger.info(
        f"{request.method} {request.url.path} {response.status_code} "
        f"{time.perf_counter() - started:.3f}s {_client_host(request)}"
    )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Field-by-field report of a malformed request body or parameter."""
    errors = []
    for error in exc.errors():
        field = " -> ".join(str(loc) for loc in error["loc"] if loc not in ("body", "query", "path"))
        message = f"{field} is required" if error["type"] == "missing" else error["msg"]
        errors.append({"field": field, "message": message, "type": error["type"]})

    logger.info(f"Validation failed on {request.method} {request.url.path}: {[e['field'] for e in errors]}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": "Validation error", "errors": errors},
    )


app.include_router(api_router, prefix="/api/v1")

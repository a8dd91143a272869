"""Taskboard API — FastAPI entry point.

Registers middleware, routers, exception handlers and lifecycle hooks. The
Database and TagCache are explicit objects created here, opened in the
lifespan and exposed to dependencies through ``app.state``.
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.middleware import RequestContextMiddleware
from core.cache import TagCache
from core.database import Database
from core.logging_setup import setup_logging
from core.settings import Settings
from features.tasks.models.schemas import TaskValidationError, format_errors
from features.tasks.router import router as tasks_router
from patterns.repository import RepositoryError

logger = logging.getLogger(__name__)

VERSION = "0.1.0"
INVALID_INPUT = "Invalid input"


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database on startup, dispose of it on shutdown."""
    settings: Settings = app.state.settings
    setup_logging(settings.log_level)
    await app.state.database.connect()
    logger.info("Taskboard API started")
    yield
    await app.state.database.close()
    logger.info("Taskboard API shutting down")


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------

async def _request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": INVALID_INPUT, "details": format_errors(exc.errors())},
    )


async def _task_validation_handler(request: Request, exc: TaskValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": INVALID_INPUT, "details": exc.errors},
    )


async def _repository_error_handler(request: Request, exc: RepositoryError):
    logger.error(
        "%s %s failed: %s",
        request.method,
        request.url.path,
        exc.message,
        exc_info=exc.cause or exc,
    )
    return JSONResponse(status_code=500, content={"error": exc.summary})


async def _http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

def create_app(
    settings: Settings | None = None,
    database: Database | None = None,
    cache: TagCache | None = None,
) -> FastAPI:
    settings = settings or Settings.from_env()

    app = FastAPI(
        title="Taskboard",
        description="Personal task board: task persistence, validation and CRUD API",
        version=VERSION,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database or Database.from_settings(settings)
    app.state.cache = cache or TagCache(ttl_seconds=settings.cache_ttl_seconds)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request id + access log
    app.add_middleware(RequestContextMiddleware)

    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(TaskValidationError, _task_validation_handler)
    app.add_exception_handler(RepositoryError, _repository_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)

    app.include_router(tasks_router, tags=["Tasks"])

    # -----------------------------------------------------------------------
    # Health & root
    # -----------------------------------------------------------------------

    @app.get("/health")
    async def health(request: Request):
        return {
            "status": "healthy" if request.app.state.database.is_connected else "degraded",
            "version": VERSION,
            "cache": request.app.state.cache.stats().to_dict(),
        }

    @app.get("/")
    async def root():
        return {
            "name": "Taskboard",
            "version": VERSION,
            "docs": "/docs",
        }

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve ``app`` with uvicorn."""
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
    )

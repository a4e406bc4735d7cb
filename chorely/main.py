"""Chorely Server - FastAPI Application Entry Point."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from chorely import __version__
from chorely.config import settings
from chorely.database import Database
from chorely.errors import ChoreError, Unavailable
from chorely.logging_config import setup_logging
from chorely.services.catalog_service import seed_default_categories

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def _error_response(exc: ChoreError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


def create_app(db_url: Optional[str] = None) -> FastAPI:
    """Build the application around an explicitly constructed Database."""
    db = Database(
        db_url or settings.database_url,
        echo=settings.debug,
        timeout=settings.db_timeout_seconds,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize database and seed the category catalog on startup."""
        db.init()
        with db.session() as session:
            seed_default_categories(session)
        yield
        db.close()

    app = FastAPI(
        title="Chorely",
        description="Household chore tracking for families",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.db = db

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ChoreError)
    async def chore_error_handler(request: Request, exc: ChoreError):
        return _error_response(exc)

    @app.exception_handler(OperationalError)
    async def storage_error_handler(request: Request, exc: OperationalError):
        logger.error("Storage unavailable on %s %s: %s", request.method, request.url.path, exc)
        return _error_response(Unavailable("Storage is unavailable, try again later"))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    # --- Register API routers ---
    from chorely.api.activities import router as activities_router
    from chorely.api.auth import router as auth_router
    from chorely.api.family import router as family_router
    from chorely.api.system import router as system_router

    app.include_router(auth_router, prefix=API_PREFIX)
    app.include_router(family_router, prefix=API_PREFIX)
    app.include_router(activities_router, prefix=API_PREFIX)
    app.include_router(system_router, prefix=API_PREFIX)

    return app


setup_logging()
app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run("chorely.main:app", host=settings.host, port=settings.port)

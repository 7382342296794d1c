"""
FastAPI application for the MYFC bookmark API.

Usage:
    uvicorn myfc.api.main:create_app --factory --host 0.0.0.0 --port 8000
"""

from contextlib import asynccontextmanager

import peewee
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError as PydanticValidationError

from myfc import __version__
from myfc.api.error_handlers import (
    api_exception_handler,
    database_exception_handler,
    global_exception_handler,
    validation_exception_handler,
)
from myfc.api.exceptions import APIException
from myfc.api.middleware import correlation_id_middleware
from myfc.api.models.responses import success_response
from myfc.api.routers import bookmarks, user
from myfc.config import AppConfig, load_config
from myfc.core.logging_utils import get_logger
from myfc.core.time_utils import utc_now
from myfc.db.database import Database
from myfc.infrastructure.cache import SessionCache

logger = get_logger(__name__)


def create_app(cfg: AppConfig | None = None, db: Database | None = None) -> FastAPI:
    """Build the API application.

    Args:
        cfg: Application config; loaded from the environment when omitted
        db: Bookmark database; opened and migrated from ``cfg.runtime.db_path``
            when omitted, and then closed on shutdown
    """
    cfg = cfg or load_config()
    owns_db = db is None
    if db is None:
        db = Database(
            path=cfg.runtime.db_path, operation_timeout=cfg.runtime.db_operation_timeout_sec
        )
        db.migrate()
        logger.info("database_initialized", extra={"db_path": cfg.runtime.db_path})

    if not cfg.auth.jwt_secret_key:
        logger.warning("jwt_secret_missing", extra={"detail": "all authenticated routes fail"})

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        try:
            yield
        finally:
            if owns_db:
                db.close()

    app = FastAPI(
        title="MYFC Bookmark API",
        description="Workout bookmarks for signed-in MYFC users",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.cfg = cfg
    app.state.db = db
    app.state.session_cache = SessionCache.from_config(cfg.auth)

    logger.info("cors_configured", extra={"allowed_origins": list(cfg.auth.allowed_origins)})
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cfg.auth.allowed_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=[
            "Authorization",
            "Content-Type",
            "Cache-Control",
            "Pragma",
            "X-Correlation-ID",
        ],
        max_age=3600,  # Cache preflight for 1 hour
    )
    app.middleware("http")(correlation_id_middleware)

    app.include_router(bookmarks.router, prefix="/api/bookmarks", tags=["Bookmarks"])
    app.include_router(user.router, prefix="/api/user", tags=["User"])

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        return success_response(
            {
                "status": "healthy",
                "timestamp": utc_now().isoformat().replace("+00:00", "Z"),
            },
            correlation_id=getattr(request.state, "correlation_id", None),
        )

    app.add_exception_handler(APIException, api_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(PydanticValidationError, validation_exception_handler)
    app.add_exception_handler(peewee.DatabaseError, database_exception_handler)
    app.add_exception_handler(TimeoutError, database_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    return app


if __name__ == "__main__":
    import uvicorn

    # Development server - bind to all interfaces for Docker/container access
    uvicorn.run(
        "myfc.api.main:create_app",
        factory=True,
        # nosec B104 - intentional for development/Docker environments
        host="0.0.0.0",
        port=8000,
        log_level="info",
    )

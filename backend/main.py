from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.exc import OperationalError as SAOperationalError

from api.router import api_router
from conflicts.violations import MalformedScheduleError
from core.config import settings
from core.database import DatabaseUnavailableError, ENGINE, is_transient_db_connectivity_error
from core.exceptions import AppError
from core.logging import setup_logging


logger = logging.getLogger(__name__)


def _error(status_code: int, code: str, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"code": code, "message": message, **extra})


def _db_unavailable() -> JSONResponse:
    return _error(503, "DATABASE_UNAVAILABLE", "Database temporarily unavailable. Please retry.")


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    def _app_error(_request, exc: AppError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_content())

    @app.exception_handler(MalformedScheduleError)
    def _malformed(_request, exc: MalformedScheduleError):
        return _error(422, "MALFORMED_SCHEDULE", exc.message, field=exc.field)

    @app.exception_handler(IntegrityError)
    def _integrity(_request, exc: IntegrityError):
        logger.warning("Integrity error (409): %s", exc.orig)
        return _error(409, "INTEGRITY_CONFLICT", "The change conflicts with existing data.")

    @app.exception_handler(DatabaseUnavailableError)
    def _unavailable(_request, exc: DatabaseUnavailableError):
        logger.warning("Database unavailable (503)", exc_info=exc)
        return _db_unavailable()

    @app.exception_handler(SAOperationalError)
    def _operational(_request, exc: SAOperationalError):
        if is_transient_db_connectivity_error(exc):
            logger.warning("Database transient connectivity error (503)", exc_info=exc)
            return _db_unavailable()
        logger.error("Database operation failed", exc_info=exc)
        return _error(500, "DATABASE_ERROR", "Database operation failed.")


def configure_cors(app: FastAPI, *, is_production: bool) -> None:
    # Outside production any localhost port may call the API.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_origin],
        allow_origin_regex=None if is_production else r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def create_app() -> FastAPI:
    setup_logging(environment=settings.environment, level=settings.log_level)
    is_production = settings.environment == "production"
    app = FastAPI(
        title="Schedule Conflict API",
        version="0.1.0",
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
        openapi_url=None if is_production else "/openapi.json",
    )

    register_exception_handlers(app)
    configure_cors(app, is_production=is_production)

    @app.get("/health")
    def health() -> dict:
        try:
            with ENGINE.connect() as conn:
                conn.execute(text("SELECT 1"))
            db_status = "ok"
        except SAOperationalError:
            db_status = "down"
        return {"app": "ok", "database": db_status, "write_guard": settings.write_guard}

    app.include_router(api_router, prefix="/api")
    logger.info("Schedule API ready (env=%s, write_guard=%s)", settings.environment, settings.write_guard)
    return app


app = create_app()

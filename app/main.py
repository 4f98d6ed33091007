import logging
from datetime import date

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from .core.config import get_settings, Settings
from .core.logging import init_logging, request_context_middleware
from .db.migrate import apply_migrations
from .db.seed import seed_demo_records
from .core import errors
from .routers import records, summary
from .services.currency import build_converter

DEMO_OWNER_ID = 1


def create_app(settings_override: Settings | None = None) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment (e.g., temp DB). Falls back to cached get_settings().
    """
    settings = settings_override or get_settings()
    if settings.db_path is None:
        settings.init_post_load()
    init_logging(debug=settings.debug)
    logger = logging.getLogger("app")

    # Fail fast on inconsistent rate configuration
    converter = build_converter(settings)

    try:
        apply_migrations(settings.db_path)  # type: ignore[arg-type]
    except Exception:
        logger.exception("failed to apply migrations on startup")
        raise
    if settings.seed_demo_data:
        added = seed_demo_records(
            settings.db_path, DEMO_OWNER_ID, date.today().replace(day=1)  # type: ignore[arg-type]
        )
        logger.info("seeded %d demo records for owner %d", added, DEMO_OWNER_ID)

    app = FastAPI(
        title=settings.app_name, debug=settings.debug, version=settings.version
    )
    app.state.settings = settings
    app.state.converter = converter

    # Middleware (request id / structured logging)
    app.middleware("http")(request_context_middleware)

    # Error handlers
    app.add_exception_handler(errors.LedgerError, errors.ledger_error_handler)
    app.add_exception_handler(StarletteHTTPException, errors.http_error_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(records.router)
    app.include_router(summary.router)

    @app.get("/")
    async def root():
        return {"message": "Expense Ledger API", "version": settings.version}

    return app

"""FastAPI application."""

from typing import Optional

from fastapi import FastAPI

from sieledger.api.errors import register_error_handlers
from sieledger.api.routes import monthly_close, sie, verifications
from sieledger.config.logging import configure_logging
from sieledger.config.settings import Settings, get_settings
from sieledger.database.base import Database
from sieledger.database.factories import create_database


def create_app(db: Optional[Database] = None, settings: Optional[Settings] = None) -> FastAPI:
    """Build the API around a database.

    Args:
        db: Database instance. Created from settings when omitted.
        settings: Settings override, mainly for tests
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_format)

    if db is None:
        db = create_database()
        db.connect()
        db.initialize_schema()

    app = FastAPI(title="sieledger API", version="0.1.0")
    app.state.db = db
    app.state.settings = settings

    register_error_handlers(app)
    app.include_router(sie.router)
    app.include_router(monthly_close.router)
    app.include_router(verifications.router)

    @app.get("/healthz")
    def healthz() -> dict[str, str]:
        return {"status": "ok"}

    return app

"""FastAPI dependencies."""

from fastapi import Depends, Request

from sieledger.api.auth import decode_user_id, get_bearer_token
from sieledger.config.settings import Settings, get_settings
from sieledger.database.base import Database
from sieledger.domain.errors import UnauthorizedError, unauthorized


def get_db(request: Request) -> Database:
    return request.app.state.db


def get_app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def get_current_user_id(
    request: Request, settings: Settings = Depends(get_app_settings)
) -> str:
    """Authenticated user ID. Raises UnauthorizedError before any work is done."""
    token = get_bearer_token(request)
    if not token:
        raise UnauthorizedError(unauthorized())
    user_id = decode_user_id(token, settings)
    if not user_id:
        raise UnauthorizedError(unauthorized())
    return user_id

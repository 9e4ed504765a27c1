"""Bearer token authentication.

Tokens are issued by the hosted auth provider and signed with a shared
secret. The ``sub`` claim carries the user ID.
"""

from typing import Optional

import jwt
from fastapi import Request

from sieledger.config.logging import get_logger
from sieledger.config.settings import Settings

logger = get_logger(__name__)


def get_bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.lower().startswith("bearer "):
        return auth_header.split(" ", 1)[1].strip() or None
    return None


def decode_user_id(token: str, settings: Settings) -> Optional[str]:
    """Return the user ID from a token, or None if it doesn't verify."""
    options = {} if settings.jwt_audience else {"verify_aud": False}
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret.get_secret_value(),
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            options=options,
        )
    except jwt.PyJWTError as e:
        logger.info("token_rejected", reason=str(e))
        return None

    user_id = payload.get("sub")
    if not user_id:
        return None
    return str(user_id)


def create_token(user_id: str, settings: Settings, **claims) -> str:
    """Sign a token for a user. Used by tests and local tooling."""
    payload = {"sub": user_id, **claims}
    if settings.jwt_audience and "aud" not in payload:
        payload["aud"] = settings.jwt_audience
    return jwt.encode(
        payload,
        settings.jwt_secret.get_secret_value(),
        algorithm=settings.jwt_algorithm,
    )

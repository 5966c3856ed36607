"""FastAPI auth dependencies — the access guard.

Learn: These are used as Depends() in route handlers to extract
and validate the current identity from the request. The flow is:

1. No "Authorization: Bearer <token>" header → 401 "token missing"
2. Token fails verification (bad signature, expired, garbage) → 401
   "token invalid". The reason is logged, never returned.
3. Otherwise → CurrentIdentity(user_id=...), handed to the handler
   as an ordinary parameter.

The guard also tries to load the user record for convenience. That
lookup is allowed to fail (user deleted after the token was issued,
database hiccup); only user_id is guaranteed.
"""

import uuid
from typing import Optional

import structlog
from fastapi import Depends, Header, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.auth.jwt import TokenError, TokenService
from taskhub.db.engine import get_db
from taskhub.db.models import User
from taskhub.errors import Unauthorized
from taskhub.schemas.user import UserRead

logger = structlog.get_logger()


class CurrentIdentity:
    """Represents the authenticated user making the request.

    Learn: This is the request-scoped auth context. All downstream code
    uses user_id to scope queries; user is a best-effort copy of the
    account (no password hash) and may be None.
    """

    def __init__(self, user_id: uuid.UUID, user: Optional[UserRead] = None):
        self.user_id = user_id
        self.user = user


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if authorization and authorization.startswith("Bearer "):
        return authorization[7:].strip() or None
    return None


async def get_current_user(
    authorization: Optional[str] = Header(None),
    tokens: TokenService = Depends(get_token_service),
    db: AsyncSession = Depends(get_db),
) -> CurrentIdentity:
    """Extract current identity (required — 401 if no valid token)."""
    token = _bearer_token(authorization)
    if not token:
        raise Unauthorized("Not authorized, token missing")

    try:
        user_id = uuid.UUID(tokens.verify(token))
    except (TokenError, ValueError) as e:
        logger.info("auth.token_rejected", reason=str(e))
        raise Unauthorized("Not authorized, token invalid")

    structlog.contextvars.bind_contextvars(user_id=str(user_id))
    return CurrentIdentity(user_id=user_id, user=await _load_user(db, user_id))


async def _load_user(db: AsyncSession, user_id: uuid.UUID) -> Optional[UserRead]:
    """Best-effort hydration of the user record."""
    try:
        user = await db.get(User, user_id)
    except SQLAlchemyError as e:
        logger.warning("auth.user_lookup_failed", user_id=str(user_id), error=str(e))
        await db.rollback()
        return None
    if not user:
        logger.info("auth.user_missing", user_id=str(user_id))
        return None
    return UserRead.model_validate(user)

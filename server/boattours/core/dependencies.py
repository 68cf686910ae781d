"""FastAPI dependencies for database sessions, authentication, and collaborators."""

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Optional

import jwt
from fastapi import Depends, Header
from jwt import PyJWTError
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain.actor import Actor
from ..gateways.base import PaymentGateway
from ..gateways.simulated import SimulatedGateway
from ..models.user import UserRole
from ..services.notification_service import NotificationEmitter
from .config import settings
from .database import async_session_factory, get_async_session
from .exceptions import AuthenticationError

JWT_ALGORITHM = "HS256"


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Database dependency that provides async database sessions.

    Yields:
        AsyncSession: Database session
    """
    async for session in get_async_session():
        yield session


def get_notifier() -> NotificationEmitter:
    """Notification emitter writing through its own sessions."""
    return NotificationEmitter(async_session_factory)


_gateway = SimulatedGateway()


def get_payment_gateway() -> PaymentGateway:
    return _gateway


def create_access_token(user_id: int, role: UserRole, expires_in: Optional[timedelta] = None) -> str:
    """
    Issue a bearer token for a user.

    Tokens are normally issued by the identity provider; this is used by the
    seed script and tests.
    """
    payload = {"sub": str(user_id), "role": UserRole(role).value}
    if expires_in is not None:
        payload["exp"] = datetime.now(timezone.utc) + expires_in
    return jwt.encode(payload, settings.bearer_token_secret, algorithm=JWT_ALGORITHM)


async def get_current_actor(
    authorization: Optional[str] = Header(None, alias="Authorization")
) -> Actor:
    """
    Authentication dependency that turns a Bearer token into an Actor.

    Args:
        authorization: Authorization header with Bearer token

    Returns:
        Actor: Acting user id and role from the validated token

    Raises:
        AuthenticationError: If the token is missing, malformed, expired or invalid
    """
    if not authorization:
        raise AuthenticationError(detail="Authorization header missing")

    try:
        scheme, token = authorization.split()
    except ValueError:
        raise AuthenticationError(detail="Invalid authorization header format")

    if scheme.lower() != "bearer":
        raise AuthenticationError(detail="Invalid authentication scheme")

    try:
        payload = jwt.decode(
            token,
            settings.bearer_token_secret,
            algorithms=[JWT_ALGORITHM]
        )
    except PyJWTError as e:
        raise AuthenticationError(detail=f"Token validation failed: {str(e)}")

    user_id = payload.get("sub")
    role = payload.get("role")
    if user_id is None or role is None:
        raise AuthenticationError(detail="Invalid token payload")

    try:
        return Actor(user_id=int(user_id), role=UserRole(role))
    except ValueError:
        raise AuthenticationError(detail="Invalid token payload")


# Reusable dependency markers
DatabaseSession = Depends(get_db)
CurrentActor = Depends(get_current_actor)
Notifier = Depends(get_notifier)
Gateway = Depends(get_payment_gateway)

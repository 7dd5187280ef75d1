# This project was developed with assistance from AI tools.
"""Actor self-service access tokens.

Each actor gets an unguessable token embedded in a portal link. Tokens are
reused while valid; ``renew=True`` always issues a new one (used after a
replacement so the previous person's link stops working).
"""

import logging
import secrets
from datetime import UTC, datetime, timedelta

from db.enums import ActorType
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.errors import AlreadyCompleteError, ErrorCode, NotFoundError, TokenError
from ..schemas.actor import ActorTokenResponse
from .actor_config import get_descriptor
from .transaction import atomic

logger = logging.getLogger(__name__)


def generate_token() -> str:
    return secrets.token_urlsafe(32)


def build_actor_url(actor_type: ActorType, token: str) -> str:
    path = get_descriptor(actor_type).portal_path
    return f"{settings.APP_BASE_URL.rstrip('/')}/actor/{path}/{token}"


def _is_valid(actor, now: datetime) -> bool:
    return bool(actor.access_token) and actor.token_expiry is not None and actor.token_expiry > now


def assign_token(actor, *, renew: bool = False, now: datetime | None = None) -> bool:
    """Set a fresh token on ``actor`` unless a valid one exists.

    Returns True when a new token was written. The caller commits.
    """
    now = now or datetime.now(UTC)
    if not renew and _is_valid(actor, now):
        return False
    actor.access_token = generate_token()
    actor.token_expiry = now + timedelta(days=settings.ACTOR_TOKEN_EXPIRATION_DAYS)
    return True


def clear_token(actor) -> None:
    actor.access_token = None
    actor.token_expiry = None


async def generate_actor_token(
    session: AsyncSession,
    actor_type: ActorType,
    actor_id: int,
    *,
    renew: bool = False,
) -> ActorTokenResponse:
    """Issue (or reuse) the portal token for one actor and commit it."""
    descriptor = get_descriptor(actor_type)
    actor = await session.get(descriptor.model, actor_id)
    if actor is None:
        raise NotFoundError(f"{descriptor.label} {actor_id} not found")

    async with atomic(session, "generate_actor_token"):
        created = assign_token(actor, renew=renew)

    if created:
        logger.info("Issued access token for %s %s", actor_type, actor_id)
    return ActorTokenResponse(
        actor_type=descriptor.actor_type,
        actor_id=actor.id,
        token=actor.access_token,
        expires_at=actor.token_expiry,
        url=build_actor_url(descriptor.actor_type, actor.access_token),
    )


async def validate_actor_token(
    session: AsyncSession,
    actor_type: ActorType,
    token: str,
    *,
    allow_complete: bool = False,
):
    """Resolve a portal token to its actor row (with relations loaded).

    Raises:
        TokenError: unknown token (INVALID_TOKEN) or past expiry (TOKEN_EXPIRED).
        AlreadyCompleteError: actor already submitted and ``allow_complete`` is False.
    """
    descriptor = get_descriptor(actor_type)
    model = descriptor.model
    result = await session.execute(
        select(model).where(model.access_token == token).options(*descriptor.load_options())
    )
    actor = result.scalar_one_or_none()
    if actor is None:
        raise TokenError("Token inválido")
    if actor.token_expiry is None or actor.token_expiry <= datetime.now(UTC):
        raise TokenError("Token expirado", code=ErrorCode.TOKEN_EXPIRED)
    if actor.information_complete and not allow_complete:
        raise AlreadyCompleteError(
            f"{descriptor.label} {actor.id} already submitted",
            context={"actor_type": descriptor.actor_type.value, "actor_id": actor.id},
        )
    return actor

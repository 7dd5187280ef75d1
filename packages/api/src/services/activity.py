# This project was developed with assistance from AI tools.
"""Policy activity log.

Append-only trail of everything that happens to a policy (status changes,
submissions, reviews, replacements). Rows are written inside the caller's
transaction and never updated afterwards.
"""

import logging

from db import PolicyActivity
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .transaction import atomic

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "system"


async def log_policy_activity(
    session: AsyncSession,
    *,
    policy_id: int,
    action: str,
    description: str,
    details: dict | None = None,
    performed_by: str | None = None,
    performed_by_type: str = "user",
    ip_address: str | None = None,
) -> PolicyActivity:
    """Append one activity row.

    Args:
        session: Database session (caller owns the transaction).
        policy_id: Policy the activity belongs to.
        action: Machine-readable action, e.g. ``status_changed``.
        description: Human-readable summary.
        details: JSON-serializable payload.
        performed_by: User id, actor label, or ``"system"``.
        performed_by_type: ``user``, ``actor``, or ``system``.
        ip_address: Client address when the action came from a request.

    Returns:
        The flushed PolicyActivity row.
    """
    activity = PolicyActivity(
        policy_id=policy_id,
        action=action,
        description=description,
        details=details,
        performed_by=performed_by,
        performed_by_type=performed_by_type,
        ip_address=ip_address,
    )
    session.add(activity)
    await session.flush()
    logger.debug("Activity %s logged for policy %s", action, policy_id)
    return activity


async def get_policy_activities(
    session: AsyncSession,
    policy_id: int,
    *,
    action: str | None = None,
    limit: int = 100,
) -> list[PolicyActivity]:
    """Most recent activities first, optionally filtered by action."""
    stmt = (
        select(PolicyActivity)
        .where(PolicyActivity.policy_id == policy_id)
        .order_by(PolicyActivity.created_at.desc(), PolicyActivity.id.desc())
        .limit(limit)
    )
    if action is not None:
        stmt = stmt.where(PolicyActivity.action == action)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def record_policy_activity(session: AsyncSession, **kwargs) -> PolicyActivity:
    """``log_policy_activity`` in its own transaction, for post-commit follow-ups."""
    async with atomic(session, f"log {kwargs.get('action', 'activity')}"):
        return await log_policy_activity(session, **kwargs)

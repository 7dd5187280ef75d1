# This project was developed with assistance from AI tools.
"""Policy service: create, fetch and list policies within the caller's scope."""

import logging
import secrets
import string
from datetime import UTC, datetime

from db import Landlord, Policy
from db.enums import ActorType, PolicyStatus
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.config import settings
from ..core.errors import NotFoundError
from ..schemas.auth import UserContext
from ..schemas.policy import PolicyCreate
from . import notifications
from .activity import log_policy_activity
from .actors import build_actor
from .scope import apply_data_scope
from .tokens import assign_token
from .transaction import PostCommitActions, atomic
from .workflow import apply_transition, iter_policy_actors

logger = logging.getLogger(__name__)

_NUMBER_ALPHABET = string.ascii_uppercase + string.digits


def generate_policy_number(now: datetime | None = None) -> str:
    """``POL-YYYYMMDD-XXXXX``."""
    now = now or datetime.now(UTC)
    suffix = "".join(secrets.choice(_NUMBER_ALPHABET) for _ in range(5))
    return f"POL-{now:%Y%m%d}-{suffix}"


def _detail_options() -> list:
    return [
        selectinload(Policy.tenant),
        selectinload(Policy.landlords),
        selectinload(Policy.joint_obligors),
        selectinload(Policy.avals),
        selectinload(Policy.investigation),
    ]


async def create_policy(
    session: AsyncSession,
    data: PolicyCreate,
    user: UserContext,
    *,
    notifier: notifications.Notifier | None = None,
) -> Policy:
    """Create a DRAFT policy with its actor stubs.

    The first landlord is the primary one. With ``send_invitations`` the
    policy moves to COLLECTING_INFO in the same transaction and every actor
    is e-mailed their portal link after commit.
    """
    post_commit = PostCommitActions()

    async with atomic(session, "create_policy"):
        policy = Policy(
            policy_number=generate_policy_number(),
            status=PolicyStatus.DRAFT,
            guarantor_type=data.guarantor_type,
            rent_amount=data.rent_amount,
            contract_length=data.contract_length or settings.DEFAULT_CONTRACT_LENGTH_MONTHS,
            property_address=data.property_address,
            created_by=user.user_id,
            managed_by=user.user_id,
            manager_email=data.manager_email or user.email or None,
            current_step="creation",
            investigation=None,
        )
        policy.tenant = build_actor(ActorType.TENANT, data.tenant)
        policy.landlords = [
            build_actor(ActorType.LANDLORD, stub, is_primary=index == 0)
            for index, stub in enumerate(data.landlords)
        ]
        policy.joint_obligors = [build_actor(ActorType.JOINT_OBLIGOR, stub) for stub in data.joint_obligors]
        policy.avals = [build_actor(ActorType.AVAL, stub) for stub in data.avals]
        session.add(policy)
        await session.flush()

        await log_policy_activity(
            session,
            policy_id=policy.id,
            action="policy_created",
            description=f"Póliza {policy.policy_number} creada",
            details={
                "guarantor_type": policy.guarantor_type.value,
                "landlords": len(policy.landlords),
                "joint_obligors": len(policy.joint_obligors),
                "avals": len(policy.avals),
            },
            performed_by=user.user_id,
        )

        if data.send_invitations:
            actors = list(iter_policy_actors(policy))
            for _, actor in actors:
                assign_token(actor)
            await apply_transition(
                session,
                policy,
                PolicyStatus.COLLECTING_INFO,
                performed_by=user.user_id,
                notes="Invitaciones enviadas",
            )
            if notifier is not None:
                for actor_type, actor in actors:
                    post_commit.add(
                        f"invite {actor_type.value} {actor.email}",
                        _invitation(notifier, actor_type, actor, policy.policy_number),
                    )

    await post_commit.run()
    logger.info("Policy %s created by %s", policy.policy_number, user.user_id)
    return await get_policy(session, policy.id, user)


def _invitation(notifier, actor_type, actor, policy_number):
    return lambda: notifications.send_actor_invitation(notifier, actor_type, actor, policy_number)


async def get_policy(session: AsyncSession, policy_id: int, user: UserContext) -> Policy:
    """Policy with its actors, or NotFoundError when missing or out of scope."""
    stmt = select(Policy).where(Policy.id == policy_id).options(*_detail_options())
    stmt = apply_data_scope(stmt, user.data_scope)
    result = await session.execute(stmt)
    policy = result.scalar_one_or_none()
    if policy is None:
        raise NotFoundError(f"Policy {policy_id} not found", context={"policy_id": policy_id})
    return policy


async def list_policies(
    session: AsyncSession,
    user: UserContext,
    *,
    offset: int = 0,
    limit: int = 20,
    status: PolicyStatus | None = None,
    search: str | None = None,
) -> tuple[list[Policy], int]:
    """Newest first, filtered by status and by policy number / landlord e-mail."""
    count_stmt = apply_data_scope(select(func.count(Policy.id)), user.data_scope)
    stmt = apply_data_scope(
        select(Policy).order_by(Policy.created_at.desc(), Policy.id.desc()).offset(offset).limit(limit),
        user.data_scope,
    )
    if status is not None:
        count_stmt = count_stmt.where(Policy.status == status)
        stmt = stmt.where(Policy.status == status)
    if search:
        pattern = f"%{search.strip()}%"
        matches = Policy.policy_number.ilike(pattern) | Policy.landlords.any(Landlord.email.ilike(pattern))
        count_stmt = count_stmt.where(matches)
        stmt = stmt.where(matches)

    total = (await session.execute(count_stmt)).scalar() or 0
    result = await session.execute(stmt)
    return list(result.scalars().all()), total

# This project was developed with assistance from AI tools.
"""Co-owner landlords on an existing policy.

A policy always has exactly one primary landlord; only the primary one is
required to complete their information before investigation.
"""

import logging

from db import Landlord
from db.enums import ActorType, PolicyStatus
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import InvalidTransitionError, NotFoundError, ValidationError
from ..schemas.actor import LandlordCreate
from . import notifications
from .activity import log_policy_activity
from .actors import build_actor
from .tokens import assign_token
from .transaction import PostCommitActions, atomic
from .workflow import advance_if_actors_complete, load_policy

logger = logging.getLogger(__name__)


def ordered_landlords(policy) -> list[Landlord]:
    """Primary first, then in creation order."""
    return sorted(policy.landlords, key=lambda landlord: (not landlord.is_primary, landlord.id or 0))


def _find_landlord(policy, landlord_id: int) -> Landlord:
    landlord = next((existing for existing in policy.landlords if existing.id == landlord_id), None)
    if landlord is None:
        raise NotFoundError(
            f"Landlord {landlord_id} not found on policy {policy.id}",
            context={"policy_id": policy.id, "landlord_id": landlord_id},
        )
    return landlord


def _ensure_open(policy) -> None:
    if policy.status in PolicyStatus.terminal_statuses():
        raise InvalidTransitionError(
            f"Policy {policy.id} is {policy.status.value}; its landlords can no longer change",
            context={"policy_id": policy.id, "status": policy.status.value},
        )


async def add_landlord(
    session: AsyncSession,
    policy_id: int,
    data: LandlordCreate,
    *,
    performed_by: str,
    notifier: notifications.Notifier | None = None,
) -> Landlord:
    """Add a co-owner. Becoming primary demotes the current primary landlord.

    While the policy is collecting information the new landlord gets a
    portal token and, after commit, an invitation.
    """
    policy = await load_policy(session, policy_id)
    _ensure_open(policy)
    if any(existing.email.lower() == data.email.lower() for existing in policy.landlords):
        raise ValidationError(
            f"A landlord with e-mail {data.email} is already on policy {policy_id}",
            context={"policy_id": policy_id},
        )

    is_primary = data.is_primary or not policy.landlords
    invite = data.send_invitation and policy.status == PolicyStatus.COLLECTING_INFO
    post_commit = PostCommitActions()
    async with atomic(session, "add_landlord"):
        if is_primary:
            for other in policy.landlords:
                other.is_primary = False
        landlord = build_actor(ActorType.LANDLORD, data, policy_id=policy.id, is_primary=is_primary)
        if invite:
            assign_token(landlord)
        policy.landlords.append(landlord)
        await session.flush()
        await log_policy_activity(
            session,
            policy_id=policy.id,
            action="landlord_added",
            description=f"Arrendador {landlord.email} agregado",
            details={"landlord_id": landlord.id, "is_primary": is_primary, "invited": invite},
            performed_by=performed_by,
        )

    if invite and notifier is not None:
        post_commit.add(
            f"invite landlord {landlord.email}",
            lambda: notifications.send_actor_invitation(
                notifier, ActorType.LANDLORD, landlord, policy.policy_number,
            ),
        )
    await post_commit.run()
    logger.info("Landlord %s added to policy %s (primary=%s)", landlord.id, policy.id, is_primary)
    return landlord


async def set_primary_landlord(
    session: AsyncSession,
    policy_id: int,
    landlord_id: int,
    *,
    performed_by: str,
) -> Landlord:
    """Make one landlord the primary one.

    The information-complete gate follows the primary landlord, so a policy
    in COLLECTING_INFO may advance to investigation here.
    """
    policy = await load_policy(session, policy_id)
    _ensure_open(policy)
    landlord = _find_landlord(policy, landlord_id)
    if landlord.is_primary:
        return landlord

    previous = policy.primary_landlord
    async with atomic(session, "set_primary_landlord"):
        for other in policy.landlords:
            other.is_primary = other is landlord
        await session.flush()
        await log_policy_activity(
            session,
            policy_id=policy.id,
            action="landlord_updated",
            description=f"Arrendador {landlord.email} marcado como principal",
            details={
                "landlord_id": landlord.id,
                "previous_primary_id": previous.id if previous is not None else None,
            },
            performed_by=performed_by,
        )
        await advance_if_actors_complete(session, policy.id)

    logger.info("Landlord %s is now primary on policy %s", landlord.id, policy.id)
    return landlord


async def remove_landlord(
    session: AsyncSession,
    policy_id: int,
    landlord_id: int,
    *,
    performed_by: str,
) -> None:
    """Delete a non-primary landlord. Their documents stay on the policy."""
    policy = await load_policy(session, policy_id)
    _ensure_open(policy)
    landlord = _find_landlord(policy, landlord_id)
    if landlord.is_primary:
        raise ValidationError(
            "Cannot remove primary landlord",
            context={"policy_id": policy_id, "landlord_id": landlord_id},
        )

    async with atomic(session, "remove_landlord"):
        policy.landlords.remove(landlord)
        await session.flush()
        await log_policy_activity(
            session,
            policy_id=policy.id,
            action="landlord_deleted",
            description=f"Arrendador {landlord.email} eliminado",
            details={"landlord_id": landlord_id},
            performed_by=performed_by,
        )
    logger.info("Landlord %s removed from policy %s", landlord_id, policy.id)

# This project was developed with assistance from AI tools.
"""Policy cancellation."""

import logging

from db.enums import PolicyCancellationReason, PolicyStatus
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import InvalidTransitionError
from ..schemas.replacement import CancellationResult
from . import notifications
from .transaction import PostCommitActions, atomic
from .workflow import apply_transition, load_policy

logger = logging.getLogger(__name__)


async def cancel_policy(
    session: AsyncSession,
    policy_id: int,
    *,
    reason: PolicyCancellationReason,
    comment: str,
    performed_by: str,
    notifier: notifications.Notifier | None = None,
) -> CancellationResult:
    """Cancel a policy from any non-terminal status.

    Actor data is left as is. Role checks happen at the route.

    Raises:
        NotFoundError: policy does not exist.
        InvalidTransitionError: the policy is already CANCELLED or EXPIRED.
    """
    reason = PolicyCancellationReason(reason)
    policy = await load_policy(session, policy_id)
    if policy.status in PolicyStatus.terminal_statuses():
        raise InvalidTransitionError(
            f"Policy {policy_id} is already {policy.status.value} and cannot be cancelled",
            context={"policy_id": policy_id, "status": policy.status.value},
        )

    async with atomic(session, "cancel_policy"):
        policy.cancellation_reason = reason
        policy.cancellation_comment = comment
        policy.cancelled_by = performed_by
        previous_status = await apply_transition(
            session,
            policy,
            PolicyStatus.CANCELLED,
            performed_by=performed_by,
            action="policy_cancelled",
            extra_details={"cancellation_reason": reason.value, "comment": comment},
        )

    if notifier is not None:
        post_commit = PostCommitActions()
        data = {
            "policy_number": policy.policy_number,
            "reason": reason.value,
            "comment": comment,
            "cancelled_by": performed_by,
        }
        post_commit.add(
            f"notify admins of policy {policy.id} cancellation",
            lambda: notifications.notify_admins(notifier, notifications.POLICY_CANCELLED, data),
        )
        await post_commit.run()

    logger.info("Policy %s cancelled by %s (%s)", policy.id, performed_by, reason.value)
    return CancellationResult(
        policy_id=policy.id,
        previous_status=previous_status,
        status=policy.status,
        cancelled_at=policy.cancelled_at,
        reason=reason,
        comment=comment,
    )

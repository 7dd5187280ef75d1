# This project was developed with assistance from AI tools.
"""Tenant replacement and guarantor-type change.

Both operations archive the outgoing actors, reset or recreate the affected
rows, drop the investigation and send the policy back to information
collection in one transaction. Tokens, the summary activity row and e-mails
follow after commit.
"""

import logging

from db.enums import ActorType, PayerType, PaymentStatus, PolicyStatus
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import InvalidTransitionError, ValidationError
from ..schemas.actor import ActorStub
from ..schemas.policy import check_guarantor_stubs
from ..schemas.replacement import GuarantorChangeResult, ReplaceTenantResult
from . import notifications
from .activity import record_policy_activity
from .actor_config import get_descriptor
from .actors import build_actor
from .archive import archive_actor, load_for_archive, payer_display_name, reset_actor
from .tokens import clear_token, generate_actor_token
from .transaction import PostCommitActions, atomic
from .workflow import apply_transition, load_policy

logger = logging.getLogger(__name__)

_NO_REVERT = frozenset({PolicyStatus.DRAFT, PolicyStatus.COLLECTING_INFO})


def _check_replaceable(policy, operation: str) -> None:
    if policy.status not in PolicyStatus.replaceable_statuses():
        allowed = sorted(s.value for s in PolicyStatus.replaceable_statuses())
        raise InvalidTransitionError(
            f"Cannot {operation} on a policy in status {policy.status.value}. "
            f"Allowed: {', '.join(allowed)}",
            context={"policy_id": policy.id, "status": policy.status.value},
        )


async def _revert_to_collecting(session: AsyncSession, policy, *, performed_by: str, reason: str) -> None:
    if policy.status in _NO_REVERT:
        return
    await apply_transition(
        session,
        policy,
        PolicyStatus.COLLECTING_INFO,
        performed_by=performed_by,
        action="status_reverted",
        extra_details={"reason": reason},
    )


async def _archive_guarantors(session: AsyncSession, policy, *, performed_by: str, reason: str) -> tuple[int, int]:
    """Archive every joint obligor and aval and drop them from the policy."""
    counts = {}
    for actor_type, attribute in ((ActorType.JOINT_OBLIGOR, "joint_obligors"), (ActorType.AVAL, "avals")):
        descriptor = get_descriptor(actor_type)
        current = list(getattr(policy, attribute))
        for guarantor in current:
            guarantor = await load_for_archive(session, descriptor, guarantor.id)
            await archive_actor(session, descriptor, guarantor, replaced_by=performed_by, reason=reason)
        setattr(policy, attribute, [])
        counts[actor_type] = len(current)
    return counts[ActorType.JOINT_OBLIGOR], counts[ActorType.AVAL]


def _settle_tenant_payments(policy, outgoing_name: str) -> tuple[int, int]:
    """Stamp completed tenant payments with the outgoing name and cancel the open ones."""
    stamped = cancelled = 0
    for payment in policy.payments:
        if payment.paid_by != PayerType.TENANT:
            continue
        if payment.status == PaymentStatus.COMPLETED and not payment.paid_by_tenant_name:
            payment.paid_by_tenant_name = outgoing_name
            stamped += 1
        elif payment.status in PaymentStatus.open_statuses():
            payment.status = PaymentStatus.CANCELLED
            cancelled += 1
    return stamped, cancelled


def _queue_token(post_commit: PostCommitActions, session, actor_type, actor, *, renew=False):
    post_commit.add(
        f"issue token for {actor_type.value} {actor.id}",
        lambda: generate_actor_token(session, actor_type, actor.id, renew=renew),
    )


def _queue_invitation(post_commit: PostCommitActions, notifier, actor_type, actor, policy_number):
    post_commit.add(
        f"invite {actor_type.value} {actor.email}",
        lambda: notifications.send_actor_invitation(notifier, actor_type, actor, policy_number),
    )


def _queue_staff_notice(post_commit: PostCommitActions, notifier, policy, template: str, data: dict):
    if policy.manager_email:
        post_commit.add(
            f"notify manager of policy {policy.id}",
            lambda: notifier.send(template, policy.manager_email, data),
        )
    post_commit.add(
        f"notify admins of policy {policy.id}",
        lambda: notifications.notify_admins(notifier, template, data),
    )


async def replace_tenant_on_policy(
    session: AsyncSession,
    policy_id: int,
    *,
    reason: str,
    new_tenant: ActorStub,
    replace_guarantors: bool = False,
    performed_by: str,
    notifier: notifications.Notifier | None = None,
) -> ReplaceTenantResult:
    """Swap the tenant on a policy, keeping the tenant row id.

    The outgoing tenant is snapshotted to ``tenant_history``; its documents
    stay on the policy without an owner. Optionally the guarantors are
    archived and removed too.

    Raises:
        NotFoundError: policy does not exist.
        InvalidTransitionError: the policy is past the point where actors can change.
        ValidationError: the policy has no tenant.
    """
    policy = await load_policy(session, policy_id)
    _check_replaceable(policy, "replace tenant")
    if policy.tenant is None:
        raise ValidationError(f"Policy {policy_id} has no tenant to replace", context={"policy_id": policy_id})

    descriptor = get_descriptor(ActorType.TENANT)
    previous_status = policy.status
    archived_jo = archived_avals = 0

    async with atomic(session, "replace_tenant"):
        tenant = await load_for_archive(session, descriptor, policy.tenant.id)
        outgoing_name = payer_display_name(tenant)
        outgoing_email = tenant.email
        outcome = await archive_actor(session, descriptor, tenant, replaced_by=performed_by, reason=reason)

        reset_actor(tenant, new_tenant)
        clear_token(tenant)

        if replace_guarantors:
            archived_jo, archived_avals = await _archive_guarantors(
                session, policy, performed_by=performed_by, reason=reason,
            )

        policy.investigation = None
        stamped, cancelled = _settle_tenant_payments(policy, outgoing_name)
        await _revert_to_collecting(session, policy, performed_by=performed_by, reason=reason)
        await session.flush()

    post_commit = PostCommitActions()
    _queue_token(post_commit, session, ActorType.TENANT, tenant, renew=True)
    post_commit.add(
        f"log tenant_replaced for policy {policy.id}",
        lambda: record_policy_activity(
            session,
            policy_id=policy.id,
            action="tenant_replaced",
            description=f"Inquilino reemplazado: {outgoing_email} -> {tenant.email}",
            details={
                "reason": reason,
                "history_id": outcome.history.id,
                "previous_status": previous_status.value,
                "documents_detached": outcome.documents_detached,
                "references_deleted": outcome.references_deleted,
                "replace_guarantors": replace_guarantors,
                "joint_obligors_archived": archived_jo,
                "avals_archived": archived_avals,
                "payments_stamped": stamped,
                "payments_cancelled": cancelled,
            },
            performed_by=performed_by,
        ),
    )
    if notifier is not None:
        _queue_staff_notice(
            post_commit,
            notifier,
            policy,
            notifications.TENANT_REPLACED,
            {
                "policy_number": policy.policy_number,
                "reason": reason,
                "previous_tenant": outgoing_email,
                "new_tenant": tenant.email,
                "guarantors_replaced": replace_guarantors,
            },
        )
        _queue_invitation(post_commit, notifier, ActorType.TENANT, tenant, policy.policy_number)
    failed = await post_commit.run()

    logger.info("Tenant replaced on policy %s by %s", policy.id, performed_by)
    return ReplaceTenantResult(
        policy_id=policy.id,
        tenant_id=tenant.id,
        history_id=outcome.history.id,
        documents_detached=outcome.documents_detached,
        guarantors_archived=archived_jo + archived_avals,
        payments_stamped=stamped,
        payments_cancelled=cancelled,
        previous_status=previous_status,
        status=policy.status,
        failed_followups=failed,
    )


async def change_guarantor_type(
    session: AsyncSession,
    policy_id: int,
    *,
    reason: str,
    new_guarantor_type,
    new_joint_obligors: list[ActorStub] | None = None,
    new_avals: list[ActorStub] | None = None,
    performed_by: str,
    notifier: notifications.Notifier | None = None,
) -> GuarantorChangeResult:
    """Replace every guarantor on a policy under a new guarantor type.

    Stubs for a kind the new type does not use are ignored.

    Raises:
        NotFoundError: policy does not exist.
        InvalidTransitionError: the policy is past the point where actors can change.
        ValidationError: same type as today, or missing stubs for the new type.
    """
    new_joint_obligors = new_joint_obligors or []
    new_avals = new_avals or []
    policy = await load_policy(session, policy_id)
    _check_replaceable(policy, "change guarantor type")
    if policy.guarantor_type == new_guarantor_type:
        raise ValidationError(
            "New guarantor type is the same as current type",
            context={"policy_id": policy_id, "guarantor_type": policy.guarantor_type.value},
        )
    problems = check_guarantor_stubs(new_guarantor_type, new_joint_obligors, new_avals)
    if problems:
        raise ValidationError("; ".join(problems), details=problems)

    previous_type = policy.guarantor_type
    previous_status = policy.status

    async with atomic(session, "change_guarantor_type"):
        archived_jo, archived_avals = await _archive_guarantors(
            session, policy, performed_by=performed_by, reason=reason,
        )
        created_jo = (
            [build_actor(ActorType.JOINT_OBLIGOR, stub) for stub in new_joint_obligors]
            if new_guarantor_type.requires_joint_obligors
            else []
        )
        created_avals = (
            [build_actor(ActorType.AVAL, stub) for stub in new_avals]
            if new_guarantor_type.requires_avals
            else []
        )
        policy.joint_obligors = created_jo
        policy.avals = created_avals
        policy.guarantor_type = new_guarantor_type
        policy.investigation = None
        await _revert_to_collecting(session, policy, performed_by=performed_by, reason=reason)
        await session.flush()

    created = [(ActorType.JOINT_OBLIGOR, jo) for jo in created_jo] + [(ActorType.AVAL, a) for a in created_avals]
    post_commit = PostCommitActions()
    for actor_type, actor in created:
        _queue_token(post_commit, session, actor_type, actor)
    post_commit.add(
        f"log guarantor_type_changed for policy {policy.id}",
        lambda: record_policy_activity(
            session,
            policy_id=policy.id,
            action="guarantor_type_changed",
            description=f"Tipo de garantía cambiado de {previous_type.value} a {new_guarantor_type.value}",
            details={
                "reason": reason,
                "from_type": previous_type.value,
                "to_type": new_guarantor_type.value,
                "previous_status": previous_status.value,
                "joint_obligors_archived": archived_jo,
                "avals_archived": archived_avals,
                "joint_obligors_created": len(created_jo),
                "avals_created": len(created_avals),
            },
            performed_by=performed_by,
        ),
    )
    if notifier is not None:
        _queue_staff_notice(
            post_commit,
            notifier,
            policy,
            notifications.GUARANTOR_TYPE_CHANGED,
            {
                "policy_number": policy.policy_number,
                "reason": reason,
                "from_type": previous_type.value,
                "to_type": new_guarantor_type.value,
            },
        )
        for actor_type, actor in created:
            _queue_invitation(post_commit, notifier, actor_type, actor, policy.policy_number)
    failed = await post_commit.run()

    logger.info(
        "Guarantor type of policy %s changed %s -> %s by %s",
        policy.id,
        previous_type.value,
        new_guarantor_type.value,
        performed_by,
    )
    return GuarantorChangeResult(
        policy_id=policy.id,
        previous_guarantor_type=previous_type,
        guarantor_type=new_guarantor_type,
        archived_joint_obligors=archived_jo,
        archived_avals=archived_avals,
        created_joint_obligor_ids=[jo.id for jo in created_jo],
        created_aval_ids=[a.id for a in created_avals],
        previous_status=previous_status,
        status=policy.status,
        failed_followups=failed,
    )

# This project was developed with assistance from AI tools.
"""Policy status state machine.

``PolicyStatus.valid_transitions()`` is the fixed graph. Every normal status
change goes through ``transition_policy_status`` (graph check, then the
status-specific precondition, then persist + activity + side effects in one
transaction). ``force_transition`` is the separately audited admin override.

``apply_transition`` does not commit so other services (actor submission,
review auto-approval) can chain a transition into their own transaction.
"""

import calendar
import logging
from datetime import UTC, datetime

from db import Investigation, Policy
from db.enums import (
    ActorType,
    InvestigationVerdict,
    PaymentStatus,
    PaymentType,
    PolicyStatus,
    VerificationStatus,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.config import settings
from ..core.errors import InvalidTransitionError, NotFoundError, ServiceError, ValidationError
from ..schemas.workflow import (
    ActorsCompletion,
    AutoTransitionResult,
    TransitionResult,
    WorkflowProgress,
    WorkflowStep,
)
from . import notifications
from .activity import SYSTEM_ACTOR, log_policy_activity
from .actor_config import ACTOR_DESCRIPTORS
from .transaction import PostCommitActions, atomic

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[PolicyStatus, frozenset[PolicyStatus]] = PolicyStatus.valid_transitions()

STATUS_TIMESTAMPS: dict[PolicyStatus, str] = {
    PolicyStatus.APPROVED: "approved_at",
    PolicyStatus.INVESTIGATION_REJECTED: "rejected_at",
    PolicyStatus.ACTIVE: "activated_at",
    PolicyStatus.CANCELLED: "cancelled_at",
}

STATUS_STEPS: dict[PolicyStatus, str] = {
    PolicyStatus.COLLECTING_INFO: "actors",
    PolicyStatus.UNDER_INVESTIGATION: "investigation",
    PolicyStatus.INVESTIGATION_REJECTED: "investigation",
    PolicyStatus.PENDING_APPROVAL: "investigation",
    PolicyStatus.CONTRACT_PENDING: "contract",
    PolicyStatus.CONTRACT_SIGNED: "contract",
}

AUTO_COMPLETE_NOTE = "Auto-transitioned: All actor information complete"
AUTO_EXPIRE_NOTE = "Auto-transitioned: Policy expired"

# (key, name, description, statuses)
WORKFLOW_STEPS = (
    ("creation", "Creación", "Protección creada", (PolicyStatus.DRAFT,)),
    (
        "information",
        "Recolección de Información",
        "Recolectando información de actores",
        (PolicyStatus.COLLECTING_INFO,),
    ),
    (
        "investigation",
        "Investigación",
        "En proceso de investigación",
        (PolicyStatus.UNDER_INVESTIGATION, PolicyStatus.INVESTIGATION_REJECTED),
    ),
    (
        "approval",
        "Aprobación",
        "Pendiente de aprobación",
        (PolicyStatus.PENDING_APPROVAL, PolicyStatus.APPROVED),
    ),
    (
        "contract",
        "Contrato",
        "Generación y firma de contrato",
        (PolicyStatus.CONTRACT_PENDING, PolicyStatus.CONTRACT_SIGNED),
    ),
    ("activation", "Activación", "Protección activa", (PolicyStatus.ACTIVE,)),
)

NEXT_ACTIONS: dict[PolicyStatus, str] = {
    PolicyStatus.DRAFT: "Enviar invitaciones a actores",
    PolicyStatus.UNDER_INVESTIGATION: "Completar investigación",
    PolicyStatus.INVESTIGATION_REJECTED: "Revisar y reiniciar investigación",
    PolicyStatus.PENDING_APPROVAL: "Aprobar o rechazar protección",
    PolicyStatus.APPROVED: "Generar contrato",
    PolicyStatus.CONTRACT_PENDING: "Firmar contrato",
    PolicyStatus.CONTRACT_SIGNED: "Procesar pago y activar",
}


def add_months(moment: datetime, months: int) -> datetime:
    """Calendar-month arithmetic, clamping the day to the target month's length."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def policy_load_options() -> list:
    return [
        selectinload(Policy.tenant),
        selectinload(Policy.landlords),
        selectinload(Policy.joint_obligors),
        selectinload(Policy.avals),
        selectinload(Policy.investigation),
        selectinload(Policy.contracts),
        selectinload(Policy.payments),
    ]


async def load_policy(session: AsyncSession, policy_id: int) -> Policy:
    """Fetch a policy with everything the workflow checks read."""
    result = await session.execute(
        select(Policy).where(Policy.id == policy_id).options(*policy_load_options())
    )
    policy = result.scalar_one_or_none()
    if policy is None:
        raise NotFoundError(f"Policy {policy_id} not found", context={"policy_id": policy_id})
    return policy


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------


def is_transition_allowed(current: PolicyStatus, new_status: PolicyStatus) -> bool:
    return new_status in ALLOWED_TRANSITIONS.get(current, frozenset())


def check_transition_allowed(current: PolicyStatus, new_status: PolicyStatus) -> None:
    if is_transition_allowed(current, new_status):
        return
    allowed = sorted(s.value for s in ALLOWED_TRANSITIONS.get(current, frozenset()))
    raise InvalidTransitionError(
        f"Cannot transition from '{current.value}' to '{new_status.value}'. "
        f"Allowed: {', '.join(allowed) if allowed else 'none'}",
        context={"from": current.value, "to": new_status.value, "allowed": allowed},
    )


def _actor_label(actor_type, actor) -> str:
    name = actor.display_name or actor.email
    return f"{ACTOR_DESCRIPTORS[actor_type].label}: {name}"


def _required_actors(policy: Policy):
    """Yield (actor_type, actor) for every actor the policy's guarantor type requires."""
    landlord = policy.primary_landlord
    if landlord is not None:
        yield ActorType.LANDLORD, landlord
    if policy.tenant is not None:
        yield ActorType.TENANT, policy.tenant
    if policy.guarantor_type.requires_joint_obligors:
        for jo in policy.joint_obligors:
            yield ActorType.JOINT_OBLIGOR, jo
    if policy.guarantor_type.requires_avals:
        for aval in policy.avals:
            yield ActorType.AVAL, aval


def check_all_actors_complete(policy: Policy) -> ActorsCompletion:
    """Information-complete gate for entering investigation.

    The primary landlord and the tenant are always required; joint obligors
    and avals only when the guarantor type asks for them, in which case at
    least one must exist.
    """
    completed: list[str] = []
    pending: list[str] = []
    for actor_type, actor in _required_actors(policy):
        (completed if actor.information_complete else pending).append(_actor_label(actor_type, actor))

    landlord = policy.primary_landlord
    landlord_ok = landlord is not None and landlord.information_complete
    if landlord is None:
        pending.append("Arrendador: no registrado")

    tenant_ok = policy.tenant is not None and policy.tenant.information_complete
    if policy.tenant is None:
        pending.append("Inquilino: no registrado")

    jo_ok = True
    if policy.guarantor_type.requires_joint_obligors:
        jo_ok = bool(policy.joint_obligors) and all(j.information_complete for j in policy.joint_obligors)
        if not policy.joint_obligors:
            pending.append("Obligado Solidario: no registrado")

    aval_ok = True
    if policy.guarantor_type.requires_avals:
        aval_ok = bool(policy.avals) and all(a.information_complete for a in policy.avals)
        if not policy.avals:
            pending.append("Aval: no registrado")

    return ActorsCompletion(
        is_complete=landlord_ok and tenant_ok and jo_ok and aval_ok,
        primary_landlord=landlord_ok,
        tenant=tenant_ok,
        joint_obligors=jo_ok,
        avals=aval_ok,
        completed=completed,
        pending=pending,
    )


def iter_policy_actors(policy: Policy):
    for landlord in policy.landlords:
        yield ActorType.LANDLORD, landlord
    if policy.tenant is not None:
        yield ActorType.TENANT, policy.tenant
    for jo in policy.joint_obligors:
        yield ActorType.JOINT_OBLIGOR, jo
    for aval in policy.avals:
        yield ActorType.AVAL, aval


def unapproved_actors(policy: Policy) -> list[str]:
    """Labels of actors whose verification is not APPROVED yet."""
    return [
        _actor_label(actor_type, actor)
        for actor_type, actor in iter_policy_actors(policy)
        if actor.verification_status != VerificationStatus.APPROVED
    ]


def all_actors_approved(policy: Policy) -> bool:
    return not unapproved_actors(policy)


def check_transition_requirements(policy: Policy, new_status: PolicyStatus) -> None:
    """Raise InvalidTransitionError naming the unmet precondition, if any."""
    if new_status == PolicyStatus.UNDER_INVESTIGATION:
        completion = check_all_actors_complete(policy)
        if not completion.is_complete:
            raise InvalidTransitionError(
                "All actor information must be complete before investigation. "
                f"Pending: {', '.join(completion.pending)}",
                context={"pending": completion.pending},
            )

    elif new_status == PolicyStatus.PENDING_APPROVAL:
        pending = unapproved_actors(policy)
        if pending:
            raise InvalidTransitionError(
                f"All actors must be verified before pending approval. Pending: {', '.join(pending)}",
                context={"pending": pending},
            )

    elif new_status == PolicyStatus.APPROVED:
        investigation = policy.investigation
        if investigation is None:
            raise InvalidTransitionError(
                "No se encontró investigación para esta póliza. Contacte al administrador."
            )
        if investigation.verdict is None:
            raise InvalidTransitionError(
                "La investigación no tiene veredicto. Debe aprobar o rechazar la investigación primero."
            )
        if investigation.verdict != InvestigationVerdict.APPROVED:
            raise InvalidTransitionError(
                f'La investigación tiene veredicto "{investigation.verdict.value}". '
                "Solo investigaciones aprobadas pueden continuar."
            )

    elif new_status == PolicyStatus.CONTRACT_SIGNED:
        if policy.current_contract is None:
            raise InvalidTransitionError("Contract must be uploaded before marking as signed")

    elif new_status == PolicyStatus.ACTIVE:
        paid = any(
            p.type == PaymentType.POLICY_PREMIUM and p.status == PaymentStatus.COMPLETED
            for p in policy.payments
        )
        if not paid:
            raise InvalidTransitionError("Policy premium must be paid before activation")


# ---------------------------------------------------------------------------
# Mutation
# ---------------------------------------------------------------------------


def _run_side_effects(policy: Policy, new_status: PolicyStatus, now: datetime) -> None:
    if new_status == PolicyStatus.UNDER_INVESTIGATION:
        if policy.investigation is None:
            policy.investigation = Investigation(policy_id=policy.id)
        if policy.submitted_at is None:
            policy.submitted_at = now
    elif new_status == PolicyStatus.CONTRACT_SIGNED:
        contract = policy.current_contract
        if contract is not None and contract.signed_at is None:
            contract.signed_at = now
    elif new_status == PolicyStatus.ACTIVE:
        months = policy.contract_length or settings.DEFAULT_CONTRACT_LENGTH_MONTHS
        policy.expires_at = add_months(now, months)


async def apply_transition(
    session: AsyncSession,
    policy: Policy,
    new_status: PolicyStatus,
    *,
    performed_by: str,
    performed_by_type: str = "user",
    notes: str | None = None,
    reason: str | None = None,
    action: str = "status_changed",
    extra_details: dict | None = None,
) -> PolicyStatus:
    """Persist a status change inside the caller's transaction. Returns the old status."""
    old_status = policy.status
    now = datetime.now(UTC)

    policy.status = new_status
    timestamp_field = STATUS_TIMESTAMPS.get(new_status)
    if timestamp_field:
        setattr(policy, timestamp_field, now)
    if notes:
        policy.review_notes = notes
    if reason:
        policy.rejection_reason = reason
    step = STATUS_STEPS.get(new_status)
    if step:
        policy.current_step = step

    _run_side_effects(policy, new_status, now)

    details = {"from_status": old_status.value, "to_status": new_status.value, "notes": notes, "reason": reason}
    if extra_details:
        details.update(extra_details)
    await log_policy_activity(
        session,
        policy_id=policy.id,
        action=action,
        description=f"Status changed from {old_status.value} to {new_status.value}",
        details=details,
        performed_by=performed_by,
        performed_by_type=performed_by_type,
    )
    logger.info("Policy %s transitioned %s -> %s", policy.id, old_status.value, new_status.value)
    return old_status


def queue_status_notification(post_commit: PostCommitActions, notifier, policy: Policy, old, new) -> None:
    if notifier is None or not policy.manager_email:
        return
    data = {
        "policy_number": policy.policy_number,
        "from_status": old.value,
        "to_status": new.value,
    }
    post_commit.add(
        f"notify manager of policy {policy.id} status change",
        lambda: notifier.send(notifications.POLICY_STATUS_CHANGED, policy.manager_email, data),
    )


async def transition_policy_status(
    session: AsyncSession,
    policy_id: int,
    new_status: PolicyStatus,
    *,
    performed_by: str,
    notes: str | None = None,
    reason: str | None = None,
    notifier=None,
) -> TransitionResult:
    """Move a policy along the fixed graph.

    Raises:
        NotFoundError: policy does not exist.
        InvalidTransitionError: edge not in the graph, or the precondition fails.
    """
    new_status = PolicyStatus(new_status)
    policy = await load_policy(session, policy_id)
    check_transition_allowed(policy.status, new_status)
    check_transition_requirements(policy, new_status)

    post_commit = PostCommitActions()
    async with atomic(session, "transition_policy_status"):
        old_status = await apply_transition(
            session, policy, new_status, performed_by=performed_by, notes=notes, reason=reason,
        )
    queue_status_notification(post_commit, notifier, policy, old_status, new_status)
    await post_commit.run()

    return TransitionResult(
        policy_id=policy.id,
        from_status=old_status,
        to_status=new_status,
        changed_at=datetime.now(UTC),
    )


async def force_transition(
    session: AsyncSession,
    policy_id: int,
    new_status: PolicyStatus,
    *,
    performed_by: str,
    reason: str,
) -> TransitionResult:
    """Admin override: skip the graph and preconditions, keep timestamps and side effects."""
    new_status = PolicyStatus(new_status)
    if not reason or not reason.strip():
        raise ValidationError("A reason is required to force a status transition")
    policy = await load_policy(session, policy_id)
    if policy.status == new_status:
        raise ValidationError(
            f"Policy {policy_id} is already in status {new_status.value}",
            context={"policy_id": policy_id, "status": new_status.value},
        )

    bypassed = not is_transition_allowed(policy.status, new_status)
    async with atomic(session, "force_transition"):
        old_status = await apply_transition(
            session,
            policy,
            new_status,
            performed_by=performed_by,
            action="force_status_transition",
            extra_details={"forced": True, "reason": reason, "outside_graph": bypassed},
        )
    logger.warning(
        "Policy %s force-transitioned %s -> %s by %s", policy_id, old_status.value, new_status.value, performed_by,
    )
    return TransitionResult(
        policy_id=policy.id,
        from_status=old_status,
        to_status=new_status,
        changed_at=datetime.now(UTC),
        forced=True,
    )


async def advance_if_actors_complete(session: AsyncSession, policy_id: int, *, performed_by: str = SYSTEM_ACTOR) -> bool:
    """COLLECTING_INFO -> UNDER_INVESTIGATION when every required actor is complete.

    Runs inside the caller's transaction. Returns True when it transitioned.
    """
    policy = await load_policy(session, policy_id)
    if policy.status != PolicyStatus.COLLECTING_INFO:
        return False
    if not check_all_actors_complete(policy).is_complete:
        return False
    await apply_transition(
        session,
        policy,
        PolicyStatus.UNDER_INVESTIGATION,
        performed_by=performed_by,
        performed_by_type="system",
        notes=AUTO_COMPLETE_NOTE,
    )
    return True


async def advance_if_actors_approved(session: AsyncSession, policy_id: int) -> bool:
    """UNDER_INVESTIGATION -> PENDING_APPROVAL when every actor is approved (caller's transaction)."""
    policy = await load_policy(session, policy_id)
    if policy.status != PolicyStatus.UNDER_INVESTIGATION or not all_actors_approved(policy):
        return False
    await apply_transition(
        session,
        policy,
        PolicyStatus.PENDING_APPROVAL,
        performed_by=SYSTEM_ACTOR,
        performed_by_type="system",
        notes="Auto-transitioned: All actors approved",
    )
    return True


async def auto_transition_policies(session: AsyncSession, *, now: datetime | None = None) -> AutoTransitionResult:
    """Idempotent sweep; each policy runs in its own transaction."""
    now = now or datetime.now(UTC)
    result = AutoTransitionResult()

    collecting = await session.execute(
        select(Policy.id).where(Policy.status == PolicyStatus.COLLECTING_INFO).order_by(Policy.id)
    )
    for policy_id in collecting.scalars().all():
        try:
            async with atomic(session, "auto_transition"):
                moved = await advance_if_actors_complete(session, policy_id)
        except ServiceError:
            logger.exception("Auto-transition to investigation failed for policy %s", policy_id)
            result.failed_policy_ids.append(policy_id)
            continue
        if moved:
            result.collecting_to_investigation += 1

    expired = await session.execute(
        select(Policy.id)
        .where(Policy.status == PolicyStatus.ACTIVE, Policy.expires_at < now)
        .order_by(Policy.id)
    )
    for policy_id in expired.scalars().all():
        try:
            async with atomic(session, "auto_expire"):
                policy = await load_policy(session, policy_id)
                if not is_transition_allowed(policy.status, PolicyStatus.EXPIRED):
                    logger.warning(
                        "Skipping expiry of policy %s: status is now %s", policy_id, policy.status.value,
                    )
                    continue
                await apply_transition(
                    session,
                    policy,
                    PolicyStatus.EXPIRED,
                    performed_by=SYSTEM_ACTOR,
                    performed_by_type="system",
                    notes=AUTO_EXPIRE_NOTE,
                )
        except ServiceError:
            logger.exception("Auto-expiry failed for policy %s", policy_id)
            result.failed_policy_ids.append(policy_id)
            continue
        result.active_to_expired += 1

    if result.collecting_to_investigation or result.active_to_expired or result.failed_policy_ids:
        logger.info(
            "Auto-transition sweep: %d to investigation, %d expired, %d failed",
            result.collecting_to_investigation,
            result.active_to_expired,
            len(result.failed_policy_ids),
        )
    return result


# ---------------------------------------------------------------------------
# Progress
# ---------------------------------------------------------------------------


def build_workflow_progress(policy: Policy) -> WorkflowProgress:
    current_index = 0
    for index, (_, _, _, statuses) in enumerate(WORKFLOW_STEPS):
        if policy.status in statuses:
            current_index = index
            break

    steps = []
    for index, (key, name, description, _) in enumerate(WORKFLOW_STEPS):
        if index < current_index:
            status = "completed"
        elif index == current_index:
            status = "current"
        else:
            status = "pending"
        steps.append(WorkflowStep(key=key, name=name, description=description, status=status))

    next_actions: list[str] = []
    if policy.status == PolicyStatus.COLLECTING_INFO:
        if check_all_actors_complete(policy).is_complete:
            next_actions.append("Iniciar investigación")
        else:
            next_actions.append("Completar información de actores")
    elif policy.status in NEXT_ACTIONS:
        next_actions.append(NEXT_ACTIONS[policy.status])

    return WorkflowProgress(
        policy_id=policy.id,
        current_status=policy.status,
        current_step=policy.current_step or "initial",
        progress=round(current_index / (len(WORKFLOW_STEPS) - 1) * 100),
        steps=steps,
        next_actions=next_actions,
        allowed_transitions=sorted(ALLOWED_TRANSITIONS[policy.status], key=lambda s: s.value),
    )


async def get_workflow_progress(session: AsyncSession, policy_id: int) -> WorkflowProgress:
    policy = await load_policy(session, policy_id)
    return build_workflow_progress(policy)

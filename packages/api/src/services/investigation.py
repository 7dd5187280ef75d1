# This project was developed with assistance from AI tools.
"""Investigation outcome and landlord decision.

Staff record the verdict once the background checks are done. A REJECTED
verdict sends the policy to INVESTIGATION_REJECTED; an APPROVED verdict on a
policy waiting in PENDING_APPROVAL approves it; HIGH_RISK leaves the status
alone until the landlord decides. A landlord may proceed with a rejected or
high-risk tenant anyway, which approves the policy as an audited override.
"""

import logging
from datetime import UTC, datetime

from db.enums import InvestigationVerdict, LandlordDecision, PolicyStatus, RiskLevel
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import InvalidTransitionError, NotFoundError
from ..schemas.investigation import InvestigationResponse, InvestigationResult
from .activity import log_policy_activity
from .transaction import PostCommitActions, atomic
from .workflow import (
    apply_transition,
    check_transition_allowed,
    check_transition_requirements,
    is_transition_allowed,
    load_policy,
    queue_status_notification,
)

logger = logging.getLogger(__name__)

COMPLETABLE_STATUSES = frozenset({PolicyStatus.UNDER_INVESTIGATION, PolicyStatus.PENDING_APPROVAL})
OVERRIDABLE_VERDICTS = frozenset({InvestigationVerdict.REJECTED, InvestigationVerdict.HIGH_RISK})
DECIDABLE_STATUSES = COMPLETABLE_STATUSES | {PolicyStatus.INVESTIGATION_REJECTED}


def default_risk_level(verdict: InvestigationVerdict) -> RiskLevel:
    return RiskLevel.HIGH if verdict == InvestigationVerdict.HIGH_RISK else RiskLevel.LOW


def _require_investigation(policy):
    if policy.investigation is None:
        raise NotFoundError(
            f"No investigation found for policy {policy.id}",
            context={"policy_id": policy.id},
        )
    return policy.investigation


def _result(policy, previous_status, failed=None) -> InvestigationResult:
    return InvestigationResult(
        policy_id=policy.id,
        investigation=InvestigationResponse.model_validate(policy.investigation),
        previous_status=previous_status,
        status=policy.status,
        failed_followups=failed or [],
    )


async def complete_investigation(
    session: AsyncSession,
    policy_id: int,
    *,
    verdict: InvestigationVerdict,
    performed_by: str,
    risk_level: RiskLevel | None = None,
    rejection_reason: str | None = None,
    notes: str | None = None,
    notifier=None,
) -> InvestigationResult:
    """Record the verdict and move the policy in the same transaction.

    Raises:
        NotFoundError: policy or its investigation does not exist.
        InvalidTransitionError: the policy is not under investigation or
            pending approval.
    """
    verdict = InvestigationVerdict(verdict)
    policy = await load_policy(session, policy_id)
    investigation = _require_investigation(policy)
    if policy.status not in COMPLETABLE_STATUSES:
        raise InvalidTransitionError(
            f"Policy {policy_id} is {policy.status.value}; the investigation can only be completed "
            "while UNDER_INVESTIGATION or PENDING_APPROVAL",
            context={"policy_id": policy_id, "status": policy.status.value},
        )

    target = None
    if verdict == InvestigationVerdict.REJECTED:
        target = PolicyStatus.INVESTIGATION_REJECTED
    elif verdict == InvestigationVerdict.APPROVED and policy.status == PolicyStatus.PENDING_APPROVAL:
        target = PolicyStatus.APPROVED

    previous_status = policy.status
    post_commit = PostCommitActions()
    async with atomic(session, "complete_investigation"):
        investigation.verdict = verdict
        investigation.risk_level = risk_level or default_risk_level(verdict)
        investigation.rejection_reason = rejection_reason if verdict == InvestigationVerdict.REJECTED else None
        if notes:
            investigation.notes = notes
        investigation.completed_by = performed_by
        investigation.completed_at = datetime.now(UTC)
        # A fresh verdict supersedes any earlier landlord decision.
        investigation.landlord_decision = None
        investigation.landlord_override = False

        await log_policy_activity(
            session,
            policy_id=policy.id,
            action="investigation_completed",
            description=f"Investigación completada con veredicto {verdict.value}",
            details={
                "verdict": verdict.value,
                "risk_level": investigation.risk_level.value,
                "rejection_reason": investigation.rejection_reason,
                "notes": notes,
            },
            performed_by=performed_by,
        )
        if target is not None:
            check_transition_requirements(policy, target)
            await apply_transition(
                session,
                policy,
                target,
                performed_by=performed_by,
                notes=notes,
                reason=investigation.rejection_reason,
            )

    if target is not None:
        queue_status_notification(post_commit, notifier, policy, previous_status, target)
    failed = await post_commit.run()
    logger.info("Investigation for policy %s completed: %s", policy.id, verdict.value)
    return _result(policy, previous_status, failed)


async def record_landlord_decision(
    session: AsyncSession,
    policy_id: int,
    *,
    decision: LandlordDecision,
    performed_by: str,
    notes: str | None = None,
    notifier=None,
) -> InvestigationResult:
    """Landlord proceeds with, or confirms the rejection of, a flagged tenant.

    PROCEED approves the policy even though the verdict is not APPROVED. The
    move is logged as ``landlord_override`` with the original verdict. REJECT
    sends the policy to INVESTIGATION_REJECTED if it is not there already.

    Raises:
        NotFoundError: policy or its investigation does not exist.
        InvalidTransitionError: no REJECTED/HIGH_RISK verdict to decide on,
            or the policy has moved past the investigation.
    """
    decision = LandlordDecision(decision)
    policy = await load_policy(session, policy_id)
    investigation = _require_investigation(policy)
    if investigation.verdict not in OVERRIDABLE_VERDICTS:
        verdict = investigation.verdict.value if investigation.verdict else "none"
        raise InvalidTransitionError(
            f"A landlord decision needs a REJECTED or HIGH_RISK verdict (current: {verdict})",
            context={"policy_id": policy_id, "verdict": verdict},
        )
    if policy.status not in DECIDABLE_STATUSES:
        raise InvalidTransitionError(
            f"Policy {policy_id} is {policy.status.value}; the landlord decision is no longer open",
            context={"policy_id": policy_id, "status": policy.status.value},
        )

    proceed = decision == LandlordDecision.PROCEED
    target = PolicyStatus.APPROVED if proceed else PolicyStatus.INVESTIGATION_REJECTED
    if not proceed and policy.status != target:
        check_transition_allowed(policy.status, target)

    previous_status = policy.status
    post_commit = PostCommitActions()
    async with atomic(session, "landlord_decision"):
        investigation.landlord_decision = decision
        investigation.landlord_override = proceed
        investigation.landlord_notes = notes
        investigation.landlord_decided_by = performed_by
        investigation.landlord_decided_at = datetime.now(UTC)

        details = {
            "decision": decision.value,
            "original_verdict": investigation.verdict.value,
            "override_result": "APPROVED" if proceed else "CONFIRMED_REJECTED",
        }
        if proceed:
            await apply_transition(
                session,
                policy,
                target,
                performed_by=performed_by,
                notes=notes,
                action="landlord_override",
                extra_details={**details, "outside_graph": not is_transition_allowed(previous_status, target)},
            )
        else:
            if policy.status != target:
                await apply_transition(
                    session,
                    policy,
                    target,
                    performed_by=performed_by,
                    notes=notes,
                    reason=investigation.rejection_reason or "Rechazo confirmado por el arrendador",
                )
            await log_policy_activity(
                session,
                policy_id=policy.id,
                action="landlord_override",
                description="El arrendador confirmó el rechazo de la investigación",
                details={**details, "notes": notes},
                performed_by=performed_by,
            )

    if policy.status != previous_status:
        queue_status_notification(post_commit, notifier, policy, previous_status, policy.status)
    failed = await post_commit.run()
    logger.info("Landlord decision %s recorded for policy %s", decision.value, policy.id)
    return _result(policy, previous_status, failed)

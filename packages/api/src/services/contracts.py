# This project was developed with assistance from AI tools.
"""Lease contract versions and signing.

Uploading a contract adds a new version and makes it the current one; an
APPROVED policy moves to CONTRACT_PENDING with the first upload. Marking the
current contract signed moves CONTRACT_PENDING to CONTRACT_SIGNED.
"""

import logging
from datetime import UTC, datetime

from db import Contract
from db.enums import PolicyStatus
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.errors import InvalidTransitionError, ValidationError
from ..schemas.contract import ContractResponse, ContractUploadResult
from ..schemas.workflow import TransitionResult
from .activity import log_policy_activity
from .storage import CONTRACT_CONTENT_TYPES, StorageService
from .transaction import PostCommitActions, atomic
from .workflow import (
    apply_transition,
    check_transition_allowed,
    check_transition_requirements,
    load_policy,
    queue_status_notification,
)

logger = logging.getLogger(__name__)

UPLOAD_STATUSES = frozenset({PolicyStatus.APPROVED, PolicyStatus.CONTRACT_PENDING})


def check_contract_file(content_type: str | None, size: int) -> None:
    """Reject anything that is not a PDF/Word file within the size limit."""
    if content_type not in CONTRACT_CONTENT_TYPES:
        raise ValidationError(
            f"Unsupported contract file type: {content_type or 'unknown'}. Only PDF and Word documents are accepted",
            details=sorted(CONTRACT_CONTENT_TYPES),
        )
    if size == 0:
        raise ValidationError("Contract file is empty")
    if size > settings.CONTRACT_MAX_SIZE_MB * 1024 * 1024:
        raise ValidationError(f"Contract file exceeds maximum size of {settings.CONTRACT_MAX_SIZE_MB} MB")


async def list_contracts(session: AsyncSession, policy_id: int) -> list[Contract]:
    """Every version, newest first."""
    result = await session.execute(
        select(Contract).where(Contract.policy_id == policy_id).order_by(Contract.version.desc())
    )
    return list(result.scalars().all())


async def register_contract(
    session: AsyncSession,
    policy_id: int,
    *,
    file_data: bytes,
    file_name: str,
    content_type: str | None,
    uploaded_by: str,
    storage: StorageService,
    notifier=None,
) -> ContractUploadResult:
    """Store a new contract version and make it the current one.

    Raises:
        NotFoundError: policy does not exist.
        ValidationError: wrong file type, empty or oversized file.
        InvalidTransitionError: the policy is not APPROVED or CONTRACT_PENDING.
    """
    check_contract_file(content_type, len(file_data))
    policy = await load_policy(session, policy_id)
    if policy.status not in UPLOAD_STATUSES:
        raise InvalidTransitionError(
            f"Contracts can only be uploaded to APPROVED or CONTRACT_PENDING policies (policy {policy_id} is "
            f"{policy.status.value})",
            context={"policy_id": policy_id, "status": policy.status.value},
        )

    version = max((c.version for c in policy.contracts), default=0) + 1
    object_key = StorageService.build_object_key(policy.id, "contract", version, file_name)
    await storage.upload_file(file_data, object_key, content_type)

    previous_status = policy.status
    post_commit = PostCommitActions()
    async with atomic(session, "register_contract"):
        for existing in policy.contracts:
            existing.is_current = False
        contract = Contract(
            policy_id=policy.id,
            version=version,
            storage_key=object_key,
            file_name=file_name,
            mime_type=content_type,
            file_size=len(file_data),
            is_current=True,
            uploaded_by=uploaded_by,
        )
        policy.contracts.append(contract)
        await session.flush()
        await log_policy_activity(
            session,
            policy_id=policy.id,
            action="contract_uploaded",
            description=f"Contrato versión {version} cargado",
            details={"contract_id": contract.id, "version": version, "file_name": file_name},
            performed_by=uploaded_by,
        )
        if policy.status == PolicyStatus.APPROVED:
            await apply_transition(
                session, policy, PolicyStatus.CONTRACT_PENDING, performed_by=uploaded_by,
            )

    if policy.status != previous_status:
        queue_status_notification(post_commit, notifier, policy, previous_status, policy.status)
    await post_commit.run()
    logger.info("Contract v%d uploaded for policy %s by %s", version, policy.id, uploaded_by)
    return ContractUploadResult(
        policy_id=policy.id,
        contract=ContractResponse.model_validate(contract),
        previous_status=previous_status,
        status=policy.status,
    )


async def mark_contract_signed(
    session: AsyncSession,
    policy_id: int,
    *,
    performed_by: str,
    signed_at: datetime | None = None,
    notes: str | None = None,
    notifier=None,
) -> TransitionResult:
    """Stamp the current contract as signed and move to CONTRACT_SIGNED.

    Raises:
        NotFoundError: policy does not exist.
        InvalidTransitionError: not CONTRACT_PENDING, or no current contract.
    """
    policy = await load_policy(session, policy_id)
    check_transition_allowed(policy.status, PolicyStatus.CONTRACT_SIGNED)
    check_transition_requirements(policy, PolicyStatus.CONTRACT_SIGNED)
    contract = policy.current_contract

    post_commit = PostCommitActions()
    async with atomic(session, "mark_contract_signed"):
        contract.signed_at = signed_at or datetime.now(UTC)
        contract.signed_by = performed_by
        old_status = await apply_transition(
            session,
            policy,
            PolicyStatus.CONTRACT_SIGNED,
            performed_by=performed_by,
            notes=notes,
            action="contract_signed",
            extra_details={"contract_id": contract.id, "version": contract.version},
        )

    queue_status_notification(post_commit, notifier, policy, old_status, PolicyStatus.CONTRACT_SIGNED)
    await post_commit.run()
    logger.info("Contract v%d of policy %s marked signed by %s", contract.version, policy.id, performed_by)
    return TransitionResult(
        policy_id=policy.id,
        from_status=old_status,
        to_status=PolicyStatus.CONTRACT_SIGNED,
        changed_at=datetime.now(UTC),
    )

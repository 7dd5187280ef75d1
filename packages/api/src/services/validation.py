# This project was developed with assistance from AI tools.
"""Reviewer validation of actor sections and documents.

Each (actor, section) pair and each document carries one validation row that
is overwritten on re-review. After every change the actor is re-checked: when
every required section AND every document is APPROVED the actor is promoted
to APPROVED, and the policy moves to PENDING_APPROVAL once all its actors are.

Approval is sticky: a later rejection does not demote an approved actor.
"""

import logging
from datetime import UTC, datetime

from db import ActorDocument, ActorSectionValidation, DocumentValidation, Policy, ReviewNote
from db.enums import ActorSection, ActorType, ValidationStatus, VerificationStatus
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.errors import NotFoundError, ValidationError
from ..schemas.validation import (
    ActorValidationDetails,
    ActorValidationProgress,
    DocumentStatus,
    ItemCounts,
    SectionStatus,
    ValidationProgress,
    ValidationResult,
)
from .activity import log_policy_activity
from .actor_config import DOCUMENT_LABELS, SECTION_LABELS, actor_type_of, get_actor_sections, get_descriptor
from .actors import get_actor
from .transaction import atomic
from .workflow import advance_if_actors_approved, iter_policy_actors, load_policy

logger = logging.getLogger(__name__)


def _normalize_reason(status: ValidationStatus, reason: str | None) -> str | None:
    """REJECTED needs a reason; any other status drops it."""
    if status != ValidationStatus.REJECTED:
        return None
    if not reason or not reason.strip():
        raise ValidationError("A rejection reason is required")
    return reason.strip()


async def _section_validations(
    session: AsyncSession, actor_type: ActorType, actor_id: int,
) -> dict[ActorSection, ActorSectionValidation]:
    result = await session.execute(
        select(ActorSectionValidation).where(
            ActorSectionValidation.actor_type == actor_type,
            ActorSectionValidation.actor_id == actor_id,
        )
    )
    return {row.section: row for row in result.scalars().all()}


def _section_statuses(actor_type: ActorType, actor, validations: dict) -> list[SectionStatus]:
    statuses = []
    for section in get_actor_sections(actor_type, actor.party_type):
        row = validations.get(section)
        statuses.append(
            SectionStatus(
                section=section,
                label=SECTION_LABELS[section],
                status=row.status if row else ValidationStatus.PENDING,
                validated_by=row.validated_by if row else None,
                validated_at=row.validated_at if row else None,
                rejection_reason=row.rejection_reason if row else None,
            )
        )
    return statuses


def _document_statuses(actor) -> list[DocumentStatus]:
    statuses = []
    for doc in actor.documents:
        validation = doc.validation
        statuses.append(
            DocumentStatus(
                document_id=doc.id,
                category=doc.category,
                label=DOCUMENT_LABELS[doc.category],
                file_name=doc.file_name,
                status=doc.validation_status,
                validated_by=validation.validated_by if validation else None,
                validated_at=validation.validated_at if validation else None,
                rejection_reason=validation.rejection_reason if validation else None,
            )
        )
    return statuses


async def check_actor_validation_complete(
    session: AsyncSession,
    actor_type: ActorType,
    actor_id: int,
    *,
    reviewer: str | None = None,
) -> tuple[bool, bool]:
    """Promote the actor to APPROVED when every section and document is approved.

    Runs inside the caller's transaction. Returns ``(actor_approved,
    policy_transitioned)``.
    """
    actor = await get_actor(session, actor_type, actor_id)
    if actor.verification_status == VerificationStatus.APPROVED:
        return True, False

    validations = await _section_validations(session, actor_type, actor_id)
    items = [s.status for s in _section_statuses(actor_type, actor, validations)]
    items += [doc.validation_status for doc in actor.documents]
    if not all(status == ValidationStatus.APPROVED for status in items):
        return False, False

    actor.verification_status = VerificationStatus.APPROVED
    actor.verified_at = datetime.now(UTC)
    actor.verified_by = reviewer
    await session.flush()
    await log_policy_activity(
        session,
        policy_id=actor.policy_id,
        action="actor_auto_approved",
        description=f"{get_descriptor(actor_type).label} aprobado: todas las secciones y documentos validados",
        details={"actor_type": actor_type.value, "actor_id": actor_id},
        performed_by=reviewer,
        performed_by_type="system",
    )
    logger.info("%s %s auto-approved", actor_type.value, actor_id)

    transitioned = await advance_if_actors_approved(session, actor.policy_id)
    return True, transitioned


async def validate_section(
    session: AsyncSession,
    actor_type: ActorType,
    actor_id: int,
    section: ActorSection,
    status: ValidationStatus,
    *,
    reviewer: str,
    reason: str | None = None,
) -> ValidationResult:
    """Record a reviewer decision for one section of one actor (upsert)."""
    actor_type = ActorType(actor_type)
    actor = await get_actor(session, actor_type, actor_id)
    sections = get_actor_sections(actor_type, actor.party_type)
    if section not in sections:
        raise ValidationError(
            f"Section '{section.value}' does not apply to {get_descriptor(actor_type).label} {actor_id}",
            details=[s.value for s in sections],
        )
    reason = _normalize_reason(status, reason)

    async with atomic(session, "validate_section"):
        result = await session.execute(
            select(ActorSectionValidation).where(
                ActorSectionValidation.actor_type == actor_type,
                ActorSectionValidation.actor_id == actor_id,
                ActorSectionValidation.section == section,
            )
        )
        row = result.scalar_one_or_none()
        previous = row.status if row is not None else None
        if row is None:
            row = ActorSectionValidation(actor_type=actor_type, actor_id=actor_id, section=section)
            session.add(row)
        row.status = status
        row.validated_by = reviewer
        row.validated_at = datetime.now(UTC)
        row.rejection_reason = reason
        await session.flush()

        details = {
            "actor_type": actor_type.value,
            "actor_id": actor_id,
            "section": section.value,
            "status": status.value,
            "previous_status": previous.value if previous else None,
            "reason": reason,
        }
        if previous != status:
            await log_policy_activity(
                session,
                policy_id=actor.policy_id,
                action="validation_changed",
                description=f"Sección {SECTION_LABELS[section]} cambió a {status.value}",
                details=details,
                performed_by=reviewer,
            )
        await log_policy_activity(
            session,
            policy_id=actor.policy_id,
            action=f"section_{status.value.lower()}",
            description=f"Sección {SECTION_LABELS[section]}: {status.value}",
            details=details,
            performed_by=reviewer,
        )
        approved, transitioned = await check_actor_validation_complete(
            session, actor_type, actor_id, reviewer=reviewer,
        )

    return ValidationResult(
        actor_type=actor_type,
        actor_id=actor_id,
        status=status,
        actor_approved=approved,
        policy_transitioned=transitioned,
    )


async def validate_document(
    session: AsyncSession,
    document_id: int,
    status: ValidationStatus,
    *,
    reviewer: str,
    reason: str | None = None,
) -> ValidationResult:
    """Record a reviewer decision for one document (upsert)."""
    result = await session.execute(
        select(ActorDocument)
        .where(ActorDocument.id == document_id)
        .options(selectinload(ActorDocument.validation))
    )
    document = result.scalar_one_or_none()
    if document is None:
        raise NotFoundError(f"Document {document_id} not found", context={"document_id": document_id})
    owner = actor_type_of(document)
    if owner is None:
        raise ValidationError(f"Document {document_id} is not attached to any actor")
    actor_type, actor_id = owner
    reason = _normalize_reason(status, reason)
    now = datetime.now(UTC)

    async with atomic(session, "validate_document"):
        validation = document.validation
        previous = validation.status if validation is not None else None
        if validation is None:
            validation = DocumentValidation(document_id=document.id)
            document.validation = validation
        validation.status = status
        validation.validated_by = reviewer
        validation.validated_at = now
        validation.rejection_reason = reason

        decided = status in (ValidationStatus.APPROVED, ValidationStatus.REJECTED)
        document.verified_at = now if decided else None
        document.verified_by = reviewer if decided else None
        document.rejection_reason = reason
        await session.flush()

        details = {
            "document_id": document.id,
            "category": document.category.value,
            "actor_type": actor_type.value,
            "actor_id": actor_id,
            "status": status.value,
            "previous_status": previous.value if previous else None,
            "reason": reason,
        }
        label = DOCUMENT_LABELS[document.category]
        if previous != status:
            await log_policy_activity(
                session,
                policy_id=document.policy_id,
                action="document_validation_changed",
                description=f"Documento {label} cambió a {status.value}",
                details=details,
                performed_by=reviewer,
            )
        await log_policy_activity(
            session,
            policy_id=document.policy_id,
            action=f"document_{status.value.lower()}",
            description=f"Documento {label}: {status.value}",
            details=details,
            performed_by=reviewer,
        )
        approved, transitioned = await check_actor_validation_complete(
            session, actor_type, actor_id, reviewer=reviewer,
        )

    return ValidationResult(
        actor_type=actor_type,
        actor_id=actor_id,
        status=status,
        actor_approved=approved,
        policy_transitioned=transitioned,
    )


# ---------------------------------------------------------------------------
# Review notes
# ---------------------------------------------------------------------------


async def add_review_note(
    session: AsyncSession,
    policy_id: int,
    note: str,
    *,
    created_by: str,
    actor_type: ActorType | None = None,
    actor_id: int | None = None,
    document_id: int | None = None,
) -> ReviewNote:
    if (actor_type is None) != (actor_id is None):
        raise ValidationError("actor_type and actor_id must be given together")
    if await session.get(Policy, policy_id) is None:
        raise NotFoundError(f"Policy {policy_id} not found", context={"policy_id": policy_id})

    async with atomic(session, "add_review_note"):
        entry = ReviewNote(
            policy_id=policy_id,
            actor_type=actor_type,
            actor_id=actor_id,
            document_id=document_id,
            note=note,
            created_by=created_by,
        )
        session.add(entry)
        await session.flush()
        await log_policy_activity(
            session,
            policy_id=policy_id,
            action="review_note_added",
            description="Nota de revisión agregada",
            details={"note_id": entry.id, "actor_type": actor_type.value if actor_type else None, "actor_id": actor_id},
            performed_by=created_by,
        )
    return entry


async def get_review_notes(
    session: AsyncSession,
    policy_id: int,
    *,
    actor_type: ActorType | None = None,
    actor_id: int | None = None,
) -> list[ReviewNote]:
    stmt = select(ReviewNote).where(ReviewNote.policy_id == policy_id)
    if actor_type is not None:
        stmt = stmt.where(ReviewNote.actor_type == actor_type)
    if actor_id is not None:
        stmt = stmt.where(ReviewNote.actor_id == actor_id)
    result = await session.execute(stmt.order_by(ReviewNote.created_at.desc(), ReviewNote.id.desc()))
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Progress / details
# ---------------------------------------------------------------------------


def _count(statuses) -> ItemCounts:
    counts = ItemCounts()
    for status in statuses:
        counts.total += 1
        if status == ValidationStatus.APPROVED:
            counts.approved += 1
        elif status == ValidationStatus.REJECTED:
            counts.rejected += 1
        elif status == ValidationStatus.IN_REVIEW:
            counts.in_review += 1
        else:
            counts.pending += 1
    return counts


async def get_actor_validation_details(
    session: AsyncSession, actor_type: ActorType, actor_id: int,
) -> ActorValidationDetails:
    actor_type = ActorType(actor_type)
    actor = await get_actor(session, actor_type, actor_id)
    validations = await _section_validations(session, actor_type, actor_id)
    return ActorValidationDetails(
        actor_type=actor_type,
        actor_id=actor.id,
        name=actor.display_name or actor.email,
        verification_status=actor.verification_status,
        sections=_section_statuses(actor_type, actor, validations),
        documents=_document_statuses(actor),
    )


async def get_validation_progress(session: AsyncSession, policy_id: int) -> ValidationProgress:
    """Per-actor section/document counts and an overall approved percentage."""
    policy = await load_policy(session, policy_id)
    actors: list[ActorValidationProgress] = []
    approved_items = total_items = 0

    for actor_type, policy_actor in list(iter_policy_actors(policy)):
        details = await get_actor_validation_details(session, actor_type, policy_actor.id)
        sections = _count(s.status for s in details.sections)
        documents = _count(d.status for d in details.documents)
        approved_items += sections.approved + documents.approved
        total_items += sections.total + documents.total
        actors.append(
            ActorValidationProgress(
                actor_type=actor_type,
                actor_id=details.actor_id,
                name=details.name,
                verification_status=details.verification_status,
                sections=sections,
                documents=documents,
            )
        )

    return ValidationProgress(
        policy_id=policy_id,
        actors=actors,
        overall_percentage=round(approved_items / total_items * 100) if total_items else 0,
        all_approved=bool(actors) and all(
            a.verification_status == VerificationStatus.APPROVED for a in actors
        ),
    )

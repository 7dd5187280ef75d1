# This project was developed with assistance from AI tools.
"""Actor data service: load, save, submit, and register documents.

All four actor kinds go through the same functions; kind-specific behaviour
comes from the ``ActorDescriptor`` table.
"""

import logging
from datetime import UTC, datetime

from db import ActorDocument, Address, CommercialReference, PersonalReference
from db.enums import ActorType, DocumentCategory, Nationality, PartyType
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import AlreadyCompleteError, NotFoundError, ValidationError
from ..schemas.actor import ADDRESS_KEYS, REFERENCE_KEYS, ActorStub, ActorUpdate, SubmissionResult
from .activity import log_policy_activity
from .actor_config import DOCUMENT_LABELS, get_descriptor
from .completeness import check_completeness, check_required_documents
from .transaction import atomic
from .workflow import advance_if_actors_complete, load_policy

logger = logging.getLogger(__name__)

_NOT_NULL_FIELDS = {"party_type", "email", "has_pets"}


async def get_actor(session: AsyncSession, actor_type: ActorType, actor_id: int):
    """Load one actor with addresses, references and documents."""
    descriptor = get_descriptor(actor_type)
    model = descriptor.model
    result = await session.execute(
        select(model).where(model.id == actor_id).options(*descriptor.load_options())
    )
    actor = result.scalar_one_or_none()
    if actor is None:
        raise NotFoundError(
            f"{descriptor.label} {actor_id} not found",
            context={"actor_type": descriptor.actor_type.value, "actor_id": actor_id},
        )
    return actor


def build_actor(actor_type: ActorType, stub: ActorStub, *, policy_id: int | None = None, **extra):
    """New actor row from creation-time stub data."""
    model = get_descriptor(actor_type).model
    is_company = stub.party_type == PartyType.COMPANY
    return model(
        policy_id=policy_id,
        party_type=stub.party_type,
        email=stub.email,
        phone=stub.phone,
        first_name=None if is_company else stub.first_name,
        paternal_last_name=None if is_company else stub.paternal_last_name,
        maternal_last_name=None if is_company else stub.maternal_last_name,
        company_name=stub.company_name if is_company else None,
        nationality=Nationality.MEXICAN,
        **extra,
    )


def _apply_address(actor, key: str, data: dict) -> None:
    current = getattr(actor, key)
    if current is None:
        setattr(actor, key, Address(**data))
        return
    for field, value in data.items():
        setattr(current, field, value)


def _apply_references(actor, key: str, items: list[dict]) -> None:
    model = PersonalReference if key == "personal_references" else CommercialReference
    setattr(actor, key, [model(**item) for item in items])


async def update_actor(
    session: AsyncSession,
    actor_type: ActorType,
    actor_id: int,
    data: ActorUpdate,
    *,
    performed_by: str,
    performed_by_type: str = "user",
    actor=None,
):
    """Apply a partial update.

    Fields that do not exist on this actor kind are rejected. Address blocks
    are upserted; reference lists replace the stored ones.
    """
    descriptor = get_descriptor(actor_type)
    if actor is None:
        actor = await get_actor(session, actor_type, actor_id)

    payload = data.model_dump(exclude_unset=True)
    allowed_addresses = {f.removesuffix("_id") for f in descriptor.address_fields}
    unsupported = [
        key
        for key in payload
        if (key in ADDRESS_KEYS and key not in allowed_addresses)
        or (key in REFERENCE_KEYS and not descriptor.has_references)
        or (key not in ADDRESS_KEYS and key not in REFERENCE_KEYS and not hasattr(descriptor.model, key))
    ]
    if unsupported:
        raise ValidationError(
            f"Fields not supported for {descriptor.label}: {', '.join(sorted(unsupported))}",
            details=sorted(unsupported),
        )

    async with atomic(session, "update_actor"):
        for key, value in payload.items():
            if key in ADDRESS_KEYS:
                if value is not None:
                    _apply_address(actor, key, value)
            elif key in REFERENCE_KEYS:
                _apply_references(actor, key, value or [])
            elif value is not None or key not in _NOT_NULL_FIELDS:
                setattr(actor, key, value)
        await session.flush()
        await log_policy_activity(
            session,
            policy_id=actor.policy_id,
            action="actor_updated",
            description=f"{descriptor.label} actualizó su información",
            details={"actor_type": descriptor.actor_type.value, "actor_id": actor.id, "fields": sorted(payload)},
            performed_by=performed_by,
            performed_by_type=performed_by_type,
        )

    logger.info("%s %s updated (%d fields)", descriptor.actor_type.value, actor.id, len(payload))
    return actor


async def submit_actor(
    session: AsyncSession,
    actor_type: ActorType,
    actor_id: int,
    *,
    submitted_by: str,
    skip_validation: bool = False,
    performed_by_type: str = "actor",
) -> SubmissionResult:
    """Mark an actor's information as complete.

    Completeness and required documents are checked first. Marking the
    actor complete, the policy auto-advance to UNDER_INVESTIGATION, and the
    ``actor_submitted`` activity are one transaction.

    Raises:
        AlreadyCompleteError: the actor was already submitted.
        ValidationError: missing fields (unless ``skip_validation``) or documents.
    """
    actor_type = ActorType(actor_type)
    descriptor = get_descriptor(actor_type)
    actor = await get_actor(session, actor_type, actor_id)

    if actor.information_complete:
        raise AlreadyCompleteError(
            f"{descriptor.label} {actor_id} already submitted",
            context={"actor_type": actor_type.value, "actor_id": actor_id},
        )

    completeness = check_completeness(actor_type, actor)
    if not completeness.valid and not skip_validation:
        raise ValidationError(
            f"{descriptor.label} information is incomplete: {', '.join(completeness.missing_fields)}",
            details=completeness.messages,
            context={"missing_fields": completeness.missing_fields},
        )

    missing_documents = check_required_documents(actor_type, actor, actor.documents)
    if missing_documents:
        labels = [DOCUMENT_LABELS[c] for c in missing_documents]
        raise ValidationError(
            f"Missing required documents: {', '.join(c.value for c in missing_documents)}",
            details=labels,
            context={"missing_documents": [c.value for c in missing_documents]},
        )

    now = datetime.now(UTC)
    async with atomic(session, "submit_actor"):
        actor.information_complete = True
        actor.completed_at = now
        actor.completed_by = submitted_by
        await session.flush()
        transitioned = await advance_if_actors_complete(session, actor.policy_id)
        await log_policy_activity(
            session,
            policy_id=actor.policy_id,
            action="actor_submitted",
            description=f"{descriptor.label} completó su información",
            details={
                "actor_type": actor_type.value,
                "actor_id": actor.id,
                "skip_validation": skip_validation,
                "policy_transitioned": transitioned,
            },
            performed_by=submitted_by,
            performed_by_type=performed_by_type,
        )

    policy = await load_policy(session, actor.policy_id)
    logger.info("%s %s submitted (policy %s now %s)", actor_type.value, actor.id, policy.id, policy.status.value)
    return SubmissionResult(
        actor_type=actor_type,
        actor_id=actor.id,
        completed_at=now,
        policy_id=policy.id,
        policy_status=policy.status,
        policy_transitioned=transitioned,
    )


async def register_document(
    session: AsyncSession,
    actor_type: ActorType,
    actor,
    *,
    category: DocumentCategory,
    file_name: str,
    storage_key: str,
    mime_type: str | None = None,
    file_size: int | None = None,
    uploaded_by: str | None = None,
    performed_by_type: str = "actor",
) -> ActorDocument:
    """Record an uploaded file against its owning actor."""
    descriptor = get_descriptor(actor_type)
    async with atomic(session, "register_document"):
        document = ActorDocument(
            policy_id=actor.policy_id,
            category=category,
            file_name=file_name,
            storage_key=storage_key,
            mime_type=mime_type,
            file_size=file_size,
            uploaded_by=uploaded_by,
            validation=None,
            **{descriptor.owner_fk: actor.id},
        )
        session.add(document)
        await session.flush()
        await log_policy_activity(
            session,
            policy_id=actor.policy_id,
            action="document_uploaded",
            description=f"{descriptor.label} subió {DOCUMENT_LABELS[category]}",
            details={
                "document_id": document.id,
                "category": category.value,
                "actor_type": descriptor.actor_type.value,
                "actor_id": actor.id,
            },
            performed_by=uploaded_by,
            performed_by_type=performed_by_type,
        )
    return document

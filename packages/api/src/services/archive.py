# This project was developed with assistance from AI tools.
"""Actor archival: snapshot to a history table, then detach what the actor owned.

Used by tenant replacement and guarantor-type changes. Uploaded files are
never deleted; their documents only lose the owner FK.
"""

import enum
import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from db import ActorSectionValidation
from db.enums import Nationality, PartyType, VerificationStatus
from sqlalchemy import delete, inspect, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.actor import ActorStub
from .actor_config import ActorDescriptor

logger = logging.getLogger(__name__)

_SNAPSHOT_EXCLUDE = frozenset({"access_token", "token_expiry"})
_CHILD_EXCLUDE = frozenset({"id", "created_at", "tenant_id", "joint_obligor_id", "aval_id"})
_RESET_KEEP = frozenset({"id", "policy_id", "created_at", "updated_at"})


@dataclass
class ArchiveOutcome:
    history: object
    documents_detached: int = 0
    validations_deleted: int = 0
    references_deleted: int = 0
    addresses_deleted: int = 0


def _jsonable(value):
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, datetime | date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return value


def _row_dict(row, exclude=frozenset()) -> dict:
    return {
        attr.key: _jsonable(getattr(row, attr.key))
        for attr in inspect(type(row)).column_attrs
        if attr.key not in exclude
    }


def _address_relations(descriptor: ActorDescriptor) -> list[str]:
    return [field.removesuffix("_id") for field in descriptor.address_fields]


def snapshot_actor(descriptor: ActorDescriptor, actor) -> dict:
    """JSON copy of the actor row with its addresses, references and document list."""
    data = _row_dict(actor, _SNAPSHOT_EXCLUDE)
    for relation in _address_relations(descriptor):
        address = getattr(actor, relation)
        data[relation] = _row_dict(address, _CHILD_EXCLUDE) if address is not None else None
    if descriptor.has_references:
        data["personal_references"] = [_row_dict(r, _CHILD_EXCLUDE) for r in actor.personal_references]
        data["commercial_references"] = [_row_dict(r, _CHILD_EXCLUDE) for r in actor.commercial_references]
    data["documents"] = [
        {
            "id": doc.id,
            "category": doc.category.value,
            "file_name": doc.file_name,
            "validation_status": doc.validation_status.value,
        }
        for doc in actor.documents
    ]
    return data


def build_history(descriptor: ActorDescriptor, actor, *, replaced_by: str, reason: str):
    return descriptor.history_model(
        policy_id=actor.policy_id,
        original_actor_id=actor.id,
        party_type=_jsonable(actor.party_type),
        first_name=actor.first_name,
        paternal_last_name=actor.paternal_last_name,
        maternal_last_name=actor.maternal_last_name,
        company_name=actor.company_name,
        email=actor.email,
        phone=actor.phone,
        verification_status=_jsonable(actor.verification_status),
        information_complete=bool(actor.information_complete),
        snapshot=snapshot_actor(descriptor, actor),
        replaced_by=replaced_by,
        replacement_reason=reason,
    )


async def load_for_archive(session: AsyncSession, descriptor: ActorDescriptor, actor_id: int):
    """Reload an actor with every relation archival touches."""
    model = descriptor.model
    result = await session.execute(
        select(model)
        .where(model.id == actor_id)
        .options(*descriptor.load_options())
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def archive_actor(
    session: AsyncSession,
    descriptor: ActorDescriptor,
    actor,
    *,
    replaced_by: str,
    reason: str,
) -> ArchiveOutcome:
    """Write the history row and strip the actor of its owned data.

    Runs inside the caller's transaction. The actor row itself is left in
    place; callers either reset it or delete it.
    """
    history = build_history(descriptor, actor, replaced_by=replaced_by, reason=reason)
    session.add(history)
    outcome = ArchiveOutcome(history=history)

    documents = list(actor.documents)
    for document in documents:
        if document.validation is not None:
            document.validation = None
            outcome.validations_deleted += 1
    actor.documents = []
    outcome.documents_detached = len(documents)

    if descriptor.has_references:
        outcome.references_deleted = len(actor.personal_references) + len(actor.commercial_references)
        actor.personal_references = []
        actor.commercial_references = []

    await session.execute(
        delete(ActorSectionValidation).where(
            ActorSectionValidation.actor_type == descriptor.actor_type,
            ActorSectionValidation.actor_id == actor.id,
        )
    )

    for relation in _address_relations(descriptor):
        address = getattr(actor, relation)
        if address is not None:
            setattr(actor, relation, None)
            await session.delete(address)
            outcome.addresses_deleted += 1

    await session.flush()
    logger.info(
        "Archived %s %s (%d documents detached)",
        descriptor.actor_type.value,
        actor.id,
        outcome.documents_detached,
    )
    return outcome


def reset_actor(actor, stub: ActorStub) -> None:
    """Blank every column except identity and ownership, then apply the stub."""
    for attr in inspect(type(actor)).column_attrs:
        if attr.key in _RESET_KEEP:
            continue
        column = attr.columns[0]
        if column.default is not None and column.default.is_scalar:
            setattr(actor, attr.key, column.default.arg)
        elif column.nullable:
            setattr(actor, attr.key, None)

    is_company = stub.party_type == PartyType.COMPANY
    actor.party_type = stub.party_type
    actor.email = stub.email
    actor.phone = stub.phone
    actor.nationality = Nationality.MEXICAN
    if is_company:
        actor.company_name = stub.company_name
    else:
        actor.first_name = stub.first_name
        actor.paternal_last_name = stub.paternal_last_name
        actor.maternal_last_name = stub.maternal_last_name
    actor.information_complete = False
    actor.verification_status = VerificationStatus.PENDING


def payer_display_name(actor) -> str:
    """Name stamped on payments an outgoing tenant already made."""
    if actor.party_type == PartyType.COMPANY:
        return actor.company_name or "Empresa"
    name = " ".join(part for part in (actor.first_name, actor.paternal_last_name) if part)
    return name or "Inquilino"

# This project was developed with assistance from AI tools.
"""Reviewer routes: section/document decisions, notes and validation progress."""

from db import get_db
from db.enums import ActorType
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import StaffUser
from ..schemas.validation import (
    ActorValidationDetails,
    DocumentValidationRequest,
    ReviewNoteCreate,
    ReviewNoteResponse,
    SectionValidationRequest,
    ValidationProgress,
    ValidationResult,
)
from ..services import validation

router = APIRouter()


@router.post("/sections", response_model=ValidationResult)
async def validate_section(
    body: SectionValidationRequest,
    user: StaffUser,
    session: AsyncSession = Depends(get_db),
) -> ValidationResult:
    """Approve or reject one review section of an actor."""
    return await validation.validate_section(
        session,
        body.actor_type,
        body.actor_id,
        body.section,
        body.status,
        reviewer=user.user_id,
        reason=body.reason,
    )


@router.post("/documents/{document_id}", response_model=ValidationResult)
async def validate_document(
    document_id: int,
    body: DocumentValidationRequest,
    user: StaffUser,
    session: AsyncSession = Depends(get_db),
) -> ValidationResult:
    return await validation.validate_document(
        session, document_id, body.status, reviewer=user.user_id, reason=body.reason,
    )


@router.get("/policies/{policy_id}/notes", response_model=list[ReviewNoteResponse])
async def list_notes(
    policy_id: int,
    _user: StaffUser,
    session: AsyncSession = Depends(get_db),
    actor_type: ActorType | None = None,
    actor_id: int | None = None,
) -> list[ReviewNoteResponse]:
    notes = await validation.get_review_notes(session, policy_id, actor_type=actor_type, actor_id=actor_id)
    return [ReviewNoteResponse.model_validate(n) for n in notes]


@router.post(
    "/policies/{policy_id}/notes",
    response_model=ReviewNoteResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_note(
    policy_id: int,
    body: ReviewNoteCreate,
    user: StaffUser,
    session: AsyncSession = Depends(get_db),
) -> ReviewNoteResponse:
    note = await validation.add_review_note(
        session,
        policy_id,
        body.note,
        created_by=user.user_id,
        actor_type=body.actor_type,
        actor_id=body.actor_id,
        document_id=body.document_id,
    )
    return ReviewNoteResponse.model_validate(note)


@router.get("/policies/{policy_id}/progress", response_model=ValidationProgress)
async def get_progress(
    policy_id: int,
    _user: StaffUser,
    session: AsyncSession = Depends(get_db),
) -> ValidationProgress:
    return await validation.get_validation_progress(session, policy_id)


@router.get("/actors/{actor_type}/{actor_id}", response_model=ActorValidationDetails)
async def get_actor_details(
    actor_type: ActorType,
    actor_id: int,
    _user: StaffUser,
    session: AsyncSession = Depends(get_db),
) -> ActorValidationDetails:
    """Section and document review state for one actor."""
    return await validation.get_actor_validation_details(session, actor_type, actor_id)

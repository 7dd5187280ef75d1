# This project was developed with assistance from AI tools.
"""Staff-side actor routes: view, save on behalf of, submit, and issue links."""

from db import get_db
from db.enums import ActorType, UserRole
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, StaffUser
from ..schemas.actor import ActorDetail, ActorTokenResponse, ActorUpdate, DocumentResponse, SubmissionResult
from ..schemas.auth import UserContext
from ..schemas.completeness import ActorCompletenessResponse
from ..services import actors as actor_service
from ..services.completeness import get_actor_completeness
from ..services.scope import ensure_policy_in_scope
from ..services.tokens import generate_actor_token

router = APIRouter()


async def _actor_in_scope(session: AsyncSession, actor_type: ActorType, actor_id: int, user: UserContext):
    actor = await actor_service.get_actor(session, actor_type, actor_id)
    await ensure_policy_in_scope(session, actor.policy_id, user)
    return actor


@router.get("/{actor_type}/{actor_id}", response_model=ActorDetail)
async def get_actor(
    actor_type: ActorType,
    actor_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ActorDetail:
    actor = await _actor_in_scope(session, actor_type, actor_id, user)
    return ActorDetail.model_validate(actor)


@router.get("/{actor_type}/{actor_id}/completeness", response_model=ActorCompletenessResponse)
async def get_completeness(
    actor_type: ActorType,
    actor_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ActorCompletenessResponse:
    """Missing fields and documents, without submitting."""
    actor = await _actor_in_scope(session, actor_type, actor_id, user)
    return get_actor_completeness(actor_type, actor)


@router.get("/{actor_type}/{actor_id}/documents", response_model=list[DocumentResponse])
async def list_documents(
    actor_type: ActorType,
    actor_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> list[DocumentResponse]:
    actor = await _actor_in_scope(session, actor_type, actor_id, user)
    return [DocumentResponse.model_validate(doc) for doc in actor.documents]


@router.patch("/{actor_type}/{actor_id}", response_model=ActorDetail)
async def save_actor(
    actor_type: ActorType,
    actor_id: int,
    body: ActorUpdate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ActorDetail:
    """Save actor data on the actor's behalf (partial update)."""
    actor = await _actor_in_scope(session, actor_type, actor_id, user)
    actor = await actor_service.update_actor(
        session, actor_type, actor_id, body, performed_by=user.user_id, actor=actor,
    )
    return ActorDetail.model_validate(actor)


@router.post("/{actor_type}/{actor_id}/submit", response_model=SubmissionResult)
async def submit_actor(
    actor_type: ActorType,
    actor_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    skip_validation: bool = Query(default=False, description="Admins only: submit with missing fields."),
) -> SubmissionResult:
    await _actor_in_scope(session, actor_type, actor_id, user)
    return await actor_service.submit_actor(
        session,
        actor_type,
        actor_id,
        submitted_by=user.user_id,
        skip_validation=skip_validation and user.role == UserRole.ADMIN,
        performed_by_type="user",
    )


@router.post("/{actor_type}/{actor_id}/token", response_model=ActorTokenResponse)
async def issue_token(
    actor_type: ActorType,
    actor_id: int,
    user: StaffUser,
    session: AsyncSession = Depends(get_db),
    renew: bool = False,
) -> ActorTokenResponse:
    """Issue (or reuse) the actor's portal link."""
    await _actor_in_scope(session, actor_type, actor_id, user)
    return await generate_actor_token(session, actor_type, actor_id, renew=renew)

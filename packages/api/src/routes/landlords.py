# This project was developed with assistance from AI tools.
"""Policy landlord (co-owner) routes, mounted under /api/policies."""

from db import get_db
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import AdminUser, CurrentUser
from ..schemas.actor import LandlordCreate, LandlordSummary
from ..services import landlords as landlord_service
from ..services.notifications import Notifier, get_notifier
from ..services.scope import ensure_policy_in_scope
from ..services.workflow import load_policy

router = APIRouter()


@router.get("/{policy_id}/landlords", response_model=list[LandlordSummary])
async def list_landlords(
    policy_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> list[LandlordSummary]:
    """Primary landlord first."""
    await ensure_policy_in_scope(session, policy_id, user)
    policy = await load_policy(session, policy_id)
    return [LandlordSummary.model_validate(landlord) for landlord in landlord_service.ordered_landlords(policy)]


@router.post(
    "/{policy_id}/landlords",
    response_model=LandlordSummary,
    status_code=status.HTTP_201_CREATED,
)
async def add_landlord(
    policy_id: int,
    body: LandlordCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
) -> LandlordSummary:
    await ensure_policy_in_scope(session, policy_id, user)
    landlord = await landlord_service.add_landlord(
        session, policy_id, body, performed_by=user.user_id, notifier=notifier,
    )
    return LandlordSummary.model_validate(landlord)


@router.put("/{policy_id}/landlords/{landlord_id}/primary", response_model=LandlordSummary)
async def set_primary(
    policy_id: int,
    landlord_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> LandlordSummary:
    await ensure_policy_in_scope(session, policy_id, user)
    landlord = await landlord_service.set_primary_landlord(
        session, policy_id, landlord_id, performed_by=user.user_id,
    )
    return LandlordSummary.model_validate(landlord)


@router.delete("/{policy_id}/landlords/{landlord_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_landlord(
    policy_id: int,
    landlord_id: int,
    user: AdminUser,
    session: AsyncSession = Depends(get_db),
) -> Response:
    """Remove a non-primary landlord (admin only)."""
    await landlord_service.remove_landlord(session, policy_id, landlord_id, performed_by=user.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

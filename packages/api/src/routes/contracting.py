# This project was developed with assistance from AI tools.
"""Investigation outcome and contract routes, mounted under /api/policies."""

from db import get_db
from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import NotFoundError
from ..middleware.auth import CurrentUser, StaffUser
from ..schemas.contract import ContractResponse, ContractUploadResult, MarkSignedRequest
from ..schemas.investigation import (
    CompleteInvestigationRequest,
    InvestigationResponse,
    InvestigationResult,
    LandlordDecisionRequest,
)
from ..schemas.workflow import TransitionResult
from ..services import contracts as contract_service
from ..services import investigation as investigation_service
from ..services.notifications import Notifier, get_notifier
from ..services.scope import ensure_policy_in_scope
from ..services.storage import StorageService, get_storage_service
from ..services.workflow import load_policy

router = APIRouter()


@router.get("/{policy_id}/investigation", response_model=InvestigationResponse)
async def get_investigation(
    policy_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> InvestigationResponse:
    await ensure_policy_in_scope(session, policy_id, user)
    policy = await load_policy(session, policy_id)
    if policy.investigation is None:
        raise NotFoundError(f"No investigation found for policy {policy_id}", context={"policy_id": policy_id})
    return InvestigationResponse.model_validate(policy.investigation)


@router.post("/{policy_id}/investigation/complete", response_model=InvestigationResult)
async def complete_investigation(
    policy_id: int,
    body: CompleteInvestigationRequest,
    user: StaffUser,
    session: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
) -> InvestigationResult:
    """Record the investigation verdict (admin and staff only)."""
    return await investigation_service.complete_investigation(
        session,
        policy_id,
        verdict=body.verdict,
        risk_level=body.risk_level,
        rejection_reason=body.rejection_reason,
        notes=body.notes,
        performed_by=user.user_id,
        notifier=notifier,
    )


@router.post("/{policy_id}/investigation/landlord-decision", response_model=InvestigationResult)
async def landlord_decision(
    policy_id: int,
    body: LandlordDecisionRequest,
    user: StaffUser,
    session: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
) -> InvestigationResult:
    """Record the landlord's decision on a rejected or high-risk investigation."""
    return await investigation_service.record_landlord_decision(
        session,
        policy_id,
        decision=body.decision,
        notes=body.notes,
        performed_by=user.user_id,
        notifier=notifier,
    )


@router.get("/{policy_id}/contracts", response_model=list[ContractResponse])
async def list_contracts(
    policy_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> list[ContractResponse]:
    await ensure_policy_in_scope(session, policy_id, user)
    contracts = await contract_service.list_contracts(session, policy_id)
    return [ContractResponse.model_validate(c) for c in contracts]


@router.post(
    "/{policy_id}/contracts",
    response_model=ContractUploadResult,
    status_code=status.HTTP_201_CREATED,
)
async def upload_contract(
    policy_id: int,
    user: StaffUser,
    file: UploadFile = File(...),
    session: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
    notifier: Notifier = Depends(get_notifier),
) -> ContractUploadResult:
    """Upload a new contract version (PDF or Word)."""
    file_data = await file.read()
    return await contract_service.register_contract(
        session,
        policy_id,
        file_data=file_data,
        file_name=file.filename or "contrato",
        content_type=file.content_type,
        uploaded_by=user.user_id,
        storage=storage,
        notifier=notifier,
    )


@router.post("/{policy_id}/contracts/mark-signed", response_model=TransitionResult)
async def mark_signed(
    policy_id: int,
    body: MarkSignedRequest,
    user: StaffUser,
    session: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
) -> TransitionResult:
    return await contract_service.mark_contract_signed(
        session,
        policy_id,
        performed_by=user.user_id,
        signed_at=body.signed_at,
        notes=body.notes,
        notifier=notifier,
    )

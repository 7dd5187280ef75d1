# This project was developed with assistance from AI tools.
"""Policy routes: CRUD, workflow transitions, replacement and cancellation."""

from db import get_db
from db.enums import PolicyStatus
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import AdminUser, CurrentUser, StaffUser
from ..schemas import Pagination
from ..schemas.policy import (
    CancelPolicyRequest,
    PolicyActivityResponse,
    PolicyCreate,
    PolicyDetailResponse,
    PolicyListResponse,
    PolicyResponse,
)
from ..schemas.replacement import (
    CancellationResult,
    ChangeGuarantorTypeRequest,
    GuarantorChangeResult,
    ReplaceTenantRequest,
    ReplaceTenantResult,
)
from ..schemas.workflow import (
    ActorsCompletion,
    ForceTransitionRequest,
    TransitionRequest,
    TransitionResult,
    WorkflowProgress,
)
from ..services import policy as policy_service
from ..services import workflow
from ..services.activity import get_policy_activities
from ..services.cancellation import cancel_policy
from ..services.notifications import Notifier, get_notifier
from ..services.replacement import change_guarantor_type, replace_tenant_on_policy
from ..services.scope import ensure_policy_in_scope

router = APIRouter()


@router.post("/", response_model=PolicyDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_policy(
    body: PolicyCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
) -> PolicyDetailResponse:
    """Create a policy with its actor stubs (optionally inviting them right away)."""
    policy = await policy_service.create_policy(session, body, user, notifier=notifier)
    return PolicyDetailResponse.model_validate(policy)


@router.get("/", response_model=PolicyListResponse)
async def list_policies(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
    filter_status: PolicyStatus | None = Query(default=None, alias="status"),
    search: str | None = None,
) -> PolicyListResponse:
    """List policies visible to the caller."""
    policies, total = await policy_service.list_policies(
        session, user, offset=offset, limit=limit, status=filter_status, search=search,
    )
    return PolicyListResponse(
        data=[PolicyResponse.model_validate(p) for p in policies],
        pagination=Pagination(
            total=total,
            offset=offset,
            limit=limit,
            has_more=offset + limit < total,
        ),
    )


@router.get("/{policy_id}", response_model=PolicyDetailResponse)
async def get_policy(
    policy_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> PolicyDetailResponse:
    policy = await policy_service.get_policy(session, policy_id, user)
    return PolicyDetailResponse.model_validate(policy)


@router.get("/{policy_id}/progress", response_model=WorkflowProgress)
async def get_progress(
    policy_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> WorkflowProgress:
    await ensure_policy_in_scope(session, policy_id, user)
    return await workflow.get_workflow_progress(session, policy_id)


@router.get("/{policy_id}/actors-status", response_model=ActorsCompletion)
async def get_actors_status(
    policy_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ActorsCompletion:
    """Which required actors have (not) submitted their information."""
    await ensure_policy_in_scope(session, policy_id, user)
    policy = await workflow.load_policy(session, policy_id)
    return workflow.check_all_actors_complete(policy)


@router.get("/{policy_id}/activities", response_model=list[PolicyActivityResponse])
async def list_activities(
    policy_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    action: str | None = None,
    limit: int = Query(default=100, ge=1, le=500),
) -> list[PolicyActivityResponse]:
    await ensure_policy_in_scope(session, policy_id, user)
    activities = await get_policy_activities(session, policy_id, action=action, limit=limit)
    return [PolicyActivityResponse.model_validate(a) for a in activities]


@router.post("/{policy_id}/transition", response_model=TransitionResult)
async def transition(
    policy_id: int,
    body: TransitionRequest,
    user: StaffUser,
    session: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
) -> TransitionResult:
    """Move the policy along the status graph (preconditions enforced)."""
    return await workflow.transition_policy_status(
        session,
        policy_id,
        body.new_status,
        performed_by=user.user_id,
        notes=body.notes,
        reason=body.reason,
        notifier=notifier,
    )


@router.post("/{policy_id}/force-transition", response_model=TransitionResult)
async def force_transition(
    policy_id: int,
    body: ForceTransitionRequest,
    user: AdminUser,
    session: AsyncSession = Depends(get_db),
) -> TransitionResult:
    """Admin-only override of the status graph."""
    return await workflow.force_transition(
        session, policy_id, body.new_status, performed_by=user.user_id, reason=body.reason,
    )


@router.post("/{policy_id}/replace-tenant", response_model=ReplaceTenantResult)
async def replace_tenant(
    policy_id: int,
    body: ReplaceTenantRequest,
    user: StaffUser,
    session: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
) -> ReplaceTenantResult:
    return await replace_tenant_on_policy(
        session,
        policy_id,
        reason=body.reason,
        new_tenant=body.new_tenant,
        replace_guarantors=body.replace_guarantors,
        performed_by=user.user_id,
        notifier=notifier,
    )


@router.post("/{policy_id}/change-guarantor-type", response_model=GuarantorChangeResult)
async def change_guarantor(
    policy_id: int,
    body: ChangeGuarantorTypeRequest,
    user: StaffUser,
    session: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
) -> GuarantorChangeResult:
    return await change_guarantor_type(
        session,
        policy_id,
        reason=body.reason,
        new_guarantor_type=body.new_guarantor_type,
        new_joint_obligors=body.new_joint_obligors,
        new_avals=body.new_avals,
        performed_by=user.user_id,
        notifier=notifier,
    )


@router.post("/{policy_id}/cancel", response_model=CancellationResult)
async def cancel(
    policy_id: int,
    body: CancelPolicyRequest,
    user: StaffUser,
    session: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
) -> CancellationResult:
    """Cancel a policy (admin and staff only)."""
    return await cancel_policy(
        session,
        policy_id,
        reason=body.reason,
        comment=body.comment,
        performed_by=user.user_id,
        notifier=notifier,
    )

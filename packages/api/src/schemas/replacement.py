# This project was developed with assistance from AI tools.
"""Tenant replacement, guarantor-type change and cancellation schemas."""

from datetime import datetime

from db.enums import GuarantorType, PolicyCancellationReason, PolicyStatus
from pydantic import BaseModel, Field

from .actor import ActorStub


class ReplaceTenantRequest(BaseModel):
    reason: str = Field(min_length=1)
    new_tenant: ActorStub
    replace_guarantors: bool = False


class ReplaceTenantResult(BaseModel):
    policy_id: int
    tenant_id: int
    history_id: int
    documents_detached: int
    guarantors_archived: int
    payments_stamped: int
    payments_cancelled: int
    previous_status: PolicyStatus
    status: PolicyStatus
    failed_followups: list[str] = []


class ChangeGuarantorTypeRequest(BaseModel):
    reason: str = Field(min_length=1)
    new_guarantor_type: GuarantorType
    new_joint_obligors: list[ActorStub] = []
    new_avals: list[ActorStub] = []


class GuarantorChangeResult(BaseModel):
    policy_id: int
    previous_guarantor_type: GuarantorType
    guarantor_type: GuarantorType
    archived_joint_obligors: int
    archived_avals: int
    created_joint_obligor_ids: list[int]
    created_aval_ids: list[int]
    previous_status: PolicyStatus
    status: PolicyStatus
    failed_followups: list[str] = []


class CancellationResult(BaseModel):
    policy_id: int
    previous_status: PolicyStatus
    status: PolicyStatus
    cancelled_at: datetime
    reason: PolicyCancellationReason
    comment: str

# This project was developed with assistance from AI tools.
"""Policy request/response schemas."""

from datetime import datetime
from decimal import Decimal

from db.enums import (
    GuarantorType,
    InvestigationVerdict,
    LandlordDecision,
    PolicyCancellationReason,
    PolicyStatus,
    RiskLevel,
)
from pydantic import BaseModel, ConfigDict, Field, model_validator

from . import Pagination
from .actor import ActorStub, ActorSummary, LandlordSummary


def check_guarantor_stubs(
    guarantor_type: GuarantorType,
    joint_obligors: list[ActorStub],
    avals: list[ActorStub],
) -> list[str]:
    """Problems with the guarantor stubs supplied for a guarantor type."""
    problems = []
    if guarantor_type.requires_joint_obligors and not joint_obligors:
        problems.append(f"Guarantor type {guarantor_type.value} requires at least one joint obligor")
    if guarantor_type.requires_avals and not avals:
        problems.append(f"Guarantor type {guarantor_type.value} requires at least one aval")
    return problems


class PolicyCreate(BaseModel):
    """Create a policy with its initial actor stubs."""

    rent_amount: Decimal = Field(gt=0)
    contract_length: int | None = Field(default=None, ge=1, le=120)
    property_address: str | None = None
    guarantor_type: GuarantorType = GuarantorType.NONE
    manager_email: str | None = None
    tenant: ActorStub
    landlords: list[ActorStub] = Field(min_length=1)
    joint_obligors: list[ActorStub] = []
    avals: list[ActorStub] = []
    send_invitations: bool = Field(
        default=False,
        description="Move straight to COLLECTING_INFO and e-mail every actor their link.",
    )

    @model_validator(mode="after")
    def _guarantors_match_type(self):
        problems = check_guarantor_stubs(self.guarantor_type, self.joint_obligors, self.avals)
        if problems:
            raise ValueError("; ".join(problems))
        return self


class InvestigationSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    verdict: InvestigationVerdict | None = None
    risk_level: RiskLevel | None = None
    rejection_reason: str | None = None
    completed_at: datetime | None = None
    landlord_decision: LandlordDecision | None = None
    landlord_override: bool | None = None


class PolicyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    policy_number: str
    status: PolicyStatus
    guarantor_type: GuarantorType
    rent_amount: Decimal
    contract_length: int
    property_address: str | None = None
    created_by: str
    managed_by: str | None = None
    current_step: str | None = None
    review_notes: str | None = None
    rejection_reason: str | None = None
    submitted_at: datetime | None = None
    approved_at: datetime | None = None
    rejected_at: datetime | None = None
    activated_at: datetime | None = None
    expires_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: PolicyCancellationReason | None = None
    cancellation_comment: str | None = None
    cancelled_by: str | None = None
    created_at: datetime
    updated_at: datetime


class PolicyDetailResponse(PolicyResponse):
    tenant: ActorSummary | None = None
    landlords: list[LandlordSummary] = []
    joint_obligors: list[ActorSummary] = []
    avals: list[ActorSummary] = []
    investigation: InvestigationSummary | None = None


class PolicyListResponse(BaseModel):
    data: list[PolicyResponse]
    pagination: Pagination


class CancelPolicyRequest(BaseModel):
    reason: PolicyCancellationReason
    comment: str = Field(min_length=1)


class PolicyActivityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    policy_id: int
    action: str
    description: str
    details: dict | None = None
    performed_by: str | None = None
    performed_by_type: str | None = None
    created_at: datetime

# This project was developed with assistance from AI tools.
"""Investigation outcome and landlord decision schemas."""

from datetime import datetime

from db.enums import InvestigationVerdict, LandlordDecision, PolicyStatus, RiskLevel
from pydantic import BaseModel, ConfigDict, Field, model_validator


class CompleteInvestigationRequest(BaseModel):
    verdict: InvestigationVerdict
    risk_level: RiskLevel | None = Field(
        default=None,
        description="Defaults to HIGH for a HIGH_RISK verdict and LOW otherwise.",
    )
    rejection_reason: str | None = None
    notes: str | None = None

    @model_validator(mode="after")
    def _rejection_needs_reason(self):
        if self.verdict == InvestigationVerdict.REJECTED and not (self.rejection_reason or "").strip():
            raise ValueError("A rejection reason is required for a REJECTED verdict")
        return self


class LandlordDecisionRequest(BaseModel):
    decision: LandlordDecision
    notes: str | None = None


class InvestigationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    policy_id: int
    verdict: InvestigationVerdict | None = None
    risk_level: RiskLevel | None = None
    notes: str | None = None
    rejection_reason: str | None = None
    completed_by: str | None = None
    completed_at: datetime | None = None
    landlord_decision: LandlordDecision | None = None
    landlord_override: bool | None = None
    landlord_notes: str | None = None
    landlord_decided_by: str | None = None
    landlord_decided_at: datetime | None = None


class InvestigationResult(BaseModel):
    """Outcome of recording a verdict or a landlord decision."""

    policy_id: int
    investigation: InvestigationResponse
    previous_status: PolicyStatus
    status: PolicyStatus
    failed_followups: list[str] = []

# This project was developed with assistance from AI tools.
"""Lease contract schemas."""

from datetime import datetime

from db.enums import PolicyStatus
from pydantic import BaseModel, ConfigDict


class ContractResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    policy_id: int
    version: int
    file_name: str | None = None
    mime_type: str | None = None
    file_size: int | None = None
    is_current: bool
    uploaded_by: str | None = None
    signed_at: datetime | None = None
    signed_by: str | None = None
    created_at: datetime | None = None


class ContractUploadResult(BaseModel):
    policy_id: int
    contract: ContractResponse
    previous_status: PolicyStatus
    status: PolicyStatus


class MarkSignedRequest(BaseModel):
    signed_at: datetime | None = None
    notes: str | None = None

# This project was developed with assistance from AI tools.
"""Reviewer validation (sections, documents, notes, progress) schemas."""

from datetime import datetime

from db.enums import ActorSection, ActorType, DocumentCategory, ValidationStatus, VerificationStatus
from pydantic import BaseModel, ConfigDict, Field


class SectionValidationRequest(BaseModel):
    actor_type: ActorType
    actor_id: int
    section: ActorSection
    status: ValidationStatus
    reason: str | None = None


class DocumentValidationRequest(BaseModel):
    status: ValidationStatus
    reason: str | None = None


class ValidationResult(BaseModel):
    actor_type: ActorType
    actor_id: int
    status: ValidationStatus
    actor_approved: bool = False
    policy_transitioned: bool = False


class ReviewNoteCreate(BaseModel):
    note: str = Field(min_length=1)
    actor_type: ActorType | None = None
    actor_id: int | None = None
    document_id: int | None = None


class ReviewNoteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    policy_id: int
    actor_type: ActorType | None = None
    actor_id: int | None = None
    document_id: int | None = None
    note: str
    created_by: str
    created_at: datetime


class SectionStatus(BaseModel):
    section: ActorSection
    label: str
    status: ValidationStatus
    validated_by: str | None = None
    validated_at: datetime | None = None
    rejection_reason: str | None = None


class DocumentStatus(BaseModel):
    document_id: int
    category: DocumentCategory
    label: str
    file_name: str
    status: ValidationStatus
    validated_by: str | None = None
    validated_at: datetime | None = None
    rejection_reason: str | None = None


class ActorValidationDetails(BaseModel):
    actor_type: ActorType
    actor_id: int
    name: str
    verification_status: VerificationStatus
    sections: list[SectionStatus]
    documents: list[DocumentStatus]


class ItemCounts(BaseModel):
    total: int = 0
    approved: int = 0
    rejected: int = 0
    pending: int = 0
    in_review: int = 0


class ActorValidationProgress(BaseModel):
    actor_type: ActorType
    actor_id: int
    name: str
    verification_status: VerificationStatus
    sections: ItemCounts
    documents: ItemCounts


class ValidationProgress(BaseModel):
    policy_id: int
    actors: list[ActorValidationProgress]
    overall_percentage: int
    all_approved: bool

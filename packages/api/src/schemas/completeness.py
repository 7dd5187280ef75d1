# This project was developed with assistance from AI tools.
"""Actor completeness schemas."""

from db.enums import ActorType, DocumentCategory
from pydantic import BaseModel


class FieldIssue(BaseModel):
    """One missing or malformed field with its user-facing message."""

    field: str
    message: str


class CompletenessResult(BaseModel):
    """Outcome of the field-level completeness check (all or nothing)."""

    valid: bool
    missing_fields: list[str] = []
    issues: list[FieldIssue] = []

    @property
    def messages(self) -> list[str]:
        return [issue.message for issue in self.issues]


class DocumentRequirement(BaseModel):
    """A document category an actor must (or may) upload."""

    category: DocumentCategory
    label: str
    required: bool
    is_provided: bool = False
    document_id: int | None = None


class ActorCompletenessResponse(BaseModel):
    """Field and document completeness for a single actor."""

    actor_type: ActorType
    actor_id: int
    fields: CompletenessResult
    documents: list[DocumentRequirement]
    missing_documents: list[DocumentCategory]
    is_complete: bool

# This project was developed with assistance from AI tools.
"""Actor (tenant, landlord, joint obligor, aval) request/response schemas."""

from datetime import datetime
from decimal import Decimal

from db.enums import (
    ActorType,
    DocumentCategory,
    GuaranteeMethod,
    Nationality,
    PartyType,
    PolicyStatus,
    ValidationStatus,
    VerificationStatus,
)
from pydantic import BaseModel, ConfigDict, Field

from .completeness import ActorCompletenessResponse

# Address relations an actor update may carry, by relationship name.
ADDRESS_KEYS = (
    "address",
    "employer_address",
    "previous_rental_address",
    "guarantee_property_address",
)
REFERENCE_KEYS = ("personal_references", "commercial_references")
EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


class AddressIn(BaseModel):
    street: str
    exterior_number: str
    interior_number: str | None = None
    neighborhood: str | None = None
    postal_code: str = Field(min_length=4, max_length=10)
    municipality: str | None = None
    city: str | None = None
    state: str
    country: str = "México"


class AddressResponse(AddressIn):
    model_config = ConfigDict(from_attributes=True)

    id: int


class PersonalReferenceIn(BaseModel):
    first_name: str
    paternal_last_name: str
    maternal_last_name: str | None = None
    phone: str
    email: str | None = None
    relationship_type: str


class PersonalReferenceResponse(PersonalReferenceIn):
    model_config = ConfigDict(from_attributes=True)

    id: int


class CommercialReferenceIn(BaseModel):
    company_name: str
    contact_first_name: str
    contact_paternal_last_name: str
    phone: str
    email: str | None = None
    relationship_type: str
    years_of_relationship: int | None = Field(default=None, ge=0)


class CommercialReferenceResponse(CommercialReferenceIn):
    model_config = ConfigDict(from_attributes=True)

    id: int


class ActorUpdate(BaseModel):
    """Partial update of an actor's own information.

    Fields that do not exist on the target actor kind are rejected by the
    service. Nested addresses are upserted; reference lists replace the
    existing ones wholesale.
    """

    model_config = ConfigDict(extra="forbid")

    party_type: PartyType | None = None
    first_name: str | None = None
    middle_name: str | None = None
    paternal_last_name: str | None = None
    maternal_last_name: str | None = None
    nationality: Nationality | None = None
    curp: str | None = None
    rfc: str | None = None
    passport: str | None = None
    email: str | None = None
    phone: str | None = None
    work_phone: str | None = None
    personal_email: str | None = None
    work_email: str | None = None

    company_name: str | None = None
    company_rfc: str | None = None
    legal_rep_first_name: str | None = None
    legal_rep_middle_name: str | None = None
    legal_rep_paternal_last_name: str | None = None
    legal_rep_maternal_last_name: str | None = None
    legal_rep_position: str | None = None
    legal_rep_rfc: str | None = None
    legal_rep_phone: str | None = None
    legal_rep_email: str | None = None
    additional_info: str | None = None

    # Employment (tenant, joint obligor, aval)
    employment_status: str | None = None
    occupation: str | None = None
    employer_name: str | None = None
    position: str | None = None
    monthly_income: Decimal | None = Field(default=None, ge=0)
    income_source: str | None = None
    years_at_job: int | None = Field(default=None, ge=0)

    # Rental history (tenant)
    previous_landlord_name: str | None = None
    previous_landlord_phone: str | None = None
    previous_landlord_email: str | None = None
    previous_rent_amount: Decimal | None = Field(default=None, ge=0)
    rental_history_years: int | None = Field(default=None, ge=0)
    reason_for_moving: str | None = None
    number_of_occupants: int | None = Field(default=None, ge=0)
    has_pets: bool | None = None
    pet_description: str | None = None

    # Bank (landlord, joint obligor)
    bank_name: str | None = None
    account_number: str | None = None
    clabe: str | None = None
    account_holder: str | None = None

    # Guarantee (joint obligor, aval)
    guarantee_method: GuaranteeMethod | None = None
    relationship_to_tenant: str | None = None
    property_value: Decimal | None = Field(default=None, ge=0)
    property_deed_number: str | None = None
    property_registry: str | None = None
    property_tax_account: str | None = None
    marital_status: str | None = None
    spouse_name: str | None = None
    spouse_rfc: str | None = None
    spouse_curp: str | None = None

    address: AddressIn | None = None
    employer_address: AddressIn | None = None
    previous_rental_address: AddressIn | None = None
    guarantee_property_address: AddressIn | None = None

    personal_references: list[PersonalReferenceIn] | None = None
    commercial_references: list[CommercialReferenceIn] | None = None


class ActorStub(BaseModel):
    """Minimal data to create (or reset) an actor before they fill in the rest."""

    party_type: PartyType = PartyType.INDIVIDUAL
    email: str = Field(pattern=EMAIL_PATTERN)
    phone: str | None = None
    first_name: str | None = None
    paternal_last_name: str | None = None
    maternal_last_name: str | None = None
    company_name: str | None = None


class ActorSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    party_type: PartyType
    display_name: str
    email: str
    phone: str | None = None
    information_complete: bool
    completed_at: datetime | None = None
    verification_status: VerificationStatus
    verified_at: datetime | None = None


class LandlordSummary(ActorSummary):
    is_primary: bool = False


class LandlordCreate(ActorStub):
    """Extra landlord (co-owner) added to an existing policy."""

    phone: str = Field(pattern=r"^\d{10}$", description="Ten-digit phone number.")
    is_primary: bool = False
    send_invitation: bool = True


class ActorDetail(ActorSummary):
    """Everything an actor or reviewer sees about one actor."""

    first_name: str | None = None
    middle_name: str | None = None
    paternal_last_name: str | None = None
    maternal_last_name: str | None = None
    nationality: Nationality | None = None
    curp: str | None = None
    rfc: str | None = None
    passport: str | None = None
    company_name: str | None = None
    company_rfc: str | None = None
    legal_rep_first_name: str | None = None
    legal_rep_paternal_last_name: str | None = None
    legal_rep_maternal_last_name: str | None = None
    occupation: str | None = None
    employer_name: str | None = None
    monthly_income: Decimal | None = None
    guarantee_method: GuaranteeMethod | None = None
    relationship_to_tenant: str | None = None
    property_value: Decimal | None = None
    property_deed_number: str | None = None
    property_registry: str | None = None
    bank_name: str | None = None
    clabe: str | None = None
    account_holder: str | None = None
    address: AddressResponse | None = None
    personal_references: list[PersonalReferenceResponse] = []
    commercial_references: list[CommercialReferenceResponse] = []


class ActorTokenResponse(BaseModel):
    actor_type: ActorType
    actor_id: int
    token: str
    expires_at: datetime
    url: str


class DocumentResponse(BaseModel):
    """Actor document metadata with its review status."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    policy_id: int
    category: DocumentCategory
    file_name: str
    mime_type: str | None = None
    file_size: int | None = None
    uploaded_by: str | None = None
    verified_at: datetime | None = None
    rejection_reason: str | None = None
    created_at: datetime
    validation_status: ValidationStatus = ValidationStatus.PENDING


class SubmissionResult(BaseModel):
    """Outcome of ``submit_actor``."""

    actor_type: ActorType
    actor_id: int
    completed_at: datetime
    policy_id: int
    policy_status: PolicyStatus
    policy_transitioned: bool = False


class ActorPortalResponse(BaseModel):
    """What an actor sees when opening their invitation link."""

    actor_type: ActorType
    policy_number: str
    policy_status: PolicyStatus
    actor: ActorDetail
    completeness: ActorCompletenessResponse
    documents: list[DocumentResponse]

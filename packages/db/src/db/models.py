# This project was developed with assistance from AI tools.
"""
Arrenda -- domain models

Rental guarantee policies, the four actor kinds that take part in them
(tenant, landlord, joint obligor, aval), their documents and review state,
archived actor history, and the policy activity log.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from .database import Base
from .enums import (
    ActorSection,
    ActorType,
    DocumentCategory,
    GuaranteeMethod,
    GuarantorType,
    InvestigationVerdict,
    LandlordDecision,
    Nationality,
    PartyType,
    PayerType,
    PaymentStatus,
    PaymentType,
    PolicyCancellationReason,
    PolicyStatus,
    RiskLevel,
    ValidationStatus,
    VerificationStatus,
)


class Policy(Base):
    """Rental guarantee policy."""

    __tablename__ = "policies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    policy_number = Column(String(50), unique=True, nullable=False, index=True)
    status = Column(
        Enum(PolicyStatus, name="policy_status", native_enum=False),
        nullable=False,
        default=PolicyStatus.DRAFT,
        index=True,
    )
    guarantor_type = Column(
        Enum(GuarantorType, name="guarantor_type", native_enum=False),
        nullable=False,
        default=GuarantorType.NONE,
    )
    rent_amount = Column(Numeric(12, 2), nullable=False)
    contract_length = Column(Integer, nullable=False, default=12)
    property_address = Column(Text, nullable=True)
    created_by = Column(String(255), nullable=False)
    managed_by = Column(String(255), nullable=True, index=True)
    manager_email = Column(String(255), nullable=True)
    current_step = Column(String(50), nullable=True)
    review_notes = Column(Text, nullable=True)
    rejection_reason = Column(Text, nullable=True)
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)
    activated_at = Column(DateTime(timezone=True), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancellation_reason = Column(
        Enum(PolicyCancellationReason, name="policy_cancellation_reason", native_enum=False),
        nullable=True,
    )
    cancellation_comment = Column(Text, nullable=True)
    cancelled_by = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    tenant = relationship(
        "Tenant", back_populates="policy", uselist=False, cascade="all, delete-orphan",
    )
    landlords = relationship(
        "Landlord", back_populates="policy", cascade="all, delete-orphan",
        order_by="Landlord.id",
    )
    joint_obligors = relationship(
        "JointObligor", back_populates="policy", cascade="all, delete-orphan",
        order_by="JointObligor.id",
    )
    avals = relationship(
        "Aval", back_populates="policy", cascade="all, delete-orphan",
        order_by="Aval.id",
    )
    investigation = relationship(
        "Investigation", back_populates="policy", uselist=False, cascade="all, delete-orphan",
    )
    contracts = relationship(
        "Contract", back_populates="policy", cascade="all, delete-orphan",
        order_by="Contract.version",
    )
    payments = relationship(
        "Payment", back_populates="policy", cascade="all, delete-orphan",
    )
    activities = relationship(
        "PolicyActivity", back_populates="policy", cascade="all, delete-orphan",
        order_by="PolicyActivity.created_at",
    )
    review_note_entries = relationship(
        "ReviewNote", back_populates="policy", cascade="all, delete-orphan",
    )
    tenant_history = relationship(
        "TenantHistory", back_populates="policy", cascade="all, delete-orphan",
    )
    joint_obligor_history = relationship(
        "JointObligorHistory", back_populates="policy", cascade="all, delete-orphan",
    )
    aval_history = relationship(
        "AvalHistory", back_populates="policy", cascade="all, delete-orphan",
    )

    @property
    def primary_landlord(self):
        return next((landlord for landlord in self.landlords if landlord.is_primary), None)

    @property
    def current_contract(self):
        return next((contract for contract in self.contracts if contract.is_current), None)

    def __repr__(self):
        return f"<Policy(id={self.id}, number='{self.policy_number}', status='{self.status}')>"


class Address(Base):
    """Structured Mexican address owned by an actor."""

    __tablename__ = "addresses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    street = Column(String(255), nullable=False)
    exterior_number = Column(String(50), nullable=False)
    interior_number = Column(String(50), nullable=True)
    neighborhood = Column(String(255), nullable=True)
    postal_code = Column(String(10), nullable=False)
    municipality = Column(String(255), nullable=True)
    city = Column(String(255), nullable=True)
    state = Column(String(100), nullable=False)
    country = Column(String(100), nullable=False, default="México")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Address(id={self.id}, street='{self.street} {self.exterior_number}')>"


class ActorMixin:
    """Columns shared by every actor kind (person or company)."""

    party_type = Column(
        Enum(PartyType, name="party_type", native_enum=False),
        nullable=False,
        default=PartyType.INDIVIDUAL,
    )
    # Person
    first_name = Column(String(100), nullable=True)
    middle_name = Column(String(100), nullable=True)
    paternal_last_name = Column(String(100), nullable=True)
    maternal_last_name = Column(String(100), nullable=True)
    nationality = Column(
        Enum(Nationality, name="nationality", native_enum=False),
        nullable=True,
        default=Nationality.MEXICAN,
    )
    curp = Column(String(18), nullable=True)
    rfc = Column(String(13), nullable=True)
    passport = Column(String(50), nullable=True)
    # Contact
    email = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=True)
    work_phone = Column(String(20), nullable=True)
    personal_email = Column(String(255), nullable=True)
    work_email = Column(String(255), nullable=True)
    # Company
    company_name = Column(String(255), nullable=True)
    company_rfc = Column(String(12), nullable=True)
    legal_rep_first_name = Column(String(100), nullable=True)
    legal_rep_middle_name = Column(String(100), nullable=True)
    legal_rep_paternal_last_name = Column(String(100), nullable=True)
    legal_rep_maternal_last_name = Column(String(100), nullable=True)
    legal_rep_position = Column(String(100), nullable=True)
    legal_rep_rfc = Column(String(13), nullable=True)
    legal_rep_phone = Column(String(20), nullable=True)
    legal_rep_email = Column(String(255), nullable=True)
    additional_info = Column(Text, nullable=True)
    # Completion and review
    information_complete = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    completed_by = Column(String(255), nullable=True)
    verification_status = Column(
        Enum(VerificationStatus, name="verification_status", native_enum=False),
        nullable=False,
        default=VerificationStatus.PENDING,
    )
    verified_at = Column(DateTime(timezone=True), nullable=True)
    verified_by = Column(String(255), nullable=True)
    rejection_reason = Column(Text, nullable=True)
    # Self-service access
    access_token = Column(String(64), unique=True, nullable=True, index=True)
    token_expiry = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    @property
    def is_company(self) -> bool:
        return self.party_type == PartyType.COMPANY

    @property
    def display_name(self) -> str:
        if self.is_company:
            return self.company_name or ""
        parts = [self.first_name, self.middle_name, self.paternal_last_name, self.maternal_last_name]
        return " ".join(p for p in parts if p)


class EmploymentMixin:
    """Employment and income columns (tenant, joint obligor, aval)."""

    employment_status = Column(String(50), nullable=True)
    occupation = Column(String(255), nullable=True)
    employer_name = Column(String(255), nullable=True)
    position = Column(String(255), nullable=True)
    monthly_income = Column(Numeric(12, 2), nullable=True)
    income_source = Column(String(255), nullable=True)
    years_at_job = Column(Integer, nullable=True)


class PropertyGuaranteeMixin:
    """Property offered as guarantee (joint obligor in property mode, aval)."""

    relationship_to_tenant = Column(String(100), nullable=True)
    property_value = Column(Numeric(14, 2), nullable=True)
    property_deed_number = Column(String(100), nullable=True)
    property_registry = Column(String(100), nullable=True)
    property_tax_account = Column(String(100), nullable=True)
    marital_status = Column(String(50), nullable=True)
    spouse_name = Column(String(255), nullable=True)
    spouse_rfc = Column(String(13), nullable=True)
    spouse_curp = Column(String(18), nullable=True)


class Tenant(ActorMixin, EmploymentMixin, Base):
    """Tenant renting the property (at most one per policy)."""

    __tablename__ = "tenants"

    id = Column(Integer, primary_key=True, autoincrement=True)
    policy_id = Column(
        Integer, ForeignKey("policies.id", ondelete="CASCADE"), nullable=False, unique=True,
    )
    address_id = Column(Integer, ForeignKey("addresses.id", ondelete="SET NULL"), nullable=True)
    employer_address_id = Column(
        Integer, ForeignKey("addresses.id", ondelete="SET NULL"), nullable=True,
    )
    previous_rental_address_id = Column(
        Integer, ForeignKey("addresses.id", ondelete="SET NULL"), nullable=True,
    )
    # Rental history
    previous_landlord_name = Column(String(255), nullable=True)
    previous_landlord_phone = Column(String(20), nullable=True)
    previous_landlord_email = Column(String(255), nullable=True)
    previous_rent_amount = Column(Numeric(12, 2), nullable=True)
    rental_history_years = Column(Integer, nullable=True)
    reason_for_moving = Column(Text, nullable=True)
    number_of_occupants = Column(Integer, nullable=True)
    has_pets = Column(Boolean, nullable=False, default=False)
    pet_description = Column(Text, nullable=True)

    policy = relationship("Policy", back_populates="tenant")
    address = relationship("Address", foreign_keys=[address_id])
    employer_address = relationship("Address", foreign_keys=[employer_address_id])
    previous_rental_address = relationship("Address", foreign_keys=[previous_rental_address_id])
    personal_references = relationship(
        "PersonalReference", back_populates="tenant", cascade="all, delete-orphan",
    )
    commercial_references = relationship(
        "CommercialReference", back_populates="tenant", cascade="all, delete-orphan",
    )
    documents = relationship("ActorDocument", back_populates="tenant")

    def __repr__(self):
        return f"<Tenant(id={self.id}, policy_id={self.policy_id}, email='{self.email}')>"


class Landlord(ActorMixin, Base):
    """Property owner; exactly one landlord per policy is primary."""

    __tablename__ = "landlords"

    id = Column(Integer, primary_key=True, autoincrement=True)
    policy_id = Column(
        Integer, ForeignKey("policies.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    is_primary = Column(Boolean, nullable=False, default=False)
    address_id = Column(Integer, ForeignKey("addresses.id", ondelete="SET NULL"), nullable=True)
    bank_name = Column(String(100), nullable=True)
    account_number = Column(String(30), nullable=True)
    clabe = Column(String(18), nullable=True)
    account_holder = Column(String(255), nullable=True)

    policy = relationship("Policy", back_populates="landlords")
    address = relationship("Address", foreign_keys=[address_id])
    documents = relationship("ActorDocument", back_populates="landlord")

    def __repr__(self):
        return f"<Landlord(id={self.id}, policy_id={self.policy_id}, primary={self.is_primary})>"


class JointObligor(ActorMixin, EmploymentMixin, PropertyGuaranteeMixin, Base):
    """Joint obligor guaranteeing the lease with income or property."""

    __tablename__ = "joint_obligors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    policy_id = Column(
        Integer, ForeignKey("policies.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    guarantee_method = Column(
        Enum(GuaranteeMethod, name="guarantee_method", native_enum=False),
        nullable=True,
    )
    bank_name = Column(String(100), nullable=True)
    account_holder = Column(String(255), nullable=True)
    address_id = Column(Integer, ForeignKey("addresses.id", ondelete="SET NULL"), nullable=True)
    employer_address_id = Column(
        Integer, ForeignKey("addresses.id", ondelete="SET NULL"), nullable=True,
    )
    guarantee_property_address_id = Column(
        Integer, ForeignKey("addresses.id", ondelete="SET NULL"), nullable=True,
    )

    policy = relationship("Policy", back_populates="joint_obligors")
    address = relationship("Address", foreign_keys=[address_id])
    employer_address = relationship("Address", foreign_keys=[employer_address_id])
    guarantee_property_address = relationship(
        "Address", foreign_keys=[guarantee_property_address_id],
    )
    personal_references = relationship(
        "PersonalReference", back_populates="joint_obligor", cascade="all, delete-orphan",
    )
    commercial_references = relationship(
        "CommercialReference", back_populates="joint_obligor", cascade="all, delete-orphan",
    )
    documents = relationship("ActorDocument", back_populates="joint_obligor")

    def __repr__(self):
        return f"<JointObligor(id={self.id}, policy_id={self.policy_id})>"


class Aval(ActorMixin, EmploymentMixin, PropertyGuaranteeMixin, Base):
    """Aval (guarantor) backing the lease with real estate."""

    __tablename__ = "avals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    policy_id = Column(
        Integer, ForeignKey("policies.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    address_id = Column(Integer, ForeignKey("addresses.id", ondelete="SET NULL"), nullable=True)
    employer_address_id = Column(
        Integer, ForeignKey("addresses.id", ondelete="SET NULL"), nullable=True,
    )
    guarantee_property_address_id = Column(
        Integer, ForeignKey("addresses.id", ondelete="SET NULL"), nullable=True,
    )

    policy = relationship("Policy", back_populates="avals")
    address = relationship("Address", foreign_keys=[address_id])
    employer_address = relationship("Address", foreign_keys=[employer_address_id])
    guarantee_property_address = relationship(
        "Address", foreign_keys=[guarantee_property_address_id],
    )
    personal_references = relationship(
        "PersonalReference", back_populates="aval", cascade="all, delete-orphan",
    )
    commercial_references = relationship(
        "CommercialReference", back_populates="aval", cascade="all, delete-orphan",
    )
    documents = relationship("ActorDocument", back_populates="aval")

    def __repr__(self):
        return f"<Aval(id={self.id}, policy_id={self.policy_id})>"


class PersonalReference(Base):
    """Personal reference given by an individual actor."""

    __tablename__ = "personal_references"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=True, index=True)
    joint_obligor_id = Column(
        Integer, ForeignKey("joint_obligors.id", ondelete="CASCADE"), nullable=True, index=True,
    )
    aval_id = Column(Integer, ForeignKey("avals.id", ondelete="CASCADE"), nullable=True, index=True)
    first_name = Column(String(100), nullable=False)
    paternal_last_name = Column(String(100), nullable=False)
    maternal_last_name = Column(String(100), nullable=True)
    phone = Column(String(20), nullable=False)
    email = Column(String(255), nullable=True)
    relationship_type = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    tenant = relationship("Tenant", back_populates="personal_references")
    joint_obligor = relationship("JointObligor", back_populates="personal_references")
    aval = relationship("Aval", back_populates="personal_references")


class CommercialReference(Base):
    """Commercial reference given by a company actor."""

    __tablename__ = "commercial_references"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=True, index=True)
    joint_obligor_id = Column(
        Integer, ForeignKey("joint_obligors.id", ondelete="CASCADE"), nullable=True, index=True,
    )
    aval_id = Column(Integer, ForeignKey("avals.id", ondelete="CASCADE"), nullable=True, index=True)
    company_name = Column(String(255), nullable=False)
    contact_first_name = Column(String(100), nullable=False)
    contact_paternal_last_name = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=False)
    email = Column(String(255), nullable=True)
    relationship_type = Column(String(100), nullable=False)
    years_of_relationship = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    tenant = relationship("Tenant", back_populates="commercial_references")
    joint_obligor = relationship("JointObligor", back_populates="commercial_references")
    aval = relationship("Aval", back_populates="commercial_references")


class ActorDocument(Base):
    """Uploaded actor document. Owner FKs are nulled (not deleted) on replacement."""

    __tablename__ = "actor_documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    policy_id = Column(
        Integer, ForeignKey("policies.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="SET NULL"), nullable=True, index=True)
    landlord_id = Column(
        Integer, ForeignKey("landlords.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    joint_obligor_id = Column(
        Integer, ForeignKey("joint_obligors.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    aval_id = Column(Integer, ForeignKey("avals.id", ondelete="SET NULL"), nullable=True, index=True)
    category = Column(
        Enum(DocumentCategory, name="document_category", native_enum=False),
        nullable=False,
    )
    file_name = Column(String(255), nullable=False)
    mime_type = Column(String(100), nullable=True)
    file_size = Column(Integer, nullable=True)
    storage_key = Column(String(500), nullable=True)
    uploaded_by = Column(String(255), nullable=True)
    verified_at = Column(DateTime(timezone=True), nullable=True)
    verified_by = Column(String(255), nullable=True)
    rejection_reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    tenant = relationship("Tenant", back_populates="documents")
    landlord = relationship("Landlord", back_populates="documents")
    joint_obligor = relationship("JointObligor", back_populates="documents")
    aval = relationship("Aval", back_populates="documents")
    validation = relationship(
        "DocumentValidation", back_populates="document", uselist=False,
        cascade="all, delete-orphan",
    )

    @property
    def validation_status(self) -> ValidationStatus:
        return self.validation.status if self.validation is not None else ValidationStatus.PENDING

    def __repr__(self):
        return f"<ActorDocument(id={self.id}, category='{self.category}')>"


class ActorSectionValidation(Base):
    """Reviewer decision for one section of one actor (upserted)."""

    __tablename__ = "actor_section_validations"
    __table_args__ = (
        UniqueConstraint("actor_type", "actor_id", "section", name="uq_actor_section"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    actor_type = Column(Enum(ActorType, name="actor_type", native_enum=False), nullable=False)
    actor_id = Column(Integer, nullable=False, index=True)
    section = Column(Enum(ActorSection, name="actor_section", native_enum=False), nullable=False)
    status = Column(
        Enum(ValidationStatus, name="validation_status", native_enum=False),
        nullable=False,
        default=ValidationStatus.PENDING,
    )
    validated_by = Column(String(255), nullable=True)
    validated_at = Column(DateTime(timezone=True), nullable=True)
    rejection_reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return (
            f"<ActorSectionValidation({self.actor_type}:{self.actor_id} "
            f"section='{self.section}', status='{self.status}')>"
        )


class DocumentValidation(Base):
    """Reviewer decision for one document (one-to-one)."""

    __tablename__ = "document_validations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    document_id = Column(
        Integer, ForeignKey("actor_documents.id", ondelete="CASCADE"), nullable=False, unique=True,
    )
    status = Column(
        Enum(ValidationStatus, name="validation_status", native_enum=False),
        nullable=False,
        default=ValidationStatus.PENDING,
    )
    validated_by = Column(String(255), nullable=True)
    validated_at = Column(DateTime(timezone=True), nullable=True)
    rejection_reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    document = relationship("ActorDocument", back_populates="validation")


class ReviewNote(Base):
    """Free-form reviewer note on a policy, actor, or document."""

    __tablename__ = "review_notes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    policy_id = Column(
        Integer, ForeignKey("policies.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    actor_type = Column(Enum(ActorType, name="actor_type", native_enum=False), nullable=True)
    actor_id = Column(Integer, nullable=True)
    document_id = Column(
        Integer, ForeignKey("actor_documents.id", ondelete="SET NULL"), nullable=True,
    )
    note = Column(Text, nullable=False)
    created_by = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    policy = relationship("Policy", back_populates="review_note_entries")


class HistoryMixin:
    """Immutable snapshot of a replaced actor."""

    original_actor_id = Column(Integer, nullable=False)
    party_type = Column(String(20), nullable=True)
    first_name = Column(String(100), nullable=True)
    paternal_last_name = Column(String(100), nullable=True)
    maternal_last_name = Column(String(100), nullable=True)
    company_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(20), nullable=True)
    verification_status = Column(String(20), nullable=True)
    information_complete = Column(Boolean, nullable=False, default=False)
    snapshot = Column(JSON, nullable=False)
    replaced_by = Column(String(255), nullable=False)
    replacement_reason = Column(Text, nullable=False)
    replaced_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class TenantHistory(HistoryMixin, Base):
    __tablename__ = "tenant_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    policy_id = Column(
        Integer, ForeignKey("policies.id", ondelete="CASCADE"), nullable=False, index=True,
    )

    policy = relationship("Policy", back_populates="tenant_history")


class JointObligorHistory(HistoryMixin, Base):
    __tablename__ = "joint_obligor_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    policy_id = Column(
        Integer, ForeignKey("policies.id", ondelete="CASCADE"), nullable=False, index=True,
    )

    policy = relationship("Policy", back_populates="joint_obligor_history")


class AvalHistory(HistoryMixin, Base):
    __tablename__ = "aval_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    policy_id = Column(
        Integer, ForeignKey("policies.id", ondelete="CASCADE"), nullable=False, index=True,
    )

    policy = relationship("Policy", back_populates="aval_history")


class Investigation(Base):
    """Background investigation of the policy's actors (one per policy)."""

    __tablename__ = "investigations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    policy_id = Column(
        Integer, ForeignKey("policies.id", ondelete="CASCADE"), nullable=False, unique=True,
    )
    verdict = Column(
        Enum(InvestigationVerdict, name="investigation_verdict", native_enum=False),
        nullable=True,
    )
    risk_level = Column(Enum(RiskLevel, name="risk_level", native_enum=False), nullable=True)
    notes = Column(Text, nullable=True)
    rejection_reason = Column(Text, nullable=True)
    completed_by = Column(String(255), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    landlord_decision = Column(
        Enum(LandlordDecision, name="landlord_decision", native_enum=False),
        nullable=True,
    )
    landlord_override = Column(Boolean, nullable=False, default=False)
    landlord_notes = Column(Text, nullable=True)
    landlord_decided_by = Column(String(255), nullable=True)
    landlord_decided_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    policy = relationship("Policy", back_populates="investigation")

    def __repr__(self):
        return f"<Investigation(policy_id={self.policy_id}, verdict='{self.verdict}')>"


class Contract(Base):
    """Uploaded lease contract version."""

    __tablename__ = "contracts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    policy_id = Column(
        Integer, ForeignKey("policies.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    version = Column(Integer, nullable=False, default=1)
    storage_key = Column(String(500), nullable=True)
    file_name = Column(String(255), nullable=True)
    mime_type = Column(String(100), nullable=True)
    file_size = Column(Integer, nullable=True)
    is_current = Column(Boolean, nullable=False, default=True)
    uploaded_by = Column(String(255), nullable=True)
    signed_at = Column(DateTime(timezone=True), nullable=True)
    signed_by = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    policy = relationship("Policy", back_populates="contracts")


class Payment(Base):
    """Payment record; the gateway integration lives elsewhere."""

    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    policy_id = Column(
        Integer, ForeignKey("policies.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    amount = Column(Numeric(12, 2), nullable=False)
    type = Column(Enum(PaymentType, name="payment_type", native_enum=False), nullable=False)
    status = Column(
        Enum(PaymentStatus, name="payment_status", native_enum=False),
        nullable=False,
        default=PaymentStatus.PENDING,
    )
    paid_by = Column(Enum(PayerType, name="payer_type", native_enum=False), nullable=True)
    paid_by_tenant_name = Column(String(255), nullable=True)
    paid_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    policy = relationship("Policy", back_populates="payments")

    def __repr__(self):
        return f"<Payment(id={self.id}, type='{self.type}', status='{self.status}')>"


class PolicyActivity(Base):
    """Append-only policy activity log (write-once, read-many)."""

    __tablename__ = "policy_activities"

    id = Column(Integer, primary_key=True, autoincrement=True)
    policy_id = Column(
        Integer, ForeignKey("policies.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    action = Column(String(100), nullable=False, index=True)
    description = Column(Text, nullable=False)
    details = Column(JSON, nullable=True)
    performed_by = Column(String(255), nullable=True)
    performed_by_type = Column(String(20), nullable=True)
    ip_address = Column(String(45), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    policy = relationship("Policy", back_populates="activities")

    def __repr__(self):
        return f"<PolicyActivity(policy_id={self.policy_id}, action='{self.action}')>"

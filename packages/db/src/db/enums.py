# This project was developed with assistance from AI tools.
"""
Domain enums for the rental guarantee policy lifecycle.

Shared domain types used by both SQLAlchemy models (db package)
and Pydantic schemas (api package).
"""

import enum


class PolicyStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    COLLECTING_INFO = "COLLECTING_INFO"
    UNDER_INVESTIGATION = "UNDER_INVESTIGATION"
    INVESTIGATION_REJECTED = "INVESTIGATION_REJECTED"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    APPROVED = "APPROVED"
    CONTRACT_PENDING = "CONTRACT_PENDING"
    CONTRACT_SIGNED = "CONTRACT_SIGNED"
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"

    @classmethod
    def terminal_statuses(cls) -> frozenset["PolicyStatus"]:
        """Statuses with no outgoing transitions."""
        return frozenset({cls.EXPIRED, cls.CANCELLED})

    @classmethod
    def replaceable_statuses(cls) -> frozenset["PolicyStatus"]:
        """Statuses where actors can still be replaced (nothing contracted yet)."""
        return frozenset(
            {cls.DRAFT, cls.COLLECTING_INFO, cls.UNDER_INVESTIGATION, cls.PENDING_APPROVAL}
        )

    @classmethod
    def valid_transitions(cls) -> dict["PolicyStatus", frozenset["PolicyStatus"]]:
        """Allowed status transitions in the policy lifecycle."""
        return {
            cls.DRAFT: frozenset({cls.COLLECTING_INFO, cls.CANCELLED}),
            cls.COLLECTING_INFO: frozenset({cls.UNDER_INVESTIGATION, cls.CANCELLED}),
            cls.UNDER_INVESTIGATION: frozenset(
                {cls.INVESTIGATION_REJECTED, cls.PENDING_APPROVAL, cls.CANCELLED}
            ),
            cls.INVESTIGATION_REJECTED: frozenset({cls.UNDER_INVESTIGATION, cls.CANCELLED}),
            cls.PENDING_APPROVAL: frozenset(
                {cls.APPROVED, cls.INVESTIGATION_REJECTED, cls.CANCELLED}
            ),
            cls.APPROVED: frozenset({cls.CONTRACT_PENDING, cls.CANCELLED}),
            cls.CONTRACT_PENDING: frozenset({cls.CONTRACT_SIGNED, cls.CANCELLED}),
            cls.CONTRACT_SIGNED: frozenset({cls.ACTIVE, cls.CANCELLED}),
            cls.ACTIVE: frozenset({cls.EXPIRED, cls.CANCELLED}),
            cls.EXPIRED: frozenset(),
            cls.CANCELLED: frozenset(),
        }


class GuarantorType(str, enum.Enum):
    NONE = "NONE"
    JOINT_OBLIGOR = "JOINT_OBLIGOR"
    AVAL = "AVAL"
    BOTH = "BOTH"

    @property
    def requires_joint_obligors(self) -> bool:
        return self in (GuarantorType.JOINT_OBLIGOR, GuarantorType.BOTH)

    @property
    def requires_avals(self) -> bool:
        return self in (GuarantorType.AVAL, GuarantorType.BOTH)


class ActorType(str, enum.Enum):
    TENANT = "tenant"
    LANDLORD = "landlord"
    JOINT_OBLIGOR = "joint_obligor"
    AVAL = "aval"


class PartyType(str, enum.Enum):
    INDIVIDUAL = "INDIVIDUAL"
    COMPANY = "COMPANY"


class Nationality(str, enum.Enum):
    MEXICAN = "MEXICAN"
    FOREIGN = "FOREIGN"


class GuaranteeMethod(str, enum.Enum):
    INCOME = "income"
    PROPERTY = "property"


class VerificationStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ValidationStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    IN_REVIEW = "IN_REVIEW"


class ActorSection(str, enum.Enum):
    PERSONAL_INFO = "personal_info"
    COMPANY_INFO = "company_info"
    ADDRESS = "address"
    FINANCIAL_INFO = "financial_info"
    WORK_INFO = "work_info"
    RENTAL_HISTORY = "rental_history"
    REFERENCES = "references"
    PROPERTY_GUARANTEE = "property_guarantee"


class DocumentCategory(str, enum.Enum):
    IDENTIFICATION = "IDENTIFICATION"
    INCOME_PROOF = "INCOME_PROOF"
    ADDRESS_PROOF = "ADDRESS_PROOF"
    BANK_STATEMENT = "BANK_STATEMENT"
    IMMIGRATION_DOCUMENT = "IMMIGRATION_DOCUMENT"
    COMPANY_CONSTITUTION = "COMPANY_CONSTITUTION"
    LEGAL_POWERS = "LEGAL_POWERS"
    TAX_STATUS_CERTIFICATE = "TAX_STATUS_CERTIFICATE"
    PROPERTY_DEED = "PROPERTY_DEED"
    PROPERTY_TAX_STATEMENT = "PROPERTY_TAX_STATEMENT"
    PROPERTY_REGISTRY = "PROPERTY_REGISTRY"
    OTHER = "OTHER"


class InvestigationVerdict(str, enum.Enum):
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    HIGH_RISK = "HIGH_RISK"


class RiskLevel(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class LandlordDecision(str, enum.Enum):
    """Landlord's call on a rejected or high-risk investigation."""

    PROCEED = "PROCEED"
    REJECT = "REJECT"



class PaymentType(str, enum.Enum):
    INVESTIGATION_FEE = "INVESTIGATION_FEE"
    TENANT_PORTION = "TENANT_PORTION"
    LANDLORD_PORTION = "LANDLORD_PORTION"
    POLICY_PREMIUM = "POLICY_PREMIUM"
    PARTIAL_PAYMENT = "PARTIAL_PAYMENT"


class PaymentStatus(str, enum.Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    PENDING_VERIFICATION = "PENDING_VERIFICATION"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"

    @classmethod
    def open_statuses(cls) -> frozenset["PaymentStatus"]:
        """Payments that have not reached a final state yet."""
        return frozenset({cls.PENDING, cls.PROCESSING, cls.PENDING_VERIFICATION})


class PayerType(str, enum.Enum):
    TENANT = "TENANT"
    LANDLORD = "LANDLORD"
    JOINT_OBLIGOR = "JOINT_OBLIGOR"
    AVAL = "AVAL"
    COMPANY = "COMPANY"


class PolicyCancellationReason(str, enum.Enum):
    CLIENT_REQUEST = "CLIENT_REQUEST"
    NON_PAYMENT = "NON_PAYMENT"
    FRAUD = "FRAUD"
    DOCUMENTATION_ISSUES = "DOCUMENTATION_ISSUES"
    LANDLORD_REQUEST = "LANDLORD_REQUEST"
    TENANT_REQUEST = "TENANT_REQUEST"
    OTHER = "OTHER"


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    STAFF = "staff"
    BROKER = "broker"

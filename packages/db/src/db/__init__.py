# This project was developed with assistance from AI tools.
__version__ = "0.1.0"

from .database import Base, DatabaseService, SessionLocal, get_db, get_db_service
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
    UserRole,
    ValidationStatus,
    VerificationStatus,
)
from .models import (
    ActorDocument,
    ActorSectionValidation,
    Address,
    Aval,
    AvalHistory,
    CommercialReference,
    Contract,
    DocumentValidation,
    Investigation,
    JointObligor,
    JointObligorHistory,
    Landlord,
    Payment,
    PersonalReference,
    Policy,
    PolicyActivity,
    ReviewNote,
    Tenant,
    TenantHistory,
)

__all__ = [
    "Base",
    "DatabaseService",
    "SessionLocal",
    "get_db",
    "get_db_service",
    "__version__",
    # Enums
    "ActorSection",
    "ActorType",
    "DocumentCategory",
    "GuaranteeMethod",
    "GuarantorType",
    "InvestigationVerdict",
    "LandlordDecision",
    "Nationality",
    "PartyType",
    "PayerType",
    "PaymentStatus",
    "PaymentType",
    "PolicyCancellationReason",
    "PolicyStatus",
    "RiskLevel",
    "UserRole",
    "ValidationStatus",
    "VerificationStatus",
    # Models
    "ActorDocument",
    "ActorSectionValidation",
    "Address",
    "Aval",
    "AvalHistory",
    "CommercialReference",
    "Contract",
    "DocumentValidation",
    "Investigation",
    "JointObligor",
    "JointObligorHistory",
    "Landlord",
    "Payment",
    "PersonalReference",
    "Policy",
    "PolicyActivity",
    "ReviewNote",
    "Tenant",
    "TenantHistory",
]

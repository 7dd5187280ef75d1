# This project was developed with assistance from AI tools.
"""Shared test factory functions.

Actors and policies are built as transient ORM instances (never added to a
session) so the pure checks see real attribute defaults and relationship
collections. Sessions are ``AsyncMock`` objects.
"""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from db import (
    ActorDocument,
    Aval,
    CommercialReference,
    Contract,
    DocumentValidation,
    Investigation,
    JointObligor,
    Landlord,
    Payment,
    PersonalReference,
    Policy,
    Tenant,
)
from db.enums import (
    DocumentCategory,
    GuaranteeMethod,
    GuarantorType,
    Nationality,
    PartyType,
    PayerType,
    PaymentStatus,
    PaymentType,
    PolicyStatus,
    ValidationStatus,
    VerificationStatus,
)

from src.schemas.auth import DataScope, UserContext

VALID_CURP = "LOGA900101MDFPRN09"


def make_user(user_id="staff-1", role="staff", all_policies=True) -> UserContext:
    from db.enums import UserRole

    return UserContext(
        user_id=user_id,
        role=UserRole(role),
        email=f"{user_id}@arrenda.test",
        name=user_id,
        data_scope=DataScope(all_policies=all_policies, managed_by=None if all_policies else user_id),
    )


def make_personal_references(count: int) -> list[PersonalReference]:
    return [
        PersonalReference(
            first_name=f"Ref{i}",
            paternal_last_name="Pérez",
            phone="5511112222",
            relationship_type="amigo",
        )
        for i in range(count)
    ]


def make_commercial_references(count: int) -> list[CommercialReference]:
    return [
        CommercialReference(
            company_name=f"Proveedor {i}",
            contact_first_name="Luis",
            contact_paternal_last_name="Ramírez",
            phone="5533334444",
            relationship_type="proveedor",
        )
        for i in range(count)
    ]


def _person(**overrides) -> dict:
    fields = dict(
        party_type=PartyType.INDIVIDUAL,
        email="ana@example.com",
        phone="55 1234 5678",
        first_name="Ana",
        paternal_last_name="López",
        maternal_last_name="García",
        nationality=Nationality.MEXICAN,
        curp=VALID_CURP,
        address_id=100,
        information_complete=False,
        verification_status=VerificationStatus.PENDING,
    )
    fields.update(overrides)
    return fields


def make_tenant(id=10, policy_id=1, **overrides) -> Tenant:
    """A tenant that passes every completeness check unless overridden."""
    fields = _person(
        occupation="Ingeniera",
        employer_name="Acme SA de CV",
        monthly_income=Decimal("30000"),
        has_pets=False,
    )
    fields.update(overrides)
    fields.setdefault("personal_references", make_personal_references(1))
    return Tenant(id=id, policy_id=policy_id, **fields)


def make_company_tenant(id=11, policy_id=1, **overrides) -> Tenant:
    fields = dict(
        party_type=PartyType.COMPANY,
        email="contacto@empresa.mx",
        phone="5598765432",
        company_name="Empresa SA",
        company_rfc="EMP900101AB1",
        legal_rep_first_name="Carlos",
        legal_rep_paternal_last_name="Ruiz",
        legal_rep_maternal_last_name="Soto",
        address_id=101,
        information_complete=False,
        verification_status=VerificationStatus.PENDING,
        commercial_references=make_commercial_references(1),
    )
    fields.update(overrides)
    return Tenant(id=id, policy_id=policy_id, **fields)


def make_landlord(id=20, policy_id=1, is_primary=True, **overrides) -> Landlord:
    fields = _person(email="owner@example.com", first_name="Jorge", is_primary=is_primary)
    fields.update(overrides)
    return Landlord(id=id, policy_id=policy_id, **fields)


def make_joint_obligor(id=30, policy_id=1, **overrides) -> JointObligor:
    """Income-guarantee joint obligor meeting the minimum income."""
    fields = _person(
        email="jo@example.com",
        first_name="María",
        relationship_to_tenant="madre",
        guarantee_method=GuaranteeMethod.INCOME,
        bank_name="Banco Uno",
        account_holder="María López",
        monthly_income=Decimal("10000"),
    )
    fields.update(overrides)
    fields.setdefault("personal_references", make_personal_references(3))
    return JointObligor(id=id, policy_id=policy_id, **fields)


def make_aval(id=40, policy_id=1, **overrides) -> Aval:
    fields = _person(
        email="aval@example.com",
        first_name="Pedro",
        relationship_to_tenant="tío",
        guarantee_property_address_id=102,
        property_value=Decimal("2500000"),
        property_deed_number="ESC-123",
        property_registry="FOLIO-9",
    )
    fields.update(overrides)
    fields.setdefault("personal_references", make_personal_references(3))
    return Aval(id=id, policy_id=policy_id, **fields)


def make_document(id=500, category=DocumentCategory.IDENTIFICATION, status=None, **owner) -> ActorDocument:
    """Document with an optional validation row in ``status``."""
    validation = None
    if status is not None:
        validation = DocumentValidation(document_id=id, status=ValidationStatus(status))
    return ActorDocument(
        id=id,
        policy_id=1,
        category=category,
        file_name=f"{category.value.lower()}.pdf",
        validation=validation,
        **owner,
    )


def make_payment(id=700, type=PaymentType.TENANT_PORTION, status=PaymentStatus.PENDING, paid_by=PayerType.TENANT, **kw):
    return Payment(id=id, policy_id=1, amount=Decimal("1500"), type=type, status=status, paid_by=paid_by, **kw)


def make_policy(
    id=1,
    status=PolicyStatus.COLLECTING_INFO,
    guarantor_type=GuarantorType.NONE,
    tenant=None,
    landlords=None,
    joint_obligors=None,
    avals=None,
    investigation=None,
    contracts=None,
    payments=None,
    **overrides,
) -> Policy:
    policy = Policy(
        id=id,
        policy_number="POL-20261018-AB12C",
        status=status,
        guarantor_type=guarantor_type,
        rent_amount=Decimal("15000"),
        contract_length=12,
        created_by="broker-1",
        managed_by="broker-1",
        manager_email="broker@arrenda.test",
        **overrides,
    )
    policy.tenant = tenant if tenant is not None else make_tenant(policy_id=id)
    policy.landlords = landlords if landlords is not None else [make_landlord(policy_id=id)]
    policy.joint_obligors = joint_obligors or []
    policy.avals = avals or []
    policy.investigation = investigation
    policy.contracts = contracts or []
    policy.payments = payments or []
    return policy


def make_investigation(verdict=None) -> Investigation:
    return Investigation(id=900, policy_id=1, verdict=verdict)


def make_contract(id=800, version=1, is_current=True, **kw) -> Contract:
    return Contract(id=id, policy_id=1, version=version, is_current=is_current, **kw)


def make_mock_session() -> AsyncMock:
    """AsyncMock session whose ``add`` is synchronous like the real one."""
    session = AsyncMock()
    session.add = MagicMock()
    session.add_all = MagicMock()
    return session

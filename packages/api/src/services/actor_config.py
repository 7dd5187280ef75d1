# This project was developed with assistance from AI tools.
"""Actor-kind descriptors.

Tenants, landlords, joint obligors and avals are separate tables with a
shared shape. Everything that differs per kind (model class, review
sections, required documents, owner FK names, history table, payer type)
lives in the lookup tables below so the services can stay generic.
"""

from dataclasses import dataclass

from db import (
    ActorDocument,
    Aval,
    AvalHistory,
    JointObligor,
    JointObligorHistory,
    Landlord,
    Tenant,
    TenantHistory,
)
from db.enums import (
    ActorSection,
    ActorType,
    DocumentCategory,
    GuaranteeMethod,
    Nationality,
    PartyType,
    PayerType,
)
from sqlalchemy.orm import selectinload


@dataclass(frozen=True)
class ActorDescriptor:
    actor_type: ActorType
    model: type
    label: str
    owner_fk: str
    history_model: type | None
    address_fields: tuple[str, ...]
    has_references: bool
    payer_type: PayerType
    portal_path: str

    def load_options(self) -> list:
        """Eager-load everything the completeness and review checks read."""
        model = self.model
        options = [selectinload(model.documents).selectinload(ActorDocument.validation)]
        for field in self.address_fields:
            options.append(selectinload(getattr(model, field.removesuffix("_id"))))
        if self.has_references:
            options.append(selectinload(model.personal_references))
            options.append(selectinload(model.commercial_references))
        return options


ACTOR_DESCRIPTORS: dict[ActorType, ActorDescriptor] = {
    ActorType.TENANT: ActorDescriptor(
        actor_type=ActorType.TENANT,
        model=Tenant,
        label="Inquilino",
        owner_fk="tenant_id",
        history_model=TenantHistory,
        address_fields=("address_id", "employer_address_id", "previous_rental_address_id"),
        has_references=True,
        payer_type=PayerType.TENANT,
        portal_path="tenant",
    ),
    ActorType.LANDLORD: ActorDescriptor(
        actor_type=ActorType.LANDLORD,
        model=Landlord,
        label="Arrendador",
        owner_fk="landlord_id",
        history_model=None,
        address_fields=("address_id",),
        has_references=False,
        payer_type=PayerType.LANDLORD,
        portal_path="landlord",
    ),
    ActorType.JOINT_OBLIGOR: ActorDescriptor(
        actor_type=ActorType.JOINT_OBLIGOR,
        model=JointObligor,
        label="Obligado Solidario",
        owner_fk="joint_obligor_id",
        history_model=JointObligorHistory,
        address_fields=("address_id", "employer_address_id", "guarantee_property_address_id"),
        has_references=True,
        payer_type=PayerType.JOINT_OBLIGOR,
        portal_path="joint-obligor",
    ),
    ActorType.AVAL: ActorDescriptor(
        actor_type=ActorType.AVAL,
        model=Aval,
        label="Aval",
        owner_fk="aval_id",
        history_model=AvalHistory,
        address_fields=("address_id", "employer_address_id", "guarantee_property_address_id"),
        has_references=True,
        payer_type=PayerType.AVAL,
        portal_path="aval",
    ),
}


def get_descriptor(actor_type: ActorType) -> ActorDescriptor:
    return ACTOR_DESCRIPTORS[ActorType(actor_type)]


def actor_type_of(document) -> tuple[ActorType, int] | None:
    """Infer the owning actor of a document from its FK columns."""
    for descriptor in ACTOR_DESCRIPTORS.values():
        owner_id = getattr(document, descriptor.owner_fk, None)
        if owner_id is not None:
            return descriptor.actor_type, owner_id
    return None


# ---------------------------------------------------------------------------
# Review sections
# ---------------------------------------------------------------------------

_GUARANTOR_SECTIONS = {
    PartyType.INDIVIDUAL: (
        ActorSection.PERSONAL_INFO,
        ActorSection.ADDRESS,
        ActorSection.WORK_INFO,
        ActorSection.PROPERTY_GUARANTEE,
        ActorSection.REFERENCES,
    ),
    PartyType.COMPANY: (
        ActorSection.PERSONAL_INFO,
        ActorSection.COMPANY_INFO,
        ActorSection.ADDRESS,
        ActorSection.PROPERTY_GUARANTEE,
        ActorSection.REFERENCES,
    ),
}

ACTOR_SECTIONS: dict[ActorType, dict[PartyType, tuple[ActorSection, ...]]] = {
    ActorType.LANDLORD: {
        PartyType.INDIVIDUAL: (
            ActorSection.PERSONAL_INFO,
            ActorSection.ADDRESS,
            ActorSection.FINANCIAL_INFO,
        ),
        PartyType.COMPANY: (
            ActorSection.PERSONAL_INFO,
            ActorSection.COMPANY_INFO,
            ActorSection.ADDRESS,
            ActorSection.FINANCIAL_INFO,
        ),
    },
    ActorType.TENANT: {
        PartyType.INDIVIDUAL: (
            ActorSection.PERSONAL_INFO,
            ActorSection.ADDRESS,
            ActorSection.WORK_INFO,
            ActorSection.RENTAL_HISTORY,
            ActorSection.REFERENCES,
        ),
        PartyType.COMPANY: (
            ActorSection.PERSONAL_INFO,
            ActorSection.COMPANY_INFO,
            ActorSection.ADDRESS,
            ActorSection.REFERENCES,
        ),
    },
    ActorType.AVAL: _GUARANTOR_SECTIONS,
    ActorType.JOINT_OBLIGOR: _GUARANTOR_SECTIONS,
}

SECTION_LABELS: dict[ActorSection, str] = {
    ActorSection.PERSONAL_INFO: "Información Personal",
    ActorSection.COMPANY_INFO: "Información de la Empresa",
    ActorSection.ADDRESS: "Domicilio",
    ActorSection.FINANCIAL_INFO: "Información Financiera",
    ActorSection.WORK_INFO: "Información Laboral",
    ActorSection.RENTAL_HISTORY: "Historial de Arrendamiento",
    ActorSection.REFERENCES: "Referencias",
    ActorSection.PROPERTY_GUARANTEE: "Inmueble en Garantía",
}


def get_actor_sections(actor_type: ActorType, party_type: PartyType | None) -> tuple[ActorSection, ...]:
    """Sections a reviewer must approve for this actor."""
    return ACTOR_SECTIONS[ActorType(actor_type)][party_type or PartyType.INDIVIDUAL]


# ---------------------------------------------------------------------------
# Document requirements
# ---------------------------------------------------------------------------

FOREIGN = "foreign"
INCOME_GUARANTEE = "income_guarantee"
PROPERTY_GUARANTEE = "property_guarantee"


@dataclass(frozen=True)
class DocumentRule:
    category: DocumentCategory
    required: bool = True
    condition: str | None = None


_C = DocumentCategory

_COMPANY_CORE = (
    DocumentRule(_C.COMPANY_CONSTITUTION),
    DocumentRule(_C.LEGAL_POWERS),
    DocumentRule(_C.IDENTIFICATION),
    DocumentRule(_C.TAX_STATUS_CERTIFICATE),
    DocumentRule(_C.BANK_STATEMENT),
)

_GUARANTEE_DOCUMENTS = (
    DocumentRule(_C.INCOME_PROOF, condition=INCOME_GUARANTEE),
    DocumentRule(_C.PROPERTY_DEED, condition=PROPERTY_GUARANTEE),
    DocumentRule(_C.PROPERTY_TAX_STATEMENT, condition=PROPERTY_GUARANTEE),
    DocumentRule(_C.PROPERTY_REGISTRY, required=False, condition=PROPERTY_GUARANTEE),
)

# Key structure: DOCUMENT_RULES[actor_type][is_company]
DOCUMENT_RULES: dict[ActorType, dict[bool, tuple[DocumentRule, ...]]] = {
    ActorType.TENANT: {
        False: (
            DocumentRule(_C.IDENTIFICATION),
            DocumentRule(_C.INCOME_PROOF),
            DocumentRule(_C.ADDRESS_PROOF),
            DocumentRule(_C.BANK_STATEMENT),
            DocumentRule(_C.IMMIGRATION_DOCUMENT, condition=FOREIGN),
        ),
        True: (
            *_COMPANY_CORE,
            DocumentRule(_C.ADDRESS_PROOF, required=False),
        ),
    },
    ActorType.LANDLORD: {
        False: (
            DocumentRule(_C.IDENTIFICATION),
            DocumentRule(_C.PROPERTY_DEED),
            DocumentRule(_C.PROPERTY_TAX_STATEMENT),
            DocumentRule(_C.TAX_STATUS_CERTIFICATE, required=False),
            DocumentRule(_C.BANK_STATEMENT, required=False),
        ),
        True: (
            DocumentRule(_C.COMPANY_CONSTITUTION),
            DocumentRule(_C.LEGAL_POWERS),
            DocumentRule(_C.TAX_STATUS_CERTIFICATE),
            DocumentRule(_C.PROPERTY_DEED),
            DocumentRule(_C.PROPERTY_TAX_STATEMENT),
            DocumentRule(_C.BANK_STATEMENT, required=False),
        ),
    },
    ActorType.AVAL: {
        False: (
            DocumentRule(_C.IDENTIFICATION),
            DocumentRule(_C.INCOME_PROOF),
            DocumentRule(_C.ADDRESS_PROOF),
            DocumentRule(_C.BANK_STATEMENT),
            DocumentRule(_C.IMMIGRATION_DOCUMENT, condition=FOREIGN),
            DocumentRule(_C.PROPERTY_REGISTRY, required=False),
        ),
        True: (
            *_COMPANY_CORE,
            DocumentRule(_C.PROPERTY_REGISTRY, required=False),
        ),
    },
    ActorType.JOINT_OBLIGOR: {
        False: (
            DocumentRule(_C.IDENTIFICATION),
            DocumentRule(_C.ADDRESS_PROOF),
            DocumentRule(_C.BANK_STATEMENT),
            DocumentRule(_C.IMMIGRATION_DOCUMENT, condition=FOREIGN),
            *_GUARANTEE_DOCUMENTS,
        ),
        True: (*_COMPANY_CORE, *_GUARANTEE_DOCUMENTS),
    },
}

DOCUMENT_LABELS: dict[DocumentCategory, str] = {
    _C.IDENTIFICATION: "Identificación Oficial",
    _C.INCOME_PROOF: "Comprobante de Ingresos",
    _C.ADDRESS_PROOF: "Comprobante de Domicilio",
    _C.BANK_STATEMENT: "Estado de Cuenta Bancario",
    _C.IMMIGRATION_DOCUMENT: "Documento Migratorio",
    _C.COMPANY_CONSTITUTION: "Acta Constitutiva",
    _C.LEGAL_POWERS: "Poderes del Representante Legal",
    _C.TAX_STATUS_CERTIFICATE: "Constancia de Situación Fiscal",
    _C.PROPERTY_DEED: "Escrituras del Inmueble",
    _C.PROPERTY_TAX_STATEMENT: "Boleta Predial",
    _C.PROPERTY_REGISTRY: "Folio del Registro Público de la Propiedad",
    _C.OTHER: "Otro",
}


def _condition_holds(condition: str | None, nationality, guarantee_method) -> bool:
    if condition is None:
        return True
    if condition == FOREIGN:
        return nationality == Nationality.FOREIGN
    if condition == INCOME_GUARANTEE:
        return guarantee_method == GuaranteeMethod.INCOME
    if condition == PROPERTY_GUARANTEE:
        return guarantee_method == GuaranteeMethod.PROPERTY
    return False


def get_document_requirements(
    actor_type: ActorType,
    is_company: bool,
    *,
    nationality: Nationality | None = None,
    guarantee_method: GuaranteeMethod | None = None,
) -> list[DocumentRule]:
    """Document rules that apply to this actor after resolving conditions."""
    rules = DOCUMENT_RULES[ActorType(actor_type)][bool(is_company)]
    return [r for r in rules if _condition_holds(r.condition, nationality, guarantee_method)]


def get_required_documents(actor_type: ActorType, actor) -> list[DocumentCategory]:
    """Required document categories for a concrete actor row."""
    rules = get_document_requirements(
        actor_type,
        actor.is_company,
        nationality=getattr(actor, "nationality", None),
        guarantee_method=getattr(actor, "guarantee_method", None),
    )
    return [r.category for r in rules if r.required]

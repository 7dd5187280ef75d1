# This project was developed with assistance from AI tools.
"""Actor completeness checking service.

Decides whether an actor has supplied every field and document its kind
requires. Field rules depend on party type (individual or company) and on the
actor's role; document rules come from ``actor_config.DOCUMENT_RULES``.
The result is all-or-nothing: every problem is reported, none is waived.
"""

import logging
import re
from collections.abc import Iterable
from decimal import Decimal, InvalidOperation

from db.enums import ActorType, DocumentCategory, GuaranteeMethod, Nationality

from ..schemas.completeness import (
    ActorCompletenessResponse,
    CompletenessResult,
    DocumentRequirement,
    FieldIssue,
)
from .actor_config import DOCUMENT_LABELS, get_document_requirements, get_required_documents

logger = logging.getLogger(__name__)

MIN_GUARANTOR_INCOME = Decimal("10000")
MIN_GUARANTOR_REFERENCES = 3
MIN_TENANT_REFERENCES = 1

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_CURP_RE = re.compile(r"^[A-Z]{4}\d{6}[HM][A-Z]{5}[A-Z\d]\d$")
_RFC_PERSON_RE = re.compile(r"^[A-Z&Ñ]{4}\d{6}[A-Z0-9]{3}$")
_RFC_COMPANY_RE = re.compile(r"^[A-Z&Ñ]{3}\d{6}[A-Z0-9]{3}$")
_CLABE_RE = re.compile(r"^\d{18}$")


def _blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _as_decimal(value) -> Decimal | None:
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


def _digits(value: str | None) -> str:
    return re.sub(r"\D", "", value or "")


class _Collector:
    """Accumulates field issues for one actor."""

    def __init__(self, actor):
        self.actor = actor
        self.issues: list[FieldIssue] = []

    def add(self, field: str, message: str) -> None:
        self.issues.append(FieldIssue(field=field, message=message))

    def require(self, field: str, message: str) -> bool:
        if _blank(getattr(self.actor, field, None)):
            self.add(field, message)
            return False
        return True

    def require_positive(self, field: str, message: str) -> bool:
        amount = _as_decimal(getattr(self.actor, field, None))
        if amount is None or amount <= 0:
            self.add(field, message)
            return False
        return True

    def require_count(self, field: str, minimum: int, message: str) -> None:
        items = getattr(self.actor, field, None) or []
        if len(items) < minimum:
            self.add(field, message)

    def result(self) -> CompletenessResult:
        missing: list[str] = []
        for issue in self.issues:
            if issue.field not in missing:
                missing.append(issue.field)
        return CompletenessResult(valid=not self.issues, missing_fields=missing, issues=self.issues)


# ---------------------------------------------------------------------------
# Base rules
# ---------------------------------------------------------------------------


def _check_contact(c: _Collector) -> None:
    if c.require("email", "Correo electrónico es requerido") and not _EMAIL_RE.match(c.actor.email):
        c.add("email", "Correo electrónico inválido")
    if c.require("phone", "Teléfono es requerido") and len(_digits(c.actor.phone)) != 10:
        c.add("phone", "Teléfono debe tener 10 dígitos")
    c.require("address_id", "Dirección es requerida")


def _check_individual(c: _Collector) -> None:
    c.require("first_name", "Nombre es requerido")
    c.require("paternal_last_name", "Apellido paterno es requerido")
    c.require("maternal_last_name", "Apellido materno es requerido")
    _check_contact(c)

    if c.require("nationality", "Nacionalidad es requerida"):
        if c.actor.nationality == Nationality.MEXICAN:
            if c.require("curp", "CURP es requerido para ciudadanos mexicanos") and not _CURP_RE.match(
                c.actor.curp.upper()
            ):
                c.add("curp", "CURP inválido")
        else:
            c.require("passport", "Pasaporte es requerido para extranjeros")

    rfc = getattr(c.actor, "rfc", None)
    if not _blank(rfc) and not _RFC_PERSON_RE.match(rfc.upper()):
        c.add("rfc", "RFC de persona física inválido (debe tener 13 caracteres)")


def _check_company(c: _Collector) -> None:
    c.require("company_name", "Nombre de empresa es requerido")
    if c.require("company_rfc", "RFC de empresa es requerido") and not _RFC_COMPANY_RE.match(
        c.actor.company_rfc.upper()
    ):
        c.add("company_rfc", "RFC de empresa inválido (debe tener 12 caracteres)")
    c.require("legal_rep_first_name", "Nombre del representante legal es requerido")
    c.require("legal_rep_paternal_last_name", "Apellido paterno del representante legal es requerido")
    c.require("legal_rep_maternal_last_name", "Apellido materno del representante legal es requerido")
    _check_contact(c)


def _check_references(c: _Collector, minimum: int) -> None:
    if c.actor.is_company:
        c.require_count(
            "commercial_references",
            minimum,
            f"Se requieren al menos {minimum} referencias comerciales",
        )
    else:
        c.require_count(
            "personal_references",
            minimum,
            f"Se requieren al menos {minimum} referencias personales",
        )


def _check_property_guarantee(c: _Collector) -> None:
    c.require("guarantee_property_address_id", "Dirección de la propiedad es requerida")
    c.require_positive("property_value", "Valor de la propiedad es requerido")
    c.require("property_deed_number", "Número de escritura es requerido")
    c.require("property_registry", "Folio del registro público es requerido")


# ---------------------------------------------------------------------------
# Per-kind rules
# ---------------------------------------------------------------------------


def _check_tenant(c: _Collector) -> None:
    if c.actor.is_company:
        _check_references(c, MIN_TENANT_REFERENCES)
        return
    c.require("occupation", "Ocupación es requerida")
    c.require("employer_name", "Nombre del empleador es requerido")
    c.require_positive("monthly_income", "Ingreso mensual debe ser mayor a 0")
    _check_references(c, MIN_TENANT_REFERENCES)


def _check_landlord(c: _Collector) -> None:
    clabe = getattr(c.actor, "clabe", None)
    if not _blank(clabe) and not _CLABE_RE.match(clabe):
        c.add("clabe", "La CLABE debe tener 18 dígitos")


def _check_joint_obligor(c: _Collector) -> None:
    c.require("relationship_to_tenant", "Relación con el inquilino es requerida")
    method = c.actor.guarantee_method
    if method is None:
        c.add("guarantee_method", "Seleccione un método de garantía")
    elif method == GuaranteeMethod.INCOME:
        c.require("bank_name", "Nombre del banco es requerido")
        c.require("account_holder", "Titular de la cuenta es requerido")
        income = _as_decimal(c.actor.monthly_income)
        if income is None:
            c.add("monthly_income", "Ingreso mensual es requerido para garantía por ingresos")
        elif income < MIN_GUARANTOR_INCOME:
            c.add("monthly_income", "El ingreso mensual mínimo es de $10,000")
    elif method == GuaranteeMethod.PROPERTY:
        _check_property_guarantee(c)
    _check_references(c, MIN_GUARANTOR_REFERENCES)


def _check_aval(c: _Collector) -> None:
    c.require("relationship_to_tenant", "Relación con el inquilino es requerida")
    _check_property_guarantee(c)
    _check_references(c, MIN_GUARANTOR_REFERENCES)


_KIND_RULES = {
    ActorType.TENANT: _check_tenant,
    ActorType.LANDLORD: _check_landlord,
    ActorType.JOINT_OBLIGOR: _check_joint_obligor,
    ActorType.AVAL: _check_aval,
}


def check_completeness(actor_type: ActorType, actor) -> CompletenessResult:
    """Check every required field of an actor.

    Args:
        actor_type: Which kind of actor ``actor`` is.
        actor: Tenant, Landlord, JointObligor or Aval row with its references loaded.

    Returns:
        CompletenessResult listing each missing/invalid field with a message.
    """
    c = _Collector(actor)
    if actor.is_company:
        _check_company(c)
    else:
        _check_individual(c)
    _KIND_RULES[ActorType(actor_type)](c)
    result = c.result()
    if not result.valid:
        logger.debug(
            "%s %s incomplete: %s", actor_type, getattr(actor, "id", None), result.missing_fields,
        )
    return result


def check_required_documents(
    actor_type: ActorType,
    actor,
    documents: Iterable,
) -> list[DocumentCategory]:
    """Return the required categories with no uploaded document."""
    uploaded = {doc.category for doc in documents}
    return [cat for cat in get_required_documents(actor_type, actor) if cat not in uploaded]


def build_document_requirements(actor_type: ActorType, actor, documents: Iterable) -> list[DocumentRequirement]:
    """Requirement list with fulfillment status, for display."""
    by_category = {}
    for doc in documents:
        by_category.setdefault(doc.category, doc)

    rules = get_document_requirements(
        actor_type,
        actor.is_company,
        nationality=getattr(actor, "nationality", None),
        guarantee_method=getattr(actor, "guarantee_method", None),
    )
    requirements = []
    for rule in rules:
        doc = by_category.get(rule.category)
        requirements.append(
            DocumentRequirement(
                category=rule.category,
                label=DOCUMENT_LABELS[rule.category],
                required=rule.required,
                is_provided=doc is not None,
                document_id=doc.id if doc is not None else None,
            )
        )
    return requirements


def get_actor_completeness(actor_type: ActorType, actor) -> ActorCompletenessResponse:
    """Combined field and document completeness for one actor."""
    documents = list(actor.documents or [])
    fields = check_completeness(actor_type, actor)
    missing_documents = check_required_documents(actor_type, actor, documents)
    return ActorCompletenessResponse(
        actor_type=actor_type,
        actor_id=actor.id,
        fields=fields,
        documents=build_document_requirements(actor_type, actor, documents),
        missing_documents=missing_documents,
        is_complete=fields.valid and not missing_documents,
    )

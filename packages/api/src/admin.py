# This project was developed with assistance from AI tools.
"""
SQLAdmin configuration for database administration UI

Access the admin panel at: http://localhost:8000/admin

When AUTH_DISABLED=false, requires admin credentials via login form.
When AUTH_DISABLED=true, admin panel is open (dev mode).

Workflow state (status, verification, archives) is read-only here; it only
changes through the API so every change is logged as policy activity.
"""

from db import (
    ActorDocument,
    Aval,
    Contract,
    Investigation,
    JointObligor,
    Landlord,
    Payment,
    Policy,
    PolicyActivity,
    Tenant,
    TenantHistory,
)
from sqladmin import Admin, ModelView
from sqladmin.authentication import AuthenticationBackend
from sqlalchemy import create_engine
from starlette.requests import Request
from starlette.responses import Response

from .core.config import settings

# SQLAdmin requires a sync engine; derive from the async DATABASE_URL
_sync_url = settings.DATABASE_URL.replace("+asyncpg", "")
engine = create_engine(_sync_url, echo=False)


class AdminAuth(AuthenticationBackend):
    """Session-based auth gate for SQLAdmin.

    When AUTH_DISABLED=true, authenticate() always returns True (dev mode).
    Otherwise, requires login with SQLADMIN_USER / SQLADMIN_PASSWORD.
    """

    async def login(self, request: Request) -> bool:
        form = await request.form()
        username = form.get("username")
        password = form.get("password")
        if username == settings.SQLADMIN_USER and password == settings.SQLADMIN_PASSWORD:
            request.session.update({"admin_authenticated": True})
            return True
        return False

    async def logout(self, request: Request) -> bool:
        request.session.clear()
        return True

    async def authenticate(self, request: Request) -> Response | bool:
        if settings.AUTH_DISABLED:
            return True
        return request.session.get("admin_authenticated", False)


class PolicyAdmin(ModelView, model=Policy):
    column_list = [
        Policy.id,
        Policy.policy_number,
        Policy.status,
        Policy.guarantor_type,
        Policy.rent_amount,
        Policy.managed_by,
        Policy.created_at,
    ]
    column_searchable_list = [Policy.policy_number, Policy.managed_by]
    column_sortable_list = [Policy.id, Policy.status, Policy.created_at]
    column_default_sort = [(Policy.created_at, True)]
    form_excluded_columns = [Policy.status, Policy.activities, Policy.tenant_history]
    can_delete = False
    name = "Policy"
    name_plural = "Policies"
    icon = "fa-solid fa-file-contract"


class _ActorAdmin(ModelView):
    can_create = False
    can_delete = False


class TenantAdmin(_ActorAdmin, model=Tenant):
    column_list = [
        Tenant.id,
        Tenant.policy_id,
        Tenant.party_type,
        Tenant.email,
        Tenant.information_complete,
        Tenant.verification_status,
    ]
    column_searchable_list = [Tenant.email, Tenant.paternal_last_name, Tenant.company_name]
    name = "Tenant"
    name_plural = "Tenants"
    icon = "fa-solid fa-user"


class LandlordAdmin(_ActorAdmin, model=Landlord):
    column_list = [
        Landlord.id,
        Landlord.policy_id,
        Landlord.is_primary,
        Landlord.email,
        Landlord.information_complete,
        Landlord.verification_status,
    ]
    column_searchable_list = [Landlord.email, Landlord.company_name]
    name = "Landlord"
    name_plural = "Landlords"
    icon = "fa-solid fa-house-user"


class JointObligorAdmin(_ActorAdmin, model=JointObligor):
    column_list = [
        JointObligor.id,
        JointObligor.policy_id,
        JointObligor.email,
        JointObligor.guarantee_method,
        JointObligor.information_complete,
        JointObligor.verification_status,
    ]
    name = "Joint Obligor"
    name_plural = "Joint Obligors"
    icon = "fa-solid fa-user-shield"


class AvalAdmin(_ActorAdmin, model=Aval):
    column_list = [
        Aval.id,
        Aval.policy_id,
        Aval.email,
        Aval.information_complete,
        Aval.verification_status,
    ]
    name = "Aval"
    name_plural = "Avals"
    icon = "fa-solid fa-user-check"


class ActorDocumentAdmin(ModelView, model=ActorDocument):
    column_list = [
        ActorDocument.id,
        ActorDocument.policy_id,
        ActorDocument.category,
        ActorDocument.file_name,
        ActorDocument.uploaded_by,
        ActorDocument.created_at,
    ]
    column_sortable_list = [ActorDocument.id, ActorDocument.category, ActorDocument.created_at]
    column_default_sort = [(ActorDocument.created_at, True)]
    can_create = False
    name = "Document"
    name_plural = "Documents"
    icon = "fa-solid fa-file-upload"


class PaymentAdmin(ModelView, model=Payment):
    column_list = [
        Payment.id,
        Payment.policy_id,
        Payment.type,
        Payment.status,
        Payment.amount,
        Payment.paid_by,
        Payment.paid_at,
    ]
    name = "Payment"
    name_plural = "Payments"
    icon = "fa-solid fa-money-bill"


class InvestigationAdmin(ModelView, model=Investigation):
    column_list = [
        Investigation.id,
        Investigation.policy_id,
        Investigation.verdict,
        Investigation.risk_level,
        Investigation.completed_by,
        Investigation.completed_at,
        Investigation.landlord_decision,
        Investigation.landlord_override,
    ]
    column_sortable_list = [Investigation.id, Investigation.completed_at]
    can_create = False
    can_edit = False
    can_delete = False
    name = "Investigation"
    name_plural = "Investigations"
    icon = "fa-solid fa-magnifying-glass"


class ContractAdmin(ModelView, model=Contract):
    column_list = [
        Contract.id,
        Contract.policy_id,
        Contract.version,
        Contract.file_name,
        Contract.is_current,
        Contract.uploaded_by,
        Contract.signed_at,
        Contract.signed_by,
    ]
    column_default_sort = [(Contract.created_at, True)]
    can_create = False
    can_edit = False
    can_delete = False
    name = "Contract"
    name_plural = "Contracts"
    icon = "fa-solid fa-file-signature"


class TenantHistoryAdmin(ModelView, model=TenantHistory):
    column_list = [
        TenantHistory.id,
        TenantHistory.policy_id,
        TenantHistory.original_actor_id,
        TenantHistory.email,
        TenantHistory.replaced_by,
        TenantHistory.replaced_at,
    ]
    can_create = False
    can_edit = False
    can_delete = False
    name = "Tenant History"
    name_plural = "Tenant History"
    icon = "fa-solid fa-box-archive"


class PolicyActivityAdmin(ModelView, model=PolicyActivity):
    column_list = [
        PolicyActivity.id,
        PolicyActivity.policy_id,
        PolicyActivity.action,
        PolicyActivity.performed_by,
        PolicyActivity.performed_by_type,
        PolicyActivity.created_at,
    ]
    column_searchable_list = [PolicyActivity.action, PolicyActivity.performed_by]
    column_sortable_list = [PolicyActivity.id, PolicyActivity.created_at, PolicyActivity.action]
    column_default_sort = [(PolicyActivity.created_at, True)]
    can_create = False
    can_edit = False
    can_delete = False
    name = "Activity"
    name_plural = "Activities"
    icon = "fa-solid fa-shield-alt"


def setup_admin(app):
    """Set up SQLAdmin and mount it to the FastAPI app."""
    auth_backend = AdminAuth(
        secret_key=settings.SQLADMIN_SECRET_KEY,
    )
    admin = Admin(app, engine, title="Arrenda Admin", authentication_backend=auth_backend)
    admin.add_view(PolicyAdmin)
    admin.add_view(TenantAdmin)
    admin.add_view(LandlordAdmin)
    admin.add_view(JointObligorAdmin)
    admin.add_view(AvalAdmin)
    admin.add_view(ActorDocumentAdmin)
    admin.add_view(InvestigationAdmin)
    admin.add_view(ContractAdmin)
    admin.add_view(PaymentAdmin)
    admin.add_view(TenantHistoryAdmin)
    admin.add_view(PolicyActivityAdmin)
    return admin

# This project was developed with assistance from AI tools.
"""initial policy schema

Revision ID: 3f1c9a2b7d10
Revises:
Create Date: 2026-10-18 09:12:41.318204

"""

import sqlalchemy as sa
from alembic import op

revision = "3f1c9a2b7d10"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
    ]


def _actor_columns() -> list[sa.Column]:
    return [
        sa.Column("party_type", sa.String(20), nullable=False, server_default="INDIVIDUAL"),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("middle_name", sa.String(100), nullable=True),
        sa.Column("paternal_last_name", sa.String(100), nullable=True),
        sa.Column("maternal_last_name", sa.String(100), nullable=True),
        sa.Column("nationality", sa.String(20), nullable=True),
        sa.Column("curp", sa.String(18), nullable=True),
        sa.Column("rfc", sa.String(13), nullable=True),
        sa.Column("passport", sa.String(50), nullable=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("work_phone", sa.String(20), nullable=True),
        sa.Column("personal_email", sa.String(255), nullable=True),
        sa.Column("work_email", sa.String(255), nullable=True),
        sa.Column("company_name", sa.String(255), nullable=True),
        sa.Column("company_rfc", sa.String(12), nullable=True),
        sa.Column("legal_rep_first_name", sa.String(100), nullable=True),
        sa.Column("legal_rep_middle_name", sa.String(100), nullable=True),
        sa.Column("legal_rep_paternal_last_name", sa.String(100), nullable=True),
        sa.Column("legal_rep_maternal_last_name", sa.String(100), nullable=True),
        sa.Column("legal_rep_position", sa.String(100), nullable=True),
        sa.Column("legal_rep_rfc", sa.String(13), nullable=True),
        sa.Column("legal_rep_phone", sa.String(20), nullable=True),
        sa.Column("legal_rep_email", sa.String(255), nullable=True),
        sa.Column("additional_info", sa.Text(), nullable=True),
        sa.Column("information_complete", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_by", sa.String(255), nullable=True),
        sa.Column("verification_status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("verified_by", sa.String(255), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("access_token", sa.String(64), nullable=True),
        sa.Column("token_expiry", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    ]


def _employment_columns() -> list[sa.Column]:
    return [
        sa.Column("employment_status", sa.String(50), nullable=True),
        sa.Column("occupation", sa.String(255), nullable=True),
        sa.Column("employer_name", sa.String(255), nullable=True),
        sa.Column("position", sa.String(255), nullable=True),
        sa.Column("monthly_income", sa.Numeric(12, 2), nullable=True),
        sa.Column("income_source", sa.String(255), nullable=True),
        sa.Column("years_at_job", sa.Integer(), nullable=True),
    ]


def _property_guarantee_columns() -> list[sa.Column]:
    return [
        sa.Column("relationship_to_tenant", sa.String(100), nullable=True),
        sa.Column("property_value", sa.Numeric(14, 2), nullable=True),
        sa.Column("property_deed_number", sa.String(100), nullable=True),
        sa.Column("property_registry", sa.String(100), nullable=True),
        sa.Column("property_tax_account", sa.String(100), nullable=True),
        sa.Column("marital_status", sa.String(50), nullable=True),
        sa.Column("spouse_name", sa.String(255), nullable=True),
        sa.Column("spouse_rfc", sa.String(13), nullable=True),
        sa.Column("spouse_curp", sa.String(18), nullable=True),
    ]


def _address_fk(name: str) -> list:
    return [
        sa.Column(name, sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint([name], ["addresses.id"], ondelete="SET NULL"),
    ]


def _history_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("policy_id", sa.Integer(), nullable=False),
        sa.Column("original_actor_id", sa.Integer(), nullable=False),
        sa.Column("party_type", sa.String(20), nullable=True),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("paternal_last_name", sa.String(100), nullable=True),
        sa.Column("maternal_last_name", sa.String(100), nullable=True),
        sa.Column("company_name", sa.String(255), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("verification_status", sa.String(20), nullable=True),
        sa.Column("information_complete", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("snapshot", sa.JSON(), nullable=False),
        sa.Column("replaced_by", sa.String(255), nullable=False),
        sa.Column("replacement_reason", sa.Text(), nullable=False),
        sa.Column(
            "replaced_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.ForeignKeyConstraint(["policy_id"], ["policies.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    ]


def upgrade() -> None:
    op.create_table(
        "policies",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("policy_number", sa.String(50), nullable=False),
        sa.Column("status", sa.String(50), nullable=False, server_default="DRAFT"),
        sa.Column("guarantor_type", sa.String(20), nullable=False, server_default="NONE"),
        sa.Column("rent_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("contract_length", sa.Integer(), nullable=False, server_default="12"),
        sa.Column("property_address", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(255), nullable=False),
        sa.Column("managed_by", sa.String(255), nullable=True),
        sa.Column("manager_email", sa.String(255), nullable=True),
        sa.Column("current_step", sa.String(50), nullable=True),
        sa.Column("review_notes", sa.Text(), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejected_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("activated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancellation_reason", sa.String(50), nullable=True),
        sa.Column("cancellation_comment", sa.Text(), nullable=True),
        sa.Column("cancelled_by", sa.String(255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_policies_policy_number", "policies", ["policy_number"], unique=True)
    op.create_index("ix_policies_status", "policies", ["status"])
    op.create_index("ix_policies_managed_by", "policies", ["managed_by"])

    op.create_table(
        "addresses",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("street", sa.String(255), nullable=False),
        sa.Column("exterior_number", sa.String(50), nullable=False),
        sa.Column("interior_number", sa.String(50), nullable=True),
        sa.Column("neighborhood", sa.String(255), nullable=True),
        sa.Column("postal_code", sa.String(10), nullable=False),
        sa.Column("municipality", sa.String(255), nullable=True),
        sa.Column("city", sa.String(255), nullable=True),
        sa.Column("state", sa.String(100), nullable=False),
        sa.Column("country", sa.String(100), nullable=False, server_default="México"),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "tenants",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("policy_id", sa.Integer(), nullable=False),
        *_actor_columns(),
        *_employment_columns(),
        *_address_fk("address_id"),
        *_address_fk("employer_address_id"),
        *_address_fk("previous_rental_address_id"),
        sa.Column("previous_landlord_name", sa.String(255), nullable=True),
        sa.Column("previous_landlord_phone", sa.String(20), nullable=True),
        sa.Column("previous_landlord_email", sa.String(255), nullable=True),
        sa.Column("previous_rent_amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("rental_history_years", sa.Integer(), nullable=True),
        sa.Column("reason_for_moving", sa.Text(), nullable=True),
        sa.Column("number_of_occupants", sa.Integer(), nullable=True),
        sa.Column("has_pets", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("pet_description", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["policy_id"], ["policies.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("policy_id"),
    )

    op.create_table(
        "landlords",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("policy_id", sa.Integer(), nullable=False),
        sa.Column("is_primary", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_actor_columns(),
        *_address_fk("address_id"),
        sa.Column("bank_name", sa.String(100), nullable=True),
        sa.Column("account_number", sa.String(30), nullable=True),
        sa.Column("clabe", sa.String(18), nullable=True),
        sa.Column("account_holder", sa.String(255), nullable=True),
        sa.ForeignKeyConstraint(["policy_id"], ["policies.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_landlords_policy_id", "landlords", ["policy_id"])

    op.create_table(
        "joint_obligors",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("policy_id", sa.Integer(), nullable=False),
        *_actor_columns(),
        *_employment_columns(),
        *_property_guarantee_columns(),
        sa.Column("guarantee_method", sa.String(20), nullable=True),
        sa.Column("bank_name", sa.String(100), nullable=True),
        sa.Column("account_holder", sa.String(255), nullable=True),
        *_address_fk("address_id"),
        *_address_fk("employer_address_id"),
        *_address_fk("guarantee_property_address_id"),
        sa.ForeignKeyConstraint(["policy_id"], ["policies.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_joint_obligors_policy_id", "joint_obligors", ["policy_id"])

    op.create_table(
        "avals",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("policy_id", sa.Integer(), nullable=False),
        *_actor_columns(),
        *_employment_columns(),
        *_property_guarantee_columns(),
        *_address_fk("address_id"),
        *_address_fk("employer_address_id"),
        *_address_fk("guarantee_property_address_id"),
        sa.ForeignKeyConstraint(["policy_id"], ["policies.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_avals_policy_id", "avals", ["policy_id"])

    for table in ("tenants", "landlords", "joint_obligors", "avals"):
        op.create_index(f"ix_{table}_access_token", table, ["access_token"], unique=True)

    op.create_table(
        "personal_references",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("tenant_id", sa.Integer(), nullable=True),
        sa.Column("joint_obligor_id", sa.Integer(), nullable=True),
        sa.Column("aval_id", sa.Integer(), nullable=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("paternal_last_name", sa.String(100), nullable=False),
        sa.Column("maternal_last_name", sa.String(100), nullable=True),
        sa.Column("phone", sa.String(20), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("relationship_type", sa.String(100), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["joint_obligor_id"], ["joint_obligors.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["aval_id"], ["avals.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "commercial_references",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("tenant_id", sa.Integer(), nullable=True),
        sa.Column("joint_obligor_id", sa.Integer(), nullable=True),
        sa.Column("aval_id", sa.Integer(), nullable=True),
        sa.Column("company_name", sa.String(255), nullable=False),
        sa.Column("contact_first_name", sa.String(100), nullable=False),
        sa.Column("contact_paternal_last_name", sa.String(100), nullable=False),
        sa.Column("phone", sa.String(20), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("relationship_type", sa.String(100), nullable=False),
        sa.Column("years_of_relationship", sa.Integer(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["joint_obligor_id"], ["joint_obligors.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["aval_id"], ["avals.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    for table in ("personal_references", "commercial_references"):
        for column in ("tenant_id", "joint_obligor_id", "aval_id"):
            op.create_index(f"ix_{table}_{column}", table, [column])

    op.create_table(
        "actor_documents",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("policy_id", sa.Integer(), nullable=False),
        sa.Column("tenant_id", sa.Integer(), nullable=True),
        sa.Column("landlord_id", sa.Integer(), nullable=True),
        sa.Column("joint_obligor_id", sa.Integer(), nullable=True),
        sa.Column("aval_id", sa.Integer(), nullable=True),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("mime_type", sa.String(100), nullable=True),
        sa.Column("file_size", sa.Integer(), nullable=True),
        sa.Column("storage_key", sa.String(500), nullable=True),
        sa.Column("uploaded_by", sa.String(255), nullable=True),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("verified_by", sa.String(255), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.ForeignKeyConstraint(["policy_id"], ["policies.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["landlord_id"], ["landlords.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["joint_obligor_id"], ["joint_obligors.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["aval_id"], ["avals.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    for column in ("policy_id", "tenant_id", "landlord_id", "joint_obligor_id", "aval_id"):
        op.create_index(f"ix_actor_documents_{column}", "actor_documents", [column])

    op.create_table(
        "actor_section_validations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("actor_type", sa.String(20), nullable=False),
        sa.Column("actor_id", sa.Integer(), nullable=False),
        sa.Column("section", sa.String(50), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("validated_by", sa.String(255), nullable=True),
        sa.Column("validated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("actor_type", "actor_id", "section", name="uq_actor_section"),
    )
    op.create_index(
        "ix_actor_section_validations_actor_id", "actor_section_validations", ["actor_id"]
    )

    op.create_table(
        "document_validations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("document_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("validated_by", sa.String(255), nullable=True),
        sa.Column("validated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["document_id"], ["actor_documents.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("document_id"),
    )

    op.create_table(
        "review_notes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("policy_id", sa.Integer(), nullable=False),
        sa.Column("actor_type", sa.String(20), nullable=True),
        sa.Column("actor_id", sa.Integer(), nullable=True),
        sa.Column("document_id", sa.Integer(), nullable=True),
        sa.Column("note", sa.Text(), nullable=False),
        sa.Column("created_by", sa.String(255), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.ForeignKeyConstraint(["policy_id"], ["policies.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["document_id"], ["actor_documents.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_review_notes_policy_id", "review_notes", ["policy_id"])

    for table in ("tenant_history", "joint_obligor_history", "aval_history"):
        op.create_table(table, *_history_columns())
        op.create_index(f"ix_{table}_policy_id", table, ["policy_id"])

    op.create_table(
        "investigations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("policy_id", sa.Integer(), nullable=False),
        sa.Column("verdict", sa.String(20), nullable=True),
        sa.Column("risk_level", sa.String(20), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("completed_by", sa.String(255), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("landlord_decision", sa.String(20), nullable=True),
        sa.Column("landlord_override", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("landlord_notes", sa.Text(), nullable=True),
        sa.Column("landlord_decided_by", sa.String(255), nullable=True),
        sa.Column("landlord_decided_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.ForeignKeyConstraint(["policy_id"], ["policies.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("policy_id"),
    )

    op.create_table(
        "contracts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("policy_id", sa.Integer(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("storage_key", sa.String(500), nullable=True),
        sa.Column("file_name", sa.String(255), nullable=True),
        sa.Column("mime_type", sa.String(100), nullable=True),
        sa.Column("file_size", sa.Integer(), nullable=True),
        sa.Column("is_current", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("uploaded_by", sa.String(255), nullable=True),
        sa.Column("signed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("signed_by", sa.String(255), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.ForeignKeyConstraint(["policy_id"], ["policies.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_contracts_policy_id", "contracts", ["policy_id"])

    op.create_table(
        "payments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("policy_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("type", sa.String(30), nullable=False),
        sa.Column("status", sa.String(30), nullable=False, server_default="PENDING"),
        sa.Column("paid_by", sa.String(20), nullable=True),
        sa.Column("paid_by_tenant_name", sa.String(255), nullable=True),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["policy_id"], ["policies.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_payments_policy_id", "payments", ["policy_id"])

    op.create_table(
        "policy_activities",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("policy_id", sa.Integer(), nullable=False),
        sa.Column("action", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("details", sa.JSON(), nullable=True),
        sa.Column("performed_by", sa.String(255), nullable=True),
        sa.Column("performed_by_type", sa.String(20), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.ForeignKeyConstraint(["policy_id"], ["policies.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_policy_activities_policy_id", "policy_activities", ["policy_id"])
    op.create_index("ix_policy_activities_action", "policy_activities", ["action"])


def downgrade() -> None:
    for table in (
        "policy_activities",
        "payments",
        "contracts",
        "investigations",
        "aval_history",
        "joint_obligor_history",
        "tenant_history",
        "review_notes",
        "document_validations",
        "actor_section_validations",
        "actor_documents",
        "commercial_references",
        "personal_references",
        "avals",
        "joint_obligors",
        "landlords",
        "tenants",
        "addresses",
        "policies",
    ):
        op.drop_table(table)

# This project was developed with assistance from AI tools.
"""Tests for actor archival, tenant replacement and guarantor-type changes."""

from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from db import TenantHistory
from db.enums import (
    ActorType,
    DocumentCategory,
    GuarantorType,
    Nationality,
    PartyType,
    PayerType,
    PaymentStatus,
    PaymentType,
    PolicyStatus,
    VerificationStatus,
)

from src.core.errors import InvalidTransitionError, ValidationError
from src.schemas.actor import ActorStub
from src.services.actor_config import get_descriptor
from src.services.archive import (
    ArchiveOutcome,
    build_history,
    payer_display_name,
    reset_actor,
    snapshot_actor,
)
from src.services.replacement import (
    _settle_tenant_payments,
    change_guarantor_type,
    replace_tenant_on_policy,
)

from .factories import (
    make_company_tenant,
    make_document,
    make_investigation,
    make_joint_obligor,
    make_mock_session,
    make_payment,
    make_policy,
    make_tenant,
)

NEW_TENANT = ActorStub(email="nuevo@example.com", first_name="Luis", paternal_last_name="Mora", phone="5500001111")
TENANT = get_descriptor(ActorType.TENANT)


# ---------------------------------------------------------------------------
# Archive helpers
# ---------------------------------------------------------------------------


def test_snapshot_excludes_token_and_serializes_values():
    tenant = make_tenant(access_token="secret", token_expiry=datetime(2026, 1, 1, tzinfo=UTC))
    tenant.documents = [make_document(id=5, category=DocumentCategory.INCOME_PROOF, status="APPROVED")]

    snapshot = snapshot_actor(TENANT, tenant)

    assert "access_token" not in snapshot
    assert "token_expiry" not in snapshot
    assert snapshot["monthly_income"] == "30000"
    assert snapshot["nationality"] == "MEXICAN"
    assert snapshot["address"] is None
    assert len(snapshot["personal_references"]) == 1
    assert "tenant_id" not in snapshot["personal_references"][0]
    assert snapshot["documents"] == [
        {"id": 5, "category": "INCOME_PROOF", "file_name": "income_proof.pdf", "validation_status": "APPROVED"}
    ]


def test_build_history_copies_identity():
    tenant = make_tenant(verification_status=VerificationStatus.REJECTED)
    history = build_history(TENANT, tenant, replaced_by="staff-1", reason="No se mudó")

    assert isinstance(history, TenantHistory)
    assert history.original_actor_id == tenant.id
    assert history.policy_id == tenant.policy_id
    assert history.email == "ana@example.com"
    assert history.verification_status == "REJECTED"
    assert history.replacement_reason == "No se mudó"
    assert history.snapshot["first_name"] == "Ana"


def test_reset_actor_blanks_everything_but_identity():
    tenant = make_tenant(
        information_complete=True,
        verification_status=VerificationStatus.APPROVED,
        access_token="tok",
        has_pets=True,
        rfc="LOGA900101AB1",
    )
    reset_actor(tenant, NEW_TENANT)

    assert tenant.id == 10
    assert tenant.policy_id == 1
    assert tenant.email == "nuevo@example.com"
    assert tenant.first_name == "Luis"
    assert tenant.maternal_last_name is None
    assert tenant.curp is None
    assert tenant.rfc is None
    assert tenant.monthly_income is None
    assert tenant.access_token is None
    assert tenant.has_pets is False
    assert tenant.nationality == Nationality.MEXICAN
    assert tenant.information_complete is False
    assert tenant.verification_status == VerificationStatus.PENDING


def test_reset_actor_to_company():
    tenant = make_tenant()
    reset_actor(tenant, ActorStub(party_type=PartyType.COMPANY, email="rh@empresa.mx", company_name="Empresa SA"))
    assert tenant.is_company
    assert tenant.company_name == "Empresa SA"
    assert tenant.first_name is None


def test_payer_display_name():
    assert payer_display_name(make_tenant()) == "Ana López"
    assert payer_display_name(make_company_tenant()) == "Empresa SA"
    assert payer_display_name(make_tenant(first_name=None, paternal_last_name=None)) == "Inquilino"


def test_settle_tenant_payments():
    """Completed tenant payments keep the outgoing name; open ones are cancelled."""
    completed = make_payment(id=1, status=PaymentStatus.COMPLETED)
    already_named = make_payment(id=2, status=PaymentStatus.COMPLETED, paid_by_tenant_name="Anterior")
    pending = make_payment(id=3, status=PaymentStatus.PENDING)
    verifying = make_payment(id=4, status=PaymentStatus.PENDING_VERIFICATION)
    failed = make_payment(id=5, status=PaymentStatus.FAILED)
    landlord = make_payment(id=6, type=PaymentType.LANDLORD_PORTION, paid_by=PayerType.LANDLORD)
    policy = make_policy(payments=[completed, already_named, pending, verifying, failed, landlord])

    assert _settle_tenant_payments(policy, "Ana López") == (1, 2)
    assert completed.paid_by_tenant_name == "Ana López"
    assert already_named.paid_by_tenant_name == "Anterior"
    assert pending.status == PaymentStatus.CANCELLED
    assert verifying.status == PaymentStatus.CANCELLED
    assert failed.status == PaymentStatus.FAILED
    assert landlord.status == PaymentStatus.PENDING


# ---------------------------------------------------------------------------
# replace_tenant_on_policy
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "status",
    [PolicyStatus.APPROVED, PolicyStatus.CONTRACT_PENDING, PolicyStatus.ACTIVE, PolicyStatus.CANCELLED],
)
@patch("src.services.replacement.load_policy", new_callable=AsyncMock)
async def test_replace_tenant_rejected_after_approval(mock_load, status):
    mock_load.return_value = make_policy(status=status)
    session = make_mock_session()

    with pytest.raises(InvalidTransitionError, match="Cannot replace tenant"):
        await replace_tenant_on_policy(
            session, 1, reason="x", new_tenant=NEW_TENANT, performed_by="staff-1",
        )
    session.commit.assert_not_called()


@patch("src.services.replacement.load_policy", new_callable=AsyncMock)
async def test_replace_tenant_without_tenant(mock_load):
    policy = make_policy()
    policy.tenant = None
    mock_load.return_value = policy

    with pytest.raises(ValidationError, match="no tenant"):
        await replace_tenant_on_policy(
            make_mock_session(), 1, reason="x", new_tenant=NEW_TENANT, performed_by="staff-1",
        )


def _issue_token(actor):
    async def _issue(_session, _actor_type, _actor_id, renew=False):
        actor.access_token = "new-token"
        actor.token_expiry = datetime(2030, 1, 1, tzinfo=UTC)

    return _issue


@patch("src.services.workflow.log_policy_activity", new_callable=AsyncMock)
@patch("src.services.replacement.record_policy_activity", new_callable=AsyncMock)
@patch("src.services.replacement.generate_actor_token", new_callable=AsyncMock)
@patch("src.services.replacement.archive_actor", new_callable=AsyncMock)
@patch("src.services.replacement.load_for_archive", new_callable=AsyncMock)
@patch("src.services.replacement.load_policy", new_callable=AsyncMock)
async def test_replace_tenant_resets_row_and_reverts_status(
    mock_load, mock_reload, mock_archive, mock_token, mock_record, mock_log,
):
    tenant = make_tenant(information_complete=True, verification_status=VerificationStatus.APPROVED)
    paid = make_payment(id=1, status=PaymentStatus.COMPLETED)
    open_payment = make_payment(id=2, status=PaymentStatus.PENDING)
    policy = make_policy(
        status=PolicyStatus.UNDER_INVESTIGATION,
        tenant=tenant,
        investigation=make_investigation(),
        payments=[paid, open_payment],
    )
    mock_load.return_value = policy
    mock_reload.return_value = tenant
    mock_archive.return_value = ArchiveOutcome(history=MagicMock(id=55), documents_detached=3)
    mock_token.side_effect = _issue_token(tenant)
    notifier = MagicMock()
    notifier.send = AsyncMock()
    session = make_mock_session()

    result = await replace_tenant_on_policy(
        session, 1, reason="Cambio de inquilino", new_tenant=NEW_TENANT, performed_by="staff-1", notifier=notifier,
    )

    assert result.tenant_id == 10
    assert result.history_id == 55
    assert result.documents_detached == 3
    assert result.previous_status == PolicyStatus.UNDER_INVESTIGATION
    assert result.status == PolicyStatus.COLLECTING_INFO
    assert (result.payments_stamped, result.payments_cancelled) == (1, 1)
    assert result.failed_followups == []

    assert tenant.email == "nuevo@example.com"
    assert tenant.information_complete is False
    assert tenant.verification_status == VerificationStatus.PENDING
    assert policy.investigation is None
    assert paid.paid_by_tenant_name == "Ana López"
    assert mock_log.call_args.kwargs["action"] == "status_reverted"
    session.commit.assert_awaited_once()

    mock_token.assert_awaited_once_with(session, ActorType.TENANT, 10, renew=True)
    assert mock_record.call_args.kwargs["action"] == "tenant_replaced"
    assert mock_record.call_args.kwargs["details"]["history_id"] == 55
    recipients = [c.args[1] for c in notifier.send.call_args_list]
    assert "broker@arrenda.test" in recipients
    assert "nuevo@example.com" in recipients


@patch("src.services.workflow.log_policy_activity", new_callable=AsyncMock)
@patch("src.services.replacement.record_policy_activity", new_callable=AsyncMock)
@patch("src.services.replacement.generate_actor_token", new_callable=AsyncMock)
@patch("src.services.replacement.archive_actor", new_callable=AsyncMock)
@patch("src.services.replacement.load_for_archive", new_callable=AsyncMock)
@patch("src.services.replacement.load_policy", new_callable=AsyncMock)
async def test_replace_tenant_collecting_info_does_not_revert(
    mock_load, mock_reload, mock_archive, mock_token, mock_record, mock_log,
):
    """A policy already collecting info keeps its status and writes no status change."""
    tenant = make_tenant()
    mock_load.return_value = make_policy(tenant=tenant)
    mock_reload.return_value = tenant
    mock_archive.return_value = ArchiveOutcome(history=MagicMock(id=56))

    result = await replace_tenant_on_policy(
        make_mock_session(), 1, reason="x", new_tenant=NEW_TENANT, performed_by="staff-1",
    )

    assert result.status == PolicyStatus.COLLECTING_INFO
    mock_log.assert_not_called()


@patch("src.services.workflow.log_policy_activity", new_callable=AsyncMock)
@patch("src.services.replacement.record_policy_activity", new_callable=AsyncMock)
@patch("src.services.replacement.generate_actor_token", new_callable=AsyncMock)
@patch("src.services.replacement.archive_actor", new_callable=AsyncMock)
@patch("src.services.replacement.load_for_archive", new_callable=AsyncMock)
@patch("src.services.replacement.load_policy", new_callable=AsyncMock)
async def test_replace_tenant_followup_failure_is_reported(
    mock_load, mock_reload, mock_archive, mock_token, mock_record, mock_log,
):
    """A failing post-commit step does not undo the replacement; it is listed instead."""
    tenant = make_tenant()
    mock_load.return_value = make_policy(tenant=tenant)
    mock_reload.return_value = tenant
    mock_archive.return_value = ArchiveOutcome(history=MagicMock(id=57))
    mock_token.side_effect = RuntimeError("db went away")

    result = await replace_tenant_on_policy(
        make_mock_session(), 1, reason="x", new_tenant=NEW_TENANT, performed_by="staff-1",
    )

    assert result.failed_followups == ["issue token for tenant 10"]
    assert tenant.email == "nuevo@example.com"
    mock_record.assert_awaited_once()


@patch("src.services.workflow.log_policy_activity", new_callable=AsyncMock)
@patch("src.services.replacement.record_policy_activity", new_callable=AsyncMock)
@patch("src.services.replacement.generate_actor_token", new_callable=AsyncMock)
@patch("src.services.replacement.archive_actor", new_callable=AsyncMock)
@patch("src.services.replacement.load_for_archive", new_callable=AsyncMock)
@patch("src.services.replacement.load_policy", new_callable=AsyncMock)
async def test_replace_tenant_with_guarantors(
    mock_load, mock_reload, mock_archive, mock_token, mock_record, mock_log,
):
    tenant = make_tenant()
    jo = make_joint_obligor()
    policy = make_policy(tenant=tenant, guarantor_type=GuarantorType.JOINT_OBLIGOR, joint_obligors=[jo])
    mock_load.return_value = policy
    mock_reload.side_effect = lambda _s, descriptor, _id: tenant if descriptor.actor_type == ActorType.TENANT else jo
    mock_archive.return_value = ArchiveOutcome(history=MagicMock(id=58))

    result = await replace_tenant_on_policy(
        make_mock_session(), 1, reason="x", new_tenant=NEW_TENANT, replace_guarantors=True, performed_by="staff-1",
    )

    assert result.guarantors_archived == 1
    assert policy.joint_obligors == []
    assert mock_archive.await_count == 2


# ---------------------------------------------------------------------------
# change_guarantor_type
# ---------------------------------------------------------------------------


@patch("src.services.replacement.load_policy", new_callable=AsyncMock)
async def test_change_to_same_type_rejected(mock_load):
    mock_load.return_value = make_policy(guarantor_type=GuarantorType.AVAL)
    with pytest.raises(ValidationError, match="same as current type"):
        await change_guarantor_type(
            make_mock_session(), 1, reason="x", new_guarantor_type=GuarantorType.AVAL, performed_by="staff-1",
        )


@patch("src.services.replacement.load_policy", new_callable=AsyncMock)
async def test_change_requires_stubs_for_new_type(mock_load):
    mock_load.return_value = make_policy()
    with pytest.raises(ValidationError) as exc_info:
        await change_guarantor_type(
            make_mock_session(), 1, reason="x", new_guarantor_type=GuarantorType.BOTH, performed_by="staff-1",
        )
    assert len(exc_info.value.details) == 2


@patch("src.services.replacement.load_policy", new_callable=AsyncMock)
async def test_change_rejected_once_contracted(mock_load):
    mock_load.return_value = make_policy(status=PolicyStatus.CONTRACT_SIGNED)
    with pytest.raises(InvalidTransitionError, match="Cannot change guarantor type"):
        await change_guarantor_type(
            make_mock_session(), 1, reason="x", new_guarantor_type=GuarantorType.NONE, performed_by="staff-1",
        )


@patch("src.services.workflow.log_policy_activity", new_callable=AsyncMock)
@patch("src.services.replacement.record_policy_activity", new_callable=AsyncMock)
@patch("src.services.replacement.archive_actor", new_callable=AsyncMock)
@patch("src.services.replacement.load_for_archive", new_callable=AsyncMock)
@patch("src.services.replacement.load_policy", new_callable=AsyncMock)
async def test_change_to_none_archives_guarantors(mock_load, mock_reload, mock_archive, mock_record, mock_log):
    jo = make_joint_obligor(monthly_income=Decimal("20000"))
    policy = make_policy(
        status=PolicyStatus.PENDING_APPROVAL,
        guarantor_type=GuarantorType.JOINT_OBLIGOR,
        joint_obligors=[jo],
        investigation=make_investigation(),
    )
    mock_load.return_value = policy
    mock_reload.return_value = jo

    result = await change_guarantor_type(
        make_mock_session(), 1, reason="Sin garantía", new_guarantor_type=GuarantorType.NONE, performed_by="staff-1",
    )

    assert result.archived_joint_obligors == 1
    assert result.created_joint_obligor_ids == []
    assert result.previous_status == PolicyStatus.PENDING_APPROVAL
    assert result.status == PolicyStatus.COLLECTING_INFO
    assert policy.guarantor_type == GuarantorType.NONE
    assert policy.joint_obligors == []
    assert policy.investigation is None
    assert mock_record.call_args.kwargs["action"] == "guarantor_type_changed"
    assert mock_record.call_args.kwargs["details"]["from_type"] == "JOINT_OBLIGOR"

# This project was developed with assistance from AI tools.
"""Tests for saving and submitting actor information."""

from unittest.mock import AsyncMock, patch

import pytest
from db.enums import ActorType, DocumentCategory, PolicyStatus

from src.core.errors import AlreadyCompleteError, InvalidTransitionError, ValidationError
from src.schemas.actor import ActorUpdate
from src.services.actor_config import get_required_documents
from src.services.actors import submit_actor, update_actor

from .factories import make_document, make_landlord, make_mock_session, make_policy, make_tenant

ADDRESS = {"street": "Av. Reforma", "exterior_number": "222", "postal_code": "06600", "state": "CDMX"}


def _with_documents(tenant, skip=()):
    categories = [c for c in get_required_documents(ActorType.TENANT, tenant) if c not in skip]
    tenant.documents = [
        make_document(id=500 + index, category=category, tenant_id=tenant.id)
        for index, category in enumerate(categories)
    ]
    return tenant


# ---------------------------------------------------------------------------
# submit_actor
# ---------------------------------------------------------------------------


@patch("src.services.actors.load_policy", new_callable=AsyncMock)
@patch("src.services.actors.log_policy_activity", new_callable=AsyncMock)
@patch("src.services.actors.advance_if_actors_complete", new_callable=AsyncMock)
@patch("src.services.actors.get_actor", new_callable=AsyncMock)
async def test_submit_marks_complete_and_advances(mock_get, mock_advance, mock_log, mock_load):
    tenant = _with_documents(make_tenant())
    mock_get.return_value = tenant
    mock_advance.return_value = True
    mock_load.return_value = make_policy(status=PolicyStatus.UNDER_INVESTIGATION, tenant=tenant)
    session = make_mock_session()

    result = await submit_actor(session, ActorType.TENANT, tenant.id, submitted_by="ana@example.com")

    assert tenant.information_complete is True
    assert tenant.completed_at is not None
    assert tenant.completed_by == "ana@example.com"
    mock_advance.assert_awaited_once_with(session, tenant.policy_id)
    details = mock_log.call_args.kwargs["details"]
    assert details["policy_transitioned"] is True
    assert details["skip_validation"] is False
    assert mock_log.call_args.kwargs["action"] == "actor_submitted"
    assert result.policy_transitioned is True
    assert result.policy_status == PolicyStatus.UNDER_INVESTIGATION
    assert result.actor_id == tenant.id
    session.commit.assert_awaited_once()


@patch("src.services.actors.log_policy_activity", new_callable=AsyncMock)
@patch("src.services.actors.advance_if_actors_complete", new_callable=AsyncMock)
@patch("src.services.actors.get_actor", new_callable=AsyncMock)
async def test_submit_with_missing_fields_is_validation_error(mock_get, mock_advance, mock_log):
    tenant = _with_documents(make_tenant(occupation=None, curp=None))
    mock_get.return_value = tenant
    session = make_mock_session()

    with pytest.raises(ValidationError) as exc_info:
        await submit_actor(session, ActorType.TENANT, tenant.id, submitted_by="ana@example.com")

    assert exc_info.value.code.value == "VALIDATION_ERROR"
    assert set(exc_info.value.context["missing_fields"]) >= {"occupation", "curp"}
    assert exc_info.value.details
    assert not tenant.information_complete
    mock_advance.assert_not_called()
    mock_log.assert_not_called()
    session.commit.assert_not_called()


@patch("src.services.actors.advance_if_actors_complete", new_callable=AsyncMock)
@patch("src.services.actors.get_actor", new_callable=AsyncMock)
async def test_submit_with_missing_documents_is_validation_error(mock_get, mock_advance):
    tenant = _with_documents(make_tenant(), skip=(DocumentCategory.BANK_STATEMENT,))
    mock_get.return_value = tenant

    with pytest.raises(ValidationError, match="BANK_STATEMENT") as exc_info:
        await submit_actor(make_mock_session(), ActorType.TENANT, tenant.id, submitted_by="ana@example.com")

    assert exc_info.value.context["missing_documents"] == ["BANK_STATEMENT"]
    assert not tenant.information_complete
    mock_advance.assert_not_called()


@patch("src.services.actors.load_policy", new_callable=AsyncMock)
@patch("src.services.actors.log_policy_activity", new_callable=AsyncMock)
@patch("src.services.actors.advance_if_actors_complete", new_callable=AsyncMock)
@patch("src.services.actors.get_actor", new_callable=AsyncMock)
async def test_skip_validation_ignores_fields(mock_get, mock_advance, mock_log, mock_load):
    tenant = _with_documents(make_tenant(occupation=None))
    mock_get.return_value = tenant
    mock_advance.return_value = False
    mock_load.return_value = make_policy(tenant=tenant)

    result = await submit_actor(
        make_mock_session(), ActorType.TENANT, tenant.id, submitted_by="staff-1", skip_validation=True,
    )

    assert tenant.information_complete is True
    assert result.policy_transitioned is False
    assert result.policy_status == PolicyStatus.COLLECTING_INFO
    assert mock_log.call_args.kwargs["details"]["skip_validation"] is True


@patch("src.services.actors.advance_if_actors_complete", new_callable=AsyncMock)
@patch("src.services.actors.get_actor", new_callable=AsyncMock)
async def test_skip_validation_still_requires_documents(mock_get, mock_advance):
    tenant = make_tenant(occupation=None)
    tenant.documents = []
    mock_get.return_value = tenant

    with pytest.raises(ValidationError, match="Missing required documents"):
        await submit_actor(
            make_mock_session(), ActorType.TENANT, tenant.id, submitted_by="staff-1", skip_validation=True,
        )

    assert not tenant.information_complete
    mock_advance.assert_not_called()


@patch("src.services.actors.advance_if_actors_complete", new_callable=AsyncMock)
@patch("src.services.actors.get_actor", new_callable=AsyncMock)
async def test_submit_twice_is_already_complete(mock_get, mock_advance):
    mock_get.return_value = _with_documents(make_tenant(information_complete=True))
    session = make_mock_session()

    with pytest.raises(AlreadyCompleteError, match="already submitted"):
        await submit_actor(session, ActorType.TENANT, 10, submitted_by="ana@example.com")

    mock_advance.assert_not_called()
    session.commit.assert_not_called()


@patch("src.services.actors.log_policy_activity", new_callable=AsyncMock)
@patch("src.services.actors.advance_if_actors_complete", new_callable=AsyncMock)
@patch("src.services.actors.get_actor", new_callable=AsyncMock)
async def test_failed_advance_rolls_back_submission(mock_get, mock_advance, mock_log):
    """Completion flag, transition and activity commit together or not at all."""
    tenant = _with_documents(make_tenant())
    mock_get.return_value = tenant
    mock_advance.side_effect = InvalidTransitionError("Cannot transition")
    session = make_mock_session()

    with pytest.raises(InvalidTransitionError):
        await submit_actor(session, ActorType.TENANT, tenant.id, submitted_by="ana@example.com")

    session.rollback.assert_awaited_once()
    session.commit.assert_not_called()
    mock_log.assert_not_called()


# ---------------------------------------------------------------------------
# update_actor
# ---------------------------------------------------------------------------


@patch("src.services.actors.log_policy_activity", new_callable=AsyncMock)
async def test_update_sets_fields_address_and_references(mock_log):
    tenant = make_tenant()
    session = make_mock_session()
    data = ActorUpdate(
        occupation="Arquitecta",
        address=ADDRESS,
        personal_references=[
            {"first_name": "Luis", "paternal_last_name": "Pérez", "phone": "5511112222", "relationship_type": "amigo"},
        ],
    )

    updated = await update_actor(
        session, ActorType.TENANT, tenant.id, data, performed_by="ana@example.com", actor=tenant,
    )

    assert updated is tenant
    assert tenant.occupation == "Arquitecta"
    assert tenant.address.street == "Av. Reforma"
    assert [ref.first_name for ref in tenant.personal_references] == ["Luis"]
    details = mock_log.call_args.kwargs["details"]
    assert details["fields"] == ["address", "occupation", "personal_references"]
    assert mock_log.call_args.kwargs["action"] == "actor_updated"
    session.commit.assert_awaited_once()


@patch("src.services.actors.log_policy_activity", new_callable=AsyncMock)
async def test_update_existing_address_in_place(_mock_log):
    tenant = make_tenant()
    await update_actor(make_mock_session(), ActorType.TENANT, 10, ActorUpdate(address=ADDRESS), performed_by="x", actor=tenant)
    first = tenant.address

    await update_actor(
        make_mock_session(),
        ActorType.TENANT,
        10,
        ActorUpdate(address={**ADDRESS, "street": "Insurgentes Sur"}),
        performed_by="x",
        actor=tenant,
    )

    assert tenant.address is first
    assert first.street == "Insurgentes Sur"


@patch("src.services.actors.log_policy_activity", new_callable=AsyncMock)
async def test_update_keeps_not_null_fields_when_cleared(_mock_log):
    tenant = make_tenant()
    await update_actor(
        make_mock_session(),
        ActorType.TENANT,
        10,
        ActorUpdate(email=None, phone=None),
        performed_by="ana@example.com",
        actor=tenant,
    )
    assert tenant.email == "ana@example.com"
    assert tenant.phone is None


@patch("src.services.actors.log_policy_activity", new_callable=AsyncMock)
@patch("src.services.actors.get_actor", new_callable=AsyncMock)
async def test_update_rejects_fields_of_other_actor_kinds(mock_get, mock_log):
    mock_get.return_value = make_landlord()
    session = make_mock_session()
    data = ActorUpdate(employer_address=ADDRESS, personal_references=[])

    with pytest.raises(ValidationError, match="not supported for Arrendador") as exc_info:
        await update_actor(session, ActorType.LANDLORD, 20, data, performed_by="owner@example.com")

    assert exc_info.value.details == ["employer_address", "personal_references"]
    mock_log.assert_not_called()
    session.commit.assert_not_called()

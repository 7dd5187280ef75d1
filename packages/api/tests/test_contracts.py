# This project was developed with assistance from AI tools.
"""Tests for contract upload and signing."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from db.enums import PolicyStatus

from src.core.errors import InvalidTransitionError, ValidationError
from src.services.contracts import check_contract_file, mark_contract_signed, register_contract
from src.services.workflow import transition_policy_status

from .factories import make_contract, make_mock_session, make_policy

PDF = "application/pdf"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def _storage():
    storage = MagicMock()
    storage.upload_file = AsyncMock(side_effect=lambda data, key, content_type: key)
    return storage


def _session_assigning_ids(policy):
    """Mock session whose flush gives new contracts an id like the database would."""
    session = make_mock_session()

    async def _flush():
        for index, contract in enumerate(policy.contracts):
            if contract.id is None:
                contract.id = 850 + index

    session.flush.side_effect = _flush
    return session


def test_contract_file_accepts_pdf_and_word():
    check_contract_file(PDF, 1024)
    check_contract_file(DOCX, 1024)
    check_contract_file("application/msword", 1024)


@pytest.mark.parametrize("content_type", ["image/png", None, "text/plain"])
def test_contract_file_rejects_other_types(content_type):
    with pytest.raises(ValidationError, match="Only PDF and Word"):
        check_contract_file(content_type, 1024)


def test_contract_file_size_limits():
    with pytest.raises(ValidationError, match="empty"):
        check_contract_file(PDF, 0)
    with pytest.raises(ValidationError, match="10 MB"):
        check_contract_file(PDF, 10 * 1024 * 1024 + 1)


@patch("src.services.workflow.log_policy_activity", new_callable=AsyncMock)
@patch("src.services.contracts.log_policy_activity", new_callable=AsyncMock)
@patch("src.services.contracts.load_policy", new_callable=AsyncMock)
async def test_first_upload_moves_approved_to_contract_pending(mock_load, mock_log, mock_wf_log):
    policy = make_policy(status=PolicyStatus.APPROVED)
    mock_load.return_value = policy
    storage = _storage()

    result = await register_contract(
        _session_assigning_ids(policy),
        policy.id,
        file_data=b"%PDF-1.7",
        file_name="contrato.pdf",
        content_type=PDF,
        uploaded_by="staff-1",
        storage=storage,
    )

    assert result.previous_status == PolicyStatus.APPROVED
    assert result.status == PolicyStatus.CONTRACT_PENDING
    assert result.contract.version == 1
    assert result.contract.is_current is True
    assert result.contract.file_size == 8
    key = storage.upload_file.call_args.args[1]
    assert key.startswith("policies/1/contract-1/")
    assert key.endswith("-contrato.pdf")
    assert policy.contracts[0].storage_key == key
    assert policy.current_step == "contract"
    assert mock_log.call_args.kwargs["action"] == "contract_uploaded"
    assert mock_wf_log.call_args.kwargs["details"]["to_status"] == "CONTRACT_PENDING"


@patch("src.services.workflow.log_policy_activity", new_callable=AsyncMock)
@patch("src.services.contracts.log_policy_activity", new_callable=AsyncMock)
@patch("src.services.contracts.load_policy", new_callable=AsyncMock)
async def test_new_version_replaces_current(mock_load, _mock_log, mock_wf_log):
    old = make_contract(id=800, version=1)
    older = make_contract(id=799, version=2, is_current=False)
    policy = make_policy(status=PolicyStatus.CONTRACT_PENDING, contracts=[old, older])
    mock_load.return_value = policy

    result = await register_contract(
        _session_assigning_ids(policy),
        policy.id,
        file_data=b"docx bytes",
        file_name="contrato-v3.docx",
        content_type=DOCX,
        uploaded_by="staff-1",
        storage=_storage(),
    )

    assert result.contract.version == 3
    assert result.status == PolicyStatus.CONTRACT_PENDING
    assert [c.is_current for c in policy.contracts] == [False, False, True]
    assert policy.current_contract.version == 3
    mock_wf_log.assert_not_called()


@pytest.mark.parametrize("status", [PolicyStatus.PENDING_APPROVAL, PolicyStatus.CONTRACT_SIGNED, PolicyStatus.CANCELLED])
@patch("src.services.contracts.load_policy", new_callable=AsyncMock)
async def test_upload_outside_contract_stage_rejected(mock_load, status):
    mock_load.return_value = make_policy(status=status)
    storage = _storage()

    with pytest.raises(InvalidTransitionError, match="APPROVED or CONTRACT_PENDING"):
        await register_contract(
            make_mock_session(),
            1,
            file_data=b"%PDF",
            file_name="c.pdf",
            content_type=PDF,
            uploaded_by="staff-1",
            storage=storage,
        )
    storage.upload_file.assert_not_called()


@patch("src.services.contracts.load_policy", new_callable=AsyncMock)
async def test_bad_file_checked_before_loading_policy(mock_load):
    storage = _storage()
    with pytest.raises(ValidationError):
        await register_contract(
            make_mock_session(),
            1,
            file_data=b"png",
            file_name="foto.png",
            content_type="image/png",
            uploaded_by="staff-1",
            storage=storage,
        )
    mock_load.assert_not_called()
    storage.upload_file.assert_not_called()


@patch("src.services.workflow.log_policy_activity", new_callable=AsyncMock)
@patch("src.services.contracts.load_policy", new_callable=AsyncMock)
async def test_mark_signed_stamps_contract_and_transitions(mock_load, mock_wf_log):
    contract = make_contract()
    policy = make_policy(status=PolicyStatus.CONTRACT_PENDING, contracts=[contract])
    mock_load.return_value = policy
    signed = datetime(2026, 10, 15, 12, 0, tzinfo=UTC)
    session = make_mock_session()

    result = await mark_contract_signed(session, policy.id, performed_by="staff-1", signed_at=signed)

    assert result.from_status == PolicyStatus.CONTRACT_PENDING
    assert result.to_status == PolicyStatus.CONTRACT_SIGNED
    assert policy.status == PolicyStatus.CONTRACT_SIGNED
    assert contract.signed_at == signed
    assert contract.signed_by == "staff-1"
    kwargs = mock_wf_log.call_args.kwargs
    assert kwargs["action"] == "contract_signed"
    assert kwargs["details"]["contract_id"] == 800
    session.commit.assert_awaited_once()


@patch("src.services.contracts.load_policy", new_callable=AsyncMock)
async def test_mark_signed_requires_current_contract(mock_load):
    policy = make_policy(status=PolicyStatus.CONTRACT_PENDING, contracts=[make_contract(is_current=False)])
    mock_load.return_value = policy

    with pytest.raises(InvalidTransitionError, match="Contract must be uploaded"):
        await mark_contract_signed(make_mock_session(), 1, performed_by="staff-1")
    assert policy.status == PolicyStatus.CONTRACT_PENDING


@patch("src.services.contracts.load_policy", new_callable=AsyncMock)
async def test_mark_signed_requires_contract_pending(mock_load):
    mock_load.return_value = make_policy(status=PolicyStatus.APPROVED, contracts=[make_contract()])
    with pytest.raises(InvalidTransitionError, match="Cannot transition from 'APPROVED'"):
        await mark_contract_signed(make_mock_session(), 1, performed_by="staff-1")


@patch("src.services.workflow.log_policy_activity", new_callable=AsyncMock)
@patch("src.services.workflow.load_policy", new_callable=AsyncMock)
async def test_plain_transition_to_signed_stamps_contract(mock_load, _mock_log):
    contract = make_contract()
    mock_load.return_value = make_policy(status=PolicyStatus.CONTRACT_PENDING, contracts=[contract])

    await transition_policy_status(make_mock_session(), 1, PolicyStatus.CONTRACT_SIGNED, performed_by="staff-1")

    assert contract.signed_at is not None

# This project was developed with assistance from AI tools.
"""Tests for policy cancellation."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from db.enums import PolicyCancellationReason, PolicyStatus, VerificationStatus

from src.core.errors import InvalidTransitionError
from src.services.cancellation import cancel_policy

from .factories import make_mock_session, make_policy, make_tenant


@pytest.mark.parametrize("status", [PolicyStatus.CANCELLED, PolicyStatus.EXPIRED])
@patch("src.services.workflow.log_policy_activity", new_callable=AsyncMock)
@patch("src.services.cancellation.load_policy", new_callable=AsyncMock)
async def test_terminal_policy_cannot_be_cancelled(mock_load, mock_log, status):
    """No write and no activity row for a policy that is already closed."""
    policy = make_policy(status=status)
    mock_load.return_value = policy
    session = make_mock_session()

    with pytest.raises(InvalidTransitionError, match=f"already {status.value}"):
        await cancel_policy(
            session, 1, reason=PolicyCancellationReason.CLIENT_REQUEST, comment="dup", performed_by="staff-1",
        )

    assert policy.status == status
    assert policy.cancellation_reason is None
    mock_log.assert_not_called()
    session.commit.assert_not_called()


@pytest.mark.parametrize(
    "status",
    [s for s in PolicyStatus if s not in PolicyStatus.terminal_statuses()],
)
@patch("src.services.workflow.log_policy_activity", new_callable=AsyncMock)
@patch("src.services.cancellation.load_policy", new_callable=AsyncMock)
async def test_cancel_from_any_open_status(mock_load, mock_log, status):
    policy = make_policy(status=status)
    mock_load.return_value = policy

    result = await cancel_policy(
        make_mock_session(), 1, reason="NON_PAYMENT", comment="Sin pago", performed_by="staff-1",
    )

    assert result.previous_status == status
    assert result.status == PolicyStatus.CANCELLED
    assert result.reason == PolicyCancellationReason.NON_PAYMENT
    assert policy.cancelled_at is not None
    assert result.cancelled_at == policy.cancelled_at
    assert policy.cancelled_by == "staff-1"
    assert policy.cancellation_comment == "Sin pago"
    mock_log.assert_awaited_once()
    assert mock_log.call_args.kwargs["action"] == "policy_cancelled"
    assert mock_log.call_args.kwargs["details"]["cancellation_reason"] == "NON_PAYMENT"


@patch("src.services.workflow.log_policy_activity", new_callable=AsyncMock)
@patch("src.services.cancellation.load_policy", new_callable=AsyncMock)
async def test_cancel_leaves_actor_data(mock_load, mock_log):
    tenant = make_tenant(information_complete=True, verification_status=VerificationStatus.APPROVED)
    policy = make_policy(status=PolicyStatus.ACTIVE, tenant=tenant)
    mock_load.return_value = policy

    await cancel_policy(
        make_mock_session(), 1, reason=PolicyCancellationReason.FRAUD, comment="", performed_by="admin-1",
    )

    assert policy.tenant is tenant
    assert tenant.information_complete is True
    assert tenant.verification_status == VerificationStatus.APPROVED


@patch("src.services.cancellation.notifications.notify_admins", new_callable=AsyncMock)
@patch("src.services.workflow.log_policy_activity", new_callable=AsyncMock)
@patch("src.services.cancellation.load_policy", new_callable=AsyncMock)
async def test_cancel_notifies_admins(mock_load, mock_log, mock_notify):
    mock_load.return_value = make_policy()
    notifier = MagicMock()

    await cancel_policy(
        make_mock_session(), 1, reason=PolicyCancellationReason.OTHER, comment="c", performed_by="staff-1",
        notifier=notifier,
    )

    mock_notify.assert_awaited_once()
    assert mock_notify.call_args.args[2]["reason"] == "OTHER"


@patch("src.services.cancellation.notifications.notify_admins", new_callable=AsyncMock)
@patch("src.services.workflow.log_policy_activity", new_callable=AsyncMock)
@patch("src.services.cancellation.load_policy", new_callable=AsyncMock)
async def test_cancel_survives_notification_failure(mock_load, mock_log, mock_notify):
    policy = make_policy()
    mock_load.return_value = policy
    mock_notify.side_effect = RuntimeError("smtp down")

    result = await cancel_policy(
        make_mock_session(), 1, reason=PolicyCancellationReason.OTHER, comment="c", performed_by="staff-1",
        notifier=MagicMock(),
    )

    assert result.status == PolicyStatus.CANCELLED

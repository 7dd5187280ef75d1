# This project was developed with assistance from AI tools.
"""Tests for actor portal tokens."""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest
from db.enums import ActorType

from src.core.config import settings
from src.core.errors import AlreadyCompleteError, ErrorCode, NotFoundError, TokenError
from src.services.tokens import (
    assign_token,
    build_actor_url,
    clear_token,
    generate_actor_token,
    validate_actor_token,
)

from .factories import make_joint_obligor, make_mock_session, make_tenant

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=UTC)


def _result(actor):
    result = MagicMock()
    result.scalar_one_or_none.return_value = actor
    return result


def test_assign_token_sets_expiry():
    tenant = make_tenant()
    assert assign_token(tenant, now=NOW)
    assert len(tenant.access_token) >= 40
    assert tenant.token_expiry == NOW + timedelta(days=settings.ACTOR_TOKEN_EXPIRATION_DAYS)


def test_valid_token_is_reused():
    tenant = make_tenant(access_token="keep", token_expiry=NOW + timedelta(days=1))
    assert not assign_token(tenant, now=NOW)
    assert tenant.access_token == "keep"


def test_expired_token_is_replaced():
    tenant = make_tenant(access_token="old", token_expiry=NOW - timedelta(seconds=1))
    assert assign_token(tenant, now=NOW)
    assert tenant.access_token != "old"


def test_renew_always_issues_new_token():
    tenant = make_tenant(access_token="keep", token_expiry=NOW + timedelta(days=1))
    assert assign_token(tenant, renew=True, now=NOW)
    assert tenant.access_token != "keep"


def test_clear_token():
    tenant = make_tenant(access_token="x", token_expiry=NOW)
    clear_token(tenant)
    assert tenant.access_token is None
    assert tenant.token_expiry is None


def test_actor_url_uses_portal_path(monkeypatch):
    monkeypatch.setattr(settings, "APP_BASE_URL", "https://app.arrenda.mx/")
    assert build_actor_url(ActorType.JOINT_OBLIGOR, "abc") == "https://app.arrenda.mx/actor/joint-obligor/abc"


async def test_generate_token_for_missing_actor():
    session = make_mock_session()
    session.get.return_value = None
    with pytest.raises(NotFoundError):
        await generate_actor_token(session, ActorType.TENANT, 99)


async def test_generate_token_commits_and_returns_url():
    session = make_mock_session()
    session.get.return_value = make_joint_obligor()
    response = await generate_actor_token(session, ActorType.JOINT_OBLIGOR, 30)
    assert response.actor_id == 30
    assert response.url.endswith(f"/actor/joint-obligor/{response.token}")
    session.commit.assert_awaited_once()


async def test_unknown_token():
    session = make_mock_session()
    session.execute.return_value = _result(None)
    with pytest.raises(TokenError) as exc_info:
        await validate_actor_token(session, ActorType.TENANT, "nope")
    assert exc_info.value.code == ErrorCode.INVALID_TOKEN


async def test_expired_token_rejected():
    session = make_mock_session()
    tenant = make_tenant(access_token="t", token_expiry=datetime.now(UTC) - timedelta(minutes=1))
    session.execute.return_value = _result(tenant)
    with pytest.raises(TokenError) as exc_info:
        await validate_actor_token(session, ActorType.TENANT, "t")
    assert exc_info.value.code == ErrorCode.TOKEN_EXPIRED


async def test_completed_actor_blocked_unless_allowed():
    session = make_mock_session()
    tenant = make_tenant(access_token="t", token_expiry=datetime.now(UTC) + timedelta(days=1), information_complete=True)
    session.execute.return_value = _result(tenant)
    with pytest.raises(AlreadyCompleteError):
        await validate_actor_token(session, ActorType.TENANT, "t")

    assert await validate_actor_token(session, ActorType.TENANT, "t", allow_complete=True) is tenant

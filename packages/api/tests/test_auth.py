# This project was developed with assistance from AI tools.
"""Tests for JWT authentication middleware."""

import pytest
from db.enums import UserRole
from fastapi import Depends, FastAPI, HTTPException
from fastapi.testclient import TestClient

from src.core.config import settings
from src.middleware.auth import CurrentUser, _extract_token, _resolve_role, require_roles
from src.schemas.auth import TokenPayload

# ---------------------------------------------------------------------------
# AUTH_DISABLED bypass
# ---------------------------------------------------------------------------


def test_auth_disabled_returns_dev_admin(monkeypatch):
    """When AUTH_DISABLED=true, any request gets a dev admin user."""
    monkeypatch.setattr(settings, "AUTH_DISABLED", True)

    app = FastAPI()

    @app.get("/me")
    async def me(user: CurrentUser):
        return {"user_id": user.user_id, "role": user.role.value, "all": user.data_scope.all_policies}

    test_client = TestClient(app)
    resp = test_client.get("/me")
    assert resp.status_code == 200
    assert resp.json() == {"user_id": "dev-user", "role": "admin", "all": True}


# ---------------------------------------------------------------------------
# Missing / malformed token
# ---------------------------------------------------------------------------


def test_missing_token_returns_401(monkeypatch):
    """A request with no Authorization header should get 401."""
    monkeypatch.setattr(settings, "AUTH_DISABLED", False)

    app = FastAPI()

    @app.get("/me")
    async def me(user: CurrentUser):
        return {}

    test_client = TestClient(app)
    resp = test_client.get("/me")
    assert resp.status_code == 401
    assert "Missing authentication token" in resp.json()["detail"]
    assert resp.headers["WWW-Authenticate"] == "Bearer"


def test_extract_token_requires_bearer_prefix():
    class _Req:
        def __init__(self, value):
            self.headers = {"Authorization": value} if value else {}

    assert _extract_token(_Req("Bearer abc")) == "abc"
    assert _extract_token(_Req("Basic abc")) is None
    assert _extract_token(_Req(None)) is None


# ---------------------------------------------------------------------------
# Role resolution
# ---------------------------------------------------------------------------


def test_resolve_role_picks_known_role():
    """_resolve_role ignores Keycloak's default roles."""
    payload = TokenPayload(
        sub="user-1",
        realm_access={"roles": ["offline_access", "broker", "uma_authorization"]},
    )
    assert _resolve_role(payload) == UserRole.BROKER


def test_resolve_role_prefers_highest_privilege():
    payload = TokenPayload(sub="user-1", realm_access={"roles": ["broker", "admin", "staff"]})
    assert _resolve_role(payload) == UserRole.ADMIN


def test_resolve_role_no_known_role_is_forbidden():
    """No recognized role means 403, not a login prompt."""
    payload = TokenPayload(
        sub="user-1",
        realm_access={"roles": ["offline_access", "uma_authorization"]},
    )

    with pytest.raises(HTTPException) as exc_info:
        _resolve_role(payload)
    assert exc_info.value.status_code == 403
    assert exc_info.value.detail == "No recognized role assigned"


# ---------------------------------------------------------------------------
# require_roles dependency
# ---------------------------------------------------------------------------


def test_require_roles_rejects_wrong_role(monkeypatch):
    """require_roles returns 403 when user's role is not in allowed set."""
    monkeypatch.setattr(settings, "AUTH_DISABLED", True)

    app = FastAPI()

    check_broker = require_roles(UserRole.BROKER)

    @app.get("/broker-only", dependencies=[Depends(check_broker)])
    async def broker_only(user: CurrentUser):
        return {"ok": True}

    test_client = TestClient(app)
    # dev-user is admin, not broker
    resp = test_client.get("/broker-only")
    assert resp.status_code == 403
    assert "Insufficient permissions" in resp.json()["detail"]


def test_require_roles_allows_listed_role(monkeypatch):
    monkeypatch.setattr(settings, "AUTH_DISABLED", True)

    app = FastAPI()

    @app.get("/staff", dependencies=[Depends(require_roles(UserRole.ADMIN, UserRole.STAFF))])
    async def staff_only():
        return {"ok": True}

    assert TestClient(app).get("/staff").status_code == 200

# This project was developed with assistance from AI tools.
"""Functional tests: staff and broker access to individual actors.

Every actor route resolves the actor first and then checks the owning
policy against the caller's data scope, so the mock session returns the
actor from ``execute`` and the policy from ``get``.
"""

from unittest.mock import AsyncMock

import pytest

from ..factories import make_policy, make_tenant
from .mock_db import make_mock_session
from .personas import admin, broker, other_broker, staff

pytestmark = pytest.mark.functional


def _actor_session(actor):
    session = make_mock_session(single=actor)
    session.get = AsyncMock(return_value=make_policy())
    return session


def _tenant(**overrides):
    overrides.setdefault("personal_references", [])
    return make_tenant(**overrides)


class TestActorReads:
    def test_staff_reads_actor(self, make_client):
        client = make_client(staff(), _actor_session(_tenant()))
        resp = client.get("/api/actors/tenant/10")

        assert resp.status_code == 200
        body = resp.json()
        assert body["id"] == 10
        assert body["curp"] == "LOGA900101MDFPRN09"

    def test_managing_broker_reads_actor(self, make_client):
        client = make_client(broker(), _actor_session(_tenant()))
        assert client.get("/api/actors/tenant/10").status_code == 200

    def test_other_broker_gets_404(self, make_client):
        client = make_client(other_broker(), _actor_session(_tenant()))
        resp = client.get("/api/actors/tenant/10")
        assert resp.status_code == 404
        assert resp.json()["code"] == "NOT_FOUND"

    def test_unknown_actor_is_404(self, make_client):
        client = make_client(staff(), _actor_session(None))
        resp = client.get("/api/actors/aval/77")
        assert resp.status_code == 404
        assert "Aval 77 not found" in resp.json()["detail"]

    def test_completeness_lists_missing_documents(self, make_client):
        client = make_client(staff(), _actor_session(_tenant()))
        resp = client.get("/api/actors/tenant/10/completeness")

        assert resp.status_code == 200
        body = resp.json()
        assert body["is_complete"] is False
        assert "IDENTIFICATION" in body["missing_documents"]

    def test_documents_empty(self, make_client):
        client = make_client(staff(), _actor_session(_tenant()))
        resp = client.get("/api/actors/tenant/10/documents")
        assert resp.status_code == 200
        assert resp.json() == []


class TestActorSubmit:
    def test_incomplete_actor_rejected_with_messages(self, make_client):
        session = _actor_session(_tenant(occupation=None))
        client = make_client(staff(), session)

        resp = client.post("/api/actors/tenant/10/submit")

        assert resp.status_code == 400
        body = resp.json()
        assert "information is incomplete" in body["detail"]
        assert body["errors"]
        session.commit.assert_not_called()

    def test_admin_skip_still_requires_documents(self, make_client):
        client = make_client(admin(), _actor_session(_tenant(occupation=None)))
        resp = client.post("/api/actors/tenant/10/submit?skip_validation=true")

        assert resp.status_code == 400
        assert resp.json()["detail"].startswith("Missing required documents")

    def test_broker_skip_is_ignored(self, make_client):
        client = make_client(broker(), _actor_session(_tenant(occupation=None)))
        resp = client.post("/api/actors/tenant/10/submit?skip_validation=true")

        assert resp.status_code == 400
        assert "information is incomplete" in resp.json()["detail"]

    def test_already_submitted_is_409(self, make_client):
        client = make_client(staff(), _actor_session(_tenant(information_complete=True)))
        resp = client.post("/api/actors/tenant/10/submit")
        assert resp.status_code == 409
        assert resp.json()["code"] == "ALREADY_COMPLETE"


class TestActorToken:
    def test_broker_cannot_issue_token(self, make_client):
        client = make_client(broker(), _actor_session(_tenant()))
        resp = client.post("/api/actors/tenant/10/token")
        assert resp.status_code == 403

    def test_staff_issues_token(self, make_client):
        tenant = _tenant()
        session = _actor_session(tenant)
        client = make_client(staff(), session)

        # generate_actor_token looks the actor up by primary key
        session.get = AsyncMock(side_effect=[make_policy(), tenant])
        resp = client.post("/api/actors/tenant/10/token")

        assert resp.status_code == 200
        body = resp.json()
        assert body["actor_id"] == 10
        assert body["url"].endswith(f"/actor/tenant/{body['token']}")
        assert tenant.access_token == body["token"]

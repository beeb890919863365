"""
HTTP surface tests using FastAPI's TestClient.
"""

import pytest
from fastapi.testclient import TestClient

from artreg_authz.api import create_app
from artreg_authz.config import AuthzSettings
from artreg_authz.features.audit import InMemoryAuditSink
from artreg_authz.features.authz.services import AuthzService


@pytest.fixture
def client(service):
    """Client bound to an app serving the in-memory service."""
    return TestClient(create_app(service, settings=AuthzSettings(environment="test")))


def grant_body(**overrides):
    body = {
        "namespace": "artwork",
        "object_id": "A",
        "relation": "editor",
        "subject_namespace": "user",
        "subject_id": "alice",
    }
    body.update(overrides)
    return body


class TestCheckRoutes:
    """Check, batch check and legacy check."""

    def test_check_after_grant(self, client):
        assert client.post("/authz/grant", json=grant_body()).status_code == 200

        response = client.post("/authz/check", json=grant_body())

        assert response.status_code == 200
        assert response.json() == {"allowed": True, "indeterminate": False, "error": None}

    def test_check_unknown_namespace_is_false_not_error(self, client):
        response = client.post("/authz/check", json=grant_body(namespace="painting"))

        assert response.status_code == 200
        assert response.json()["allowed"] is False

    def test_check_missing_field_is_schema_error(self, client):
        response = client.post("/authz/check", json={"namespace": "artwork"})
        assert response.status_code == 422

    def test_batch_check_keeps_order(self, client):
        client.post("/authz/grant", json=grant_body(object_id="B"))

        response = client.post("/authz/batch-check", json={
            "checks": [grant_body(object_id="A"), grant_body(object_id="B"), grant_body(object_id="C")],
        })

        assert response.status_code == 200
        assert response.json()["results"] == [False, True, False]
        assert response.json()["partial_failure"] is False

    def test_legacy_routes(self, client):
        body = {"subject_id": "alice", "permission": "manage_users"}
        assert client.post("/authz/check-legacy", json=body).json() == {"allowed": False}

        assert client.post("/authz/grant-legacy", json=body).status_code == 200
        assert client.post("/authz/check-legacy", json=body).json() == {"allowed": True}

        assert client.post("/authz/revoke-legacy", json=body).status_code == 200
        assert client.post("/authz/check-legacy", json=body).json() == {"allowed": False}

    def test_unknown_legacy_check_is_false(self, client):
        response = client.post("/authz/check-legacy", json={"subject_id": "alice", "permission": "nope"})
        assert response.json() == {"allowed": False}


class TestMutationRoutes:
    """Grant, revoke and their error mapping."""

    def test_grant_records_actor_from_header(self, client):
        response = client.post("/authz/grant", json=grant_body(), headers={"X-Subject-Id": "admin"})

        assert response.status_code == 200
        payload = response.json()
        assert payload["operation"] == "grant"
        assert payload["actor"] == "user:admin"
        assert payload["tuple"]["subject_id"] == "alice"

    def test_revoke(self, client):
        client.post("/authz/grant", json=grant_body())
        response = client.post("/authz/revoke", json=grant_body())

        assert response.status_code == 200
        assert response.json()["operation"] == "revoke"
        assert client.post("/authz/check", json=grant_body()).json()["allowed"] is False

    def test_invalid_relation_is_400(self, client):
        response = client.post("/authz/grant", json=grant_body(relation="curator"))

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "InvalidRelationError"

    def test_unknown_legacy_grant_is_400(self, client):
        response = client.post("/authz/grant-legacy", json={"subject_id": "alice", "permission": "nope"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "UnknownLegacyPermissionError"

    def test_invalid_subject_header_is_400(self, client):
        response = client.post("/authz/grant", json=grant_body(), headers={"X-Subject-Id": "user:"})
        assert response.status_code == 400

    def test_store_unavailable_is_503(self, failing_store, registry):
        service = AuthzService(failing_store, registry=registry, audit_sink=InMemoryAuditSink())
        client = TestClient(create_app(service, settings=AuthzSettings(environment="test")))

        response = client.post("/authz/grant", json=grant_body())

        assert response.status_code == 503
        assert response.json()["error"]["type"] == "StoreUnavailableError"
        assert client.post("/authz/check", json=grant_body()).json()["indeterminate"] is True


class TestReadRoutes:
    """Expand and permission listing."""

    def test_expand(self, client):
        client.post("/authz/grant", json=grant_body(subject_namespace="group", subject_id="G", subject_relation="member"))
        client.post("/authz/grant", json={
            "namespace": "group", "object_id": "G", "relation": "member", "subject_id": "bob",
        })

        response = client.post("/authz/expand", json={"namespace": "artwork", "object_id": "A", "relation": "editor"})

        assert response.status_code == 200
        assert response.json() == {"subjects": ["user:bob"]}

    def test_user_permissions(self, client):
        client.post("/authz/grant", json=grant_body())

        response = client.get("/authz/users/alice/permissions")

        assert response.status_code == 200
        assert response.json() == {
            "user_id": "alice",
            "permissions": [{"namespace": "artwork", "object_id": "A", "relation": "editor"}],
        }

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "ok"

"""End-to-end tests for the HTTP API"""

import pytest
from fastapi.testclient import TestClient

from legal_compliance.api.app import create_app


@pytest.fixture
def client(db):
    with TestClient(create_app()) as test_client:
        yield test_client


def as_user(user_id, **extra):
    return {"X-User-Id": user_id, **extra}


class TestAuthentication:

    def test_missing_identity_is_401(self, client):
        response = client.get("/api/attestation/me/status")
        assert response.status_code == 401
        assert response.json()["detail"] == "Not authenticated"

    def test_unknown_user_is_401(self, client):
        response = client.get("/api/consent/me", headers=as_user("nobody"))
        assert response.status_code == 401

    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["db_mode"] == "sqlite"


class TestAttestationRoutes:

    def test_submit_then_resubmit(self, client, attestation_payload):
        response = client.post("/api/attestation", json=attestation_payload, headers=as_user("lawyer-a"))
        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "is_update": False,
            "message": "Attestation submitted successfully",
        }

        response = client.post("/api/attestation", json=attestation_payload, headers=as_user("lawyer-a"))
        assert response.json()["is_update"] is True

        me = client.get("/api/attestation/me", headers=as_user("lawyer-a")).json()
        assert me["bar_number"] == "AB12345"
        assert me["owner_id"] == "lawyer-a"

    def test_invalid_submission_lists_violations(self, client, attestation_payload):
        attestation_payload["bar_number"] = "X1"
        attestation_payload["is_licensed"] = False
        response = client.post("/api/attestation", json=attestation_payload, headers=as_user("lawyer-a"))

        assert response.status_code == 422
        body = response.json()
        assert [v["field"] for v in body["violations"]] == ["bar_number", "is_licensed"]
        assert body["detail"].startswith("Attestation validation failed")

    def test_wrong_types_reported_with_other_violations(self, client, attestation_payload):
        attestation_payload["legal_name"] = "  "
        attestation_payload["is_licensed"] = "yes"
        response = client.post("/api/attestation", json=attestation_payload, headers=as_user("lawyer-a"))

        assert response.status_code == 422
        body = response.json()
        assert [v["field"] for v in body["violations"]] == ["legal_name", "is_licensed"]
        assert client.get("/api/attestation/me", headers=as_user("lawyer-a")).json() is None

    def test_end_user_cannot_submit(self, client, attestation_payload):
        response = client.post("/api/attestation", json=attestation_payload, headers=as_user("client-1"))
        assert response.status_code == 403

    def test_status_before_and_after(self, client, attestation_payload):
        status = client.get("/api/attestation/me/status", headers=as_user("lawyer-a")).json()
        assert status["is_valid"] is False
        assert status["state"] == "none"

        client.post("/api/attestation", json=attestation_payload, headers=as_user("lawyer-a"))
        status = client.get("/api/attestation/me/status", headers=as_user("lawyer-a")).json()
        assert status["is_valid"] is True
        assert status["has_attestation"] is True

    def test_owner_access_rules(self, client, attestation_payload):
        client.post("/api/attestation", json=attestation_payload, headers=as_user("lawyer-a"))

        assert client.get("/api/attestations/lawyer-a", headers=as_user("lawyer-b")).status_code == 403
        assert client.get("/api/attestations/lawyer-a", headers=as_user("lawyer-a")).status_code == 200
        assert client.get("/api/attestations/lawyer-a", headers=as_user("admin-1")).status_code == 200
        assert client.get("/api/attestations/lawyer-b", headers=as_user("admin-1")).status_code == 404

    def test_forwarded_ip_recorded_in_audit(self, client, attestation_payload):
        headers = as_user("lawyer-a", **{
            "X-Forwarded-For": "192.0.2.10, 10.0.0.1",
            "User-Agent": "compliance-tests/1.0",
        })
        client.post("/api/attestation", json=attestation_payload, headers=headers)

        events = client.get("/api/attestation/me/audit", headers=as_user("lawyer-a")).json()
        assert len(events) == 1
        assert events[0]["event"] == "attestation_submitted"
        assert events[0]["ip_address"] == "192.0.2.10"
        assert events[0]["user_agent"] == "compliance-tests/1.0"

        record = client.get("/api/attestation/me", headers=as_user("lawyer-a")).json()
        assert record["ip_address"] == "192.0.2.10"

    def test_admin_listing(self, client, attestation_payload):
        client.post("/api/attestation", json=attestation_payload, headers=as_user("lawyer-a"))
        client.post("/api/attestation", json=attestation_payload, headers=as_user("lawyer-b"))

        page = client.get("/api/attestations?limit=1", headers=as_user("admin-1")).json()
        assert page["total"] == 2
        assert page["has_more"] is True
        assert len(page["records"]) == 1

        assert client.get("/api/attestations", headers=as_user("lawyer-a")).status_code == 403


class TestConsentRoutes:

    def test_patch_and_read_back(self, client):
        response = client.patch(
            "/api/consent/me",
            json={"terms": True, "privacy": True, "dataProcessing": True, "marketing": True},
            headers=as_user("client-1"),
        )
        assert response.status_code == 200
        assert response.json()["data_processing"] is True

        consent = client.get("/api/consent/me", headers=as_user("client-1")).json()
        assert consent["marketing"] is True

    def test_required_false_is_422(self, client):
        response = client.patch("/api/consent/me", json={"terms": False}, headers=as_user("client-1"))
        assert response.status_code == 422
        assert response.json()["violations"][0]["field"] == "terms"

    def test_non_boolean_grants_rejected(self, client):
        response = client.patch(
            "/api/consent/me",
            json={"terms": "yes", "privacy": 1, "dataProcessing": "on"},
            headers=as_user("client-1"),
        )
        assert response.status_code == 422
        fields = [v["field"] for v in response.json()["violations"]]
        assert fields == ["terms", "privacy", "dataProcessing"]
        assert client.get("/api/consent/me", headers=as_user("client-1")).json() is None

    def test_blocked_withdrawal_is_409_and_audited(self, client):
        client.patch(
            "/api/consent/me",
            json={"terms": True, "privacy": True, "data_processing": True},
            headers=as_user("client-1"),
        )

        response = client.post(
            "/api/consent/me/withdraw",
            json={"types": ["terms"], "reason": "no longer needed"},
            headers=as_user("client-1"),
        )
        assert response.status_code == 409
        assert "Cannot withdraw required consents: terms" in response.json()["detail"]

        events = client.get(
            "/api/consent/me/audit?event_type=blocked_required_consent_withdrawal",
            headers=as_user("client-1"),
        ).json()
        assert len(events) == 1
        assert events[0]["metadata"]["attempted_withdrawal"] == ["terms"]

        consent = client.get("/api/consent/me", headers=as_user("client-1")).json()
        assert consent["terms"] is True

    def test_marketing_withdrawal(self, client):
        client.patch(
            "/api/consent/me",
            json={"terms": True, "privacy": True, "data_processing": True, "marketing": True},
            headers=as_user("client-1"),
        )
        response = client.post(
            "/api/consent/me/withdraw", json={"types": ["marketing"]}, headers=as_user("client-1")
        )
        assert response.status_code == 200
        assert response.json()["marketing"] is None

        latest = client.get("/api/consent/me/audit?limit=1", headers=as_user("client-1")).json()
        assert latest[0]["event"] == "marketing_opted_out"

    def test_withdraw_without_consent_is_404(self, client):
        response = client.post(
            "/api/consent/me/withdraw", json={"types": ["marketing"]}, headers=as_user("client-1")
        )
        assert response.status_code == 404

    def test_deletion_request(self, client):
        response = client.post(
            "/api/consent/me/deletion-request",
            json={"reason": "moving provider"},
            headers=as_user("client-1"),
        )
        assert response.status_code == 200
        assert response.json()["deletion_requested_at"] is not None

        events = client.get("/api/consent/me/audit", headers=as_user("client-1")).json()
        assert events[0]["event"] == "deletion_requested"

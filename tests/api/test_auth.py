"""
Tests for the authentication endpoints and the bearer token dependency.
"""

from datetime import datetime, timezone

import pytest
from unittest.mock import MagicMock

from api.dependencies import get_auth_gate, get_profile_service
from api.routes.auth import inspect_token
from modules.auth.service import AuthGate
from modules.auth.verifier import SecretTokenVerifier
from modules.users.exceptions import StoreUnavailableError
from modules.users.service import ProfileService

from tests.conftest import create_test_token


class TestVerifyEndpoint:
    def test_missing_header(self, client):
        response = client.post("/api/auth/verify")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        detail = response.json()["detail"]
        assert detail["error"] == "MISSING_HEADER"
        assert detail["message"] == "Unauthorized: Missing authorization header"

    @pytest.mark.parametrize(
        "header,code",
        [
            ("Basic abc", "BAD_FORMAT"),
            ("Bearer undefined", "EMPTY_TOKEN"),
            ("Bearer null", "EMPTY_TOKEN"),
            ("Bearer garbage", "VERIFICATION_FAILED"),
        ],
    )
    def test_rejected_headers(self, client, header, code):
        response = client.post("/api/auth/verify", headers={"Authorization": header})
        assert response.status_code == 401
        assert response.json()["detail"]["error"] == code

    def test_token_without_subject(self, client):
        token = create_test_token(user_id="")
        response = client.post("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["detail"]["error"] == "INVALID_CLAIMS"

    def test_blank_subject(self, client):
        token = create_test_token(user_id=" ")
        response = client.post("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["detail"]["error"] == "INVALID_CLAIMS"

    def test_rejection_hides_provider_details(self, client):
        token = create_test_token(secret="some-other-secret-of-decent-length")
        response = client.post("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["detail"] == {
            "error": "VERIFICATION_FAILED",
            "message": "Unauthorized: Invalid token",
        }
        assert "invalid_signature" not in response.text

    def test_verifier_not_configured(self, app, client, auth_headers):
        app.dependency_overrides[get_auth_gate] = lambda: AuthGate(SecretTokenVerifier(""))

        response = client.post("/api/auth/verify", headers=auth_headers)

        assert response.status_code == 500
        assert "WWW-Authenticate" not in response.headers
        assert response.json()["detail"]["error"] == "VERIFIER_UNAVAILABLE"

    def test_new_user_gets_one_record(self, client, auth_headers, memory_store, test_user_id):
        before = datetime.now(timezone.utc)

        response = client.post("/api/auth/verify", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {
            "message": "Authentication successful",
            "user": {"uid": test_user_id, "email": "test@example.com", "emailVerified": True},
        }
        assert memory_store.count_users() == 1
        record = memory_store.find_by_id(test_user_id)
        assert record.preferences.model_dump(by_alias=True, mode="json") == {
            "categories": [],
            "digestFrequency": "daily",
            "notificationsEnabled": True,
        }
        assert before <= record.last_login <= datetime.now(timezone.utc)

    def test_repeat_verify_is_idempotent(self, client, auth_headers, memory_store):
        client.post("/api/auth/verify", headers=auth_headers)
        client.post("/api/auth/verify", headers=auth_headers)
        assert memory_store.count_users() == 1

    def test_unverified_email(self, client):
        token = create_test_token(email_verified=False)
        response = client.post("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})
        assert response.json()["user"]["emailVerified"] is False

    def test_create_failure_is_500(self, app, client, auth_headers):
        store = MagicMock()
        store.find_or_create.side_effect = StoreUnavailableError("connection refused")
        app.dependency_overrides[get_profile_service] = lambda: ProfileService(store)

        response = client.post("/api/auth/verify", headers=auth_headers)

        assert response.status_code == 500
        assert response.json()["error"] == "STORE_UNAVAILABLE"


class TestInspectToken:
    def test_reports_unverified_payload(self):
        token = create_test_token(user_id="user-9", iss="https://proj.supabase.co/auth/v1")
        status = inspect_token(token)

        assert status.formatted is True
        assert status.expired is False
        assert status.time_remaining > 0
        assert status.subject == "user-9"
        assert status.issuer == "https://proj.supabase.co/auth/v1"
        assert status.audience == "authenticated"

    def test_expired(self):
        status = inspect_token(create_test_token(expired=True))
        assert status.expired is True
        assert status.time_remaining < 0


class TestTokenDebugEndpoint:
    def test_valid_token(self, client, auth_token, test_user_id):
        response = client.post("/api/auth/token-debug", json={"token": auth_token})

        assert response.status_code == 200
        data = response.json()
        assert data["verified"] is True
        assert data["decodedData"] == {"uid": test_user_id, "email": "test@example.com"}
        assert data["tokenStatus"]["formatted"] is True
        assert "timeRemaining" in data["tokenStatus"]

    def test_expired_token_is_explained(self, client):
        response = client.post("/api/auth/token-debug", json={"token": create_test_token(expired=True)})

        assert response.status_code == 200
        data = response.json()
        assert data["verified"] is False
        assert data["tokenStatus"]["expired"] is True
        assert data["verifyError"]["code"] == "token_expired"

    def test_missing_token(self, client):
        response = client.post("/api/auth/token-debug", json={})
        assert response.status_code == 400
        assert response.json()["detail"] == "No token provided"

    def test_unparseable_token(self, client):
        response = client.post("/api/auth/token-debug", json={"token": "not-a-jwt"})
        assert response.status_code == 400
        assert response.json()["detail"]["message"] == "Invalid token format"

    def test_verifier_not_configured(self, app, client, auth_token):
        app.dependency_overrides[get_auth_gate] = lambda: AuthGate(SecretTokenVerifier(""))
        response = client.post("/api/auth/token-debug", json={"token": auth_token})
        assert response.status_code == 500


class TestAuthStatusEndpoint:
    def test_reports_mode_and_configuration(self, client):
        response = client.get("/api/auth/status")

        assert response.status_code == 200
        status = response.json()["status"]
        assert status["mode"] == "secret"
        assert status["configured"] is True
        assert set(status["environmentVars"]) == {"supabaseUrl", "serviceRoleKey", "jwtSecret", "jwksUrl"}
        assert all(isinstance(v, bool) for v in status["environmentVars"].values())

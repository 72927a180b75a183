from modules.auth.models import Claims


class TestClaimsFromPayload:
    def test_supabase_payload(self):
        """Should read a Supabase access token payload."""
        claims = Claims.from_payload(
            {
                "sub": "user-123",
                "email": "test@example.com",
                "email_confirmed_at": "2024-01-01T00:00:00Z",
                "exp": 1704067200,
                "aud": "authenticated",
                "iss": "https://proj.supabase.co/auth/v1",
                "user_metadata": {"full_name": "Test User"},
            }
        )
        assert claims.subject == "user-123"
        assert claims.email == "test@example.com"
        assert claims.email_verified is True
        assert claims.name == "Test User"
        assert claims.exp == 1704067200
        assert claims.iss == "https://proj.supabase.co/auth/v1"

    def test_firebase_payload(self):
        """Firebase spells verification and name as top-level claims."""
        claims = Claims.from_payload(
            {
                "sub": "fb-uid",
                "email": "fb@example.com",
                "email_verified": False,
                "name": "Firebase User",
                "aud": "my-project",
            }
        )
        assert claims.subject == "fb-uid"
        assert claims.email_verified is False
        assert claims.name == "Firebase User"

    def test_metadata_email_verified(self):
        claims = Claims.from_payload(
            {"sub": "u", "user_metadata": {"email_verified": True}}
        )
        assert claims.email_verified is True

    def test_unconfirmed_email(self):
        claims = Claims.from_payload({"sub": "u", "email_confirmed_at": None})
        assert claims.email_verified is False

    def test_empty_subject_becomes_none(self):
        assert Claims.from_payload({"sub": ""}).subject is None
        assert Claims.from_payload({}).subject is None

    def test_audience_list(self):
        claims = Claims.from_payload({"sub": "u", "aud": ["a", "b"]})
        assert claims.aud == ["a", "b"]

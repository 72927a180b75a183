"""
Tests for shared models.
"""

import pytest
from pydantic import ValidationError

from shared.models import Principal


class TestPrincipal:
    def test_create_with_required_fields(self):
        principal = Principal(id="user-123")
        assert principal.id == "user-123"
        assert principal.email == ""
        assert principal.email_verified is False
        assert principal.display_name == ""

    def test_is_immutable(self):
        principal = Principal(id="user-123")
        with pytest.raises(ValidationError):
            principal.id = "different-id"

    @pytest.mark.parametrize("value", ["", "   "])
    def test_rejects_empty_id(self, value):
        with pytest.raises(ValidationError):
            Principal(id=value)

    def test_ignores_extra_fields(self):
        principal = Principal(id="user-123", role="admin")
        assert not hasattr(principal, "role")

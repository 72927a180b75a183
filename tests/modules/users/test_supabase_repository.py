"""Tests for SupabaseUserStore against a mocked Supabase client."""

from unittest.mock import MagicMock

import httpx
import pytest
from postgrest.exceptions import APIError

from modules.users.exceptions import InvalidPreferenceError, StoreUnavailableError, UserNotFoundError
from modules.users.models import DigestFrequency, Preferences, PreferencesPatch, ProfileUpdate
from modules.users.repository import SupabaseUserStore


def user_row(**overrides) -> dict:
    row = {
        "id": "user-1",
        "email": "a@example.com",
        "display_name": "",
        "photo_url": "",
        "preferences": {"categories": [], "digest_frequency": "daily", "notifications_enabled": True},
        "read_history": [],
        "last_login": "2024-01-01T00:00:00+00:00",
        "created_at": "2024-01-01T00:00:00+00:00",
        "updated_at": "2024-01-01T00:00:00+00:00",
    }
    row.update(overrides)
    return row


@pytest.fixture
def mock_db():
    return MagicMock()


@pytest.fixture
def store(mock_db):
    return SupabaseUserStore(mock_db)


class TestReads:
    def test_find_by_id(self, store, mock_db):
        mock_db.table.return_value.select.return_value.eq.return_value.execute.return_value.data = [user_row()]

        record = store.find_by_id("user-1")

        assert record.id == "user-1"
        mock_db.table.assert_called_with("users")
        mock_db.table.return_value.select.return_value.eq.assert_called_with("id", "user-1")

    def test_find_by_id_missing(self, store, mock_db):
        mock_db.table.return_value.select.return_value.eq.return_value.execute.return_value.data = []
        assert store.find_by_id("nobody") is None

    def test_custom_table_name(self, mock_db):
        mock_db.table.return_value.select.return_value.eq.return_value.execute.return_value.data = []
        SupabaseUserStore(mock_db, table="digest_users").find_by_id("user-1")
        mock_db.table.assert_called_with("digest_users")

    def test_get_history(self, store, mock_db):
        mock_db.table.return_value.select.return_value.eq.return_value.execute.return_value.data = [
            {"read_history": [{"digest_id": "d1", "read_at": "2024-01-01T00:00:00+00:00"}]}
        ]
        history = store.get_history("user-1")
        assert [entry.digest_id for entry in history] == ["d1"]

    def test_get_history_unknown_user(self, store, mock_db):
        mock_db.table.return_value.select.return_value.eq.return_value.execute.return_value.data = []
        assert store.get_history("nobody") == []

    def test_count_users(self, store, mock_db):
        mock_db.table.return_value.select.return_value.limit.return_value.execute.return_value.count = 42
        assert store.count_users() == 42
        mock_db.table.return_value.select.assert_called_with("id", count="exact")

    def test_ping(self, store, mock_db):
        mock_db.table.return_value.select.return_value.limit.return_value.execute.return_value.data = []
        assert store.ping() is True

    def test_ping_failure(self, store, mock_db):
        mock_db.table.return_value.select.return_value.limit.return_value.execute.side_effect = httpx.ConnectError("down")
        assert store.ping() is False


class TestFindOrCreate:
    def test_inserts_new_record(self, store, mock_db):
        mock_db.table.return_value.upsert.return_value.execute.return_value.data = [user_row()]

        record = store.find_or_create("user-1", "a@example.com")

        assert record.preferences == Preferences()
        row = mock_db.table.return_value.upsert.call_args[0][0]
        assert row["id"] == "user-1"
        assert row["preferences"] == {"categories": [], "digest_frequency": "daily", "notifications_enabled": True}
        assert mock_db.table.return_value.upsert.call_args[1] == {"on_conflict": "id", "ignore_duplicates": True}

    def test_existing_record_is_read_back(self, store, mock_db):
        """A conflicting insert returns no rows; the stored record wins."""
        mock_db.table.return_value.upsert.return_value.execute.return_value.data = []
        mock_db.table.return_value.select.return_value.eq.return_value.execute.return_value.data = [
            user_row(preferences={"categories": ["llm"], "digest_frequency": "weekly", "notifications_enabled": False})
        ]

        record = store.find_or_create("user-1", "a@example.com")

        assert record.preferences.digest_frequency == DigestFrequency.WEEKLY
        assert record.preferences.categories == ["llm"]


class TestWrites:
    def test_touch_login(self, store, mock_db):
        store.touch_login("user-1")
        update = mock_db.table.return_value.update
        assert "last_login" in update.call_args[0][0]
        update.return_value.eq.assert_called_with("id", "user-1")

    def test_touch_login_failure_is_swallowed(self, store, mock_db):
        mock_db.table.return_value.update.return_value.eq.return_value.execute.side_effect = (
            httpx.ConnectError("connection refused")
        )
        store.touch_login("user-1")

    def test_upsert_profile_fields_sends_only_supplied(self, store, mock_db):
        mock_db.table.return_value.upsert.return_value.execute.return_value.data = [user_row(display_name="Ada")]

        record = store.upsert_profile_fields("user-1", ProfileUpdate(display_name="Ada"))

        row = mock_db.table.return_value.upsert.call_args[0][0]
        assert row["display_name"] == "Ada"
        assert "photo_url" not in row
        assert record.display_name == "Ada"

    def test_replace_preferences(self, store, mock_db):
        mock_db.table.return_value.upsert.return_value.execute.return_value.data = [user_row()]

        store.replace_preferences("user-1", Preferences(categories=["llm"]), email="a@example.com")

        row = mock_db.table.return_value.upsert.call_args[0][0]
        assert row["preferences"] == {"categories": ["llm"], "digest_frequency": "daily", "notifications_enabled": True}
        assert row["email"] == "a@example.com"

    def test_replace_preferences_without_email_keeps_stored(self, store, mock_db):
        mock_db.table.return_value.upsert.return_value.execute.return_value.data = [user_row()]
        store.replace_preferences("user-1", Preferences())
        row = mock_db.table.return_value.upsert.call_args[0][0]
        assert "email" not in row

    def test_patch_preferences_calls_merge_function(self, store, mock_db):
        mock_db.rpc.return_value.execute.return_value.data = [
            user_row(preferences={"categories": [], "digest_frequency": "weekly", "notifications_enabled": True})
        ]

        record = store.patch_preferences("user-1", PreferencesPatch(digest_frequency="weekly"))

        mock_db.rpc.assert_called_once_with(
            "patch_user_preferences",
            {"p_user_id": "user-1", "p_patch": {"digest_frequency": "weekly"}},
        )
        assert record.preferences.digest_frequency == DigestFrequency.WEEKLY

    def test_patch_preferences_unknown_user(self, store, mock_db):
        mock_db.rpc.return_value.execute.return_value.data = []
        with pytest.raises(UserNotFoundError):
            store.patch_preferences("nobody", PreferencesPatch(notifications_enabled=False))

    def test_patch_invalid_frequency_makes_no_call(self, store, mock_db):
        with pytest.raises(InvalidPreferenceError):
            store.patch_preferences("user-1", PreferencesPatch(digest_frequency="monthly"))
        mock_db.rpc.assert_not_called()

    def test_empty_patch_reads_record(self, store, mock_db):
        mock_db.table.return_value.select.return_value.eq.return_value.execute.return_value.data = [user_row()]
        record = store.patch_preferences("user-1", PreferencesPatch())
        assert record.id == "user-1"
        mock_db.rpc.assert_not_called()

    def test_append_history(self, store, mock_db):
        mock_db.rpc.return_value.execute.return_value.data = [
            {"digest_id": "d1", "read_at": "2024-01-01T00:00:00+00:00"}
        ]

        history = store.append_history("user-1", "d1")

        mock_db.rpc.assert_called_once_with(
            "append_read_history", {"p_user_id": "user-1", "p_digest_id": "d1"}
        )
        assert [entry.digest_id for entry in history] == ["d1"]


class TestErrorMapping:
    def test_api_error_becomes_store_unavailable(self, store, mock_db):
        mock_db.table.return_value.select.return_value.eq.return_value.execute.side_effect = APIError(
            {"message": "relation \"users\" does not exist", "code": "42P01"}
        )
        with pytest.raises(StoreUnavailableError) as exc_info:
            store.find_by_id("user-1")
        assert exc_info.value.code == "STORE_UNAVAILABLE"

    def test_network_error_becomes_store_unavailable(self, store, mock_db):
        mock_db.rpc.return_value.execute.side_effect = httpx.ReadTimeout("timed out")
        with pytest.raises(StoreUnavailableError):
            store.append_history("user-1", "d1")

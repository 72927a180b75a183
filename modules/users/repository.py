"""
User store implementations.

SupabaseUserStore keeps one row per user in the ``users`` table, with
preferences and read history as jsonb documents. Each operation is a
single PostgREST call: upserts for create/merge writes, and the SQL
functions from migrations/001_users.sql for the jsonb merge and the
de-duplicating append, so concurrent writers never see half an update.

InMemoryUserStore has the same semantics and is used for local
development and tests.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Optional

from supabase import Client

from shared.repository import BaseRepository
from .exceptions import InvalidPreferenceError, StoreUnavailableError, UserNotFoundError
from .models import (
    DigestFrequency,
    Preferences,
    PreferencesPatch,
    ProfileUpdate,
    ReadHistoryEntry,
    UserRecord,
    normalize_categories,
)

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def preference_changes(patch: PreferencesPatch) -> dict[str, Any]:
    """
    Validate a preferences patch and return the fields it sets.

    Raises:
        InvalidPreferenceError: If digest_frequency is not a known value
    """
    changes: dict[str, Any] = {}

    if patch.digest_frequency is not None:
        allowed = [f.value for f in DigestFrequency]
        if patch.digest_frequency not in allowed:
            raise InvalidPreferenceError("digest frequency", patch.digest_frequency, allowed)
        changes["digest_frequency"] = patch.digest_frequency

    if patch.categories is not None:
        changes["categories"] = normalize_categories(patch.categories)
    if patch.notifications_enabled is not None:
        changes["notifications_enabled"] = patch.notifications_enabled

    return changes


class SupabaseUserStore(BaseRepository[UserRecord]):
    """
    User store backed by a Supabase table.

    Note: This repository does NOT perform authorization checks.
    Callers pass the authenticated user's ID.
    """

    def __init__(self, db: Client, table: str = "users") -> None:
        super().__init__(db)
        self._table = table

    def _store_error(self, error: Exception) -> Exception:
        return StoreUnavailableError(str(error))

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def find_by_id(self, user_id: str) -> Optional[UserRecord]:
        result = self._execute(
            self._db.table(self._table).select("*").eq("id", user_id)
        )
        if not result.data:
            return None
        return self._map_to_record(result.data[0])

    def get_history(self, user_id: str) -> list[ReadHistoryEntry]:
        result = self._execute(
            self._db.table(self._table).select("read_history").eq("id", user_id)
        )
        if not result.data:
            return []
        return self._map_history(result.data[0].get("read_history"))

    def count_users(self) -> int:
        result = self._execute(
            self._db.table(self._table).select("id", count="exact").limit(1)
        )
        return result.count or 0

    def ping(self) -> bool:
        try:
            self._execute(self._db.table(self._table).select("id").limit(1))
        except StoreUnavailableError as e:
            logger.warning(f"User store ping failed: {e}")
            return False
        return True

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def find_or_create(self, user_id: str, email: str, display_name: str = "") -> UserRecord:
        """Insert-if-absent, then read back whichever row won."""
        row = {
            "id": user_id,
            "email": email,
            "display_name": display_name,
            "preferences": Preferences().model_dump(mode="json"),
            "last_login": _now().isoformat(),
        }
        result = self._execute(
            self._db.table(self._table).upsert(row, on_conflict="id", ignore_duplicates=True)
        )
        if result.data:
            logger.info(f"Created user record for {user_id}")
            return self._map_to_record(result.data[0])

        record = self.find_by_id(user_id)
        if record is None:
            raise StoreUnavailableError(f"record for {user_id} vanished after insert")
        return record

    def touch_login(self, user_id: str) -> None:
        try:
            self._execute(
                self._db.table(self._table)
                .update({"last_login": _now().isoformat()})
                .eq("id", user_id)
            )
        except StoreUnavailableError as e:
            logger.warning(f"Failed to update last login for {user_id}: {e.message}")

    def upsert_profile_fields(self, user_id: str, update: ProfileUpdate) -> UserRecord:
        now = _now().isoformat()
        row: dict[str, Any] = {
            "id": user_id,
            **update.supplied_fields(),
            "last_login": now,
            "updated_at": now,
        }
        result = self._execute(
            self._db.table(self._table).upsert(row, on_conflict="id")
        )
        return self._map_to_record(result.data[0])

    def replace_preferences(self, user_id: str, preferences: Preferences, email: str = "") -> UserRecord:
        now = _now().isoformat()
        row: dict[str, Any] = {
            "id": user_id,
            "preferences": preferences.model_dump(mode="json"),
            "last_login": now,
            "updated_at": now,
        }
        if email:
            row["email"] = email
        result = self._execute(
            self._db.table(self._table).upsert(row, on_conflict="id")
        )
        return self._map_to_record(result.data[0])

    def patch_preferences(self, user_id: str, patch: PreferencesPatch) -> UserRecord:
        changes = preference_changes(patch)

        if not changes:
            record = self.find_by_id(user_id)
            if record is None:
                raise UserNotFoundError(user_id)
            return record

        result = self._execute(
            self._db.rpc("patch_user_preferences", {"p_user_id": user_id, "p_patch": changes})
        )
        if not result.data:
            raise UserNotFoundError(user_id)
        return self._map_to_record(result.data[0])

    def append_history(self, user_id: str, digest_id: str) -> list[ReadHistoryEntry]:
        result = self._execute(
            self._db.rpc("append_read_history", {"p_user_id": user_id, "p_digest_id": digest_id})
        )
        return self._map_history(result.data)

    # -------------------------------------------------------------------------
    # Mapping
    # -------------------------------------------------------------------------

    def _map_to_record(self, data: dict[str, Any]) -> UserRecord:
        """Map database row to UserRecord model."""
        return UserRecord.model_validate(data)

    def _map_history(self, data: Any) -> list[ReadHistoryEntry]:
        return [ReadHistoryEntry.model_validate(entry) for entry in data or []]


class InMemoryUserStore:
    """
    User store with in-memory storage.

    For testing and development. Use SupabaseUserStore for production.
    Operations hold a lock because the profile service runs store calls
    in worker threads.
    """

    def __init__(self) -> None:
        self._records: dict[str, UserRecord] = {}
        self._lock = threading.Lock()

    def find_by_id(self, user_id: str) -> Optional[UserRecord]:
        with self._lock:
            return self._records.get(user_id)

    def find_or_create(self, user_id: str, email: str, display_name: str = "") -> UserRecord:
        with self._lock:
            record = self._records.get(user_id)
            if record is None:
                record = self._new_record(user_id, email=email, display_name=display_name)
                self._records[user_id] = record
            return record

    def touch_login(self, user_id: str) -> None:
        with self._lock:
            record = self._records.get(user_id)
            if record is not None:
                self._records[user_id] = record.model_copy(update={"last_login": _now()})

    def upsert_profile_fields(self, user_id: str, update: ProfileUpdate) -> UserRecord:
        with self._lock:
            record = self._records.get(user_id) or self._new_record(user_id)
            now = _now()
            record = record.model_copy(
                update={**update.supplied_fields(), "last_login": now, "updated_at": now}
            )
            self._records[user_id] = record
            return record

    def replace_preferences(self, user_id: str, preferences: Preferences, email: str = "") -> UserRecord:
        with self._lock:
            record = self._records.get(user_id) or self._new_record(user_id)
            now = _now()
            record = record.model_copy(
                update={
                    "email": email or record.email,
                    "preferences": preferences.model_copy(deep=True),
                    "last_login": now,
                    "updated_at": now,
                }
            )
            self._records[user_id] = record
            return record

    def patch_preferences(self, user_id: str, patch: PreferencesPatch) -> UserRecord:
        changes = preference_changes(patch)
        with self._lock:
            record = self._records.get(user_id)
            if record is None:
                raise UserNotFoundError(user_id)
            if not changes:
                return record
            preferences = Preferences.model_validate(
                {**record.preferences.model_dump(), **changes}
            )
            record = record.model_copy(update={"preferences": preferences, "updated_at": _now()})
            self._records[user_id] = record
            return record

    def append_history(self, user_id: str, digest_id: str) -> list[ReadHistoryEntry]:
        with self._lock:
            record = self._records.get(user_id) or self._new_record(user_id)
            if any(entry.digest_id == digest_id for entry in record.read_history):
                self._records[user_id] = record
                return list(record.read_history)
            history = [*record.read_history, ReadHistoryEntry(digest_id=digest_id, read_at=_now())]
            record = record.model_copy(update={"read_history": history, "updated_at": _now()})
            self._records[user_id] = record
            return list(history)

    def get_history(self, user_id: str) -> list[ReadHistoryEntry]:
        with self._lock:
            record = self._records.get(user_id)
            return list(record.read_history) if record else []

    def count_users(self) -> int:
        with self._lock:
            return len(self._records)

    def ping(self) -> bool:
        return True

    def _new_record(self, user_id: str, email: str = "", display_name: str = "") -> UserRecord:
        now = _now()
        return UserRecord(
            id=user_id,
            email=email,
            display_name=display_name,
            last_login=now,
            created_at=now,
            updated_at=now,
        )


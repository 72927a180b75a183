"""
Base repository class for database access.

Provides a common abstraction layer for all repositories, encapsulating
Supabase client access and translating driver errors into domain errors.
"""

from typing import Any, TypeVar, Generic

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from .exceptions import ExternalServiceError


T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base class for all repositories.

    Provides common functionality for database operations:
    - Supabase client access via self._db
    - Generic type parameter for model type hints
    - _execute() to run a query and map driver failures

    Subclasses should implement domain-specific data access methods
    and handle dict-to-Pydantic model mapping internally.

    Example:
        class UserRepository(BaseRepository[UserRecord]):
            def find_by_id(self, user_id: str) -> Optional[UserRecord]:
                result = self._execute(
                    self._db.table("users").select("*").eq("id", user_id)
                )
                if not result.data:
                    return None
                return self._map_to_record(result.data[0])
    """

    def __init__(self, db: Client) -> None:
        """
        Initialize the repository with a Supabase client.

        Args:
            db: Supabase client instance for database operations.
        """
        self._db = db

    def _execute(self, query: Any) -> Any:
        """
        Execute a PostgREST query builder.

        Raises:
            The exception built by _store_error() if the database
            rejects the query or cannot be reached.
        """
        try:
            return query.execute()
        except (APIError, httpx.HTTPError) as e:
            raise self._store_error(e) from e

    def _store_error(self, error: Exception) -> Exception:
        """Build the domain exception raised for a failed query."""
        return ExternalServiceError(
            f"Database operation failed: {error}",
            service="supabase",
            code="DATABASE_ERROR",
        )

"""Abstract database interface, a strategy for switching between SQLite and Supabase"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional, Sequence, Tuple


class DatabaseInterface(ABC):
    """Abstract interface for compliance storage.
    Implemented by both SQLite and Supabase backends."""

    @abstractmethod
    def init_db(self) -> None:
        """Initialize database schema (create tables, indexes)."""

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Group the calls made inside the block into one atomic unit.

        Backends without client-side transactions fall back to running
        each call on its own.
        """
        yield

    # ---- Users ----

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[dict]:
        """Get a user row (consent and lifecycle decoded) by ID."""

    @abstractmethod
    def upsert_user(self, user: dict) -> str:
        """Insert or update a user. Returns user ID."""

    @abstractmethod
    def update_user_consent(self, user_id: str, consent: Optional[dict]) -> None:
        """Replace the consent snapshot embedded on a user."""

    @abstractmethod
    def update_user_lifecycle(self, user_id: str, lifecycle: dict) -> None:
        """Replace the lifecycle timestamps on a user."""

    # ---- Attestations ----

    @abstractmethod
    def get_attestation(self, owner_id: str) -> Optional[dict]:
        """Get the attestation owned by a user."""

    @abstractmethod
    def upsert_attestation(self, record: dict) -> Tuple[str, bool]:
        """Insert or fully replace the owner's attestation.
        Returns (attestation ID, whether a previous record was replaced)."""

    @abstractmethod
    def list_attestations(
        self,
        limit: int,
        offset: int = 0,
        lsa_verified: Optional[bool] = None,
    ) -> Tuple[List[dict], int]:
        """Page through attestations newest first. Returns (rows, total)."""

    # ---- Audit log (append-only) ----

    @abstractmethod
    def insert_audit_event(self, event: dict) -> str:
        """Append an audit event. Returns event ID."""

    @abstractmethod
    def query_audit_events(
        self,
        owner_id: str,
        event_types: Optional[Sequence[str]] = None,
        from_timestamp: Optional[datetime] = None,
        to_timestamp: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[dict]:
        """Audit events for one owner, newest first."""

    @abstractmethod
    def get_status(self) -> dict:
        """Get database status info (table counts, connection status)."""

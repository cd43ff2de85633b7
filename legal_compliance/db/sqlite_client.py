"""SQLite implementation of DatabaseInterface"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional, Sequence, Tuple

from legal_compliance.db.base import DatabaseInterface
from legal_compliance.db import sqlite as sqlite_ops
from legal_compliance.utils.config import get_settings

logger = logging.getLogger(__name__)


class SQLiteClient(DatabaseInterface):
    """SQLite implementation of DatabaseInterface.
    Wraps the module-level functions in sqlite.py."""

    def init_db(self) -> None:
        sqlite_ops.init_db()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with sqlite_ops.get_connection(write=True):
            yield

    def get_user(self, user_id: str) -> Optional[dict]:
        return sqlite_ops.get_user(user_id)

    def upsert_user(self, user: dict) -> str:
        return sqlite_ops.upsert_user(user)

    def update_user_consent(self, user_id: str, consent: Optional[dict]) -> None:
        sqlite_ops.update_user_consent(user_id, consent)

    def update_user_lifecycle(self, user_id: str, lifecycle: dict) -> None:
        sqlite_ops.update_user_lifecycle(user_id, lifecycle)

    def get_attestation(self, owner_id: str) -> Optional[dict]:
        return sqlite_ops.get_attestation(owner_id)

    def upsert_attestation(self, record: dict) -> Tuple[str, bool]:
        return sqlite_ops.upsert_attestation(record)

    def list_attestations(
        self,
        limit: int,
        offset: int = 0,
        lsa_verified: Optional[bool] = None,
    ) -> Tuple[List[dict], int]:
        return sqlite_ops.list_attestations(limit, offset, lsa_verified)

    def insert_audit_event(self, event: dict) -> str:
        return sqlite_ops.insert_audit_event(event)

    def query_audit_events(
        self,
        owner_id: str,
        event_types: Optional[Sequence[str]] = None,
        from_timestamp: Optional[datetime] = None,
        to_timestamp: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[dict]:
        return sqlite_ops.query_audit_events(
            owner_id, event_types, from_timestamp, to_timestamp, limit
        )

    def get_status(self) -> dict:
        settings = get_settings()
        try:
            return {
                "mode": "sqlite",
                "path": settings.database_path,
                "users": sqlite_ops.count_rows("users"),
                "attestations": sqlite_ops.count_rows("attestations"),
                "audit_events": sqlite_ops.count_rows("audit_log"),
                "status": "connected",
            }
        except Exception as e:
            logger.warning(f"SQLite status check failed: {e}")
            return {
                "mode": "sqlite",
                "path": settings.database_path,
                "status": f"error: {e}",
            }

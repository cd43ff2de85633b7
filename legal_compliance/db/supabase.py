"""Supabase database client implementing DatabaseInterface"""

import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from legal_compliance.db.base import DatabaseInterface
from legal_compliance.db.sqlite import to_db_timestamp
from legal_compliance.utils.config import get_settings

logger = logging.getLogger(__name__)

MIGRATION_PATH = Path(__file__).parent / "migrations" / "001_supabase.sql"

# Lazy imports to avoid requiring supabase when using sqlite mode
_service_client = None


def _get_service_client():
    """Get or create the singleton Supabase service-role client (bypasses RLS)."""
    global _service_client
    if _service_client is None:
        from supabase import ClientOptions, create_client

        settings = get_settings()
        key = settings.supabase_service_key
        if not settings.supabase_url or not key:
            raise ValueError(
                "SUPABASE_URL and SUPABASE_SERVICE_KEY must be set when DB_MODE=supabase"
            )
        _service_client = create_client(
            settings.supabase_url,
            key,
            options=ClientOptions(postgrest_client_timeout=10),
        )
    return _service_client


def _serialize(data: dict) -> dict:
    """Convert datetimes to ISO strings for PostgREST."""
    return {
        k: to_db_timestamp(v) if isinstance(v, datetime) else v
        for k, v in data.items()
    }


class SupabaseClient(DatabaseInterface):
    """Supabase implementation of DatabaseInterface.

    PostgREST has no client-side transactions, so ``transaction()`` keeps
    the base no-op; the unique index on attestations.owner_id still keeps
    concurrent resubmissions to one row (last write wins). Every call uses
    the service-role key; the tables are closed to anon clients by RLS.
    """

    def __init__(self):
        self._client = _get_service_client

    def init_db(self) -> None:
        """Verify the schema exists.
        In practice, the migration SQL is run in the Supabase SQL Editor."""
        client = self._client()
        try:
            client.table("users").select("id").limit(1).execute()
            logger.info("Supabase schema verified: tables accessible")
        except Exception as e:
            logger.error(
                f"Schema not found. Run migration SQL in Supabase SQL Editor: {MIGRATION_PATH}"
            )
            raise RuntimeError(
                f"Supabase schema not initialized. Run {MIGRATION_PATH.name} in SQL Editor. Error: {e}"
            ) from e

    # ---- Users ----

    def get_user(self, user_id: str) -> Optional[dict]:
        client = self._client()
        result = client.table("users").select("*").eq("id", user_id).execute()
        return result.data[0] if result.data else None

    def upsert_user(self, user: dict) -> str:
        client = self._client()
        data = {k: v for k, v in _serialize(user).items() if v is not None}
        data.setdefault("id", str(uuid.uuid4()))
        result = client.table("users").upsert(data).execute()
        return result.data[0]["id"]

    def update_user_consent(self, user_id: str, consent: Optional[dict]) -> None:
        client = self._client()
        payload = _serialize(consent) if consent is not None else None
        client.table("users").update({"consent": payload}).eq("id", user_id).execute()

    def update_user_lifecycle(self, user_id: str, lifecycle: dict) -> None:
        client = self._client()
        client.table("users").update({"lifecycle": _serialize(lifecycle)}).eq("id", user_id).execute()

    # ---- Attestations ----

    def get_attestation(self, owner_id: str) -> Optional[dict]:
        client = self._client()
        result = (
            client.table("attestations")
            .select("*")
            .eq("owner_id", owner_id)
            .limit(1)
            .execute()
        )
        return result.data[0] if result.data else None

    def upsert_attestation(self, record: dict) -> Tuple[str, bool]:
        client = self._client()
        existing = self.get_attestation(record["owner_id"])
        data = _serialize(record)
        data["id"] = existing["id"] if existing else (record.get("id") or str(uuid.uuid4()))
        result = client.table("attestations").upsert(data, on_conflict="owner_id").execute()
        return result.data[0]["id"], existing is not None

    def list_attestations(
        self,
        limit: int,
        offset: int = 0,
        lsa_verified: Optional[bool] = None,
    ) -> Tuple[List[dict], int]:
        client = self._client()
        query = client.table("attestations").select("*", count="exact")
        if lsa_verified is not None:
            query = query.eq("lsa_verified", lsa_verified)
        result = (
            query.order("attested_at", desc=True)
            .range(offset, offset + limit - 1)
            .execute()
        )
        return result.data, result.count or 0

    # ---- Audit log ----

    def insert_audit_event(self, event: dict) -> str:
        client = self._client()
        data = _serialize(event)
        data["id"] = event.get("id") or str(uuid.uuid4())
        data["metadata"] = event.get("metadata") or {}
        client.table("audit_log").insert(data).execute()
        return data["id"]

    def query_audit_events(
        self,
        owner_id: str,
        event_types: Optional[Sequence[str]] = None,
        from_timestamp: Optional[datetime] = None,
        to_timestamp: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[dict]:
        client = self._client()
        query = (
            client.table("audit_log")
            .select("id,owner_id,event,version,timestamp,ip_address,user_agent,metadata")
            .eq("owner_id", owner_id)
        )
        if event_types:
            query = query.in_("event", list(event_types))
        if from_timestamp is not None:
            query = query.gte("timestamp", to_db_timestamp(from_timestamp))
        if to_timestamp is not None:
            query = query.lte("timestamp", to_db_timestamp(to_timestamp))
        query = query.order("timestamp", desc=True).order("seq", desc=True)
        if limit is not None:
            query = query.limit(limit)
        return query.execute().data

    def get_status(self) -> dict:
        """Get database status info."""
        client = self._client()
        settings = get_settings()
        try:
            users = client.table("users").select("id", count="exact").execute()
            attestations = client.table("attestations").select("id", count="exact").execute()
            return {
                "mode": "supabase",
                "url": settings.supabase_url,
                "users": users.count or 0,
                "attestations": attestations.count or 0,
                "status": "connected",
            }
        except Exception as e:
            return {
                "mode": "supabase",
                "url": settings.supabase_url,
                "status": f"error: {e}",
            }


def get_database(mode: str = None) -> DatabaseInterface:
    """Factory: returns appropriate database implementation.

    mode: 'supabase' or 'sqlite'. Defaults to DB_MODE env var.
    """
    if mode is None:
        mode = get_settings().db_mode

    if mode == "supabase":
        return SupabaseClient()
    else:
        # Import here to avoid circular imports
        from legal_compliance.db.sqlite_client import SQLiteClient

        return SQLiteClient()

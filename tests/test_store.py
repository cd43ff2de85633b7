"""Tests for the SQLite store and the access guard"""

import sqlite3
from datetime import datetime, timezone

import pytest

from legal_compliance.db import sqlite as sqlite_ops
from legal_compliance.db.supabase import MIGRATION_PATH
from legal_compliance.errors import AuthorizationError
from legal_compliance.models.user import Caller, UserRole
from legal_compliance.services.access import can_access, enforce_access, require_role


def _event(owner_id="lawyer-a", event="attestation_submitted"):
    return {
        "owner_id": owner_id,
        "event": event,
        "version": "1.0",
        "timestamp": datetime.now(timezone.utc),
        "metadata": {"source": "test"},
    }


class TestAuditLogStore:

    def test_update_is_rejected(self, db):
        db.insert_audit_event(_event())
        with pytest.raises(sqlite3.IntegrityError, match="append-only"):
            with sqlite_ops.get_connection() as conn:
                conn.execute("UPDATE audit_log SET event = 'tampered'")
        assert db.query_audit_events("lawyer-a")[0]["event"] == "attestation_submitted"

    def test_delete_is_rejected(self, db):
        db.insert_audit_event(_event())
        with pytest.raises(sqlite3.IntegrityError, match="append-only"):
            with sqlite_ops.get_connection() as conn:
                conn.execute("DELETE FROM audit_log")
        assert sqlite_ops.count_rows("audit_log") == 1

    def test_same_timestamp_ties_break_by_insertion(self, db):
        stamp = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        for event in ("terms_accepted", "privacy_accepted", "consent_updated"):
            db.insert_audit_event(dict(_event("client-1", event), timestamp=stamp))
        rows = db.query_audit_events("client-1")
        assert [r["event"] for r in rows] == ["consent_updated", "privacy_accepted", "terms_accepted"]

    def test_event_type_filter(self, db):
        db.insert_audit_event(_event(event="attestation_submitted"))
        db.insert_audit_event(_event(event="terms_accepted"))
        rows = db.query_audit_events("lawyer-a", event_types=["terms_accepted"])
        assert [r["event"] for r in rows] == ["terms_accepted"]
        assert rows[0]["metadata"] == {"source": "test"}

    def test_transaction_rolls_back_every_write(self, db):
        with pytest.raises(RuntimeError):
            with db.transaction():
                db.insert_audit_event(_event())
                db.update_user_consent("lawyer-a", {"terms": True})
                raise RuntimeError("boom")
        assert sqlite_ops.count_rows("audit_log") == 0
        assert db.get_user("lawyer-a")["consent"] is None

    def test_reads_not_blocked_by_pending_writer(self, db):
        writer = sqlite3.connect(str(sqlite_ops.get_db_path()), isolation_level=None)
        try:
            writer.execute("BEGIN IMMEDIATE")
            writer.execute("UPDATE users SET name = 'Pending' WHERE id = 'lawyer-a'")
            assert db.get_user("lawyer-a")["name"] == "Alice Avocat"
            assert db.query_audit_events("lawyer-a") == []
        finally:
            writer.execute("ROLLBACK")
            writer.close()

    def test_unknown_table_count_rejected(self, db):
        with pytest.raises(ValueError):
            sqlite_ops.count_rows("sqlite_master")

    def test_naive_timestamps_treated_as_utc(self):
        naive = datetime(2024, 1, 2, 3, 4, 5)
        assert sqlite_ops.to_db_timestamp(naive) == "2024-01-02T03:04:05.000000+00:00"


class TestSupabaseMigration:

    @pytest.fixture
    def sql(self):
        return MIGRATION_PATH.read_text(encoding="utf-8")

    def test_audit_log_rejects_update_delete_and_truncate(self, sql):
        assert "BEFORE UPDATE OR DELETE ON audit_log" in sql
        assert "BEFORE TRUNCATE ON audit_log" in sql
        assert "RAISE EXCEPTION 'audit_log is append-only'" in sql

    @pytest.mark.parametrize("table", ["users", "attestations", "audit_log"])
    def test_row_level_security_enabled(self, sql, table):
        assert f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY;" in sql

    def test_no_grants_to_client_roles(self, sql):
        assert "GRANT " not in sql
        assert "FROM PUBLIC, anon, authenticated" in sql


class TestAccessGuard:

    def test_owner_and_admin_allowed(self):
        assert can_access("lawyer-a", "lawyer-a", UserRole.LAWYER) is True
        assert can_access("admin-1", "lawyer-a", UserRole.ADMIN) is True
        assert can_access("lawyer-b", "lawyer-a", UserRole.LAWYER) is False
        assert can_access("client-1", "lawyer-a", UserRole.END_USER) is False

    def test_enforce_access_raises(self):
        with pytest.raises(AuthorizationError):
            enforce_access(Caller(user_id="lawyer-b", role=UserRole.LAWYER), "lawyer-a")

    def test_require_role_message(self):
        caller = Caller(user_id="client-1", role=UserRole.END_USER)
        with pytest.raises(AuthorizationError, match="'lawyer'"):
            require_role(caller, UserRole.LAWYER)
        require_role(caller, UserRole.END_USER, UserRole.ADMIN)

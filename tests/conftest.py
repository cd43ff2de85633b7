"""Pytest configuration and fixtures"""

import pytest

from legal_compliance.db.sqlite_client import SQLiteClient
from legal_compliance.models.user import Caller, UserRole


@pytest.fixture(autouse=True)
def test_env(tmp_path, monkeypatch):
    """Set up test environment with temporary database"""
    db_path = tmp_path / "test.db"

    monkeypatch.setenv("DATABASE_PATH", str(db_path))
    monkeypatch.setenv("DB_MODE", "sqlite")
    monkeypatch.setenv("AUDIT_STRICT", "false")

    yield

    # Cleanup handled by tmp_path fixture


@pytest.fixture
def db():
    """Initialized SQLite store with a lawyer, a second lawyer, an admin and a client"""
    client = SQLiteClient()
    client.init_db()
    client.upsert_user({"id": "lawyer-a", "role": "lawyer", "name": "Alice Avocat"})
    client.upsert_user({"id": "lawyer-b", "role": "lawyer", "name": "Bob Barrister"})
    client.upsert_user({"id": "admin-1", "role": "admin", "name": "Ada Admin"})
    client.upsert_user({"id": "client-1", "role": "end-user", "name": "Carl Client"})
    return client


@pytest.fixture
def lawyer():
    return Caller(user_id="lawyer-a", role=UserRole.LAWYER, ip_address="203.0.113.7", user_agent="pytest")


@pytest.fixture
def other_lawyer():
    return Caller(user_id="lawyer-b", role=UserRole.LAWYER)


@pytest.fixture
def admin():
    return Caller(user_id="admin-1", role=UserRole.ADMIN)


@pytest.fixture
def end_user():
    return Caller(user_id="client-1", role=UserRole.END_USER, ip_address="198.51.100.2")


@pytest.fixture
def attestation_payload():
    """A payload that passes every attestation rule"""
    return {
        "legal_name": "Alice Avocat",
        "bar_number": "AB12345",
        "is_licensed": True,
        "is_in_good_standing": True,
        "no_disciplinary_actions": True,
        "profile_accurate": True,
        "will_update_on_change": True,
        "understands_liability": True,
    }

"""SQLite database operations"""

import json
import sqlite3
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from legal_compliance.utils.config import get_settings

# Columns copied from the payload on every attestation write
ATTESTATION_COLUMNS = (
    "legal_name",
    "bar_number",
    "is_licensed",
    "is_in_good_standing",
    "no_disciplinary_actions",
    "profile_accurate",
    "will_update_on_change",
    "understands_liability",
    "lsa_verified",
    "attestation_version",
    "attested_at",
    "ip_address",
)

BOOLEAN_COLUMNS = (
    "is_licensed",
    "is_in_good_standing",
    "no_disciplinary_actions",
    "profile_accurate",
    "will_update_on_change",
    "understands_liability",
    "lsa_verified",
)

# One open connection per thread while a transaction is in progress
_local = threading.local()


def get_db_path() -> Path:
    """Get database path from settings"""
    settings = get_settings()
    return Path(settings.database_path)


def to_db_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Fixed-width UTC ISO string so text ordering matches time ordering."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


@contextmanager
def get_connection(write: bool = False):
    """Get a database connection as context manager.

    Nested use on the same thread reuses the outer connection, so the
    outermost block is the transaction boundary. Writers take the
    database lock up front (BEGIN IMMEDIATE); readers start a deferred
    transaction and only hold a shared lock.
    """
    conn = getattr(_local, "conn", None)
    if conn is not None:
        _local.depth += 1
        try:
            yield conn
        finally:
            _local.depth -= 1
        return

    db_path = get_db_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path), timeout=10, isolation_level=None)
    conn.row_factory = sqlite3.Row
    _local.conn = conn
    _local.depth = 0
    try:
        conn.execute("BEGIN IMMEDIATE" if write else "BEGIN")
        yield conn
        conn.execute("COMMIT")
    except Exception:
        if conn.in_transaction:
            conn.execute("ROLLBACK")
        raise
    finally:
        _local.conn = None
        conn.close()


def init_db():
    """Initialize database with schema"""
    with get_connection(write=True) as conn:
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY,
                role TEXT NOT NULL DEFAULT 'end-user',
                name TEXT,
                email TEXT,
                consent TEXT,
                lifecycle TEXT
            )
        """)

        # One attestation per owner
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS attestations (
                id TEXT PRIMARY KEY,
                owner_id TEXT NOT NULL UNIQUE REFERENCES users(id),
                legal_name TEXT NOT NULL,
                bar_number TEXT NOT NULL,
                is_licensed INTEGER NOT NULL,
                is_in_good_standing INTEGER NOT NULL,
                no_disciplinary_actions INTEGER NOT NULL,
                profile_accurate INTEGER NOT NULL,
                will_update_on_change INTEGER NOT NULL,
                understands_liability INTEGER NOT NULL,
                lsa_verified INTEGER NOT NULL DEFAULT 0,
                attestation_version TEXT NOT NULL,
                attested_at TEXT NOT NULL,
                ip_address TEXT
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_attestations_verified
            ON attestations(lsa_verified, attested_at)
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS audit_log (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT NOT NULL UNIQUE,
                owner_id TEXT NOT NULL,
                event TEXT NOT NULL,
                version TEXT NOT NULL,
                timestamp TEXT NOT NULL,
                ip_address TEXT,
                user_agent TEXT,
                metadata TEXT
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_audit_owner
            ON audit_log(owner_id, timestamp)
        """)

        # Audit rows are append-only
        cursor.execute("""
            CREATE TRIGGER IF NOT EXISTS audit_log_no_update
            BEFORE UPDATE ON audit_log
            BEGIN
                SELECT RAISE(ABORT, 'audit_log is append-only');
            END
        """)
        cursor.execute("""
            CREATE TRIGGER IF NOT EXISTS audit_log_no_delete
            BEFORE DELETE ON audit_log
            BEGIN
                SELECT RAISE(ABORT, 'audit_log is append-only');
            END
        """)


# ---- Users ----

def _decode_user(row: sqlite3.Row) -> dict:
    user = dict(row)
    for key in ("consent", "lifecycle"):
        if user.get(key):
            user[key] = json.loads(user[key])
    return user


def get_user(user_id: str) -> Optional[dict]:
    """Get a user by ID"""
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM users WHERE id = ?", (user_id,))
        row = cursor.fetchone()
        return _decode_user(row) if row else None


def upsert_user(user: dict) -> str:
    """Insert or update a user's identity fields"""
    user_id = user.get("id") or str(uuid.uuid4())
    lifecycle = user.get("lifecycle")
    with get_connection(write=True) as conn:
        cursor = conn.cursor()
        cursor.execute("""
            INSERT INTO users (id, role, name, email, lifecycle)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                role = excluded.role,
                name = excluded.name,
                email = excluded.email
        """, (
            user_id,
            user.get("role", "end-user"),
            user.get("name"),
            user.get("email"),
            json.dumps(lifecycle, default=str) if lifecycle else None,
        ))
        return user_id


def update_user_consent(user_id: str, consent: Optional[dict]) -> None:
    """Replace the embedded consent snapshot"""
    with get_connection(write=True) as conn:
        conn.execute(
            "UPDATE users SET consent = ? WHERE id = ?",
            (json.dumps(consent, default=str) if consent is not None else None, user_id),
        )


def update_user_lifecycle(user_id: str, lifecycle: dict) -> None:
    """Replace the lifecycle timestamps"""
    with get_connection(write=True) as conn:
        conn.execute(
            "UPDATE users SET lifecycle = ? WHERE id = ?",
            (json.dumps(lifecycle, default=str), user_id),
        )


# ---- Attestations ----

def _decode_attestation(row: sqlite3.Row) -> dict:
    record = dict(row)
    for key in BOOLEAN_COLUMNS:
        record[key] = bool(record[key])
    return record


def get_attestation(owner_id: str) -> Optional[dict]:
    """Get the attestation for an owner"""
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM attestations WHERE owner_id = ?", (owner_id,))
        row = cursor.fetchone()
        return _decode_attestation(row) if row else None


def upsert_attestation(record: dict) -> Tuple[str, bool]:
    """Insert the owner's attestation or overwrite every field of the existing one"""
    values = []
    for column in ATTESTATION_COLUMNS:
        value = record.get(column)
        if column in BOOLEAN_COLUMNS:
            value = int(bool(value))
        elif isinstance(value, datetime):
            value = to_db_timestamp(value)
        values.append(value)

    assignments = ", ".join(f"{c} = excluded.{c}" for c in ATTESTATION_COLUMNS)
    placeholders = ", ".join("?" for _ in ATTESTATION_COLUMNS)

    with get_connection(write=True) as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT id FROM attestations WHERE owner_id = ?", (record["owner_id"],))
        existing = cursor.fetchone()
        cursor.execute(f"""
            INSERT INTO attestations (id, owner_id, {", ".join(ATTESTATION_COLUMNS)})
            VALUES (?, ?, {placeholders})
            ON CONFLICT(owner_id) DO UPDATE SET {assignments}
        """, [record.get("id") or str(uuid.uuid4()), record["owner_id"], *values])
        cursor.execute("SELECT id FROM attestations WHERE owner_id = ?", (record["owner_id"],))
        return cursor.fetchone()["id"], existing is not None


def list_attestations(
    limit: int,
    offset: int = 0,
    lsa_verified: Optional[bool] = None,
) -> Tuple[List[dict], int]:
    """Page through attestations, newest submission first"""
    where = ""
    params: list = []
    if lsa_verified is not None:
        where = "WHERE lsa_verified = ?"
        params.append(int(lsa_verified))

    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute(f"SELECT COUNT(*) FROM attestations {where}", params)
        total = cursor.fetchone()[0]
        cursor.execute(
            f"SELECT * FROM attestations {where} "
            "ORDER BY attested_at DESC LIMIT ? OFFSET ?",
            [*params, limit, offset],
        )
        return [_decode_attestation(row) for row in cursor.fetchall()], total


# ---- Audit log ----

def insert_audit_event(event: dict) -> str:
    """Append an audit event"""
    event_id = event.get("id") or str(uuid.uuid4())
    with get_connection(write=True) as conn:
        conn.execute("""
            INSERT INTO audit_log
            (id, owner_id, event, version, timestamp, ip_address, user_agent, metadata)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            event_id,
            event["owner_id"],
            event["event"],
            event["version"],
            to_db_timestamp(event["timestamp"]),
            event.get("ip_address"),
            event.get("user_agent"),
            json.dumps(event.get("metadata") or {}, ensure_ascii=False, default=str),
        ))
        return event_id


def query_audit_events(
    owner_id: str,
    event_types: Optional[Sequence[str]] = None,
    from_timestamp: Optional[datetime] = None,
    to_timestamp: Optional[datetime] = None,
    limit: Optional[int] = None,
) -> List[dict]:
    """Audit events for an owner, newest first (insertion order breaks ties)"""
    clauses = ["owner_id = ?"]
    params: list = [owner_id]
    if event_types:
        clauses.append(f"event IN ({','.join('?' for _ in event_types)})")
        params.extend(event_types)
    if from_timestamp is not None:
        clauses.append("timestamp >= ?")
        params.append(to_db_timestamp(from_timestamp))
    if to_timestamp is not None:
        clauses.append("timestamp <= ?")
        params.append(to_db_timestamp(to_timestamp))

    sql = (
        "SELECT id, owner_id, event, version, timestamp, ip_address, user_agent, metadata "
        f"FROM audit_log WHERE {' AND '.join(clauses)} "
        "ORDER BY timestamp DESC, seq DESC"
    )
    if limit is not None:
        sql += " LIMIT ?"
        params.append(limit)

    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute(sql, params)
        rows = []
        for row in cursor.fetchall():
            event = dict(row)
            event["metadata"] = json.loads(event["metadata"]) if event["metadata"] else {}
            rows.append(event)
        return rows


def count_rows(table: str) -> int:
    """Row count for one of the known tables"""
    if table not in ("users", "attestations", "audit_log"):
        raise ValueError(f"Unknown table: {table}")
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute(f"SELECT COUNT(*) FROM {table}")
        return cursor.fetchone()[0]

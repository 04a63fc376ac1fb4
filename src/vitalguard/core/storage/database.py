"""SQLite database for assessment history and the audit trail.

Owns the connection lifecycle and the versioned schema.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 2

# ---------------------------------------------------------------------------
# Schema DDL
# ---------------------------------------------------------------------------

_SCHEMA_V1 = """
-- One row per completed assessment
CREATE TABLE IF NOT EXISTS assessments (
    id             TEXT PRIMARY KEY,
    timestamp      TEXT NOT NULL,
    mode           TEXT NOT NULL,

    -- Encrypted JSON blobs (reading, profile, full prediction)
    vitals_enc     TEXT NOT NULL,
    profile_enc    TEXT,
    prediction_enc TEXT NOT NULL,

    -- Unencrypted headline values (for indexed history queries)
    risk_score     INTEGER NOT NULL,
    risk_level     TEXT NOT NULL,
    confidence     INTEGER NOT NULL,
    alert_level    TEXT NOT NULL DEFAULT 'NONE',

    created_at     TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS schema_version (
    version    INTEGER NOT NULL,
    applied_at TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE INDEX IF NOT EXISTS idx_assessments_ts    ON assessments(timestamp);
CREATE INDEX IF NOT EXISTS idx_assessments_level ON assessments(risk_level);
CREATE INDEX IF NOT EXISTS idx_assessments_alert ON assessments(alert_level);
"""

# ---------------------------------------------------------------------------
# V2: audit trail
# ---------------------------------------------------------------------------

_SCHEMA_V2 = """
CREATE TABLE IF NOT EXISTS audit_log (
    id              TEXT PRIMARY KEY,
    timestamp       TEXT NOT NULL DEFAULT (datetime('now')),
    action          TEXT NOT NULL,
    tool_name       TEXT,
    tool_input_hash TEXT,
    prediction_mode TEXT,
    assessment_id   TEXT,
    duration_ms     REAL,
    status          TEXT NOT NULL DEFAULT 'success',
    error_type      TEXT,
    metadata_json   TEXT
);

CREATE INDEX IF NOT EXISTS idx_audit_timestamp ON audit_log(timestamp);
CREATE INDEX IF NOT EXISTS idx_audit_action    ON audit_log(action);
CREATE INDEX IF NOT EXISTS idx_audit_tool      ON audit_log(tool_name);
"""


class DatabaseError(Exception):
    """Raised when database operations fail."""


class AssessmentDatabase:
    """SQLite manager for the assessment store.

    ``":memory:"`` gives a throwaway database for tests.

    Usage::

        with AssessmentDatabase("~/.vitalguard/vitals.db") as db:
            db.connection.execute("SELECT COUNT(*) FROM assessments")
    """

    def __init__(self, db_path: str = ":memory:") -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        """The open connection.

        Raises:
            DatabaseError: If :meth:`initialize` has not been called.
        """
        if self._conn is None:
            raise DatabaseError("Database not initialized. Call initialize() first.")
        return self._conn

    def initialize(self) -> None:
        """Open the connection and bring the schema up to date. Idempotent."""
        if self._conn is not None:
            return

        try:
            if self._db_path == ":memory:":
                self._conn = sqlite3.connect(":memory:", check_same_thread=False)
            else:
                db_file = Path(self._db_path).expanduser()
                db_file.parent.mkdir(parents=True, exist_ok=True)
                self._conn = sqlite3.connect(str(db_file), check_same_thread=False)
        except (OSError, sqlite3.Error) as exc:
            raise DatabaseError(f"Cannot open database {self._db_path}: {exc}") from exc

        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA foreign_keys=ON")

        self._ensure_schema()
        logger.info("Assessment database initialized: %s", self._db_path)

    def _ensure_schema(self) -> None:
        conn = self.connection
        conn.executescript(_SCHEMA_V1)

        current_version = self.get_schema_version()

        if current_version < 2:
            conn.executescript(_SCHEMA_V2)
            logger.info("Applied schema migration V2: audit_log table")

        if current_version < SCHEMA_VERSION:
            conn.execute("INSERT INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,))
            conn.commit()
            logger.info("Schema updated from version %d to %d", current_version, SCHEMA_VERSION)

    def get_schema_version(self) -> int:
        row = self.connection.execute("SELECT MAX(version) FROM schema_version").fetchone()
        return row[0] if row[0] is not None else 0

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.info("Assessment database closed")

    def __enter__(self) -> AssessmentDatabase:
        self.initialize()
        return self

    def __exit__(self, *args) -> None:
        self.close()

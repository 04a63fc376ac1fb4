"""Encrypted assessment repository.

Mediates between :class:`AssessmentRecord` and the SQLite database. The
reading, profile and prediction payload go through :class:`FieldEncryptor`;
headline values are written in the clear for indexed queries. Implements the
:class:`~vitalguard.core.storage.store.PredictionStore` protocol.
"""

from __future__ import annotations

import logging
import sqlite3
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from vitalguard.core.storage.database import AssessmentDatabase
from vitalguard.core.storage.encryption import FieldEncryptor
from vitalguard.core.storage.models import AssessmentRecord

logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """Raised when repository operations fail."""


class AssessmentRepository:
    """Persistent, encrypted assessment history.

    Usage::

        db = AssessmentDatabase(":memory:")
        db.initialize()
        repo = AssessmentRepository(db, FieldEncryptor(key))

        assessment_id = repo.append(record)
        history = repo.get_risk_history(limit=30)
    """

    def __init__(self, database: AssessmentDatabase, encryptor: FieldEncryptor) -> None:
        self._db = database
        self._enc = encryptor

    @staticmethod
    def _new_id() -> str:
        return str(uuid.uuid4())

    @staticmethod
    def _now_iso() -> str:
        return datetime.now(timezone.utc).isoformat()

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def append(self, record: AssessmentRecord) -> str:
        """Persist an assessment and return its ID.

        A record without an ID gets a fresh UUID.

        Raises:
            RepositoryError: If the insert fails.
        """
        record.id = record.id or self._new_id()
        record.created_at = record.created_at or self._now_iso()

        conn = self._db.connection
        try:
            conn.execute(
                """INSERT INTO assessments (
                    id, timestamp, mode,
                    vitals_enc, profile_enc, prediction_enc,
                    risk_score, risk_level, confidence, alert_level,
                    created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    record.id,
                    record.timestamp,
                    record.mode,
                    self._enc.encrypt(record.vitals),
                    self._enc.encrypt(record.profile),
                    self._enc.encrypt(record.prediction),
                    record.risk_score,
                    record.risk_level,
                    record.confidence,
                    record.alert_level,
                    record.created_at,
                ),
            )
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise RepositoryError(f"Failed to save assessment: {exc}") from exc

        logger.info(
            "Saved assessment %s (mode=%s, level=%s)", record.id, record.mode, record.risk_level
        )
        return record.id

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get(self, assessment_id: str) -> AssessmentRecord | None:
        row = self._db.connection.execute(
            "SELECT * FROM assessments WHERE id = ?", (assessment_id,)
        ).fetchone()
        return self._row_to_record(row) if row is not None else None

    def recent(self, limit: int = 50) -> list[AssessmentRecord]:
        """Decrypted assessments, newest first."""
        if limit <= 0:
            return []
        rows = self._db.connection.execute(
            "SELECT * FROM assessments ORDER BY timestamp DESC, created_at DESC LIMIT ?",
            (limit,),
        ).fetchall()
        return [self._row_to_record(row) for row in rows]

    def count(self) -> int:
        row = self._db.connection.execute("SELECT COUNT(*) FROM assessments").fetchone()
        return row[0]

    def get_risk_history(
        self,
        *,
        since: str | None = None,
        limit: int = 50,
    ) -> list[tuple[str, int, str]]:
        """(timestamp, risk_score, risk_level) tuples, newest first.

        Reads only the unencrypted columns.
        """
        query = "SELECT timestamp, risk_score, risk_level FROM assessments"
        params: list[Any] = []
        if since:
            query += " WHERE timestamp >= ?"
            params.append(since)
        query += " ORDER BY timestamp DESC LIMIT ?"
        params.append(limit)

        rows = self._db.connection.execute(query, params).fetchall()
        return [(row[0], row[1], row[2]) for row in rows]

    # ------------------------------------------------------------------
    # Deletion / retention
    # ------------------------------------------------------------------

    def delete_assessment(self, assessment_id: str) -> bool:
        """Delete one assessment. False if no such ID."""
        conn = self._db.connection
        cursor = conn.execute("DELETE FROM assessments WHERE id = ?", (assessment_id,))
        conn.commit()
        if cursor.rowcount == 0:
            return False
        logger.info("Deleted assessment %s", assessment_id)
        return True

    def purge_before(self, before_timestamp: str) -> int:
        """Delete assessments with ``timestamp < before_timestamp``.

        Returns:
            Number of assessments deleted.
        """
        conn = self._db.connection
        cursor = conn.execute(
            "DELETE FROM assessments WHERE timestamp < ?", (before_timestamp,)
        )
        conn.commit()
        deleted = cursor.rowcount
        if deleted:
            logger.info("Purged %d assessments older than %s", deleted, before_timestamp)
        return deleted

    def purge_before_days(self, days: int) -> int:
        """Delete assessments older than ``days`` days."""
        if days < 0:
            raise RepositoryError("days must be non-negative")
        cutoff = (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()
        return self.purge_before(cutoff)

    def delete_all_data(self) -> int:
        """Delete every stored assessment. The audit trail is kept."""
        conn = self._db.connection
        count = self.count()
        conn.execute("DELETE FROM assessments")
        conn.commit()
        logger.warning("Deleted ALL assessment data: %d assessments removed", count)
        return count

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _row_to_record(self, row: Any) -> AssessmentRecord:
        return AssessmentRecord(
            id=row["id"],
            timestamp=row["timestamp"],
            mode=row["mode"],
            vitals=self._enc.decrypt(row["vitals_enc"]) or {},
            profile=self._enc.decrypt(row["profile_enc"] or ""),
            prediction=self._enc.decrypt(row["prediction_enc"]) or {},
            risk_score=row["risk_score"],
            risk_level=row["risk_level"],
            confidence=row["confidence"],
            alert_level=row["alert_level"],
            created_at=row["created_at"],
        )

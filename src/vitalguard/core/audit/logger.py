"""Audit trail for tool calls and deletions.

Every event is PHI-free: tool inputs are reduced to a SHA-256 of their
canonical JSON, and only identifiers, timings and outcome codes are stored.
"""

from __future__ import annotations

import hashlib
import json
import logging
import sqlite3
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from vitalguard.core.storage.database import AssessmentDatabase

logger = logging.getLogger(__name__)


def hash_input(data: Any) -> str:
    """SHA-256 hex digest of canonical JSON, or "" if not serializable."""
    try:
        canonical = json.dumps(data, sort_keys=True, separators=(",", ":"))
    except (TypeError, ValueError):
        return ""
    return hashlib.sha256(canonical.encode()).hexdigest()


@dataclass
class AuditEvent:
    """A single audit log entry."""

    action: str                          # 'tool_invocation' | 'data_delete'
    tool_name: str = ""
    tool_input_hash: str = ""
    prediction_mode: str | None = None   # 'ensemble' | 'simple'
    assessment_id: str | None = None
    duration_ms: float | None = None
    status: str = "success"              # 'success' | 'failure'
    error_type: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class AuditLogger:
    """Writes :class:`AuditEvent` rows to ``audit_log``.

    Each write commits immediately. A failed write is logged and reported as
    an empty event ID; it never fails the tool call being audited.

    Usage::

        audit = AuditLogger(db)
        audit.log_tool_call("assess_vitals", {"heart_rate": 72}, prediction_mode="ensemble")
    """

    def __init__(self, database: AssessmentDatabase) -> None:
        self._db = database

    # ---------------------------------------------------------------
    # Write
    # ---------------------------------------------------------------

    def log_event(self, event: AuditEvent) -> str:
        event_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc).isoformat()
        metadata_json = (
            json.dumps(event.metadata, separators=(",", ":"), default=str)
            if event.metadata
            else None
        )

        try:
            conn = self._db.connection
            conn.execute(
                """INSERT INTO audit_log
                   (id, timestamp, action, tool_name, tool_input_hash,
                    prediction_mode, assessment_id, duration_ms, status,
                    error_type, metadata_json)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    event_id,
                    now,
                    event.action,
                    event.tool_name or None,
                    event.tool_input_hash or None,
                    event.prediction_mode,
                    event.assessment_id,
                    event.duration_ms,
                    event.status,
                    event.error_type,
                    metadata_json,
                ),
            )
            conn.commit()
        except sqlite3.Error:
            logger.exception("Failed to write audit event (action=%s)", event.action)
            return ""

        return event_id

    def log_tool_call(
        self,
        tool_name: str,
        tool_input: Any = None,
        *,
        prediction_mode: str | None = None,
        assessment_id: str | None = None,
        duration_ms: float | None = None,
        status: str = "success",
        error_type: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        """Record one tool invocation. ``tool_input`` is hashed, never stored."""
        return self.log_event(AuditEvent(
            action="tool_invocation",
            tool_name=tool_name,
            tool_input_hash=hash_input(tool_input) if tool_input else "",
            prediction_mode=prediction_mode,
            assessment_id=assessment_id,
            duration_ms=duration_ms,
            status=status,
            error_type=error_type,
            metadata=metadata or {},
        ))

    def log_data_delete(
        self,
        *,
        tool_name: str = "",
        assessment_id: str | None = None,
        count: int = 0,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        return self.log_event(AuditEvent(
            action="data_delete",
            tool_name=tool_name,
            assessment_id=assessment_id,
            metadata={**(metadata or {}), "records_deleted": count},
        ))

    # ---------------------------------------------------------------
    # Read
    # ---------------------------------------------------------------

    def get_events(
        self,
        *,
        action: str | None = None,
        tool_name: str | None = None,
        since: str | None = None,
        limit: int = 50,
    ) -> list[dict[str, Any]]:
        """Audit events matching the filters, newest first."""
        where, params = _filters(action=action, tool_name=tool_name, since=since)
        rows = self._db.connection.execute(
            f"SELECT * FROM audit_log{where} ORDER BY timestamp DESC LIMIT ?",
            [*params, limit],
        ).fetchall()
        return [dict(row) for row in rows]

    def count_events(self, *, action: str | None = None, since: str | None = None) -> int:
        where, params = _filters(action=action, since=since)
        row = self._db.connection.execute(
            f"SELECT COUNT(*) FROM audit_log{where}", params
        ).fetchone()
        return row[0]


def _filters(**values: str | None) -> tuple[str, list[Any]]:
    """WHERE clause for the non-empty filters. ``since`` is a lower bound."""
    clauses: list[str] = []
    params: list[Any] = []
    for column, value in values.items():
        if not value:
            continue
        if column == "since":
            clauses.append("timestamp >= ?")
        else:
            clauses.append(f"{column} = ?")
        params.append(value)
    return (" WHERE " + " AND ".join(clauses)) if clauses else "", params

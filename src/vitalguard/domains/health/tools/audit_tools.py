"""MCP tool for reviewing the audit trail.

The trail holds hashed input references, timings and outcomes only. No
readings or profile data are stored in it.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

if TYPE_CHECKING:
    from vitalguard.core.audit.logger import AuditLogger

logger = logging.getLogger(__name__)


def register_audit_tools(
    mcp: FastMCP,
    audit_logger: AuditLogger,
) -> None:
    """Register audit trail tools on the MCP server."""

    @mcp.tool
    async def audit_summary(
        ctx: Context,
        days: int = 30,
    ) -> str:
        """View recent tool calls and deletions from the audit trail.

        Args:
            days: Number of days to look back (default: 30).
        """
        since = (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()

        recent_events = audit_logger.get_events(since=since, limit=20)
        display_events = [
            {
                "timestamp": event.get("timestamp"),
                "action": event.get("action"),
                "tool_name": event.get("tool_name"),
                "prediction_mode": event.get("prediction_mode"),
                "status": event.get("status"),
                "error_type": event.get("error_type"),
                "duration_ms": event.get("duration_ms"),
            }
            for event in recent_events
        ]

        return json.dumps({
            "status": "ok",
            "period_days": days,
            "total_events": audit_logger.count_events(since=since),
            "deletions": audit_logger.count_events(action="data_delete", since=since),
            "failures": sum(1 for e in display_events if e["status"] == "failure"),
            "recent_events": display_events,
            "note": "This audit trail contains no vital-sign or profile data.",
        }, indent=2)

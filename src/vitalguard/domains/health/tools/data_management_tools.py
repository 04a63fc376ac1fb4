"""MCP tools for deleting stored assessments.

Only registered when persistent history is configured. Every deletion is
written to the audit trail.
"""

from __future__ import annotations

import json
import logging
import time
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

if TYPE_CHECKING:
    from vitalguard.core.audit.logger import AuditLogger
    from vitalguard.core.storage.repository import AssessmentRepository

logger = logging.getLogger(__name__)

CONFIRM_TOKEN = "DELETE_ALL"


def register_data_management_tools(
    mcp: FastMCP,
    repository: AssessmentRepository,
    audit_logger: AuditLogger | None = None,
) -> None:
    """Register data management tools on the MCP server."""

    @mcp.tool
    async def delete_assessment(
        ctx: Context,
        assessment_id: str,
    ) -> str:
        """Permanently delete one stored assessment.

        Args:
            assessment_id: The UUID returned by assess_vitals.
        """
        start_time = time.monotonic()
        deleted = repository.delete_assessment(assessment_id)
        elapsed_ms = (time.monotonic() - start_time) * 1000

        if not deleted:
            return json.dumps({
                "status": "not_found",
                "assessment_id": assessment_id,
                "message": "No assessment found with that ID.",
            })

        if audit_logger is not None:
            audit_logger.log_data_delete(
                tool_name="delete_assessment",
                assessment_id=assessment_id,
                count=1,
            )
        return json.dumps({
            "status": "deleted",
            "assessment_id": assessment_id,
            "duration_ms": round(elapsed_ms, 1),
        })

    @mcp.tool
    async def purge_old_assessments(
        ctx: Context,
        older_than_days: int = 365,
    ) -> str:
        """Delete every assessment older than a number of days.

        Args:
            older_than_days: Delete assessments older than this (default: 365).
        """
        if older_than_days < 1:
            return json.dumps({
                "status": "error",
                "message": "older_than_days must be at least 1.",
            })

        start_time = time.monotonic()
        count = repository.purge_before_days(older_than_days)
        elapsed_ms = (time.monotonic() - start_time) * 1000

        if audit_logger is not None and count > 0:
            audit_logger.log_data_delete(
                tool_name="purge_old_assessments",
                count=count,
                metadata={"older_than_days": older_than_days},
            )

        return json.dumps({
            "status": "purged",
            "assessments_deleted": count,
            "older_than_days": older_than_days,
            "duration_ms": round(elapsed_ms, 1),
        })

    @mcp.tool
    async def delete_all_assessments(
        ctx: Context,
        confirm: str = "",
    ) -> str:
        """Permanently delete ALL stored assessments. Cannot be undone.

        Args:
            confirm: Must be exactly 'DELETE_ALL' to proceed.
        """
        if confirm != CONFIRM_TOKEN:
            return json.dumps({
                "status": "cancelled",
                "message": (
                    f"To delete all assessments, call this tool with confirm='{CONFIRM_TOKEN}'. "
                    "This action cannot be undone."
                ),
            })

        start_time = time.monotonic()
        count = repository.delete_all_data()
        elapsed_ms = (time.monotonic() - start_time) * 1000

        if audit_logger is not None:
            audit_logger.log_data_delete(
                tool_name="delete_all_assessments",
                count=count,
                metadata={"confirmed": True},
            )

        return json.dumps({
            "status": "all_deleted",
            "assessments_deleted": count,
            "duration_ms": round(elapsed_ms, 1),
            "message": "All stored assessments have been permanently deleted.",
        })

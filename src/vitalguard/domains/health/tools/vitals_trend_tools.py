"""MCP tools for trend analysis over stored assessments."""

from __future__ import annotations

import json
import logging
import time
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

from vitalguard.domains.health.domain_logic.risk_models import VITAL_METRICS

if TYPE_CHECKING:
    from vitalguard.core.audit.logger import AuditLogger
    from vitalguard.domains.health.domain_logic.trend_analyzer import TrendAnalyzer

logger = logging.getLogger(__name__)


def register_vitals_trend_tools(
    mcp: FastMCP,
    trend_analyzer: TrendAnalyzer,
    audit_logger: AuditLogger | None = None,
) -> None:
    """Register trend analysis tools on the MCP server."""

    @mcp.tool
    async def vitals_trend_analysis(
        ctx: Context,
        limit: int = 50,
    ) -> str:
        """Analyze how vitals and risk have moved across recent assessments.

        Requires at least 2 stored assessments. Reports direction and
        volatility for each vital and for the risk score, plus any vital that
        has been out of range for three or more readings in a row.

        Args:
            limit: Number of most recent assessments to analyze (default: 50).
        """
        start_time = time.monotonic()
        summary = trend_analyzer.get_history_summary()

        if summary["assessments_available"] < 2:
            return json.dumps({
                "status": "insufficient_data",
                "assessments_available": summary["assessments_available"],
                "message": (
                    "At least 2 assessments are needed for trend analysis. "
                    "Run assess_vitals or simulate_vitals to build history."
                ),
            })

        result = {
            "status": "ok",
            "summary": summary,
            "risk_trend": trend_analyzer.compute_risk_trend(limit=limit),
            "vital_trends": {
                metric: trend_analyzer.compute_vital_trend(metric, limit=limit)
                for metric in VITAL_METRICS
            },
            "abnormal_streaks": trend_analyzer.detect_abnormal_streaks(limit=limit),
        }

        if audit_logger is not None:
            audit_logger.log_tool_call(
                "vitals_trend_analysis",
                {"limit": limit},
                duration_ms=(time.monotonic() - start_time) * 1000,
            )
        return json.dumps(result, indent=2)

    @mcp.tool
    async def vital_metric_trend(
        ctx: Context,
        metric: str,
        limit: int = 50,
    ) -> str:
        """Trend statistics for a single vital sign.

        Args:
            metric: heart_rate | blood_pressure_systolic |
                blood_pressure_diastolic | spo2 | temperature
            limit: Number of most recent assessments to use (default: 50).
        """
        trend = trend_analyzer.compute_vital_trend(metric, limit=limit)
        return json.dumps(trend, indent=2)

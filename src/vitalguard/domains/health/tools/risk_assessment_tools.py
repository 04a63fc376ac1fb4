"""MCP tools for vital-sign risk assessment, simulation and history."""

from __future__ import annotations

import json
import logging
import random
import time
from typing import TYPE_CHECKING, Any

from fastmcp import Context, FastMCP

from vitalguard.core.storage.database import DatabaseError
from vitalguard.core.storage.encryption import EncryptionError
from vitalguard.core.storage.models import AssessmentRecord
from vitalguard.core.storage.repository import RepositoryError
from vitalguard.domains.health.domain_logic.alerts import classify_alert_level
from vitalguard.domains.health.domain_logic.ensemble import AggregationError, EnsemblePrediction
from vitalguard.domains.health.domain_logic.predictor import PREDICTION_MODES, assess
from vitalguard.domains.health.domain_logic.simulator import generate_history
from vitalguard.domains.health.domain_logic.validation import VitalsValidationError

if TYPE_CHECKING:
    from vitalguard.core.audit.logger import AuditLogger
    from vitalguard.core.storage.store import PredictionStore
    from vitalguard.domains.health.domain_logic.predictor import PredictionStrategy

logger = logging.getLogger(__name__)

MAX_SIMULATED_READINGS = 100


def _resolve_mode(mode: str | None, default_mode: str) -> str:
    if mode in (None, ""):
        return default_mode
    if mode not in PREDICTION_MODES:
        raise ValueError(f"mode must be one of: {' | '.join(PREDICTION_MODES)}")
    return mode


def register_risk_assessment_tools(
    mcp: FastMCP,
    predictors: dict[str, PredictionStrategy],
    store: PredictionStore,
    *,
    default_mode: str = "ensemble",
    audit_logger: AuditLogger | None = None,
) -> None:
    """Register assessment, simulation and history tools on the MCP server."""

    def run_assessment(
        tool_name: str,
        payload: dict[str, Any],
        *,
        mode: str,
        temperature_unit: str = "C",
        include_sub_scores: bool = False,
    ) -> dict[str, Any]:
        """Validate, score, classify, persist and audit one reading.

        Validation and aggregation errors propagate to the caller after being
        audited. A failed write to history is logged and the assessment is
        still returned, with ``assessment_id`` set to None.
        """
        start_time = time.monotonic()
        try:
            vitals, profile, prediction = assess(
                payload, predictors[mode], temperature_unit=temperature_unit
            )
        except (VitalsValidationError, AggregationError) as exc:
            if audit_logger is not None:
                audit_logger.log_tool_call(
                    tool_name,
                    payload,
                    prediction_mode=mode,
                    duration_ms=(time.monotonic() - start_time) * 1000,
                    status="failure",
                    error_type=type(exc).__name__,
                )
            raise

        alert_level = classify_alert_level(prediction.risk_level, prediction.predicted_conditions)
        prediction_dict = prediction.to_dict()

        record = AssessmentRecord(
            timestamp=vitals.timestamp,
            mode=mode,
            vitals=vitals.to_dict(),
            profile=profile.to_dict() if profile else None,
            prediction=prediction_dict,
            risk_score=prediction.risk_score,
            risk_level=prediction.risk_level.value,
            confidence=prediction.confidence,
            alert_level=alert_level.value,
        )
        assessment_id: str | None = None
        try:
            assessment_id = store.append(record)
        except (RepositoryError, DatabaseError, EncryptionError):
            logger.exception("Failed to store assessment; returning it unsaved")

        elapsed_ms = (time.monotonic() - start_time) * 1000
        if audit_logger is not None:
            audit_logger.log_tool_call(
                tool_name,
                payload,
                prediction_mode=mode,
                assessment_id=assessment_id,
                duration_ms=elapsed_ms,
                metadata={"risk_level": record.risk_level, "alert_level": record.alert_level},
            )

        result: dict[str, Any] = {
            "assessment_id": assessment_id,
            "mode": mode,
            "vitals": record.vitals,
            "alert_level": alert_level.value,
            "prediction": prediction_dict,
            "duration_ms": round(elapsed_ms, 1),
        }
        if include_sub_scores and isinstance(prediction, EnsemblePrediction):
            result["sub_predictions"] = {
                name: sub.to_dict() for name, sub in prediction.sub_predictions.items()
            }
        return result

    @mcp.tool
    async def assess_vitals(
        ctx: Context,
        heart_rate: float,
        blood_pressure_systolic: float,
        blood_pressure_diastolic: float,
        spo2: float,
        temperature: float,
        age: int | None = None,
        gender: str | None = None,
        name: str | None = None,
        temperature_unit: str = "C",
        mode: str | None = None,
        include_sub_scores: bool = False,
    ) -> str:
        """Assess a set of vital signs and return a health risk prediction.

        The ensemble mode combines cardiovascular, respiratory, metabolic and
        general sub-scores into one verdict with explanations and confidence
        intervals. The simple mode applies a single rule table and explains
        every vital in plain language.

        Args:
            heart_rate: Beats per minute (30-250).
            blood_pressure_systolic: mmHg (70-250).
            blood_pressure_diastolic: mmHg (40-150).
            spo2: Blood oxygen saturation percent (70-100).
            temperature: Body temperature, Celsius unless temperature_unit is 'F'.
            age: Optional age in years (1-120). Ages above 65 raise the risk score.
            gender: Optional: male | female | other | unknown.
            name: Optional display name used in the summary.
            temperature_unit: 'C' (default) or 'F'.
            mode: 'ensemble' or 'simple'. Defaults to the server setting.
            include_sub_scores: Include each sub-scorer's output (ensemble only).
        """
        resolved = _resolve_mode(mode, default_mode)
        payload: dict[str, Any] = {
            "heart_rate": heart_rate,
            "blood_pressure_systolic": blood_pressure_systolic,
            "blood_pressure_diastolic": blood_pressure_diastolic,
            "spo2": spo2,
            "temperature": temperature,
            "age": age,
            "gender": gender,
            "name": name,
        }
        result = run_assessment(
            "assess_vitals",
            payload,
            mode=resolved,
            temperature_unit=temperature_unit,
            include_sub_scores=include_sub_scores,
        )
        return json.dumps(result, indent=2)

    @mcp.tool
    async def simulate_vitals(
        ctx: Context,
        count: int = 1,
        interval_seconds: int = 10,
        assess_latest: bool = False,
        seed: int | None = None,
        mode: str | None = None,
    ) -> str:
        """Generate simulated vital-sign readings for demos and testing.

        Args:
            count: Number of readings, oldest first (1-100).
            interval_seconds: Spacing between readings.
            assess_latest: Also assess and store the most recent reading.
            seed: Optional seed for reproducible readings.
            mode: Prediction mode used when assess_latest is set.
        """
        if not 1 <= count <= MAX_SIMULATED_READINGS:
            raise ValueError(f"count must be between 1 and {MAX_SIMULATED_READINGS}")
        if interval_seconds < 0:
            raise ValueError("interval_seconds must be non-negative")
        resolved = _resolve_mode(mode, default_mode)

        rng = random.Random(seed) if seed is not None else None
        readings = generate_history(count, interval_seconds=interval_seconds, rng=rng)
        result: dict[str, Any] = {
            "status": "ok",
            "count": len(readings),
            "readings": [r.to_dict() for r in readings],
        }
        if assess_latest:
            result["assessment"] = run_assessment(
                "simulate_vitals", readings[-1].to_dict(), mode=resolved
            )
        return json.dumps(result, indent=2)

    @mcp.tool
    async def prediction_history(
        ctx: Context,
        limit: int = 10,
    ) -> str:
        """List recent assessments, newest first.

        Args:
            limit: Maximum number of assessments to return (default: 10).
        """
        if limit < 1:
            raise ValueError("limit must be at least 1")
        records = store.recent(limit)
        return json.dumps({
            "status": "ok" if records else "no_history",
            "total_stored": store.count(),
            "returned": len(records),
            "assessments": [record.summary() for record in records],
        }, indent=2)

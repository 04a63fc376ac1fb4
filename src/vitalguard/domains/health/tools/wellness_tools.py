"""MCP tool for rule-based wellness plans."""

from __future__ import annotations

import json
import logging
import random
import time
from typing import TYPE_CHECKING, Any

from fastmcp import Context, FastMCP

from vitalguard.domains.health.domain_logic.ensemble import AggregationError
from vitalguard.domains.health.domain_logic.risk_models import RiskLevel
from vitalguard.domains.health.domain_logic.validation import (
    VitalsValidationError,
    parse_wellness_request,
)
from vitalguard.domains.health.domain_logic.wellness import WellnessPlanGenerator
from vitalguard.domains.health.tools.risk_assessment_tools import _resolve_mode

if TYPE_CHECKING:
    from vitalguard.core.audit.logger import AuditLogger
    from vitalguard.domains.health.domain_logic.predictor import PredictionStrategy

logger = logging.getLogger(__name__)


def _resolve_risk_level(value: str | None) -> RiskLevel | None:
    if value in (None, ""):
        return None
    try:
        return RiskLevel(value.upper())
    except (AttributeError, ValueError):
        raise ValueError(
            f"risk_level must be one of: {' | '.join(level.value for level in RiskLevel)}"
        ) from None


def register_wellness_tools(
    mcp: FastMCP,
    predictors: dict[str, PredictionStrategy],
    *,
    default_mode: str = "ensemble",
    audit_logger: AuditLogger | None = None,
) -> None:
    """Register the wellness plan tool on the MCP server."""

    @mcp.tool
    async def wellness_plan(
        ctx: Context,
        heart_rate: float,
        blood_pressure_systolic: float,
        blood_pressure_diastolic: float,
        spo2: float,
        temperature: float,
        age: int | None = None,
        gender: str | None = None,
        weight_kg: float | None = None,
        height_cm: float | None = None,
        chronic_conditions: list[str] | None = None,
        temperature_unit: str = "C",
        risk_level: str | None = None,
        mode: str | None = None,
        seed: int | None = None,
    ) -> str:
        """Build a rule-based wellness plan from a set of vital signs.

        Returns focus areas, a meal plan, lifestyle tips and daily nutrition
        targets. BMI advice is included when both weight and height are given.
        The plan is general guidance and is not stored in history.

        Args:
            heart_rate: Beats per minute (30-250).
            blood_pressure_systolic: mmHg (70-250).
            blood_pressure_diastolic: mmHg (40-150).
            spo2: Blood oxygen saturation percent (70-100).
            temperature: Body temperature, Celsius unless temperature_unit is 'F'.
            age: Optional age in years (1-120).
            gender: Optional: male | female | other | unknown.
            weight_kg: Optional body weight in kg (20-300).
            height_cm: Optional height in cm (100-250).
            chronic_conditions: Optional names, e.g. ["diabetes", "arthritis"].
            temperature_unit: 'C' (default) or 'F'.
            risk_level: LOW | MODERATE | HIGH | CRITICAL. Assessed from the
                vitals when omitted.
            mode: Prediction mode used when risk_level is omitted.
            seed: Optional seed for repeatable meal picks.
        """
        start_time = time.monotonic()
        resolved = _resolve_mode(mode, default_mode)
        level = _resolve_risk_level(risk_level)
        payload: dict[str, Any] = {
            "heart_rate": heart_rate,
            "blood_pressure_systolic": blood_pressure_systolic,
            "blood_pressure_diastolic": blood_pressure_diastolic,
            "spo2": spo2,
            "temperature": temperature,
            "age": age,
            "gender": gender,
            "weight_kg": weight_kg,
            "height_cm": height_cm,
            "chronic_conditions": chronic_conditions,
        }

        try:
            vitals, profile, body = parse_wellness_request(
                payload, temperature_unit=temperature_unit
            )
            assessed = level is None
            if assessed:
                level = predictors[resolved].predict(vitals, profile).risk_level
        except (VitalsValidationError, AggregationError) as exc:
            if audit_logger is not None:
                audit_logger.log_tool_call(
                    "wellness_plan",
                    payload,
                    duration_ms=(time.monotonic() - start_time) * 1000,
                    status="failure",
                    error_type=type(exc).__name__,
                )
            raise

        rng = random.Random(seed) if seed is not None else None
        plan = WellnessPlanGenerator(rng).generate(vitals, level, profile, body)

        elapsed_ms = (time.monotonic() - start_time) * 1000
        if audit_logger is not None:
            audit_logger.log_tool_call(
                "wellness_plan",
                payload,
                prediction_mode=resolved if assessed else None,
                duration_ms=elapsed_ms,
                metadata={
                    "risk_level": level.value,
                    "focus_areas": len(plan.health_focus_areas),
                },
            )

        result = plan.to_dict()
        result["risk_level_source"] = "assessed" if assessed else "provided"
        result["duration_ms"] = round(elapsed_ms, 1)
        return json.dumps(result, indent=2)

"""MCP resource describing the scoring models."""

from __future__ import annotations

import json

from fastmcp import FastMCP

from vitalguard.domains.health.domain_logic.alerts import (
    CRITICAL_CONDITIONS,
    HIGH_PRIORITY_CONDITIONS,
)
from vitalguard.domains.health.domain_logic.risk_models import (
    ENSEMBLE_MODEL_VERSION,
    ENSEMBLE_WEIGHTS,
    NORMAL_REFERENCE,
    SIMPLE_MODEL_VERSION,
)
from vitalguard.domains.health.domain_logic.validation import (
    AGE_BOUNDS,
    FAHRENHEIT_BOUNDS,
    VITAL_BOUNDS,
)


def register_model_info_resources(mcp: FastMCP, default_mode: str) -> None:
    """Register the model reference resource on the MCP server."""

    @mcp.resource("vitals://reference/model-info")
    def model_info_resource() -> str:
        """Model versions, ensemble weights, reference points and input bounds."""
        return json.dumps(
            {
                "default_mode": default_mode,
                "models": {
                    "ensemble": {
                        "version": ENSEMBLE_MODEL_VERSION,
                        "weights": ENSEMBLE_WEIGHTS,
                        "risk_levels": {
                            "CRITICAL": ">= 80",
                            "HIGH": ">= 60",
                            "MODERATE": ">= 35",
                            "LOW": "< 35",
                        },
                        "critical_override": (
                            "Any sub-score rated CRITICAL makes the ensemble CRITICAL"
                        ),
                    },
                    "simple": {
                        "version": SIMPLE_MODEL_VERSION,
                        "risk_levels": {
                            "LOW": "<= 25",
                            "MODERATE": "<= 50",
                            "HIGH": "<= 75",
                            "CRITICAL": "> 75",
                        },
                    },
                },
                "normal_reference": NORMAL_REFERENCE,
                "validation_bounds": {
                    **{name: list(bounds) for name, bounds in VITAL_BOUNDS.items()},
                    "temperature_fahrenheit": list(FAHRENHEIT_BOUNDS),
                    "age": list(AGE_BOUNDS),
                },
                "alert_conditions": {
                    "critical": list(CRITICAL_CONDITIONS),
                    "high": list(HIGH_PRIORITY_CONDITIONS),
                },
            },
            indent=2,
        )

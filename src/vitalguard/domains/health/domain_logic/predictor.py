"""Prediction strategies behind one entry point.

Call sites ask for a predictor by mode ('ensemble' or 'simple') and call
``predict`` without knowing which rule set is active.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol, Union, runtime_checkable

from vitalguard.domains.health.domain_logic.confidence import ConfidenceSource
from vitalguard.domains.health.domain_logic.ensemble import (
    EnsembleHealthPredictor,
    EnsemblePrediction,
)
from vitalguard.domains.health.domain_logic.risk_models import UserProfile, VitalsReading
from vitalguard.domains.health.domain_logic.simple_predictor import (
    SimpleHealthPredictor,
    SimplePrediction,
)
from vitalguard.domains.health.domain_logic.validation import parse_assessment_request

logger = logging.getLogger(__name__)

PREDICTION_MODES = ("ensemble", "simple")

Prediction = Union[EnsemblePrediction, SimplePrediction]


@runtime_checkable
class PredictionStrategy(Protocol):
    """Anything that turns a reading into a prediction."""

    name: str

    def predict(self, vitals: VitalsReading, profile: UserProfile | None = None) -> Prediction:
        ...


def create_predictor(
    mode: str = "ensemble", confidence_source: ConfidenceSource | None = None
) -> PredictionStrategy:
    """Build the strategy for ``mode``.

    Raises:
        ValueError: for an unknown mode.
    """
    if mode == "ensemble":
        return EnsembleHealthPredictor(confidence_source=confidence_source)
    if mode == "simple":
        return SimpleHealthPredictor(confidence_source=confidence_source)
    raise ValueError(f"Unknown prediction mode: {mode!r}. Valid: {', '.join(PREDICTION_MODES)}")


def assess(
    payload: dict[str, Any],
    predictor: PredictionStrategy,
    *,
    temperature_unit: str = "C",
) -> tuple[VitalsReading, UserProfile | None, Prediction]:
    """Validate a JSON-like payload and run the strategy on it.

    Raises:
        VitalsValidationError: before any scoring, if the payload is invalid.
        AggregationError: if an ensemble sub-scorer fails.
    """
    vitals, profile = parse_assessment_request(payload, temperature_unit=temperature_unit)
    prediction = predictor.predict(vitals, profile)
    return vitals, profile, prediction

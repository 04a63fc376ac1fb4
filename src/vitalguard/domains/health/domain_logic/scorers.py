"""Domain sub-scorers: cardiovascular, respiratory, metabolic, general.

Every scorer follows the same shape: start at 0, walk a fixed rule table that
adds points and appends a condition plus a recommendation, clamp to [0, 100],
map to a risk level with the scorer's own cut points, and attach
``base + jitter`` as confidence.

Rule order matters only for the order of conditions shown to the user; all
contributions are additive. The branch structure (which rules are ``elif``
chains and which stack) is kept exactly as the product defines it, including
the respiratory and metabolic temperature rules that stack independently.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Protocol, runtime_checkable

from vitalguard.domains.health.domain_logic.confidence import ConfidenceSource, FixedConfidence
from vitalguard.domains.health.domain_logic.risk_models import (
    RiskLevel,
    SubScorePrediction,
    UserProfile,
    VitalsReading,
    clamp,
    is_senior,
)

logger = logging.getLogger(__name__)

AGE_MULTIPLIER = 1.2


@runtime_checkable
class Scorer(Protocol):
    """A domain sub-scorer."""

    name: str

    def score(
        self, vitals: VitalsReading, profile: UserProfile | None = None
    ) -> SubScorePrediction:
        ...


class _RuleScorer(ABC):
    """Shared plumbing: confidence source, result assembly, logging."""

    name = ""
    base_confidence = 0.0
    confidence_span = 0.0

    def __init__(self, confidence_source: ConfidenceSource | None = None) -> None:
        self._confidence = confidence_source or FixedConfidence()

    @abstractmethod
    def score(
        self, vitals: VitalsReading, profile: UserProfile | None = None
    ) -> SubScorePrediction:
        ...

    @abstractmethod
    def _level(self, score: float) -> RiskLevel:
        ...

    def _finish(
        self,
        vitals: VitalsReading,
        score: float,
        conditions: list[str],
        recommendations: list[str],
    ) -> SubScorePrediction:
        score = clamp(score)
        confidence = self.base_confidence + self._confidence.jitter(
            self.name, vitals, self.confidence_span
        )
        prediction = SubScorePrediction(
            risk_score=score,
            risk_level=self._level(score),
            predicted_conditions=conditions,
            recommendations=recommendations,
            confidence=clamp(confidence),
        )
        logger.debug(
            "%s scorer: score=%.1f level=%s conditions=%d",
            self.name, score, prediction.risk_level.value, len(conditions),
        )
        return prediction


# ---------------------------------------------------------------------------
# Cardiovascular
# ---------------------------------------------------------------------------

class CardiovascularScorer(_RuleScorer):
    """Heart rate and blood pressure, scaled up for seniors."""

    name = "cardiovascular"
    base_confidence = 85.0
    confidence_span = 10.0

    def score(
        self, vitals: VitalsReading, profile: UserProfile | None = None
    ) -> SubScorePrediction:
        score = 0.0
        conditions: list[str] = []
        recommendations: list[str] = []

        if vitals.heart_rate > 100:
            score += 30
            conditions.append("Tachycardia Risk")
            recommendations.append(
                "Monitor heart rate regularly and consider stress reduction techniques"
            )
        elif vitals.heart_rate < 60:
            score += 20
            conditions.append("Bradycardia Risk")
            recommendations.append("Consult cardiologist if experiencing dizziness or fatigue")

        if vitals.blood_pressure_systolic > 140 or vitals.blood_pressure_diastolic > 90:
            score += 40
            conditions.append("Hypertension")
            recommendations.append("Immediate lifestyle changes and medical consultation required")

        # Applied to the running total, before clamping
        if is_senior(profile):
            score *= AGE_MULTIPLIER

        return self._finish(vitals, score, conditions, recommendations)

    def _level(self, score: float) -> RiskLevel:
        if score > 60:
            return RiskLevel.HIGH
        if score > 30:
            return RiskLevel.MODERATE
        return RiskLevel.LOW


# ---------------------------------------------------------------------------
# Respiratory
# ---------------------------------------------------------------------------

class RespiratoryScorer(_RuleScorer):
    """Oxygen saturation, plus fever stacking on top of any SpO2 finding."""

    name = "respiratory"
    base_confidence = 88.0
    confidence_span = 8.0

    def score(
        self, vitals: VitalsReading, profile: UserProfile | None = None
    ) -> SubScorePrediction:
        score = 0.0
        conditions: list[str] = []
        recommendations: list[str] = []

        if vitals.spo2 < 90:
            score += 50
            conditions.append("Severe Hypoxemia")
            recommendations.append("Seek immediate emergency medical attention")
        elif vitals.spo2 < 95:
            score += 30
            conditions.append("Moderate Hypoxemia")
            recommendations.append("Consult healthcare provider for respiratory evaluation")
        elif vitals.spo2 < 98:
            score += 10
            conditions.append("Mild Oxygen Desaturation")
            recommendations.append("Monitor breathing patterns and ensure good ventilation")

        if vitals.temperature > 38.5:
            score += 15
            conditions.append("Fever-Related Respiratory Stress")
            recommendations.append("Monitor breathing difficulty and stay hydrated")

        return self._finish(vitals, score, conditions, recommendations)

    def _level(self, score: float) -> RiskLevel:
        if score > 50:
            return RiskLevel.CRITICAL
        if score > 25:
            return RiskLevel.HIGH
        if score > 10:
            return RiskLevel.MODERATE
        return RiskLevel.LOW


# ---------------------------------------------------------------------------
# Metabolic
# ---------------------------------------------------------------------------

class MetabolicScorer(_RuleScorer):
    """Body temperature extremes and combined fever/tachycardia stress."""

    name = "metabolic"
    base_confidence = 82.0
    confidence_span = 12.0

    def score(
        self, vitals: VitalsReading, profile: UserProfile | None = None
    ) -> SubScorePrediction:
        score = 0.0
        conditions: list[str] = []
        recommendations: list[str] = []

        if vitals.temperature > 39:
            score += 25
            conditions.append("High Fever")
            recommendations.append(
                "Monitor for signs of infection and consider medical evaluation"
            )
        elif vitals.temperature < 35:
            score += 30
            conditions.append("Hypothermia Risk")
            recommendations.append("Seek immediate medical attention for low body temperature")

        if vitals.heart_rate > 110 and vitals.temperature > 38:
            score += 20
            conditions.append("Metabolic Stress")
            recommendations.append("Rest and monitor vital signs closely")

        return self._finish(vitals, score, conditions, recommendations)

    def _level(self, score: float) -> RiskLevel:
        if score > 40:
            return RiskLevel.HIGH
        if score > 20:
            return RiskLevel.MODERATE
        return RiskLevel.LOW


# ---------------------------------------------------------------------------
# General
# ---------------------------------------------------------------------------

def count_abnormal_indicators(vitals: VitalsReading) -> int:
    """Number of vitals outside their normal band (0-4)."""
    flags = [
        vitals.heart_rate > 100 or vitals.heart_rate < 60,
        vitals.blood_pressure_systolic > 140 or vitals.blood_pressure_systolic < 90,
        vitals.spo2 < 95,
        vitals.temperature > 38 or vitals.temperature < 36,
    ]
    return sum(1 for flag in flags if flag)


class GeneralScorer(_RuleScorer):
    """Cross-system pattern: how many vitals are abnormal at once."""

    name = "general"
    base_confidence = 80.0
    confidence_span = 15.0

    def score(
        self, vitals: VitalsReading, profile: UserProfile | None = None
    ) -> SubScorePrediction:
        score = 0.0
        conditions: list[str] = []
        recommendations: list[str] = []

        abnormal = count_abnormal_indicators(vitals)
        if abnormal >= 3:
            score += 40
            conditions.append("Multiple System Dysfunction")
            recommendations.append("Comprehensive medical evaluation recommended")
        elif abnormal >= 2:
            score += 25
            conditions.append("Multi-System Stress")
            recommendations.append("Monitor all vital signs and consider medical consultation")

        return self._finish(vitals, score, conditions, recommendations)

    def _level(self, score: float) -> RiskLevel:
        if score > 35:
            return RiskLevel.HIGH
        if score > 20:
            return RiskLevel.MODERATE
        return RiskLevel.LOW


def default_scorers(confidence_source: ConfidenceSource | None = None) -> list[Scorer]:
    """The four scorers in ensemble order."""
    return [
        CardiovascularScorer(confidence_source),
        RespiratoryScorer(confidence_source),
        MetabolicScorer(confidence_source),
        GeneralScorer(confidence_source),
    ]

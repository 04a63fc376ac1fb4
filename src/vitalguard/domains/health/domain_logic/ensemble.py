"""Ensemble risk aggregator.

Runs the four domain sub-scorers over one reading and stacks their outputs
into a single verdict:

1. weighted risk score (fixed weights, sum 1.0)
2. risk level, with any CRITICAL sub-verdict forcing CRITICAL
3. conditions merged in first-seen order
4. recommendations merged, ranked by urgency keywords, top 5
5. confidence = weighted sub-confidence x agreement factor

All computation is deterministic given a deterministic confidence source.
The aggregator performs no I/O and is all-or-nothing: if any sub-scorer
fails, no prediction is produced.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Sequence

from vitalguard.domains.health.domain_logic.confidence import ConfidenceSource
from vitalguard.domains.health.domain_logic.confidence_intervals import (
    ConfidenceIntervals,
    compute_confidence_intervals,
)
from vitalguard.domains.health.domain_logic.explainability import generate_explainability
from vitalguard.domains.health.domain_logic.risk_models import (
    ENSEMBLE_MODEL_VERSION,
    ENSEMBLE_WEIGHTS,
    RiskLevel,
    SubScorePrediction,
    UserProfile,
    VitalsReading,
    clamp,
    display_number,
    now_iso,
    round_half_up,
)
from vitalguard.domains.health.domain_logic.scorers import Scorer, default_scorers
from vitalguard.domains.health.domain_logic.validation import validate_vitals

logger = logging.getLogger(__name__)

MAX_RECOMMENDATIONS = 5

URGENT_KEYWORDS = ("immediate", "emergency", "critical", "urgent")
MODERATE_KEYWORDS = ("soon", "consult", "monitor")

# distinct risk levels among sub-predictions -> confidence multiplier
AGREEMENT_FACTORS = {1: 1.0, 2: 0.9, 3: 0.8}
LOW_AGREEMENT_FACTOR = 0.7


class AggregationError(RuntimeError):
    """Raised when a sub-scorer fails; no partial ensemble is produced."""


@dataclass
class EnsemblePrediction:
    """The persisted, displayed unit of one ensemble assessment."""

    risk_score: int
    risk_level: RiskLevel
    predicted_conditions: list[str]
    confidence: int
    recommendations: list[str]
    feedback: str
    explainability: dict[str, Any]
    confidence_intervals: ConfidenceIntervals
    model_contributions: dict[str, dict[str, float]]
    sub_predictions: dict[str, SubScorePrediction] = field(default_factory=dict)
    model_version: str = ENSEMBLE_MODEL_VERSION
    timestamp: str = field(default_factory=now_iso)

    def to_dict(self) -> dict[str, Any]:
        return {
            "risk_score": self.risk_score,
            "risk_level": self.risk_level.value,
            "predicted_conditions": list(self.predicted_conditions),
            "confidence": self.confidence,
            "recommendations": list(self.recommendations),
            "feedback": self.feedback,
            "model_version": self.model_version,
            "explainability": self.explainability,
            "confidenceIntervals": self.confidence_intervals.to_dict(),
            "modelContributions": self.model_contributions,
            "timestamp": self.timestamp,
        }


# ---------------------------------------------------------------------------
# Stacking rules
# ---------------------------------------------------------------------------

def weighted_risk_score(
    predictions: Mapping[str, SubScorePrediction], weights: Mapping[str, float]
) -> float:
    """Unrounded weighted sum of sub-scores."""
    return sum(predictions[name].risk_score * weight for name, weight in weights.items())


def determine_ensemble_risk_level(
    score: float, predictions: Iterable[SubScorePrediction]
) -> RiskLevel:
    """Critical-overrides-all, then the ensemble cut points."""
    if any(p.risk_level is RiskLevel.CRITICAL for p in predictions):
        return RiskLevel.CRITICAL
    if score >= 80:
        return RiskLevel.CRITICAL
    if score >= 60:
        return RiskLevel.HIGH
    if score >= 35:
        return RiskLevel.MODERATE
    return RiskLevel.LOW


def merge_unique(groups: Iterable[Sequence[str]]) -> list[str]:
    """Concatenate and de-duplicate, keeping first-seen order."""
    return list(dict.fromkeys(item for group in groups for item in group))


def recommendation_urgency(text: str) -> int:
    """3 for urgent wording, 2 for follow-up wording, otherwise 1."""
    lowered = text.lower()
    if any(keyword in lowered for keyword in URGENT_KEYWORDS):
        return 3
    if any(keyword in lowered for keyword in MODERATE_KEYWORDS):
        return 2
    return 1


def combine_recommendations(
    predictions: Iterable[SubScorePrediction], limit: int = MAX_RECOMMENDATIONS
) -> list[str]:
    """Merged recommendations, most urgent first. ``sorted`` is stable, so ties keep order."""
    unique = merge_unique(p.recommendations for p in predictions)
    ranked = sorted(unique, key=recommendation_urgency, reverse=True)
    return ranked[:limit]


def agreement_factor(predictions: Iterable[SubScorePrediction]) -> float:
    distinct = len({p.risk_level for p in predictions})
    return AGREEMENT_FACTORS.get(distinct, LOW_AGREEMENT_FACTOR)


def ensemble_confidence(
    predictions: Mapping[str, SubScorePrediction], weights: Mapping[str, float]
) -> int:
    weighted = sum(predictions[name].confidence * weight for name, weight in weights.items())
    return round_half_up(weighted * agreement_factor(predictions.values()))


def model_contributions(
    predictions: Mapping[str, SubScorePrediction], weights: Mapping[str, float]
) -> dict[str, dict[str, float]]:
    return {
        name: {
            "risk_score": display_number(predictions[name].risk_score),
            "weight": weight,
            "contribution": round_half_up(predictions[name].risk_score * weight),
        }
        for name, weight in weights.items()
    }


def generate_ensemble_feedback(conditions: Sequence[str], risk_level: RiskLevel) -> str:
    """Markdown narrative naming the verdict and each condition."""
    lines = ["## Comprehensive Health Assessment", "", f"**Overall Risk Level:** {risk_level.value}", ""]

    if not conditions:
        lines.append(
            "Excellent news! Our ensemble analysis shows all your vital signs are within "
            "healthy ranges. Multiple specialized models have analyzed your data and found "
            "no significant health concerns."
        )
        lines.append("")
    else:
        plural = "s" if len(conditions) > 1 else ""
        lines.append(
            f"Our ensemble of specialized models has identified {len(conditions)} "
            f"area{plural} requiring attention:"
        )
        lines.append("")
        for index, condition in enumerate(conditions, start=1):
            lines.append(f"{index}. **{condition}**")
        lines.append("")

    lines.append(
        "This assessment combines insights from cardiovascular, respiratory, metabolic, "
        "and general health models."
    )
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Aggregator
# ---------------------------------------------------------------------------

class EnsembleHealthPredictor:
    """Weighted ensemble over the four domain sub-scorers.

    Usage::

        predictor = EnsembleHealthPredictor(confidence_source=SeededConfidence(7))
        result = predictor.predict(vitals, profile)
        result.risk_level  # RiskLevel.HIGH
    """

    name = "ensemble"

    def __init__(
        self,
        *,
        scorers: Sequence[Scorer] | None = None,
        weights: Mapping[str, float] | None = None,
        confidence_source: ConfidenceSource | None = None,
    ) -> None:
        scorer_list = list(scorers) if scorers is not None else default_scorers(confidence_source)
        self.weights = dict(weights or ENSEMBLE_WEIGHTS)
        self.scorers = {s.name: s for s in scorer_list}

        if set(self.scorers) != set(self.weights):
            raise ValueError(
                f"Scorer names {sorted(self.scorers)} do not match weights {sorted(self.weights)}"
            )
        if not math.isclose(sum(self.weights.values()), 1.0):
            raise ValueError(f"Ensemble weights must sum to 1.0, got {sum(self.weights.values())}")

    def run_scorers(
        self, vitals: VitalsReading, profile: UserProfile | None = None
    ) -> dict[str, SubScorePrediction]:
        """Evaluate every sub-scorer.

        The scorers are pure and independent, so evaluation order carries no
        meaning; they run one after another in weight order.

        Raises:
            AggregationError: if any scorer raises.
        """
        results: dict[str, SubScorePrediction] = {}
        for name in self.weights:
            try:
                results[name] = self.scorers[name].score(vitals, profile)
            except Exception as exc:
                raise AggregationError(f"{name} scorer failed: {exc}") from exc
        return results

    def predict(
        self, vitals: VitalsReading, profile: UserProfile | None = None
    ) -> EnsemblePrediction:
        """Score a reading with every sub-scorer and stack the results.

        Raises:
            VitalsValidationError: if the reading is out of range.
            AggregationError: if any sub-scorer fails.
        """
        validate_vitals(vitals)
        predictions = self.run_scorers(vitals, profile)
        subs = list(predictions.values())

        raw_score = weighted_risk_score(predictions, self.weights)
        risk_score = int(clamp(round_half_up(raw_score)))
        risk_level = determine_ensemble_risk_level(raw_score, subs)
        conditions = merge_unique(p.predicted_conditions for p in subs)

        result = EnsemblePrediction(
            risk_score=risk_score,
            risk_level=risk_level,
            predicted_conditions=conditions,
            confidence=ensemble_confidence(predictions, self.weights),
            recommendations=combine_recommendations(subs),
            feedback=generate_ensemble_feedback(conditions, risk_level),
            explainability=generate_explainability(vitals, predictions, risk_level),
            confidence_intervals=compute_confidence_intervals([p.confidence for p in subs]),
            model_contributions=model_contributions(predictions, self.weights),
            sub_predictions=predictions,
        )
        logger.info(
            "Ensemble prediction: score=%d level=%s conditions=%d confidence=%d",
            result.risk_score, result.risk_level.value, len(conditions), result.confidence,
        )
        return result

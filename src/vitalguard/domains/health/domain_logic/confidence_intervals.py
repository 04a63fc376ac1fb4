"""Confidence interval arithmetic over the sub-scorer confidences."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Sequence

from vitalguard.domains.health.domain_logic.risk_models import round_half_up

Z_95 = 1.96


@dataclass
class ConfidenceIntervals:
    """Spread of the sub-scorer confidences."""

    mean_confidence: int
    lower: int
    upper: int
    reliability_score: int
    std_dev: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "mean_confidence": self.mean_confidence,
            "confidence_range": {"lower": self.lower, "upper": self.upper},
            "reliability_score": self.reliability_score,
        }


def compute_confidence_intervals(confidences: Sequence[float]) -> ConfidenceIntervals:
    """Mean, population variance and a 95% range across sub-confidences.

    Identical confidences give zero variance and a range collapsed to the
    mean; that is a valid result.

    Raises:
        ValueError: if ``confidences`` is empty.
    """
    if not confidences:
        raise ValueError("At least one confidence value is required")

    mean = sum(confidences) / len(confidences)
    variance = sum((c - mean) ** 2 for c in confidences) / len(confidences)
    std_dev = math.sqrt(variance)

    consistency = max(0.0, 1 - std_dev / 50)
    reliability = round_half_up(100 * (0.6 * consistency + 0.4 * (mean / 100)))

    return ConfidenceIntervals(
        mean_confidence=round_half_up(mean),
        lower=max(0, round_half_up(mean - Z_95 * std_dev)),
        upper=min(100, round_half_up(mean + Z_95 * std_dev)),
        reliability_score=reliability,
        std_dev=std_dev,
    )

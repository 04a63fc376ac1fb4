"""Confidence jitter sources for the sub-scorers.

Each sub-scorer reports ``base + jitter`` as its confidence. The jitter is
cosmetic (there is no real uncertainty estimate behind it), so it is injected
as a strategy: tests and reproducible deployments use a deterministic source,
demos can opt into real randomness.
"""

from __future__ import annotations

import random
from typing import Protocol, runtime_checkable

from vitalguard.domains.health.domain_logic.risk_models import VitalsReading


@runtime_checkable
class ConfidenceSource(Protocol):
    """Produces the jitter added to a sub-scorer's base confidence."""

    def jitter(self, scorer_name: str, vitals: VitalsReading, span: float) -> float:
        """Return a value in ``[0, span]``."""
        ...


class FixedConfidence:
    """Always returns the same fraction of the span."""

    def __init__(self, fraction: float = 0.5) -> None:
        if not 0.0 <= fraction <= 1.0:
            raise ValueError("fraction must be within [0, 1]")
        self.fraction = fraction

    def jitter(self, scorer_name: str, vitals: VitalsReading, span: float) -> float:
        return span * self.fraction


class SeededConfidence:
    """Deterministic jitter derived from the seed, scorer and measurements.

    The timestamp is excluded so two submissions of the same measurements
    produce the same confidence.
    """

    def __init__(self, seed: int = 0) -> None:
        self.seed = seed

    def jitter(self, scorer_name: str, vitals: VitalsReading, span: float) -> float:
        m = vitals.measurements()
        key = (
            f"{self.seed}:{scorer_name}:{m['heart_rate']}:{m['blood_pressure_systolic']}:"
            f"{m['blood_pressure_diastolic']}:{m['spo2']}:{m['temperature']}"
        )
        return random.Random(key).random() * span


class RandomConfidence:
    """Non-deterministic jitter, for display variety only."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def jitter(self, scorer_name: str, vitals: VitalsReading, span: float) -> float:
        return self._rng.random() * span


def create_confidence_source(mode: str = "seeded", seed: int = 0) -> ConfidenceSource:
    """Build a confidence source by name: 'seeded', 'fixed' or 'random'."""
    if mode == "seeded":
        return SeededConfidence(seed)
    if mode == "fixed":
        return FixedConfidence()
    if mode == "random":
        return RandomConfidence()
    raise ValueError(f"Unknown confidence mode: {mode!r}")

"""Vital-sign risk models and domain constants shared by the scoring engine."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


# ---------------------------------------------------------------------------
# Domain constants
# ---------------------------------------------------------------------------

SCORER_NAMES = [
    "cardiovascular",
    "respiratory",
    "metabolic",
    "general",
]

# Weights sum to 1.0. Cardiovascular dominates because blood pressure and
# heart rate carry the most points in the rule tables.
ENSEMBLE_WEIGHTS = {
    "cardiovascular": 0.3,
    "respiratory": 0.25,
    "metabolic": 0.25,
    "general": 0.2,
}

# Reference points used for deviation-from-normal (explainability)
NORMAL_REFERENCE = {
    "heart_rate": 75,
    "blood_pressure_systolic": 120,
    "blood_pressure_diastolic": 80,
    "spo2": 98,
    "temperature": 36.8,
}

ENSEMBLE_MODEL_VERSION = "v3.0-ensemble"
SIMPLE_MODEL_VERSION = "v1.0-rules"

VITAL_METRICS = [
    "heart_rate",
    "blood_pressure_systolic",
    "blood_pressure_diastolic",
    "spo2",
    "temperature",
]

GENDERS = ("male", "female", "other", "unknown")


class RiskLevel(str, Enum):
    """Ordinal risk category: LOW < MODERATE < HIGH < CRITICAL."""

    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        return _RISK_RANK[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank >= other.rank


_RISK_RANK = {
    RiskLevel.LOW: 0,
    RiskLevel.MODERATE: 1,
    RiskLevel.HIGH: 2,
    RiskLevel.CRITICAL: 3,
}


# ---------------------------------------------------------------------------
# Numeric helpers
# ---------------------------------------------------------------------------

def clamp(value: float, lo: float = 0.0, hi: float = 100.0) -> float:
    """Clamp a value to [lo, hi]."""
    return max(lo, min(hi, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives.

    ``round()`` uses banker's rounding (``round(10.5) == 10``); risk and
    confidence figures are reported with conventional rounding instead.
    """
    return int(math.floor(value + 0.5))


def display_number(value: float) -> int | float:
    """Whole values as int (``84.0`` -> ``84``), others to two decimals."""
    value = float(round(value, 2))
    return int(value) if value.is_integer() else value


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Input types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class VitalsReading:
    """A single set of vital signs. Temperature is always in Celsius."""

    heart_rate: int
    blood_pressure_systolic: int
    blood_pressure_diastolic: int
    spo2: int
    temperature: float
    timestamp: str = field(default_factory=now_iso)

    def measurements(self) -> dict[str, float]:
        """Return the five measurements keyed by metric name."""
        return {
            "heart_rate": self.heart_rate,
            "blood_pressure_systolic": self.blood_pressure_systolic,
            "blood_pressure_diastolic": self.blood_pressure_diastolic,
            "spo2": self.spo2,
            "temperature": self.temperature,
        }

    def to_dict(self) -> dict[str, Any]:
        return {**self.measurements(), "timestamp": self.timestamp}


@dataclass(frozen=True)
class UserProfile:
    """Optional context used to scale age-sensitive rules."""

    age: int | None = None
    gender: str = "unknown"
    name: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"age": self.age, "gender": self.gender, "name": self.name}


@dataclass(frozen=True)
class BodyMetrics:
    """Optional body measurements and known conditions for wellness planning."""

    weight_kg: float | None = None
    height_cm: float | None = None
    chronic_conditions: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "weight_kg": self.weight_kg,
            "height_cm": self.height_cm,
            "chronic_conditions": list(self.chronic_conditions),
        }


def is_senior(profile: UserProfile | None) -> bool:
    """True when the profile carries an age above 65."""
    return profile is not None and profile.age is not None and profile.age > 65


# ---------------------------------------------------------------------------
# Sub-scorer output
# ---------------------------------------------------------------------------

@dataclass
class SubScorePrediction:
    """Output of one domain sub-scorer for one reading."""

    risk_score: float          # 0-100, clamped
    risk_level: RiskLevel
    predicted_conditions: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    confidence: float = 0.0    # 0-100

    def to_dict(self) -> dict[str, Any]:
        return {
            "risk_score": display_number(self.risk_score),
            "risk_level": self.risk_level.value,
            "predicted_conditions": list(self.predicted_conditions),
            "recommendations": list(self.recommendations),
            "confidence": round(self.confidence, 2),
        }

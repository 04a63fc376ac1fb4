"""Persisted form of one assessment."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class AssessmentRecord:
    """One completed assessment as written to history.

    The reading, profile and full prediction payload are encrypted at rest by
    the SQLite repository. The headline numbers stay in plain columns so
    history queries need no decryption.
    """

    timestamp: str  # ISO 8601, taken from the reading
    mode: str  # 'ensemble' | 'simple'
    vitals: dict[str, Any]
    prediction: dict[str, Any]
    risk_score: int
    risk_level: str
    confidence: int
    alert_level: str = "NONE"
    profile: dict[str, Any] | None = None
    id: str = ""
    created_at: str = ""

    def summary(self) -> dict[str, Any]:
        """PHI-light view for listings: no profile, no narrative text."""
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "mode": self.mode,
            "risk_score": self.risk_score,
            "risk_level": self.risk_level,
            "confidence": self.confidence,
            "alert_level": self.alert_level,
            "predicted_conditions": list(self.prediction.get("predicted_conditions", [])),
            "vitals": dict(self.vitals),
        }

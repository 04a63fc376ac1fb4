"""Alert level classification for a finished prediction.

Decides how loudly a result should be surfaced. Delivery (email, SMS,
emergency contacts) is not handled here.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable

from vitalguard.domains.health.domain_logic.risk_models import RiskLevel

CRITICAL_CONDITIONS = (
    "Severe Hypoxemia",
    "Hypertensive Crisis",
    "Hypothermia",
    "Multiple System Dysfunction",
)

HIGH_PRIORITY_CONDITIONS = (
    "Hypertension",
    "Moderate Hypoxemia",
    "High Fever",
    "Tachycardia Risk",
)


class AlertLevel(str, Enum):
    NONE = "NONE"
    MODERATE = "MODERATE"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


def _mentions(conditions: Iterable[str], keywords: Iterable[str]) -> bool:
    keywords = tuple(keywords)
    return any(k in condition for condition in conditions for k in keywords)


def classify_alert_level(risk_level: RiskLevel, conditions: Iterable[str]) -> AlertLevel:
    """Alert level from the verdict, escalated by condition substrings."""
    conditions = list(conditions)
    if risk_level is RiskLevel.CRITICAL or _mentions(conditions, CRITICAL_CONDITIONS):
        return AlertLevel.CRITICAL
    if risk_level is RiskLevel.HIGH or _mentions(conditions, HIGH_PRIORITY_CONDITIONS):
        return AlertLevel.HIGH
    if risk_level is RiskLevel.MODERATE:
        return AlertLevel.MODERATE
    return AlertLevel.NONE

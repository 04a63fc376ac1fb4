"""Trend analysis over stored assessment history.

Works from any :class:`PredictionStore`, so the same statistics come out of
the in-memory window and the encrypted SQLite history.
"""

from __future__ import annotations

import logging
import statistics
from typing import Any

from vitalguard.core.storage.models import AssessmentRecord
from vitalguard.core.storage.store import PredictionStore
from vitalguard.domains.health.domain_logic.risk_models import VITAL_METRICS

logger = logging.getLogger(__name__)

# Inclusive healthy bands used for streak detection
NORMAL_RANGES = {
    "heart_rate": (60, 100),
    "blood_pressure_systolic": (90, 140),
    "blood_pressure_diastolic": (60, 90),
    "spo2": (95, 100),
    "temperature": (36.0, 38.0),
}

DEAD_BAND_FRACTION = 0.02
MIN_STREAK = 3


def _direction(values: list[float], rising: str, falling: str) -> str:
    """Compare the recent half with the older half (values newest first).

    A difference within 2% of the overall mean counts as stable.
    """
    if len(values) < 2:
        return "insufficient_data"
    if len(values) >= 4:
        mid = len(values) // 2
        diff = statistics.mean(values[:mid]) - statistics.mean(values[mid:])
    else:
        diff = values[0] - values[-1]

    band = abs(statistics.mean(values)) * DEAD_BAND_FRACTION
    if diff > band:
        return rising
    if diff < -band:
        return falling
    return "stable"


def _stats(values: list[float]) -> dict[str, Any]:
    mean_val = statistics.mean(values)
    std_val = statistics.stdev(values) if len(values) > 1 else 0.0
    volatility = std_val / mean_val if mean_val > 0 else 0.0
    return {
        "current": round(values[0], 4),
        "mean": round(mean_val, 4),
        "median": round(statistics.median(values), 4),
        "min": round(min(values), 4),
        "max": round(max(values), 4),
        "std_dev": round(std_val, 4),
        "volatility": round(volatility, 4),
        "data_points": len(values),
    }


def is_abnormal(metric: str, value: float) -> bool:
    low, high = NORMAL_RANGES[metric]
    return value < low or value > high


class TrendAnalyzer:
    """Trend statistics and abnormal streaks from assessment history.

    Usage::

        analyzer = TrendAnalyzer(store)
        analyzer.compute_vital_trend("heart_rate", limit=20)
        analyzer.compute_risk_trend()
        analyzer.detect_abnormal_streaks()
    """

    def __init__(self, store: PredictionStore) -> None:
        self._store = store

    def _history(self, limit: int) -> list[AssessmentRecord]:
        return self._store.recent(limit)

    def compute_vital_trend(self, metric: str, *, limit: int = 50) -> dict[str, Any]:
        """Statistics for one vital, newest reading as ``current``.

        Raises:
            ValueError: for an unknown metric name.
        """
        if metric not in VITAL_METRICS:
            raise ValueError(f"Invalid metric: {metric!r}. Valid: {', '.join(VITAL_METRICS)}")

        values = [
            float(record.vitals[metric])
            for record in self._history(limit)
            if record.vitals.get(metric) is not None
        ]
        if not values:
            return {"metric": metric, "data_points": 0, "status": "no_data"}

        return {
            "metric": metric,
            **_stats(values),
            "direction": _direction(values, "increasing", "decreasing"),
        }

    def compute_risk_trend(self, *, limit: int = 50) -> dict[str, Any]:
        """Statistics on stored risk scores; falling risk reads as improving."""
        records = self._history(limit)
        if not records:
            return {"metric": "risk_score", "data_points": 0, "status": "no_data"}

        values = [float(record.risk_score) for record in records]
        levels: dict[str, int] = {}
        for record in records:
            levels[record.risk_level] = levels.get(record.risk_level, 0) + 1

        return {
            "metric": "risk_score",
            **_stats(values),
            "direction": _direction(values, "worsening", "improving"),
            "current_level": records[0].risk_level,
            "level_counts": levels,
        }

    def detect_abnormal_streaks(self, *, limit: int = 50) -> list[dict[str, Any]]:
        """Metrics whose latest consecutive readings are all out of range.

        Only streaks of at least three readings are reported.
        """
        records = self._history(limit)
        streaks = []

        for metric in VITAL_METRICS:
            run: list[float] = []
            for record in records:
                value = record.vitals.get(metric)
                if value is None or not is_abnormal(metric, value):
                    break
                run.append(value)

            if len(run) >= MIN_STREAK:
                low, high = NORMAL_RANGES[metric]
                streaks.append({
                    "metric": metric,
                    "length": len(run),
                    "latest": run[0],
                    "normal_range": [low, high],
                    "description": (
                        f"{_display(metric)} has been outside {low}-{high} "
                        f"for the last {len(run)} readings."
                    ),
                })

        if streaks:
            logger.info("Detected %d abnormal streak(s)", len(streaks))
        return streaks

    def get_history_summary(self) -> dict[str, Any]:
        count = self._store.count()
        if count == 0:
            return {"assessments_available": 0, "status": "no_history"}

        records = self._store.recent(count)
        latest, oldest = records[0], records[-1]
        return {
            "assessments_available": count,
            "latest_timestamp": latest.timestamp,
            "oldest_timestamp": oldest.timestamp,
            "latest_risk_level": latest.risk_level,
            "latest_mode": latest.mode,
        }


def _display(metric: str) -> str:
    return metric.replace("_", " ").capitalize()

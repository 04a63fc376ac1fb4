"""Simulated vital-sign readings for demos and development.

Values drift slowly with wall-clock time (sine terms on epoch milliseconds)
plus uniform noise, and always land inside the accepted input bounds.
"""

from __future__ import annotations

import math
import random
from datetime import datetime, timedelta, timezone

from vitalguard.domains.health.domain_logic.risk_models import VitalsReading, round_half_up


def generate_vitals(
    rng: random.Random | None = None, now: datetime | None = None
) -> VitalsReading:
    """Return one simulated reading taken at ``now`` (default: current UTC time)."""
    rng = rng or random.Random()
    now = now or datetime.now(timezone.utc)
    t = now.timestamp() * 1000

    return VitalsReading(
        heart_rate=round_half_up(60 + rng.random() * 40 + math.sin(t / 10000) * 15),
        blood_pressure_systolic=round_half_up(110 + rng.random() * 30 + math.sin(t / 15000) * 10),
        blood_pressure_diastolic=round_half_up(70 + rng.random() * 20 + math.sin(t / 12000) * 8),
        spo2=round_half_up(96 + rng.random() * 4),
        temperature=round_half_up((36.5 + rng.random() * 1.5) * 10) / 10,
        timestamp=now.isoformat(),
    )


def generate_history(
    count: int,
    *,
    interval_seconds: int = 10,
    rng: random.Random | None = None,
    now: datetime | None = None,
) -> list[VitalsReading]:
    """Return ``count`` back-dated readings, oldest first, ending at ``now``."""
    if count < 0:
        raise ValueError("count must be non-negative")
    rng = rng or random.Random()
    now = now or datetime.now(timezone.utc)
    return [
        generate_vitals(rng, now - timedelta(seconds=(count - 1 - i) * interval_seconds))
        for i in range(count)
    ]

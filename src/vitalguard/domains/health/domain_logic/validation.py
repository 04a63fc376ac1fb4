"""Input validation for vital-sign payloads.

Collects every field problem before raising, so a caller sees all of them at
once. Inputs are never clamped or coerced into range: anything outside the
accepted bounds is rejected.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from vitalguard.domains.health.domain_logic.risk_models import (
    GENDERS,
    BodyMetrics,
    UserProfile,
    VitalsReading,
)

logger = logging.getLogger(__name__)

# (low, high) inclusive
VITAL_BOUNDS: dict[str, tuple[float, float]] = {
    "heart_rate": (30, 250),
    "blood_pressure_systolic": (70, 250),
    "blood_pressure_diastolic": (40, 150),
    "spo2": (70, 100),
    "temperature": (32.0, 45.0),
}

FAHRENHEIT_BOUNDS = (89.6, 113.0)
AGE_BOUNDS = (1, 120)
WEIGHT_BOUNDS = (20.0, 300.0)  # kg
HEIGHT_BOUNDS = (100.0, 250.0)  # cm

_UNITS = {
    "heart_rate": "bpm",
    "blood_pressure_systolic": "mmHg",
    "blood_pressure_diastolic": "mmHg",
    "spo2": "%",
    "temperature": "°C",
}

_INTEGER_FIELDS = {
    "heart_rate",
    "blood_pressure_systolic",
    "blood_pressure_diastolic",
    "spo2",
}


class VitalsValidationError(ValueError):
    """Raised when a vitals payload is missing fields or out of range."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("Invalid vitals: " + "; ".join(self.errors))


def fahrenheit_to_celsius(value: float) -> float:
    """Convert a Fahrenheit temperature to Celsius."""
    return (value - 32) * 5 / 9


def _as_number(name: str, value: Any, errors: list[str]) -> float | None:
    if value is None:
        errors.append(f"{name} is required")
        return None
    # bool is an int subclass; never accept True/False as a measurement
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        errors.append(f"{name} must be a number, got {type(value).__name__}")
        return None
    try:
        finite = math.isfinite(value)
    except OverflowError:
        # ints beyond float range
        finite = False
    if not finite:
        errors.append(f"{name} must be a finite number")
        return None
    return value


def _check_bounds(name: str, value: float, errors: list[str]) -> None:
    lo, hi = VITAL_BOUNDS[name]
    if value < lo or value > hi:
        errors.append(
            f"{name} must be between {lo:g} and {hi:g} {_UNITS[name]}, got {value:g}"
        )


def _check_whole(name: str, value: float, errors: list[str]) -> bool:
    if name in _INTEGER_FIELDS and float(value) != int(value):
        errors.append(f"{name} must be a whole number, got {value:g}")
        return False
    return True


def parse_vitals(
    payload: dict[str, Any], *, temperature_unit: str = "C"
) -> tuple[VitalsReading | None, list[str]]:
    """Build a VitalsReading from a JSON-like dict.

    Returns: (reading_or_none, errors)
    """
    errors: list[str] = []
    if temperature_unit is None:
        temperature_unit = "C"
    if not isinstance(temperature_unit, str):
        return None, [
            f"temperature_unit must be 'C' or 'F', got {type(temperature_unit).__name__}"
        ]
    unit = temperature_unit.upper() or "C"
    if unit not in ("C", "F"):
        return None, [f"temperature_unit must be 'C' or 'F', got {temperature_unit!r}"]

    values: dict[str, float] = {}
    for name in VITAL_BOUNDS:
        value = _as_number(name, payload.get(name), errors)
        if value is None:
            continue

        if name == "temperature" and unit == "F":
            lo, hi = FAHRENHEIT_BOUNDS
            if value < lo or value > hi:
                errors.append(
                    f"temperature must be between {lo:g} and {hi:g} °F, got {value:g}"
                )
                continue
            value = round(fahrenheit_to_celsius(value), 2)

        if not _check_whole(name, value, errors):
            continue
        _check_bounds(name, value, errors)
        values[name] = value

    if errors:
        return None, errors

    kwargs: dict[str, Any] = {
        "heart_rate": int(values["heart_rate"]),
        "blood_pressure_systolic": int(values["blood_pressure_systolic"]),
        "blood_pressure_diastolic": int(values["blood_pressure_diastolic"]),
        "spo2": int(values["spo2"]),
        "temperature": float(values["temperature"]),
    }
    if payload.get("timestamp"):
        kwargs["timestamp"] = str(payload["timestamp"])
    return VitalsReading(**kwargs), []


def parse_profile(payload: dict[str, Any]) -> tuple[UserProfile | None, list[str]]:
    """Build an optional UserProfile from ``age``/``gender``/``name`` keys.

    Returns: (profile_or_none, errors). The profile is None when none of the
    keys are present.
    """
    age = payload.get("age")
    gender = payload.get("gender")
    name = payload.get("name")
    if age is None and gender in (None, "") and not name:
        return None, []

    errors: list[str] = []
    if age is not None:
        number = _as_number("age", age, errors)
        if number is not None:
            if float(number) != int(number):
                errors.append(f"age must be a whole number, got {age!r}")
            elif not AGE_BOUNDS[0] <= number <= AGE_BOUNDS[1]:
                errors.append(
                    f"age must be between {AGE_BOUNDS[0]} and {AGE_BOUNDS[1]}, got {age}"
                )

    if gender in (None, ""):
        gender = "unknown"
    elif not isinstance(gender, str) or gender.lower() not in GENDERS:
        errors.append(f"gender must be one of {', '.join(GENDERS)}, got {gender!r}")

    if errors:
        return None, errors

    return UserProfile(
        age=int(age) if age is not None else None,
        gender=gender.lower(),
        name=str(name or ""),
    ), []


def parse_assessment_request(
    payload: dict[str, Any], *, temperature_unit: str = "C"
) -> tuple[VitalsReading, UserProfile | None]:
    """Parse a full assessment request (vitals plus optional profile).

    Raises:
        VitalsValidationError: listing every problem found.
    """
    if not isinstance(payload, dict):
        raise VitalsValidationError(["payload must be a JSON object"])

    reading, errors = parse_vitals(payload, temperature_unit=temperature_unit)
    profile, profile_errors = parse_profile(payload)
    errors.extend(profile_errors)
    if errors:
        logger.info("Rejected vitals payload: %d validation error(s)", len(errors))
        raise VitalsValidationError(errors)

    assert reading is not None  # for type checkers
    return reading, profile


def validate_vitals(reading: VitalsReading) -> None:
    """Re-check a constructed reading against the accepted bounds.

    Raises:
        VitalsValidationError: if any measurement is out of range.
    """
    errors: list[str] = []
    for name, value in reading.measurements().items():
        number = _as_number(name, value, errors)
        if number is None:
            continue
        if _check_whole(name, number, errors):
            _check_bounds(name, number, errors)
    if errors:
        raise VitalsValidationError(errors)


def parse_body_metrics(payload: dict[str, Any]) -> tuple[BodyMetrics, list[str]]:
    """Optional ``weight_kg``, ``height_cm`` and ``chronic_conditions`` keys.

    Condition names are lower-cased with spaces turned into underscores, so
    "Heart Disease" and "heart_disease" match the same rules.
    """
    errors: list[str] = []
    measured: dict[str, float | None] = {}
    for key, (lo, hi) in (("weight_kg", WEIGHT_BOUNDS), ("height_cm", HEIGHT_BOUNDS)):
        raw = payload.get(key)
        if raw is None:
            measured[key] = None
            continue
        number = _as_number(key, raw, errors)
        if number is not None and not lo <= number <= hi:
            errors.append(f"{key} must be between {lo:g} and {hi:g}, got {number:g}")
            number = None
        measured[key] = float(number) if number is not None else None

    conditions: list[str] = []
    raw_conditions = payload.get("chronic_conditions") or []
    if isinstance(raw_conditions, str) or not isinstance(raw_conditions, (list, tuple)):
        errors.append("chronic_conditions must be a list of names")
    else:
        for item in raw_conditions:
            if not isinstance(item, str) or not item.strip():
                errors.append(f"chronic_conditions entries must be non-empty strings, got {item!r}")
                continue
            key = "_".join(item.strip().lower().split())
            if key not in conditions:
                conditions.append(key)

    return BodyMetrics(
        weight_kg=measured["weight_kg"],
        height_cm=measured["height_cm"],
        chronic_conditions=tuple(conditions),
    ), errors


def parse_wellness_request(
    payload: dict[str, Any], *, temperature_unit: str = "C"
) -> tuple[VitalsReading, UserProfile | None, BodyMetrics]:
    """Parse vitals, profile and body metrics together.

    Raises:
        VitalsValidationError: listing every problem across all three.
    """
    if not isinstance(payload, dict):
        raise VitalsValidationError(["payload must be a JSON object"])

    reading, errors = parse_vitals(payload, temperature_unit=temperature_unit)
    profile, profile_errors = parse_profile(payload)
    body, body_errors = parse_body_metrics(payload)
    errors.extend(profile_errors)
    errors.extend(body_errors)
    if errors:
        logger.info("Rejected wellness payload: %d validation error(s)", len(errors))
        raise VitalsValidationError(errors)

    assert reading is not None  # for type checkers
    return reading, profile, body

"""Single-pass rules predictor with plain-language explanations.

The lightweight alternative to the ensemble: one rule table on a single
0-100 scale, its own cut points (LOW <= 25, MODERATE <= 50, HIGH <= 75,
CRITICAL above), and a per-vital explanation for every reading whether or not
it is abnormal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from vitalguard.domains.health.domain_logic.confidence import ConfidenceSource, FixedConfidence
from vitalguard.domains.health.domain_logic.risk_models import (
    SIMPLE_MODEL_VERSION,
    RiskLevel,
    UserProfile,
    VitalsReading,
    is_senior,
    now_iso,
    round_half_up,
)
from vitalguard.domains.health.domain_logic.validation import validate_vitals

logger = logging.getLogger(__name__)

BASE_CONFIDENCE = 85.0
CONFIDENCE_SPAN = 10.0
AGE_MULTIPLIER = 1.2

# (description, urgency) per level
LEVEL_TEXT = {
    RiskLevel.LOW: ("Your vital signs look good overall", "Continue your healthy habits"),
    RiskLevel.MODERATE: (
        "Some vital signs need attention",
        "Consider lifestyle changes and monitoring",
    ),
    RiskLevel.HIGH: (
        "Several vital signs are concerning",
        "Recommend consulting a healthcare provider soon",
    ),
    RiskLevel.CRITICAL: (
        "Multiple vital signs require immediate attention",
        "Seek medical care immediately",
    ),
}

SUMMARY_TEXT = {
    RiskLevel.LOW: "minor attention needed",
    RiskLevel.MODERATE: "some monitoring recommended",
    RiskLevel.HIGH: "medical consultation advised",
    RiskLevel.CRITICAL: "immediate medical attention required",
}


@dataclass
class SimplePrediction:
    """Result of the single-pass rules predictor."""

    risk_score: int
    risk_level: RiskLevel
    risk_description: str
    urgency_level: str
    predicted_conditions: list[str]
    confidence: int
    feedback: str
    detailed_explanations: list[str]
    recommendations: list[str]
    summary: str
    model_version: str = SIMPLE_MODEL_VERSION
    timestamp: str = field(default_factory=now_iso)

    def to_dict(self) -> dict[str, Any]:
        return {
            "risk_score": self.risk_score,
            "risk_level": self.risk_level.value,
            "risk_description": self.risk_description,
            "urgency_level": self.urgency_level,
            "predicted_conditions": list(self.predicted_conditions),
            "confidence": self.confidence,
            "feedback": self.feedback,
            "detailed_explanations": list(self.detailed_explanations),
            "recommendations": list(self.recommendations),
            "summary": self.summary,
            "model_version": self.model_version,
            "timestamp": self.timestamp,
        }


def simple_risk_level(score: float) -> RiskLevel:
    if score <= 25:
        return RiskLevel.LOW
    if score <= 50:
        return RiskLevel.MODERATE
    if score <= 75:
        return RiskLevel.HIGH
    return RiskLevel.CRITICAL


def _fmt(value: float) -> str:
    return f"{value:g}"


class SimpleHealthPredictor:
    """Rules predictor on a single 0-100 scale.

    Usage::

        predictor = SimpleHealthPredictor()
        result = predictor.predict(vitals, UserProfile(age=70))
    """

    name = "simple"

    def __init__(self, confidence_source: ConfidenceSource | None = None) -> None:
        self._confidence = confidence_source or FixedConfidence()

    def predict(
        self, vitals: VitalsReading, profile: UserProfile | None = None
    ) -> SimplePrediction:
        """Score a reading with the single rule table.

        Raises:
            VitalsValidationError: if the reading is out of range.
        """
        validate_vitals(vitals)

        score = 0
        conditions: list[str] = []
        recommendations: list[str] = []
        explanations: list[str] = []

        hr = vitals.heart_rate
        systolic = vitals.blood_pressure_systolic
        diastolic = vitals.blood_pressure_diastolic
        temp = _fmt(vitals.temperature)

        # --- Heart rate ---
        if hr > 100:
            score += 25
            conditions.append("Fast Heart Rate (Tachycardia)")
            explanations.append(
                f"Your heart rate of {hr} beats per minute is higher than the normal resting "
                "range (60-100 bpm). This could indicate stress, anxiety, dehydration, or "
                "physical activity."
            )
            recommendations.append(
                "Consider relaxation techniques, stay hydrated, and avoid caffeine. "
                "If persistent, consult a healthcare provider."
            )
        elif hr < 60:
            score += 15
            conditions.append("Slow Heart Rate (Bradycardia)")
            explanations.append(
                f"Your heart rate of {hr} beats per minute is lower than the typical range. "
                "This might be normal if you're very fit, but could also indicate heart "
                "rhythm issues."
            )
            recommendations.append(
                "If you're not an athlete and feel dizzy or tired, consider consulting a "
                "healthcare provider."
            )
        else:
            explanations.append(
                f"Your heart rate of {hr} beats per minute is within the healthy range "
                "(60-100 bpm)."
            )

        # --- Blood pressure ---
        if systolic > 140 or diastolic > 90:
            score += 30
            conditions.append("High Blood Pressure (Hypertension)")
            explanations.append(
                f"Your blood pressure reading of {systolic}/{diastolic} mmHg is elevated. "
                "Normal blood pressure is typically below 120/80 mmHg."
            )
            recommendations.append(
                "Reduce salt intake, exercise regularly, manage stress, and limit alcohol. "
                "Monitor regularly and consult a healthcare provider."
            )
        elif systolic < 90:
            score += 20
            conditions.append("Low Blood Pressure (Hypotension)")
            explanations.append(
                f"Your systolic blood pressure of {systolic} mmHg is lower than normal. "
                "This might cause dizziness or fainting."
            )
            recommendations.append(
                "Stay hydrated, eat small frequent meals, and avoid sudden position changes. "
                "Consult a healthcare provider if you feel unwell."
            )
        else:
            explanations.append(
                f"Your blood pressure of {systolic}/{diastolic} mmHg is within the healthy range."
            )

        # --- SpO2 ---
        if vitals.spo2 < 95:
            score += 40
            conditions.append("Low Blood Oxygen (Severe Hypoxemia)")
            explanations.append(
                f"Your blood oxygen level of {vitals.spo2}% is significantly below normal "
                "(95-100%). This means your blood isn't carrying enough oxygen to your organs."
            )
            recommendations.append(
                "This requires immediate medical attention. Seek emergency care if you're "
                "experiencing shortness of breath or chest pain."
            )
        elif vitals.spo2 < 98:
            score += 10
            conditions.append("Slightly Low Blood Oxygen")
            explanations.append(
                f"Your blood oxygen level of {vitals.spo2}% is slightly below optimal "
                "(98-100%). This might indicate mild breathing issues or high altitude effects."
            )
            recommendations.append(
                "Monitor your breathing, ensure good ventilation, and consult a healthcare "
                "provider if you have respiratory symptoms."
            )
        else:
            explanations.append(
                f"Your blood oxygen level of {vitals.spo2}% is excellent, indicating your "
                "lungs and heart are working well together."
            )

        # --- Temperature ---
        if vitals.temperature > 38:
            score += 15
            conditions.append("Fever/High Body Temperature")
            explanations.append(
                f"Your body temperature of {temp}°C is above normal (36.1-37.2°C). "
                "This typically indicates your body is fighting an infection."
            )
            recommendations.append(
                "Rest, stay hydrated, and monitor your temperature. Consult a healthcare "
                "provider if fever persists or you feel very unwell."
            )
        elif vitals.temperature < 36:
            score += 20
            conditions.append("Low Body Temperature (Hypothermia)")
            explanations.append(
                f"Your body temperature of {temp}°C is below normal. This could indicate "
                "exposure to cold or other health issues."
            )
            recommendations.append(
                "Warm up gradually, wear appropriate clothing, and seek medical attention "
                "if you feel confused or very cold."
            )
        else:
            explanations.append(
                f"Your body temperature of {temp}°C is normal, indicating good metabolic function."
            )

        if is_senior(profile):
            score = round_half_up(score * AGE_MULTIPLIER)
            explanations.append(
                "As we age, our bodies may be more sensitive to changes in vital signs, "
                "so we're being extra cautious with your assessment."
            )

        risk_level = simple_risk_level(score)
        description, urgency = LEVEL_TEXT[risk_level]
        confidence = round_half_up(
            BASE_CONFIDENCE + self._confidence.jitter(self.name, vitals, CONFIDENCE_SPAN)
        )

        result = SimplePrediction(
            risk_score=min(score, 100),
            risk_level=risk_level,
            risk_description=description,
            urgency_level=urgency,
            predicted_conditions=conditions,
            confidence=confidence,
            feedback=_feedback(vitals, conditions, risk_level, explanations, recommendations),
            detailed_explanations=explanations,
            recommendations=recommendations,
            summary=_summary(profile, risk_level, len(conditions)),
        )
        logger.info(
            "Simple prediction: score=%d level=%s conditions=%d",
            result.risk_score, risk_level.value, len(conditions),
        )
        return result


def _feedback(
    vitals: VitalsReading,
    conditions: list[str],
    risk_level: RiskLevel,
    explanations: list[str],
    recommendations: list[str],
) -> str:
    if not conditions:
        return (
            "Great news! All your vital signs are within healthy ranges. "
            f"Your heart rate ({vitals.heart_rate} bpm), blood pressure "
            f"({vitals.blood_pressure_systolic}/{vitals.blood_pressure_diastolic} mmHg), "
            f"oxygen levels ({vitals.spo2}%), and body temperature "
            f"({_fmt(vitals.temperature)}°C) all look good. Keep up your healthy lifestyle!"
        )

    parts = [
        "Based on your vital signs, here's what we found:",
        "",
        f"**Primary Finding:** {conditions[0]}",
        explanations[0],
        "",
    ]
    if risk_level is RiskLevel.CRITICAL:
        parts += [
            "**Important:** This requires immediate medical attention. Please contact a "
            "healthcare provider or emergency services right away.",
            "",
        ]
    elif risk_level is RiskLevel.HIGH:
        parts += [
            "**Recommendation:** We suggest scheduling an appointment with your healthcare "
            "provider within the next few days to discuss these findings.",
            "",
        ]
    elif risk_level is RiskLevel.MODERATE:
        parts += [
            "**Suggestion:** Consider monitoring these values and making some lifestyle "
            "adjustments. If symptoms persist, consult your healthcare provider.",
            "",
        ]

    if recommendations:
        parts.append(f"**What you can do:** {recommendations[0]}")
    return "\n".join(parts)


def _summary(profile: UserProfile | None, risk_level: RiskLevel, condition_count: int) -> str:
    name = (profile.name if profile and profile.name else "") or "Patient"
    if condition_count == 0:
        return (
            f"{name}'s health assessment shows all vital signs within normal ranges. "
            "Overall health status appears good."
        )
    plural = "s" if condition_count > 1 else ""
    return (
        f"{name}'s assessment shows {condition_count} area{plural} of concern "
        f"with {SUMMARY_TEXT[risk_level]}."
    )

"""Explainability for ensemble predictions.

Feature importance is a deviation-from-normal heuristic, not a model
attribution: ``|actual - reference| / reference`` scaled by a fixed
per-feature coefficient and clamped to [0, 1].
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from vitalguard.domains.health.domain_logic.risk_models import (
    NORMAL_REFERENCE,
    RiskLevel,
    SubScorePrediction,
    VitalsReading,
    clamp,
    round_half_up,
)

FEATURE_COEFFICIENTS = {
    "heart_rate": 0.3,
    "blood_pressure": 0.35,
    "spo2": 0.25,
    "temperature": 0.1,
}

KEY_FACTOR_THRESHOLD = 0.2

DECISION_PATH = {
    "step1": "Vital signs preprocessed and normalized",
    "step2": "Four specialized models analyzed different health aspects",
    "step3": "Individual model predictions weighted and combined",
    "step4": "Ensemble prediction generated with confidence intervals",
    "step5": "Explainability features calculated for transparency",
}

_REASONING_LABELS = {
    "cardiovascular": "Heart and circulation analysis",
    "respiratory": "Breathing and oxygen analysis",
    "metabolic": "Metabolism and temperature analysis",
    "general": "Overall health pattern analysis",
}


@dataclass
class FeatureImportance:
    importance_score: float
    impact_description: str
    contribution_percentage: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "importance_score": self.importance_score,
            "impact_description": self.impact_description,
            "contribution_percentage": self.contribution_percentage,
        }


def _deviation(actual: float, reference: float) -> float:
    return abs(actual - reference) / reference


def _heart_rate_impact(vitals: VitalsReading) -> tuple[float, str]:
    raw = _deviation(vitals.heart_rate, NORMAL_REFERENCE["heart_rate"])
    if vitals.heart_rate > 100:
        text = "Elevated heart rate increases cardiovascular risk"
    elif vitals.heart_rate < 60:
        text = "Low heart rate may indicate bradycardia"
    else:
        text = "Heart rate within normal range"
    return raw, text


def _blood_pressure_impact(vitals: VitalsReading) -> tuple[float, str]:
    # Worse of the two deviations
    raw = max(
        _deviation(vitals.blood_pressure_systolic, NORMAL_REFERENCE["blood_pressure_systolic"]),
        _deviation(vitals.blood_pressure_diastolic, NORMAL_REFERENCE["blood_pressure_diastolic"]),
    )
    if vitals.blood_pressure_systolic > 140:
        text = "High blood pressure significantly increases health risks"
    elif vitals.blood_pressure_systolic < 90:
        text = "Low blood pressure may cause circulation issues"
    else:
        text = "Blood pressure within healthy range"
    return raw, text


def _spo2_impact(vitals: VitalsReading) -> tuple[float, str]:
    raw = _deviation(vitals.spo2, NORMAL_REFERENCE["spo2"])
    if vitals.spo2 < 95:
        text = "Low oxygen saturation indicates respiratory concerns"
    elif vitals.spo2 < 98:
        text = "Slightly low oxygen levels need monitoring"
    else:
        text = "Oxygen saturation is excellent"
    return raw, text


def _temperature_impact(vitals: VitalsReading) -> tuple[float, str]:
    raw = _deviation(vitals.temperature, NORMAL_REFERENCE["temperature"])
    if vitals.temperature > 38:
        text = "Fever indicates possible infection or inflammation"
    elif vitals.temperature < 36:
        text = "Low body temperature may indicate hypothermia"
    else:
        text = "Body temperature is normal"
    return raw, text


_IMPACT_FUNCS = {
    "heart_rate": _heart_rate_impact,
    "blood_pressure": _blood_pressure_impact,
    "spo2": _spo2_impact,
    "temperature": _temperature_impact,
}


def compute_feature_importance(vitals: VitalsReading) -> dict[str, FeatureImportance]:
    """Importance per feature, in fixed order: heart_rate, blood_pressure, spo2, temperature."""
    result: dict[str, FeatureImportance] = {}
    for feature, func in _IMPACT_FUNCS.items():
        raw, text = func(vitals)
        importance = clamp(raw * FEATURE_COEFFICIENTS[feature], 0.0, 1.0)
        result[feature] = FeatureImportance(
            importance_score=importance,
            impact_description=text,
            contribution_percentage=round_half_up(importance * 100),
        )
    return result


def _display(feature: str) -> str:
    return feature.replace("_", " ")


def explain_risk_level(
    risk_level: RiskLevel, importance: Mapping[str, FeatureImportance]
) -> str:
    """Name the two most important features. Ties keep feature order."""
    top = sorted(importance.items(), key=lambda kv: kv[1].importance_score, reverse=True)[:2]
    drivers = " and ".join(
        f"{_display(name)} ({fi.contribution_percentage}% impact)" for name, fi in top
    )
    return f"Your {risk_level.value} risk level is primarily driven by: {drivers}"


def identify_key_factors(importance: Mapping[str, FeatureImportance]) -> list[dict[str, Any]]:
    """Every feature whose importance exceeds the key-factor threshold."""
    return [
        {
            "factor": _display(name),
            "impact": fi.impact_description,
            "importance": fi.importance_score,
        }
        for name, fi in importance.items()
        if fi.importance_score > KEY_FACTOR_THRESHOLD
    ]


def explain_model_reasoning(predictions: Mapping[str, SubScorePrediction]) -> dict[str, str]:
    return {
        name: f"{label}: {predictions[name].risk_level.value} risk"
        for name, label in _REASONING_LABELS.items()
        if name in predictions
    }


def explain_confidence(confidences: Sequence[float]) -> str:
    """Tier description from the mean sub-scorer confidence."""
    avg = sum(confidences) / len(confidences) if confidences else 0.0
    if avg >= 90:
        return "Very high confidence - all models strongly agree on the assessment"
    if avg >= 80:
        return "High confidence - models show good agreement with minor variations"
    if avg >= 70:
        return "Moderate confidence - some variation between model predictions"
    return (
        "Lower confidence - significant variation between models, "
        "consider retaking measurements"
    )


def generate_explainability(
    vitals: VitalsReading,
    predictions: Mapping[str, SubScorePrediction],
    risk_level: RiskLevel,
) -> dict[str, Any]:
    """Assemble the nested explainability structure for an ensemble result."""
    importance = compute_feature_importance(vitals)
    confidences = [p.confidence for p in predictions.values()]
    return {
        "feature_importance": {name: fi.to_dict() for name, fi in importance.items()},
        "explanations": {
            "why_this_risk_level": explain_risk_level(risk_level, importance),
            "key_contributing_factors": identify_key_factors(importance),
            "model_reasoning": explain_model_reasoning(predictions),
            "confidence_factors": explain_confidence(confidences),
        },
        "decision_path": dict(DECISION_PATH),
    }

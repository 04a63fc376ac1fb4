"""Tests for feature importance and the explanation narratives."""

from __future__ import annotations

import pytest

from vitalguard.domains.health.domain_logic.explainability import (
    DECISION_PATH,
    compute_feature_importance,
    explain_confidence,
    explain_model_reasoning,
    explain_risk_level,
    generate_explainability,
    identify_key_factors,
)
from vitalguard.domains.health.domain_logic.risk_models import (
    RiskLevel,
    SubScorePrediction,
    VitalsReading,
)


def _vitals(**overrides) -> VitalsReading:
    values = dict(
        heart_rate=72,
        blood_pressure_systolic=118,
        blood_pressure_diastolic=76,
        spo2=98,
        temperature=36.8,
    )
    values.update(overrides)
    return VitalsReading(**values)


class TestFeatureImportance:
    def test_fixed_feature_order(self):
        assert list(compute_feature_importance(_vitals())) == [
            "heart_rate", "blood_pressure", "spo2", "temperature",
        ]

    def test_heart_rate_deviation(self):
        fi = compute_feature_importance(_vitals(heart_rate=105))["heart_rate"]
        # |105 - 75| / 75 * 0.3
        assert fi.importance_score == pytest.approx(0.12)
        assert fi.contribution_percentage == 12
        assert fi.impact_description == "Elevated heart rate increases cardiovascular risk"

    def test_blood_pressure_uses_worse_deviation(self):
        fi = compute_feature_importance(
            _vitals(blood_pressure_systolic=120, blood_pressure_diastolic=120)
        )["blood_pressure"]
        # diastolic: 40 / 80 * 0.35
        assert fi.importance_score == pytest.approx(0.175)
        assert fi.impact_description == "Blood pressure within healthy range"

    @pytest.mark.parametrize(
        "spo2, text",
        [
            (92, "Low oxygen saturation indicates respiratory concerns"),
            (96, "Slightly low oxygen levels need monitoring"),
            (99, "Oxygen saturation is excellent"),
        ],
    )
    def test_spo2_descriptions(self, spo2, text):
        assert compute_feature_importance(_vitals(spo2=spo2))["spo2"].impact_description == text

    def test_scores_within_unit_interval(self):
        extreme = _vitals(
            heart_rate=250,
            blood_pressure_systolic=250,
            blood_pressure_diastolic=150,
            spo2=70,
            temperature=45.0,
        )
        for fi in compute_feature_importance(extreme).values():
            assert 0 <= fi.importance_score <= 1


class TestNarratives:
    def test_why_names_top_two(self):
        importance = compute_feature_importance(
            _vitals(heart_rate=105, blood_pressure_systolic=150, blood_pressure_diastolic=95)
        )
        assert explain_risk_level(RiskLevel.HIGH, importance) == (
            "Your HIGH risk level is primarily driven by: "
            "heart rate (12% impact) and blood pressure (9% impact)"
        )

    def test_key_factors_threshold(self):
        importance = compute_feature_importance(
            _vitals(heart_rate=250, blood_pressure_systolic=250)
        )
        factors = identify_key_factors(importance)
        assert [f["factor"] for f in factors] == ["heart rate", "blood pressure"]

    def test_no_key_factors_when_normal(self):
        assert identify_key_factors(compute_feature_importance(_vitals())) == []

    def test_model_reasoning(self):
        predictions = {
            "cardiovascular": SubScorePrediction(70, RiskLevel.HIGH),
            "respiratory": SubScorePrediction(0, RiskLevel.LOW),
        }
        assert explain_model_reasoning(predictions) == {
            "cardiovascular": "Heart and circulation analysis: HIGH risk",
            "respiratory": "Breathing and oxygen analysis: LOW risk",
        }

    @pytest.mark.parametrize(
        "confidences, prefix",
        [
            ([90, 95], "Very high confidence"),
            ([80, 85], "High confidence"),
            ([70, 75], "Moderate confidence"),
            ([60, 65], "Lower confidence"),
        ],
    )
    def test_confidence_tiers(self, confidences, prefix):
        assert explain_confidence(confidences).startswith(prefix)


def test_generate_explainability_structure():
    predictions = {
        name: SubScorePrediction(0, RiskLevel.LOW, confidence=85)
        for name in ("cardiovascular", "respiratory", "metabolic", "general")
    }
    result = generate_explainability(_vitals(), predictions, RiskLevel.LOW)
    assert set(result["explanations"]) == {
        "why_this_risk_level",
        "key_contributing_factors",
        "model_reasoning",
        "confidence_factors",
    }
    assert result["decision_path"] == DECISION_PATH
    assert len(result["decision_path"]) == 5
    assert result["feature_importance"]["spo2"]["contribution_percentage"] == 0

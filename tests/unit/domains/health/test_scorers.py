"""Tests for the four domain sub-scorers."""

from __future__ import annotations

import pytest

from vitalguard.domains.health.domain_logic.confidence import FixedConfidence
from vitalguard.domains.health.domain_logic.risk_models import (
    RiskLevel,
    UserProfile,
    VitalsReading,
)
from vitalguard.domains.health.domain_logic.scorers import (
    CardiovascularScorer,
    GeneralScorer,
    MetabolicScorer,
    RespiratoryScorer,
    Scorer,
    _RuleScorer,
    count_abnormal_indicators,
    default_scorers,
)

SENIOR = UserProfile(age=70)


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


class TestCardiovascular:
    def test_normal_is_zero(self):
        result = CardiovascularScorer().score(_vitals())
        assert result.risk_score == 0
        assert result.risk_level is RiskLevel.LOW
        assert result.predicted_conditions == []

    def test_tachycardia_and_hypertension(self):
        result = CardiovascularScorer().score(
            _vitals(heart_rate=105, blood_pressure_systolic=150, blood_pressure_diastolic=95)
        )
        assert result.risk_score == 70
        assert result.risk_level is RiskLevel.HIGH
        assert result.predicted_conditions == ["Tachycardia Risk", "Hypertension"]
        assert result.recommendations[1] == (
            "Immediate lifestyle changes and medical consultation required"
        )

    def test_diastolic_alone_triggers_hypertension(self):
        result = CardiovascularScorer().score(_vitals(blood_pressure_diastolic=95))
        assert result.predicted_conditions == ["Hypertension"]
        assert result.risk_level is RiskLevel.MODERATE

    def test_bradycardia(self):
        result = CardiovascularScorer().score(_vitals(heart_rate=50))
        assert result.risk_score == 20
        assert result.predicted_conditions == ["Bradycardia Risk"]
        assert result.risk_level is RiskLevel.LOW

    def test_cut_point_is_strict(self):
        # 20 + 40 = 60 is not above 60
        result = CardiovascularScorer().score(_vitals(heart_rate=50, blood_pressure_systolic=150))
        assert result.risk_score == 60
        assert result.risk_level is RiskLevel.MODERATE

    def test_senior_multiplier(self):
        result = CardiovascularScorer().score(
            _vitals(heart_rate=50, blood_pressure_systolic=150), SENIOR
        )
        assert result.risk_score == pytest.approx(72.0)
        assert result.risk_level is RiskLevel.HIGH

    def test_age_65_is_not_senior(self):
        result = CardiovascularScorer().score(_vitals(heart_rate=50), UserProfile(age=65))
        assert result.risk_score == 20

    def test_score_never_decreases_past_100_bpm(self):
        scorer = CardiovascularScorer()
        scores = [scorer.score(_vitals(heart_rate=hr)).risk_score for hr in range(95, 140, 5)]
        assert scores == sorted(scores)


class TestRespiratory:
    @pytest.mark.parametrize(
        "spo2, score, level, condition",
        [
            (88, 50, RiskLevel.HIGH, "Severe Hypoxemia"),
            (92, 30, RiskLevel.HIGH, "Moderate Hypoxemia"),
            (96, 10, RiskLevel.LOW, "Mild Oxygen Desaturation"),
        ],
    )
    def test_spo2_branches(self, spo2, score, level, condition):
        result = RespiratoryScorer().score(_vitals(spo2=spo2))
        assert result.risk_score == score
        assert result.risk_level is level
        assert result.predicted_conditions == [condition]

    def test_fever_stacks_with_spo2(self):
        result = RespiratoryScorer().score(_vitals(spo2=88, temperature=38.6))
        assert result.risk_score == 65
        assert result.risk_level is RiskLevel.CRITICAL
        assert result.predicted_conditions == [
            "Severe Hypoxemia",
            "Fever-Related Respiratory Stress",
        ]

    def test_fever_threshold_is_strict(self):
        assert RespiratoryScorer().score(_vitals(temperature=38.5)).risk_score == 0


class TestMetabolic:
    def test_high_fever(self):
        result = MetabolicScorer().score(_vitals(temperature=39.5))
        assert result.risk_score == 25
        assert result.risk_level is RiskLevel.MODERATE
        assert result.predicted_conditions == ["High Fever"]

    def test_fever_and_tachycardia_stack(self):
        result = MetabolicScorer().score(_vitals(temperature=39.5, heart_rate=115))
        assert result.risk_score == 45
        assert result.risk_level is RiskLevel.HIGH
        assert result.predicted_conditions == ["High Fever", "Metabolic Stress"]

    def test_metabolic_stress_alone(self):
        result = MetabolicScorer().score(_vitals(temperature=38.2, heart_rate=115))
        assert result.risk_score == 20
        assert result.risk_level is RiskLevel.LOW

    def test_hypothermia(self):
        result = MetabolicScorer().score(_vitals(temperature=34.5))
        assert result.risk_score == 30
        assert result.predicted_conditions == ["Hypothermia Risk"]


class TestGeneral:
    def test_counts_abnormal_indicators(self):
        assert count_abnormal_indicators(_vitals()) == 0
        assert count_abnormal_indicators(
            _vitals(heart_rate=105, blood_pressure_systolic=150, spo2=92, temperature=38.5)
        ) == 4

    def test_diastolic_is_not_counted(self):
        assert count_abnormal_indicators(_vitals(blood_pressure_diastolic=120)) == 0

    def test_two_indicators(self):
        result = GeneralScorer().score(_vitals(heart_rate=105, blood_pressure_systolic=150))
        assert result.risk_score == 25
        assert result.risk_level is RiskLevel.MODERATE
        assert result.predicted_conditions == ["Multi-System Stress"]

    def test_three_indicators(self):
        result = GeneralScorer().score(
            _vitals(heart_rate=105, blood_pressure_systolic=150, spo2=92)
        )
        assert result.risk_score == 40
        assert result.risk_level is RiskLevel.HIGH
        assert result.predicted_conditions == ["Multiple System Dysfunction"]


class TestConfidence:
    @pytest.mark.parametrize(
        "scorer_cls, base, span",
        [
            (CardiovascularScorer, 85, 10),
            (RespiratoryScorer, 88, 8),
            (MetabolicScorer, 82, 12),
            (GeneralScorer, 80, 15),
        ],
    )
    def test_base_plus_jitter(self, scorer_cls, base, span):
        low = scorer_cls(FixedConfidence(0.0)).score(_vitals()).confidence
        high = scorer_cls(FixedConfidence(1.0)).score(_vitals()).confidence
        assert low == base
        assert high == base + span

    def test_default_scorers_share_source_and_protocol(self):
        scorers = default_scorers(FixedConfidence(0.25))
        assert [s.name for s in scorers] == [
            "cardiovascular", "respiratory", "metabolic", "general",
        ]
        assert all(isinstance(s, Scorer) for s in scorers)


@pytest.mark.parametrize(
    "overrides",
    [
        {},
        {"heart_rate": 250, "blood_pressure_systolic": 250, "blood_pressure_diastolic": 150},
        {"spo2": 70, "temperature": 45.0, "heart_rate": 200},
        {"temperature": 32.0, "heart_rate": 30, "blood_pressure_systolic": 70},
    ],
)
def test_scores_stay_within_bounds(overrides):
    vitals = _vitals(**overrides)
    for scorer in default_scorers():
        result = scorer.score(vitals, SENIOR)
        assert 0 <= result.risk_score <= 100
        assert 0 <= result.confidence <= 100


class TestSerialization:
    def test_whole_scores_serialize_as_int(self):
        result = CardiovascularScorer().score(
            _vitals(heart_rate=105, blood_pressure_systolic=150), SENIOR
        )
        data = result.to_dict()
        assert data["risk_score"] == 84
        assert isinstance(data["risk_score"], int)

    def test_zero_serializes_as_int(self):
        data = GeneralScorer().score(_vitals()).to_dict()
        assert data["risk_score"] == 0
        assert isinstance(data["risk_score"], int)


class TestRuleScorerBase:
    def test_cannot_instantiate_base(self):
        with pytest.raises(TypeError):
            _RuleScorer()

    def test_subclass_must_define_level(self):
        class NoLevel(_RuleScorer):
            name = "partial"

            def score(self, vitals, profile=None):
                return self._finish(vitals, 0.0, [], [])

        with pytest.raises(TypeError):
            NoLevel()

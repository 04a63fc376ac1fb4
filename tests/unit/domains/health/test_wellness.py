"""Tests for rule-based wellness plans."""

from __future__ import annotations

import random

import pytest

from vitalguard.domains.health.domain_logic.risk_models import (
    BodyMetrics,
    RiskLevel,
    UserProfile,
    VitalsReading,
)
from vitalguard.domains.health.domain_logic.wellness import (
    MEAL_OPTIONS,
    PLAN_NOTE,
    SNACK_OPTIONS,
    FocusArea,
    WellnessPlanGenerator,
    analyze_health_conditions,
    base_calories,
    bmi_category,
    calculate_bmi,
    calculate_nutrition_targets,
    dietary_needs,
    generate_lifestyle_tips,
    generate_meal,
    generate_snacks,
    meal_style,
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


def _conditions(vitals=None, age=None, gender="unknown", chronic=(), bmi=None) -> list[str]:
    areas = analyze_health_conditions(vitals or _vitals(), age, gender, chronic, bmi)
    return [area.condition for area in areas]


class TestBmi:
    def test_calculation(self):
        assert calculate_bmi(70, 175) == pytest.approx(22.857, abs=1e-3)

    def test_missing_inputs(self):
        assert calculate_bmi(None, 175) is None
        assert calculate_bmi(70, None) is None

    @pytest.mark.parametrize("bmi,category", [
        (17.0, "Underweight"),
        (18.5, "Normal weight"),
        (24.9, "Normal weight"),
        (25.0, "Overweight"),
        (30.0, "Obese"),
    ])
    def test_categories(self, bmi, category):
        assert bmi_category(bmi) == category


class TestHealthConditions:
    def test_normal_adult_has_none(self):
        assert _conditions(age=40) == []

    def test_hypertension_severity(self):
        areas = analyze_health_conditions(
            _vitals(blood_pressure_systolic=165), 40, "male", (), None
        )
        assert areas[0].condition == "hypertension"
        assert areas[0].severity == "high"
        assert _conditions(_vitals(blood_pressure_diastolic=95)) == ["hypertension"]

    def test_bradycardia_only_for_seniors(self):
        assert "bradycardia" not in _conditions(_vitals(heart_rate=55), age=40)
        assert "bradycardia" in _conditions(_vitals(heart_rate=55), age=70)
        assert "bradycardia" not in _conditions(_vitals(heart_rate=55))

    def test_vital_driven_order(self):
        vitals = _vitals(
            heart_rate=125, blood_pressure_systolic=150, spo2=88, temperature=39.5
        )
        areas = analyze_health_conditions(vitals, 40, "male", (), None)
        assert [(a.condition, a.severity) for a in areas] == [
            ("hypertension", "moderate"),
            ("tachycardia", "high"),
            ("hypoxemia", "high"),
            ("fever", "high"),
        ]

    @pytest.mark.parametrize("bmi,expected", [
        (17.0, ["underweight"]),
        (22.0, []),
        (27.0, ["overweight"]),
        (32.0, ["obesity"]),
    ])
    def test_bmi_areas(self, bmi, expected):
        assert _conditions(age=40, bmi=bmi) == expected

    def test_obesity_severity(self):
        areas = analyze_health_conditions(_vitals(), 40, "male", (), 36.0)
        assert areas[0].severity == "high"

    def test_age_gender_and_chronic(self):
        assert _conditions(
            age=70, gender="female", chronic=("diabetes", "gout")
        ) == ["elderly_nutrition", "postmenopausal", "diabetes", "gout"]

    def test_chronic_tags(self):
        areas = analyze_health_conditions(_vitals(), None, "unknown", ("arthritis", "gout"), None)
        assert areas[0].severity == "chronic"
        assert areas[0].recommendations == (
            "anti_inflammatory", "omega3_rich", "antioxidant_rich",
        )
        assert areas[1].recommendations == ("balanced_diet",)


class TestMeals:
    def test_dietary_needs(self):
        areas = [
            FocusArea("hypertension", "moderate", ("low_sodium", "dash_diet", "potassium_rich")),
            FocusArea("fever", "high", ("hydration", "light_foods", "rest")),
        ]
        assert dietary_needs(areas) == {
            "low_sodium", "high_potassium", "hydrating", "light_foods",
        }

    @pytest.mark.parametrize("needs,style", [
        ({"low_sodium", "light_foods"}, "light_foods"),
        ({"calorie_dense", "calorie_deficit"}, "calorie_dense"),
        ({"low_sodium", "heart_healthy"}, "heart_healthy"),
        ({"low_sodium"}, "low_sodium"),
        ({"iron_rich"}, "heart_healthy"),
        (set(), "heart_healthy"),
    ])
    def test_meal_style_priority(self, needs, style):
        assert meal_style(needs) == style

    def test_meal_comes_from_style(self):
        meal = generate_meal("lunch", {"calorie_deficit"}, 40, None, random.Random(1))
        assert meal in MEAL_OPTIONS["lunch"]["calorie_deficit"]

    def test_suffixes_in_order(self):
        meal = generate_meal("breakfast", {"calcium_rich"}, 70, 17.0, random.Random(1))
        assert meal.endswith(
            " (Consider smaller portions and ensure adequate hydration)"
            " with extra healthy fats and protein"
            " with added calcium-fortified options"
        )

    def test_calcium_suffix_only_at_breakfast(self):
        meal = generate_meal("dinner", {"calcium_rich"}, 40, 32.0, random.Random(1))
        assert meal.endswith(" with focus on vegetables and lean proteins")
        assert "calcium-fortified" not in meal

    def test_snacks_are_first_two_options(self):
        assert generate_snacks({"low_sodium"}) == "Fresh fruit or Unsalted nuts and seeds"
        assert generate_snacks(set()) == " or ".join(SNACK_OPTIONS["heart_healthy"][:2])


class TestLifestyleTips:
    def test_default_adult(self):
        tips = generate_lifestyle_tips([], _vitals(), 40, "male", RiskLevel.LOW, None)
        assert tips == [
            "Aim for 150 minutes of moderate aerobic activity per week",
            "Include strength training exercises 2-3 times per week",
            "Drink 8-10 glasses of water daily, more if you're active or in hot weather",
            "Maintain 7-9 hours of sleep nightly for optimal health",
        ]

    def test_high_risk_sleep_and_fever_hydration(self):
        tips = generate_lifestyle_tips(
            [], _vitals(temperature=38.5), 40, "male", RiskLevel.CRITICAL, None
        )
        assert any(tip.startswith("Increase fluid intake") for tip in tips)
        assert any(tip.startswith("Prioritize 7-9 hours") for tip in tips)

    def test_bmi_exercise_replaces_default(self):
        tips = generate_lifestyle_tips([], _vitals(heart_rate=110), 40, "male", RiskLevel.LOW, 32.0)
        assert tips[0].startswith("Start with low-impact exercises")
        assert "Consider keeping a food diary to track eating patterns" in tips

    def test_senior_woman(self):
        tips = generate_lifestyle_tips([], _vitals(), 70, "female", RiskLevel.LOW, None)
        assert tips[0].startswith("Aim for 30 minutes of gentle walking")
        assert tips[-1] == "Focus on calcium and vitamin D intake for bone health"
        assert "Get 15-20 minutes of sunlight daily for vitamin D synthesis" in tips

    def test_blood_pressure_and_oxygen(self):
        tips = generate_lifestyle_tips(
            [], _vitals(blood_pressure_systolic=150, spo2=92), 40, "male", RiskLevel.MODERATE, None
        )
        assert any("sodium intake" in tip for tip in tips)
        assert any(tip.startswith("Practice stress-reduction") for tip in tips)
        assert any(tip.startswith("Practice breathing exercises") for tip in tips)


class TestNutritionTargets:
    def test_base_calories(self):
        assert base_calories(40, "male", 70, None) == 1628
        assert base_calories(60, "female", 60, None) == 1246

    def test_missing_age_and_weight_use_defaults(self):
        assert base_calories(None, "male", None, None) == base_calories(40, "male", 70, None)

    def test_defaults(self):
        assert calculate_nutrition_targets(40, "male", None, [], None) == {
            "calories": 1628,
            "protein": 56,
            "fiber": 38,
            "sodium": 2300,
            "potassium": 3500,
            "calcium": 1000,
            "water": 2450,
        }

    def test_over_50_female(self):
        targets = calculate_nutrition_targets(60, "female", 60, [], None)
        assert targets["fiber"] == 21
        assert targets["calcium"] == 1200

    def test_underweight(self):
        bmi = calculate_bmi(45, 170)
        areas = analyze_health_conditions(_vitals(), 30, "male", (), bmi)
        targets = calculate_nutrition_targets(30, "male", 45, areas, bmi)
        assert targets["calories"] == 1924
        assert targets["protein"] == 54

    def test_obesity(self):
        bmi = calculate_bmi(110, 170)
        areas = analyze_health_conditions(_vitals(), 40, "male", (), bmi)
        targets = calculate_nutrition_targets(40, "male", 110, areas, bmi)
        assert targets["calories"] == 1658
        assert targets["fiber"] == 43
        assert targets["protein"] == 88

    def test_hypertension_and_elderly(self):
        areas = analyze_health_conditions(
            _vitals(blood_pressure_systolic=150), 70, "male", (), None
        )
        targets = calculate_nutrition_targets(70, "male", 80, areas, None)
        assert targets["sodium"] == 1500
        assert targets["potassium"] == 4700
        assert targets["protein"] == 80


class TestGenerator:
    def test_plan_shape(self):
        plan = WellnessPlanGenerator(random.Random(5)).generate(
            _vitals(),
            RiskLevel.LOW,
            UserProfile(age=35, gender="male"),
            BodyMetrics(weight_kg=70, height_cm=175),
        )
        data = plan.to_dict()
        assert data["plan_type"] == "rule_based"
        assert data["risk_level"] == "LOW"
        assert data["note"] == PLAN_NOTE
        assert data["bmi_info"]["value"] == 22.9
        assert data["bmi_info"]["category"] == "Normal weight"
        assert len(data["bmi_info"]["recommendations"]) == 4
        assert data["health_focus_areas"] == []
        assert data["meal_plan"]["breakfast"] in MEAL_OPTIONS["breakfast"]["heart_healthy"]

    def test_without_profile_or_body(self):
        plan = WellnessPlanGenerator().generate(_vitals(temperature=38.6), RiskLevel.MODERATE)
        assert plan.bmi_info is None
        assert [a.condition for a in plan.health_focus_areas] == ["fever"]
        assert plan.meal_plan["lunch"] in MEAL_OPTIONS["lunch"]["light_foods"]

    def test_seeded_plans_repeat(self):
        args = (_vitals(), RiskLevel.LOW, UserProfile(age=30))
        first = WellnessPlanGenerator(random.Random(9)).generate(*args)
        second = WellnessPlanGenerator(random.Random(9)).generate(*args)
        assert first.meal_plan == second.meal_plan

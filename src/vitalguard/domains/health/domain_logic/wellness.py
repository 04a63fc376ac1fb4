"""Rule-based wellness plans built on top of an assessment.

Takes the reading, the risk level it was assessed at, and optional body
metrics, and produces:

1. health focus areas (vital-driven, BMI-driven, age/gender, chronic)
2. a meal plan picked from the focus areas' dietary needs
3. lifestyle tips
4. daily nutrition targets
5. BMI category and advice when weight and height are known

Plans are general guidance, not a prescription; every plan carries a note
saying so.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Any, Iterable

from vitalguard.domains.health.domain_logic.risk_models import (
    BodyMetrics,
    RiskLevel,
    UserProfile,
    VitalsReading,
    now_iso,
    round_half_up,
)

logger = logging.getLogger(__name__)

DEFAULT_WEIGHT_KG = 70.0
# Used for the BMR estimate only when no age is known
DEFAULT_AGE = 40

PLAN_NOTE = (
    "These recommendations are based on your current vitals and profile data. "
    "Consult healthcare professionals for medical advice."
)

CHRONIC_CONDITION_TAGS = {
    "diabetes": ("low_glycemic", "high_fiber", "portion_control"),
    "hypertension": ("low_sodium", "potassium_rich", "dash_diet"),
    "heart_disease": ("heart_healthy", "omega3_rich", "low_saturated_fat"),
    "arthritis": ("anti_inflammatory", "omega3_rich", "antioxidant_rich"),
    "osteoporosis": ("calcium_rich", "vitamin_d", "protein_focus"),
}

# recommendation tag -> dietary need
TAG_TO_NEED = {
    "low_sodium": "low_sodium",
    "potassium_rich": "high_potassium",
    "antioxidant_rich": "antioxidant_rich",
    "heart_healthy_foods": "heart_healthy",
    "calcium_rich": "calcium_rich",
    "iron_rich": "iron_rich",
    "hydration": "hydrating",
    "light_foods": "light_foods",
    "calorie_dense": "calorie_dense",
    "calorie_deficit": "calorie_deficit",
}

# First match wins; heart_healthy is also the fallback
MEAL_STYLE_PRIORITY = (
    "light_foods",
    "calorie_dense",
    "calorie_deficit",
    "heart_healthy",
    "low_sodium",
    "high_protein",
)

MEAL_OPTIONS: dict[str, dict[str, tuple[str, ...]]] = {
    "breakfast": {
        "heart_healthy": (
            "Oatmeal with fresh berries, walnuts, and a drizzle of honey",
            "Greek yogurt parfait with blueberries, chia seeds, and almonds",
            "Avocado toast on whole grain bread with a poached egg",
            "Smoothie bowl with spinach, banana, berries, and flax seeds",
        ),
        "low_sodium": (
            "Fresh fruit salad with unsalted nuts and yogurt",
            "Homemade granola with fresh berries and low-fat milk",
            "Scrambled eggs with herbs and vegetables (no added salt)",
            "Quinoa breakfast bowl with fresh fruits and cinnamon",
        ),
        "high_protein": (
            "Protein smoothie with Greek yogurt, banana, and protein powder",
            "Egg white omelet with vegetables and cottage cheese",
            "Greek yogurt with nuts, seeds, and protein granola",
            "Quinoa breakfast bowl with nuts and Greek yogurt",
        ),
        "light_foods": (
            "Fresh fruit smoothie with coconut water",
            "Plain toast with a small amount of honey",
            "Herbal tea with a small portion of crackers",
            "Rice porridge with a touch of ginger",
        ),
        "calorie_dense": (
            "Peanut butter and banana smoothie with whole milk and oats",
            "Avocado toast with scrambled eggs and cheese",
            "Granola with full-fat yogurt, nuts, and dried fruits",
            "Pancakes with nut butter and fresh fruit",
        ),
        "calorie_deficit": (
            "Egg white omelet with vegetables and herbs",
            "Greek yogurt with berries (no added sugar)",
            "Green smoothie with spinach, cucumber, and apple",
            "Overnight oats with almond milk and cinnamon",
        ),
    },
    "lunch": {
        "heart_healthy": (
            "Grilled salmon salad with mixed greens, avocado, and olive oil dressing",
            "Quinoa bowl with roasted vegetables and chickpeas",
            "Lentil soup with whole grain roll",
            "Mediterranean wrap with hummus, vegetables, and lean protein",
        ),
        "low_sodium": (
            "Fresh herb-seasoned grilled chicken with steamed vegetables",
            "Homemade vegetable soup with herbs (no added salt)",
            "Quinoa salad with fresh vegetables and lemon dressing",
            "Baked sweet potato with black beans and fresh salsa",
        ),
        "high_protein": (
            "Grilled chicken breast with quinoa and roasted vegetables",
            "Tuna salad with mixed greens and chickpeas",
            "Lean beef stir-fry with brown rice",
            "Tofu and vegetable curry with lentils",
        ),
        "light_foods": (
            "Clear vegetable broth with small portions of rice",
            "Steamed fish with plain rice and mild vegetables",
            "Banana and rice with a small amount of yogurt",
            "Mild vegetable soup with crackers",
        ),
        "calorie_dense": (
            "Chicken and avocado wrap with cheese and nuts",
            "Quinoa bowl with salmon, nuts, and olive oil dressing",
            "Pasta with meat sauce and parmesan cheese",
            "Rice bowl with chicken, beans, and guacamole",
        ),
        "calorie_deficit": (
            "Large salad with grilled chicken and light vinaigrette",
            "Vegetable soup with lean protein",
            "Zucchini noodles with turkey meatballs",
            "Cauliflower rice bowl with vegetables and tofu",
        ),
    },
    "dinner": {
        "heart_healthy": (
            "Baked cod with roasted Brussels sprouts and sweet potato",
            "Grilled chicken with quinoa pilaf and steamed broccoli",
            "Vegetarian chili with whole grain cornbread",
            "Salmon with roasted asparagus and brown rice",
        ),
        "low_sodium": (
            "Herb-crusted baked chicken with roasted root vegetables",
            "Grilled fish with steamed vegetables and quinoa",
            "Homemade vegetable stir-fry with brown rice",
            "Lentil curry with fresh herbs and brown rice",
        ),
        "high_protein": (
            "Grilled lean steak with roasted vegetables",
            "Baked chicken thighs with quinoa and green beans",
            "Fish tacos with black beans and avocado",
            "Turkey meatballs with whole wheat pasta",
        ),
        "light_foods": (
            "Steamed white fish with plain rice",
            "Chicken broth with small portions of noodles",
            "Baked potato with a small amount of plain yogurt",
            "Mild vegetable soup with toast",
        ),
        "calorie_dense": (
            "Grilled salmon with quinoa and avocado",
            "Beef stir-fry with nuts and brown rice",
            "Chicken thighs with sweet potato and olive oil",
            "Pasta with meat sauce and cheese",
        ),
        "calorie_deficit": (
            "Grilled fish with steamed vegetables",
            "Chicken breast with cauliflower rice",
            "Vegetable stir-fry with tofu",
            "Zucchini lasagna with lean ground turkey",
        ),
    },
}

SNACK_OPTIONS = {
    "heart_healthy": (
        "Mixed nuts (unsalted)",
        "Apple slices with almond butter",
        "Greek yogurt with berries",
        "Hummus with vegetable sticks",
    ),
    "low_sodium": (
        "Fresh fruit",
        "Unsalted nuts and seeds",
        "Plain yogurt with honey",
        "Raw vegetables with homemade dip",
    ),
    "high_protein": (
        "Greek yogurt",
        "Hard-boiled eggs",
        "Protein smoothie",
        "Cottage cheese with fruit",
    ),
    "light_foods": (
        "Herbal tea with plain crackers",
        "Small portion of banana",
        "Rice cakes",
        "Clear broth",
    ),
    "calorie_dense": (
        "Trail mix with nuts and dried fruit",
        "Peanut butter with apple slices",
        "Cheese and whole grain crackers",
        "Smoothie with protein powder and nut butter",
    ),
    "calorie_deficit": (
        "Cucumber slices with hummus",
        "Berries with a small amount of yogurt",
        "Celery sticks with almond butter",
        "Herbal tea with a few almonds",
    ),
}


@dataclass
class FocusArea:
    """One reason the plan is shaped the way it is."""

    condition: str
    severity: str  # 'moderate' | 'high' | 'standard' | 'chronic'
    recommendations: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "condition": self.condition,
            "severity": self.severity,
            "recommendations": list(self.recommendations),
        }


@dataclass
class WellnessPlan:
    meal_plan: dict[str, str]
    lifestyle_tips: list[str]
    nutrition_targets: dict[str, int]
    health_focus_areas: list[FocusArea]
    bmi_info: dict[str, Any] | None
    risk_level: RiskLevel
    plan_type: str = "rule_based"
    generated_at: str = field(default_factory=now_iso)
    note: str = PLAN_NOTE

    def to_dict(self) -> dict[str, Any]:
        return {
            "meal_plan": dict(self.meal_plan),
            "lifestyle_tips": list(self.lifestyle_tips),
            "nutrition_targets": dict(self.nutrition_targets),
            "health_focus_areas": [area.to_dict() for area in self.health_focus_areas],
            "bmi_info": self.bmi_info,
            "risk_level": self.risk_level.value,
            "plan_type": self.plan_type,
            "generated_at": self.generated_at,
            "note": self.note,
        }


# ---------------------------------------------------------------------------
# BMI
# ---------------------------------------------------------------------------

def calculate_bmi(weight_kg: float | None, height_cm: float | None) -> float | None:
    if not weight_kg or not height_cm:
        return None
    return weight_kg / (height_cm / 100) ** 2


def bmi_category(bmi: float) -> str:
    if bmi < 18.5:
        return "Underweight"
    if bmi < 25:
        return "Normal weight"
    if bmi < 30:
        return "Overweight"
    return "Obese"


def bmi_recommendations(bmi: float) -> list[str]:
    if bmi < 18.5:
        return [
            "Focus on nutrient-dense, calorie-rich foods",
            "Include healthy fats like nuts, avocados, and olive oil",
            "Consider strength training to build muscle mass",
            "Eat frequent, smaller meals throughout the day",
        ]
    if bmi < 25:
        return [
            "Maintain current healthy weight with balanced nutrition",
            "Continue regular physical activity",
            "Focus on whole foods and adequate hydration",
            "Monitor portion sizes to maintain stability",
        ]
    if bmi < 30:
        return [
            "Create a moderate caloric deficit for gradual weight loss",
            "Increase physical activity, especially cardio exercises",
            "Focus on high-fiber, low-calorie foods",
            "Practice portion control and mindful eating",
        ]
    return [
        "Consult healthcare provider for comprehensive weight management",
        "Focus on sustainable lifestyle changes",
        "Prioritize low-impact exercises initially",
        "Consider working with a registered dietitian",
    ]


# ---------------------------------------------------------------------------
# Focus areas and dietary needs
# ---------------------------------------------------------------------------

def analyze_health_conditions(
    vitals: VitalsReading,
    age: int | None,
    gender: str,
    chronic_conditions: Iterable[str],
    bmi: float | None,
) -> list[FocusArea]:
    """Focus areas in a fixed order: vitals, BMI, age, gender, chronic."""
    areas: list[FocusArea] = []
    senior = age is not None and age > 65

    if vitals.blood_pressure_systolic > 140 or vitals.blood_pressure_diastolic > 90:
        areas.append(FocusArea(
            "hypertension",
            "high" if vitals.blood_pressure_systolic > 160 else "moderate",
            ("low_sodium", "dash_diet", "potassium_rich"),
        ))

    if vitals.heart_rate > 100:
        areas.append(FocusArea(
            "tachycardia",
            "high" if vitals.heart_rate > 120 else "moderate",
            ("reduce_caffeine", "stress_management", "moderate_exercise"),
        ))
    elif vitals.heart_rate < 60 and senior:
        # A slow resting rate is only flagged for seniors
        areas.append(FocusArea(
            "bradycardia", "moderate", ("gentle_exercise", "heart_healthy_foods")
        ))

    if vitals.spo2 < 95:
        areas.append(FocusArea(
            "hypoxemia",
            "high" if vitals.spo2 < 90 else "moderate",
            ("antioxidant_rich", "breathing_exercises", "iron_rich"),
        ))

    if vitals.temperature > 38:
        areas.append(FocusArea(
            "fever",
            "high" if vitals.temperature > 39 else "moderate",
            ("hydration", "light_foods", "rest"),
        ))

    if bmi is not None:
        if bmi < 18.5:
            areas.append(FocusArea(
                "underweight", "moderate", ("calorie_dense", "protein_rich", "strength_training")
            ))
        elif bmi >= 30:
            areas.append(FocusArea(
                "obesity",
                "high" if bmi >= 35 else "moderate",
                ("calorie_deficit", "low_impact_exercise", "portion_control"),
            ))
        elif bmi >= 25:
            areas.append(FocusArea(
                "overweight", "moderate", ("balanced_diet", "increased_activity", "mindful_eating")
            ))

    if senior:
        areas.append(FocusArea(
            "elderly_nutrition",
            "standard",
            ("calcium_rich", "vitamin_d", "protein_focus", "fiber_rich"),
        ))

    if gender == "female" and age is not None and age > 50:
        areas.append(FocusArea(
            "postmenopausal", "standard", ("calcium_rich", "phytoestrogens", "bone_health")
        ))

    for condition in chronic_conditions:
        areas.append(FocusArea(
            condition, "chronic", CHRONIC_CONDITION_TAGS.get(condition, ("balanced_diet",))
        ))

    return areas


def dietary_needs(areas: Iterable[FocusArea]) -> set[str]:
    """The dietary needs implied by the focus areas' recommendation tags."""
    return {
        TAG_TO_NEED[tag]
        for area in areas
        for tag in area.recommendations
        if tag in TAG_TO_NEED
    }


def meal_style(needs: set[str]) -> str:
    for style in MEAL_STYLE_PRIORITY:
        if style in needs:
            return style
    return "heart_healthy"


# ---------------------------------------------------------------------------
# Meals
# ---------------------------------------------------------------------------

def generate_meal(
    meal_type: str,
    needs: set[str],
    age: int | None,
    bmi: float | None,
    rng: random.Random,
) -> str:
    meal = rng.choice(MEAL_OPTIONS[meal_type][meal_style(needs)])

    if age is not None and age > 65:
        meal += " (Consider smaller portions and ensure adequate hydration)"
    if bmi is not None and bmi < 18.5:
        meal += " with extra healthy fats and protein"
    elif bmi is not None and bmi >= 30:
        meal += " with focus on vegetables and lean proteins"
    if "calcium_rich" in needs and meal_type == "breakfast":
        meal += " with added calcium-fortified options"
    return meal


def generate_snacks(needs: set[str]) -> str:
    return " or ".join(SNACK_OPTIONS[meal_style(needs)][:2])


def generate_meal_plan(
    needs: set[str], age: int | None, bmi: float | None, rng: random.Random
) -> dict[str, str]:
    return {
        "breakfast": generate_meal("breakfast", needs, age, bmi, rng),
        "lunch": generate_meal("lunch", needs, age, bmi, rng),
        "dinner": generate_meal("dinner", needs, age, bmi, rng),
        "snacks": generate_snacks(needs),
    }


# ---------------------------------------------------------------------------
# Lifestyle tips
# ---------------------------------------------------------------------------

def _exercise_tips(vitals: VitalsReading, age: int | None, bmi: float | None) -> list[str]:
    if bmi is not None:
        if bmi < 18.5:
            return [
                "Focus on strength training to build muscle mass and healthy weight gain",
                "Include moderate cardio but prioritize muscle-building exercises",
            ]
        if bmi >= 30:
            return [
                "Start with low-impact exercises like walking, swimming, or cycling",
                "Gradually incorporate strength training as fitness improves",
            ]
        if bmi >= 25:
            return [
                "Aim for 150 minutes of moderate aerobic activity per week",
                "Include strength training 2-3 times per week",
            ]
        return [
            "Maintain current activity level with varied exercises",
            "Continue balanced cardio and strength training routine",
        ]

    if vitals.heart_rate > 100:
        return [
            "Start with gentle walking for 10-15 minutes daily, gradually increasing as "
            "your heart rate stabilizes",
            "Practice deep breathing exercises 3 times daily to help reduce heart rate",
        ]
    if age is not None and age > 65:
        return [
            "Aim for 30 minutes of gentle walking daily, broken into 10-minute sessions "
            "if needed",
            "Include light strength training 2-3 times per week to maintain muscle mass",
        ]
    return [
        "Aim for 150 minutes of moderate aerobic activity per week",
        "Include strength training exercises 2-3 times per week",
    ]


def generate_lifestyle_tips(
    areas: list[FocusArea],
    vitals: VitalsReading,
    age: int | None,
    gender: str,
    risk_level: RiskLevel,
    bmi: float | None,
) -> list[str]:
    tips = _exercise_tips(vitals, age, bmi)

    if vitals.temperature > 38 or any(a.condition == "fever" for a in areas):
        tips.append("Increase fluid intake to 10-12 glasses of water daily to help reduce fever")
    else:
        tips.append("Drink 8-10 glasses of water daily, more if you're active or in hot weather")

    if risk_level >= RiskLevel.HIGH:
        tips.append(
            "Prioritize 7-9 hours of quality sleep to support recovery and immune function"
        )
        tips.append("Establish a consistent bedtime routine and avoid screens 1 hour before bed")
    else:
        tips.append("Maintain 7-9 hours of sleep nightly for optimal health")

    if vitals.heart_rate > 100 or vitals.blood_pressure_systolic > 140:
        tips.append(
            "Practice stress-reduction techniques like meditation, yoga, or deep breathing "
            "for 10-15 minutes daily"
        )
        tips.append("Limit screen time and news consumption to reduce stress and anxiety")

    if vitals.blood_pressure_systolic > 140:
        tips.append("Limit sodium intake to less than 2,300mg daily (ideally 1,500mg)")
        tips.append("Include potassium-rich foods like bananas, oranges, and leafy greens")

    if vitals.spo2 < 95:
        tips.append("Practice breathing exercises: inhale for 4 counts, hold for 4, exhale for 6")
        tips.append(
            "Ensure good air quality in your living space and consider air purification"
        )

    if bmi is not None:
        if bmi < 18.5:
            tips.append("Eat frequent, smaller meals throughout the day to increase caloric intake")
            tips.append("Include healthy fats like nuts, avocados, and olive oil in your diet")
        elif bmi >= 30:
            tips.append("Practice portion control and mindful eating techniques")
            tips.append("Consider keeping a food diary to track eating patterns")
        elif bmi >= 25:
            tips.append("Focus on whole foods and limit processed foods")
            tips.append("Practice mindful eating and avoid eating while distracted")

    if age is not None and age > 65:
        tips.append("Get 15-20 minutes of sunlight daily for vitamin D synthesis")
        tips.append("Engage in mental activities like reading, puzzles, or learning new skills")

    if gender == "female" and age is not None and age > 50:
        tips.append("Focus on calcium and vitamin D intake for bone health")

    return tips


# ---------------------------------------------------------------------------
# Nutrition targets
# ---------------------------------------------------------------------------

def base_calories(
    age: int | None, gender: str, weight_kg: float | None, bmi: float | None
) -> int:
    """Harris-Benedict style estimate with fixed reference heights."""
    weight = weight_kg or DEFAULT_WEIGHT_KG
    years = age if age is not None else DEFAULT_AGE
    if gender == "female":
        bmr = 655 + 9.6 * weight + 1.8 * 165 - 4.7 * years
    else:
        bmr = 66 + 13.7 * weight + 5 * 175 - 6.8 * years

    if bmi is not None:
        if bmi < 18.5:
            bmr *= 1.2
        elif bmi >= 30:
            bmr *= 0.9
    return round_half_up(bmr)


def calculate_nutrition_targets(
    age: int | None,
    gender: str,
    weight_kg: float | None,
    areas: Iterable[FocusArea],
    bmi: float | None,
) -> dict[str, int]:
    """Daily targets: kcal, grams (protein, fiber), mg (minerals), ml (water)."""
    weight = weight_kg or DEFAULT_WEIGHT_KG
    over_50 = age is not None and age > 50
    female = gender == "female"

    targets = {
        "calories": base_calories(age, gender, weight_kg, bmi),
        "protein": round_half_up(weight * 0.8),
        "fiber": (21 if female else 30) if over_50 else (25 if female else 38),
        "sodium": 2300,
        "potassium": 3500,
        "calcium": 1200 if over_50 else 1000,
        "water": round_half_up(weight * 35),
    }

    for area in areas:
        if area.condition == "hypertension":
            targets["sodium"] = 1500
            targets["potassium"] = 4700
        elif area.condition == "elderly_nutrition":
            targets["protein"] = round_half_up(weight * 1.0)
        elif area.condition == "underweight":
            targets["calories"] += 300
            targets["protein"] = round_half_up(weight * 1.2)
        elif area.condition in ("obesity", "overweight"):
            targets["calories"] -= 300
            targets["fiber"] += 5

    return targets


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------

class WellnessPlanGenerator:
    """Builds a :class:`WellnessPlan` for one assessed reading.

    Meal picks are random within the chosen style; pass a seeded ``rng``
    for repeatable plans.

    Usage::

        generator = WellnessPlanGenerator(random.Random(7))
        plan = generator.generate(vitals, RiskLevel.MODERATE, profile, body)
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def generate(
        self,
        vitals: VitalsReading,
        risk_level: RiskLevel,
        profile: UserProfile | None = None,
        body: BodyMetrics | None = None,
    ) -> WellnessPlan:
        body = body or BodyMetrics()
        age = profile.age if profile else None
        gender = profile.gender if profile else "unknown"
        bmi = calculate_bmi(body.weight_kg, body.height_cm)

        areas = analyze_health_conditions(vitals, age, gender, body.chronic_conditions, bmi)
        needs = dietary_needs(areas)

        plan = WellnessPlan(
            meal_plan=generate_meal_plan(needs, age, bmi, self._rng),
            lifestyle_tips=generate_lifestyle_tips(areas, vitals, age, gender, risk_level, bmi),
            nutrition_targets=calculate_nutrition_targets(
                age, gender, body.weight_kg, areas, bmi
            ),
            health_focus_areas=areas,
            bmi_info=(
                {
                    "value": round(bmi, 1),
                    "category": bmi_category(bmi),
                    "recommendations": bmi_recommendations(bmi),
                }
                if bmi is not None
                else None
            ),
            risk_level=risk_level,
        )
        logger.info(
            "Wellness plan: risk=%s focus_areas=%d style=%s",
            risk_level.value, len(areas), meal_style(needs),
        )
        return plan

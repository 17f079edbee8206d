"""
Domain analyzers for the Health Insights engine.

Each analyzer looks at one health domain of an AnalysisContext and turns
its most recent records into zero or more Insight objects using fixed
thresholds. Analyzers never raise for missing data; they simply return
an empty list.
"""

import logging
import math
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from statistics import mean
from typing import Optional

from .models import (
    DetailedEntry, ExerciseEntry, HealthTrend, Insight, InsightCategory,
    InsightPriority, InsightType, MedicationEntry, MetricRecord,
    NutritionEntry, SleepEntry, SymptomEntry, UserProfile, utc_now
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisContext:
    """Everything a single evaluation pass may look at."""
    profile: UserProfile
    metrics: list[MetricRecord] = field(default_factory=list)
    entries: list[DetailedEntry] = field(default_factory=list)
    trends: list[HealthTrend] = field(default_factory=list)
    now: datetime = field(default_factory=utc_now)

    def recent_metrics(self, metric_type: str, limit: int) -> list[MetricRecord]:
        """Most recent metrics of one type, newest first."""
        matching = [m for m in self.metrics if m.metric_type == metric_type]
        matching.sort(key=lambda m: m.timestamp, reverse=True)
        return matching[:limit]

    def recent_entries(self, entry_class: type, limit: int) -> list:
        """Most recent detailed entries of one variant, newest first."""
        matching = [e for e in self.entries if isinstance(e, entry_class)]
        matching.sort(key=lambda e: e.timestamp, reverse=True)
        return matching[:limit]


def parse_birth_year(date_of_birth: str) -> Optional[int]:
    """Return the year of an ISO date (or datetime) string, None if unparseable."""
    try:
        return date.fromisoformat(date_of_birth.strip()[:10]).year
    except (AttributeError, ValueError):
        return None


def _positive_finite(value: float) -> bool:
    return math.isfinite(value) and value > 0


class Analyzer:
    """
    Base class for domain analyzers.

    Subclasses set ``name`` and implement ``analyze``.
    """

    name = "analyzer"

    def analyze(self, context: AnalysisContext) -> list[Insight]:
        raise NotImplementedError

    def _insight(self, context: AnalysisContext, key: str, **fields) -> Insight:
        return Insight(
            id=f"insight_{uuid.uuid4().hex[:12]}_{key}",
            user_id=context.profile.id,
            created_at=context.now,
            **fields
        )


@dataclass
class WeightAnalysis:
    """BMI and recent weight change for a profile."""
    bmi: Optional[float]
    change_percent: Optional[float]


class WeightAnalyzer(Analyzer):
    """BMI status plus weight trend from the last ten weight metrics."""

    name = "weight"

    UNDERWEIGHT_BMI = 18.5
    OVERWEIGHT_BMI = 25.0
    OBESE_BMI = 30.0
    TREND_WINDOW = 10
    MIN_TREND_METRICS = 6
    TREND_THRESHOLD = 5.0
    HIGH_TREND_THRESHOLD = 10.0

    def measure(self, context: AnalysisContext) -> WeightAnalysis:
        profile = context.profile
        bmi = None
        if _positive_finite(profile.height) and _positive_finite(profile.weight):
            bmi = profile.weight / (profile.height / 100) ** 2
            if not math.isfinite(bmi):
                bmi = None
        if bmi is None:
            logger.warning(
                "Skipping BMI rules for %s: height=%s weight=%s",
                profile.id, profile.height, profile.weight
            )

        change_percent = None
        weights = context.recent_metrics("weight", self.TREND_WINDOW)
        if len(weights) >= self.MIN_TREND_METRICS:
            recent_avg = mean(m.value for m in weights[0:3])
            older_avg = mean(m.value for m in weights[3:6])
            if older_avg != 0:
                change_percent = (recent_avg - older_avg) / older_avg * 100
                if not math.isfinite(change_percent):
                    change_percent = None
            else:
                logger.warning("Skipping weight trend for %s: older average is zero", profile.id)

        return WeightAnalysis(bmi=bmi, change_percent=change_percent)

    def analyze(self, context: AnalysisContext) -> list[Insight]:
        insights = []
        analysis = self.measure(context)
        bmi = analysis.bmi

        if bmi is not None and bmi < self.UNDERWEIGHT_BMI:
            insights.append(self._insight(
                context, "bmi_underweight",
                type=InsightType.RECOMMENDATION,
                title="Healthy Weight Gain Strategy Needed",
                content=(
                    f"Your BMI of {bmi:.1f} indicates underweight status. Focus on nutrient-dense, "
                    "calorie-rich foods and consider strength training to build healthy muscle mass."
                ),
                category=InsightCategory.NUTRITION,
                priority=InsightPriority.MEDIUM,
                confidence=0.85,
                data_points=["weight", "height"],
                action_items=[
                    "Increase caloric intake with healthy fats (nuts, avocados, olive oil)",
                    "Add protein-rich foods to each meal",
                    "Consider working with a registered dietitian",
                    "Include resistance training 2-3 times per week"
                ],
                tags=["weight-gain", "nutrition", "exercise"]
            ))
        elif bmi is not None and self.OVERWEIGHT_BMI <= bmi < self.OBESE_BMI:
            insights.append(self._insight(
                context, "bmi_overweight",
                type=InsightType.RECOMMENDATION,
                title="Weight Management Opportunity",
                content=(
                    f"Your BMI of {bmi:.1f} suggests focusing on gradual, sustainable weight loss "
                    "could benefit your overall health and reduce disease risk."
                ),
                category=InsightCategory.NUTRITION,
                priority=InsightPriority.MEDIUM,
                confidence=0.8,
                data_points=["weight", "height"],
                action_items=[
                    "Create a moderate caloric deficit (300-500 calories/day)",
                    "Increase physical activity gradually",
                    "Focus on whole foods and portion control",
                    "Track food intake for better awareness"
                ],
                tags=["weight-loss", "nutrition", "exercise"]
            ))
        elif bmi is not None and bmi >= self.OBESE_BMI:
            insights.append(self._insight(
                context, "bmi_obese",
                type=InsightType.WARNING,
                title="Significant Weight Management Needed",
                content=(
                    f"Your BMI of {bmi:.1f} indicates obesity, which increases risk for diabetes, "
                    "heart disease, and other conditions. Professional guidance is recommended."
                ),
                category=InsightCategory.NUTRITION,
                priority=InsightPriority.HIGH,
                confidence=0.9,
                data_points=["weight", "height"],
                action_items=[
                    "Consult with healthcare provider for weight management plan",
                    "Consider working with registered dietitian",
                    "Start with low-impact exercises (walking, swimming)",
                    "Set realistic, gradual weight loss goals (1-2 lbs/week)"
                ],
                tags=["weight-loss", "medical-consultation", "nutrition"]
            ))

        change = analysis.change_percent
        if change is not None and abs(change) > self.TREND_THRESHOLD:
            gained = change > 0
            insights.append(self._insight(
                context, "weight_trend",
                type=InsightType.WARNING if gained else InsightType.ACHIEVEMENT,
                title=f"Significant Weight {'Gain' if gained else 'Loss'} Detected",
                content=(
                    f"You've {'gained' if gained else 'lost'} approximately {abs(change):.1f}% of your "
                    "body weight recently. "
                    + ("Monitor this trend closely." if gained else "Great progress on your health journey!")
                ),
                category=InsightCategory.NUTRITION,
                priority=InsightPriority.HIGH if abs(change) > self.HIGH_TREND_THRESHOLD else InsightPriority.MEDIUM,
                confidence=0.8,
                data_points=["weight"],
                action_items=[
                    "Review recent dietary changes",
                    "Assess stress levels and sleep quality",
                    "Consider consulting healthcare provider if trend continues"
                ] if gained else [
                    "Continue current healthy habits",
                    "Ensure adequate nutrition during weight loss",
                    "Monitor for any concerning symptoms"
                ],
                tags=["weight-trend", "monitoring"]
            ))

        return insights


@dataclass
class SleepAnalysis:
    entry_count: int
    average_hours: float
    average_quality: float


class SleepAnalyzer(Analyzer):
    """Sleep duration and quality over the last week of logs."""

    name = "sleep"

    WINDOW = 7
    MIN_ENTRIES = 3
    MIN_HOURS = 7
    MIN_QUALITY = 3

    def measure(self, context: AnalysisContext) -> Optional[SleepAnalysis]:
        entries: list[SleepEntry] = context.recent_entries(SleepEntry, self.WINDOW)
        if len(entries) < self.MIN_ENTRIES:
            return None
        return SleepAnalysis(
            entry_count=len(entries),
            average_hours=mean(e.data.total_sleep for e in entries),
            average_quality=mean(e.data.sleep_quality for e in entries)
        )

    def analyze(self, context: AnalysisContext) -> list[Insight]:
        insights = []
        analysis = self.measure(context)
        if analysis is None:
            return insights

        if analysis.average_hours < self.MIN_HOURS:
            insights.append(self._insight(
                context, "sleep_duration",
                type=InsightType.WARNING,
                title="Insufficient Sleep Duration",
                content=(
                    f"Your average sleep duration of {analysis.average_hours:.1f} hours is below the "
                    "recommended 7-9 hours. This can impact immune function, cognitive performance, "
                    "and overall health."
                ),
                category=InsightCategory.SLEEP,
                priority=InsightPriority.HIGH,
                confidence=0.9,
                data_points=["sleep"],
                action_items=[
                    "Establish consistent bedtime routine",
                    "Limit screen time 1 hour before bed",
                    "Keep bedroom cool, dark, and quiet",
                    "Avoid caffeine after 2 PM"
                ],
                tags=["sleep-duration", "sleep-hygiene"]
            ))

        if analysis.average_quality < self.MIN_QUALITY:
            insights.append(self._insight(
                context, "sleep_quality",
                type=InsightType.RECOMMENDATION,
                title="Poor Sleep Quality Detected",
                content=(
                    f"Your average sleep quality score of {analysis.average_quality:.1f}/5 suggests "
                    "you're not getting restorative sleep. Focus on sleep hygiene improvements."
                ),
                category=InsightCategory.SLEEP,
                priority=InsightPriority.MEDIUM,
                confidence=0.8,
                data_points=["sleep"],
                action_items=[
                    "Track sleep disturbances to identify patterns",
                    "Consider relaxation techniques before bed",
                    "Evaluate mattress and pillow comfort",
                    "Discuss with healthcare provider if issues persist"
                ],
                tags=["sleep-quality", "sleep-hygiene"]
            ))

        return insights


@dataclass
class NutritionAnalysis:
    entry_count: int
    average_water_ml: float
    target_water_ml: Optional[float]
    average_meals: float


class NutritionAnalyzer(Analyzer):
    """Hydration against body weight and daily meal count."""

    name = "nutrition"

    WINDOW = 7
    MIN_ENTRIES = 3
    WATER_ML_PER_KG = 35
    WATER_TOLERANCE = 0.8
    MIN_MEALS = 3

    def measure(self, context: AnalysisContext) -> Optional[NutritionAnalysis]:
        entries: list[NutritionEntry] = context.recent_entries(NutritionEntry, self.WINDOW)
        if len(entries) < self.MIN_ENTRIES:
            return None

        weight = context.profile.weight
        target = weight * self.WATER_ML_PER_KG if _positive_finite(weight) else None
        if target is None:
            logger.warning("Skipping hydration rule for %s: weight=%s", context.profile.id, weight)

        return NutritionAnalysis(
            entry_count=len(entries),
            average_water_ml=mean(e.data.water_intake for e in entries),
            target_water_ml=target,
            average_meals=mean(len(e.data.meals) for e in entries)
        )

    def analyze(self, context: AnalysisContext) -> list[Insight]:
        insights = []
        analysis = self.measure(context)
        if analysis is None:
            return insights

        target = analysis.target_water_ml
        if target is not None and analysis.average_water_ml < target * self.WATER_TOLERANCE:
            insights.append(self._insight(
                context, "hydration",
                type=InsightType.RECOMMENDATION,
                title="Increase Daily Water Intake",
                content=(
                    f"Your average water intake of {analysis.average_water_ml / 1000:.1f}L is below the "
                    f"recommended {target / 1000:.1f}L for your body weight. Proper hydration supports "
                    "metabolism and cognitive function."
                ),
                category=InsightCategory.NUTRITION,
                priority=InsightPriority.MEDIUM,
                confidence=0.8,
                data_points=["nutrition"],
                action_items=[
                    "Carry a water bottle throughout the day",
                    "Set hourly hydration reminders",
                    "Eat water-rich foods (fruits, vegetables)",
                    "Monitor urine color as hydration indicator"
                ],
                tags=["hydration", "nutrition"]
            ))

        if analysis.average_meals < self.MIN_MEALS:
            insights.append(self._insight(
                context, "meal_frequency",
                type=InsightType.RECOMMENDATION,
                title="Consider More Regular Meal Patterns",
                content=(
                    f"You're averaging {analysis.average_meals:.1f} meals per day. Regular meal timing "
                    "can help stabilize blood sugar and energy levels."
                ),
                category=InsightCategory.NUTRITION,
                priority=InsightPriority.LOW,
                confidence=0.7,
                data_points=["nutrition"],
                action_items=[
                    "Plan 3 balanced meals per day",
                    "Include healthy snacks if needed",
                    "Maintain consistent meal timing",
                    "Focus on balanced macronutrients"
                ],
                tags=["meal-timing", "nutrition"]
            ))

        return insights


@dataclass
class ExerciseAnalysis:
    entry_count: int
    total_minutes: float
    weekly_minutes: float


class ExerciseAnalyzer(Analyzer):
    """
    Projects weekly exercise minutes against the 150-minute guideline.

    Below half the guideline is a warning, at or above it an achievement.
    Anything in between is left alone while the user builds toward the goal.
    """

    name = "exercise"

    WINDOW = 7
    MIN_ENTRIES = 3
    WEEKLY_GOAL_MINUTES = 150

    def measure(self, context: AnalysisContext) -> Optional[ExerciseAnalysis]:
        entries: list[ExerciseEntry] = context.recent_entries(ExerciseEntry, self.WINDOW)
        if len(entries) < self.MIN_ENTRIES:
            return None
        total = sum(a.duration for e in entries for a in e.data.activities)
        return ExerciseAnalysis(
            entry_count=len(entries),
            total_minutes=total,
            weekly_minutes=total * 7 / len(entries)
        )

    def analyze(self, context: AnalysisContext) -> list[Insight]:
        insights = []
        analysis = self.measure(context)
        if analysis is None:
            return insights

        weekly = analysis.weekly_minutes
        if weekly < self.WEEKLY_GOAL_MINUTES * 0.5:
            insights.append(self._insight(
                context, "exercise_insufficient",
                type=InsightType.WARNING,
                title="Increase Physical Activity",
                content=(
                    f"You're averaging {weekly:.0f} minutes of exercise per week, well below the "
                    "recommended 150 minutes. Regular exercise reduces disease risk and improves "
                    "mental health."
                ),
                category=InsightCategory.EXERCISE,
                priority=InsightPriority.HIGH,
                confidence=0.9,
                data_points=["exercise"],
                action_items=[
                    "Start with 10-minute daily walks",
                    "Take stairs instead of elevators",
                    "Schedule 3 workout sessions per week",
                    "Find activities you enjoy to maintain consistency"
                ],
                tags=["exercise-frequency", "physical-activity"]
            ))
        elif weekly >= self.WEEKLY_GOAL_MINUTES:
            insights.append(self._insight(
                context, "exercise_excellent",
                type=InsightType.ACHIEVEMENT,
                title="Excellent Exercise Consistency!",
                content=(
                    f"Great job! You're averaging {weekly:.0f} minutes of exercise per week, meeting "
                    "or exceeding health guidelines. Keep up the fantastic work!"
                ),
                category=InsightCategory.EXERCISE,
                priority=InsightPriority.LOW,
                confidence=0.9,
                data_points=["exercise"],
                action_items=[
                    "Continue current exercise routine",
                    "Consider adding variety to prevent plateaus",
                    "Include both cardio and strength training",
                    "Listen to your body and allow rest days"
                ],
                tags=["exercise-achievement", "consistency"]
            ))

        return insights


class VitalsAnalyzer(Analyzer):
    """Average systolic pressure over the last five blood pressure readings."""

    name = "vitals"

    WINDOW = 5
    MIN_READINGS = 2
    HIGH_SYSTOLIC = 140

    def average_systolic(self, context: AnalysisContext) -> Optional[float]:
        readings = context.recent_metrics("blood_pressure", self.WINDOW)
        if len(readings) < self.MIN_READINGS:
            return None
        return mean(m.value for m in readings)

    def analyze(self, context: AnalysisContext) -> list[Insight]:
        # Supplied trends are available on the context but no rule reads them yet
        average = self.average_systolic(context)
        if average is None or average <= self.HIGH_SYSTOLIC:
            return []

        return [self._insight(
            context, "bp_high",
            type=InsightType.WARNING,
            title="Elevated Blood Pressure Detected",
            content=(
                f"Your recent blood pressure readings average {average:.0f} mmHg systolic, which is "
                "above normal range. This requires attention and monitoring."
            ),
            category=InsightCategory.PREVENTIVE_CARE,
            priority=InsightPriority.HIGH,
            confidence=0.9,
            data_points=["blood_pressure"],
            action_items=[
                "Schedule appointment with healthcare provider",
                "Monitor blood pressure daily",
                "Reduce sodium intake",
                "Increase physical activity gradually",
                "Manage stress through relaxation techniques"
            ],
            tags=["blood-pressure", "cardiovascular"]
        )]


class PreventiveCareAnalyzer(Analyzer):
    """Age-banded screening reminders for people in their 40s and over 50."""

    name = "preventive_care"

    def age(self, context: AnalysisContext) -> Optional[int]:
        birth_year = parse_birth_year(context.profile.date_of_birth)
        if birth_year is None:
            logger.warning(
                "Skipping preventive care for %s: unparseable date of birth %r",
                context.profile.id, context.profile.date_of_birth
            )
            return None
        return context.now.year - birth_year

    def analyze(self, context: AnalysisContext) -> list[Insight]:
        age = self.age(context)
        if age is None or age < 40:
            return []

        if age < 50:
            return [self._insight(
                context, "preventive_40s",
                type=InsightType.EDUCATIONAL,
                title="Important Health Screenings for Your 40s",
                content=(
                    "Your age group should focus on cardiovascular health monitoring, diabetes "
                    "prevention, and cancer screenings. Early detection is key to maintaining "
                    "long-term health."
                ),
                category=InsightCategory.PREVENTIVE_CARE,
                priority=InsightPriority.MEDIUM,
                confidence=0.95,
                data_points=["age"],
                action_items=[
                    "Annual blood pressure and cholesterol checks",
                    "Diabetes screening every 3 years",
                    "Mammogram (women) or prostate screening (men)",
                    "Skin cancer screening annually",
                    "Eye exam every 2 years"
                ],
                tags=["preventive-care", "screening", "age-specific"]
            )]

        return [self._insight(
            context, "preventive_50plus",
            type=InsightType.EDUCATIONAL,
            title="Essential Health Screenings After 50",
            content=(
                "Your age group has increased focus on cancer screenings, bone health, and "
                "cardiovascular monitoring. Regular preventive care becomes even more critical."
            ),
            category=InsightCategory.PREVENTIVE_CARE,
            priority=InsightPriority.HIGH,
            confidence=0.95,
            data_points=["age"],
            action_items=[
                "Colonoscopy every 10 years (or as recommended)",
                "Annual mammogram (women)",
                "Bone density screening",
                "Annual eye exam including glaucoma screening",
                "Cardiovascular risk assessment"
            ],
            tags=["preventive-care", "screening", "age-specific"]
        )]


class MedicationAdherenceAnalyzer(Analyzer):
    """Share of listed doses marked as taken, for users on medication."""

    name = "medication"

    WINDOW = 7
    MIN_ENTRIES = 3
    MIN_ADHERENCE = 0.8

    @staticmethod
    def entry_adherence(entry: MedicationEntry) -> float:
        doses = entry.data.medications
        if not doses:
            return 1.0
        return sum(1 for d in doses if d.adherence) / len(doses)

    def average_adherence(self, context: AnalysisContext) -> Optional[float]:
        if not context.profile.medications:
            return None
        entries: list[MedicationEntry] = context.recent_entries(MedicationEntry, self.WINDOW)
        if len(entries) < self.MIN_ENTRIES:
            return None
        return mean(self.entry_adherence(e) for e in entries)

    def analyze(self, context: AnalysisContext) -> list[Insight]:
        adherence = self.average_adherence(context)
        if adherence is None or adherence >= self.MIN_ADHERENCE:
            return []

        return [self._insight(
            context, "medication_adherence",
            type=InsightType.WARNING,
            title="Medication Adherence Needs Improvement",
            content=(
                f"Your medication adherence rate of {adherence * 100:.0f}% is below optimal. Poor "
                "adherence can reduce treatment effectiveness and worsen health outcomes."
            ),
            category=InsightCategory.MEDICATION,
            priority=InsightPriority.HIGH,
            confidence=0.85,
            data_points=["medication"],
            action_items=[
                "Set daily medication reminders",
                "Use a pill organizer",
                "Discuss barriers with healthcare provider",
                "Consider medication timing adjustments"
            ],
            tags=["medication-adherence", "treatment"]
        )]


@dataclass
class MoodAnalysis:
    entry_count: int
    average_stress: float
    average_mood: float
    average_energy: float


class StressMoodAnalyzer(Analyzer):
    """Stress and mood from symptom check-ins."""

    name = "stress_mood"

    WINDOW = 7
    MIN_ENTRIES = 3
    HIGH_STRESS = 3.5
    LOW_MOOD = 2.5

    def measure(self, context: AnalysisContext) -> Optional[MoodAnalysis]:
        entries: list[SymptomEntry] = context.recent_entries(SymptomEntry, self.WINDOW)
        if len(entries) < self.MIN_ENTRIES:
            return None
        analysis = MoodAnalysis(
            entry_count=len(entries),
            average_stress=mean(e.data.stress_level for e in entries),
            average_mood=mean(e.data.mood for e in entries),
            average_energy=mean(e.data.energy_level for e in entries)
        )
        # Energy is tracked for diagnostics only; no rule uses it
        logger.debug("Average energy for %s: %.2f", context.profile.id, analysis.average_energy)
        return analysis

    def analyze(self, context: AnalysisContext) -> list[Insight]:
        insights = []
        analysis = self.measure(context)
        if analysis is None:
            return insights

        if analysis.average_stress > self.HIGH_STRESS:
            insights.append(self._insight(
                context, "high_stress",
                type=InsightType.WARNING,
                title="Elevated Stress Levels Detected",
                content=(
                    f"Your average stress level of {analysis.average_stress:.1f}/5 indicates chronic "
                    "stress, which can impact immune function, sleep, and overall health."
                ),
                category=InsightCategory.MENTAL_HEALTH,
                priority=InsightPriority.HIGH,
                confidence=0.8,
                data_points=["symptoms"],
                action_items=[
                    "Practice daily stress reduction techniques",
                    "Consider meditation or mindfulness apps",
                    "Ensure adequate sleep and exercise",
                    "Talk to a mental health professional if needed"
                ],
                tags=["stress-management", "mental-health"]
            ))

        if analysis.average_mood < self.LOW_MOOD:
            insights.append(self._insight(
                context, "low_mood",
                type=InsightType.WARNING,
                title="Concerning Mood Patterns",
                content=(
                    f"Your average mood score of {analysis.average_mood:.1f}/5 suggests you may be "
                    "experiencing persistent low mood. This deserves attention and support."
                ),
                category=InsightCategory.MENTAL_HEALTH,
                priority=InsightPriority.HIGH,
                confidence=0.8,
                data_points=["symptoms"],
                action_items=[
                    "Consider speaking with a mental health professional",
                    "Maintain social connections",
                    "Engage in activities you enjoy",
                    "Ensure adequate sunlight exposure"
                ],
                tags=["mood", "mental-health"]
            ))

        return insights


def default_analyzers() -> list[Analyzer]:
    """The eight domain analyzers in evaluation order."""
    return [
        WeightAnalyzer(),
        SleepAnalyzer(),
        NutritionAnalyzer(),
        ExerciseAnalyzer(),
        VitalsAnalyzer(),
        PreventiveCareAnalyzer(),
        MedicationAdherenceAnalyzer(),
        StressMoodAnalyzer(),
    ]

"""
User Interface for Health Insights.

Provides CLI-based forms for profile setup and health data entry, and
views for generated insights.
"""

import uuid
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional
from pydantic import ValidationError

from .config import Settings
from .export_manager import ExportManager
from .health_store import HealthDataStore, StorageResult
from .insight_engine import sort_by_priority
from .insight_service import InsightService
from .models import (
    ActivityIntensity, ActivityLevel, AlcoholConsumption, DietType,
    ExerciseActivity, ExerciseData, ExerciseEntry, Food, Gender,
    InsightPriority, Lifestyle, Meal, MedicationData, MedicationDose,
    MedicationEntry, MetricRecord, NutritionData, NutritionEntry, SleepData,
    SleepEntry, SmokingStatus, SymptomData, SymptomEntry, SymptomItem,
    UserProfile, utc_now
)
from .scenarios import SCENARIOS, simulate_health_scenario


class HealthInsightsUI:
    """
    Command-line interface for Health Insights.

    Provides forms for data input and insight viewing.
    """

    def __init__(self, settings: Settings, store: Optional[HealthDataStore] = None):
        """
        Initialize UI.

        Args:
            settings: Application settings
            store: HealthDataStore instance (created under settings.data_dir if not provided)
        """
        self.settings = settings
        self.store = store or HealthDataStore(settings.data_dir)
        self.insight_service = InsightService(self.store, settings=settings)
        self.export_manager = ExportManager(self.store)

    @property
    def profile(self) -> Optional[UserProfile]:
        return self.store.get_profile()

    def setup_profile(self) -> bool:
        """
        Display form for creating or replacing the user profile.

        Returns:
            True if successful, False otherwise
        """
        print("\n=== Profile Setup ===")
        current = self.profile
        lifestyle = current.lifestyle if current else Lifestyle()

        try:
            profile = UserProfile(
                id=current.id if current else f"user_{uuid.uuid4().hex[:12]}",
                first_name=self._get_string_input("First name", current.first_name if current else None),
                last_name=self._get_string_input("Last name", current.last_name if current else None),
                email=self._get_string_input("Email", current.email if current else None, optional=True) or "",
                date_of_birth=self._get_string_input(
                    "Date of birth (YYYY-MM-DD)", current.date_of_birth if current else None
                ),
                gender=Gender(self._get_choice_input(
                    "Gender", [g.value for g in Gender], current.gender.value if current else None
                )),
                height=self._get_float_input("Height in cm", current.height if current else None),
                weight=self._get_float_input("Weight in kg", current.weight if current else None),
                medications=self._get_list_input(
                    "Medications (comma separated)", current.medications if current else None
                ),
                medical_conditions=self._get_list_input(
                    "Medical conditions (comma separated)", current.medical_conditions if current else None
                ),
                allergies=self._get_list_input("Allergies (comma separated)", current.allergies if current else None),
                blood_type=current.blood_type if current else None,
                emergency_contact=current.emergency_contact if current else None,
                lifestyle=self._get_lifestyle(lifestyle),
                created_at=current.created_at if current else utc_now()
            )
        except ValidationError as e:
            self._print_validation_error(e)
            return False

        if not self._report(self.store.save_profile(profile)):
            return False
        self.generate_insights()
        return True

    def _get_lifestyle(self, current: Lifestyle) -> Lifestyle:
        print("\n--- Lifestyle ---")
        return Lifestyle(
            activity_level=ActivityLevel(self._get_choice_input(
                "Activity level", [a.value for a in ActivityLevel], current.activity_level.value
            )),
            sleep_hours=self._get_float_input("Typical sleep hours", current.sleep_hours),
            smoking_status=SmokingStatus(self._get_choice_input(
                "Smoking status", [s.value for s in SmokingStatus], current.smoking_status.value
            )),
            alcohol_consumption=AlcoholConsumption(self._get_choice_input(
                "Alcohol consumption", [a.value for a in AlcoholConsumption], current.alcohol_consumption.value
            )),
            stress_level=self._get_int_input("Typical stress level (1-5)", current.stress_level),
            diet_type=DietType(self._get_choice_input(
                "Diet", [d.value for d in DietType], current.diet_type.value
            ))
        )

    def input_sleep(self) -> bool:
        """Display form for a night of sleep."""
        print("\n=== Record Sleep ===")
        return self._record(lambda user_id: SleepEntry(
            id=self._new_id("sleep"),
            user_id=user_id,
            data=SleepData(
                bedtime=self._get_string_input("Bedtime (HH:MM)", optional=True) or "",
                wake_time=self._get_string_input("Wake time (HH:MM)", optional=True) or "",
                total_sleep=self._get_float_input("Total sleep in hours"),
                sleep_quality=self._get_int_input("Sleep quality (1-5)")
            )
        ))

    def input_exercise(self) -> bool:
        """Display form for one exercise activity."""
        print("\n=== Record Exercise ===")
        return self._record(lambda user_id: ExerciseEntry(
            id=self._new_id("exercise"),
            user_id=user_id,
            data=ExerciseData(
                activities=[ExerciseActivity(
                    type=self._get_string_input("Activity type (e.g., walking, running)"),
                    duration=self._get_float_input("Duration in minutes"),
                    intensity=ActivityIntensity(self._get_choice_input(
                        "Intensity", [i.value for i in ActivityIntensity], "moderate"
                    ))
                )],
                steps=self._get_int_input("Steps", 0)
            )
        ))

    def input_nutrition(self) -> bool:
        """Display form for a day of meals and water."""
        print("\n=== Record Nutrition ===")

        def build(user_id: str) -> NutritionEntry:
            meals = []
            for meal_type in ("breakfast", "lunch", "dinner", "snack"):
                food = self._get_string_input(f"{meal_type.title()} (Enter to skip)", optional=True)
                if food:
                    meals.append(Meal(type=meal_type, foods=[Food(name=food)]))
            return NutritionEntry(
                id=self._new_id("nutrition"),
                user_id=user_id,
                data=NutritionData(meals=meals, water_intake=self._get_float_input("Water intake in ml", 0))
            )

        return self._record(build)

    def input_symptoms(self) -> bool:
        """Display form for a symptom check-in."""
        print("\n=== Record Symptoms ===")

        def build(user_id: str) -> SymptomEntry:
            symptoms = [
                SymptomItem(name=name, severity=self._get_int_input(f"Severity of {name} (1-5)"))
                for name in self._get_list_input("Symptoms (comma separated)")
            ]
            return SymptomEntry(
                id=self._new_id("symptoms"),
                user_id=user_id,
                data=SymptomData(
                    symptoms=symptoms,
                    mood=self._get_int_input("Mood (1-5)"),
                    energy_level=self._get_int_input("Energy level (1-5)"),
                    stress_level=self._get_int_input("Stress level (1-5)")
                )
            )

        return self._record(build)

    def input_medication(self) -> bool:
        """Display form asking which of the profile's medications were taken."""
        print("\n=== Record Medication ===")
        profile = self.profile
        if profile is None or not profile.medications:
            print("No medications on your profile.")
            return False

        return self._record(lambda user_id: MedicationEntry(
            id=self._new_id("medication"),
            user_id=user_id,
            data=MedicationData(medications=[
                MedicationDose(
                    name=name,
                    adherence=self._get_choice_input(f"Took {name}?", ["y", "n"], "y") == "y"
                )
                for name in profile.medications
            ])
        ))

    def input_metric(self) -> bool:
        """Display form for a single measurement (weight, blood_pressure, ...)."""
        print("\n=== Record Metric ===")
        profile = self.profile
        if profile is None:
            print("Please set up your profile first.")
            return False

        try:
            metric_type = self._get_choice_input(
                "Metric", ["weight", "blood_pressure", "heart_rate", "blood_sugar"], "weight"
            )
            units = {"weight": "kg", "blood_pressure": "mmHg", "heart_rate": "bpm", "blood_sugar": "mg/dL"}
            metric = MetricRecord(
                id=self._new_id("metric"),
                user_id=profile.id,
                metric_type=metric_type,
                value=self._get_float_input(f"Value ({units[metric_type]})"),
                unit=units[metric_type]
            )
        except ValidationError as e:
            self._print_validation_error(e)
            return False

        return self._report(self.store.save_metric(metric))

    def generate_insights(self) -> None:
        """Run the insight engine and store the new insights."""
        profile = self.profile
        if profile is None:
            print("Please set up your profile first.")
            return

        result = self.insight_service.generate_and_store(profile, self.store)
        self._report(result)

    def view_insights(self, unread_only: bool = False) -> None:
        """
        Display stored insights organized by priority.
        """
        print("\n=== Health Insights ===")
        insights = self.store.get_insights(is_read=False if unread_only else None)

        if not insights:
            print("No insights at this time. Keep tracking your health data!")
            return

        current_priority: Optional[InsightPriority] = None
        for insight in sort_by_priority(insights):
            if insight.priority != current_priority:
                current_priority = insight.priority
                print(f"\n{'=' * 60}")
                print(f"{current_priority.value.upper()} PRIORITY")
                print('=' * 60)

            marker = "★" if insight.is_favorited else " "
            unread = "" if insight.is_read else " (new)"
            print(f"\n{marker} [{insight.id}] {insight.title}{unread}")
            print(f"   {insight.content}")
            print(f"   Confidence: {insight.confidence:.0%} | Category: {insight.category.value}")
            if insight.action_items:
                print("\n   Action Items:")
                for item in insight.action_items:
                    print(f"   • {item}")

        insight_id = self._get_string_input("\nInsight id to mark read (Enter to skip)", optional=True)
        if insight_id:
            self._report(self.store.mark_insight_as_read(insight_id))
        insight_id = self._get_string_input("Insight id to toggle favorite (Enter to skip)", optional=True)
        if insight_id:
            self._report(self.store.toggle_insight_favorite(insight_id))

    def load_scenario(self) -> None:
        """Replace stored data with a simulated scenario and generate insights."""
        scenario = self._get_choice_input("Scenario", list(SCENARIOS), "at-risk")
        profile = simulate_health_scenario(self.store, scenario)
        insights = self.insight_service.generate_for(profile)
        self.store.save_insights(insights)
        print(f"\n✓ Generated {len(insights)} insights for the {scenario} scenario")

    def export_data(self) -> None:
        """Write all data to a JSON file."""
        default = f"health_insights_export_{datetime.now():%Y%m%d_%H%M%S}.json"
        path = Path(self._get_string_input("Export file", default))
        try:
            path.write_text(self.export_manager.export_user_data(), encoding='utf-8')
        except OSError as e:
            print(f"\n✗ Export failed: {e}")
            return
        print(f"\n✓ Exported data to {path}")

    def _record(self, build: Callable[[str], object]) -> bool:
        profile = self.profile
        if profile is None:
            print("Please set up your profile first.")
            return False
        try:
            entry = build(profile.id)
        except ValidationError as e:
            self._print_validation_error(e)
            return False
        except ValueError as e:
            print(f"\n✗ Invalid input: {str(e)}")
            return False
        if not self._report(self.store.save_detailed_entry(entry)):
            return False
        self.generate_insights()
        return True

    @staticmethod
    def _report(result: StorageResult) -> bool:
        if result.success:
            print(f"\n✓ {result.message}")
        else:
            print(f"\n✗ Error: {result.message}")
        return result.success

    @staticmethod
    def _print_validation_error(error: ValidationError) -> None:
        print("\n✗ Validation Error:")
        for detail in error.errors():
            field = ".".join(str(part) for part in detail['loc'])
            print(f"  - {field}: {detail['msg']}")

    @staticmethod
    def _new_id(kind: str) -> str:
        return f"{kind}_{uuid.uuid4().hex[:12]}"

    def _get_int_input(self, prompt: str, default: Optional[int] = None, optional: bool = False) -> Optional[int]:
        """Get integer input with optional default."""
        prompt = f"{prompt} [{default}]: " if default is not None else f"{prompt}: "

        while True:
            value = input(prompt).strip()
            if not value and default is not None:
                return default
            if not value and optional:
                return None
            try:
                return int(value)
            except ValueError:
                print("  ✗ Please enter a valid integer")

    def _get_float_input(self, prompt: str, default: Optional[float] = None, optional: bool = False) -> Optional[float]:
        """Get float input with optional default."""
        prompt = f"{prompt} [{default}]: " if default is not None else f"{prompt}: "

        while True:
            value = input(prompt).strip()
            if not value and default is not None:
                return default
            if not value and optional:
                return None
            try:
                return float(value)
            except ValueError:
                print("  ✗ Please enter a valid number")

    def _get_string_input(self, prompt: str, default: Optional[str] = None, optional: bool = False) -> Optional[str]:
        """Get string input with optional default."""
        prompt = f"{prompt} [{default}]: " if default is not None else f"{prompt}: "

        value = input(prompt).strip()
        if not value and default is not None:
            return default
        if not value and optional:
            return None
        return value

    def _get_list_input(self, prompt: str, default: Optional[list[str]] = None) -> list[str]:
        """Get comma separated input; Enter keeps the default, 'none' clears it."""
        if default:
            prompt = f"{prompt} [{', '.join(default)}]: "
        else:
            prompt = f"{prompt}: "

        value = input(prompt).strip()
        if not value:
            return list(default or [])
        if value.lower() == "none":
            return []
        return [item.strip() for item in value.split(",") if item.strip()]

    def _get_choice_input(self, prompt: str, choices: list[str], default: Optional[str] = None) -> str:
        """Get choice input from list of options."""
        choices_str = "/".join(choices)
        if default is not None:
            prompt = f"{prompt} ({choices_str}) [{default}]: "
        else:
            prompt = f"{prompt} ({choices_str}): "

        while True:
            value = input(prompt).strip().lower()
            if not value and default is not None:
                return default
            if value in choices:
                return value
            print(f"  ✗ Please choose from: {choices_str}")

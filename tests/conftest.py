"""Shared test fixtures for Health Insights tests."""

from datetime import datetime, timedelta, timezone

import pytest

from health_insights.models import (
    ExerciseActivity, ExerciseData, ExerciseEntry, Meal, MedicationData,
    MedicationDose, MedicationEntry, MetricRecord, NutritionData,
    NutritionEntry, SleepData, SleepEntry, SymptomData, SymptomEntry,
    UserProfile
)

NOW = datetime(2026, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _hermetic_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "HEALTH_INSIGHTS_DATA_DIR",
        "HEALTH_INSIGHTS_LOG_LEVEL",
        "HEALTH_INSIGHTS_METRIC_HISTORY_LIMIT",
        "HEALTH_INSIGHTS_DETAILED_HISTORY_LIMIT",
        "HEALTH_INSIGHTS_SKIP_DUPLICATE_INSIGHTS",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_profile():
    """Profile with a normal BMI (22.5) aged 31 unless overridden."""
    def _make(**overrides) -> UserProfile:
        fields = {
            "id": "user-1",
            "first_name": "Test",
            "last_name": "User",
            "date_of_birth": "1995-01-01",
            "height": 170,
            "weight": 65,
            "medications": [],
        }
        fields.update(overrides)
        return UserProfile(**fields)
    return _make


def _day(i: int) -> datetime:
    return NOW - timedelta(days=i)


@pytest.fixture
def make_sleep():
    def _make(count: int, hours: float = 8, quality: int = 4) -> list[SleepEntry]:
        return [
            SleepEntry(
                id=f"sleep_{i}", user_id="user-1", timestamp=_day(i),
                data=SleepData(total_sleep=hours, sleep_quality=quality)
            )
            for i in range(count)
        ]
    return _make


@pytest.fixture
def make_exercise():
    """One exercise entry per duration; None gives an entry with no activities."""
    def _make(durations: list) -> list[ExerciseEntry]:
        return [
            ExerciseEntry(
                id=f"exercise_{i}", user_id="user-1", timestamp=_day(i),
                data=ExerciseData(
                    activities=[] if minutes is None else [ExerciseActivity(type="walking", duration=minutes)]
                )
            )
            for i, minutes in enumerate(durations)
        ]
    return _make


@pytest.fixture
def make_nutrition():
    def _make(count: int, water: float, meals: int) -> list[NutritionEntry]:
        meal_types = ["breakfast", "lunch", "dinner", "snack"]
        return [
            NutritionEntry(
                id=f"nutrition_{i}", user_id="user-1", timestamp=_day(i),
                data=NutritionData(
                    meals=[Meal(type=meal_types[m % 4]) for m in range(meals)],
                    water_intake=water
                )
            )
            for i in range(count)
        ]
    return _make


@pytest.fixture
def make_symptoms():
    def _make(count: int, mood: int = 3, stress: int = 3, energy: int = 3) -> list[SymptomEntry]:
        return [
            SymptomEntry(
                id=f"symptoms_{i}", user_id="user-1", timestamp=_day(i),
                data=SymptomData(mood=mood, stress_level=stress, energy_level=energy)
            )
            for i in range(count)
        ]
    return _make


@pytest.fixture
def make_medication():
    """One medication entry per list of adherence flags."""
    def _make(adherence: list[list[bool]]) -> list[MedicationEntry]:
        return [
            MedicationEntry(
                id=f"medication_{i}", user_id="user-1", timestamp=_day(i),
                data=MedicationData(medications=[
                    MedicationDose(name=f"med_{j}", adherence=taken) for j, taken in enumerate(flags)
                ])
            )
            for i, flags in enumerate(adherence)
        ]
    return _make


@pytest.fixture
def make_metrics():
    """Metrics of one type, values given newest first."""
    def _make(metric_type: str, values: list[float]) -> list[MetricRecord]:
        return [
            MetricRecord(
                id=f"{metric_type}_{i}", user_id="user-1", metric_type=metric_type,
                value=value, timestamp=NOW - timedelta(hours=i)
            )
            for i, value in enumerate(values)
        ]
    return _make

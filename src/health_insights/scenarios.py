"""
Scenario simulator for Health Insights.

Fills a HealthDataStore with a week of canned data for one of three
scenarios so the insight engine can be exercised end to end.
"""

import logging
import random
from datetime import datetime, timedelta
from typing import Optional

from .health_store import HealthDataStore
from .models import (
    ActivityLevel, AlcoholConsumption, BloodPressure, DietType, EmergencyContact,
    ExerciseActivity, ExerciseData, ExerciseEntry, Food, Gender, Lifestyle,
    Meal, MedicationData, MedicationDose, MedicationEntry, MetricRecord,
    NutritionData, NutritionEntry, SleepData, SleepEntry, SmokingStatus,
    SymptomData, SymptomEntry, SymptomItem, UserProfile, VitalData,
    VitalsEntry, utc_now
)

logger = logging.getLogger(__name__)

SCENARIOS = ("healthy", "at-risk", "chronic-condition")


def build_test_profile(scenario: str, now: Optional[datetime] = None) -> UserProfile:
    """
    Test profile for a scenario.

    Raises:
        ValueError: If scenario is unknown
    """
    if scenario not in SCENARIOS:
        raise ValueError(f"Unknown scenario: {scenario}")
    now = now or utc_now()
    healthy = scenario == "healthy"
    chronic = scenario == "chronic-condition"

    return UserProfile(
        id=f"test_user_{int(now.timestamp() * 1000)}",
        email="test@healthinsights.local",
        first_name="Sarah",
        last_name="Johnson",
        date_of_birth="1985-06-15",
        gender=Gender.FEMALE,
        height=165,
        weight={"healthy": 65, "at-risk": 75, "chronic-condition": 85}[scenario],
        blood_type="O+",
        medications=["Metformin", "Lisinopril"] if chronic else [],
        medical_conditions=["Type 2 Diabetes", "Hypertension"] if chronic else [],
        emergency_contact=EmergencyContact(name="John Johnson", phone="+1-555-0123", relationship="Spouse"),
        lifestyle=Lifestyle(
            activity_level=ActivityLevel.MODERATELY_ACTIVE if healthy else ActivityLevel.SEDENTARY,
            smoking_status=SmokingStatus.NEVER,
            alcohol_consumption=AlcoholConsumption.OCCASIONAL,
            sleep_hours={"healthy": 8, "at-risk": 5.5, "chronic-condition": 6}[scenario],
            stress_level={"healthy": 2, "at-risk": 4, "chronic-condition": 3}[scenario],
            diet_type=DietType.OMNIVORE
        ),
        created_at=now,
        updated_at=now
    )


def simulate_health_scenario(
    store: HealthDataStore,
    scenario: str,
    now: Optional[datetime] = None,
    seed: Optional[int] = None
) -> UserProfile:
    """
    Replace the store's contents with a week of scenario data.

    Args:
        store: Store to fill (cleared first)
        scenario: One of SCENARIOS
        now: Date of the most recent day (defaults to now)
        seed: Seed for the random parts of the data

    Returns:
        The saved test profile

    Raises:
        ValueError: If scenario is unknown
    """
    now = now or utc_now()
    profile = build_test_profile(scenario, now)
    rng = random.Random(seed)

    store.clear_all()
    store.save_profile(profile)

    if scenario == "healthy":
        _simulate_healthy(store, profile.id, now)
    elif scenario == "at-risk":
        _simulate_at_risk(store, profile.id, now, rng)
    else:
        _simulate_chronic_condition(store, profile.id, now, rng)

    logger.info("Simulated %s scenario for %s", scenario, profile.id)
    return profile


def _simulate_healthy(store: HealthDataStore, user_id: str, now: datetime) -> None:
    for i in range(7):
        day = now - timedelta(days=i)
        store.save_detailed_entry(SleepEntry(
            id=f"sim_sleep_{i}", user_id=user_id, timestamp=day,
            data=SleepData(bedtime="22:30", wake_time="07:00", total_sleep=8.5, sleep_quality=4)
        ))
        store.save_detailed_entry(ExerciseEntry(
            id=f"sim_exercise_{i}", user_id=user_id, timestamp=day,
            data=ExerciseData(
                activities=[ExerciseActivity(type="Running", duration=30, intensity="moderate", calories_burned=300)],
                steps=10000,
                active_minutes=45
            )
        ))
        store.save_detailed_entry(NutritionEntry(
            id=f"sim_nutrition_{i}", user_id=user_id, timestamp=day,
            data=NutritionData(
                meals=[
                    Meal(type="breakfast", foods=[Food(name="Oatmeal with berries", unit="bowl")], time="08:00"),
                    Meal(type="lunch", foods=[Food(name="Grilled chicken salad", unit="plate")], time="12:30"),
                    Meal(type="dinner", foods=[Food(name="Salmon with vegetables", unit="plate")], time="19:00"),
                ],
                water_intake=2500,
                supplements=["Vitamin D", "Omega-3"]
            )
        ))


def _simulate_at_risk(store: HealthDataStore, user_id: str, now: datetime, rng: random.Random) -> None:
    for i in range(7):
        day = now - timedelta(days=i)
        store.save_detailed_entry(SleepEntry(
            id=f"sim_sleep_risk_{i}", user_id=user_id, timestamp=day,
            data=SleepData(
                bedtime="01:00", wake_time="06:30", total_sleep=5.5, sleep_quality=2,
                sleep_disturbances=["stress", "screen time"]
            )
        ))
        store.save_detailed_entry(ExerciseEntry(
            id=f"sim_exercise_risk_{i}", user_id=user_id, timestamp=day,
            data=ExerciseData(activities=[], steps=3000, active_minutes=10)
        ))
        store.save_detailed_entry(SymptomEntry(
            id=f"sim_symptoms_risk_{i}", user_id=user_id, timestamp=day,
            data=SymptomData(
                symptoms=[
                    SymptomItem(name="Headache", severity=3, duration="2 hours"),
                    SymptomItem(name="Fatigue", severity=4, duration="All day"),
                ],
                mood=2,
                energy_level=2,
                stress_level=4
            )
        ))

    for i in range(5):
        store.save_metric(MetricRecord(
            id=f"sim_bp_{i}", user_id=user_id, metric_type="blood_pressure",
            value=145 + rng.random() * 10, unit="mmHg",
            timestamp=now - timedelta(days=i)
        ))


def _simulate_chronic_condition(store: HealthDataStore, user_id: str, now: datetime, rng: random.Random) -> None:
    for i in range(7):
        day = now - timedelta(days=i)
        store.save_detailed_entry(VitalsEntry(
            id=f"sim_vitals_chronic_{i}", user_id=user_id, timestamp=day,
            data=VitalData(
                blood_sugar=180 + rng.random() * 40,
                blood_pressure=BloodPressure(systolic=135, diastolic=85)
            )
        ))
        store.save_detailed_entry(MedicationEntry(
            id=f"sim_medication_chronic_{i}", user_id=user_id, timestamp=day,
            data=MedicationData(medications=[
                MedicationDose(name="Metformin", dosage="500mg", time_taken="08:00", adherence=rng.random() > 0.2),
                MedicationDose(name="Lisinopril", dosage="10mg", time_taken="08:00", adherence=rng.random() > 0.1),
            ])
        ))

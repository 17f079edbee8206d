"""
Data models for Health Insights.

Defines Pydantic models for the user profile, metric history, detailed
health entries, trends and generated insights with validation rules.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Literal, Optional, Union
from pydantic import AfterValidator, BaseModel, Field, TypeAdapter, field_validator


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Convert to aware UTC; naive values are taken as local time."""
    return value.astimezone(timezone.utc)


# Every stored timestamp is aware UTC so records from any source sort together
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class Gender(str, Enum):
    """Gender options on the user profile."""
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"
    PREFER_NOT_TO_SAY = "prefer-not-to-say"


class ActivityLevel(str, Enum):
    """Self-reported activity levels."""
    SEDENTARY = "sedentary"
    LIGHTLY_ACTIVE = "lightly-active"
    MODERATELY_ACTIVE = "moderately-active"
    VERY_ACTIVE = "very-active"
    EXTREMELY_ACTIVE = "extremely-active"


class SmokingStatus(str, Enum):
    NEVER = "never"
    FORMER = "former"
    CURRENT = "current"


class AlcoholConsumption(str, Enum):
    NONE = "none"
    OCCASIONAL = "occasional"
    MODERATE = "moderate"
    HEAVY = "heavy"


class DietType(str, Enum):
    OMNIVORE = "omnivore"
    VEGETARIAN = "vegetarian"
    VEGAN = "vegan"
    KETO = "keto"
    MEDITERRANEAN = "mediterranean"
    OTHER = "other"


class DataSource(str, Enum):
    """Where a record came from."""
    MANUAL = "manual"
    VOICE = "voice"
    DEVICE = "device"
    IMPORTED = "imported"


class ActivityIntensity(str, Enum):
    """Activity intensity levels."""
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very-high"


class InsightType(str, Enum):
    """Kinds of generated insights."""
    RECOMMENDATION = "recommendation"
    WARNING = "warning"
    ACHIEVEMENT = "achievement"
    EDUCATIONAL = "educational"
    TREND = "trend"


class InsightCategory(str, Enum):
    """Health domain an insight belongs to."""
    NUTRITION = "nutrition"
    EXERCISE = "exercise"
    SLEEP = "sleep"
    MENTAL_HEALTH = "mental-health"
    PREVENTIVE_CARE = "preventive-care"
    MEDICATION = "medication"
    GENERAL = "general"


class InsightPriority(str, Enum):
    """Insight priority levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class TrendDirection(str, Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"
    FLUCTUATING = "fluctuating"


class Significance(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class EmergencyContact(BaseModel):
    name: str
    phone: str
    relationship: str


class Lifestyle(BaseModel):
    """Lifestyle attributes captured during profile setup."""
    activity_level: ActivityLevel = ActivityLevel.SEDENTARY
    smoking_status: SmokingStatus = SmokingStatus.NEVER
    alcohol_consumption: AlcoholConsumption = AlcoholConsumption.NONE
    sleep_hours: float = Field(8.0, ge=0, le=24, description="Nightly sleep target in hours")
    stress_level: int = Field(3, ge=1, le=5)
    diet_type: DietType = DietType.OMNIVORE


class UserProfile(BaseModel):
    """
    User profile consumed by the insight engine.

    Height and weight accept zero so that incomplete profiles can be
    represented; the engine skips the rules that depend on them.
    Infinite and NaN values are rejected.
    The date of birth is kept as the raw ISO string entered by the user.
    """
    id: str = Field(..., min_length=1)
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    date_of_birth: str = Field(..., description="ISO date, e.g. 1985-06-15")
    gender: Gender = Gender.PREFER_NOT_TO_SAY
    height: float = Field(..., ge=0, allow_inf_nan=False, description="Height in cm")
    weight: float = Field(..., ge=0, allow_inf_nan=False, description="Weight in kg")
    blood_type: Optional[str] = None
    allergies: list[str] = Field(default_factory=list)
    medications: list[str] = Field(default_factory=list)
    medical_conditions: list[str] = Field(default_factory=list)
    emergency_contact: Optional[EmergencyContact] = None
    lifestyle: Lifestyle = Field(default_factory=Lifestyle)
    created_at: UtcDatetime = Field(default_factory=utc_now)
    updated_at: UtcDatetime = Field(default_factory=utc_now)


class MetricRecord(BaseModel):
    """A single scalar health measurement (weight, blood pressure, ...)."""
    id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    metric_type: str = Field(..., min_length=1)
    value: float = Field(..., allow_inf_nan=False)
    unit: str = ""
    notes: Optional[str] = None
    timestamp: UtcDatetime = Field(default_factory=utc_now)
    source: DataSource = DataSource.MANUAL


class Food(BaseModel):
    name: str = Field(..., min_length=1)
    quantity: float = Field(1, gt=0)
    unit: str = ""
    calories: Optional[float] = Field(None, ge=0)


class Meal(BaseModel):
    type: Literal["breakfast", "lunch", "dinner", "snack"]
    foods: list[Food] = Field(default_factory=list)
    time: str = ""


class NutritionData(BaseModel):
    meals: list[Meal] = Field(default_factory=list)
    water_intake: float = Field(0, ge=0, allow_inf_nan=False, description="Water intake in ml")
    supplements: list[str] = Field(default_factory=list)


class ExerciseActivity(BaseModel):
    type: str = Field(..., min_length=1)
    duration: float = Field(..., ge=0, le=1440, description="Duration in minutes")
    intensity: ActivityIntensity = ActivityIntensity.MODERATE
    calories_burned: Optional[float] = Field(None, ge=0)
    heart_rate_avg: Optional[int] = Field(None, gt=0)
    heart_rate_max: Optional[int] = Field(None, gt=0)


class ExerciseData(BaseModel):
    activities: list[ExerciseActivity] = Field(default_factory=list)
    steps: int = Field(0, ge=0)
    active_minutes: float = Field(0, ge=0)


class SleepData(BaseModel):
    """
    Sleep log for one night.

    Validates:
    - Total sleep: 0-24 hours
    - Sleep quality: 1-5 scale
    """
    bedtime: str = ""
    wake_time: str = ""
    total_sleep: float = Field(..., ge=0, le=24, description="Total sleep in hours")
    sleep_quality: int = Field(..., ge=1, le=5)
    sleep_disturbances: list[str] = Field(default_factory=list)


class SymptomItem(BaseModel):
    name: str = Field(..., min_length=1)
    severity: int = Field(..., ge=1, le=5)
    duration: str = ""
    triggers: list[str] = Field(default_factory=list)
    location: Optional[str] = None


class SymptomData(BaseModel):
    """Symptom check-in with mood, energy and stress on 1-5 scales."""
    symptoms: list[SymptomItem] = Field(default_factory=list)
    mood: int = Field(..., ge=1, le=5)
    energy_level: int = Field(..., ge=1, le=5)
    stress_level: int = Field(..., ge=1, le=5)


class MedicationDose(BaseModel):
    name: str = Field(..., min_length=1)
    dosage: str = ""
    time_taken: str = ""
    adherence: bool
    side_effects: list[str] = Field(default_factory=list)


class MedicationData(BaseModel):
    medications: list[MedicationDose] = Field(default_factory=list)


class BloodPressure(BaseModel):
    systolic: int = Field(..., ge=50, le=260)
    diastolic: int = Field(..., ge=30, le=160)

    @field_validator('diastolic')
    @classmethod
    def validate_blood_pressure(cls, v: int, info) -> int:
        """Ensure diastolic BP is less than systolic BP."""
        if 'systolic' in info.data and v >= info.data['systolic']:
            raise ValueError("Diastolic blood pressure must be less than systolic blood pressure")
        return v


class VitalData(BaseModel):
    blood_pressure: Optional[BloodPressure] = None
    heart_rate: Optional[int] = Field(None, ge=20, le=250)
    temperature: Optional[float] = Field(None, ge=30.0, le=45.0)
    weight: Optional[float] = Field(None, gt=0)
    blood_sugar: Optional[float] = Field(None, gt=0)
    oxygen_saturation: Optional[int] = Field(None, ge=50, le=100)


class _EntryBase(BaseModel):
    id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    timestamp: UtcDatetime = Field(default_factory=utc_now)
    notes: Optional[str] = None
    source: DataSource = DataSource.MANUAL


class NutritionEntry(_EntryBase):
    type: Literal["nutrition"] = "nutrition"
    data: NutritionData


class ExerciseEntry(_EntryBase):
    type: Literal["exercise"] = "exercise"
    data: ExerciseData


class SleepEntry(_EntryBase):
    type: Literal["sleep"] = "sleep"
    data: SleepData


class SymptomEntry(_EntryBase):
    type: Literal["symptoms"] = "symptoms"
    data: SymptomData


class MedicationEntry(_EntryBase):
    type: Literal["medication"] = "medication"
    data: MedicationData


class VitalsEntry(_EntryBase):
    type: Literal["vitals"] = "vitals"
    data: VitalData


# Tagged union of detailed entries, discriminated by ``type``
DetailedEntry = Annotated[
    Union[NutritionEntry, ExerciseEntry, SleepEntry, SymptomEntry, MedicationEntry, VitalsEntry],
    Field(discriminator="type"),
]

DETAILED_ENTRY_TYPES = ("nutrition", "exercise", "sleep", "symptoms", "medication", "vitals")

detailed_entry_adapter: TypeAdapter = TypeAdapter(DetailedEntry)
detailed_entry_list_adapter: TypeAdapter = TypeAdapter(list[DetailedEntry])


class HealthTrend(BaseModel):
    """Precomputed directional summary of a metric's recent trajectory."""
    id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    metric_type: str = Field(..., min_length=1)
    trend: TrendDirection
    change_percent: float
    timeframe: str = ""
    significance: Significance = Significance.LOW
    created_at: UtcDatetime = Field(default_factory=utc_now)


class Insight(BaseModel):
    """
    Health insight with priority, confidence and suggested actions.
    """
    id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    type: InsightType
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    category: InsightCategory
    priority: InsightPriority
    confidence: float = Field(..., ge=0, le=1)
    data_points: list[str] = Field(default_factory=list, description="Record domains behind this insight")
    action_items: list[str] = Field(default_factory=list)
    created_at: UtcDatetime = Field(default_factory=utc_now)
    expires_at: Optional[UtcDatetime] = None
    tags: list[str] = Field(default_factory=list)
    related_insights: list[str] = Field(default_factory=list)
    is_read: bool = False
    is_favorited: bool = False

from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vitalscore.utils.timezone import bedtime_minutes
from vitalscore.utils.unit_converter import DurationUnit, convert_duration_to_minutes
from .mappings import BiomarkerCategory, Gender, WorkoutType


class FrozenModel(BaseModel):
    """Immutable value record; every engine input and result derives from it."""
    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

class SleepSample(FrozenModel):
    """One night of sleep, already aggregated into minutes per stage."""
    total_minutes: float = Field(..., ge=0)
    in_bed_minutes: float = Field(..., ge=0)
    deep_minutes: float = Field(0, ge=0)
    rem_minutes: float = Field(0, ge=0)
    light_minutes: float = Field(0, ge=0)  # remainder in upstream data
    awake_minutes: float = Field(0, ge=0)
    latency_minutes: float = Field(0, ge=0)
    hrv_avg: Optional[float] = Field(None, ge=0)  # ms
    resting_hr: Optional[float] = Field(None, gt=0)  # bpm
    bedtime_minutes: Optional[float] = Field(None, ge=0, lt=1440)  # minutes from local midnight
    sleep_date: Optional[date] = None

    @classmethod
    def from_durations(
        cls,
        *,
        unit: DurationUnit,
        total: float,
        in_bed: float,
        deep: float = 0,
        rem: float = 0,
        light: float = 0,
        awake: float = 0,
        latency: float = 0,
        bedtime: Optional[datetime] = None,
        tz_name: Optional[str] = None,
        **extra,
    ) -> "SleepSample":
        """
        Build a sample from stage durations expressed in an explicit unit.

        A bedtime timestamp is read as wall-clock time in tz_name (or the
        configured default timezone).
        """
        if bedtime is not None:
            extra["bedtime_minutes"] = bedtime_minutes(bedtime, tz_name)
        return cls(
            total_minutes=convert_duration_to_minutes(total, unit),
            in_bed_minutes=convert_duration_to_minutes(in_bed, unit),
            deep_minutes=convert_duration_to_minutes(deep, unit),
            rem_minutes=convert_duration_to_minutes(rem, unit),
            light_minutes=convert_duration_to_minutes(light, unit),
            awake_minutes=convert_duration_to_minutes(awake, unit),
            latency_minutes=convert_duration_to_minutes(latency, unit),
            **extra,
        )


class WorkoutSample(FrozenModel):
    duration_minutes: float = Field(..., ge=0)
    heart_rate_avg: Optional[float] = Field(None, ge=0)
    heart_rate_max: Optional[float] = Field(None, ge=0)
    workout_type: WorkoutType = WorkoutType.OTHER
    calories_burned: Optional[float] = Field(None, ge=0)

    @field_validator("workout_type", mode="before")
    @classmethod
    def map_workout_label(cls, v):
        return WorkoutType.from_label(v)

    @property
    def has_heart_rate(self) -> bool:
        return bool(self.heart_rate_avg) and self.heart_rate_avg > 0


class UserPhysiology(FrozenModel):
    age: Optional[float] = Field(None, ge=0)
    resting_hr: Optional[float] = Field(None, gt=0)
    max_hr: Optional[float] = Field(None, gt=0)
    gender: Gender = Gender.MALE


# ---------------------------------------------------------------------------
# Baselines
# ---------------------------------------------------------------------------

class PersonalBaseline(FrozenModel):
    hrv_avg: float
    hrv_std_dev: float
    resting_hr_avg: float
    resting_hr_std_dev: float
    avg_bedtime_minutes: float  # circular mean, minutes from midnight
    bedtime_std_dev: float
    sample_count: int
    bedtime_sample_count: int = 0


class SleepStageBaseline(FrozenModel):
    deep_sleep_percent: float
    rem_sleep_percent: float
    avg_duration_minutes: float
    session_count: int


class ScoreComponent(FrozenModel):
    score: Optional[float] = None
    weight: float
    has_data: bool
    z_score: Optional[float] = None


# ---------------------------------------------------------------------------
# Sleep
# ---------------------------------------------------------------------------

class SleepQuality(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class SleepScoreComponent(FrozenModel):
    score: int
    value: Optional[float] = None
    weight: float
    label: str
    has_data: bool = True


class SleepScoreComponents(FrozenModel):
    duration: SleepScoreComponent
    efficiency: SleepScoreComponent
    deep_sleep: SleepScoreComponent
    rem_sleep: SleepScoreComponent
    latency: SleepScoreComponent
    awakenings: SleepScoreComponent
    hrv: SleepScoreComponent

    def ordered(self) -> List[SleepScoreComponent]:
        return [
            self.duration,
            self.efficiency,
            self.deep_sleep,
            self.rem_sleep,
            self.latency,
            self.awakenings,
            self.hrv,
        ]


class SleepScoreResult(FrozenModel):
    total_score: int
    components: SleepScoreComponents
    quality: SleepQuality
    recommendations: List[str]


# ---------------------------------------------------------------------------
# Strain
# ---------------------------------------------------------------------------

class StrainCategory(str, Enum):
    REST = "rest"
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    MAX = "max"


class StrainResult(FrozenModel):
    strain_score: float  # 0-21
    category: StrainCategory
    trimp: int
    description: str


# ---------------------------------------------------------------------------
# Recovery
# ---------------------------------------------------------------------------

class RecoveryCategory(str, Enum):
    OPTIMAL = "optimal"
    GOOD = "good"
    MODERATE = "moderate"
    LOW = "low"
    INSUFFICIENT_DATA = "insufficient_data"


class RecoveryInputs(FrozenModel):
    sleep_score: Optional[float] = None
    hrv_value: Optional[float] = None
    resting_hr: Optional[float] = None
    previous_day_strain: float = Field(0.0, ge=0)
    bedtime_minutes: Optional[float] = Field(None, ge=0, lt=1440)
    baseline: Optional[PersonalBaseline] = None


class RecoveryComponents(FrozenModel):
    sleep_quality: ScoreComponent
    hrv_status: ScoreComponent
    resting_hr_status: ScoreComponent
    strain_impact: ScoreComponent
    sleep_consistency: ScoreComponent

    def ordered(self) -> List[ScoreComponent]:
        return [
            self.sleep_quality,
            self.hrv_status,
            self.resting_hr_status,
            self.strain_impact,
            self.sleep_consistency,
        ]


class RecoveryResult(FrozenModel):
    recovery_score: Optional[int]
    category: RecoveryCategory
    components: RecoveryComponents
    recommendation: str
    training_recommendation: str
    has_enough_data: bool


class ComponentImpact(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"
    NO_DATA = "no_data"


class RecoveryFactor(FrozenModel):
    name: str
    score: Optional[float]
    weight: str  # display percentage, e.g. "35%"
    impact: ComponentImpact
    has_data: bool
    z_score: Optional[float] = None


# ---------------------------------------------------------------------------
# Blood work
# ---------------------------------------------------------------------------

class MarkerStatus(str, Enum):
    OPTIMAL = "optimal"
    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"


class BiomarkerRange(FrozenModel):
    min: Optional[float] = None
    max: Optional[float] = None

    def contains(self, value: float) -> bool:
        if self.min is not None and value < self.min:
            return False
        if self.max is not None and value > self.max:
            return False
        return True


class BiomarkerDefinition(FrozenModel):
    name: str
    category: BiomarkerCategory
    unit: str
    reference_range: BiomarkerRange
    optimal_range: BiomarkerRange
    description: str
    higher_is_better: bool = False


class BiomarkerValue(FrozenModel):
    name: str
    value: float
    unit: str = ""
    category: Optional[str] = None
    reference_min: Optional[float] = None
    reference_max: Optional[float] = None
    optimal_min: Optional[float] = None
    optimal_max: Optional[float] = None


class MarkerStatusResult(FrozenModel):
    status: MarkerStatus
    message: str


class MarkerWithStatus(BiomarkerValue):
    status: MarkerStatus
    status_message: str


class MarkerSummary(FrozenModel):
    optimal: int = 0
    normal: int = 0
    warning: int = 0
    critical: int = 0
    total: int = 0
    overall_score: int = 0


# ---------------------------------------------------------------------------
# Longevity
# ---------------------------------------------------------------------------

class PhenoAgeInput(FrozenModel):
    """Blood markers in US conventional units (the model converts to SI itself)."""
    chronological_age: float = Field(..., gt=0)
    albumin: Optional[float] = None  # g/dL
    creatinine: Optional[float] = None  # mg/dL
    glucose: Optional[float] = None  # mg/dL, fasting
    crp: Optional[float] = None  # mg/L
    lymphocyte_percent: Optional[float] = None  # %
    mcv: Optional[float] = None  # fL
    rdw: Optional[float] = None  # %
    alkaline_phosphatase: Optional[float] = None  # U/L
    wbc: Optional[float] = None  # 10^3 cells/uL


class PillarStatus(str, Enum):
    OPTIMAL = "optimal"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class LongevityPillar(FrozenModel):
    name: str
    score: int
    status: PillarStatus
    factors: List[str]
    description: str


class PhenoAgeResult(FrozenModel):
    biological_age: Optional[float] = None
    age_difference: Optional[float] = None  # negative = younger than chronological
    percentile: Optional[int] = None
    available_markers: int
    required_markers: int = 9
    missing_markers: List[str]
    can_calculate: bool
    pillars: List[LongevityPillar]


class LongevityRecommendation(FrozenModel):
    category: str
    recommendations: List[str]


class BiologicalAgeSnapshot(FrozenModel):
    test_date: date
    chronological_age: float
    biological_age: Optional[float]
    can_calculate: bool


# ---------------------------------------------------------------------------
# Service envelopes
# ---------------------------------------------------------------------------

class MetricSource(FrozenModel):
    """One candidate source for a daily physiological value."""
    name: str
    value: Optional[float] = None
    nightly: bool = True  # measured during last night's sleep


class DailyInputs(FrozenModel):
    last_night: Optional[SleepSample] = None
    history: List[SleepSample] = Field(default_factory=list)
    previous_day_workouts: List[WorkoutSample] = Field(default_factory=list)
    physiology: UserPhysiology = Field(default_factory=UserPhysiology)
    # Extra candidates consulted after last night's sleep, in precedence order
    hrv_sources: List[MetricSource] = Field(default_factory=list)
    resting_hr_sources: List[MetricSource] = Field(default_factory=list)


class DailyScoreSummary(FrozenModel):
    baseline: Optional[PersonalBaseline]
    sleep: Optional[SleepScoreResult]
    strain: StrainResult
    recovery: RecoveryResult
    readiness_score: Optional[int]
    recovery_factors: List[RecoveryFactor]


class BloodPanel(FrozenModel):
    test_date: date
    markers: List[BiomarkerValue]

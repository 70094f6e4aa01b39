"""
Training strain on a 0-21 scale.

With heart-rate data a workout is scored by Banister's TRIMP
(duration x HR reserve x a*e^(b*HR reserve)) passed through a log transform;
without it, duration and workout type stand in for intensity.
"""

import logging
import math
from typing import Dict, Optional, Sequence

from .engine import clamp, first_available, round_to
from .mappings import BANISTER_COEFFICIENTS, INTENSITY_MULTIPLIERS, Gender, WorkoutType
from .schemas import StrainCategory, StrainResult, UserPhysiology, WorkoutSample

logger = logging.getLogger(__name__)

MAX_STRAIN = 21.0
STRAIN_LOG_SCALE = 3.5  # calibrated so TRIMP ~300 lands near 20
DEFAULT_RESTING_HR = 60.0
DEFAULT_MAX_HR = 190.0
CALORIES_PER_MINUTE_BASELINE = 8.0
NON_HR_DAILY_WEIGHT = 0.7

# Lower bound of each category; checked from the top down
STRAIN_CATEGORY_FLOORS = [
    (StrainCategory.MAX, 18.0),
    (StrainCategory.HIGH, 14.0),
    (StrainCategory.MODERATE, 9.0),
    (StrainCategory.LOW, 3.0),
]

WORKOUT_DESCRIPTIONS: Dict[StrainCategory, str] = {
    StrainCategory.REST: "Minimal activity - body is resting",
    StrainCategory.LOW: "Light activity - easy on the body",
    StrainCategory.MODERATE: "Moderate strain - good training stimulus",
    StrainCategory.HIGH: "High strain - significant training load",
    StrainCategory.MAX: "Maximum strain - very demanding session",
}

DAILY_DESCRIPTIONS: Dict[StrainCategory, str] = {
    StrainCategory.REST: "Rest day - minimal physical activity",
    StrainCategory.LOW: "Light day - easy training load",
    StrainCategory.MODERATE: "Moderate day - balanced training",
    StrainCategory.HIGH: "Hard day - significant training stress",
    StrainCategory.MAX: "Peak day - very high training load",
}

REST_DAY_DESCRIPTION = "No workouts logged - rest day"


def estimate_max_hr(age: float) -> int:
    """Tanaka (2001) age-predicted max heart rate."""
    return int(round(208 - 0.7 * age))


def heart_rate_reserve(hr_avg: float, hr_rest: float, hr_max: float) -> float:
    """Karvonen heart-rate reserve fraction; 0 when max does not exceed rest."""
    if hr_max <= hr_rest:
        return 0.0
    return (hr_avg - hr_rest) / (hr_max - hr_rest)


def calculate_trimp(
    duration_minutes: float,
    hr_avg: float,
    hr_rest: float,
    hr_max: float,
    gender: Gender = Gender.MALE,
) -> float:
    reserve = heart_rate_reserve(hr_avg, hr_rest, hr_max)
    a, b = BANISTER_COEFFICIENTS[gender]
    trimp = duration_minutes * reserve * (a * math.exp(b * reserve))
    return max(0.0, trimp)


def trimp_to_strain(trimp: float) -> float:
    if trimp <= 0:
        return 0.0
    return clamp(round_to(STRAIN_LOG_SCALE * math.log(trimp + 1)), 0.0, MAX_STRAIN)


def estimate_strain_without_hr(
    duration_minutes: float,
    workout_type: WorkoutType,
    calories_burned: Optional[float] = None,
) -> float:
    multiplier = INTENSITY_MULTIPLIERS[WorkoutType.from_label(workout_type)]
    strain = (duration_minutes / 60) * 10 * multiplier

    if calories_burned and calories_burned > 0 and duration_minutes > 0:
        calorie_factor = calories_burned / (duration_minutes * CALORIES_PER_MINUTE_BASELINE)
        strain *= clamp(calorie_factor, 0.5, 1.5)

    return clamp(round_to(strain), 0.0, MAX_STRAIN)


def strain_category(strain: float) -> StrainCategory:
    for category, floor in STRAIN_CATEGORY_FLOORS:
        if strain >= floor:
            return category
    return StrainCategory.REST


def resolve_resting_hr(physiology: UserPhysiology) -> float:
    return first_available(physiology.resting_hr, DEFAULT_RESTING_HR)


def resolve_max_hr(physiology: UserPhysiology) -> float:
    tanaka = estimate_max_hr(physiology.age) if physiology.age else None
    return first_available(physiology.max_hr, tanaka, DEFAULT_MAX_HR)


def _workout_trimp(workout: WorkoutSample, physiology: UserPhysiology) -> float:
    return calculate_trimp(
        workout.duration_minutes,
        workout.heart_rate_avg,
        resolve_resting_hr(physiology),
        resolve_max_hr(physiology),
        physiology.gender,
    )


def calculate_strain(workout: WorkoutSample, physiology: Optional[UserPhysiology] = None) -> StrainResult:
    """Strain for a single workout."""
    physiology = physiology or UserPhysiology()
    trimp = 0.0

    if workout.has_heart_rate:
        trimp = _workout_trimp(workout, physiology)
        strain = trimp_to_strain(trimp)
    else:
        strain = estimate_strain_without_hr(
            workout.duration_minutes, workout.workout_type, workout.calories_burned
        )

    category = strain_category(strain)
    return StrainResult(
        strain_score=strain,
        category=category,
        trimp=int(round_to(trimp, 0)),
        description=WORKOUT_DESCRIPTIONS[category],
    )


def calculate_daily_strain(
    workouts: Sequence[WorkoutSample],
    physiology: Optional[UserPhysiology] = None,
) -> StrainResult:
    """
    Aggregate a day's workouts with diminishing returns.

    TRIMP from heart-rate workouts is summed and log-transformed once;
    workouts without heart rate add their own estimate at 70%. A day with no
    heart-rate workout at all uses sqrt(N) x mean strain instead.
    """
    if not workouts:
        return StrainResult(
            strain_score=0.0,
            category=StrainCategory.REST,
            trimp=0,
            description=REST_DAY_DESCRIPTION,
        )

    physiology = physiology or UserPhysiology()
    total_trimp = 0.0
    estimated_strain = 0.0
    has_any_hr = False

    for workout in workouts:
        if workout.has_heart_rate:
            total_trimp += _workout_trimp(workout, physiology)
            has_any_hr = True
        else:
            estimated_strain += calculate_strain(workout, physiology).strain_score

    if has_any_hr:
        strain = trimp_to_strain(total_trimp) + estimated_strain * NON_HR_DAILY_WEIGHT
    else:
        strain = math.sqrt(len(workouts)) * (estimated_strain / len(workouts))

    strain = clamp(round_to(strain), 0.0, MAX_STRAIN)
    category = strain_category(strain)
    logger.debug(
        "Daily strain %.1f from %d workouts (hr=%s, trimp=%.1f)",
        strain, len(workouts), has_any_hr, total_trimp,
    )
    return StrainResult(
        strain_score=strain,
        category=category,
        trimp=int(round_to(total_trimp, 0)),
        description=DAILY_DESCRIPTIONS[category],
    )

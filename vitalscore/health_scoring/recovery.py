"""
Daily recovery composed from five weighted components:

- Sleep quality (35%): last night's sleep score
- HRV status (25%): parasympathetic tone against personal baseline
- Resting HR status (15%): cardiovascular recovery against baseline
- Strain impact (15%): yesterday's training load
- Sleep consistency (10%): bedtime regularity

Sleep data is mandatory. Other missing components are dropped and the
remaining weights re-normalized.
"""

import logging
import math
from typing import Dict, List, Optional, Sequence

from .engine import (
    circular_distance_minutes,
    clamp,
    population_mean,
    round_half_up,
    round_to,
    weighted_composite,
    z_score,
)
from .schemas import (
    ComponentImpact,
    PersonalBaseline,
    RecoveryCategory,
    RecoveryComponents,
    RecoveryFactor,
    RecoveryInputs,
    RecoveryResult,
    ScoreComponent,
)

logger = logging.getLogger(__name__)

RECOVERY_WEIGHTS: Dict[str, float] = {
    "sleep_quality": 0.35,
    "hrv_status": 0.25,
    "resting_hr_status": 0.15,
    "strain_impact": 0.15,
    "sleep_consistency": 0.10,
}

FACTOR_NAMES: Dict[str, str] = {
    "sleep_quality": "Sleep Quality",
    "hrv_status": "HRV Status",
    "resting_hr_status": "Resting HR",
    "strain_impact": "Previous Strain",
    "sleep_consistency": "Sleep Consistency",
}

RECOMMENDATIONS: Dict[RecoveryCategory, str] = {
    RecoveryCategory.OPTIMAL: "Your body is fully recovered. Great day for high-intensity training!",
    RecoveryCategory.GOOD: "You're well recovered. Moderate to high intensity training is appropriate.",
    RecoveryCategory.MODERATE: "Recovery is incomplete. Consider lighter training or active recovery.",
    RecoveryCategory.LOW: "Your body needs rest. Light stretching or complete rest recommended.",
    RecoveryCategory.INSUFFICIENT_DATA: "No sleep data available. Wear your device tonight to track recovery.",
}

TRAINING_RECOMMENDATIONS: Dict[RecoveryCategory, str] = {
    RecoveryCategory.OPTIMAL: "High intensity, intervals, heavy lifting, competition",
    RecoveryCategory.GOOD: "Tempo runs, moderate weights, skill work, games",
    RecoveryCategory.MODERATE: "Easy cardio, light weights, mobility, technique",
    RecoveryCategory.LOW: "Rest, gentle stretching, walking, sleep focus",
    RecoveryCategory.INSUFFICIENT_DATA: "Unable to provide recommendations without sleep data.",
}

TREND_WINDOW = 7


def z_score_to_score(z: float, invert: bool = False) -> int:
    """Sigmoid mapping centred on 75: z=+1 is ~91, z=-1 is ~59."""
    if invert:
        z = -z
    return int(clamp(round_half_up(75 + 25 * math.tanh(0.75 * z)), 0, 100))


def score_sleep_quality(sleep_score: Optional[float]) -> ScoreComponent:
    weight = RECOVERY_WEIGHTS["sleep_quality"]
    if not sleep_score:
        return ScoreComponent(score=None, weight=weight, has_data=False)
    return ScoreComponent(score=clamp(sleep_score, 0, 100), weight=weight, has_data=True)


def score_hrv_status(hrv: Optional[float], baseline: Optional[PersonalBaseline]) -> ScoreComponent:
    weight = RECOVERY_WEIGHTS["hrv_status"]
    if hrv is None:
        return ScoreComponent(score=None, weight=weight, has_data=False)

    if baseline is None:
        if hrv >= 70:
            score = 95
        elif hrv >= 55:
            score = 85
        elif hrv >= 40:
            score = 70
        elif hrv >= 30:
            score = 55
        else:
            score = 40
        return ScoreComponent(score=score, weight=weight, has_data=True)

    z = z_score(hrv, baseline.hrv_avg, baseline.hrv_std_dev)
    return ScoreComponent(score=z_score_to_score(z), weight=weight, has_data=True, z_score=round_to(z, 2))


def score_resting_hr_status(resting_hr: Optional[float], baseline: Optional[PersonalBaseline]) -> ScoreComponent:
    weight = RECOVERY_WEIGHTS["resting_hr_status"]
    if resting_hr is None:
        return ScoreComponent(score=None, weight=weight, has_data=False)

    if baseline is None:
        if resting_hr <= 50:
            score = 95
        elif resting_hr <= 60:
            score = 85
        elif resting_hr <= 70:
            score = 70
        elif resting_hr <= 80:
            score = 55
        else:
            score = 40
        return ScoreComponent(score=score, weight=weight, has_data=True)

    # Lower resting HR is better
    z = z_score(resting_hr, baseline.resting_hr_avg, baseline.resting_hr_std_dev)
    return ScoreComponent(
        score=z_score_to_score(z, invert=True), weight=weight, has_data=True, z_score=round_to(z, 2)
    )


def score_strain_impact(previous_day_strain: float) -> ScoreComponent:
    """Step function of yesterday's strain; a rest day (0) is valid data."""
    strain = previous_day_strain or 0.0
    if strain <= 3:
        score = 100
    elif strain <= 6:
        score = 90
    elif strain <= 9:
        score = 75
    elif strain <= 12:
        score = 60
    elif strain <= 15:
        score = 45
    elif strain <= 18:
        score = 30
    else:
        score = 15
    return ScoreComponent(score=score, weight=RECOVERY_WEIGHTS["strain_impact"], has_data=True)


def score_sleep_consistency(
    bedtime_minutes: Optional[float], baseline: Optional[PersonalBaseline]
) -> ScoreComponent:
    weight = RECOVERY_WEIGHTS["sleep_consistency"]
    if bedtime_minutes is None or baseline is None:
        return ScoreComponent(score=None, weight=weight, has_data=False)

    deviation = circular_distance_minutes(bedtime_minutes, baseline.avg_bedtime_minutes)
    if deviation <= 15:
        score = 100
    elif deviation <= 30:
        score = 85
    elif deviation <= 45:
        score = 70
    elif deviation <= 60:
        score = 55
    elif deviation <= 90:
        score = 40
    else:
        score = 25
    return ScoreComponent(score=score, weight=weight, has_data=True)


def recovery_category(score: int) -> RecoveryCategory:
    if score >= 85:
        return RecoveryCategory.OPTIMAL
    if score >= 70:
        return RecoveryCategory.GOOD
    if score >= 50:
        return RecoveryCategory.MODERATE
    return RecoveryCategory.LOW


def _insufficient(components: RecoveryComponents) -> RecoveryResult:
    category = RecoveryCategory.INSUFFICIENT_DATA
    return RecoveryResult(
        recovery_score=None,
        category=category,
        components=components,
        recommendation=RECOMMENDATIONS[category],
        training_recommendation=TRAINING_RECOMMENDATIONS[category],
        has_enough_data=False,
    )


def calculate_recovery(inputs: RecoveryInputs) -> RecoveryResult:
    components = RecoveryComponents(
        sleep_quality=score_sleep_quality(inputs.sleep_score),
        hrv_status=score_hrv_status(inputs.hrv_value, inputs.baseline),
        resting_hr_status=score_resting_hr_status(inputs.resting_hr, inputs.baseline),
        strain_impact=score_strain_impact(inputs.previous_day_strain),
        sleep_consistency=score_sleep_consistency(inputs.bedtime_minutes, inputs.baseline),
    )

    if not components.sleep_quality.has_data:
        logger.info("Recovery not computed: no sleep data for the night")
        return _insufficient(components)

    composite = weighted_composite((c.score, c.weight, c.has_data) for c in components.ordered())
    if composite is None:
        return _insufficient(components)

    score = round_half_up(composite)
    category = recovery_category(score)
    return RecoveryResult(
        recovery_score=score,
        category=category,
        components=components,
        recommendation=RECOMMENDATIONS[category],
        training_recommendation=TRAINING_RECOMMENDATIONS[category],
        has_enough_data=True,
    )


def component_impact(component: ScoreComponent) -> ComponentImpact:
    if not component.has_data or component.score is None:
        return ComponentImpact.NO_DATA
    if component.score >= 75:
        return ComponentImpact.POSITIVE
    if component.score >= 50:
        return ComponentImpact.NEUTRAL
    return ComponentImpact.NEGATIVE


def recovery_factors(result: RecoveryResult) -> List[RecoveryFactor]:
    """Display list of the five components with their impact on today's score."""
    factors = []
    for key in RECOVERY_WEIGHTS:
        component: ScoreComponent = getattr(result.components, key)
        factors.append(
            RecoveryFactor(
                name=FACTOR_NAMES[key],
                score=component.score,
                weight=f"{round_half_up(component.weight * 100)}%",
                impact=component_impact(component),
                has_data=component.has_data,
                z_score=component.z_score,
            )
        )
    return factors


def calculate_readiness(recovery_score: Optional[float], sleep_score: Optional[float]) -> Optional[int]:
    """Mean of recovery and sleep scores; None unless both are known."""
    if recovery_score is None or sleep_score is None:
        return None
    return round_half_up((recovery_score + sleep_score) / 2)


def calculate_trend(values: Sequence[Optional[float]]) -> float:
    """Latest value minus the mean of up to the previous seven (newest first)."""
    known = [v for v in values if v is not None]
    if len(known) < 2:
        return 0.0
    previous = known[1:1 + TREND_WINDOW]
    return round_to(known[0] - population_mean(previous))

"""
Sleep quality scoring.

Seven weighted components (weights sum to 1.0):
- Duration 20% (optimal 7-9 hours)
- Efficiency 20% (time asleep / time in bed)
- Deep sleep 15% (optimal 15-20% of total)
- REM sleep 15% (optimal 20-25% of total)
- Latency 10% (time to fall asleep)
- Awakenings 10% (time awake during the night)
- HRV 10% (against personal baseline when one exists)

Thresholds follow Pittsburgh Sleep Quality Index research.
"""

import logging
from typing import Dict, List, Optional

from .engine import round_half_up, round_to, z_score
from .schemas import (
    PersonalBaseline,
    SleepQuality,
    SleepSample,
    SleepScoreComponent,
    SleepScoreComponents,
    SleepScoreResult,
)

logger = logging.getLogger(__name__)

WEIGHTS: Dict[str, float] = {
    "duration": 0.20,
    "efficiency": 0.20,
    "deep_sleep": 0.15,
    "rem_sleep": 0.15,
    "latency": 0.10,
    "awakenings": 0.10,
    "hrv": 0.10,
}

NEUTRAL_HRV_SCORE = 75
DEFAULT_HRV_STD_DEV = 10.0
RECOMMENDATION_THRESHOLD = 75


def score_duration(total_minutes: float) -> int:
    hours = total_minutes / 60
    if 7 <= hours <= 9:
        return 100
    if 6 <= hours < 7:
        return 75
    if 9 < hours <= 10:
        return 75
    return 50


def score_efficiency(total_minutes: float, in_bed_minutes: float) -> int:
    if in_bed_minutes == 0:
        return 0
    efficiency = (total_minutes / in_bed_minutes) * 100
    if efficiency >= 85:
        return 100
    if efficiency >= 75:
        return 75
    if efficiency >= 65:
        return 50
    return 25


def score_deep_sleep(deep_minutes: float, total_minutes: float) -> int:
    if total_minutes == 0:
        return 0
    percent = (deep_minutes / total_minutes) * 100
    if 15 <= percent <= 20:
        return 100
    if 10 <= percent < 15:
        return 75
    if 20 < percent <= 25:
        return 75
    return 50


def score_rem_sleep(rem_minutes: float, total_minutes: float) -> int:
    if total_minutes == 0:
        return 0
    percent = (rem_minutes / total_minutes) * 100
    if 20 <= percent <= 25:
        return 100
    if 15 <= percent < 20:
        return 75
    if 25 < percent <= 30:
        return 75
    return 50


def score_latency(latency_minutes: float) -> int:
    if latency_minutes < 15:
        return 100
    if latency_minutes <= 30:
        return 75
    if latency_minutes <= 60:
        return 50
    return 25


def score_awakenings(awake_minutes: float) -> int:
    if awake_minutes < 5:
        return 100
    if awake_minutes <= 15:
        return 75
    if awake_minutes <= 30:
        return 50
    return 25


def score_hrv(hrv_avg: Optional[float], baseline: Optional[PersonalBaseline]) -> int:
    """Score overnight HRV; a missing reading is neutral rather than excluded."""
    if hrv_avg is None:
        return NEUTRAL_HRV_SCORE

    if baseline is None:
        if hrv_avg >= 60:
            return 100
        if hrv_avg >= 50:
            return 85
        if hrv_avg >= 40:
            return 70
        if hrv_avg >= 30:
            return 55
        return 40

    std_dev = baseline.hrv_std_dev or DEFAULT_HRV_STD_DEV
    z = z_score(hrv_avg, baseline.hrv_avg, std_dev)
    if z >= 0.5:
        return 100
    if z >= -0.5:
        return 75
    if z >= -1.0:
        return 50
    return 25


def generate_recommendations(components: SleepScoreComponents) -> List[str]:
    """One actionable tip per component scoring below 75, in evaluation order."""
    recommendations: List[str] = []

    if components.duration.score < RECOMMENDATION_THRESHOLD:
        hours = (components.duration.value or 0) / 60
        if hours < 7:
            recommendations.append("Aim for 7-9 hours of sleep. Consider going to bed 30 minutes earlier.")
        else:
            recommendations.append("You may be oversleeping. Try maintaining a consistent 7-9 hour schedule.")

    if components.efficiency.score < RECOMMENDATION_THRESHOLD:
        recommendations.append(
            "Improve sleep efficiency by only going to bed when sleepy and keeping a consistent schedule."
        )

    if components.deep_sleep.score < RECOMMENDATION_THRESHOLD:
        recommendations.append(
            "To increase deep sleep: exercise earlier in the day, avoid alcohol, "
            "and keep your room cool (65-68°F)."
        )

    if components.rem_sleep.score < RECOMMENDATION_THRESHOLD:
        recommendations.append(
            "To improve REM sleep: reduce caffeine after noon, limit screen time before bed, "
            "and maintain consistent sleep times."
        )

    if components.latency.score < RECOMMENDATION_THRESHOLD:
        recommendations.append(
            "Taking too long to fall asleep? Try relaxation techniques, avoid screens 1 hour before bed, "
            "or consider a wind-down routine."
        )

    if components.awakenings.score < RECOMMENDATION_THRESHOLD:
        recommendations.append(
            "Reduce nighttime awakenings by keeping your bedroom dark, quiet, and cool. "
            "Avoid liquids 2 hours before bed."
        )

    if components.hrv.score < RECOMMENDATION_THRESHOLD:
        recommendations.append(
            "Your HRV is below your baseline, indicating lower recovery. "
            "Prioritize rest and stress management today."
        )

    return recommendations


def quality_label(score: float) -> SleepQuality:
    if score >= 85:
        return SleepQuality.EXCELLENT
    if score >= 70:
        return SleepQuality.GOOD
    if score >= 50:
        return SleepQuality.FAIR
    return SleepQuality.POOR


def calculate_sleep_score(
    sample: SleepSample,
    baseline: Optional[PersonalBaseline] = None,
) -> SleepScoreResult:
    total = sample.total_minutes
    efficiency = (total / sample.in_bed_minutes) * 100 if sample.in_bed_minutes > 0 else 0.0
    deep_percent = (sample.deep_minutes / total) * 100 if total > 0 else 0.0
    rem_percent = (sample.rem_minutes / total) * 100 if total > 0 else 0.0

    components = SleepScoreComponents(
        duration=SleepScoreComponent(
            score=score_duration(total), value=total, weight=WEIGHTS["duration"], label="Duration",
        ),
        efficiency=SleepScoreComponent(
            score=score_efficiency(total, sample.in_bed_minutes),
            value=round_to(efficiency),
            weight=WEIGHTS["efficiency"],
            label="Efficiency",
        ),
        deep_sleep=SleepScoreComponent(
            score=score_deep_sleep(sample.deep_minutes, total),
            value=round_to(deep_percent),
            weight=WEIGHTS["deep_sleep"],
            label="Deep Sleep",
        ),
        rem_sleep=SleepScoreComponent(
            score=score_rem_sleep(sample.rem_minutes, total),
            value=round_to(rem_percent),
            weight=WEIGHTS["rem_sleep"],
            label="REM Sleep",
        ),
        latency=SleepScoreComponent(
            score=score_latency(sample.latency_minutes),
            value=sample.latency_minutes,
            weight=WEIGHTS["latency"],
            label="Time to Sleep",
        ),
        awakenings=SleepScoreComponent(
            score=score_awakenings(sample.awake_minutes),
            value=sample.awake_minutes,
            weight=WEIGHTS["awakenings"],
            label="Awakenings",
        ),
        hrv=SleepScoreComponent(
            score=score_hrv(sample.hrv_avg, baseline),
            value=sample.hrv_avg,
            weight=WEIGHTS["hrv"],
            label="HRV",
            has_data=sample.hrv_avg is not None,
        ),
    )

    total_score = round_half_up(sum(c.score * c.weight for c in components.ordered()))
    if baseline is None:
        logger.debug("Scoring sleep HRV against population bands (no personal baseline)")

    return SleepScoreResult(
        total_score=total_score,
        components=components,
        quality=quality_label(total_score),
        recommendations=generate_recommendations(components),
    )

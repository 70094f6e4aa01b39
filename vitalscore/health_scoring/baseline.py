"""Personal baselines from a short window of recent nights."""

import logging
from typing import List, Optional, Sequence

from vitalscore.core.config import settings
from .engine import (
    circular_mean_minutes,
    circular_std_dev_minutes,
    population_mean,
    population_std_dev,
    round_half_up,
    round_to,
)
from .schemas import PersonalBaseline, SleepSample, SleepStageBaseline

logger = logging.getLogger(__name__)

HRV_STD_DEV_FLOOR = 5.0  # ms
RESTING_HR_STD_DEV_FLOOR = 3.0  # bpm
DEFAULT_BEDTIME_MEAN = 0.0
DEFAULT_BEDTIME_STD_DEV = 30.0


def _recent(history: Sequence[SleepSample], window: int) -> List[SleepSample]:
    """Newest first when dates are known, otherwise caller order; at most `window` nights."""
    samples = list(history)
    if samples and all(s.sleep_date is not None for s in samples):
        samples.sort(key=lambda s: s.sleep_date, reverse=True)
    return samples[:window]


def _setting(name: str, value: Optional[int], default: int) -> int:
    if value is None:
        return default
    if value < 1:
        raise ValueError(f"{name} must be at least 1, got {value}")
    return value


def _floored_std_dev(values: Sequence[float], mean: float, floor: float) -> float:
    std_dev = round_to(population_std_dev(values, mean))
    return std_dev if std_dev > 0 else floor


def calculate_personal_baseline(
    history: Sequence[SleepSample],
    window: Optional[int] = None,
    min_samples: Optional[int] = None,
) -> Optional[PersonalBaseline]:
    """
    Build HRV, resting-HR and bedtime baselines.

    Returns None (never a zeroed baseline) unless there are enough HRV and
    resting-HR readings in the window. Bedtime falls back to midnight with a
    30 minute spread when too few bedtimes are known.
    """
    window = _setting("window", window, settings.BASELINE_WINDOW_DAYS)
    min_samples = _setting("min_samples", min_samples, settings.BASELINE_MIN_SAMPLES)
    recent = _recent(history, window)

    hrv_values = [s.hrv_avg for s in recent if s.hrv_avg is not None]
    hr_values = [s.resting_hr for s in recent if s.resting_hr is not None]
    bedtimes = [s.bedtime_minutes for s in recent if s.bedtime_minutes is not None]

    if len(hrv_values) < min_samples or len(hr_values) < min_samples:
        logger.debug(
            "Not enough data for a personal baseline (hrv=%d, resting_hr=%d, need %d)",
            len(hrv_values), len(hr_values), min_samples,
        )
        return None

    hrv_avg = population_mean(hrv_values)
    hr_avg = population_mean(hr_values)

    avg_bedtime = DEFAULT_BEDTIME_MEAN
    bedtime_std_dev = DEFAULT_BEDTIME_STD_DEV
    if len(bedtimes) >= min_samples:
        avg_bedtime = circular_mean_minutes(bedtimes)
        bedtime_std_dev = circular_std_dev_minutes(bedtimes, avg_bedtime) or DEFAULT_BEDTIME_STD_DEV
        # Rounded mean may land on 1440; keep it on the clock
        avg_bedtime = float(round_half_up(avg_bedtime) % 1440)
        bedtime_std_dev = float(round_half_up(bedtime_std_dev))

    return PersonalBaseline(
        hrv_avg=round_to(hrv_avg),
        hrv_std_dev=_floored_std_dev(hrv_values, hrv_avg, HRV_STD_DEV_FLOOR),
        resting_hr_avg=round_to(hr_avg),
        resting_hr_std_dev=_floored_std_dev(hr_values, hr_avg, RESTING_HR_STD_DEV_FLOOR),
        avg_bedtime_minutes=avg_bedtime,
        bedtime_std_dev=bedtime_std_dev,
        sample_count=len(recent),
        bedtime_sample_count=len(bedtimes),
    )


def calculate_sleep_stage_baseline(
    sessions: Sequence[SleepSample],
    window: Optional[int] = None,
    min_sessions: Optional[int] = None,
) -> Optional[SleepStageBaseline]:
    """Average deep %, REM % and duration over recent nights."""
    window = _setting("window", window, settings.BASELINE_WINDOW_DAYS)
    min_sessions = _setting("min_sessions", min_sessions, settings.SLEEP_STAGE_BASELINE_MIN_SESSIONS)
    if len(sessions) < min_sessions:
        return None

    recent = _recent(sessions, window)
    deep = [(s.deep_minutes / s.total_minutes) * 100 if s.total_minutes > 0 else 0.0 for s in recent]
    rem = [(s.rem_minutes / s.total_minutes) * 100 if s.total_minutes > 0 else 0.0 for s in recent]

    return SleepStageBaseline(
        deep_sleep_percent=round_to(population_mean(deep)),
        rem_sleep_percent=round_to(population_mean(rem)),
        avg_duration_minutes=round_to(population_mean([s.total_minutes for s in recent])),
        session_count=len(recent),
    )

import math
from typing import Iterable, List, Optional, Sequence, TypeVar

MINUTES_PER_DAY = 1440
HALF_DAY_MINUTES = 720

T = TypeVar("T")


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def round_to(value: float, digits: int = 1) -> float:
    """Round half away from zero, matching how scores are displayed.

    Python's round() is banker's rounding (round(0.5) == 0); scores use the
    conventional rule so 84.5 becomes 85, not 84.
    """
    factor = 10 ** digits
    return math.floor(abs(value) * factor + 0.5) / factor * (1 if value >= 0 else -1)


def round_half_up(value: float) -> int:
    return int(round_to(value, 0))


def first_available(*candidates: Optional[T]) -> Optional[T]:
    """Return the first candidate that is not None.

    This is the single precedence rule used wherever a value may come from
    several optional sources (user-provided, estimated, population default).
    """
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


def z_score(value: float, mean: float, std_dev: float) -> float:
    if std_dev == 0:
        return 0.0
    return (value - mean) / std_dev


def population_mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def population_std_dev(values: Sequence[float], mean: Optional[float] = None) -> float:
    """Population (not sample) standard deviation; 0.0 for empty input."""
    if not values:
        return 0.0
    mu = population_mean(values) if mean is None else mean
    return math.sqrt(sum((v - mu) ** 2 for v in values) / len(values))


def weighted_composite(parts: Iterable[tuple]) -> Optional[float]:
    """Weighted mean over (score, weight, has_data) triples.

    Parts without data are excluded and the remaining weights are
    re-normalized. Returns None when no weight contributes.
    """
    total_weight = 0.0
    weighted_sum = 0.0
    for score, weight, has_data in parts:
        if not has_data or score is None:
            continue
        weighted_sum += score * weight
        total_weight += weight
    if total_weight <= 0:
        return None
    return weighted_sum / total_weight


# ---------------------------------------------------------------------------
# Circular statistics for time-of-day values (minutes from midnight)
# ---------------------------------------------------------------------------

def minutes_to_angle(minutes: float) -> float:
    return (minutes / MINUTES_PER_DAY) * 2 * math.pi


def circular_mean_minutes(minutes: Sequence[float]) -> Optional[float]:
    """Circular mean of clock times, wrapped into [0, 1440).

    23:50 (1430) and 00:10 (10) average to 00:00, not to noon.
    """
    if not minutes:
        return None
    n = len(minutes)
    sin_mean = sum(math.sin(minutes_to_angle(t)) for t in minutes) / n
    cos_mean = sum(math.cos(minutes_to_angle(t)) for t in minutes) / n
    angle = math.atan2(sin_mean, cos_mean)
    mean_minutes = ((angle / (2 * math.pi)) * MINUTES_PER_DAY + MINUTES_PER_DAY) % MINUTES_PER_DAY
    # Float noise just below the wrap point (e.g. 1439.9999999) belongs to midnight
    if MINUTES_PER_DAY - mean_minutes < 1e-6:
        return 0.0
    return mean_minutes


def circular_distance_minutes(a: float, b: float) -> float:
    """Shortest distance between two clock times, in minutes (0..720)."""
    deviation = abs(a - b)
    if deviation > HALF_DAY_MINUTES:
        deviation = MINUTES_PER_DAY - deviation
    return deviation


def circular_std_dev_minutes(minutes: Sequence[float], mean_minutes: float) -> float:
    """Root-mean-square of shortest distances to the circular mean."""
    if not minutes:
        return 0.0
    deviations: List[float] = [circular_distance_minutes(t, mean_minutes) for t in minutes]
    return math.sqrt(sum(d * d for d in deviations) / len(deviations))

from __future__ import annotations

import logging
import math
from datetime import date
from typing import Iterable, List, Optional, Sequence

from vitalscore.core.config import Settings, settings as default_settings
from .baseline import calculate_personal_baseline
from .engine import first_available
from .longevity import (
    calculate_pheno_age,
    extract_pheno_age_markers,
    generate_longevity_recommendations,
)
from .recovery import calculate_readiness, calculate_recovery, recovery_factors
from .schemas import (
    BiologicalAgeSnapshot,
    BiomarkerValue,
    BloodPanel,
    DailyInputs,
    DailyScoreSummary,
    LongevityRecommendation,
    MetricSource,
    PhenoAgeResult,
    RecoveryInputs,
)
from .sleep import calculate_sleep_score
from .strain import calculate_daily_strain

logger = logging.getLogger(__name__)


def resolve_metric(sources: Sequence[MetricSource], allow_stale: bool = False) -> Optional[float]:
    """
    Pick today's value for a metric from candidate sources.

    Nightly sources (measured during last night's sleep) are consulted first,
    in order. Non-nightly sources are only consulted when allow_stale is set.
    """
    nightly = [s.value for s in sources if s.nightly]
    value = first_available(*nightly)
    if value is not None or not allow_stale:
        return value

    stale = [s for s in sources if not s.nightly and s.value is not None]
    if stale:
        logger.info("Using stale %s value for today's metric", stale[0].name)
        return stale[0].value
    return None


class DailyScoringService:
    """Scores one day: baseline, last night's sleep, yesterday's strain and today's recovery."""

    def __init__(self, config: Optional[Settings] = None):
        self.settings = config or default_settings

    def compute_daily(self, inputs: DailyInputs) -> DailyScoreSummary:
        baseline = calculate_personal_baseline(
            inputs.history,
            window=self.settings.BASELINE_WINDOW_DAYS,
            min_samples=self.settings.BASELINE_MIN_SAMPLES,
        )

        night = inputs.last_night
        sleep = calculate_sleep_score(night, baseline) if night is not None else None
        strain = calculate_daily_strain(inputs.previous_day_workouts, inputs.physiology)

        hrv = self._resolve("hrv", night.hrv_avg if night else None, inputs.hrv_sources)
        resting_hr = self._resolve("resting_hr", night.resting_hr if night else None, inputs.resting_hr_sources)

        recovery = calculate_recovery(
            RecoveryInputs(
                sleep_score=sleep.total_score if sleep else None,
                hrv_value=hrv,
                resting_hr=resting_hr,
                previous_day_strain=strain.strain_score,
                bedtime_minutes=night.bedtime_minutes if night else None,
                baseline=baseline,
            )
        )

        readiness = calculate_readiness(recovery.recovery_score, sleep.total_score if sleep else None)
        logger.debug(
            "Daily scores: sleep=%s strain=%.1f recovery=%s readiness=%s",
            sleep.total_score if sleep else None, strain.strain_score, recovery.recovery_score, readiness,
        )

        return DailyScoreSummary(
            baseline=baseline,
            sleep=sleep,
            strain=strain,
            recovery=recovery,
            readiness_score=readiness,
            recovery_factors=recovery_factors(recovery),
        )

    def _resolve(self, name: str, last_night: Optional[float], extra: Iterable[MetricSource]) -> Optional[float]:
        sources: List[MetricSource] = [MetricSource(name=f"sleep.{name}", value=last_night, nightly=True)]
        sources.extend(extra)
        return resolve_metric(sources, allow_stale=self.settings.ALLOW_STALE_METRIC_FALLBACK)


class LongevityService:
    """PhenoAge for a single blood panel, or across a history of panels."""

    def __init__(self, config: Optional[Settings] = None):
        self.settings = config or default_settings

    def compute(self, markers: Iterable[BiomarkerValue], chronological_age: float) -> PhenoAgeResult:
        return calculate_pheno_age(extract_pheno_age_markers(markers, chronological_age))

    def recommendations(self, result: PhenoAgeResult) -> List[LongevityRecommendation]:
        return generate_longevity_recommendations(result)

    def history(self, panels: Sequence[BloodPanel], birth_date: date) -> List[BiologicalAgeSnapshot]:
        """Biological age at each panel's test date, newest first."""
        snapshots: List[BiologicalAgeSnapshot] = []
        for panel in sorted(panels, key=lambda p: p.test_date, reverse=True):
            age = age_on(birth_date, panel.test_date)
            if panel.test_date < birth_date:
                logger.warning("Skipping panel dated %s: before birth date %s", panel.test_date, birth_date)
                continue
            if age < 1:
                logger.warning("Skipping panel dated %s: chronological age under one year", panel.test_date)
                continue
            result = self.compute(panel.markers, age)
            snapshots.append(
                BiologicalAgeSnapshot(
                    test_date=panel.test_date,
                    chronological_age=age,
                    biological_age=result.biological_age,
                    can_calculate=result.can_calculate,
                )
            )
        return snapshots


def age_on(birth_date: date, on: date) -> int:
    """Completed years of age on a given date."""
    return math.floor((on - birth_date).days / 365.25)

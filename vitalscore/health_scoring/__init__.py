"""Health scoring package.

This module contains:
- Pydantic schemas for every scorer input and result
- A small, explicit engine of numeric helpers (z-scores, weighted
  composites, circular time-of-day statistics)
- One module per scorer: blood work, baselines, sleep, strain, recovery and
  PhenoAge longevity
- Stateless services that run the scorers for one day or one blood panel

Every function is pure; callers supply already-fetched samples.
"""

from .baseline import calculate_personal_baseline, calculate_sleep_stage_baseline
from .blood_work import BIOMARKERS, classify_marker, process_markers, summarize_markers
from .longevity import calculate_pheno_age, extract_pheno_age_markers, generate_longevity_recommendations
from .recovery import calculate_readiness, calculate_recovery, recovery_factors
from .services import DailyScoringService, LongevityService
from .sleep import calculate_sleep_score
from .strain import calculate_daily_strain, calculate_strain

"""
PhenoAge biological age and longevity pillars.

Based on Levine et al. 2018, "An epigenetic biomarker of aging for lifespan
and healthspan" (PNAS, doi: 10.1073/pnas.1718449115). PhenoAge combines nine
routine clinical blood markers with chronological age through a Gompertz
mortality model.
"""

import logging
import math
import re
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from vitalscore.utils.marker_mapper import MarkerNameMapper
from vitalscore.utils.unit_converter import UnitConversionError, convert_marker_unit
from .engine import clamp, round_half_up, round_to
from .mappings import PHENO_AGE_DISPLAY_NAMES, PHENO_AGE_MARKER_ALIASES, PhenoAgeMarker
from .schemas import (
    BiomarkerValue,
    LongevityPillar,
    LongevityRecommendation,
    PhenoAgeInput,
    PhenoAgeResult,
    PillarStatus,
)

logger = logging.getLogger(__name__)

# Published coefficients; albumin, creatinine and glucose are in SI units
PHENO_AGE_COEFFICIENTS: Dict[str, float] = {
    "intercept": -19.9067,
    "albumin": -0.0336,  # g/L
    "creatinine": 0.0095,  # umol/L
    "glucose": 0.1953,  # mmol/L
    "ln_crp": 0.0954,  # ln(mg/L)
    "lymphocyte_percent": -0.0120,
    "mcv": 0.0268,
    "rdw": 0.3306,
    "alkaline_phosphatase": 0.0019,
    "wbc": 0.0554,
    "age": 0.0804,
}

ALBUMIN_G_DL_TO_G_L = 10.0
CREATININE_MG_DL_TO_UMOL_L = 88.4
GLUCOSE_MG_DL_TO_MMOL_L = 0.0555
CRP_FLOOR = 0.1  # mg/L, keeps ln() finite

GOMPERTZ_GAMMA = 0.0076927
GOMPERTZ_LAMBDA = 0.0022802

MIN_BIOLOGICAL_AGE = 20.0
MAX_BIOLOGICAL_AGE = 120.0
AGE_DIFFERENCE_STD_DEV = 7.0  # years

REQUIRED_MARKERS = len(PhenoAgeMarker)


def _fmt(value: float) -> str:
    """Lab value as printed on a report: 95 not 95.0."""
    return f"{value:g}"


def calculate_pheno_age(data: PhenoAgeInput) -> PhenoAgeResult:
    """
    Estimate biological age from the nine PhenoAge markers.

    With any marker missing no age is produced, but the pillars are still
    scored from whatever subset is present.
    """
    missing = [
        PHENO_AGE_DISPLAY_NAMES[marker] for marker in PhenoAgeMarker if getattr(data, marker.value) is None
    ]
    available = REQUIRED_MARKERS - len(missing)
    pillars = calculate_pillars(data)

    if missing:
        logger.debug("PhenoAge not computed; missing %s", ", ".join(missing))
        return PhenoAgeResult(
            available_markers=available,
            required_markers=REQUIRED_MARKERS,
            missing_markers=missing,
            can_calculate=False,
            pillars=pillars,
        )

    c = PHENO_AGE_COEFFICIENTS
    xb = (
        c["intercept"]
        + c["albumin"] * data.albumin * ALBUMIN_G_DL_TO_G_L
        + c["creatinine"] * data.creatinine * CREATININE_MG_DL_TO_UMOL_L
        + c["glucose"] * data.glucose * GLUCOSE_MG_DL_TO_MMOL_L
        + c["ln_crp"] * math.log(max(data.crp, CRP_FLOOR))
        + c["lymphocyte_percent"] * data.lymphocyte_percent
        + c["mcv"] * data.mcv
        + c["rdw"] * data.rdw
        + c["alkaline_phosphatase"] * data.alkaline_phosphatase
        + c["wbc"] * data.wbc
        + c["age"] * data.chronological_age
    )

    biological_age = clamp(_gompertz_age(xb), MIN_BIOLOGICAL_AGE, MAX_BIOLOGICAL_AGE)
    difference = biological_age - data.chronological_age

    return PhenoAgeResult(
        biological_age=round_to(biological_age),
        age_difference=round_to(difference),
        percentile=estimate_percentile(difference),
        available_markers=available,
        required_markers=REQUIRED_MARKERS,
        missing_markers=[],
        can_calculate=True,
        pillars=pillars,
    )


def _gompertz_age(xb: float) -> float:
    """Mortality score from the linear predictor, inverted back to an age."""
    gamma, lam = GOMPERTZ_GAMMA, GOMPERTZ_LAMBDA
    mortality = 1 - math.exp(-math.exp(xb) * (math.exp(120 * gamma) - 1) / gamma)
    # Saturated mortality or an argument <= 0 means the age is past the model's range
    if mortality >= 1:
        return MAX_BIOLOGICAL_AGE
    inner = 1 + gamma * math.log(1 - mortality) / lam
    if inner <= 0:
        return MAX_BIOLOGICAL_AGE
    return (1 / gamma) * math.log(inner) + 120


def estimate_percentile(age_difference: float) -> int:
    """Population percentile; biologically younger is a higher percentile."""
    z = -age_difference / AGE_DIFFERENCE_STD_DEV
    # Logistic approximation of the normal CDF
    percentile = round_half_up(100 * (1 / (1 + math.exp(-1.702 * z))))
    return int(clamp(percentile, 1, 99))


# ---------------------------------------------------------------------------
# Pillars
# ---------------------------------------------------------------------------

# (field, scorer) where scorer returns (points, factor text)
FactorScorer = Callable[[float], Tuple[int, str]]


def _glucose(v: float) -> Tuple[int, str]:
    if v < 100:
        return 100, f"Fasting Glucose: {_fmt(v)} mg/dL (Optimal)"
    if v < 126:
        return 60, f"Fasting Glucose: {_fmt(v)} mg/dL (Pre-diabetic range)"
    return 20, f"Fasting Glucose: {_fmt(v)} mg/dL (Elevated)"


def _creatinine(v: float) -> Tuple[int, str]:
    if 0.7 <= v <= 1.2:
        return 100, f"Creatinine: {_fmt(v)} mg/dL (Normal)"
    return 50, f"Creatinine: {_fmt(v)} mg/dL (Outside normal)"


def _crp(v: float) -> Tuple[int, str]:
    if v < 1:
        return 100, f"hs-CRP: {_fmt(v)} mg/L (Low risk)"
    if v < 3:
        return 70, f"hs-CRP: {_fmt(v)} mg/L (Moderate risk)"
    return 30, f"hs-CRP: {_fmt(v)} mg/L (High risk)"


def _wbc(v: float) -> Tuple[int, str]:
    if 4 <= v <= 10:
        return 100, f"WBC: {_fmt(v)} K/uL (Normal)"
    return 50, f"WBC: {_fmt(v)} K/uL (Outside normal)"


def _albumin(v: float) -> Tuple[int, str]:
    if 3.5 <= v <= 5.5:
        return 100, f"Albumin: {_fmt(v)} g/dL (Normal)"
    return 50, f"Albumin: {_fmt(v)} g/dL (Outside normal)"


def _alp(v: float) -> Tuple[int, str]:
    if 44 <= v <= 147:
        return 100, f"ALP: {_fmt(v)} U/L (Normal)"
    return 50, f"ALP: {_fmt(v)} U/L (Outside normal)"


def _lymphocytes(v: float) -> Tuple[int, str]:
    if 20 <= v <= 40:
        return 100, f"Lymphocytes: {_fmt(v)}% (Normal)"
    return 60, f"Lymphocytes: {_fmt(v)}% (Outside normal)"


def _mcv(v: float) -> Tuple[int, str]:
    if 80 <= v <= 100:
        return 100, f"MCV: {_fmt(v)} fL (Normal)"
    return 60, f"MCV: {_fmt(v)} fL (Outside normal)"


def _rdw(v: float) -> Tuple[int, str]:
    if 11.5 <= v <= 14.5:
        return 100, f"RDW: {_fmt(v)}% (Normal)"
    return 50, f"RDW: {_fmt(v)}% (Elevated - linked to aging)"


PILLARS: List[Tuple[str, str, List[Tuple[PhenoAgeMarker, FactorScorer]]]] = [
    ("Metabolic Health", "Blood sugar stability, kidney function", [
        (PhenoAgeMarker.GLUCOSE, _glucose),
        (PhenoAgeMarker.CREATININE, _creatinine),
    ]),
    ("Inflammation", "Systemic inflammation markers", [
        (PhenoAgeMarker.CRP, _crp),
        (PhenoAgeMarker.WBC, _wbc),
    ]),
    ("Liver Function", "Liver health and protein synthesis", [
        (PhenoAgeMarker.ALBUMIN, _albumin),
        (PhenoAgeMarker.ALKALINE_PHOSPHATASE, _alp),
    ]),
    ("Blood Health", "Red blood cell health and immune function", [
        (PhenoAgeMarker.LYMPHOCYTE_PERCENT, _lymphocytes),
        (PhenoAgeMarker.MCV, _mcv),
        (PhenoAgeMarker.RDW, _rdw),
    ]),
]


def pillar_status(score: float) -> PillarStatus:
    if score >= 90:
        return PillarStatus.OPTIMAL
    if score >= 70:
        return PillarStatus.GOOD
    if score >= 50:
        return PillarStatus.FAIR
    return PillarStatus.POOR


def calculate_pillars(data: PhenoAgeInput) -> List[LongevityPillar]:
    pillars: List[LongevityPillar] = []
    for name, description, scorers in PILLARS:
        points: List[int] = []
        factors: List[str] = []
        for marker, scorer in scorers:
            value = getattr(data, marker.value)
            if value is None:
                continue
            score, text = scorer(value)
            points.append(score)
            factors.append(text)

        if not points:
            continue
        average = sum(points) / len(points)
        pillars.append(
            LongevityPillar(
                name=name,
                score=round_half_up(average),
                status=pillar_status(average),
                factors=factors,
                description=description,
            )
        )
    return pillars


# ---------------------------------------------------------------------------
# Blood panel extraction
# ---------------------------------------------------------------------------

_marker_mapper = MarkerNameMapper(
    [marker.value for marker in PhenoAgeMarker],
    aliases={alias: marker.value for alias, marker in PHENO_AGE_MARKER_ALIASES.items()},
    allow_containment=True,
)

# Ratios and quotients only mention a marker, e.g. "Albumin/Globulin Ratio"
_DERIVED_NAME = re.compile(r"\bratio\b|/", re.IGNORECASE)


def extract_pheno_age_markers(markers: Iterable[BiomarkerValue], chronological_age: float) -> PhenoAgeInput:
    """
    Pick the PhenoAge markers out of a lab panel.

    Report names are matched against known spellings; an exact name beats a
    name that merely contains one, and ratios that only mention a marker
    are ignored. Values are converted to the conventional
    units the model expects, and a marker whose unit cannot be converted is
    left out.
    """
    values: Dict[str, float] = {}
    exact_hits = set()

    for marker in markers:
        key, exact = _marker_mapper.resolve(marker.name)
        if key is None:
            continue
        if not exact and _DERIVED_NAME.search(marker.name):
            logger.debug("Ignoring derived marker %s for PhenoAge", marker.name)
            continue
        if key in values and (key in exact_hits or not exact):
            continue

        try:
            converted, _ = convert_marker_unit(marker.value, marker.unit, key)
        except UnitConversionError as e:
            logger.warning("Skipping %s for PhenoAge: %s", marker.name, e)
            continue

        values[key] = converted
        if exact:
            exact_hits.add(key)

    return PhenoAgeInput(chronological_age=chronological_age, **values)


# ---------------------------------------------------------------------------
# Recommendations
# ---------------------------------------------------------------------------

PILLAR_RECOMMENDATIONS: Dict[str, List[str]] = {
    "Metabolic Health": [
        "Reduce refined carbohydrate intake",
        "Consider time-restricted eating (12-16 hour fasting window)",
        "Increase physical activity, especially after meals",
        "Monitor blood glucose response to different foods",
    ],
    "Inflammation": [
        "Increase omega-3 fatty acid intake (fish, flaxseed)",
        "Reduce processed foods and added sugars",
        "Add anti-inflammatory spices (turmeric, ginger)",
        "Ensure adequate sleep and stress management",
    ],
}


def generate_longevity_recommendations(result: PhenoAgeResult) -> List[LongevityRecommendation]:
    recommendations: List[LongevityRecommendation] = []

    if result.biological_age is not None and result.age_difference is not None:
        if result.age_difference > 5:
            recommendations.append(LongevityRecommendation(
                category="Priority Focus",
                recommendations=[
                    "Consider comprehensive metabolic testing",
                    "Focus on reducing inflammation through diet and exercise",
                    "Prioritize 7-8 hours of quality sleep",
                    "Implement stress management practices",
                ],
            ))
        elif result.age_difference > 0:
            recommendations.append(LongevityRecommendation(
                category="Optimization",
                recommendations=[
                    "Maintain consistent exercise routine (150+ min/week)",
                    "Focus on anti-inflammatory foods (omega-3s, colorful vegetables)",
                    "Monitor and manage stress levels",
                    "Stay consistent with sleep schedule",
                ],
            ))
        else:
            recommendations.append(LongevityRecommendation(
                category="Maintenance",
                recommendations=[
                    "Continue current healthy lifestyle practices",
                    "Regular health monitoring to track progress",
                    "Focus on longevity-promoting activities (strength training, zone 2 cardio)",
                    "Consider advanced optimization (cold/heat exposure, time-restricted eating)",
                ],
            ))

    for pillar in result.pillars:
        if pillar.status in (PillarStatus.FAIR, PillarStatus.POOR) and pillar.name in PILLAR_RECOMMENDATIONS:
            recommendations.append(
                LongevityRecommendation(category=pillar.name, recommendations=PILLAR_RECOMMENDATIONS[pillar.name])
            )

    if result.missing_markers:
        recommendations.append(LongevityRecommendation(
            category="Testing Needed",
            recommendations=[
                "Get these markers tested for full PhenoAge calculation: " + ", ".join(result.missing_markers),
                "Request a comprehensive metabolic panel from your doctor",
                "Many of these are included in standard blood work",
            ],
        ))

    return recommendations

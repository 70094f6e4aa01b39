"""Blood-work biomarker definitions and range/status classification.

Ranges combine standard clinical reference ranges with narrower "optimal"
ranges from preventive-medicine literature. They are general guidelines;
individual optimal ranges vary with age, sex and health conditions.
"""

import logging
from typing import Dict, Iterable, List, Optional

from vitalscore.utils.marker_mapper import MarkerNameMapper
from .engine import round_half_up
from .mappings import BiomarkerCategory
from .schemas import (
    BiomarkerDefinition,
    BiomarkerRange,
    BiomarkerValue,
    MarkerStatus,
    MarkerStatusResult,
    MarkerSummary,
    MarkerWithStatus,
)

logger = logging.getLogger(__name__)

# Percent beyond the reference bound at which an out-of-range value is critical
CRITICAL_BELOW_PCT = 30.0
CRITICAL_ABOVE_PCT = 50.0

STATUS_POINTS: Dict[MarkerStatus, int] = {
    MarkerStatus.OPTIMAL: 100,
    MarkerStatus.NORMAL: 80,
    MarkerStatus.WARNING: 50,
    MarkerStatus.CRITICAL: 20,
}

UNKNOWN_MARKER_MESSAGE = "Cannot classify: no reference ranges on file for this marker"


def _define(
    name: str,
    category: BiomarkerCategory,
    unit: str,
    reference: tuple,
    optimal: tuple,
    description: str,
    higher_is_better: bool = False,
) -> BiomarkerDefinition:
    return BiomarkerDefinition(
        name=name,
        category=category,
        unit=unit,
        reference_range=BiomarkerRange(min=reference[0], max=reference[1]),
        optimal_range=BiomarkerRange(min=optimal[0], max=optimal[1]),
        description=description,
        higher_is_better=higher_is_better,
    )


_DEFINITIONS: List[BiomarkerDefinition] = [
    # Metabolic Health
    _define("Fasting Glucose", BiomarkerCategory.METABOLIC, "mg/dL", (70, 100), (72, 90),
            "Blood sugar after fasting. Indicator of diabetes risk."),
    _define("HbA1c", BiomarkerCategory.METABOLIC, "%", (None, 5.7), (None, 5.3),
            "Average blood sugar over 2-3 months. Gold standard for glucose control."),
    _define("Fasting Insulin", BiomarkerCategory.METABOLIC, "μIU/mL", (2.6, 24.9), (2, 8),
            "Insulin levels after fasting. High levels indicate insulin resistance."),
    _define("HOMA-IR", BiomarkerCategory.METABOLIC, "", (None, 2.5), (None, 1.0),
            "Insulin resistance index. Lower is better."),
    # Lipid Panel
    _define("Total Cholesterol", BiomarkerCategory.LIPID, "mg/dL", (None, 200), (150, 200),
            "Total blood cholesterol. Context-dependent marker."),
    _define("LDL-C", BiomarkerCategory.LIPID, "mg/dL", (None, 100), (None, 70),
            "Low-density lipoprotein. Associated with cardiovascular risk."),
    _define("HDL-C", BiomarkerCategory.LIPID, "mg/dL", (40, None), (60, None),
            "High-density lipoprotein. Protective cholesterol.", higher_is_better=True),
    _define("Triglycerides", BiomarkerCategory.LIPID, "mg/dL", (None, 150), (None, 100),
            "Blood fats. Elevated levels increase cardiovascular risk."),
    _define("ApoB", BiomarkerCategory.LIPID, "mg/dL", (None, 100), (None, 80),
            "Apolipoprotein B. Better predictor of cardiovascular risk than LDL."),
    _define("Lp(a)", BiomarkerCategory.LIPID, "nmol/L", (None, 75), (None, 30),
            "Lipoprotein(a). Genetic cardiovascular risk factor."),
    # Inflammation
    _define("hs-CRP", BiomarkerCategory.INFLAMMATION, "mg/L", (None, 3.0), (None, 1.0),
            "High-sensitivity C-reactive protein. Marker of systemic inflammation."),
    _define("Homocysteine", BiomarkerCategory.INFLAMMATION, "μmol/L", (5, 15), (5, 10),
            "Amino acid linked to cardiovascular and cognitive risk."),
    _define("Ferritin", BiomarkerCategory.INFLAMMATION, "ng/mL", (12, 300), (50, 150),
            "Iron storage protein. Also an inflammatory marker when elevated."),
    # Hormones
    _define("TSH", BiomarkerCategory.HORMONES, "mIU/L", (0.4, 4.0), (1.0, 2.5),
            "Thyroid stimulating hormone. Key thyroid function marker."),
    _define("Free T4", BiomarkerCategory.HORMONES, "ng/dL", (0.8, 1.8), (1.0, 1.5),
            "Active thyroid hormone."),
    _define("Free T3", BiomarkerCategory.HORMONES, "pg/mL", (2.3, 4.2), (3.0, 4.0),
            "Most active thyroid hormone."),
    _define("Testosterone (Total)", BiomarkerCategory.HORMONES, "ng/dL", (264, 916), (500, 900),
            "Primary male sex hormone. Important for both sexes."),
    _define("Cortisol (AM)", BiomarkerCategory.HORMONES, "μg/dL", (6.2, 19.4), (10, 18),
            "Stress hormone. Morning levels should be elevated."),
    _define("DHEA-S", BiomarkerCategory.HORMONES, "μg/dL", (80, 560), (200, 400),
            "Precursor hormone. Declines with age."),
    # Vitamins & Minerals
    _define("Vitamin D (25-OH)", BiomarkerCategory.VITAMINS, "ng/mL", (30, 100), (40, 60),
            "Essential for bone health, immunity, and overall health."),
    _define("Vitamin B12", BiomarkerCategory.VITAMINS, "pg/mL", (200, 900), (500, 800),
            "Essential for nerve function and blood cell formation."),
    _define("Folate", BiomarkerCategory.VITAMINS, "ng/mL", (3, 20), (10, 20),
            "B vitamin important for DNA synthesis."),
    _define("Iron", BiomarkerCategory.VITAMINS, "μg/dL", (60, 170), (80, 150),
            "Essential mineral for oxygen transport."),
    _define("Magnesium", BiomarkerCategory.VITAMINS, "mg/dL", (1.7, 2.2), (2.0, 2.2),
            "Essential for 300+ enzymatic reactions."),
    # Blood Count
    _define("Hemoglobin", BiomarkerCategory.BLOOD, "g/dL", (12, 17.5), (13.5, 16),
            "Oxygen-carrying protein in red blood cells."),
    _define("Hematocrit", BiomarkerCategory.BLOOD, "%", (36, 50), (40, 48),
            "Percentage of blood volume that is red blood cells."),
    _define("RBC", BiomarkerCategory.BLOOD, "M/μL", (4.0, 5.5), (4.5, 5.2),
            "Red blood cell count."),
    _define("WBC", BiomarkerCategory.BLOOD, "K/μL", (4.5, 11.0), (4.5, 8.0),
            "White blood cell count. Immune system marker."),
    _define("Platelets", BiomarkerCategory.BLOOD, "K/μL", (150, 400), (180, 350),
            "Blood clotting cells."),
    # Kidney Function
    _define("Creatinine", BiomarkerCategory.KIDNEY, "mg/dL", (0.7, 1.3), (0.8, 1.1),
            "Kidney function marker. Muscle metabolism byproduct."),
    _define("BUN", BiomarkerCategory.KIDNEY, "mg/dL", (7, 20), (10, 18),
            "Blood urea nitrogen. Kidney function indicator."),
    _define("eGFR", BiomarkerCategory.KIDNEY, "mL/min", (90, None), (100, None),
            "Estimated glomerular filtration rate. Kidney filtration capacity.", higher_is_better=True),
    # Liver Function
    _define("ALT", BiomarkerCategory.LIVER, "U/L", (None, 41), (None, 25),
            "Liver enzyme. Elevated in liver damage."),
    _define("AST", BiomarkerCategory.LIVER, "U/L", (None, 40), (None, 25),
            "Liver/muscle enzyme. Elevated in liver or muscle damage."),
    _define("GGT", BiomarkerCategory.LIVER, "U/L", (None, 65), (None, 30),
            "Liver enzyme. Sensitive marker for liver health."),
    _define("Albumin", BiomarkerCategory.LIVER, "g/dL", (3.5, 5.0), (4.0, 5.0),
            "Protein made by liver. Marker of liver function and nutrition.", higher_is_better=True),
]

BIOMARKERS: Dict[str, BiomarkerDefinition] = {d.name: d for d in _DEFINITIONS}

# Exact names and listed report spellings only: "Total Iron Binding Capacity" is
# not "Iron" and "Cortisol (PM)" is not "Cortisol (AM)"
_name_mapper = MarkerNameMapper.with_report_variations(
    BIOMARKERS.keys(), allow_containment=False, fuzzy_cutoff=None
)


def get_definition(name: str) -> Optional[BiomarkerDefinition]:
    """Definition for a marker name, resolving common report spellings."""
    if name in BIOMARKERS:
        return BIOMARKERS[name]
    canonical = _name_mapper.canonical_name(name)
    return BIOMARKERS.get(canonical) if canonical else None


def classify_marker(value: float, definition: BiomarkerDefinition) -> MarkerStatusResult:
    """Classify a value against a definition's optimal and reference ranges."""
    if definition.optimal_range.contains(value):
        return MarkerStatusResult(status=MarkerStatus.OPTIMAL, message="Optimal range")

    reference = definition.reference_range
    if reference.contains(value):
        return MarkerStatusResult(status=MarkerStatus.NORMAL, message="Within normal range")

    if reference.min is not None and value < reference.min:
        percent_below = ((reference.min - value) / reference.min) * 100 if reference.min else 100.0
        if percent_below > CRITICAL_BELOW_PCT:
            return MarkerStatusResult(
                status=MarkerStatus.CRITICAL,
                message=f"Significantly low ({percent_below:.0f}% below normal)",
            )
        return MarkerStatusResult(
            status=MarkerStatus.WARNING,
            message="Below optimal" if definition.higher_is_better else "Below normal range",
        )

    if reference.max is not None and value > reference.max:
        percent_above = ((value - reference.max) / reference.max) * 100 if reference.max else 100.0
        if percent_above > CRITICAL_ABOVE_PCT:
            return MarkerStatusResult(
                status=MarkerStatus.CRITICAL,
                message=f"Significantly elevated ({percent_above:.0f}% above normal)",
            )
        return MarkerStatusResult(
            status=MarkerStatus.WARNING,
            message="Elevated (may be fine)" if definition.higher_is_better else "Above normal range",
        )

    return MarkerStatusResult(status=MarkerStatus.NORMAL, message="Within range")


def process_markers(markers: Iterable[BiomarkerValue]) -> List[MarkerWithStatus]:
    """Attach a status to every marker; unknown markers degrade to normal."""
    processed: List[MarkerWithStatus] = []
    for marker in markers:
        definition = get_definition(marker.name)
        data = marker.model_dump()

        if definition is None:
            logger.debug("No definition for marker '%s'; leaving unclassified", marker.name)
            processed.append(
                MarkerWithStatus(**data, status=MarkerStatus.NORMAL, status_message=UNKNOWN_MARKER_MESSAGE)
            )
            continue

        result = classify_marker(marker.value, definition)
        data.update(
            category=marker.category or definition.category.value,
            reference_min=_pick(marker.reference_min, definition.reference_range.min),
            reference_max=_pick(marker.reference_max, definition.reference_range.max),
            optimal_min=_pick(marker.optimal_min, definition.optimal_range.min),
            optimal_max=_pick(marker.optimal_max, definition.optimal_range.max),
        )
        processed.append(MarkerWithStatus(**data, status=result.status, status_message=result.message))
    return processed


def _pick(provided: Optional[float], fallback: Optional[float]) -> Optional[float]:
    return provided if provided is not None else fallback


def summarize_markers(markers: Iterable[MarkerWithStatus]) -> MarkerSummary:
    counts = {status: 0 for status in MarkerStatus}
    for marker in markers:
        counts[marker.status] += 1

    total = sum(counts.values())
    if total > 0:
        points = sum(STATUS_POINTS[status] * n for status, n in counts.items())
        overall = round_half_up(points / total)
    else:
        overall = 0

    return MarkerSummary(
        optimal=counts[MarkerStatus.OPTIMAL],
        normal=counts[MarkerStatus.NORMAL],
        warning=counts[MarkerStatus.WARNING],
        critical=counts[MarkerStatus.CRITICAL],
        total=total,
        overall_score=overall,
    )


def group_markers_by_category(markers: Iterable[MarkerWithStatus]) -> Dict[str, List[MarkerWithStatus]]:
    grouped: Dict[str, List[MarkerWithStatus]] = {}
    for marker in markers:
        grouped.setdefault(marker.category or "other", []).append(marker)
    return grouped


def markers_for_category(category: BiomarkerCategory) -> List[str]:
    return [name for name, definition in BIOMARKERS.items() if definition.category == category]


def all_marker_names() -> List[str]:
    return list(BIOMARKERS.keys())

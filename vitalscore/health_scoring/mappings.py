"""Enumerations and lookup tables shared by the scorers.

These tables centralize the mapping from free-text upstream values to the
engine's closed vocabularies, so the compute logic never branches on raw
strings. Every enum member must have an entry; this is checked on import.
"""

from enum import Enum
from typing import Dict, Tuple


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"


class WorkoutType(str, Enum):
    HIIT = "hiit"
    RUNNING = "running"
    CYCLING = "cycling"
    SWIMMING = "swimming"
    STRENGTH = "strength"
    SPORTS = "sports"
    YOGA = "yoga"
    WALKING = "walking"
    OTHER = "other"

    @classmethod
    def from_label(cls, label: "str | WorkoutType | None") -> "WorkoutType":
        """Map a free-text workout label onto the enum. Unknown labels map to OTHER."""
        if isinstance(label, WorkoutType):
            return label
        if not label:
            return cls.OTHER
        key = str(label).strip().lower()
        try:
            return cls(key)
        except ValueError:
            return WORKOUT_TYPE_ALIASES.get(key, cls.OTHER)


# Relative intensity by workout type (typical MET ordering), used when no HR data exists
INTENSITY_MULTIPLIERS: Dict[WorkoutType, float] = {
    WorkoutType.HIIT: 1.0,
    WorkoutType.RUNNING: 0.85,
    WorkoutType.SWIMMING: 0.80,
    WorkoutType.CYCLING: 0.75,
    WorkoutType.SPORTS: 0.75,
    WorkoutType.STRENGTH: 0.65,
    WorkoutType.OTHER: 0.60,
    WorkoutType.WALKING: 0.40,
    WorkoutType.YOGA: 0.35,
}

WORKOUT_TYPE_ALIASES: Dict[str, WorkoutType] = {
    "high intensity interval training": WorkoutType.HIIT,
    "interval training": WorkoutType.HIIT,
    "run": WorkoutType.RUNNING,
    "outdoor run": WorkoutType.RUNNING,
    "indoor run": WorkoutType.RUNNING,
    "ride": WorkoutType.CYCLING,
    "outdoor cycle": WorkoutType.CYCLING,
    "indoor cycle": WorkoutType.CYCLING,
    "swim": WorkoutType.SWIMMING,
    "pool swim": WorkoutType.SWIMMING,
    "open water swim": WorkoutType.SWIMMING,
    "weights": WorkoutType.STRENGTH,
    "traditional strength training": WorkoutType.STRENGTH,
    "functional strength training": WorkoutType.STRENGTH,
    "walk": WorkoutType.WALKING,
    "hiking": WorkoutType.WALKING,
}

# Banister TRIMP coefficients (a, b) for a * e^(b * y)
BANISTER_COEFFICIENTS: Dict[Gender, Tuple[float, float]] = {
    Gender.MALE: (0.64, 1.92),
    Gender.FEMALE: (0.86, 1.67),
}


class BiomarkerCategory(str, Enum):
    METABOLIC = "metabolic"
    LIPID = "lipid"
    INFLAMMATION = "inflammation"
    HORMONES = "hormones"
    VITAMINS = "vitamins"
    BLOOD = "blood"
    KIDNEY = "kidney"
    LIVER = "liver"


class PhenoAgeMarker(str, Enum):
    """The nine blood markers of the PhenoAge model, valued as PhenoAgeInput field names."""
    ALBUMIN = "albumin"
    CREATININE = "creatinine"
    GLUCOSE = "glucose"
    CRP = "crp"
    LYMPHOCYTE_PERCENT = "lymphocyte_percent"
    MCV = "mcv"
    RDW = "rdw"
    ALKALINE_PHOSPHATASE = "alkaline_phosphatase"
    WBC = "wbc"


PHENO_AGE_DISPLAY_NAMES: Dict[PhenoAgeMarker, str] = {
    PhenoAgeMarker.ALBUMIN: "Albumin",
    PhenoAgeMarker.CREATININE: "Creatinine",
    PhenoAgeMarker.GLUCOSE: "Fasting Glucose",
    PhenoAgeMarker.CRP: "CRP (hs-CRP)",
    PhenoAgeMarker.LYMPHOCYTE_PERCENT: "Lymphocyte %",
    PhenoAgeMarker.MCV: "MCV",
    PhenoAgeMarker.RDW: "RDW",
    PhenoAgeMarker.ALKALINE_PHOSPHATASE: "Alkaline Phosphatase",
    PhenoAgeMarker.WBC: "WBC",
}

# Lower-cased lab report names -> PhenoAge marker
PHENO_AGE_MARKER_ALIASES: Dict[str, PhenoAgeMarker] = {
    "albumin": PhenoAgeMarker.ALBUMIN,
    "creatinine": PhenoAgeMarker.CREATININE,
    "glucose": PhenoAgeMarker.GLUCOSE,
    "fasting glucose": PhenoAgeMarker.GLUCOSE,
    "crp": PhenoAgeMarker.CRP,
    "hs-crp": PhenoAgeMarker.CRP,
    "c-reactive protein": PhenoAgeMarker.CRP,
    "high-sensitivity crp": PhenoAgeMarker.CRP,
    "lymphocyte": PhenoAgeMarker.LYMPHOCYTE_PERCENT,
    "lymphocyte %": PhenoAgeMarker.LYMPHOCYTE_PERCENT,
    "lymphocyte percent": PhenoAgeMarker.LYMPHOCYTE_PERCENT,
    "lymphocytes": PhenoAgeMarker.LYMPHOCYTE_PERCENT,
    "mcv": PhenoAgeMarker.MCV,
    "mean corpuscular volume": PhenoAgeMarker.MCV,
    "rdw": PhenoAgeMarker.RDW,
    "red cell distribution width": PhenoAgeMarker.RDW,
    "rdw-cv": PhenoAgeMarker.RDW,
    "alp": PhenoAgeMarker.ALKALINE_PHOSPHATASE,
    "alkaline phosphatase": PhenoAgeMarker.ALKALINE_PHOSPHATASE,
    "wbc": PhenoAgeMarker.WBC,
    "white blood cell": PhenoAgeMarker.WBC,
    "white blood cells": PhenoAgeMarker.WBC,
    "white blood cell count": PhenoAgeMarker.WBC,
}


def _check_total(table: Dict, enum_cls: type, name: str) -> None:
    missing = [member.value for member in enum_cls if member not in table]
    if missing:
        raise RuntimeError(f"{name} has no entry for: {', '.join(missing)}")


_check_total(INTENSITY_MULTIPLIERS, WorkoutType, "INTENSITY_MULTIPLIERS")
_check_total(BANISTER_COEFFICIENTS, Gender, "BANISTER_COEFFICIENTS")
_check_total(PHENO_AGE_DISPLAY_NAMES, PhenoAgeMarker, "PHENO_AGE_DISPLAY_NAMES")

"""
Utility functions for mapping free-text lab marker names to canonical names
"""
import difflib
import re
from typing import Dict, Iterable, List, Optional, Tuple


# Common report spellings -> canonical biomarker names
MARKER_NAME_VARIATIONS: Dict[str, List[str]] = {
    "Fasting Glucose": ["FBS", "Fasting Blood Sugar", "Glucose, Fasting", "Blood Sugar (Fasting)"],
    "HbA1c": ["A1C", "Hemoglobin A1C", "Glycated Hemoglobin", "Glycosylated Hemoglobin"],
    "LDL-C": ["LDL", "LDL Cholesterol", "Low Density Lipoprotein"],
    "HDL-C": ["HDL", "HDL Cholesterol", "High Density Lipoprotein"],
    "Total Cholesterol": ["Cholesterol", "TC", "CHOL"],
    "hs-CRP": ["CRP", "C-Reactive Protein", "High-Sensitivity CRP", "hsCRP"],
    "Creatinine": ["CREA", "Serum Creatinine"],
    "BUN": ["Blood Urea Nitrogen", "Urea Nitrogen"],
    "ALT": ["Alanine Aminotransferase", "SGPT"],
    "AST": ["Aspartate Aminotransferase", "SGOT"],
    "GGT": ["Gamma-glutamyl Transferase", "GGTP"],
    "TSH": ["Thyroid Stimulating Hormone"],
    "Free T4": ["FT4", "Free Thyroxine"],
    "Free T3": ["FT3", "Free Triiodothyronine"],
    "Vitamin D (25-OH)": ["Vitamin D", "25-OH Vitamin D", "25-Hydroxyvitamin D"],
    "WBC": ["White Blood Cells", "White Blood Cell Count", "Leukocytes"],
    "RBC": ["Red Blood Cells", "Red Blood Cell Count", "Erythrocytes"],
    "Testosterone (Total)": ["Testosterone", "Total Testosterone"],
    "Cortisol (AM)": ["Cortisol", "Morning Cortisol"],
}


class MarkerNameMapper:
    """Maps lab report marker names onto a fixed set of canonical names.

    Lookup order: exact (case-insensitive) canonical name, known alias,
    whole-word containment of a canonical name or alias (when enabled), then
    fuzzy matching (skipped when fuzzy_cutoff is None).
    """

    def __init__(
        self,
        canonical_names: Iterable[str],
        aliases: Optional[Dict[str, str]] = None,
        fuzzy_cutoff: Optional[float] = 0.9,
        allow_containment: bool = True,
    ):
        self.fuzzy_cutoff = fuzzy_cutoff
        self.allow_containment = allow_containment
        self._lookup: Dict[str, str] = {}
        for name in canonical_names:
            self._lookup[self._normalize(name)] = name
        for alias, canonical in (aliases or {}).items():
            self._lookup.setdefault(self._normalize(alias), canonical)
        # Longest first so "white blood cell count" wins over "white blood cell"
        self._patterns: List[Tuple[re.Pattern, str]] = [
            (re.compile(r"(?<![\w-])" + re.escape(key) + r"(?![\w-])"), canonical)
            for key, canonical in sorted(self._lookup.items(), key=lambda kv: -len(kv[0]))
        ]

    @classmethod
    def with_report_variations(cls, canonical_names: Iterable[str], **kwargs) -> "MarkerNameMapper":
        names = list(canonical_names)
        known = set(names)
        aliases = {
            alias: canonical
            for canonical, alts in MARKER_NAME_VARIATIONS.items()
            if canonical in known
            for alias in alts
        }
        return cls(names, aliases=aliases, **kwargs)

    @staticmethod
    def _normalize(name: str) -> str:
        return re.sub(r"\s+", " ", (name or "").strip().lower())

    def resolve(self, name: str) -> Tuple[Optional[str], bool]:
        """Return (canonical_name, exact) where exact is False for containment/fuzzy hits."""
        normalized = self._normalize(name)
        if not normalized:
            return None, False

        if normalized in self._lookup:
            return self._lookup[normalized], True

        if self.allow_containment:
            for pattern, canonical in self._patterns:
                if pattern.search(normalized):
                    return canonical, False

        if self.fuzzy_cutoff is None:
            return None, False
        matches = difflib.get_close_matches(normalized, list(self._lookup.keys()), n=1, cutoff=self.fuzzy_cutoff)
        if matches:
            return self._lookup[matches[0]], False
        return None, False

    def canonical_name(self, name: str) -> Optional[str]:
        """Get the canonical name for a marker name, or None when unknown"""
        return self.resolve(name)[0]

    def normalize_marker_name(self, name: str) -> str:
        """Canonical name when known, otherwise the original name unchanged"""
        return self.canonical_name(name) or name

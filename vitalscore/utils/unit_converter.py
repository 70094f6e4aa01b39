"""
Unit Converter for Blood Markers and Durations
Standardizes lab units to the US conventional units the scorers expect, and
turns durations with an explicit unit into minutes.
"""
from enum import Enum
from typing import Dict, Tuple, Union


class UnitConversionError(ValueError):
    """Exception raised when unit conversion fails"""
    pass


class DurationUnit(str, Enum):
    SECONDS = "seconds"
    MINUTES = "minutes"
    HOURS = "hours"


# Multiply by this to get minutes
DURATION_FACTORS: Dict[DurationUnit, float] = {
    DurationUnit.SECONDS: 1.0 / 60.0,
    DurationUnit.MINUTES: 1.0,
    DurationUnit.HOURS: 60.0,
}

DURATION_ALIASES: Dict[str, DurationUnit] = {
    "s": DurationUnit.SECONDS,
    "sec": DurationUnit.SECONDS,
    "secs": DurationUnit.SECONDS,
    "second": DurationUnit.SECONDS,
    "seconds": DurationUnit.SECONDS,
    "min": DurationUnit.MINUTES,
    "mins": DurationUnit.MINUTES,
    "minute": DurationUnit.MINUTES,
    "minutes": DurationUnit.MINUTES,
    "h": DurationUnit.HOURS,
    "hr": DurationUnit.HOURS,
    "hrs": DurationUnit.HOURS,
    "hour": DurationUnit.HOURS,
    "hours": DurationUnit.HOURS,
}


def parse_duration_unit(unit: Union[str, DurationUnit]) -> DurationUnit:
    if isinstance(unit, DurationUnit):
        return unit
    key = (unit or "").strip().lower()
    if key not in DURATION_ALIASES:
        raise UnitConversionError(
            f"Unknown duration unit '{unit}'. Supported units: {sorted(DURATION_ALIASES)}"
        )
    return DURATION_ALIASES[key]


def convert_duration_to_minutes(value: float, unit: Union[str, DurationUnit]) -> float:
    """Convert a duration in an explicit unit to minutes. The unit is never guessed from magnitude."""
    return value * DURATION_FACTORS[parse_duration_unit(unit)]


class BiomarkerUnitConverter:
    """Handles unit conversion and standardization for blood markers.

    Tables are keyed by canonical marker key (the PhenoAge input field name).
    """

    STANDARD_UNITS: Dict[str, str] = {
        "albumin": "g/dL",
        "creatinine": "mg/dL",
        "glucose": "mg/dL",
        "crp": "mg/L",
        "lymphocyte_percent": "%",
        "mcv": "fL",
        "rdw": "%",
        "alkaline_phosphatase": "U/L",
        "wbc": "K/uL",
    }

    # {input_unit (normalized): factor converting to the standard unit}
    UNIT_CONVERSIONS: Dict[str, Dict[str, float]] = {
        "albumin": {
            "g/dl": 1.0,  # standard
            "g/l": 0.1,
        },
        "creatinine": {
            "mg/dl": 1.0,  # standard
            "umol/l": 1.0 / 88.4,
            "mmol/l": 1000.0 / 88.4,
        },
        "glucose": {
            "mg/dl": 1.0,  # standard
            "mmol/l": 18.0182,  # multiply by this to get mg/dL
        },
        "crp": {
            "mg/l": 1.0,  # standard
            "mg/dl": 10.0,
        },
        "lymphocyte_percent": {
            "%": 1.0,  # standard
            "percent": 1.0,
            "fraction": 100.0,  # multiply by 100 to convert fraction to percentage
        },
        "mcv": {
            "fl": 1.0,  # standard
            "um3": 1.0,
        },
        "rdw": {
            "%": 1.0,  # standard
            "percent": 1.0,
        },
        "alkaline_phosphatase": {
            "u/l": 1.0,  # standard
            "iu/l": 1.0,
            "ukat/l": 60.0,
        },
        "wbc": {
            "k/ul": 1.0,  # standard
            "10^3/ul": 1.0,
            "x10^3/ul": 1.0,
            "thou/ul": 1.0,
            "10^9/l": 1.0,
            "x10^9/l": 1.0,
            "cells/ul": 0.001,
            "/ul": 0.001,
        },
    }

    # Plausible converted values (min, max); anything outside is a unit/OCR mismatch
    VALID_RANGES: Dict[str, Tuple[float, float]] = {
        "albumin": (1.0, 7.0),  # g/dL
        "creatinine": (0.1, 15.0),  # mg/dL
        "glucose": (20.0, 800.0),  # mg/dL
        "crp": (0.0, 300.0),  # mg/L
        "lymphocyte_percent": (0.0, 100.0),  # %
        "mcv": (50.0, 150.0),  # fL
        "rdw": (5.0, 40.0),  # %
        "alkaline_phosphatase": (5.0, 2000.0),  # U/L
        "wbc": (0.1, 200.0),  # K/uL
    }

    @classmethod
    def get_standard_unit(cls, marker_key: str) -> str:
        """Get the standard unit for a given marker"""
        return cls.STANDARD_UNITS.get(marker_key, "unknown")

    @classmethod
    def normalize_unit_string(cls, unit: str) -> str:
        """Normalize unit string: strip, lower-case, ASCII micro sign, no inner spaces"""
        if not unit:
            return ""
        normalized = unit.strip().lower()
        normalized = normalized.replace("μ", "u").replace("µ", "u")
        normalized = normalized.replace("×", "x").replace(" ", "")
        return normalized

    @classmethod
    def convert_to_standard_unit(cls, value: float, input_unit: str, marker_key: str) -> Tuple[float, str]:
        """
        Convert a value from input unit to the standard unit for the given marker

        Args:
            value: The numeric value to convert
            input_unit: The unit of the input value; blank means already standard
            marker_key: Canonical marker key, e.g. "glucose"

        Returns:
            Tuple of (converted_value, standard_unit)

        Raises:
            UnitConversionError: If conversion fails or units are incompatible
        """
        if marker_key not in cls.STANDARD_UNITS:
            raise UnitConversionError(f"No unit table for marker '{marker_key}'")

        standard_unit = cls.get_standard_unit(marker_key)
        normalized_input = cls.normalize_unit_string(input_unit)

        if not normalized_input or normalized_input == cls.normalize_unit_string(standard_unit):
            converted_value = value
        else:
            conversions = cls.UNIT_CONVERSIONS.get(marker_key, {})
            conversion_factor = conversions.get(normalized_input)
            if conversion_factor is None:
                raise UnitConversionError(
                    f"Cannot convert from '{input_unit}' to '{standard_unit}' for {marker_key}. "
                    f"Supported units: {list(conversions.keys())}"
                )
            converted_value = value * conversion_factor

        cls._validate_value_range(converted_value, marker_key)
        return converted_value, standard_unit

    @classmethod
    def _validate_value_range(cls, value: float, marker_key: str) -> None:
        """Validate that a converted value is within plausible range"""
        valid_range = cls.VALID_RANGES.get(marker_key)
        if valid_range:
            min_val, max_val = valid_range
            if value < min_val or value > max_val:
                raise UnitConversionError(
                    f"Converted value {value} for {marker_key} is outside valid range "
                    f"({min_val} - {max_val} {cls.get_standard_unit(marker_key)})"
                )

    @classmethod
    def is_unit_compatible(cls, unit: str, marker_key: str) -> bool:
        """Check if a unit is compatible with a given marker"""
        normalized_unit = cls.normalize_unit_string(unit)
        if normalized_unit == cls.normalize_unit_string(cls.get_standard_unit(marker_key)):
            return True
        return normalized_unit in cls.UNIT_CONVERSIONS.get(marker_key, {})


def convert_marker_unit(value: float, input_unit: str, marker_key: str) -> Tuple[float, str]:
    """
    Convenience function to convert blood marker units

    Args:
        value: The numeric value to convert
        input_unit: The unit of the input value
        marker_key: Canonical marker key

    Returns:
        Tuple of (converted_value, standard_unit)
    """
    return BiomarkerUnitConverter.convert_to_standard_unit(value, input_unit, marker_key)

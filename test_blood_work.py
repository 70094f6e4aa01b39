"""
Tests for biomarker range/status classification
"""

import pytest

from vitalscore.health_scoring.blood_work import (
    BIOMARKERS,
    UNKNOWN_MARKER_MESSAGE,
    all_marker_names,
    classify_marker,
    get_definition,
    group_markers_by_category,
    markers_for_category,
    process_markers,
    summarize_markers,
)
from vitalscore.health_scoring.mappings import BiomarkerCategory
from vitalscore.health_scoring.schemas import BiomarkerValue, MarkerStatus, MarkerWithStatus


def test_registry_size():
    assert len(BIOMARKERS) == 36
    assert all_marker_names()[0] == "Fasting Glucose"


@pytest.mark.parametrize(
    "value,status,message",
    [
        (85, MarkerStatus.OPTIMAL, "Optimal range"),
        (95, MarkerStatus.NORMAL, "Within normal range"),
        (60, MarkerStatus.WARNING, "Below normal range"),
        (40, MarkerStatus.CRITICAL, "Significantly low (43% below normal)"),
        (120, MarkerStatus.WARNING, "Above normal range"),
        (160, MarkerStatus.CRITICAL, "Significantly elevated (60% above normal)"),
    ],
)
def test_fasting_glucose_bands(value, status, message):
    result = classify_marker(value, BIOMARKERS["Fasting Glucose"])
    assert result.status == status
    assert result.message == message


def test_open_ended_reference_range():
    # HbA1c has no lower bound; any low value is optimal
    assert classify_marker(4.0, BIOMARKERS["HbA1c"]).status == MarkerStatus.OPTIMAL
    assert classify_marker(5.5, BIOMARKERS["HbA1c"]).status == MarkerStatus.NORMAL


def test_higher_is_better_messages():
    hdl = BIOMARKERS["HDL-C"]
    assert classify_marker(75, hdl).status == MarkerStatus.OPTIMAL
    assert classify_marker(50, hdl).status == MarkerStatus.NORMAL
    low = classify_marker(35, hdl)
    assert low.status == MarkerStatus.WARNING
    assert low.message == "Below optimal"

    albumin = BIOMARKERS["Albumin"]
    high = classify_marker(5.5, albumin)
    assert high.status == MarkerStatus.WARNING
    assert high.message == "Elevated (may be fine)"


def test_unknown_marker_degrades_to_normal():
    processed = process_markers([BiomarkerValue(name="Mystery Marker", value=42, unit="mg/dL")])
    assert processed[0].status == MarkerStatus.NORMAL
    assert processed[0].status_message == UNKNOWN_MARKER_MESSAGE


@pytest.mark.parametrize(
    "name,value",
    [("Cortisol (PM)", 4.0), ("VLDL Cholesterol", 30), ("Fasting Glucos", 300)],
)
def test_near_miss_names_are_not_classified(name, value):
    assert get_definition(name) is None
    marker = process_markers([BiomarkerValue(name=name, value=value)])[0]
    assert marker.status == MarkerStatus.NORMAL
    assert marker.status_message == UNKNOWN_MARKER_MESSAGE
    assert marker.reference_min is None and marker.reference_max is None


def test_process_fills_ranges_from_definition():
    processed = process_markers([BiomarkerValue(name="LDL", value=65, unit="mg/dL")])
    marker = processed[0]
    assert marker.status == MarkerStatus.OPTIMAL
    assert marker.category == "lipid"
    assert marker.reference_min is None
    assert marker.reference_max == 100
    assert marker.optimal_max == 70


def test_process_keeps_caller_ranges():
    processed = process_markers(
        [BiomarkerValue(name="Fasting Glucose", value=85, reference_min=65, reference_max=99)]
    )
    assert processed[0].reference_min == 65
    assert processed[0].reference_max == 99


def test_report_spelling_resolves_without_substring_matches():
    assert get_definition("Hemoglobin A1C").name == "HbA1c"
    assert get_definition("total iron binding capacity") is None


def test_summary_points():
    markers = [
        MarkerWithStatus(name="a", value=1, status=MarkerStatus.OPTIMAL, status_message=""),
        MarkerWithStatus(name="b", value=1, status=MarkerStatus.NORMAL, status_message=""),
        MarkerWithStatus(name="c", value=1, status=MarkerStatus.WARNING, status_message=""),
        MarkerWithStatus(name="d", value=1, status=MarkerStatus.CRITICAL, status_message=""),
    ]
    summary = summarize_markers(markers)
    assert summary.total == 4
    assert summary.optimal == summary.normal == summary.warning == summary.critical == 1
    assert summary.overall_score == 63  # (100 + 80 + 50 + 20) / 4 = 62.5


def test_summary_empty():
    assert summarize_markers([]).overall_score == 0


def test_grouping_and_category_lookup():
    processed = process_markers(
        [
            BiomarkerValue(name="ALT", value=20),
            BiomarkerValue(name="AST", value=22),
            BiomarkerValue(name="TSH", value=2.0),
        ]
    )
    grouped = group_markers_by_category(processed)
    assert len(grouped["liver"]) == 2
    assert len(grouped["hormones"]) == 1
    assert "Creatinine" in markers_for_category(BiomarkerCategory.KIDNEY)


@pytest.mark.parametrize("category", list(BiomarkerCategory))
def test_every_category_has_definitions(category):
    assert markers_for_category(category)

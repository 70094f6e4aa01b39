"""
Tests for PhenoAge and the longevity pillars
"""

import math

import pytest

from vitalscore.health_scoring.longevity import (
    calculate_pheno_age,
    estimate_percentile,
    extract_pheno_age_markers,
    generate_longevity_recommendations,
)
from vitalscore.health_scoring.schemas import BiomarkerValue, PhenoAgeInput, PillarStatus

HEALTHY_PANEL = dict(
    albumin=4.5,
    creatinine=0.9,
    glucose=88,
    crp=0.5,
    lymphocyte_percent=30,
    mcv=90,
    rdw=12.5,
    alkaline_phosphatase=70,
    wbc=5.5,
)


def reference_pheno_age(age, m):
    xb = (
        -19.9067
        - 0.0336 * m["albumin"] * 10
        + 0.0095 * m["creatinine"] * 88.4
        + 0.1953 * m["glucose"] * 0.0555
        + 0.0954 * math.log(max(m["crp"], 0.1))
        - 0.0120 * m["lymphocyte_percent"]
        + 0.0268 * m["mcv"]
        + 0.3306 * m["rdw"]
        + 0.0019 * m["alkaline_phosphatase"]
        + 0.0554 * m["wbc"]
        + 0.0804 * age
    )
    gamma, lam = 0.0076927, 0.0022802
    mortality = 1 - math.exp(-math.exp(xb) * (math.exp(120 * gamma) - 1) / gamma)
    return (1 / gamma) * math.log(1 + gamma * math.log(1 - mortality) / lam) + 120


def test_full_panel():
    result = calculate_pheno_age(PhenoAgeInput(chronological_age=45, **HEALTHY_PANEL))

    expected = max(20, min(120, reference_pheno_age(45, HEALTHY_PANEL)))
    assert result.can_calculate is True
    assert result.available_markers == 9
    assert result.missing_markers == []
    assert result.biological_age == pytest.approx(expected, abs=0.051)
    assert result.age_difference == pytest.approx(expected - 45, abs=0.051)
    assert 1 <= result.percentile <= 99
    assert len(result.pillars) == 4
    assert all(p.status == PillarStatus.OPTIMAL for p in result.pillars)


def test_zero_crp_is_floored():
    panel = dict(HEALTHY_PANEL, crp=0)
    result = calculate_pheno_age(PhenoAgeInput(chronological_age=45, **panel))
    floored = calculate_pheno_age(PhenoAgeInput(chronological_age=45, **dict(HEALTHY_PANEL, crp=0.1)))
    assert result.biological_age == floored.biological_age


@pytest.mark.parametrize("dropped", ["albumin", "glucose", "crp", "wbc"])
def test_missing_marker_blocks_calculation(dropped):
    panel = {k: v for k, v in HEALTHY_PANEL.items() if k != dropped}
    result = calculate_pheno_age(PhenoAgeInput(chronological_age=50, **panel))
    assert result.can_calculate is False
    assert result.biological_age is None
    assert result.percentile is None
    assert result.available_markers == 8
    assert len(result.missing_markers) == 1


def test_missing_markers_listed_exactly():
    result = calculate_pheno_age(PhenoAgeInput(chronological_age=50, glucose=130, crp=4.0))
    assert result.missing_markers == [
        "Albumin", "Creatinine", "Lymphocyte %", "MCV", "RDW", "Alkaline Phosphatase", "WBC",
    ]
    assert result.available_markers == 2
    # Pillars still computed from what is there
    names = [p.name for p in result.pillars]
    assert names == ["Metabolic Health", "Inflammation"]
    assert result.pillars[0].score == 20
    assert result.pillars[0].status == PillarStatus.POOR
    assert result.pillars[0].factors == ["Fasting Glucose: 130 mg/dL (Elevated)"]
    assert result.pillars[1].factors == ["hs-CRP: 4 mg/L (High risk)"]


def test_pillar_average_and_status():
    result = calculate_pheno_age(
        PhenoAgeInput(chronological_age=50, lymphocyte_percent=15, mcv=105, rdw=13)
    )
    blood = result.pillars[0]
    assert blood.name == "Blood Health"
    # (60 + 60 + 100) / 3 = 73.3
    assert blood.score == 73
    assert blood.status == PillarStatus.GOOD
    assert blood.factors[0] == "Lymphocytes: 15% (Outside normal)"


@pytest.mark.parametrize("difference,expected", [(0, 50), (-50, 99), (50, 1)])
def test_percentile(difference, expected):
    assert estimate_percentile(difference) == expected


def test_younger_is_higher_percentile():
    assert estimate_percentile(-5) > estimate_percentile(5)


def test_extract_markers_with_aliases_and_units():
    markers = [
        BiomarkerValue(name="Albumin", value=45, unit="g/L"),
        BiomarkerValue(name="Creatinine", value=79.56, unit="umol/L"),
        BiomarkerValue(name="Fasting Glucose", value=5.0, unit="mmol/L"),
        BiomarkerValue(name="hs-CRP", value=0.8, unit="mg/L"),
        BiomarkerValue(name="Lymphocytes", value=31, unit="%"),
        BiomarkerValue(name="Mean Corpuscular Volume", value=88, unit="fL"),
        BiomarkerValue(name="RDW-CV", value=12.9, unit="%"),
        BiomarkerValue(name="Alkaline Phosphatase", value=65, unit="U/L"),
        BiomarkerValue(name="WBC Count", value=6.1, unit="10^3/uL"),
        BiomarkerValue(name="LDL Cholesterol", value=95, unit="mg/dL"),
    ]
    data = extract_pheno_age_markers(markers, 40)

    assert data.chronological_age == 40
    assert data.albumin == pytest.approx(4.5)
    assert data.creatinine == pytest.approx(0.9)
    assert data.glucose == pytest.approx(90.091)
    assert data.crp == pytest.approx(0.8)
    assert data.lymphocyte_percent == 31
    assert data.mcv == 88
    assert data.rdw == pytest.approx(12.9)
    assert data.alkaline_phosphatase == 65
    assert data.wbc == pytest.approx(6.1)
    assert calculate_pheno_age(data).can_calculate is True


def test_extract_skips_unconvertible_units():
    markers = [BiomarkerValue(name="Glucose", value=90, unit="furlongs")]
    data = extract_pheno_age_markers(markers, 40)
    assert data.glucose is None


def test_exact_name_beats_containing_name():
    markers = [
        BiomarkerValue(name="Lymphocyte Absolute Count", value=2.1, unit="%"),
        BiomarkerValue(name="Lymphocyte %", value=28, unit="%"),
    ]
    data = extract_pheno_age_markers(markers, 40)
    assert data.lymphocyte_percent == 28


def test_recommendations_for_older_biological_age():
    panel = dict(HEALTHY_PANEL, glucose=140, crp=6, rdw=16, wbc=11)
    result = calculate_pheno_age(PhenoAgeInput(chronological_age=40, **panel))
    assert result.age_difference > 5
    categories = [r.category for r in generate_longevity_recommendations(result)]
    assert categories[0] == "Priority Focus"
    assert "Metabolic Health" in categories
    assert "Inflammation" in categories


def test_recommendations_for_missing_markers():
    result = calculate_pheno_age(PhenoAgeInput(chronological_age=40, glucose=85))
    recs = generate_longevity_recommendations(result)
    assert [r.category for r in recs] == ["Testing Needed"]
    assert "Albumin" in recs[0].recommendations[0]


def test_recommendations_for_younger_biological_age():
    result = calculate_pheno_age(PhenoAgeInput(chronological_age=70, **HEALTHY_PANEL))
    assert result.age_difference < 0
    assert result.percentile > 50
    recs = generate_longevity_recommendations(result)
    assert recs[0].category == "Maintenance"


def test_ratios_are_not_read_as_their_markers():
    markers = [
        BiomarkerValue(name="Albumin/Globulin Ratio", value=1.5, unit=""),
        BiomarkerValue(name="BUN/Creatinine Ratio", value=18, unit=""),
    ]
    data = extract_pheno_age_markers(markers, 40)
    assert data.albumin is None
    assert data.creatinine is None


def test_ratio_does_not_shadow_a_later_containing_name():
    markers = [
        BiomarkerValue(name="Albumin/Globulin Ratio", value=1.5, unit=""),
        BiomarkerValue(name="Serum Albumin", value=4.4, unit="g/dL"),
    ]
    assert extract_pheno_age_markers(markers, 40).albumin == pytest.approx(4.4)

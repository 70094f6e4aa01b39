"""
Tests for the recovery composer
"""

import itertools
import math

import pytest

from vitalscore.health_scoring.recovery import (
    RECOVERY_WEIGHTS,
    calculate_readiness,
    calculate_recovery,
    calculate_trend,
    component_impact,
    recovery_factors,
    score_hrv_status,
    score_resting_hr_status,
    score_sleep_consistency,
    score_strain_impact,
    z_score_to_score,
)
from vitalscore.health_scoring.schemas import (
    ComponentImpact,
    PersonalBaseline,
    RecoveryCategory,
    RecoveryInputs,
    ScoreComponent,
)

BASELINE = PersonalBaseline(
    hrv_avg=50.0,
    hrv_std_dev=10.0,
    resting_hr_avg=55.0,
    resting_hr_std_dev=3.0,
    avg_bedtime_minutes=1380,
    bedtime_std_dev=20,
    sample_count=14,
)


def test_weights_sum_to_one():
    assert sum(RECOVERY_WEIGHTS.values()) == pytest.approx(1.0)


def test_sigmoid_mapping():
    assert z_score_to_score(0) == 75
    assert z_score_to_score(1) == round(75 + 25 * math.tanh(0.75))
    assert z_score_to_score(1, invert=True) == round(75 - 25 * math.tanh(0.75))
    assert z_score_to_score(50) == 100


def test_hrv_against_baseline_reports_z():
    component = score_hrv_status(60, BASELINE)
    assert component.z_score == pytest.approx(1.0)
    assert component.score == 91


def test_resting_hr_inverted():
    lower = score_resting_hr_status(52, BASELINE)
    higher = score_resting_hr_status(58, BASELINE)
    assert lower.score > 75 > higher.score
    assert lower.z_score == pytest.approx(-1.0)


@pytest.mark.parametrize("hrv,expected", [(75, 95), (60, 85), (45, 70), (35, 55), (25, 40)])
def test_hrv_population_bands(hrv, expected):
    assert score_hrv_status(hrv, None).score == expected


@pytest.mark.parametrize("hr,expected", [(48, 95), (58, 85), (65, 70), (78, 55), (90, 40)])
def test_resting_hr_population_bands(hr, expected):
    assert score_resting_hr_status(hr, None).score == expected


@pytest.mark.parametrize(
    "strain,expected",
    [(0, 100), (3, 100), (5, 90), (9, 75), (11, 60), (15, 45), (17, 30), (20, 15)],
)
def test_strain_impact(strain, expected):
    component = score_strain_impact(strain)
    assert component.score == expected
    assert component.has_data is True


@pytest.mark.parametrize(
    "bedtime,expected",
    [(1380, 100), (1400, 85), (1420, 70), (1439, 55), (30, 40), (60, 25), (1340, 70)],
)
def test_sleep_consistency(bedtime, expected):
    assert score_sleep_consistency(bedtime, BASELINE).score == expected


def test_sleep_consistency_needs_baseline():
    assert score_sleep_consistency(1380, None).has_data is False
    assert score_sleep_consistency(None, BASELINE).has_data is False


@pytest.mark.parametrize("sleep_score", [None, 0])
def test_no_sleep_gate(sleep_score):
    result = calculate_recovery(
        RecoveryInputs(
            sleep_score=sleep_score,
            hrv_value=80,
            resting_hr=45,
            previous_day_strain=0,
            bedtime_minutes=1380,
            baseline=BASELINE,
        )
    )
    assert result.recovery_score is None
    assert result.category == RecoveryCategory.INSUFFICIENT_DATA
    assert result.has_enough_data is False
    assert "Wear your device" in result.recommendation


def test_full_data_score():
    inputs = RecoveryInputs(
        sleep_score=90,
        hrv_value=60,
        resting_hr=52,
        previous_day_strain=5,
        bedtime_minutes=1390,
        baseline=BASELINE,
    )
    result = calculate_recovery(inputs)
    hrv = score_hrv_status(60, BASELINE).score
    rhr = score_resting_hr_status(52, BASELINE).score
    expected = 90 * 0.35 + hrv * 0.25 + rhr * 0.15 + 90 * 0.15 + 100 * 0.10
    assert result.recovery_score == int(math.floor(expected + 0.5))
    assert result.category == RecoveryCategory.OPTIMAL
    assert result.training_recommendation == "High intensity, intervals, heavy lifting, competition"


def _full_inputs():
    return dict(sleep_score=72, hrv_value=45, resting_hr=58, previous_day_strain=10, bedtime_minutes=1420)


@pytest.mark.parametrize("dropped", ["hrv_value", "resting_hr", "bedtime_minutes"])
def test_one_missing_component_is_renormalized(dropped):
    values = _full_inputs()
    values[dropped] = None
    result = calculate_recovery(RecoveryInputs(baseline=BASELINE, **values))

    present = [c for c in result.components.ordered() if c.has_data]
    assert len(present) == 4
    expected = sum(c.score * c.weight for c in present) / sum(c.weight for c in present)
    assert result.recovery_score == int(math.floor(expected + 0.5))


def test_without_baseline_uses_population_bands():
    result = calculate_recovery(
        RecoveryInputs(sleep_score=80, hrv_value=60, resting_hr=58, previous_day_strain=0, bedtime_minutes=1380)
    )
    assert result.components.sleep_consistency.has_data is False
    assert result.components.hrv_status.z_score is None
    # (80*.35 + 85*.25 + 85*.15 + 100*.15) / .9
    assert result.recovery_score == 86


@pytest.mark.parametrize(
    "sleep,hrv,rhr,strain,bedtime",
    itertools.product([None, 40, 95], [None, 20, 80], [None, 45, 90], [0, 20], [None, 100]),
)
def test_gate_holds_for_any_combination(sleep, hrv, rhr, strain, bedtime):
    result = calculate_recovery(
        RecoveryInputs(
            sleep_score=sleep,
            hrv_value=hrv,
            resting_hr=rhr,
            previous_day_strain=strain,
            bedtime_minutes=bedtime,
            baseline=BASELINE,
        )
    )
    assert (result.recovery_score is None) == (sleep is None)
    if result.recovery_score is not None:
        assert 0 <= result.recovery_score <= 100


@pytest.mark.parametrize(
    "score,impact",
    [(80, ComponentImpact.POSITIVE), (75, ComponentImpact.POSITIVE), (50, ComponentImpact.NEUTRAL),
     (49, ComponentImpact.NEGATIVE)],
)
def test_component_impact(score, impact):
    assert component_impact(ScoreComponent(score=score, weight=0.1, has_data=True)) == impact


def test_component_impact_no_data():
    assert component_impact(ScoreComponent(score=None, weight=0.1, has_data=False)) == ComponentImpact.NO_DATA


def test_recovery_factors_display():
    result = calculate_recovery(RecoveryInputs(sleep_score=80, hrv_value=60, previous_day_strain=2))
    factors = recovery_factors(result)
    assert [f.name for f in factors] == [
        "Sleep Quality", "HRV Status", "Resting HR", "Previous Strain", "Sleep Consistency",
    ]
    assert [f.weight for f in factors] == ["35%", "25%", "15%", "15%", "10%"]
    assert factors[2].impact == ComponentImpact.NO_DATA


def test_readiness():
    assert calculate_readiness(80, 71) == 76
    assert calculate_readiness(None, 80) is None
    assert calculate_readiness(80, None) is None


def test_trend():
    assert calculate_trend([60, 50, 52, 48]) == pytest.approx(10.0)
    assert calculate_trend([60]) == 0.0
    # Only the seven values after the latest count
    assert calculate_trend([10] + [0] * 7 + [100]) == pytest.approx(10.0)

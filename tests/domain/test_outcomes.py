"""Tests for outcome feedback bookkeeping."""

import pytest

from govcon_match.domain.outcomes import (
    CalibrationTotals,
    Outcome,
    OutcomeImpact,
    calculate_outcome_impact,
    validate_outcome_details,
)
from govcon_match.domain.scoring_policy import OutcomePolicy
from govcon_match.exceptions import OutcomeValidationError

POLICY = OutcomePolicy()


@pytest.mark.parametrize(
    ("score", "outcome", "expected"),
    [
        (85, "won", OutcomeImpact(True, True, 0.01, 0.05)),
        (60, "lost", OutcomeImpact(False, True, 0.01, 0.05)),
        (40, "won", OutcomeImpact(False, False, -0.01, -0.2)),
        (90, "lost", OutcomeImpact(True, False, -0.01, -0.15)),
        (75, "lost", OutcomeImpact(True, False, -0.01, 0.0)),
        (65, "won", OutcomeImpact(False, False, -0.01, 0.0)),
    ],
)
def test_win_loss_outcomes_adjust_counters(
    score: int, outcome: Outcome, expected: OutcomeImpact
) -> None:
    assert calculate_outcome_impact(score, outcome, POLICY) == expected


@pytest.mark.parametrize("outcome", ["no_bid", "withdrawn"])
def test_non_decisions_are_not_evaluated(outcome: Outcome) -> None:
    impact = calculate_outcome_impact(95, outcome, POLICY)

    assert impact.predicted_win is True
    assert impact.was_correct_prediction is None
    assert impact.accuracy_adjustment == 0.0
    assert impact.confidence_adjustment == 0.0


def test_win_threshold_is_configurable() -> None:
    strict = OutcomePolicy(win_threshold=90)

    assert calculate_outcome_impact(85, "won", strict).predicted_win is False
    assert calculate_outcome_impact(85, "won", POLICY).predicted_win is True


def test_calibration_totals_accumulate() -> None:
    totals = CalibrationTotals()
    totals = totals.apply(calculate_outcome_impact(85, "won", POLICY))
    totals = totals.apply(calculate_outcome_impact(90, "lost", POLICY))
    totals = totals.apply(calculate_outcome_impact(90, "no_bid", POLICY))

    assert totals.outcomes_recorded == 3
    assert totals.evaluated_predictions == 2
    assert totals.correct_predictions == 1
    assert totals.hit_rate == 0.5
    assert totals.accuracy_score == 0.0
    assert totals.confidence_calibration == pytest.approx(-0.1)


def test_empty_totals_have_no_hit_rate() -> None:
    assert CalibrationTotals().hit_rate is None


@pytest.mark.parametrize(
    ("actual_value", "competitor_count", "field_name"),
    [(0.0, None, "actual_value"), (-5.0, None, "actual_value"), (None, 51, "competitor_count")],
)
def test_invalid_outcome_details(
    actual_value: float | None, competitor_count: int | None, field_name: str
) -> None:
    with pytest.raises(OutcomeValidationError) as exc_info:
        validate_outcome_details(actual_value=actual_value, competitor_count=competitor_count)

    assert exc_info.value.field_name == field_name


def test_valid_outcome_details_pass() -> None:
    validate_outcome_details(actual_value=1_250_000.0, competitor_count=0)
    validate_outcome_details(competitor_count=50)

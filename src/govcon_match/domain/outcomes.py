"""Outcome feedback: compare a recorded bid result with the score's prediction.

A score at or above the policy's win threshold predicts a win. Recording an
outcome yields small adjustments to aggregate accuracy and confidence
calibration counters; it never rewrites the original score.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Literal

from ..exceptions import OutcomeValidationError
from .scoring_policy import OutcomePolicy

Outcome = Literal["won", "lost", "no_bid", "withdrawn"]
OUTCOMES: tuple[Outcome, ...] = ("won", "lost", "no_bid", "withdrawn")

MAX_COMPETITOR_COUNT = 50


@dataclass(frozen=True)
class OutcomeImpact:
    """Effect of one outcome on the model's calibration counters."""

    predicted_win: bool
    was_correct_prediction: bool | None
    accuracy_adjustment: float
    confidence_adjustment: float


@dataclass(frozen=True)
class OutcomeRecord:
    """A persisted bid outcome tied to the score that predicted it."""

    outcome_id: str
    match_score_id: str
    outcome: Outcome
    predicted_score: int
    confidence: float
    algorithm_version: str
    scoring_method: str
    impact: OutcomeImpact
    recorded_at: datetime
    actual_value: float | None = None
    competitor_count: int | None = None
    notes: str = ""


@dataclass(frozen=True)
class CalibrationTotals:
    """Running totals of outcome bookkeeping."""

    outcomes_recorded: int = 0
    evaluated_predictions: int = 0
    correct_predictions: int = 0
    accuracy_score: float = 0.0
    confidence_calibration: float = 0.0

    @property
    def hit_rate(self) -> float | None:
        if self.evaluated_predictions == 0:
            return None
        return self.correct_predictions / self.evaluated_predictions

    def apply(self, impact: OutcomeImpact) -> CalibrationTotals:
        evaluated = impact.was_correct_prediction is not None
        return replace(
            self,
            outcomes_recorded=self.outcomes_recorded + 1,
            evaluated_predictions=self.evaluated_predictions + int(evaluated),
            correct_predictions=self.correct_predictions + int(bool(impact.was_correct_prediction)),
            accuracy_score=round(self.accuracy_score + impact.accuracy_adjustment, 6),
            confidence_calibration=round(
                self.confidence_calibration + impact.confidence_adjustment, 6
            ),
        )


def calculate_outcome_impact(
    overall_score: int,
    outcome: Outcome,
    policy: OutcomePolicy,
) -> OutcomeImpact:
    """Score a recorded outcome against the prediction implied by ``overall_score``.

    ``no_bid`` and ``withdrawn`` say nothing about prediction quality, so they
    are recorded without adjusting either counter.
    """
    predicted_win = overall_score >= policy.win_threshold
    if outcome not in ("won", "lost"):
        return OutcomeImpact(
            predicted_win=predicted_win,
            was_correct_prediction=None,
            accuracy_adjustment=0.0,
            confidence_adjustment=0.0,
        )

    won = outcome == "won"
    correct = predicted_win == won
    if won and overall_score < policy.missed_win_below:
        confidence_adjustment = -policy.missed_win_penalty
    elif not won and overall_score > policy.false_win_above:
        confidence_adjustment = -policy.false_win_penalty
    elif correct:
        confidence_adjustment = policy.correct_confidence_bonus
    else:
        confidence_adjustment = 0.0

    return OutcomeImpact(
        predicted_win=predicted_win,
        was_correct_prediction=correct,
        accuracy_adjustment=policy.accuracy_step if correct else -policy.accuracy_step,
        confidence_adjustment=confidence_adjustment,
    )


def validate_outcome_details(
    *, actual_value: float | None = None, competitor_count: int | None = None
) -> None:
    """Raise OutcomeValidationError for out-of-range outcome details."""
    if actual_value is not None and actual_value <= 0:
        raise OutcomeValidationError("actual_value", "must be a positive amount")
    if competitor_count is not None and not 0 <= competitor_count <= MAX_COMPETITOR_COUNT:
        raise OutcomeValidationError(
            "competitor_count", f"must be between 0 and {MAX_COMPETITOR_COUNT}"
        )

"""Match score store fakes for tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing_extensions import override

from govcon_match.domain.match_score import MatchScore
from govcon_match.domain.outcomes import CalibrationTotals, OutcomeRecord
from govcon_match.protocols import MatchScoreStore


def _empty_scores() -> dict[str, MatchScore]:
    return {}


def _empty_outcomes() -> list[OutcomeRecord]:
    return []


@dataclass
class InMemoryMatchScoreStore(MatchScoreStore):
    """Dictionary-backed store that records how often scores are written."""

    scores: dict[str, MatchScore] = field(default_factory=_empty_scores)
    outcomes: list[OutcomeRecord] = field(default_factory=_empty_outcomes)
    calibration: CalibrationTotals = field(default_factory=CalibrationTotals)
    save_count: int = 0

    @override
    def get(self, match_score_id: str) -> MatchScore | None:
        return self.scores.get(match_score_id)

    @override
    def save(self, match_score: MatchScore) -> None:
        self.scores[match_score.match_score_id] = match_score
        self.save_count += 1

    @override
    def save_outcome(self, record: OutcomeRecord) -> None:
        self.outcomes.append(record)

    @override
    def list_outcomes(self) -> list[OutcomeRecord]:
        return list(self.outcomes)

    @override
    def load_calibration(self) -> CalibrationTotals:
        return self.calibration

    @override
    def save_calibration(self, totals: CalibrationTotals) -> None:
        self.calibration = totals

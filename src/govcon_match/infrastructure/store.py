"""JSON-file persistence for match scores, outcomes, and calibration totals.

Layout under ``root``::

    scores/<match_score_id>.json
    outcomes/<outcome_id>.json
    calibration.json
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing_extensions import override

from ..domain.match_score import MatchScore
from ..domain.outcomes import CalibrationTotals, OutcomeRecord
from ..protocols import FileSystem, MatchScoreStore
from .io.validation import dump_as_json_dict, validate_as

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def _file_name(record_id: str) -> str:
    return f"{_UNSAFE_CHARS.sub('_', record_id)}.json"


@dataclass
class JsonMatchScoreStore(MatchScoreStore):
    """File-backed ``MatchScoreStore`` writing one JSON document per record."""

    root: Path
    fs: FileSystem

    def __post_init__(self) -> None:
        self.root = Path(self.root)

    @property
    def scores_dir(self) -> Path:
        return self.root / "scores"

    @property
    def outcomes_dir(self) -> Path:
        return self.root / "outcomes"

    @property
    def calibration_path(self) -> Path:
        return self.root / "calibration.json"

    @override
    def get(self, match_score_id: str) -> MatchScore | None:
        path = self.scores_dir / _file_name(match_score_id)
        if not self.fs.exists(path):
            return None
        return validate_as(MatchScore, self.fs.read_json(path))

    @override
    def save(self, match_score: MatchScore) -> None:
        path = self.scores_dir / _file_name(match_score.match_score_id)
        self.fs.write_json(dump_as_json_dict(MatchScore, match_score), path)

    @override
    def save_outcome(self, record: OutcomeRecord) -> None:
        path = self.outcomes_dir / _file_name(record.outcome_id)
        self.fs.write_json(dump_as_json_dict(OutcomeRecord, record), path)

    @override
    def list_outcomes(self) -> list[OutcomeRecord]:
        return [
            validate_as(OutcomeRecord, self.fs.read_json(path))
            for path in self.fs.list_files(self.outcomes_dir, "*.json")
        ]

    @override
    def load_calibration(self) -> CalibrationTotals:
        if not self.fs.exists(self.calibration_path):
            return CalibrationTotals()
        return validate_as(CalibrationTotals, self.fs.read_json(self.calibration_path))

    @override
    def save_calibration(self, totals: CalibrationTotals) -> None:
        self.fs.write_json(dump_as_json_dict(CalibrationTotals, totals), self.calibration_path)

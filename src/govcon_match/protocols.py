"""Protocol definitions for dependency injection.

These protocols define the abstract interfaces that the scoring engine depends on,
enabling isolated unit testing with in-memory implementations.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    import pandas as pd

    from .domain.match_score import MatchScore
    from .domain.outcomes import CalibrationTotals, OutcomeRecord


@runtime_checkable
class FileSystem(Protocol):
    """Abstract filesystem for reading/writing reference data and results."""

    def write_csv(self, df: pd.DataFrame, path: Path) -> None:
        """Write DataFrame to CSV file."""
        ...

    def read_json(self, path: Path) -> dict[str, object]:
        """Read JSON file."""
        ...

    def write_json(self, data: Mapping[str, object], path: Path) -> None:
        """Write JSON file."""
        ...

    def read_text(self, path: Path) -> str:
        """Read text file."""
        ...

    def write_text(self, content: str, path: Path) -> None:
        """Write text file."""
        ...

    def exists(self, path: Path) -> bool:
        """Check if path exists."""
        ...

    def mkdir(self, path: Path, parents: bool = True) -> None:
        """Create directory."""
        ...

    def list_files(self, path: Path, pattern: str = "*") -> list[Path]:
        """List files matching pattern in directory."""
        ...


@runtime_checkable
class CompletionClient(Protocol):
    """Abstract text-completion client used for optional AI insights."""

    def complete(self, prompt: str, *, system_prompt: str, timeout_seconds: float) -> str:
        """Return the completion text for a prompt.

        Raises:
            CompletionServiceError: On transport, authentication, or rate-limit failures.
        """
        ...


@runtime_checkable
class MatchScoreStore(Protocol):
    """Persistence collaborator for match scores and recorded outcomes."""

    def get(self, match_score_id: str) -> MatchScore | None:
        """Return a stored match score, or None if absent."""
        ...

    def save(self, match_score: MatchScore) -> None:
        """Insert or replace a match score."""
        ...

    def save_outcome(self, record: OutcomeRecord) -> None:
        """Persist an outcome record."""
        ...

    def list_outcomes(self) -> list[OutcomeRecord]:
        """Return every recorded outcome."""
        ...

    def load_calibration(self) -> CalibrationTotals:
        """Return the aggregate calibration counters."""
        ...

    def save_calibration(self, totals: CalibrationTotals) -> None:
        """Persist the aggregate calibration counters."""
        ...

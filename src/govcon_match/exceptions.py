"""Custom exceptions for the opportunity match scoring engine.

Configuration and reference data problems raise at load time and stop startup.
Per-request data problems never raise from the scoring path; they degrade the
score and its confidence instead.
"""

from __future__ import annotations


class MatchScoringError(Exception):
    """Base exception for all match scoring errors."""

    pass


class ConfigFileNotFoundError(MatchScoringError):
    """Raised when a config file path does not exist."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Config file not found: {path}")


class ConfigFileParseError(MatchScoringError):
    """Raised when a config file is not valid TOML."""

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        super().__init__(f"Config file {path} is not valid TOML: {detail}")


class ConfigFileValidationError(MatchScoringError):
    """Raised when a config file fails schema validation."""

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        super().__init__(f"Config file {path} is invalid: {detail}")


class ReferenceDataFileNotFoundError(MatchScoringError):
    """Raised when a reference data file (set-asides, NAICS defaults) is missing."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Reference data file not found: {path}")


class ReferenceDataValidationError(MatchScoringError):
    """Raised when a reference data file fails validation."""

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        super().__init__(f"Reference data file {path} is invalid: {detail}")


class ScoringPolicyFileNotFoundError(MatchScoringError):
    """Raised when the scoring policy file is missing."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Scoring policy file not found: {path}")


class ScoringPolicyValidationError(MatchScoringError):
    """Raised when the scoring policy file fails validation."""

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        super().__init__(f"Scoring policy file {path} is invalid: {detail}")


class ScoringWeightsError(MatchScoringError):
    """Raised when a set of weights has a negative entry or does not sum to exactly 100.

    This is a configuration-time invariant violation; scoring must not start.
    """

    def __init__(self, label: str, total: int, *, negative_field: str | None = None) -> None:
        self.label = label
        self.total = total
        self.negative_field = negative_field
        if negative_field is not None:
            super().__init__(f"{label} weight {negative_field} must not be negative.")
        else:
            super().__init__(f"{label} weights must sum to 100 (got {total}).")


class MatchScoreNotFoundError(MatchScoringError):
    """Raised when a persisted match score cannot be found."""

    def __init__(self, match_score_id: str) -> None:
        self.match_score_id = match_score_id
        super().__init__(f"Match score not found: {match_score_id}")


class OutcomeValidationError(MatchScoringError):
    """Raised when recorded outcome details are out of range."""

    def __init__(self, field_name: str, detail: str) -> None:
        self.field_name = field_name
        super().__init__(f"Invalid outcome {field_name}: {detail}")


class CompletionServiceError(MatchScoringError):
    """Raised when the AI completion service call fails."""

    pass


class AuthenticationError(CompletionServiceError):
    """Raised when the AI completion API rejects the credentials (401 Unauthorized)."""

    def __init__(self, message: str = "AI completion API authentication failed") -> None:
        super().__init__(f"{message}\nPlease check AI_API_KEY in .env is correct and not expired.")


class RateLimitError(CompletionServiceError):
    """Raised when the AI completion API rate limit is exceeded (429 Too Many Requests)."""

    def __init__(self, retry_after: int = 60) -> None:
        self.retry_after = retry_after
        super().__init__(f"Rate limit exceeded. Retry after {retry_after} seconds.")


class InsightsParseError(MatchScoringError):
    """Raised when AI completion text cannot be parsed into match insights."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Could not parse match insights: {detail}")

"""Domain modules for match scoring and set-aside eligibility."""

from .match_score import MatchScore, calculate_match_score
from .set_asides import EligibilityResult, resolve_eligibility

__all__ = ["EligibilityResult", "MatchScore", "calculate_match_score", "resolve_eligibility"]

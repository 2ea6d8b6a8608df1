"""Decide whether a match is strong and trustworthy enough to notify the company."""

from __future__ import annotations

from dataclasses import dataclass

from .match_score import MatchScore
from .scoring_policy import NotificationThresholds


@dataclass(frozen=True)
class NotificationReadiness:
    should_notify: bool
    reasons: tuple[str, ...]
    recommendations: tuple[str, ...]
    match_score: int
    credibility_score: float
    confidence: float


def should_notify(match_score: MatchScore, thresholds: NotificationThresholds) -> bool:
    return (
        match_score.overall_score >= thresholds.min_match_score
        and match_score.detailed_factors.credibility.score >= thresholds.min_credibility
        and match_score.confidence >= thresholds.min_confidence
    )


def notification_readiness(
    match_score: MatchScore, thresholds: NotificationThresholds
) -> NotificationReadiness:
    """Explain which notification thresholds a match meets or misses."""
    credibility = match_score.detailed_factors.credibility.score
    reasons: list[str] = []
    recommendations: list[str] = []
    if match_score.overall_score < thresholds.min_match_score:
        reasons.append(
            f"Match score {match_score.overall_score} is below {thresholds.min_match_score}"
        )
    if credibility < thresholds.min_credibility:
        reasons.append(f"Credibility {credibility:g} is below {thresholds.min_credibility:g}")
        recommendations.append("Complete SAM registration, website, and contact details.")
    if match_score.confidence < thresholds.min_confidence:
        reasons.append(
            f"Confidence {match_score.confidence:.2f} is below {thresholds.min_confidence:.2f}"
        )
        recommendations.append("Fill in missing profile fields to raise scoring confidence.")
    if not reasons:
        reasons.append("All notification thresholds met")
    return NotificationReadiness(
        should_notify=should_notify(match_score, thresholds),
        reasons=tuple(reasons),
        recommendations=tuple(recommendations),
        match_score=match_score.overall_score,
        credibility_score=credibility,
        confidence=match_score.confidence,
    )

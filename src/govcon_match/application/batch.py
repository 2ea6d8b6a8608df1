"""Batch scoring: rank many opportunities for one profile and write CSV outputs.

Outputs:
- ``match_scores.csv``: every opportunity, best match first.
- ``match_shortlist.csv``: only matches that pass the notification thresholds.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path

import pandas as pd

from ..domain.match_score import MatchScore, calculate_batch_match_scores
from ..domain.notifications import should_notify
from ..domain.reference import ReferenceData
from ..domain.set_asides import SetAsideStats, set_aside_stats
from ..observability import get_logger
from ..protocols import FileSystem
from .inputs import load_opportunities, load_profile

BATCH_SCORE_COLUMNS: tuple[str, ...] = (
    "opportunity_id",
    "match_score_id",
    "overall_score",
    "confidence",
    "past_performance",
    "technical_capability",
    "strategic_fit",
    "credibility",
    "set_aside_code",
    "eligibility_match_type",
    "eligibility_score",
    "should_notify",
    "top_recommendation",
)


@dataclass(frozen=True)
class BatchScoringResult:
    scores: tuple[MatchScore, ...]
    scores_path: Path
    shortlist_path: Path
    shortlisted: int
    set_asides: SetAsideStats


def _to_row(score: MatchScore, reference: ReferenceData) -> dict[str, object]:
    factors = score.detailed_factors
    return {
        "opportunity_id": score.opportunity_id,
        "match_score_id": score.match_score_id,
        "overall_score": score.overall_score,
        "confidence": score.confidence,
        "past_performance": factors.past_performance.score,
        "technical_capability": factors.technical_capability.score,
        "strategic_fit": factors.strategic_fit.score,
        "credibility": factors.credibility.score,
        "set_aside_code": score.eligibility.set_aside_code,
        "eligibility_match_type": score.eligibility.match_type,
        "eligibility_score": score.eligibility.score,
        "should_notify": should_notify(score, reference.policy.notification),
        "top_recommendation": score.recommendations[0] if score.recommendations else "",
    }


def build_scores_frame(scores: tuple[MatchScore, ...], reference: ReferenceData) -> pd.DataFrame:
    rows = [_to_row(score, reference) for score in scores]
    return pd.DataFrame(rows, columns=list(BATCH_SCORE_COLUMNS))


def run_batch_scoring(
    *,
    profile_path: str | Path,
    opportunities_path: str | Path,
    out_dir: str | Path,
    reference: ReferenceData,
    fs: FileSystem,
    today: date,
) -> BatchScoringResult:
    """Score every opportunity in ``opportunities_path`` against one profile.

    Args:
        profile_path: Profile JSON document.
        opportunities_path: ``{"opportunities": [...]}`` JSON document.
        out_dir: Directory for the CSV outputs.
        reference: Loaded reference data.
        fs: Filesystem used for reads and writes.
        today: Reference date for certification expiry and recency.

    Returns:
        The ranked scores and the paths written.
    """
    logger = get_logger("govcon_match.application.batch")
    out_dir = Path(out_dir)
    fs.mkdir(out_dir, parents=True)

    profile = load_profile(Path(profile_path), fs)
    opportunities = load_opportunities(Path(opportunities_path), fs)
    logger.info("Scoring %s opportunities for %s", len(opportunities), profile.profile_id)
    stats = set_aside_stats(opportunity.set_aside_code for opportunity in opportunities)

    scores = calculate_batch_match_scores(
        profile, opportunities, reference=reference, today=today
    )
    df = build_scores_frame(scores, reference)

    scores_path = out_dir / "match_scores.csv"
    fs.write_csv(df, scores_path)
    logger.info("Scores: %s", scores_path)

    shortlist = df[df["should_notify"].astype(bool)].copy()
    shortlist_path = out_dir / "match_shortlist.csv"
    fs.write_csv(shortlist, shortlist_path)
    logger.info("Shortlist: %s (%s opportunities)", shortlist_path, len(shortlist))

    return BatchScoringResult(
        scores=scores,
        scores_path=scores_path,
        shortlist_path=shortlist_path,
        shortlisted=len(shortlist),
        set_asides=stats,
    )

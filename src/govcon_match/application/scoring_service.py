"""Persistence-backed match scoring and outcome bookkeeping.

A match score is created the first time a profile/opportunity pair is scored
and recomputed only when the inputs change or the algorithm version moves on.
Recording an outcome annotates the stored score and updates calibration
counters; it never rewrites ``overall_score`` or ``confidence``.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, date, datetime

from ..domain.insights import MatchInsights, attach_insights
from ..domain.match_score import (
    MatchScore,
    calculate_match_score,
    input_fingerprint,
    match_score_id_for,
)
from ..domain.outcomes import (
    Outcome,
    OutcomeImpact,
    OutcomeRecord,
    calculate_outcome_impact,
    validate_outcome_details,
)
from ..domain.profiles import CompanyProfile, Opportunity
from ..domain.reference import ReferenceData
from ..exceptions import MatchScoreNotFoundError
from ..observability import get_logger
from ..protocols import MatchScoreStore

logger = get_logger("govcon_match.application.scoring_service")


def _utc_now() -> datetime:
    return datetime.now(UTC)


class MatchScoringService:
    """Score profile/opportunity pairs and record bid outcomes against a store."""

    def __init__(
        self,
        *,
        reference: ReferenceData,
        store: MatchScoreStore,
        today: Callable[[], date] = date.today,
        now: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._reference = reference
        self._store = store
        self._today = today
        self._now = now

    @property
    def reference(self) -> ReferenceData:
        return self._reference

    def score(self, profile: CompanyProfile, opportunity: Opportunity) -> MatchScore:
        """Return the current match score for the pair, recomputing only when stale."""
        match_score_id = match_score_id_for(profile.profile_id, opportunity.opportunity_id)
        existing = self._store.get(match_score_id)
        today = self._today()
        fingerprint = input_fingerprint(profile, opportunity, today=today)
        version = self._reference.policy.algorithm_version
        if (
            existing is not None
            and existing.input_fingerprint == fingerprint
            and existing.algorithm_version == version
        ):
            logger.info("Match score %s is current; reusing stored result", match_score_id)
            return existing

        computed = calculate_match_score(
            profile, opportunity, reference=self._reference, today=today
        )
        if existing is not None:
            reason = (
                "inputs changed"
                if existing.input_fingerprint != fingerprint
                else f"algorithm {existing.algorithm_version} -> {version}"
            )
            logger.info("Rescoring %s (%s)", match_score_id, reason)
            computed = replace(computed, actual_outcome=existing.actual_outcome)
            if existing.insights is not None and existing.input_fingerprint == fingerprint:
                computed = attach_insights(computed, existing.insights)
        else:
            logger.info(
                "Scored %s: %s (confidence %.3f)",
                match_score_id,
                computed.overall_score,
                computed.confidence,
            )
        self._store.save(computed)
        return computed

    def attach_insights(self, match_score: MatchScore, insights: MatchInsights) -> MatchScore:
        """Persist ``insights`` alongside an existing score without changing its numbers."""
        updated = attach_insights(match_score, insights)
        self._store.save(updated)
        return updated

    def get(self, match_score_id: str) -> MatchScore:
        match_score = self._store.get(match_score_id)
        if match_score is None:
            raise MatchScoreNotFoundError(match_score_id)
        return match_score

    def record_outcome(
        self,
        match_score_id: str,
        outcome: Outcome,
        *,
        actual_value: float | None = None,
        competitor_count: int | None = None,
        notes: str | None = None,
    ) -> OutcomeImpact:
        """Record a bid outcome against a stored score and update calibration totals."""
        validate_outcome_details(actual_value=actual_value, competitor_count=competitor_count)
        match_score = self.get(match_score_id)
        impact = calculate_outcome_impact(
            match_score.overall_score, outcome, self._reference.policy.outcome
        )
        record = OutcomeRecord(
            outcome_id=f"outcome_{uuid.uuid4().hex}",
            match_score_id=match_score_id,
            outcome=outcome,
            predicted_score=match_score.overall_score,
            confidence=match_score.confidence,
            algorithm_version=match_score.algorithm_version,
            scoring_method=match_score.scoring_method,
            impact=impact,
            recorded_at=self._now(),
            actual_value=actual_value,
            competitor_count=competitor_count,
            notes=(notes or "").strip(),
        )
        self._store.save_outcome(record)
        self._store.save(replace(match_score, actual_outcome=outcome))
        totals = self._store.load_calibration().apply(impact)
        self._store.save_calibration(totals)
        logger.info(
            "Recorded %s for %s (predicted %s, correct=%s)",
            outcome,
            match_score_id,
            match_score.overall_score,
            impact.was_correct_prediction,
        )
        return impact

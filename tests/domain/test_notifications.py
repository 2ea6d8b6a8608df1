"""Tests for notification readiness."""

from dataclasses import replace

import pytest

from govcon_match.domain.match_score import MatchScore, calculate_match_score
from govcon_match.domain.notifications import notification_readiness, should_notify
from govcon_match.domain.scoring_policy import NotificationThresholds
from tests.support.builders import TODAY, full_opportunity, full_profile, reference_data

THRESHOLDS = NotificationThresholds()


@pytest.fixture(scope="module")
def strong_match() -> MatchScore:
    return calculate_match_score(
        full_profile(), full_opportunity(), reference=reference_data(), today=TODAY
    )


def test_strong_complete_match_notifies(strong_match: MatchScore) -> None:
    readiness = notification_readiness(strong_match, THRESHOLDS)

    assert should_notify(strong_match, THRESHOLDS) is True
    assert readiness.should_notify is True
    assert readiness.reasons == ("All notification thresholds met",)
    assert readiness.recommendations == ()


def test_low_confidence_blocks_notification(strong_match: MatchScore) -> None:
    uncertain = replace(strong_match, confidence=0.5)

    readiness = notification_readiness(uncertain, THRESHOLDS)

    assert readiness.should_notify is False
    assert readiness.reasons == ("Confidence 0.50 is below 0.65",)
    assert len(readiness.recommendations) == 1


def test_low_score_blocks_notification(strong_match: MatchScore) -> None:
    weak = replace(strong_match, overall_score=74)

    assert should_notify(weak, THRESHOLDS) is False
    assert notification_readiness(weak, THRESHOLDS).reasons == ("Match score 74 is below 75",)


def test_low_credibility_blocks_notification() -> None:
    score = calculate_match_score(
        full_profile(
            sam_registration_status="expired",
            uei="",
            cage_code="",
            website="not a site",
            business_size="other_than_small",
        ),
        full_opportunity(),
        reference=reference_data(),
        today=TODAY,
    )

    readiness = notification_readiness(score, THRESHOLDS)

    assert readiness.should_notify is False
    assert any(reason.startswith("Credibility") for reason in readiness.reasons)

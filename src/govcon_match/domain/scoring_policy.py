"""Domain model for the match scoring policy.

The policy fixes the four category weights, the sub-factor weights inside each
category, the neutral baseline used for missing data, and the thresholds used
by outcome bookkeeping and notifications. Every weight group must sum to
exactly 100; a policy that does not cannot be constructed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Self

from ..exceptions import ScoringWeightsError

CategoryName = Literal["past_performance", "technical_capability", "strategic_fit", "credibility"]
CATEGORY_NAMES: tuple[CategoryName, ...] = (
    "past_performance",
    "technical_capability",
    "strategic_fit",
    "credibility",
)

DEFAULT_ALGORITHM_VERSION = "rules-2025.1"
DEFAULT_NEUTRAL_SCORE = 50


class _WeightGroup:
    """Mixin for frozen dataclasses of non-negative integer weights summing to 100."""

    _label = "Weight"

    def __post_init__(self) -> None:
        weights = self.as_dict()
        total = sum(weights.values())
        for name, value in weights.items():
            if value < 0:
                raise ScoringWeightsError(self._label, total, negative_field=name)
        if total != 100:
            raise ScoringWeightsError(self._label, total)

    def as_dict(self) -> dict[str, int]:
        return {name: int(value) for name, value in vars(self).items()}

    def weight_of(self, name: str) -> int:
        return self.as_dict()[name]


@dataclass(frozen=True)
class CategoryWeights(_WeightGroup):
    """Top-level category weights."""

    _label = "Category"

    past_performance: int = 35
    technical_capability: int = 35
    strategic_fit: int = 15
    credibility: int = 15


@dataclass(frozen=True)
class PastPerformanceWeights(_WeightGroup):
    _label = "Past performance sub-factor"

    agency_experience: int = 40
    contract_history: int = 30
    value_alignment: int = 20
    recency: int = 10


@dataclass(frozen=True)
class TechnicalCapabilityWeights(_WeightGroup):
    _label = "Technical capability sub-factor"

    naics_alignment: int = 50
    certification_match: int = 25
    competency_alignment: int = 15
    security_clearance: int = 10


@dataclass(frozen=True)
class StrategicFitWeights(_WeightGroup):
    _label = "Strategic fit sub-factor"

    geographic_alignment: int = 40
    set_aside_eligibility: int = 35
    government_level: int = 25


@dataclass(frozen=True)
class CredibilityWeights(_WeightGroup):
    _label = "Credibility sub-factor"

    registration: int = 50
    business_size: int = 20
    web_presence: int = 15
    contact_completeness: int = 15


@dataclass(frozen=True)
class OutcomePolicy:
    """Thresholds and magnitudes used when recording win/loss outcomes."""

    win_threshold: int = 70
    missed_win_below: int = 50
    false_win_above: int = 80
    accuracy_step: float = 0.01
    correct_confidence_bonus: float = 0.05
    missed_win_penalty: float = 0.2
    false_win_penalty: float = 0.15


@dataclass(frozen=True)
class NotificationThresholds:
    """Minimums a match must meet before the company is notified."""

    min_match_score: int = 75
    min_credibility: float = 60.0
    min_confidence: float = 0.65


@dataclass(frozen=True)
class ScoringPolicy:
    """Complete, validated scoring configuration."""

    algorithm_version: str = DEFAULT_ALGORITHM_VERSION
    neutral_score: int = DEFAULT_NEUTRAL_SCORE
    category_weights: CategoryWeights = field(default_factory=CategoryWeights)
    past_performance: PastPerformanceWeights = field(default_factory=PastPerformanceWeights)
    technical_capability: TechnicalCapabilityWeights = field(
        default_factory=TechnicalCapabilityWeights
    )
    strategic_fit: StrategicFitWeights = field(default_factory=StrategicFitWeights)
    credibility: CredibilityWeights = field(default_factory=CredibilityWeights)
    outcome: OutcomePolicy = field(default_factory=OutcomePolicy)
    notification: NotificationThresholds = field(default_factory=NotificationThresholds)

    @classmethod
    def default(cls) -> Self:
        return cls()

    def sub_weights(self, category: CategoryName) -> dict[str, int]:
        group: _WeightGroup = getattr(self, category)
        return group.as_dict()

"""Loading and strict validation for the scoring policy file.

Weight groups are checked when the domain policy is constructed, so a file
whose weights do not sum to 100 raises ``ScoringWeightsError`` here, at
startup, and never reaches the scoring path.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from ..domain.scoring_policy import (
    CategoryWeights,
    CredibilityWeights,
    NotificationThresholds,
    OutcomePolicy,
    PastPerformanceWeights,
    ScoringPolicy,
    StrategicFitWeights,
    TechnicalCapabilityWeights,
)
from ..exceptions import ScoringPolicyFileNotFoundError, ScoringPolicyValidationError
from ..infrastructure.io.validation import format_validation_error
from ..observability import get_logger
from ..protocols import FileSystem

_SCHEMA_VERSION = 1

logger = get_logger("govcon_match.application.scoring_policy")


class _WeightsModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def _validate_non_negative(self) -> _WeightsModel:
        if any(value < 0 for value in self.model_dump().values()):
            raise ValueError
        return self


class _CategoryWeightsModel(_WeightsModel):
    past_performance: int
    technical_capability: int
    strategic_fit: int
    credibility: int


class _PastPerformanceWeightsModel(_WeightsModel):
    agency_experience: int
    contract_history: int
    value_alignment: int
    recency: int


class _TechnicalCapabilityWeightsModel(_WeightsModel):
    naics_alignment: int
    certification_match: int
    competency_alignment: int
    security_clearance: int


class _StrategicFitWeightsModel(_WeightsModel):
    geographic_alignment: int
    set_aside_eligibility: int
    government_level: int


class _CredibilityWeightsModel(_WeightsModel):
    registration: int
    business_size: int
    web_presence: int
    contact_completeness: int


class _SubWeightsModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    past_performance: _PastPerformanceWeightsModel
    technical_capability: _TechnicalCapabilityWeightsModel
    strategic_fit: _StrategicFitWeightsModel
    credibility: _CredibilityWeightsModel


class _OutcomeModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    win_threshold: int
    missed_win_below: int
    false_win_above: int
    accuracy_step: float
    correct_confidence_bonus: float
    missed_win_penalty: float
    false_win_penalty: float

    @field_validator("win_threshold", "missed_win_below", "false_win_above")
    @classmethod
    def _validate_score(cls, value: int) -> int:
        if value < 0 or value > 100:
            raise ValueError
        return value

    @field_validator(
        "accuracy_step", "correct_confidence_bonus", "missed_win_penalty", "false_win_penalty"
    )
    @classmethod
    def _validate_magnitude(cls, value: float) -> float:
        if value < 0.0 or value > 1.0:
            raise ValueError
        return value


class _NotificationModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    min_match_score: int
    min_credibility: float
    min_confidence: float

    @field_validator("min_confidence")
    @classmethod
    def _validate_confidence(cls, value: float) -> float:
        if value < 0.0 or value > 1.0:
            raise ValueError
        return value


class _ScoringPolicyModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_version: int
    algorithm_version: str
    neutral_score: int
    category_weights: _CategoryWeightsModel
    sub_weights: _SubWeightsModel
    outcome: _OutcomeModel
    notification: _NotificationModel

    @field_validator("schema_version")
    @classmethod
    def _validate_schema_version(cls, value: int) -> int:
        if value != _SCHEMA_VERSION:
            raise ValueError
        return value

    @field_validator("algorithm_version")
    @classmethod
    def _validate_algorithm_version(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError
        return text

    @field_validator("neutral_score")
    @classmethod
    def _validate_neutral_score(cls, value: int) -> int:
        if value < 0 or value > 100:
            raise ValueError
        return value


def _to_domain_policy(model: _ScoringPolicyModel) -> ScoringPolicy:
    subs = model.sub_weights
    return ScoringPolicy(
        algorithm_version=model.algorithm_version,
        neutral_score=model.neutral_score,
        category_weights=CategoryWeights(**model.category_weights.model_dump()),
        past_performance=PastPerformanceWeights(**subs.past_performance.model_dump()),
        technical_capability=TechnicalCapabilityWeights(**subs.technical_capability.model_dump()),
        strategic_fit=StrategicFitWeights(**subs.strategic_fit.model_dump()),
        credibility=CredibilityWeights(**subs.credibility.model_dump()),
        outcome=OutcomePolicy(**model.outcome.model_dump()),
        notification=NotificationThresholds(**model.notification.model_dump()),
    )


def load_scoring_policy(*, path: Path, fs: FileSystem) -> ScoringPolicy:
    """Load and validate the scoring policy from JSON.

    Raises:
        ScoringPolicyFileNotFoundError: If the file does not exist.
        ScoringPolicyValidationError: If the file does not match the schema.
        ScoringWeightsError: If any weight group does not sum to 100.
    """
    if not fs.exists(path):
        raise ScoringPolicyFileNotFoundError(str(path))

    payload = fs.read_text(path)
    try:
        model = _ScoringPolicyModel.model_validate_json(payload)
    except ValidationError as exc:
        raise ScoringPolicyValidationError(str(path), format_validation_error(exc)) from exc

    policy = _to_domain_policy(model)
    logger.info("Loaded scoring policy %s from %s", policy.algorithm_version, path)
    return policy

"""Typed parsing and validation for match scoring config files.

Example file::

    schema_version = 1

    [scoring]
    set_asides_path = "data/reference/set_asides.json"
    store_root = "data/match_scores"
    ai_timeout_seconds = 15
    insights_enabled = false
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .exceptions import ConfigFileNotFoundError, ConfigFileParseError, ConfigFileValidationError
from .infrastructure.io.validation import format_validation_error
from .protocols import FileSystem

_SCHEMA_VERSION = 1


@dataclass(frozen=True)
class MatchConfigFile:
    """Validated scoring config values loaded from a TOML file."""

    set_asides_path: str | None = None
    naics_psc_defaults_path: str | None = None
    scoring_policy_path: str | None = None
    store_root: str | None = None
    ai_api_url: str | None = None
    ai_model: str | None = None
    ai_max_tokens: int | None = None
    ai_timeout_seconds: float | None = None
    insights_enabled: bool | None = None
    log_level: str | None = None


class _ScoringSectionModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    set_asides_path: str | None = None
    naics_psc_defaults_path: str | None = None
    scoring_policy_path: str | None = None
    store_root: str | None = None
    ai_api_url: str | None = None
    ai_model: str | None = None
    ai_max_tokens: int | None = None
    ai_timeout_seconds: float | None = None
    insights_enabled: bool | None = None
    log_level: str | None = None

    @field_validator(
        "set_asides_path",
        "naics_psc_defaults_path",
        "scoring_policy_path",
        "store_root",
        "ai_api_url",
        "ai_model",
    )
    @classmethod
    def _validate_non_empty_text(cls, value: str | None) -> str | None:
        if value is None:
            return None
        text = value.strip()
        if not text:
            raise ValueError
        return text

    @field_validator("ai_max_tokens")
    @classmethod
    def _validate_positive_int(cls, value: int | None) -> int | None:
        if value is None:
            return None
        if value < 1:
            raise ValueError
        return value

    @field_validator("ai_timeout_seconds")
    @classmethod
    def _validate_timeout(cls, value: float | None) -> float | None:
        if value is None:
            return None
        if value <= 0.0:
            raise ValueError
        return value

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str | None) -> str | None:
        if value is None:
            return None
        level = value.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError
        return level


class _ConfigFileModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_version: int
    scoring: _ScoringSectionModel

    @field_validator("schema_version")
    @classmethod
    def _validate_schema_version(cls, value: int) -> int:
        if value != _SCHEMA_VERSION:
            raise ValueError
        return value


def load_match_config_file(*, path: Path, fs: FileSystem) -> MatchConfigFile:
    """Load and validate a scoring TOML config file."""
    if not fs.exists(path):
        raise ConfigFileNotFoundError(str(path))

    raw_payload = fs.read_text(path)
    try:
        payload: object = tomllib.loads(raw_payload)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigFileParseError(str(path), str(exc)) from exc

    try:
        model = _ConfigFileModel.model_validate(payload)
    except ValidationError as exc:
        raise ConfigFileValidationError(str(path), format_validation_error(exc)) from exc

    return MatchConfigFile(**model.scoring.model_dump())

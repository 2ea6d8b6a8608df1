"""Centralised, injectable configuration for the match scoring engine."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Self

from dotenv import load_dotenv

from .config_file import MatchConfigFile

DEFAULT_SET_ASIDES_PATH = "data/reference/set_asides.json"
DEFAULT_NAICS_PSC_DEFAULTS_PATH = "data/reference/naics_psc_defaults.json"
DEFAULT_SCORING_POLICY_PATH = "data/reference/scoring_policy.json"
DEFAULT_STORE_ROOT = "data/match_scores"
DEFAULT_AI_API_URL = "https://api.anthropic.com/v1/messages"
DEFAULT_AI_MODEL = "claude-3-5-haiku-latest"


class PositiveIntegerEnvVarError(ValueError):
    """Raised when an environment variable must be a positive integer."""

    def __init__(self, env_name: str) -> None:
        super().__init__(f"{env_name} must be a positive integer.")


class PositiveNumberEnvVarError(ValueError):
    """Raised when an environment variable must be a positive number."""

    def __init__(self, env_name: str) -> None:
        super().__init__(f"{env_name} must be a positive number.")


class BooleanEnvVarError(ValueError):
    """Raised when an environment variable must be a supported boolean."""

    def __init__(self, env_name: str) -> None:
        super().__init__(f"{env_name} must be a boolean value (true/false, 1/0, yes/no, on/off).")


@dataclass(frozen=True)
class MatchConfig:
    """Immutable configuration for scoring, persistence, and AI insights.

    Load from environment with `MatchConfig.from_env()` or construct directly for testing.
    """

    # Reference data
    set_asides_path: str = DEFAULT_SET_ASIDES_PATH
    naics_psc_defaults_path: str = DEFAULT_NAICS_PSC_DEFAULTS_PATH
    scoring_policy_path: str = DEFAULT_SCORING_POLICY_PATH

    # Persistence
    store_root: str = DEFAULT_STORE_ROOT

    # AI insights (best effort)
    ai_api_key: str = ""
    ai_api_url: str = DEFAULT_AI_API_URL
    ai_model: str = DEFAULT_AI_MODEL
    ai_max_tokens: int = 1500
    ai_timeout_seconds: float = 20.0
    insights_enabled: bool = True

    log_level: str = "INFO"

    @property
    def insights_available(self) -> bool:
        return self.insights_enabled and bool(self.ai_api_key)

    @classmethod
    def from_env(cls, dotenv_path: str | None = None) -> Self:
        """Load configuration from environment variables.

        Args:
            dotenv_path: Optional path to .env file. If None, uses default .env discovery.

        Returns:
            MatchConfig instance populated from environment.
        """
        load_dotenv(dotenv_path)

        enabled = _parse_optional_bool(
            os.getenv("INSIGHTS_ENABLED", ""), env_name="INSIGHTS_ENABLED"
        )
        return cls(
            set_asides_path=_env_text("SET_ASIDES_PATH", DEFAULT_SET_ASIDES_PATH),
            naics_psc_defaults_path=_env_text(
                "NAICS_PSC_DEFAULTS_PATH", DEFAULT_NAICS_PSC_DEFAULTS_PATH
            ),
            scoring_policy_path=_env_text("SCORING_POLICY_PATH", DEFAULT_SCORING_POLICY_PATH),
            store_root=_env_text("MATCH_STORE_ROOT", DEFAULT_STORE_ROOT),
            ai_api_key=os.getenv("AI_API_KEY", "").strip(),
            ai_api_url=_env_text("AI_API_URL", DEFAULT_AI_API_URL),
            ai_model=_env_text("AI_MODEL", DEFAULT_AI_MODEL),
            ai_max_tokens=_parse_optional_positive_int(
                os.getenv("AI_MAX_TOKENS", ""), env_name="AI_MAX_TOKENS"
            )
            or 1500,
            ai_timeout_seconds=_parse_optional_positive_float(
                os.getenv("AI_TIMEOUT_SECONDS", ""), env_name="AI_TIMEOUT_SECONDS"
            )
            or 20.0,
            insights_enabled=True if enabled is None else enabled,
            log_level=_env_text("LOG_LEVEL", "INFO").upper(),
        )

    def with_overrides(
        self,
        *,
        store_root: str | None = None,
        ai_timeout_seconds: float | None = None,
        insights_enabled: bool | None = None,
    ) -> Self:
        """Return a new config with specified overrides (for CLI options)."""
        return replace(
            self,
            store_root=self.store_root if store_root is None else store_root.strip(),
            ai_timeout_seconds=self.ai_timeout_seconds
            if ai_timeout_seconds is None
            else ai_timeout_seconds,
            insights_enabled=self.insights_enabled
            if insights_enabled is None
            else insights_enabled,
        )

    def with_file_overrides(self, file_config: MatchConfigFile) -> Self:
        """Return a new config with config-file values overriding env/default values."""
        overrides = {
            name: value
            for name, value in vars(file_config).items()
            if value is not None
        }
        return replace(self, **overrides)


def _env_text(env_name: str, default: str) -> str:
    return os.getenv(env_name, default).strip() or default


def _parse_optional_positive_int(value: str, *, env_name: str) -> int | None:
    """Parse an optional positive integer from an environment variable."""
    text = value.strip()
    if not text:
        return None
    try:
        parsed = int(text)
    except ValueError as exc:
        raise PositiveIntegerEnvVarError(env_name) from exc
    if parsed < 1:
        raise PositiveIntegerEnvVarError(env_name)
    return parsed


def _parse_optional_positive_float(value: str, *, env_name: str) -> float | None:
    """Parse an optional positive number from an environment variable."""
    text = value.strip()
    if not text:
        return None
    try:
        parsed = float(text)
    except ValueError as exc:
        raise PositiveNumberEnvVarError(env_name) from exc
    if parsed <= 0:
        raise PositiveNumberEnvVarError(env_name)
    return parsed


def _parse_optional_bool(value: str, *, env_name: str) -> bool | None:
    """Parse an optional boolean from an environment variable."""
    text = value.strip().lower()
    if not text:
        return None
    if text in {"1", "true", "yes", "y", "on"}:
        return True
    if text in {"0", "false", "no", "n", "off"}:
        return False
    raise BooleanEnvVarError(env_name)

"""Tests for MatchConfig behaviour."""

import pytest

import govcon_match.config as config_module
from govcon_match.config import (
    BooleanEnvVarError,
    MatchConfig,
    PositiveIntegerEnvVarError,
    PositiveNumberEnvVarError,
)


def _patch_env(monkeypatch: pytest.MonkeyPatch, env: dict[str, str]) -> None:
    def fake_getenv(key: str, default: str = "") -> str:
        return env.get(key, default)

    def fake_load_dotenv(dotenv_path: str | None = None) -> bool:
        _ = dotenv_path
        return True

    monkeypatch.setattr(config_module.os, "getenv", fake_getenv)
    monkeypatch.setattr(config_module, "load_dotenv", fake_load_dotenv)


def test_from_env_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_env(monkeypatch, {})

    config = MatchConfig.from_env()

    assert config == MatchConfig()
    assert config.insights_available is False


def test_from_env_reads_all_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_env(
        monkeypatch,
        {
            "SET_ASIDES_PATH": "ref/set_asides.json",
            "NAICS_PSC_DEFAULTS_PATH": "ref/naics.json",
            "SCORING_POLICY_PATH": "ref/policy.json",
            "MATCH_STORE_ROOT": " store ",
            "AI_API_KEY": " secret ",
            "AI_API_URL": "https://llm.example.com/v1/messages",
            "AI_MODEL": "test-model",
            "AI_MAX_TOKENS": "800",
            "AI_TIMEOUT_SECONDS": "7.5",
            "INSIGHTS_ENABLED": "yes",
            "LOG_LEVEL": "debug",
        },
    )

    config = MatchConfig.from_env()

    assert config.set_asides_path == "ref/set_asides.json"
    assert config.naics_psc_defaults_path == "ref/naics.json"
    assert config.scoring_policy_path == "ref/policy.json"
    assert config.store_root == "store"
    assert config.ai_api_key == "secret"
    assert config.ai_api_url == "https://llm.example.com/v1/messages"
    assert config.ai_model == "test-model"
    assert config.ai_max_tokens == 800
    assert config.ai_timeout_seconds == 7.5
    assert config.insights_enabled is True
    assert config.insights_available is True
    assert config.log_level == "DEBUG"


def test_insights_disabled_even_with_key(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_env(monkeypatch, {"AI_API_KEY": "secret", "INSIGHTS_ENABLED": "off"})

    assert MatchConfig.from_env().insights_available is False


@pytest.mark.parametrize(
    ("env", "error"),
    [
        ({"AI_MAX_TOKENS": "0"}, PositiveIntegerEnvVarError),
        ({"AI_MAX_TOKENS": "many"}, PositiveIntegerEnvVarError),
        ({"AI_TIMEOUT_SECONDS": "-1"}, PositiveNumberEnvVarError),
        ({"INSIGHTS_ENABLED": "maybe"}, BooleanEnvVarError),
    ],
)
def test_invalid_env_values_raise(
    monkeypatch: pytest.MonkeyPatch, env: dict[str, str], error: type[ValueError]
) -> None:
    _patch_env(monkeypatch, env)

    with pytest.raises(error):
        MatchConfig.from_env()


def test_with_overrides_preserves_fields() -> None:
    base = MatchConfig(ai_api_key="key", ai_model="m", store_root="a")

    updated = base.with_overrides(store_root=" b ", insights_enabled=False)

    assert updated.store_root == "b"
    assert updated.insights_enabled is False
    assert updated.ai_api_key == "key"
    assert updated.ai_model == "m"
    assert updated.ai_timeout_seconds == base.ai_timeout_seconds

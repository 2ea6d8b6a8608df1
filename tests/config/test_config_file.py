"""Tests for config-file schema parsing and fail-fast validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from govcon_match.config_file import MatchConfigFile, load_match_config_file
from govcon_match.exceptions import (
    ConfigFileNotFoundError,
    ConfigFileParseError,
    ConfigFileValidationError,
)
from tests.fakes import InMemoryFileSystem

CONFIG_PATH = Path("config/govcon.toml")


def _write(fs: InMemoryFileSystem, content: str) -> None:
    fs.write_text(content, CONFIG_PATH)


def test_load_match_config_file_parses_valid_toml() -> None:
    fs = InMemoryFileSystem()
    _write(
        fs,
        """
schema_version = 1

[scoring]
set_asides_path = " data/reference/set_asides.json "
store_root = "data/match_scores"
ai_model = "test-model"
ai_max_tokens = 900
ai_timeout_seconds = 12.5
insights_enabled = false
log_level = "warning"
""".strip(),
    )

    parsed = load_match_config_file(path=CONFIG_PATH, fs=fs)

    assert parsed == MatchConfigFile(
        set_asides_path="data/reference/set_asides.json",
        store_root="data/match_scores",
        ai_model="test-model",
        ai_max_tokens=900,
        ai_timeout_seconds=12.5,
        insights_enabled=False,
        log_level="WARNING",
    )


def test_missing_file_raises() -> None:
    with pytest.raises(ConfigFileNotFoundError):
        load_match_config_file(path=CONFIG_PATH, fs=InMemoryFileSystem())


def test_invalid_toml_raises_parse_error() -> None:
    fs = InMemoryFileSystem()
    _write(fs, "schema_version = = 1")

    with pytest.raises(ConfigFileParseError):
        load_match_config_file(path=CONFIG_PATH, fs=fs)


@pytest.mark.parametrize(
    "content",
    [
        "schema_version = 2\n[scoring]\n",
        "schema_version = 1\n[scoring]\nunknown_key = 1\n",
        "schema_version = 1\n[scoring]\nai_max_tokens = 0\n",
        "schema_version = 1\n[scoring]\nai_timeout_seconds = -3\n",
        "schema_version = 1\n[scoring]\nlog_level = \"chatty\"\n",
        "schema_version = 1\n[scoring]\nstore_root = \"  \"\n",
        "schema_version = 1\n",
    ],
)
def test_invalid_values_raise_validation_error(content: str) -> None:
    fs = InMemoryFileSystem()
    _write(fs, content)

    with pytest.raises(ConfigFileValidationError):
        load_match_config_file(path=CONFIG_PATH, fs=fs)

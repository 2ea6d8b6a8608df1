"""Tests for CLI wiring, output, and error handling."""

import json
import re
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

import pytest
import typer
from typer.testing import CliRunner

from govcon_match import cli
from govcon_match.cli import CliDependencies
from govcon_match.config import MatchConfig
from govcon_match.domain.profiles import CompanyProfile, Opportunity
from govcon_match.infrastructure.io.validation import dump_as_json_dict
from tests.fakes import FakeCompletionClient, InMemoryFileSystem, InMemoryMatchScoreStore
from tests.support.builders import (
    TODAY,
    copy_reference_files,
    eight_a_certification,
    full_opportunity,
    full_profile,
)

runner = CliRunner()
_ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;]*m")

REF_DIR = Path("ref")
PROFILE_PATH = Path("in/profile.json")
OPPORTUNITY_PATH = Path("in/opportunity.json")
MATCH_ID = "match_opp-1_prof-1"

_INSIGHTS = json.dumps(
    {"technicalCapability": {"strengths": ["Exact NAICS match"], "weaknesses": []}}
)


def _strip_ansi(text: str) -> str:
    return _ANSI_ESCAPE_RE.sub("", text)


def _empty_configs() -> list[MatchConfig]:
    return []


@dataclass
class Harness:
    """Shared fake dependencies plus the configs the CLI built them with."""

    fs: InMemoryFileSystem
    store: InMemoryMatchScoreStore
    completion_client: FakeCompletionClient | None
    configs: list[MatchConfig] = field(default_factory=_empty_configs)

    def build(self, *, config: MatchConfig) -> CliDependencies:
        self.configs.append(config)
        return CliDependencies(
            fs=self.fs,
            store=self.store,
            completion_client=self.completion_client,
            today=lambda: TODAY,
        )

    def app(self) -> typer.Typer:
        return cli.create_app(self.build)

    def invoke(self, *args: str) -> tuple[int, str]:
        result = runner.invoke(self.app(), list(args))
        return result.exit_code, _strip_ansi(result.output)


@pytest.fixture
def harness(monkeypatch: pytest.MonkeyPatch) -> Harness:
    fs = InMemoryFileSystem()
    config = copy_reference_files(fs, REF_DIR)
    fs.write_json(dump_as_json_dict(CompanyProfile, full_profile()), PROFILE_PATH)
    fs.write_json(dump_as_json_dict(Opportunity, full_opportunity()), OPPORTUNITY_PATH)

    def fake_from_env(cls: type[MatchConfig], dotenv_path: str | None = None) -> MatchConfig:
        _ = (cls, dotenv_path)
        return config

    monkeypatch.setattr(MatchConfig, "from_env", classmethod(fake_from_env))
    return Harness(
        fs=fs,
        store=InMemoryMatchScoreStore(),
        completion_client=FakeCompletionClient(response=_INSIGHTS),
    )


def test_version_option_prints_package_version(
    harness: Harness, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(cli, "__version__", "9.9.9")

    exit_code, output = harness.invoke("--version")

    assert exit_code == 0
    assert "govcon-match 9.9.9" in output


def test_set_asides_lists_catalog(harness: Harness) -> None:
    exit_code, output = harness.invoke("set-asides")

    assert exit_code == 0
    for code in ("8AN", "HZC", "VSS"):
        assert code in output


def test_set_asides_filters_by_agency_and_type(harness: Harness) -> None:
    exit_code, output = harness.invoke("set-asides", "--agency", "va")

    assert exit_code == 0
    assert "VSA" in output
    assert "VSS" in output
    assert "HZC" not in output

    exit_code, output = harness.invoke("set-asides", "--general", "--type", "partial")

    assert exit_code == 0
    assert "SBP" in output
    assert "SBA" not in output


def test_set_asides_rejects_unknown_type(harness: Harness) -> None:
    exit_code, _ = harness.invoke("set-asides", "--type", "bogus")

    assert exit_code == 2


class TestProfileEligibility:
    def test_lists_qualifying_set_asides(self, harness: Harness) -> None:
        exit_code, output = harness.invoke("profile-eligibility", "-p", str(PROFILE_PATH))

        assert exit_code == 0
        assert "(8A)" in output
        assert "(8AN)" in output
        assert "2022-01-15" in output
        assert "expires" not in output

    def test_warns_about_expiring_certifications(self, harness: Harness) -> None:
        expiring = full_profile(
            certifications=(eight_a_certification(expiration_date=date(2026, 3, 1)),)
        )
        harness.fs.write_json(dump_as_json_dict(CompanyProfile, expiring), PROFILE_PATH)

        exit_code, output = harness.invoke("profile-eligibility", "-p", str(PROFILE_PATH))

        assert exit_code == 0
        assert "8(a) Business Development expires 2026-03-01" in output

    def test_expired_certifications_qualify_for_nothing(self, harness: Harness) -> None:
        expired = full_profile(
            certifications=(eight_a_certification(expiration_date=date(2026, 1, 1)),)
        )
        harness.fs.write_json(dump_as_json_dict(CompanyProfile, expired), PROFILE_PATH)

        exit_code, output = harness.invoke("profile-eligibility", "-p", str(PROFILE_PATH))

        assert exit_code == 0
        assert "No effective certifications qualify" in output


class TestEligibility:
    def test_partial_match(self, harness: Harness) -> None:
        exit_code, output = harness.invoke("eligibility", "--cert", "8a", "--set-aside", "SBA")

        assert exit_code == 0
        assert "match=True type=partial score=75" in output
        assert "8(a) Set-Aside (8A)" in output

    def test_manufacturing_sole_source_ceiling(self, harness: Harness) -> None:
        exit_code, output = harness.invoke(
            "eligibility", "-c", "8a", "-s", "8AN", "--manufacturing"
        )

        assert exit_code == 0
        assert "type=exact score=100" in output
        assert "Sole-source ceiling: $7,000,000" in output

    def test_open_market(self, harness: Harness) -> None:
        exit_code, output = harness.invoke("eligibility")

        assert exit_code == 0
        assert "open market: match=True type=none score=50" in output
        assert "No set-aside eligibility" in output


class TestScore:
    def test_scores_and_saves(self, harness: Harness) -> None:
        exit_code, output = harness.invoke(
            "score", "-p", str(PROFILE_PATH), "-o", str(OPPORTUNITY_PATH)
        )

        assert exit_code == 0
        assert f"{MATCH_ID}: 99/100" in output
        assert "Notify: yes" in output
        assert harness.store.scores[MATCH_ID].overall_score == 99

    def test_no_save_leaves_store_untouched(self, harness: Harness) -> None:
        exit_code, _ = harness.invoke(
            "score", "-p", str(PROFILE_PATH), "-o", str(OPPORTUNITY_PATH), "--no-save"
        )

        assert exit_code == 0
        assert harness.store.scores == {}

    def test_explain_attaches_insights(self, harness: Harness) -> None:
        exit_code, output = harness.invoke(
            "score", "-p", str(PROFILE_PATH), "-o", str(OPPORTUNITY_PATH), "--explain"
        )

        assert exit_code == 0
        assert "strength: Exact NAICS match" in output
        stored = harness.store.scores[MATCH_ID]
        assert stored.insights is not None
        assert stored.detailed_factors.technical_capability.insights is not None

    def test_explain_without_client_still_scores(self, harness: Harness) -> None:
        harness.completion_client = None

        exit_code, output = harness.invoke(
            "score", "-p", str(PROFILE_PATH), "-o", str(OPPORTUNITY_PATH), "--explain"
        )

        assert exit_code == 0
        assert "AI insights are not configured" in output
        assert f"{MATCH_ID}: 99/100" in output

    def test_explain_failure_still_scores(self, harness: Harness) -> None:
        harness.completion_client = FakeCompletionClient(response="not json")

        exit_code, output = harness.invoke(
            "score", "-p", str(PROFILE_PATH), "-o", str(OPPORTUNITY_PATH), "--explain"
        )

        assert exit_code == 0
        assert "AI insights unavailable" in output
        assert harness.store.scores[MATCH_ID].insights is None

    def test_missing_input_fails_cleanly(self, harness: Harness) -> None:
        exit_code, output = harness.invoke(
            "score", "-p", "in/missing.json", "-o", str(OPPORTUNITY_PATH)
        )

        assert exit_code == 1
        assert "Input file not found" in output

    def test_invalid_weights_fail_at_startup(self, harness: Harness) -> None:
        policy_path = REF_DIR / "scoring_policy.json"
        payload = json.loads(harness.fs.read_text(policy_path))
        payload["category_weights"]["credibility"] = 20
        harness.fs.write_text(json.dumps(payload), policy_path)

        exit_code, output = harness.invoke(
            "score", "-p", str(PROFILE_PATH), "-o", str(OPPORTUNITY_PATH)
        )

        assert exit_code == 1
        assert "weights must sum to 100" in output
        assert harness.store.scores == {}


def test_score_batch_writes_outputs(harness: Harness) -> None:
    opportunities_path = Path("in/opportunities.json")
    harness.fs.write_json_payload(
        {
            "opportunities": [
                dump_as_json_dict(Opportunity, full_opportunity()),
                {"opportunity_id": "opp-2"},
            ]
        },
        opportunities_path,
    )

    exit_code, output = harness.invoke(
        "score-batch", "-p", str(PROFILE_PATH), "-i", str(opportunities_path), "-d", "out"
    )

    assert exit_code == 0
    assert "Batch scoring complete" in output
    assert len(harness.fs.read_csv(Path("out/match_scores.csv"))) == 2
    assert len(harness.fs.read_csv(Path("out/match_shortlist.csv"))) == 1
    assert "set-asides: SBA 1 (100.0%)" in output


class TestRecordOutcome:
    def test_records_and_reports_calibration(self, harness: Harness) -> None:
        harness.invoke("score", "-p", str(PROFILE_PATH), "-o", str(OPPORTUNITY_PATH))

        exit_code, output = harness.invoke(
            "record-outcome", MATCH_ID, "--outcome", "Won", "--competitor-count", "3"
        )

        assert exit_code == 0
        assert f"Recorded won for {MATCH_ID}" in output
        assert "Prediction: win (correct)" in output
        assert harness.store.scores[MATCH_ID].actual_outcome == "won"

        exit_code, output = harness.invoke("calibration")

        assert exit_code == 0
        assert "Outcomes recorded: 1" in output
        assert "hit rate 100%" in output

        exit_code, output = harness.invoke("calibration", "--outcomes")

        assert exit_code == 0
        assert MATCH_ID in output
        assert "yes" in output

    def test_unknown_outcome_is_a_usage_error(self, harness: Harness) -> None:
        exit_code, _ = harness.invoke("record-outcome", MATCH_ID, "--outcome", "maybe")

        assert exit_code == 2

    def test_unknown_match_fails_cleanly(self, harness: Harness) -> None:
        exit_code, output = harness.invoke("record-outcome", "match_nope", "--outcome", "lost")

        assert exit_code == 1
        assert "Match score not found" in output


def test_config_file_overrides_env(harness: Harness) -> None:
    harness.fs.write_text(
        'schema_version = 1\n\n[scoring]\nstore_root = "elsewhere"\ninsights_enabled = false\n',
        Path("govcon.toml"),
    )

    exit_code, _ = harness.invoke("--config", "govcon.toml", "calibration")

    assert exit_code == 0
    assert harness.configs[-1].store_root == "elsewhere"
    assert harness.configs[-1].insights_enabled is False


def test_invalid_config_file_fails(harness: Harness) -> None:
    harness.fs.write_text("schema_version = 3\n[scoring]\n", Path("govcon.toml"))

    exit_code, output = harness.invoke("--config", "govcon.toml", "calibration")

    assert exit_code == 1
    assert "is invalid" in output

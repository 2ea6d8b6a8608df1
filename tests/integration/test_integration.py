"""End-to-end scoring against the shipped reference data and a real file store."""

from datetime import UTC, datetime
from pathlib import Path

from govcon_match.application.reference_data import load_reference_data
from govcon_match.application.scoring_service import MatchScoringService
from govcon_match.config import MatchConfig
from govcon_match.infrastructure import JsonMatchScoreStore, LocalFileSystem
from tests.support.builders import REFERENCE_DIR, TODAY, full_opportunity, full_profile


def test_score_persist_and_record_outcome(tmp_path: Path) -> None:
    fs = LocalFileSystem()
    config = MatchConfig(
        set_asides_path=str(REFERENCE_DIR / "set_asides.json"),
        naics_psc_defaults_path=str(REFERENCE_DIR / "naics_psc_defaults.json"),
        scoring_policy_path=str(REFERENCE_DIR / "scoring_policy.json"),
        store_root=str(tmp_path / "store"),
    )
    reference = load_reference_data(config=config, fs=fs)
    store = JsonMatchScoreStore(root=Path(config.store_root), fs=fs)
    service = MatchScoringService(
        reference=reference,
        store=store,
        today=lambda: TODAY,
        now=lambda: datetime(2026, 3, 1, tzinfo=UTC),
    )

    scored = service.score(full_profile(), full_opportunity())
    impact = service.record_outcome(scored.match_score_id, "lost", actual_value=2_900_000)

    reloaded = store.get(scored.match_score_id)
    assert reloaded is not None
    assert reloaded.overall_score == scored.overall_score == 99
    assert reloaded.actual_outcome == "lost"
    assert impact.was_correct_prediction is False
    assert impact.confidence_adjustment == -0.15
    assert [record.outcome for record in store.list_outcomes()] == ["lost"]
    assert store.load_calibration().accuracy_score == -0.01

    again = service.score(full_profile(), full_opportunity())
    assert again.actual_outcome == "lost"
    assert again.input_fingerprint == reloaded.input_fingerprint

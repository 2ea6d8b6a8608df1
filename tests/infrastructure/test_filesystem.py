"""Tests for filesystem infrastructure components."""

import json
from pathlib import Path

import pandas as pd
import pytest

from govcon_match.infrastructure import IncomingDataError, LocalFileSystem


class TestLocalFileSystem:
    def test_write_json_is_sorted_and_leaves_no_temp_file(self, tmp_path: Path) -> None:
        fs = LocalFileSystem()
        path = tmp_path / "nested" / "doc.json"

        fs.write_json({"b": 1, "a": "é"}, path)

        assert json.loads(path.read_text(encoding="utf-8")) == {"a": "é", "b": 1}
        assert path.read_text(encoding="utf-8").index('"a"') < path.read_text(
            encoding="utf-8"
        ).index('"b"')
        assert not path.with_suffix(".json.tmp").exists()
        assert fs.read_json(path) == {"a": "é", "b": 1}

    def test_read_json_rejects_non_objects(self, tmp_path: Path) -> None:
        path = tmp_path / "list.json"
        path.write_text("[1, 2]", encoding="utf-8")

        with pytest.raises(IncomingDataError, match="must contain a JSON object"):
            LocalFileSystem().read_json(path)

    def test_write_csv_creates_parent(self, tmp_path: Path) -> None:
        path = tmp_path / "out" / "scores.csv"

        LocalFileSystem().write_csv(pd.DataFrame({"opportunity_id": ["a", "b"]}), path)

        assert pd.read_csv(path)["opportunity_id"].tolist() == ["a", "b"]

    def test_list_files_on_missing_directory(self, tmp_path: Path) -> None:
        assert LocalFileSystem().list_files(tmp_path / "missing", "*.json") == []

    def test_list_files_matches_pattern(self, tmp_path: Path) -> None:
        fs = LocalFileSystem()
        fs.write_text("{}", tmp_path / "b.json")
        fs.write_text("{}", tmp_path / "a.json")
        fs.write_text("x", tmp_path / "c.txt")

        assert fs.list_files(tmp_path, "*.json") == [tmp_path / "a.json", tmp_path / "b.json"]

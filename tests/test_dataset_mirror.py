"""
Tests for the offline dataset mirror script.
"""
from unittest.mock import patch

import requests

import dataset_mirror


class TestMirror:

    @patch("dataset_mirror.fetch_text")
    def test_writes_every_catalog_file(self, mock_fetch, tmp_path):
        mock_fetch.return_value = "Author\nPlato\n"
        written, failed = dataset_mirror.mirror_all(tmp_path, base_url="https://example.org/data", pause=0)
        assert failed == []
        assert sorted(p.name for p in written) == sorted([
            "gpt3_philosophers.csv", "philosopherList.csv",
            "gpt3_general.csv", "generalList.csv",
            "gpt3_scientists.csv", "scientistList.csv",
        ])
        assert (tmp_path / "generalList.csv").read_text(encoding="utf-8") == "Author\nPlato\n"
        mock_fetch.assert_any_call("https://example.org/data/gpt3_general.csv")

    @patch("dataset_mirror.fetch_text")
    def test_failures_are_skipped(self, mock_fetch, tmp_path, capsys):
        def fetch(url):
            if url.endswith("scientistList.csv"):
                raise requests.ConnectionError("offline")
            return "x\n"
        mock_fetch.side_effect = fetch
        written, failed = dataset_mirror.mirror_all(tmp_path, pause=0)
        assert failed == ["scientistList.csv"]
        assert len(written) == 5
        assert "[WARN] Error mirroring scientistList.csv" in capsys.readouterr().out

"""
Tests for CSV fetching, dataset loading and the dataset cache.
"""
from unittest.mock import Mock, patch

import pytest
import requests

from refmap import config
from refmap.catalog import UnknownDatasetError, get_source
from refmap.loader import DatasetLoadError, DatasetStore, fetch_text, load_dataset

from conftest import LIST_CSV, MATRIX_CSV


def _fetch_from(files):
    def fetch(location):
        for name, text in files.items():
            if location.endswith(name):
                return text
        raise requests.HTTPError(f"404 for {location}")
    return fetch


class TestCatalog:

    def test_three_datasets(self):
        assert [get_source(k).label for k in ("philosophers", "general", "scientists")] == [
            "Philosophers", "General", "Scientists",
        ]

    def test_remote_locations(self):
        src = get_source("scientists")
        assert src.matrix_location(base_url="https://example.org/data/", data_dir="") == "https://example.org/data/gpt3_scientists.csv"
        assert src.list_location(base_url="https://example.org/data", data_dir="") == "https://example.org/data/scientistList.csv"

    def test_local_mirror_preferred(self, tmp_path):
        (tmp_path / "generalList.csv").write_text(LIST_CSV, encoding="utf-8")
        src = get_source("general")
        assert src.list_location(data_dir=str(tmp_path)) == str(tmp_path / "generalList.csv")
        assert src.matrix_location(data_dir=str(tmp_path)).startswith("http")

    def test_unknown(self):
        with pytest.raises(UnknownDatasetError):
            get_source("poets")


class TestFetchText:

    @patch("refmap.loader.requests.get")
    def test_fetches_url(self, mock_get):
        response = Mock(content="\ufeffAuthor\nPlato\n".encode("utf-8"))
        mock_get.return_value = response
        assert fetch_text("https://example.org/a.csv", timeout=3) == "Author\nPlato\n"
        response.raise_for_status.assert_called_once()
        assert mock_get.call_args.kwargs["timeout"] == 3

    @patch("refmap.loader.requests.get")
    def test_http_error_propagates(self, mock_get):
        mock_get.return_value.raise_for_status.side_effect = requests.HTTPError("404")
        with pytest.raises(requests.HTTPError):
            fetch_text("https://example.org/missing.csv")

    def test_reads_local_file(self, tmp_path):
        path = tmp_path / "m.csv"
        path.write_text(MATRIX_CSV, encoding="utf-8")
        assert fetch_text(str(path)) == MATRIX_CSV


class TestLoadDataset:

    def test_joins_both_files(self):
        fetch = _fetch_from({"gpt3_philosophers.csv": MATRIX_CSV, "philosopherList.csv": LIST_CSV})
        ds = load_dataset("philosophers", fetch=fetch)
        assert ds.key == "philosophers"
        assert ds.label == "Philosophers"
        assert ds.plottable_names() == ["Plato", "Socrates", "Aristotle", "Epictete"]

    def test_from_local_mirror(self, tmp_path, monkeypatch):
        (tmp_path / "gpt3_general.csv").write_text(MATRIX_CSV, encoding="utf-8")
        (tmp_path / "generalList.csv").write_text(LIST_CSV, encoding="utf-8")
        monkeypatch.setattr(config, "DATA_DIR", str(tmp_path))
        ds = load_dataset("general")
        assert ds.by_name["Epictete"].display_name == "Epictetus"

    def test_fetch_failure(self):
        fetch = _fetch_from({"gpt3_philosophers.csv": MATRIX_CSV})
        with pytest.raises(DatasetLoadError) as exc:
            load_dataset("philosophers", fetch=fetch)
        assert "philosopherList.csv" in str(exc.value)

    def test_parse_failure(self):
        fetch = _fetch_from({"gpt3_philosophers.csv": "", "philosopherList.csv": LIST_CSV})
        with pytest.raises(DatasetLoadError):
            load_dataset("philosophers", fetch=fetch)


class TestDatasetStore:

    def test_caches(self, dataset):
        loader = Mock(return_value=dataset)
        store = DatasetStore(loader=loader)
        assert store.get("philosophers") is store.get("philosophers")
        loader.assert_called_once_with("philosophers")

    def test_failures_logged_and_not_cached(self, dataset, caplog):
        loader = Mock(side_effect=[DatasetLoadError("philosophers: down"), dataset])
        store = DatasetStore(loader=loader)
        with pytest.raises(DatasetLoadError):
            store.get("philosophers")
        assert "Error loading the CSV files" in caplog.text
        assert store.get("philosophers") is dataset
        assert loader.call_count == 2

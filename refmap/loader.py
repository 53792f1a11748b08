"""
Dataset loading: fetch the matrix and entity list CSVs for a dataset key
(concurrently), parse and join them, and cache the result per process.
"""
import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, Optional

import requests

from . import config
from .catalog import get_source
from .dataset import Dataset, build_dataset
from .matrix import parse_entity_list_csv, parse_matrix_csv

logger = logging.getLogger(__name__)


class DatasetLoadError(Exception):
    """Fetching or parsing one of a dataset's CSV files failed."""


def _is_url(location: str) -> bool:
    return location.startswith("http://") or location.startswith("https://")


def fetch_text(location: str, timeout: Optional[float] = None) -> str:
    """Read a CSV from a URL or a local path; UTF-8 with optional BOM."""
    if _is_url(location):
        headers = {"User-Agent": config.USER_AGENT}
        response = requests.get(location, headers=headers, timeout=timeout or config.FETCH_TIMEOUT)
        response.raise_for_status()
        return response.content.decode("utf-8-sig")
    with open(os.path.expanduser(location), encoding="utf-8-sig") as f:
        return f.read()


def load_dataset(key: str, fetch: Callable[[str], str] = fetch_text) -> Dataset:
    """
    Fetch both CSVs of a dataset in parallel and build the joined Dataset.
    Raises DatasetLoadError for unreachable, undecodable or malformed files.
    """
    source = get_source(key)
    matrix_loc = source.matrix_location()
    list_loc = source.list_location()

    with ThreadPoolExecutor(max_workers=2) as pool:
        matrix_future = pool.submit(fetch, matrix_loc)
        list_future = pool.submit(fetch, list_loc)
        texts = {}
        for loc, fut in ((matrix_loc, matrix_future), (list_loc, list_future)):
            try:
                texts[loc] = fut.result()
            except (requests.RequestException, OSError, UnicodeDecodeError) as e:
                raise DatasetLoadError(f"{key}: could not fetch {loc}: {e}") from e

    try:
        matrix = parse_matrix_csv(texts[matrix_loc])
    except ValueError as e:
        raise DatasetLoadError(f"{key}: bad matrix CSV {matrix_loc}: {e}") from e
    try:
        metadata = parse_entity_list_csv(texts[list_loc])
    except ValueError as e:
        raise DatasetLoadError(f"{key}: bad entity list CSV {list_loc}: {e}") from e

    return build_dataset(source.key, source.label, matrix, metadata)


class DatasetStore:
    """
    Per-process cache of loaded datasets. Datasets are immutable once
    loaded, so they are shared across requests. Failures are not cached.
    """

    def __init__(self, loader: Callable[[str], Dataset] = load_dataset):
        self._loader = loader
        self._datasets: Dict[str, Dataset] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Dataset:
        with self._lock:
            ds = self._datasets.get(key)
        if ds is not None:
            return ds
        try:
            ds = self._loader(key)
        except DatasetLoadError as e:
            logger.error("Error loading the CSV files: %s", e)
            raise
        with self._lock:
            self._datasets.setdefault(key, ds)
            return self._datasets[key]

    __call__ = get

    def clear(self):
        with self._lock:
            self._datasets.clear()

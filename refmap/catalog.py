"""
The fixed set of datasets the viewer can switch between.
Each dataset is a reference-count matrix plus an entity list, both CSV.
"""
import os
from dataclasses import dataclass
from typing import Dict, List, Optional

from . import config


class UnknownDatasetError(KeyError):
    pass


@dataclass(frozen=True)
class DatasetSource:
    key: str
    label: str
    matrix_file: str
    list_file: str

    def location(self, filename: str, base_url: Optional[str] = None, data_dir: Optional[str] = None) -> str:
        """Local mirror path when the file exists there, else the remote URL."""
        data_dir = config.DATA_DIR if data_dir is None else data_dir
        if data_dir:
            path = os.path.join(data_dir, filename)
            if os.path.isfile(path):
                return path
        return f"{(base_url or config.DATA_BASE_URL).rstrip('/')}/{filename}"

    def matrix_location(self, **kw) -> str:
        return self.location(self.matrix_file, **kw)

    def list_location(self, **kw) -> str:
        return self.location(self.list_file, **kw)


SOURCES: List[DatasetSource] = [
    DatasetSource("philosophers", "Philosophers", "gpt3_philosophers.csv", "philosopherList.csv"),
    DatasetSource("general", "General", "gpt3_general.csv", "generalList.csv"),
    DatasetSource("scientists", "Scientists", "gpt3_scientists.csv", "scientistList.csv"),
]

_BY_KEY: Dict[str, DatasetSource] = {s.key: s for s in SOURCES}


def get_source(key: str) -> DatasetSource:
    try:
        return _BY_KEY[key]
    except KeyError:
        raise UnknownDatasetError(key) from None


def dataset_keys() -> List[str]:
    return [s.key for s in SOURCES]

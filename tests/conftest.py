"""
Shared fixtures: a five-person reference matrix and its entity list.

Row cites column. "Nobody" has no metadata (cites and is cited, never
plotted). Socrates -> Epictete is blank.
"""
import pytest

from refmap.catalog import get_source
from refmap.dataset import build_dataset
from refmap.loader import DatasetStore
from refmap.matrix import parse_entity_list_csv, parse_matrix_csv

MATRIX_CSV = """\
,Plato,Socrates,Aristotle,Épictète,Nobody
Plato,0,10,5,0,1
Socrates,3,0,0,,0
Aristotle,12,2,0,1,
Épictète,0,4,0,0,0
Nobody,2,0,0,0,0
"""

LIST_CSV = """\
Author,Display Name,Birth Year,Death Year
Plato,Plato,-428,-348
Socrates,Socrates,-470,-399
Aristotle,Aristotle,-384,-322
Épictète,Epictetus,,135
"""


@pytest.fixture
def matrix():
    return parse_matrix_csv(MATRIX_CSV)


@pytest.fixture
def metadata():
    return parse_entity_list_csv(LIST_CSV)


@pytest.fixture
def dataset(matrix, metadata):
    return build_dataset("philosophers", "Philosophers", matrix, metadata)


@pytest.fixture
def store(matrix, metadata):
    def loader(key):
        return build_dataset(key, get_source(key).label, matrix, metadata)
    return DatasetStore(loader=loader)


@pytest.fixture
def client(store):
    from app import create_app
    app = create_app(store)
    app.config["TESTING"] = True
    return app.test_client()

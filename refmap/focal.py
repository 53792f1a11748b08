"""
Focal point selection and entity search.
A focal point narrows the view to one entity plus its strongest citers
(incoming) and the entities it cites most (outgoing).
"""
from typing import Iterable, List, Optional, Set

from . import config
from .dataset import Dataset
from .matrix import ReferenceMatrix
from .metrics import Entity


def _ranked(pairs, n: int) -> List[str]:
    # count desc, then name asc, so ties resolve the same way on every run
    ranked = sorted((p for p in pairs if p[1] > 0), key=lambda p: (-p[1], p[0]))
    return [name for name, _ in ranked[:max(n, 0)]]


def top_incoming(matrix: ReferenceMatrix, focal: str, n: int, candidates: Optional[Iterable[str]] = None) -> List[str]:
    """Sources citing `focal` most often, excluding itself."""
    sources = matrix.row_names if candidates is None else candidates
    pairs = ((s, matrix.count(s, focal)) for s in sources if s != focal)
    return _ranked(pairs, n)


def top_outgoing(matrix: ReferenceMatrix, focal: str, n: int, candidates: Optional[Iterable[str]] = None) -> List[str]:
    """Targets `focal` cites most often, excluding itself."""
    row = matrix.row(focal)
    targets = row.keys() if candidates is None else candidates
    pairs = ((t, row.get(t, 0)) for t in targets if t != focal)
    return _ranked(pairs, n)


def focal_selection(dataset: Dataset, focal: str, incoming: int, outgoing: int) -> Set[str]:
    """
    The focal entity plus its top `incoming` citers and top `outgoing`
    citations. Only plottable entities are candidates, so the counts match
    what ends up on screen.
    """
    candidates = dataset.plottable_names()
    selected = {focal}
    selected.update(top_incoming(dataset.matrix, focal, incoming, candidates))
    selected.update(top_outgoing(dataset.matrix, focal, outgoing, candidates))
    return selected


def search_entities(dataset: Dataset, term: str, limit: int = config.SEARCH_LIMIT) -> List[Entity]:
    term = (term or "").strip().lower()
    if not term:
        return []
    matches = [e for e in dataset.plottable if term in e.name.lower()]
    return matches[:limit]

"""
Directed reference links between visible entities.
"""
from dataclasses import dataclass
from typing import Collection, Dict, List, Set, Tuple

from .matrix import ReferenceMatrix
from .metrics import Entity


@dataclass(frozen=True)
class Link:
    source: Entity
    target: Entity
    value: int
    curve_direction: int

    @property
    def id(self) -> str:
        return f"{self.source.name}->{self.target.name}"


def bidirectional_pairs(matrix: ReferenceMatrix, threshold: int) -> Set[Tuple[str, str]]:
    """
    Unordered pairs (sorted tuple) where both directions meet the threshold,
    checked across the whole matrix regardless of what is visible.
    """
    pairs = set()
    for source, row in matrix.rows.items():
        for target, value in row.items():
            if target == source or value < threshold:
                continue
            back = matrix.value(target, source)
            if back is not None and back >= threshold:
                pairs.add(tuple(sorted((source, target))))
    return pairs


def curve_direction(source: str, target: str, bidirectional: bool) -> int:
    """One curve bows up and its reverse bows down so the two stay apart."""
    if not bidirectional:
        return 1
    return 1 if source < target else -1


def compute_links(matrix: ReferenceMatrix, entities: Dict[str, Entity], active: Collection[str], threshold: int) -> List[Link]:
    """
    A link for every cell from an active source to a different active target
    whose count is at least `threshold`. Blank cells never link, even at a
    threshold of zero. `entities` supplies the (recomputed) endpoint values.
    """
    active = set(active)
    pairs = bidirectional_pairs(matrix, threshold)
    links = []
    for source, row in matrix.rows.items():
        if source not in active or source not in entities:
            continue
        for target, value in row.items():
            if target == source or target not in active or target not in entities:
                continue
            if value < threshold:
                continue
            bidi = tuple(sorted((source, target))) in pairs
            links.append(Link(
                source=entities[source],
                target=entities[target],
                value=value,
                curve_direction=curve_direction(source, target, bidi),
            ))
    return links

"""
Entity metrics: outgoing references (row sums) and incoming references
(column sums) of the reference matrix, optionally restricted to the set of
currently active entities.
"""
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional, Tuple

from .matrix import ReferenceMatrix


@dataclass(frozen=True)
class Entity:
    name: str
    display_name: str
    birth_year: Optional[float]
    outgoing_refs: int = 0
    incoming_refs: int = 0

    @property
    def plottable(self) -> bool:
        return self.birth_year is not None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "displayName": self.display_name,
            "birthYear": self.birth_year,
            "outgoingRefs": self.outgoing_refs,
            "incomingRefs": self.incoming_refs,
        }


def full_counts(matrix: ReferenceMatrix, name: str) -> Tuple[int, int]:
    """(outgoing, incoming) over the whole matrix."""
    return matrix.row_total(name), matrix.column_total(name)


def active_counts(matrix: ReferenceMatrix, names: Iterable[str], active: Iterable[str]) -> Dict[str, Tuple[int, int]]:
    """
    (outgoing, incoming) per name, counting only references to and from
    active entities. Sources without a matrix row contribute nothing.
    """
    active = [a for a in active if a]
    active_sources = [a for a in active if matrix.has_row(a)]
    out = {}
    for name in names:
        outgoing = matrix.row_total(name, among=active)
        incoming = sum(matrix.count(s, name) for s in active_sources)
        out[name] = (outgoing, incoming)
    return out


def with_active_counts(entities: List[Entity], matrix: ReferenceMatrix, active: Iterable[str]) -> List[Entity]:
    counts = active_counts(matrix, [e.name for e in entities], active)
    return [
        replace(e, outgoing_refs=counts[e.name][0], incoming_refs=counts[e.name][1])
        for e in entities
    ]

"""
A loaded dataset: the reference matrix joined with the entity list.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping

from .matrix import ReferenceMatrix
from .metrics import Entity, full_counts
from .normalization import parse_year

logger = logging.getLogger(__name__)

DEATH_TO_BIRTH_YEARS = 50


@dataclass
class Dataset:
    key: str
    label: str
    matrix: ReferenceMatrix
    entities: List[Entity]
    by_name: Dict[str, Entity] = field(default_factory=dict)

    def __post_init__(self):
        if not self.by_name:
            self.by_name = {e.name: e for e in self.entities}

    @property
    def plottable(self) -> List[Entity]:
        return [e for e in self.entities if e.plottable]

    def plottable_names(self) -> List[str]:
        return [e.name for e in self.entities if e.plottable]

    def is_plottable(self, name: str) -> bool:
        e = self.by_name.get(name)
        return e is not None and e.plottable


def birth_year_of(meta: Mapping[str, str]):
    """Birth Year, else Death Year minus 50, else None."""
    if not meta:
        return None
    birth = (meta.get("Birth Year") or "").strip()
    if birth:
        return parse_year(birth)
    death = (meta.get("Death Year") or "").strip()
    if death:
        year = parse_year(death)
        return None if year is None else year - DEATH_TO_BIRTH_YEARS
    return None


def build_dataset(key: str, label: str, matrix: ReferenceMatrix, metadata: Mapping[str, Mapping[str, str]]) -> Dataset:
    """
    Join metadata onto every name appearing on either matrix axis and order
    entities by total incoming references, highest first (stable).
    Names without metadata stay in the dataset (they still cite and are
    cited) but have no birth year, so they are never plotted.
    """
    entities = []
    missing = []
    for name in matrix.names():
        meta = metadata.get(name)
        if meta is None:
            missing.append(name)
        outgoing, incoming = full_counts(matrix, name)
        entities.append(Entity(
            name=name,
            display_name=((meta or {}).get("Display Name") or "").strip() or name,
            birth_year=birth_year_of(meta),
            outgoing_refs=outgoing,
            incoming_refs=incoming,
        ))
    if missing:
        logger.debug("%s: no metadata for %d names: %s", key, len(missing), ", ".join(missing))

    entities.sort(key=lambda e: -e.incoming_refs)
    ds = Dataset(key=key, label=label, matrix=matrix, entities=entities)
    logger.info(
        "Loaded dataset %s: %d entities, %d plottable, %d matrix rows",
        key, len(entities), len(ds.plottable), len(matrix),
    )
    return ds

"""
Reference matrix: square-ish table of reference counts, rows cite columns.
Parsed from CSV whose header row holds target names and whose first column
holds source names. Names on both axes go through normalize_name.
"""
import csv
import io
import logging
from typing import Dict, Iterable, List, Optional

from .normalization import normalize_header, normalize_name, parse_count

logger = logging.getLogger(__name__)


class ReferenceMatrix:
    """
    cells[source][target] -> int, or absent when the CSV cell is blank or
    not numeric. Missing cells count as zero in sums but never produce links.
    """

    def __init__(self, columns: List[str], rows: Dict[str, Dict[str, int]]):
        self.columns = list(columns)
        self.rows = rows
        self.row_names = list(rows.keys())

    def value(self, source: str, target: str) -> Optional[int]:
        row = self.rows.get(source)
        if row is None:
            return None
        return row.get(target)

    def count(self, source: str, target: str) -> int:
        return self.value(source, target) or 0

    def row(self, source: str) -> Dict[str, int]:
        return self.rows.get(source, {})

    def has_row(self, source: str) -> bool:
        return source in self.rows

    def names(self) -> List[str]:
        """Column names, then row names not already seen."""
        seen = set()
        out = []
        for name in self.columns + self.row_names:
            if name and name not in seen:
                seen.add(name)
                out.append(name)
        return out

    def row_total(self, source: str, among: Optional[Iterable[str]] = None) -> int:
        row = self.row(source)
        if among is None:
            return sum(v for v in row.values())
        return sum(row.get(t, 0) for t in among)

    def column_total(self, target: str, among: Optional[Iterable[str]] = None) -> int:
        sources = self.row_names if among is None else among
        return sum(self.count(s, target) for s in sources)

    def __len__(self):
        return len(self.rows)

    def __repr__(self):
        return f"ReferenceMatrix(rows={len(self.rows)}, columns={len(self.columns)})"


def parse_matrix_csv(text: str) -> ReferenceMatrix:
    """
    Parse the matrix CSV. The first header cell is usually blank; whatever it
    holds, the first column is taken as the source name.
    Rows whose names normalize to the same key are merged by summing cells.
    """
    reader = csv.reader(io.StringIO(text))
    try:
        header = next(reader)
    except StopIteration:
        raise ValueError("Matrix CSV is empty.")
    if len(header) < 2:
        raise ValueError("Matrix CSV has no target columns.")

    columns = [normalize_name(normalize_header(h)) for h in header[1:]]
    rows: Dict[str, Dict[str, int]] = {}
    for raw in reader:
        if not raw or not any(c.strip() for c in raw):
            continue
        source = normalize_name(raw[0])
        if not source:
            continue
        cells = {}
        for target, cell in zip(columns, raw[1:]):
            if not target:
                continue
            n = parse_count(cell)
            if n is not None:
                cells[target] = cells.get(target, 0) + n
        if source in rows:
            logger.warning("Duplicate matrix row after normalization: %s (merged)", source)
            merged = rows[source]
            for target, n in cells.items():
                merged[target] = merged.get(target, 0) + n
        else:
            rows[source] = cells
    return ReferenceMatrix(columns, rows)


def parse_entity_list_csv(text: str) -> Dict[str, Dict[str, str]]:
    """
    Parse the entity list (Author, Display Name, Birth Year, Death Year).
    Returns {normalized author: row}; the first row for a name wins.
    """
    reader = csv.DictReader(io.StringIO(text))
    if not reader.fieldnames:
        raise ValueError("Entity list CSV has no headers.")
    fieldnames = [normalize_header(h) for h in reader.fieldnames]
    if "Author" not in fieldnames:
        raise ValueError("Entity list CSV has no Author column.")

    out: Dict[str, Dict[str, str]] = {}
    for raw in reader:
        row = {normalize_header(k): (v or "").strip() for k, v in raw.items() if k is not None}
        key = normalize_name(row.get("Author", ""))
        if key and key not in out:
            out[key] = row
    return out

"""
Name and value normalization for the reference map.
Used to join matrix headers/rows to the entity list (normalize_name) and to
read the loosely formatted numeric cells of both CSVs.
"""
import re
import unicodedata
from typing import Optional

_DISALLOWED = re.compile(r"[^a-zA-Z\s,.]")
_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def normalize_name(name: str) -> str:
    """
    Produce the join key for an entity name.
    - Decomposes unicode and drops combining marks (accents)
    - Removes anything that is not a letter, whitespace, comma or period
    - Example: "Épictète" -> "Epictete", "Thomas Aquinas" -> "Thomas Aquinas"
    """
    if not name or not isinstance(name, str):
        return ""
    s = unicodedata.normalize("NFD", name)
    s = "".join(c for c in s if not unicodedata.combining(c))
    return _DISALLOWED.sub("", s)


def normalize_header(h: str) -> str:
    return (h or "").replace("\ufeff", "").strip()


def parse_count(value) -> Optional[int]:
    """Leading integer of a cell ("12", " 7 refs"), or None when there is none."""
    if value is None:
        return None
    if isinstance(value, int):
        return value
    m = _INT_PREFIX.match(str(value))
    if not m:
        return None
    return int(m.group(1))


def parse_year(value) -> Optional[float]:
    """Leading number of a year cell ("-427", "384 BC"), or None."""
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    m = _FLOAT_PREFIX.match(str(value))
    if not m:
        return None
    return float(m.group(1))

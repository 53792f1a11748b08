"""
View model for the scatter plot.
x = birth year, y = outgoing references among visible entities,
point area ~ incoming references among visible entities,
curved arrows for references at or above the threshold.
"""
import math
from typing import Any, Dict, List

from . import config
from .catalog import SOURCES
from .dataset import Dataset
from .links import compute_links
from .metrics import with_active_counts
from .scales import LinearScale, extent, natural_curve_path
from .state import AppState

FOCAL_COLOR = "#8A2BE2"

THEMES = {
    False: {
        "background": "white",
        "text": "black",
        "grid": "rgba(0,0,0,0.2)",
        "point": "steelblue",
        "focal": FOCAL_COLOR,
        "border": "#ccc",
        "hover": "#f0f0f0",
        "selected": "steelblue",
        "selected_text": "white",
    },
    True: {
        "background": "#1a1a1a",
        "text": "white",
        "grid": "rgba(255,255,255,0.2)",
        "point": "#6ca0dc",
        "focal": FOCAL_COLOR,
        "border": "#444",
        "hover": "#333",
        "selected": "steelblue",
        "selected_text": "white",
    },
}


def format_year(year: float) -> str:
    n = abs(year)
    n = int(n) if n == int(n) else n
    return f"{n} {'BCE' if year < 0 else 'CE'}"


def format_count(value: float) -> str:
    if value == int(value):
        return f"{int(value):,}"
    return f"{value:,}"


def radius_for(incoming: int) -> float:
    """Area-proportional: radius grows with the square root of the count."""
    return math.sqrt(max(incoming, 0)) * config.RADIUS_FACTOR


def build_scales(active_entities, fallback_entities):
    years = extent(e.birth_year for e in active_entities)
    if years is None:
        years = extent(e.birth_year for e in fallback_entities) or (0.0, 1.0)
    x = LinearScale(years, (0, config.INNER_WIDTH)).nice()
    top = max((e.outgoing_refs for e in active_entities), default=0)
    y = LinearScale((0, top or 1), (config.INNER_HEIGHT, 0)).nice()
    return x, y


def link_path(x, y, link) -> str:
    sx, sy = x(link.source.birth_year), y(link.source.outgoing_refs)
    tx, ty = x(link.target.birth_year), y(link.target.outgoing_refs)
    mid_x = (sx + tx) / 2
    mid_y = (sy + ty) / 2
    control_y = mid_y - abs(tx - sx) * config.CURVE_HEIGHT * link.curve_direction
    return natural_curve_path([(sx, sy), (mid_x, control_y), (tx, ty)])


def build_view(dataset: Dataset, state: AppState) -> Dict[str, Any]:
    plottable = dataset.plottable
    active = [n for n in dataset.plottable_names() if n in state.checked]
    active_set = set(active)

    entities = with_active_counts(plottable, dataset.matrix, active)
    by_name = {e.name: e for e in entities}
    visible = [e for e in entities if e.name in active_set]
    x, y = build_scales(visible, entities)

    points: List[Dict[str, Any]] = []
    for e in entities:
        px, py = x(e.birth_year), y(e.outgoing_refs)
        points.append({
            **e.to_dict(),
            "x": round(px, 2),
            "y": round(py, 2),
            "r": round(radius_for(e.incoming_refs), 2),
            "label_y": round(py - config.LABEL_OFFSET, 2),
            "visible": e.name in active_set,
            "focal": e.name == state.focal,
        })

    links = []
    for link in compute_links(dataset.matrix, by_name, active_set, state.threshold):
        links.append({
            "id": link.id,
            "source": link.source.name,
            "target": link.target.name,
            "source_display": link.source.display_name,
            "target_display": link.target.display_name,
            "value": link.value,
            "curve_direction": link.curve_direction,
            "d": link_path(x, y, link),
        })

    x_ticks = x.ticks()
    y_ticks = y.ticks()
    focal = dataset.by_name.get(state.focal) if state.focal else None

    return {
        "dataset": dataset.key,
        "width": config.WIDTH,
        "height": config.HEIGHT,
        "margin": config.MARGIN,
        "inner_width": config.INNER_WIDTH,
        "inner_height": config.INNER_HEIGHT,
        "transition_ms": config.TRANSITION_MS,
        "dot_radius": config.DOT_RADIUS,
        "theme": THEMES[bool(state.dark_mode)],
        "x_axis": {
            "title": "Birth Year",
            "domain": x.domain,
            "ticks": [{"value": t, "pos": round(x(t), 2), "label": format_year(t)} for t in x_ticks],
        },
        "y_axis": {
            "title": "Total Outgoing References",
            "domain": y.domain,
            "ticks": [{"value": t, "pos": round(y(t), 2), "label": format_count(t)} for t in y_ticks],
        },
        "points": points,
        "links": links,
        "controls": {
            "datasets": [
                {"value": s.key, "text": s.label, "selected": s.key == dataset.key}
                for s in SOURCES
            ],
            "threshold": {"value": state.threshold, "min": config.THRESHOLD_MIN, "max": config.THRESHOLD_MAX},
            "incoming": {"value": state.incoming_count, "min": config.NEIGHBOR_MIN, "max": config.NEIGHBOR_MAX},
            "outgoing": {"value": state.outgoing_count, "min": config.NEIGHBOR_MIN, "max": config.NEIGHBOR_MAX},
            "focal": {"name": focal.name, "displayName": focal.display_name} if focal else None,
            "entities": [
                {"name": e.name, "displayName": e.display_name, "checked": e.name in active_set}
                for e in plottable
            ],
            "show_entity_list": state.show_entity_list,
        },
    }

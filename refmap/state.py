"""
Application state and the reducer that applies control actions to it.

The page never mutates anything on the server: it sends its current state
plus one action, and gets back the next state and the view to draw.
  state + action -> reduce() -> new state -> build_view()
"""
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, FrozenSet, Optional, Union

from . import config
from .catalog import dataset_keys
from .dataset import Dataset
from .focal import focal_selection


class InvalidActionError(ValueError):
    pass


def _clamp(value, lo: int, hi: int, default: int) -> int:
    try:
        n = int(value)
    except (TypeError, ValueError):
        return default
    return max(lo, min(hi, n))


@dataclass(frozen=True)
class AppState:
    dataset: str = config.DEFAULT_DATASET
    dark_mode: bool = False
    threshold: int = config.THRESHOLD_DEFAULT
    focal: Optional[str] = None
    incoming_count: int = 0
    outgoing_count: int = 0
    checked: FrozenSet[str] = field(default_factory=frozenset)
    show_entity_list: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dataset": self.dataset,
            "dark_mode": self.dark_mode,
            "threshold": self.threshold,
            "focal": self.focal,
            "incoming_count": self.incoming_count,
            "outgoing_count": self.outgoing_count,
            "checked": sorted(self.checked),
            "show_entity_list": self.show_entity_list,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], dataset: Optional[Dataset] = None) -> "AppState":
        """
        Rebuild a state sent back by the page. Numeric fields are clamped to
        their slider ranges; with a dataset, names it cannot plot are dropped.
        """
        if not isinstance(data, dict):
            raise InvalidActionError("state must be an object")
        key = data.get("dataset") or config.DEFAULT_DATASET
        if key not in dataset_keys():
            raise InvalidActionError(f"unknown dataset: {key}")
        checked = data.get("checked") or []
        if not isinstance(checked, (list, tuple)):
            raise InvalidActionError("checked must be a list of names")
        checked = frozenset(str(n) for n in checked)
        focal = data.get("focal") or None
        if focal is not None and not isinstance(focal, str):
            raise InvalidActionError("focal must be a name")
        if dataset is not None and dataset.key == key:
            checked = frozenset(n for n in checked if dataset.is_plottable(n))
            if focal is not None and not dataset.is_plottable(focal):
                focal = None
        return cls(
            dataset=key,
            dark_mode=bool(data.get("dark_mode", False)),
            threshold=_clamp(data.get("threshold"), config.THRESHOLD_MIN, config.THRESHOLD_MAX, config.THRESHOLD_DEFAULT),
            focal=focal,
            incoming_count=_clamp(data.get("incoming_count"), config.NEIGHBOR_MIN, config.NEIGHBOR_MAX, 0),
            outgoing_count=_clamp(data.get("outgoing_count"), config.NEIGHBOR_MIN, config.NEIGHBOR_MAX, 0),
            checked=checked,
            show_entity_list=bool(data.get("show_entity_list", True)),
        )


def initial_state(dataset: Dataset, dark_mode: bool = False) -> AppState:
    """Fresh view of a dataset: the most-cited entities are checked."""
    top = [e.name for e in dataset.entities[:config.INITIAL_SELECTION]]
    return AppState(
        dataset=dataset.key,
        dark_mode=dark_mode,
        checked=frozenset(n for n in top if dataset.is_plottable(n)),
    )


# -----------------------------
# Actions
# -----------------------------
@dataclass(frozen=True)
class SelectDataset:
    dataset: str


@dataclass(frozen=True)
class SetDarkMode:
    enabled: bool


@dataclass(frozen=True)
class SetThreshold:
    value: int


@dataclass(frozen=True)
class ToggleEntity:
    name: str
    checked: bool


@dataclass(frozen=True)
class HideEntity:
    name: str


@dataclass(frozen=True)
class SetFocal:
    name: Optional[str]


@dataclass(frozen=True)
class SetIncomingCount:
    value: int


@dataclass(frozen=True)
class SetOutgoingCount:
    value: int


@dataclass(frozen=True)
class ToggleEntityList:
    pass


@dataclass(frozen=True)
class Refresh:
    pass


Action = Union[
    SelectDataset, SetDarkMode, SetThreshold, ToggleEntity, HideEntity,
    SetFocal, SetIncomingCount, SetOutgoingCount, ToggleEntityList, Refresh,
]


def _require(payload: Dict[str, Any], key: str):
    if key not in payload:
        raise InvalidActionError(f"{payload.get('type')} action needs '{key}'")
    return payload[key]


def _int(payload: Dict[str, Any], key: str) -> int:
    value = _require(payload, key)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidActionError(f"'{key}' must be an integer") from None


def parse_action(payload: Optional[Dict[str, Any]]) -> Action:
    """Action record from its JSON form, e.g. {"type": "set_threshold", "value": 7}."""
    if payload is None:
        return Refresh()
    if not isinstance(payload, dict):
        raise InvalidActionError("action must be an object")
    kind = payload.get("type")
    if kind == "select_dataset":
        return SelectDataset(str(_require(payload, "dataset")))
    if kind == "set_dark_mode":
        return SetDarkMode(bool(_require(payload, "enabled")))
    if kind == "set_threshold":
        return SetThreshold(_int(payload, "value"))
    if kind == "toggle_entity":
        return ToggleEntity(str(_require(payload, "name")), bool(_require(payload, "checked")))
    if kind == "hide_entity":
        return HideEntity(str(_require(payload, "name")))
    if kind == "set_focal":
        name = payload.get("name")
        return SetFocal(str(name) if name else None)
    if kind == "set_incoming_count":
        return SetIncomingCount(_int(payload, "value"))
    if kind == "set_outgoing_count":
        return SetOutgoingCount(_int(payload, "value"))
    if kind == "toggle_entity_list":
        return ToggleEntityList()
    if kind in (None, "refresh"):
        return Refresh()
    raise InvalidActionError(f"unknown action type: {kind}")


# -----------------------------
# Reducer
# -----------------------------
def _apply_focal(state: AppState, dataset: Dataset) -> AppState:
    if state.focal is None:
        return state
    selected = focal_selection(dataset, state.focal, state.incoming_count, state.outgoing_count)
    return replace(state, checked=frozenset(selected))


def reduce(state: AppState, action: Action, lookup: Callable[[str], Dataset]) -> AppState:
    """
    Next state for an action. `lookup` returns the loaded dataset for a key
    and may raise DatasetLoadError; in that case no state change happens.
    """
    if isinstance(action, SelectDataset):
        if action.dataset not in dataset_keys():
            raise InvalidActionError(f"unknown dataset: {action.dataset}")
        if action.dataset == state.dataset:
            return state
        new = initial_state(lookup(action.dataset), dark_mode=state.dark_mode)
        return replace(new, show_entity_list=state.show_entity_list)

    if isinstance(action, SetDarkMode):
        return replace(state, dark_mode=action.enabled)

    if isinstance(action, SetThreshold):
        value = _clamp(action.value, config.THRESHOLD_MIN, config.THRESHOLD_MAX, config.THRESHOLD_DEFAULT)
        return replace(state, threshold=value)

    if isinstance(action, ToggleEntityList):
        return replace(state, show_entity_list=not state.show_entity_list)

    if isinstance(action, Refresh):
        return state

    dataset = lookup(state.dataset)

    if isinstance(action, ToggleEntity):
        if not dataset.is_plottable(action.name):
            raise InvalidActionError(f"unknown entity: {action.name}")
        checked = set(state.checked)
        if action.checked:
            checked.add(action.name)
        else:
            checked.discard(action.name)
        return replace(state, checked=frozenset(checked))

    if isinstance(action, HideEntity):
        return replace(state, checked=state.checked - {action.name})

    if isinstance(action, SetFocal):
        if action.name is None:
            return replace(state, focal=None)
        if not dataset.is_plottable(action.name):
            raise InvalidActionError(f"unknown entity: {action.name}")
        return _apply_focal(replace(state, focal=action.name), dataset)

    if isinstance(action, SetIncomingCount):
        value = _clamp(action.value, config.NEIGHBOR_MIN, config.NEIGHBOR_MAX, 0)
        return _apply_focal(replace(state, incoming_count=value), dataset)

    if isinstance(action, SetOutgoingCount):
        value = _clamp(action.value, config.NEIGHBOR_MIN, config.NEIGHBOR_MAX, 0)
        return _apply_focal(replace(state, outgoing_count=value), dataset)

    raise InvalidActionError(f"unhandled action: {action!r}")

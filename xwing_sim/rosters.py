"""Roster definitions: which ships each side brings to a match.

Built-in rosters live as YAML files under ``xwing_sim/data/rosters``.  Any
other YAML or JSON file with the same shape can be loaded by path::

    name: my_list
    labels: {side_a: Rebels, side_b: Empire}
    side_a:
      - {name: Luke Skywalker, skill: 8, attack: 3, defense: 2, hull: 3, shields: 2}
    side_b:
      - {name: Academy Pilot, skill: 1, attack: 2, defense: 3, hull: 3, count: 2}
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import json
import os
import threading

import yaml

from .errors import RosterError
from .ships import Faction, Ship, ShipTemplate

PathLike = Union[str, Path]

ROSTER_DIR = os.path.join(os.path.dirname(__file__), "data", "rosters")

DEFAULT_LABELS = {Faction.SIDE_A: "Side A", Faction.SIDE_B: "Side B", Faction.NEUTRAL: "Neither"}


@dataclass(frozen=True)
class Roster:
    name: str
    side_a: List[ShipTemplate]
    side_b: List[ShipTemplate]
    description: str = ""
    labels: Dict[Faction, str] = field(default_factory=lambda: dict(DEFAULT_LABELS))

    def label(self, faction: Faction) -> str:
        return self.labels.get(faction, DEFAULT_LABELS[faction])

    def templates(self) -> List[ShipTemplate]:
        return list(self.side_a) + list(self.side_b)

    def build_ships(self) -> List[Ship]:
        """Fresh ship state for one trial; ``ship_id`` is the arena index."""
        return [template.build(i) for i, template in enumerate(self.templates())]

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: str = "<dict>") -> "Roster":
        if not isinstance(data, dict):
            raise RosterError(f"{source}: roster must be a mapping")
        side_a = _templates(data.get("side_a"), Faction.SIDE_A, source)
        side_b = _templates(data.get("side_b"), Faction.SIDE_B, source)
        if not side_a or not side_b:
            raise RosterError(f"{source}: both side_a and side_b need at least one ship")
        labels = dict(DEFAULT_LABELS)
        for key, value in (data.get("labels") or {}).items():
            try:
                labels[Faction(key)] = str(value)
            except ValueError as exc:
                raise RosterError(f"{source}: unknown faction label '{key}'") from exc
        return cls(
            name=str(data.get("name", Path(source).stem)),
            description=str(data.get("description", "")),
            side_a=side_a,
            side_b=side_b,
            labels=labels,
        )


def _templates(entries: Any, faction: Faction, source: str) -> List[ShipTemplate]:
    if entries is None:
        return []
    if not isinstance(entries, list):
        raise RosterError(f"{source}: {faction.value} must be a list of ships")
    out: List[ShipTemplate] = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise RosterError(f"{source}: ship entry {entry!r} must be a mapping")
        try:
            count = int(entry.get("count", 1))
        except (TypeError, ValueError) as exc:
            raise RosterError(f"{source}: {entry.get('name', '?')} count is not a number") from exc
        if count < 1:
            raise RosterError(f"{source}: {entry.get('name', '?')} count must be at least 1")
        template = ShipTemplate.from_dict(entry, faction)
        out.extend([template] * count)
    return out


def load_roster(path: PathLike) -> Roster:
    """Load a roster from a YAML or JSON file."""

    candidate = Path(path)
    if not candidate.exists():
        raise RosterError(f"Roster file not found: {path}")
    with candidate.open("r", encoding="utf-8") as handle:
        text = handle.read()
    try:
        if candidate.suffix.lower() == ".json":
            payload = json.loads(text)
        else:
            payload = yaml.safe_load(text)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise RosterError(f"{path}: could not parse roster: {exc}") from exc
    return Roster.from_dict(payload, source=str(candidate))


class RosterRegistry:
    """Loads the built-in roster files on demand."""

    def __init__(self, path: Optional[str] = None) -> None:
        self._path = path or ROSTER_DIR
        self._data: Dict[str, Roster] = {}
        self._loaded = False
        self._lock = threading.Lock()

    def load(self) -> None:
        with self._lock:
            if self._loaded:
                return
            data: Dict[str, Roster] = {}
            for entry in sorted(Path(self._path).glob("*.y*ml")):
                roster = load_roster(entry)
                data[roster.name] = roster
            self._data = data
            self._loaded = True

    def get(self, name: str) -> Roster:
        self.load()
        try:
            return self._data[name]
        except KeyError as exc:
            available = ", ".join(sorted(self._data))
            raise KeyError(f"Unknown roster '{name}'. Available: {available}") from exc

    def all_rosters(self) -> Dict[str, Roster]:
        self.load()
        return dict(self._data)


_registry: Optional[RosterRegistry] = None
_registry_lock = threading.Lock()


def get_registry(path: Optional[str] = None) -> RosterRegistry:
    global _registry
    with _registry_lock:
        if _registry is None or path is not None:
            _registry = RosterRegistry(path=path)
        return _registry


def get_roster(name_or_path: str) -> Roster:
    """Resolve a built-in roster name, falling back to a file path."""

    registry = get_registry()
    if name_or_path in registry.all_rosters():
        return registry.get(name_or_path)
    if os.path.exists(name_or_path):
        return load_roster(name_or_path)
    return registry.get(name_or_path)


def default_roster() -> Roster:
    return get_registry().get("default")


def duel_roster() -> Roster:
    return get_registry().get("duel")


__all__ = [
    "DEFAULT_LABELS",
    "ROSTER_DIR",
    "Roster",
    "RosterRegistry",
    "default_roster",
    "duel_roster",
    "get_registry",
    "get_roster",
    "load_roster",
]

"""Ships, roster templates and squadrons."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional

from .errors import RosterError, TokenError


class Faction(str, Enum):
    NEUTRAL = "neutral"
    SIDE_A = "side_a"
    SIDE_B = "side_b"

    def opponent(self) -> "Faction":
        if self is Faction.SIDE_A:
            return Faction.SIDE_B
        if self is Faction.SIDE_B:
            return Faction.SIDE_A
        return Faction.NEUTRAL


@dataclass(frozen=True)
class ShipTemplate:
    """Roster entry: the starting stats a fresh :class:`Ship` is built from."""

    name: str
    faction: Faction
    skill: int
    attack: int
    defense: int
    hull: int
    shields: int = 0
    grants_squad_reroll: bool = False
    receives_squad_reroll: bool = True

    def __post_init__(self) -> None:
        if self.faction is Faction.NEUTRAL:
            raise RosterError(f"{self.name}: ships must belong to side_a or side_b")
        if self.attack < 0 or self.defense < 0:
            raise RosterError(f"{self.name}: dice counts must be non-negative")
        if self.hull < 1:
            raise RosterError(f"{self.name}: hull must be at least 1")
        if self.shields < 0:
            raise RosterError(f"{self.name}: shields must be non-negative")

    @classmethod
    def from_dict(cls, data: Dict[str, Any], faction: Faction) -> "ShipTemplate":
        try:
            return cls(
                name=str(data["name"]),
                faction=faction,
                skill=int(data["skill"]),
                attack=int(data.get("attack", 0)),
                defense=int(data.get("defense", 0)),
                hull=int(data["hull"]),
                shields=int(data.get("shields", 0)),
                grants_squad_reroll=bool(data.get("grants_squad_reroll", False)),
                receives_squad_reroll=bool(data.get("receives_squad_reroll", True)),
            )
        except RosterError:
            raise
        except KeyError as exc:
            raise RosterError(f"ship entry {data!r} is missing {exc.args[0]!r}") from exc
        except (TypeError, ValueError) as exc:
            raise RosterError(f"ship entry {data!r} is invalid: {exc}") from exc

    def build(self, ship_id: int) -> "Ship":
        return Ship(
            ship_id=ship_id,
            name=self.name,
            faction=self.faction,
            skill=self.skill,
            attack=self.attack,
            defense=self.defense,
            hull=self.hull,
            shields=self.shields,
            grants_squad_reroll=self.grants_squad_reroll,
            receives_squad_reroll=self.receives_squad_reroll,
        )


@dataclass
class Ship:
    """Runtime state of one ship inside a single trial."""

    ship_id: int
    name: str
    faction: Faction
    skill: int
    attack: int
    defense: int
    hull: int
    shields: int = 0
    focus_tokens: int = 0
    evade_tokens: int = 0
    # ship_id of the locked target, an index into the trial's ship arena
    locked_onto: Optional[int] = None
    engaged_id: Optional[int] = None
    has_squad_reroll: bool = False
    grants_squad_reroll: bool = False
    receives_squad_reroll: bool = True
    destroyed: bool = False

    def __str__(self) -> str:
        return (
            f"<Ship {self.name} skill={self.skill} attack={self.attack} "
            f"defense={self.defense} hull={self.hull} shields={self.shields}>"
        )

    def alive(self) -> bool:
        return not self.destroyed

    # ----- Actions -----

    def focus(self) -> "Ship":
        self.focus_tokens += 1
        return self

    def evade(self) -> "Ship":
        self.evade_tokens += 1
        return self

    def acquire_target_lock(self, ship_id: int) -> "Ship":
        self.locked_onto = ship_id
        return self

    def spend_target_lock(self) -> "Ship":
        self.locked_onto = None
        return self

    def spend_focus_token(self) -> "Ship":
        if self.focus_tokens < 1:
            raise TokenError(f"{self.name} has no focus token to spend")
        self.focus_tokens -= 1
        return self

    def spend_evade_token(self) -> "Ship":
        if self.evade_tokens < 1:
            raise TokenError(f"{self.name} has no evade token to spend")
        self.evade_tokens -= 1
        return self

    def clean_up(self) -> "Ship":
        """End of round: unspent focus and evade tokens are discarded."""
        self.focus_tokens = 0
        self.evade_tokens = 0
        return self


class Squadron:
    """Ships of one faction in descending skill order.

    The sort is stable, so ships sharing a skill keep their roster order.
    """

    def __init__(self, faction: Faction, ships: Iterable[Ship]):
        self.faction = faction
        self.ships: List[Ship] = sorted(ships, key=lambda s: s.skill, reverse=True)
        for ship in self.ships:
            if ship.faction is not faction:
                raise RosterError(f"{ship.name} does not belong to {faction.value}")

    def __iter__(self) -> Iterator[Ship]:
        return iter(self.ships)

    def __len__(self) -> int:
        return len(self.ships)

    def survivors(self) -> int:
        return sum(1 for s in self.ships if s.alive())

    def first_alive(self) -> Optional[Ship]:
        for ship in self.ships:
            if ship.alive():
                return ship
        return None

    def living_at(self, skill: int) -> List[Ship]:
        return [s for s in self.ships if s.alive() and s.skill == skill]

    def granter_alive(self) -> bool:
        return any(s.grants_squad_reroll and s.alive() for s in self.ships)


__all__ = ["Faction", "Ship", "ShipTemplate", "Squadron"]

"""Round-by-round match engine.

A match is a sequence of combat rounds.  Within a round ships activate by
descending pilot skill; at each skill step every living side A ship fires,
then every living side B ship.  Ships of one skill step are gathered before
anyone fires, so a ship destroyed by an equal-skill enemy still gets its
shot.  Focus and evade tokens are discarded at the end of every round while
damage and destruction persist.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional
import logging
import random

from ..actions import ActionHook, focus_action
from ..rosters import Roster
from ..ships import Faction, Ship, Squadron
from .combat import resolve_attack

_log = logging.getLogger("xwing_sim.match")

DEFAULT_ROUND_CAP = 1000


@dataclass(frozen=True)
class MatchResult:
    """Terminal outcome of one match; ``Faction.NEUTRAL`` marks a draw."""

    winner: Faction
    ships_remaining: int = 0
    rounds: int = 0
    capped: bool = False

    def is_draw(self) -> bool:
        return self.winner is Faction.NEUTRAL

    def describe(self, labels: Optional[Dict[Faction, str]] = None) -> str:
        if self.is_draw():
            return "draw"
        name = (labels or {}).get(self.winner, self.winner.value)
        return f"{name} with {self.ships_remaining} ships remaining"

    def __str__(self) -> str:
        return self.describe()


@dataclass
class TrialContext:
    """Everything one trial owns: its generator and its ship arena.

    ``ships`` is indexed by ``ship_id``; target locks refer to ships through
    that index, never by object.
    """

    rng: random.Random
    ships: List[Ship]
    side_a: Squadron
    side_b: Squadron
    seed: Optional[int] = None
    rounds: int = 0

    @classmethod
    def from_ships(cls, ships: List[Ship], seed: Optional[int] = None) -> "TrialContext":
        for index, ship in enumerate(ships):
            if ship.ship_id != index:
                raise ValueError(f"{ship.name} has ship_id {ship.ship_id}, expected {index}")
        return cls(
            rng=random.Random(seed),
            ships=ships,
            side_a=Squadron(Faction.SIDE_A, [s for s in ships if s.faction is Faction.SIDE_A]),
            side_b=Squadron(Faction.SIDE_B, [s for s in ships if s.faction is Faction.SIDE_B]),
            seed=seed,
        )

    @classmethod
    def from_roster(cls, roster: Roster, seed: Optional[int] = None) -> "TrialContext":
        return cls.from_ships(roster.build_ships(), seed=seed)

    def squadron(self, faction: Faction) -> Squadron:
        if faction is Faction.SIDE_A:
            return self.side_a
        if faction is Faction.SIDE_B:
            return self.side_b
        raise ValueError(f"no squadron for {faction.value}")

    def skill_levels(self) -> List[int]:
        """Distinct skill values present, highest first."""
        return sorted({s.skill for s in self.ships}, reverse=True)


def refresh_squad_rerolls(squadron: Squadron) -> bool:
    """Re-derive the squad reroll bonus from whether a granter still lives."""

    available = squadron.granter_alive()
    for ship in squadron:
        if ship.alive() and not ship.grants_squad_reroll:
            ship.has_squad_reroll = available and ship.receives_squad_reroll
    return available


def match_result(ctx: TrialContext) -> Optional[MatchResult]:
    """None while both sides have survivors, otherwise the terminal result."""

    a_left = ctx.side_a.survivors()
    b_left = ctx.side_b.survivors()
    if a_left > 0 and b_left > 0:
        return None
    if a_left > 0:
        return MatchResult(winner=Faction.SIDE_A, ships_remaining=a_left, rounds=ctx.rounds)
    if b_left > 0:
        return MatchResult(winner=Faction.SIDE_B, ships_remaining=b_left, rounds=ctx.rounds)
    return MatchResult(winner=Faction.NEUTRAL, ships_remaining=0, rounds=ctx.rounds)


def run_round(ctx: TrialContext, action: ActionHook = focus_action) -> Optional[MatchResult]:
    """Play one combat round; returns a result only if the match is over."""

    ctx.rounds += 1
    _log.debug("=== New Combat Round (%d) ===", ctx.rounds)

    for skill in ctx.skill_levels():
        refresh_squad_rerolls(ctx.side_a)
        refresh_squad_rerolls(ctx.side_b)

        combatants = ctx.side_a.living_at(skill) + ctx.side_b.living_at(skill)
        for ship in combatants:
            enemy = ctx.squadron(ship.faction.opponent())
            # Shoot at the highest-skill survivor on the other side.
            target = enemy.first_alive()
            ship.engaged_id = target.ship_id if target is not None else None
            action(ship)
            # No break when targets run out: both sides can still trade to a draw.
            if target is not None:
                resolve_attack(ship, target, ctx.rng, return_fire=True)

    for ship in ctx.ships:
        ship.clean_up()
        ship.engaged_id = None
    return match_result(ctx)


def play_match(
    ctx: TrialContext,
    action: ActionHook = focus_action,
    round_cap: Optional[int] = DEFAULT_ROUND_CAP,
) -> MatchResult:
    """Run rounds until one side (or both) is wiped out.

    ``round_cap`` bounds pathological matches where nobody can score damage:
    reaching it ends the match as a draw with ``capped=True``.  ``None``
    disables the cap.
    """

    while True:
        result = run_round(ctx, action)
        if result is not None:
            _log.debug("Match over after %d rounds: %s", ctx.rounds, result)
            return result
        if round_cap is not None and ctx.rounds >= round_cap:
            _log.warning(
                "Match (seed=%s) hit the %d round cap, scoring it as a draw",
                ctx.seed,
                round_cap,
            )
            return MatchResult(
                winner=Faction.NEUTRAL, ships_remaining=0, rounds=ctx.rounds, capped=True
            )


__all__ = [
    "DEFAULT_ROUND_CAP",
    "MatchResult",
    "TrialContext",
    "match_result",
    "play_match",
    "refresh_squad_rerolls",
    "run_round",
]

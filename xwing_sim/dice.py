"""Dice model for X-Wing style combat.

Attack and defense dice are eight sided.  Faces map onto results with fixed
weights: attack dice are 2 blank / 2 focus / 3 hit / 1 crit and defense dice
are 3 blank / 2 focus / 3 evade.  A :class:`DiceTally` holds the counts for a
rolled pool and supports the rerolls and token spends used during combat.

Every function takes the random generator explicitly so concurrent trials can
each own an independent ``random.Random``.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable
import random

from .errors import CombatContractError


class DieResult(str, Enum):
    BLANK = "blank"
    FOCUS = "focus"
    HIT = "hit"
    CRIT = "crit"
    EVADE = "evade"


DieFn = Callable[[random.Random], DieResult]

DIE_FACES = 8


def attack_die(rng: random.Random) -> DieResult:
    face = rng.randrange(DIE_FACES)
    if face < 2:
        return DieResult.BLANK
    if face < 4:
        return DieResult.FOCUS
    if face < 7:
        return DieResult.HIT
    return DieResult.CRIT


def defense_die(rng: random.Random) -> DieResult:
    face = rng.randrange(DIE_FACES)
    if face < 3:
        return DieResult.BLANK
    if face < 5:
        return DieResult.FOCUS
    return DieResult.EVADE


@dataclass
class DiceTally:
    """Counts of each result in a rolled pool."""

    hits: int = 0
    crits: int = 0
    evades: int = 0
    focuses: int = 0
    blanks: int = 0

    def __str__(self) -> str:
        return (
            f"<DiceTally {self.hits} hits, {self.crits} crits, {self.evades} evades, "
            f"{self.focuses} focuses, {self.blanks} blanks>"
        )

    def total(self) -> int:
        return self.hits + self.crits + self.evades + self.focuses + self.blanks

    def total_hits(self) -> int:
        return self.hits + self.crits

    def count(self, result: DieResult) -> None:
        if result is DieResult.BLANK:
            self.blanks += 1
        elif result is DieResult.FOCUS:
            self.focuses += 1
        elif result is DieResult.HIT:
            self.hits += 1
        elif result is DieResult.CRIT:
            self.crits += 1
        else:
            self.evades += 1

    def add(self, other: "DiceTally") -> "DiceTally":
        self.hits += other.hits
        self.crits += other.crits
        self.evades += other.evades
        self.focuses += other.focuses
        self.blanks += other.blanks
        return self

    # ----- Rerolls -----
    # Removed dice are rolled again from scratch with the pool's own die.

    def reroll_blanks(self, die_fn: DieFn, rng: random.Random) -> "DiceTally":
        if self.blanks == 0:
            return self
        n = self.blanks
        self.blanks = 0
        return self.add(roll(n, die_fn, rng))

    def reroll_one_blank(self, die_fn: DieFn, rng: random.Random) -> "DiceTally":
        if self.blanks == 0:
            return self
        self.blanks -= 1
        return self.add(roll(1, die_fn, rng))

    def reroll_blanks_and_focuses(self, die_fn: DieFn, rng: random.Random) -> "DiceTally":
        n = self.blanks + self.focuses
        if n == 0:
            return self
        self.blanks = 0
        self.focuses = 0
        return self.add(roll(n, die_fn, rng))

    def reroll_one_blank_or_focus(self, die_fn: DieFn, rng: random.Random) -> "DiceTally":
        """Reroll a single blank, or a single focus when no blank is left."""
        if self.blanks > 0:
            return self.reroll_one_blank(die_fn, rng)
        if self.focuses == 0:
            return self
        self.focuses -= 1
        return self.add(roll(1, die_fn, rng))

    # ----- Token spends -----

    def spend_focus_for_attack(self) -> "DiceTally":
        self.hits += self.focuses
        self.focuses = 0
        return self

    def spend_focus_for_defense(self) -> "DiceTally":
        self.evades += self.focuses
        self.focuses = 0
        return self

    def spend_evade(self) -> "DiceTally":
        self.evades += 1
        return self


def roll(n: int, die_fn: DieFn, rng: random.Random) -> DiceTally:
    """Roll ``n`` dice with ``die_fn`` and tally the results."""
    if n < 0:
        raise CombatContractError(f"cannot roll a negative number of dice ({n})")
    tally = DiceTally()
    for _ in range(n):
        tally.count(die_fn(rng))
    return tally


__all__ = [
    "DIE_FACES",
    "DieFn",
    "DieResult",
    "DiceTally",
    "attack_die",
    "defense_die",
    "roll",
]

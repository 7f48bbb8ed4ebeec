"""Attack resolution between two ships.

One call to :func:`resolve_attack` plays out a single shot: the attacker rolls
and modifies its attack dice, the defender rolls and modifies its defense
dice, evades cancel hits before crits, and surviving damage lands on shields
before hull.  Crits that reach the hull may become direct hits worth two
damage.  The sequence never branches back; the only randomness comes from the
``rng`` passed in.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple
import logging
import random

from ..dice import DiceTally, attack_die, defense_die, roll
from ..errors import CombatContractError
from ..ships import Ship

_log = logging.getLogger("xwing_sim.combat")

# A crit reaching the hull is a direct hit on 7 of the 33 damage cards.
DIRECT_HIT_CARDS = 7
DAMAGE_DECK_SIZE = 33
DIRECT_HIT_DAMAGE = 2

# =============================
# Result record
# =============================


@dataclass
class AttackOutcome:
    """What happened during one attack, for traces and tests."""

    attack: DiceTally
    defense: DiceTally
    total_hits: int
    reroll: Optional[str] = None
    evaded: bool = False
    hits_canceled: int = 0
    crits_canceled: int = 0
    shield_damage: int = 0
    hull_damage: int = 0
    direct_hits: int = 0
    destroyed: bool = False


# =============================
# Steps
# =============================


def _reroll_attack(
    attacker: Ship, attack: DiceTally, locked: bool, rng: random.Random
) -> Optional[str]:
    """Apply at most one attack reroll; returns the name of the one used."""

    if attacker.focus_tokens == 0:
        # Without a focus token, focus results are worth rerolling too.
        if attack.blanks > 0 and locked:
            attack.reroll_blanks_and_focuses(attack_die, rng)
            attacker.spend_target_lock()
            return "target_lock"
        if attacker.has_squad_reroll and (attack.blanks > 0 or attack.focuses > 0):
            attack.reroll_one_blank_or_focus(attack_die, rng)
            return "squad"
    elif attack.blanks > 0:
        if locked:
            attack.reroll_blanks(attack_die, rng)
            attacker.spend_target_lock()
            return "target_lock"
        if attacker.has_squad_reroll:
            attack.reroll_one_blank(attack_die, rng)
            return "squad"
    return None


def _modify_defense(defender: Ship, defense: DiceTally, total_hits: int) -> bool:
    """Spend the defender's tokens until every hit is evaded.

    Returns True when the attack has been fully evaded.
    """

    if defense.evades >= total_hits:
        _log.debug("Naturally evaded all hits")
        return True
    if defense.focuses > 0 and defender.focus_tokens > 0:
        _log.debug("Defender burning focus")
        defense.spend_focus_for_defense()
        defender.spend_focus_token()
        if defense.evades >= total_hits:
            _log.debug("Evaded all hits after using focus")
            return True
    while defender.evade_tokens > 0:
        _log.debug("Spending evade token")
        defender.spend_evade_token()
        defense.spend_evade()
        if defense.evades >= total_hits:
            _log.debug("Evaded all hits after burning evade")
            return True
    return False


def cancel_hits(attack: DiceTally, defense: DiceTally) -> Tuple[int, int]:
    """Evades cancel regular hits first, then crits.

    Mutates both tallies and returns ``(hits_canceled, crits_canceled)``.
    """

    hits_canceled = min(attack.hits, defense.evades)
    attack.hits -= hits_canceled
    defense.evades -= hits_canceled
    crits_canceled = min(attack.crits, defense.evades)
    attack.crits -= crits_canceled
    defense.evades -= crits_canceled
    return hits_canceled, crits_canceled


def apply_damage(defender: Ship, damage: DiceTally, rng: random.Random) -> Tuple[int, int, int]:
    """Land uncanceled hits and crits on ``defender``.

    Shields soak hits first, then crits.  Whatever gets through goes to the
    hull; each crit there rolls for a direct hit.  Returns
    ``(shield_damage, hull_damage, direct_hits)``.
    """

    hits = damage.hits
    crits = damage.crits

    shield_hits = min(hits, defender.shields)
    hits -= shield_hits
    defender.shields -= shield_hits
    shield_crits = min(crits, defender.shields)
    crits -= shield_crits
    defender.shields -= shield_crits

    hull_damage = hits
    direct_hits = 0
    for _ in range(crits):
        if rng.randrange(DAMAGE_DECK_SIZE) < DIRECT_HIT_CARDS:
            _log.debug("Direct Hit!")
            direct_hits += 1
            hull_damage += DIRECT_HIT_DAMAGE
        else:
            hull_damage += 1
    defender.hull -= hull_damage
    return shield_hits + shield_crits, hull_damage, direct_hits


# =============================
# Driver
# =============================


def resolve_attack(
    attacker: Ship,
    defender: Ship,
    rng: random.Random,
    *,
    return_fire: bool = False,
) -> AttackOutcome:
    """Resolve one attack from ``attacker`` against ``defender``.

    ``return_fire`` lets an attacker that was destroyed earlier in its own
    initiative step still take its shot; the match engine sets it because
    ships of equal skill fire simultaneously.
    """

    if defender.destroyed:
        raise CombatContractError(f"{defender.name} is already destroyed and cannot be attacked")
    if attacker.destroyed and not return_fire:
        raise CombatContractError(f"{attacker.name} is destroyed and cannot attack")
    if attacker.faction is defender.faction:
        raise CombatContractError(f"{attacker.name} cannot attack its own side ({defender.name})")

    _log.debug("=== %s is attacking %s ===", attacker, defender)
    attack = roll(attacker.attack, attack_die, rng)
    _log.debug("Attack roll: %s", attack)

    locked = attacker.locked_onto is not None and attacker.locked_onto == defender.ship_id
    reroll = _reroll_attack(attacker, attack, locked, rng)
    if reroll is not None:
        _log.debug("%s used %s reroll: %s", attacker.name, reroll, attack)

    if attack.focuses > 0 and attacker.focus_tokens > 0:
        _log.debug("Attacker burning focus")
        attack.spend_focus_for_attack()
        attacker.spend_focus_token()
    _log.debug("Final attack results: %s", attack)

    total_hits = attack.total_hits()

    defense = roll(defender.defense, defense_die, rng)
    _log.debug("Defense roll: %s", defense)
    outcome = AttackOutcome(
        attack=replace(attack),
        defense=replace(defense),
        total_hits=total_hits,
        reroll=reroll,
    )
    evaded = _modify_defense(defender, defense, total_hits)
    outcome.defense = replace(defense)
    if evaded:
        outcome.evaded = True
        return outcome

    outcome.hits_canceled, outcome.crits_canceled = cancel_hits(attack, defense)
    _log.debug(
        "Canceled %d hits and %d crits, damage sustained: %s",
        outcome.hits_canceled,
        outcome.crits_canceled,
        attack,
    )

    outcome.shield_damage, outcome.hull_damage, outcome.direct_hits = apply_damage(
        defender, attack, rng
    )
    _log.debug(
        "%s took %d shield and %d hull damage",
        defender.name,
        outcome.shield_damage,
        outcome.hull_damage,
    )

    if defender.hull < 1:
        _log.debug("%s was destroyed!", defender.name)
        defender.destroyed = True
        outcome.destroyed = True
    return outcome


__all__ = [
    "AttackOutcome",
    "DAMAGE_DECK_SIZE",
    "DIRECT_HIT_CARDS",
    "DIRECT_HIT_DAMAGE",
    "apply_damage",
    "cancel_hits",
    "resolve_attack",
]

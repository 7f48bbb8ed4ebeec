"""Pre-attack action hooks.

The match engine calls one hook per activating ship per round, after the
ship's target has been chosen (``ship.engaged_id``) and before it fires.
Hooks are plain module-level functions so they survive pickling into worker
processes.
"""
from __future__ import annotations

from typing import Callable, Dict

from .ships import Ship

ActionHook = Callable[[Ship], None]


def focus_action(ship: Ship) -> None:
    ship.focus()


def evade_action(ship: Ship) -> None:
    ship.evade()


def target_lock_action(ship: Ship) -> None:
    if ship.engaged_id is not None:
        ship.acquire_target_lock(ship.engaged_id)


def no_action(ship: Ship) -> None:
    return None


ACTIONS: Dict[str, ActionHook] = {
    "focus": focus_action,
    "evade": evade_action,
    "target_lock": target_lock_action,
    "none": no_action,
}


def get_action(name: str) -> ActionHook:
    try:
        return ACTIONS[name]
    except KeyError as exc:
        available = ", ".join(sorted(ACTIONS))
        raise KeyError(f"Unknown action '{name}'. Available: {available}") from exc


__all__ = [
    "ACTIONS",
    "ActionHook",
    "evade_action",
    "focus_action",
    "get_action",
    "no_action",
    "target_lock_action",
]

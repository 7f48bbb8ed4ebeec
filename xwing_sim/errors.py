from __future__ import annotations


class SimulationError(RuntimeError):
    pass


class CombatContractError(AssertionError):
    """A caller broke a combat invariant (bad dice count, dead participant)."""


class TokenError(CombatContractError):
    pass


class RosterError(ValueError):
    pass


__all__ = ["SimulationError", "CombatContractError", "TokenError", "RosterError"]

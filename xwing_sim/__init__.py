"""X-Wing squadron battle simulator: dice, combat, match engine and Monte-Carlo trials."""

from importlib import import_module
from typing import Any

__version__ = "0.1.0"
__all__ = [
    "simulate",
    "DieResult",
    "DiceTally",
    "Faction",
    "Ship",
    "ShipTemplate",
    "Squadron",
    "Roster",
    "get_roster",
    "resolve_attack",
    "MatchResult",
    "TrialContext",
    "run_round",
    "play_match",
    "AggregateResult",
    "run_trials",
    "SimulationSettings",
    "__version__",
]

_EXPORTS = {
    "DieResult": ("dice", "DieResult"),
    "DiceTally": ("dice", "DiceTally"),
    "Faction": ("ships", "Faction"),
    "Ship": ("ships", "Ship"),
    "ShipTemplate": ("ships", "ShipTemplate"),
    "Squadron": ("ships", "Squadron"),
    "Roster": ("rosters", "Roster"),
    "get_roster": ("rosters", "get_roster"),
    "resolve_attack": ("simulators.combat", "resolve_attack"),
    "MatchResult": ("simulators.match", "MatchResult"),
    "TrialContext": ("simulators.match", "TrialContext"),
    "run_round": ("simulators.match", "run_round"),
    "play_match": ("simulators.match", "play_match"),
    "AggregateResult": ("simulators.trials", "AggregateResult"),
    "run_trials": ("simulators.trials", "run_trials"),
    "SimulationSettings": ("config", "SimulationSettings"),
    "simulate": ("main", "simulate"),
}


def __getattr__(name: str) -> Any:
    if name in _EXPORTS:
        module_name, attr_name = _EXPORTS[name]
        module = import_module(f".{module_name}", __name__)
        attr = getattr(module, attr_name)
        globals()[name] = attr
        return attr
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


def __dir__() -> list[str]:
    return sorted(set(list(globals().keys()) + list(__all__)))

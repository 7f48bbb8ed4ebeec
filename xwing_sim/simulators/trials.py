"""Monte-Carlo driver: play many independent matches and tally outcomes.

Each trial builds its own :class:`TrialContext` (fresh ships, its own seeded
``random.Random``) so trials share no mutable state and can run on any
worker.  Results fan in to the calling thread, which is the only code that
touches the :class:`AggregateResult` counters.
"""
from __future__ import annotations

from collections import Counter
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import logging
import random

from ..actions import ActionHook, focus_action
from ..errors import SimulationError
from ..rosters import Roster
from ..ships import Faction
from .match import DEFAULT_ROUND_CAP, MatchResult, TrialContext, play_match

_log = logging.getLogger("xwing_sim.trials")

DEFAULT_TRIALS = 1000
DEFAULT_WORKERS = 8
MAX_SEED = 2**31 - 1


@dataclass
class AggregateResult:
    side_a_wins: int = 0
    side_b_wins: int = 0
    draws: int = 0
    capped: int = 0
    side_a_survivors: Counter = field(default_factory=Counter)
    side_b_survivors: Counter = field(default_factory=Counter)

    @property
    def trials(self) -> int:
        return self.side_a_wins + self.side_b_wins + self.draws

    def record(self, result: MatchResult) -> None:
        if result.winner is Faction.SIDE_A:
            self.side_a_wins += 1
            self.side_a_survivors[result.ships_remaining] += 1
        elif result.winner is Faction.SIDE_B:
            self.side_b_wins += 1
            self.side_b_survivors[result.ships_remaining] += 1
        else:
            self.draws += 1
            if result.capped:
                self.capped += 1

    def wins(self, faction: Faction) -> int:
        if faction is Faction.SIDE_A:
            return self.side_a_wins
        if faction is Faction.SIDE_B:
            return self.side_b_wins
        return self.draws

    def win_rate(self, faction: Faction) -> float:
        return self.wins(faction) / max(1, self.trials)

    def draw_rate(self) -> float:
        return self.draws / max(1, self.trials)

    def describe(self, labels: Optional[Dict[Faction, str]] = None) -> str:
        labels = labels or {}
        a_name = labels.get(Faction.SIDE_A, "Side A")
        b_name = labels.get(Faction.SIDE_B, "Side B")
        return f"{a_name} wins: {self.side_a_wins}\n{b_name} wins: {self.side_b_wins}\nDraws: {self.draws}"

    def __str__(self) -> str:
        return self.describe()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trials": self.trials,
            "side_a_wins": self.side_a_wins,
            "side_b_wins": self.side_b_wins,
            "draws": self.draws,
            "capped": self.capped,
            "side_a_survivors": {str(k): v for k, v in sorted(self.side_a_survivors.items())},
            "side_b_survivors": {str(k): v for k, v in sorted(self.side_b_survivors.items())},
        }


def trial_seeds(n_trials: int, seed: Optional[int] = None) -> List[int]:
    """Distinct per-trial seeds drawn from one master generator.

    The same ``seed`` always yields the same sequence; ``None`` seeds the
    master generator from system entropy.  Seeds never repeat within a run,
    so no two trials replay the same match.
    """

    if n_trials > MAX_SEED:
        raise ValueError(f"at most {MAX_SEED} distinct trial seeds are available")
    master = random.Random(seed)
    return master.sample(range(1, MAX_SEED + 1), n_trials)


def run_trial(
    roster: Roster,
    seed: int,
    action: ActionHook = focus_action,
    round_cap: Optional[int] = DEFAULT_ROUND_CAP,
) -> MatchResult:
    ctx = TrialContext.from_roster(roster, seed=seed)
    return play_match(ctx, action=action, round_cap=round_cap)


def _make_executor(workers: int, use_processes: bool) -> Executor:
    if use_processes:
        return ProcessPoolExecutor(max_workers=workers)
    return ThreadPoolExecutor(max_workers=workers)


def run_trials(
    roster: Roster,
    n_trials: int = DEFAULT_TRIALS,
    *,
    seed: Optional[int] = None,
    action: ActionHook = focus_action,
    workers: int = DEFAULT_WORKERS,
    use_processes: bool = False,
    round_cap: Optional[int] = DEFAULT_ROUND_CAP,
) -> AggregateResult:
    """Play ``n_trials`` matches of ``roster`` and tally who won.

    With ``workers`` above one the trials are submitted to a thread pool (or
    a process pool when ``use_processes`` is set; ``action`` must then be a
    picklable module-level function).  A failing trial re-raises here.
    """

    if n_trials < 0:
        raise ValueError(f"n_trials must be non-negative, got {n_trials}")
    seeds = trial_seeds(n_trials, seed)
    aggregate = AggregateResult()
    _log.info(
        "Running %d trials of roster '%s' (seed=%s, workers=%d, processes=%s)",
        n_trials,
        roster.name,
        seed,
        workers,
        use_processes,
    )

    if workers <= 1 or n_trials <= 1:
        for trial_seed in seeds:
            aggregate.record(run_trial(roster, trial_seed, action, round_cap))
    else:
        with _make_executor(workers, use_processes) as executor:
            futures = [
                executor.submit(run_trial, roster, trial_seed, action, round_cap)
                for trial_seed in seeds
            ]
            for future in as_completed(futures):
                aggregate.record(future.result())

    if aggregate.trials != n_trials:
        raise SimulationError(f"expected {n_trials} results, collected {aggregate.trials}")
    _log.info("Finished %d trials: %s", n_trials, aggregate.describe(roster.labels).replace("\n", ", "))
    return aggregate


__all__ = [
    "AggregateResult",
    "DEFAULT_TRIALS",
    "DEFAULT_WORKERS",
    "run_trial",
    "run_trials",
    "trial_seeds",
]

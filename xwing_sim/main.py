"""Main entry point for running a batch of simulated matches.

:func:`simulate` is the one call the CLI and the HTTP API share: resolve the
roster and action policy named in a :class:`SimulationSettings`, play the
trials, and package the tallies into a :class:`RunSummary`.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .actions import ActionHook, get_action
from .config import SimulationSettings
from .reports.summary import RunSummary, build_summary
from .rosters import Roster, get_roster
from .simulators.trials import AggregateResult, run_trials


@dataclass
class SimulationRun:
    roster: Roster
    aggregate: AggregateResult
    summary: RunSummary


def simulate(
    settings: SimulationSettings,
    roster: Optional[Roster] = None,
    action: Optional[ActionHook] = None,
) -> SimulationRun:
    """Run the batch described by ``settings``.

    Callers that already resolved the roster or action hook pass them in;
    otherwise they are looked up by the names in ``settings``.
    """
    if roster is None:
        roster = get_roster(settings.roster)
    if action is None:
        action = get_action(settings.action)
    aggregate = run_trials(
        roster,
        settings.trials,
        seed=settings.seed,
        action=action,
        workers=settings.workers,
        use_processes=settings.use_processes,
        round_cap=settings.round_cap,
    )
    summary = build_summary(
        roster_name=roster.name,
        labels=roster.labels,
        aggregate=aggregate,
        seed=settings.seed,
        action=settings.action,
        round_cap=settings.round_cap,
    )
    return SimulationRun(roster=roster, aggregate=aggregate, summary=summary)


__all__ = ["SimulationRun", "simulate"]

import pytest

from xwing_sim.actions import focus_action
from xwing_sim.rosters import default_roster, duel_roster
from xwing_sim.ships import Faction
from xwing_sim.simulators.match import MatchResult
from xwing_sim.simulators.trials import AggregateResult, run_trial, run_trials, trial_seeds


def test_trial_seeds_are_reproducible():
    assert trial_seeds(10, seed=99) == trial_seeds(10, seed=99)
    assert trial_seeds(10, seed=99) != trial_seeds(10, seed=100)
    assert len(trial_seeds(0, seed=1)) == 0


@pytest.mark.parametrize("seed", [0, 1, 2, 3, 4])
def test_trial_seeds_never_repeat_in_a_large_run(seed):
    seeds = trial_seeds(100_000, seed=seed)
    assert len(set(seeds)) == 100_000
    assert all(s >= 1 for s in seeds)


def test_run_trial_is_deterministic_per_seed():
    roster = default_roster()
    assert run_trial(roster, 1234) == run_trial(roster, 1234)


def test_same_seed_same_tallies_across_worker_counts():
    roster = duel_roster()
    serial = run_trials(roster, 200, seed=7, workers=1)
    threaded = run_trials(roster, 200, seed=7, workers=4)
    again = run_trials(roster, 200, seed=7, workers=4)
    assert serial.to_dict() == threaded.to_dict() == again.to_dict()
    assert serial.trials == 200


def test_process_pool_matches_serial():
    roster = duel_roster()
    serial = run_trials(roster, 20, seed=11, workers=1, action=focus_action)
    pooled = run_trials(roster, 20, seed=11, workers=2, use_processes=True, action=focus_action)
    assert pooled.to_dict() == serial.to_dict()


def test_every_trial_is_counted():
    aggregate = run_trials(default_roster(), 100, seed=3, workers=8)
    assert aggregate.side_a_wins + aggregate.side_b_wins + aggregate.draws == 100
    assert sum(aggregate.side_a_survivors.values()) == aggregate.side_a_wins
    assert sum(aggregate.side_b_survivors.values()) == aggregate.side_b_wins


def test_zero_trials_and_negative_trials():
    assert run_trials(duel_roster(), 0, seed=1).trials == 0
    with pytest.raises(ValueError):
        run_trials(duel_roster(), -1)


def test_failing_trial_propagates():
    def broken(ship):
        raise RuntimeError("bad hook")

    with pytest.raises(RuntimeError, match="bad hook"):
        run_trials(duel_roster(), 10, seed=1, workers=4, action=broken)


class TestAggregateResult:
    def test_record_and_rates(self):
        agg = AggregateResult()
        agg.record(MatchResult(winner=Faction.SIDE_A, ships_remaining=2))
        agg.record(MatchResult(winner=Faction.SIDE_A, ships_remaining=1))
        agg.record(MatchResult(winner=Faction.SIDE_B, ships_remaining=1))
        agg.record(MatchResult(winner=Faction.NEUTRAL))
        agg.record(MatchResult(winner=Faction.NEUTRAL, capped=True))

        assert (agg.side_a_wins, agg.side_b_wins, agg.draws, agg.capped) == (2, 1, 2, 1)
        assert agg.trials == 5
        assert agg.win_rate(Faction.SIDE_A) == pytest.approx(0.4)
        assert agg.draw_rate() == pytest.approx(0.4)
        assert agg.to_dict()["side_a_survivors"] == {"1": 1, "2": 1}

    def test_describe_uses_labels(self):
        agg = AggregateResult(side_a_wins=3, side_b_wins=5, draws=1)
        text = agg.describe({Faction.SIDE_A: "Rebels", Faction.SIDE_B: "Empire"})
        assert text == "Rebels wins: 3\nEmpire wins: 5\nDraws: 1"

    def test_empty_rates_are_zero(self):
        assert AggregateResult().win_rate(Faction.SIDE_B) == 0.0

import random
from collections import Counter

import pytest

from xwing_sim.dice import (
    DiceTally,
    DieResult,
    attack_die,
    defense_die,
    roll,
)
from xwing_sim.errors import CombatContractError


class FaceCycle:
    """Returns every face of an eight-sided die once, in order."""

    def __init__(self):
        self.face = -1

    def randrange(self, stop):
        self.face = (self.face + 1) % stop
        return self.face


def test_attack_die_face_weights():
    rng = FaceCycle()
    faces = Counter(attack_die(rng) for _ in range(8))
    assert faces == {
        DieResult.BLANK: 2,
        DieResult.FOCUS: 2,
        DieResult.HIT: 3,
        DieResult.CRIT: 1,
    }


def test_defense_die_face_weights():
    rng = FaceCycle()
    faces = Counter(defense_die(rng) for _ in range(8))
    assert faces == {
        DieResult.BLANK: 3,
        DieResult.FOCUS: 2,
        DieResult.EVADE: 3,
    }


def test_roll_counts_match_dice_rolled():
    rng = random.Random(7)
    for n in range(0, 12):
        assert roll(n, attack_die, rng).total() == n
        defense = roll(n, defense_die, rng)
        assert defense.total() == n
        assert defense.hits == 0 and defense.crits == 0


def test_roll_negative_count_is_contract_violation():
    with pytest.raises(CombatContractError):
        roll(-1, attack_die, random.Random(0))


def test_add_is_elementwise():
    a = DiceTally(hits=1, crits=2, evades=0, focuses=1, blanks=3)
    b = DiceTally(hits=2, crits=0, evades=1, focuses=1, blanks=0)
    a.add(b)
    assert a == DiceTally(hits=3, crits=2, evades=1, focuses=2, blanks=3)


def test_reroll_blanks_replaces_only_blanks(scripted):
    tally = DiceTally(hits=1, focuses=1, blanks=2)
    # two fresh dice: a hit and a blank
    rng = scripted([4, 0])
    tally.reroll_blanks(attack_die, rng)
    assert tally == DiceTally(hits=2, focuses=1, blanks=1)
    assert rng.remaining == 0


def test_reroll_blanks_never_adds_dice():
    rng = random.Random(3)
    for _ in range(50):
        tally = roll(5, attack_die, rng)
        blanks_before = tally.blanks
        tally.reroll_blanks(attack_die, rng)
        assert tally.total() == 5
        assert tally.blanks <= blanks_before


def test_reroll_blanks_and_focuses(scripted):
    tally = DiceTally(hits=1, focuses=2, blanks=1)
    rng = scripted([7, 4, 2])
    tally.reroll_blanks_and_focuses(attack_die, rng)
    assert tally == DiceTally(hits=2, crits=1, focuses=1)
    assert tally.total() == 4


def test_reroll_one_blank(scripted):
    tally = DiceTally(blanks=2, focuses=1)
    tally.reroll_one_blank(attack_die, scripted([7]))
    assert tally == DiceTally(crits=1, blanks=1, focuses=1)


def test_reroll_one_blank_or_focus_prefers_blank(scripted):
    tally = DiceTally(blanks=1, focuses=1)
    tally.reroll_one_blank_or_focus(attack_die, scripted([4]))
    assert tally == DiceTally(hits=1, focuses=1)

    tally = DiceTally(hits=1, focuses=1)
    tally.reroll_one_blank_or_focus(attack_die, scripted([7]))
    assert tally == DiceTally(hits=1, crits=1)


def test_rerolls_with_nothing_eligible_draw_nothing(scripted):
    rng = scripted([])
    tally = DiceTally(hits=2, crits=1)
    tally.reroll_blanks(attack_die, rng)
    tally.reroll_one_blank(attack_die, rng)
    tally.reroll_blanks_and_focuses(attack_die, rng)
    tally.reroll_one_blank_or_focus(attack_die, rng)
    assert tally == DiceTally(hits=2, crits=1)


def test_defense_reroll_uses_defense_die(scripted):
    tally = DiceTally(blanks=1)
    tally.reroll_blanks(defense_die, scripted([5]))
    assert tally == DiceTally(evades=1)


def test_spend_focus_conversions():
    attack = DiceTally(hits=1, focuses=2)
    attack.spend_focus_for_attack()
    assert attack == DiceTally(hits=3)

    defense = DiceTally(evades=1, focuses=2, blanks=1)
    defense.spend_focus_for_defense()
    assert defense == DiceTally(evades=3, blanks=1)


def test_spend_evade_adds_one_evade():
    tally = DiceTally(blanks=2)
    tally.spend_evade()
    assert tally.evades == 1


def test_tally_str_is_readable():
    text = str(DiceTally(hits=2, crits=1, blanks=1))
    assert text == "<DiceTally 2 hits, 1 crits, 0 evades, 0 focuses, 1 blanks>"

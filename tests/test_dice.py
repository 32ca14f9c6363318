"""Unit tests for the roll executor."""

import random

from tests.conftest import ScriptedRandom
from trsim.modules.dice.parser import DiceSpec
from trsim.modules.dice.roller import roll_d10, roll_dice, roll_expression


class TestRollDice:
    def test_scripted_rolls_and_total(self):
        result = roll_dice(DiceSpec(count=2, sides=6, modifier=1), ScriptedRandom(ints=[3, 5]))
        assert result.rolls == (3, 5)
        assert result.sides == 6
        assert result.modifier == 1
        assert result.total == 9

    def test_negative_modifier(self):
        result = roll_dice(DiceSpec(count=1, sides=4, modifier=-3), ScriptedRandom(ints=[1]))
        assert result.total == -2

    def test_results_in_valid_range(self):
        rng = random.Random(1234)
        for _ in range(100):
            result = roll_dice(DiceSpec(count=3, sides=6), rng)
            assert len(result.rolls) == 3
            assert all(1 <= r <= 6 for r in result.rolls)
            assert result.total == sum(result.rolls)

    def test_same_seed_same_result(self):
        spec = DiceSpec(count=10, sides=20, modifier=2)
        assert roll_dice(spec, random.Random(42)) == roll_dice(spec, random.Random(42))


def test_roll_d10():
    assert roll_d10(ScriptedRandom(ints=[7])) == 7


def test_roll_expression_convenience():
    result = roll_expression("2d6+3", ScriptedRandom(ints=[6, 6]))
    assert result.rolls == (6, 6)
    assert result.total == 15

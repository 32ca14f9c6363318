"""Tests for grade classification and the mental-check adjustment."""

import pytest

from trsim.domain.rules.choices import CheckType
from trsim.domain.rules.grading import Grade, adjust_roll, grade_from_value


@pytest.mark.parametrize(
    "value,grade",
    [
        (10, Grade.SUCCESS),
        (8, Grade.SUCCESS),
        (7, Grade.PARTIAL_SUCCESS),
        (5, Grade.PARTIAL_SUCCESS),
        (4, Grade.FAILURE),
        (2, Grade.FAILURE),
        (1, Grade.CATASTROPHE),
    ],
)
def test_grade_boundaries(value, grade):
    assert grade_from_value(value) is grade


def test_grade_is_total_over_d10():
    grades = [grade_from_value(v) for v in range(1, 11)]
    assert grades.count(Grade.SUCCESS) == 3
    assert grades.count(Grade.PARTIAL_SUCCESS) == 3
    assert grades.count(Grade.FAILURE) == 3
    assert grades.count(Grade.CATASTROPHE) == 1


def test_mental_with_treasure_gets_bonus():
    assert adjust_roll(7, CheckType.MENTAL, treasure_intact=True) == 8
    assert adjust_roll(10, CheckType.MENTAL, treasure_intact=True) == 10


def test_mental_without_treasure_gets_penalty_before_clamp():
    assert adjust_roll(10, CheckType.MENTAL, treasure_intact=False) == 9
    assert adjust_roll(1, CheckType.MENTAL, treasure_intact=False) == 1
    assert adjust_roll(5, CheckType.MENTAL, treasure_intact=False) == 4


@pytest.mark.parametrize("check_type", [c for c in CheckType if c is not CheckType.MENTAL])
def test_other_checks_are_not_adjusted(check_type):
    for raw in (1, 5, 10):
        assert adjust_roll(raw, check_type, treasure_intact=False) == raw

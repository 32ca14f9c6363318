"""Tests for the dice notation parser."""

import pytest

from trsim.modules.dice.parser import (
    DiceParseError,
    DiceSpec,
    normalize_notation,
    parse_dice_notation,
)


def test_parse_simple_dice():
    spec = parse_dice_notation("2d6")
    assert spec == DiceSpec(count=2, sides=6, modifier=0)


def test_parse_dice_with_positive_modifier():
    assert parse_dice_notation("2d6+1") == DiceSpec(count=2, sides=6, modifier=1)


def test_parse_dice_with_negative_modifier():
    spec = parse_dice_notation("3d8-2")
    assert spec.count == 3
    assert spec.sides == 8
    assert spec.modifier == -2


def test_parse_single_die_defaults_count():
    assert parse_dice_notation("d10") == DiceSpec(count=1, sides=10, modifier=0)


def test_parse_is_case_insensitive_and_ignores_whitespace():
    assert parse_dice_notation("  2 D 6 + 1 ") == DiceSpec(count=2, sides=6, modifier=1)


def test_parse_widest_bounds():
    assert parse_dice_notation("200d100000").count == 200
    assert parse_dice_notation("1d2").sides == 2


@pytest.mark.parametrize(
    "text",
    ["0d6", "1d1", "201d6", "1d100001", "2d0", "1d" + "9" * 5000, "9" * 5000 + "d6", "1d6+" + "1" * 5000],
)
def test_parse_out_of_range(text):
    with pytest.raises(DiceParseError):
        parse_dice_notation(text)


@pytest.mark.parametrize("text", ["", "   ", "abc123", "2d", "d", "2d6+", "2d6*2", "2x6"])
def test_parse_malformed(text):
    with pytest.raises(DiceParseError):
        parse_dice_notation(text)


def test_parse_error_carries_text_and_hint():
    with pytest.raises(DiceParseError) as info:
        parse_dice_notation("0d6")
    assert info.value.text == "0d6"
    assert "d<sides>" in info.value.hint
    assert isinstance(info.value, ValueError)


def test_tighter_bounds():
    with pytest.raises(DiceParseError):
        parse_dice_notation("150d6", max_count=100)
    with pytest.raises(DiceParseError):
        parse_dice_notation("1d2000", max_sides=1000)
    assert parse_dice_notation("100d1000", max_count=100, max_sides=1000).count == 100


def test_bounds_cannot_be_widened():
    with pytest.raises(DiceParseError):
        parse_dice_notation("300d6", max_count=500)


def test_normalized_form():
    assert normalize_notation("d10") == "1d10"
    assert normalize_notation("2D6 + 1") == "2d6+1"
    assert normalize_notation("4d8-0") == "4d8"
    assert normalize_notation("3d4-2") == "3d4-2"


@pytest.mark.parametrize("text", ["d10", "2d6+1", "3d8-2", " 12 d 20 + 0 ", "1D100"])
def test_normalize_is_idempotent(text):
    spec = parse_dice_notation(text)
    assert parse_dice_notation(spec.notation) == spec
    assert normalize_notation(normalize_notation(text)) == normalize_notation(text)


def test_dice_spec_rejects_invalid_direct_construction():
    with pytest.raises(ValueError):
        DiceSpec(count=0, sides=6)
    with pytest.raises(ValueError):
        DiceSpec(count=1, sides=1)

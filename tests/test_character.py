"""Tests for character sheets and part transitions."""

import pytest
from pydantic import ValidationError

from trsim.domain.character import (
    PART_KEYS,
    PartKey,
    PartState,
    PartsState,
    Temperament,
    Trust,
    bump_part_state,
    make_character,
    normalize_character,
    toggle_part_state,
)


def test_make_character_defaults():
    c = make_character(name="Ada")
    assert c.name == "Ada"
    assert c.treasure_intact is True
    assert c.madness == 0
    assert c.trust is Trust.NEUTRAL
    assert c.temperament is Temperament.APATHETIC
    assert len(c.id) == 32


def test_character_ids_are_unique():
    assert make_character().id != make_character().id


def test_madness_range_is_validated():
    with pytest.raises(ValidationError):
        make_character(madness=11)
    with pytest.raises(ValidationError):
        make_character(madness=-1)


def test_normalize_fills_defaults_and_clamps():
    c = normalize_character({"name": "Old", "madness": 42, "trust": "hostile"})
    assert c.name == "Old"
    assert c.madness == 10
    assert c.trust is Trust.HOSTILE
    assert c.position == "Alice"


def test_normalize_handles_bad_values_and_legacy_keys():
    c = normalize_character({
        "id": "abc",
        "madness": "lots",
        "treasureIntact": False,
        "classType": "Gothic",
        "temperament": "grumpy",
        "speech": None,
    })
    assert c.id == "abc"
    assert c.madness == 0
    assert c.treasure_intact is False
    assert c.class_type == "Gothic"
    assert c.temperament is Temperament.APATHETIC
    assert c.speech == "Blunt"


def test_normalize_drops_fields_with_wrong_types():
    c = normalize_character({"name": 5, "treasure_intact": "maybe", "position": ["x"], "treasure": "Ring"})
    assert c.name == "Character"
    assert c.treasure_intact is True
    assert c.position == "Alice"
    assert c.treasure == "Ring"


def test_parts_default_and_missing_keys():
    assert PartsState().model_dump(mode="json") == {k.value: "ok" for k in PART_KEYS}
    parts = PartsState.model_validate({"head": "broken"})
    assert parts["head"] is PartState.BROKEN
    assert parts[PartKey.LEG_R] is PartState.OK


def test_parts_reject_unknown_keys():
    with pytest.raises(ValidationError):
        PartsState.model_validate({"tail": "ok"})


def test_bump_saturates_and_toggle_wraps():
    assert bump_part_state(PartState.OK) is PartState.DAMAGED
    assert bump_part_state(PartState.DAMAGED) is PartState.BROKEN
    assert bump_part_state(PartState.BROKEN) is PartState.BROKEN

    assert toggle_part_state(PartState.OK) is PartState.DAMAGED
    assert toggle_part_state(PartState.DAMAGED) is PartState.BROKEN
    assert toggle_part_state(PartState.BROKEN) is PartState.OK


def test_parts_copies_are_independent():
    parts = PartsState()
    bumped = parts.bumped("body")
    assert parts["body"] is PartState.OK
    assert bumped["body"] is PartState.DAMAGED
    assert bumped.toggled("body").toggled("body")["body"] is PartState.OK


def test_injury():
    parts = (
        PartsState()
        .with_state("head", PartState.BROKEN)
        .with_state("armL", PartState.DAMAGED)
        .with_state("legR", PartState.DAMAGED)
    )
    assert parts.count(PartState.BROKEN) == 1
    assert parts.count(PartState.DAMAGED) == 2
    assert parts.injury == 4

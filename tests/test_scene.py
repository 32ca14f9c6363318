"""Tests for the scene state machine."""

import logging
import random

from tests.conftest import ScriptedRandom
from trsim.domain.character import PartsState, make_character
from trsim.domain.rules.choices import CheckType, Choice
from trsim.domain.rules.outcome import TENSION_MAX, TENSION_MIN
from trsim.domain.scene import (
    SCENE_INTROS,
    SCENE_TITLES,
    SceneStatus,
    advance_beat,
    begin_scene,
    end_scene,
    generate_choices,
)


def test_begin_scene():
    scene = begin_scene(ScriptedRandom(ints=[0, 2, 1]))
    assert scene.title == SCENE_TITLES[0]
    assert scene.tension == 2
    assert scene.intro == SCENE_INTROS[1]
    assert scene.beat == 1
    assert scene.beats_total == 3
    assert scene.status is SceneStatus.ACTIVE
    assert scene.last_outcome_text is None


def test_begin_scene_tension_range():
    rng = random.Random(5)
    tensions = {begin_scene(rng).tension for _ in range(200)}
    assert tensions == {1, 2, 3}


def test_end_scene_returns_no_scene():
    assert end_scene(begin_scene(random.Random(1))) is None
    assert end_scene(None) is None


def test_scene_ends_after_exactly_beats_total():
    rng = random.Random(11)
    actor = make_character(name="Ada")
    roster = [actor]
    parts = PartsState()
    scene = begin_scene(rng, beats_total=3)

    for beat in (1, 2, 3):
        assert scene.status is SceneStatus.ACTIVE
        assert scene.beat == beat
        result = advance_beat(scene, actor, None, parts, roster, rng)
        assert result.success is True
        assert result.scene_ended is (beat == 3)
        scene, actor, parts = result.scene, result.character, result.parts
        roster = [actor]

    assert scene.status is SceneStatus.ENDED
    assert scene.beat == 3

    fourth = advance_beat(scene, actor, None, parts, roster, rng)
    assert fourth.success is False
    assert fourth.error_code == "scene_not_active"
    assert fourth.scene == scene
    assert fourth.character == actor
    assert fourth.parts == parts


def test_advance_without_scene_is_noop():
    actor = make_character()
    result = advance_beat(None, actor, None, PartsState(), [actor], random.Random(0))
    assert result.success is False
    assert result.scene is None
    assert result.error_code == "scene_not_active"


def test_empty_roster_is_noop_with_warning(caplog):
    scene = begin_scene(random.Random(3))
    with caplog.at_level(logging.WARNING, logger="trsim.scene"):
        result = advance_beat(scene, None, None, PartsState(), [], ScriptedRandom())
    assert result.success is False
    assert result.error_code == "empty_roster"
    assert result.scene == scene
    assert any("empty_roster" in r.getMessage() for r in caplog.records)


def test_manual_choice_must_be_a_candidate():
    scene = begin_scene(random.Random(4))
    actor = make_character()
    candidates = generate_choices(scene, random.Random(4))
    bogus = Choice(label="Dance", check_type=CheckType.FIGHT, risk_level=2)
    result = advance_beat(scene, actor, bogus, PartsState(), [actor], ScriptedRandom(), candidates=candidates)
    assert result.success is False
    assert result.error_code == "invalid_choice"
    assert result.scene == scene


def test_manual_choice_is_used():
    scene = begin_scene(random.Random(4))
    actor = make_character()
    candidates = generate_choices(scene, random.Random(4))
    picked = candidates[1]
    result = advance_beat(
        scene, actor, picked, PartsState(), [actor], random.Random(8), candidates=candidates,
    )
    assert result.success is True
    assert result.choice == picked
    assert result.choices == candidates
    assert result.scene.beat == 2
    assert picked.label in result.narrative_text


def test_actor_defaults_to_first_in_roster():
    scene = begin_scene(random.Random(6))
    first, second = make_character(name="First"), make_character(name="Second")
    result = advance_beat(scene, None, None, PartsState(), [first, second], random.Random(6))
    assert result.character.id == first.id


def test_autonomous_mode_is_replayable():
    scene = begin_scene(random.Random(12))
    actor = make_character(madness=6)
    a = advance_beat(scene, actor, None, PartsState(), [actor], random.Random(99))
    b = advance_beat(scene, actor, None, PartsState(), [actor], random.Random(99))
    assert a.choice == b.choice
    assert a.narrative_text == b.narrative_text
    assert a.character == b.character
    assert a.parts == b.parts


def test_bounds_hold_under_fuzz():
    for seed in range(10_000):
        rng = random.Random(seed)
        roster = [
            make_character(name="A", madness=rng.randint(0, 10), treasure_intact=rng.random() < 0.5),
            make_character(name="B", madness=rng.randint(0, 10)),
        ]
        parts = PartsState()
        scene = begin_scene(rng)
        index = 0
        while scene is not None and scene.is_active:
            actor = roster[index % len(roster)]
            result = advance_beat(scene, actor, None, parts, roster, rng)
            assert result.success
            roster = [result.character if c.id == actor.id else c for c in roster]
            parts, scene = result.parts, result.scene
            index += 1
            assert 0 <= result.character.madness <= 10
            assert TENSION_MIN <= scene.tension <= TENSION_MAX
        assert index == 3

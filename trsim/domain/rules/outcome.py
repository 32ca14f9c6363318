"""Apply a graded check to character, parts and scene state."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from trsim.domain.character import (
    MADNESS_MAX,
    MADNESS_MIN,
    PART_KEYS,
    PART_NAMES,
    Character,
    PartsState,
)
from trsim.domain.rules.choices import CheckType, Choice
from trsim.domain.rules.grading import Grade, adjust_roll, clamp, grade_from_value
from trsim.infra.rng import RandomSource, pick
from trsim.models.result import StateChange
from trsim.modules.dice.roller import roll_d10

if TYPE_CHECKING:
    from trsim.domain.scene import SceneState

TENSION_MIN = 0
TENSION_MAX = 5
HIGH_MADNESS = 8

# Probability of losing the treasure, keyed by effective risk (capped at 2).
TREASURE_LOSS_CHANCE = {0: 0.05, 1: 0.12, 2: 0.22}


class Effect(Enum):
    TENSION = "tension"
    MADNESS = "madness"
    TREASURE_LOSS = "treasure_loss"
    PART_DAMAGE = "part_damage"


Step = tuple[Effect, int]

_T = Effect.TENSION
_M = Effect.MADNESS
_LOSS = (Effect.TREASURE_LOSS, 0)
_PART = (Effect.PART_DAMAGE, 0)

# (check type, grade) -> (flavor, ordered effect steps)
EFFECTS: dict[tuple[CheckType, Grade], tuple[str, tuple[Step, ...]]] = {
    (CheckType.INVESTIGATE, Grade.SUCCESS): ("clue secured", ((_T, -1),)),
    (CheckType.INVESTIGATE, Grade.PARTIAL_SUCCESS): ("clue secured, at a price", (_LOSS,)),
    (CheckType.INVESTIGATE, Grade.FAILURE): ("a trap is exposed", ((_T, 1),)),
    (CheckType.INVESTIGATE, Grade.CATASTROPHE): (
        "a hidden truth runs wild", ((_T, 2), (_M, 1), _LOSS),
    ),
    (CheckType.NEGOTIATE, Grade.SUCCESS): ("took control of the room", ((_T, -1),)),
    (CheckType.NEGOTIATE, Grade.PARTIAL_SUCCESS): ("deal struck on an ugly promise", ((_M, 1),)),
    (CheckType.NEGOTIATE, Grade.FAILURE): ("the words go astray", ((_T, 1),)),
    (CheckType.NEGOTIATE, Grade.CATASTROPHE): (
        "the relationship lurches toward collapse", ((_M, 2), _LOSS),
    ),
    (CheckType.ACT, Grade.SUCCESS): ("position secured", ((_T, -1),)),
    (CheckType.ACT, Grade.PARTIAL_SUCCESS): ("made it through, leaving traces", (_LOSS,)),
    (CheckType.ACT, Grade.FAILURE): ("cut off", ((_T, 1), _PART)),
    (CheckType.ACT, Grade.CATASTROPHE): (
        "dragged into a worse situation", ((_T, 2), _LOSS, _PART, (_M, 1)),
    ),
    (CheckType.FIGHT, Grade.SUCCESS): ("suppressed or broke through", ((_T, -1),)),
    (CheckType.FIGHT, Grade.PARTIAL_SUCCESS): ("broke through, at the cost of a part", (_PART, _LOSS)),
    (CheckType.FIGHT, Grade.FAILURE): ("pushed back", (_PART, (_T, 1), _LOSS)),
    (CheckType.FIGHT, Grade.CATASTROPHE): (
        "catastrophe, parts shattered", (_PART, _PART, _LOSS, (_M, 2), (_T, 2)),
    ),
    (CheckType.MENTAL, Grade.SUCCESS): ("composure regained", ((_M, -1),)),
    (CheckType.MENTAL, Grade.PARTIAL_SUCCESS): ("barely holding on", ()),
    (CheckType.MENTAL, Grade.FAILURE): ("shaken", ((_M, 1), _LOSS)),
    (CheckType.MENTAL, Grade.CATASTROPHE): ("a wave of collapse", ((_M, 2), _LOSS)),
}


@dataclass(frozen=True)
class OutcomeResult:
    raw_roll: int
    roll: int
    grade: Grade
    character: Character
    parts: PartsState
    scene: SceneState
    text: str
    high_madness: bool = False
    treasure_lost: bool = False
    changes: list[StateChange] = field(default_factory=list)


def effective_risk(choice: Choice, tension: int) -> int:
    return choice.risk_level + (1 if tension >= 3 else 0)


def treasure_loss_chance(risk: int) -> float:
    return TREASURE_LOSS_CHANCE[min(max(risk, 0), 2)]


class _Resolution:
    """Working copy of the state touched by one check."""

    def __init__(
        self, character: Character, parts: PartsState, scene: SceneState, rng: RandomSource
    ) -> None:
        self.madness = character.madness
        self.treasure_intact = character.treasure_intact
        self.tension = scene.tension
        self.parts = parts
        self.rng = rng
        self.fragments: list[str] = []
        self.changes: list[StateChange] = []
        self._character = character
        self._scene = scene

    def add_tension(self, delta: int) -> None:
        before = self.tension
        self.tension = clamp(self.tension + delta, TENSION_MIN, TENSION_MAX)
        if self.tension != before:
            self.fragments.append(f"tension {before}->{self.tension}")
            self._record("scene", self._scene.id, "tension", before, self.tension)

    def add_madness(self, delta: int) -> None:
        before = self.madness
        self.madness = clamp(self.madness + delta, MADNESS_MIN, MADNESS_MAX)
        if self.madness != before:
            self.fragments.append(f"madness {before}->{self.madness}")
            self._record("character", self._character.id, "madness", before, self.madness)

    def maybe_lose_treasure(self, risk: int) -> None:
        if not self.treasure_intact:
            return
        if self.rng.random() < treasure_loss_chance(risk):
            self.treasure_intact = False
            self.fragments.append(f"treasure ({self._character.treasure}) lost")
            self._record("character", self._character.id, "treasure_intact", True, False)
            self.add_madness(2)

    def damage_part(self) -> None:
        key = pick(self.rng, PART_KEYS)
        before = self.parts[key]
        self.parts = self.parts.bumped(key)
        after = self.parts[key]
        self.fragments.append(f"{PART_NAMES[key]} {before.label}->{after.label}")
        if after is not before:
            self._record("parts", key.value, "state", before.value, after.value)

    def _record(self, entity_type: str, entity_id: str, name: str, old: object, new: object) -> None:
        self.changes.append(StateChange(
            entity_type=entity_type, entity_id=entity_id,
            field=name, old_value=str(old), new_value=str(new),
        ))


def resolve_check(
    scene: SceneState,
    choice: Choice,
    character: Character,
    parts: PartsState,
    rng: RandomSource,
) -> OutcomeResult:
    """Roll 1d10 for ``choice`` and apply its graded effects.

    Returns updated copies of character, parts and scene; the inputs are
    never modified. The narrative line is also stored as the scene's
    ``last_outcome_text``.
    """
    raw = roll_d10(rng)
    roll = adjust_roll(raw, choice.check_type, character.treasure_intact)
    grade = grade_from_value(roll)
    risk = effective_risk(choice, scene.tension)

    state = _Resolution(character, parts, scene, rng)
    flavor, steps = EFFECTS[(choice.check_type, grade)]
    for effect, amount in steps:
        if effect is Effect.TENSION:
            state.add_tension(amount)
        elif effect is Effect.MADNESS:
            state.add_madness(amount)
        elif effect is Effect.TREASURE_LOSS:
            state.maybe_lose_treasure(risk)
        else:
            state.damage_part()

    high_madness = state.madness >= HIGH_MADNESS
    if high_madness:
        state.add_tension(1)
        state.fragments.append("high madness")

    roll_text = f"1d10={raw}" if raw == roll else f"1d10={raw}->{roll}"
    text = (
        f"[{scene.title}] (beat {scene.beat}/{scene.beats_total}) {character.name}: "
        f"{choice.label} -> {choice.check_type.value} check {roll_text} ({grade.value}) / {flavor}"
    )
    if state.fragments:
        text += " / " + " / ".join(state.fragments)

    next_character = character.model_copy(update={
        "madness": state.madness,
        "treasure_intact": state.treasure_intact,
    })
    next_scene = scene.model_copy(update={
        "tension": state.tension,
        "last_outcome_text": text,
    })
    return OutcomeResult(
        raw_roll=raw,
        roll=roll,
        grade=grade,
        character=next_character,
        parts=state.parts,
        scene=next_scene,
        text=text,
        high_madness=high_madness,
        treasure_lost=character.treasure_intact and not state.treasure_intact,
        changes=state.changes,
    )

"""Scene state machine: NoScene -> active beats -> ended -> NoScene.

A scene is a short run of beats. Each beat offers three candidate
choices, one of them is taken (by the actor policy or by the caller),
checked with 1d10 and its effects applied. After the last beat the
scene is marked ended immediately; ``end_scene`` discards it.

All functions return new snapshots and never modify their inputs.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from trsim.domain.character import Character, PartsState
from trsim.domain.rules.choices import Choice, choices_for_beat
from trsim.domain.rules.grading import Grade
from trsim.domain.rules.outcome import TENSION_MAX, TENSION_MIN, resolve_check
from trsim.domain.rules.policy import pick_choice
from trsim.infra.config import settings
from trsim.infra.rng import RandomSource, pick
from trsim.models.result import StateChange

logger = logging.getLogger("trsim.scene")

SCENE_TITLES = [
    "Ruined Corridor",
    "Collapsed Stairwell",
    "Rusted Operating Room",
    "Black Greenhouse",
    "Sealed Hangar",
    "Dark Control Room",
    "Cold Dormitory",
    "Storeroom Smelling of Blood",
]

SCENE_INTROS = [
    "Dust drifts in the air. Footsteps sound far too loud.",
    "The light shatters. Something is much too close.",
    "Even breathing feels like it will give you away.",
    "There were people here once. Not anymore.",
]


class SceneStatus(str, Enum):
    ACTIVE = "active"
    ENDED = "ended"


class SceneState(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    title: str = ""
    intro: str = ""
    beat: int = Field(default=1, ge=1)
    beats_total: int = Field(default=3, ge=1)
    tension: int = Field(default=0, ge=TENSION_MIN, le=TENSION_MAX)
    last_outcome_text: str | None = None
    status: SceneStatus = SceneStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status is SceneStatus.ACTIVE


class SceneIssue(Exception):
    """A recoverable reason why a beat could not be advanced."""

    code = "scene_issue"


class SceneNotActiveError(SceneIssue):
    code = "scene_not_active"


class EmptyRosterWarning(SceneIssue):
    code = "empty_roster"


class InvalidChoiceError(SceneIssue):
    code = "invalid_choice"


class BeatResult(BaseModel):
    success: bool
    scene: SceneState | None = None
    character: Character | None = None
    parts: PartsState
    narrative_text: str | None = None
    choices: list[Choice] = []
    choice: Choice | None = None
    roll: int | None = None
    grade: Grade | None = None
    high_madness: bool = False
    scene_ended: bool = False
    state_changes: list[StateChange] = []
    error: str | None = None
    error_code: str | None = None


def begin_scene(rng: RandomSource, beats_total: int | None = None) -> SceneState:
    """Create a fresh scene at beat 1 with tension 1-3 and random flavor."""
    title = pick(rng, SCENE_TITLES)
    tension = rng.randint(1, 3)
    intro = pick(rng, SCENE_INTROS)
    scene = SceneState(
        title=title,
        intro=intro,
        beat=1,
        beats_total=beats_total if beats_total is not None else settings.scene_beats_total,
        tension=tension,
    )
    logger.info("Scene %s started: %s (tension %d)", scene.id, scene.title, scene.tension)
    return scene


def end_scene(scene: SceneState | None) -> None:
    """Discard the scene. Always succeeds; returns the NoScene marker."""
    if scene is not None:
        logger.info("Scene %s ended: %s (tension %d)", scene.id, scene.title, scene.tension)
    return None


def generate_choices(scene: SceneState, rng: RandomSource) -> list[Choice]:
    return choices_for_beat(scene.beat, rng)


def advance_beat(
    scene: SceneState | None,
    actor: Character | None,
    choice: Choice | None,
    parts: PartsState,
    roster: Sequence[Character],
    rng: RandomSource,
    candidates: Sequence[Choice] | None = None,
) -> BeatResult:
    """Resolve one beat of ``scene`` for ``actor``.

    With ``choice`` omitted the actor policy picks among the beat's
    candidates; otherwise ``choice`` must be one of them. ``candidates``
    are the choices already shown for this beat; they are generated when
    not given. Problems (no active scene, empty roster, unknown choice)
    leave every input unchanged and are reported on the result.
    """
    if scene is None or not scene.is_active:
        return _noop(scene, actor, parts, SceneNotActiveError("No active scene to advance"))
    if not roster:
        return _noop(scene, actor, parts, EmptyRosterWarning("Roster is empty; add a character first"))
    if actor is None:
        actor = roster[0]

    choices = list(candidates) if candidates else generate_choices(scene, rng)
    if choice is None:
        chosen = pick_choice(actor, choices, parts, scene, rng)
    elif choice in choices:
        chosen = choice
    else:
        return _noop(
            scene, actor, parts,
            InvalidChoiceError(f"Choice {choice.label!r} is not offered at beat {scene.beat}"),
        )

    outcome = resolve_check(scene, chosen, actor, parts, rng)

    next_scene = outcome.scene
    ended = scene.beat + 1 > scene.beats_total
    if ended:
        next_scene = next_scene.model_copy(update={"status": SceneStatus.ENDED})
    else:
        next_scene = next_scene.model_copy(update={"beat": scene.beat + 1})

    logger.debug(
        "Beat %d/%d of scene %s: %s chose %s, rolled %d (%s)",
        scene.beat, scene.beats_total, scene.id, actor.name,
        chosen.check_type.value, outcome.roll, outcome.grade.value,
    )
    if ended:
        logger.info("Scene %s reached its last beat", scene.id)

    return BeatResult(
        success=True,
        scene=next_scene,
        character=outcome.character,
        parts=outcome.parts,
        narrative_text=outcome.text,
        choices=choices,
        choice=chosen,
        roll=outcome.roll,
        grade=outcome.grade,
        high_madness=outcome.high_madness,
        scene_ended=ended,
        state_changes=outcome.changes,
    )


def _noop(
    scene: SceneState | None,
    actor: Character | None,
    parts: PartsState,
    issue: SceneIssue,
) -> BeatResult:
    logger.warning("Beat not advanced (%s): %s", issue.code, issue)
    return BeatResult(
        success=False,
        scene=scene,
        character=actor,
        parts=parts,
        error=str(issue),
        error_code=issue.code,
    )

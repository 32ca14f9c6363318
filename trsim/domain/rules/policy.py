"""Autonomous ("observe" mode) actor policy: score candidates, keep the best."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from trsim.domain.character import Character, PartsState, Temperament, Trust
from trsim.domain.rules.choices import CheckType, Choice
from trsim.infra.rng import RandomSource

if TYPE_CHECKING:
    from trsim.domain.scene import SceneState

BASE_SCORE = 10.0
NOISE_SPAN = 4.0
INJURY_THRESHOLD = 3


def score_choice(
    character: Character,
    choice: Choice,
    parts: PartsState,
    scene: SceneState,
    noise: float = 0.0,
) -> float:
    """Heuristic preference of ``character`` for ``choice``.

    Deterministic apart from ``noise``, which the caller draws in [0, 4).
    """
    score = BASE_SCORE
    tension = scene.tension
    match choice.check_type:
        case CheckType.MENTAL:
            score += min(8.0, character.madness * 1.2)
            if not character.treasure_intact:
                score += 2
        case CheckType.FIGHT:
            if character.trust is Trust.HOSTILE:
                score += 8
            elif character.trust is Trust.GUARDED:
                score += 4
            else:
                score += 1
        case CheckType.INVESTIGATE:
            if character.temperament in (Temperament.APATHETIC, Temperament.CYNICAL):
                score += 6
            if tension >= 3:
                score += 2
        case CheckType.ACT:
            score += min(6, character.madness)
            if tension >= 3:
                score += 3
        case CheckType.NEGOTIATE:
            pass

    # Worn-down bodies shy away from physical options.
    if choice.check_type in (CheckType.FIGHT, CheckType.ACT) and parts.injury >= INJURY_THRESHOLD:
        score -= 4

    score += tension
    return score + noise


def pick_choice(
    character: Character,
    choices: Sequence[Choice],
    parts: PartsState,
    scene: SceneState,
    rng: RandomSource,
) -> Choice:
    """Return the highest-scoring candidate.

    One noise value is drawn per candidate, in order. Ties keep the
    earliest candidate.
    """
    if not choices:
        raise ValueError("No candidate choices to pick from")
    best = choices[0]
    best_score = float("-inf")
    for choice in choices:
        noise = rng.random() * NOISE_SPAN
        score = score_choice(character, choice, parts, scene, noise)
        if score > best_score:
            best, best_score = choice, score
    return best

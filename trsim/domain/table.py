"""Play table: the persisted owner of parts, scene, turn order and sim mode.

Wraps the pure scene engine with loading and saving, round-robin actor
rotation and session log entries.
"""

from __future__ import annotations

import json
import logging
from enum import Enum

from sqlalchemy.ext.asyncio import AsyncSession

from trsim.domain import log as log_mod, roster
from trsim.domain import scene as scene_mod
from trsim.domain.character import PART_NAMES, Character, PartKey, PartsState, PartState
from trsim.domain.rules.choices import Choice
from trsim.domain.scene import SceneState
from trsim.infra.rng import RandomSource, make_rng
from trsim.models.db_models import DEFAULT_TABLE_ID, TableState
from trsim.models.result import EngineResult, LogCategory

logger = logging.getLogger("trsim.table")

_rng: RandomSource = make_rng()


class SimMode(str, Enum):
    OBSERVE = "observe"  # the actor policy picks
    INTERVENE = "intervene"  # the user picks


async def get_table(db: AsyncSession) -> TableState:
    table = await db.get(TableState, DEFAULT_TABLE_ID)
    if table is None:
        table = TableState(
            id=DEFAULT_TABLE_ID,
            parts_json=PartsState().model_dump_json(),
            sim_mode=SimMode.OBSERVE.value,
            active_index=0,
        )
        db.add(table)
        await db.flush()
    return table


def parts_of(table: TableState) -> PartsState:
    if not table.parts_json:
        return PartsState()
    return PartsState.model_validate_json(table.parts_json)


def scene_of(table: TableState) -> SceneState | None:
    if not table.scene_json:
        return None
    return SceneState.model_validate_json(table.scene_json)


def set_parts(table: TableState, parts: PartsState) -> None:
    table.parts_json = parts.model_dump_json()


def set_scene(table: TableState, scene: SceneState | None) -> None:
    table.scene_json = scene.model_dump_json() if scene is not None else None
    table.choices_json = None


# --- Parts / mode ---


async def toggle_part(db: AsyncSession, key: str) -> PartsState:
    """Manual toggle from the sheet; wraps Broken back to Ok."""
    try:
        part = PartKey(key)
    except ValueError:
        raise ValueError(f"Unknown part '{key}'") from None
    table = await get_table(db)
    parts = parts_of(table).toggled(part)
    set_parts(table, parts)
    await log_mod.append_log(
        db, f"Part: {PART_NAMES[part]} -> {parts[part].label} ({parts[part].value})",
        LogCategory.PARTS,
    )
    await db.flush()
    return parts


async def set_mode(db: AsyncSession, mode: SimMode) -> SimMode:
    table = await get_table(db)
    table.sim_mode = SimMode(mode).value
    await db.flush()
    return SimMode(table.sim_mode)


# --- Roster with turn bookkeeping ---


async def add_character(db: AsyncSession, character: Character | None = None) -> Character:
    character = await roster.add_character(db, character)
    await log_mod.append_log(db, f"Character added: {character.name}", LogCategory.CHARACTER)
    return character


async def remove_character(db: AsyncSession, character_id: str) -> Character:
    """Remove a character and keep the acting index inside the roster."""
    removed = await roster.remove_character(db, character_id)
    table = await get_table(db)
    remaining = await roster.count_characters(db)
    table.active_index = max(0, min(table.active_index, remaining - 1))
    await log_mod.append_log(db, f"Character removed: {removed.name}", LogCategory.CHARACTER)
    await db.flush()
    return removed


async def current_actor(db: AsyncSession) -> Character | None:
    characters = await roster.list_characters(db)
    if not characters:
        return None
    table = await get_table(db)
    return characters[table.active_index % len(characters)]


# --- Scene lifecycle ---


async def begin_scene(db: AsyncSession, rng: RandomSource | None = None) -> EngineResult:
    table = await get_table(db)
    current = scene_of(table)
    if current is not None:
        return EngineResult(
            success=False, event_type="scene_begin",
            error=f"Scene '{current.title}' is already in progress",
        )
    scene = scene_mod.begin_scene(rng or _rng)
    set_scene(table, scene)
    await log_mod.append_log(db, f"Scene started: {scene.title} - {scene.intro}", LogCategory.SCENE)
    await db.flush()
    return EngineResult(
        success=True, event_type="scene_begin",
        data={"scene": scene.model_dump(mode="json")},
        narrative=scene.intro,
    )


async def end_scene(db: AsyncSession) -> EngineResult:
    table = await get_table(db)
    scene = scene_of(table)
    if scene is not None:
        await log_mod.append_log(
            db, f"Scene ended: {scene.title} (tension {scene.tension})", LogCategory.SCENE
        )
    set_scene(table, scene_mod.end_scene(scene))
    await db.flush()
    return EngineResult(success=True, event_type="scene_end", data={"scene": None})


async def current_choices(db: AsyncSession, rng: RandomSource | None = None) -> list[Choice]:
    """Candidates for the current beat, generated once per (scene, beat)."""
    table = await get_table(db)
    scene = scene_of(table)
    if scene is None or not scene.is_active:
        return []
    if table.choices_json:
        cached = json.loads(table.choices_json)
        if cached.get("scene_id") == scene.id and cached.get("beat") == scene.beat:
            return [Choice.model_validate(c) for c in cached["choices"]]

    choices = scene_mod.generate_choices(scene, rng or _rng)
    table.choices_json = json.dumps({
        "scene_id": scene.id,
        "beat": scene.beat,
        "choices": [c.model_dump(mode="json") for c in choices],
    })
    await db.flush()
    return choices


async def advance_beat(
    db: AsyncSession,
    choice: Choice | None = None,
    rng: RandomSource | None = None,
) -> EngineResult:
    """Resolve the current beat for the acting character.

    In observe mode the actor policy picks and ``choice`` is ignored. In
    intervene mode ``choice`` must be one of the current candidates; the
    first candidate is used when none is given.
    """
    rng = rng or _rng
    table = await get_table(db)
    scene = scene_of(table)
    characters = await roster.list_characters(db)
    actor = characters[table.active_index % len(characters)] if characters else None

    candidates = await current_choices(db, rng)
    if SimMode(table.sim_mode) is SimMode.OBSERVE:
        if choice is not None:
            logger.debug("Ignoring supplied choice in observe mode")
        choice = None
    elif choice is None and candidates:
        choice = candidates[0]

    result = scene_mod.advance_beat(
        scene, actor, choice, parts_of(table), characters, rng, candidates=candidates,
    )
    if not result.success:
        return EngineResult(
            success=False, event_type="advance_beat",
            data={"error_code": result.error_code}, error=result.error,
        )

    await roster.save_character(db, result.character)
    set_parts(table, result.parts)
    await log_mod.append_log(db, result.narrative_text, LogCategory.OUTCOME)

    next_scene = result.scene
    if result.scene_ended:
        await log_mod.append_log(
            db, f"Scene ended: {next_scene.title} (tension {next_scene.tension})",
            LogCategory.SCENE,
        )
        next_scene = scene_mod.end_scene(next_scene)
    set_scene(table, next_scene)
    table.active_index = (table.active_index + 1) % len(characters)
    await db.flush()

    return EngineResult(
        success=True,
        event_type="advance_beat",
        data={
            "actor_id": result.character.id,
            "choice": result.choice.model_dump(mode="json"),
            "roll": result.roll,
            "grade": result.grade.value,
            "high_madness": result.high_madness,
            "scene_ended": result.scene_ended,
            "scene": result.scene.model_dump(mode="json"),
            "character": result.character.model_dump(mode="json"),
            "parts": result.parts.model_dump(mode="json"),
            "active_index": table.active_index,
        },
        narrative=result.narrative_text,
        state_changes=result.state_changes,
    )


# --- Summary ---


async def summary(db: AsyncSession) -> dict:
    table = await get_table(db)
    parts = parts_of(table)
    characters = await roster.list_characters(db)
    avg_madness = (
        round(sum(c.madness for c in characters) / len(characters), 1)
        if characters else 0
    )
    return {
        "broken": parts.count(PartState.BROKEN),
        "damaged": parts.count(PartState.DAMAGED),
        "avg_madness": avg_madness,
        "log_count": await log_mod.count_log(db),
        "characters": len(characters),
        "sim_mode": table.sim_mode,
        "scene_active": table.scene_json is not None,
    }

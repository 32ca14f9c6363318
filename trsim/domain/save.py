"""Save data: export the whole table as JSON, import it back, reset."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from trsim.domain import log as log_mod, roster, table as table_mod
from trsim.domain.character import PartsState, make_character, normalize_character
from trsim.domain.scene import SceneState
from trsim.models.result import EngineResult, LogCategory

logger = logging.getLogger("trsim.save")

SAVE_VERSION = 2

_LEGACY_SCENE_KEYS = {"beatsTotal": "beats_total", "lastOutcome": "last_outcome_text"}


class SaveData(BaseModel):
    version: int = SAVE_VERSION
    parts: dict[str, str]
    log: list[dict]
    characters: list[dict]
    sim_mode: str
    scene: dict | None = None
    active_index: int = 0


async def export_save(db: AsyncSession) -> SaveData:
    table = await table_mod.get_table(db)
    scene = table_mod.scene_of(table)
    entries = await log_mod.get_log(db)
    data = SaveData(
        parts=table_mod.parts_of(table).model_dump(mode="json"),
        log=[log_mod.entry_to_dict(e) for e in entries],
        characters=[c.model_dump(mode="json") for c in await roster.list_characters(db)],
        sim_mode=table.sim_mode,
        scene=scene.model_dump(mode="json") if scene is not None else None,
        active_index=table.active_index,
    )
    await log_mod.append_log(db, "Save: exported JSON", LogCategory.SAVE)
    return data


def _parse_ts(value: Any) -> datetime | None:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)  # epoch millis
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return None
    return None


async def import_save(db: AsyncSession, payload: str | dict) -> EngineResult:
    """Replace the table with saved data.

    Missing sections fall back to defaults and characters are normalized.
    Malformed JSON leaves everything unchanged.
    """
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError:
            payload = None
    if not isinstance(payload, dict):
        logger.warning("Rejected save data: not a JSON object")
        await log_mod.append_log(db, "Load: failed to parse JSON", LogCategory.SAVE)
        return EngineResult(success=False, event_type="import", error="Save data is not valid JSON")

    characters = []
    seen: set[str] = set()
    for raw in payload.get("characters") or []:
        if not isinstance(raw, dict):
            continue
        character = normalize_character(raw)
        if character.id in seen:
            character = make_character(**character.model_dump(exclude={"id"}))
        seen.add(character.id)
        characters.append(character)

    try:
        parts = PartsState.model_validate(payload.get("parts"))
    except ValidationError:
        logger.warning("Save data has invalid parts; using defaults")
        parts = PartsState()

    scene = None
    raw_scene = payload.get("scene")
    if isinstance(raw_scene, dict):
        raw_scene = {_LEGACY_SCENE_KEYS.get(k, k): v for k, v in raw_scene.items()}
        try:
            scene = SceneState.model_validate(raw_scene)
        except ValidationError:
            logger.warning("Save data has an invalid scene; dropping it")

    mode = payload.get("sim_mode", payload.get("simMode"))
    if mode not in {m.value for m in table_mod.SimMode}:
        mode = table_mod.SimMode.OBSERVE.value

    active_index = payload.get("active_index", payload.get("activeIndex"))
    if not isinstance(active_index, int) or isinstance(active_index, bool):
        active_index = 0

    await roster.replace_roster(db, characters)
    table = await table_mod.get_table(db)
    table_mod.set_parts(table, parts)
    table_mod.set_scene(table, scene)
    table.sim_mode = mode
    table.active_index = active_index

    await log_mod.clear_log(db)
    entries = [e for e in payload.get("log") or [] if isinstance(e, dict) and e.get("text")]
    for entry in reversed(entries):  # stored newest first
        try:
            category = LogCategory(entry.get("category", LogCategory.SYSTEM.value))
        except ValueError:
            category = LogCategory.SYSTEM
        await log_mod.append_log(db, str(entry["text"]), category, ts=_parse_ts(entry.get("ts")))
    await log_mod.append_log(db, "Load: imported JSON", LogCategory.SAVE)
    await db.flush()

    return EngineResult(
        success=True,
        event_type="import",
        data={"characters": len(characters), "scene": scene is not None},
    )


async def reset_all(db: AsyncSession) -> EngineResult:
    """Back to a single default character, intact parts and no scene."""
    await roster.replace_roster(db, [make_character(name="Character 1")])
    table = await table_mod.get_table(db)
    table_mod.set_parts(table, PartsState())
    table_mod.set_scene(table, None)
    table.sim_mode = table_mod.SimMode.OBSERVE.value
    table.active_index = 0
    await log_mod.clear_log(db)
    await log_mod.append_log(db, "Full reset", LogCategory.SYSTEM)
    await db.flush()
    return EngineResult(success=True, event_type="reset")

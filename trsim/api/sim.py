"""Simulator API — scene lifecycle and beat resolution."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from trsim.domain import table as table_mod
from trsim.domain.rules.choices import Choice
from trsim.infra.db import get_db

router = APIRouter(prefix="/api/sim", tags=["sim"])


class AdvanceRequest(BaseModel):
    choice_index: int | None = None
    choice: Choice | None = None


@router.get("/scene")
async def get_scene(db: Annotated[AsyncSession, Depends(get_db)]) -> dict:
    table = await table_mod.get_table(db)
    scene = table_mod.scene_of(table)
    actor = await table_mod.current_actor(db)
    return {
        "scene": scene.model_dump(mode="json") if scene is not None else None,
        "sim_mode": table.sim_mode,
        "active_index": table.active_index,
        "actor": actor.model_dump(mode="json") if actor is not None else None,
    }


@router.post("/scene/begin")
async def begin_scene(db: Annotated[AsyncSession, Depends(get_db)]) -> dict:
    result = await table_mod.begin_scene(db)
    if not result.success:
        raise HTTPException(status_code=409, detail=result.error)
    return result.model_dump()


@router.get("/scene/choices")
async def get_choices(db: Annotated[AsyncSession, Depends(get_db)]) -> list[dict]:
    choices = await table_mod.current_choices(db)
    return [c.model_dump(mode="json") for c in choices]


@router.post("/scene/advance")
async def advance(
    db: Annotated[AsyncSession, Depends(get_db)],
    body: AdvanceRequest | None = None,
) -> dict:
    """Resolve one beat.

    Recoverable problems (no scene, empty roster, unknown choice) come back
    as ``success: false`` with an ``error_code``; nothing is changed.
    """
    choice = None
    if body is not None:
        choice = body.choice
        if body.choice_index is not None:
            choices = await table_mod.current_choices(db)
            if not 0 <= body.choice_index < len(choices):
                raise HTTPException(status_code=400, detail="choice_index out of range")
            choice = choices[body.choice_index]
    result = await table_mod.advance_beat(db, choice)
    return result.model_dump()


@router.post("/scene/end")
async def end_scene(db: Annotated[AsyncSession, Depends(get_db)]) -> dict:
    result = await table_mod.end_scene(db)
    return result.model_dump()


@router.put("/mode")
async def set_mode(
    mode: table_mod.SimMode,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    new_mode = await table_mod.set_mode(db, mode)
    return {"sim_mode": new_mode.value}

"""Sheet API — roster, parts, session log and save data."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from trsim.domain import log as log_mod, roster, save, table as table_mod
from trsim.domain.character import OPTIONS, Character, Temperament, Trust
from trsim.infra.db import get_db

router = APIRouter(prefix="/api/sheet", tags=["sheet"])


# --- Request schemas ---


class CreateCharacterRequest(BaseModel):
    name: str | None = None
    position: str | None = None
    class_type: str | None = None
    reinforce_type: str | None = None
    reinforce_text: str | None = None
    treasure: str | None = None
    treasure_intact: bool | None = None
    temperament: Temperament | None = None
    speech: str | None = None
    trust: Trust | None = None
    madness: int | None = None


# --- Characters ---


@router.get("/options")
async def get_options() -> dict:
    return OPTIONS


@router.get("/characters")
async def list_characters(db: Annotated[AsyncSession, Depends(get_db)]) -> list[dict]:
    return [c.model_dump(mode="json") for c in await roster.list_characters(db)]


@router.post("/characters")
async def create_character(
    db: Annotated[AsyncSession, Depends(get_db)],
    body: CreateCharacterRequest | None = None,
) -> dict:
    character = None
    if body is not None:
        fields = body.model_dump(exclude_none=True)
        if fields:
            if "name" not in fields:
                fields["name"] = f"Character {await roster.count_characters(db) + 1}"
            try:
                character = Character(**fields)
            except ValidationError as e:
                raise HTTPException(status_code=422, detail=e.errors(include_url=False))
    character = await table_mod.add_character(db, character)
    return character.model_dump(mode="json")


@router.get("/characters/{character_id}")
async def get_character(
    character_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    character = await roster.get_character(db, character_id)
    if character is None:
        raise HTTPException(status_code=404, detail="Character not found")
    return character.model_dump(mode="json")


@router.patch("/characters/{character_id}")
async def update_character(
    character_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    patch: Annotated[dict[str, Any], Body()],
) -> dict:
    try:
        character = await roster.update_character(db, character_id, patch)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False))
    except ValueError as e:
        status = 404 if "not found" in str(e) else 400
        raise HTTPException(status_code=status, detail=str(e))
    return character.model_dump(mode="json")


@router.delete("/characters/{character_id}")
async def delete_character(
    character_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    try:
        removed = await table_mod.remove_character(db, character_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"removed": removed.id}


# --- Parts ---


@router.get("/parts")
async def get_parts(db: Annotated[AsyncSession, Depends(get_db)]) -> dict:
    table = await table_mod.get_table(db)
    return table_mod.parts_of(table).model_dump(mode="json")


@router.post("/parts/{key}/toggle")
async def toggle_part(key: str, db: Annotated[AsyncSession, Depends(get_db)]) -> dict:
    try:
        parts = await table_mod.toggle_part(db, key)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return parts.model_dump(mode="json")


@router.get("/summary")
async def get_summary(db: Annotated[AsyncSession, Depends(get_db)]) -> dict:
    return await table_mod.summary(db)


# --- Session log ---


@router.get("/log")
async def get_log(
    db: Annotated[AsyncSession, Depends(get_db)],
    limit: int | None = None,
) -> list[dict]:
    return [log_mod.entry_to_dict(e) for e in await log_mod.get_log(db, limit)]


@router.delete("/log")
async def clear_log(db: Annotated[AsyncSession, Depends(get_db)]) -> dict:
    await log_mod.clear_log(db)
    return {"cleared": True}


# --- Save data ---


@router.get("/export")
async def export_save(db: Annotated[AsyncSession, Depends(get_db)]) -> dict:
    data = await save.export_save(db)
    return data.model_dump()


@router.post("/import")
async def import_save(
    db: Annotated[AsyncSession, Depends(get_db)],
    payload: Annotated[dict | str, Body()],
) -> dict:
    result = await save.import_save(db, payload)
    if not result.success:
        raise HTTPException(status_code=400, detail=result.error)
    return result.model_dump()


@router.post("/reset")
async def reset(db: Annotated[AsyncSession, Depends(get_db)]) -> dict:
    result = await save.reset_all(db)
    return result.model_dump()

"""Character roster: CRUD over the persisted sheets."""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from trsim.domain.character import Character, make_character
from trsim.models.db_models import CharacterRow

_FIELDS = [name for name in Character.model_fields if name != "id"]


def row_to_character(row: CharacterRow) -> Character:
    return Character.model_validate({
        "id": row.id,
        **{name: getattr(row, name) for name in _FIELDS},
    })


def _apply(row: CharacterRow, character: Character) -> None:
    data = character.model_dump(mode="json")
    for name in _FIELDS:
        setattr(row, name, data[name])


async def list_rows(db: AsyncSession) -> list[CharacterRow]:
    result = await db.execute(
        select(CharacterRow).order_by(CharacterRow.sort_order, CharacterRow.created_at)
    )
    return list(result.scalars().all())


async def list_characters(db: AsyncSession) -> list[Character]:
    return [row_to_character(row) for row in await list_rows(db)]


async def get_character(db: AsyncSession, character_id: str) -> Character | None:
    row = await db.get(CharacterRow, character_id)
    return row_to_character(row) if row is not None else None


async def add_character(db: AsyncSession, character: Character | None = None) -> Character:
    """Put a character at the top of the roster.

    Without an explicit character a default sheet named "Character N" is
    created, N being the roster size after the addition.
    """
    if character is None:
        size = await count_characters(db)
        character = make_character(name=f"Character {size + 1}")

    result = await db.execute(select(func.min(CharacterRow.sort_order)))
    lowest = result.scalar_one()
    row = CharacterRow(id=character.id, sort_order=(lowest - 1) if lowest is not None else 0)
    _apply(row, character)
    db.add(row)
    await db.flush()
    return character


async def count_characters(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(CharacterRow))
    return result.scalar_one()


async def update_character(
    db: AsyncSession, character_id: str, patch: dict[str, Any]
) -> Character:
    """Apply a partial edit; the merged sheet is re-validated."""
    row = await db.get(CharacterRow, character_id)
    if row is None:
        raise ValueError(f"Character {character_id} not found")
    if "id" in patch and patch["id"] != character_id:
        raise ValueError("Character id cannot be changed")

    merged = row_to_character(row).model_dump(mode="json") | patch
    character = Character.model_validate(merged)
    _apply(row, character)
    await db.flush()
    return character


async def save_character(db: AsyncSession, character: Character) -> None:
    """Write back an engine-updated copy of an existing character."""
    row = await db.get(CharacterRow, character.id)
    if row is None:
        raise ValueError(f"Character {character.id} not found")
    _apply(row, character)
    await db.flush()


async def remove_character(db: AsyncSession, character_id: str) -> Character:
    row = await db.get(CharacterRow, character_id)
    if row is None:
        raise ValueError(f"Character {character_id} not found")
    character = row_to_character(row)
    await db.delete(row)
    await db.flush()
    return character


async def replace_roster(db: AsyncSession, characters: list[Character]) -> None:
    """Drop the roster and store ``characters`` in the given order."""
    for row in await list_rows(db):
        await db.delete(row)
    await db.flush()
    for index, character in enumerate(characters):
        row = CharacterRow(id=character.id, sort_order=index)
        _apply(row, character)
        db.add(row)
    await db.flush()

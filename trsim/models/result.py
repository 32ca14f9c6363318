"""Engine result schemas returned to the sheet and API layers."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class LogCategory(str, Enum):
    SYSTEM = "system"
    PARTS = "parts"
    CHARACTER = "character"
    SCENE = "scene"
    OUTCOME = "outcome"
    SAVE = "save"


class StateChange(BaseModel):
    entity_type: str  # "character", "parts", "scene"
    entity_id: str
    field: str
    old_value: str | None = None
    new_value: str | None = None


class RollResultSchema(BaseModel):
    notation: str
    count: int
    sides: int
    rolls: list[int]
    modifier: int
    total: int


class EngineResult(BaseModel):
    success: bool
    event_type: str
    data: dict = {}
    narrative: str | None = None
    state_changes: list[StateChange] = []
    error: str | None = None

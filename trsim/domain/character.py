"""Character sheet and equipment parts: shapes, factory, part transitions."""

from __future__ import annotations

import logging
import math
import uuid
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, RootModel, ValidationError, model_validator

logger = logging.getLogger("trsim.character")

MADNESS_MIN = 0
MADNESS_MAX = 10


def _uuid() -> str:
    return uuid.uuid4().hex


class Trust(str, Enum):
    TRUSTING = "trusting"
    FRIENDLY = "friendly"
    NEUTRAL = "neutral"
    GUARDED = "guarded"
    HOSTILE = "hostile"


class Temperament(str, Enum):
    APATHETIC = "apathetic"
    CYNICAL = "cynical"
    OBSESSIVE = "obsessive"
    MANIC = "manic"
    DEVOTED = "devoted"
    UNSTABLE = "unstable"
    INNOCENT = "innocent"
    CRUEL = "cruel"
    OTHER = "other"


# Descriptive option pools offered by the sheet editor.
OPTIONS: dict[str, list[str]] = {
    "position": ["Alice", "Holic", "Automaton", "Junk", "Court", "Sorority"],
    "class_type": [
        "Stacy", "Thanatos", "Gothic", "Requiem", "Baroque", "Romanesque",
        "Psychedelic",
    ],
    "reinforce_type": ["Weapons", "Enhancements", "Mutations"],
    "treasure": [
        "Photo", "Book", "Undead Pet", "Broken Piece", "Mirror", "Doll",
        "Stuffed Toy", "Accessory", "Basket", "Cute Clothes",
    ],
    "speech": ["Polite", "Casual", "Blunt", "Languid", "Quiet", "Other"],
    "temperament": [t.value for t in Temperament],
    "trust": [t.value for t in Trust],
}


class Character(BaseModel):
    """One roster entry. Only ``madness`` and ``treasure_intact`` change during play."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_uuid)
    name: str = "Character"

    position: str = "Alice"
    class_type: str = "Stacy"
    reinforce_type: str = "Weapons"
    reinforce_text: str = ""

    treasure: str = "Photo"
    treasure_intact: bool = True

    temperament: Temperament = Temperament.APATHETIC
    speech: str = "Blunt"
    trust: Trust = Trust.NEUTRAL

    madness: int = Field(default=0, ge=MADNESS_MIN, le=MADNESS_MAX)


def make_character(**overrides: Any) -> Character:
    return Character(**overrides)


_LEGACY_KEYS = {
    "classType": "class_type",
    "reinforceType": "reinforce_type",
    "reinforceText": "reinforce_text",
    "treasureIntact": "treasure_intact",
}


def normalize_character(raw: dict[str, Any]) -> Character:
    """Build a Character from possibly incomplete or older saved data.

    camelCase keys from older exports are accepted. Missing fields take
    defaults, a non-numeric madness becomes 0 and an out-of-range one is
    clamped. Unknown trust or temperament tags fall back to defaults, and
    so does any other field whose value has the wrong type.
    """
    data: dict[str, Any] = {}
    for key, value in raw.items():
        key = _LEGACY_KEYS.get(key, key)
        if key in Character.model_fields and value is not None:
            data[key] = value

    madness = data.get("madness", 0)
    if isinstance(madness, bool) or not isinstance(madness, (int, float)) or not math.isfinite(madness):
        madness = 0
    data["madness"] = max(MADNESS_MIN, min(MADNESS_MAX, int(madness)))

    if data.get("trust") not in {t.value for t in Trust}:
        data.pop("trust", None)
    if data.get("temperament") not in {t.value for t in Temperament}:
        data.pop("temperament", None)

    try:
        return Character(**data)
    except ValidationError as e:
        bad = {err["loc"][0] for err in e.errors() if err["loc"]}
        logger.warning("Saved character has invalid fields %s; using defaults", sorted(bad))
        return Character(**{k: v for k, v in data.items() if k not in bad})


# --- Parts ---


class PartKey(str, Enum):
    HEAD = "head"
    BODY = "body"
    ARM_L = "armL"
    ARM_R = "armR"
    LEG_L = "legL"
    LEG_R = "legR"


PART_KEYS: tuple[PartKey, ...] = tuple(PartKey)

PART_NAMES: dict[PartKey, str] = {
    PartKey.HEAD: "head",
    PartKey.BODY: "body",
    PartKey.ARM_L: "left arm",
    PartKey.ARM_R: "right arm",
    PartKey.LEG_L: "left leg",
    PartKey.LEG_R: "right leg",
}


class PartState(str, Enum):
    OK = "ok"
    DAMAGED = "damaged"
    BROKEN = "broken"

    @property
    def label(self) -> str:
        return {"ok": "intact", "damaged": "damaged", "broken": "broken"}[self.value]


class PartsState(RootModel[dict[PartKey, PartState]]):
    """Equipment state for all six body parts; every key is always present."""

    model_config = ConfigDict(frozen=True)

    root: dict[PartKey, PartState] = Field(
        default_factory=lambda: {k: PartState.OK for k in PART_KEYS}
    )

    @model_validator(mode="before")
    @classmethod
    def _fill_missing(cls, data: Any) -> Any:
        if data is None:
            return {k: PartState.OK for k in PART_KEYS}
        if isinstance(data, dict):
            unknown = set(data) - {k.value for k in PART_KEYS} - set(PART_KEYS)
            if unknown:
                raise ValueError(f"Unknown part keys: {sorted(map(str, unknown))}")
            filled: dict[Any, Any] = {k: PartState.OK for k in PART_KEYS}
            for key, state in data.items():
                filled[PartKey(key)] = state
            return filled
        return data

    def __getitem__(self, key: PartKey | str) -> PartState:
        return self.root[PartKey(key)]

    def with_state(self, key: PartKey | str, state: PartState) -> PartsState:
        updated = dict(self.root)
        updated[PartKey(key)] = state
        return PartsState(updated)

    def bumped(self, key: PartKey | str) -> PartsState:
        """Advance one step Ok -> Damaged -> Broken; Broken stays Broken."""
        return self.with_state(key, bump_part_state(self[key]))

    def toggled(self, key: PartKey | str) -> PartsState:
        """Manual sheet toggle Ok -> Damaged -> Broken -> Ok (wraps)."""
        return self.with_state(key, toggle_part_state(self[key]))

    def count(self, state: PartState) -> int:
        return sum(1 for s in self.root.values() if s is state)

    @property
    def injury(self) -> int:
        return self.count(PartState.BROKEN) * 2 + self.count(PartState.DAMAGED)


def bump_part_state(state: PartState) -> PartState:
    if state is PartState.OK:
        return PartState.DAMAGED
    return PartState.BROKEN


def toggle_part_state(state: PartState) -> PartState:
    if state is PartState.OK:
        return PartState.DAMAGED
    if state is PartState.DAMAGED:
        return PartState.BROKEN
    return PartState.OK

"""Candidate actions offered at each beat of a scene."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from trsim.infra.rng import RandomSource, pick


class CheckType(str, Enum):
    INVESTIGATE = "investigate"
    NEGOTIATE = "negotiate"
    ACT = "act"
    FIGHT = "fight"
    MENTAL = "mental"


RISK_BY_TYPE: dict[CheckType, int] = {
    CheckType.INVESTIGATE: 0,
    CheckType.NEGOTIATE: 0,
    CheckType.ACT: 1,
    CheckType.MENTAL: 1,
    CheckType.FIGHT: 2,
}

LABELS: dict[CheckType, list[str]] = {
    CheckType.INVESTIGATE: [
        "Search the surroundings",
        "Follow the traces",
        "Recover a clue",
    ],
    CheckType.NEGOTIATE: [
        "Probe their intentions",
        "Close the distance",
        "Persuade with a lie or two",
    ],
    CheckType.ACT: [
        "Move quietly",
        "Dive for cover",
        "Look for a way around",
    ],
    CheckType.FIGHT: [
        "Strike first",
        "Fall back under pressure",
        "Break through at any cost",
    ],
    CheckType.MENTAL: [
        "Steady your breathing",
        "Hold on to a memory",
        "Focus on your fingertips",
    ],
}


class Choice(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    check_type: CheckType
    risk_level: int = Field(ge=0, le=2)


def types_for_beat(beat: int) -> tuple[CheckType, ...]:
    if beat <= 1:
        return (CheckType.INVESTIGATE, CheckType.ACT, CheckType.NEGOTIATE)
    if beat == 2:
        return (CheckType.MENTAL, CheckType.INVESTIGATE, CheckType.ACT)
    return (CheckType.FIGHT, CheckType.ACT, CheckType.MENTAL)


def choices_for_beat(beat: int, rng: RandomSource) -> list[Choice]:
    """Three candidates in generation order, one label drawn per type."""
    return [
        Choice(
            label=pick(rng, LABELS[check_type]),
            check_type=check_type,
            risk_level=RISK_BY_TYPE[check_type],
        )
        for check_type in types_for_beat(beat)
    ]

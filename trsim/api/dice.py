"""Dice API — parse and roll dice notation."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from trsim.infra.rng import make_rng
from trsim.models.result import RollResultSchema
from trsim.modules.dice.parser import DiceParseError, parse_dice_notation
from trsim.modules.dice.roller import roll_dice

router = APIRouter(prefix="/api/dice", tags=["dice"])

_rng = make_rng()


class DiceRequest(BaseModel):
    expression: str
    seed: int | None = None  # replay a roll deterministically


def _parse_or_422(expression: str):
    try:
        return parse_dice_notation(expression)
    except DiceParseError as e:
        raise HTTPException(
            status_code=422,
            detail={"text": e.text, "reason": e.reason, "hint": e.hint},
        )


@router.post("/parse")
async def parse(body: DiceRequest) -> dict:
    spec = _parse_or_422(body.expression)
    return {
        "count": spec.count,
        "sides": spec.sides,
        "modifier": spec.modifier,
        "notation": spec.notation,
    }


@router.post("/roll")
async def roll(body: DiceRequest) -> RollResultSchema:
    spec = _parse_or_422(body.expression)
    rng = make_rng(body.seed) if body.seed is not None else _rng
    result = roll_dice(spec, rng)
    return RollResultSchema(
        notation=spec.notation,
        count=spec.count,
        sides=result.sides,
        rolls=list(result.rolls),
        modifier=result.modifier,
        total=result.total,
    )

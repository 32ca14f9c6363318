"""Roll executor: draws dice for a DiceSpec from an injected random source."""

from __future__ import annotations

from dataclasses import dataclass

from trsim.infra.rng import RandomSource
from trsim.modules.dice.parser import DiceSpec, parse_dice_notation

D10 = DiceSpec(count=1, sides=10)


@dataclass(frozen=True)
class RollResult:
    rolls: tuple[int, ...]
    sides: int
    modifier: int
    total: int


def roll_dice(spec: DiceSpec, rng: RandomSource) -> RollResult:
    """Roll ``spec.count`` dice in draw order and add the modifier.

    Pure with respect to ``rng``: the same spec and the same random
    outputs always give the same result.
    """
    rolls = tuple(rng.randint(1, spec.sides) for _ in range(spec.count))
    return RollResult(
        rolls=rolls,
        sides=spec.sides,
        modifier=spec.modifier,
        total=sum(rolls) + spec.modifier,
    )


def roll_d10(rng: RandomSource) -> int:
    return roll_dice(D10, rng).total


def roll_expression(text: str, rng: RandomSource) -> RollResult:
    """Convenience: parse + roll in one call."""
    return roll_dice(parse_dice_notation(text), rng)

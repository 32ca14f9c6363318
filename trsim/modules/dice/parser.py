"""Dice notation parser: [count]d<sides>[+-modifier]."""

from __future__ import annotations

import re
from dataclasses import dataclass

from trsim.infra.config import settings

MIN_COUNT = 1
MAX_COUNT = 200
MIN_SIDES = 2
MAX_SIDES = 100000

FORMAT_HINT = "expected [count]d<sides>[+/-modifier], e.g. 2d6+1 or d10"

_DICE_PATTERN = re.compile(
    r"^(\d*)d(\d+)"  # [count]d<sides>
    r"([+-]\d+)?$",  # optional +X or -X
    re.IGNORECASE,
)


class DiceParseError(ValueError):
    """Malformed or out-of-range dice notation."""

    def __init__(self, text: str, reason: str, hint: str = FORMAT_HINT) -> None:
        self.text = text
        self.reason = reason
        self.hint = hint
        super().__init__(f"Invalid dice notation {text!r}: {reason} ({hint})")


@dataclass(frozen=True)
class DiceSpec:
    """A validated dice specification, consumed once by the roller."""

    count: int
    sides: int
    modifier: int = 0

    def __post_init__(self) -> None:
        if not MIN_COUNT <= self.count <= MAX_COUNT:
            raise ValueError(f"count must be in [{MIN_COUNT}, {MAX_COUNT}], got {self.count}")
        if not MIN_SIDES <= self.sides <= MAX_SIDES:
            raise ValueError(f"sides must be in [{MIN_SIDES}, {MAX_SIDES}], got {self.sides}")

    @property
    def notation(self) -> str:
        """Canonical text: explicit count, signed modifier, omitted when zero."""
        text = f"{self.count}d{self.sides}"
        if self.modifier:
            text += f"{self.modifier:+d}"
        return text

    def __str__(self) -> str:
        return self.notation


def parse_dice_notation(
    text: str,
    max_count: int | None = None,
    max_sides: int | None = None,
) -> DiceSpec:
    """Parse a dice notation string into a DiceSpec.

    Supported formats:
        NdM        - e.g. 2d6
        NdM+X      - e.g. 2d6+3
        NdM-X      - e.g. 2d6-2
        dM         - e.g. d10 (shorthand for 1dM)

    Matching is case-insensitive and ignores any whitespace. The upper
    bounds default to the configured limits and can only tighten the
    canonical 200 dice / 100000 sides.

    Raises:
        DiceParseError: If the text is malformed or out of range.
    """
    if max_count is None:
        max_count = settings.dice_max_count
    if max_sides is None:
        max_sides = settings.dice_max_sides
    max_count = min(max_count, MAX_COUNT)
    max_sides = min(max_sides, MAX_SIDES)

    compact = re.sub(r"\s+", "", text or "")
    if not compact:
        raise DiceParseError(text, "empty expression")

    match = _DICE_PATTERN.match(compact)
    if match is None:
        raise DiceParseError(text, "unrecognized format")

    count_str, sides_str, mod_str = match.groups()
    try:
        count = int(count_str) if count_str else 1
        sides = int(sides_str)
        modifier = int(mod_str) if mod_str else 0
    except ValueError:
        # digit runs past the interpreter's int conversion limit
        raise DiceParseError(text, "number too large") from None

    if not MIN_COUNT <= count <= max_count:
        raise DiceParseError(text, f"dice count must be between {MIN_COUNT} and {max_count}")
    if not MIN_SIDES <= sides <= max_sides:
        raise DiceParseError(text, f"sides must be between {MIN_SIDES} and {max_sides}")

    return DiceSpec(count=count, sides=sides, modifier=modifier)


def normalize_notation(text: str) -> str:
    """Parse and re-render in canonical form; idempotent."""
    return parse_dice_notation(text).notation

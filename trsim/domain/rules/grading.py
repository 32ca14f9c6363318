"""Outcome grades for a single d10 check."""

from __future__ import annotations

from enum import Enum

from trsim.domain.rules.choices import CheckType

D10_MIN = 1
D10_MAX = 10


class Grade(str, Enum):
    SUCCESS = "success"
    PARTIAL_SUCCESS = "partial_success"
    FAILURE = "failure"
    CATASTROPHE = "catastrophe"


def grade_from_value(value: int) -> Grade:
    """8-10 success, 5-7 partial, 2-4 failure, 1 catastrophe."""
    if value >= 8:
        return Grade.SUCCESS
    if value >= 5:
        return Grade.PARTIAL_SUCCESS
    if value >= 2:
        return Grade.FAILURE
    return Grade.CATASTROPHE


def clamp(value: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, value))


def adjust_roll(raw: int, check_type: CheckType, treasure_intact: bool) -> int:
    """Apply the situational modifier and clamp to the d10 range.

    Only mental checks are adjusted: +1 while the treasure is intact,
    -1 once it is lost.
    """
    if check_type is CheckType.MENTAL:
        raw += 1 if treasure_intact else -1
    return clamp(raw, D10_MIN, D10_MAX)

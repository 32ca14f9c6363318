"""Random source used by every engine operation.

The engine never touches the ``random`` module globals. Callers pass an
object exposing ``randint`` and ``random`` (a ``random.Random`` instance
satisfies this), so tests can supply a scripted sequence instead.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from typing import Protocol, TypeVar

from trsim.infra.config import settings

T = TypeVar("T")


class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int: ...

    def random(self) -> float: ...


def pick(rng: RandomSource, items: Sequence[T]) -> T:
    """Pick one element uniformly using only ``randint``."""
    if not items:
        raise ValueError("Cannot pick from an empty sequence")
    return items[rng.randint(0, len(items) - 1)]


def make_rng(seed: int | None = None) -> random.Random:
    """Build the service-level random source, seeded from settings if configured."""
    if seed is None:
        seed = settings.rng_seed
    return random.Random(seed)

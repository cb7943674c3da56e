"""Injected random source for the combat engine."""

from __future__ import annotations

import random
from collections.abc import Callable, MutableSequence, Sequence
from dataclasses import dataclass, field
from typing import TypeVar

T = TypeVar("T")


@dataclass
class Rng:
    """Single random source shared by every roll in a combat.

    The engine only needs a uniform draw in [0, 1). Hosts pass their own
    `draw` function for replays, or use `Rng.seeded()` for a reproducible
    generator. Move selection, target sampling and shuffles all go through
    `roll()` so one draw sequence fully determines a combat.

    Usage:
        rng = Rng.seeded(42)
        r = rng.roll()             # float in [0.0, 1.0)
        i = rng.choice_index(3)    # 0, 1 or 2
        rng.shuffle(cards)         # in place
    """

    draw: Callable[[], float] = field(default_factory=lambda: random.Random().random)

    @classmethod
    def seeded(cls, seed: int) -> Rng:
        """Create a reproducible generator."""
        return cls(draw=random.Random(seed).random)

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> Rng:
        """Replay a fixed list of draws, cycling when exhausted."""
        if not values:
            raise ValueError("values must not be empty")
        state = {"index": 0}

        def draw() -> float:
            value = values[state["index"] % len(values)]
            state["index"] += 1
            return value

        return cls(draw=draw)

    def roll(self) -> float:
        """Return a float in [0.0, 1.0)."""
        return self.draw()

    def uniform(self, upper: float) -> float:
        """Return a float in [0.0, upper)."""
        return self.roll() * upper

    def chance(self, p: float) -> bool:
        """Return True with probability p."""
        if p <= 0:
            return False
        if p >= 1:
            return True
        return self.roll() < p

    def choice_index(self, n: int) -> int:
        """Return a random index in [0, n-1]."""
        if n <= 0:
            raise ValueError("n must be >= 1")
        return min(int(self.roll() * n), n - 1)

    def choice(self, items: Sequence[T]) -> T:
        """Pick one item uniformly."""
        return items[self.choice_index(len(items))]

    def randint(self, a: int, b: int) -> int:
        """Inclusive randint [a, b]."""
        return a + self.choice_index(b - a + 1)

    def shuffle(self, items: MutableSequence[T]) -> None:
        """In-place Fisher-Yates shuffle."""
        for i in range(len(items) - 1, 0, -1):
            j = self.choice_index(i + 1)
            items[i], items[j] = items[j], items[i]

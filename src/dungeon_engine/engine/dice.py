"""Random draws for the turn engine.

Every session owns one DiceRoller wrapping a private ``random.Random``.
Nothing in the engine touches the module-level ``random`` state, so a
seeded session replays identically regardless of what else runs in the
process.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from typing import TypeVar

from dungeon_engine.core.exceptions import DiceRollError
from dungeon_engine.core.logging import get_logger


logger = get_logger(__name__)

T = TypeVar("T")


class DiceRoller:
    """Session-local source of randomness.

    Example:
        >>> roller = DiceRoller(seed=7)
        >>> 5 <= roller.roll_range(5, 20) <= 20
        True
    """

    def __init__(self, *, seed: int | None = None, rng: random.Random | None = None) -> None:
        """Initialize the dice roller.

        Args:
            seed: Optional seed for reproducible sessions.
            rng: Explicit generator to draw from. Takes precedence over
                ``seed``; used by tests to script outcomes.
        """
        self._seed = seed
        self._rng = rng if rng is not None else random.Random(seed)
        logger.debug("DiceRoller initialized", seed=seed, scripted=rng is not None)

    @property
    def seed(self) -> int | None:
        return self._seed

    def roll_range(self, low: int, high: int) -> int:
        """Draw an integer uniformly from ``[low, high]`` inclusive.

        Raises:
            DiceRollError: If ``low > high``.
        """
        if low > high:
            raise DiceRollError(
                f"Invalid range: low ({low}) exceeds high ({high})",
                low=low,
                high=high,
            )
        return self._rng.randint(low, high)

    def chance(self, probability: float) -> bool:
        """Return True with the given probability.

        Raises:
            DiceRollError: If ``probability`` is outside ``[0, 1]``.
        """
        if not 0.0 <= probability <= 1.0:
            raise DiceRollError(
                f"Probability must be within [0, 1], got {probability}",
                low=0.0,
                high=1.0,
            )
        return self._rng.random() < probability

    def choice(self, options: Sequence[T]) -> T:
        """Pick one element uniformly.

        Raises:
            DiceRollError: If ``options`` is empty.
        """
        if not options:
            raise DiceRollError("Cannot choose from an empty sequence")
        return self._rng.choice(options)

    def sample(self, population: Sequence[T], count: int) -> list[T]:
        """Pick ``count`` distinct elements.

        Raises:
            DiceRollError: If ``count`` exceeds the population size.
        """
        if count < 0 or count > len(population):
            raise DiceRollError(
                f"Cannot sample {count} from {len(population)} options",
                low=0,
                high=len(population),
            )
        return self._rng.sample(list(population), count)


__all__ = [
    "DiceRoller",
]

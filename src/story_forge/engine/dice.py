"""Seeded percentile rolls for combat resolution.

Every encounter owns one :class:`PercentileRoller`. The roller wraps a
private ``random.Random`` instance rather than the module-level generator,
so concurrent encounters never share state and the same seed always
replays the same sequence of rolls.
"""

from __future__ import annotations

import random
import secrets
from dataclasses import dataclass

from story_forge.core.logging import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class PercentileRoll:
    """A d100 roll checked against a percentage.

    Attributes:
        roll: The rolled value, 1 to 100.
        chance: The percentage the roll had to meet.
    """

    roll: int
    chance: int

    @property
    def success(self) -> bool:
        """Check if the roll met the chance.

        Returns:
            True when roll <= chance; a chance of 0 never succeeds.
        """
        return self.roll <= self.chance


class PercentileRoller:
    """Deterministic d100 roller.

    Args:
        seed: Seed for the private generator; a random 32-bit seed when None.

    Example:
        >>> roller = PercentileRoller(seed=7)
        >>> roller.check(100).success
        True
    """

    def __init__(self, seed: int | None = None) -> None:
        self.seed = seed if seed is not None else secrets.randbits(32)
        self._rng = random.Random(self.seed)

    def roll(self) -> int:
        """Roll 1 to 100 inclusive."""
        return self._rng.randint(1, 100)

    def check(self, chance: int) -> PercentileRoll:
        """Roll against a percentage.

        Args:
            chance: Success percentage; values outside 0..100 behave as the nearest bound.

        Returns:
            The roll and the chance it was checked against.
        """
        result = PercentileRoll(roll=self.roll(), chance=chance)
        logger.debug("Percentile roll", roll=result.roll, chance=chance, success=result.success)
        return result


__all__ = [
    "PercentileRoll",
    "PercentileRoller",
]

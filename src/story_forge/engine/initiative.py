"""Turn order for combat rounds.

Order is a total order over living entities: higher initiative acts first,
ties go to the higher effective speed, and remaining ties to the lower id.
It is recomputed at the start of every round, so entities that fell drop
out and speed changes from status effects take effect next round.
"""

from __future__ import annotations

from collections.abc import Iterable

from story_forge.models.combat import CombatEntity
from story_forge.models.enums import StatusStat


def initiative_key(entity: CombatEntity) -> tuple[int, int, str]:
    """Sort key placing earlier actors first."""
    return (-entity.initiative, -entity.effective(StatusStat.SPEED), entity.id)


def initiative_order(entities: Iterable[CombatEntity]) -> tuple[str, ...]:
    """Compute the acting order of a round.

    Args:
        entities: All combatants; fallen ones are skipped.

    Returns:
        Entity ids in acting order.

    Example:
        >>> [(e.id, e.initiative, e.speed) for e in roster]
        [('cleric', 5, 9), ('rogue', 10, 14), ('knight', 10, 11)]
        >>> initiative_order(roster)
        ('rogue', 'knight', 'cleric')
    """
    living = [entity for entity in entities if entity.is_alive]
    return tuple(entity.id for entity in sorted(living, key=initiative_key))


__all__ = [
    "initiative_key",
    "initiative_order",
]

"""Victory and defeat evaluation.

Conditions are evaluated once per round, after every entity has acted and
end-of-round effects have ticked. Defeat conditions are checked first; a
triggered defeat suppresses victory for that round, so an encounter never
ends in both.

When no declared condition fires but one side has no living entity left,
the encounter still ends: a wiped player side is a defeat and a wiped
enemy side is a victory.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from story_forge.models.combat import CombatEntity, DefeatCondition, VictoryCondition
from story_forge.models.enums import CombatOutcome, DefeatKind, EntityType, VictoryKind


@dataclass(frozen=True)
class ConditionCheck:
    """Conditions with updated flags plus the resulting outcome."""

    victory_conditions: tuple[VictoryCondition, ...]
    defeat_conditions: tuple[DefeatCondition, ...]
    outcome: CombatOutcome


def _dead(entities: dict[str, CombatEntity], entity_id: str | None) -> bool:
    entity = entities.get(entity_id) if entity_id else None
    return entity is None or not entity.is_alive


def _all_down(entities: dict[str, CombatEntity], *types: EntityType) -> bool:
    return not any(e.is_alive for e in entities.values() if e.entity_type in types)


def _player_death(condition: DefeatCondition, entities: dict[str, CombatEntity], round_number: int) -> bool:
    players = [e for e in entities.values() if e.entity_type is EntityType.PLAYER]
    return bool(players) and not any(e.is_alive for e in players)


def _ally_death(condition: DefeatCondition, entities: dict[str, CombatEntity], round_number: int) -> bool:
    if condition.target_id:
        return _dead(entities, condition.target_id)
    return any(not e.is_alive for e in entities.values() if e.entity_type is EntityType.ALLY)


def _time_limit(condition: DefeatCondition, entities: dict[str, CombatEntity], round_number: int) -> bool:
    return condition.rounds is not None and round_number >= condition.rounds


def _objective_failed(condition: DefeatCondition, entities: dict[str, CombatEntity], round_number: int) -> bool:
    return condition.target_id is not None and _dead(entities, condition.target_id)


def _enemies_defeated(condition: VictoryCondition, entities: dict[str, CombatEntity], round_number: int) -> bool:
    return _all_down(entities, EntityType.ENEMY)


def _survived(condition: VictoryCondition, entities: dict[str, CombatEntity], round_number: int) -> bool:
    return condition.rounds is not None and round_number >= condition.rounds


def _target_protected(condition: VictoryCondition, entities: dict[str, CombatEntity], round_number: int) -> bool:
    return _all_down(entities, EntityType.ENEMY) and not _dead(entities, condition.target_id)


# Custom conditions are narrative only and never fire on their own
DEFEAT_CHECKS: dict[DefeatKind, Callable[[DefeatCondition, dict[str, CombatEntity], int], bool]] = {
    DefeatKind.PLAYER_DEATH: _player_death,
    DefeatKind.ALLY_DEATH: _ally_death,
    DefeatKind.TIME_LIMIT: _time_limit,
    DefeatKind.OBJECTIVE_FAILED: _objective_failed,
}

VICTORY_CHECKS: dict[VictoryKind, Callable[[VictoryCondition, dict[str, CombatEntity], int], bool]] = {
    VictoryKind.DEFEAT_ALL_ENEMIES: _enemies_defeated,
    VictoryKind.SURVIVE_N_ROUNDS: _survived,
    VictoryKind.PROTECT_TARGET: _target_protected,
}


def _defeat_fires(condition: DefeatCondition, entities: dict[str, CombatEntity], round_number: int) -> bool:
    check = DEFEAT_CHECKS.get(condition.kind)
    return check is not None and check(condition, entities, round_number)


def _victory_fires(condition: VictoryCondition, entities: dict[str, CombatEntity], round_number: int) -> bool:
    check = VICTORY_CHECKS.get(condition.kind)
    return check is not None and check(condition, entities, round_number)


def evaluate_conditions(
    entities: Sequence[CombatEntity],
    victory_conditions: Sequence[VictoryCondition],
    defeat_conditions: Sequence[DefeatCondition],
    round_number: int,
) -> ConditionCheck:
    """Evaluate every condition against the end-of-round state.

    Args:
        entities: All combatants, fallen included.
        victory_conditions: Declared ways to win.
        defeat_conditions: Declared ways to lose.
        round_number: The round just completed; 0 before the first round.

    Returns:
        Conditions with their completed/triggered flags set and the outcome.
    """
    by_id = {entity.id: entity for entity in entities}

    defeats = tuple(
        condition.model_copy(update={"triggered": True})
        if not condition.triggered and _defeat_fires(condition, by_id, round_number)
        else condition
        for condition in defeat_conditions
    )
    if any(condition.triggered for condition in defeats):
        return ConditionCheck(tuple(victory_conditions), defeats, CombatOutcome.DEFEAT)

    victories = tuple(
        condition.model_copy(update={"completed": True})
        if not condition.completed and _victory_fires(condition, by_id, round_number)
        else condition
        for condition in victory_conditions
    )
    if any(condition.completed for condition in victories):
        return ConditionCheck(victories, defeats, CombatOutcome.VICTORY)

    if _all_down(by_id, EntityType.PLAYER, EntityType.ALLY):
        return ConditionCheck(victories, defeats, CombatOutcome.DEFEAT)
    if _all_down(by_id, EntityType.ENEMY):
        return ConditionCheck(victories, defeats, CombatOutcome.VICTORY)
    return ConditionCheck(victories, defeats, CombatOutcome.ONGOING)


__all__ = [
    "ConditionCheck",
    "DEFEAT_CHECKS",
    "VICTORY_CHECKS",
    "evaluate_conditions",
]

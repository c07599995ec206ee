"""Combat actions and their recorded outcomes."""

from __future__ import annotations

from dataclasses import dataclass

from story_forge.core.constants import ATTACK_COST, DEFEND_COST, ITEM_COST, SKILL_COST
from story_forge.models.enums import ActionType


ACTION_COSTS: dict[ActionType, int] = {
    ActionType.ATTACK: ATTACK_COST,
    ActionType.SKILL: SKILL_COST,
    ActionType.ITEM: ITEM_COST,
    ActionType.DEFEND: DEFEND_COST,
    ActionType.WAIT: 0,
}
"""Minimum action points needed to take each action."""


@dataclass(frozen=True)
class CombatAction:
    """An action an entity intends to take.

    Attributes:
        actor_id: Entity taking the action.
        action_type: What it does.
        target_id: Target entity for attack, skill and item.
        skill_id: Skill used, for skill actions.
        item_id: Item consumed, for item actions.
    """

    actor_id: str
    action_type: ActionType
    target_id: str | None = None
    skill_id: str | None = None
    item_id: str | None = None

    @classmethod
    def attack(cls, actor_id: str, target_id: str) -> CombatAction:
        return cls(actor_id, ActionType.ATTACK, target_id=target_id)

    @classmethod
    def skill(cls, actor_id: str, target_id: str, skill_id: str) -> CombatAction:
        return cls(actor_id, ActionType.SKILL, target_id=target_id, skill_id=skill_id)

    @classmethod
    def item(cls, actor_id: str, target_id: str, item_id: str) -> CombatAction:
        return cls(actor_id, ActionType.ITEM, target_id=target_id, item_id=item_id)

    @classmethod
    def defend(cls, actor_id: str) -> CombatAction:
        return cls(actor_id, ActionType.DEFEND)

    @classmethod
    def wait(cls, actor_id: str) -> CombatAction:
        return cls(actor_id, ActionType.WAIT)

    @property
    def cost(self) -> int:
        return ACTION_COSTS[self.action_type]


@dataclass(frozen=True)
class ActionRecord:
    """Resolved outcome of one action.

    Attributes:
        round_number: Round the action was taken in.
        action: The action as chosen.
        action_points_spent: Points deducted from the actor.
        hit: Whether an attack or skill landed; None for other actions.
        critical: Whether the hit was critical.
        roll: The d100 hit roll, when one was made.
        hit_chance: The clamped hit percentage, when one applied.
        damage: Health removed from the target.
        healing: Health restored to the target.
        target_health: Target health after the action, when there was a target.
        message: Short narration of the outcome.
    """

    round_number: int
    action: CombatAction
    action_points_spent: int
    hit: bool | None = None
    critical: bool = False
    roll: int | None = None
    hit_chance: int | None = None
    damage: int = 0
    healing: int = 0
    target_health: int | None = None
    message: str = ""


__all__ = [
    "ACTION_COSTS",
    "CombatAction",
    "ActionRecord",
]

"""AI action policy for combat entities.

The policy is a pure function of the acting entity, its living friends and
its living opponents. It walks an ordered chain of rules; the first rule
that proposes an action wins. Target selection is a lookup table keyed by
the entity's priority, so adding a behavior means adding a row, not a
class.

Rule chain, in order:
    1. Retreat: below the risk tolerance threshold, heal with an item or defend.
    2. Guard: defensive entities defend once they have acted this turn.
    3. Support: support entities heal the most wounded friend below half health.
    4. Skill: use a ready skill if the behavior calls for it.
    5. Attack: attack the chosen target.
    6. Wait: nothing affordable or nobody to fight.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from story_forge.core.constants import (
    HEALTHY_TARGET_FRACTION,
    RETREAT_THRESHOLDS,
    SUPPORT_HEAL_THRESHOLD,
)
from story_forge.engine.actions import ACTION_COSTS, CombatAction
from story_forge.models.combat import AIProfile, CombatEntity
from story_forge.models.enums import ActionType, Behavior, Priority, StatusStat


DEFAULT_PROFILE = AIProfile()
"""Profile used for entities without one, such as an unscripted player."""


@dataclass(frozen=True)
class TacticalView:
    """What an entity can see when choosing an action.

    Attributes:
        actor: The entity choosing.
        friends: Living entities on the actor's side, actor excluded.
        opponents: Living entities on the other side.
    """

    actor: CombatEntity
    friends: tuple[CombatEntity, ...]
    opponents: tuple[CombatEntity, ...]

    @property
    def profile(self) -> AIProfile:
        return self.actor.ai_profile or DEFAULT_PROFILE

    def can_afford(self, action_type: ActionType) -> bool:
        return self.actor.action_points >= ACTION_COSTS[action_type]


@dataclass(frozen=True)
class TacticalDecision:
    """A chosen action and the rule that chose it."""

    action: CombatAction
    reason: str


# =============================================================================
# Target Selection
# =============================================================================

TARGET_KEYS: dict[Priority, Callable[[CombatEntity], tuple[float, str]]] = {
    Priority.DAMAGE: lambda e: (e.health, e.id),
    Priority.SURVIVAL: lambda e: (-e.effective(StatusStat.ATTACK), e.id),
    Priority.SUPPORT_ALLIES: lambda e: (-e.effective(StatusStat.ATTACK), e.id),
    Priority.CONTROL: lambda e: (-e.effective(StatusStat.SPEED), e.id),
    Priority.OBJECTIVE: lambda e: (e.effective(StatusStat.DEFENSE), e.id),
}
"""Sort keys per priority; the smallest key is the preferred target.

damage finishes the weakest, survival and support_allies remove the
hardest hitter, control removes the fastest, objective goes for the
softest armor.
"""


def select_target(view: TacticalView) -> CombatEntity | None:
    """Pick the opponent the actor's priority prefers.

    Args:
        view: The actor's view of the battlefield.

    Returns:
        The preferred living opponent, or None if none remain.
    """
    if not view.opponents:
        return None
    return min(view.opponents, key=TARGET_KEYS[view.profile.priority])


# =============================================================================
# Rules
# =============================================================================


def _retreat(view: TacticalView) -> TacticalDecision | None:
    threshold = RETREAT_THRESHOLDS[view.profile.risk_tolerance.value]
    actor = view.actor
    if actor.health_fraction >= threshold:
        return None
    if actor.available_items and view.can_afford(ActionType.ITEM):
        return TacticalDecision(
            CombatAction.item(actor.id, actor.id, actor.available_items[0]),
            "retreat: heal self",
        )
    if view.can_afford(ActionType.DEFEND):
        return TacticalDecision(CombatAction.defend(actor.id), "retreat: defend")
    return None


def _guard(view: TacticalView) -> TacticalDecision | None:
    actor = view.actor
    if view.profile.behavior is not Behavior.DEFENSIVE:
        return None
    if actor.action_points < actor.max_action_points and view.can_afford(ActionType.DEFEND):
        return TacticalDecision(CombatAction.defend(actor.id), "guard after acting")
    return None


def _support(view: TacticalView) -> TacticalDecision | None:
    profile = view.profile
    actor = view.actor
    if profile.behavior is not Behavior.SUPPORT and profile.priority is not Priority.SUPPORT_ALLIES:
        return None
    if not actor.available_items or not view.can_afford(ActionType.ITEM):
        return None
    wounded = [friend for friend in view.friends if friend.health_fraction < SUPPORT_HEAL_THRESHOLD]
    if not wounded:
        return None
    patient = min(wounded, key=lambda e: (e.health_fraction, e.id))
    return TacticalDecision(
        CombatAction.item(actor.id, patient.id, actor.available_items[0]),
        f"support: heal {patient.id}",
    )


def _wants_skill(behavior: Behavior, target: CombatEntity) -> bool:
    if behavior in (Behavior.AGGRESSIVE, Behavior.TACTICAL):
        return True
    return behavior is Behavior.BALANCED and target.health_fraction > HEALTHY_TARGET_FRACTION


def _skill(view: TacticalView) -> TacticalDecision | None:
    actor = view.actor
    target = select_target(view)
    if target is None or not view.can_afford(ActionType.SKILL):
        return None
    if not _wants_skill(view.profile.behavior, target):
        return None
    ready = [skill for skill in actor.available_skills if actor.skill_ready(skill)]
    if not ready:
        return None
    return TacticalDecision(CombatAction.skill(actor.id, target.id, ready[0]), f"skill on {target.id}")


def _attack(view: TacticalView) -> TacticalDecision | None:
    target = select_target(view)
    if target is None or not view.can_afford(ActionType.ATTACK):
        return None
    return TacticalDecision(CombatAction.attack(view.actor.id, target.id), f"attack {target.id}")


RULES: tuple[Callable[[TacticalView], TacticalDecision | None], ...] = (
    _retreat,
    _guard,
    _support,
    _skill,
    _attack,
)


def choose_action(view: TacticalView) -> TacticalDecision:
    """Choose the next action for an AI-controlled entity.

    Args:
        view: The actor's view of the battlefield.

    Returns:
        The first action proposed by the rule chain, or wait.

    Example:
        >>> decision = choose_action(TacticalView(goblin, friends=(), opponents=(hero,)))
        >>> decision.action.action_type
        <ActionType.ATTACK: 'attack'>
    """
    for rule in RULES:
        decision = rule(view)
        if decision is not None:
            return decision
    return TacticalDecision(CombatAction.wait(view.actor.id), "nothing to do")


__all__ = [
    "DEFAULT_PROFILE",
    "TARGET_KEYS",
    "RULES",
    "TacticalView",
    "TacticalDecision",
    "select_target",
    "choose_action",
]

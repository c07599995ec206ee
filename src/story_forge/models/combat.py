"""Pydantic V2 schemas for combat encounters.

This module defines the combat entity model, the battlefield environment,
victory and defeat conditions, and the full combat scenario returned to
callers. Models are immutable; the resolver produces new snapshots with
``model_copy`` instead of mutating.

Models only enforce shape and vocabulary. Numeric bounds are checked by
the pure predicates at the bottom of the module so that an out-of-bound
entity can still be represented, reported, and rejected by the resolver
with a domain error.

Wire format is camelCase (``maxHealth``, ``aiProfile``); Python attribute
names are snake_case and either form is accepted on input.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from story_forge.core.constants import (
    MAX_ACTION_POINTS,
    MAX_CRITICAL_MULTIPLIER,
    MIN_ACTION_POINTS,
    MIN_CRITICAL_MULTIPLIER,
    PERCENT_MAX,
    PERCENT_MIN,
    PLAYER_DEFAULT_ACCURACY,
    PLAYER_DEFAULT_ACTION_POINTS,
    PLAYER_DEFAULT_CRITICAL_CHANCE,
    PLAYER_DEFAULT_CRITICAL_MULTIPLIER,
    PLAYER_DEFAULT_EVASION,
    PLAYER_DEFAULT_SPEED,
    PLAYER_ENTITY_ID,
)
from story_forge.models.enums import (
    Behavior,
    DefeatKind,
    EntityType,
    EnvironmentSize,
    PreferredRange,
    Priority,
    RiskTolerance,
    StatusStat,
    Terrain,
    VictoryKind,
    Visibility,
)


if TYPE_CHECKING:
    from story_forge.models.content import CharacterProfile


class WireModel(BaseModel):
    """Base for frozen models exchanged in camelCase JSON."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self, *, exclude_none: bool = False) -> dict[str, Any]:
        """Dump the model in its camelCase JSON shape.

        Args:
            exclude_none: Omit fields whose value is None.

        Returns:
            JSON-compatible dictionary keyed by wire names.
        """
        return self.model_dump(mode="json", by_alias=True, exclude_none=exclude_none)


# =============================================================================
# Entity Components
# =============================================================================


class StatusEffect(WireModel):
    """Timed modifier attached to an entity.

    Health effects change health once per round when they tick. Effects on
    other stats modify the effective stat while active.

    Attributes:
        name: Display name, also used to replace an effect of the same name.
        remaining_duration: Ticks left, at least 1 while attached.
        magnitude: Signed amount applied to the stat.
        stat: Stat the effect modifies.
    """

    name: str = Field(description="Effect name")
    remaining_duration: int = Field(description="Ticks remaining")
    magnitude: int = Field(default=0, description="Signed stat change")
    stat: StatusStat = Field(default=StatusStat.HEALTH, description="Affected stat")


class AIProfile(WireModel):
    """Decision parameters of an AI-controlled entity."""

    behavior: Behavior = Field(default=Behavior.BALANCED)
    priority: Priority = Field(default=Priority.DAMAGE)
    risk_tolerance: RiskTolerance = Field(default=RiskTolerance.MEDIUM)
    preferred_range: PreferredRange = Field(default=PreferredRange.MELEE)
    special_tactics: tuple[str, ...] = Field(default=())


class CombatEntity(WireModel):
    """A combatant with vitals, combat stats and an action economy.

    Attributes:
        id: Identifier, unique within the encounter roster.
        name: Display name.
        entity_type: Side the entity fights on (wire name ``type``).
        health: Current health, between 0 and max_health.
        max_health: Maximum health, at least 1.
        attack: Raw attack value.
        defense: Raw defense value.
        speed: Speed, the initiative tie-breaker.
        accuracy: Hit percentage before the target's evasion.
        evasion: Percentage subtracted from attacker accuracy.
        critical_chance: Percentage chance that a hit is critical.
        critical_multiplier: Damage multiplier of a critical hit.
        action_points: Points left this round.
        max_action_points: Points restored at round start.
        initiative: Primary turn-order key.
        status_effects: Active timed modifiers.
        available_skills: Skill identifiers the entity may use.
        available_items: Consumable item identifiers the entity carries.
        ai_profile: Decision parameters; None for the player.
        skill_cooldowns: Engine-owned rounds remaining per used skill; not part of the wire shape.
    """

    id: str = Field(description="Roster-unique identifier")
    name: str = Field(description="Display name")
    entity_type: EntityType = Field(alias="type", description="Combat side")
    health: int
    max_health: int
    attack: int
    defense: int
    speed: int
    accuracy: int
    evasion: int
    critical_chance: int
    critical_multiplier: float
    action_points: int
    max_action_points: int
    initiative: int
    status_effects: tuple[StatusEffect, ...] = Field(default=())
    available_skills: tuple[str, ...] = Field(default=())
    available_items: tuple[str, ...] = Field(default=())
    ai_profile: AIProfile | None = Field(default=None)
    skill_cooldowns: dict[str, int] = Field(default_factory=dict, exclude=True)

    @property
    def is_alive(self) -> bool:
        """Check if the entity can still act.

        Returns:
            True while health is above zero.
        """
        return self.health > 0

    @property
    def health_fraction(self) -> float:
        """Current health as a fraction of maximum.

        Returns:
            Value in [0, 1] for a valid entity.
        """
        return self.health / self.max_health if self.max_health > 0 else 0.0

    @property
    def is_player_side(self) -> bool:
        return self.entity_type.is_player_side

    def stat_modifier(self, stat: StatusStat) -> int:
        """Sum the magnitudes of active effects on a stat.

        Args:
            stat: Stat to total.

        Returns:
            Signed total of matching effect magnitudes.
        """
        return sum(effect.magnitude for effect in self.status_effects if effect.stat == stat)

    def effective(self, stat: StatusStat) -> int:
        """Get a stat including active status modifiers, floored at 0.

        Args:
            stat: Any stat other than health.

        Returns:
            Modified stat value.
        """
        base = getattr(self, stat.value)
        return max(0, base + self.stat_modifier(stat))

    def skill_ready(self, skill_id: str) -> bool:
        return skill_id in self.available_skills and self.skill_cooldowns.get(skill_id, 0) == 0


# =============================================================================
# Environment
# =============================================================================


class AmbientEffect(WireModel):
    """Battlefield effect applied to every living entity each round.

    Attributes:
        id: Identifier, unique within the environment.
        name: Display name.
        magnitude: Health change per round; negative hurts, positive heals.
        description: Narrative description.
    """

    id: str
    name: str
    magnitude: int = 0
    description: str = ""


class Environment(WireModel):
    """Battlefield description and ambient effects."""

    name: str
    description: str = ""
    terrain: Terrain = Terrain.OPEN
    visibility: Visibility = Visibility.CLEAR
    size: EnvironmentSize = EnvironmentSize.NORMAL
    effects: tuple[AmbientEffect, ...] = Field(default=())


# =============================================================================
# Conditions
# =============================================================================


class VictoryCondition(WireModel):
    """A way to win the encounter.

    ``completed`` is owned by the resolver and is False on validated input.
    """

    kind: VictoryKind = Field(alias="type")
    description: str = ""
    rounds: int | None = None
    target_id: str | None = None
    completed: bool = False


class DefeatCondition(WireModel):
    """A way to lose the encounter.

    ``triggered`` is owned by the resolver and is False on validated input.
    """

    kind: DefeatKind = Field(alias="type")
    description: str = ""
    rounds: int | None = None
    target_id: str | None = None
    triggered: bool = False


# =============================================================================
# Scenario
# =============================================================================


class SpecialMechanic(WireModel):
    """Narrative rule the generator attaches to an encounter."""

    name: str
    description: str = ""
    rules: tuple[str, ...] = Field(default=())


class CombatScenario(WireModel):
    """A complete generated encounter ready for resolution.

    Attributes:
        enemies: Hostile roster.
        allies: Friendly non-player roster.
        environment: Battlefield.
        victory_conditions: At least one way to win.
        defeat_conditions: At least one way to lose.
        combat_description: Narrative framing.
        tactical_considerations: Hints shown to the player.
        special_mechanics: Extra narrative rules.
    """

    enemies: tuple[CombatEntity, ...] = Field(default=())
    allies: tuple[CombatEntity, ...] = Field(default=())
    environment: Environment
    victory_conditions: tuple[VictoryCondition, ...] = Field(default=())
    defeat_conditions: tuple[DefeatCondition, ...] = Field(default=())
    combat_description: str = ""
    tactical_considerations: tuple[str, ...] = Field(default=())
    special_mechanics: tuple[SpecialMechanic, ...] = Field(default=())

    @property
    def roster(self) -> tuple[CombatEntity, ...]:
        """Enemies followed by allies."""
        return (*self.enemies, *self.allies)


# =============================================================================
# Invariant Predicates
# =============================================================================


def entity_violations(entity: CombatEntity) -> list[str]:
    """List every invariant an entity breaks.

    Args:
        entity: Entity to inspect.

    Returns:
        Human-readable violations, empty for a valid entity.
    """
    problems: list[str] = []
    if not entity.id:
        problems.append("id is empty")
    if entity.max_health < 1:
        problems.append(f"maxHealth {entity.max_health} is below 1")
    if not 0 <= entity.health <= max(entity.max_health, 0):
        problems.append(f"health {entity.health} is outside 0..{entity.max_health}")
    for name in ("attack", "defense", "speed", "initiative"):
        if getattr(entity, name) < 0:
            problems.append(f"{name} is negative")
    for name in ("accuracy", "evasion", "critical_chance"):
        value = getattr(entity, name)
        if not PERCENT_MIN <= value <= PERCENT_MAX:
            problems.append(f"{to_camel(name)} {value} is outside {PERCENT_MIN}..{PERCENT_MAX}")
    if not MIN_CRITICAL_MULTIPLIER <= entity.critical_multiplier <= MAX_CRITICAL_MULTIPLIER:
        problems.append(f"criticalMultiplier {entity.critical_multiplier} is out of range")
    if not MIN_ACTION_POINTS <= entity.max_action_points <= MAX_ACTION_POINTS:
        problems.append(f"maxActionPoints {entity.max_action_points} is out of range")
    if not 0 <= entity.action_points <= entity.max_action_points:
        problems.append(f"actionPoints {entity.action_points} exceeds maxActionPoints")
    if any(effect.remaining_duration < 1 for effect in entity.status_effects):
        problems.append("status effect with remainingDuration below 1")
    if len(set(entity.available_skills)) != len(entity.available_skills):
        problems.append("availableSkills contains duplicates")
    if len(set(entity.available_items)) != len(entity.available_items):
        problems.append("availableItems contains duplicates")
    return problems


def is_valid_entity(entity: CombatEntity) -> bool:
    """Check every bound of a single entity."""
    return not entity_violations(entity)


def is_valid_environment(environment: Environment) -> bool:
    """Check an environment has a name and uniquely identified effects.

    Args:
        environment: Environment to inspect.

    Returns:
        True if the environment satisfies its invariants.
    """
    if not environment.name:
        return False
    ids = [effect.id for effect in environment.effects]
    return all(ids) and len(set(ids)) == len(ids)


def is_valid_roster(entities: Iterable[CombatEntity]) -> bool:
    """Check every entity is valid and ids are unique across the roster.

    Args:
        entities: All combatants of one encounter, player included.

    Returns:
        True if the roster can be resolved.
    """
    seen: set[str] = set()
    for entity in entities:
        if not is_valid_entity(entity) or entity.id in seen:
            return False
        seen.add(entity.id)
    return True


# =============================================================================
# Factory Functions
# =============================================================================


def create_player_entity(profile: CharacterProfile) -> CombatEntity:
    """Build the player's combat entity from a character profile.

    Combat stats the profile does not carry fall back to the player
    defaults; attack and defense derive from level.

    Args:
        profile: The player's character profile.

    Returns:
        A player-side CombatEntity with id ``player``.

    Example:
        >>> hero = create_player_entity(CharacterProfile(name="Aria", character_class="Ranger"))
        >>> hero.accuracy
        85
    """
    speed = profile.speed if profile.speed is not None else PLAYER_DEFAULT_SPEED
    attack = profile.attack if profile.attack is not None else 10 + profile.level * 2
    defense = profile.defense if profile.defense is not None else 8 + int(profile.level * 1.5)
    return CombatEntity(
        id=PLAYER_ENTITY_ID,
        name=profile.name,
        entity_type=EntityType.PLAYER,
        health=profile.health,
        max_health=profile.max_health,
        attack=attack,
        defense=defense,
        speed=speed,
        accuracy=profile.accuracy if profile.accuracy is not None else PLAYER_DEFAULT_ACCURACY,
        evasion=profile.evasion if profile.evasion is not None else PLAYER_DEFAULT_EVASION,
        critical_chance=(
            profile.critical_chance if profile.critical_chance is not None else PLAYER_DEFAULT_CRITICAL_CHANCE
        ),
        critical_multiplier=(
            profile.critical_multiplier
            if profile.critical_multiplier is not None
            else PLAYER_DEFAULT_CRITICAL_MULTIPLIER
        ),
        action_points=PLAYER_DEFAULT_ACTION_POINTS,
        max_action_points=PLAYER_DEFAULT_ACTION_POINTS,
        initiative=speed,
        available_skills=tuple(dict.fromkeys(skill.id for skill in profile.skills_and_abilities)),
    )


__all__ = [
    "WireModel",
    "StatusEffect",
    "AIProfile",
    "CombatEntity",
    "AmbientEffect",
    "Environment",
    "VictoryCondition",
    "DefeatCondition",
    "SpecialMechanic",
    "CombatScenario",
    "entity_violations",
    "is_valid_entity",
    "is_valid_environment",
    "is_valid_roster",
    "create_player_entity",
]

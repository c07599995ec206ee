"""Pydantic V2 models for combat encounters and generated content.

Exports:
    Enums: closed vocabularies (EntityType, Behavior, Terrain, SchemaKind, ...).
    Combat: CombatEntity, Environment, conditions, CombatScenario and the
        invariant predicates.
    Content: CharacterProfile, Item, LoreEntry, NPCProfile, QuestArc.
"""

from __future__ import annotations

from story_forge.models.combat import (
    AIProfile,
    AmbientEffect,
    CombatEntity,
    CombatScenario,
    DefeatCondition,
    Environment,
    SpecialMechanic,
    StatusEffect,
    VictoryCondition,
    WireModel,
    create_player_entity,
    entity_violations,
    is_valid_entity,
    is_valid_environment,
    is_valid_roster,
)
from story_forge.models.content import (
    CharacterProfile,
    Item,
    LoreEntry,
    NPCProfile,
    Quest,
    QuestArc,
    QuestObjective,
    QuestRewards,
    Skill,
)
from story_forge.models.enums import (
    ActionType,
    Behavior,
    CombatOutcome,
    CombatTrigger,
    DefeatKind,
    Difficulty,
    EntityType,
    EnvironmentSize,
    EquipSlot,
    LoreSource,
    PreferredRange,
    Priority,
    QuestStatus,
    RelationshipStatus,
    RiskTolerance,
    SchemaKind,
    StatusStat,
    Terrain,
    VictoryKind,
    Visibility,
)


__all__ = [
    # Enums
    "ActionType",
    "Behavior",
    "CombatOutcome",
    "CombatTrigger",
    "DefeatKind",
    "Difficulty",
    "EntityType",
    "EnvironmentSize",
    "EquipSlot",
    "LoreSource",
    "PreferredRange",
    "Priority",
    "QuestStatus",
    "RelationshipStatus",
    "RiskTolerance",
    "SchemaKind",
    "StatusStat",
    "Terrain",
    "VictoryKind",
    "Visibility",
    # Combat
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
    # Content
    "Skill",
    "CharacterProfile",
    "Item",
    "LoreEntry",
    "NPCProfile",
    "QuestObjective",
    "QuestRewards",
    "Quest",
    "QuestArc",
]

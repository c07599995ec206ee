"""Enumeration types for the Story Forge engine.

This module defines the closed vocabularies shared by the entity model,
the corrector's field tables and the combat resolver. Values are the
lowercase wire strings emitted by the generator.
"""

from __future__ import annotations

from enum import StrEnum


class EntityType(StrEnum):
    """Side a combat entity fights on."""

    ENEMY = "enemy"
    ALLY = "ally"
    PLAYER = "player"

    @property
    def is_player_side(self) -> bool:
        """Check whether the entity fights alongside the player.

        Returns:
            True for allies and the player.
        """
        return self is not EntityType.ENEMY


class Behavior(StrEnum):
    """Overall combat temperament of an AI-controlled entity."""

    AGGRESSIVE = "aggressive"
    DEFENSIVE = "defensive"
    BALANCED = "balanced"
    SUPPORT = "support"
    TACTICAL = "tactical"


class Priority(StrEnum):
    """What an AI-controlled entity optimises for when picking targets."""

    DAMAGE = "damage"
    SURVIVAL = "survival"
    SUPPORT_ALLIES = "support_allies"
    CONTROL = "control"
    OBJECTIVE = "objective"


class RiskTolerance(StrEnum):
    """How low an entity lets its health drop before retreating."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class PreferredRange(StrEnum):
    """Preferred engagement distance."""

    MELEE = "melee"
    RANGED = "ranged"
    MIXED = "mixed"


class Terrain(StrEnum):
    """Battlefield terrain."""

    OPEN = "open"
    CONFINED = "confined"
    HAZARDOUS = "hazardous"
    FOREST = "forest"
    URBAN = "urban"
    DUNGEON = "dungeon"
    WATER = "water"
    MOUNTAIN = "mountain"
    DESERT = "desert"
    MAGICAL = "magical"


class Visibility(StrEnum):
    """Battlefield visibility."""

    CLEAR = "clear"
    DIM = "dim"
    OBSCURED = "obscured"
    DARK = "dark"


class EnvironmentSize(StrEnum):
    """Battlefield size."""

    SMALL = "small"
    NORMAL = "normal"
    LARGE = "large"


class VictoryKind(StrEnum):
    """Ways an encounter can be won."""

    DEFEAT_ALL_ENEMIES = "defeat_all_enemies"
    SURVIVE_N_ROUNDS = "survive_n_rounds"
    PROTECT_TARGET = "protect_target"
    CUSTOM = "custom"


class DefeatKind(StrEnum):
    """Ways an encounter can be lost."""

    PLAYER_DEATH = "player_death"
    ALLY_DEATH = "ally_death"
    TIME_LIMIT = "time_limit"
    OBJECTIVE_FAILED = "objective_failed"
    CUSTOM = "custom"


class StatusStat(StrEnum):
    """Stat a status effect modifies."""

    HEALTH = "health"
    ATTACK = "attack"
    DEFENSE = "defense"
    SPEED = "speed"
    ACCURACY = "accuracy"
    EVASION = "evasion"


class ActionType(StrEnum):
    """Actions available to a combat entity during its turn."""

    ATTACK = "attack"
    SKILL = "skill"
    ITEM = "item"
    DEFEND = "defend"
    WAIT = "wait"

    @property
    def ends_turn(self) -> bool:
        """Check whether the action forfeits any remaining action points.

        Returns:
            True for defend and wait.
        """
        return self in (ActionType.DEFEND, ActionType.WAIT)


class CombatOutcome(StrEnum):
    """Result of a resolved encounter."""

    ONGOING = "ongoing"
    VICTORY = "victory"
    DEFEAT = "defeat"
    STALEMATE = "stalemate"


class CombatTrigger(StrEnum):
    """What caused a combat request."""

    STORY_EVENT = "story_event"
    PLAYER_ACTION = "player_action"
    RANDOM_ENCOUNTER = "random_encounter"
    BOSS_FIGHT = "boss_fight"


class Difficulty(StrEnum):
    """Requested encounter difficulty."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXTREME = "extreme"


class RelationshipStatus(StrEnum):
    """Attitude of an NPC toward the player."""

    FRIENDLY = "Friendly"
    NEUTRAL = "Neutral"
    HOSTILE = "Hostile"
    ALLIED = "Allied"
    CAUTIOUS = "Cautious"
    UNKNOWN = "Unknown"


class LoreSource(StrEnum):
    """Origin of a lore entry."""

    AI_GENERATED = "AI-Generated"
    SYSTEM = "System"
    USER_ADDED = "User-Added"
    AI_GENERATED_SCENARIO_START = "AI-Generated-Scenario-Start"


class QuestStatus(StrEnum):
    """Lifecycle of a quest."""

    ACTIVE = "active"
    COMPLETED = "completed"


class EquipSlot(StrEnum):
    """Equipment slot an item occupies."""

    WEAPON = "weapon"
    SHIELD = "shield"
    HEAD = "head"
    BODY = "body"
    LEGS = "legs"
    FEET = "feet"
    HANDS = "hands"
    NECK = "neck"
    RING = "ring"


class SchemaKind(StrEnum):
    """Kinds of generated content the corrector understands.

    The set is closed: every member has a field table in the bundled
    schema file and a typed model it is parsed into.
    """

    COMBAT_SCENARIO = "combat_scenario"
    COMBAT_ENTITY = "combat_entity"
    CHARACTER_PROFILE = "character_profile"
    ITEM_LIST = "item_list"
    LORE_ENTRY_LIST = "lore_entry_list"
    NPC_LIST = "npc_list"
    QUEST_ARC_LIST = "quest_arc_list"


__all__ = [
    "EntityType",
    "Behavior",
    "Priority",
    "RiskTolerance",
    "PreferredRange",
    "Terrain",
    "Visibility",
    "EnvironmentSize",
    "VictoryKind",
    "DefeatKind",
    "StatusStat",
    "ActionType",
    "CombatOutcome",
    "CombatTrigger",
    "Difficulty",
    "RelationshipStatus",
    "LoreSource",
    "QuestStatus",
    "EquipSlot",
    "SchemaKind",
]

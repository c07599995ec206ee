"""Pydantic V2 schemas for non-combat generated content.

Character profiles, item lists, lore entries, NPCs and quest arcs share the
camelCase wire convention of the combat models and are produced by the
corrector from raw generator output.
"""

from __future__ import annotations

from pydantic import Field

from story_forge.models.combat import WireModel
from story_forge.models.enums import EquipSlot, LoreSource, QuestStatus, RelationshipStatus


class Skill(WireModel):
    """Named ability of a character."""

    id: str
    name: str
    description: str = ""
    type: str = "Combat"
    level: int = 1


class CharacterProfile(WireModel):
    """Player character sheet.

    Combat stats are optional; ``create_player_entity`` fills the gaps with
    the player defaults.

    Attributes:
        name: Character name.
        character_class: Class or archetype (wire name ``class``).
        description: Appearance and background.
        health: Current health.
        max_health: Maximum health.
        mana: Current mana.
        max_mana: Maximum mana.
        level: Character level, at least 1.
        experience_points: Experience toward the next level.
        experience_to_next_level: Experience needed to level up.
        skills_and_abilities: Known skills.
    """

    name: str
    character_class: str = Field(default="Adventurer", alias="class")
    description: str = ""
    health: int = 100
    max_health: int = 100
    mana: int = 0
    max_mana: int = 0
    strength: int = 10
    dexterity: int = 10
    constitution: int = 10
    intelligence: int = 10
    wisdom: int = 10
    charisma: int = 10
    level: int = 1
    experience_points: int = 0
    experience_to_next_level: int = 100
    skills_and_abilities: tuple[Skill, ...] = Field(default=())
    attack: int | None = None
    defense: int | None = None
    speed: int | None = None
    accuracy: int | None = None
    evasion: int | None = None
    critical_chance: int | None = None
    critical_multiplier: float | None = None


class Item(WireModel):
    """Inventory item; ``equip_slot`` is None for consumables and keys."""

    id: str
    name: str
    description: str = ""
    equip_slot: EquipSlot | None = None


class LoreEntry(WireModel):
    """World knowledge keyed by a lookup keyword."""

    id: str
    keyword: str
    content: str
    category: str = "General"
    source: LoreSource = LoreSource.AI_GENERATED


class NPCProfile(WireModel):
    """Non-player character the story has introduced."""

    id: str
    name: str
    description: str = ""
    class_or_role: str | None = None
    relationship_status: RelationshipStatus = RelationshipStatus.UNKNOWN
    known_facts: tuple[str, ...] = Field(default=())
    first_encountered_location: str | None = None
    last_known_location: str | None = None


class QuestObjective(WireModel):
    description: str
    is_completed: bool = False


class QuestRewards(WireModel):
    experience_points: int = 0
    items: tuple[Item, ...] = Field(default=())


class Quest(WireModel):
    """A quest with objectives and rewards."""

    id: str
    description: str
    status: QuestStatus = QuestStatus.ACTIVE
    category: str | None = None
    objectives: tuple[QuestObjective, ...] = Field(default=())
    rewards: QuestRewards = Field(default_factory=QuestRewards)


class QuestArc(WireModel):
    """Chapter of the story grouping related quests."""

    id: str
    title: str
    description: str = ""
    order: int = 1
    quests: tuple[Quest, ...] = Field(default=())


__all__ = [
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

"""Prompt context and templates for the content generator."""

from __future__ import annotations

import json
import math

from pydantic import Field

from story_forge.core.constants import DIFFICULTY_MULTIPLIERS
from story_forge.models.combat import WireModel
from story_forge.models.content import CharacterProfile
from story_forge.models.enums import CombatTrigger, Difficulty, SchemaKind


# =============================================================================
# Context
# =============================================================================


class SpecialRequirements(WireModel):
    """Caller constraints passed through to the generator.

    Attributes:
        max_enemies: Upper bound on generated enemies.
        environment_type: Requested terrain or setting.
        must_include_npcs: NPC names that must appear as allies or enemies.
        forbidden_actions: Actions the encounter must not rely on.
        time_limit: Round limit the encounter should be built around.
    """

    max_enemies: int | None = None
    environment_type: str | None = None
    must_include_npcs: tuple[str, ...] = Field(default=())
    forbidden_actions: tuple[str, ...] = Field(default=())
    time_limit: int | None = None


class BaseStats(WireModel):
    """Suggested enemy stat line for the requested difficulty."""

    health: int
    attack: int
    defense: int
    speed: int


class PromptContext(WireModel):
    """Everything the generator needs to produce one piece of content.

    Attributes:
        kind: What to generate.
        player: The player's character sheet.
        story_context: Recent story summary.
        location: Where the scene takes place.
        trigger: Why combat starts; combat requests only.
        difficulty: Requested challenge.
        use_premium_model: Route the request to the premium model.
        special_requirements: Extra combat constraints.
        instructions: Free-form guidance for non-combat content.
    """

    kind: SchemaKind = SchemaKind.COMBAT_SCENARIO
    player: CharacterProfile
    story_context: str = ""
    location: str = "Unknown"
    trigger: CombatTrigger = CombatTrigger.STORY_EVENT
    difficulty: Difficulty = Difficulty.MEDIUM
    use_premium_model: bool = False
    special_requirements: SpecialRequirements = Field(default_factory=SpecialRequirements)
    instructions: str = ""

    def base_stats(self) -> BaseStats:
        """Scale the enemy stat baseline by player level and difficulty.

        Returns:
            Health 50 + 10L, attack 10 + 2L, defense 8 + 1.5L and speed
            12 + 1.2L, with the level term multiplied by the difficulty
            multiplier and the sum floored.
        """
        multiplier = DIFFICULTY_MULTIPLIERS.get(self.difficulty.value, 1.0)
        level = max(1, self.player.level)
        return BaseStats(
            health=math.floor(50 + level * 10 * multiplier),
            attack=math.floor(10 + level * 2 * multiplier),
            defense=math.floor(8 + level * 1.5 * multiplier),
            speed=math.floor(12 + level * 1.2 * multiplier),
        )


# =============================================================================
# Templates
# =============================================================================


GENERATOR_SYSTEM_PROMPT = """You are the content engine of a text role-playing game.
You reply with a single JSON object and nothing else: no prose, no markdown fences.
Use camelCase keys exactly as requested. Numbers are plain integers unless stated otherwise."""


COMBAT_PROMPT = """Generate a combat encounter for the following scenario:

**Story Context:** {story_context}

**Player Character:** {player_name} (Level {level})
- Health: {health}/{max_health}
- Attack: {attack}
- Defense: {defense}
- Current Location: {location}

**Combat Trigger:** {trigger}
**Difficulty Level:** {difficulty}
**Special Requirements:** {requirements}

Create a balanced and engaging combat encounter with:

1. **enemies** (1-4, based on difficulty), each with id, name, type "enemy", health, maxHealth,
   attack, defense, speed, accuracy (0-100), evasion (0-100), criticalChance (0-100),
   criticalMultiplier (1.0-5.0), actionPoints, maxActionPoints (1-10), initiative,
   availableSkills, availableItems and an aiProfile of
   {{behavior, priority, riskTolerance, preferredRange, specialTactics}}.
   Base enemy stats around: HP {base_health}, ATK {base_attack}, DEF {base_defense}, SPD {base_speed}.
2. **allies** (may be empty), same shape with type "ally".
3. **environment**: name, description, terrain, visibility, size and effects
   (id, name, magnitude as a per-round health change, description).
4. **victoryConditions** and **defeatConditions**: type, description, and rounds or targetId where relevant.
   Primary victory: defeat_all_enemies. Primary defeat: player_death.
5. **combatDescription**, **tacticalConsiderations** (list of strings) and
   **specialMechanics** (name, description, rules).

The encounter must be balanced for the player's power level, consistent with the story
context and appropriately challenging for the selected difficulty."""


CONTENT_PROMPTS: dict[SchemaKind, str] = {
    SchemaKind.CHARACTER_PROFILE: (
        "Create the character sheet for {player_name}: name, class, description, health, maxHealth, "
        "mana, maxMana, strength, dexterity, constitution, intelligence, wisdom, charisma, level, "
        "experiencePoints, experienceToNextLevel and skillsAndAbilities (id, name, description, type, level)."
    ),
    SchemaKind.ITEM_LIST: (
        "Create the starting items for {player_name} at {location}. Reply with {{\"items\": [...]}}; "
        "each item has id, name, description and an optional equipSlot."
    ),
    SchemaKind.LORE_ENTRY_LIST: (
        "Create lore entries relevant to {location}. Reply with {{\"loreEntries\": [...]}}; "
        "each entry has keyword, content and category."
    ),
    SchemaKind.NPC_LIST: (
        "Create the NPCs {player_name} meets around {location}. Reply with {{\"npcs\": [...]}}; "
        "each NPC has id, name, description, relationshipStatus and knownFacts."
    ),
    SchemaKind.QUEST_ARC_LIST: (
        "Create the quest arcs for {player_name}'s story. Reply with {{\"questArcs\": [...]}}; "
        "each arc has id, title, description, order and quests with objectives and rewards."
    ),
    SchemaKind.COMBAT_ENTITY: (
        "Create a single combatant that fits {location}, with the same fields as a combat enemy."
    ),
}


CONTENT_PROMPT = """**Story Context:** {story_context}

{task}

{instructions}"""


def build_messages(context: PromptContext) -> list[dict[str, str]]:
    """Render the chat messages for a generator request.

    Args:
        context: What to generate and for whom.

    Returns:
        A system message and a user message.
    """
    player = context.player
    if context.kind is SchemaKind.COMBAT_SCENARIO:
        stats = context.base_stats()
        user = COMBAT_PROMPT.format(
            story_context=context.story_context or "None",
            player_name=player.name,
            level=player.level,
            health=player.health,
            max_health=player.max_health,
            attack=player.attack if player.attack is not None else "unknown",
            defense=player.defense if player.defense is not None else "unknown",
            location=context.location,
            trigger=context.trigger.value,
            difficulty=context.difficulty.value,
            requirements=json.dumps(context.special_requirements.to_wire(exclude_none=True)),
            base_health=stats.health,
            base_attack=stats.attack,
            base_defense=stats.defense,
            base_speed=stats.speed,
        )
    else:
        task = CONTENT_PROMPTS[context.kind].format(player_name=player.name, location=context.location)
        user = CONTENT_PROMPT.format(
            story_context=context.story_context or "None",
            task=task,
            instructions=context.instructions,
        ).strip()

    return [
        {"role": "system", "content": GENERATOR_SYSTEM_PROMPT},
        {"role": "user", "content": user},
    ]


__all__ = [
    "SpecialRequirements",
    "BaseStats",
    "PromptContext",
    "GENERATOR_SYSTEM_PROMPT",
    "COMBAT_PROMPT",
    "CONTENT_PROMPTS",
    "build_messages",
]

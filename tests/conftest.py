"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the Story Forge engine test suite.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest

from story_forge.models.combat import (
    AIProfile,
    CombatEntity,
    CombatScenario,
    DefeatCondition,
    Environment,
    VictoryCondition,
)
from story_forge.models.content import CharacterProfile, Skill
from story_forge.models.enums import (
    Behavior,
    DefeatKind,
    EntityType,
    Priority,
    RiskTolerance,
    VictoryKind,
)


if TYPE_CHECKING:
    from collections.abc import Callable, Generator


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings and field table caches before and after each test."""
    from story_forge.core.config import clear_settings_cache
    from story_forge.validation.schemas import clear_schema_cache

    clear_settings_cache()
    clear_schema_cache()
    yield
    clear_settings_cache()
    clear_schema_cache()


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set up mock environment variables for testing.

    Returns:
        Dictionary of environment variables that were set.
    """
    env_vars = {
        "STORY_FORGE_OPENROUTER_API_KEY": "test-openrouter-key",
        "STORY_FORGE_DEBUG": "true",
        "STORY_FORGE_LOG_LEVEL": "DEBUG",
        "STORY_FORGE_COMBAT_MAX_ROUNDS": "12",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


# =============================================================================
# Raw Generator Output Fixtures
# =============================================================================


@pytest.fixture
def raw_enemy() -> dict[str, Any]:
    """Provide a complete, valid enemy as the generator would emit it.

    Returns:
        Wire-format entity dictionary.
    """
    return {
        "id": "goblin-1",
        "name": "Goblin Cutter",
        "type": "enemy",
        "health": 30,
        "maxHealth": 30,
        "attack": 12,
        "defense": 4,
        "speed": 11,
        "accuracy": 70,
        "evasion": 15,
        "criticalChance": 10,
        "criticalMultiplier": 1.5,
        "actionPoints": 2,
        "maxActionPoints": 2,
        "initiative": 11,
        "statusEffects": [],
        "availableSkills": ["dirty-slash"],
        "availableItems": [],
        "aiProfile": {
            "behavior": "aggressive",
            "priority": "damage",
            "riskTolerance": "high",
            "preferredRange": "melee",
            "specialTactics": [],
        },
    }


@pytest.fixture
def raw_ally(raw_enemy: dict[str, Any]) -> dict[str, Any]:
    """Provide a complete, valid ally.

    Args:
        raw_enemy: Enemy template to derive from.

    Returns:
        Wire-format entity dictionary.
    """
    return {
        **raw_enemy,
        "id": "npc-1",
        "name": "Brother Aldous",
        "type": "ally",
        "availableSkills": [],
        "availableItems": ["healing-draught"],
        "aiProfile": {**raw_enemy["aiProfile"], "behavior": "support", "riskTolerance": "low"},
    }


@pytest.fixture
def raw_scenario(raw_enemy: dict[str, Any], raw_ally: dict[str, Any]) -> dict[str, Any]:
    """Provide a complete, valid combat scenario.

    Args:
        raw_enemy: The single enemy.
        raw_ally: The single ally.

    Returns:
        Wire-format scenario dictionary that needs no corrections.
    """
    return {
        "enemies": [raw_enemy],
        "allies": [raw_ally],
        "environment": {
            "name": "Old Mill",
            "description": "Flour dust hangs in the air.",
            "terrain": "urban",
            "visibility": "dim",
            "size": "small",
            "effects": [],
        },
        "victoryConditions": [
            {
                "type": "defeat_all_enemies",
                "description": "Drive off the goblins",
                "rounds": None,
                "targetId": None,
                "completed": False,
            }
        ],
        "defeatConditions": [
            {
                "type": "player_death",
                "description": "You fall",
                "rounds": None,
                "targetId": None,
                "triggered": False,
            }
        ],
        "combatDescription": "Goblins ambush you among the millstones.",
        "tacticalConsiderations": ["Keep the cleric alive"],
        "specialMechanics": [],
    }


# =============================================================================
# Model Fixtures
# =============================================================================


@pytest.fixture
def make_entity() -> Callable[..., CombatEntity]:
    """Provide a factory for valid combat entities.

    Returns:
        Callable taking an id plus any field overrides.
    """

    def _make(entity_id: str, **overrides: Any) -> CombatEntity:
        fields: dict[str, Any] = {
            "id": entity_id,
            "name": entity_id.replace("-", " ").title(),
            "entity_type": EntityType.ENEMY,
            "health": 40,
            "max_health": 40,
            "attack": 12,
            "defense": 5,
            "speed": 10,
            "accuracy": 80,
            "evasion": 10,
            "critical_chance": 5,
            "critical_multiplier": 1.5,
            "action_points": 2,
            "max_action_points": 2,
            "initiative": 10,
            "ai_profile": AIProfile(),
        }
        fields.update(overrides)
        return CombatEntity(**fields)

    return _make


@pytest.fixture
def hero_profile() -> CharacterProfile:
    """Provide a level 3 player character profile.

    Returns:
        CharacterProfile with one skill.
    """
    return CharacterProfile(
        name="Aria",
        character_class="Ranger",
        health=80,
        max_health=80,
        level=3,
        skills_and_abilities=(Skill(id="volley", name="Volley", description="A rain of arrows."),),
    )


@pytest.fixture
def hero(make_entity: Callable[..., CombatEntity]) -> CombatEntity:
    """Provide a sturdy player entity.

    Returns:
        Player CombatEntity with id ``player``.
    """
    return make_entity(
        "player",
        name="Aria",
        entity_type=EntityType.PLAYER,
        health=80,
        max_health=80,
        attack=16,
        defense=8,
        speed=12,
        accuracy=85,
        action_points=3,
        max_action_points=3,
        initiative=12,
        available_skills=("volley",),
        ai_profile=None,
    )


@pytest.fixture
def goblin(make_entity: Callable[..., CombatEntity]) -> CombatEntity:
    """Provide an aggressive goblin enemy."""
    return make_entity(
        "goblin-1",
        name="Goblin Cutter",
        health=30,
        max_health=30,
        attack=12,
        defense=4,
        speed=11,
        initiative=11,
        ai_profile=AIProfile(
            behavior=Behavior.AGGRESSIVE,
            priority=Priority.DAMAGE,
            risk_tolerance=RiskTolerance.HIGH,
        ),
    )


@pytest.fixture
def training_ground() -> Environment:
    """Provide a plain environment with no ambient effects."""
    return Environment(name="Training Ground", description="Packed earth.")


@pytest.fixture
def duel_scenario(goblin: CombatEntity, training_ground: Environment) -> CombatScenario:
    """Provide a one-on-one encounter against the goblin.

    Returns:
        CombatScenario with the default victory and defeat conditions.
    """
    return CombatScenario(
        enemies=(goblin,),
        environment=training_ground,
        victory_conditions=(VictoryCondition(kind=VictoryKind.DEFEAT_ALL_ENEMIES, description="Win"),),
        defeat_conditions=(DefeatCondition(kind=DefeatKind.PLAYER_DEATH, description="Lose"),),
    )

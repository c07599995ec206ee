"""Fixed encounter served when generation fails."""

from __future__ import annotations

from typing import Any

from story_forge.models.combat import CombatScenario


FALLBACK_SCENARIO: dict[str, Any] = {
    "enemies": [
        {
            "id": "fallback-enemy",
            "name": "Training Dummy",
            "type": "enemy",
            "health": 50,
            "maxHealth": 50,
            "attack": 10,
            "defense": 5,
            "speed": 8,
            "accuracy": 80,
            "evasion": 10,
            "criticalChance": 5,
            "criticalMultiplier": 1.5,
            "actionPoints": 2,
            "maxActionPoints": 2,
            "initiative": 8,
            "statusEffects": [],
            "availableSkills": [],
            "availableItems": [],
            "aiProfile": {
                "behavior": "balanced",
                "priority": "damage",
                "riskTolerance": "medium",
                "preferredRange": "melee",
                "specialTactics": [],
            },
        }
    ],
    "allies": [],
    "environment": {
        "name": "Training Ground",
        "description": "A simple training area for combat practice.",
        "terrain": "open",
        "visibility": "clear",
        "size": "normal",
        "effects": [],
    },
    "victoryConditions": [
        {"type": "defeat_all_enemies", "description": "Defeat all enemies", "completed": False},
    ],
    "defeatConditions": [
        {"type": "player_death", "description": "Player is defeated", "triggered": False},
    ],
    "combatDescription": "A simple training combat encounter.",
    "tacticalConsiderations": [
        "Focus on basic attack and defense",
        "Manage your action points carefully",
    ],
    "specialMechanics": [],
}
"""Wire form of the fallback encounter: one weak enemy on open ground."""


def fallback_scenario() -> CombatScenario:
    """Build a fresh copy of the fallback encounter."""
    return CombatScenario.model_validate(FALLBACK_SCENARIO)


__all__ = [
    "FALLBACK_SCENARIO",
    "fallback_scenario",
]

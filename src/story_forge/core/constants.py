"""Application-wide constants for the Story Forge engine.

This module defines the combat rules constants, action economy costs and
prompt scaling values used throughout the application.
"""

from __future__ import annotations

# =============================================================================
# Identity
# =============================================================================

PLAYER_ENTITY_ID = "player"
"""Reserved id of the caller-supplied player entity."""

# =============================================================================
# Stat Bounds
# =============================================================================

PERCENT_MIN = 0
PERCENT_MAX = 100

MIN_CRITICAL_MULTIPLIER = 1.0
MAX_CRITICAL_MULTIPLIER = 5.0

MIN_ACTION_POINTS = 1
MAX_ACTION_POINTS = 10

# =============================================================================
# Attack Resolution
# =============================================================================

MIN_HIT_CHANCE = 5
"""Default floor of the attack hit chance, in percent."""

MAX_HIT_CHANCE = 95
"""Default ceiling of the attack hit chance, in percent."""

MIN_DAMAGE = 1
"""A successful hit always deals at least this much damage."""

# =============================================================================
# Action Economy
# =============================================================================

ATTACK_COST = 1
DEFEND_COST = 1
ITEM_COST = 1
SKILL_COST = 2

SKILL_COOLDOWN_ROUNDS = 3
"""Rounds a skill stays unavailable after use."""

SKILL_DAMAGE_MULTIPLIER = 1.5
"""Attack multiplier applied before defense when a skill lands."""

ITEM_HEAL_FRACTION = 0.3
"""Fraction of max health restored by a consumable item."""

DEFENDING_STATUS_NAME = "Defending"
DEFENDING_DEFENSE_BONUS = 0.5
"""Defense bonus of the Defending status, as a fraction of base defense."""

DEFENDING_DURATION = 2
"""Defending covers the rest of the current round and all of the next."""

# =============================================================================
# AI Policy
# =============================================================================

RETREAT_THRESHOLDS = {
    "low": 0.25,
    "medium": 0.10,
    "high": 0.0,
}
"""Health fraction below which an entity retreats, by risk tolerance."""

SUPPORT_HEAL_THRESHOLD = 0.5
"""Support entities heal an ally whose health fraction drops below this."""

HEALTHY_TARGET_FRACTION = 0.5
"""Balanced entities spend skills only on targets above this health fraction."""

# =============================================================================
# Prompt Scaling
# =============================================================================

DIFFICULTY_MULTIPLIERS = {
    "easy": 0.7,
    "medium": 1.0,
    "hard": 1.3,
    "extreme": 1.6,
}
"""Base-stat multipliers quoted to the generator per difficulty."""

DEFAULT_SURVIVE_ROUNDS = 3
"""Round count assumed when a round-based condition omits one."""

# =============================================================================
# Player Defaults
# =============================================================================

PLAYER_DEFAULT_SPEED = 10
PLAYER_DEFAULT_ACCURACY = 85
PLAYER_DEFAULT_EVASION = 10
PLAYER_DEFAULT_CRITICAL_CHANCE = 5
PLAYER_DEFAULT_CRITICAL_MULTIPLIER = 1.5
PLAYER_DEFAULT_ACTION_POINTS = 3

"""Deterministic combat engine for the Story Forge engine.

This module resolves validated combat scenarios round by round. All
randomness flows through a seeded per-encounter roller, so a seed plus the
same inputs always replays the same encounter.

Submodules:
    dice: Seeded percentile rolls
    actions: Combat actions, costs and resolved records
    initiative: Turn order within a round
    tactics: Rule-based AI action policy
    conditions: Victory and defeat evaluation
    resolver: Round and encounter resolution

Example:
    >>> from story_forge.engine import CombatResolver
    >>>
    >>> resolver = CombatResolver()
    >>> result = resolver.run(scenario, hero, seed=42)
    >>> for log in result.rounds:
    ...     print(log.round_number, [a.message for a in log.actions])
"""

from __future__ import annotations

# =============================================================================
# Dice and Actions
# =============================================================================
from story_forge.engine.actions import ACTION_COSTS, ActionRecord, CombatAction
from story_forge.engine.dice import PercentileRoll, PercentileRoller

# =============================================================================
# Turn Order and AI
# =============================================================================
from story_forge.engine.initiative import initiative_key, initiative_order
from story_forge.engine.tactics import (
    DEFAULT_PROFILE,
    TacticalDecision,
    TacticalView,
    choose_action,
    select_target,
)

# =============================================================================
# Resolution
# =============================================================================
from story_forge.engine.conditions import ConditionCheck, evaluate_conditions
from story_forge.engine.resolver import (
    CombatResolver,
    CombatResult,
    EncounterState,
    PlayerActionProvider,
    RoundLog,
)


__all__ = [
    # Dice and Actions
    "ACTION_COSTS",
    "ActionRecord",
    "CombatAction",
    "PercentileRoll",
    "PercentileRoller",
    # Turn Order and AI
    "initiative_key",
    "initiative_order",
    "DEFAULT_PROFILE",
    "TacticalDecision",
    "TacticalView",
    "choose_action",
    "select_target",
    # Resolution
    "ConditionCheck",
    "evaluate_conditions",
    "CombatResolver",
    "CombatResult",
    "EncounterState",
    "PlayerActionProvider",
    "RoundLog",
]

"""Content generation for the Story Forge engine.

This module connects the deterministic core to the external generator:
prompt contexts and templates, the generator protocol with its OpenRouter
adapter, the fixed fallback encounter, and the request orchestrator that
ties generation, validation, the correction log and resolution together.

Submodules:
    prompts: Prompt context, difficulty scaling and message templates
    generator: The generator protocol
    openrouter: OpenRouter adapter on the OpenAI async client
    fallback: The Training Dummy encounter
    orchestrator: Combat and content request handling
"""

from __future__ import annotations

from story_forge.generation.fallback import FALLBACK_SCENARIO, fallback_scenario
from story_forge.generation.generator import ScenarioGenerator
from story_forge.generation.openrouter import (
    OpenRouterGenerator,
    create_openrouter_client,
    parse_json_response,
)
from story_forge.generation.orchestrator import (
    CombatOrchestrator,
    CombatRequest,
    CombatScenarioResult,
    ContentResult,
)
from story_forge.generation.prompts import (
    BaseStats,
    PromptContext,
    SpecialRequirements,
    build_messages,
)


__all__ = [
    "FALLBACK_SCENARIO",
    "fallback_scenario",
    "ScenarioGenerator",
    "OpenRouterGenerator",
    "create_openrouter_client",
    "parse_json_response",
    "CombatOrchestrator",
    "CombatRequest",
    "CombatScenarioResult",
    "ContentResult",
    "BaseStats",
    "PromptContext",
    "SpecialRequirements",
    "build_messages",
]

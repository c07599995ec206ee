"""Story Forge Engine - deterministic core of an AI-narrated RPG.

Generated content is untrusted; the engine owns the truth.

ARCHITECTURE:
- A generator (an LLM behind OpenRouter) proposes scenarios and content as JSON
- The corrector repairs that JSON against declarative field tables and logs every repair
- The resolver plays encounters out with seeded, reproducible rolls
- Generator failures end in a fixed fallback, never in an error

Example:
    >>> from story_forge import (
    ...     CombatOrchestrator, CombatRequest, CorrectionLog, OpenRouterGenerator, PromptContext,
    ... )
    >>>
    >>> log = CorrectionLog()
    >>> orchestrator = CombatOrchestrator(OpenRouterGenerator(), log)
    >>> context = PromptContext(player=profile, location="Old Mill", difficulty="hard")
    >>> result = await orchestrator.request_combat(
    ...     CombatRequest(context=context, resolve_immediately=True, seed=7)
    ... )
    >>> result.combat_result.outcome
    <CombatOutcome.VICTORY: 'victory'>

Modules:
    core: Configuration, logging, constants and base exceptions.
    models: Pydantic V2 models for combat and generated content.
    validation: Field tables and the validator/corrector.
    storage: Session-scoped correction log.
    engine: Dice, initiative, AI tactics, conditions and the resolver.
    generation: Prompts, the OpenRouter generator and the request orchestrator.
"""

from __future__ import annotations

# Core
from story_forge.core.config import Settings, get_settings
from story_forge.core.exceptions import StoryForgeError
from story_forge.core.logging import configure_logging, get_logger

# Models
from story_forge.models.combat import (
    CombatEntity,
    CombatScenario,
    Environment,
    create_player_entity,
)
from story_forge.models.content import CharacterProfile
from story_forge.models.enums import CombatOutcome, SchemaKind

# Validation and Storage
from story_forge.storage.correction_log import CorrectionLog
from story_forge.validation.corrector import CorrectionResult, Corrector, validate_and_correct

# Engine
from story_forge.engine.resolver import CombatResolver, CombatResult

# Generation
from story_forge.generation.openrouter import OpenRouterGenerator
from story_forge.generation.orchestrator import (
    CombatOrchestrator,
    CombatRequest,
    CombatScenarioResult,
)
from story_forge.generation.prompts import PromptContext


__version__ = "0.1.0"
__all__ = [
    # Version info
    "__version__",
    # Core
    "StoryForgeError",
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    # Models
    "CombatEntity",
    "CombatScenario",
    "Environment",
    "create_player_entity",
    "CharacterProfile",
    "CombatOutcome",
    "SchemaKind",
    # Validation and Storage
    "CorrectionLog",
    "CorrectionResult",
    "Corrector",
    "validate_and_correct",
    # Engine
    "CombatResolver",
    "CombatResult",
    # Generation
    "OpenRouterGenerator",
    "CombatOrchestrator",
    "CombatRequest",
    "CombatScenarioResult",
    "PromptContext",
]

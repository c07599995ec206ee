"""Scenario and combat request orchestration.

This module is the boundary between callers and the untrusted generator:

1. GENERATE: await the generator under a deadline
2. VALIDATE: repair the raw JSON against the field tables
3. RECORD: append the repairs to the shared correction log
4. RESOLVE: optionally play the encounter out immediately

Any generator problem, including a timeout or uncoercible output, ends in
a fixed fallback so the caller always gets playable content. Only caller
defects, such as an invalid player entity or a broken field table, raise.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any
from uuid import uuid4

from pydantic import Field

from story_forge.core.config import Settings, get_settings
from story_forge.core.exceptions import GeneratorFailure, GeneratorTimeout, MalformedInputError
from story_forge.core.logging import get_logger, request_context
from story_forge.engine.resolver import CombatResolver, CombatResult
from story_forge.generation.fallback import FALLBACK_SCENARIO, fallback_scenario
from story_forge.generation.generator import ScenarioGenerator
from story_forge.generation.prompts import PromptContext
from story_forge.models.combat import CombatEntity, CombatScenario, WireModel, create_player_entity
from story_forge.models.enums import SchemaKind
from story_forge.storage.correction_log import CorrectionLog
from story_forge.validation.corrector import Corrector


logger = get_logger(__name__)


# =============================================================================
# Requests and Results
# =============================================================================


class CombatRequest(WireModel):
    """A request for a combat encounter.

    Attributes:
        context: Prompt context; its kind is forced to combat_scenario.
        player: Player combatant; built from ``context.player`` when None.
        resolve_immediately: Resolve the encounter before returning.
        max_rounds: Round cap for immediate resolution.
        seed: Roller seed for immediate resolution.
    """

    context: PromptContext
    player: CombatEntity | None = None
    resolve_immediately: bool = False
    max_rounds: int | None = Field(default=None, ge=1)
    seed: int | None = None


@dataclass(frozen=True)
class CombatScenarioResult:
    """What a combat request hands back.

    Attributes:
        request_id: Id tagging this request's log lines and correction entry.
        scenario: Validated or fallback encounter.
        player: The player combatant the encounter is meant for.
        corrections: Repairs applied, plus a fallback note when one was used.
        used_fallback: Whether the fixed fallback replaced generated content.
        combat_result: The resolved encounter when resolution was requested.
    """

    request_id: str
    scenario: CombatScenario
    player: CombatEntity
    corrections: tuple[str, ...]
    used_fallback: bool
    combat_result: CombatResult | None = None

    def to_wire(self) -> dict[str, Any]:
        return self.scenario.to_wire()


@dataclass(frozen=True)
class ContentResult:
    """A validated non-combat content request."""

    request_id: str
    kind: SchemaKind
    value: Any
    corrections: tuple[str, ...]
    used_fallback: bool


# =============================================================================
# Orchestrator
# =============================================================================


class CombatOrchestrator:
    """Runs generator requests through validation, logging and resolution.

    Args:
        generator: The external content generator.
        correction_log: Shared log; a private one when omitted.
        corrector: Corrector to apply; the configured tables when omitted.
        resolver: Resolver for immediate resolution.
        settings: Application settings; the configured ones when omitted.

    Attributes:
        timeout_seconds: Deadline for a single generator call.

    Example:
        >>> orchestrator = CombatOrchestrator(OpenRouterGenerator(), CorrectionLog())
        >>> result = await orchestrator.request_combat(CombatRequest(context=context))
        >>> result.used_fallback
        False
    """

    def __init__(
        self,
        generator: ScenarioGenerator,
        correction_log: CorrectionLog | None = None,
        *,
        corrector: Corrector | None = None,
        resolver: CombatResolver | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self.generator = generator
        self.correction_log = correction_log if correction_log is not None else CorrectionLog()
        self.corrector = corrector or Corrector()
        self.resolver = resolver or CombatResolver(settings.combat)
        self.timeout_seconds = settings.ai.timeout_seconds

    async def _generate(self, context: PromptContext) -> Any:
        """Await the generator, mapping every failure to GeneratorFailure."""
        try:
            return await asyncio.wait_for(self.generator.generate(context), timeout=self.timeout_seconds)
        except TimeoutError as exc:
            raise GeneratorTimeout(
                f"Generator did not answer within {self.timeout_seconds}s",
                timeout_seconds=self.timeout_seconds,
            ) from exc
        except GeneratorFailure:
            raise
        except Exception as exc:
            raise GeneratorFailure(f"Generator raised {type(exc).__name__}: {exc}") from exc

    @staticmethod
    def _fallback_reason(exc: Exception) -> str:
        if isinstance(exc, GeneratorTimeout):
            return "generator timed out"
        if isinstance(exc, MalformedInputError):
            return "generated content was malformed"
        return "generator failed"

    async def request_combat(self, request: CombatRequest) -> CombatScenarioResult:
        """Produce a playable encounter for a combat request.

        Args:
            request: What to generate and whether to resolve it.

        Returns:
            The encounter, its corrections, and the resolution when asked.
            Generator failures never raise; they yield the fallback encounter.

        Raises:
            InvalidRosterError: If the caller's player entity is invalid and
                immediate resolution was requested.
            SchemaTableError: If the field tables are broken.
        """
        request_id = uuid4().hex[:12]
        context = request.context.model_copy(update={"kind": SchemaKind.COMBAT_SCENARIO})
        player = request.player or create_player_entity(context.player)

        with request_context(request_id=request_id, kind=SchemaKind.COMBAT_SCENARIO.value):
            logger.info(
                "Combat requested",
                trigger=context.trigger.value,
                difficulty=context.difficulty.value,
                location=context.location,
            )
            try:
                raw = await self._generate(context)
                corrected = self.corrector.validate_and_correct(raw, SchemaKind.COMBAT_SCENARIO)
                scenario: CombatScenario = corrected.value
                corrections = corrected.corrections
                used_fallback = False
            except (GeneratorFailure, MalformedInputError) as exc:
                reason = self._fallback_reason(exc)
                logger.warning("Using fallback scenario", reason=reason, error=str(exc))
                scenario = fallback_scenario()
                corrections = (f"used fallback scenario ({reason})",)
                used_fallback = True

            self.correction_log.record(corrections, source=f"combat:{request_id}")

            combat_result = None
            if request.resolve_immediately:
                combat_result = self.resolver.run(
                    scenario,
                    player,
                    max_rounds=request.max_rounds,
                    seed=request.seed,
                )

            logger.info(
                "Combat request complete",
                enemies=len(scenario.enemies),
                allies=len(scenario.allies),
                corrections=len(corrections),
                used_fallback=used_fallback,
                outcome=combat_result.outcome.value if combat_result else None,
            )
            return CombatScenarioResult(
                request_id=request_id,
                scenario=scenario,
                player=player,
                corrections=corrections,
                used_fallback=used_fallback,
                combat_result=combat_result,
            )

    async def request_content(self, kind: SchemaKind | str, context: PromptContext) -> ContentResult:
        """Generate and validate one piece of non-combat content.

        Args:
            kind: What to generate.
            context: Prompt context; its kind is replaced by ``kind``.

        Returns:
            The typed content. On generator failure the value is what the
            corrector makes of an empty input for the kind.
        """
        kind = SchemaKind(kind)
        request_id = uuid4().hex[:12]
        context = context.model_copy(update={"kind": kind})

        with request_context(request_id=request_id, kind=kind.value):
            logger.info("Content requested", location=context.location)
            try:
                raw = await self._generate(context)
                corrected = self.corrector.validate_and_correct(raw, kind)
                corrections = corrected.corrections
                used_fallback = False
            except (GeneratorFailure, MalformedInputError) as exc:
                reason = self._fallback_reason(exc)
                logger.warning("Using fallback content", reason=reason, error=str(exc))
                corrected = self.corrector.validate_and_correct(self._empty_value(kind), kind)
                corrections = (f"used fallback content ({reason})", *corrected.corrections)
                used_fallback = True

            self.correction_log.record(corrections, source=f"{kind.value}:{request_id}")
            return ContentResult(
                request_id=request_id,
                kind=kind,
                value=corrected.value,
                corrections=corrections,
                used_fallback=used_fallback,
            )

    def _empty_value(self, kind: SchemaKind) -> Any:
        if kind is SchemaKind.COMBAT_SCENARIO:
            return FALLBACK_SCENARIO
        return [] if self.corrector.tables.kind(kind)["root"] == "list" else {}


__all__ = [
    "CombatRequest",
    "CombatScenarioResult",
    "ContentResult",
    "CombatOrchestrator",
]

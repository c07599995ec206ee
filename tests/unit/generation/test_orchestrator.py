"""Tests for the combat request orchestrator."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from story_forge.core.config import AIProviderSettings, Settings
from story_forge.core.exceptions import GeneratorFailure, InvalidRosterError
from story_forge.generation import CombatOrchestrator, CombatRequest, PromptContext
from story_forge.models.combat import CombatEntity
from story_forge.models.content import CharacterProfile
from story_forge.models.enums import CombatOutcome, SchemaKind
from story_forge.storage import CorrectionLog


class FixedGenerator:
    """Returns one value and remembers every context it was given."""

    def __init__(self, value: Any) -> None:
        self.value = value
        self.contexts: list[PromptContext] = []

    async def generate(self, context: PromptContext) -> Any:
        self.contexts.append(context)
        return self.value


class SlowGenerator:
    """Never answers within a short deadline."""

    async def generate(self, context: PromptContext) -> Any:
        await asyncio.sleep(5)
        return {}


class FailingGenerator:
    """Raises the given exception."""

    def __init__(self, error: Exception) -> None:
        self.error = error

    async def generate(self, context: PromptContext) -> Any:
        raise self.error


@pytest.fixture
def fast_settings() -> Settings:
    """Provide settings with a short generator deadline."""
    return Settings(ai=AIProviderSettings(timeout_seconds=0.05))


@pytest.fixture
def log() -> CorrectionLog:
    """Provide an empty correction log."""
    return CorrectionLog()


@pytest.fixture
def context(hero_profile: CharacterProfile) -> PromptContext:
    """Provide a combat prompt context for the hero."""
    return PromptContext(player=hero_profile, location="Old Mill")


class TestRequestCombat:
    """Tests for request_combat."""

    @pytest.mark.asyncio
    async def test_corrections_recorded(
        self,
        raw_scenario: dict[str, Any],
        context: PromptContext,
        log: CorrectionLog,
        fast_settings: Settings,
    ) -> None:
        """Test a repaired scenario is returned and its repairs logged."""
        raw_scenario["enemies"][0]["health"] = 150
        orchestrator = CombatOrchestrator(FixedGenerator(raw_scenario), log, settings=fast_settings)

        result = await orchestrator.request_combat(CombatRequest(context=context))

        assert not result.used_fallback
        assert result.corrections == ("clamped health from 150 to 30",)
        assert result.scenario.enemies[0].health == 30
        (entry,) = log.list_entries()
        assert entry.corrections == result.corrections
        assert entry.source == f"combat:{result.request_id}"

    @pytest.mark.asyncio
    async def test_clean_scenario_not_logged(
        self,
        raw_scenario: dict[str, Any],
        context: PromptContext,
        log: CorrectionLog,
        fast_settings: Settings,
    ) -> None:
        """Test a scenario needing no repairs leaves the log empty."""
        orchestrator = CombatOrchestrator(FixedGenerator(raw_scenario), log, settings=fast_settings)

        result = await orchestrator.request_combat(CombatRequest(context=context))

        assert result.corrections == ()
        assert len(log) == 0
        assert result.to_wire() == raw_scenario

    @pytest.mark.asyncio
    async def test_context_kind_forced_to_combat(
        self,
        raw_scenario: dict[str, Any],
        context: PromptContext,
        fast_settings: Settings,
    ) -> None:
        """Test the generator always sees a combat context."""
        generator = FixedGenerator(raw_scenario)
        orchestrator = CombatOrchestrator(generator, settings=fast_settings)
        npc_context = context.model_copy(update={"kind": SchemaKind.NPC_LIST})

        await orchestrator.request_combat(CombatRequest(context=npc_context))

        assert generator.contexts[0].kind is SchemaKind.COMBAT_SCENARIO

    @pytest.mark.asyncio
    async def test_timeout_uses_fallback(
        self,
        context: PromptContext,
        log: CorrectionLog,
        fast_settings: Settings,
    ) -> None:
        """Test a slow generator yields the fallback encounter."""
        orchestrator = CombatOrchestrator(SlowGenerator(), log, settings=fast_settings)

        result = await orchestrator.request_combat(CombatRequest(context=context))

        assert result.used_fallback
        assert result.corrections == ("used fallback scenario (generator timed out)",)
        assert result.scenario.enemies[0].name == "Training Dummy"
        assert log.list_entries()[0].corrections == result.corrections

    @pytest.mark.parametrize(
        "error",
        [GeneratorFailure("upstream 500"), RuntimeError("socket closed")],
    )
    @pytest.mark.asyncio
    async def test_generator_error_uses_fallback(
        self,
        error: Exception,
        context: PromptContext,
        fast_settings: Settings,
    ) -> None:
        """Test generator exceptions never reach the caller."""
        orchestrator = CombatOrchestrator(FailingGenerator(error), settings=fast_settings)

        result = await orchestrator.request_combat(CombatRequest(context=context))

        assert result.used_fallback
        assert result.corrections == ("used fallback scenario (generator failed)",)

    @pytest.mark.asyncio
    async def test_malformed_output_uses_fallback(self, context: PromptContext, fast_settings: Settings) -> None:
        """Test output that is not an object falls back."""
        orchestrator = CombatOrchestrator(FixedGenerator(["not", "a", "scenario"]), settings=fast_settings)

        result = await orchestrator.request_combat(CombatRequest(context=context))

        assert result.used_fallback
        assert result.corrections == ("used fallback scenario (generated content was malformed)",)

    @pytest.mark.asyncio
    async def test_player_built_from_profile(self, context: PromptContext, fast_settings: Settings) -> None:
        """Test the player entity comes from the context profile when not given."""
        orchestrator = CombatOrchestrator(SlowGenerator(), settings=fast_settings)

        result = await orchestrator.request_combat(CombatRequest(context=context))

        assert result.player.id == "player"
        assert result.player.name == "Aria"
        assert result.combat_result is None

    @pytest.mark.asyncio
    async def test_resolve_immediately(
        self,
        context: PromptContext,
        hero: CombatEntity,
        fast_settings: Settings,
    ) -> None:
        """Test the encounter is resolved when asked, with the given seed."""
        orchestrator = CombatOrchestrator(SlowGenerator(), settings=fast_settings)
        request = CombatRequest(context=context, player=hero, resolve_immediately=True, max_rounds=6, seed=11)

        result = await orchestrator.request_combat(request)

        assert result.combat_result is not None
        assert result.combat_result.seed == 11
        assert result.combat_result.outcome is not CombatOutcome.ONGOING
        assert len(result.combat_result.rounds) <= 6

    @pytest.mark.asyncio
    async def test_invalid_player_raises(
        self,
        context: PromptContext,
        hero: CombatEntity,
        fast_settings: Settings,
    ) -> None:
        """Test a broken player entity is a caller error, not a fallback."""
        orchestrator = CombatOrchestrator(SlowGenerator(), settings=fast_settings)
        broken = hero.model_copy(update={"health": 500})

        with pytest.raises(InvalidRosterError):
            await orchestrator.request_combat(CombatRequest(context=context, player=broken, resolve_immediately=True))

    @pytest.mark.asyncio
    async def test_concurrent_requests_share_log(
        self,
        context: PromptContext,
        log: CorrectionLog,
        fast_settings: Settings,
    ) -> None:
        """Test parallel requests each leave one entry."""
        orchestrator = CombatOrchestrator(SlowGenerator(), log, settings=fast_settings)

        results = await asyncio.gather(
            *(orchestrator.request_combat(CombatRequest(context=context)) for _ in range(4))
        )

        assert len(log) == 4
        assert {entry.source for entry in log.list_entries()} == {f"combat:{r.request_id}" for r in results}


class TestRequestContent:
    """Tests for request_content."""

    @pytest.mark.asyncio
    async def test_npc_list(self, context: PromptContext, log: CorrectionLog, fast_settings: Settings) -> None:
        """Test wrapped NPC output is repaired and typed."""
        raw = {"npcs": [{"id": "npc-7", "name": "Vex", "relationship": "wary"}]}
        orchestrator = CombatOrchestrator(FixedGenerator(raw), log, settings=fast_settings)

        result = await orchestrator.request_content(SchemaKind.NPC_LIST, context)

        assert not result.used_fallback
        assert result.value[0].name == "Vex"
        assert result.corrections == ("normalized relationshipStatus from wary to Cautious",)
        assert log.list_entries()[0].source == f"npc_list:{result.request_id}"

    @pytest.mark.asyncio
    async def test_list_fallback_is_empty(self, context: PromptContext, fast_settings: Settings) -> None:
        """Test a failed list request yields an empty list."""
        orchestrator = CombatOrchestrator(SlowGenerator(), settings=fast_settings)

        result = await orchestrator.request_content("item_list", context)

        assert result.used_fallback
        assert result.value == ()
        assert result.corrections == ("used fallback content (generator timed out)",)

    @pytest.mark.asyncio
    async def test_object_fallback_gets_defaults(self, context: PromptContext, fast_settings: Settings) -> None:
        """Test a failed character request yields a default character."""
        orchestrator = CombatOrchestrator(FailingGenerator(GeneratorFailure("down")), settings=fast_settings)

        result = await orchestrator.request_content(SchemaKind.CHARACTER_PROFILE, context)

        assert result.used_fallback
        assert result.value.name == "Unnamed Hero"
        assert result.corrections[0] == "used fallback content (generator failed)"
        assert "defaulted name to Unnamed Hero" in result.corrections

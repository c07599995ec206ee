"""Integration tests for non-combat content requests."""

from __future__ import annotations

from typing import Any

import pytest

from story_forge.core.config import AIProviderSettings, Settings
from story_forge.generation import CombatOrchestrator, PromptContext
from story_forge.models.content import CharacterProfile
from story_forge.models.enums import LoreSource, QuestStatus, SchemaKind
from story_forge.storage import CorrectionLog
from story_forge.validation import validate_and_correct


pytestmark = pytest.mark.integration


class ScriptedGenerator:
    """Answers each kind with a canned payload."""

    def __init__(self, replies: dict[SchemaKind, Any]) -> None:
        self.replies = replies

    async def generate(self, context: PromptContext) -> Any:
        return self.replies[context.kind]


REPLIES: dict[SchemaKind, Any] = {
    SchemaKind.LORE_ENTRY_LIST: {
        "lore": [
            {"title": "The Drowned Mill", "content": "Flooded in the spring of the long rains."},
            {"keyword": "Brother Aldous", "content": "", "source": "generated"},
        ]
    },
    SchemaKind.QUEST_ARC_LIST: [
        {
            "title": "Embers",
            "order": "2",
            "quests": [
                {
                    "description": "Find who set the fire",
                    "status": "In Progress",
                    "objectives": [{"description": "Question the miller", "completed": "yes"}],
                    "rewards": {"xp": 120, "items": [{"name": "Charred Key", "equipSlot": "belt"}]},
                }
            ],
        }
    ],
    SchemaKind.CHARACTER_PROFILE: {"name": "Aria", "className": "Ranger", "level": 3, "maxHealth": 80, "hp": 95},
}


@pytest.fixture
def orchestrator() -> CombatOrchestrator:
    """Provide an orchestrator over scripted replies."""
    settings = Settings(ai=AIProviderSettings(timeout_seconds=1.0))
    return CombatOrchestrator(ScriptedGenerator(REPLIES), CorrectionLog(), settings=settings)


class TestContentFlow:
    """Test content requests from raw reply to typed value."""

    @pytest.mark.asyncio
    async def test_lore_entries(self, orchestrator: CombatOrchestrator, hero_profile: CharacterProfile) -> None:
        """Lore entries get ids, content defaults and a known source."""
        result = await orchestrator.request_content(SchemaKind.LORE_ENTRY_LIST, PromptContext(player=hero_profile))

        mill, monk = result.value
        assert mill.keyword == "The Drowned Mill"
        assert mill.id == "the-drowned-mill-1"
        assert monk.content == "No details recorded."
        assert monk.source is LoreSource.AI_GENERATED
        assert "defaulted content to No details recorded. (was \"\")" in result.corrections

    @pytest.mark.asyncio
    async def test_quest_arcs(self, orchestrator: CombatOrchestrator, hero_profile: CharacterProfile) -> None:
        """Nested quests, objectives and reward items are all repaired."""
        result = await orchestrator.request_content(SchemaKind.QUEST_ARC_LIST, PromptContext(player=hero_profile))

        arc = result.value[0]
        quest = arc.quests[0]
        assert arc.order == 2
        assert quest.status is QuestStatus.ACTIVE
        assert quest.objectives[0].is_completed is True
        assert quest.rewards.experience_points == 120
        assert quest.rewards.items[0].id == "charred-key-1"
        assert quest.rewards.items[0].equip_slot is None
        assert "defaulted equipSlot to null (was belt)" in result.corrections

    @pytest.mark.asyncio
    async def test_character_profile(self, orchestrator: CombatOrchestrator, hero_profile: CharacterProfile) -> None:
        """A generated character sheet is clamped and stable under revalidation."""
        result = await orchestrator.request_content(SchemaKind.CHARACTER_PROFILE, PromptContext(player=hero_profile))

        assert result.value.character_class == "Ranger"
        assert result.value.health == 80
        assert result.corrections == ("clamped health from 95 to 80",)

        again = validate_and_correct(result.value.to_wire(), SchemaKind.CHARACTER_PROFILE)
        assert again.corrections == ()
        assert again.value == result.value

    @pytest.mark.asyncio
    async def test_log_collects_every_request(
        self,
        orchestrator: CombatOrchestrator,
        hero_profile: CharacterProfile,
    ) -> None:
        """Each corrected request leaves one entry, labelled by kind."""
        context = PromptContext(player=hero_profile)
        for kind in (SchemaKind.LORE_ENTRY_LIST, SchemaKind.QUEST_ARC_LIST, SchemaKind.CHARACTER_PROFILE):
            await orchestrator.request_content(kind, context)

        sources = [entry.source.split(":")[0] for entry in orchestrator.correction_log.list_entries()]
        assert sources == ["lore_entry_list", "quest_arc_list", "character_profile"]

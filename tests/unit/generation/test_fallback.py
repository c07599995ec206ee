"""Tests for the fallback encounter."""

from __future__ import annotations

from story_forge.generation.fallback import FALLBACK_SCENARIO, fallback_scenario
from story_forge.models import is_valid_environment, is_valid_roster
from story_forge.models.enums import DefeatKind, VictoryKind
from story_forge.validation import validate_and_correct


class TestFallbackScenario:
    """Tests for fallback_scenario."""

    def test_single_training_dummy(self) -> None:
        """Test the fallback is one weak enemy on open ground."""
        scenario = fallback_scenario()

        assert [e.name for e in scenario.enemies] == ["Training Dummy"]
        assert scenario.allies == ()
        assert scenario.environment.name == "Training Ground"
        assert scenario.victory_conditions[0].kind is VictoryKind.DEFEAT_ALL_ENEMIES
        assert scenario.defeat_conditions[0].kind is DefeatKind.PLAYER_DEATH

    def test_satisfies_invariants(self) -> None:
        """Test the fallback passes every entity and environment check."""
        scenario = fallback_scenario()

        assert is_valid_roster(scenario.roster)
        assert is_valid_environment(scenario.environment)

    def test_needs_no_correction(self) -> None:
        """Test the fallback is already in corrected form."""
        result = validate_and_correct(FALLBACK_SCENARIO, "combat_scenario")

        assert result.corrections == ()
        assert result.value == fallback_scenario()

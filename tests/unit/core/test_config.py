"""Tests for configuration management."""

from __future__ import annotations

from pathlib import Path

import pytest

from story_forge.core.config import (
    AIProviderSettings,
    CombatSettings,
    Settings,
    ValidationSettings,
    clear_settings_cache,
    get_settings,
)
from story_forge.core.exceptions import ConfigurationError


class TestAIProviderSettings:
    """Tests for AIProviderSettings configuration."""

    def test_default_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test default provider settings point at OpenRouter."""
        monkeypatch.delenv("STORY_FORGE_OPENROUTER_API_KEY", raising=False)

        settings = AIProviderSettings()

        assert settings.openrouter_api_key is None
        assert settings.base_url == "https://openrouter.ai/api/v1"
        assert settings.timeout_seconds == 45.0
        assert settings.max_retries == 2

    def test_api_key_is_secret(self, mock_env_vars: dict[str, str]) -> None:
        """Test the API key is read from the environment and hidden."""
        settings = AIProviderSettings()

        assert settings.openrouter_api_key is not None
        assert settings.openrouter_api_key.get_secret_value() == "test-openrouter-key"
        assert "test-openrouter-key" not in repr(settings)

    def test_timeout_must_be_positive(self) -> None:
        """Test a zero timeout is rejected."""
        with pytest.raises(ValueError):
            AIProviderSettings(timeout_seconds=0)


class TestCombatSettings:
    """Tests for CombatSettings configuration."""

    def test_default_values(self) -> None:
        """Test default combat settings."""
        settings = CombatSettings()

        assert settings.max_rounds == 20
        assert settings.min_hit_chance == 5
        assert settings.max_hit_chance == 95
        assert settings.rng_seed is None

    def test_hit_chance_bounds_validation(self) -> None:
        """Test a floor above the ceiling raises ConfigurationError."""
        with pytest.raises(ConfigurationError) as exc_info:
            CombatSettings(min_hit_chance=90, max_hit_chance=10)

        assert exc_info.value.details["config_key"] == "min_hit_chance"

    def test_seed_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the encounter seed can be fixed via the environment."""
        monkeypatch.setenv("STORY_FORGE_COMBAT_RNG_SEED", "1234")

        assert CombatSettings().rng_seed == 1234


class TestValidationSettings:
    """Tests for ValidationSettings configuration."""

    def test_override_path(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the field table override path is read from the environment."""
        table = tmp_path / "tables.json"
        monkeypatch.setenv("STORY_FORGE_VALIDATION_SCHEMA_TABLE_PATH", str(table))

        assert ValidationSettings().schema_table_path == table


class TestSettings:
    """Tests for main Settings class."""

    def test_default_settings(self) -> None:
        """Test default settings values."""
        settings = Settings()

        assert settings.app_name == "Story Forge Engine"
        assert settings.debug is False
        assert settings.log_level == "INFO"
        assert settings.is_production is True

    def test_env_override(self, mock_env_vars: dict[str, str]) -> None:
        """Test environment variables override defaults."""
        settings = Settings()

        assert settings.debug is True
        assert settings.log_level == "DEBUG"
        assert settings.is_production is False
        assert settings.combat.max_rounds == 12

    def test_nested_settings(self) -> None:
        """Test nested settings are initialized."""
        settings = Settings()

        assert isinstance(settings.ai, AIProviderSettings)
        assert isinstance(settings.combat, CombatSettings)
        assert isinstance(settings.validation, ValidationSettings)


class TestGetSettings:
    """Tests for get_settings function."""

    def test_returns_settings_instance(self) -> None:
        """Test get_settings returns Settings instance."""
        assert isinstance(get_settings(), Settings)

    def test_caching(self) -> None:
        """Test settings are cached."""
        assert get_settings() is get_settings()

    def test_clear_cache(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test cache clearing picks up new environment values."""
        first = get_settings()
        monkeypatch.setenv("STORY_FORGE_APP_NAME", "Forge Test")
        clear_settings_cache()
        second = get_settings()

        assert first is not second
        assert second.app_name == "Forge Test"

    def test_invalid_combat_bounds_raise_configuration_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test invalid environment values surface as ConfigurationError."""
        monkeypatch.setenv("STORY_FORGE_COMBAT_MIN_HIT_CHANCE", "99")
        monkeypatch.setenv("STORY_FORGE_COMBAT_MAX_HIT_CHANCE", "1")

        with pytest.raises(ConfigurationError):
            get_settings()

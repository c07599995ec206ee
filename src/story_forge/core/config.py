"""Configuration management for the Story Forge engine.

This module provides centralized configuration management using pydantic-settings,
supporting environment variables, .env files, and runtime configuration overrides.
The generator API key is handled securely using SecretStr.

Example:
    >>> from story_forge.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.app_name)
    'Story Forge Engine'

Environment Variables:
    STORY_FORGE_OPENROUTER_API_KEY: OpenRouter API key for scenario generation
    STORY_FORGE_TIMEOUT_SECONDS: Upper bound on a single generator call
    STORY_FORGE_COMBAT_MAX_ROUNDS: Default round cap for resolved encounters
    STORY_FORGE_COMBAT_RNG_SEED: Fixed seed for reproducible encounters
    STORY_FORGE_VALIDATION_SCHEMA_TABLE_PATH: Override for the field table file
    STORY_FORGE_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from story_forge.core.exceptions import ConfigurationError


class AIProviderSettings(BaseSettings):
    """Configuration for the scenario generator connection.

    Attributes:
        openrouter_api_key: OpenRouter API key used by the generator adapter.
        base_url: OpenAI-compatible endpoint of the provider.
        standard_model: Model used for routine content generation.
        premium_model: Model used when a request asks for premium generation.
        temperature: Sampling temperature sent with every request.
        max_tokens: Completion token cap.
        max_retries: Transport retry attempts inside the adapter.
        timeout_seconds: Orchestrator deadline for one generator call.
    """

    model_config = SettingsConfigDict(
        env_prefix="STORY_FORGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    openrouter_api_key: SecretStr | None = Field(
        default=None,
        description="OpenRouter API key",
    )
    base_url: str = Field(
        default="https://openrouter.ai/api/v1",
        description="OpenAI-compatible API endpoint",
    )
    standard_model: str = Field(
        default="google/gemini-2.0-flash-001",
        description="Model for routine content",
    )
    premium_model: str = Field(
        default="anthropic/claude-3.5-sonnet",
        description="Model for premium requests",
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature",
    )
    max_tokens: int = Field(
        default=4096,
        ge=256,
        le=32000,
        description="Completion token cap",
    )
    max_retries: int = Field(
        default=2,
        ge=0,
        le=10,
        description="Transport retry attempts",
    )
    timeout_seconds: float = Field(
        default=45.0,
        gt=0,
        le=300,
        description="Generator call deadline",
    )


class CombatSettings(BaseSettings):
    """Configuration for the combat resolver.

    Attributes:
        max_rounds: Round cap used when a request does not supply one.
        min_hit_chance: Floor of the attack hit chance, in percent.
        max_hit_chance: Ceiling of the attack hit chance, in percent.
        rng_seed: Fixed seed for encounters; None draws a fresh seed.
    """

    model_config = SettingsConfigDict(
        env_prefix="STORY_FORGE_COMBAT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_rounds: int = Field(
        default=20,
        ge=1,
        le=500,
        description="Default round cap",
    )
    min_hit_chance: int = Field(
        default=5,
        ge=0,
        le=100,
        description="Hit chance floor (percent)",
    )
    max_hit_chance: int = Field(
        default=95,
        ge=0,
        le=100,
        description="Hit chance ceiling (percent)",
    )
    rng_seed: int | None = Field(
        default=None,
        description="Fixed encounter seed",
    )

    @model_validator(mode="after")
    def validate_hit_chance_bounds(self) -> "CombatSettings":
        """Ensure the hit chance floor does not exceed the ceiling.

        Returns:
            Self if validation passes.

        Raises:
            ConfigurationError: If min_hit_chance > max_hit_chance.
        """
        if self.min_hit_chance > self.max_hit_chance:
            raise ConfigurationError(
                f"min_hit_chance ({self.min_hit_chance}) must not exceed "
                f"max_hit_chance ({self.max_hit_chance})",
                config_key="min_hit_chance",
            )
        return self


class ValidationSettings(BaseSettings):
    """Configuration for the generated-content corrector.

    Attributes:
        schema_table_path: Optional JSON file replacing the bundled field tables.
    """

    model_config = SettingsConfigDict(
        env_prefix="STORY_FORGE_VALIDATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    schema_table_path: Path | None = Field(
        default=None,
        description="Override field table file",
    )


class Settings(BaseSettings):
    """Main application settings aggregating all configuration domains.

    Attributes:
        app_name: Application name.
        app_version: Application version string.
        debug: Enable debug mode.
        log_level: Application logging level.
        json_logs: Render logs as JSON instead of console output.
        ai: Generator provider settings.
        combat: Combat resolver settings.
        validation: Corrector settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="STORY_FORGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(
        default="Story Forge Engine",
        description="Application name",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    json_logs: bool = Field(
        default=False,
        description="Emit JSON log lines",
    )

    ai: AIProviderSettings = Field(default_factory=AIProviderSettings)
    combat: CombatSettings = Field(default_factory=CombatSettings)
    validation: ValidationSettings = Field(default_factory=ValidationSettings)

    @property
    def is_production(self) -> bool:
        """Check if running in production mode.

        Returns:
            True if not in debug mode.
        """
        return not self.debug


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The application Settings instance.

    Raises:
        ConfigurationError: If configuration is missing or invalid.
    """
    try:
        return Settings()
    except ConfigurationError:
        raise
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load application settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access."""
    get_settings.cache_clear()


__all__ = [
    "AIProviderSettings",
    "CombatSettings",
    "ValidationSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]

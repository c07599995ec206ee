"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        StoryForgeError: Base exception for all application errors.
        ConfigurationError: Configuration-related errors.
        MalformedInputError: Uncoercible generated content.
        GeneratorFailure: The external generator did not deliver.

    Configuration:
        Settings: Main application settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        get_logger: Get a configured logger instance.
        request_context: Scoped context for a single request.
"""

from __future__ import annotations

from story_forge.core.config import (
    AIProviderSettings,
    CombatSettings,
    Settings,
    ValidationSettings,
    clear_settings_cache,
    get_settings,
)
from story_forge.core.exceptions import (
    CombatError,
    ConfigurationError,
    ContentValidationError,
    GameEngineError,
    GeneratorError,
    GeneratorFailure,
    GeneratorTimeout,
    InvalidActionError,
    InvalidRosterError,
    MalformedInputError,
    SchemaTableError,
    StoryForgeError,
)
from story_forge.core.logging import (
    configure_logging,
    get_logger,
    request_context,
)


__all__ = [
    # Base exception
    "StoryForgeError",
    # Configuration exceptions
    "ConfigurationError",
    "SchemaTableError",
    # Content exceptions
    "ContentValidationError",
    "MalformedInputError",
    # Generator exceptions
    "GeneratorError",
    "GeneratorFailure",
    "GeneratorTimeout",
    # Game engine exceptions
    "GameEngineError",
    "CombatError",
    "InvalidRosterError",
    "InvalidActionError",
    # Configuration
    "Settings",
    "AIProviderSettings",
    "CombatSettings",
    "ValidationSettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "get_logger",
    "request_context",
]

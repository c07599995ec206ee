"""Custom exception hierarchy for the Story Forge engine.

All exceptions inherit from StoryForgeError, enabling unified error handling
at the application boundary while preserving domain-specific context in a
``details`` mapping.

Data-invariant violations in generated content are not exceptions: the
corrector repairs them and reports each repair as a correction string.

Example:
    >>> from story_forge.core.exceptions import MalformedInputError
    >>> raise MalformedInputError("Root is not an object", kind="combat_scenario")
"""

from __future__ import annotations

from typing import Any


class StoryForgeError(Exception):
    """Base exception for all Story Forge errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationError(StoryForgeError):
    """Raised when application configuration is invalid."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error with config key context.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


class SchemaTableError(ConfigurationError):
    """Raised when a field table file cannot be loaded or is inconsistent."""

    def __init__(
        self,
        message: str,
        *,
        table_path: str | None = None,
        kind: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if table_path:
            combined_details["table_path"] = table_path
        if kind:
            combined_details["kind"] = kind
        super().__init__(message, details=combined_details)


# =============================================================================
# Generated Content Exceptions
# =============================================================================


class ContentValidationError(StoryForgeError):
    """Base exception for generated-content validation errors."""


class MalformedInputError(ContentValidationError):
    """Raised when generated content cannot be coerced into its kind at all.

    This is reserved for structurally hopeless input, such as a string where
    an object is expected. Anything structurally close is repaired instead.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: str | None = None,
        path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize malformed input error with location context.

        Args:
            message: Human-readable error description.
            kind: The schema kind being validated.
            path: Dotted path of the offending value, when not the root.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if kind:
            combined_details["kind"] = kind
        if path:
            combined_details["path"] = path
        super().__init__(message, details=combined_details)


# =============================================================================
# Generator Exceptions
# =============================================================================


class GeneratorError(StoryForgeError):
    """Base exception for the external content generator."""

    def __init__(
        self,
        message: str,
        *,
        model: str | None = None,
        provider: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize generator error with model context.

        Args:
            message: Human-readable error description.
            model: Name of the model involved.
            provider: Name of the provider (e.g. 'openrouter').
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if model:
            combined_details["model"] = model
        if provider:
            combined_details["provider"] = provider
        super().__init__(message, details=combined_details)


class GeneratorFailure(GeneratorError):
    """Raised when the generator fails to produce a candidate value.

    Covers transport errors, empty responses and unparseable JSON.
    """


class GeneratorTimeout(GeneratorFailure):
    """Raised when the generator does not answer within the deadline."""

    def __init__(
        self,
        message: str,
        *,
        timeout_seconds: float | None = None,
        model: str | None = None,
        provider: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if timeout_seconds is not None:
            combined_details["timeout_seconds"] = timeout_seconds
        super().__init__(message, model=model, provider=provider, details=combined_details)


# =============================================================================
# Game Engine Exceptions
# =============================================================================


class GameEngineError(StoryForgeError):
    """Base exception for all game engine errors."""


class CombatError(GameEngineError):
    """Raised when combat resolution encounters an error."""

    def __init__(
        self,
        message: str,
        *,
        combatant_id: str | None = None,
        round_number: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize combat error with combat context.

        Args:
            message: Human-readable error description.
            combatant_id: Identifier of the combatant involved.
            round_number: Current combat round when error occurred.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if combatant_id:
            combined_details["combatant_id"] = combatant_id
        if round_number is not None:
            combined_details["round_number"] = round_number
        super().__init__(message, details=combined_details)


class InvalidRosterError(CombatError):
    """Raised when an encounter is set up with entities that break invariants.

    Out-of-bound stats, duplicate ids and an invalid environment all fail
    the resolver's precondition check with this error.
    """


class InvalidActionError(CombatError):
    """Raised when a caller-supplied action is not legal in the current state."""


__all__ = [
    "StoryForgeError",
    # Configuration
    "ConfigurationError",
    "SchemaTableError",
    # Generated content
    "ContentValidationError",
    "MalformedInputError",
    # Generator
    "GeneratorError",
    "GeneratorFailure",
    "GeneratorTimeout",
    # Game engine
    "GameEngineError",
    "CombatError",
    "InvalidRosterError",
    "InvalidActionError",
]

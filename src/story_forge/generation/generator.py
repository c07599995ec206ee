"""The external content generator seam."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from story_forge.generation.prompts import PromptContext


@runtime_checkable
class ScenarioGenerator(Protocol):
    """Produces raw, untrusted JSON for a prompt context.

    Implementations raise :class:`~story_forge.core.exceptions.GeneratorFailure`
    when they cannot deliver. Anything they return goes through the
    corrector before use.
    """

    async def generate(self, context: PromptContext) -> Any:
        """Generate one decoded JSON value for the context."""
        ...


__all__ = [
    "ScenarioGenerator",
]

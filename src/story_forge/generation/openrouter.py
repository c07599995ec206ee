"""OpenRouter-backed content generator.

Talks to OpenRouter through the OpenAI-compatible async client, asks for a
JSON object response, and strips markdown fences some models still wrap
around it. Rate-limit and connection errors are retried with exponential
backoff; the orchestrator's timeout bounds the total time spent.
"""

from __future__ import annotations

import json
from typing import Any

from openai import APIConnectionError, APIStatusError, AsyncOpenAI, OpenAIError, RateLimitError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from story_forge.core.config import AIProviderSettings, get_settings
from story_forge.core.exceptions import GeneratorFailure
from story_forge.core.logging import get_logger
from story_forge.generation.prompts import PromptContext, build_messages


logger = get_logger(__name__)

PROVIDER = "openrouter"


def create_openrouter_client(settings: AIProviderSettings | None = None) -> AsyncOpenAI:
    """Create an async OpenAI client pointed at OpenRouter.

    Args:
        settings: Provider settings; the configured ones when omitted.

    Returns:
        Configured client.

    Raises:
        GeneratorFailure: If no API key is configured.
    """
    settings = settings or get_settings().ai
    if settings.openrouter_api_key is None:
        raise GeneratorFailure(
            "OpenRouter API key not configured. Set STORY_FORGE_OPENROUTER_API_KEY",
            provider=PROVIDER,
        )
    return AsyncOpenAI(
        api_key=settings.openrouter_api_key.get_secret_value(),
        base_url=settings.base_url,
        max_retries=0,
        default_headers={
            "HTTP-Referer": "https://github.com/story-forge-engine",
            "X-Title": "Story Forge Engine",
        },
    )


def parse_json_response(response: str) -> Any:
    """Parse JSON from a model response, handling markdown code blocks.

    Args:
        response: Raw response text.

    Returns:
        The decoded JSON value.

    Raises:
        GeneratorFailure: If the text is not valid JSON.
    """
    text = response.strip()
    if text.startswith("```"):
        lines = text.split("\n")
        lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        text = "\n".join(lines)

    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise GeneratorFailure(
            f"Failed to parse JSON from model response: {exc}",
            provider=PROVIDER,
            details={"response_preview": text[:500]},
        ) from exc


class OpenRouterGenerator:
    """Generator adapter for OpenRouter chat completions.

    Args:
        client: Preconfigured client; created from settings on first use when None.
        settings: Provider settings; the configured ones when omitted.

    Attributes:
        settings: Provider settings in use.
    """

    def __init__(
        self,
        client: AsyncOpenAI | None = None,
        *,
        settings: AIProviderSettings | None = None,
    ) -> None:
        self.settings = settings or get_settings().ai
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = create_openrouter_client(self.settings)
        return self._client

    def model_for(self, context: PromptContext) -> str:
        """Pick the premium model only when the request asks for it."""
        return self.settings.premium_model if context.use_premium_model else self.settings.standard_model

    async def generate(self, context: PromptContext) -> Any:
        """Request one JSON value from the model.

        Args:
            context: What to generate.

        Returns:
            The decoded JSON value, untrusted.

        Raises:
            GeneratorFailure: On transport errors after retries, API errors,
                empty responses and unparseable JSON.
        """
        model = self.model_for(context)
        messages = build_messages(context)
        logger.debug("Requesting generation", kind=context.kind.value, model=model)

        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception_type((RateLimitError, APIConnectionError)),
                stop=stop_after_attempt(self.settings.max_retries + 1),
                wait=wait_exponential(multiplier=1, min=1, max=8),
                reraise=True,
            ):
                with attempt:
                    if attempt.retry_state.attempt_number > 1:
                        logger.warning(
                            "Retrying generation",
                            attempt=attempt.retry_state.attempt_number,
                            model=model,
                        )
                    response = await self.client.chat.completions.create(
                        model=model,
                        messages=messages,
                        temperature=self.settings.temperature,
                        max_tokens=self.settings.max_tokens,
                        response_format={"type": "json_object"},
                    )
        except RateLimitError as exc:
            raise GeneratorFailure(
                f"OpenRouter rate limit exceeded: {exc}",
                model=model,
                provider=PROVIDER,
                details={"error_type": "rate_limit"},
            ) from exc
        except APIConnectionError as exc:
            raise GeneratorFailure(
                f"Failed to connect to OpenRouter: {exc}",
                model=model,
                provider=PROVIDER,
                details={"error_type": "connection"},
            ) from exc
        except APIStatusError as exc:
            raise GeneratorFailure(
                f"OpenRouter API error: {exc}",
                model=model,
                provider=PROVIDER,
                details={"status_code": exc.status_code},
            ) from exc
        except OpenAIError as exc:
            raise GeneratorFailure(
                f"Generation request failed: {exc}",
                model=model,
                provider=PROVIDER,
            ) from exc

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise GeneratorFailure("Model returned an empty response", model=model, provider=PROVIDER)

        logger.debug("Generation received", model=model, response_length=len(content))
        return parse_json_response(content)


__all__ = [
    "PROVIDER",
    "create_openrouter_client",
    "parse_json_response",
    "OpenRouterGenerator",
]

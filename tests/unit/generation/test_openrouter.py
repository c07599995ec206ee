"""Tests for the OpenRouter generator adapter."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from openai import APIConnectionError, AuthenticationError, RateLimitError

from story_forge.core.config import AIProviderSettings
from story_forge.core.exceptions import GeneratorFailure
from story_forge.generation.generator import ScenarioGenerator
from story_forge.generation.openrouter import (
    OpenRouterGenerator,
    create_openrouter_client,
    parse_json_response,
)
from story_forge.generation.prompts import PromptContext
from story_forge.models.content import CharacterProfile


REQUEST = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")


def completion(content: str | None) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def mock_client(*effects: Any) -> MagicMock:
    """Build a client whose create() yields each effect in turn."""
    client = MagicMock()
    client.chat.completions.create = AsyncMock(side_effect=list(effects))
    return client


@pytest.fixture
def provider_settings() -> AIProviderSettings:
    """Provide settings without transport retries."""
    return AIProviderSettings(
        openrouter_api_key="test-key",
        standard_model="test/standard",
        premium_model="test/premium",
        max_retries=0,
    )


@pytest.fixture
def context(hero_profile: CharacterProfile) -> PromptContext:
    """Provide a combat prompt context."""
    return PromptContext(player=hero_profile, location="Old Mill")


class TestParseJsonResponse:
    """Tests for parse_json_response."""

    def test_plain_json(self) -> None:
        """Test bare JSON is decoded."""
        assert parse_json_response('{"enemies": []}') == {"enemies": []}

    def test_fenced_json(self) -> None:
        """Test markdown fences are stripped."""
        assert parse_json_response('```json\n{"enemies": []}\n```') == {"enemies": []}

    def test_invalid_json(self) -> None:
        """Test non-JSON text raises GeneratorFailure with a preview."""
        with pytest.raises(GeneratorFailure) as exc_info:
            parse_json_response("Sure! Here is your encounter.")

        assert exc_info.value.details["response_preview"] == "Sure! Here is your encounter."
        assert exc_info.value.details["provider"] == "openrouter"


class TestClientFactory:
    """Tests for create_openrouter_client."""

    def test_requires_api_key(self) -> None:
        """Test a missing key is reported as a generator failure."""
        with pytest.raises(GeneratorFailure, match="API key"):
            create_openrouter_client(AIProviderSettings(openrouter_api_key=None))

    def test_points_at_openrouter(self, provider_settings: AIProviderSettings) -> None:
        """Test the client uses the configured endpoint and no built-in retries."""
        client = create_openrouter_client(provider_settings)

        assert "openrouter.ai" in str(client.base_url)
        assert client.max_retries == 0


class TestOpenRouterGenerator:
    """Tests for OpenRouterGenerator.generate."""

    def test_satisfies_protocol(self, provider_settings: AIProviderSettings) -> None:
        """Test the adapter is a ScenarioGenerator."""
        assert isinstance(OpenRouterGenerator(MagicMock(), settings=provider_settings), ScenarioGenerator)

    def test_model_choice(self, provider_settings: AIProviderSettings, context: PromptContext) -> None:
        """Test the premium model is used only on request."""
        generator = OpenRouterGenerator(MagicMock(), settings=provider_settings)

        assert generator.model_for(context) == "test/standard"
        premium = context.model_copy(update={"use_premium_model": True})
        assert generator.model_for(premium) == "test/premium"

    @pytest.mark.asyncio
    async def test_generate_decodes_json(self, provider_settings: AIProviderSettings, context: PromptContext) -> None:
        """Test a successful completion is decoded and requested as JSON."""
        client = mock_client(completion('```json\n{"enemies": []}\n```'))
        generator = OpenRouterGenerator(client, settings=provider_settings)

        result = await generator.generate(context)

        assert result == {"enemies": []}
        kwargs = client.chat.completions.create.await_args.kwargs
        assert kwargs["model"] == "test/standard"
        assert kwargs["response_format"] == {"type": "json_object"}
        assert [m["role"] for m in kwargs["messages"]] == ["system", "user"]

    @pytest.mark.asyncio
    async def test_empty_response(self, provider_settings: AIProviderSettings, context: PromptContext) -> None:
        """Test an empty message is a failure."""
        generator = OpenRouterGenerator(mock_client(completion("")), settings=provider_settings)

        with pytest.raises(GeneratorFailure, match="empty"):
            await generator.generate(context)

    @pytest.mark.asyncio
    async def test_rate_limit_mapped(self, provider_settings: AIProviderSettings, context: PromptContext) -> None:
        """Test a rate limit becomes a GeneratorFailure."""
        error = RateLimitError("slow down", response=httpx.Response(429, request=REQUEST), body=None)
        generator = OpenRouterGenerator(mock_client(error), settings=provider_settings)

        with pytest.raises(GeneratorFailure) as exc_info:
            await generator.generate(context)

        assert exc_info.value.details["error_type"] == "rate_limit"
        assert exc_info.value.details["model"] == "test/standard"

    @pytest.mark.asyncio
    async def test_status_error_not_retried(self, context: PromptContext) -> None:
        """Test API status errors fail at once with their status code."""
        settings = AIProviderSettings(openrouter_api_key="k", max_retries=3)
        error = AuthenticationError("bad key", response=httpx.Response(401, request=REQUEST), body=None)
        client = mock_client(error)
        generator = OpenRouterGenerator(client, settings=settings)

        with pytest.raises(GeneratorFailure) as exc_info:
            await generator.generate(context)

        assert exc_info.value.details["status_code"] == 401
        assert client.chat.completions.create.await_count == 1

    @pytest.mark.asyncio
    async def test_connection_error_retried(self, context: PromptContext) -> None:
        """Test a dropped connection is retried before succeeding."""
        settings = AIProviderSettings(openrouter_api_key="k", max_retries=1)
        client = mock_client(APIConnectionError(request=REQUEST), completion('{"ok": true}'))
        generator = OpenRouterGenerator(client, settings=settings)

        result = await generator.generate(context)

        assert result == {"ok": True}
        assert client.chat.completions.create.await_count == 2

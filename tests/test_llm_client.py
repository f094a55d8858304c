"""Tests for the LLM client layer."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from prompt_blocks.llm.client import LLMGenerationError
from prompt_blocks.llm.factory import get_llm_client
from prompt_blocks.llm.gemini_client import GeminiClient


@pytest.fixture
def generate_content():
    with patch("prompt_blocks.llm.gemini_client.genai.Client") as client_cls:
        generate = AsyncMock(return_value=MagicMock(text="ok"))
        client_cls.return_value.aio.models.generate_content = generate
        yield generate


@pytest.mark.asyncio
async def test_complete_sends_system_instruction(generate_content):
    client = GeminiClient()

    result = await client.complete("System.", "User.", max_tokens=4000, temperature=0.2)

    assert result == "ok"
    kwargs = generate_content.await_args.kwargs
    assert kwargs["contents"] == "User."
    assert kwargs["config"].system_instruction == "System."
    assert kwargs["config"].max_output_tokens == 4000
    assert kwargs["config"].temperature == 0.2


@pytest.mark.asyncio
async def test_generation_failure_is_wrapped(generate_content):
    generate_content.side_effect = RuntimeError("quota exceeded")

    with pytest.raises(LLMGenerationError, match="quota exceeded"):
        await GeminiClient().generate("Hello")


def test_factory_returns_gemini(generate_content):
    assert isinstance(get_llm_client("gemini"), GeminiClient)


def test_factory_rejects_unknown_mode():
    with pytest.raises(ValueError, match="Unsupported LLM mode"):
        get_llm_client("carrier-pigeon")


def test_factory_without_mode_uses_settings(generate_content):
    with patch("prompt_blocks.llm.factory.settings") as settings:
        settings.llm_mode = "google"
        assert isinstance(get_llm_client(), GeminiClient)

        settings.llm_mode = "carrier-pigeon"
        with pytest.raises(ValueError, match="carrier-pigeon"):
            get_llm_client(None)

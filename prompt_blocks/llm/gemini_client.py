"""Gemini client implementation."""

import os
from typing import Any

from google import genai
from google.genai import types

from prompt_blocks.llm.client import LLMClient, LLMGenerationError
from prompt_blocks.settings import settings


class GeminiClient(LLMClient):
    """Gemini client using the google-genai SDK."""

    def __init__(self) -> None:
        """Initialize Gemini client."""
        api_key = os.environ.get("GEMINI_API_KEY", settings.gemini_api_key)
        base_url = os.environ.get("GEMINI_BASE_URL")

        if base_url:
            http_options = types.HttpOptions(api_version="v1beta", base_url=base_url)
        else:
            http_options = types.HttpOptions(api_version="v1beta")
        self.client = genai.Client(api_key=api_key, http_options=http_options)
        self.model_name = settings.gemini_model

    async def generate(self, prompt: str, context: dict | None = None) -> str:
        """Generate a response using Gemini.

        Args:
            prompt: The prompt to send to the LLM
            context: Optional context dictionary (system_instruction,
                temperature, max_tokens)

        Returns:
            The generated response text

        Raises:
            LLMGenerationError: If generation fails
        """
        try:
            generation_config: dict[str, Any] = {
                "temperature": 0.3,
                "max_output_tokens": 500,
            }

            if context:
                if "temperature" in context:
                    generation_config["temperature"] = context["temperature"]
                if "max_tokens" in context:
                    generation_config["max_output_tokens"] = context["max_tokens"]
                if context.get("system_instruction"):
                    generation_config["system_instruction"] = context["system_instruction"]

            response = await self.client.aio.models.generate_content(
                model=self.model_name,
                contents=prompt,
                config=types.GenerateContentConfig(**generation_config),
            )

            return response.text or ""
        except Exception as e:
            raise LLMGenerationError(f"Gemini generation failed: {str(e)}") from e

"""LLM abstraction layer."""

from prompt_blocks.llm.client import LLMClient, LLMGenerationError
from prompt_blocks.llm.factory import get_llm_client
from prompt_blocks.llm.gemini_client import GeminiClient

__all__ = ["LLMClient", "LLMGenerationError", "GeminiClient", "get_llm_client"]

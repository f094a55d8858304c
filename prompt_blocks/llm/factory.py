"""Factory to create LLM clients based on a mode string or settings."""
from prompt_blocks.llm.client import LLMClient
from prompt_blocks.llm.gemini_client import GeminiClient
from prompt_blocks.settings import settings


def get_llm_client(mode: str | None = None) -> LLMClient:
    """Return an LLMClient instance for the requested mode.

    Priority: explicit `mode` argument -> `LLM_MODE` setting -> default 'gemini'
    """
    selected = (mode or settings.llm_mode or "gemini").lower()

    if selected in ("gemini", "google", "googleai"):
        return GeminiClient()

    raise ValueError(f"Unsupported LLM mode: {selected}")

"""Prompt Blocks: composes LLM system prompts from reusable, editable blocks."""

__version__ = "0.1.0"

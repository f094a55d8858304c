"""Database models."""

from prompt_blocks.persistence.models.prompt_override import (
    PromptBlockOverride,
    PromptModifierOverride,
)

__all__ = [
    "PromptBlockOverride",
    "PromptModifierOverride",
]

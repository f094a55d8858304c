"""Repository layer for data access."""

from prompt_blocks.persistence.repositories.base import KeyedRepository
from prompt_blocks.persistence.repositories.prompt_override_repository import (
    PromptBlockOverrideRepository,
    PromptModifierOverrideRepository,
)

__all__ = [
    "KeyedRepository",
    "PromptBlockOverrideRepository",
    "PromptModifierOverrideRepository",
]

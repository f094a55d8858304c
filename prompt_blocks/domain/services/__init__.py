"""Domain services."""

from prompt_blocks.domain.services.override_cache import OverrideCache, override_cache
from prompt_blocks.domain.services.prompt_optimizer import OptimizationSession
from prompt_blocks.domain.services.prompt_service import PromptService

__all__ = ["OptimizationSession", "OverrideCache", "PromptService", "override_cache"]

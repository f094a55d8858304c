"""Block-based prompt system.

This module provides a structured approach to prompt management:
- Defaults: built-in blocks, modifiers and compositions
- Overrides: field-level patches stored in the database
- Assembler: combines defaults + overrides + runtime selectors into the final prompt
"""

from prompt_blocks.domain.prompts.assembler import PromptAssembler

__all__ = ["PromptAssembler"]

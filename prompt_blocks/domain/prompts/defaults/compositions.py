"""Which blocks are used for each context, and in what order."""

from types import MappingProxyType
from typing import Mapping

from prompt_blocks.domain.prompts.types import Composition, PromptContext

_MINIMAL = ("role_mission", "output_format")

DEFAULT_COMPOSITIONS: tuple[Composition, ...] = (
    Composition(
        context=PromptContext.QUESTIONS.value,
        block_ids=("role_mission", "source_priority", "quality_rules", "confidence_levels", "output_format"),
        supports_modes=True,
        supports_domains=True,
    ),
    Composition(
        context=PromptContext.SKILLS.value,
        block_ids=("role_mission", "quality_rules", "output_format"),
    ),
    Composition(
        context=PromptContext.ANALYSIS.value,
        block_ids=("role_mission", "quality_rules", "error_handling", "output_format"),
    ),
    Composition(
        context=PromptContext.CHAT.value,
        block_ids=("role_mission", "source_priority", "user_instructions", "error_handling", "output_format"),
        supports_domains=True,
    ),
    Composition(
        context=PromptContext.CONTRACTS.value,
        block_ids=("role_mission", "quality_rules", "output_format"),
    ),
    Composition(
        context=PromptContext.SKILL_ORGANIZE.value,
        block_ids=("role_mission", "processing_guidelines", "output_format"),
    ),
    Composition(
        context=PromptContext.CUSTOMER_PROFILE.value,
        block_ids=("role_mission", "processing_guidelines", "output_format"),
    ),
    Composition(
        context=PromptContext.PROMPT_OPTIMIZE.value,
        block_ids=("role_mission", "processing_guidelines", "output_format"),
    ),
    Composition(context=PromptContext.SKILL_ANALYZE.value, block_ids=_MINIMAL),
    Composition(context=PromptContext.SKILL_REFRESH.value, block_ids=_MINIMAL),
    Composition(context=PromptContext.SKILL_ANALYZE_RFP.value, block_ids=_MINIMAL),
    Composition(context=PromptContext.INSTRUCTION_BUILDER.value, block_ids=_MINIMAL),
    Composition(context=PromptContext.SKILL_PLANNING.value, block_ids=_MINIMAL),
    Composition(context=PromptContext.COLLATERAL_PLANNING.value, block_ids=_MINIMAL),
    Composition(context=PromptContext.SOURCE_URL_ANALYSIS.value, block_ids=_MINIMAL),
    Composition(context=PromptContext.GROUP_COHERENCE_ANALYSIS.value, block_ids=_MINIMAL),
)

# Call-site keys that predate the context names
LEGACY_CONTEXT_KEYS: Mapping[str, str] = MappingProxyType({
    "skill_builder": PromptContext.SKILLS.value,
    "knowledge_chat": PromptContext.CHAT.value,
    "library_analysis": PromptContext.ANALYSIS.value,
    "contract_analysis": PromptContext.CONTRACTS.value,
})

"""Built-in runtime modifiers (modes and domains).

Selector values map to modifier ids explicitly; a selector missing from the
map selects nothing.
"""

from types import MappingProxyType
from typing import Mapping

from prompt_blocks.domain.prompts.types import Modifier, ModifierType, PromptTier

MODE_SINGLE = """You are answering a single question from a user. Provide a thorough, conversational response:

- Take time to fully explain the answer with context
- If the question is ambiguous, address the most likely interpretation
- Be helpful and educational"""

MODE_BULK = """You are processing questions from a formal security questionnaire. Optimize for efficiency:

- Be concise and direct
- Use consistent terminology across responses
- Keep responses scannable with clear Yes/No answers where applicable"""

MODE_CALL = """LIVE CALL IN PROGRESS

The user is on a live customer call. Your responses MUST be:

1. ULTRA-BRIEF: Maximum 2-3 sentences.
2. DIRECT ANSWER FIRST: Start with the answer, not context.
3. SCANNABLE: Bold key terms. One line per point.
4. NO FILLER: No "That's a great question", no "Let me explain".
5. CONFIDENT: If unsure, say "I don't have that specific info" - don't hedge."""

DOMAIN_TECHNICAL = """This is a technical question. Focus on:
- Specific implementations (protocols, algorithms, architectures)
- Integration capabilities and API details
- Platform/infrastructure details"""

DOMAIN_LEGAL = """This has legal/compliance implications. Be careful to:
- Only state what is explicitly documented
- Reference specific certifications by name
- Distinguish 'we do X' vs 'we can accommodate X upon request'"""

DOMAIN_SECURITY = """This is security-focused. Prioritize:
- Specific security controls and implementations
- Access control and authentication methods
- Audit logging and compliance evidence"""


DEFAULT_MODIFIERS: tuple[Modifier, ...] = (
    Modifier(
        id="mode_single",
        name="Single Question Mode",
        type=ModifierType.MODE,
        tier=PromptTier.OPEN,
        content=MODE_SINGLE,
        description="Thorough, conversational answers for one-off questions.",
    ),
    Modifier(
        id="mode_bulk",
        name="Bulk Questionnaire Mode",
        type=ModifierType.MODE,
        tier=PromptTier.OPEN,
        content=MODE_BULK,
        description="Concise, consistent answers for questionnaire batches.",
    ),
    Modifier(
        id="mode_call",
        name="Live Call Mode",
        type=ModifierType.MODE,
        tier=PromptTier.OPEN,
        content=MODE_CALL,
        description="Ultra-brief answers while the user is on a live call.",
    ),
    Modifier(
        id="domain_technical",
        name="Technical Focus",
        type=ModifierType.DOMAIN,
        tier=PromptTier.OPEN,
        content=DOMAIN_TECHNICAL,
        description="Emphasize implementation and integration detail.",
    ),
    Modifier(
        id="domain_legal",
        name="Legal Focus",
        type=ModifierType.DOMAIN,
        tier=PromptTier.CAUTION,  # legal accuracy matters
        content=DOMAIN_LEGAL,
        description="Stick to documented commitments and certifications.",
    ),
    Modifier(
        id="domain_security",
        name="Security Focus",
        type=ModifierType.DOMAIN,
        tier=PromptTier.CAUTION,  # security accuracy matters
        content=DOMAIN_SECURITY,
        description="Prioritize concrete security controls and evidence.",
    ),
)

# Selector value -> modifier id
MODE_MODIFIER_IDS: Mapping[str, str] = MappingProxyType({
    "single": "mode_single",
    "bulk": "mode_bulk",
    "call": "mode_call",
})

DOMAIN_MODIFIER_IDS: Mapping[str, str] = MappingProxyType({
    "technical": "domain_technical",
    "legal": "domain_legal",
    "security": "domain_security",
})

"""Core types for the prompt blocks system.

Prompts are composed from reusable building blocks with context-specific
variants, followed by optional runtime modifiers (modes and domains).

TIER SYSTEM:
- Tier 1 (Locked): Core system blocks. Changes can break response parsing.
- Tier 2 (Caution): Important blocks. Can be customized, with care.
- Tier 3 (Open): Safe to customize freely (persona, style).

Tiers are advisory metadata for editing surfaces; composition ignores them.
"""

import enum
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

DEFAULT_VARIANT = "default"


class PromptContext(str, enum.Enum):
    """Usage scenario a composed prompt is built for."""

    QUESTIONS = "questions"  # Answering questionnaire/assessment questions
    SKILLS = "skills"  # Building knowledge skills
    ANALYSIS = "analysis"  # Analyzing documents/libraries
    CHAT = "chat"  # Knowledge chat
    CONTRACTS = "contracts"  # Contract analysis
    SKILL_ORGANIZE = "skill_organize"
    SKILL_ANALYZE = "skill_analyze"
    SKILL_REFRESH = "skill_refresh"
    SKILL_ANALYZE_RFP = "skill_analyze_rfp"
    SKILL_PLANNING = "skill_planning"
    CUSTOMER_PROFILE = "customer_profile"
    PROMPT_OPTIMIZE = "prompt_optimize"
    INSTRUCTION_BUILDER = "instruction_builder"
    COLLATERAL_PLANNING = "collateral_planning"
    SOURCE_URL_ANALYSIS = "source_url_analysis"
    GROUP_COHERENCE_ANALYSIS = "group_coherence_analysis"


class PromptTier(enum.IntEnum):
    """Editability tier of a block or modifier."""

    LOCKED = 1
    CAUTION = 2
    OPEN = 3


@dataclass(frozen=True)
class TierInfo:
    """Presentation metadata for a tier."""

    label: str
    description: str
    warning: str | None = None


TIER_INFO: Mapping[PromptTier, TierInfo] = MappingProxyType({
    PromptTier.LOCKED: TierInfo(
        label="Locked",
        description="Core system functionality - changes may break features",
        warning="This block controls critical system behavior. Only edit if you understand the implications.",
    ),
    PromptTier.CAUTION: TierInfo(
        label="Caution",
        description="Important for accuracy - customize carefully",
        warning="Changes to this block may affect response quality or consistency.",
    ),
    PromptTier.OPEN: TierInfo(
        label="Open",
        description="Safe to customize - style and personalization",
    ),
})


class ModifierType(str, enum.Enum):
    """Kind of runtime modifier."""

    MODE = "mode"
    DOMAIN = "domain"


def _freeze(mapping: Mapping[str, str] | None) -> Mapping[str, str]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class Block:
    """A named, independently editable fragment with per-context variants."""

    id: str
    name: str
    description: str
    tier: PromptTier
    variants: Mapping[str, str]
    # Contexts an override deliberately emptied; these never fall back to default
    cleared: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        object.__setattr__(self, "variants", _freeze(self.variants))
        object.__setattr__(self, "cleared", frozenset(self.cleared))

    def text_for(self, context: str) -> str:
        """Return the text this block contributes for a context."""
        if context in self.cleared:
            return ""
        text = self.variants.get(context)
        if text and text.strip():
            return text
        return self.variants.get(DEFAULT_VARIANT) or ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "tier": int(self.tier),
            "variants": dict(self.variants),
        }


@dataclass(frozen=True)
class Modifier:
    """A runtime-selectable overlay appended after the core blocks."""

    id: str
    name: str
    type: ModifierType
    tier: PromptTier
    content: str
    description: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "type": self.type.value,
            "tier": int(self.tier),
            "content": self.content,
        }


@dataclass(frozen=True)
class Composition:
    """Which blocks are used for a context, in order."""

    context: str
    block_ids: tuple[str, ...]
    supports_modes: bool = False
    supports_domains: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "block_ids", tuple(self.block_ids))

    def to_dict(self) -> dict:
        return {
            "context": self.context,
            "block_ids": list(self.block_ids),
            "supports_modes": self.supports_modes,
            "supports_domains": self.supports_domains,
        }


@dataclass(frozen=True)
class BlockOverride:
    """Persisted field-level patch over a block. None means "not overridden"."""

    block_id: str
    name: str | None = None
    description: str | None = None
    variants: Mapping[str, str] | None = None

    def __post_init__(self) -> None:
        if self.variants is not None:
            object.__setattr__(self, "variants", _freeze(self.variants))

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "variants": dict(self.variants) if self.variants is not None else None,
        }


@dataclass(frozen=True)
class ModifierOverride:
    """Persisted field-level patch over a modifier."""

    modifier_id: str
    name: str | None = None
    description: str | None = None
    content: str | None = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "content": self.content,
        }


@dataclass(frozen=True)
class OverrideSnapshot:
    """Immutable view of every stored override at one point in time."""

    block_overrides: Mapping[str, BlockOverride] = field(default_factory=dict)
    modifier_overrides: Mapping[str, ModifierOverride] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "block_overrides", MappingProxyType(dict(self.block_overrides)))
        object.__setattr__(self, "modifier_overrides", MappingProxyType(dict(self.modifier_overrides)))

    @classmethod
    def empty(cls) -> "OverrideSnapshot":
        return cls()

    def to_dict(self) -> dict:
        """Serialize for the shared cache tier."""
        return {
            "blocks": {key: o.to_dict() for key, o in self.block_overrides.items()},
            "modifiers": {key: o.to_dict() for key, o in self.modifier_overrides.items()},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "OverrideSnapshot":
        blocks = {
            key: BlockOverride(block_id=key, **value)
            for key, value in (data.get("blocks") or {}).items()
        }
        modifiers = {
            key: ModifierOverride(modifier_id=key, **value)
            for key, value in (data.get("modifiers") or {}).items()
        }
        return cls(block_overrides=blocks, modifier_overrides=modifiers)


@dataclass(frozen=True)
class Section:
    """One resolved contributor to a composed prompt."""

    id: str
    title: str
    text: str
    enabled: bool
    kind: str = "block"  # "block" or "modifier"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "text": self.text,
            "enabled": self.enabled,
            "kind": self.kind,
        }

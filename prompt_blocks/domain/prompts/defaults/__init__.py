"""Built-in block registry: blocks, modifiers, and compositions."""

from typing import Iterable, Mapping

from prompt_blocks.domain.prompts.defaults.blocks import DEFAULT_BLOCKS
from prompt_blocks.domain.prompts.defaults.compositions import (
    DEFAULT_COMPOSITIONS,
    LEGACY_CONTEXT_KEYS,
)
from prompt_blocks.domain.prompts.defaults.modifiers import (
    DEFAULT_MODIFIERS,
    DOMAIN_MODIFIER_IDS,
    MODE_MODIFIER_IDS,
)
from prompt_blocks.domain.prompts.errors import RegistryError
from prompt_blocks.domain.prompts.types import (
    DEFAULT_VARIANT,
    Block,
    Composition,
    Modifier,
    ModifierType,
    PromptContext,
)


def get_default_blocks() -> tuple[Block, ...]:
    """Get the built-in blocks."""
    return DEFAULT_BLOCKS


def get_default_modifiers() -> tuple[Modifier, ...]:
    """Get the built-in modifiers."""
    return DEFAULT_MODIFIERS


def get_default_compositions() -> tuple[Composition, ...]:
    """Get the built-in compositions."""
    return DEFAULT_COMPOSITIONS


_BLOCKS_BY_ID = {block.id: block for block in DEFAULT_BLOCKS}
_MODIFIERS_BY_ID = {modifier.id: modifier for modifier in DEFAULT_MODIFIERS}
_COMPOSITIONS_BY_CONTEXT = {c.context: c for c in DEFAULT_COMPOSITIONS}


def get_block(block_id: str) -> Block | None:
    return _BLOCKS_BY_ID.get(block_id)


def get_modifier(modifier_id: str) -> Modifier | None:
    return _MODIFIERS_BY_ID.get(modifier_id)


def get_composition(context: str) -> Composition | None:
    return _COMPOSITIONS_BY_CONTEXT.get(context)


def resolve_context_key(key: str) -> str | None:
    """Map a call-site key (current or legacy) to a context name.

    Returns None when the key names no known context.
    """
    if key in _COMPOSITIONS_BY_CONTEXT:
        return key
    return LEGACY_CONTEXT_KEYS.get(key)


def _check_unique(kind: str, ids: Iterable[str]) -> None:
    seen: set[str] = set()
    for entity_id in ids:
        if entity_id in seen:
            raise RegistryError(f"Duplicate {kind} id: {entity_id}")
        seen.add(entity_id)


def _check_selector_map(
    name: str,
    selector_map: Mapping[str, str],
    expected: ModifierType,
    modifiers: Mapping[str, Modifier],
) -> None:
    for selector, modifier_id in selector_map.items():
        modifier = modifiers.get(modifier_id)
        if modifier is None:
            raise RegistryError(f"{name}[{selector!r}] points at unknown modifier {modifier_id!r}")
        if modifier.type is not expected:
            raise RegistryError(
                f"{name}[{selector!r}] points at {modifier_id!r} of type {modifier.type.value}, "
                f"expected {expected.value}"
            )


def validate_registry(
    blocks: tuple[Block, ...] = DEFAULT_BLOCKS,
    modifiers: tuple[Modifier, ...] = DEFAULT_MODIFIERS,
    compositions: tuple[Composition, ...] = DEFAULT_COMPOSITIONS,
    mode_ids: Mapping[str, str] = MODE_MODIFIER_IDS,
    domain_ids: Mapping[str, str] = DOMAIN_MODIFIER_IDS,
) -> None:
    """Check the registry for inconsistencies.

    Compositions referencing unknown block ids are allowed; those ids
    contribute nothing when a prompt is built.

    Raises:
        RegistryError: If ids are duplicated, a block has no default
            variant, or a selector map points at a missing or mistyped
            modifier.
    """
    _check_unique("block", (b.id for b in blocks))
    _check_unique("modifier", (m.id for m in modifiers))
    _check_unique("composition", (c.context for c in compositions))

    for block in blocks:
        if DEFAULT_VARIANT not in block.variants:
            raise RegistryError(f"Block {block.id!r} has no {DEFAULT_VARIANT!r} variant")

    known_contexts = {context.value for context in PromptContext}
    for composition in compositions:
        if composition.context not in known_contexts:
            raise RegistryError(f"Composition for unknown context {composition.context!r}")

    by_id = {m.id: m for m in modifiers}
    _check_selector_map("MODE_MODIFIER_IDS", mode_ids, ModifierType.MODE, by_id)
    _check_selector_map("DOMAIN_MODIFIER_IDS", domain_ids, ModifierType.DOMAIN, by_id)


validate_registry()


__all__ = [
    "DEFAULT_BLOCKS",
    "DEFAULT_COMPOSITIONS",
    "DEFAULT_MODIFIERS",
    "DOMAIN_MODIFIER_IDS",
    "LEGACY_CONTEXT_KEYS",
    "MODE_MODIFIER_IDS",
    "get_block",
    "get_composition",
    "get_default_blocks",
    "get_default_compositions",
    "get_default_modifiers",
    "get_modifier",
    "resolve_context_key",
    "validate_registry",
]

"""Assembles final system prompt from registry defaults + stored overrides."""

from typing import Iterable, Mapping, Sequence

from prompt_blocks.domain.prompts.defaults import (
    DEFAULT_BLOCKS,
    DEFAULT_COMPOSITIONS,
    DEFAULT_MODIFIERS,
    DOMAIN_MODIFIER_IDS,
    MODE_MODIFIER_IDS,
)
from prompt_blocks.domain.prompts.types import (
    Block,
    BlockOverride,
    Composition,
    Modifier,
    ModifierOverride,
    ModifierType,
    OverrideSnapshot,
    Section,
)

SECTION_SEPARATOR = "\n\n"


def merge_block(block: Block, override: BlockOverride | None) -> Block:
    """Apply an override patch over a block, field by field.

    Unset (None or empty) name/description keep the default. Override
    variants are merged key by key; a blank override variant clears that
    context instead of falling back to the default variant.
    """
    if override is None:
        return block

    variants = dict(block.variants)
    cleared = set(block.cleared)
    for context, text in (override.variants or {}).items():
        variants[context] = text
        if text.strip():
            cleared.discard(context)
        else:
            cleared.add(context)

    return Block(
        id=block.id,
        name=override.name or block.name,
        description=override.description or block.description,
        tier=block.tier,
        variants=variants,
        cleared=frozenset(cleared),
    )


def merge_modifier(modifier: Modifier, override: ModifierOverride | None) -> Modifier:
    """Apply an override patch over a modifier, field by field."""
    if override is None:
        return modifier

    return Modifier(
        id=modifier.id,
        name=override.name or modifier.name,
        type=modifier.type,
        tier=modifier.tier,
        content=override.content if override.content is not None else modifier.content,
        description=override.description or modifier.description,
    )


def join_sections(texts: Iterable[str]) -> str:
    """Join non-blank section texts with a blank line and trim the result."""
    return SECTION_SEPARATOR.join(text for text in texts if text.strip()).strip()


def dedupe(values: Iterable[str]) -> list[str]:
    """Drop repeated values, keeping first occurrence order."""
    seen: set[str] = set()
    result = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


class PromptAssembler:
    """Assembles system prompts from blocks, compositions, and modifiers.

    This class combines:
    1. Registry blocks with any stored overrides merged in
    2. The composition (ordered block ids) for the requested context
    3. Mode and domain modifiers the composition allows

    An assembler is built over one override snapshot and performs no I/O,
    so the same arguments always produce the same prompt.
    """

    def __init__(
        self,
        snapshot: OverrideSnapshot | None = None,
        blocks: Sequence[Block] = DEFAULT_BLOCKS,
        modifiers: Sequence[Modifier] = DEFAULT_MODIFIERS,
        compositions: Sequence[Composition] = DEFAULT_COMPOSITIONS,
        mode_modifier_ids: Mapping[str, str] = MODE_MODIFIER_IDS,
        domain_modifier_ids: Mapping[str, str] = DOMAIN_MODIFIER_IDS,
    ):
        """Initialize the assembler.

        Args:
            snapshot: Stored overrides to apply (defaults only if None)
            blocks: Registry blocks
            modifiers: Registry modifiers
            compositions: Composition table
            mode_modifier_ids: Mode selector -> modifier id
            domain_modifier_ids: Domain selector -> modifier id
        """
        snapshot = snapshot or OverrideSnapshot.empty()
        self.blocks: dict[str, Block] = {
            block.id: merge_block(block, snapshot.block_overrides.get(block.id))
            for block in blocks
        }
        self.modifiers: dict[str, Modifier] = {
            modifier.id: merge_modifier(modifier, snapshot.modifier_overrides.get(modifier.id))
            for modifier in modifiers
        }
        self.compositions: tuple[Composition, ...] = tuple(compositions)
        self._compositions_by_context = {c.context: c for c in self.compositions}
        self.mode_modifier_ids = mode_modifier_ids
        self.domain_modifier_ids = domain_modifier_ids

    def get_composition(self, context: str) -> Composition | None:
        return self._compositions_by_context.get(context)

    def build(
        self,
        context: str,
        mode: str | None = None,
        domains: Sequence[str] | None = None,
        fallback: str = "",
        with_titles: bool = False,
    ) -> str:
        """Assemble the final system prompt.

        Args:
            context: Usage context (e.g. "questions")
            mode: Optional mode selector (e.g. "bulk")
            domains: Optional domain selectors, in the order to append them
            fallback: Text returned when nothing usable can be composed
            with_titles: Prefix each section with a "## <name>" header

        Returns:
            Assembled system prompt string, or ``fallback``
        """
        composition = self.get_composition(context)
        if composition is None:
            return fallback

        sections = self._collect_sections(composition, context, mode, domains)
        prompt = join_sections(
            self._render(section, with_titles) for section in sections if section.enabled
        )
        return prompt or fallback

    def list_sections(
        self,
        context: str,
        mode: str | None = None,
        domains: Sequence[str] | None = None,
    ) -> list[Section]:
        """Get the ordered section breakdown for a context.

        Every existing block in the composition is listed, disabled when its
        text is blank. Contexts without a composition are previewed with the
        first defined composition.
        """
        composition = self.get_composition(context)
        if composition is None:
            if not self.compositions:
                return []
            composition = self.compositions[0]
        return self._collect_sections(composition, context, mode, domains)

    def _collect_sections(
        self,
        composition: Composition,
        context: str,
        mode: str | None,
        domains: Sequence[str] | None,
    ) -> list[Section]:
        sections: list[Section] = []

        # Blocks in composition order; unknown ids contribute nothing
        for block_id in composition.block_ids:
            block = self.blocks.get(block_id)
            if block is None:
                continue
            text = block.text_for(context)
            sections.append(Section(
                id=block.id,
                title=block.name,
                text=text,
                enabled=bool(text.strip()),
                kind="block",
            ))

        if composition.supports_modes and mode:
            modifier = self._find_modifier(self.mode_modifier_ids, mode, ModifierType.MODE)
            if modifier is not None:
                sections.append(self._modifier_section(modifier))

        if composition.supports_domains and domains:
            for domain in dedupe(domains):
                modifier = self._find_modifier(self.domain_modifier_ids, domain, ModifierType.DOMAIN)
                if modifier is not None:
                    sections.append(self._modifier_section(modifier))

        return sections

    def _find_modifier(
        self,
        selector_map: Mapping[str, str],
        selector: str,
        expected: ModifierType,
    ) -> Modifier | None:
        modifier_id = selector_map.get(selector)
        if modifier_id is None:
            return None
        modifier = self.modifiers.get(modifier_id)
        if modifier is None or modifier.type is not expected:
            return None
        return modifier

    @staticmethod
    def _modifier_section(modifier: Modifier) -> Section:
        return Section(
            id=modifier.id,
            title=modifier.name,
            text=modifier.content,
            enabled=bool(modifier.content.strip()),
            kind="modifier",
        )

    @staticmethod
    def _render(section: Section, with_titles: bool) -> str:
        if with_titles:
            return f"## {section.title}\n{section.text}"
        return section.text


def assemble_prompt(
    context: str,
    snapshot: OverrideSnapshot | None = None,
    mode: str | None = None,
    domains: Sequence[str] | None = None,
    fallback: str = "",
) -> str:
    """Convenience function to assemble a prompt.

    Args:
        context: Usage context
        snapshot: Stored overrides to apply
        mode: Optional mode selector
        domains: Optional domain selectors
        fallback: Text returned when nothing usable can be composed

    Returns:
        Assembled system prompt
    """
    assembler = PromptAssembler(snapshot)
    return assembler.build(context, mode=mode, domains=domains, fallback=fallback)

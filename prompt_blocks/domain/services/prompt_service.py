"""Prompt service for override management and prompt composition."""

import logging
from typing import Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from prompt_blocks.domain.prompts.assembler import PromptAssembler, merge_block, merge_modifier
from prompt_blocks.domain.prompts.defaults import (
    get_block,
    get_modifier,
    resolve_context_key,
)
from prompt_blocks.domain.prompts.errors import OverrideWriteError, UnknownPromptEntityError
from prompt_blocks.domain.prompts.types import (
    Block,
    BlockOverride,
    Modifier,
    ModifierOverride,
    OverrideSnapshot,
    Section,
)
from prompt_blocks.domain.services.override_cache import OverrideCache, override_cache
from prompt_blocks.persistence.repositories.prompt_override_repository import (
    PromptBlockOverrideRepository,
    PromptModifierOverrideRepository,
)

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_PROMPT = "You are a helpful assistant."


class PromptService:
    """Service for prompt override management and composition."""

    def __init__(self, session: AsyncSession, cache: OverrideCache | None = None) -> None:
        """Initialize prompt service."""
        self.session = session
        self.cache = cache if cache is not None else override_cache
        self.block_repo = PromptBlockOverrideRepository(session)
        self.modifier_repo = PromptModifierOverrideRepository(session)

    async def fetch_overrides(self) -> OverrideSnapshot:
        """Get the current override snapshot through the cache.

        Never raises: if storage is unreachable the built-in defaults are
        used for this call and nothing is cached.
        """
        try:
            return await self.cache.get(self._load_snapshot)
        except Exception as e:
            logger.warning(
                f"Prompt overrides unavailable, using built-in defaults: {e}",
                extra={"error_type": type(e).__name__},
            )
            return OverrideSnapshot.empty()

    async def _load_snapshot(self) -> OverrideSnapshot:
        block_rows = await self.block_repo.list_all()
        modifier_rows = await self.modifier_repo.list_all()
        return OverrideSnapshot(
            block_overrides={
                row.block_id: BlockOverride(
                    block_id=row.block_id,
                    name=row.name,
                    description=row.description,
                    variants=row.variants,
                )
                for row in block_rows
            },
            modifier_overrides={
                row.modifier_id: ModifierOverride(
                    modifier_id=row.modifier_id,
                    name=row.name,
                    description=row.description,
                    content=row.content,
                )
                for row in modifier_rows
            },
        )

    async def get_assembler(self) -> PromptAssembler:
        """Get an assembler bound to the current override snapshot."""
        return PromptAssembler(await self.fetch_overrides())

    async def build(
        self,
        context: str,
        mode: str | None = None,
        domains: Sequence[str] | None = None,
        fallback: str = DEFAULT_FALLBACK_PROMPT,
        with_titles: bool = False,
    ) -> str:
        """Compose the system prompt for a context.

        Args:
            context: Usage context (e.g. "questions")
            mode: Optional mode selector
            domains: Optional domain selectors, in order
            fallback: Returned when no usable composition exists
            with_titles: Prefix each section with its name

        Returns:
            Composed prompt string, or ``fallback``
        """
        assembler = await self.get_assembler()
        return assembler.build(
            context, mode=mode, domains=domains, fallback=fallback, with_titles=with_titles
        )

    async def load_system_prompt(
        self,
        key: str,
        fallback: str,
        mode: str | None = None,
        domains: Sequence[str] | None = None,
    ) -> str:
        """Compose a prompt for a call-site key, accepting legacy key names.

        Unknown keys return ``fallback`` unchanged.
        """
        context = resolve_context_key(key)
        if context is None:
            logger.debug(f"No prompt context for key {key!r}, using fallback")
            return fallback
        return await self.build(context, mode=mode, domains=domains, fallback=fallback)

    async def list_sections(
        self,
        context: str,
        mode: str | None = None,
        domains: Sequence[str] | None = None,
    ) -> list[Section]:
        """Get the ordered section breakdown used for previews and optimization."""
        assembler = await self.get_assembler()
        return assembler.list_sections(context, mode=mode, domains=domains)

    async def list_blocks(self) -> list[Block]:
        """Get every block with stored overrides merged in."""
        assembler = await self.get_assembler()
        return list(assembler.blocks.values())

    async def list_modifiers(self) -> list[Modifier]:
        """Get every modifier with stored overrides merged in."""
        assembler = await self.get_assembler()
        return list(assembler.modifiers.values())

    async def _rollback(self) -> None:
        try:
            await self.session.rollback()
        except SQLAlchemyError as e:
            logger.warning(f"Rollback after failed prompt override write also failed: {e}")

    async def apply_block_override(
        self,
        block_id: str,
        name: str | None = None,
        description: str | None = None,
        variants: dict[str, str] | None = None,
        updated_by: str | None = None,
    ) -> Block:
        """Upsert a field-level patch for a block.

        Returns:
            The block with the stored override merged over its default

        Raises:
            UnknownPromptEntityError: If the block is not in the registry
            OverrideWriteError: If the patch could not be stored
        """
        default = get_block(block_id)
        if default is None:
            raise UnknownPromptEntityError("block", block_id)

        try:
            row = await self.block_repo.upsert_patch(
                block_id,
                name=name,
                description=description,
                variants=variants,
                updated_by=updated_by,
            )
        except SQLAlchemyError as e:
            await self._rollback()
            logger.error(f"Failed to save override for block {block_id}: {e}")
            raise OverrideWriteError(f"Failed to save prompt block {block_id}: {e}") from e
        finally:
            await self.cache.invalidate()

        logger.info(
            "Prompt block override saved",
            extra={"block_id": block_id, "updated_by": updated_by},
        )
        return merge_block(default, BlockOverride(
            block_id=row.block_id,
            name=row.name,
            description=row.description,
            variants=row.variants,
        ))

    async def apply_modifier_override(
        self,
        modifier_id: str,
        name: str | None = None,
        description: str | None = None,
        content: str | None = None,
        updated_by: str | None = None,
    ) -> Modifier:
        """Upsert a field-level patch for a modifier.

        Raises:
            UnknownPromptEntityError: If the modifier is not in the registry
            OverrideWriteError: If the patch could not be stored
        """
        default = get_modifier(modifier_id)
        if default is None:
            raise UnknownPromptEntityError("modifier", modifier_id)

        try:
            row = await self.modifier_repo.upsert_patch(
                modifier_id,
                name=name,
                description=description,
                content=content,
                updated_by=updated_by,
            )
        except SQLAlchemyError as e:
            await self._rollback()
            logger.error(f"Failed to save override for modifier {modifier_id}: {e}")
            raise OverrideWriteError(f"Failed to save prompt modifier {modifier_id}: {e}") from e
        finally:
            await self.cache.invalidate()

        logger.info(
            "Prompt modifier override saved",
            extra={"modifier_id": modifier_id, "updated_by": updated_by},
        )
        return merge_modifier(default, ModifierOverride(
            modifier_id=row.modifier_id,
            name=row.name,
            description=row.description,
            content=row.content,
        ))

    async def invalidate_cache(self) -> None:
        """Force the next read to fetch fresh overrides."""
        await self.cache.invalidate()

"""Prompt override repositories."""

from sqlalchemy.ext.asyncio import AsyncSession

from prompt_blocks.persistence.models.prompt_override import (
    PromptBlockOverride,
    PromptModifierOverride,
)
from prompt_blocks.persistence.repositories.base import KeyedRepository


class PromptBlockOverrideRepository(KeyedRepository[PromptBlockOverride]):
    """Repository for PromptBlockOverride entities."""

    key_field = "block_id"

    def __init__(self, session: AsyncSession):
        """Initialize block override repository."""
        super().__init__(PromptBlockOverride, session)

    async def upsert_patch(
        self,
        block_id: str,
        name: str | None = None,
        description: str | None = None,
        variants: dict[str, str] | None = None,
        updated_by: str | None = None,
    ) -> PromptBlockOverride:
        """Merge a patch into the stored override for a block.

        Fields left as None keep their stored value. ``variants`` is merged
        key by key into the stored variants.
        """
        existing = await self.get_by_key(block_id)
        data: dict = {"updated_by": updated_by}
        if name is not None:
            data["name"] = name
        if description is not None:
            data["description"] = description
        if variants is not None:
            merged = dict(existing.variants or {}) if existing else {}
            merged.update(variants)
            # Assign a new dict so the JSON column is flagged dirty
            data["variants"] = merged
        return await self.upsert(block_id, **data)


class PromptModifierOverrideRepository(KeyedRepository[PromptModifierOverride]):
    """Repository for PromptModifierOverride entities."""

    key_field = "modifier_id"

    def __init__(self, session: AsyncSession):
        """Initialize modifier override repository."""
        super().__init__(PromptModifierOverride, session)

    async def upsert_patch(
        self,
        modifier_id: str,
        name: str | None = None,
        description: str | None = None,
        content: str | None = None,
        updated_by: str | None = None,
    ) -> PromptModifierOverride:
        """Merge a patch into the stored override for a modifier."""
        data: dict = {"updated_by": updated_by}
        if name is not None:
            data["name"] = name
        if description is not None:
            data["description"] = description
        if content is not None:
            data["content"] = content
        return await self.upsert(modifier_id, **data)

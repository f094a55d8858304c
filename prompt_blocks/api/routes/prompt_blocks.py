"""Routes for browsing and editing prompt blocks and modifiers."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from prompt_blocks.api.deps import get_prompt_service
from prompt_blocks.domain.prompts.defaults import get_default_compositions
from prompt_blocks.domain.prompts.errors import OverrideWriteError, UnknownPromptEntityError
from prompt_blocks.domain.prompts.types import TIER_INFO
from prompt_blocks.domain.services.prompt_service import PromptService

logger = logging.getLogger(__name__)

router = APIRouter()


class BlockResponse(BaseModel):
    """Block with stored overrides merged in."""

    id: str
    name: str
    description: str
    tier: int
    variants: dict[str, str]


class ModifierResponse(BaseModel):
    """Modifier with stored overrides merged in."""

    id: str
    name: str
    description: str
    type: str
    tier: int
    content: str


class CompositionResponse(BaseModel):
    context: str
    block_ids: list[str]
    supports_modes: bool
    supports_domains: bool


class TierResponse(BaseModel):
    tier: int
    label: str
    description: str
    warning: str | None = None


class PromptBlocksResponse(BaseModel):
    """Everything an editor needs to render the block library."""

    blocks: list[BlockResponse]
    modifiers: list[ModifierResponse]
    compositions: list[CompositionResponse]
    tiers: list[TierResponse]


class BlockUpdate(BaseModel):
    """Field-level block patch. Omitted fields keep their current value."""

    name: str | None = None
    description: str | None = None
    variants: dict[str, str] | None = None
    updated_by: str | None = None


class ModifierUpdate(BaseModel):
    """Field-level modifier patch."""

    name: str | None = None
    description: str | None = None
    content: str | None = None
    updated_by: str | None = None


@router.get("", response_model=PromptBlocksResponse)
async def list_prompt_blocks(
    service: Annotated[PromptService, Depends(get_prompt_service)],
) -> PromptBlocksResponse:
    """List merged blocks and modifiers with the composition table and tiers."""
    blocks = await service.list_blocks()
    modifiers = await service.list_modifiers()
    return PromptBlocksResponse(
        blocks=[BlockResponse(**block.to_dict()) for block in blocks],
        modifiers=[ModifierResponse(**modifier.to_dict()) for modifier in modifiers],
        compositions=[CompositionResponse(**c.to_dict()) for c in get_default_compositions()],
        tiers=[
            TierResponse(tier=int(tier), label=info.label, description=info.description, warning=info.warning)
            for tier, info in TIER_INFO.items()
        ],
    )


@router.put("/blocks/{block_id}", response_model=BlockResponse)
async def update_block(
    block_id: str,
    patch: BlockUpdate,
    service: Annotated[PromptService, Depends(get_prompt_service)],
) -> BlockResponse:
    """Save a block override."""
    try:
        block = await service.apply_block_override(
            block_id,
            name=patch.name,
            description=patch.description,
            variants=patch.variants,
            updated_by=patch.updated_by,
        )
    except UnknownPromptEntityError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except OverrideWriteError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    return BlockResponse(**block.to_dict())


@router.put("/modifiers/{modifier_id}", response_model=ModifierResponse)
async def update_modifier(
    modifier_id: str,
    patch: ModifierUpdate,
    service: Annotated[PromptService, Depends(get_prompt_service)],
) -> ModifierResponse:
    """Save a modifier override."""
    try:
        modifier = await service.apply_modifier_override(
            modifier_id,
            name=patch.name,
            description=patch.description,
            content=patch.content,
            updated_by=patch.updated_by,
        )
    except UnknownPromptEntityError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except OverrideWriteError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    return ModifierResponse(**modifier.to_dict())

"""Routes for composing prompts and running optimization."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from prompt_blocks.api.deps import get_llm, get_prompt_service
from prompt_blocks.domain.prompts.errors import (
    OptimizationError,
    OptimizationTimeoutError,
    OverrideWriteError,
    UnknownPromptEntityError,
)
from prompt_blocks.domain.prompts.types import PromptContext
from prompt_blocks.domain.services.prompt_optimizer import (
    OPTIMIZER_FALLBACK_PROMPT,
    OptimizationResult,
    OptimizationSuggestion,
    OutputFormat,
    apply_suggestions,
    request_optimization,
)
from prompt_blocks.domain.services.prompt_service import DEFAULT_FALLBACK_PROMPT, PromptService
from prompt_blocks.llm.client import LLMClient

logger = logging.getLogger(__name__)

router = APIRouter()

VALID_CONTEXTS = frozenset(context.value for context in PromptContext)


def _require_context(context: str) -> str:
    if context not in VALID_CONTEXTS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid context: {context}",
        )
    return context


class SectionResponse(BaseModel):
    id: str
    title: str
    text: str
    enabled: bool
    kind: str


class PromptBuildRequest(BaseModel):
    """Prompt build request."""

    context: str
    mode: str | None = None
    domains: list[str] = Field(default_factory=list)
    fallback: str = DEFAULT_FALLBACK_PROMPT
    with_titles: bool = False


class PromptBuildResponse(BaseModel):
    prompt: str


class OptimizeRequest(BaseModel):
    """Request optimization suggestions for a context."""

    context: str
    mode: str | None = None
    domains: list[str] = Field(default_factory=list)
    output_format: OutputFormat = OutputFormat.PLAIN_TEXT
    timeout_seconds: float | None = Field(default=None, gt=0)


class ApplyRequest(BaseModel):
    """Apply selected suggestions from a previous analysis."""

    context: str
    mode: str | None = None
    domains: list[str] = Field(default_factory=list)
    suggestions: list[OptimizationSuggestion]
    selected: list[int] | None = None
    updated_by: str | None = None


class ApplyResponse(BaseModel):
    applied: list[int]
    sections: list[SectionResponse]


@router.post("/build", response_model=PromptBuildResponse)
async def build_prompt(
    request: PromptBuildRequest,
    service: Annotated[PromptService, Depends(get_prompt_service)],
) -> PromptBuildResponse:
    """Compose the system prompt for a context."""
    context = _require_context(request.context)
    prompt = await service.build(
        context,
        mode=request.mode,
        domains=request.domains,
        fallback=request.fallback,
        with_titles=request.with_titles,
    )
    return PromptBuildResponse(prompt=prompt)


@router.get("/sections/{context}", response_model=list[SectionResponse])
async def list_sections(
    context: str,
    service: Annotated[PromptService, Depends(get_prompt_service)],
    mode: str | None = None,
    domains: Annotated[list[str] | None, Query()] = None,
) -> list[SectionResponse]:
    """Ordered section breakdown of a context's prompt."""
    _require_context(context)
    sections = await service.list_sections(context, mode=mode, domains=domains)
    return [SectionResponse(**section.to_dict()) for section in sections]


@router.post("/optimize", response_model=OptimizationResult)
async def optimize_prompt(
    request: OptimizeRequest,
    service: Annotated[PromptService, Depends(get_prompt_service)],
    llm_client: Annotated[LLMClient, Depends(get_llm)],
) -> OptimizationResult:
    """Ask the LLM for token-reduction suggestions."""
    context = _require_context(request.context)
    sections = await service.list_sections(context, mode=request.mode, domains=request.domains)
    base_prompt = await service.load_system_prompt(
        PromptContext.PROMPT_OPTIMIZE.value, OPTIMIZER_FALLBACK_PROMPT
    )

    try:
        return await request_optimization(
            llm_client,
            base_prompt,
            context,
            sections,
            output_format=request.output_format,
            timeout=request.timeout_seconds,
        )
    except OptimizationTimeoutError as e:
        raise HTTPException(status_code=status.HTTP_504_GATEWAY_TIMEOUT, detail=str(e))
    except OptimizationError as e:
        logger.warning(f"Optimization failed for {context}: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))


@router.post("/optimize/apply", response_model=ApplyResponse)
async def apply_optimization(
    request: ApplyRequest,
    service: Annotated[PromptService, Depends(get_prompt_service)],
) -> ApplyResponse:
    """Write selected suggestions back as overrides.

    Without an explicit ``selected`` list every suggestion is applied.
    """
    context = _require_context(request.context)
    sections = await service.list_sections(context, mode=request.mode, domains=request.domains)
    selected = request.selected if request.selected is not None else range(len(request.suggestions))

    try:
        applied = await apply_suggestions(
            service,
            context,
            sections,
            request.suggestions,
            selected,
            updated_by=request.updated_by,
        )
    except UnknownPromptEntityError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except OverrideWriteError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"message": str(e), "pending": e.pending},
        )

    refreshed = await service.list_sections(context, mode=request.mode, domains=request.domains)
    return ApplyResponse(
        applied=applied,
        sections=[SectionResponse(**section.to_dict()) for section in refreshed],
    )

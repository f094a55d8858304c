"""FastAPI dependencies for prompt services and the LLM provider."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from prompt_blocks.domain.services.prompt_service import PromptService
from prompt_blocks.llm.client import LLMClient
from prompt_blocks.llm.factory import get_llm_client
from prompt_blocks.persistence.database import get_db


async def get_prompt_service(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PromptService:
    """Get a prompt service bound to the request's database session."""
    return PromptService(db)


def get_llm() -> LLMClient:
    """Get the configured LLM client."""
    return get_llm_client()

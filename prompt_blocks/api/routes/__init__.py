"""API routes."""

from fastapi import APIRouter

from prompt_blocks.api.routes import prompt_blocks, prompts

api_router = APIRouter()

api_router.include_router(prompt_blocks.router, prefix="/prompt-blocks", tags=["prompt-blocks"])
api_router.include_router(prompts.router, prefix="/prompts", tags=["prompts"])

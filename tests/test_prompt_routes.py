"""Tests for the prompt HTTP API."""

import asyncio
import json

import pytest

from prompt_blocks.domain.prompts.assembler import assemble_prompt
from prompt_blocks.domain.prompts.defaults import get_block
from prompt_blocks.llm.client import LLMGenerationError

API = "/api/v1"

REMOVE_RULES = {
    "sectionId": "quality_rules",
    "sectionTitle": "Quality Rules",
    "type": "remove",
    "priority": "high",
    "issue": "Redundant",
    "suggestion": "Drop it",
    "originalText": "Before finalizing, check:",
    "tokenSavings": 20,
}


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


@pytest.mark.asyncio
async def test_request_id_is_echoed(client):
    response = await client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


class TestPromptBlocks:
    """Block library endpoints."""

    @pytest.mark.asyncio
    async def test_list(self, client):
        response = await client.get(f"{API}/prompt-blocks")

        assert response.status_code == 200
        data = response.json()
        assert "role_mission" in {b["id"] for b in data["blocks"]}
        assert "mode_bulk" in {m["id"] for m in data["modifiers"]}
        assert len(data["compositions"]) == 16
        assert [t["tier"] for t in data["tiers"]] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_update_block(self, client):
        response = await client.put(
            f"{API}/prompt-blocks/blocks/role_mission",
            json={"name": "Persona", "variants": {"questions": "You are an assistant."}},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Persona"
        assert data["variants"]["questions"] == "You are an assistant."
        assert data["variants"]["chat"] == get_block("role_mission").variants["chat"]

        built = await client.post(f"{API}/prompts/build", json={"context": "questions"})
        assert built.json()["prompt"].startswith("You are an assistant.\n\n")

    @pytest.mark.asyncio
    async def test_update_unknown_block(self, client):
        response = await client.put(f"{API}/prompt-blocks/blocks/nope", json={"name": "X"})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_update_modifier(self, client):
        response = await client.put(
            f"{API}/prompt-blocks/modifiers/mode_bulk",
            json={"content": "Be terse.", "updated_by": "editor"},
        )

        assert response.status_code == 200
        assert response.json()["content"] == "Be terse."

    @pytest.mark.asyncio
    async def test_update_unknown_modifier(self, client):
        response = await client.put(f"{API}/prompt-blocks/modifiers/nope", json={"content": "X"})
        assert response.status_code == 404


class TestPrompts:
    """Build and section endpoints."""

    @pytest.mark.asyncio
    async def test_build(self, client):
        response = await client.post(
            f"{API}/prompts/build",
            json={"context": "questions", "mode": "bulk", "domains": ["legal"]},
        )

        assert response.status_code == 200
        assert response.json()["prompt"] == assemble_prompt("questions", mode="bulk", domains=["legal"])

    @pytest.mark.asyncio
    async def test_build_invalid_context(self, client):
        response = await client.post(f"{API}/prompts/build", json={"context": "bogus"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_sections(self, client):
        response = await client.get(f"{API}/prompts/sections/questions", params={"mode": "bulk"})

        assert response.status_code == 200
        sections = response.json()
        assert sections[-1]["id"] == "mode_bulk"
        assert sections[-1]["kind"] == "modifier"

    @pytest.mark.asyncio
    async def test_sections_invalid_context(self, client):
        response = await client.get(f"{API}/prompts/sections/bogus")
        assert response.status_code == 400


class TestOptimize:
    """Optimization endpoints."""

    @pytest.mark.asyncio
    async def test_optimize(self, client, llm_client):
        llm_client.complete.return_value = json.dumps({"suggestions": [REMOVE_RULES], "summary": "Tight."})

        response = await client.post(f"{API}/prompts/optimize", json={"context": "questions"})

        assert response.status_code == 200
        data = response.json()
        assert data["summary"] == "Tight."
        assert data["suggestions"][0]["section_id"] == "quality_rules"
        assert data["suggestions"][0]["token_savings"] == 20
        assert data["transparency"]["model"] == "test-model"

    @pytest.mark.asyncio
    async def test_optimize_malformed_response(self, client, llm_client):
        llm_client.complete.return_value = "Sorry, I can't help with that."

        response = await client.post(f"{API}/prompts/optimize", json={"context": "questions"})

        assert response.status_code == 502

    @pytest.mark.asyncio
    async def test_optimize_provider_failure(self, client, llm_client):
        llm_client.complete.side_effect = LLMGenerationError("unavailable")

        response = await client.post(f"{API}/prompts/optimize", json={"context": "questions"})

        assert response.status_code == 502

    @pytest.mark.asyncio
    async def test_optimize_timeout(self, client, llm_client):
        async def slow(*args, **kwargs):
            await asyncio.sleep(5)
            return "{}"

        llm_client.complete.side_effect = slow

        response = await client.post(
            f"{API}/prompts/optimize",
            json={"context": "questions", "timeout_seconds": 0.01},
        )

        assert response.status_code == 504

    @pytest.mark.asyncio
    async def test_apply(self, client):
        response = await client.post(
            f"{API}/prompts/optimize/apply",
            json={"context": "questions", "suggestions": [REMOVE_RULES], "updated_by": "editor"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["applied"] == [0]
        rules = next(s for s in data["sections"] if s["id"] == "quality_rules")
        assert rules["text"] == ""
        assert rules["enabled"] is False

    @pytest.mark.asyncio
    async def test_apply_unselected_is_skipped(self, client):
        response = await client.post(
            f"{API}/prompts/optimize/apply",
            json={"context": "questions", "suggestions": [REMOVE_RULES], "selected": []},
        )

        assert response.status_code == 200
        assert response.json()["applied"] == []

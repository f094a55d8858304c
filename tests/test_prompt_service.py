"""Tests for PromptService and the override cache."""

import asyncio
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import SQLAlchemyError

from prompt_blocks.domain.prompts.assembler import assemble_prompt
from prompt_blocks.domain.prompts.defaults import get_block
from prompt_blocks.domain.prompts.errors import OverrideWriteError, UnknownPromptEntityError
from prompt_blocks.domain.prompts.types import BlockOverride, OverrideSnapshot
from prompt_blocks.domain.services.override_cache import OVERRIDES_CACHE_KEY, OverrideCache
from prompt_blocks.domain.services.prompt_service import PromptService
from prompt_blocks.infrastructure.redis import RedisClient


@pytest.fixture
def service(db_session, cache):
    return PromptService(db_session, cache=cache)


class TestBuild:
    """Composition through the service."""

    @pytest.mark.asyncio
    async def test_defaults_without_overrides(self, service):
        assert await service.build("questions") == assemble_prompt("questions")

    @pytest.mark.asyncio
    async def test_unknown_context_returns_fallback(self, service):
        assert await service.build("nonexistent-context", fallback="Plain.") == "Plain."

    @pytest.mark.asyncio
    async def test_legacy_key(self, service):
        assert await service.load_system_prompt("skill_builder", "x") == await service.build("skills")

    @pytest.mark.asyncio
    async def test_unknown_key_returns_fallback(self, service):
        assert await service.load_system_prompt("not_a_key", "Fallback prompt.") == "Fallback prompt."

    @pytest.mark.asyncio
    async def test_read_failure_degrades_to_defaults(self, service, cache):
        service.block_repo.list_all = AsyncMock(side_effect=SQLAlchemyError("db down"))

        prompt = await service.build("questions")

        assert prompt == assemble_prompt("questions")
        # Nothing cached, so the next read retries storage
        assert cache.peek() is None


class TestOverrides:
    """Writing and reading overrides."""

    @pytest.mark.asyncio
    async def test_block_override_is_visible_immediately(self, service):
        await service.build("questions")  # warm the cache

        await service.apply_block_override(
            "role_mission",
            variants={"questions": "You are an assistant."},
            updated_by="editor@example.com",
        )

        assert (await service.build("questions")).startswith("You are an assistant.\n\n")

    @pytest.mark.asyncio
    async def test_name_patch_keeps_variants(self, service):
        await service.apply_block_override("role_mission", variants={"chat": "Chat role."})
        block = await service.apply_block_override("role_mission", name="Persona")

        assert block.name == "Persona"
        assert block.variants["chat"] == "Chat role."
        assert block.variants["questions"] == get_block("role_mission").variants["questions"]

    @pytest.mark.asyncio
    async def test_variant_patches_accumulate(self, service):
        await service.apply_block_override("quality_rules", variants={"questions": "Q rules."})
        await service.apply_block_override("quality_rules", variants={"skills": "S rules."})

        row = await service.block_repo.get_by_key("quality_rules")
        assert row.variants == {"questions": "Q rules.", "skills": "S rules."}

    @pytest.mark.asyncio
    async def test_updated_by_is_recorded(self, service):
        await service.apply_block_override("role_mission", name="Persona", updated_by="alice")
        row = await service.block_repo.get_by_key("role_mission")
        assert row.updated_by == "alice"

    @pytest.mark.asyncio
    async def test_cleared_variant_removes_section(self, service):
        await service.apply_block_override("quality_rules", variants={"questions": ""})

        sections = await service.list_sections("questions")
        rules = next(s for s in sections if s.id == "quality_rules")

        assert rules.text == ""
        assert rules.enabled is False
        assert get_block("quality_rules").variants["default"] not in await service.build("questions")

    @pytest.mark.asyncio
    async def test_modifier_override(self, service):
        modifier = await service.apply_modifier_override("mode_bulk", content="Be terse.")

        assert modifier.content == "Be terse."
        assert (await service.build("questions", mode="bulk")).endswith("\n\nBe terse.")

    @pytest.mark.asyncio
    async def test_list_blocks_merges_overrides(self, service):
        await service.apply_block_override("error_handling", description="Edited")
        blocks = {b.id: b for b in await service.list_blocks()}
        assert blocks["error_handling"].description == "Edited"
        assert blocks["role_mission"] == get_block("role_mission")

    @pytest.mark.asyncio
    async def test_unknown_block(self, service):
        with pytest.raises(UnknownPromptEntityError) as exc_info:
            await service.apply_block_override("nope", name="X")
        assert exc_info.value.kind == "block"

    @pytest.mark.asyncio
    async def test_unknown_modifier(self, service):
        with pytest.raises(UnknownPromptEntityError):
            await service.apply_modifier_override("mode_nope", content="X")

    @pytest.mark.asyncio
    async def test_write_failure_raises_and_invalidates(self, service, cache):
        await service.build("questions")
        assert cache.peek() is not None
        service.block_repo.upsert_patch = AsyncMock(side_effect=SQLAlchemyError("db down"))

        with pytest.raises(OverrideWriteError):
            await service.apply_block_override("role_mission", name="X")

        assert cache.peek() is None

    @pytest.mark.asyncio
    async def test_failed_rollback_still_raises_write_error(self, service, db_session, cache):
        await service.build("questions")
        service.modifier_repo.upsert_patch = AsyncMock(side_effect=SQLAlchemyError("db down"))
        db_session.rollback = AsyncMock(side_effect=SQLAlchemyError("rollback failed: connection closed"))

        with pytest.raises(OverrideWriteError, match="db down"):
            await service.apply_modifier_override("mode_bulk", content="X")

        db_session.rollback.assert_awaited_once()
        assert cache.peek() is None


class TestCacheTTL:
    """Time-boxed caching across processes."""

    @pytest.mark.asyncio
    async def test_second_process_sees_stale_value_until_ttl(self, db_session, clock):
        clock.now = -30
        process_a = PromptService(
            db_session, cache=OverrideCache(ttl_seconds=60, redis=RedisClient(enabled=False), clock=clock)
        )
        process_b = PromptService(
            db_session, cache=OverrideCache(ttl_seconds=60, redis=RedisClient(enabled=False), clock=clock)
        )
        original = await process_b.build("questions")

        clock.now = 0
        await process_a.apply_block_override("role_mission", variants={"questions": "New role."})

        clock.now = 1
        assert (await process_a.build("questions")).startswith("New role.")
        # The other process keeps its snapshot until its own TTL lapses
        assert await process_b.build("questions") == original

        clock.now = 31
        assert (await process_b.build("questions")).startswith("New role.")

    @pytest.mark.asyncio
    async def test_loader_called_once_within_ttl(self, cache, clock):
        loader = AsyncMock(return_value=OverrideSnapshot.empty())

        await cache.get(loader)
        clock.advance(59)
        await cache.get(loader)
        assert loader.await_count == 1

        clock.advance(1)
        await cache.get(loader)
        assert loader.await_count == 2

    @pytest.mark.asyncio
    async def test_invalidate_forces_reload(self, cache):
        loader = AsyncMock(return_value=OverrideSnapshot.empty())
        await cache.get(loader)
        await cache.invalidate()
        await cache.get(loader)
        assert loader.await_count == 2

    @pytest.mark.asyncio
    async def test_load_racing_invalidation_is_not_cached(self, cache, clock):
        stale = OverrideSnapshot.empty()
        fresh = OverrideSnapshot(
            block_overrides={"role_mission": BlockOverride(block_id="role_mission", name="New")}
        )
        started = asyncio.Event()
        gate = asyncio.Event()

        async def slow_loader():
            started.set()
            await gate.wait()
            return stale

        reader = asyncio.create_task(cache.get(slow_loader))
        await started.wait()
        await cache.invalidate()  # a write lands while the read is loading
        gate.set()

        # The in-flight read may finish on old data but must not keep it
        assert await reader == stale
        assert cache.peek() is None

        clock.advance(1)
        assert await cache.get(AsyncMock(return_value=fresh)) == fresh


class TestSharedCache:
    """Redis-backed shared tier."""

    @pytest.mark.asyncio
    async def test_shared_snapshot_skips_loader(self, clock):
        snapshot = OverrideSnapshot(
            block_overrides={"role_mission": BlockOverride(block_id="role_mission", name="Shared")}
        )
        redis = AsyncMock(spec=RedisClient)
        redis.get_json.return_value = snapshot.to_dict()
        cache = OverrideCache(ttl_seconds=60, redis=redis, clock=clock)
        loader = AsyncMock()

        result = await cache.get(loader)

        assert result.block_overrides["role_mission"].name == "Shared"
        loader.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_loaded_snapshot_is_published(self, clock):
        redis = AsyncMock(spec=RedisClient)
        redis.get_json.return_value = None
        cache = OverrideCache(ttl_seconds=60, redis=redis, clock=clock)

        await cache.get(AsyncMock(return_value=OverrideSnapshot.empty()))

        redis.set_json.assert_awaited_once_with(
            OVERRIDES_CACHE_KEY, {"blocks": {}, "modifiers": {}}, ttl=60
        )

    @pytest.mark.asyncio
    async def test_redis_failure_falls_back_to_loader(self, clock):
        redis = AsyncMock(spec=RedisClient)
        redis.get_json.side_effect = ConnectionError("redis down")
        redis.set_json.side_effect = ConnectionError("redis down")
        cache = OverrideCache(ttl_seconds=60, redis=redis, clock=clock)
        loader = AsyncMock(return_value=OverrideSnapshot.empty())

        assert await cache.get(loader) == OverrideSnapshot.empty()
        loader.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_invalidate_deletes_shared_key(self, clock):
        redis = AsyncMock(spec=RedisClient)
        cache = OverrideCache(ttl_seconds=60, redis=redis, clock=clock)

        await cache.invalidate()

        redis.delete.assert_awaited_once_with(OVERRIDES_CACHE_KEY)

    @pytest.mark.asyncio
    async def test_load_racing_invalidation_is_not_published(self, clock):
        redis = AsyncMock(spec=RedisClient)
        redis.get_json.return_value = None
        cache = OverrideCache(ttl_seconds=60, redis=redis, clock=clock)

        async def loader():
            await cache.invalidate()
            return OverrideSnapshot.empty()

        await cache.get(loader)

        redis.set_json.assert_not_awaited()
        assert cache.peek() is None

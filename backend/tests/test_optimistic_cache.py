"""
Optimistic cache tests.

Verifies:
- The speculative value is visible before the remote call settles
- Failure restores the exact prior snapshot and re-raises
- Creates swap their temporary id for the server id in place
- Overlapping mutations on one id never let a stale rollback win
"""

import asyncio

import pytest

from fabricstore.client import OptimisticCache


V0 = {"id": "r1", "barcode": "RC100", "status": "in_stock", "tags": ["a"]}
OTHER = {"id": "r2", "barcode": "RC200", "status": "in_stock"}


class Boom(Exception):
    pass


def _gate():
    """A remote call that waits until the test resolves or fails it."""
    loop = asyncio.get_running_loop()
    future = loop.create_future()

    async def remote():
        return await future

    return future, remote


def _run(coro):
    return asyncio.run(coro)


class TestSingleMutation:

    def test_update_visible_immediately_then_confirmed(self):
        async def scenario():
            cache = OptimisticCache([V0, OTHER])
            future, remote = _gate()
            task = asyncio.create_task(cache.optimistic_update("r1", {"status": "reserved"}, remote))
            await asyncio.sleep(0)

            assert cache.get("r1")["status"] == "reserved"
            assert cache.is_pending("r1")

            future.set_result({**V0, "status": "reserved", "updatedAt": "2026-10-18T00:00:00Z"})
            await task
            return cache

        cache = _run(scenario())
        assert cache.get("r1")["updatedAt"] == "2026-10-18T00:00:00Z"
        assert not cache.pending_ids

    def test_failed_update_restores_exact_snapshot(self):
        async def scenario():
            cache = OptimisticCache([V0])
            future, remote = _gate()
            task = asyncio.create_task(
                cache.optimistic_update("r1", {"status": "sold", "tags": ["b"]}, remote)
            )
            await asyncio.sleep(0)
            future.set_exception(Boom("server said no"))
            with pytest.raises(Boom):
                await task
            return cache

        cache = _run(scenario())
        assert cache.get("r1") == V0
        assert not cache.is_pending("r1")

    def test_snapshot_is_deep(self):
        async def scenario():
            cache = OptimisticCache([V0])

            async def remote():
                cache.get("r1")["tags"].append("mutated")
                raise Boom()

            with pytest.raises(Boom):
                await cache.optimistic_update("r1", {"status": "sold"}, remote)
            return cache

        assert _run(scenario()).get("r1")["tags"] == ["a"]

    def test_failed_delete_reinserts_at_position(self):
        async def scenario():
            cache = OptimisticCache([OTHER, V0, {"id": "r3"}])
            future, remote = _gate()
            task = asyncio.create_task(cache.optimistic_delete("r1", remote))
            await asyncio.sleep(0)
            assert "r1" not in cache
            future.set_exception(Boom())
            with pytest.raises(Boom):
                await task
            return cache

        cache = _run(scenario())
        assert [item["id"] for item in cache.items] == ["r2", "r1", "r3"]

    def test_delete_success(self):
        async def scenario():
            cache = OptimisticCache([V0, OTHER])

            async def remote():
                return None

            await cache.optimistic_delete("r1", remote)
            return cache

        assert [item["id"] for item in _run(scenario()).items] == ["r2"]


class TestCreate:

    def test_temp_id_swapped_in_place(self):
        async def scenario():
            cache = OptimisticCache([OTHER])
            future, remote = _gate()
            task = asyncio.create_task(cache.optimistic_create({"barcode": "RC300"}, remote))
            await asyncio.sleep(0)

            temp = cache.items[0]
            assert temp["id"].startswith("temp-")
            assert temp["barcode"] == "RC300"
            assert cache.is_pending(temp["id"])

            future.set_result({"id": "r3", "barcode": "RC300", "status": "in_stock"})
            created = await task
            return cache, created, temp["id"]

        cache, created, temp_id = _run(scenario())
        assert created["id"] == "r3"
        assert [item["id"] for item in cache.items] == ["r3", "r2"]
        assert temp_id not in cache
        assert not cache.pending_ids

    def test_failed_create_leaves_no_trace(self):
        async def scenario():
            cache = OptimisticCache([OTHER])

            async def remote():
                raise Boom()

            with pytest.raises(Boom):
                await cache.optimistic_create({"barcode": "RC300"}, remote)
            return cache

        cache = _run(scenario())
        assert cache.items == [OTHER]
        assert not cache.pending_ids


class TestOverlapping:

    def test_older_failure_does_not_clobber_newer_success(self):
        async def scenario():
            cache = OptimisticCache([V0])
            first_future, first = _gate()
            second_future, second = _gate()

            t1 = asyncio.create_task(cache.optimistic_update("r1", {"status": "reserved"}, first))
            await asyncio.sleep(0)
            t2 = asyncio.create_task(cache.optimistic_update("r1", {"status": "sold"}, second))
            await asyncio.sleep(0)

            second_future.set_result({**V0, "status": "sold"})
            await t2
            first_future.set_exception(Boom())
            with pytest.raises(Boom):
                await t1
            return cache

        cache = _run(scenario())
        assert cache.get("r1")["status"] == "sold"
        assert not cache.pending_ids

    def test_newer_failure_restores_older_confirmed_state(self):
        async def scenario():
            cache = OptimisticCache([V0])
            first_future, first = _gate()
            second_future, second = _gate()

            t1 = asyncio.create_task(cache.optimistic_update("r1", {"status": "reserved"}, first))
            await asyncio.sleep(0)
            t2 = asyncio.create_task(cache.optimistic_update("r1", {"location": "Bin 4"}, second))
            await asyncio.sleep(0)

            first_future.set_result({**V0, "status": "reserved", "version": 2})
            await t1
            assert cache.get("r1")["location"] == "Bin 4"

            second_future.set_exception(Boom())
            with pytest.raises(Boom):
                await t2
            return cache

        cache = _run(scenario())
        assert cache.get("r1") == {**V0, "status": "reserved", "version": 2}

    def test_both_fail_restores_original(self):
        async def scenario():
            cache = OptimisticCache([V0])
            first_future, first = _gate()
            second_future, second = _gate()

            t1 = asyncio.create_task(cache.optimistic_update("r1", {"status": "reserved"}, first))
            await asyncio.sleep(0)
            t2 = asyncio.create_task(cache.optimistic_update("r1", {"status": "sold"}, second))
            await asyncio.sleep(0)

            first_future.set_exception(Boom())
            second_future.set_exception(Boom())
            results = await asyncio.gather(t1, t2, return_exceptions=True)
            assert all(isinstance(r, Boom) for r in results)
            return cache

        assert _run(scenario()).get("r1") == V0

    def test_newer_fails_first_then_older_fails(self):
        async def scenario():
            cache = OptimisticCache([V0])
            first_future, first = _gate()
            second_future, second = _gate()

            t1 = asyncio.create_task(cache.optimistic_update("r1", {"status": "reserved"}, first))
            await asyncio.sleep(0)
            t2 = asyncio.create_task(cache.optimistic_update("r1", {"status": "sold"}, second))
            await asyncio.sleep(0)

            second_future.set_exception(Boom())
            with pytest.raises(Boom):
                await t2
            assert cache.get("r1")["status"] == "reserved"
            assert cache.is_pending("r1")

            first_future.set_exception(Boom())
            with pytest.raises(Boom):
                await t1
            return cache

        assert _run(scenario()).get("r1") == V0

    def test_refresh_keeps_pending_view(self):
        async def scenario():
            cache = OptimisticCache([V0])
            future, remote = _gate()
            task = asyncio.create_task(cache.optimistic_update("r1", {"status": "reserved"}, remote))
            await asyncio.sleep(0)

            cache.replace_all([{**V0, "status": "in_stock"}, OTHER])
            assert cache.get("r1")["status"] == "reserved"
            assert "r2" in cache

            future.set_result({**V0, "status": "reserved"})
            await task
            return cache

        assert _run(scenario()).get("r1")["status"] == "reserved"


def test_uncached_update_just_calls_remote():
    async def scenario():
        cache = OptimisticCache()

        async def remote():
            return {"id": "r9", "status": "sold"}

        result = await cache.optimistic_update("r9", {"status": "sold"}, remote)
        return cache, result

    cache, result = _run(scenario())
    assert result["status"] == "sold"
    assert cache.get("r9") == result

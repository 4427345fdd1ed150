"""Unit tests for the single-flight cancellable cache."""

import asyncio

import pytest

from esmap.core.cache import SingleFlightCache


class TestSingleFlightCache:
    def test_concurrent_gets_share_one_fetch(self):
        calls = []

        async def fetch(key, cancelled):
            calls.append(key)
            await asyncio.sleep(0)
            return key.upper()

        async def run():
            cache = SingleFlightCache(fetch)
            first = cache.get("a")
            second = cache.get("a")
            assert first is second
            return await asyncio.gather(first, second, cache.get("b"))

        assert asyncio.run(run()) == ["A", "A", "B"]
        assert calls == ["a", "b"]

    def test_completed_result_is_reused(self):
        calls = []

        async def fetch(key, cancelled):
            calls.append(key)
            return len(calls)

        async def run():
            cache = SingleFlightCache(fetch)
            first = await cache.get("k")
            second = await cache.get("k")
            return first, second

        assert asyncio.run(run()) == (1, 1)
        assert calls == ["k"]

    def test_clear_cancels_pending_fetches(self):
        tokens = []

        async def run():
            started = asyncio.Event()

            async def fetch(key, cancelled):
                tokens.append(cancelled)
                started.set()
                await asyncio.sleep(10)

            cache = SingleFlightCache(fetch)
            pending = cache.get("slow")
            await started.wait()

            cache.clear()

            assert len(cache) == 0
            assert "slow" not in cache
            with pytest.raises(asyncio.CancelledError):
                await pending

        asyncio.run(run())
        assert tokens[0].is_set()

    def test_get_after_clear_fetches_again(self):
        calls = []

        async def fetch(key, cancelled):
            calls.append(key)
            return key

        async def run():
            cache = SingleFlightCache(fetch)
            await cache.get("x")
            cache.clear()
            await cache.get("x")

        asyncio.run(run())
        assert calls == ["x", "x"]

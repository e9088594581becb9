import asyncio
from datetime import timedelta

import pytest

from zeefax.cache import SectionCache

from conftest import NOW, make_result


class FakeClock:
    def __init__(self, start):
        self.current = start

    def __call__(self):
        return self.current

    def advance(self, **kwargs):
        self.current += timedelta(**kwargs)


def test_entries_expire_after_ttl():
    clock = FakeClock(NOW)
    cache = SectionCache(ttl=timedelta(minutes=15), clock=clock)
    data = make_result("tech", [])

    entry = cache.put("tech", data)

    assert entry.expires_at == NOW + timedelta(minutes=15)
    clock.advance(minutes=14, seconds=59)
    assert cache.get("tech") is data
    clock.advance(seconds=1)
    assert cache.get("tech") is None


def test_get_or_fetch_uses_live_entry():
    clock = FakeClock(NOW)
    cache = SectionCache(clock=clock)
    calls = []

    async def fetch():
        calls.append(clock())
        return make_result("tech", [])

    async def scenario():
        first = await cache.get_or_fetch("tech", fetch)
        second = await cache.get_or_fetch("tech", fetch)
        clock.advance(minutes=16)
        third = await cache.get_or_fetch("tech", fetch)
        return first, second, third

    first, second, third = asyncio.run(scenario())

    assert first is second
    assert third is not first
    assert len(calls) == 2


def test_concurrent_misses_share_one_fetch():
    cache = SectionCache(clock=FakeClock(NOW))
    calls = []

    async def fetch():
        calls.append(1)
        await asyncio.sleep(0.01)
        return make_result("tech", [])

    async def scenario():
        return await asyncio.gather(
            cache.get_or_fetch("tech", fetch),
            cache.get_or_fetch("tech", fetch),
            cache.get_or_fetch("tech", fetch),
        )

    results = asyncio.run(scenario())

    assert len(calls) == 1
    assert results[0] is results[1] is results[2]


def test_failed_fetch_is_not_cached():
    cache = SectionCache(clock=FakeClock(NOW))
    attempts = []

    async def failing():
        attempts.append(1)
        raise RuntimeError("feed down")

    async def scenario():
        with pytest.raises(RuntimeError):
            await cache.get_or_fetch("tech", failing)
        with pytest.raises(RuntimeError):
            await cache.get_or_fetch("tech", failing)

    asyncio.run(scenario())

    assert len(attempts) == 2
    assert cache.get("tech") is None

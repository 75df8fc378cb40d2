try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import asyncio

import pytest

from app.services.report_cache import SingleFlightCache, report_cache_key


class FakeClock:
    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingLoader:
    def __init__(self, value="payload", *, error: Exception | None = None) -> None:
        self.value = value
        self.error = error
        self.calls = 0
        self.release = asyncio.Event()

    async def __call__(self):
        self.calls += 1
        await self.release.wait()
        if self.error is not None:
            raise self.error
        return self.value


async def _fill(cache: SingleFlightCache, clock: FakeClock, keys) -> None:
    for key in keys:
        await cache.fetch_or_join(key, _constant(key))
        clock.advance(1)


def _constant(value):
    async def loader():
        return value

    return loader


def test_report_cache_key_format() -> None:
    assert report_cache_key(42) == "report-seq-42"
    assert report_cache_key("7") == "report-seq-7"


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_load() -> None:
    cache: SingleFlightCache[str] = SingleFlightCache()
    loader = CountingLoader("report")

    tasks = [asyncio.create_task(cache.fetch_or_join("k", loader)) for _ in range(5)]
    await asyncio.sleep(0)
    assert cache.is_in_flight("k")
    loader.release.set()
    results = await asyncio.gather(*tasks)

    assert loader.calls == 1
    assert results == ["report"] * 5
    assert not cache.is_in_flight("k")
    assert cache.get("k").data == "report"


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_failure_and_nothing_is_cached() -> None:
    cache: SingleFlightCache[str] = SingleFlightCache()
    error = RuntimeError("upstream down")
    loader = CountingLoader(error=error)

    tasks = [asyncio.create_task(cache.fetch_or_join("k", loader)) for _ in range(3)]
    await asyncio.sleep(0)
    loader.release.set()
    results = await asyncio.gather(*tasks, return_exceptions=True)

    assert loader.calls == 1
    assert all(result is error for result in results)
    assert "k" not in cache
    assert cache.in_flight_count == 0


@pytest.mark.asyncio
async def test_failed_load_frees_key_for_retry() -> None:
    cache: SingleFlightCache[str] = SingleFlightCache()
    failing = CountingLoader(error=RuntimeError("boom"))
    failing.release.set()

    with pytest.raises(RuntimeError):
        await cache.fetch_or_join("k", failing)

    assert await cache.fetch_or_join("k", _constant("ok")) == "ok"


@pytest.mark.asyncio
async def test_entry_is_served_until_ttl_then_refetched_once() -> None:
    clock = FakeClock()
    cache: SingleFlightCache[int] = SingleFlightCache(ttl_seconds=10, clock=clock)
    calls = 0

    async def loader() -> int:
        nonlocal calls
        calls += 1
        return calls

    assert await cache.fetch_or_join("k", loader) == 1
    clock.advance(9.5)
    assert await cache.fetch_or_join("k", loader) == 1
    assert calls == 1

    clock.advance(0.5)
    assert cache.get("k") is None
    assert "k" in cache
    assert await cache.fetch_or_join("k", loader) == 2
    assert await cache.fetch_or_join("k", loader) == 2
    assert calls == 2


@pytest.mark.asyncio
async def test_reads_touch_last_access_but_not_timestamp() -> None:
    clock = FakeClock()
    cache: SingleFlightCache[str] = SingleFlightCache(ttl_seconds=10, clock=clock)
    await cache.fetch_or_join("k", _constant("v"))

    clock.advance(5)
    entry = cache.get("k")
    assert entry.timestamp == 0
    assert entry.last_access == 5

    clock.advance(5)
    assert cache.get("k") is None


@pytest.mark.asyncio
async def test_batch_eviction_drops_least_recently_read_entries() -> None:
    clock = FakeClock()
    cache: SingleFlightCache[str] = SingleFlightCache(
        capacity=10, ttl_seconds=1000, clock=clock
    )
    await _fill(cache, clock, [f"k{i}" for i in range(10)])
    assert len(cache) == 10

    # Reading k0 protects it; k1 and k2 are now the least recently read.
    cache.get("k0")
    clock.advance(1)

    await cache.fetch_or_join("k10", _constant("k10"))

    assert len(cache) == 9
    assert "k1" not in cache
    assert "k2" not in cache
    for key in ["k0", "k3", "k9", "k10"]:
        assert key in cache


@pytest.mark.asyncio
async def test_eviction_removes_ceil_of_fraction() -> None:
    clock = FakeClock()
    cache: SingleFlightCache[str] = SingleFlightCache(
        capacity=7, eviction_fraction=0.2, clock=clock
    )
    await _fill(cache, clock, [f"k{i}" for i in range(7)])

    await cache.fetch_or_join("k7", _constant("k7"))

    # ceil(0.2 * 7) == 2
    assert len(cache) == 6
    assert "k0" not in cache
    assert "k1" not in cache


@pytest.mark.asyncio
async def test_invalidate_twice_reports_not_found() -> None:
    cache: SingleFlightCache[str] = SingleFlightCache()
    await cache.fetch_or_join("k", _constant("v"))

    assert cache.invalidate("k") is True
    assert cache.invalidate("k") is False
    assert cache.get("k") is None


@pytest.mark.asyncio
async def test_invalidate_many_counts_only_removed_entries() -> None:
    cache: SingleFlightCache[str] = SingleFlightCache()
    for key in ["a", "b"]:
        await cache.fetch_or_join(key, _constant(key))

    assert cache.invalidate_many(["a", "b", "missing"]) == 2
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_invalidation_during_load_keeps_result_out_of_cache() -> None:
    cache: SingleFlightCache[str] = SingleFlightCache()
    loader = CountingLoader("stale")

    task = asyncio.create_task(cache.fetch_or_join("k", loader))
    await asyncio.sleep(0)
    assert cache.invalidate("k") is False
    assert not cache.is_in_flight("k")

    loader.release.set()
    assert await task == "stale"
    assert "k" not in cache


@pytest.mark.asyncio
async def test_cancelled_joiner_does_not_abort_shared_load() -> None:
    cache: SingleFlightCache[str] = SingleFlightCache()
    loader = CountingLoader("value")

    first = asyncio.create_task(cache.fetch_or_join("k", loader))
    second = asyncio.create_task(cache.fetch_or_join("k", loader))
    await asyncio.sleep(0)
    first.cancel()
    await asyncio.sleep(0)

    loader.release.set()
    assert await second == "value"
    assert loader.calls == 1
    assert cache.get("k").data == "value"


def test_rejects_invalid_bounds() -> None:
    with pytest.raises(ValueError):
        SingleFlightCache(capacity=0)
    with pytest.raises(ValueError):
        SingleFlightCache(eviction_fraction=1.5)

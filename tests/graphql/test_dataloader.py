"""
Unit tests for the request-scoped BatchLoader
"""

import asyncio

import pytest

from socialgraph.graphql.dataloader import BatchLoadContractError, BatchLoader


class RecordingBatch:
    """Batch function that doubles its keys and remembers every call."""

    def __init__(self, fail_with: Exception | None = None):
        self.calls: list[list[int]] = []
        self.fail_with = fail_with

    async def __call__(self, keys: list[int]) -> list[int]:
        self.calls.append(list(keys))
        if self.fail_with is not None:
            raise self.fail_with
        return [key * 2 for key in keys]


class TestBatching:
    """Coalescing and deduplication."""

    @pytest.mark.asyncio
    async def test_same_tick_loads_share_one_batch(self):
        batch = RecordingBatch()
        loader = BatchLoader(batch, name="numbers")

        results = await asyncio.gather(loader.load(3), loader.load(1), loader.load(2))

        assert results == [6, 2, 4]
        assert batch.calls == [[3, 1, 2]]
        assert loader.dispatch_count == 1

    @pytest.mark.asyncio
    async def test_duplicate_keys_are_fetched_once(self):
        batch = RecordingBatch()
        loader = BatchLoader(batch, name="numbers")

        first = loader.load(5)
        second = loader.load(5)

        assert first is second
        assert await asyncio.gather(first, second, loader.load(7)) == [10, 10, 14]
        assert batch.calls == [[5, 7]]

    @pytest.mark.asyncio
    async def test_loads_after_sibling_suspension_join_the_batch(self):
        batch = RecordingBatch()
        loader = BatchLoader(batch, name="numbers")

        async def resolve(key: int) -> int:
            await asyncio.sleep(0)
            return await loader.load(key)

        assert await asyncio.gather(resolve(1), resolve(2), resolve(3)) == [2, 4, 6]
        assert batch.calls == [[1, 2, 3]]

    @pytest.mark.asyncio
    async def test_cached_key_does_not_reach_batch_function_again(self):
        batch = RecordingBatch()
        loader = BatchLoader(batch, name="numbers")

        assert await loader.load(4) == 8
        assert await loader.load_many([4, 9]) == [8, 18]

        assert batch.calls == [[4], [9]]

    @pytest.mark.asyncio
    async def test_key_cleared_before_dispatch_is_queued_once(self):
        batch = RecordingBatch()
        loader = BatchLoader(batch, name="numbers")

        first = loader.load(6)
        loader.clear(6)
        second = loader.load(6)

        assert second is first
        assert loader.pending_keys == [6]
        assert await asyncio.gather(first, second) == [12, 12]
        assert batch.calls == [[6]]

    @pytest.mark.asyncio
    async def test_cache_key_fn_deduplicates_equivalent_keys(self):
        calls: list[list[str]] = []

        async def upper(keys: list[str]) -> list[str]:
            calls.append(list(keys))
            return [key.upper() for key in keys]

        loader = BatchLoader(upper, name="words", cache_key_fn=str.lower)

        first = loader.load("Ab")
        loader.clear_all()
        second = loader.load("aB")

        assert second is first
        assert await second == "AB"
        assert calls == [["Ab"]]

    @pytest.mark.asyncio
    async def test_explicit_dispatch_closes_the_batch(self):
        batch = RecordingBatch()
        loader = BatchLoader(batch, name="numbers")

        first = loader.load(1)
        assert loader.pending_keys == [1]
        await loader.dispatch()
        assert first.done()
        assert loader.pending_keys == []

        assert await loader.load(2) == 4
        assert batch.calls == [[1], [2]]
        assert loader.dispatch_count == 2

    @pytest.mark.asyncio
    async def test_dispatch_with_nothing_pending_is_a_no_op(self):
        batch = RecordingBatch()
        loader = BatchLoader(batch, name="numbers")

        await loader.dispatch()

        assert batch.calls == []
        assert loader.dispatch_count == 0


class TestFailures:
    """Error propagation and eviction."""

    @pytest.mark.asyncio
    async def test_batch_failure_rejects_every_pending_future(self):
        error = RuntimeError("store down")
        batch = RecordingBatch(fail_with=error)
        loader = BatchLoader(batch, name="numbers")

        results = await asyncio.gather(loader.load(1), loader.load(2), return_exceptions=True)

        assert results == [error, error]

    @pytest.mark.asyncio
    async def test_failed_keys_are_evicted_and_retried(self):
        batch = RecordingBatch(fail_with=RuntimeError("flaky"))
        loader = BatchLoader(batch, name="numbers")

        with pytest.raises(RuntimeError):
            await loader.load(1)

        batch.fail_with = None
        assert await loader.load(1) == 2
        assert batch.calls == [[1], [1]]

    @pytest.mark.asyncio
    async def test_exception_values_fail_only_their_key(self):
        async def partly_failing(keys: list[int]) -> list[int | Exception]:
            return [ValueError(f"bad {key}") if key < 0 else key for key in keys]

        loader = BatchLoader(partly_failing, name="numbers")

        ok, bad = await asyncio.gather(loader.load(1), loader.load(-1), return_exceptions=True)

        assert ok == 1
        assert isinstance(bad, ValueError)
        assert str(bad) == "bad -1"

    @pytest.mark.asyncio
    async def test_wrong_result_count_fails_loudly(self):
        async def short(keys: list[int]) -> list[int]:
            return keys[:-1]

        loader = BatchLoader(short, name="short")

        results = await asyncio.gather(loader.load(1), loader.load(2), return_exceptions=True)

        assert all(isinstance(result, BatchLoadContractError) for result in results)
        assert results[0].expected == 2
        assert results[0].received == 1
        assert "short" in str(results[0])


class TestPriming:
    """Cache seeding and clearing."""

    @pytest.mark.asyncio
    async def test_primed_key_skips_the_batch_function(self):
        batch = RecordingBatch()
        loader = BatchLoader(batch, name="numbers")

        loader.prime(1, 100)

        assert await loader.load(1) == 100
        assert batch.calls == []

    @pytest.mark.asyncio
    async def test_prime_never_overwrites_an_in_flight_load(self):
        batch = RecordingBatch()
        loader = BatchLoader(batch, name="numbers")

        pending = loader.load(1)
        loader.prime(1, 100)
        loader.prime(1, 100, force=True)

        assert await pending == 2
        assert await loader.load(1) == 2

    @pytest.mark.asyncio
    async def test_prime_many_keeps_existing_values_unless_forced(self):
        batch = RecordingBatch()
        loader = BatchLoader(batch, name="numbers")

        loader.prime_many({1: "a", 2: "b"})
        loader.prime_many({1: "x", 3: "c"})
        assert await loader.load_many([1, 2, 3]) == ["a", "b", "c"]

        loader.prime_many({1: "x"}, force=True)
        assert await loader.load(1) == "x"
        assert batch.calls == []

    @pytest.mark.asyncio
    async def test_clear_forces_a_refetch(self):
        batch = RecordingBatch()
        loader = BatchLoader(batch, name="numbers")

        await loader.load(1)
        loader.clear(1)
        await loader.load(1)
        loader.clear_all()
        await loader.load(1)

        assert batch.calls == [[1], [1], [1]]


@pytest.mark.asyncio
async def test_repr_names_the_loader():
    loader = BatchLoader(RecordingBatch(), name="numbers")

    assert repr(loader) == "<BatchLoader numbers pending=0>"

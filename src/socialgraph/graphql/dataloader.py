"""
Request-scoped batch loader.

``BatchLoader`` extends Strawberry's ``DataLoader`` (cache map, ``load_many``
and the ``clear*`` helpers are inherited) with a deterministic batching
window and stricter cache semantics:

* every ``load`` issued before the event loop goes quiet lands in one batch;
  the dispatcher keeps yielding to the loop until a full iteration passes
  with no new key, then calls the batch function once;
* keys whose fetch failed are evicted, so a later ``load`` retries them;
* ``prime`` never replaces a cached or in-flight future;
* a batch function that returns the wrong number of results fails every
  pending future instead of silently misaligning values.
"""

import asyncio
from asyncio import Future, Task
from collections.abc import Awaitable, Callable, Hashable, Mapping, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from strawberry.dataloader import DataLoader

from ..logging import get_logger

logger = get_logger(__name__)

K = TypeVar("K")
V = TypeVar("V")

BatchLoadFn = Callable[[list[K]], Awaitable[Sequence[V | BaseException]]]


class BatchLoadContractError(Exception):
    """The batch function broke its one-result-per-key contract."""

    def __init__(self, loader: str, expected: int, received: int):
        self.loader = loader
        self.expected = expected
        self.received = received
        super().__init__(
            f"Batch function of loader '{loader}' returned {received} results "
            f"for {expected} keys"
        )


@dataclass
class PendingLoad(Generic[K, V]):
    key: K
    future: Future[V]


class BatchLoader(DataLoader[K, V]):
    """Deduplicating, order-preserving, cached batch fetcher.

    One instance lives for exactly one request. The batch function receives
    the distinct keys in first-requested order and must return one result per
    key in the same order.
    """

    def __init__(
        self,
        load_fn: BatchLoadFn[K, V],
        *,
        name: str,
        cache_key_fn: Callable[[K], Hashable] | None = None,
    ):
        super().__init__(load_fn=load_fn, cache=True, cache_key_fn=cache_key_fn)
        self.name = name
        self.dispatch_count = 0
        self._key_of: Callable[[K], Hashable] = cache_key_fn or (lambda key: key)
        self._queue: dict[Hashable, PendingLoad[K, V]] = {}
        self._dispatcher: Task[None] | None = None

    def __repr__(self) -> str:
        return f"<BatchLoader {self.name} pending={len(self._queue)}>"

    @property
    def pending_keys(self) -> list[K]:
        """Keys queued for the next batch."""
        return [pending.key for pending in self._queue.values()]

    def load(self, key: K) -> Future[V]:
        cached = self.cache_map.get(key)
        if cached is not None and not cached.cancelled():
            return cached

        # A key cleared while still queued keeps its place in the pending batch
        queued = self._queue.get(self._key_of(key))
        if queued is not None and not queued.future.done():
            self.cache_map.set(key, queued.future)
            return queued.future

        future: Future[V] = self.loop.create_future()
        self.cache_map.set(key, future)
        self._queue[self._key_of(key)] = PendingLoad(key, future)

        if self._dispatcher is None:
            self._dispatcher = self.loop.create_task(self._dispatch_when_settled())
        return future

    def prime(self, key: K, value: V, force: bool = False) -> None:
        self.prime_many({key: value}, force=force)

    def prime_many(self, data: Mapping[K, V], force: bool = False) -> None:
        """Seed the cache.

        Keys that already have a future are left alone; with ``force`` a
        resolved entry is replaced, an in-flight one never is.
        """
        for key, value in data.items():
            existing = self.cache_map.get(key)
            if existing is not None and (not force or not existing.done()):
                continue
            future: Future[V] = self.loop.create_future()
            future.set_result(value)
            self.cache_map.set(key, future)

    async def _dispatch_when_settled(self) -> None:
        try:
            seen = -1
            while seen != len(self._queue):
                seen = len(self._queue)
                await asyncio.sleep(0)
        finally:
            self._dispatcher = None
        await self.dispatch()

    async def dispatch(self) -> None:
        """Close the current batch and run the batch function for it now."""
        queued, self._queue = self._queue, {}
        batch = [pending for pending in queued.values() if not pending.future.done()]
        if not batch:
            return

        keys = [pending.key for pending in batch]
        self.dispatch_count += 1
        logger.debug("Batch dispatched", loader=self.name, size=len(keys))

        try:
            values = list(await self.load_fn(keys))
            if len(values) != len(keys):
                raise BatchLoadContractError(self.name, len(keys), len(values))
        except Exception as e:
            logger.warning("Batch failed", loader=self.name, size=len(keys), error=str(e))
            for pending in batch:
                self._fail(pending, e)
            return

        for pending, value in zip(batch, values, strict=True):
            if isinstance(value, BaseException):
                self._fail(pending, value)
            elif not pending.future.done():
                pending.future.set_result(value)

    def _fail(self, pending: PendingLoad[K, V], error: BaseException) -> None:
        # Evict only if the cache still points at this attempt
        if self.cache_map.get(pending.key) is pending.future:
            self.cache_map.delete(pending.key)
        if not pending.future.done():
            pending.future.set_exception(error)

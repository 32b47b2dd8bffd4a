"""Query Cache Service.

Keyed cache of asynchronous reads. Every list, item and profile read in the
client goes through `QueryCache.fetch`, which guarantees:

- Dedup: concurrent fetches of one key share a single loader call. A fetch
  issued after an invalidation never joins a load that started before it;
  it waits for that load to settle and then loads again.
- Idempotence: a fresh SUCCESS entry is returned without calling the loader.
- Bounded retry: transient failures (NETWORK, SERVER) are retried a
  configurable number of times; other failures are not.
- Translation: loader exceptions come back as `Err(TranslatedError)`.

The cache is the only writer of its entry map. Other services request
changes through `invalidate` and `clear`.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, TypeVar

import structlog
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt, wait_fixed

from marketplace_client.core.config.settings import settings
from marketplace_client.domain.entities.cache_entry import CacheEntry, CacheStatus
from marketplace_client.domain.services.error_translation import classify, translate
from marketplace_client.domain.value_objects.cache_key import CacheKey
from marketplace_client.domain.value_objects.result import Err, Ok, Result

logger = structlog.get_logger(__name__)

T = TypeVar("T")

Loader = Callable[[], Awaitable[T]]
Clock = Callable[[], datetime]
KeyPredicate = Callable[[CacheKey], bool]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _is_transient(exc: BaseException) -> bool:
    kind, _ = classify(exc)
    return kind.is_transient


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "Retrying cache read after transient failure",
        attempt=retry_state.attempt_number,
        error_type=type(exc).__name__ if exc else None,
    )


class QueryCache:
    """Keyed cache of asynchronous reads with in-flight request dedup.

    Args:
        stale_seconds: Age after which a SUCCESS entry is refetched.
        retry_attempts: Extra attempts for transient read failures.
        retry_wait_seconds: Delay between attempts.
        clock: Source of the current time (UTC).
        language: Language of translated error messages.
    """

    def __init__(
        self,
        stale_seconds: Optional[float] = None,
        retry_attempts: Optional[int] = None,
        retry_wait_seconds: Optional[float] = None,
        clock: Optional[Clock] = None,
        language: Optional[str] = None,
    ):
        self._stale_after = timedelta(
            seconds=settings.CACHE_STALE_SECONDS if stale_seconds is None else stale_seconds
        )
        self._retry_attempts = settings.READ_RETRY_ATTEMPTS if retry_attempts is None else retry_attempts
        self._retry_wait = settings.READ_RETRY_WAIT_SECONDS if retry_wait_seconds is None else retry_wait_seconds
        self._clock = clock or utc_now
        self._language = language

        self._entries: Dict[CacheKey, CacheEntry[Any]] = {}
        self._in_flight: Dict[CacheKey, "asyncio.Task[Result[Any]]"] = {}
        self._invalidated_in_flight: Set[CacheKey] = set()
        self._epoch = 0

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def read(self, key: CacheKey) -> CacheEntry[Any]:
        """Return the entry for `key`, or an IDLE entry when nothing is cached."""
        return self._entries.get(key) or CacheEntry(key=key)

    def keys(self) -> List[CacheKey]:
        return list(self._entries)

    def is_in_flight(self, key: CacheKey) -> bool:
        return key in self._in_flight

    def is_stale(self, key: CacheKey) -> bool:
        return self.read(key).is_stale(self._clock())

    async def fetch(
        self,
        key: CacheKey,
        loader: Loader[T],
        *,
        retries: Optional[int] = None,
        force: bool = False,
    ) -> Result[T]:
        """Return the cached value for `key`, loading it when needed.

        Args:
            key: Cache key of the read.
            loader: Coroutine factory performing the read.
            retries: Override of the transient-failure retry count.
            force: Load even when the cached entry is fresh.

        Returns:
            Ok(value) or Err(TranslatedError). Never raises for loader errors.
        """
        while True:
            entry = self.read(key)
            if not force and entry.is_fresh(self._clock()):
                logger.debug("Cache hit", key=str(key))
                return Ok(entry.data)

            task = self._in_flight.get(key)
            if task is None:
                attempts = self._retry_attempts if retries is None else retries
                previous = self._start_loading(key)
                task = asyncio.ensure_future(self._load(key, loader, attempts, self._epoch, previous))
                self._in_flight[key] = task
                break
            if key not in self._invalidated_in_flight:
                logger.debug("Joining in-flight fetch", key=str(key))
                break
            # The running load predates an invalidation; its result cannot serve this read.
            logger.debug("Waiting for superseded fetch", key=str(key))
            await asyncio.wait({task})
        # Shielded so one cancelled waiter does not cancel the shared load.
        return await asyncio.shield(task)

    def _start_loading(self, key: CacheKey) -> CacheEntry[Any]:
        previous = self.read(key)
        self._entries[key] = CacheEntry(
            key=key,
            data=previous.data,
            status=CacheStatus.LOADING,
            fetched_at=previous.fetched_at,
            stale_after=previous.stale_after,
            invalidated=previous.invalidated,
        )
        logger.debug("Cache miss, loading", key=str(key))
        return previous

    async def _load(self, key: CacheKey, loader: Loader[T], attempts: int, epoch: int,
                    previous: CacheEntry[Any]) -> Result[T]:
        try:
            data = await self._call_with_retry(loader, attempts)
        except Exception as exc:
            error = translate(exc, self._language)
            self._invalidated_in_flight.discard(key)
            if self._epoch == epoch:
                self._entries[key] = CacheEntry(
                    key=key,
                    data=previous.data,
                    status=CacheStatus.ERROR,
                    fetched_at=previous.fetched_at,
                    stale_after=previous.stale_after,
                    error=error,
                    invalidated=True,
                )
            logger.warning("Cache load failed", key=str(key), kind=error.kind.value)
            return Err(error)
        finally:
            if self._in_flight.get(key) is asyncio.current_task():
                del self._in_flight[key]

        if self._epoch != epoch:
            logger.debug("Discarding result of cleared cache generation", key=str(key))
            return Ok(data)

        now = self._clock()
        invalidated = key in self._invalidated_in_flight
        self._invalidated_in_flight.discard(key)
        self._entries[key] = CacheEntry(
            key=key,
            data=data,
            status=CacheStatus.SUCCESS,
            fetched_at=now,
            stale_after=now + self._stale_after,
            invalidated=invalidated,
        )
        return Ok(data)

    async def _call_with_retry(self, loader: Loader[T], attempts: int) -> T:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(max(attempts, 0) + 1),
            wait=wait_fixed(self._retry_wait),
            retry=retry_if_exception(_is_transient),
            before_sleep=_log_retry,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                data = await loader()
        return data

    # ------------------------------------------------------------------
    # Invalidation
    # ------------------------------------------------------------------

    def invalidate(self, predicate: KeyPredicate) -> int:
        """Mark every entry whose key satisfies `predicate` as stale.

        Loads in flight for matching keys settle as stale, so a read issued
        after the invalidation always triggers a new load.

        Returns:
            Number of cached entries marked.
        """
        marked = 0
        for key, entry in list(self._entries.items()):
            if predicate(key):
                self._entries[key] = entry.mark_invalidated()
                marked += 1
        for key in self._in_flight:
            if predicate(key):
                self._invalidated_in_flight.add(key)
        logger.debug("Cache invalidated", entries=marked)
        return marked

    def invalidate_key(self, key: CacheKey) -> int:
        return self.invalidate(lambda candidate: candidate == key)

    def invalidate_resource(self, resource: str, scope: Optional[str] = None) -> int:
        return self.invalidate(lambda candidate: candidate.matches(resource, scope))

    def clear(self) -> None:
        """Drop every entry; loads still in flight are not stored when they settle."""
        self._entries.clear()
        self._in_flight.clear()
        self._invalidated_in_flight.clear()
        self._epoch += 1
        logger.info("Query cache cleared", epoch=self._epoch)

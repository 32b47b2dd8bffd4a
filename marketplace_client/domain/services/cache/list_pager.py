"""List Pager Service.

Drives one infinitely scrolling, searchable list (products, posts) on top of
the `QueryCache`. The pager owns two independent views:

- BROWSE: pages 1..n of the current filter signature, appended in fetch
  order and de-duplicated by item id.
- SEARCH: the result set of the current query.

Exactly one of them is visible at a time. Browse state survives a detour
through search, so returning to browse shows the same items and page without
a request. Every result is checked against the pager generation when it
arrives; results that belong to a replaced view or a closed pager are
dropped instead of applied.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, Generic, Iterable, Optional, Tuple, TypeVar

import structlog

from marketplace_client.core.config.settings import settings
from marketplace_client.core.exceptions import ConfigurationError
from marketplace_client.domain.entities.page_list import ListMode, PageList
from marketplace_client.domain.entities.pagination import Page
from marketplace_client.domain.services.cache.query_cache import QueryCache
from marketplace_client.domain.value_objects.cache_key import CacheKey
from marketplace_client.domain.value_objects.result import Err, Ok, Result

logger = structlog.get_logger(__name__)

T = TypeVar("T")

BrowseLoader = Callable[..., Awaitable[Page[T]]]
SearchLoader = Callable[[str], Awaitable[Page[T]]]
Signature = Tuple[Tuple[str, Any], ...]

LIST_SCOPE = "list"
SEARCH_SCOPE = "search"

_UNSET: Any = object()


def _default_id(item: Any) -> str:
    return str(item.id)


class ListPager(Generic[T]):
    """Paged, searchable view over one resource.

    Args:
        cache: Shared query cache.
        resource: Resource name used in cache keys (``products``, ``posts``).
        browse_loader: ``await browse_loader(page=, limit=, **filters)``
            returning one `Page`.
        search_loader: ``await search_loader(query)`` returning the result
            set, or None for browse-only lists.
        limit: Page size.
        sort_by: Initial sort field.
        order: Initial sort order.
        filters: Initial extra filters (``min_price``...).
        debounce_seconds: Quiet period before a search is sent.
        id_of: Returns the identity used for de-duplication.
        sleep: Awaitable used for the debounce delay.
    """

    def __init__(
        self,
        cache: QueryCache,
        resource: str,
        browse_loader: BrowseLoader,
        search_loader: Optional[SearchLoader] = None,
        *,
        limit: Optional[int] = None,
        sort_by: Optional[str] = None,
        order: Optional[str] = None,
        filters: Optional[Dict[str, Any]] = None,
        debounce_seconds: Optional[float] = None,
        id_of: Callable[[T], str] = _default_id,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self._cache = cache
        self._resource = resource
        self._browse_loader = browse_loader
        self._search_loader = search_loader
        self._limit = limit or settings.PAGE_SIZE
        self._debounce = settings.SEARCH_DEBOUNCE_SECONDS if debounce_seconds is None else debounce_seconds
        self._id_of = id_of
        self._sleep = sleep

        self._filters: Dict[str, Any] = {"sort_by": sort_by, "order": order, **(filters or {})}
        self._browse: PageList[T] = PageList()
        self._browse_loaded = False
        self._search: Optional[PageList[T]] = None
        self._mode = ListMode.BROWSE

        # Bumped whenever the browse (or search) view is replaced; results
        # tagged with an older value are dropped on arrival.
        self._browse_generation = 0
        self._search_generation = 0
        self._search_token = 0
        self._browse_loading = False
        self._search_loading = False
        self._loading_more = False
        self._closed = False

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    @property
    def visible(self) -> PageList[T]:
        """The list that should be shown right now. No I/O."""
        if self._mode is ListMode.SEARCH and self._search is not None:
            return self._search
        return self._browse

    @property
    def mode(self) -> ListMode:
        return self._mode

    @property
    def filters(self) -> Dict[str, Any]:
        return {name: value for name, value in self._filters.items() if value is not None}

    @property
    def signature(self) -> Signature:
        return tuple(sorted(self.filters.items()))

    @property
    def is_loading(self) -> bool:
        if self._mode is ListMode.SEARCH:
            return self._search_loading
        return self._browse_loading

    @property
    def is_loading_more(self) -> bool:
        return self._loading_more

    @property
    def closed(self) -> bool:
        return self._closed

    def page_key(self, page: int) -> CacheKey:
        return CacheKey.build(self._resource, LIST_SCOPE, page=page, limit=self._limit, **self.filters)

    def search_key(self, query: str) -> CacheKey:
        return CacheKey.build(self._resource, SEARCH_SCOPE, query=query)

    # ------------------------------------------------------------------
    # Browse
    # ------------------------------------------------------------------

    async def refresh(self, force: bool = False) -> Result[PageList[T]]:
        """Show page 1 of the current signature.

        A cached page 1 is reused while fresh; ``force`` invalidates every page
        of the signature first (pull to refresh).
        """
        if force:
            self._cache.invalidate(self._is_signature_key)
        return await self._reload_browse()

    async def read(self) -> Result[PageList[T]]:
        """Return the visible list, refetching from page 1 if any page is stale."""
        if self._closed:
            return Ok(self.visible)
        if self._mode is ListMode.SEARCH and self._search is not None:
            query = self._search.query or ""
            if self._cache.is_stale(self.search_key(query)):
                return await self._run_search(query)
            return Ok(self._search)
        if not self._browse_loaded or self._has_stale_page():
            return await self._reload_browse()
        return Ok(self._browse)

    async def load_more(self) -> Result[PageList[T]]:
        """Append the next page of the browse list.

        Ignored (no request) in SEARCH mode, on the last page and while the
        next page is already loading.
        """
        if (
            self._closed
            or self._mode is not ListMode.BROWSE
            or not self._browse_loaded
            or not self._browse.has_next_page
            or self._loading_more
        ):
            return Ok(self.visible)

        generation = self._browse_generation
        next_page = self._browse.page + 1
        filters = self.filters
        self._loading_more = True
        try:
            result = await self._cache.fetch(
                self.page_key(next_page),
                lambda: self._browse_loader(page=next_page, limit=self._limit, **filters),
            )
        finally:
            if generation == self._browse_generation:
                self._loading_more = False

        if not self._is_current_browse(generation) or self._mode is not ListMode.BROWSE:
            logger.debug("Dropping page for replaced list", resource=self._resource, page=next_page)
            return Ok(self.visible)
        if isinstance(result, Err):
            return result

        page: Page[T] = result.value
        self._browse = PageList(
            items=self._merge(self._browse.items, page.items),
            page=next_page,
            has_next_page=page.has_next_page,
            mode=ListMode.BROWSE,
            total_items=page.total_items,
        )
        logger.debug("Page appended", resource=self._resource, page=next_page, items=len(self._browse))
        return Ok(self._browse)

    async def set_filters(self, sort_by: Optional[str] = _UNSET, order: Optional[str] = _UNSET,
                          **filters: Any) -> Result[PageList[T]]:
        """Change sort order or filters and show page 1 of the new signature.

        A None value removes a filter. Leaves search mode. Cached pages of the
        previous signature are kept.
        """
        changes = dict(filters)
        if sort_by is not _UNSET:
            changes["sort_by"] = sort_by
        if order is not _UNSET:
            changes["order"] = order

        previous = self.signature
        self._filters.update(changes)
        left_search = self._leave_search()

        if self.signature == previous and self._browse_loaded:
            return Ok(self.visible) if not left_search else await self.read()

        logger.debug("List filters changed", resource=self._resource, filters=self.filters)
        self._browse_generation += 1
        self._loading_more = False
        self._browse = PageList()
        self._browse_loaded = False
        return await self._reload_browse()

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search(self, query: str) -> Result[PageList[T]]:
        """Debounced search.

        Only the latest call within the debounce window sends a request; the
        calls it supersedes return the list visible when they wake. An empty
        or whitespace query returns to browse without a request.

        Raises:
            ConfigurationError: The pager was built without a search loader.
                This is a wiring mistake, not a runtime failure, so it is not
                returned as a `Result`.
        """
        if self._search_loader is None:
            raise ConfigurationError(f"Resource '{self._resource}' does not support search")

        self._search_token += 1
        token = self._search_token
        if self._debounce > 0:
            await self._sleep(self._debounce)
        if token != self._search_token or self._closed:
            return Ok(self.visible)

        normalized = (query or "").strip()
        if not normalized:
            self._leave_search()
            return Ok(self.visible)
        return await self._run_search(normalized)

    def clear_search(self) -> PageList[T]:
        """Return to browse mode; pending searches are abandoned."""
        self._search_token += 1
        self._leave_search()
        return self.visible

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Stop applying results; requests already sent complete in the cache only."""
        self._closed = True
        self._browse_generation += 1
        self._search_generation += 1
        self._search_token += 1
        logger.debug("List pager closed", resource=self._resource)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _reload_browse(self) -> Result[PageList[T]]:
        if self._closed:
            return Ok(self.visible)
        generation = self._browse_generation
        filters = self.filters
        self._browse_loading = True
        try:
            result = await self._cache.fetch(
                self.page_key(1),
                lambda: self._browse_loader(page=1, limit=self._limit, **filters),
            )
        finally:
            if generation == self._browse_generation:
                self._browse_loading = False

        if not self._is_current_browse(generation):
            logger.debug("Dropping page for replaced list", resource=self._resource, page=1)
            return Ok(self.visible)
        if isinstance(result, Err):
            return result

        page: Page[T] = result.value
        self._browse_generation += 1
        self._loading_more = False
        self._browse = PageList(
            items=self._merge((), page.items),
            page=1,
            has_next_page=page.has_next_page,
            mode=ListMode.BROWSE,
            total_items=page.total_items,
        )
        self._browse_loaded = True
        return Ok(self.visible)

    async def _run_search(self, query: str) -> Result[PageList[T]]:
        if self._mode is ListMode.BROWSE:
            # In-flight browse pages must not land while search is showing.
            self._browse_generation += 1
            self._loading_more = False
            self._browse_loading = False
        self._search_generation += 1
        generation = self._search_generation
        self._mode = ListMode.SEARCH
        self._search = PageList(mode=ListMode.SEARCH, query=query)
        self._search_loading = True
        try:
            result = await self._cache.fetch(self.search_key(query), lambda: self._search_loader(query))
        finally:
            if generation == self._search_generation:
                self._search_loading = False

        if self._closed or generation != self._search_generation:
            logger.debug("Dropping superseded search result", resource=self._resource)
            return Ok(self.visible)
        if isinstance(result, Err):
            return result

        page: Page[T] = result.value
        self._search = PageList(
            items=self._merge((), page.items),
            page=1,
            has_next_page=False,
            mode=ListMode.SEARCH,
            query=query,
            total_items=page.total_items if page.total_items is not None else len(page.items),
        )
        logger.debug("Search applied", resource=self._resource, results=len(self._search))
        return Ok(self._search)

    def _leave_search(self) -> bool:
        if self._mode is ListMode.BROWSE and self._search is None:
            return False
        self._mode = ListMode.BROWSE
        self._search = None
        self._search_generation += 1
        self._search_loading = False
        return True

    def _is_current_browse(self, generation: int) -> bool:
        return not self._closed and generation == self._browse_generation

    def _has_stale_page(self) -> bool:
        return any(self._cache.is_stale(self.page_key(page)) for page in range(1, self._browse.page + 1))

    def _is_signature_key(self, key: CacheKey) -> bool:
        if not key.matches(self._resource, LIST_SCOPE):
            return False
        params = {name: value for name, value in key.params if name != "page"}
        expected = {name: value for name, value in self.page_key(1).params if name != "page"}
        return params == expected

    def _merge(self, existing: Tuple[T, ...], incoming: Iterable[T]) -> Tuple[T, ...]:
        seen = {self._id_of(item) for item in existing}
        merged = list(existing)
        for item in incoming:
            item_id = self._id_of(item)
            if item_id in seen:
                continue
            seen.add(item_id)
            merged.append(item)
        return tuple(merged)

"""Marketplace client composition root.

Wires the HTTP adapters, token store, query cache and domain services from a
`Settings` instance::

    async with MarketplaceClient() as client:
        await client.start()
        result = await client.session.submit_login("ana@example.com", "s3cretpass")
        products = client.products_pager(sort_by="price", order="asc")
        page = await products.refresh()
"""

import weakref
from datetime import datetime
from typing import Any, Callable, Optional

import httpx
import structlog

from marketplace_client.core.config.settings import Settings, settings as default_settings
from marketplace_client.domain.entities.post import Post
from marketplace_client.domain.entities.product import Product
from marketplace_client.domain.entities.session import Session
from marketplace_client.domain.interfaces.token_store import ITokenStore
from marketplace_client.domain.services.cache.list_pager import ListPager
from marketplace_client.domain.services.cache.query_cache import QueryCache
from marketplace_client.domain.services.catalog import PRODUCTS_RESOURCE, CatalogQueries
from marketplace_client.domain.services.mutations.mutation_coordinator import MutationCoordinator, ResourceMutations
from marketplace_client.domain.services.session.session_controller import SessionController
from marketplace_client.domain.value_objects.result import Result
from marketplace_client.infrastructure.api import ApiClient, AuthApi, PostsApi, ProductsApi
from marketplace_client.infrastructure.storage import build_token_store

logger = structlog.get_logger(__name__)

POSTS_RESOURCE = "posts"


class MarketplaceClient:
    """Entry point of the library.

    Args:
        config: Settings to build from; defaults to the module settings.
        token_store: Overrides the store selected by TOKEN_STORE_BACKEND.
        transport: httpx transport for the API client (tests, proxies).
        clock: Source of the current time (UTC).
        language: Language of user-facing messages.
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        *,
        token_store: Optional[ITokenStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Optional[Callable[[], datetime]] = None,
        language: Optional[str] = None,
    ):
        self.settings = config or default_settings
        self.language = language or self.settings.DEFAULT_LANGUAGE
        self.token_store = token_store or build_token_store(self.settings)

        self.http = ApiClient(
            base_url=self.settings.API_BASE_URL,
            token_store=self.token_store,
            timeout=self.settings.API_TIMEOUT_SECONDS,
            transport=transport,
        )
        self.auth_api = AuthApi(self.http)
        self.products_api = ProductsApi(self.http)
        self.posts_api = PostsApi(self.http)

        self.cache = QueryCache(
            stale_seconds=self.settings.CACHE_STALE_SECONDS,
            retry_attempts=self.settings.READ_RETRY_ATTEMPTS,
            retry_wait_seconds=self.settings.READ_RETRY_WAIT_SECONDS,
            clock=clock,
            language=self.language,
        )
        self.session = SessionController(
            self.auth_api,
            self.token_store,
            self.cache,
            clock=clock,
            language=self.language,
            otp_length=self.settings.OTP_LENGTH,
            password_min_length=self.settings.PASSWORD_MIN_LENGTH,
            resend_cooldown_seconds=self.settings.OTP_RESEND_COOLDOWN_SECONDS,
            token_expires_in=self.settings.TOKEN_EXPIRES_IN,
        )
        self.http.on_unauthorized = self.session.expire

        self.mutations = MutationCoordinator(
            self.cache,
            {PRODUCTS_RESOURCE: ResourceMutations.for_products(self.products_api)},
            auth_api=self.auth_api,
            language=self.language,
        )
        self.catalog = CatalogQueries(
            self.cache,
            self.products_api,
            self.auth_api,
            is_authenticated=lambda: self.session.is_authenticated,
            language=self.language,
        )
        self._pagers: "weakref.WeakSet[ListPager[Any]]" = weakref.WeakSet()

    async def start(self) -> Result[Session]:
        """Restore the session from stored credentials."""
        return await self.session.restore()

    def products_pager(
        self,
        sort_by: Optional[str] = None,
        order: Optional[str] = None,
        **filters: Any,
    ) -> ListPager[Product]:
        """Searchable product list; extra filters are ``min_price`` and ``max_price``."""
        pager: ListPager[Product] = ListPager(
            self.cache,
            PRODUCTS_RESOURCE,
            self.products_api.list_products,
            self.products_api.search_products,
            limit=self.settings.PAGE_SIZE,
            sort_by=sort_by,
            order=order,
            filters=filters,
            debounce_seconds=self.settings.SEARCH_DEBOUNCE_SECONDS,
        )
        self._pagers.add(pager)
        return pager

    def posts_pager(self) -> ListPager[Post]:
        """Browse-only news feed."""
        pager: ListPager[Post] = ListPager(
            self.cache,
            POSTS_RESOURCE,
            self.posts_api.list_posts,
            limit=self.settings.PAGE_SIZE,
        )
        self._pagers.add(pager)
        return pager

    async def aclose(self) -> None:
        """Discard late results and release network resources."""
        for pager in list(self._pagers):
            pager.close()
        self._pagers.clear()
        self.session.close()
        await self.http.aclose()
        close_store = getattr(self.token_store, "close", None)
        if close_store is not None:
            await close_store()
        logger.info("Marketplace client closed")

    async def __aenter__(self) -> "MarketplaceClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

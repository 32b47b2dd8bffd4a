"""Catalog Queries Service.

Single-item reads (a product, a public user profile, the current profile)
served through the `QueryCache`. Keys match the ones `MutationCoordinator`
invalidates, so an edited item is refetched on its next read.
"""

from typing import Callable, Optional

import structlog

from marketplace_client.domain.entities.product import Product
from marketplace_client.domain.entities.user import UserProfile
from marketplace_client.domain.interfaces.api import IAuthApi, IProductsApi
from marketplace_client.domain.services.cache.query_cache import QueryCache
from marketplace_client.domain.value_objects.cache_key import CacheKey
from marketplace_client.domain.value_objects.error import ErrorKind, TranslatedError
from marketplace_client.domain.value_objects.result import Err, Result
from marketplace_client.utils.i18n import get_translated_message

logger = structlog.get_logger(__name__)

PRODUCTS_RESOURCE = "products"
USERS_RESOURCE = "users"


class CatalogQueries:
    """Cached single-item reads.

    Args:
        cache: Shared query cache.
        products_api: Product endpoints.
        auth_api: Profile endpoints.
        is_authenticated: Tells whether credentials are available; the
            current profile is only requested when it returns True.
        language: Language of translated error messages.
    """

    def __init__(
        self,
        cache: QueryCache,
        products_api: IProductsApi,
        auth_api: IAuthApi,
        is_authenticated: Callable[[], bool] = lambda: True,
        language: Optional[str] = None,
    ):
        self._cache = cache
        self._products_api = products_api
        self._auth_api = auth_api
        self._is_authenticated = is_authenticated
        self._language = language

    async def product(self, product_id: str) -> Result[Product]:
        return await self._cache.fetch(
            CacheKey.item(PRODUCTS_RESOURCE, product_id),
            lambda: self._products_api.get_product(product_id),
        )

    async def user_profile(self, user_id: str) -> Result[UserProfile]:
        """Public profile of any user, e.g. the seller of a product."""
        return await self._cache.fetch(
            CacheKey.item(USERS_RESOURCE, user_id),
            lambda: self._auth_api.get_user(user_id),
        )

    async def profile(self, force: bool = False) -> Result[UserProfile]:
        """Profile of the logged-in user, cached under ``auth:profile``."""
        if not self._is_authenticated():
            logger.debug("Profile requested without credentials")
            return Err(
                TranslatedError(
                    kind=ErrorKind.INVALID_CREDENTIALS,
                    message=get_translated_message("session_not_authenticated", self._language),
                )
            )
        return await self._cache.fetch(CacheKey.profile(), self._auth_api.get_profile, force=force)

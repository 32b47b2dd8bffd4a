"""Mutation Coordinator Service.

Runs create, update and delete operations and tells the `QueryCache` which
reads they made stale. Mutations are never retried and a failed mutation
leaves the cache untouched, so the next read shows exactly what the server
holds.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Set, Tuple, Type, Union

import structlog
from pydantic import BaseModel, ValidationError

from marketplace_client.core.exceptions import ConfigurationError
from marketplace_client.domain.entities.product import ProductDraft, ProductUpdate
from marketplace_client.domain.entities.user import ProfileUpdate, UserProfile
from marketplace_client.domain.interfaces.api import IAuthApi, IProductsApi
from marketplace_client.domain.services.cache.query_cache import QueryCache
from marketplace_client.domain.services.error_translation import failure, validation_failure
from marketplace_client.domain.value_objects.cache_key import CacheKey
from marketplace_client.domain.value_objects.result import Ok, Result
from marketplace_client.utils.i18n import get_translated_message

logger = structlog.get_logger(__name__)

Payload = Union[BaseModel, Mapping[str, Any]]


@dataclass(frozen=True)
class ResourceMutations:
    """Write operations of one resource and the models validating their payloads."""

    create: Callable[[Any], Awaitable[Any]]
    update: Callable[[str, Any], Awaitable[Any]]
    delete: Callable[[str], Awaitable[Any]]
    draft_model: Type[BaseModel]
    update_model: Type[BaseModel]

    @classmethod
    def for_products(cls, api: IProductsApi) -> "ResourceMutations":
        return cls(
            create=api.create_product,
            update=api.update_product,
            delete=api.delete_product,
            draft_model=ProductDraft,
            update_model=ProductUpdate,
        )


class MutationCoordinator:
    """Coordinates writes and the cache invalidation they imply.

    Args:
        cache: Shared query cache.
        resources: Write operations per resource name.
        auth_api: Used for profile updates.
        language: Language of translated error messages.
    """

    def __init__(
        self,
        cache: QueryCache,
        resources: Mapping[str, ResourceMutations],
        auth_api: Optional[IAuthApi] = None,
        language: Optional[str] = None,
    ):
        self._cache = cache
        self._resources: Dict[str, ResourceMutations] = dict(resources)
        self._auth_api = auth_api
        self._language = language
        self._pending: Set[Tuple[str, str]] = set()

    def is_pending(self, resource: str, item_id: str) -> bool:
        """True while an update or delete of the item is in flight."""
        return (resource, item_id) in self._pending

    async def create(self, resource: str, payload: Payload) -> Result[Any]:
        """Create an item of `resource`; every list of the resource becomes stale."""
        handlers = self._handlers(resource)
        try:
            draft = self._validate(handlers.draft_model, payload)
        except ValidationError as e:
            return failure(e, self._language)

        try:
            created = await handlers.create(draft)
        except Exception as e:
            logger.warning("Create failed", resource=resource, error_type=type(e).__name__)
            return failure(e, self._language)

        self._cache.invalidate_resource(resource)
        logger.info("Item created", resource=resource, item_id=getattr(created, "id", None))
        return Ok(created)

    async def update(self, resource: str, item_id: str, payload: Payload) -> Result[Any]:
        """Update one item; its single-item key and every list of the resource become stale."""
        handlers = self._handlers(resource)
        try:
            changes = self._validate(handlers.update_model, payload)
        except ValidationError as e:
            return failure(e, self._language)
        if not changes.model_dump(exclude_unset=True, exclude_none=True):
            return self._nothing_to_update()

        self._pending.add((resource, item_id))
        try:
            updated = await handlers.update(item_id, changes)
        except Exception as e:
            logger.warning("Update failed", resource=resource, item_id=item_id, error_type=type(e).__name__)
            return failure(e, self._language)
        finally:
            self._pending.discard((resource, item_id))

        self._invalidate_item(resource, item_id)
        logger.info("Item updated", resource=resource, item_id=item_id)
        return Ok(updated)

    async def delete(self, resource: str, item_id: str) -> Result[str]:
        """Delete one item; returns its id on success."""
        handlers = self._handlers(resource)
        self._pending.add((resource, item_id))
        try:
            await handlers.delete(item_id)
        except Exception as e:
            logger.warning("Delete failed", resource=resource, item_id=item_id, error_type=type(e).__name__)
            return failure(e, self._language)
        finally:
            self._pending.discard((resource, item_id))

        self._invalidate_item(resource, item_id)
        logger.info("Item deleted", resource=resource, item_id=item_id)
        return Ok(item_id)

    async def update_profile(self, payload: Payload) -> Result[UserProfile]:
        """Update the current user's profile; the cached profile becomes stale."""
        if self._auth_api is None:
            raise ConfigurationError("Profile updates require an auth API")
        try:
            changes = self._validate(ProfileUpdate, payload)
        except ValidationError as e:
            return failure(e, self._language)
        if changes.is_empty():
            return self._nothing_to_update()

        try:
            profile = await self._auth_api.update_profile(changes)
        except Exception as e:
            logger.warning("Profile update failed", error_type=type(e).__name__)
            return failure(e, self._language)

        self._cache.invalidate_key(CacheKey.profile())
        self._cache.invalidate_key(CacheKey.item("users", profile.id))
        logger.info("Profile updated", user_id=profile.id)
        return Ok(profile)

    def _handlers(self, resource: str) -> ResourceMutations:
        try:
            return self._resources[resource]
        except KeyError:
            raise ConfigurationError(f"No mutations registered for resource '{resource}'") from None

    def _invalidate_item(self, resource: str, item_id: str) -> None:
        self._cache.invalidate_resource(resource)
        self._cache.invalidate_key(CacheKey.item(resource, item_id))

    def _nothing_to_update(self) -> Result[Any]:
        return validation_failure(
            {"__root__": get_translated_message("field_required", self._language)}, self._language
        )

    @staticmethod
    def _validate(model: Type[BaseModel], payload: Payload) -> BaseModel:
        if isinstance(payload, model):
            return payload
        if isinstance(payload, BaseModel):
            payload = payload.model_dump(exclude_unset=True)
        return model.model_validate(payload)

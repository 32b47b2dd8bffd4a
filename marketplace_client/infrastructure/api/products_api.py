"""Product endpoints (``/products*``)."""

from typing import Optional

import structlog

from marketplace_client.domain.entities.pagination import Page
from marketplace_client.domain.entities.product import Product, ProductDraft, ProductUpdate
from marketplace_client.domain.interfaces.api import IProductsApi

from .http_client import ApiClient
from .schemas import Envelope, decode, decode_list, unwrap
from .uploads import form_fields, image_parts

logger = structlog.get_logger(__name__)


def _page(envelope: Envelope) -> Page[Product]:
    return Page(items=tuple(decode_list(Product, envelope.data or [])), pagination=envelope.pagination)


class ProductsApi(IProductsApi):
    """`IProductsApi` over HTTP."""

    def __init__(self, client: ApiClient):
        self._client = client

    async def list_products(
        self,
        page: int,
        limit: int,
        sort_by: Optional[str] = None,
        order: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
    ) -> Page[Product]:
        envelope = await self._client.get(
            "/products",
            params={
                "page": page,
                "limit": limit,
                "sortBy": sort_by,
                "order": order,
                "minPrice": min_price,
                "maxPrice": max_price,
            },
        )
        return _page(envelope)

    async def search_products(self, query: str) -> Page[Product]:
        envelope = await self._client.get("/products/search", params={"query": query})
        return _page(envelope)

    async def get_product(self, product_id: str) -> Product:
        envelope = await self._client.get(f"/products/{product_id}")
        return decode(Product, unwrap(envelope.data, "product"))

    async def create_product(self, draft: ProductDraft) -> Product:
        fields = form_fields(
            {
                "title": draft.title,
                "description": draft.description,
                "price": draft.price,
                "location": draft.location.to_json(),
            }
        )
        files = image_parts("images", draft.images) or None
        envelope = await self._client.post("/products", data=fields, files=files, auth=True)
        logger.debug("Product created", images=len(draft.images))
        return decode(Product, unwrap(envelope.data, "product"))

    async def update_product(self, product_id: str, update: ProductUpdate) -> Product:
        fields = form_fields(
            {
                "title": update.title,
                "description": update.description,
                "price": update.price,
                "location": update.location.to_json() if update.location else None,
            }
        )
        files = image_parts("images", update.images) if update.images else None
        envelope = await self._client.put(f"/products/{product_id}", data=fields, files=files, auth=True)
        return decode(Product, unwrap(envelope.data, "product"))

    async def delete_product(self, product_id: str) -> None:
        await self._client.delete(f"/products/{product_id}", auth=True)

"""Marketplace API interfaces.

These are the contracts the domain services consume. Implementations raise
`ApiError`, `EnvelopeError` or httpx transport errors on failure; the domain
services translate those before anything reaches a caller.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from marketplace_client.domain.entities.pagination import Page
from marketplace_client.domain.entities.post import Post
from marketplace_client.domain.entities.product import Product, ProductDraft, ProductUpdate
from marketplace_client.domain.entities.user import ProfileUpdate, RegistrationData, UserProfile


@dataclass(frozen=True)
class IssuedTokens:
    """Raw tokens returned by a successful login."""

    access_token: str = field(repr=False)
    refresh_token: str = field(repr=False)


class IAuthApi(ABC):
    """Authentication endpoints (``/auth/*``)."""

    @abstractmethod
    async def signup(self, data: RegistrationData) -> None:
        raise NotImplementedError

    @abstractmethod
    async def login(self, email: str, password: str, token_expires_in: str) -> IssuedTokens:
        raise NotImplementedError

    @abstractmethod
    async def verify_otp(self, email: str, otp: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def resend_otp(self, email: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def forgot_password(self, email: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def get_profile(self) -> UserProfile:
        raise NotImplementedError

    @abstractmethod
    async def update_profile(self, data: ProfileUpdate) -> UserProfile:
        raise NotImplementedError

    @abstractmethod
    async def get_user(self, user_id: str) -> UserProfile:
        raise NotImplementedError


class IProductsApi(ABC):
    """Product listing endpoints (``/products*``)."""

    @abstractmethod
    async def list_products(
        self,
        page: int,
        limit: int,
        sort_by: Optional[str] = None,
        order: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
    ) -> Page[Product]:
        raise NotImplementedError

    @abstractmethod
    async def search_products(self, query: str) -> Page[Product]:
        raise NotImplementedError

    @abstractmethod
    async def get_product(self, product_id: str) -> Product:
        raise NotImplementedError

    @abstractmethod
    async def create_product(self, draft: ProductDraft) -> Product:
        raise NotImplementedError

    @abstractmethod
    async def update_product(self, product_id: str, update: ProductUpdate) -> Product:
        raise NotImplementedError

    @abstractmethod
    async def delete_product(self, product_id: str) -> None:
        raise NotImplementedError


class IPostsApi(ABC):
    """News feed endpoints (``/posts``)."""

    @abstractmethod
    async def list_posts(self, page: int, limit: int) -> Page[Post]:
        raise NotImplementedError

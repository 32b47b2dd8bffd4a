"""HTTP adapters implementing the marketplace API interfaces."""

from .auth_api import AuthApi
from .http_client import ApiClient
from .posts_api import PostsApi
from .products_api import ProductsApi
from .schemas import Envelope

__all__ = ["ApiClient", "AuthApi", "Envelope", "PostsApi", "ProductsApi"]

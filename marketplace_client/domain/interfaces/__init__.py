from .api import IAuthApi, IPostsApi, IProductsApi, IssuedTokens
from .token_store import ITokenStore

__all__ = [
    "IAuthApi",
    "IPostsApi",
    "IProductsApi",
    "ITokenStore",
    "IssuedTokens",
]

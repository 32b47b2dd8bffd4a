from .cache_entry import CacheEntry, CacheStatus
from .page_list import ListMode, PageList
from .pagination import Page, Pagination
from .post import Post
from .product import Location, Product, ProductDraft, ProductImage, ProductUpdate
from .session import Session, SessionState
from .user import ImageFile, ProfileImage, ProfileUpdate, RegistrationData, UserProfile

__all__ = [
    "CacheEntry",
    "CacheStatus",
    "ImageFile",
    "ListMode",
    "Location",
    "Page",
    "PageList",
    "Pagination",
    "Post",
    "Product",
    "ProductDraft",
    "ProductImage",
    "ProductUpdate",
    "ProfileImage",
    "ProfileUpdate",
    "RegistrationData",
    "Session",
    "SessionState",
    "UserProfile",
]

"""Domain Services of the marketplace client.

Session Services:
- Session Controller: anonymous to authenticated lifecycle, email
  verification detour, token persistence

Data Services:
- Query Cache: keyed cache of asynchronous reads with in-flight dedup
- List Pager: searchable, infinitely scrolling resource lists
- Mutation Coordinator: writes and the cache invalidation they imply
- Catalog Queries: cached single-item reads

Error Services:
- Error Translation: raw failures to the closed error taxonomy
"""

from .cache.list_pager import ListPager
from .cache.query_cache import QueryCache
from .catalog import CatalogQueries
from .error_translation import classify, translate
from .mutations.mutation_coordinator import MutationCoordinator, ResourceMutations
from .session.session_controller import SessionController

__all__ = [
    "CatalogQueries",
    "ListPager",
    "MutationCoordinator",
    "QueryCache",
    "ResourceMutations",
    "SessionController",
    "classify",
    "translate",
]

from .list_pager import ListPager
from .query_cache import QueryCache

__all__ = ["ListPager", "QueryCache"]

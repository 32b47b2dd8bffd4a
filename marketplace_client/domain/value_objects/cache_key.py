"""Canonical cache keys.

A key identifies one cached read: a resource name, an optional scope (``list``,
``search``, ``item``) and the filters applied. Filters are sorted and ``None``
values dropped, so the same logical query always produces the same string::

    >>> str(CacheKey.build("products", "list", page=1, limit=10, sortBy=None))
    'products:list?limit=10&page=1'
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple
from urllib.parse import quote, unquote

PROFILE_RESOURCE = "auth"
PROFILE_SCOPE = "profile"


def _encode(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return quote(str(value), safe="")


@dataclass(frozen=True)
class CacheKey:
    """Immutable, hashable cache key.

    Attributes:
        resource: Resource name (``products``, ``posts``, ``auth``...).
        scope: Sub-kind of read within the resource.
        params: Sorted ``(name, encoded value)`` pairs.
    """

    resource: str
    scope: str = ""
    params: Tuple[Tuple[str, str], ...] = ()

    def __post_init__(self):
        if not self.resource or ":" in self.resource or "?" in self.resource:
            raise ValueError(f"Invalid cache resource name: {self.resource!r}")

    @classmethod
    def build(cls, resource: str, scope: str = "", **filters: Any) -> "CacheKey":
        params = tuple(
            sorted((name, _encode(value)) for name, value in filters.items() if value is not None)
        )
        return cls(resource=resource, scope=scope, params=params)

    @classmethod
    def item(cls, resource: str, item_id: str) -> "CacheKey":
        """Key of a single-item read, e.g. ``products:item?id=42``."""
        return cls.build(resource, "item", id=item_id)

    @classmethod
    def profile(cls) -> "CacheKey":
        """Fixed key the current user's profile is cached under."""
        return cls(resource=PROFILE_RESOURCE, scope=PROFILE_SCOPE)

    @classmethod
    def parse(cls, raw: str) -> "CacheKey":
        """Inverse of ``str(key)``."""
        head, _, query = raw.partition("?")
        resource, _, scope = head.partition(":")
        params = []
        if query:
            for pair in query.split("&"):
                name, _, value = pair.partition("=")
                params.append((name, value))
        return cls(resource=resource, scope=scope, params=tuple(sorted(params)))

    def get(self, name: str) -> Optional[str]:
        for key, value in self.params:
            if key == name:
                return unquote(value)
        return None

    def with_params(self, **filters: Any) -> "CacheKey":
        merged: dict = {name: unquote(value) for name, value in self.params}
        merged.update(filters)
        return CacheKey.build(self.resource, self.scope, **merged)

    def matches(self, resource: str, scope: Optional[str] = None,
                params: Optional[Mapping[str, Any]] = None) -> bool:
        if self.resource != resource:
            return False
        if scope is not None and self.scope != scope:
            return False
        for name, value in (params or {}).items():
            if self.get(name) != str(value):
                return False
        return True

    def __str__(self) -> str:
        head = f"{self.resource}:{self.scope}" if self.scope else self.resource
        if not self.params:
            return head
        return head + "?" + "&".join(f"{name}={value}" for name, value in self.params)

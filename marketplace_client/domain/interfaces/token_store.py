"""Token store interface.

The token store is the sole source of truth for "do we have credentials".
"""

from abc import ABC, abstractmethod
from typing import Optional

from marketplace_client.domain.value_objects.token_pair import TokenPair


class ITokenStore(ABC):
    """Durable persistence for the access/refresh token pair.

    Implementations must make `save`, `load` and `clear` atomic with respect
    to each other (a `load` running during a `save` sees either the old or the
    new pair, never a mix) and durable across process restarts.

    Every method raises `StorageError` when the backing store is unavailable;
    implementations must not swallow such failures.
    """

    @abstractmethod
    async def save(self, pair: TokenPair) -> None:
        """Persist `pair`, replacing any stored pair."""
        raise NotImplementedError

    @abstractmethod
    async def load(self) -> Optional[TokenPair]:
        """Return the stored pair, or None when no credentials are stored."""
        raise NotImplementedError

    @abstractmethod
    async def clear(self) -> None:
        """Remove stored credentials. Clearing an empty store is a no-op."""
        raise NotImplementedError

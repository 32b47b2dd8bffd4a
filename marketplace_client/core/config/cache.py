"""Read cache and list pagination settings."""

from pydantic import Field
from pydantic_settings import BaseSettings


class CacheSettings(BaseSettings):
    """Tuning knobs for the query cache and list pagers.

    Performance Note:
        - CACHE_STALE_SECONDS trades freshness for request volume; mutations
          invalidate affected keys regardless of this value.
        - SEARCH_DEBOUNCE_SECONDS should stay below the typing interval of a
          slow typist so results still feel live.
    """

    CACHE_STALE_SECONDS: float = Field(default=300.0, ge=0)
    READ_RETRY_ATTEMPTS: int = Field(default=1, ge=0, le=5)
    READ_RETRY_WAIT_SECONDS: float = Field(default=0.5, ge=0)

    PAGE_SIZE: int = Field(default=10, ge=1, le=100)
    SEARCH_DEBOUNCE_SECONDS: float = Field(default=0.35, ge=0)

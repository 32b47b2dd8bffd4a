"""Token store implementations."""

from typing import Optional

from marketplace_client.core.config.settings import Settings, settings as default_settings
from marketplace_client.core.exceptions import ConfigurationError
from marketplace_client.domain.interfaces.token_store import ITokenStore

from .file_token_store import FileTokenStore
from .redis_token_store import RedisTokenStore, create_redis_client


def build_token_store(config: Optional[Settings] = None) -> ITokenStore:
    """Return the token store selected by TOKEN_STORE_BACKEND."""
    config = config or default_settings
    if config.TOKEN_STORE_BACKEND == "file":
        return FileTokenStore(config.TOKEN_STORAGE_PATH, config.TOKEN_STORAGE_KEY)
    if config.TOKEN_STORE_BACKEND == "redis":
        return RedisTokenStore(create_redis_client(config.REDIS_URL), config.TOKEN_STORAGE_KEY)
    raise ConfigurationError(f"Unsupported token store backend '{config.TOKEN_STORE_BACKEND}'")


__all__ = ["FileTokenStore", "RedisTokenStore", "build_token_store", "create_redis_client"]

"""Authentication and credential storage settings.
"""

import logging

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

TOKEN_STORE_BACKENDS = ("file", "redis")


class AuthSettings(BaseSettings):
    """Defines settings for the session lifecycle and the token store.

    Security Note:
        - The token file holds live credentials. Keep TOKEN_STORAGE_PATH inside a
          directory readable only by the current user.
        - REDIS_URL should use TLS (rediss://) when Redis is not on localhost.
    """

    # Login
    TOKEN_EXPIRES_IN: str = "1y"
    PASSWORD_MIN_LENGTH: int = Field(default=8, ge=1)

    # Email verification. Code width differs between deployments (4 or 6).
    OTP_LENGTH: int = Field(default=6, ge=1, le=12)
    OTP_RESEND_COOLDOWN_SECONDS: int = Field(default=60, ge=0)

    # Token store
    TOKEN_STORE_BACKEND: str = "file"
    TOKEN_STORAGE_PATH: str = ".marketplace/tokens.json"
    TOKEN_STORAGE_KEY: str = "marketplace.auth.tokens"
    REDIS_URL: str = "redis://localhost:6379/0"

    @model_validator(mode="after")
    def _validate_token_store_backend(self) -> "AuthSettings":
        """Rejects token store backends that have no implementation."""
        backend = self.TOKEN_STORE_BACKEND.strip().lower()
        if backend not in TOKEN_STORE_BACKENDS:
            error_msg = (
                f"Unsupported TOKEN_STORE_BACKEND '{self.TOKEN_STORE_BACKEND}'. "
                f"Expected one of: {', '.join(TOKEN_STORE_BACKENDS)}"
            )
            logger.error(error_msg)
            raise ValueError(error_msg)
        self.TOKEN_STORE_BACKEND = backend
        return self

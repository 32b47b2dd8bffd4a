"""Marketplace client: session lifecycle and data synchronization for the
classifieds marketplace API."""

from marketplace_client.client import MarketplaceClient
from marketplace_client.core.config.settings import Settings, create_settings
from marketplace_client.core.logging import configure_logging
from marketplace_client.domain.entities.session import Session, SessionState
from marketplace_client.domain.value_objects.error import ErrorKind, TranslatedError
from marketplace_client.domain.value_objects.result import Err, Ok, Result

__version__ = "0.1.0"

__all__ = [
    "Err",
    "ErrorKind",
    "MarketplaceClient",
    "Ok",
    "Result",
    "Session",
    "SessionState",
    "Settings",
    "TranslatedError",
    "configure_logging",
    "create_settings",
]

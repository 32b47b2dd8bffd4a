from __future__ import annotations

"""Centralized, structured exception hierarchy for the marketplace client.

Every exception carries a machine-readable `code` and a `message` meant for
logs. These exceptions are internal: the public operations of the session,
cache and mutation services convert them into translated results through
`marketplace_client.domain.services.error_translation.translate` before they
reach a caller, so user interfaces never parse raw exceptions.
"""

from typing import Any, Final, Mapping, Optional

__all__: Final = [
    "MarketplaceError",
    "ApiError",
    "EnvelopeError",
    "StorageError",
    "InputValidationError",
    "ConfigurationError",
]


class MarketplaceError(Exception):
    """Base exception class for all custom errors in the marketplace client.

    Attributes:
        message (str): A human-readable error message, suitable for logging.
        code (str): A unique, machine-readable error code.
    """

    message: str
    code: str = "generic_error"

    def __init__(self, message: str, code: str = "generic_error"):
        self.message = message
        self.code = code
        Exception.__init__(self, self.message)

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# API errors
# ---------------------------------------------------------------------------


class ApiError(MarketplaceError):
    """Raised when the API answers with a non-2xx status or ``success: false``.

    The raw server message is kept for classification and logging only; it is
    never shown to a user verbatim.

    Attributes:
        status_code (int): HTTP status of the response (200 when the envelope
            reported ``success: false`` on an otherwise successful response).
        server_code (str | None): Optional machine code supplied by the server.
        errors (dict): Field-level validation messages, keyed by field name.
    """

    def __init__(
        self,
        status_code: int,
        message: str = "",
        server_code: Optional[str] = None,
        errors: Optional[Mapping[str, Any]] = None,
        code: str = "api_error",
    ):
        self.status_code = status_code
        self.server_code = server_code
        self.errors = dict(errors or {})
        super().__init__(message or f"API request failed with status {status_code}", code)


class EnvelopeError(MarketplaceError):
    """Raised when a response body does not match the expected envelope shape.

    This covers non-JSON bodies, a missing ``success`` flag and ``data``
    payloads that fail model validation.
    """

    def __init__(self, message: str = "Unexpected response shape", code: str = "envelope_error"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Local persistence errors
# ---------------------------------------------------------------------------


class StorageError(MarketplaceError):
    """Raised when the token store cannot be read, written or cleared.

    A session that "logs in" without persisting its tokens disappears on the
    next start, so callers must treat this as a failed login.
    """

    def __init__(self, message: str = "Credential storage is unavailable", code: str = "storage_error"):
        super().__init__(message, code)


class ConfigurationError(MarketplaceError):
    """Raised when the client is assembled from inconsistent settings."""

    def __init__(self, message: str, code: str = "configuration_error"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Client-side validation errors
# ---------------------------------------------------------------------------


class InputValidationError(MarketplaceError):
    """Raised by client-side input checks before any request is sent.

    Attributes:
        fields (dict): Field name to an already-translated message.
    """

    def __init__(self, fields: Mapping[str, str], message: str = "Invalid input", code: str = "input_validation_error"):
        self.fields = dict(fields)
        super().__init__(message, code)

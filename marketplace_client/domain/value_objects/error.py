"""Translated error value objects.

`TranslatedError` is the only error shape the client's public operations
expose: a machine-checkable `ErrorKind`, a message already resolved for the
user's language, and optional field-level details for validation failures.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict


class ErrorKind(str, Enum):
    """Closed set of failure kinds a caller can branch on."""

    NETWORK = "network"
    VALIDATION = "validation"
    INVALID_CREDENTIALS = "invalid_credentials"
    EMAIL_NOT_VERIFIED = "email_not_verified"
    OTP_INVALID = "otp_invalid"
    OTP_EXPIRED = "otp_expired"
    NOT_FOUND = "not_found"
    SERVER = "server"
    STORAGE = "storage"
    UNKNOWN = "unknown"

    @property
    def message_key(self) -> str:
        """i18n catalog key of the generic message for this kind."""
        return f"error_{self.value}"

    @property
    def is_transient(self) -> bool:
        """Whether a read that failed with this kind may be retried."""
        return self in (ErrorKind.NETWORK, ErrorKind.SERVER)


@dataclass(frozen=True)
class TranslatedError:
    """A failure classified into an `ErrorKind` with a user-facing message.

    Attributes:
        kind: The failure kind.
        message: Human-readable message in the requested language.
        fields: Field name to message, populated for VALIDATION failures.
    """

    kind: ErrorKind
    message: str
    fields: Dict[str, str] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.message

"""Error Translation Service.

Single conversion point from raw failures (transport errors, API error
responses, malformed payloads, local validation and storage failures) to the
closed `ErrorKind` set and a user-facing message.

Key properties:
- Total: every cause classifies to exactly one kind; unknown causes become
  UNKNOWN with a generic message.
- Safe: server and transport text is logged (hashed) but never returned to
  the caller; messages come from the i18n catalog.
- Field details: validation failures keep per-field messages so forms can
  highlight the offending inputs.
"""

import hashlib
from typing import Dict, Mapping, Optional, Tuple

import httpx
import structlog
from pydantic import ValidationError as PydanticValidationError

from marketplace_client.core.exceptions import (
    ApiError,
    EnvelopeError,
    InputValidationError,
    StorageError,
)
from marketplace_client.domain.value_objects.error import ErrorKind, TranslatedError
from marketplace_client.domain.value_objects.result import Err
from marketplace_client.utils.i18n import get_translated_message

logger = structlog.get_logger(__name__)

# Server-supplied machine codes, normalised to upper case.
SERVER_CODES: Dict[str, ErrorKind] = {
    "EMAIL_NOT_VERIFIED": ErrorKind.EMAIL_NOT_VERIFIED,
    "EMAIL_NOT_CONFIRMED": ErrorKind.EMAIL_NOT_VERIFIED,
    "INVALID_CREDENTIALS": ErrorKind.INVALID_CREDENTIALS,
    "OTP_INVALID": ErrorKind.OTP_INVALID,
    "INVALID_OTP": ErrorKind.OTP_INVALID,
    "OTP_EXPIRED": ErrorKind.OTP_EXPIRED,
    "NOT_FOUND": ErrorKind.NOT_FOUND,
    "VALIDATION_ERROR": ErrorKind.VALIDATION,
}

# Ordered message heuristics for servers that only send free text.
EMAIL_NOT_VERIFIED_PHRASES: Tuple[str, ...] = (
    "verify your email",
    "email not verified",
    "not verified",
    "email is not verified",
    "confirm your email",
)
OTP_WORDS: Tuple[str, ...] = ("otp", "code", "verification")
OTP_EXPIRED_WORDS: Tuple[str, ...] = ("expired", "expire")
OTP_INVALID_WORDS: Tuple[str, ...] = ("invalid", "incorrect", "wrong", "mismatch")

STATUS_KINDS: Dict[int, ErrorKind] = {
    400: ErrorKind.VALIDATION,
    401: ErrorKind.INVALID_CREDENTIALS,
    403: ErrorKind.INVALID_CREDENTIALS,
    404: ErrorKind.NOT_FOUND,
    408: ErrorKind.SERVER,
    409: ErrorKind.VALIDATION,
    422: ErrorKind.VALIDATION,
    429: ErrorKind.SERVER,
}


def _digest(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8", "replace")).hexdigest()[:16]


def _classify_message(message: str) -> Optional[ErrorKind]:
    lowered = message.lower()
    if any(phrase in lowered for phrase in EMAIL_NOT_VERIFIED_PHRASES):
        return ErrorKind.EMAIL_NOT_VERIFIED
    if any(word in lowered for word in OTP_WORDS):
        if any(word in lowered for word in OTP_EXPIRED_WORDS):
            return ErrorKind.OTP_EXPIRED
        if any(word in lowered for word in OTP_INVALID_WORDS):
            return ErrorKind.OTP_INVALID
    return None


def _classify_api_error(error: ApiError) -> ErrorKind:
    if error.server_code:
        kind = SERVER_CODES.get(error.server_code.upper())
        if kind is not None:
            return kind
    kind = _classify_message(error.message or "")
    if kind is not None:
        return kind
    if error.status_code in STATUS_KINDS:
        return STATUS_KINDS[error.status_code]
    if error.status_code >= 500:
        return ErrorKind.SERVER
    return ErrorKind.UNKNOWN


def _pydantic_fields(error: PydanticValidationError) -> Dict[str, str]:
    fields: Dict[str, str] = {}
    for item in error.errors():
        name = ".".join(str(part) for part in item.get("loc", ())) or "__root__"
        fields.setdefault(name, item.get("msg", "invalid"))
    return fields


def _string_fields(raw: Mapping[str, object]) -> Dict[str, str]:
    return {str(name): str(message) for name, message in raw.items()}


def classify(cause: BaseException) -> Tuple[ErrorKind, Dict[str, str]]:
    """Return the kind of `cause` and any field-level validation details."""
    fields: Dict[str, str] = {}

    if isinstance(cause, (httpx.TimeoutException, httpx.TransportError)):
        kind = ErrorKind.NETWORK
    elif isinstance(cause, ApiError):
        kind = _classify_api_error(cause)
        if kind is ErrorKind.VALIDATION:
            fields = _string_fields(cause.errors)
    elif isinstance(cause, EnvelopeError):
        kind = ErrorKind.UNKNOWN
    elif isinstance(cause, StorageError):
        kind = ErrorKind.STORAGE
    elif isinstance(cause, PydanticValidationError):
        kind = ErrorKind.VALIDATION
        fields = _pydantic_fields(cause)
    elif isinstance(cause, InputValidationError):
        kind = ErrorKind.VALIDATION
        fields = dict(cause.fields)
    else:
        kind = ErrorKind.UNKNOWN
    return kind, fields


def translate(cause: BaseException, language: Optional[str] = None) -> TranslatedError:
    """Classify `cause` into an `ErrorKind` with a translated message.

    Args:
        cause: Any exception raised by an API call, the token store or local
            validation.
        language: Language of the returned message (defaults to the
            configured default language).

    Returns:
        TranslatedError: Never raises.
    """
    kind, fields = classify(cause)
    logger.info(
        "Error translated",
        kind=kind.value,
        cause_type=type(cause).__name__,
        cause_digest=_digest(str(cause)),
        status_code=getattr(cause, "status_code", None),
    )
    return TranslatedError(kind=kind, message=get_translated_message(kind.message_key, language), fields=fields)


def failure(cause: BaseException, language: Optional[str] = None) -> Err:
    """Shorthand for ``Err(translate(cause, language))``."""
    return Err(translate(cause, language))


def validation_failure(fields: Mapping[str, str], language: Optional[str] = None) -> Err:
    """Build a VALIDATION result for client-side checks that already know the fields."""
    return Err(
        TranslatedError(
            kind=ErrorKind.VALIDATION,
            message=get_translated_message(ErrorKind.VALIDATION.message_key, language),
            fields=dict(fields),
        )
    )

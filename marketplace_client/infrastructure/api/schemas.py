"""Response envelope schemas.

Every endpoint answers ``{success, data, pagination?}``. Error bodies add a
``message`` (at the top level or inside ``data``), an optional machine
``code`` and optional field ``errors``.
"""

from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from marketplace_client.core.exceptions import EnvelopeError
from marketplace_client.domain.entities.pagination import Pagination

M = TypeVar("M")


class Envelope(BaseModel):
    """Decoded response body."""

    model_config = ConfigDict(extra="allow")

    success: bool
    data: Any = None
    pagination: Optional[Pagination] = None
    message: Optional[str] = None
    code: Optional[str] = None
    errors: Any = None

    def error_message(self) -> str:
        if self.message:
            return self.message
        if isinstance(self.data, dict) and isinstance(self.data.get("message"), str):
            return self.data["message"]
        return ""

    def error_code(self) -> Optional[str]:
        if self.code:
            return self.code
        if isinstance(self.data, dict) and isinstance(self.data.get("code"), str):
            return self.data["code"]
        return None

    def field_errors(self) -> Dict[str, str]:
        raw = self.errors
        if raw is None and isinstance(self.data, dict):
            raw = self.data.get("errors")
        return normalize_field_errors(raw)


def normalize_field_errors(raw: Any) -> Dict[str, str]:
    """Accept ``[{field, message}]`` or ``{field: message}`` error lists."""
    if isinstance(raw, dict):
        return {str(name): str(message) for name, message in raw.items()}
    fields: Dict[str, str] = {}
    if isinstance(raw, list):
        for item in raw:
            if isinstance(item, dict) and item.get("field"):
                fields.setdefault(str(item["field"]), str(item.get("message") or item.get("msg") or ""))
    return fields


def decode(model: Type[M], payload: Any) -> M:
    """Validate `payload` as `model`; a mismatch is an envelope error, not user input."""
    try:
        return TypeAdapter(model).validate_python(payload)
    except ValidationError as e:
        raise EnvelopeError(f"Response data does not match {getattr(model, '__name__', model)}") from e


def decode_list(model: Type[M], payload: Any) -> List[M]:
    return decode(List[model], payload)  # type: ignore[valid-type]


def unwrap(payload: Any, key: str) -> Any:
    """Return ``payload[key]`` when the server nests the object, else the payload."""
    if isinstance(payload, dict) and key in payload and isinstance(payload[key], dict):
        return payload[key]
    return payload

"""Multipart helpers for image uploads."""

from pathlib import Path
from typing import Any, Dict, List, Tuple

from marketplace_client.core.exceptions import InputValidationError
from marketplace_client.domain.entities.user import ImageFile
from marketplace_client.utils.i18n import get_translated_message

FilePart = Tuple[str, Tuple[str, bytes, str]]


def image_part(field: str, image: ImageFile, index: int = 0) -> FilePart:
    """Read `image` into an httpx ``files`` entry.

    Raises:
        InputValidationError: If the file cannot be read.
    """
    path = Path(image.path)
    try:
        content = path.read_bytes()
    except OSError as e:
        raise InputValidationError(
            {field: get_translated_message("field_required")}, f"Image {path.name} is not readable"
        ) from e
    name = image.file_name or path.name or f"image_{index}.jpg"
    return field, (name, content, image.content_type)


def form_fields(values: Dict[str, Any]) -> Dict[str, str]:
    """Stringify multipart text fields, skipping unset values."""
    return {name: str(value) for name, value in values.items() if value is not None}


def image_parts(field: str, images: List[ImageFile]) -> List[FilePart]:
    return [image_part(field, image, index) for index, image in enumerate(images)]

"""A Value Object representing an email address.

Login, registration, verification and resend all key on the user's email, so
it is validated and normalized once, before any request leaves the client.
"""

import re
from dataclasses import dataclass
from typing import ClassVar

from structlog import get_logger

from marketplace_client.core.logging import mask_email

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Email:
    """An immutable, self-validating email address.

    Rules enforced on instantiation:
    - Conforms to a simple ``local@domain.tld`` format.
    - Has a reasonable length.
    - Is normalized to lowercase with surrounding whitespace removed.

    Attributes:
        value: The normalized email string.
    """

    value: str

    MAX_LENGTH: ClassVar[int] = 254
    MIN_LENGTH: ClassVar[int] = 5
    EMAIL_PATTERN: ClassVar[re.Pattern] = re.compile(
        r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
    )

    def __post_init__(self):
        if not isinstance(self.value, str):
            raise TypeError("Email value must be a string.")

        normalized_value = self.value.strip().lower()
        object.__setattr__(self, "value", normalized_value)

        if not (self.MIN_LENGTH <= len(normalized_value) <= self.MAX_LENGTH):
            raise ValueError(
                f"Email length must be between {self.MIN_LENGTH} and {self.MAX_LENGTH} characters."
            )
        if not self.EMAIL_PATTERN.match(normalized_value):
            raise ValueError("Invalid email format.")

    def mask_for_logging(self) -> str:
        return mask_email(self.value)

    def __str__(self) -> str:
        return self.value

"""Password and one-time code value objects.

Both are checked client-side only for shape (length, digits); the server
remains the authority on whether they are correct.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Password:
    """A password that meets the minimum length accepted at login.

    The value is excluded from ``repr`` so it cannot leak into logs.
    """

    value: str = field(repr=False)
    min_length: int = 8

    def __post_init__(self):
        if not isinstance(self.value, str) or not self.value:
            raise ValueError("Password is required.")
        if len(self.value) < self.min_length:
            raise ValueError(f"Password must be at least {self.min_length} characters long")


@dataclass(frozen=True)
class OtpCode:
    """A numeric one-time code of a configured width.

    Deployments have issued both 4 and 6 digit codes, so the width is passed
    in rather than fixed here.
    """

    value: str
    length: int = 6

    def __post_init__(self):
        normalized = (self.value or "").strip() if isinstance(self.value, str) else ""
        object.__setattr__(self, "value", normalized)
        if len(normalized) != self.length or not normalized.isdigit():
            raise ValueError(f"Verification code must be {self.length} digits")

    def __str__(self) -> str:
        return self.value

"""Token pair value object.

Encapsulates the access/refresh credential issued at login together with the
expiry policy requested for it, so the session bootstrap can tell a usable
pair from an expired one without decoding the tokens.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, ClassVar, Dict, Mapping, Optional

DURATION_PATTERN = re.compile(r"^\s*(\d+)\s*([smhdwy])\s*$")

DURATION_UNITS: Dict[str, timedelta] = {
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
    "w": timedelta(weeks=1),
    "y": timedelta(days=365),
}


def parse_duration(value: str) -> timedelta:
    """Parse a ``token_expires_in`` hint such as ``"1y"``, ``"30d"`` or ``"15m"``.

    Raises:
        ValueError: If the hint does not follow ``<int><s|m|h|d|w|y>``.
    """
    match = DURATION_PATTERN.match(value or "")
    if not match:
        raise ValueError(f"Invalid duration hint: {value!r}")
    amount, unit = match.groups()
    return int(amount) * DURATION_UNITS[unit]


@dataclass(frozen=True)
class TokenPair:
    """Immutable access/refresh token pair.

    Attributes:
        access_token: Bearer token sent with authenticated requests.
        refresh_token: Long-lived token paired with the access token.
        expires_in: Duration hint the pair was requested with.
        issued_at: When the pair was received.
        expires_at: `issued_at` plus the parsed `expires_in`; None when the
            hint could not be parsed (the pair is then treated as
            non-expiring until the server rejects it).
    """

    access_token: str
    refresh_token: str
    expires_in: str = "1y"
    issued_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    expires_at: Optional[datetime] = None

    VERSION: ClassVar[int] = 1

    def __post_init__(self):
        if not self.access_token or not isinstance(self.access_token, str):
            raise ValueError("Access token cannot be empty")
        if not self.refresh_token or not isinstance(self.refresh_token, str):
            raise ValueError("Refresh token cannot be empty")
        if self.expires_at is None:
            try:
                object.__setattr__(self, "expires_at", self.issued_at + parse_duration(self.expires_in))
            except ValueError:
                pass

    @classmethod
    def issue(cls, access_token: str, refresh_token: str, expires_in: str,
              now: Optional[datetime] = None) -> "TokenPair":
        """Build the pair returned by a successful login."""
        return cls(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=expires_in,
            issued_at=now or datetime.now(timezone.utc),
        )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        return (now or datetime.now(timezone.utc)) >= self.expires_at

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.VERSION,
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_in": self.expires_in,
            "issued_at": self.issued_at.isoformat(),
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TokenPair":
        """Rebuild a stored pair.

        Raises:
            ValueError: If the mapping is missing fields or holds bad values.
        """
        try:
            issued_at = datetime.fromisoformat(data["issued_at"])
            expires_raw = data.get("expires_at")
            return cls(
                access_token=data["access_token"],
                refresh_token=data["refresh_token"],
                expires_in=data.get("expires_in", "1y"),
                issued_at=issued_at,
                expires_at=datetime.fromisoformat(expires_raw) if expires_raw else None,
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed token record: {e}") from e

    def mask_for_logging(self) -> str:
        return self.access_token[:4] + "*" * 8

    def __repr__(self) -> str:
        return (
            f"TokenPair(access_token='{self.mask_for_logging()}', refresh_token='****', "
            f"expires_at={self.expires_at!r})"
        )

"""Client session entity.

`Session` is the immutable snapshot of where the user stands in the
authentication lifecycle. `SessionController` is its only writer: every
transition produces a new snapshot with `dataclasses.replace`, and observers
only ever see whole snapshots.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Optional

from marketplace_client.domain.value_objects.error import TranslatedError


class SessionState(str, Enum):
    """Lifecycle states of the client session."""

    ANONYMOUS = "anonymous"
    REGISTERING = "registering"
    AWAITING_VERIFICATION = "awaiting_verification"
    VERIFYING = "verifying"
    LOGGING_IN = "logging_in"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"


@dataclass(frozen=True)
class Session:
    """Snapshot of the client session.

    Attributes:
        state: Current lifecycle state.
        email: Email the user is registering, verifying or logging in with.
        pending_password: Password carried through verification so the user
            can be logged in automatically afterwards. Never part of ``repr``.
        otp_resend_available_at: Earliest time another code may be requested.
        notice: Informational message for the user (not an error).
        error: Last translated failure, cleared on the next transition.
    """

    state: SessionState = SessionState.ANONYMOUS
    email: Optional[str] = None
    pending_password: Optional[str] = field(default=None, repr=False)
    otp_resend_available_at: Optional[datetime] = None
    notice: Optional[str] = None
    error: Optional[TranslatedError] = None

    @property
    def is_authenticated(self) -> bool:
        return self.state is SessionState.AUTHENTICATED

    @property
    def is_busy(self) -> bool:
        return self.state in (
            SessionState.REGISTERING,
            SessionState.VERIFYING,
            SessionState.LOGGING_IN,
        )

    def seconds_until_resend(self, now: datetime) -> int:
        """Whole seconds left on the resend countdown (0 when available)."""
        if self.otp_resend_available_at is None or now >= self.otp_resend_available_at:
            return 0
        remaining = (self.otp_resend_available_at - now).total_seconds()
        return int(remaining) + (1 if remaining % 1 else 0)

    def evolve(self, **changes) -> "Session":
        """Return a copy with `changes` applied; notice and error reset unless given."""
        changes.setdefault("notice", None)
        changes.setdefault("error", None)
        return replace(self, **changes)

"""Session Domain Events.

Published by `SessionController` to its subscribers after every transition,
so navigation, profile widgets and logging can react to the session without
reading or writing any shared mutable state.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from marketplace_client.domain.entities.session import Session, SessionState


@dataclass(frozen=True)
class BaseDomainEvent:
    """Base class for all domain events.

    Attributes:
        occurred_at: When the event occurred
    """

    occurred_at: datetime

    def __post_init__(self):
        if not self.occurred_at.tzinfo:
            object.__setattr__(self, "occurred_at", self.occurred_at.replace(tzinfo=timezone.utc))


@dataclass(frozen=True)
class SessionChangedEvent(BaseDomainEvent):
    """A new session snapshot replaced the previous one.

    Attributes:
        previous: Snapshot before the transition.
        current: Snapshot after the transition.
        trigger: Name of the event that caused the transition
            (``submit_login``, ``login_ok``, ``logout``...).
    """

    previous: Session
    current: Session
    trigger: str = ""

    @classmethod
    def create(cls, previous: Session, current: Session, trigger: str,
               occurred_at: Optional[datetime] = None) -> "SessionChangedEvent":
        return cls(
            occurred_at=occurred_at or datetime.now(timezone.utc),
            previous=previous,
            current=current,
            trigger=trigger,
        )

    @property
    def state_changed(self) -> bool:
        return self.previous.state is not self.current.state

    @property
    def authentication_changed(self) -> bool:
        """True when the ``is_authenticated`` signal flipped."""
        return self.previous.is_authenticated != self.current.is_authenticated

    def entered(self, state: SessionState) -> bool:
        return self.current.state is state and self.previous.state is not state


SessionListener = Callable[[SessionChangedEvent], None]

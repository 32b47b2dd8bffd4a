"""Domain Events.

Session events are immutable and describe one session transition each.
"""

from .session_events import BaseDomainEvent, SessionChangedEvent, SessionListener

__all__ = [
    "BaseDomainEvent",
    "SessionChangedEvent",
    "SessionListener",
]

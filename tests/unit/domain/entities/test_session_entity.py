"""Tests for the session snapshot."""

from datetime import datetime, timedelta, timezone

from marketplace_client.domain.entities.session import Session, SessionState
from marketplace_client.domain.events.session_events import SessionChangedEvent

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


class TestSession:
    def test_default_is_anonymous(self):
        session = Session()

        assert session.state is SessionState.ANONYMOUS
        assert not session.is_authenticated
        assert not session.is_busy

    def test_in_flight_states_are_busy(self):
        for state in (SessionState.REGISTERING, SessionState.VERIFYING, SessionState.LOGGING_IN):
            assert Session(state=state).is_busy

    def test_password_not_in_repr(self):
        session = Session(state=SessionState.AWAITING_VERIFICATION, pending_password="s3cretpass")

        assert "s3cretpass" not in repr(session)

    def test_seconds_until_resend_rounds_up(self):
        session = Session(otp_resend_available_at=NOW + timedelta(seconds=59, milliseconds=200))

        assert session.seconds_until_resend(NOW) == 60
        assert session.seconds_until_resend(NOW + timedelta(seconds=60)) == 0
        assert Session().seconds_until_resend(NOW) == 0

    def test_evolve_resets_notice_and_error(self):
        session = Session(email="ana@example.com", notice="Your email is verified.")

        evolved = session.evolve(state=SessionState.LOGGING_IN)

        assert evolved.email == "ana@example.com"
        assert evolved.notice is None
        assert session.notice == "Your email is verified."


class TestSessionChangedEvent:
    def test_naive_timestamp_becomes_utc(self):
        event = SessionChangedEvent.create(Session(), Session(), "restore", occurred_at=datetime(2024, 1, 1))

        assert event.occurred_at.tzinfo is timezone.utc

    def test_transition_flags(self):
        event = SessionChangedEvent.create(
            Session(state=SessionState.LOGGING_IN),
            Session(state=SessionState.AUTHENTICATED),
            "login_ok",
            occurred_at=NOW,
        )

        assert event.state_changed
        assert event.authentication_changed
        assert event.entered(SessionState.AUTHENTICATED)
        assert not event.entered(SessionState.LOGGING_IN)

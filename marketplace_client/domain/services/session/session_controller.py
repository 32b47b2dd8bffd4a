"""Session Controller Domain Service.

The session controller is the single writer of the client `Session`. It takes
a user from anonymous to authenticated, including the email verification
detour, and persists the resulting tokens through the `ITokenStore`.

State machine:

    ANONYMOUS --submit_login--> LOGGING_IN --ok--> AUTHENTICATED
                                           --EMAIL_NOT_VERIFIED--> AWAITING_VERIFICATION
                                           --other error--> ANONYMOUS
    ANONYMOUS --submit_register--> REGISTERING --ok--> AWAITING_VERIFICATION
                                               --error--> ANONYMOUS
    AWAITING_VERIFICATION --submit_otp--> VERIFYING --ok + password--> LOGGING_IN
                                                    --ok, no password--> ANONYMOUS
                                                    --error--> AWAITING_VERIFICATION
    AWAITING_VERIFICATION --cancel_verification--> ANONYMOUS
    AUTHENTICATED --logout / expire--> ANONYMOUS

Rules enforced here:
- One register, login or verify call at a time. A second submission, or a
  submission the current state does not allow, is rejected without a request.
- Input (email, password presence, registration password length, code width)
  is validated before any request.
- Entering AWAITING_VERIFICATION sends exactly one verification code.
- Code resends are rate limited by an explicit deadline on the session.
- A login whose tokens cannot be stored is a failed login.
- Every public operation returns `Ok | Err`; API, transport and storage
  failures never escape as exceptions.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

import structlog
from pydantic import ValidationError

from marketplace_client.core.config.settings import settings
from marketplace_client.core.exceptions import StorageError
from marketplace_client.core.logging import mask_email
from marketplace_client.domain.entities.session import Session, SessionState
from marketplace_client.domain.entities.user import RegistrationData
from marketplace_client.domain.events.session_events import SessionChangedEvent, SessionListener
from marketplace_client.domain.interfaces.api import IAuthApi
from marketplace_client.domain.interfaces.token_store import ITokenStore
from marketplace_client.domain.services.cache.query_cache import QueryCache
from marketplace_client.domain.services.error_translation import failure, translate, validation_failure
from marketplace_client.domain.value_objects.cache_key import CacheKey
from marketplace_client.domain.value_objects.credentials import OtpCode, Password
from marketplace_client.domain.value_objects.email import Email
from marketplace_client.domain.value_objects.error import ErrorKind, TranslatedError
from marketplace_client.domain.value_objects.result import Err, Ok, Result
from marketplace_client.domain.value_objects.token_pair import TokenPair
from marketplace_client.utils.i18n import get_translated_message

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionController:
    """Owns the client session and every transition of it.

    Args:
        auth_api: Authentication endpoints.
        token_store: Persistence for the token pair.
        cache: Shared query cache; cleared on logout and invalidated on login.
        clock: Source of the current time (UTC), used for resend deadlines
            and token expiry.
        language: Language of translated messages.
        otp_length: Width of verification codes.
        password_min_length: Minimum accepted password length.
        resend_cooldown_seconds: Minimum delay between two code requests.
        token_expires_in: Expiry hint sent with every login.
    """

    def __init__(
        self,
        auth_api: IAuthApi,
        token_store: ITokenStore,
        cache: QueryCache,
        *,
        clock: Optional[Clock] = None,
        language: Optional[str] = None,
        otp_length: Optional[int] = None,
        password_min_length: Optional[int] = None,
        resend_cooldown_seconds: Optional[float] = None,
        token_expires_in: Optional[str] = None,
    ):
        self._auth_api = auth_api
        self._token_store = token_store
        self._cache = cache
        self._clock = clock or utc_now
        self._language = language
        self._otp_length = otp_length or settings.OTP_LENGTH
        self._password_min_length = password_min_length or settings.PASSWORD_MIN_LENGTH
        self._resend_cooldown = timedelta(
            seconds=settings.OTP_RESEND_COOLDOWN_SECONDS if resend_cooldown_seconds is None
            else resend_cooldown_seconds
        )
        self._token_expires_in = token_expires_in or settings.TOKEN_EXPIRES_IN

        self._session = Session()
        self._listeners: List[SessionListener] = []
        self._submitting = False
        self._closed = False

    # ------------------------------------------------------------------
    # Snapshot and subscription
    # ------------------------------------------------------------------

    @property
    def session(self) -> Session:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session.is_authenticated

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Call `listener` after every transition; returns the unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def close(self) -> None:
        """Tear down: results still in flight are discarded when they arrive."""
        self._closed = True
        self._listeners.clear()
        logger.info("Session controller closed", state=self._session.state.value)

    # ------------------------------------------------------------------
    # Bootstrap
    # ------------------------------------------------------------------

    async def restore(self) -> Result[Session]:
        """Seed the session from the token store at process start.

        A stored, unexpired pair seeds AUTHENTICATED; an expired pair is
        cleared and seeds ANONYMOUS; an unreadable store seeds FAILED.
        """
        rejection = self._gate(SessionState.ANONYMOUS, SessionState.FAILED)
        if rejection is not None:
            return rejection

        self._submitting = True
        try:
            try:
                pair = await self._token_store.load()
            except StorageError as e:
                error = translate(e, self._language)
                self._transition(Session(state=SessionState.FAILED, error=error), "restore_failed")
                return Err(error)
            if self._closed:
                return Ok(self._session)

            if pair is None:
                self._transition(Session(), "restore")
                return Ok(self._session)

            if pair.is_expired(self._clock()):
                logger.info("Stored credentials expired", expires_at=str(pair.expires_at))
                try:
                    await self._token_store.clear()
                except StorageError as e:
                    error = translate(e, self._language)
                    self._transition(Session(state=SessionState.FAILED, error=error), "restore_failed")
                    return Err(error)
                self._transition(Session(notice=self._message("session_expired")), "restore_expired")
                return Ok(self._session)

            self._transition(Session(state=SessionState.AUTHENTICATED), "restore")
            logger.info("Session restored from stored credentials", token=pair.mask_for_logging())
            return Ok(self._session)
        finally:
            self._submitting = False

    # ------------------------------------------------------------------
    # Login
    # ------------------------------------------------------------------

    async def submit_login(self, email: str, password: str) -> Result[Session]:
        """Log in with email and password.

        An unverified account moves the session to AWAITING_VERIFICATION,
        sends a verification code and returns the EMAIL_NOT_VERIFIED error.
        """
        rejection = self._gate(SessionState.ANONYMOUS)
        if rejection is not None:
            return rejection

        fields: Dict[str, str] = {}
        normalized = self._validate_email(email, fields)
        if not password:
            fields["password"] = self._message("field_required")
        if fields:
            return validation_failure(fields, self._language)

        self._submitting = True
        try:
            self._transition(
                self._session.evolve(state=SessionState.LOGGING_IN, email=normalized, pending_password=None),
                "submit_login",
            )
            return await self._login(normalized, password, after_verification=False)
        finally:
            self._submitting = False

    async def _login(self, email: str, password: str, after_verification: bool) -> Result[Session]:
        logger.info("Login attempt", email=mask_email(email), after_verification=after_verification)
        try:
            tokens = await self._auth_api.login(email, password, self._token_expires_in)
        except Exception as e:
            error = translate(e, self._language)
            if self._closed:
                return Err(error)
            if error.kind is ErrorKind.EMAIL_NOT_VERIFIED and not after_verification:
                logger.info("Login requires email verification", email=mask_email(email))
                self._transition(
                    Session(
                        state=SessionState.AWAITING_VERIFICATION,
                        email=email,
                        pending_password=password,
                        error=error,
                    ),
                    "login_email_not_verified",
                )
                await self._send_code("auto_resend")
                return Err(error)

            notice = self._message("session_email_verified") if after_verification else None
            self._transition(
                Session(state=SessionState.ANONYMOUS, email=email, notice=notice, error=error),
                "login_failed",
            )
            logger.warning("Login failed", email=mask_email(email), kind=error.kind.value)
            return Err(error)

        if self._closed:
            return Ok(self._session)

        pair = TokenPair.issue(tokens.access_token, tokens.refresh_token, self._token_expires_in, now=self._clock())
        try:
            await self._token_store.save(pair)
        except StorageError as e:
            error = translate(e, self._language)
            self._transition(Session(state=SessionState.ANONYMOUS, email=email, error=error), "login_storage_failed")
            logger.error("Login succeeded but credentials could not be stored", email=mask_email(email))
            return Err(error)

        if self._closed:
            return Ok(self._session)

        self._cache.invalidate_key(CacheKey.profile())
        self._transition(Session(state=SessionState.AUTHENTICATED, email=email), "login_ok")
        logger.info("Login successful", email=mask_email(email))
        return Ok(self._session)

    # ------------------------------------------------------------------
    # Registration and verification
    # ------------------------------------------------------------------

    async def submit_register(self, data: Union[RegistrationData, Mapping[str, Any]]) -> Result[Session]:
        """Create an account; on success a verification code is sent."""
        rejection = self._gate(SessionState.ANONYMOUS)
        if rejection is not None:
            return rejection

        try:
            registration = data if isinstance(data, RegistrationData) else RegistrationData.model_validate(data)
        except ValidationError as e:
            return failure(e, self._language)
        fields: Dict[str, str] = {}
        self._validate_password(registration.password, fields)
        if fields:
            return validation_failure(fields, self._language)

        email = registration.email
        self._submitting = True
        try:
            self._transition(
                self._session.evolve(state=SessionState.REGISTERING, email=email, pending_password=None),
                "submit_register",
            )
            logger.info("Registration attempt", email=mask_email(email))
            try:
                await self._auth_api.signup(registration)
            except Exception as e:
                error = translate(e, self._language)
                self._transition(Session(state=SessionState.ANONYMOUS, email=email, error=error), "register_failed")
                logger.warning("Registration failed", email=mask_email(email), kind=error.kind.value)
                return Err(error)
            if self._closed:
                return Ok(self._session)

            self._transition(
                Session(
                    state=SessionState.AWAITING_VERIFICATION,
                    email=email,
                    pending_password=registration.password,
                ),
                "register_ok",
            )
            await self._send_code("auto_resend")
            return Ok(self._session)
        finally:
            self._submitting = False

    async def submit_otp(self, code: str) -> Result[Session]:
        """Verify the emailed code.

        With a password carried from register or login the user is logged in
        right away; otherwise the session returns to ANONYMOUS with a notice.
        """
        rejection = self._gate(SessionState.AWAITING_VERIFICATION)
        if rejection is not None:
            return rejection

        try:
            otp = OtpCode(code, length=self._otp_length)
        except ValueError:
            return validation_failure(
                {"otp": self._message("otp_invalid_format", length=self._otp_length)}, self._language
            )

        email = self._session.email or ""
        password = self._session.pending_password
        self._submitting = True
        try:
            self._transition(self._session.evolve(state=SessionState.VERIFYING), "submit_otp")
            try:
                await self._auth_api.verify_otp(email, str(otp))
            except Exception as e:
                error = translate(e, self._language)
                self._transition(
                    self._session.evolve(state=SessionState.AWAITING_VERIFICATION, error=error),
                    "verify_failed",
                )
                logger.warning("Verification failed", email=mask_email(email), kind=error.kind.value)
                return Err(error)
            if self._closed:
                return Ok(self._session)

            logger.info("Email verified", email=mask_email(email))
            if password:
                self._transition(
                    Session(state=SessionState.LOGGING_IN, email=email),
                    "verify_ok",
                )
                return await self._login(email, password, after_verification=True)

            self._transition(
                Session(state=SessionState.ANONYMOUS, email=email, notice=self._message("session_email_verified")),
                "verify_ok",
            )
            return Ok(self._session)
        finally:
            self._submitting = False

    async def resend(self) -> Result[bool]:
        """Request a new verification code.

        Returns ``Ok(False)`` without a request while the cooldown runs, and
        ``Ok(True)`` once a code was requested.
        """
        if self._closed or self._session.state is not SessionState.AWAITING_VERIFICATION:
            return self._reject("session_action_not_allowed")
        available_at = self._session.otp_resend_available_at
        if available_at is not None and self._clock() < available_at:
            logger.debug("Resend ignored during cooldown", seconds_left=self._session.seconds_until_resend(self._clock()))
            return Ok(False)
        return await self._send_code("resend")

    def cancel_verification(self) -> Result[Session]:
        """Leave the verification detour without verifying.

        The session returns to ANONYMOUS with the email kept for the next
        attempt; the carried password is dropped.
        """
        rejection = self._gate(SessionState.AWAITING_VERIFICATION)
        if rejection is not None:
            return rejection
        email = self._session.email
        self._transition(Session(state=SessionState.ANONYMOUS, email=email), "cancel_verification")
        logger.info("Verification cancelled", email=mask_email(email))
        return Ok(self._session)

    async def _send_code(self, trigger: str) -> Result[bool]:
        email = self._session.email or ""
        previous_deadline = self._session.otp_resend_available_at
        deadline = self._clock() + self._resend_cooldown
        # The deadline is taken before the request so a concurrent resend is a no-op.
        self._transition(
            self._session.evolve(
                otp_resend_available_at=deadline,
                notice=self._session.notice,
                error=self._session.error,
            ),
            trigger,
        )
        try:
            await self._auth_api.resend_otp(email)
        except Exception as e:
            error = translate(e, self._language)
            if (
                not self._closed
                and self._session.state is SessionState.AWAITING_VERIFICATION
                and self._session.otp_resend_available_at == deadline
            ):
                self._transition(
                    self._session.evolve(otp_resend_available_at=previous_deadline, error=error),
                    f"{trigger}_failed",
                )
            logger.warning("Verification code request failed", email=mask_email(email), kind=error.kind.value)
            return Err(error)
        logger.info("Verification code sent", email=mask_email(email), trigger=trigger)
        return Ok(True)

    # ------------------------------------------------------------------
    # Password reset
    # ------------------------------------------------------------------

    async def request_password_reset(self, email: str) -> Result[str]:
        """Ask the server to email a password reset link.

        Not a session transition. Returns the confirmation message to show.
        """
        if self._closed or self._session.state is not SessionState.ANONYMOUS:
            return self._reject("session_action_not_allowed")
        fields: Dict[str, str] = {}
        normalized = self._validate_email(email, fields)
        if fields:
            return validation_failure(fields, self._language)

        try:
            await self._auth_api.forgot_password(normalized)
        except Exception as e:
            logger.warning("Password reset request failed", email=mask_email(normalized))
            return failure(e, self._language)
        logger.info("Password reset requested", email=mask_email(normalized))
        return Ok(self._message("password_reset_requested"))

    # ------------------------------------------------------------------
    # Logout and expiry
    # ------------------------------------------------------------------

    async def logout(self) -> Result[Session]:
        """Forget the credentials and every cached read.

        The session becomes ANONYMOUS even when the token store fails to
        clear; that failure is returned as a STORAGE error.
        """
        rejection = self._gate(SessionState.AUTHENTICATED, SessionState.FAILED)
        if rejection is not None:
            return rejection
        return await self._end_session("logout", notice=None)

    async def expire(self) -> Result[Session]:
        """End an authenticated session the server no longer accepts."""
        if self._closed or self._session.state is not SessionState.AUTHENTICATED:
            return Ok(self._session)
        logger.warning("Session expired", email=mask_email(self._session.email))
        return await self._end_session("expire", notice=self._message("session_expired"))

    async def _end_session(self, trigger: str, notice: Optional[str]) -> Result[Session]:
        self._cache.clear()
        error: Optional[TranslatedError] = None
        try:
            await self._token_store.clear()
        except StorageError as e:
            error = translate(e, self._language)
            logger.error("Stored credentials could not be cleared", trigger=trigger)
        self._transition(Session(notice=notice, error=error), trigger)
        if error is not None:
            return Err(error)
        logger.info("Session ended", trigger=trigger)
        return Ok(self._session)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _gate(self, *allowed: SessionState) -> Optional[Err]:
        if self._closed:
            return self._reject("session_action_not_allowed")
        if self._submitting or self._session.is_busy:
            return self._reject("session_submission_in_progress")
        if self._session.state not in allowed:
            return self._reject("session_action_not_allowed")
        return None

    def _reject(self, message_key: str) -> Err:
        logger.debug("Session submission rejected", reason=message_key, state=self._session.state.value)
        return validation_failure({"session": self._message(message_key)}, self._language)

    def _transition(self, new_session: Session, trigger: str) -> None:
        if self._closed:
            logger.debug("Transition discarded after close", trigger=trigger)
            return
        previous = self._session
        self._session = new_session
        event = SessionChangedEvent.create(previous, new_session, trigger, occurred_at=self._clock())
        if event.state_changed:
            logger.info(
                "Session state changed",
                trigger=trigger,
                from_state=previous.state.value,
                to_state=new_session.state.value,
            )
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error("Session listener failed", trigger=trigger, error=str(e))

    def _validate_email(self, email: str, fields: Dict[str, str]) -> str:
        if not email or not str(email).strip():
            fields["email"] = self._message("field_required")
            return ""
        try:
            return Email(email).value
        except (TypeError, ValueError):
            fields["email"] = self._message("invalid_email_format")
            return ""

    def _validate_password(self, password: str, fields: Dict[str, str]) -> None:
        if not password:
            fields["password"] = self._message("field_required")
            return
        try:
            Password(password, min_length=self._password_min_length)
        except ValueError:
            fields["password"] = self._message("password_too_short", min_length=self._password_min_length)

    def _message(self, key: str, **params: Any) -> str:
        return get_translated_message(key, self._language, **params)

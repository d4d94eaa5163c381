"""Authentication state machine orchestrating auth calls."""

import logging
from dataclasses import dataclass, field

from library_portal.adapters.auth_client import AuthClient, AuthPayload
from library_portal.domain.errors import AuthError, PortalError, ValidationError
from library_portal.domain.results import ActionResult
from library_portal.domain.sessions import (
    AuthFailed,
    AuthStarted,
    AuthState,
    AuthSucceeded,
    ErrorCleared,
    LoggedOut,
    RestoreSkipped,
    Session,
    SessionExpired,
    UserUpdated,
)
from library_portal.domain.users import UserProfile
from library_portal.services.session_store import SessionStore

RESTORE_FAILED_MESSAGE = "Session could not be restored"

_SIGNED_IN = {AuthState.AUTHENTICATED_UNVERIFIED, AuthState.AUTHENTICATED_VERIFIED}

_logger = logging.getLogger(__name__)


@dataclass
class AuthService:
    """Runs login, registration, verification, reset and logout flows.

    Every credentialed attempt takes a generation number. Only the latest
    attempt may write its outcome to the session; an earlier attempt that
    resolves late is reported as superseded and leaves the session alone.
    Logout and expiry also advance the generation.
    """

    client: AuthClient
    store: SessionStore
    _generation: int = field(default=0, init=False)

    @property
    def session(self) -> Session:
        return self.store.session

    async def restore(self) -> ActionResult:
        """Reload the user for a persisted token at process start."""
        token = self.store.session.token
        if not token:
            # Once any attempt has started, loading belongs to that attempt.
            if self.store.session.loading and self._generation == 0:
                self.store.dispatch(RestoreSkipped())
            return ActionResult.ok()

        generation = self._begin()
        try:
            user = await self.client.get_current_user(token)
        except AuthError as exc:
            if not self._is_current(generation):
                return ActionResult.superseded()
            _logger.info("Persisted token rejected; signing out")
            self.store.dispatch(SessionExpired())
            return ActionResult.failed(exc, "Session expired")
        except PortalError as exc:
            # The token may still be valid; keep it for the next attempt.
            return self._fail(
                generation, exc, RESTORE_FAILED_MESSAGE, clear_token=False
            )
        return self._succeed(generation, AuthPayload(user=user, token=token))

    async def login(self, email: str, password: str) -> ActionResult:
        """Sign in with email and password."""
        generation = self._begin()
        try:
            payload = await self.client.login(email, password)
        except PortalError as exc:
            return self._fail(generation, exc, "Login failed", clear_token=True)
        return self._succeed(generation, payload)

    async def register(self, fields: dict[str, object]) -> ActionResult:
        """Create an account; the session stays unverified until confirmed."""
        data = dict(fields)
        confirm = data.pop("confirm_password", None)
        if confirm is not None and confirm != data.get("password"):
            return ActionResult.failed(
                ValidationError("Passwords do not match"), "Passwords do not match"
            )

        generation = self._begin()
        try:
            payload = await self.client.register(data)
        except PortalError as exc:
            return self._fail(generation, exc, "Registration failed", clear_token=True)
        return self._succeed(generation, AuthPayload(user=payload.user))

    async def verify_email(self, token: str, email: str) -> ActionResult:
        """Confirm the email address and store the newly issued token."""
        generation = self._begin()
        try:
            payload = await self.client.verify_email(token, email)
        except PortalError as exc:
            return self._fail(
                generation, exc, "Email verification failed", clear_token=False
            )
        return self._succeed(generation, payload)

    async def resend_verification(self, email: str) -> ActionResult:
        try:
            await self.client.resend_verification(email)
        except PortalError as exc:
            return ActionResult.failed(exc, "Failed to send verification email")
        return ActionResult.ok()

    async def forgot_password(self, email: str) -> ActionResult:
        try:
            await self.client.forgot_password(email)
        except PortalError as exc:
            return ActionResult.failed(exc, "Failed to send password reset email")
        return ActionResult.ok()

    async def reset_password(
        self, token: str, email: str, new_password: str
    ) -> ActionResult:
        """Set a new password; success signs the user in like a fresh login."""
        generation = self._begin()
        try:
            payload = await self.client.reset_password(token, email, new_password)
        except PortalError as exc:
            return self._fail(
                generation, exc, "Password reset failed", clear_token=True
            )
        return self._succeed(generation, payload)

    async def change_password(
        self, current_password: str, new_password: str
    ) -> ActionResult:
        if not self.store.session.is_authenticated:
            return ActionResult.failed(AuthError("Not signed in"), "Not signed in")
        generation = self._generation
        try:
            payload = await self.client.change_password(current_password, new_password)
        except PortalError as exc:
            return ActionResult.failed(exc, "Failed to change password")
        return self._update_user(generation, payload.user, payload.token)

    async def update_profile(self, fields: dict[str, object]) -> ActionResult:
        if not self.store.session.is_authenticated:
            return ActionResult.failed(AuthError("Not signed in"), "Not signed in")
        generation = self._generation
        try:
            user = await self.client.update_profile(fields)
        except PortalError as exc:
            return ActionResult.failed(exc, "Failed to update profile")
        return self._update_user(generation, user, None)

    async def logout(self) -> ActionResult:
        """End the session; gateway failures never block the sign-out."""
        self._generation += 1
        try:
            if self.store.session.token:
                await self.client.logout()
        except PortalError as exc:
            _logger.warning("Logout request failed: %s", exc.message or exc)
        finally:
            self.store.dispatch(LoggedOut())
        return ActionResult.ok()

    def expire_session(self) -> None:
        """Drop the session after the gateway rejected the stored token."""
        self._generation += 1
        if self.store.session.token or self.store.session.user:
            _logger.info("Session token rejected by server; signing out")
        self.store.dispatch(SessionExpired())

    def clear_error(self) -> None:
        self.store.dispatch(ErrorCleared())

    def _begin(self) -> int:
        self._generation += 1
        self.store.dispatch(AuthStarted())
        return self._generation

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _succeed(self, generation: int, payload: AuthPayload) -> ActionResult:
        if not self._is_current(generation):
            return ActionResult.superseded()
        self.store.dispatch(AuthSucceeded(user=payload.user, token=payload.token))
        return ActionResult.ok(user=payload.user)

    def _fail(
        self, generation: int, exc: PortalError, fallback: str, *, clear_token: bool
    ) -> ActionResult:
        if not self._is_current(generation):
            return ActionResult.superseded()
        result = ActionResult.failed(exc, fallback)
        _logger.info("Auth attempt failed: %s", result.error)
        self.store.dispatch(
            AuthFailed(message=result.error or fallback, clear_token=clear_token)
        )
        return result

    def _update_user(
        self, generation: int, user: UserProfile, token: str | None
    ) -> ActionResult:
        session = self.store.session
        same_user = session.user is not None and session.user.id == user.id
        if (
            not self._is_current(generation)
            or session.state not in _SIGNED_IN
            or not same_user
        ):
            return ActionResult.superseded()
        self.store.dispatch(UserUpdated(user=user, token=token))
        return ActionResult.ok(user=user)

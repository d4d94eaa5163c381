"""Domain models for the client session."""

from dataclasses import dataclass
from enum import StrEnum

from library_portal.domain.users import Role, UserProfile


class AuthState(StrEnum):
    """Authentication lifecycle states derived from a session."""

    ANONYMOUS = "anonymous"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED_UNVERIFIED = "authenticated-unverified"
    AUTHENTICATED_VERIFIED = "authenticated-verified"
    ERROR = "error"


@dataclass(frozen=True)
class Session:
    """Snapshot of the current credential, user and loading/error flags."""

    user: UserProfile | None = None
    token: str | None = None
    loading: bool = False
    error: str | None = None

    @property
    def state(self) -> AuthState:
        """Return the lifecycle state implied by the session fields."""
        if self.loading:
            return AuthState.AUTHENTICATING
        if self.user is not None:
            if self.user.is_verified and self.token:
                return AuthState.AUTHENTICATED_VERIFIED
            if not self.user.is_verified:
                return AuthState.AUTHENTICATED_UNVERIFIED
        if self.error:
            return AuthState.ERROR
        return AuthState.ANONYMOUS

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token) and self.user is not None

    @property
    def is_verified(self) -> bool:
        return self.user is not None and self.user.is_verified

    def has_role(self, role: Role) -> bool:
        return self.user is not None and self.user.role == role

    @property
    def is_admin(self) -> bool:
        return self.has_role(Role.ADMIN)


@dataclass(frozen=True)
class AuthStarted:
    """A credentialed attempt (login, register, verify, reset, restore) began."""


@dataclass(frozen=True)
class AuthSucceeded:
    """The gateway accepted the attempt; token is None when none was issued."""

    user: UserProfile
    token: str | None = None


@dataclass(frozen=True)
class AuthFailed:
    """The attempt failed; clear_token drops the stored credential and user."""

    message: str
    clear_token: bool = False


@dataclass(frozen=True)
class UserUpdated:
    """Profile data changed without changing the authentication state."""

    user: UserProfile
    token: str | None = None


@dataclass(frozen=True)
class LoggedOut:
    """The user signed out."""


@dataclass(frozen=True)
class SessionExpired:
    """The gateway reported the stored token as invalid."""


@dataclass(frozen=True)
class RestoreSkipped:
    """No persisted token was found at startup."""


@dataclass(frozen=True)
class ErrorCleared:
    """The caller acknowledged the session error."""


SessionAction = (
    AuthStarted
    | AuthSucceeded
    | AuthFailed
    | UserUpdated
    | LoggedOut
    | SessionExpired
    | RestoreSkipped
    | ErrorCleared
)

"""Session store driven by dispatched auth actions."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace

from library_portal.adapters.token_storage import TokenStorage
from library_portal.domain.errors import IllegalAuthAction
from library_portal.domain.sessions import (
    AuthFailed,
    AuthStarted,
    AuthState,
    AuthSucceeded,
    ErrorCleared,
    LoggedOut,
    RestoreSkipped,
    Session,
    SessionAction,
    SessionExpired,
    UserUpdated,
)

_ANY_STATE = frozenset(AuthState)
_SIGNED_IN = frozenset(
    {AuthState.AUTHENTICATED_UNVERIFIED, AuthState.AUTHENTICATED_VERIFIED}
)

# States each action may be dispatched from.
_TRANSITIONS: dict[type, frozenset[AuthState]] = {
    AuthStarted: _ANY_STATE,
    AuthSucceeded: frozenset({AuthState.AUTHENTICATING}),
    AuthFailed: frozenset({AuthState.AUTHENTICATING}),
    RestoreSkipped: frozenset({AuthState.AUTHENTICATING}),
    UserUpdated: _SIGNED_IN,
    LoggedOut: _ANY_STATE,
    SessionExpired: _ANY_STATE,
    ErrorCleared: _ANY_STATE,
}

_logger = logging.getLogger(__name__)

SessionListener = Callable[[Session], None]


def reduce_session(session: Session, action: SessionAction) -> Session:
    """Return the session that results from applying an action."""
    allowed = _TRANSITIONS.get(type(action))
    if allowed is None or session.state not in allowed:
        raise IllegalAuthAction(
            f"{type(action).__name__} is not allowed in state {session.state}"
        )
    if isinstance(action, AuthStarted):
        return replace(session, loading=True, error=None)
    if isinstance(action, AuthSucceeded):
        return Session(user=action.user, token=action.token or session.token)
    if isinstance(action, AuthFailed):
        if action.clear_token:
            return Session(error=action.message)
        return replace(session, loading=False, error=action.message)
    if isinstance(action, RestoreSkipped):
        return replace(session, loading=False)
    if isinstance(action, UserUpdated):
        return replace(
            session, user=action.user, token=action.token or session.token
        )
    if isinstance(action, ErrorCleared):
        return replace(session, error=None)
    # LoggedOut and SessionExpired both drop every credential.
    return Session()


@dataclass
class SessionStore:
    """Process-wide session holder; persists the token, never the user.

    The initial session carries the persisted token (if any) with
    ``loading`` set, so callers see ``authenticating`` until the auth
    service restores or discards it.
    """

    storage: TokenStorage
    _session: Session = field(init=False)
    _listeners: list[SessionListener] = field(init=False, default_factory=list)

    def __post_init__(self) -> None:
        token = self.storage.load()
        self._session = Session(token=token, loading=True)

    @property
    def session(self) -> Session:
        return self._session

    def dispatch(self, action: SessionAction) -> Session:
        """Apply an action, persist token changes and notify listeners."""
        previous = self._session
        updated = reduce_session(previous, action)
        if updated.token != previous.token:
            if updated.token:
                self.storage.save(updated.token)
            else:
                self.storage.clear()
        self._session = updated
        _logger.debug(
            "Session %s: %s -> %s", type(action).__name__, previous.state, updated.state
        )
        for listener in list(self._listeners):
            listener(updated)
        return updated

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a change listener and return a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

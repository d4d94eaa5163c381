"""Route access policy for protected and public pages."""

from dataclasses import dataclass
from enum import StrEnum

from library_portal.domain.sessions import Session
from library_portal.domain.users import Role

LOGIN_PATH = "/login"
VERIFY_EMAIL_PATH = "/verify-email"

_ROLE_HOMES = {
    Role.ADMIN: "/admin/dashboard",
    Role.USER: "/dashboard",
}

UNVERIFIED_MESSAGE = "Your account is not verified yet. Please check your email."


class AccessOutcome(StrEnum):
    """What the caller should do with a navigation request."""

    SHOW_LOADING = "show-loading"
    REDIRECT_TO_LOGIN = "redirect-to-login"
    REDIRECT_TO_VERIFY = "redirect-to-verify"
    REDIRECT_TO_ROLE_HOME = "redirect-to-role-home"
    RENDER = "render"


@dataclass(frozen=True)
class AccessDecision:
    """Decision for one navigation; redirects carry their target path."""

    outcome: AccessOutcome
    redirect_to: str | None = None
    return_to: str | None = None
    email: str | None = None
    message: str | None = None


def role_home(role: Role | None) -> str:
    """Return the landing path for a role."""
    return _ROLE_HOMES.get(role or Role.USER, _ROLE_HOMES[Role.USER])


def evaluate_protected(
    session: Session, requested_path: str, required_role: Role | None = None
) -> AccessDecision:
    """Decide whether a protected page may render for the session."""
    if session.loading:
        return AccessDecision(AccessOutcome.SHOW_LOADING)
    if not session.is_authenticated:
        return AccessDecision(
            AccessOutcome.REDIRECT_TO_LOGIN,
            redirect_to=LOGIN_PATH,
            return_to=requested_path,
        )
    user = session.user
    if not session.is_verified:
        return AccessDecision(
            AccessOutcome.REDIRECT_TO_VERIFY,
            redirect_to=VERIFY_EMAIL_PATH,
            email=user.email if user else None,
            message=UNVERIFIED_MESSAGE,
        )
    if required_role is not None and not session.has_role(required_role):
        return AccessDecision(
            AccessOutcome.REDIRECT_TO_ROLE_HOME,
            redirect_to=role_home(user.role if user else None),
        )
    return AccessDecision(AccessOutcome.RENDER)


def evaluate_public(session: Session) -> AccessDecision:
    """Keep signed-in, verified users away from login and registration pages."""
    if session.loading:
        return AccessDecision(AccessOutcome.SHOW_LOADING)
    if session.is_authenticated and session.is_verified and session.user:
        return AccessDecision(
            AccessOutcome.REDIRECT_TO_ROLE_HOME,
            redirect_to=role_home(session.user.role),
        )
    return AccessDecision(AccessOutcome.RENDER)

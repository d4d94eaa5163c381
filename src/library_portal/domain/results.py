"""Uniform result returned by portal actions."""

from dataclasses import dataclass

from library_portal.domain.errors import PortalError
from library_portal.domain.requests import RequestRecord
from library_portal.domain.users import UserProfile

SUPERSEDED_MESSAGE = "Superseded by a newer request"


@dataclass(frozen=True)
class ActionResult:
    """Outcome of an action; failures carry a short human-readable message."""

    success: bool
    error: str | None = None
    failure: PortalError | None = None
    user: UserProfile | None = None
    record: RequestRecord | None = None
    needs_verification: bool = False

    @classmethod
    def ok(
        cls, *, user: UserProfile | None = None, record: RequestRecord | None = None
    ) -> "ActionResult":
        return cls(success=True, user=user, record=record)

    @classmethod
    def failed(cls, exc: PortalError, fallback: str) -> "ActionResult":
        """Build a failure, preferring the exception's own message."""
        return cls(
            success=False,
            error=exc.message or fallback,
            failure=exc,
            needs_verification=getattr(exc, "needs_verification", False),
        )

    @classmethod
    def superseded(cls) -> "ActionResult":
        """Result of a call whose response lost to a newer request."""
        return cls(success=False, error=SUPERSEDED_MESSAGE)

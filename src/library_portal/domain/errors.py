"""Error taxonomy shared by the portal services."""


class PortalError(Exception):
    """Base class for failures surfaced to portal callers."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "")
        self.message = message


class ValidationError(PortalError):
    """Client-side input problem; never reaches the gateway."""


class AuthError(PortalError):
    """Invalid credentials, invalid token, unverified account or missing role."""

    def __init__(
        self,
        message: str | None = None,
        *,
        needs_verification: bool = False,
        token_invalid: bool = False,
    ) -> None:
        super().__init__(message)
        self.needs_verification = needs_verification
        self.token_invalid = token_invalid


class TransitionError(PortalError):
    """A lifecycle transition rejected before any gateway call."""


class InvalidTransition(TransitionError):
    """The record's current status does not permit the requested status."""


class UnknownRequest(TransitionError):
    """The record is not present in the local list."""


class MissingAnnotation(TransitionError, ValidationError):
    """The mandatory admin note is empty or blank."""


class GatewayError(PortalError):
    """Network failure, timeout or non-success response from the API."""

    def __init__(
        self, message: str | None = None, status_code: int | None = None
    ) -> None:
        super().__init__(message)
        self.status_code = status_code


class IllegalAuthAction(RuntimeError):  # noqa: N818
    """An auth action was dispatched from a state that does not allow it."""

"""Portal auth API client adapter."""

from dataclasses import dataclass
from typing import Protocol

import pydantic

from library_portal.adapters.api_models import ApiAuthPayload
from library_portal.adapters.portal_http import PortalHttp
from library_portal.domain.errors import GatewayError
from library_portal.domain.users import UserProfile

_AUTH_PATH = "/api/auth"


@dataclass(frozen=True)
class AuthPayload:
    """User (and token, when one was issued) returned by an auth call."""

    user: UserProfile
    token: str | None = None


class AuthClient(Protocol):
    """Interface for the portal authentication endpoints."""

    async def login(self, email: str, password: str) -> AuthPayload:
        """Exchange credentials for a user and token."""

    async def register(self, fields: dict[str, object]) -> AuthPayload:
        """Create an account; no token is issued."""

    async def get_current_user(self, token: str) -> UserProfile:
        """Return the user owning the given token."""

    async def verify_email(self, token: str, email: str) -> AuthPayload:
        """Confirm an email address and return a fresh token."""

    async def resend_verification(self, email: str) -> None:
        """Send the verification email again."""

    async def forgot_password(self, email: str) -> None:
        """Send a password reset link."""

    async def reset_password(
        self, token: str, email: str, new_password: str
    ) -> AuthPayload:
        """Set a new password using a reset token."""

    async def change_password(
        self, current_password: str, new_password: str
    ) -> AuthPayload:
        """Change the signed-in user's password."""

    async def update_profile(self, fields: dict[str, object]) -> UserProfile:
        """Update the signed-in user's profile."""

    async def logout(self) -> None:
        """End the session on the server."""


@dataclass
class HttpxAuthClient(AuthClient):
    """Auth client implemented with httpx."""

    http: PortalHttp

    async def login(self, email: str, password: str) -> AuthPayload:
        body = await self.http.request(
            "POST",
            f"{_AUTH_PATH}/login",
            json={"email": email, "password": password},
            use_session=False,
        )
        return _auth_payload(body)

    async def register(self, fields: dict[str, object]) -> AuthPayload:
        body = await self.http.request(
            "POST", f"{_AUTH_PATH}/register", json=fields, use_session=False
        )
        return AuthPayload(user=_auth_payload(body).user)

    async def get_current_user(self, token: str) -> UserProfile:
        body = await self.http.request(
            "GET", f"{_AUTH_PATH}/me", token=token, use_session=False
        )
        return _auth_payload(body).user

    async def verify_email(self, token: str, email: str) -> AuthPayload:
        body = await self.http.request(
            "POST",
            f"{_AUTH_PATH}/verify-email",
            json={"token": token, "email": email},
            use_session=False,
        )
        return _auth_payload(body)

    async def resend_verification(self, email: str) -> None:
        await self.http.request(
            "POST",
            f"{_AUTH_PATH}/resend-verification",
            json={"email": email},
            use_session=False,
        )

    async def forgot_password(self, email: str) -> None:
        await self.http.request(
            "POST",
            f"{_AUTH_PATH}/forgot-password",
            json={"email": email},
            use_session=False,
        )

    async def reset_password(
        self, token: str, email: str, new_password: str
    ) -> AuthPayload:
        body = await self.http.request(
            "POST",
            f"{_AUTH_PATH}/reset-password",
            json={"token": token, "email": email, "password": new_password},
            use_session=False,
        )
        return _auth_payload(body)

    async def change_password(
        self, current_password: str, new_password: str
    ) -> AuthPayload:
        body = await self.http.request(
            "PUT",
            f"{_AUTH_PATH}/change-password",
            json={"currentPassword": current_password, "newPassword": new_password},
        )
        return _auth_payload(body)

    async def update_profile(self, fields: dict[str, object]) -> UserProfile:
        body = await self.http.request("PUT", f"{_AUTH_PATH}/profile", json=fields)
        return _auth_payload(body).user

    async def logout(self) -> None:
        await self.http.request("POST", f"{_AUTH_PATH}/logout")


def _auth_payload(body: dict[str, object]) -> AuthPayload:
    try:
        parsed = ApiAuthPayload.model_validate(body)
    except pydantic.ValidationError as exc:
        raise GatewayError("Unexpected response from server") from exc
    if parsed.user is None:
        raise GatewayError("Unexpected response from server")
    return AuthPayload(user=parsed.user.to_domain(), token=parsed.token)

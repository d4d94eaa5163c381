"""Shared httpx transport for the portal API with error translation."""

import logging
from collections.abc import Callable
from dataclasses import dataclass

import httpx

from library_portal.domain.errors import AuthError, GatewayError

_logger = logging.getLogger(__name__)


def _no_token() -> str | None:
    return None


@dataclass
class PortalHttp:
    """Sends JSON requests and maps failures onto the portal error taxonomy.

    ``token_provider`` supplies the session token for calls made on behalf of
    the signed-in user. When such a call is answered with 401 the
    ``on_unauthorized`` hook runs before ``AuthError`` is raised, so the
    session can be dropped, unless the session token changed while the call
    was in flight. Credential calls (login, register, ...) opt out with
    ``use_session=False``.
    """

    base_url: str
    http_client: httpx.AsyncClient
    token_provider: Callable[[], str | None] = _no_token
    on_unauthorized: Callable[[], None] | None = None
    timeout_seconds: float = 30

    @classmethod
    def create(cls, base_url: str, timeout_seconds: float = 30) -> "PortalHttp":
        """Create a transport with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def request(  # noqa: PLR0913
        self,
        method: str,
        path: str,
        *,
        json: dict[str, object] | None = None,
        params: dict[str, object] | None = None,
        token: str | None = None,
        use_session: bool = True,
    ) -> dict[str, object]:
        """Send a request and return the decoded JSON body."""
        bearer = token
        if bearer is None and use_session:
            bearer = self.token_provider()
        headers = {"Authorization": f"Bearer {bearer}"} if bearer else {}
        try:
            response = await self.http_client.request(
                method,
                f"{self.base_url}{path}",
                json=json,
                params=params,
                headers=headers,
                timeout=self.timeout_seconds,
            )
        except httpx.HTTPError as exc:
            _logger.warning("Portal API %s %s failed: %s", method, path, exc)
            raise GatewayError(None) from exc

        body = _json_body(response)
        if response.status_code == httpx.codes.UNAUTHORIZED:
            session_call = use_session and token is None and bearer is not None
            # The session may have moved on to a newer token meanwhile.
            if session_call and bearer != self.token_provider():
                _logger.info("Ignoring 401 for a replaced session token")
            elif session_call and self.on_unauthorized is not None:
                self.on_unauthorized()
            raise AuthError(
                _message(body),
                needs_verification=bool(body.get("needsVerification")),
                token_invalid=bearer is not None,
            )
        if response.is_error:
            _logger.info(
                "Portal API %s %s returned %s", method, path, response.status_code
            )
            raise GatewayError(_message(body), status_code=response.status_code)
        return body

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()


def _json_body(response: httpx.Response) -> dict[str, object]:
    try:
        payload = response.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


def _message(body: dict[str, object]) -> str | None:
    message = body.get("message")
    return message if isinstance(message, str) and message else None

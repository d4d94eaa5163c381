"""Portal bookings and tours API client adapter."""

from dataclasses import dataclass
from typing import Protocol

import pydantic

from library_portal.adapters.api_models import ApiRequestList, ApiStatsSummary
from library_portal.adapters.portal_http import PortalHttp
from library_portal.domain.errors import GatewayError
from library_portal.domain.queries import ListPage
from library_portal.domain.requests import RequestKind, RequestStats, RequestStatus

_KIND_PATHS = {
    RequestKind.BOOKING: "/api/bookings",
    RequestKind.TOUR: "/api/tours",
}


class RequestsClient(Protocol):
    """Interface for the booking and tour endpoints."""

    async def list_requests(
        self, kind: RequestKind, params: dict[str, object]
    ) -> ListPage:
        """Return one page of requests matching the query parameters."""

    async def update_request_status(
        self,
        kind: RequestKind,
        request_id: str,
        status: RequestStatus,
        admin_note: str,
    ) -> None:
        """Move a request to a new status with an admin note."""

    async def cancel_request(self, kind: RequestKind, request_id: str) -> None:
        """Cancel the caller's own request."""

    async def delete_request(
        self, kind: RequestKind, request_id: str, *, as_admin: bool
    ) -> None:
        """Delete a request permanently."""

    async def get_request_stats(self, kind: RequestKind, period: str) -> RequestStats:
        """Return status counters for a reporting period."""


@dataclass
class HttpxRequestsClient(RequestsClient):
    """Requests client implemented with httpx."""

    http: PortalHttp

    async def list_requests(
        self, kind: RequestKind, params: dict[str, object]
    ) -> ListPage:
        body = await self.http.request("GET", _KIND_PATHS[kind], params=params)
        try:
            parsed = ApiRequestList.model_validate(body)
        except pydantic.ValidationError as exc:
            raise GatewayError("Unexpected response from server") from exc
        return ListPage(
            records=[row.to_domain(kind) for row in parsed.data],
            page=parsed.pagination.page,
            total_pages=parsed.pagination.pages,
            total_count=parsed.pagination.total,
        )

    async def update_request_status(
        self,
        kind: RequestKind,
        request_id: str,
        status: RequestStatus,
        admin_note: str,
    ) -> None:
        await self.http.request(
            "PATCH",
            f"{_KIND_PATHS[kind]}/{request_id}/status",
            json={"status": str(status), "adminNote": admin_note},
        )

    async def cancel_request(self, kind: RequestKind, request_id: str) -> None:
        await self.http.request("PATCH", f"{_KIND_PATHS[kind]}/{request_id}/cancel")

    async def delete_request(
        self, kind: RequestKind, request_id: str, *, as_admin: bool
    ) -> None:
        scope = "/admin" if as_admin else ""
        await self.http.request("DELETE", f"{_KIND_PATHS[kind]}{scope}/{request_id}")

    async def get_request_stats(self, kind: RequestKind, period: str) -> RequestStats:
        body = await self.http.request(
            "GET", f"{_KIND_PATHS[kind]}/admin/stats", params={"period": period}
        )
        data = body.get("data", body)
        summary = data.get("summary", {}) if isinstance(data, dict) else {}
        try:
            return ApiStatsSummary.model_validate(summary).to_domain()
        except pydantic.ValidationError as exc:
            raise GatewayError("Unexpected response from server") from exc

"""Domain models for admin list queries."""

from dataclasses import dataclass, replace
from datetime import date
from enum import StrEnum

from library_portal.domain.requests import RequestRecord, RequestStatus


class SortOrder(StrEnum):
    """Sort direction accepted by the list endpoints."""

    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class ListQueryState:
    """Search, filter, sort and pagination parameters of one admin listing."""

    page_size: int
    search_term: str = ""
    debounced_search_term: str = ""
    status_filter: RequestStatus | None = None
    sort_field: str = "createdAt"
    sort_order: SortOrder = SortOrder.DESC
    date_filter: date | None = None
    page: int = 1
    total_pages: int = 1
    total_count: int = 0

    def with_changes(self, **changes: object) -> "ListQueryState":
        return replace(self, **changes)

    def to_params(self) -> dict[str, object]:
        """Build list endpoint query parameters, omitting unset filters."""
        params: dict[str, object] = {
            "page": self.page,
            "limit": self.page_size,
            "search": self.debounced_search_term or None,
            "status": str(self.status_filter) if self.status_filter else None,
            "sortBy": self.sort_field,
            "sortOrder": str(self.sort_order),
        }
        if self.date_filter is not None:
            params["startDate"] = self.date_filter.isoformat()
            params["endDate"] = self.date_filter.isoformat()
        return {key: value for key, value in params.items() if value is not None}


@dataclass(frozen=True)
class ListPage:
    """One page of records returned by the list endpoint."""

    records: list[RequestRecord]
    page: int
    total_pages: int
    total_count: int


def clamp_page(page: int, total_pages: int) -> int:
    """Clamp a page number into [1, total_pages]."""
    return max(1, min(page, max(total_pages, 1)))

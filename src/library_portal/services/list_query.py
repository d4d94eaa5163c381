"""Search, filter, sort and pagination engine for admin listings."""

import logging
from dataclasses import dataclass, field
from datetime import date

from library_portal.adapters.requests_client import RequestsClient
from library_portal.domain.errors import PortalError, ValidationError
from library_portal.domain.queries import ListQueryState, SortOrder, clamp_page
from library_portal.domain.requests import RequestKind, RequestRecord, RequestStatus
from library_portal.domain.results import ActionResult
from library_portal.services.debounce import Debouncer
from library_portal.services.list_cache import RequestListCache

_ALL_STATUSES = {None, "", "all"}

_logger = logging.getLogger(__name__)


@dataclass
class ListQueryEngine:
    """Keeps one listing's query state and applies only the latest response.

    Every fetch takes a sequence number when it is issued. A response is
    applied only if no newer fetch was issued in the meantime, so a slow
    answer for an old query never overwrites results for the current one.
    """

    kind: RequestKind
    client: RequestsClient
    cache: RequestListCache
    page_size: int
    debounce_seconds: float = 0.3
    min_search_length: int = 2
    sort_field: str = "createdAt"
    sort_order: SortOrder = SortOrder.DESC
    state: ListQueryState = field(init=False)
    loading: bool = field(default=False, init=False)
    error: str | None = field(default=None, init=False)
    _issued: int = field(default=0, init=False)
    _debouncer: Debouncer[str] = field(init=False)

    def __post_init__(self) -> None:
        self.state = ListQueryState(
            page_size=self.page_size,
            sort_field=self.sort_field,
            sort_order=self.sort_order,
        )
        self._debouncer = Debouncer(self.debounce_seconds, self._apply_search)

    @property
    def records(self) -> list[RequestRecord]:
        return self.cache.records

    def set_search(self, text: str) -> None:
        """Record typed search text; it takes effect after the debounce window."""
        self.state = self.state.with_changes(search_term=text)
        cleaned = text.strip()
        self._debouncer.push(cleaned if len(cleaned) >= self.min_search_length else "")

    async def settle(self) -> None:
        """Wait until pending search input has been applied."""
        await self._debouncer.drain()

    async def set_status_filter(
        self, status: RequestStatus | str | None
    ) -> ActionResult:
        try:
            parsed = None if status in _ALL_STATUSES else RequestStatus(status)
        except ValueError:
            return ActionResult.failed(
                ValidationError(f"Unknown status {status!r}"), "Unknown status"
            )
        if parsed == self.state.status_filter:
            return ActionResult.ok()
        self.state = self.state.with_changes(status_filter=parsed, page=1)
        return await self._fetch()

    async def set_sort(
        self, sort_field: str, sort_order: SortOrder | str = SortOrder.DESC
    ) -> ActionResult:
        try:
            order = SortOrder(sort_order)
        except ValueError:
            return ActionResult.failed(
                ValidationError(f"Unknown sort order {sort_order!r}"),
                "Unknown sort order",
            )
        if (sort_field, order) == (self.state.sort_field, self.state.sort_order):
            return ActionResult.ok()
        self.state = self.state.with_changes(
            sort_field=sort_field, sort_order=order, page=1
        )
        return await self._fetch()

    async def set_date_filter(self, day: date | None) -> ActionResult:
        """Limit a tour listing to one day; ``None`` removes the filter."""
        if self.kind is not RequestKind.TOUR:
            message = "Date filter is only available for tours"
            return ActionResult.failed(ValidationError(message), message)
        if day == self.state.date_filter:
            return ActionResult.ok()
        self.state = self.state.with_changes(date_filter=day, page=1)
        return await self._fetch()

    async def go_to_page(self, page: int) -> ActionResult:
        target = clamp_page(page, self.state.total_pages)
        if target == self.state.page:
            return ActionResult.ok()
        self.state = self.state.with_changes(page=target)
        return await self._fetch()

    async def first_page(self) -> ActionResult:
        return await self.go_to_page(1)

    async def previous_page(self) -> ActionResult:
        return await self.go_to_page(self.state.page - 1)

    async def next_page(self) -> ActionResult:
        return await self.go_to_page(self.state.page + 1)

    async def last_page(self) -> ActionResult:
        return await self.go_to_page(self.state.total_pages)

    async def refresh(self) -> ActionResult:
        """Re-fetch the current query; also used as the initial load."""
        return await self._fetch()

    async def _apply_search(self, term: str) -> None:
        if term == self.state.debounced_search_term:
            return
        self.state = self.state.with_changes(debounced_search_term=term, page=1)
        await self._fetch()

    async def _fetch(self) -> ActionResult:
        self._issued += 1
        sequence = self._issued
        params = self.state.to_params()
        self.loading = True
        try:
            page = await self.client.list_requests(self.kind, params)
        except PortalError as exc:
            if sequence != self._issued:
                return ActionResult.superseded()
            self.loading = False
            result = ActionResult.failed(exc, "Failed to load requests")
            self.error = result.error
            _logger.warning("Loading %s list failed: %s", self.kind, result.error)
            return result

        if sequence != self._issued:
            _logger.debug(
                "Discarding stale %s list response %s (latest %s)",
                self.kind,
                sequence,
                self._issued,
            )
            return ActionResult.superseded()

        total_pages = max(page.total_pages, 1)
        if page.page > total_pages and page.total_count > 0:
            # The result set shrank under us; land on the new last page.
            self.state = self.state.with_changes(
                page=total_pages, total_pages=total_pages
            )
            return await self._fetch()

        self.loading = False
        self.error = None
        self.cache.replace_all(page.records)
        self.state = self.state.with_changes(
            page=clamp_page(page.page, total_pages),
            total_pages=total_pages,
            total_count=page.total_count,
        )
        return ActionResult.ok()

"""Dashboard statistics for bookings and tours."""

import logging
from dataclasses import dataclass, field

from library_portal.adapters.requests_client import RequestsClient
from library_portal.domain.errors import PortalError
from library_portal.domain.requests import RequestKind, RequestStats

_logger = logging.getLogger(__name__)


@dataclass
class RequestStatsService:
    """Loads status counters; failures keep the last known summary."""

    kind: RequestKind
    client: RequestsClient
    period: str = "month"
    summary: RequestStats = field(default_factory=RequestStats, init=False)

    async def refresh(self, period: str | None = None) -> RequestStats:
        try:
            self.summary = await self.client.get_request_stats(
                self.kind, period or self.period
            )
        except PortalError as exc:
            _logger.warning(
                "Loading %s stats failed: %s", self.kind, exc.message or "no message"
            )
        return self.summary

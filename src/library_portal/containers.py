"""Dependency container wiring for the portal client."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from library_portal.adapters.auth_client import HttpxAuthClient
from library_portal.adapters.portal_http import PortalHttp
from library_portal.adapters.requests_client import HttpxRequestsClient, RequestsClient
from library_portal.adapters.token_storage import FileTokenStorage
from library_portal.app_logging import configure_logging
from library_portal.config import Settings
from library_portal.domain.queries import SortOrder
from library_portal.domain.requests import RequestKind
from library_portal.services.admin_notes import AdminNoteCoordinator
from library_portal.services.auth import AuthService
from library_portal.services.lifecycle import RequestLifecycleEngine
from library_portal.services.list_cache import RequestListCache
from library_portal.services.list_query import ListQueryEngine
from library_portal.services.session_store import SessionStore
from library_portal.services.stats import RequestStatsService


@dataclass
class RequestDesk:
    """Admin tooling for one request kind sharing a single list cache."""

    cache: RequestListCache
    list_engine: ListQueryEngine
    lifecycle: RequestLifecycleEngine
    notes: AdminNoteCoordinator
    stats: RequestStatsService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    session_store: SessionStore
    auth_service: AuthService
    bookings: RequestDesk
    tours: RequestDesk
    close_resources: Callable[[], Awaitable[None]]


def build_request_desk(
    kind: RequestKind,
    client: RequestsClient,
    session_store: SessionStore,
    settings: Settings,
) -> RequestDesk:
    """Wire the list, lifecycle, note and stats services for one kind."""
    cache = RequestListCache()
    page_size = (
        settings.tour_page_size
        if kind is RequestKind.TOUR
        else settings.booking_page_size
    )
    list_engine = ListQueryEngine(
        kind=kind,
        client=client,
        cache=cache,
        page_size=page_size,
        debounce_seconds=settings.search_debounce_seconds,
        min_search_length=settings.min_search_length,
        sort_field=settings.default_sort_field,
        sort_order=SortOrder(settings.default_sort_order),
    )
    lifecycle = RequestLifecycleEngine(
        kind=kind, client=client, cache=cache, session_store=session_store
    )
    stats = RequestStatsService(kind=kind, client=client, period=settings.stats_period)
    notes = AdminNoteCoordinator(
        engine=lifecycle, list_engine=list_engine, stats_service=stats
    )
    return RequestDesk(
        cache=cache,
        list_engine=list_engine,
        lifecycle=lifecycle,
        notes=notes,
        stats=stats,
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    configure_logging(resolved_settings.log_level)
    session_store = SessionStore(FileTokenStorage(resolved_settings.token_path))
    http = PortalHttp.create(
        resolved_settings.api_base_url,
        timeout_seconds=resolved_settings.http_timeout_seconds,
    )
    auth_service = AuthService(client=HttpxAuthClient(http), store=session_store)
    http.token_provider = lambda: session_store.session.token
    http.on_unauthorized = auth_service.expire_session
    requests_client = HttpxRequestsClient(http)

    async def close_resources() -> None:
        await http.close()

    return AppContainer(
        settings=resolved_settings,
        session_store=session_store,
        auth_service=auth_service,
        bookings=build_request_desk(
            RequestKind.BOOKING, requests_client, session_store, resolved_settings
        ),
        tours=build_request_desk(
            RequestKind.TOUR, requests_client, session_store, resolved_settings
        ),
        close_resources=close_resources,
    )

"""Shared test fixtures."""

import asyncio
import math
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta

import pytest

from library_portal.adapters.auth_client import AuthClient, AuthPayload
from library_portal.adapters.requests_client import RequestsClient
from library_portal.adapters.token_storage import TokenStorage
from library_portal.config import Settings
from library_portal.domain.errors import PortalError
from library_portal.domain.queries import ListPage
from library_portal.domain.requests import (
    RequestKind,
    RequestRecord,
    RequestStats,
    RequestStatus,
)
from library_portal.domain.sessions import AuthSucceeded
from library_portal.domain.users import Role, UserProfile
from library_portal.services.lifecycle import RequestLifecycleEngine
from library_portal.services.list_cache import RequestListCache
from library_portal.services.session_store import SessionStore


def make_user(
    user_id: str = "user-1",
    *,
    role: Role = Role.USER,
    verified: bool = True,
    email: str = "sari@example.com",
) -> UserProfile:
    return UserProfile(
        id=user_id,
        name="Sari",
        email=email,
        role=role,
        is_verified=verified,
    )


ADMIN = make_user("admin-1", role=Role.ADMIN, email="admin@example.com")


def make_record(  # noqa: PLR0913
    record_id: str,
    status: RequestStatus = RequestStatus.PENDING,
    *,
    kind: RequestKind = RequestKind.BOOKING,
    owner: str = "user-1",
    activity: str = "Seminar",
    starts_at: datetime | None = None,
) -> RequestRecord:
    key = "groupName" if kind is RequestKind.TOUR else "activityName"
    payload: dict[str, object] = {key: activity}
    return RequestRecord(
        id=record_id,
        kind=kind,
        owner_user_id=owner,
        status=status,
        payload=payload,
        owner_name="Sari",
        starts_at=starts_at,
    )


def future() -> datetime:
    return datetime.now(tz=UTC) + timedelta(days=3)


@dataclass
class InMemoryTokenStorage(TokenStorage):
    """Token storage kept in memory for tests."""

    token: str | None = None
    saves: list[str] = field(default_factory=list)
    clears: int = 0

    def load(self) -> str | None:
        return self.token

    def save(self, token: str) -> None:
        self.token = token
        self.saves.append(token)

    def clear(self) -> None:
        self.token = None
        self.clears += 1


def signed_in_store(
    user: UserProfile, token: str = "token-1"
) -> tuple[SessionStore, InMemoryTokenStorage]:
    storage = InMemoryTokenStorage(token)
    store = SessionStore(storage)
    store.dispatch(AuthSucceeded(user=user, token=token))
    return store, storage


@dataclass
class FakeAuthClient(AuthClient):
    """Auth client returning scripted outcomes and recording calls.

    ``outcomes`` maps a method name to a return value or an exception to
    raise. ``gates`` maps a method name to an event awaited before the call
    answers, which lets tests hold a call in flight.
    """

    outcomes: dict[str, object] = field(default_factory=dict)
    gates: dict[str, asyncio.Event] = field(default_factory=dict)
    calls: list[tuple[str, tuple[object, ...]]] = field(default_factory=list)

    async def _respond(self, name: str, *args: object) -> object:
        self.calls.append((name, args))
        gate = self.gates.get(name)
        if gate is not None:
            await gate.wait()
        outcome = self.outcomes.get(name)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    async def login(self, email: str, password: str) -> AuthPayload:
        result = await self._respond("login", email, password)
        return result or AuthPayload(user=make_user(), token="token-1")

    async def register(self, fields: dict[str, object]) -> AuthPayload:
        result = await self._respond("register", fields)
        return result or AuthPayload(user=make_user(verified=False))

    async def get_current_user(self, token: str) -> UserProfile:
        result = await self._respond("get_current_user", token)
        return result or make_user()

    async def verify_email(self, token: str, email: str) -> AuthPayload:
        result = await self._respond("verify_email", token, email)
        return result or AuthPayload(user=make_user(), token="verified-token")

    async def resend_verification(self, email: str) -> None:
        await self._respond("resend_verification", email)

    async def forgot_password(self, email: str) -> None:
        await self._respond("forgot_password", email)

    async def reset_password(
        self, token: str, email: str, new_password: str
    ) -> AuthPayload:
        result = await self._respond("reset_password", token, email, new_password)
        return result or AuthPayload(user=make_user(), token="reset-token")

    async def change_password(
        self, current_password: str, new_password: str
    ) -> AuthPayload:
        result = await self._respond("change_password", current_password, new_password)
        return result or AuthPayload(user=make_user(), token="rotated-token")

    async def update_profile(self, fields: dict[str, object]) -> UserProfile:
        result = await self._respond("update_profile", fields)
        return result or make_user()

    async def logout(self) -> None:
        await self._respond("logout")


ListHandler = Callable[[dict[str, object]], Awaitable[ListPage]]


@dataclass
class FakeRequestsClient(RequestsClient):
    """In-memory request endpoints with filtering and pagination."""

    records: list[RequestRecord] = field(default_factory=list)
    list_handler: ListHandler | None = None
    failures: dict[str, PortalError] = field(default_factory=dict)
    stats: RequestStats = field(
        default_factory=lambda: RequestStats(total=3, pending=1)
    )
    list_calls: list[dict[str, object]] = field(default_factory=list)
    status_calls: list[tuple[str, RequestStatus, str]] = field(default_factory=list)
    cancel_calls: list[str] = field(default_factory=list)
    delete_calls: list[tuple[str, bool]] = field(default_factory=list)
    stats_calls: list[str] = field(default_factory=list)

    def _maybe_fail(self, name: str) -> None:
        failure = self.failures.get(name)
        if failure is not None:
            raise failure

    async def list_requests(
        self, kind: RequestKind, params: dict[str, object]
    ) -> ListPage:
        self.list_calls.append(dict(params))
        if self.list_handler is not None:
            return await self.list_handler(params)
        self._maybe_fail("list_requests")
        rows = [record for record in self.records if record.kind is kind]
        if "status" in params:
            rows = [record for record in rows if record.status == params["status"]]
        if "search" in params:
            term = str(params["search"]).lower()
            rows = [record for record in rows if term in record.display_name.lower()]
        limit = int(params["limit"])
        pages = max(math.ceil(len(rows) / limit), 1)
        page = int(params["page"])
        start = (page - 1) * limit
        return ListPage(
            records=rows[start : start + limit],
            page=page,
            total_pages=pages,
            total_count=len(rows),
        )

    async def update_request_status(
        self,
        kind: RequestKind,
        request_id: str,
        status: RequestStatus,
        admin_note: str,
    ) -> None:
        self.status_calls.append((request_id, status, admin_note))
        self._maybe_fail("update_request_status")
        self.records = [
            replace(record, status=status, admin_note=admin_note)
            if record.id == request_id
            else record
            for record in self.records
        ]

    async def cancel_request(self, kind: RequestKind, request_id: str) -> None:
        self.cancel_calls.append(request_id)
        self._maybe_fail("cancel_request")

    async def delete_request(
        self, kind: RequestKind, request_id: str, *, as_admin: bool
    ) -> None:
        self.delete_calls.append((request_id, as_admin))
        self._maybe_fail("delete_request")

    async def get_request_stats(self, kind: RequestKind, period: str) -> RequestStats:
        self.stats_calls.append(period)
        self._maybe_fail("get_request_stats")
        return self.stats


def admin_engine(
    records: list[RequestRecord],
    client: FakeRequestsClient | None = None,
    *,
    kind: RequestKind = RequestKind.BOOKING,
) -> tuple[RequestLifecycleEngine, FakeRequestsClient]:
    resolved = client or FakeRequestsClient(records=list(records))
    store, _ = signed_in_store(ADMIN, token="admin-token")
    engine = RequestLifecycleEngine(
        kind=kind,
        client=resolved,
        cache=RequestListCache(list(records)),
        session_store=store,
    )
    return engine, resolved


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        api_base_url="https://portal.test",
        token_path=tmp_path / "session.json",
    )

"""Request lifecycle engine for bookings and tours."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from library_portal.adapters.requests_client import RequestsClient
from library_portal.domain.errors import (
    AuthError,
    InvalidTransition,
    MissingAnnotation,
    PortalError,
    UnknownRequest,
    ValidationError,
)
from library_portal.domain.requests import RequestKind, RequestRecord, RequestStatus
from library_portal.domain.results import ActionResult
from library_portal.services.list_cache import RequestListCache
from library_portal.services.session_store import SessionStore

MAX_ADMIN_NOTE_LENGTH = 500

# Admin decisions. Rejected, completed and cancelled records are terminal.
ADMIN_TRANSITIONS: dict[RequestStatus, frozenset[RequestStatus]] = {
    RequestStatus.PENDING: frozenset({RequestStatus.APPROVED, RequestStatus.REJECTED}),
    RequestStatus.APPROVED: frozenset({RequestStatus.COMPLETED}),
}

CANCELLABLE_STATUSES = frozenset({RequestStatus.PENDING, RequestStatus.APPROVED})

OWNER_DELETABLE_STATUSES: dict[RequestKind, frozenset[RequestStatus]] = {
    RequestKind.BOOKING: frozenset({RequestStatus.CANCELLED, RequestStatus.REJECTED}),
    RequestKind.TOUR: frozenset(
        {RequestStatus.CANCELLED, RequestStatus.REJECTED, RequestStatus.COMPLETED}
    ),
}

_logger = logging.getLogger(__name__)


def allowed_transitions(status: RequestStatus) -> frozenset[RequestStatus]:
    """Return the statuses an admin may move a record to from ``status``."""
    return ADMIN_TRANSITIONS.get(status, frozenset())


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class RequestLifecycleEngine:
    """Validates and commits status changes for one request kind.

    Every precondition is checked against the cached record before a
    gateway call is issued, even when the caller's UI already hid the
    action. Confirmed changes are patched into the shared list cache.
    """

    kind: RequestKind
    client: RequestsClient
    cache: RequestListCache
    session_store: SessionStore
    clock: Callable[[], datetime] = _utcnow

    def allowed_transitions(self, record: RequestRecord) -> frozenset[RequestStatus]:
        return allowed_transitions(record.status)

    def validate_transition(
        self, record_id: str, target_status: RequestStatus | str
    ) -> tuple[RequestRecord, RequestStatus]:
        """Return the record and parsed target, or raise a TransitionError."""
        self._require_admin()
        record = self.cache.get(record_id)
        if record is None:
            raise UnknownRequest("Request not found")
        try:
            target = RequestStatus(target_status)
        except ValueError as exc:
            raise InvalidTransition(f"Unknown status {target_status!r}") from exc
        if target not in allowed_transitions(record.status):
            raise InvalidTransition(
                f"Cannot change a {record.status} request to {target}"
            )
        return record, target

    async def request_transition(
        self, record_id: str, target_status: RequestStatus | str, admin_note: str
    ) -> ActionResult:
        """Move a record to ``target_status`` with a mandatory admin note."""
        try:
            record, target = self.validate_transition(record_id, target_status)
            note = _clean_note(admin_note)
        except PortalError as exc:
            return ActionResult.failed(exc, "Status change rejected")

        try:
            await self.client.update_request_status(self.kind, record.id, target, note)
        except PortalError as exc:
            _logger.info(
                "Status change for %s %s failed: %s", self.kind, record.id, exc.message
            )
            return ActionResult.failed(exc, "Failed to update request status")

        patched = self.cache.patch_status(record.id, target, note)
        _logger.info(
            "%s %s moved %s -> %s", self.kind, record.id, record.status, target
        )
        return ActionResult.ok(record=patched)

    async def cancel_request(self, record_id: str) -> ActionResult:
        """Cancel the signed-in user's own request before it starts."""
        try:
            record = self._owned_record(record_id)
            if record.status not in CANCELLABLE_STATUSES:
                raise InvalidTransition(
                    f"A {record.status} request cannot be cancelled"
                )
            if self._has_started(record):
                raise InvalidTransition("Request has already started")
        except PortalError as exc:
            return ActionResult.failed(exc, "Cancellation rejected")

        try:
            await self.client.cancel_request(self.kind, record.id)
        except PortalError as exc:
            return ActionResult.failed(exc, "Failed to cancel request")

        patched = self.cache.patch_status(record.id, RequestStatus.CANCELLED)
        return ActionResult.ok(record=patched)

    async def delete_request(self, record_id: str, *, confirmed: bool) -> ActionResult:
        """Delete a record permanently after explicit confirmation."""
        try:
            if not confirmed:
                raise ValidationError("Deletion must be confirmed")
            session = self.session_store.session
            as_admin = session.is_authenticated and session.is_admin
            if as_admin:
                record = self.cache.get(record_id)
                if record is None:
                    raise UnknownRequest("Request not found")
            else:
                record = self._owned_record(record_id)
                if record.status not in OWNER_DELETABLE_STATUSES[self.kind]:
                    raise InvalidTransition(
                        f"A {record.status} request cannot be deleted"
                    )
        except PortalError as exc:
            return ActionResult.failed(exc, "Deletion rejected")

        try:
            await self.client.delete_request(self.kind, record.id, as_admin=as_admin)
        except PortalError as exc:
            return ActionResult.failed(exc, "Failed to delete request")

        self.cache.remove(record.id)
        _logger.info("%s %s deleted", self.kind, record.id)
        return ActionResult.ok(record=record)

    def _require_admin(self) -> None:
        session = self.session_store.session
        if not (session.is_authenticated and session.is_admin):
            raise AuthError("Admin access required")

    def _owned_record(self, record_id: str) -> RequestRecord:
        session = self.session_store.session
        if not session.is_authenticated or session.user is None:
            raise AuthError("Not signed in")
        record = self.cache.get(record_id)
        if record is None:
            raise UnknownRequest("Request not found")
        if record.owner_user_id != session.user.id:
            raise AuthError("You can only manage your own requests")
        return record

    def _has_started(self, record: RequestRecord) -> bool:
        starts_at = record.starts_at
        if starts_at is None:
            return False
        now = self.clock()
        if starts_at.tzinfo is None:
            # Naive gateway timestamps are UTC.
            now = now.astimezone(UTC).replace(tzinfo=None)
        return starts_at <= now


def _clean_note(admin_note: str | None) -> str:
    note = (admin_note or "").strip()
    if not note:
        raise MissingAnnotation("An admin note is required")
    if len(note) > MAX_ADMIN_NOTE_LENGTH:
        raise ValidationError(
            f"Admin note must be at most {MAX_ADMIN_NOTE_LENGTH} characters"
        )
    return note
